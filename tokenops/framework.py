from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Sequence

from eth_typing import ChecksumAddress


class Deployed(NamedTuple):
    """A contract handle at a proxy address plus the block that mined the change."""

    instance: Any
    block_number: int


class ProxyFramework(ABC):
    """
    The contract execution and proxy-upgrade surface the orchestrators rely on.
    """

    @property
    @abstractmethod
    def address(self) -> ChecksumAddress:
        """Address of the account signing transactions."""
        raise NotImplementedError

    @abstractmethod
    def deploy_proxy(
        self, contract_name: str, args: Sequence[Any], initializer: str = "initialize"
    ) -> Deployed:
        raise NotImplementedError

    @abstractmethod
    def upgrade_proxy(self, proxy_address: ChecksumAddress, contract_name: str) -> Deployed:
        raise NotImplementedError

    @abstractmethod
    def at(self, contract_name: str, address: ChecksumAddress) -> Any:
        raise NotImplementedError

    @abstractmethod
    def get_implementation_address(self, proxy_address: ChecksumAddress) -> ChecksumAddress:
        raise NotImplementedError

    @abstractmethod
    def get_admin_address(self, proxy_address: ChecksumAddress) -> ChecksumAddress:
        raise NotImplementedError

    @abstractmethod
    def transact(self, method, *args) -> Any:
        raise NotImplementedError

    @abstractmethod
    def block_height(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def publish(self, address: ChecksumAddress) -> None:
        """Submits source for explorer verification."""
        raise NotImplementedError

