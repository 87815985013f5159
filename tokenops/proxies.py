import typing
from typing import Any, List, Sequence, Tuple

from ape import accounts, chain, networks, project
from ape.api import AccountAPI, ReceiptAPI
from ape.contracts import ContractContainer, ContractInstance
from ape.contracts.base import ContractTransactionHandler
from ape.utils import EMPTY_BYTES32
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from hexbytes import HexBytes
from web3.auto import w3

from tokenops.config import Settings
from tokenops.confirm import _continue
from tokenops.constants import (
    DEPLOYER_PASSPHRASE_ENVVAR,
    EIP1967_ADMIN_SLOT,
    EIP1967_IMPLEMENTATION_SLOT,
    ETHERSCAN_API_KEY_ENVVAR,
    IMPORTED_ACCOUNT_ALIAS,
    OZ_DEPENDENCY_NAME,
    OZ_DEPENDENCY_VERSION,
)
from tokenops.exceptions import MissingConfiguration
from tokenops.framework import Deployed, ProxyFramework
from tokenops.utils import is_local_network
from tokenops.verify import Verifier


def _get_dependency_contract_container(contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in project.dependencies.items():
        if len(dependency_versions) > 1:
            raise ValueError(f"Ambiguous {dependency_name} dependency for {contract}")
        try:
            dependency_api = list(dependency_versions.values())[0]
            contract_container = getattr(dependency_api, contract)
            return contract_container
        except AttributeError:
            continue
    raise ValueError(f"No contract found with name '{contract}'.")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies
        contract_container = _get_dependency_contract_container(contract)

    return contract_container


def _oz_dependency():
    return project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _address_from_slot(proxy_address: ChecksumAddress, slot: int, label: str) -> ChecksumAddress:
    value = HexBytes(chain.provider.get_storage_at(address=proxy_address, slot=slot))
    if value == EMPTY_BYTES32:
        raise ValueError(
            f"{label} slot for contract at {proxy_address} is empty. "
            "Are you sure this is an EIP1967-compatible proxy?"
        )
    return to_checksum_address(value[-20:])


class ApeProxyFramework(ProxyFramework):
    """
    Drives OpenZeppelin transparent proxies through an ape account,
    with annotated (and optionally confirmed) transaction execution.
    """

    def __init__(self, account: AccountAPI, autosign: bool = False):
        self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign

    @property
    def account(self) -> AccountAPI:
        return self._account

    @property
    def address(self) -> ChecksumAddress:
        return self._account.address

    def _deploy(self, container: ContractContainer, *args) -> ContractInstance:
        contract_name = container.contract_type.name
        print(f"\nDeploying {contract_name}...")
        if not self._autosign:
            _continue()
        return self._account.deploy(container, *args)

    def deploy_proxy(
        self, contract_name: str, args: Sequence[Any], initializer: str = "initialize"
    ) -> Deployed:
        container = get_contract_container(contract_name)
        implementation = self._deploy(container)

        data = getattr(implementation, initializer).encode_input(*args)
        proxy_container = _oz_dependency().TransparentUpgradeableProxy
        # the proxy deploys its own ProxyAdmin owned by initialOwner
        proxy = self._deploy(proxy_container, implementation.address, self.address, data)
        print(
            f"\nWrapping {contract_name} into {proxy.contract_type.name} at {proxy.address}."
        )
        return Deployed(
            instance=container.at(proxy.address), block_number=proxy.receipt.block_number
        )

    def upgrade_proxy(self, proxy_address: ChecksumAddress, contract_name: str) -> Deployed:
        container = get_contract_container(contract_name)
        implementation = self._deploy(container)

        admin_address = self.get_admin_address(proxy_address)
        proxy_admin = _oz_dependency().ProxyAdmin.at(admin_address)
        receipt = self.transact(
            proxy_admin.upgradeAndCall, proxy_address, implementation.address, b""
        )
        return Deployed(instance=container.at(proxy_address), block_number=receipt.block_number)

    def at(self, contract_name: str, address: ChecksumAddress) -> ContractInstance:
        return get_contract_container(contract_name).at(address)

    def get_implementation_address(self, proxy_address: ChecksumAddress) -> ChecksumAddress:
        return _address_from_slot(proxy_address, EIP1967_IMPLEMENTATION_SLOT, "Implementation")

    def get_admin_address(self, proxy_address: ChecksumAddress) -> ChecksumAddress:
        return _address_from_slot(proxy_address, EIP1967_ADMIN_SLOT, "Admin")

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        receipt = method(*args, sender=self._account)
        print(f"\tTransaction hash: {receipt.txn_hash} (block {receipt.block_number})")
        return receipt

    def block_height(self) -> int:
        return chain.blocks.height

    def publish(self, address: ChecksumAddress) -> None:
        explorer = networks.provider.network.explorer
        if explorer is None:
            raise ValueError(
                f"No explorer plugin available for network {networks.provider.network.name}."
            )
        explorer.publish_contract(address)


def check_etherscan_plugin(settings: Settings, network: str) -> bool:
    """
    Checks that the ape-etherscan plugin is installed and that
    the API key is set; returns False when verification cannot run.
    """
    if is_local_network(network, settings.local_networks):
        # unnecessary for local deployment
        return False
    try:
        import ape_etherscan  # noqa: F401
    except ImportError:
        print("(!) Please install the ape-etherscan plugin to verify contracts.")
        return False
    if not settings.etherscan_api_key:
        print(f"(!) {ETHERSCAN_API_KEY_ENVVAR} is not set; contracts won't be verified.")
        return False
    return True


def get_account(settings: Settings, network: str) -> AccountAPI:
    """
    Resolves the signing account: the first test account on local networks,
    otherwise a named ape account or the PRIVATE_KEY imported into the keystore.
    """
    if is_local_network(network, settings.local_networks):
        return accounts.test_accounts[0]

    settings.require()
    alias = settings.account_alias
    if alias is None:
        alias = IMPORTED_ACCOUNT_ALIAS
        if alias not in accounts.aliases:
            if not settings.passphrase:
                raise MissingConfiguration([DEPLOYER_PASSPHRASE_ENVVAR])
            from ape_accounts import import_account_from_private_key

            import_account_from_private_key(alias, settings.passphrase, settings.private_key)
            print(f"(i) Imported signing key into ape keystore as '{alias}'.")

    account = accounts.load(alias)
    if settings.passphrase:
        account.set_autosign(True, passphrase=settings.passphrase)
    return account


def connect(
    settings: Settings, network: str, autosign: bool = False, verify: bool = True
) -> Tuple[ApeProxyFramework, Verifier]:
    """Builds the framework adapter and verifier for the connected network."""
    account = get_account(settings, network)
    local = is_local_network(network, settings.local_networks)
    framework = ApeProxyFramework(account=account, autosign=autosign or local)
    verify = verify and check_etherscan_plugin(settings, network)
    verifier = Verifier(framework, local_networks=settings.local_networks, enabled=verify)
    print(
        f"Account: {account.address}",
        f"Balance: {account.balance}",
        f"Ecosystem: {networks.provider.network.ecosystem.name}",
        f"Network: {network}",
        f"Chain ID: {networks.provider.network.chain_id}",
        f"Verify: {verify}",
        sep="\n",
    )
    return framework, verifier
