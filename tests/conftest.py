from typing import Any, Dict, List, Sequence, Tuple

import pytest

from tokenops.config import ContractConfig
from tokenops.confirmations import ConfirmationTracker
from tokenops.framework import Deployed, ProxyFramework
from tokenops.profiles import NFT_PROFILE, TOKEN_PROFILE
from tokenops.records import RecordStore
from tokenops.verify import Verifier

# Common constants
DEPLOYER = "0x" + "1" * 40
STRANGER = "0x" + "2" * 40
ALICE = "0x" + "3" * 40
BOB = "0x" + "4" * 40

LIVE_NETWORK = "sepolia"
LOCAL_NETWORK = "local"

TOKEN_SUPPLY = 1_000_000 * 10**18
FIXED_TIMESTAMP = "2024-05-01T12:00:00.000Z"


class ContractRevert(Exception):
    pass


#
# Contracts
#


class FakeContract:
    """A view of proxy storage through one implementation's interface."""

    def __init__(self, address: str, storage: Dict[str, Any], broken: Sequence[str] = ()):
        self.address = address
        self.storage = storage
        self.broken = set(broken)

    def _read(self, field: str):
        if field in self.broken:
            raise ContractRevert(f"{field}() reverted")
        return self.storage[field]

    def _emit(self, event: str, *args) -> None:
        self.storage.setdefault("events", list()).append((event, args))

    def _only_owner(self, sender: str) -> None:
        if sender.lower() != self.storage["owner"].lower():
            raise ContractRevert(f"OwnableUnauthorizedAccount({sender})")

    def name(self):
        return self._read("name")

    def symbol(self):
        return self._read("symbol")

    def owner(self):
        return self._read("owner")


class FakeToken(FakeContract):
    @staticmethod
    def initialize(storage, name, symbol, recipient, initial_owner):
        storage.update(
            name=name,
            symbol=symbol,
            owner=initial_owner,
            balances={recipient: TOKEN_SUPPLY},
            supply=TOKEN_SUPPLY,
        )

    def totalSupply(self):
        return self.storage["supply"]

    def decimals(self):
        return 18

    def balanceOf(self, account):
        return self.storage["balances"].get(account, 0)


class FakeTokenV2(FakeToken):
    def version(self):
        return "2.0.0"

    def updateTokenInfo(self, name, symbol, sender):
        self._only_owner(sender)
        if not name:
            raise ContractRevert("Name cannot be empty")
        if not symbol:
            raise ContractRevert("Symbol cannot be empty")
        self.storage.update(name=name, symbol=symbol)
        self._emit("NameUpdated", name)
        self._emit("SymbolUpdated", symbol)


class FakeNft(FakeContract):
    @staticmethod
    def initialize(storage, name, symbol, base_uri, initial_owner):
        storage.update(
            name=name,
            symbol=symbol,
            base_uri=base_uri,
            owner=initial_owner,
            owners=dict(),
            token_uris=dict(),
        )

    def totalMinted(self):
        return len(self.storage["owners"])

    def ownerOf(self, token_id):
        try:
            return self.storage["owners"][token_id]
        except KeyError:
            raise ContractRevert(f"ERC721NonexistentToken({token_id})")

    def safeMint(self, to, sender):
        self._only_owner(sender)
        token_id = self.totalMinted()
        self.storage["owners"][token_id] = to
        return token_id


class FakeNftV2(FakeNft):
    def version(self):
        return "2.0.0"

    def initializeV2(self, sender):
        if self.storage.get("v2_initialized"):
            raise ContractRevert("InvalidInitialization()")
        self.storage["v2_initialized"] = True

    def updateCollectionInfo(self, name, symbol, sender):
        self._only_owner(sender)
        if not name:
            raise ContractRevert("Name cannot be empty")
        if not symbol:
            raise ContractRevert("Symbol cannot be empty")
        self.storage.update(name=name, symbol=symbol)
        self._emit("NameUpdated", name)
        self._emit("SymbolUpdated", symbol)

    def batchMint(self, to, quantity, sender):
        self._only_owner(sender)
        for _ in range(quantity):
            self.safeMint(to, sender=sender)

    def baseURI(self):
        return self.storage["base_uri"]

    def setBaseURI(self, base_uri, sender):
        self._only_owner(sender)
        self.storage["base_uri"] = base_uri

    def setTokenURI(self, token_id, uri, sender):
        self._only_owner(sender)
        self.ownerOf(token_id)
        self.storage["token_uris"][token_id] = uri

    def tokenURI(self, token_id):
        self.ownerOf(token_id)
        return self.storage["token_uris"].get(token_id) or f"{self.baseURI()}{token_id}"


CONTRACTS = {
    "TestToken": FakeToken,
    "TestTokenV2": FakeTokenV2,
    "TestNft": FakeNft,
    "TestNftV2": FakeNftV2,
}


#
# Framework
#


class FakeFramework(ProxyFramework):
    """In-memory transparent proxies; every transaction mines a block."""

    def __init__(self, address: str = DEPLOYER, height: int = 100):
        self.sender = address
        self.height = height
        self.proxies: Dict[str, Dict[str, Any]] = dict()
        self.calls: List[Tuple[str, tuple]] = list()
        self.published: List[str] = list()
        self.publish_errors: Dict[str, str] = dict()
        self.fail_admin_read = False
        self.reverts: Dict[str, str] = dict()  # method name -> revert reason
        self.broken_views: Dict[str, Sequence[str]] = dict()  # contract name -> view names
        self._nonce = 0

    def _new_address(self) -> str:
        self._nonce += 1
        return "0x" + f"{self._nonce:040d}"

    def _mine(self) -> int:
        self.height += 1
        return self.height

    def count(self, method_name: str) -> int:
        return sum(1 for name, _ in self.calls if name == method_name)

    @property
    def address(self) -> str:
        return self.sender

    def deploy_proxy(
        self, contract_name: str, args: Sequence[Any], initializer: str = "initialize"
    ) -> Deployed:
        proxy = self._new_address()
        storage = dict()
        getattr(CONTRACTS[contract_name], initializer)(storage, *args)
        self.proxies[proxy] = {
            "implementation": self._new_address(),
            "admin": self._new_address(),
            "storage": storage,
        }
        self.calls.append(("deployProxy", (contract_name, *args)))
        return Deployed(instance=self.at(contract_name, proxy), block_number=self._mine())

    def upgrade_proxy(self, proxy_address: str, contract_name: str) -> Deployed:
        implementation = self._new_address()
        self.calls.append(("upgradeAndCall", (proxy_address, implementation, b"")))
        self.proxies[proxy_address]["implementation"] = implementation
        return Deployed(
            instance=self.at(contract_name, proxy_address), block_number=self._mine()
        )

    def at(self, contract_name: str, address: str) -> FakeContract:
        storage = self.proxies[address]["storage"]
        return CONTRACTS[contract_name](address, storage, self.broken_views.get(contract_name, ()))

    def get_implementation_address(self, proxy_address: str) -> str:
        return self.proxies[proxy_address]["implementation"]

    def get_admin_address(self, proxy_address: str) -> str:
        if self.fail_admin_read:
            raise ValueError("Admin slot is empty")
        return self.proxies[proxy_address]["admin"]

    def transact(self, method, *args) -> Any:
        self.calls.append((method.__name__, args))
        if method.__name__ in self.reverts:
            raise ContractRevert(self.reverts[method.__name__])
        result = method(*args, sender=self.sender)
        self._mine()
        return result

    def block_height(self) -> int:
        # the chain keeps moving while we poll
        return self._mine()

    def publish(self, address: str) -> None:
        self.published.append(address)
        if address in self.publish_errors:
            raise Exception(self.publish_errors[address])


# Fixtures
@pytest.fixture()
def framework():
    return FakeFramework()


@pytest.fixture()
def store(tmp_path):
    return RecordStore(tmp_path / "deployments")


@pytest.fixture()
def tracker(framework):
    return ConfirmationTracker(
        get_height=framework.block_height, poll_interval=0, timeout=60, sleep=lambda _: None
    )


@pytest.fixture()
def verifier(framework, tracker):
    return Verifier(framework, local_networks=(LOCAL_NETWORK,), confirmations=2, tracker=tracker)


@pytest.fixture()
def clock():
    return lambda: FIXED_TIMESTAMP


@pytest.fixture()
def token_config():
    return ContractConfig(name="testToken", symbol="MTK")


@pytest.fixture()
def nft_config():
    return ContractConfig(name="TestNFT", symbol="TNFT", base_uri="https://api.example.com/")


@pytest.fixture()
def token_profile():
    return TOKEN_PROFILE


@pytest.fixture()
def nft_profile():
    return NFT_PROFILE
