from typing import Dict, NamedTuple, Optional

from tokenops.constants import NFT, TOKEN


class ContractProfile(NamedTuple):
    """Describes how the scripts drive one logical contract type."""

    contract_type: str
    contract_name: str  # initial implementation
    upgrade_contract_name: str  # implementation installed on upgrade
    name_key: str  # deployment record keys
    symbol_key: str
    supply_function: str
    metadata_update_function: str
    post_upgrade_initializer: Optional[str] = None
    has_base_uri: bool = False
    smoke_mint: bool = False
    initial_version: str = "1.0.0"
    upgrade_version: str = "2.0.0"
    record_prefix: str = ""

    def record_filename(self, network: str) -> str:
        return f"{self.record_prefix}{network}.json"

    def initializer_args(self, name: str, symbol: str, owner: str, base_uri: str = "") -> list:
        if self.has_base_uri:
            # initialize(name, symbol, baseURI, initialOwner)
            return [name, symbol, base_uri, owner]
        # initialize(name, symbol, recipient, initialOwner)
        return [name, symbol, owner, owner]


TOKEN_PROFILE = ContractProfile(
    contract_type=TOKEN,
    contract_name="TestToken",
    upgrade_contract_name="TestTokenV2",
    name_key="tokenName",
    symbol_key="tokenSymbol",
    supply_function="totalSupply",
    metadata_update_function="updateTokenInfo",
)

NFT_PROFILE = ContractProfile(
    contract_type=NFT,
    contract_name="TestNft",
    upgrade_contract_name="TestNftV2",
    name_key="nftName",
    symbol_key="nftSymbol",
    supply_function="totalMinted",
    metadata_update_function="updateCollectionInfo",
    post_upgrade_initializer="initializeV2",
    has_base_uri=True,
    smoke_mint=True,
    record_prefix="nft-",
)

PROFILES: Dict[str, ContractProfile] = {
    TOKEN: TOKEN_PROFILE,
    NFT: NFT_PROFILE,
}


def get_profile(contract_type: str) -> ContractProfile:
    try:
        return PROFILES[contract_type]
    except KeyError:
        raise ValueError(f"Unknown contract type '{contract_type}'")
