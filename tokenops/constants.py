from pathlib import Path

import tokenops

#
# Filesystem
#

PROJECT_ROOT = Path(tokenops.__file__).parent.parent
DEPLOYMENTS_DIR = PROJECT_ROOT / "deployments"
DOTENV_FILEPATH = PROJECT_ROOT / ".env"

STANDARD_RECORD_JSON_FORMAT = {"indent": 2}

#
# Contract types
#

TOKEN = "TOKEN"
NFT = "NFT"

SUPPORTED_CONTRACT_TYPES = [TOKEN, NFT]

#
# Networks
#

# Disposable networks where verification is meaningless
DEFAULT_LOCAL_NETWORKS = ("local", "localhost")

EXPLORER_BASE_URLS = {
    "mainnet": "https://etherscan.io",
    "sepolia": "https://sepolia.etherscan.io",
    "holesky": "https://holesky.etherscan.io",
}

#
# Environment
#

PRIVATE_KEY_ENVVAR = "PRIVATE_KEY"
RPC_URL_ENVVAR = "RPC_URL"
LEGACY_RPC_URL_ENVVAR = "SEPOLIA_RPC_URL"
ETHERSCAN_API_KEY_ENVVAR = "ETHERSCAN_API_KEY"
DEPLOYER_ACCOUNT_ENVVAR = "DEPLOYER_ACCOUNT"
DEPLOYER_PASSPHRASE_ENVVAR = "DEPLOYER_PASSPHRASE"
LOCAL_NETWORKS_ENVVAR = "LOCAL_NETWORKS"

# ape keystore alias used when the signing key comes from PRIVATE_KEY
IMPORTED_ACCOUNT_ALIAS = "tokenops-deployer"

#
# Proxies
#

# EIP1967 Implementation slot - https://eips.ethereum.org/EIPS/eip-1967#logic-contract-address
EIP1967_IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC

# EIP1967 Admin slot - https://eips.ethereum.org/EIPS/eip-1967#admin-address
EIP1967_ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "5.0.0"

#
# Confirmations
#

VERIFICATION_CONFIRMATIONS = 5
CONFIRMATION_POLL_INTERVAL = 3  # seconds
CONFIRMATION_TIMEOUT = 10 * 60  # seconds

#
# Explorer / initializer responses
#

ALREADY_VERIFIED_MARKERS = ("already verified",)
ALREADY_INITIALIZED_MARKERS = ("already initialized", "invalidinitialization")
