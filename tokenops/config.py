import os
from pathlib import Path
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

from dotenv import load_dotenv

from tokenops.constants import (
    DEFAULT_LOCAL_NETWORKS,
    DEPLOYER_ACCOUNT_ENVVAR,
    DEPLOYER_PASSPHRASE_ENVVAR,
    DOTENV_FILEPATH,
    ETHERSCAN_API_KEY_ENVVAR,
    LEGACY_RPC_URL_ENVVAR,
    LOCAL_NETWORKS_ENVVAR,
    NFT,
    PRIVATE_KEY_ENVVAR,
    RPC_URL_ENVVAR,
    TOKEN,
)
from tokenops.exceptions import MissingConfiguration
from tokenops.utils import _load_yaml

PARAMS_CONSTANTS_KEY = "constants"

TOKEN_DEFAULTS = {
    "TOKEN_NAME": "testToken",
    "TOKEN_SYMBOL": "MTK",
}

NFT_DEFAULTS = {
    "NFT_NAME": "TestNFT",
    "NFT_SYMBOL": "TNFT",
    "NFT_BASE_URI": "",
}


class ContractConfig(NamedTuple):
    """Initial values and upgrade overrides for one contract type."""

    name: str
    symbol: str
    base_uri: str = ""
    name_override: Optional[str] = None
    symbol_override: Optional[str] = None
    base_uri_override: Optional[str] = None


class VariableStatus(NamedTuple):
    name: str
    present: bool
    required: bool
    value: Optional[str] = None  # only for non-secret values


class ReadinessReport(NamedTuple):
    token: ContractConfig
    nft: ContractConfig
    credentials: List[VariableStatus]
    missing: List[str]
    can_deploy: bool
    can_verify: bool


def _get(environ: Mapping[str, str], key: str) -> Optional[str]:
    """Returns a stripped value; empty strings count as unset."""
    value = environ.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_networks(value: Optional[str]) -> Tuple[str, ...]:
    networks = tuple(n.strip() for n in (value or "").split(",") if n.strip())
    return networks or DEFAULT_LOCAL_NETWORKS


class Settings:
    """Resolved configuration. Reading it never fails on missing credentials."""

    def __init__(self, environ: Mapping[str, str]):
        self._environ = dict(environ)

        self.private_key = _get(environ, PRIVATE_KEY_ENVVAR)
        self.rpc_url = _get(environ, RPC_URL_ENVVAR) or _get(environ, LEGACY_RPC_URL_ENVVAR)
        self.etherscan_api_key = _get(environ, ETHERSCAN_API_KEY_ENVVAR)
        self.account_alias = _get(environ, DEPLOYER_ACCOUNT_ENVVAR)
        self.passphrase = _get(environ, DEPLOYER_PASSPHRASE_ENVVAR)
        self.local_networks = _parse_networks(_get(environ, LOCAL_NETWORKS_ENVVAR))

        self.token = ContractConfig(
            name=_get(environ, "TOKEN_NAME") or TOKEN_DEFAULTS["TOKEN_NAME"],
            symbol=_get(environ, "TOKEN_SYMBOL") or TOKEN_DEFAULTS["TOKEN_SYMBOL"],
            name_override=_get(environ, "TOKEN_NAME_V2"),
            symbol_override=_get(environ, "TOKEN_SYMBOL_V2"),
        )
        self.nft = ContractConfig(
            name=_get(environ, "NFT_NAME") or NFT_DEFAULTS["NFT_NAME"],
            symbol=_get(environ, "NFT_SYMBOL") or NFT_DEFAULTS["NFT_SYMBOL"],
            base_uri=_get(environ, "NFT_BASE_URI") or NFT_DEFAULTS["NFT_BASE_URI"],
            name_override=_get(environ, "NFT_NAME_V2"),
            symbol_override=_get(environ, "NFT_SYMBOL_V2"),
            base_uri_override=_get(environ, "NFT_BASE_URI_V2"),
        )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        params_filepath: Optional[Path] = None,
        dotenv_filepath: Optional[Path] = None,
    ) -> "Settings":
        """
        Reads the process environment (after loading the .env file, which never
        overrides variables already set) and layers the optional params file on top.
        """
        if environ is None:
            load_dotenv(dotenv_path=dotenv_filepath or DOTENV_FILEPATH, override=False)
            environ = os.environ
        values: Dict[str, str] = dict(environ)
        if params_filepath:
            values.update(_load_params(params_filepath))
        return cls(values)

    def for_contract_type(self, contract_type: str) -> ContractConfig:
        if contract_type == TOKEN:
            return self.token
        if contract_type == NFT:
            return self.nft
        raise ValueError(f"Unknown contract type '{contract_type}'")

    def missing(self) -> List[str]:
        """Returns every missing required credential, not just the first."""
        missing = list()
        if not (self.private_key or self.account_alias):
            missing.append(PRIVATE_KEY_ENVVAR)
        if not self.rpc_url:
            missing.append(RPC_URL_ENVVAR)
        return missing

    def require(self) -> None:
        missing = self.missing()
        if missing:
            raise MissingConfiguration(missing)


def _load_params(filepath: Path) -> Dict[str, str]:
    config = _load_yaml(filepath) or dict()
    constants = config.get(PARAMS_CONSTANTS_KEY) or dict()
    if not isinstance(constants, dict):
        raise ValueError(
            f"Malformed params file {filepath}: '{PARAMS_CONSTANTS_KEY}' must be a mapping."
        )
    return {str(k): "" if v is None else str(v) for k, v in constants.items()}


def readiness_report(settings: Settings) -> ReadinessReport:
    credentials = [
        VariableStatus(
            name=PRIVATE_KEY_ENVVAR,
            present=bool(settings.private_key or settings.account_alias),
            required=True,
        ),
        VariableStatus(
            name=RPC_URL_ENVVAR,
            present=bool(settings.rpc_url),
            required=True,
            value=settings.rpc_url,
        ),
        VariableStatus(
            name=ETHERSCAN_API_KEY_ENVVAR,
            present=bool(settings.etherscan_api_key),
            required=False,
        ),
    ]
    missing = settings.missing()
    return ReadinessReport(
        token=settings.token,
        nft=settings.nft,
        credentials=credentials,
        missing=missing,
        can_deploy=not missing,
        can_verify=bool(settings.etherscan_api_key),
    )
