import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

from eth_typing import ChecksumAddress

from tokenops.constants import DEPLOYMENTS_DIR, STANDARD_RECORD_JSON_FORMAT
from tokenops.exceptions import RecordNotFound
from tokenops.profiles import get_profile
from tokenops.utils import _load_json, same_address

DEFAULT_VERSION = "1.0.0"
RECORD_FILE_MODE = 0o644

# record field -> JSON key; name/symbol keys depend on the contract type
_FIELD_KEYS = (
    ("network", "network"),
    ("contract_type", "contractType"),
    ("proxy_address", "proxyAddress"),
    ("implementation_address", "implementationAddress"),
    ("admin_address", "adminAddress"),
    ("deployer", "deployer"),
    ("name", None),
    ("symbol", None),
    ("base_uri", "baseURI"),
    ("deployed_at", "deployedAt"),
    ("version", "version"),
    ("upgraded_at", "upgradedAt"),
    ("upgraded_by", "upgradedBy"),
)


class DeploymentRecord(NamedTuple):
    """
    Best-effort snapshot of a proxied deployment on one network.

    Name, symbol, base URI and version mirror on-chain state at the last sync;
    the chain remains authoritative. Only the proxy address is fixed for life.
    """

    network: str
    contract_type: str
    proxy_address: ChecksumAddress
    implementation_address: ChecksumAddress
    deployer: str
    deployed_at: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    admin_address: Optional[ChecksumAddress] = None
    base_uri: Optional[str] = None
    version: Optional[str] = None
    upgraded_at: Optional[str] = None
    upgraded_by: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None

    @property
    def current_version(self) -> str:
        return self.version or DEFAULT_VERSION

    @property
    def current_base_uri(self) -> str:
        return self.base_uri or ""

    @property
    def last_actor(self) -> str:
        return self.upgraded_by or self.deployer

    def updated(self, **changes) -> "DeploymentRecord":
        """Returns a copy with the given fields replaced; the proxy address is immutable."""
        new_proxy = changes.get("proxy_address")
        if new_proxy is not None and not same_address(new_proxy, self.proxy_address):
            raise ValueError(
                f"Proxy address is immutable ({self.proxy_address} -> {new_proxy})."
            )
        return self._replace(**changes)

    def to_json(self) -> Dict[str, Any]:
        profile = get_profile(self.contract_type)
        data = dict()
        for field, key in _FIELD_KEYS:
            if field == "name":
                key = profile.name_key
            elif field == "symbol":
                key = profile.symbol_key
            value = getattr(self, field)
            if value is None:
                continue
            data[key] = value
        for key, value in (self.extra or {}).items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "DeploymentRecord":
        try:
            profile = get_profile(data["contractType"])
        except KeyError:
            raise ValueError("Malformed deployment record: missing 'contractType'.")
        known = set()
        values = dict()
        for field, key in _FIELD_KEYS:
            if field == "name":
                key = profile.name_key
            elif field == "symbol":
                key = profile.symbol_key
            known.add(key)
            if key in data:
                values[field] = data[key]
        required = ("network", "proxy_address", "implementation_address", "deployer")
        absent = [f for f in required if f not in values]
        if absent:
            raise ValueError(f"Malformed deployment record: missing {', '.join(absent)}.")
        values.setdefault("deployed_at", "")
        values["extra"] = {k: v for k, v in data.items() if k not in known}
        return cls(**values)


class RecordStore:
    """One JSON file per network and contract type in a fixed directory."""

    def __init__(self, directory: Path = DEPLOYMENTS_DIR):
        self.directory = Path(directory)

    def filepath(self, network: str, contract_type: str) -> Path:
        profile = get_profile(contract_type)
        return self.directory / profile.record_filename(network)

    def exists(self, network: str, contract_type: str) -> bool:
        return self.filepath(network, contract_type).exists()

    def load(self, network: str, contract_type: str) -> DeploymentRecord:
        filepath = self.filepath(network, contract_type)
        if not filepath.exists():
            raise RecordNotFound(network=network, contract_type=contract_type, filepath=filepath)
        return DeploymentRecord.from_json(_load_json(filepath))

    def save(self, network: str, contract_type: str, record: DeploymentRecord) -> Path:
        """Overwrites the record file atomically (temp file + rename)."""
        if record.network != network or record.contract_type != contract_type:
            raise ValueError(
                f"Record for {record.contract_type}/{record.network} cannot be saved "
                f"as {contract_type}/{network}."
            )
        filepath = self.filepath(network, contract_type)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as file:
                json.dump(record.to_json(), file, **STANDARD_RECORD_JSON_FORMAT)
                file.write("\n")
                file.flush()
                os.fsync(file.fileno())
            os.chmod(temp_path, RECORD_FILE_MODE)
            os.replace(temp_path, filepath)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
        return filepath
