import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml
from eth_utils import is_same_address

from tokenops.constants import EXPLORER_BASE_URLS


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    timestamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return timestamp.replace("+00:00", "Z")


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return is_same_address(a, b)


def explorer_base_url(network: str) -> Optional[str]:
    return EXPLORER_BASE_URLS.get(network)


def is_local_network(network: str, local_networks) -> bool:
    return network in set(local_networks)
