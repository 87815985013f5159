from decimal import Decimal
from typing import Any, Dict, List, NamedTuple, Optional

from tokenops.profiles import ContractProfile
from tokenops.results import attempt

UNAVAILABLE = "(unavailable)"


class ContractState(NamedTuple):
    """Read-only snapshot of a contract's view functions; None means the call failed."""

    name: Optional[str] = None
    symbol: Optional[str] = None
    owner: Optional[str] = None
    supply: Optional[int] = None
    decimals: Optional[int] = None
    version: Optional[str] = None
    base_uri: Optional[str] = None
    errors: Optional[Dict[str, str]] = None

    def formatted_supply(self) -> str:
        if self.supply is None:
            return UNAVAILABLE
        if self.decimals is None:
            return str(self.supply)
        return f"{Decimal(self.supply).scaleb(-self.decimals).normalize():f}"

    def lines(self, supply_label: str = "Supply") -> List[str]:
        def show(value: Any) -> str:
            if value is None:
                return UNAVAILABLE
            return str(value) if value != "" else "(empty)"

        lines = [
            f"\tName             : {show(self.name)}",
            f"\tSymbol           : {show(self.symbol)}",
            f"\tOwner            : {show(self.owner)}",
            f"\t{supply_label:<17}: {self.formatted_supply()}",
        ]
        if self.version is not None:
            lines.append(f"\tVersion          : {self.version}")
        if self.base_uri is not None:
            lines.append(f"\tBase URI         : {show(self.base_uri)}")
        return lines


def read_state(
    contract,
    profile: ContractProfile,
    with_version: bool = True,
    with_base_uri: Optional[bool] = None,
) -> ContractState:
    """Reads each view function independently; failed calls are collected in ``errors``."""
    if with_base_uri is None:
        with_base_uri = profile.has_base_uri

    calls = {
        "name": lambda: contract.name(),
        "symbol": lambda: contract.symbol(),
        "owner": lambda: contract.owner(),
        "supply": lambda: int(getattr(contract, profile.supply_function)()),
    }
    if not profile.has_base_uri:
        calls["decimals"] = lambda: int(contract.decimals())
    if with_version:
        calls["version"] = lambda: contract.version()
    if with_base_uri:
        calls["base_uri"] = lambda: contract.baseURI()

    values = dict()
    errors = dict()
    for field, call in calls.items():
        result = attempt(step=field, func=call)
        if result.ok:
            values[field] = result.value
        else:
            errors[field] = result.reason
    return ContractState(errors=errors, **values)


#
# Reference links
#


class ReferenceLinks(NamedTuple):
    explorer_url: str
    proxy_address: str
    implementation_address: str
    deployer_address: str
    name: str
    symbol: str
    version: str
    previous_name: Optional[str] = None
    previous_symbol: Optional[str] = None
    upgrade_tx: Optional[str] = None
    upgrade_block: Optional[int] = None


class ReportSection(NamedTuple):
    title: str
    lines: List[str]


def format_reference_report(links: ReferenceLinks) -> List[ReportSection]:
    """Builds the explorer token-info update guide for an upgraded token."""
    url = links.explorer_url.rstrip("/")
    sections = [
        ReportSection(
            "STEP 1: Login/Register explorer account",
            [f"{url}/login"],
        ),
        ReportSection(
            "STEP 2: Verify address ownership (one-time only)",
            [
                f"{url}/myaccount",
                "Hover username -> 'Verified Address' -> 'Add Address' -> sign with your wallet",
            ],
        ),
        ReportSection(
            "STEP 3: Update token information",
            [
                f"{url}/token/{links.proxy_address}",
                "Click token ticker -> More -> Update Token Info",
            ],
        ),
        ReportSection(
            "Verify on-chain data",
            [
                f"{url}/address/{links.proxy_address}#readProxyContract",
                f"name() should return: {links.name}",
                f"symbol() should return: {links.symbol}",
                f"version() should return: {links.version}",
            ],
        ),
    ]

    form = [
        "Request Type: Existing Token Info Update",
        f"Token Name: {links.name}",
        f"Token Symbol: {links.symbol}",
        f"Contract Address: {links.proxy_address}",
        f"Deployer Address: {links.deployer_address}",
    ]
    if links.previous_name or links.previous_symbol:
        form.append(
            f"Update Reason: token upgraded to {links.version} with updatable name/symbol; "
            f"previous: {links.previous_name} ({links.previous_symbol}), "
            f"updated: {links.name} ({links.symbol})"
        )
    if links.upgrade_tx:
        block = f" (block {links.upgrade_block})" if links.upgrade_block is not None else ""
        form.append(f"Upgrade Transaction: {links.upgrade_tx}{block}")
    sections.append(ReportSection("Information to submit in update form", form))

    useful = [
        f"Token Page     : {url}/token/{links.proxy_address}",
        f"Proxy          : {url}/address/{links.proxy_address}",
        f"Implementation : {url}/address/{links.implementation_address}",
    ]
    if links.upgrade_tx:
        useful.append(f"Upgrade Tx     : {url}/tx/{links.upgrade_tx}")
    sections.append(ReportSection("Useful links", useful))
    return sections
