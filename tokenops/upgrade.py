from collections import OrderedDict
from pathlib import Path
from typing import Callable, Dict, NamedTuple, Optional

import click

from tokenops.config import ContractConfig
from tokenops.constants import ALREADY_INITIALIZED_MARKERS
from tokenops.diagnostics import ContractState, read_state
from tokenops.exceptions import NotOwner
from tokenops.framework import ProxyFramework
from tokenops.profiles import ContractProfile
from tokenops.records import DeploymentRecord, RecordStore
from tokenops.results import StepResult, attempt, echo_result
from tokenops.utils import same_address, utc_timestamp
from tokenops.verify import Verifier

METADATA_UPDATE_ACTION = "update name/symbol"
NOT_RECORDED = "(not recorded)"


class UpgradeOverrides(NamedTuple):
    """New metadata for the upgraded contract; None keeps the recorded value."""

    name: Optional[str] = None
    symbol: Optional[str] = None
    base_uri: Optional[str] = None

    @classmethod
    def from_config(cls, config: ContractConfig) -> "UpgradeOverrides":
        return cls(
            name=config.name_override,
            symbol=config.symbol_override,
            base_uri=config.base_uri_override,
        )


class UpgradeReport(NamedTuple):
    record: DeploymentRecord
    previous_record: DeploymentRecord
    filepath: Path
    before: ContractState
    after: ContractState
    post_upgrade_init: Optional[StepResult]
    metadata_update: Optional[StepResult]
    base_uri_update: Optional[StepResult]
    verification: Dict[str, StepResult]


def _first_known(*values: Optional[str]) -> Optional[str]:
    return next((value for value in values if value is not None), None)


def _changes(target: Optional[str], current: Optional[str]) -> bool:
    return target is not None and target != current


def _describe_change(label: str, current: Optional[str], new: Optional[str]) -> None:
    print(f"\tCurrent {label:<9}: {current}")
    print(f"\tNew {label:<13}: {new}")
    if new != current:
        click.secho("\t  -> will be updated", fg="cyan")
    else:
        print("\t  -> no change")


class UpgradeOrchestrator:
    """
    Points an existing proxy at a new implementation and brings the record up to date.

    Fatal: a missing record, the upgrade primitive failing, and the owner pre-check
    for a planned name/symbol change. Every post-upgrade call is best-effort.
    """

    def __init__(
        self,
        framework: ProxyFramework,
        store: RecordStore,
        profile: ContractProfile,
        verifier: Optional[Verifier] = None,
        clock: Callable[[], str] = utc_timestamp,
    ):
        self.framework = framework
        self.store = store
        self.profile = profile
        self.verifier = verifier
        self.clock = clock

    def _check_owner(self, owner: Optional[str]) -> None:
        if owner is None:
            return  # unknown; the contract enforces ownership itself
        caller = self.framework.address
        if not same_address(owner, caller):
            raise NotOwner(owner=owner, caller=caller, action=METADATA_UPDATE_ACTION)

    def run(self, network: str, overrides: UpgradeOverrides) -> UpgradeReport:
        profile = self.profile
        record = self.store.load(network, profile.contract_type)
        proxy_address = record.proxy_address
        caller = self.framework.address

        print(f"\nUpgrading {profile.contract_name} proxy with account {caller}")
        print(f"\tRecord           : {self.store.filepath(network, profile.contract_type)}")
        print(f"\tProxy            : {proxy_address}")
        print(f"\tImplementation   : {record.implementation_address}")
        print(f"\tCurrent version  : {record.current_version}")

        # the previous interface may not be readable anymore; never block on it
        current = self.framework.at(profile.contract_name, proxy_address)
        before = read_state(current, profile, with_version=False, with_base_uri=False)
        print(f"\nCurrent {profile.contract_name} on-chain state")
        print("\n".join(before.lines(supply_label=profile.supply_function)))
        if before.errors:
            click.secho(
                f"(!) Could not fetch {', '.join(before.errors)}; continuing with upgrade.",
                fg="yellow",
            )

        target_name = _first_known(overrides.name, record.name, before.name)
        target_symbol = _first_known(overrides.symbol, record.symbol, before.symbol)
        print("\nMetadata update")
        _describe_change("name", record.name or NOT_RECORDED, target_name)
        _describe_change("symbol", record.symbol or NOT_RECORDED, target_symbol)
        new_base_uri = overrides.base_uri if profile.has_base_uri else None
        if new_base_uri:
            _describe_change("base URI", record.current_base_uri or "(empty)", new_base_uri)

        current_name = _first_known(before.name, record.name)
        current_symbol = _first_known(before.symbol, record.symbol)
        if _changes(target_name, current_name) or _changes(target_symbol, current_symbol):
            # reject before any transaction is sent
            self._check_owner(before.owner)

        print(f"\nUpgrading proxy to {profile.upgrade_contract_name}")
        upgraded = self.framework.upgrade_proxy(proxy_address, profile.upgrade_contract_name)
        contract = upgraded.instance
        if not same_address(contract.address, proxy_address):
            raise RuntimeError(
                f"Upgrade returned {contract.address} instead of proxy {proxy_address}."
            )
        implementation_address = self.framework.get_implementation_address(proxy_address)
        click.secho("(i) Proxy upgraded successfully", fg="green")
        print(f"\tProxy (unchanged): {proxy_address}")
        print(f"\tImplementation   : {implementation_address}")

        post_upgrade_init = None
        if profile.post_upgrade_initializer:
            initializer = profile.post_upgrade_initializer
            print(f"\nInitializing {profile.upgrade_contract_name} storage")
            post_upgrade_init = attempt(
                step=initializer,
                func=lambda: self.framework.transact(getattr(contract, initializer)),
                already_done_markers=ALREADY_INITIALIZED_MARKERS,
            )
            echo_result(
                post_upgrade_init,
                success=f"{initializer}() completed",
                already_done="Storage already initialized",
            )

        metadata_update = None
        name_now = attempt("name", lambda: contract.name())
        symbol_now = attempt("symbol", lambda: contract.symbol())
        if name_now.ok:
            current_name = name_now.value
        if symbol_now.ok:
            current_symbol = symbol_now.value
        # a value that is neither overridden nor recorded keeps the on-chain one
        target_name = _first_known(target_name, current_name)
        target_symbol = _first_known(target_symbol, current_symbol)
        if None in (target_name, target_symbol):
            click.secho("(!) Current name/symbol unknown; skipping metadata update", fg="yellow")
        elif (target_name, target_symbol) != (current_name, current_symbol):
            print(f"\nUpdating name and symbol to '{target_name}' ({target_symbol})")
            owner = attempt("owner", lambda: contract.owner())
            try:
                self._check_owner(owner.value if owner.ok else None)
            except NotOwner:
                filepath = self.store.save(
                    network,
                    profile.contract_type,
                    record.updated(
                        implementation_address=implementation_address,
                        upgraded_at=self.clock(),
                        upgraded_by=caller,
                    ),
                )
                click.secho(
                    f"(!) Proxy already upgraded; only the implementation address "
                    f"was recorded in {filepath}",
                    fg="yellow",
                )
                raise
            method_name = profile.metadata_update_function
            metadata_update = attempt(
                step=method_name,
                func=lambda: self.framework.transact(
                    getattr(contract, method_name), target_name, target_symbol
                ),
            )
            echo_result(metadata_update, success="Name and symbol updated")
        else:
            print("\n(i) No name/symbol changes needed")

        base_uri_update = None
        if new_base_uri:
            print("\nUpdating base URI")
            base_uri_update = attempt(
                step="setBaseURI",
                func=lambda: self.framework.transact(contract.setBaseURI, new_base_uri),
            )
            echo_result(base_uri_update, success=f"Base URI updated to {new_base_uri}")

        after = read_state(contract, profile)
        print(f"\n{profile.upgrade_contract_name} on-chain state")
        print("\n".join(after.lines(supply_label=profile.supply_function)))
        version = after.version
        if version is None:
            click.secho("(!) version() not available", fg="yellow")
            version = profile.upgrade_version

        base_uri = record.base_uri
        if profile.has_base_uri:
            if after.base_uri is not None:
                base_uri = after.base_uri
            elif base_uri_update is not None and base_uri_update.ok:
                base_uri = new_base_uri

        updated_record = record.updated(
            implementation_address=implementation_address,
            name=after.name if after.name is not None else current_name,
            symbol=after.symbol if after.symbol is not None else current_symbol,
            base_uri=base_uri,
            version=version,
            upgraded_at=self.clock(),
            upgraded_by=caller,
        )
        filepath = self.store.save(network, profile.contract_type, updated_record)
        print(f"\n(i) Deployment record updated at {filepath}")

        verification = dict()
        if self.verifier is not None:
            verification = self.verifier.verify(
                network=network,
                contracts=OrderedDict(
                    [("Implementation", implementation_address), ("Proxy", proxy_address)]
                ),
                since_block=upgraded.block_number,
            )

        click.secho(
            f"\n(i) Upgraded to {profile.upgrade_contract_name}: "
            f"{updated_record.name} ({updated_record.symbol})",
            fg="green",
        )
        return UpgradeReport(
            record=updated_record,
            previous_record=record,
            filepath=filepath,
            before=before,
            after=after,
            post_upgrade_init=post_upgrade_init,
            metadata_update=metadata_update,
            base_uri_update=base_uri_update,
            verification=verification,
        )
