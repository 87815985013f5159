#!/usr/bin/python3

from pathlib import Path

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from tokenops.cli import precondition_errors
from tokenops.diagnostics import read_state
from tokenops.options import contract_type_option, deployments_dir_option
from tokenops.profiles import get_profile
from tokenops.proxies import get_contract_container
from tokenops.records import RecordStore
from tokenops.types import ChecksumAddress
from tokenops.utils import explorer_base_url


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@contract_type_option
@deployments_dir_option
@click.option(
    "--address",
    help="Proxy address to inspect instead of the recorded one.",
    type=ChecksumAddress(),
    required=False,
)
def cli(network, contract_type, deployments_dir: Path, address):
    """Read-only report of a deployed token or NFT collection."""
    network_name = networks.provider.network.name
    profile = get_profile(contract_type)

    record = None
    if address is None:
        with precondition_errors():
            record = RecordStore(deployments_dir).load(network_name, contract_type)
        address = record.proxy_address

    contract = get_contract_container(profile.upgrade_contract_name).at(address)
    state = read_state(contract, profile)

    click.secho(f"\n{profile.upgrade_contract_name} at {address} on '{network_name}'", fg="green")
    print("\n".join(state.lines(supply_label=profile.supply_function)))
    if record is not None:
        print(f"\tImplementation   : {record.implementation_address}")
        print(f"\tDeployer         : {record.deployer}")
        print(f"\tDeployed at      : {record.deployed_at or '(unknown)'}")
        if record.upgraded_at:
            print(f"\tUpgraded at      : {record.upgraded_at} by {record.upgraded_by}")
        recorded = (record.name, record.symbol)
        if None not in recorded and recorded != (state.name, state.symbol):
            click.secho(
                f"(!) Record lists {record.name} ({record.symbol}); the chain is authoritative.",
                fg="yellow",
            )
    for field, reason in (state.errors or {}).items():
        click.secho(f"(!) {field}() unavailable: {reason}", fg="yellow")

    base_url = explorer_base_url(network_name)
    if base_url:
        print(f"\nExplorer: {base_url}/token/{address}")


if __name__ == "__main__":
    cli()
