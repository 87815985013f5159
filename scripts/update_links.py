#!/usr/bin/python3

from pathlib import Path

import click

from tokenops.cli import precondition_errors
from tokenops.constants import TOKEN
from tokenops.diagnostics import UNAVAILABLE, ReferenceLinks, format_reference_report
from tokenops.options import deployments_dir_option
from tokenops.records import RecordStore
from tokenops.utils import explorer_base_url


@click.command(name="update-links")
@click.option("--network", "-n", help="Network name of the record.", required=True)
@deployments_dir_option
@click.option("--explorer-url", help="Explorer base URL (defaults to the network's).")
@click.option("--previous-name", help="Token name before the upgrade.")
@click.option("--previous-symbol", help="Token symbol before the upgrade.")
@click.option("--upgrade-tx", help="Hash of the upgrade transaction.")
@click.option("--upgrade-block", type=int, help="Block number of the upgrade transaction.")
def cli(
    network,
    deployments_dir: Path,
    explorer_url,
    previous_name,
    previous_symbol,
    upgrade_tx,
    upgrade_block,
):
    """Print the explorer links and form values needed to refresh token info after an upgrade."""
    with precondition_errors():
        record = RecordStore(deployments_dir).load(network, TOKEN)

    explorer_url = explorer_url or explorer_base_url(network)
    if not explorer_url:
        raise click.UsageError(f"No known explorer for '{network}'; pass --explorer-url.")

    links = ReferenceLinks(
        explorer_url=explorer_url,
        proxy_address=record.proxy_address,
        implementation_address=record.implementation_address,
        deployer_address=record.deployer,
        name=record.name or UNAVAILABLE,
        symbol=record.symbol or UNAVAILABLE,
        version=record.current_version,
        previous_name=previous_name,
        previous_symbol=previous_symbol,
        upgrade_tx=upgrade_tx,
        upgrade_block=upgrade_block,
    )
    click.secho(f"\n{record.name} ({record.symbol}) on '{network}'", fg="green")
    for section in format_reference_report(links):
        click.secho(f"\n{section.title}", fg="cyan")
        for line in section.lines:
            print(f"\t{line}")


if __name__ == "__main__":
    cli()
