#!/usr/bin/python3

from collections import OrderedDict
from pathlib import Path

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from tokenops.cli import load_settings, precondition_errors
from tokenops.options import contract_type_option, deployments_dir_option, local_networks_option
from tokenops.proxies import connect
from tokenops.records import RecordStore
from tokenops.results import Outcome


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@contract_type_option
@deployments_dir_option
@local_networks_option
@click.option(
    "--confirmations",
    "-c",
    help="Blocks to wait on top of the current head before submitting.",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
)
def cli(network, contract_type, deployments_dir: Path, local_networks, confirmations):
    """Verify the recorded proxy and its current implementation on the block explorer."""
    network_name = networks.provider.network.name
    settings = load_settings(local_networks=local_networks)

    with precondition_errors():
        record = RecordStore(deployments_dir).load(network_name, contract_type)
        framework, verifier = connect(settings, network_name, autosign=True)

    # the record may lag behind the chain; the proxy slot is authoritative
    implementation_address = framework.get_implementation_address(record.proxy_address)
    if implementation_address != record.implementation_address:
        click.secho(
            f"(!) Recorded implementation {record.implementation_address} differs from "
            f"on-chain {implementation_address}; verifying the on-chain one.",
            fg="yellow",
        )

    verifier.confirmations = confirmations
    results = verifier.verify(
        network=network_name,
        contracts=OrderedDict(
            [("Implementation", implementation_address), ("Proxy", record.proxy_address)]
        ),
    )
    failed = [label for label, result in results.items() if result.outcome == Outcome.FAILED]
    if failed:
        click.secho(f"\n(!) Verification failed for {', '.join(failed)}", fg="yellow")


if __name__ == "__main__":
    cli()
