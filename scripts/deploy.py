#!/usr/bin/python3

from pathlib import Path

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from tokenops.cli import load_settings, precondition_errors
from tokenops.confirm import _confirm_operation
from tokenops.deploy import DeployOrchestrator
from tokenops.options import (
    autosign_option,
    contract_type_option,
    deployments_dir_option,
    local_networks_option,
    params_option,
    verify_option,
)
from tokenops.profiles import get_profile
from tokenops.proxies import connect
from tokenops.records import RecordStore
from tokenops.utils import is_local_network


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@contract_type_option
@params_option
@deployments_dir_option
@autosign_option
@verify_option
@local_networks_option
def cli(
    network,
    contract_type,
    params_filepath: Path,
    deployments_dir: Path,
    autosign,
    verify,
    local_networks,
):
    """
    Deploy a token or NFT collection behind a new upgradeable proxy.

    ape run deploy --network ethereum:sepolia:<RPC_URL> --contract-type NFT
    """
    network_name = networks.provider.network.name
    settings = load_settings(params_filepath=params_filepath, local_networks=local_networks)
    profile = get_profile(contract_type)
    config = settings.for_contract_type(contract_type)
    local = is_local_network(network_name, settings.local_networks)

    with precondition_errors():
        framework, verifier = connect(settings, network_name, autosign=autosign, verify=verify)
        if not (autosign or local):
            _confirm_operation(
                f"Deploy {profile.contract_name}",
                network_name,
                {"name": config.name, "symbol": config.symbol, "baseURI": config.base_uri},
            )
        orchestrator = DeployOrchestrator(
            framework=framework,
            store=RecordStore(deployments_dir),
            profile=profile,
            verifier=verifier,
        )
        # records of disposable networks go stale with the chain
        orchestrator.run(network_name, config, replace_existing=local)


if __name__ == "__main__":
    cli()
