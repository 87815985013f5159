#!/usr/bin/python3

from pathlib import Path

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from tokenops.cli import load_settings, precondition_errors
from tokenops.confirm import _confirm_operation
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
from tokenops.upgrade import UpgradeOrchestrator, UpgradeOverrides
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
    Upgrade a recorded proxy to its V2 implementation and apply the V2 overrides
    (TOKEN_NAME_V2 / TOKEN_SYMBOL_V2, NFT_NAME_V2 / NFT_SYMBOL_V2 / NFT_BASE_URI_V2).

    ape run upgrade --network ethereum:sepolia:<RPC_URL> --contract-type TOKEN
    """
    network_name = networks.provider.network.name
    settings = load_settings(params_filepath=params_filepath, local_networks=local_networks)
    profile = get_profile(contract_type)
    store = RecordStore(deployments_dir)
    overrides = UpgradeOverrides.from_config(settings.for_contract_type(contract_type))

    with precondition_errors():
        # fail on a missing record before touching accounts or the chain
        record = store.load(network_name, profile.contract_type)
        framework, verifier = connect(settings, network_name, autosign=autosign, verify=verify)
        if not (autosign or is_local_network(network_name, settings.local_networks)):
            _confirm_operation(
                f"Upgrade {profile.contract_name} to {profile.upgrade_contract_name}",
                network_name,
                {"proxy": record.proxy_address, **overrides._asdict()},
            )
        orchestrator = UpgradeOrchestrator(
            framework=framework, store=store, profile=profile, verifier=verifier
        )
        orchestrator.run(network_name, overrides)


if __name__ == "__main__":
    cli()
