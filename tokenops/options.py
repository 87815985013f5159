from pathlib import Path

import click

from tokenops.constants import DEPLOYMENTS_DIR, SUPPORTED_CONTRACT_TYPES
from tokenops.types import NetworkList

contract_type_option = click.option(
    "--contract-type",
    "-t",
    help="Kind of deployment (fungible token or NFT collection).",
    type=click.Choice(SUPPORTED_CONTRACT_TYPES, case_sensitive=False),
    callback=lambda ctx, param, value: value.upper() if value else value,
    required=True,
)

deployments_dir_option = click.option(
    "--deployments-dir",
    help="Directory holding the deployment records.",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEPLOYMENTS_DIR,
    show_default=True,
)

params_option = click.option(
    "--params",
    "params_filepath",
    help="Optional YAML params file whose 'constants' override environment values.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Submit contracts for block explorer verification on live networks.",
    default=True,
    show_default=True,
)

local_networks_option = click.option(
    "--local-networks",
    help="Comma-separated network names treated as disposable (overrides LOCAL_NETWORKS).",
    type=NetworkList(),
    required=False,
)
