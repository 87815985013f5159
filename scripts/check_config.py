#!/usr/bin/python3

from pathlib import Path

import click

from tokenops.cli import load_settings
from tokenops.config import ContractConfig, readiness_report
from tokenops.options import params_option


def _display_contract_config(title: str, config: ContractConfig, with_base_uri: bool) -> None:
    click.secho(f"\n{title}", fg="green")
    print(f"\tName             : {config.name}")
    print(f"\tSymbol           : {config.symbol}")
    if with_base_uri:
        print(f"\tBase URI         : {config.base_uri or '(empty)'}")
    print(f"\tName (V2)        : {config.name_override or '(keep current)'}")
    print(f"\tSymbol (V2)      : {config.symbol_override or '(keep current)'}")
    if with_base_uri:
        print(f"\tBase URI (V2)    : {config.base_uri_override or '(keep current)'}")


@click.command(name="check-config")
@params_option
def cli(params_filepath: Path):
    """Report every missing prerequisite before running a mutating script."""
    settings = load_settings(params_filepath=params_filepath)
    report = readiness_report(settings)

    _display_contract_config("Token configuration", report.token, with_base_uri=False)
    _display_contract_config("NFT configuration", report.nft, with_base_uri=True)

    click.secho("\nNetwork configuration", fg="green")
    for status in report.credentials:
        if status.present:
            click.secho(f"\t{status.name}: set", fg="cyan")
        elif status.required:
            click.secho(f"\t{status.name}: NOT SET", fg="red")
        else:
            click.secho(f"\t{status.name}: not set (verification will fail)", fg="yellow")
    print(f"\tLocal networks   : {', '.join(settings.local_networks)}")

    click.secho("\nSummary", fg="green")
    if report.can_deploy:
        click.secho("(i) Ready to deploy!", fg="green")
        print(
            "\nRun: ape run deploy --network ethereum:sepolia:<RPC_URL> --contract-type TOKEN"
            "\n     ape run deploy --network ethereum:sepolia:<RPC_URL> --contract-type NFT"
        )
        if not report.can_verify:
            click.secho(
                "(!) ETHERSCAN_API_KEY not set. Contracts won't be verified automatically.",
                fg="yellow",
            )
        return

    click.secho("(x) Missing required configuration:", fg="red")
    for name in report.missing:
        print(f"\t- {name}")
    print("\nRefer to .env.example for the required format.")
    raise click.exceptions.Exit(1)


if __name__ == "__main__":
    cli()
