# Usage:
#  > ape run simulate_nft_upgrade --network ethereum:local:test
#
# Deploys the NFT collection, upgrades it and exercises the V2 functions in a single
# run, so nothing depends on a local chain surviving between invocations.

import tempfile

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from tokenops.cli import load_settings
from tokenops.constants import NFT
from tokenops.deploy import DeployOrchestrator
from tokenops.profiles import NFT_PROFILE
from tokenops.proxies import connect
from tokenops.records import RecordStore
from tokenops.upgrade import UpgradeOrchestrator, UpgradeOverrides
from tokenops.utils import is_local_network

EXTRA_MINTS = 2
BATCH_SIZE = 3
TEST_TOKEN_URI = "ipfs://QmTest123"


def _phase(title: str) -> None:
    click.secho(f"\n{title}", fg="green")
    click.secho("=" * len(title), fg="green")


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
def cli(network):
    """Deploy + upgrade dry run of the NFT collection on a local network."""
    network_name = networks.provider.network.name
    settings = load_settings()
    if not is_local_network(network_name, settings.local_networks):
        raise click.UsageError(
            f"'{network_name}' is not a local network ({', '.join(settings.local_networks)})."
        )
    framework, _ = connect(settings, network_name, verify=False)
    config = settings.for_contract_type(NFT)

    with tempfile.TemporaryDirectory() as records_dir:
        store = RecordStore(records_dir)

        _phase("PHASE 1: Deploy TestNft")
        deployed = DeployOrchestrator(framework, store, NFT_PROFILE).run(network_name, config)
        nft = deployed.record
        contract = framework.at(NFT_PROFILE.contract_name, nft.proxy_address)
        for _ in range(EXTRA_MINTS):
            framework.transact(contract.safeMint, framework.address)
        minted_before = contract.totalMinted()
        print(f"\tTotal minted     : {minted_before}")

        _phase("PHASE 2: Upgrade to TestNftV2")
        upgrade = UpgradeOrchestrator(framework, store, NFT_PROFILE).run(
            network_name, UpgradeOverrides.from_config(config)
        )
        contract = framework.at(NFT_PROFILE.upgrade_contract_name, nft.proxy_address)

        _phase("PHASE 3: Check preserved state")
        assert contract.totalMinted() == minted_before, "mint counter changed across upgrade"
        for token_id in range(minted_before):
            print(f"\tNFT #{token_id} owner     : {contract.ownerOf(token_id)}")

        _phase("PHASE 4: Exercise V2 functions")
        framework.transact(contract.batchMint, framework.address, BATCH_SIZE)
        print(f"\tTotal minted     : {contract.totalMinted()}")
        framework.transact(contract.setTokenURI, 0, TEST_TOKEN_URI)
        print(f"\tNFT #0 URI       : {contract.tokenURI(0)}")

    _phase("Summary")
    print(f"\tProxy            : {nft.proxy_address}")
    print(f"\tImplementation V1: {nft.implementation_address}")
    print(f"\tImplementation V2: {upgrade.record.implementation_address}")
    print(f"\tName             : {upgrade.record.name}")
    print(f"\tSymbol           : {upgrade.record.symbol}")
    print(f"\tVersion          : {upgrade.record.current_version}")
    print(f"\tTotal minted     : {contract.totalMinted()}")


if __name__ == "__main__":
    cli()
