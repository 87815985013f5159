from collections import OrderedDict
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional

import click

from tokenops.config import ContractConfig
from tokenops.diagnostics import ContractState, read_state
from tokenops.exceptions import DeploymentExists
from tokenops.framework import ProxyFramework
from tokenops.profiles import ContractProfile
from tokenops.records import DeploymentRecord, RecordStore
from tokenops.results import StepResult, attempt, echo_result
from tokenops.utils import same_address, utc_timestamp
from tokenops.verify import Verifier


class DeployReport(NamedTuple):
    record: DeploymentRecord
    filepath: Path
    state: ContractState
    mismatches: List[str]
    smoke_test: Optional[StepResult]
    verification: Dict[str, StepResult]


def _find_mismatches(state: ContractState, name: str, symbol: str, owner: str) -> List[str]:
    """Compares requested initializer values with what the chain reports."""
    mismatches = list()
    if state.name != name:
        mismatches.append(f"name: requested '{name}', on-chain '{state.name}'")
    if state.symbol != symbol:
        mismatches.append(f"symbol: requested '{symbol}', on-chain '{state.symbol}'")
    if not same_address(state.owner, owner):
        mismatches.append(f"owner: requested {owner}, on-chain {state.owner}")
    return mismatches


class DeployOrchestrator:
    """
    Deploys a contract behind a new proxy, reads the result back and records it.

    Only the deploy primitive can abort the run; readback mismatches, the NFT
    smoke mint and explorer verification are reported without unwinding.
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

    def run(
        self, network: str, config: ContractConfig, replace_existing: bool = False
    ) -> DeployReport:
        profile = self.profile
        if not replace_existing and self.store.exists(network, profile.contract_type):
            raise DeploymentExists(
                network=network,
                contract_type=profile.contract_type,
                filepath=self.store.filepath(network, profile.contract_type),
            )

        deployer = self.framework.address
        print(f"\nDeploying {profile.contract_name} proxy with account {deployer}")
        print(f"\tName             : {config.name}")
        print(f"\tSymbol           : {config.symbol}")
        if profile.has_base_uri:
            print(f"\tBase URI         : {config.base_uri or '(empty)'}")
        print(f"\tOwner            : {deployer}")

        args = profile.initializer_args(
            name=config.name, symbol=config.symbol, owner=deployer, base_uri=config.base_uri
        )
        deployed = self.framework.deploy_proxy(profile.contract_name, args)
        contract = deployed.instance
        proxy_address = contract.address

        implementation_address = self.framework.get_implementation_address(proxy_address)
        admin = attempt(
            "Read admin address", lambda: self.framework.get_admin_address(proxy_address)
        )
        admin_address = admin.value if admin.ok else None

        click.secho("\n(i) Deployment successful", fg="green")
        print(f"\tProxy            : {proxy_address}")
        print(f"\tImplementation   : {implementation_address}")
        print(f"\tAdmin            : {admin_address or '(unavailable)'}")

        state = read_state(contract, profile, with_version=False, with_base_uri=False)
        print(f"\n{profile.contract_name} on-chain state")
        print("\n".join(state.lines(supply_label=profile.supply_function)))
        mismatches = _find_mismatches(state, config.name, config.symbol, deployer)
        for mismatch in mismatches:
            click.secho(f"(!) Readback mismatch - {mismatch}", fg="yellow")

        smoke_test = None
        if profile.smoke_mint:
            print("\nMinting test NFT")
            smoke_test = attempt(
                "Smoke test mint", lambda: self.framework.transact(contract.safeMint, deployer)
            )
            echo_result(smoke_test, success=f"Minted test NFT to {deployer}")

        record = DeploymentRecord(
            network=network,
            contract_type=profile.contract_type,
            proxy_address=proxy_address,
            implementation_address=implementation_address,
            admin_address=admin_address,
            deployer=deployer,
            # on-chain values win over the requested configuration
            name=state.name if state.name is not None else config.name,
            symbol=state.symbol if state.symbol is not None else config.symbol,
            base_uri=config.base_uri if profile.has_base_uri else None,
            deployed_at=self.clock(),
            version=profile.initial_version,
        )
        filepath = self.store.save(network, profile.contract_type, record)
        print(f"\n(i) Deployment record saved to {filepath}")

        verification = dict()
        if self.verifier is not None:
            verification = self.verifier.verify(
                network=network,
                contracts=OrderedDict(
                    [("Implementation", implementation_address), ("Proxy", proxy_address)]
                ),
                since_block=deployed.block_number,
            )

        click.secho(f"\n(i) {profile.contract_name} proxy deployed at {proxy_address}", fg="green")
        return DeployReport(
            record=record,
            filepath=filepath,
            state=state,
            mismatches=mismatches,
            smoke_test=smoke_test,
            verification=verification,
        )
