import threading
from collections import OrderedDict
from typing import Dict, Iterable, Optional

import click
from eth_typing import ChecksumAddress

from tokenops.confirmations import ConfirmationTracker
from tokenops.constants import (
    ALREADY_VERIFIED_MARKERS,
    DEFAULT_LOCAL_NETWORKS,
    VERIFICATION_CONFIRMATIONS,
)
from tokenops.exceptions import ConfirmationCancelled, ConfirmationTimeout
from tokenops.framework import ProxyFramework
from tokenops.results import Outcome, StepResult, attempt, echo_result
from tokenops.utils import explorer_base_url, is_local_network


class Verifier:
    """
    Best-effort explorer verification; a failed submission is reported, never raised.
    """

    def __init__(
        self,
        framework: ProxyFramework,
        local_networks: Iterable[str] = DEFAULT_LOCAL_NETWORKS,
        confirmations: int = VERIFICATION_CONFIRMATIONS,
        tracker: Optional[ConfirmationTracker] = None,
        enabled: bool = True,
    ):
        self.framework = framework
        self.local_networks = tuple(local_networks)
        self.confirmations = confirmations
        self.tracker = tracker or ConfirmationTracker(get_height=framework.block_height)
        self.enabled = enabled

    def should_verify(self, network: str) -> bool:
        return self.enabled and not is_local_network(network, self.local_networks)

    def verify(
        self,
        network: str,
        contracts: "OrderedDict[str, ChecksumAddress]",
        since_block: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Dict[str, StepResult]:
        """
        Waits for the confirmation depth, then submits each labelled address.
        Returns the result per label; empty when verification does not apply.
        """
        if not self.should_verify(network):
            print(f"\n(i) Skipping explorer verification on '{network}'.")
            return dict()

        print("\nVerifying contracts on block explorer")
        print("=====================================")
        if since_block is None:
            since_block = self.framework.block_height()
        print(f"(i) Waiting for {self.confirmations} confirmations of block {since_block}...")
        try:
            self.tracker.wait(
                since_block=since_block, confirmations=self.confirmations, cancel=cancel
            )
        except (ConfirmationTimeout, ConfirmationCancelled) as error:
            click.secho(f"(x) Verification skipped: {error}", fg="red")
            return {
                label: StepResult(
                    step=f"Verify {label}", outcome=Outcome.FAILED, reason=str(error)
                )
                for label in contracts
            }

        results = OrderedDict()
        for label, address in contracts.items():
            print(f"\n(i) Verifying {label} at {address}...")
            result = attempt(
                step=f"Verify {label}",
                func=lambda address=address: self.framework.publish(address),
                already_done_markers=ALREADY_VERIFIED_MARKERS,
            )
            echo_result(
                result, success=f"{label} verified!", already_done=f"{label} already verified!"
            )
            results[label] = result

        self._print_links(network, contracts)
        return results

    @staticmethod
    def _print_links(network: str, contracts) -> None:
        base_url = explorer_base_url(network)
        if not base_url:
            return
        print("\nView on explorer:")
        for label, address in contracts.items():
            print(f"\t{label}: {base_url}/address/{address}")
