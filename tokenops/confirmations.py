import threading
import time
from typing import Callable, Optional

from tokenops.constants import CONFIRMATION_POLL_INTERVAL, CONFIRMATION_TIMEOUT
from tokenops.exceptions import ConfirmationCancelled, ConfirmationTimeout


class ConfirmationTracker:
    """Polls the chain height until a block is buried under enough confirmations."""

    def __init__(
        self,
        get_height: Callable[[], int],
        poll_interval: float = CONFIRMATION_POLL_INTERVAL,
        timeout: float = CONFIRMATION_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.get_height = get_height
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep

    def wait(
        self,
        since_block: int,
        confirmations: int,
        cancel: Optional[threading.Event] = None,
    ) -> int:
        """Blocks until ``since_block`` has ``confirmations`` blocks on top; returns the height."""
        target = since_block + confirmations
        deadline = self._clock() + self.timeout
        while True:
            if cancel is not None and cancel.is_set():
                raise ConfirmationCancelled(f"Stopped waiting for block {target}.")

            height = self.get_height()
            if height >= target:
                return height

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise ConfirmationTimeout(
                    f"Block {since_block} has {max(height - since_block, 0)} of "
                    f"{confirmations} confirmations after {self.timeout}s."
                )

            if cancel is not None:
                # returns early when cancelled
                cancel.wait(min(self.poll_interval, remaining))
            else:
                self._sleep(min(self.poll_interval, remaining))
