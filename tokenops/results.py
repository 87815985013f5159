from enum import Enum
from typing import Any, Callable, Iterable, NamedTuple, Optional

import click


class Outcome(Enum):
    SUCCESS = "success"
    ALREADY_DONE = "already done"
    FAILED = "failed"


class StepResult(NamedTuple):
    """Outcome of a best-effort step; failures carry the underlying message."""

    step: str
    outcome: Outcome
    value: Any = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.SUCCESS, Outcome.ALREADY_DONE)


def _error_message(error: Exception) -> str:
    message = getattr(error, "message", None) or str(error)
    return message or error.__class__.__name__


def _matches(message: str, markers: Iterable[str]) -> bool:
    message = message.lower()
    return any(marker.lower() in message for marker in markers)


def attempt(
    step: str, func: Callable[[], Any], already_done_markers: Iterable[str] = ()
) -> StepResult:
    """
    Runs an auxiliary call, isolating its failure from the primary operation.

    A failure whose message contains one of the ``already_done_markers``
    is reported as ALREADY_DONE instead of FAILED.
    """
    try:
        value = func()
    except Exception as error:
        message = _error_message(error)
        if already_done_markers and _matches(message, already_done_markers):
            return StepResult(step=step, outcome=Outcome.ALREADY_DONE, reason=message)
        return StepResult(step=step, outcome=Outcome.FAILED, reason=message)
    return StepResult(step=step, outcome=Outcome.SUCCESS, value=value)


def echo_result(result: StepResult, success: str, already_done: Optional[str] = None) -> None:
    if result.outcome == Outcome.SUCCESS:
        click.secho(f"(i) {success}", fg="green")
    elif result.outcome == Outcome.ALREADY_DONE:
        click.secho(f"(i) {already_done or success}", fg="green")
    else:
        click.secho(f"(x) {result.step} failed: {result.reason}", fg="red")
