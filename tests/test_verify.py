import threading
from collections import OrderedDict

from tests.conftest import LIVE_NETWORK, LOCAL_NETWORK
from tokenops.confirmations import ConfirmationTracker
from tokenops.results import Outcome
from tokenops.verify import Verifier

IMPLEMENTATION = "0x" + "7" * 40
PROXY = "0x" + "8" * 40


def _contracts():
    return OrderedDict([("Implementation", IMPLEMENTATION), ("Proxy", PROXY)])


def test_skipped_on_local_networks(framework, verifier):
    assert not verifier.should_verify(LOCAL_NETWORK)
    assert verifier.verify(LOCAL_NETWORK, _contracts()) == dict()
    assert framework.published == []


def test_skipped_when_disabled(framework, tracker):
    verifier = Verifier(framework, local_networks=(LOCAL_NETWORK,), tracker=tracker, enabled=False)
    assert not verifier.should_verify(LIVE_NETWORK)
    assert verifier.verify(LIVE_NETWORK, _contracts()) == dict()


def test_publishes_every_address_after_confirmations(framework, verifier, capsys):
    since = framework.height
    results = verifier.verify(LIVE_NETWORK, _contracts(), since_block=since)

    assert framework.height >= since + verifier.confirmations
    assert framework.published == [IMPLEMENTATION, PROXY]
    assert list(results) == ["Implementation", "Proxy"]
    assert all(result.outcome == Outcome.SUCCESS for result in results.values())
    assert f"https://sepolia.etherscan.io/address/{PROXY}" in capsys.readouterr().out


def test_failures_are_reported_not_raised(framework, verifier):
    framework.publish_errors[IMPLEMENTATION] = "Contract source code already verified"
    framework.publish_errors[PROXY] = "Invalid API Key"

    results = verifier.verify(LIVE_NETWORK, _contracts())

    assert results["Implementation"].outcome == Outcome.ALREADY_DONE
    assert results["Proxy"].outcome == Outcome.FAILED
    assert results["Proxy"].reason == "Invalid API Key"


def test_timeout_fails_every_address(framework):
    tracker = ConfirmationTracker(
        get_height=lambda: 0, poll_interval=0, timeout=0, sleep=lambda _: None
    )
    verifier = Verifier(framework, tracker=tracker, confirmations=5)

    results = verifier.verify(LIVE_NETWORK, _contracts(), since_block=0)

    assert framework.published == []
    assert [r.outcome for r in results.values()] == [Outcome.FAILED, Outcome.FAILED]


def test_cancel_fails_every_address(framework, verifier):
    cancel = threading.Event()
    cancel.set()

    results = verifier.verify(LIVE_NETWORK, _contracts(), cancel=cancel)

    assert framework.published == []
    assert all(result.outcome == Outcome.FAILED for result in results.values())
