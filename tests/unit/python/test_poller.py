"""Tests for the convergence poller."""

from unittest.mock import MagicMock

import pytest

from synthetics_canary.exceptions import ConvergenceTimeoutError
from synthetics_canary.poller import wait_for_state


def test_polls_until_status_leaves_transitional_state():
    fetch = MagicMock(side_effect=["CREATING", "CREATING", "READY"])
    sleep = MagicMock()

    status = wait_for_state(fetch, {"CREATING"}, interval_seconds=1, sleep=sleep)

    assert status == "READY"
    assert fetch.call_count == 3
    assert sleep.call_count == 2
    sleep.assert_called_with(1)


def test_returns_immediately_when_already_stable():
    fetch = MagicMock(return_value="STOPPED")
    sleep = MagicMock()

    assert wait_for_state(fetch, {"STOPPING"}, sleep=sleep) == "STOPPED"
    sleep.assert_not_called()


def test_error_state_is_returned_not_retried():
    fetch = MagicMock(side_effect=["UPDATING", "ERROR"])
    sleep = MagicMock()

    assert wait_for_state(fetch, {"UPDATING"}, sleep=sleep) == "ERROR"
    assert sleep.call_count == 1


def test_missing_resource_ends_wait():
    fetch = MagicMock(side_effect=["DELETING", "DELETING", None])
    sleep = MagicMock()

    assert wait_for_state(fetch, {"DELETING"}, sleep=sleep) is None
    assert sleep.call_count == 2


def test_times_out_after_max_wait():
    fetch = MagicMock(return_value="CREATING")
    sleep = MagicMock()

    with pytest.raises(ConvergenceTimeoutError) as exc_info:
        wait_for_state(
            fetch,
            {"CREATING"},
            interval_seconds=1,
            max_wait_seconds=3,
            resource="canary c1",
            sleep=sleep,
        )

    assert sleep.call_count == 3
    assert exc_info.value.last_status == "CREATING"
    assert "canary c1" in str(exc_info.value)
