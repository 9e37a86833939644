"""
Convergence polling for asynchronously provisioned resources.

Synthetics reports create, update, start, stop and delete as transitional
states (CREATING, UPDATING, ...). wait_for_state() keeps fetching the status
on a fixed interval until it leaves those states, bounded by a maximum wait.
"""

import logging
import time
from collections.abc import Callable, Collection
from typing import TypeVar

from synthetics_canary import constants
from synthetics_canary.exceptions import ConvergenceTimeoutError

logger = logging.getLogger(__name__)

S = TypeVar("S")


def wait_for_state(
    fetch_status: Callable[[], S | None],
    transitional_states: Collection[S],
    interval_seconds: float = constants.POLL_INTERVAL_SECONDS,
    max_wait_seconds: float = constants.MAX_WAIT_SECONDS,
    resource: str = "resource",
    sleep: Callable[[float], None] | None = None,
) -> S | None:
    """
    Poll until a status leaves the transitional states.

    The status is fetched once immediately and then once per interval. A
    fetch returning None means the resource no longer exists, which ends
    the wait (this is how deletions converge).

    Args:
        fetch_status: Returns the current status, or None if the resource is gone
        transitional_states: Statuses that mean work is still in progress
        interval_seconds: Delay between fetches
        max_wait_seconds: Give up once this much time has been spent waiting
        resource: Human-readable name for log and error messages
        sleep: Sleep function, replaceable in tests

    Returns:
        The first status outside transitional_states, or None

    Raises:
        ConvergenceTimeoutError: If the status is still transitional after max_wait_seconds
    """
    sleep = sleep or time.sleep
    started = time.monotonic()
    waited = 0.0
    poll_count = 0

    status = fetch_status()
    while status is not None and status in transitional_states:
        elapsed = max(time.monotonic() - started, waited)
        if elapsed >= max_wait_seconds:
            logger.error(f"{resource} still {status} after {elapsed:.0f}s, giving up")
            raise ConvergenceTimeoutError(resource, status, elapsed)

        poll_count += 1
        logger.debug(f"{resource} is {status}, waiting... (poll {poll_count})")
        sleep(interval_seconds)
        waited += interval_seconds
        status = fetch_status()

    logger.debug(f"{resource} converged to {status} after {poll_count} polls")
    return status
