"""Bounded retry for readiness probes run at process startup.

A probe is any zero-argument callable that raises when the resource it
checks is not ready (``engine ping``, ``redis.ping``, an HTTP GET...).

The loop blocks the calling thread for every sleep and has no cancellation
hook. Callers that need a deadline have to enforce it from outside, e.g. by
running the check in a worker and abandoning the result on timeout. It is
meant for one-shot startup gating, not for request handling.
"""
import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_TRIES = 2
DEFAULT_SECONDS_TO_WAIT = 3

Probe = Callable[[], object]


def check_and_retry(probe: Probe, max_tries: int, seconds_to_wait: float, debug: bool = False) -> None:
    """
    Call ``probe`` until it stops raising.

    Args:
        probe: zero-argument callable; an exception means "not ready"
        max_tries: retries allowed after the first call, so at most
            ``max_tries + 1`` calls are made
        seconds_to_wait: pause between calls, may be 0
        debug: log every wait

    Raises:
        The exception from the last call once the budget is spent.
    """
    if max_tries < 0:
        raise ValueError("max_tries must be >= 0")

    tries = 0
    while True:
        try:
            probe()
            return
        except Exception:
            if tries >= max_tries:
                raise
            if debug:
                logger.warning("Could not connect -- trying again in %s seconds", seconds_to_wait)
            time.sleep(seconds_to_wait)
            tries += 1


def validate_conn_or_fail(probe: Probe, debug: bool = False, name: str = "connection") -> None:
    """Run ``probe`` with the default budget and stop the process if it never succeeds."""
    try:
        check_and_retry(probe, DEFAULT_MAX_TRIES, DEFAULT_SECONDS_TO_WAIT, debug)
    except Exception as e:
        logger.error("Could not establish %s: %s", name, e)
        raise SystemExit(f"Could not establish {name}: {e}") from e
