"""Bounded polling for external state to settle.

Used while waiting for prerequisite applications to be installed by the
MDM and for the Dock preferences plist to reach the expected state.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable

import structlog

logger = structlog.get_logger()


def random_delay(low: int = 10, high: int = 59) -> Callable[[int], float]:
    """Return a delay function drawing a whole number of seconds in ``[low, high]``.

    Random delays keep many devices enrolled at the same time from polling
    in lockstep.
    """

    def _delay(_attempt: int) -> float:
        return float(random.randint(low, high))

    return _delay


def fixed_delay(seconds: float) -> Callable[[int], float]:
    """Return a delay function that always waits *seconds*."""

    def _delay(_attempt: int) -> float:
        return seconds

    return _delay


def poll_until(
    predicate: Callable[[], bool],
    *,
    delay: Callable[[int], float],
    max_wait: float | None = None,
    max_attempts: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "condition",
) -> bool:
    """Call *predicate* until it returns True or the wait budget is spent.

    Args:
        predicate: Zero-argument check of the external state.
        delay: Maps the 1-based poll number to the seconds to wait after it.
        max_wait: Upper bound on the total seconds slept. ``None`` waits
            without a time limit.
        max_attempts: Upper bound on predicate evaluations. ``None`` means
            no limit.
        sleep: Function used to wait between polls.
        description: Label used in log events.

    Returns:
        True if *predicate* was satisfied, False if a limit was hit first.
    """
    waited = 0.0
    attempt = 0
    while True:
        attempt += 1
        if predicate():
            logger.info("Poll satisfied", condition=description, attempts=attempt, waited=waited)
            return True

        if max_attempts is not None and attempt >= max_attempts:
            logger.warning("Poll attempts exhausted", condition=description, attempts=attempt)
            return False

        seconds = delay(attempt)
        if max_wait is not None and waited + seconds > max_wait:
            logger.warning(
                "Poll timed out", condition=description, waited=waited, max_wait=max_wait
            )
            return False

        logger.info("Waiting for condition", condition=description, delay=seconds)
        sleep(seconds)
        waited += seconds
