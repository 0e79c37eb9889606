"""Retry engine for remote calls with doubling, jittered backoff.

Each attempt runs the operation under a fixed per-attempt timeout. A
non-empty response ends the loop; an empty body or a transport error is
retried after ``delay`` seconds, with ``delay`` starting at 1 and growing as
``delay * 2 + jitter`` where ``jitter`` is drawn from ``[0, 1)``.

The engine only judges transport success. Callers validate the payload and
decide whether a ``Failed`` result is fatal to their workflow.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable

import httpx
import structlog
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from macdeploy.domain.errors import TransientNetworkError
from macdeploy.domain.models import CallAttempt, CallResult
from macdeploy.domain.types import CallStatus

logger = structlog.get_logger()

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_TIMEOUT = 10.0
INITIAL_DELAY = 1.0

# Exceptions an operation may raise that count as transport failures
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    httpx.HTTPError,
    OSError,
    TransientNetworkError,
)

Operation = Callable[[float], str | bytes | None]


class wait_doubling_jitter(wait_base):  # noqa: N801 - matches tenacity naming
    """Wait ``d`` seconds, then ``2 * d + jitter()`` on the next retry.

    Stateful: create one instance per retry loop so every loop starts again
    from the initial delay.
    """

    def __init__(
        self,
        initial: float = INITIAL_DELAY,
        jitter: Callable[[], float] = random.random,
    ) -> None:
        self._next = initial
        self._jitter = jitter

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = self._next
        self._next = delay * 2 + self._jitter()
        return delay


def _decode(body: str | bytes | None) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def call_with_retry(
    operation: Operation,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    timeout: float = DEFAULT_TIMEOUT,
    *,
    api_name: str = "remote",
    sleep: Callable[[float], None] = time.sleep,
    jitter: Callable[[], float] = random.random,
    initial_delay: float = INITIAL_DELAY,
) -> CallResult:
    """Invoke *operation* until it returns a non-empty body or attempts run out.

    Args:
        operation: Callable receiving the per-attempt timeout in seconds and
            returning the response body.
        max_attempts: Maximum number of attempts, at least 1.
        timeout: Per-attempt timeout handed to *operation*. The operation decides
            how it applies; an httpx client applies it separately to the
            connect, read, write and pool phases, so one attempt can run
            longer in wall-clock terms.
        api_name: Human-readable name used in log events.
        sleep: Function used to wait between attempts. A cancellation token's
            ``sleep`` may be passed so an interruption ends the backoff.
        jitter: Source of the random addition applied to each new delay.
        initial_delay: Delay before the second attempt.

    Returns:
        ``CallResult`` with status ``OK`` and the body, or ``FAILED`` and the
        last error after *max_attempts* attempts.

    Raises:
        ValueError: If *max_attempts* is less than 1.
        Exception: Any non-transport error raised by *operation* or *sleep*
            propagates unchanged.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempts: list[CallAttempt] = []

    def _attempt() -> str:
        number = len(attempts) + 1
        try:
            body = _decode(operation(timeout))
        except TRANSIENT_ERRORS as exc:
            error = str(exc) or type(exc).__name__
            attempts.append(CallAttempt(attempt=number, timeout=timeout, error=error))
            raise TransientNetworkError(error) from exc

        if not body.strip():
            attempts.append(
                CallAttempt(attempt=number, timeout=timeout, response=body, error="empty response")
            )
            raise TransientNetworkError("empty response")

        attempts.append(CallAttempt(attempt=number, timeout=timeout, response=body))
        return body

    def _before_sleep(retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        attempts[-1] = attempts[-1].model_copy(update={"delay_before_next": delay})
        logger.warning(
            "API call failed, retrying",
            api_name=api_name,
            attempt=retry_state.attempt_number,
            max_attempts=max_attempts,
            wait=delay,
            error=attempts[-1].error,
        )

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_doubling_jitter(initial=initial_delay, jitter=jitter),
        retry=retry_if_exception_type(TransientNetworkError),
        before_sleep=_before_sleep,
        sleep=sleep,
        reraise=False,
    )

    try:
        response = retrying(_attempt)
    except RetryError as exc:
        last_error = exc.last_attempt.exception()
        logger.error(
            "API call failed after all retries",
            api_name=api_name,
            attempts=len(attempts),
            error=str(last_error),
        )
        return CallResult(status=CallStatus.FAILED, error=str(last_error), attempts=attempts)

    logger.debug("API call succeeded", api_name=api_name, attempts=len(attempts))
    return CallResult(status=CallStatus.OK, response=response, attempts=attempts)
