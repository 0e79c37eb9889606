"""Cooperative cancellation and best-effort rollback for deployments.

SIGINT/SIGTERM handlers only flip a flag on a :class:`CancellationToken`.
The sequencer checks the token between stages, and retry/poll sleeps go
through :meth:`CancellationToken.sleep` so a pending backoff ends early. On
cancellation the :class:`RollbackPlan` runs the compensating actions that
were registered while external state was being changed.
"""

from __future__ import annotations

import signal
import time
from collections.abc import Callable, Iterable
from types import FrameType

import structlog

from macdeploy.domain.errors import InterruptedByUserError

logger = structlog.get_logger()

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)

# Longest stretch a token sleep goes without looking at the flag
SLEEP_SLICE = 0.1


class CancellationToken:
    """A flag set asynchronously by a signal and observed at interrupt points.

    Signal handlers run on the main thread between bytecodes, possibly while
    that thread is inside a lock. The handler therefore only assigns plain
    attributes; it never takes a lock or writes a log line.

    Args:
        slice_seconds: Granularity at which :meth:`sleep` checks the flag.
        clock: Monotonic clock used to measure sleeps.
        sleep: Underlying sleep for each slice.
    """

    def __init__(
        self,
        slice_seconds: float = SLEEP_SLICE,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._cancelled = False
        self._signal_name = "SIGINT"
        self._slice = slice_seconds
        self._clock = clock
        self._sleep = sleep

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def signal_name(self) -> str:
        return self._signal_name

    def cancel(self, signal_name: str = "SIGINT") -> None:
        """Request cancellation. Later calls keep the first signal name."""
        if not self._cancelled:
            self._signal_name = signal_name
            self._cancelled = True

    def raise_if_cancelled(self) -> None:
        """Raise :class:`InterruptedByUserError` if cancellation was requested."""
        if self._cancelled:
            raise InterruptedByUserError(self._signal_name)

    def sleep(self, seconds: float) -> None:
        """Sleep up to *seconds*, ending early with an error on cancellation.

        Raises:
            InterruptedByUserError: If cancellation is requested before or
                during the sleep.
        """
        self.raise_if_cancelled()
        deadline = self._clock() + seconds
        remaining = seconds
        while remaining > 0:
            self._sleep(min(self._slice, remaining))
            self.raise_if_cancelled()
            remaining = deadline - self._clock()

    def install_signal_handlers(
        self, signals: Iterable[signal.Signals] = DEFAULT_SIGNALS
    ) -> Callable[[], None]:
        """Route *signals* to :meth:`cancel`.

        Returns:
            A function that restores the previous handlers.
        """
        previous: dict[signal.Signals, object] = {}

        def _handler(signum: int, _frame: FrameType | None) -> None:
            self.cancel(signal.Signals(signum).name)

        for sig in signals:
            previous[sig] = signal.signal(sig, _handler)

        def _restore() -> None:
            for sig, handler in previous.items():
                signal.signal(sig, handler)  # type: ignore[arg-type]

        return _restore


class RollbackPlan:
    """Ordered, named compensating actions for partially applied state.

    Actions are registered when a mutation is about to happen and discarded
    once the mutation is confirmed complete. Running an empty or committed
    plan does nothing.
    """

    def __init__(self) -> None:
        self._actions: dict[str, Callable[[], None]] = {}
        self._committed = False

    @property
    def pending(self) -> list[str]:
        """Return the names of the registered actions in run order."""
        return list(self._actions)

    @property
    def committed(self) -> bool:
        return self._committed

    def register(self, name: str, action: Callable[[], None]) -> None:
        """Add *action* under *name*. Re-registering a name keeps its position."""
        self._actions[name] = action

    def discard(self, name: str) -> None:
        self._actions.pop(name, None)

    def commit(self) -> None:
        """Mark the sequence complete and drop every pending action."""
        self._actions.clear()
        self._committed = True

    def run(self) -> list[str]:
        """Execute every pending action in registration order.

        Each action is attempted even if an earlier one failed.

        Returns:
            Human-readable messages for the actions that failed; empty when
            everything succeeded or nothing was pending.
        """
        failures: list[str] = []
        if self._committed or not self._actions:
            logger.info("Nothing to roll back")
            return failures

        actions = list(self._actions.items())
        self._actions.clear()
        for name, action in actions:
            logger.info("Rolling back", action=name)
            try:
                action()
            except Exception as exc:
                logger.exception("Rollback action failed", action=name)
                failures.append(f"Rollback '{name}' failed: {exc}")
        return failures
