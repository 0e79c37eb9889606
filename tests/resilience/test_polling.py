"""Tests for bounded polling."""

from __future__ import annotations

import pytest

from macdeploy.resilience.polling import fixed_delay, poll_until, random_delay


class TestPollUntil:
    """poll_until stops on success or when a limit is reached."""

    def test_immediate_success_never_sleeps(self, sleeps) -> None:
        assert poll_until(lambda: True, delay=fixed_delay(5), sleep=sleeps) is True
        assert sleeps.calls == []

    def test_succeeds_after_some_polls(self, sleeps) -> None:
        answers = iter([False, False, True])

        satisfied = poll_until(lambda: next(answers), delay=fixed_delay(5), sleep=sleeps)

        assert satisfied is True
        assert sleeps.calls == [5, 5]

    def test_max_attempts_bounds_predicate_calls(self, sleeps) -> None:
        calls: list[int] = []

        def _never() -> bool:
            calls.append(1)
            return False

        satisfied = poll_until(_never, delay=fixed_delay(1), max_attempts=3, sleep=sleeps)

        assert satisfied is False
        assert len(calls) == 3
        assert sleeps.calls == [1, 1]

    def test_max_wait_bounds_total_sleep(self, sleeps) -> None:
        satisfied = poll_until(lambda: False, delay=fixed_delay(10), max_wait=25, sleep=sleeps)

        assert satisfied is False
        assert sum(sleeps.calls) <= 25
        assert sleeps.calls == [10, 10]

    def test_delay_receives_poll_number(self, sleeps) -> None:
        answers = iter([False, False, False, True])

        poll_until(lambda: next(answers), delay=lambda n: float(n), sleep=sleeps)

        assert sleeps.calls == [1.0, 2.0, 3.0]


class TestDelays:
    """Delay factories."""

    def test_fixed_delay(self) -> None:
        delay = fixed_delay(7.0)
        assert delay(1) == 7.0
        assert delay(99) == 7.0

    @pytest.mark.parametrize("attempt", range(1, 50))
    def test_random_delay_within_bounds(self, attempt) -> None:
        value = random_delay(10, 59)(attempt)
        assert 10 <= value <= 59
        assert value == int(value)
