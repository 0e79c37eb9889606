"""Resilience infrastructure: retried remote calls and bounded polling."""

from macdeploy.resilience.polling import fixed_delay, poll_until, random_delay
from macdeploy.resilience.retry import call_with_retry, wait_doubling_jitter

__all__ = [
    "call_with_retry",
    "fixed_delay",
    "poll_until",
    "random_delay",
    "wait_doubling_jitter",
]
