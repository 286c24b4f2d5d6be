"""Retry policies. One clone per invocation; the handler sleeps for the interval returned."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from reqline.core.errors import RetryableError


@runtime_checkable
class Retryer(Protocol):
    """
    continue_or_propagate: seconds to wait before the next attempt, or raise the error
    to stop retrying. clone: fresh state for a new invocation.
    """

    def continue_or_propagate(self, error: RetryableError) -> float:
        ...

    def clone(self) -> Retryer:
        ...


class DefaultRetryer:
    """
    Up to max_attempts attempts. Waits period * 1.5^(n-1), capped at max_period,
    or until the error's retry_after (also capped).
    """

    def __init__(self, period: float = 0.1, max_period: float = 1.0, max_attempts: int = 5) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.period = period
        self.max_period = max_period
        self.max_attempts = max_attempts
        self.attempt = 1
        self.slept_for = 0.0

    def continue_or_propagate(self, error: RetryableError) -> float:
        if self.attempt >= self.max_attempts:
            raise error
        self.attempt += 1

        if error.retry_after is not None:
            interval = (error.retry_after - datetime.now(timezone.utc)).total_seconds()
            interval = max(0.0, min(interval, self.max_period))
        else:
            interval = self.next_max_interval()
        self.slept_for += interval
        return interval

    def next_max_interval(self) -> float:
        interval = self.period * 1.5 ** (self.attempt - 1)
        return min(interval, self.max_period)

    def clone(self) -> DefaultRetryer:
        return DefaultRetryer(self.period, self.max_period, self.max_attempts)


class NeverRetry:
    """Stateless: every error propagates on first failure."""

    def continue_or_propagate(self, error: RetryableError) -> float:
        raise error

    def clone(self) -> NeverRetry:
        return self
