"""
Resilience patterns for the Marty control plane.

This module provides the attempt strategy: a bounded retry schedule defined
by a total duration and a fixed delay between attempts.

Usage:
    >>> strategy = AttemptStrategy(total=180, delay=1)
    >>> attempt = strategy.start()
    >>> while await attempt.next():
    ...     if await try_something():
    ...         break
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Optional

from ..clock import SYSTEM_CLOCK, Clock


@dataclass(frozen=True)
class AttemptStrategy:
    """Retry schedule: keep trying for ``total`` seconds, ``delay`` apart.

    ``min_attempts`` forces that many attempts even after the deadline.
    """

    total: float
    delay: float
    min_attempts: int = 0

    def __post_init__(self) -> None:
        if self.total < 0:
            raise ValueError("attempt total must not be negative")
        if self.delay < 0:
            raise ValueError("attempt delay must not be negative")
        if self.min_attempts < 0:
            raise ValueError("min_attempts must not be negative")
        if self.total > 0 and self.delay == 0:
            raise ValueError("attempt delay must be positive when total is set")

    def start(self, clock: Optional[Clock] = None) -> "Attempt":
        """Begin a new sequence of attempts."""
        return Attempt(self, clock or SYSTEM_CLOCK)


class Attempt:
    """Cursor over one run of an ``AttemptStrategy``.

    Owned by a single caller; not safe to share between concurrent tasks.
    """

    def __init__(self, strategy: AttemptStrategy, clock: Clock):
        self.strategy = strategy
        self._clock = clock
        now = clock.now()
        self._end = now + strategy.total
        self._last = now
        self._force = True
        self.count = 0

    def _next_sleep(self, now: float) -> float:
        return max(0.0, self.strategy.delay - (now - self._last))

    async def next(self) -> bool:
        """Wait for the next attempt.

        The first call returns ``True`` immediately. Later calls sleep until
        ``delay`` has passed since the previous attempt and return ``True``,
        or return ``False`` without sleeping once that would cross the
        deadline. A later call that returns ``True`` always suspends, so a
        retry loop never starves the event loop.
        """
        now = self._clock.now()
        sleep = self._next_sleep(now)
        if (
            not self._force
            and now + sleep >= self._end
            and self.count >= self.strategy.min_attempts
        ):
            return False
        self._force = False
        if self.count > 0:
            # Yields even when the previous attempt used up the delay
            await self._clock.sleep(sleep)
            now = self._clock.now()
        self.count += 1
        self._last = now
        return True

    def has_next(self) -> bool:
        """Report whether ``next`` would return ``True``, without waiting."""
        if self._force or self.strategy.min_attempts > self.count:
            return True
        now = self._clock.now()
        return now + self._next_sleep(now) < self._end

    def __aiter__(self) -> AsyncIterator[int]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[int]:
        while await self.next():
            yield self.count


__all__ = ["Attempt", "AttemptStrategy"]
