"""
Time sources.

Everything that waits in this package waits through a ``Clock`` so tests can
swap in a virtual one (see ``marty_controlplane.testing.ManualClock``).
"""

import asyncio
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Abstract time source."""

    @abstractmethod
    def now(self) -> float:
        """Return the current time in seconds."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for ``seconds``."""


class SystemClock(Clock):
    """Wall clock backed by ``time.monotonic`` and ``asyncio.sleep``."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


SYSTEM_CLOCK = SystemClock()
