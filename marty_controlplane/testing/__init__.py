"""
Test helpers for code built on the Marty control plane.

- ``ManualClock``: a virtual clock so attempt strategies run without real
  delays.
- ``Stub``: records calls made to fakes and hands out queued errors.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

from ..clock import Clock
from ..resilience import AttemptStrategy

# Polling schedule for conditions another task satisfies asynchronously.
LONG_ATTEMPT = AttemptStrategy(total=10.0, delay=0.01)


class ManualClock(Clock):
    """Virtual clock advanced by ``sleep`` and ``advance``.

    ``sleep`` moves time forward immediately and yields to the event loop
    once, so other tasks make progress while a caller "waits".
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


@dataclass(frozen=True)
class StubCall:
    """A call recorded by a Stub."""

    func_name: str
    args: tuple = field(default_factory=tuple)


class Stub:
    """Call recorder for fakes."""

    def __init__(self):
        self._calls: list[StubCall] = []
        self._errors: list[Optional[BaseException]] = []

    def add_call(self, func_name: str, *args: Any) -> None:
        self._calls.append(StubCall(func_name, args))

    def calls(self) -> list[StubCall]:
        return list(self._calls)

    def call_names(self) -> list[str]:
        return [call.func_name for call in self._calls]

    def set_errors(self, *errors: Optional[BaseException]) -> None:
        """Queue errors returned, in order, by ``next_err``. None means no error."""
        self._errors = list(errors)

    def next_err(self) -> Optional[BaseException]:
        if not self._errors:
            return None
        return self._errors.pop(0)

    def check_calls(self, expected: list[StubCall]) -> None:
        actual = self.calls()
        if actual != list(expected):
            raise AssertionError(f"calls {actual} != expected {expected}")

    def check_call_names(self, *expected: str) -> None:
        actual = self.call_names()
        if actual != list(expected):
            raise AssertionError(f"calls {actual} != expected {list(expected)}")

    def reset_calls(self) -> None:
        self._calls.clear()


async def wait_for_calls(
    stub: Stub, count: int, clock: Optional[Clock] = None
) -> bool:
    """Poll until ``stub`` has recorded at least ``count`` calls.

    With a ManualClock the polling costs no real time.
    """
    attempt = LONG_ATTEMPT.start(clock or ManualClock())
    while await attempt.next():
        if len(stub.calls()) >= count:
            return True
    return False


__all__ = ["LONG_ATTEMPT", "ManualClock", "Stub", "StubCall", "wait_for_calls"]
