"""
Watch worker.

Bridges a ``RemoteWatchSession`` into a supervised background task. The task
polls ``next`` and publishes each change as the worker's latest change, so
consumers are decoupled from the transport's blocking call. Changes carry no
payload: a consumer that falls behind sees the most recent one, and a worker
nobody consumes holds a single change however long it runs. Whatever ends the task, it
issues exactly one transport ``stop`` for the session it owns.

State machine::

    CREATED -> RUNNING -> TERMINATING -> DEAD

``stop()`` is advisory: it never touches the transport and never interrupts
an in-flight ``next``. The task notices it once that call returns.
"""

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..logger import get_logger
from ..metrics import ControlPlaneMetrics
from .session import RemoteWatchSession, WatchSessionHandle

logger = get_logger(__name__)


class WorkerState(str, Enum):
    """Watch worker lifecycle states."""

    CREATED = "created"
    RUNNING = "running"
    TERMINATING = "terminating"
    DEAD = "dead"


@dataclass(frozen=True)
class Change:
    """A change notification delivered by a watch session."""

    handle: WatchSessionHandle
    sequence: int


class WatchWorker:
    """Owns one watch session and the background task polling it.

    Create workers with ``start_watching``; the constructor does not start
    anything.
    """

    def __init__(
        self,
        session: RemoteWatchSession,
        handle: WatchSessionHandle,
        metrics: Optional[ControlPlaneMetrics] = None,
    ):
        self._session = session
        self._handle = handle
        self._metrics = metrics
        self._state = WorkerState.CREATED
        self._stop_requested = asyncio.Event()
        self._dead = asyncio.Event()
        self._error: Optional[BaseException] = None
        self._latest: Optional[Change] = None
        self._wakeup = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._teardown_task: Optional[asyncio.Task] = None

    @property
    def handle(self) -> WatchSessionHandle:
        return self._handle

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def error(self) -> Optional[BaseException]:
        """Terminal error; only meaningful once the worker is dead."""
        return self._error

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def _start(self) -> None:
        if self._state is not WorkerState.CREATED:
            raise RuntimeError(f"watch worker already started ({self._state.value})")
        self._state = WorkerState.RUNNING
        self._task = asyncio.create_task(
            self._loop(), name=f"watch-worker-{self._handle.id}"
        )
        logger.debug("Watch worker started", handle=self._handle.id)

    def stop(self) -> None:
        """Request the worker to exit after its current ``next`` returns.

        Idempotent, and a no-op once the worker is dead.
        """
        if self._state is WorkerState.DEAD or self._stop_requested.is_set():
            return
        self._stop_requested.set()
        logger.debug("Watch worker stop requested", handle=self._handle.id)

    async def wait(self) -> Optional[BaseException]:
        """Wait for the worker to die and return its terminal error.

        Returns None for a clean, caller-requested exit. Every caller gets the
        same value.
        """
        await self._dead.wait()
        return self._error

    @property
    def sequence(self) -> int:
        """Number of changes published so far."""
        return self._latest.sequence if self._latest else 0

    async def changes(self) -> AsyncIterator[Change]:
        """Yield changes in sequence order until the worker dies.

        Changes published while the consumer is busy are coalesced into the
        latest one. Each iteration tracks its own position, so several
        consumers may iterate at once.
        """
        seen = 0
        while True:
            latest = self._latest
            if latest is not None and latest.sequence > seen:
                seen = latest.sequence
                yield latest
                continue
            if self._dead.is_set():
                return
            self._wakeup.clear()
            await self._wakeup.wait()

    async def _loop(self) -> None:
        error: Optional[BaseException] = None
        try:
            while not self._stop_requested.is_set():
                try:
                    await self._session.next(self._handle)
                except Exception as exc:
                    error = exc
                    break
                self._publish()
        finally:
            self._terminate(error)

    def _publish(self) -> None:
        self._latest = Change(self._handle, self.sequence + 1)
        self._wakeup.set()
        if self._metrics:
            self._metrics.record_notification()

    def _terminate(self, error: Optional[BaseException]) -> None:
        self._state = WorkerState.TERMINATING
        # The remote stop runs on its own; the worker reports dead without
        # waiting for it.
        self._teardown_task = asyncio.get_running_loop().create_task(
            self._stop_session(), name=f"watch-stop-{self._handle.id}"
        )
        self._error = error
        self._state = WorkerState.DEAD
        self._dead.set()
        self._wakeup.set()

        if self._metrics:
            self._metrics.record_termination(failed=error is not None)
        if error is not None:
            logger.debug(
                "Watch worker died", handle=self._handle.id, error=str(error)
            )
        else:
            logger.debug("Watch worker stopped", handle=self._handle.id)

    async def _stop_session(self) -> None:
        try:
            await self._session.stop(self._handle)
        except Exception as exc:
            # Never replaces the terminal error
            logger.warning(
                "Failed to stop watch session", handle=self._handle.id, error=str(exc)
            )
            if self._metrics:
                self._metrics.record_stop_failure()


async def start_watching(
    session: RemoteWatchSession, metrics: Optional[ControlPlaneMetrics] = None
) -> WatchWorker:
    """Open a watch session and start a worker for it.

    An open failure propagates unchanged and nothing is started.
    """
    handle = await session.open()
    worker = WatchWorker(session, handle, metrics=metrics)
    worker._start()
    return worker


async def stop_worker(worker: WatchWorker) -> Optional[BaseException]:
    """Stop ``worker`` and wait for it to die, returning its terminal error."""
    worker.stop()
    return await worker.wait()
