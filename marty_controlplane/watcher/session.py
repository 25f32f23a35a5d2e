"""
Remote watch session contract.

A remote API exposes change notification as three request/response calls:
open a session, block for the next change, stop the session. Implementations
bind the contract to a transport; ``marty_controlplane.api`` provides the
facade-call binding.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class WatchSessionHandle:
    """Opaque identifier of an open watch session.

    Owned by the worker that opened it and invalid once the session is
    stopped.
    """

    id: str

    def __str__(self) -> str:
        return self.id


class RemoteWatchSession(ABC):
    """Polling-based change notification protocol of a remote API."""

    @abstractmethod
    async def open(self) -> WatchSessionHandle:
        """Start a session.

        Raises the transport error on failure. Must not start any background
        activity.
        """

    @abstractmethod
    async def next(self, handle: WatchSessionHandle) -> None:
        """Block until the next change is available.

        Returns normally when a change was delivered and raises once the
        session is no longer usable, whether the remote side observed a stop
        or the transport failed.
        """

    @abstractmethod
    async def stop(self, handle: WatchSessionHandle) -> None:
        """Ask the remote side to close the session.

        Idempotent and allowed after the session has failed. Errors are
        advisory.
        """
