"""
Watch bridging for the Marty control plane.

Turns a request/response watch protocol into a long-lived local worker.
"""

from .session import RemoteWatchSession, WatchSessionHandle
from .worker import Change, WatchWorker, WorkerState, start_watching, stop_worker

__all__ = [
    "Change",
    "RemoteWatchSession",
    "WatchSessionHandle",
    "WatchWorker",
    "WorkerState",
    "start_watching",
    "stop_worker",
]
