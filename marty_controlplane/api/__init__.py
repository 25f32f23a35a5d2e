"""
Facade-call binding of the remote watch protocol.

The remote API is reached through an ``APICaller``: a coroutine taking the
facade name, facade version, object id, request name and argument, and
returning the decoded result. Watches are opened on ``<facade>.Watch`` and
polled and stopped on ``<facade>Watcher.Next`` / ``<facade>Watcher.Stop``.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Optional, Protocol, Union

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import APIError
from ..logger import get_logger
from ..metrics import ControlPlaneMetrics
from ..watcher import RemoteWatchSession, WatchSessionHandle, WatchWorker, start_watching

logger = get_logger(__name__)


class APICaller(Protocol):
    """Transport used to make facade calls."""

    async def __call__(
        self, facade: str, version: int, id: str, request: str, arg: Any
    ) -> Any: ...


class APICallerFunc:
    """Adapt a plain function, sync or async, to the APICaller protocol."""

    def __init__(
        self, func: Callable[[str, int, str, str, Any], Union[Any, Awaitable[Any]]]
    ):
        self._func = func

    async def __call__(
        self, facade: str, version: int, id: str, request: str, arg: Any
    ) -> Any:
        result = self._func(facade, version, id, request, arg)
        if inspect.isawaitable(result):
            result = await result
        return result


class ErrorResult(BaseModel):
    """Error carried inside a facade result."""

    message: str
    code: str = ""


class NotifyWatchResult(BaseModel):
    """Result of a Watch call."""

    notify_watcher_id: str = Field(default="", alias="NotifyWatcherId")
    error: Optional[ErrorResult] = Field(default=None, alias="Error")

    model_config = {"populate_by_name": True}


class FacadeWatchSession(RemoteWatchSession):
    """Remote watch session spoken over facade calls."""

    def __init__(self, caller: APICaller, facade: str, version: int = 1):
        self.caller = caller
        self.facade = facade
        self.version = version

    @property
    def watcher_facade(self) -> str:
        return f"{self.facade}Watcher"

    async def open(self) -> WatchSessionHandle:
        raw = await self.caller(self.facade, self.version, "", "Watch", None)
        try:
            result = NotifyWatchResult.model_validate(raw or {})
        except ValidationError as e:
            raise APIError(f"malformed {self.facade}.Watch result: {e}") from e
        if result.error is not None:
            raise APIError(result.error.message, error_code=result.error.code or None)
        if not result.notify_watcher_id:
            raise APIError(f"{self.facade}.Watch returned no watcher id")
        logger.debug(
            "Watch session opened",
            facade=self.facade,
            handle=result.notify_watcher_id,
        )
        return WatchSessionHandle(result.notify_watcher_id)

    async def next(self, handle: WatchSessionHandle) -> None:
        await self.caller(self.watcher_facade, self.version, handle.id, "Next", None)

    async def stop(self, handle: WatchSessionHandle) -> None:
        await self.caller(self.watcher_facade, self.version, handle.id, "Stop", None)


class FacadeClient:
    """Client for a facade that supports watching."""

    def __init__(
        self,
        caller: APICaller,
        facade: str,
        version: int = 1,
        metrics: Optional[ControlPlaneMetrics] = None,
    ):
        self.session = FacadeWatchSession(caller, facade, version)
        self.metrics = metrics

    async def watch(self) -> WatchWorker:
        """Start watching the facade. Open failures propagate unchanged."""
        return await start_watching(self.session, metrics=self.metrics)


__all__ = [
    "APICaller",
    "APICallerFunc",
    "ErrorResult",
    "FacadeClient",
    "FacadeWatchSession",
    "NotifyWatchResult",
]
