"""
Unit test specific fixtures and utilities.

Fakes for the transport collaborators of the control plane: a scripted watch
session, a scripted instance lookup and a virtual clock.
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import pytest
from prometheus_client import CollectorRegistry

from marty_controlplane.config import ClusterConfig
from marty_controlplane.environs import InMemoryEnviron
from marty_controlplane.metrics import ControlPlaneMetrics
from marty_controlplane.network import Address
from marty_controlplane.testing import ManualClock, Stub
from marty_controlplane.watcher import RemoteWatchSession, WatchSessionHandle

TEST_CA_CERT = "-----BEGIN CERTIFICATE-----\nMIIBfake\n-----END CERTIFICATE-----\n"
TEST_UUID = "deadbeef-0bad-400d-8000-4b1d0d06f00d"


class FakeWatchSession(RemoteWatchSession):
    """Watch session whose ``next`` results are fed by the test."""

    def __init__(
        self,
        stub: Stub,
        handle_id: str = "abc",
        open_error: Optional[Exception] = None,
        stop_error: Optional[Exception] = None,
    ):
        self.stub = stub
        self.handle_id = handle_id
        self.open_error = open_error
        self.stop_error = stop_error
        self._results: asyncio.Queue = asyncio.Queue()

    def deliver(self, count: int = 1) -> None:
        """Let ``count`` pending or future ``next`` calls return a change."""
        for _ in range(count):
            self._results.put_nowait(None)

    def fail(self, error: Exception) -> None:
        """Make the pending or next ``next`` call raise ``error``."""
        self._results.put_nowait(error)

    async def open(self) -> WatchSessionHandle:
        self.stub.add_call("open")
        if self.open_error is not None:
            raise self.open_error
        return WatchSessionHandle(self.handle_id)

    async def next(self, handle: WatchSessionHandle) -> None:
        self.stub.add_call("next", handle.id)
        result = await self._results.get()
        if result is not None:
            raise result

    async def stop(self, handle: WatchSessionHandle) -> None:
        self.stub.add_call("stop", handle.id)
        if self.stop_error is not None:
            raise self.stop_error


class FakeInstance:
    def __init__(self, instance_id: str, addresses: Sequence[str] = (), error=None):
        self.id = instance_id
        self._addresses = [Address(a) for a in addresses]
        self._error = error

    async def addresses(self) -> list[Address]:
        if self._error is not None:
            raise self._error
        return list(self._addresses)


class ScriptedLookup:
    """Instance lookup returning one scripted result per call.

    Each script entry is a mapping of instance id to addresses, or an
    exception to raise. The last entry repeats once the script runs out.
    """

    def __init__(self, *script: Any):
        self.script = list(script)
        self.stub = Stub()

    async def instances(self, ids: Sequence[str]) -> Mapping[str, FakeInstance]:
        self.stub.add_call("instances", list(ids))
        index = min(len(self.stub.calls()), len(self.script)) - 1
        entry = self.script[index]
        if isinstance(entry, BaseException):
            raise entry
        return {
            instance_id: FakeInstance(instance_id, addrs)
            for instance_id, addrs in entry.items()
        }


@pytest.fixture
def stub():
    return Stub()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def metrics():
    return ControlPlaneMetrics(registry=CollectorRegistry())


@pytest.fixture
def make_session(stub):
    """Factory for FakeWatchSession sharing the test stub."""

    def factory(**kwargs):
        return FakeWatchSession(stub, **kwargs)

    return factory


@pytest.fixture
def session(make_session):
    return make_session()


@pytest.fixture
def scripted_lookup():
    """Factory for ScriptedLookup."""
    return ScriptedLookup


@pytest.fixture
def cluster_config():
    return ClusterConfig(name="test", uuid=TEST_UUID, ca_cert=TEST_CA_CERT)


@pytest.fixture
def environ(cluster_config):
    return InMemoryEnviron(cluster_config)
