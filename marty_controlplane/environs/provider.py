"""
Provider capability.

The minimal view of a cloud provider the control plane needs: look instances
up by id, start and stop instances, and name the instances hosting the
control plane API. ``InMemoryEnviron`` implements it for development and
testing.
"""

import builtins
import itertools
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Optional, Protocol, runtime_checkable

from ..config import ClusterConfig
from ..exceptions import NoInstancesError, NotFoundError, PartialInstancesError
from ..logger import get_logger
from ..network import Address

logger = get_logger(__name__)


@runtime_checkable
class Instance(Protocol):
    """A provisioned instance."""

    @property
    def id(self) -> str: ...

    async def addresses(self) -> builtins.list[Address]: ...


class Environ(ABC):
    """Cloud provider environment."""

    @property
    @abstractmethod
    def config(self) -> ClusterConfig:
        """Return the cluster configuration of this environment."""

    @abstractmethod
    async def instances(self, ids: Sequence[str]) -> dict[str, Instance]:
        """Look up instances by id.

        Missing instances are absent from the result. When some but not all
        ids exist, raises ``PartialInstancesError`` carrying the found ones;
        when none exist, raises ``NoInstancesError``.
        """

    @abstractmethod
    async def start_instance(self, machine_id: str) -> Instance:
        """Provision a new instance."""

    @abstractmethod
    async def stop_instances(self, ids: Iterable[str]) -> None:
        """Destroy instances. Unknown ids are ignored."""

    @abstractmethod
    async def state_server_instances(self) -> builtins.list[str]:
        """Return the ids of instances hosting the control plane API."""


class InMemoryInstance:
    """Instance held by ``InMemoryEnviron``."""

    def __init__(self, instance_id: str, machine_id: str):
        self._id = instance_id
        self.machine_id = machine_id
        self._addresses: builtins.list[Address] = []

    @property
    def id(self) -> str:
        return self._id

    def set_addresses(self, *addresses: Address | str) -> None:
        """Publish the addresses of this instance."""
        self._addresses = [
            a if isinstance(a, Address) else Address(a) for a in addresses
        ]

    async def addresses(self) -> builtins.list[Address]:
        return list(self._addresses)

    def __repr__(self) -> str:
        return f"InMemoryInstance({self._id!r})"


class InMemoryEnviron(Environ):
    """Dict-backed environment for development and testing."""

    def __init__(self, config: Optional[ClusterConfig] = None):
        self._config = config or ClusterConfig()
        self._instances: dict[str, InMemoryInstance] = {}
        self._state_servers: builtins.list[str] = []
        self._ids = itertools.count()

    @property
    def config(self) -> ClusterConfig:
        return self._config

    def set_config(self, config: ClusterConfig) -> None:
        self._config = config

    async def instances(self, ids: Sequence[str]) -> dict[str, Instance]:
        if not ids:
            return {}
        found = {i: self._instances[i] for i in ids if i in self._instances}
        if not found:
            raise NoInstancesError(ids)
        if len(found) < len(set(ids)):
            missing = [i for i in ids if i not in found]
            raise PartialInstancesError(found, missing)
        return found

    async def start_instance(self, machine_id: str) -> InMemoryInstance:
        instance = InMemoryInstance(f"i-{next(self._ids)}", machine_id)
        self._instances[instance.id] = instance
        logger.debug("Instance started", instance_id=instance.id, machine_id=machine_id)
        return instance

    async def stop_instances(self, ids: Iterable[str]) -> None:
        for instance_id in ids:
            if self._instances.pop(instance_id, None) is not None:
                logger.debug("Instance stopped", instance_id=instance_id)

    async def bootstrap(self) -> InMemoryInstance:
        """Start the first control plane instance."""
        instance = await self.start_instance("0")
        self._state_servers.append(instance.id)
        return instance

    def add_state_server(self, instance_id: str) -> None:
        if instance_id not in self._instances:
            raise NotFoundError(f"instance {instance_id} not found")
        self._state_servers.append(instance_id)

    async def state_server_instances(self) -> builtins.list[str]:
        if not self._state_servers:
            raise NotFoundError("environment is not bootstrapped")
        return list(self._state_servers)

    def get(self, instance_id: str) -> Optional[InMemoryInstance]:
        return self._instances.get(instance_id)
