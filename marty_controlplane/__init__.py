"""
Marty Control Plane - watch bridging and endpoint resolution

Control plane primitives for cluster orchestration, providing the pieces that
let local workers react to changes published by a remote management API and
that resolve working endpoints for provisioned instances.

Key Features:
- Watch workers bridging request/response watch sessions into background tasks
- Attempt strategies with injectable clocks
- Address resolution tolerating instances that have not reported addresses yet
- Endpoint location producing addresses, CA certificate and cluster identity
- Unified configuration (YAML, env vars) and structured logging

Usage:
    >>> from marty_controlplane import FacadeClient, locate_endpoint
    >>> worker = await FacadeClient(caller, "MigrationMaster").watch()
    >>> async for change in worker.changes():
    ...     react(change)
    >>> endpoint = await locate_endpoint(environ)
"""

__version__ = "0.1.0"
__author__ = "Marty Team"
__email__ = "team@marty.dev"

# Facade binding
from .api import APICallerFunc, FacadeClient, FacadeWatchSession

# Time and retries
from .clock import Clock, SystemClock

# Configuration system
from .config import ClusterConfig, ControlPlaneConfig, load_config

# Environments and endpoint resolution
from .environs import (
    ADDRESSES_REFRESH_ATTEMPT,
    ClusterTag,
    EndpointDescriptor,
    EndpointLocator,
    Environ,
    InMemoryEnviron,
    locate_endpoint,
    resolve_addresses,
)

# Exceptions
from .exceptions import (
    AddressesNotFoundError,
    APIError,
    ConfigurationError,
    ControlPlaneError,
    NoInstancesError,
    NotFoundError,
    PartialInstancesError,
)

# Logging
from .logger import RequestLogger, get_logger, setup_logging
from .metrics import ControlPlaneMetrics
from .network import Address, HostPort
from .resilience import Attempt, AttemptStrategy

# Watch bridging
from .watcher import (
    RemoteWatchSession,
    WatchSessionHandle,
    WatchWorker,
    WorkerState,
    start_watching,
    stop_worker,
)

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__email__",
    # Watch bridging
    "RemoteWatchSession",
    "WatchSessionHandle",
    "WatchWorker",
    "WorkerState",
    "start_watching",
    "stop_worker",
    "APICallerFunc",
    "FacadeClient",
    "FacadeWatchSession",
    # Endpoint resolution
    "ADDRESSES_REFRESH_ATTEMPT",
    "Address",
    "HostPort",
    "ClusterTag",
    "EndpointDescriptor",
    "EndpointLocator",
    "Environ",
    "InMemoryEnviron",
    "locate_endpoint",
    "resolve_addresses",
    # Time and retries
    "Attempt",
    "AttemptStrategy",
    "Clock",
    "SystemClock",
    # Configuration
    "ClusterConfig",
    "ControlPlaneConfig",
    "load_config",
    # Logging and metrics
    "RequestLogger",
    "get_logger",
    "setup_logging",
    "ControlPlaneMetrics",
    # Exceptions
    "ControlPlaneError",
    "ConfigurationError",
    "NotFoundError",
    "AddressesNotFoundError",
    "PartialInstancesError",
    "NoInstancesError",
    "APIError",
]
