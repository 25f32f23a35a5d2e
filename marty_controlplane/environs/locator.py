"""
Endpoint location.

Produces the connection descriptor for a cluster's control plane API:
dialable addresses, the CA certificate to trust and the cluster identity.
"""

from dataclasses import dataclass
from typing import Optional

from ..clock import Clock
from ..config import ControlPlaneConfig
from ..exceptions import ConfigurationError
from ..logger import RequestLogger, get_logger
from ..metrics import ControlPlaneMetrics
from ..network import addresses_with_port, host_ports_to_strings
from ..resilience import AttemptStrategy
from .provider import Environ
from .resolver import ADDRESSES_REFRESH_ATTEMPT, resolve_addresses

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClusterTag:
    """Identity of a cluster."""

    uuid: str

    kind = "cluster"

    def __str__(self) -> str:
        return f"{self.kind}-{self.uuid}"


@dataclass(frozen=True)
class EndpointDescriptor:
    """Everything needed to connect to a cluster's control plane API."""

    addrs: tuple[str, ...]
    ca_cert: bytes
    cluster_tag: ClusterTag


async def locate_endpoint(
    environ: Environ,
    strategy: AttemptStrategy = ADDRESSES_REFRESH_ATTEMPT,
    clock: Optional[Clock] = None,
    metrics: Optional[ControlPlaneMetrics] = None,
) -> EndpointDescriptor:
    """Resolve the control plane endpoint of ``environ``.

    Addresses are refreshed on ``strategy``; ``EndpointLocator`` takes it
    from configuration instead. Errors from the instance listing and
    ``AddressesNotFoundError`` propagate unchanged. A missing CA certificate
    or cluster uuid raises ``ConfigurationError``.
    """
    with RequestLogger(logger, "locate_endpoint"):
        instance_ids = await environ.state_server_instances()
        logger.debug("State server instances", instance_ids=instance_ids)

        addrs = await resolve_addresses(
            environ, instance_ids, strategy, clock=clock, metrics=metrics
        )

        config = environ.config
        ca_cert = config.ca_cert_bytes()
        if ca_cert is None:
            raise ConfigurationError(
                "config has no CA certificate", error_code="MISSING_CA_CERT"
            )
        if not config.has_uuid:
            raise ConfigurationError("config has no UUID", error_code="MISSING_UUID")

        api_addrs = host_ports_to_strings(addresses_with_port(addrs, config.api_port))
        return EndpointDescriptor(
            addrs=tuple(api_addrs),
            ca_cert=ca_cert,
            cluster_tag=ClusterTag(config.uuid),
        )


class EndpointLocator:
    """Locates endpoints with the refresh schedule of a ``ControlPlaneConfig``."""

    def __init__(
        self,
        environ: Environ,
        config: ControlPlaneConfig,
        clock: Optional[Clock] = None,
        metrics: Optional[ControlPlaneMetrics] = None,
    ):
        self.environ = environ
        self.strategy = config.addresses_refresh.to_strategy()
        self.clock = clock
        self.metrics = metrics

    async def locate(self) -> EndpointDescriptor:
        return await locate_endpoint(
            self.environ, self.strategy, clock=self.clock, metrics=self.metrics
        )
