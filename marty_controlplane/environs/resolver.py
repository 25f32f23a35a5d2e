"""
Address resolution.

Instances come up before they report network addresses. The resolver keeps
asking for them, on an attempt strategy, until at least one instance has an
address or the budget runs out.
"""

import builtins
from collections.abc import Mapping, Sequence
from typing import Optional, Protocol

from ..clock import SYSTEM_CLOCK, Clock
from ..exceptions import AddressesNotFoundError, PartialInstancesError
from ..logger import get_logger
from ..metrics import ControlPlaneMetrics
from ..network import Address
from ..resilience import AttemptStrategy
from .provider import Instance

logger = get_logger(__name__)

# Attempt strategy used when refreshing instance addresses.
ADDRESSES_REFRESH_ATTEMPT = AttemptStrategy(total=180.0, delay=1.0)


class InstanceLookup(Protocol):
    async def instances(self, ids: Sequence[str]) -> Mapping[str, Instance]: ...


async def get_addresses(
    instance_ids: Sequence[str], instances: Mapping[str, Instance]
) -> builtins.list[Address]:
    """Concatenate the addresses of ``instances`` in ``instance_ids`` order.

    Absent instances and instances failing to report addresses are skipped.
    """
    all_addrs: builtins.list[Address] = []
    for instance_id in instance_ids:
        instance = instances.get(instance_id)
        if instance is None:
            continue
        try:
            addrs = await instance.addresses()
        except Exception as exc:
            logger.debug(
                "Failed to get instance addresses (ignoring)",
                instance_id=instance_id,
                error=str(exc),
            )
            continue
        all_addrs.extend(addrs)
    return all_addrs


async def resolve_addresses(
    lookup: InstanceLookup,
    instance_ids: Sequence[str],
    strategy: AttemptStrategy = ADDRESSES_REFRESH_ATTEMPT,
    clock: Optional[Clock] = None,
    metrics: Optional[ControlPlaneMetrics] = None,
) -> builtins.list[Address]:
    """Wait for any of ``instance_ids`` to report addresses and return them.

    Raises ``AddressesNotFoundError`` when the strategy is exhausted without
    a single address. Lookup errors other than ``PartialInstancesError`` are
    raised immediately.
    """
    clock = clock or SYSTEM_CLOCK
    instance_ids = list(instance_ids)
    started = clock.now()
    addrs: builtins.list[Address] = []

    attempt = strategy.start(clock)
    while not addrs and await attempt.next():
        if metrics:
            metrics.record_resolution_attempt()
        try:
            instances = await lookup.instances(instance_ids)
        except PartialInstancesError as exc:
            instances = exc.instances
        except Exception as exc:
            logger.debug(
                "Error getting instances",
                instance_ids=instance_ids,
                error=str(exc),
            )
            if metrics:
                metrics.record_resolution("error", clock.now() - started)
            raise
        addrs = await get_addresses(instance_ids, instances)

    if not addrs:
        logger.warning(
            "No addresses found",
            instance_ids=instance_ids,
            attempts=attempt.count,
        )
        if metrics:
            metrics.record_resolution("not_found", clock.now() - started)
        raise AddressesNotFoundError(instance_ids)

    logger.debug(
        "Addresses resolved",
        instance_ids=instance_ids,
        addresses=[str(a) for a in addrs],
        attempts=attempt.count,
    )
    if metrics:
        metrics.record_resolution("found", clock.now() - started)
    return addrs
