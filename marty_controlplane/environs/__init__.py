"""
Cluster environments: provider capability, address resolution and endpoint
location.
"""

from .locator import ClusterTag, EndpointDescriptor, EndpointLocator, locate_endpoint
from .provider import Environ, InMemoryEnviron, InMemoryInstance, Instance
from .resolver import (
    ADDRESSES_REFRESH_ATTEMPT,
    InstanceLookup,
    get_addresses,
    resolve_addresses,
)

__all__ = [
    "ADDRESSES_REFRESH_ATTEMPT",
    "ClusterTag",
    "EndpointDescriptor",
    "EndpointLocator",
    "Environ",
    "InMemoryEnviron",
    "InMemoryInstance",
    "Instance",
    "InstanceLookup",
    "get_addresses",
    "locate_endpoint",
    "resolve_addresses",
]
