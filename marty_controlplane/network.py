"""
Network address types.

Addresses reported by instances and the helpers that pair them with a port
to produce dialable ``host:port`` strings.
"""

import ipaddress
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class AddressType(str, Enum):
    """Kind of value held by an Address."""

    HOSTNAME = "hostname"
    IPV4 = "ipv4"
    IPV6 = "ipv6"


class Scope(str, Enum):
    """Reachability of an address."""

    UNKNOWN = "unknown"
    PUBLIC = "public"
    CLOUD_LOCAL = "local-cloud"
    MACHINE_LOCAL = "local-machine"


def derive_address_type(value: str) -> AddressType:
    """Return the AddressType matching ``value``."""
    try:
        ip = ipaddress.ip_address(value)
    except ValueError:
        return AddressType.HOSTNAME
    return AddressType.IPV6 if ip.version == 6 else AddressType.IPV4


@dataclass(frozen=True)
class Address:
    """A network address reported by an instance."""

    value: str
    type: AddressType = field(default=None)  # type: ignore[assignment]
    scope: Scope = Scope.UNKNOWN

    def __post_init__(self) -> None:
        if self.type is None:
            object.__setattr__(self, "type", derive_address_type(self.value))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HostPort:
    """An address paired with a port."""

    address: Address
    port: int

    def net_addr(self) -> str:
        """Return the ``host:port`` form, bracketing IPv6 hosts."""
        if self.address.type == AddressType.IPV6:
            return f"[{self.address.value}]:{self.port}"
        return f"{self.address.value}:{self.port}"

    def __str__(self) -> str:
        return self.net_addr()


def new_addresses(*values: str) -> list[Address]:
    return [Address(value) for value in values]


def addresses_with_port(addrs: Iterable[Address], port: int) -> list[HostPort]:
    """Pair every address with ``port``, keeping order."""
    return [HostPort(addr, port) for addr in addrs]


def host_ports_to_strings(host_ports: Iterable[HostPort]) -> list[str]:
    """Render host ports as ``host:port`` strings, keeping order and duplicates."""
    return [hp.net_addr() for hp in host_ports]


__all__ = [
    "Address",
    "AddressType",
    "HostPort",
    "Scope",
    "addresses_with_port",
    "derive_address_type",
    "host_ports_to_strings",
    "new_addresses",
]
