"""
Tests for network address helpers.
"""

from marty_controlplane.network import (
    Address,
    AddressType,
    HostPort,
    Scope,
    addresses_with_port,
    host_ports_to_strings,
    new_addresses,
)


class TestAddress:
    def test_type_is_derived(self):
        assert Address("10.0.0.1").type == AddressType.IPV4
        assert Address("2001:db8::1").type == AddressType.IPV6
        assert Address("example.com").type == AddressType.HOSTNAME

    def test_explicit_type_and_scope(self):
        addr = Address("10.0.0.1", AddressType.IPV4, Scope.CLOUD_LOCAL)
        assert addr.scope == Scope.CLOUD_LOCAL
        assert addr == Address("10.0.0.1", scope=Scope.CLOUD_LOCAL)


class TestHostPorts:
    def test_net_addr(self):
        assert HostPort(Address("10.0.0.1"), 17070).net_addr() == "10.0.0.1:17070"
        assert HostPort(Address("::1"), 17070).net_addr() == "[::1]:17070"

    def test_strings_keep_order_and_duplicates(self):
        addrs = new_addresses("10.0.0.2", "10.0.0.1", "10.0.0.2")

        strings = host_ports_to_strings(addresses_with_port(addrs, 443))

        assert strings == ["10.0.0.2:443", "10.0.0.1:443", "10.0.0.2:443"]
