"""
Tests for the in-memory provider.
"""

import pytest

from marty_controlplane.environs import Instance
from marty_controlplane.exceptions import (
    NoInstancesError,
    NotFoundError,
    PartialInstancesError,
)


class TestInMemoryEnviron:
    @pytest.mark.asyncio
    async def test_start_and_lookup(self, environ):
        first = await environ.start_instance("0")
        second = await environ.start_instance("1")

        found = await environ.instances([second.id, first.id])

        assert found == {first.id: first, second.id: second}
        assert isinstance(first, Instance)
        assert await first.addresses() == []

    @pytest.mark.asyncio
    async def test_partial_lookup(self, environ):
        instance = await environ.start_instance("0")

        with pytest.raises(PartialInstancesError) as exc_info:
            await environ.instances([instance.id, "i-missing"])

        assert exc_info.value.instances == {instance.id: instance}
        assert exc_info.value.missing == ["i-missing"]

    @pytest.mark.asyncio
    async def test_no_instances(self, environ):
        with pytest.raises(NoInstancesError):
            await environ.instances(["i-missing"])

    @pytest.mark.asyncio
    async def test_empty_lookup(self, environ):
        assert await environ.instances([]) == {}

    @pytest.mark.asyncio
    async def test_stop_instances(self, environ):
        instance = await environ.start_instance("0")
        await environ.stop_instances([instance.id, "i-unknown"])

        assert environ.get(instance.id) is None

    @pytest.mark.asyncio
    async def test_state_servers(self, environ):
        with pytest.raises(NotFoundError):
            await environ.state_server_instances()

        bootstrap = await environ.bootstrap()
        assert await environ.state_server_instances() == [bootstrap.id]

        with pytest.raises(NotFoundError):
            environ.add_state_server("i-unknown")

    @pytest.mark.asyncio
    async def test_addresses_published_later(self, environ):
        instance = await environ.start_instance("0")
        instance.set_addresses("10.0.0.1", "example.com")

        assert [a.value for a in await instance.addresses()] == [
            "10.0.0.1",
            "example.com",
        ]
