"""
Tests for the testing helpers shipped with the package.
"""

import pytest

from marty_controlplane.testing import ManualClock, Stub, StubCall, wait_for_calls


class TestStub:
    def test_records_calls(self):
        stub = Stub()
        stub.add_call("open")
        stub.add_call("next", "abc")

        stub.check_calls([StubCall("open"), StubCall("next", ("abc",))])
        stub.check_call_names("open", "next")

    def test_mismatch_raises(self):
        stub = Stub()
        stub.add_call("open")

        with pytest.raises(AssertionError, match="expected"):
            stub.check_calls([StubCall("stop")])
        with pytest.raises(AssertionError, match="expected"):
            stub.check_call_names("open", "next")

    def test_errors_are_returned_in_order(self):
        stub = Stub()
        boom = RuntimeError("boom")
        stub.set_errors(None, boom)

        assert stub.next_err() is None
        assert stub.next_err() is boom
        assert stub.next_err() is None

    def test_reset_calls(self):
        stub = Stub()
        stub.add_call("open")
        stub.reset_calls()

        stub.check_call_names()


class TestWaitForCalls:
    @pytest.mark.asyncio
    async def test_gives_up_without_real_waiting(self):
        clock = ManualClock()

        assert not await wait_for_calls(Stub(), 1, clock=clock)
        assert clock.now() > 9.9

    @pytest.mark.asyncio
    async def test_returns_once_recorded(self):
        stub = Stub()
        stub.add_call("open")

        assert await wait_for_calls(stub, 1)
