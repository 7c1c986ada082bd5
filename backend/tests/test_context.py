"""
NegotiateAI Backend - Request Context Tests
============================================

What we test:
    ✅ bind() passes results through
    ✅ A client disconnect cancels the in-flight call and raises
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from negotiateai.context import RequestContext
from negotiateai.exceptions import ClientDisconnectedError


async def _value(result):
    return result


class TestBind:

    @pytest.mark.asyncio
    async def test_without_disconnect_check(self):
        ctx = RequestContext(request_id="r1")
        assert await ctx.bind(_value("done")) == "done"

    @pytest.mark.asyncio
    async def test_connected_client_gets_result(self):
        ctx = RequestContext(request_id="r1", is_disconnected=AsyncMock(return_value=False))
        assert await ctx.bind(_value(42)) == 42

    @pytest.mark.asyncio
    async def test_disconnect_cancels_call(self):
        cancelled = asyncio.Event()

        async def slow_call():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        ctx = RequestContext(request_id="r1", is_disconnected=AsyncMock(return_value=True))

        with patch("negotiateai.context.DISCONNECT_POLL_SECONDS", 0.01):
            with pytest.raises(ClientDisconnectedError):
                await ctx.bind(slow_call())

        await asyncio.wait_for(cancelled.wait(), timeout=1)
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_errors_from_call_propagate(self):
        async def failing():
            raise RuntimeError("boom")

        ctx = RequestContext(request_id="r1", is_disconnected=AsyncMock(return_value=False))
        with pytest.raises(RuntimeError):
            await ctx.bind(failing())
