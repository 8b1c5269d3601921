"""Tests for the WebSocket subscription endpoint logic."""

import asyncio
import json
import math
import random

import pytest

from tradefeed.market.models import Quote, Trade, TradeSide, TradeUpdate
from tradefeed.market.pipeline import FeedPipeline
from tradefeed.market.quote_source import QuoteSource
from tradefeed.market.stream import FeedSession, parse_control
from tradefeed.market.synthesizer import TradeSynthesizer


class FakeWebSocket:
    """Minimal stand-in for a Starlette WebSocket."""

    def __init__(self, fail_send=False):
        self.sent: list[str] = []
        self.inbound: asyncio.Queue = asyncio.Queue()
        self.fail_send = fail_send

    async def send_text(self, data):
        if self.fail_send:
            raise ConnectionResetError("peer closed")
        self.sent.append(data)

    async def receive(self):
        return await self.inbound.get()

    def client_sends(self, text):
        self.inbound.put_nowait({"type": "websocket.receive", "text": text})

    def client_sends_bytes(self, data):
        self.inbound.put_nowait({"type": "websocket.receive", "bytes": data})

    def client_disconnects(self):
        self.inbound.put_nowait({"type": "websocket.disconnect", "code": 1000})


def _update(price=150.0):
    q = Quote.from_prices("AAPL", "Apple Inc.", 150.0, 148.0)
    return TradeUpdate(quote=q, trades=(Trade("AAPL", price, 100, 1707580800000, TradeSide.BUY),))


def _pipeline(provider, cache):
    return FeedPipeline(
        QuoteSource(provider, cache),
        TradeSynthesizer(random.Random(0)),
        symbols=["AAPL", "MSFT"],
        interval=0.01,
    )


class TestParseControl:
    """Unit tests for inbound control parsing."""

    def test_json_actions(self):
        """Test JSON control actions."""
        assert parse_control('{"action": "pause"}') == "pause"
        assert parse_control('{"action": "resume"}') == "resume"
        assert parse_control('{"action": "TOGGLE"}') == "toggle"

    def test_bare_words(self):
        """Test bare-word control actions."""
        assert parse_control("pause") == "pause"
        assert parse_control("  Resume\n") == "resume"

    def test_malformed_ignored(self):
        """Test malformed controls parse to None."""
        assert parse_control("{not json") is None
        assert parse_control('{"action": 5}') is None
        assert parse_control('{"verb": "pause"}') is None
        assert parse_control("[1, 2]") is None
        assert parse_control("stop everything") is None
        assert parse_control(None) is None
        assert parse_control(b"pause") is None


@pytest.mark.asyncio
class TestFeedSession:
    """Unit tests for per-connection delivery and pause."""

    async def test_deliver_writes_json(self):
        """Test deliver sends the update as JSON text."""
        ws = FakeWebSocket()
        session = FeedSession(ws)
        await session.deliver(_update())

        message = json.loads(ws.sent[0])
        assert message["ticker"]["symbol"] == "AAPL"
        assert message["trades"][0]["type"] == "BUY"
        assert session.sent == 1

    async def test_paused_session_suppresses_writes(self):
        """Test a paused session sends nothing."""
        ws = FakeWebSocket()
        session = FeedSession(ws)
        session.apply_control('{"action": "pause"}')

        await session.deliver(_update())
        await session.deliver(_update())

        assert ws.sent == []
        assert session.suppressed == 2

    async def test_resume_restores_writes(self):
        """Test resume restores delivery."""
        ws = FakeWebSocket()
        session = FeedSession(ws)
        session.apply_control("pause")
        await session.deliver(_update())
        session.apply_control("resume")
        await session.deliver(_update())

        assert len(ws.sent) == 1
        assert session.suppressed == 1

    async def test_toggle(self):
        """Test toggle flips the pause flag."""
        session = FeedSession(FakeWebSocket())
        assert session.apply_control("toggle")
        assert session.paused
        assert session.apply_control("toggle")
        assert not session.paused

    async def test_malformed_control_leaves_state(self):
        """Test a malformed control leaves the pause flag alone."""
        session = FeedSession(FakeWebSocket())
        assert not session.apply_control("{garbage")
        assert not session.paused

    async def test_unencodable_update_skipped(self):
        """Test an update that fails to serialize is skipped."""
        ws = FakeWebSocket()
        session = FeedSession(ws)
        await session.deliver(_update(price=math.nan))
        await session.deliver(_update())

        assert session.skipped == 1
        assert len(ws.sent) == 1

    async def test_send_failure_propagates(self):
        """Test a send failure reaches the caller."""
        session = FeedSession(FakeWebSocket(fail_send=True))
        with pytest.raises(ConnectionResetError):
            await session.deliver(_update())


@pytest.mark.asyncio
class TestServe:
    """Tests binding a connection to a live pipeline run."""

    async def test_streams_until_disconnect(self, provider, cache):
        """Test serving until the client disconnects."""
        ws = FakeWebSocket()
        session = FeedSession(ws)
        handles = []

        def attach(on_tick):
            handle = _pipeline(provider, cache).run(on_tick)
            handles.append(handle)
            return handle

        serving = asyncio.create_task(session.serve(attach))
        await asyncio.sleep(0.05)
        ws.client_disconnects()
        await asyncio.wait_for(serving, timeout=1.0)

        assert ws.sent
        assert handles[0].done
        calls = len(provider.calls)
        await asyncio.sleep(0.03)
        assert len(provider.calls) == calls

    async def test_pause_keeps_pipeline_running(self, provider, cache):
        """Test pausing keeps the pipeline running."""
        ws = FakeWebSocket()
        session = FeedSession(ws)
        serving = asyncio.create_task(session.serve(_pipeline(provider, cache).run))

        await asyncio.sleep(0.03)
        ws.client_sends('{"action": "pause"}')
        await asyncio.sleep(0.01)
        sent_while_paused = len(ws.sent)
        calls_at_pause = len(provider.calls)
        await asyncio.sleep(0.05)

        assert len(ws.sent) == sent_while_paused
        assert len(provider.calls) > calls_at_pause
        assert session.suppressed > 0

        ws.client_sends('{"action": "resume"}')
        await asyncio.sleep(0.05)
        assert len(ws.sent) > sent_while_paused

        ws.client_disconnects()
        await asyncio.wait_for(serving, timeout=1.0)

    async def test_malformed_messages_not_fatal(self, provider, cache):
        """Test malformed frames do not end the session."""
        ws = FakeWebSocket()
        session = FeedSession(ws)
        serving = asyncio.create_task(session.serve(_pipeline(provider, cache).run))

        ws.client_sends("{definitely not json")
        ws.client_sends_bytes(b"\x00\x01")
        ws.client_sends('{"action": "explode"}')
        await asyncio.sleep(0.05)

        assert not serving.done()
        assert ws.sent

        ws.client_disconnects()
        await asyncio.wait_for(serving, timeout=1.0)

    async def test_transport_failure_ends_session(self, provider, cache):
        """Test a transport failure ends the session."""
        ws = FakeWebSocket(fail_send=True)
        session = FeedSession(ws)
        handles = []

        def attach(on_tick):
            handle = _pipeline(provider, cache).run(on_tick)
            handles.append(handle)
            return handle

        await asyncio.wait_for(session.serve(attach), timeout=1.0)

        assert handles[0].done
        assert session.sent == 0
