"""WebSocket endpoint streaming live trade updates."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, WebSocket

from .models import TradeUpdate
from .pipeline import FeedHandle, TickCallback

logger = logging.getLogger(__name__)

# Starts one feed for a subscriber: FeedPipeline.run or FeedBroadcaster.subscribe
Attach = Callable[[TickCallback], FeedHandle]

_ACTIONS = {"pause", "resume", "toggle"}


def parse_control(raw: Any) -> str | None:
    """Extract a control action from an inbound text frame.

    Accepts ``{"action": "pause"}`` style JSON or the bare word. Returns None
    for anything unrecognised.
    """
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if text.startswith("{"):
        try:
            message = json.loads(text)
        except ValueError:
            return None
        if not isinstance(message, dict):
            return None
        action = message.get("action")
    else:
        action = text
    if not isinstance(action, str):
        return None
    action = action.strip().lower()
    return action if action in _ACTIONS else None


class FeedSession:
    """One subscriber connection and its per-connection pause flag.

    While paused the feed keeps running and ticks are counted as
    ``suppressed`` instead of being written.
    """

    def __init__(self, websocket: Any, client: str = "unknown") -> None:
        self._websocket = websocket
        self.client = client
        self.paused = False
        self.sent = 0
        self.suppressed = 0
        self.skipped = 0

    async def deliver(self, update: TradeUpdate) -> None:
        """Tick callback: serialize and write, unless paused."""
        if self.paused:
            self.suppressed += 1
            return
        try:
            payload = json.dumps(update.to_dict(), allow_nan=False)
        except (TypeError, ValueError) as e:
            self.skipped += 1
            logger.warning("Skipping unencodable update for %s: %s", update.symbol, e)
            return
        # Transport errors propagate and end this subscriber's feed
        await self._websocket.send_text(payload)
        self.sent += 1

    def apply_control(self, raw: Any) -> bool:
        """Apply an inbound control frame. Returns False if it was ignored."""
        action = parse_control(raw)
        if action is None:
            logger.debug("Ignoring control message from %s: %r", self.client, raw)
            return False
        if action == "toggle":
            self.paused = not self.paused
        else:
            self.paused = action == "pause"
        logger.info("Subscriber %s %s", self.client, "paused" if self.paused else "resumed")
        return True

    async def receive_controls(self) -> None:
        """Read control frames until the client disconnects."""
        while True:
            message = await self._websocket.receive()
            if message.get("type") == "websocket.disconnect":
                return
            self.apply_control(message.get("text"))

    async def serve(self, attach: Attach) -> None:
        """Bind this connection to one feed until either side ends.

        The feed is stopped before returning, so nothing keeps running on
        behalf of a closed connection.
        """
        handle = attach(self.deliver)
        receiver = asyncio.create_task(self.receive_controls(), name=f"feed-controls-{self.client}")
        feed_done = asyncio.create_task(handle.wait(), name=f"feed-wait-{self.client}")
        try:
            await asyncio.wait({receiver, feed_done}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            receiver.cancel()
            feed_done.cancel()
            await handle.stop()
            await asyncio.gather(receiver, feed_done, return_exceptions=True)


def create_stream_router(attach: Attach, sessions: set[FeedSession] | None = None) -> APIRouter:
    """Create the trade feed router.

    ``attach`` decides the fan-out strategy; ``sessions``, if given, tracks
    the currently connected subscribers.
    """
    router = APIRouter(prefix="/trades", tags=["streaming"])
    active = sessions if sessions is not None else set()

    @router.websocket("/ws")
    async def trade_feed(websocket: WebSocket) -> None:
        """Stream one JSON TradeUpdate per tick until the client disconnects.

        Clients may send ``{"action": "pause" | "resume" | "toggle"}`` to
        silence and restore their own stream.
        """
        await websocket.accept()
        client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
        logger.info("Feed subscriber connected: %s", client)

        session = FeedSession(websocket, client=client)
        active.add(session)
        try:
            await session.serve(attach)
        finally:
            active.discard(session)
        logger.info(
            "Feed subscriber disconnected: %s (sent=%d suppressed=%d skipped=%d)",
            client,
            session.sent,
            session.suppressed,
            session.skipped,
        )

    return router
