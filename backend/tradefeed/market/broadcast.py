"""Shared pipeline fanned out to many subscribers."""

from __future__ import annotations

import asyncio
import logging

from .models import TradeUpdate
from .pipeline import FeedHandle, FeedPipeline, TickCallback, deliver_update

logger = logging.getLogger(__name__)


class _Subscriber:
    def __init__(self, maxsize: int) -> None:
        self.queue: asyncio.Queue[TradeUpdate] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def offer(self, update: TradeUpdate) -> None:
        """Enqueue without blocking, dropping the oldest update when full."""
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
        self.queue.put_nowait(update)


class FeedBroadcaster:
    """One upstream pipeline run shared by every subscriber.

    The run starts with the first subscriber and is cancelled when the last
    one leaves. Each subscriber drains its own bounded queue, so a slow
    consumer only loses its own oldest updates and never delays the others.
    Subscribers see only updates published after they joined.
    """

    def __init__(self, pipeline: FeedPipeline, queue_size: int = 32) -> None:
        self._pipeline = pipeline
        self._queue_size = queue_size
        self._subscribers: set[_Subscriber] = set()
        self._handles: set[FeedHandle] = set()
        self._upstream: FeedHandle | None = None
        self.published = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def running(self) -> bool:
        return self._upstream is not None and not self._upstream.done

    def subscribe(self, on_tick: TickCallback) -> FeedHandle:
        """Attach a subscriber; ``on_tick`` receives each published update."""
        subscriber = _Subscriber(self._queue_size)
        self._subscribers.add(subscriber)
        if self._upstream is None:
            self._upstream = self._pipeline.run(self._publish, name="feed-broadcast")
            logger.info("Shared feed started")

        handle = FeedHandle()
        self._handles.add(handle)
        handle.launch(self._drain(subscriber, on_tick, handle), name="feed-subscriber")
        handle.on_done(lambda: self._detach(subscriber, handle))
        return handle

    async def aclose(self) -> None:
        """Stop every subscriber and the shared upstream run."""
        for handle in list(self._handles):
            await handle.stop()
        if self._upstream is not None:
            await self._upstream.stop()
            self._upstream = None
        self._subscribers.clear()
        self._handles.clear()

    # --- Internal ---

    def _publish(self, update: TradeUpdate) -> None:
        for subscriber in self._subscribers:
            subscriber.offer(update)
        self.published += 1

    async def _drain(self, subscriber: _Subscriber, on_tick: TickCallback, handle: FeedHandle) -> None:
        while True:
            update = await subscriber.queue.get()
            await deliver_update(on_tick, update)
            handle.emitted += 1

    def _detach(self, subscriber: _Subscriber, handle: FeedHandle) -> None:
        self._subscribers.discard(subscriber)
        self._handles.discard(handle)
        if subscriber.dropped:
            logger.info("Subscriber left after dropping %d updates", subscriber.dropped)
        if not self._subscribers and self._upstream is not None:
            self._upstream.cancel()
            self._upstream = None
            logger.info("Shared feed stopped (no subscribers)")
