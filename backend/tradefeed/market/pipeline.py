"""Fixed-period poll -> synthesize -> emit loop."""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable, Coroutine, Iterable
from typing import Any

from .models import TradeUpdate
from .quote_source import QuoteSource
from .synthesizer import InvalidQuoteError, TradeSynthesizer

logger = logging.getLogger(__name__)

TickCallback = Callable[[TradeUpdate], Awaitable[None] | None]


async def deliver_update(on_tick: TickCallback, update: TradeUpdate) -> None:
    result = on_tick(update)
    if inspect.isawaitable(result):
        await result


class FeedHandle:
    """Cancellable handle on one running feed task.

    ``emitted`` counts updates handed to the tick callback.
    """

    def __init__(self) -> None:
        self.emitted = 0
        self._task: asyncio.Task | None = None

    def launch(self, coro: Coroutine[Any, Any, None], name: str) -> FeedHandle:
        self._task = asyncio.create_task(coro, name=name)
        return self

    def on_done(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the task ends, even if it never started."""
        if self._task is not None:
            self._task.add_done_callback(lambda _task: callback())

    @property
    def done(self) -> bool:
        return self._task is None or self._task.done()

    def cancel(self) -> None:
        """Request cancellation without waiting for it."""
        if self._task and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait until the task ends, for whatever reason. Never raises."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def stop(self) -> None:
        """Cancel the task and wait for it to finish. Safe to call twice."""
        task = self._task
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # The tick callback failed, usually a dropped connection
            logger.info("Feed %s ended: %r", task.get_name(), e)


class FeedPipeline:
    """Samples the universe on a fixed period and emits one TradeUpdate per tick.

    Each tick samples every symbol, synthesizes trades for every quote that
    came back, and emits exactly one of the resulting updates chosen at
    random. This bounds output to one update per period at the cost of
    per-symbol fairness over short windows.

    The pipeline object holds no per-run state: every ``run`` call starts an
    independent loop with its own timer.
    """

    def __init__(
        self,
        source: QuoteSource,
        synthesizer: TradeSynthesizer,
        symbols: Iterable[str],
        interval: float = 1.0,
        rng: random.Random | None = None,
    ) -> None:
        self._source = source
        self._synthesizer = synthesizer
        self._symbols = tuple(symbols)
        self._interval = interval
        self._rng = rng or random.Random()

    @property
    def symbols(self) -> tuple[str, ...]:
        return self._symbols

    @property
    def interval(self) -> float:
        return self._interval

    async def tick(self) -> TradeUpdate | None:
        """Run one sampling/synthesis cycle. Returns None if nothing to emit."""
        quotes = await self._source.sample_all(self._symbols)

        updates: list[TradeUpdate] = []
        for quote in quotes:
            try:
                updates.append(self._synthesizer.build_update(quote))
            except InvalidQuoteError as e:
                logger.warning("Skipping %s this tick: %s", quote.symbol, e)

        if not updates:
            logger.debug("Tick produced no quotes to emit")
            return None
        return self._rng.choice(updates)

    def run(self, on_tick: TickCallback, name: str = "feed-pipeline") -> FeedHandle:
        """Start an independent loop calling ``on_tick`` once per period."""
        handle = FeedHandle()
        return handle.launch(self._run_loop(on_tick, handle), name=name)

    # --- Internal ---

    async def _run_loop(self, on_tick: TickCallback, handle: FeedHandle) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            try:
                update = await self.tick()
            except Exception:
                logger.exception("Feed tick failed")
                update = None

            if update is not None:
                # Errors from the callback end this run
                await deliver_update(on_tick, update)
                handle.emitted += 1
                logger.debug(
                    "Emitted %s with %d trades", update.symbol, len(update.trades)
                )

            next_tick += self._interval
            delay = next_tick - loop.time()
            if delay < 0:
                # Overran the period; realign instead of bursting to catch up
                next_tick = loop.time()
                delay = 0
            await asyncio.sleep(delay)
