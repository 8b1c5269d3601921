"""Synthetic trade generation around reference quotes."""

from __future__ import annotations

import math
import random
import time
from collections.abc import Callable

from .models import Quote, Trade, TradeSide, TradeUpdate


class InvalidQuoteError(ValueError):
    """Raised when a quote cannot anchor synthetic trades."""


def _now_ms() -> int:
    return int(time.time() * 1000)


class TradeSynthesizer:
    """Produces a small random batch of trades consistent with a quote.

    Trade prices are the quote price with microstructure noise of at most
    ``max_deviation`` (relative) either way; they do not move the market.
    Pass a seeded ``random.Random`` for reproducible output. The synthesizer
    never touches the quote cache.

    Args:
        rng:           Random source. Defaults to a fresh unseeded Random.
        max_deviation: Relative price noise bound (0.001 = +/-0.1%).
        max_trades:    Trades per batch are uniform in [1, max_trades].
        min_volume:    Inclusive lower bound on trade volume.
        max_volume:    Exclusive upper bound on trade volume.
        clock:         Returns the capture time in epoch milliseconds.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        max_deviation: float = 0.001,
        max_trades: int = 3,
        min_volume: int = 10,
        max_volume: int = 1000,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        if max_trades < 1:
            raise ValueError("max_trades must be at least 1")
        if not 0 < min_volume < max_volume:
            raise ValueError("volume bounds must satisfy 0 < min_volume < max_volume")
        self._rng = rng or random.Random()
        self._max_deviation = max_deviation
        self._max_trades = max_trades
        self._min_volume = min_volume
        self._max_volume = max_volume
        self._clock = clock

    def synthesize(self, quote: Quote) -> list[Trade]:
        """Return 1..max_trades trades around ``quote.current_price``."""
        price = quote.current_price
        if not math.isfinite(price) or price <= 0:
            raise InvalidQuoteError(f"cannot synthesize trades for {quote.symbol} at {price!r}")

        timestamp = self._clock()
        count = self._rng.randint(1, self._max_trades)
        return [self._make_trade(quote, timestamp) for _ in range(count)]

    def build_update(self, quote: Quote) -> TradeUpdate:
        return TradeUpdate(quote=quote, trades=tuple(self.synthesize(quote)))

    def _make_trade(self, quote: Quote, timestamp: int) -> Trade:
        side = TradeSide.BUY if self._rng.random() < 0.5 else TradeSide.SELL
        deviation = self._rng.uniform(-self._max_deviation, self._max_deviation)
        return Trade(
            symbol=quote.symbol,
            price=quote.current_price * (1 + deviation),
            volume=self._rng.randrange(self._min_volume, self._max_volume),
            timestamp=timestamp,
            side=side,
        )
