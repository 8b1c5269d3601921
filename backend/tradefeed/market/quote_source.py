"""Quote acquisition with graceful degradation to cached values."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable

from .cache import QuoteCache, UnknownSymbolError
from .interface import MalformedQuoteError, ProviderQuote, QuoteProvider
from .models import Quote

logger = logging.getLogger(__name__)


class QuoteSource:
    """Samples quotes from a provider and keeps the QuoteCache current.

    Availability over freshness: ``sample`` never raises. On any upstream
    failure the last cached quote is returned unchanged, so a bad provider
    only ever shows up as staleness downstream. There is no retry beyond the
    caller's next tick.
    """

    def __init__(
        self,
        provider: QuoteProvider,
        cache: QuoteCache,
        fetch_timeout: float = 5.0,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._timeout = fetch_timeout
        self.successes = 0
        self.failures = 0
        self.last_error: str | None = None

    @property
    def provider(self) -> QuoteProvider:
        return self._provider

    async def sample(self, symbol: str) -> Quote:
        """Fetch a fresh quote for ``symbol``, or fall back to the cache."""
        try:
            raw = await asyncio.wait_for(self._provider.fetch(symbol), timeout=self._timeout)
            quote = self._to_quote(symbol, raw)
            self._cache.replace(quote)
        except Exception as e:
            # TimeoutError, QuoteProviderError, UnknownSymbolError, or a
            # provider bug. CancelledError is not an Exception and propagates.
            self.failures += 1
            self.last_error = f"{symbol}: {type(e).__name__}: {e}"
            logger.warning("Quote sample failed for %s (%s); serving cached value", symbol, e)
            return self._fallback(symbol)

        self.successes += 1
        logger.debug("Sampled %s at %.2f", symbol, quote.current_price)
        return quote

    async def sample_all(self, symbols: Iterable[str]) -> list[Quote]:
        """Sample every symbol concurrently, preserving input order.

        Symbols that have never produced a real price (still the startup
        placeholder) are left out of the batch.
        """
        symbols = list(symbols)
        results = await asyncio.gather(
            *(self.sample(symbol) for symbol in symbols),
            return_exceptions=True,
        )

        quotes: list[Quote] = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, BaseException):
                logger.error("Sampling %s raised unexpectedly: %r", symbol, result)
                continue
            if result.is_placeholder:
                continue
            quotes.append(result)
        return quotes

    def stats(self) -> dict:
        return {
            "successes": self.successes,
            "failures": self.failures,
            "last_error": self.last_error,
        }

    # --- Internal ---

    def _to_quote(self, symbol: str, raw: ProviderQuote) -> Quote:
        if not (math.isfinite(raw.price) and math.isfinite(raw.previous_close)):
            raise MalformedQuoteError(
                f"non-finite price for {symbol}: {raw.price} / {raw.previous_close}"
            )
        if raw.price <= 0:
            raise MalformedQuoteError(f"non-positive price for {symbol}: {raw.price}")
        name = self._cache.get(symbol).name
        if raw.previous_close:
            return Quote.from_prices(symbol, name, raw.price, raw.previous_close)

        # No previous close to derive from: trust what upstream reported
        return Quote(
            symbol=symbol,
            name=name,
            current_price=raw.price,
            previous_close=raw.previous_close,
            change=_finite_or_zero(raw.change),
            change_percent=_finite_or_zero(raw.change_percent),
        )

    def _fallback(self, symbol: str) -> Quote:
        try:
            return self._cache.get(symbol)
        except UnknownSymbolError:
            return Quote.placeholder(symbol, symbol)


def _finite_or_zero(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return value
