"""Thread-safe in-memory quote cache."""

from __future__ import annotations

from collections.abc import Mapping
from threading import Lock

from .models import Quote


class UnknownSymbolError(KeyError):
    """Raised when a symbol outside the configured universe is accessed."""


class QuoteCache:
    """Last known good quote for each symbol in a fixed universe.

    Every symbol gets a zero-valued placeholder at construction, so lookups
    for universe symbols never miss. The universe never grows or shrinks.

    Writer: QuoteSource (one per process).
    Readers: feed pipelines, the quotes API, cold-start fallbacks.
    """

    def __init__(self, symbols: Mapping[str, str]) -> None:
        self._quotes: dict[str, Quote] = {
            symbol: Quote.placeholder(symbol, name) for symbol, name in symbols.items()
        }
        self._lock = Lock()
        self._version: int = 0  # Bumped on every replace

    def replace(self, quote: Quote) -> None:
        """Atomically swap in a new quote for an existing universe symbol."""
        with self._lock:
            if quote.symbol not in self._quotes:
                raise UnknownSymbolError(quote.symbol)
            self._quotes[quote.symbol] = quote
            self._version += 1

    def get(self, symbol: str) -> Quote:
        """Latest quote for a symbol (placeholder if never sampled)."""
        with self._lock:
            try:
                return self._quotes[symbol]
            except KeyError:
                raise UnknownSymbolError(symbol) from None

    def get_all(self) -> dict[str, Quote]:
        """Snapshot of all quotes in universe order. Returns a shallow copy."""
        with self._lock:
            return dict(self._quotes)

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(self._quotes)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._quotes)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return symbol in self._quotes
