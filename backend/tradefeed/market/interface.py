"""Abstract interface for upstream quote providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class QuoteProviderError(Exception):
    """Upstream quote could not be obtained (network, HTTP status, payload)."""


class RateLimitError(QuoteProviderError):
    """Upstream rejected the request because of its rate limit."""


class MalformedQuoteError(QuoteProviderError):
    """Upstream answered, but the payload is not a usable quote."""


@dataclass(frozen=True, slots=True)
class ProviderQuote:
    """Raw quote as reported by a provider, before derivation."""

    symbol: str
    price: float
    previous_close: float
    change: float | None = None
    change_percent: float | None = None


class QuoteProvider(ABC):
    """Contract for upstream quote providers.

    Providers are stateless from the caller's point of view: one call fetches
    one symbol. Failures are raised as QuoteProviderError subclasses and are
    handled by QuoteSource, never by the feed pipeline.

    Lifecycle:
        provider = create_quote_provider(settings)
        quote = await provider.fetch("AAPL")
        # ... app shutting down ...
        await provider.aclose()
    """

    name: str = "provider"

    @abstractmethod
    async def fetch(self, symbol: str) -> ProviderQuote:
        """Fetch the current quote for one symbol.

        Raises QuoteProviderError (or a subclass) on any upstream failure.
        """

    async def aclose(self) -> None:
        """Release network resources. Safe to call multiple times."""
