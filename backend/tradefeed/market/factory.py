"""Factory for creating quote providers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .interface import QuoteProvider

if TYPE_CHECKING:
    from tradefeed.config import Settings

logger = logging.getLogger(__name__)


def create_quote_provider(settings: Settings) -> QuoteProvider:
    """Create the upstream provider selected by the settings.

    - alphavantage_api_key set and non-empty -> AlphaVantageProvider (real quotes)
    - Otherwise -> SimulatedQuoteProvider (GBM walk, no network)
    """
    api_key = settings.alphavantage_api_key.strip()

    if api_key:
        from .alphavantage import AlphaVantageProvider

        logger.info("Quote provider: Alpha Vantage (real data)")
        return AlphaVantageProvider(api_key=api_key, timeout=settings.fetch_timeout)
    else:
        from .simulator import SimulatedQuoteProvider

        logger.info("Quote provider: GBM simulator")
        return SimulatedQuoteProvider(period=settings.tick_interval)
