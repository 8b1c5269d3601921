"""Live trade feed subsystem.

Public API:
    Quote, Trade, TradeUpdate - Immutable feed records
    QuoteCache          - Thread-safe last-known-good quote store
    QuoteProvider       - Abstract interface for upstream quote APIs
    QuoteSource         - Never-failing sampler that keeps the cache current
    TradeSynthesizer    - Random trades around a quote
    FeedPipeline        - Fixed-period poll -> synthesize -> emit loop
    FeedBroadcaster     - Shared pipeline fanned out to many subscribers
    create_quote_provider - Factory that selects Alpha Vantage or the simulator
    create_stream_router  - FastAPI router factory for the WebSocket endpoint
"""

from .broadcast import FeedBroadcaster
from .cache import QuoteCache, UnknownSymbolError
from .factory import create_quote_provider
from .interface import QuoteProvider, QuoteProviderError
from .models import Quote, Trade, TradeSide, TradeUpdate
from .pipeline import FeedHandle, FeedPipeline
from .quote_source import QuoteSource
from .stream import create_stream_router
from .synthesizer import TradeSynthesizer

__all__ = [
    "Quote",
    "Trade",
    "TradeSide",
    "TradeUpdate",
    "QuoteCache",
    "UnknownSymbolError",
    "QuoteProvider",
    "QuoteProviderError",
    "QuoteSource",
    "TradeSynthesizer",
    "FeedHandle",
    "FeedPipeline",
    "FeedBroadcaster",
    "create_quote_provider",
    "create_stream_router",
]
