"""Application factory: wires the quote cache, sampling, synthesis and transport."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tradefeed.api import router as api_router
from tradefeed.charts import create_charts_router
from tradefeed.config import Settings, get_settings
from tradefeed.market import (
    FeedBroadcaster,
    FeedPipeline,
    QuoteCache,
    QuoteProvider,
    QuoteSource,
    TradeSynthesizer,
    create_quote_provider,
    create_stream_router,
)
from tradefeed.market.universe import company_name

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, provider: QuoteProvider | None = None) -> FastAPI:
    """Wire cache, sampling, synthesis and transport into one application."""
    settings = settings or get_settings()

    cache = QuoteCache({symbol: company_name(symbol) for symbol in settings.symbols})
    provider = provider or create_quote_provider(settings)
    source = QuoteSource(provider, cache, fetch_timeout=settings.fetch_timeout)
    pipeline = FeedPipeline(
        source,
        TradeSynthesizer(),
        symbols=settings.symbols,
        interval=settings.tick_interval,
    )

    broadcaster: FeedBroadcaster | None = None
    if settings.feed_mode == "shared":
        broadcaster = FeedBroadcaster(pipeline, queue_size=settings.subscriber_queue_size)
        attach = broadcaster.subscribe
    else:
        attach = pipeline.run

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Trade feed ready: %d symbols, %.2fs ticks, %s mode, provider=%s",
            len(pipeline.symbols),
            pipeline.interval,
            settings.feed_mode,
            provider.name,
        )
        try:
            yield
        finally:
            if broadcaster is not None:
                await broadcaster.aclose()
            await provider.aclose()
            logger.info("Trade feed stopped")

    app = FastAPI(title="Trade Feed", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.quote_cache = cache
    app.state.quote_source = source
    app.state.pipeline = pipeline
    app.state.broadcaster = broadcaster
    app.state.feed_sessions = set()

    app.include_router(create_stream_router(attach, sessions=app.state.feed_sessions))
    app.include_router(api_router)
    app.include_router(create_charts_router())
    return app
