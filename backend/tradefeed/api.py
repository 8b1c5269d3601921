"""Read-only HTTP routes over the quote cache and feed state."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from tradefeed.market.cache import UnknownSymbolError

router = APIRouter(prefix="/api", tags=["feed"])


@router.get("/quotes")
async def list_quotes(request: Request) -> list[dict]:
    cache = request.app.state.quote_cache
    return [quote.to_dict() for quote in cache.get_all().values()]


@router.get("/quotes/{symbol}")
async def get_quote(symbol: str, request: Request) -> dict:
    try:
        quote = request.app.state.quote_cache.get(symbol.upper())
    except UnknownSymbolError:
        raise HTTPException(status_code=404, detail=f"unknown symbol {symbol}")
    return quote.to_dict()


@router.get("/feed/status")
async def feed_status(request: Request) -> dict:
    state = request.app.state
    return {
        "mode": state.settings.feed_mode,
        "tick_interval": state.pipeline.interval,
        "symbols": list(state.quote_cache.symbols),
        "provider": state.quote_source.provider.name,
        "sampling": state.quote_source.stats(),
        "cache_version": state.quote_cache.version,
        "subscribers": len(state.feed_sessions),
    }
