"""Fixtures for trade feed tests.

ScriptedProvider stands in for an upstream quote API: each symbol is mapped
to a ProviderQuote to return, an exception to raise, or ``HANG`` to never
answer (for timeout and cancellation tests).
"""

import asyncio

import pytest

from tradefeed.market.cache import QuoteCache
from tradefeed.market.interface import ProviderQuote, QuoteProvider, QuoteProviderError

HANG = object()


class ScriptedProvider(QuoteProvider):
    name = "scripted"

    def __init__(self, script=None):
        self.script = dict(script or {})
        self.calls: list[str] = []
        self.cancelled = 0
        self.closed = False

    async def fetch(self, symbol):
        self.calls.append(symbol)
        result = self.script.get(symbol, QuoteProviderError(f"no script for {symbol}"))
        if result is HANG:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if isinstance(result, BaseException):
            raise result
        return result

    async def aclose(self):
        self.closed = True


def quote(symbol, price, previous_close):
    return ProviderQuote(symbol=symbol, price=price, previous_close=previous_close)


@pytest.fixture
def cache():
    return QuoteCache({"AAPL": "Apple Inc.", "MSFT": "Microsoft Corporation"})


@pytest.fixture
def provider():
    return ScriptedProvider(
        {
            "AAPL": quote("AAPL", 150.00, 148.00),
            "MSFT": quote("MSFT", 420.00, 415.00),
        }
    )


@pytest.fixture
def hang():
    return HANG


@pytest.fixture
def make_quote():
    return quote


@pytest.fixture
def scripted():
    """The ScriptedProvider class, for tests that need a custom script."""
    return ScriptedProvider
