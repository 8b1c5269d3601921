"""Tests for QuoteCache."""

import threading

import pytest

from tradefeed.market.cache import QuoteCache, UnknownSymbolError
from tradefeed.market.models import Quote


class TestQuoteCache:
    """Unit tests for the QuoteCache."""

    def test_every_symbol_present_at_startup(self, cache):
        """Each universe symbol has a placeholder before any sample."""
        assert len(cache) == 2
        for symbol in ("AAPL", "MSFT"):
            q = cache.get(symbol)
            assert q is not None
            assert q.is_placeholder

    def test_placeholder_keeps_display_name(self, cache):
        """Test placeholders carry the display name."""
        assert cache.get("MSFT").name == "Microsoft Corporation"

    def test_replace_and_get(self, cache):
        """Test replacing and getting a quote."""
        q = Quote.from_prices("AAPL", "Apple Inc.", 150.0, 148.0)
        cache.replace(q)
        assert cache.get("AAPL") is q

    def test_replace_leaves_other_symbols(self, cache):
        """Test replacing one symbol leaves the others alone."""
        cache.replace(Quote.from_prices("AAPL", "Apple Inc.", 150.0, 148.0))
        assert cache.get("MSFT").is_placeholder

    def test_replace_unknown_symbol_rejected(self, cache):
        """The universe never grows at runtime."""
        with pytest.raises(UnknownSymbolError):
            cache.replace(Quote.from_prices("ZZZZ", "Nope", 1.0, 1.0))
        assert "ZZZZ" not in cache
        assert len(cache) == 2

    def test_get_unknown_symbol(self, cache):
        """Test getting a symbol outside the universe."""
        with pytest.raises(KeyError):
            cache.get("ZZZZ")

    def test_get_all_preserves_order(self, cache):
        """Test get_all and symbols keep universe order."""
        assert list(cache.get_all()) == ["AAPL", "MSFT"]
        assert cache.symbols == ("AAPL", "MSFT")

    def test_get_all_is_a_copy(self, cache):
        """Test that get_all returns a copy."""
        snapshot = cache.get_all()
        cache.replace(Quote.from_prices("AAPL", "Apple Inc.", 150.0, 148.0))
        assert snapshot["AAPL"].is_placeholder

    def test_version_increments(self, cache):
        """Test that version counter increments."""
        v0 = cache.version
        cache.replace(Quote.from_prices("AAPL", "Apple Inc.", 150.0, 148.0))
        cache.replace(Quote.from_prices("AAPL", "Apple Inc.", 151.0, 148.0))
        assert cache.version == v0 + 2

    def test_concurrent_writers_and_readers(self):
        """Readers always see a whole quote, never a mix of two samples."""
        cache = QuoteCache({"AAPL": "Apple Inc."})
        errors = []

        def write():
            for i in range(1, 500):
                cache.replace(Quote.from_prices("AAPL", "Apple Inc.", float(i), float(i)))

        def read():
            for _ in range(500):
                q = cache.get("AAPL")
                if q.current_price != q.previous_close:
                    errors.append(q)

        threads = [threading.Thread(target=write)] + [threading.Thread(target=read) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
