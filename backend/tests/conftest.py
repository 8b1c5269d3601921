"""Pytest configuration and fixtures."""

import pytest

from tradefeed.config import Settings


@pytest.fixture
def settings():
    """Fast, offline settings for application tests."""
    return Settings(symbols=["AAPL", "MSFT"], tick_interval=0.01, fetch_timeout=0.5)
