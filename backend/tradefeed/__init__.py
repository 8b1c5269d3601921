"""Simulated live market-data feed served over WebSockets."""

__version__ = "0.1.0"
