"""Fixed symbol universe and per-symbol simulator parameters."""

# Display names for the tracked symbols, in universe order
SYMBOLS: dict[str, str] = {
    "AAPL": "Apple Inc.",
    "MSFT": "Microsoft Corporation",
    "GOOGL": "Alphabet Inc.",
    "AMZN": "Amazon.com Inc.",
    "TSLA": "Tesla, Inc.",
    "META": "Meta Platforms, Inc.",
    "NVDA": "NVIDIA Corporation",
    "NFLX": "Netflix, Inc.",
}

DEFAULT_UNIVERSE: tuple[str, ...] = tuple(SYMBOLS)

# Starting prices for the simulated provider; also used as its previous close
SEED_PRICES: dict[str, float] = {
    "AAPL": 190.00,
    "MSFT": 420.00,
    "GOOGL": 175.00,
    "AMZN": 185.00,
    "TSLA": 250.00,
    "META": 500.00,
    "NVDA": 800.00,
    "NFLX": 600.00,
}

# Annualized volatility for the simulated provider's GBM walk
VOLATILITY: dict[str, float] = {
    "AAPL": 0.22,
    "MSFT": 0.20,
    "GOOGL": 0.25,
    "AMZN": 0.28,
    "TSLA": 0.50,  # High volatility
    "META": 0.30,
    "NVDA": 0.40,
    "NFLX": 0.35,
}

DEFAULT_SEED_PRICE = 100.0
DEFAULT_VOLATILITY = 0.25


def company_name(symbol: str) -> str:
    """Display name for a symbol, falling back to the symbol itself."""
    return SYMBOLS.get(symbol, symbol)
