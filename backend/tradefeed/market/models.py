"""Data models for the trade feed."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True, slots=True)
class Quote:
    """Immutable reference quote for one symbol.

    A cache update always swaps the whole record, so readers never observe a
    price from one sample next to a change figure from another.
    """

    symbol: str
    name: str
    current_price: float
    previous_close: float
    change: float = 0.0
    change_percent: float = 0.0

    @classmethod
    def from_prices(
        cls,
        symbol: str,
        name: str,
        current_price: float,
        previous_close: float,
    ) -> Quote:
        """Build a quote, deriving change and change_percent from the prices."""
        change = current_price - previous_close
        change_percent = change / previous_close * 100 if previous_close else 0.0
        return cls(
            symbol=symbol,
            name=name,
            current_price=current_price,
            previous_close=previous_close,
            change=round(change, 4),
            change_percent=round(change_percent, 4),
        )

    @classmethod
    def placeholder(cls, symbol: str, name: str) -> Quote:
        """Zero-valued quote used until the first successful sample."""
        return cls(symbol=symbol, name=name, current_price=0.0, previous_close=0.0)

    @property
    def is_placeholder(self) -> bool:
        return self.current_price == 0.0 and self.previous_close == 0.0

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "currentPrice": self.current_price,
            "previousClose": self.previous_close,
            "change": self.change,
            "changePercent": self.change_percent,
        }


@dataclass(frozen=True, slots=True)
class Trade:
    """One synthesized trade. ``timestamp`` is Unix epoch milliseconds."""

    symbol: str
    price: float
    volume: int
    timestamp: int
    side: TradeSide

    def to_dict(self) -> dict:
        return {
            "ticker": self.symbol,
            "price": self.price,
            "volume": self.volume,
            "timestamp": self.timestamp,
            "type": self.side.value,
        }


@dataclass(frozen=True, slots=True)
class TradeUpdate:
    """The unit of emission: a quote plus the trades synthesized around it."""

    quote: Quote
    trades: tuple[Trade, ...]

    def __post_init__(self) -> None:
        if not self.trades:
            raise ValueError(f"TradeUpdate for {self.quote.symbol} has no trades")

    @property
    def symbol(self) -> str:
        return self.quote.symbol

    def to_dict(self) -> dict:
        """Serialize for JSON / WebSocket transmission."""
        return {
            "ticker": self.quote.to_dict(),
            "trades": [trade.to_dict() for trade in self.trades],
        }
