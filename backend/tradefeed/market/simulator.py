"""GBM-based offline quote provider."""

from __future__ import annotations

import logging
import math

import numpy as np

from .interface import ProviderQuote, QuoteProvider, QuoteProviderError
from .universe import DEFAULT_SEED_PRICE, DEFAULT_VOLATILITY, SEED_PRICES, VOLATILITY

logger = logging.getLogger(__name__)


class GBMWalk:
    """Geometric Brownian Motion price walk, one step per sample.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    dt is the sampling period as a fraction of a trading year, so a one
    second period produces sub-cent moves that accumulate over a session.
    """

    # 252 trading days * 6.5 hours/day * 3600 seconds/hour
    TRADING_SECONDS_PER_YEAR = 252 * 6.5 * 3600

    def __init__(
        self,
        price: float,
        sigma: float,
        mu: float = 0.05,
        period: float = 1.0,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.price = price
        self._sigma = sigma
        self._mu = mu
        self._dt = period / self.TRADING_SECONDS_PER_YEAR
        self._rng = rng or np.random.default_rng()

    def step(self) -> float:
        z = self._rng.standard_normal()
        drift = (self._mu - 0.5 * self._sigma**2) * self._dt
        diffusion = self._sigma * math.sqrt(self._dt) * z
        self.price *= math.exp(drift + diffusion)
        return round(self.price, 2)


class SimulatedQuoteProvider(QuoteProvider):
    """QuoteProvider that needs no network access.

    Each symbol walks independently from its seed price, which doubles as the
    previous close. ``failure_probability`` makes a fraction of fetches raise,
    to exercise the cached-value fallback without a real upstream.
    """

    name = "simulator"

    def __init__(
        self,
        period: float = 1.0,
        failure_probability: float = 0.0,
        seed: int | None = None,
    ) -> None:
        self._period = period
        self._failure_prob = failure_probability
        self._rng = np.random.default_rng(seed)
        self._walks: dict[str, GBMWalk] = {}

    async def fetch(self, symbol: str) -> ProviderQuote:
        if self._failure_prob and self._rng.random() < self._failure_prob:
            raise QuoteProviderError(f"simulated upstream failure for {symbol}")

        walk = self._walks.get(symbol)
        if walk is None:
            walk = self._walks[symbol] = GBMWalk(
                price=SEED_PRICES.get(symbol, DEFAULT_SEED_PRICE),
                sigma=VOLATILITY.get(symbol, DEFAULT_VOLATILITY),
                period=self._period,
                rng=self._rng,
            )
            logger.debug("Simulator: started walk for %s at %.2f", symbol, walk.price)

        price = walk.step()
        return ProviderQuote(
            symbol=symbol,
            price=price,
            previous_close=SEED_PRICES.get(symbol, DEFAULT_SEED_PRICE),
        )
