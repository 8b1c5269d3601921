"""Alpha Vantage GLOBAL_QUOTE client for real quote data."""

from __future__ import annotations

import logging
import math
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .interface import (
    MalformedQuoteError,
    ProviderQuote,
    QuoteProvider,
    QuoteProviderError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

ALPHAVANTAGE_URL = "https://www.alphavantage.co/query"


def parse_percent(value: Any) -> float | None:
    """Parse an upstream percent string such as ``"1.35%"`` or ``"-0.42%"``.

    Returns None for missing, unparseable or non-finite values.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().removesuffix("%").strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


class GlobalQuote(BaseModel):
    """The ``"Global Quote"`` object. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    symbol: str = Field(alias="01. symbol")
    price: float = Field(alias="05. price", allow_inf_nan=False)
    previous_close: float = Field(alias="08. previous close", allow_inf_nan=False)
    change: float | None = Field(default=None, alias="09. change", allow_inf_nan=False)
    change_percent: float | None = Field(default=None, alias="10. change percent")

    @field_validator("change_percent", mode="before")
    @classmethod
    def _strip_percent(cls, value: Any) -> float | None:
        return parse_percent(value)


class AlphaVantageProvider(QuoteProvider):
    """QuoteProvider backed by the Alpha Vantage REST API.

    One GET per symbol. The free tier allows a handful of requests per
    minute; over that it answers 200 with a ``"Note"`` or ``"Information"``
    body, which is reported as a RateLimitError.
    """

    name = "alphavantage"

    def __init__(
        self,
        api_key: str,
        timeout: float = 5.0,
        base_url: str = ALPHAVANTAGE_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._base_url = base_url
        self._client = client
        self._owns_client = client is None

    async def fetch(self, symbol: str) -> ProviderQuote:
        client = self._get_client()
        params = {"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self._api_key}
        try:
            response = await client.get(self._base_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                raise RateLimitError(f"HTTP 429 for {symbol}") from e
            raise QuoteProviderError(f"HTTP {status} for {symbol}") from e
        except httpx.HTTPError as e:
            raise QuoteProviderError(f"request for {symbol} failed: {e!r}") from e
        except ValueError as e:
            raise MalformedQuoteError(f"non-JSON response for {symbol}") from e

        return self.parse_payload(symbol, payload)

    @staticmethod
    def parse_payload(symbol: str, payload: Any) -> ProviderQuote:
        """Turn a decoded GLOBAL_QUOTE response into a ProviderQuote."""
        if not isinstance(payload, dict):
            raise MalformedQuoteError(f"unexpected payload type for {symbol}")
        for key in ("Note", "Information"):
            if key in payload:
                raise RateLimitError(f"{symbol}: {payload[key]}")
        if "Error Message" in payload:
            raise MalformedQuoteError(f"{symbol}: {payload['Error Message']}")

        body = payload.get("Global Quote")
        if not body:
            raise MalformedQuoteError(f"empty Global Quote for {symbol}")

        try:
            quote = GlobalQuote.model_validate(body)
        except ValidationError as e:
            raise MalformedQuoteError(f"invalid Global Quote for {symbol}: {e}") from e

        if quote.price <= 0:
            raise MalformedQuoteError(f"non-positive price for {symbol}: {quote.price}")

        return ProviderQuote(
            symbol=quote.symbol,
            price=quote.price,
            previous_close=quote.previous_close,
            change=quote.change,
            change_percent=quote.change_percent,
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
            logger.debug("Alpha Vantage client created (timeout %.1fs)", self._timeout)
        return self._client
