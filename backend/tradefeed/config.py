"""Runtime settings read from the environment."""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tradefeed.market.universe import DEFAULT_UNIVERSE, SYMBOLS


class Settings(BaseModel):
    alphavantage_api_key: str = ""
    symbols: list[str] = Field(default_factory=lambda: list(DEFAULT_UNIVERSE))
    tick_interval: float = Field(default=1.0, gt=0)
    fetch_timeout: float = Field(default=5.0, gt=0)
    feed_mode: Literal["per-connection", "shared"] = "per-connection"
    subscriber_queue_size: int = Field(default=32, ge=1)
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)
    log_level: str = "INFO"

    @field_validator("symbols")
    @classmethod
    def _known_symbols(cls, value: list[str]) -> list[str]:
        symbols = list(dict.fromkeys(s.strip().upper() for s in value if s.strip()))
        if not symbols:
            return list(DEFAULT_UNIVERSE)
        unknown = [s for s in symbols if s not in SYMBOLS]
        if unknown:
            raise ValueError(f"unknown symbols: {', '.join(unknown)}")
        return symbols

    @classmethod
    def from_env(cls) -> "Settings":
        raw_symbols = os.getenv("TRADEFEED_SYMBOLS", "")
        values = {
            "alphavantage_api_key": os.getenv("ALPHAVANTAGE_API_KEY", ""),
            "symbols": raw_symbols.split(","),
            "tick_interval": os.getenv("TRADEFEED_TICK_INTERVAL", "1.0"),
            "fetch_timeout": os.getenv("TRADEFEED_FETCH_TIMEOUT", "5.0"),
            "feed_mode": os.getenv("TRADEFEED_MODE", "per-connection"),
            "subscriber_queue_size": os.getenv("TRADEFEED_QUEUE_SIZE", "32"),
            "host": os.getenv("TRADEFEED_HOST", "0.0.0.0"),
            "port": os.getenv("TRADEFEED_PORT", "8080"),
            "log_level": os.getenv("TRADEFEED_LOG_LEVEL", "INFO").upper(),
        }
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
