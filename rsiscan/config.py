"""rsiscan — application configuration.

Loads .env variables into a typed config object.
Validates provider settings on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


_SOURCES = ("yahoo", "finnhub")

# Finnhub's free tier tolerates more parallel requests than Yahoo's chart API
_DEFAULT_BATCH_SIZE = {
    "yahoo": 2,
    "finnhub": 5,
}


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    data_source: str  # "yahoo" or "finnhub"
    finnhub_api_key: str
    cache_ttl_seconds: float
    batch_size: int
    batch_delay_seconds: float
    log_level: str
    api_port: int

    @property
    def data_source_label(self) -> str:
        """Human-readable provider name for scan responses."""
        if self.data_source == "finnhub":
            return "Finnhub"
        return "Yahoo Finance"


def _number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(
            f"Invalid value for environment variable {name}: {raw!r}"
        ) from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when
    a value is missing or malformed.
    """
    load_dotenv(dotenv_path=env_path)

    source = os.environ.get("DATA_SOURCE", "yahoo").lower()
    if source not in _SOURCES:
        raise ValueError(
            f"Invalid value for environment variable DATA_SOURCE: {source!r} "
            f"(expected one of {', '.join(_SOURCES)})"
        )

    api_key = os.environ.get("FINNHUB_API_KEY", "")
    if source == "finnhub" and not api_key:
        raise ValueError(
            "Missing required environment variable(s): FINNHUB_API_KEY"
        )

    return Config(
        data_source=source,
        finnhub_api_key=api_key,
        cache_ttl_seconds=_number("CACHE_TTL_SECONDS", "300", float),
        batch_size=_number(
            "BATCH_SIZE", str(_DEFAULT_BATCH_SIZE[source]), int,
        ),
        batch_delay_seconds=_number("BATCH_DELAY_SECONDS", "0.5", float),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        api_port=_number("API_PORT", "8080", int),
    )
