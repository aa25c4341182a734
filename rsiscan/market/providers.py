"""Market-data provider clients — Yahoo Finance chart API and Finnhub.

Both clients return parsed ``Bar`` lists ordered oldest-first and expose
``fetch_series(symbol, horizon)``, the fetch signature the batch scanner
consumes.
"""

import asyncio
import logging
import time
from typing import Optional

import httpx

from rsiscan.errors import ProviderError
from rsiscan.market.models import Bar, Horizon

logger = logging.getLogger("rsiscan.market")

# Retry settings
_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt
_RETRYABLE_STATUS_CODES = {502, 503, 504, 429}

YAHOO_BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
FINNHUB_BASE_URL = "https://finnhub.io/api/v1"

_YAHOO_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    ),
}

# Finnhub resolution codes for our interval names
_FINNHUB_RESOLUTIONS = {
    "1m": "1",
    "5m": "5",
    "15m": "15",
    "1h": "60",
    "1d": "D",
}


class _RetryingClient:
    """Shared exponential-backoff GET for the provider clients."""

    source = ""

    def __init__(self, headers: Optional[dict] = None) -> None:
        self._headers = headers or {}

    async def _get_with_retry(self, url: str, params: dict) -> httpx.Response:
        """Execute a GET with exponential-backoff retry.

        Retries on transient server errors (502, 503, 504) and rate-limits
        (429).  Any other HTTP error, or exhausting the retries, raises
        ``ProviderError``.
        """
        last_exc: Optional[Exception] = None

        for attempt in range(_MAX_RETRIES):
            try:
                async with httpx.AsyncClient() as client:
                    resp = await client.get(
                        url,
                        headers=self._headers,
                        params=params,
                        timeout=30.0,
                    )

                if resp.status_code in _RETRYABLE_STATUS_CODES:
                    delay = _RETRY_BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        "%s GET %s returned %d, retry %d/%d in %.1fs",
                        self.source, url, resp.status_code,
                        attempt + 1, _MAX_RETRIES, delay,
                    )
                    last_exc = httpx.HTTPStatusError(
                        f"Server error '{resp.status_code}'",
                        request=resp.request,
                        response=resp,
                    )
                    await asyncio.sleep(delay)
                    continue

                resp.raise_for_status()
                return resp

            except httpx.HTTPStatusError as exc:
                raise ProviderError(
                    f"{self.source} request failed: "
                    f"{exc.response.status_code}"
                ) from exc
            except httpx.TransportError as exc:
                delay = _RETRY_BASE_DELAY * (2 ** attempt)
                logger.warning(
                    "%s GET %s transport error (%s), retry %d/%d in %.1fs",
                    self.source, url, exc,
                    attempt + 1, _MAX_RETRIES, delay,
                )
                last_exc = exc
                await asyncio.sleep(delay)

        raise ProviderError(
            f"{self.source} request failed after {_MAX_RETRIES} attempts: "
            f"{last_exc}"
        ) from last_exc


class YahooClient(_RetryingClient):
    """Async client for the Yahoo Finance v8 chart endpoint."""

    source = "yahoo"

    def __init__(self, base_url: str = YAHOO_BASE_URL) -> None:
        super().__init__(headers=_YAHOO_HEADERS)
        self._base_url = base_url

    async def fetch_bars(
        self, symbol: str, interval: str, range: str,
    ) -> list[Bar]:
        """Fetch bars for *symbol*.

        Args:
            symbol: Ticker, e.g. ``"TQQQ"``.
            interval: Bar size, e.g. ``"1m"`` or ``"5m"``.
            range: History span, e.g. ``"7d"`` (1m data is capped at 7 days,
                5m data at 60 days).

        Returns an empty list when the response carries no chart result.
        """
        url = f"{self._base_url}/{symbol}"
        resp = await self._get_with_retry(
            url, {"interval": interval, "range": range},
        )
        return parse_yahoo_chart(resp.json())

    async def fetch_series(self, symbol: str, horizon: Horizon) -> list[Bar]:
        return await self.fetch_bars(symbol, horizon.resolution, horizon.range)


class FinnhubClient(_RetryingClient):
    """Async client for Finnhub's ``/stock/candle`` endpoint."""

    source = "finnhub"

    def __init__(
        self,
        api_key: str,
        base_url: str = FINNHUB_BASE_URL,
        clock=time.time,
    ) -> None:
        super().__init__()
        self._api_key = api_key
        self._base_url = base_url
        self._clock = clock

    async def fetch_bars(
        self, symbol: str, resolution: str, days_back: int,
    ) -> list[Bar]:
        """Fetch bars covering the last *days_back* days.

        *resolution* is a Finnhub code (``"1"``, ``"5"``, ``"D"``).
        A ``no_data`` status yields an empty list.
        """
        now = int(self._clock())
        params = {
            "symbol": symbol,
            "resolution": resolution,
            "from": now - days_back * 24 * 60 * 60,
            "to": now,
            "token": self._api_key,
        }
        resp = await self._get_with_retry(
            f"{self._base_url}/stock/candle", params,
        )
        return parse_finnhub_candles(resp.json())

    async def fetch_series(self, symbol: str, horizon: Horizon) -> list[Bar]:
        if horizon.resolution not in _FINNHUB_RESOLUTIONS:
            raise ProviderError(
                f"finnhub has no resolution for {horizon.resolution!r}"
            )
        return await self.fetch_bars(
            symbol,
            _FINNHUB_RESOLUTIONS[horizon.resolution],
            horizon.days_back,
        )


# ── Parsing ──────────────────────────────────────────────────────────────


def parse_yahoo_chart(data: dict) -> list[Bar]:
    """Convert a Yahoo chart payload to bars, skipping incomplete rows."""
    results = (data.get("chart") or {}).get("result") or []
    if not results:
        return []
    result = results[0]

    timestamps = result.get("timestamp") or []
    quotes = (result.get("indicators") or {}).get("quote") or []
    if not quotes:
        return []
    quote = quotes[0]
    volumes = quote.get("volume") or []

    bars: list[Bar] = []
    for i, ts in enumerate(timestamps):
        o = quote["open"][i]
        h = quote["high"][i]
        l = quote["low"][i]
        c = quote["close"][i]
        if o is None or h is None or l is None or c is None:
            continue
        volume = volumes[i] if i < len(volumes) else None
        bars.append(
            Bar(
                time=int(ts),
                open=float(o),
                high=float(h),
                low=float(l),
                close=float(c),
                volume=float(volume) if volume is not None else None,
            )
        )
    return bars


def parse_finnhub_candles(data: dict) -> list[Bar]:
    """Convert a Finnhub candle payload (parallel arrays) to bars."""
    if data.get("s") != "ok" or not data.get("t"):
        return []
    return [
        Bar(
            time=int(data["t"][i]),
            open=float(data["o"][i]),
            high=float(data["h"][i]),
            low=float(data["l"][i]),
            close=float(data["c"][i]),
            volume=float(data["v"][i]),
        )
        for i in range(len(data["t"]))
    ]


def make_provider(config) -> _RetryingClient:
    """Build the provider client selected by ``config.data_source``."""
    if config.data_source == "finnhub":
        return FinnhubClient(config.finnhub_api_key)
    return YahooClient()
