"""Internal API router — /scan endpoint.

No business logic.  Builds a ``ScanConfig`` from query parameters and
delegates to the batch scanner.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from rsiscan.errors import ConfigurationError
from rsiscan.scanner.batch import BatchScanner
from rsiscan.scanner.filters import filter_reasons, hot_opportunities, passing_results
from rsiscan.scanner.models import DEFAULT_UNIVERSE, ScanConfig

logger = logging.getLogger("rsiscan")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_fetch = None  # Set via configure_routers()
_data_source: str = ""
_scan_defaults: dict = {
    "batch_size": 2,
    "batch_delay_seconds": 0.5,
}


def configure_routers(
    fetch,
    data_source: str = "",
    batch_size: Optional[int] = None,
    batch_delay_seconds: Optional[float] = None,
) -> None:
    """Inject dependencies from the application startup.

    Args:
        fetch: ``async fetch(symbol, horizon)`` callable, usually a
            ``CachedFetcher`` around a provider client.
        data_source: Provider label echoed in responses.
        batch_size: Instruments fetched concurrently per batch.
        batch_delay_seconds: Pause between batches.
    """
    global _fetch, _data_source  # noqa: PLW0603
    _fetch = fetch
    _data_source = data_source
    if batch_size is not None:
        _scan_defaults["batch_size"] = batch_size
    if batch_delay_seconds is not None:
        _scan_defaults["batch_delay_seconds"] = batch_delay_seconds


def _parse_targets(raw: str) -> tuple[float, ...]:
    try:
        return tuple(float(t) for t in raw.split(",") if t.strip())
    except ValueError:
        raise ConfigurationError(f"targets must be numbers, got {raw!r}") from None


@router.get("/scan")
async def scan_endpoint(
    symbols: Optional[str] = Query(None, description="Comma-separated tickers"),
    period: int = Query(14),
    oversold: float = Query(50.0),
    overbought: float = Query(70.0),
    targets: str = Query("0.015,0.02"),
    lookforward_bars: Optional[int] = Query(None),
    horizon: str = Query("dual"),
    mode: str = Query("sustained"),
    side: str = Query("oversold"),
    min_win_rate: Optional[float] = Query(None),
    min_signals: Optional[int] = Query(None),
    in_zone_only: bool = Query(False),
):
    """Backtest and rank *symbols* (default: leveraged-ETF universe)."""
    if _fetch is None:
        raise HTTPException(status_code=503, detail="No data provider configured")

    instruments = symbols.split(",") if symbols else list(DEFAULT_UNIVERSE)
    try:
        config = ScanConfig(
            period=period,
            oversold=oversold,
            overbought=overbought,
            targets=_parse_targets(targets),
            lookforward_bars=lookforward_bars,
            horizon=horizon,
            mode=mode,
            side=side,
            min_win_rate=min_win_rate,
            min_signals=min_signals,
            in_zone_only=in_zone_only,
            **_scan_defaults,
        )
        response = await BatchScanner(
            config, _fetch, data_source=_data_source,
        ).scan(instruments)
    except ConfigurationError as exc:
        logger.warning("Rejected scan request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    body = response.to_dict()
    body["passing"] = [r.to_dict() for r in passing_results(response)]
    body["hot"] = [r.to_dict() for r in hot_opportunities(response.results)]
    body["excluded"] = {
        r.symbol: reasons
        for r in response.results
        if (reasons := filter_reasons(r, min_win_rate, min_signals, in_zone_only))
    }
    return body
