"""Batch scanner — backtests and ranks a universe of instruments.

Instruments are processed in fixed-size batches.  Fetch and compute run
concurrently inside a batch; batches run one after another with a fixed
delay between them to stay under the data provider's rate limit.  A
failure for one instrument becomes an errored ``ScanResult`` and never
aborts the scan.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from rsiscan.backtest.engine import TimeframeAnalyzer
from rsiscan.backtest.models import TimeframeMetrics
from rsiscan.backtest.stats import combine_metrics, combine_scores
from rsiscan.errors import CombinerIncompleteDataError
from rsiscan.market.models import Bar, Horizon, average_volume, last_close
from rsiscan.scanner.models import ScanConfig, ScanResponse, ScanResult
from rsiscan.signals.indicators import current_rsi
from rsiscan.signals.models import Side

logger = logging.getLogger("rsiscan.scanner")

FetchFn = Callable[[str, Horizon], Awaitable[list[Bar]]]
SleepFn = Callable[[float], Awaitable[None]]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_symbols(instruments: list[str]) -> list[str]:
    """Upper-case and strip symbols, dropping blanks.

    Duplicates are kept so every instrument passed in gets its own result.
    """
    return [s.strip().upper() for s in instruments if s.strip()]


def batches(items: list[str], size: int) -> list[list[str]]:
    """Split *items* into consecutive chunks of at most *size*."""
    return [items[i : i + size] for i in range(0, len(items), size)]


def rank_results(results: list[ScanResult]) -> list[ScanResult]:
    """Best combined score first; errored results last regardless of score."""
    return sorted(results, key=lambda r: (r.error is not None, -r.combined_score))


class BatchScanner:
    """Runs one scan over a list of instruments.

    Args:
        config: Validated before the first fetch.
        fetch: ``async fetch(symbol, horizon) -> list[Bar]``; may be wrapped
            in a ``CachedFetcher``.
        sleep: Awaitable used for the inter-batch delay (injectable for tests).
        data_source: Provider label echoed in the response.
    """

    def __init__(
        self,
        config: ScanConfig,
        fetch: FetchFn,
        sleep: SleepFn = asyncio.sleep,
        data_source: str = "",
    ) -> None:
        self._config = config
        self._fetch = fetch
        self._sleep = sleep
        self._data_source = data_source
        self._analyzer = TimeframeAnalyzer(config)

    # ── Public API ───────────────────────────────────────────────────────

    async def scan(self, instruments: list[str]) -> ScanResponse:
        """Backtest every instrument and return the ranked results."""
        cfg = self._config
        cfg.validate()

        symbols = normalize_symbols(instruments)
        groups = batches(symbols, cfg.batch_size)
        logger.info(
            "Scanning %d instrument(s) in %d batch(es) of up to %d.",
            len(symbols), len(groups), cfg.batch_size,
        )

        results: list[ScanResult] = []
        for n, group in enumerate(groups):
            batch_results = await asyncio.gather(
                *(self._scan_instrument(sym) for sym in group)
            )
            results.extend(batch_results)
            if n < len(groups) - 1:
                await self._sleep(cfg.batch_delay_seconds)

        ranked = rank_results(results)
        errored = sum(1 for r in ranked if r.error)
        logger.info(
            "Scan complete: %d result(s), %d errored.", len(ranked), errored,
        )
        return ScanResponse(
            results=ranked,
            timestamp=_utcnow(),
            config=cfg,
            data_source=self._data_source,
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    async def _fetch_series(
        self, symbol: str, horizon: Horizon,
    ) -> tuple[list[Bar], Optional[str]]:
        """Fetch one horizon; a provider failure becomes an empty series."""
        try:
            bars = await self._fetch(symbol, horizon)
        except Exception as exc:
            logger.warning(
                "Fetch failed for %s (%s): %s", symbol, horizon.resolution, exc,
            )
            return [], f"{horizon.name}: {exc}"
        return list(bars or []), None

    async def _scan_instrument(self, symbol: str) -> ScanResult:
        cfg = self._config
        horizons = cfg.horizons()
        fetched = await asyncio.gather(
            *(self._fetch_series(symbol, h) for h in horizons)
        )
        try:
            return self._evaluate(symbol, horizons, fetched)
        except Exception as exc:
            logger.warning("Analysis failed for %s: %s", symbol, exc)
            return ScanResult.failed(
                symbol,
                str(exc) or type(exc).__name__,
                len(cfg.targets),
                cfg.is_dual,
            )

    def _evaluate(
        self,
        symbol: str,
        horizons: tuple[Horizon, ...],
        fetched: list[tuple[list[Bar], Optional[str]]],
    ) -> ScanResult:
        cfg = self._config
        target_count = len(cfg.targets)
        metrics = [
            self._analyzer.analyze(series, horizon)
            for (series, _), horizon in zip(fetched, horizons)
        ]

        if all(m.data_points == 0 for m in metrics):
            errors = [err for _, err in fetched if err]
            return ScanResult.failed(
                symbol,
                "; ".join(errors) if errors else "No data available",
                target_count,
                cfg.is_dual,
            )

        short = metrics[0]
        long: Optional[TimeframeMetrics] = metrics[1] if cfg.is_dual else None
        if long is not None:
            try:
                combined = combine_metrics(short, long, cfg.weight_short)
            except CombinerIncompleteDataError as exc:
                if cfg.missing_horizon_score is None:
                    reasons = [str(exc)] + [err for _, err in fetched if err]
                    return ScanResult.failed(
                        symbol, "; ".join(reasons), target_count, True,
                    )
                combined = combine_scores(
                    self._score_or(short, cfg.missing_horizon_score),
                    self._score_or(long, cfg.missing_horizon_score),
                    cfg.weight_short,
                )
        else:
            combined = short.signal_strength

        # Latest price/RSI come from the finest series that has bars
        primary = next(series for series, _ in fetched if series)
        rsi = current_rsi(primary, cfg.period)
        if cfg.side == Side.OVERSOLD:
            in_zone = rsi < cfg.oversold
        else:
            in_zone = rsi > cfg.overbought

        return ScanResult(
            symbol=symbol,
            current_price=last_close(primary),
            current_rsi=rsi,
            avg_volume=average_volume(primary, cfg.volume_window),
            short_term=short,
            long_term=long,
            combined_score=combined,
            in_zone=in_zone,
        )

    @staticmethod
    def _score_or(metrics: TimeframeMetrics, substitute: int) -> int:
        if metrics.data_points == 0:
            return substitute
        return metrics.signal_strength


async def scan(
    instruments: list[str],
    fetch: FetchFn,
    config: Optional[ScanConfig] = None,
    sleep: SleepFn = asyncio.sleep,
    data_source: str = "",
) -> ScanResponse:
    """Functional entry point: ``BatchScanner(config, fetch).scan(instruments)``."""
    scanner = BatchScanner(
        config or ScanConfig(), fetch, sleep=sleep, data_source=data_source,
    )
    return await scanner.scan(instruments)
