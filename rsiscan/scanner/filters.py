"""Post-filters over ranked scan results.  Pure; results are never mutated."""

from typing import Optional

from rsiscan.backtest.models import TimeframeMetrics
from rsiscan.scanner.models import ScanResponse, ScanResult

VIEWS = ("short_term", "long_term")


def view_metrics(result: ScanResult, view: str = "short_term") -> TimeframeMetrics:
    """Metrics the filters judge a result by.

    Single-horizon results have no long-term metrics and fall back to the
    short-term ones.
    """
    if view not in VIEWS:
        raise ValueError(f"view must be one of {', '.join(VIEWS)}, got {view!r}")
    if view == "long_term" and result.long_term is not None:
        return result.long_term
    return result.short_term


def filter_reasons(
    result: ScanResult,
    min_win_rate: Optional[float] = None,
    min_signals: Optional[int] = None,
    in_zone_only: bool = False,
    view: str = "short_term",
) -> list[str]:
    """Why *result* would be excluded; empty when it passes."""
    if result.error:
        return [f"error: {result.error}"]

    metrics = view_metrics(result, view)
    reasons: list[str] = []
    if min_signals is not None and metrics.total_signals < min_signals:
        reasons.append(f"{metrics.total_signals} signals (need {min_signals})")
    if min_win_rate is not None and metrics.win_rate_at_target_a < min_win_rate:
        reasons.append(
            f"{metrics.win_rate_at_target_a:.0f}% win rate (need {min_win_rate:g}%)"
        )
    if in_zone_only and not result.in_zone:
        reasons.append("not currently in signal zone")
    return reasons


def filter_results(
    results: list[ScanResult],
    min_win_rate: Optional[float] = None,
    min_signals: Optional[int] = None,
    in_zone_only: bool = False,
    view: str = "short_term",
) -> list[ScanResult]:
    """Results passing every filter, in their original order.  Errored
    results never pass."""
    return [
        r
        for r in results
        if not filter_reasons(r, min_win_rate, min_signals, in_zone_only, view)
    ]


def hot_opportunities(
    results: list[ScanResult],
    min_win_rate: float = 60.0,
    min_signals: int = 2,
) -> list[ScanResult]:
    """Instruments in the zone right now whose short-term record is strong."""
    return filter_results(
        results,
        min_win_rate=min_win_rate,
        min_signals=min_signals,
        in_zone_only=True,
    )


def passing_results(response: ScanResponse) -> list[ScanResult]:
    """Results passing the filters carried by the response's scan config."""
    cfg = response.config
    return filter_results(
        response.results,
        min_win_rate=cfg.min_win_rate,
        min_signals=cfg.min_signals,
        in_zone_only=cfg.in_zone_only,
    )
