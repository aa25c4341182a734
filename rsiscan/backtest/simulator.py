"""Outcome simulator — replays the bars after a signal.  Pure math, no I/O."""

from typing import Optional

from rsiscan.backtest.models import Outcome
from rsiscan.market.models import Bar
from rsiscan.signals.models import Signal


def has_full_horizon(series: list[Bar], signal: Signal, lookforward_bars: int) -> bool:
    """``True`` when all *lookforward_bars* bars after the signal exist."""
    return signal.index + lookforward_bars < len(series)


def simulate_outcome(
    series: list[Bar],
    signal: Signal,
    lookforward_bars: int,
    targets: tuple[float, ...],
) -> Outcome:
    """Replay up to *lookforward_bars* bars after *signal*.

    Each target is a fractional gain over the entry (``0.015`` = +1.5 %) and
    counts as hit on the first bar whose high reaches it.  The replay stops
    early once every target is hit.  A series that ends inside the window
    yields an outcome over the bars actually available.
    """
    entry = signal.entry_price
    levels = [entry * (1.0 + t) for t in targets]
    bars_to_hit: list[Optional[int]] = [None] * len(targets)

    max_gain = 0.0
    max_drawdown = 0.0
    observed = 0

    for j in range(1, lookforward_bars + 1):
        idx = signal.index + j
        if idx >= len(series):
            break
        bar = series[idx]
        observed = j

        max_gain = max(max_gain, (bar.high - entry) / entry * 100.0)
        max_drawdown = max(max_drawdown, (entry - bar.low) / entry * 100.0)

        for k, level in enumerate(levels):
            if bars_to_hit[k] is None and bar.high >= level:
                bars_to_hit[k] = j

        if all(b is not None for b in bars_to_hit):
            break

    return Outcome(
        hits=tuple(b is not None for b in bars_to_hit),
        bars_to_hit=tuple(bars_to_hit),
        max_gain_pct=max_gain,
        max_drawdown_pct=max_drawdown,
        bars_observed=observed,
    )
