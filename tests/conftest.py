"""Shared bar-series fixtures."""

import pytest

from rsiscan.market.models import Bar


def make_series(closes, start=1_700_000_000, step=60, wick=0.2, volume=1000.0):
    """Doji bars (open == close) with a symmetric *wick*."""
    return [
        Bar(
            time=start + i * step,
            open=c,
            high=c + wick,
            low=c - wick,
            close=c,
            volume=volume,
        )
        for i, c in enumerate(closes)
    ]


def three_dip_closes():
    """300 closes whose RSI(14) crosses below 50 exactly three times.

    - bars 0..30: rise 100 → 130 (RSI pinned at 100)
    - three cycles of 20 one-point declines then 20 one-point rises
      (130 → 110 → 130); RSI falls through 50 once per decline and
      recovers to ~82 on each rise
    - bars 151..299: flat at 130 (RSI unchanged)

    Every dip is followed by a ~+8% recovery inside a 40-bar window.
    """
    closes = [100.0 + i for i in range(31)]
    for _ in range(3):
        closes += [closes[-1] - 1.0 * (k + 1) for k in range(20)]
        closes += [closes[-1] + 1.0 * (k + 1) for k in range(20)]
    closes += [closes[-1]] * (300 - len(closes))
    return closes


@pytest.fixture
def three_dip_series():
    series = make_series(three_dip_closes())
    assert len(series) == 300
    return series
