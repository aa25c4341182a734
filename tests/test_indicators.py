"""Tests for rsiscan.signals.indicators — Wilder RSI and helpers."""

import pytest

from rsiscan.signals.indicators import (
    compute_rsi,
    crossed,
    current_rsi,
    rsi_status,
    rsi_values,
)

from conftest import make_series


class TestComputeRsi:

    def test_short_series_returns_empty(self):
        """Fewer than period + 1 bars is insufficient data, not an error."""
        series = make_series([100.0 + i for i in range(14)])
        assert compute_rsi(series, period=14) == []
        assert compute_rsi([], period=14) == []

    def test_exactly_period_plus_one_gives_one_point(self):
        series = make_series([100.0 + i for i in range(15)])
        points = compute_rsi(series, period=14)
        assert len(points) == 1
        assert points[0].index == 14
        assert points[0].time == series[14].time

    def test_rising_seed_window_gives_100(self):
        """avg_loss == 0 over the seed window → first value is exactly 100."""
        series = make_series([10.0, 11.0, 12.5, 13.0, 14.0, 15.0])
        points = compute_rsi(series, period=5)
        assert points[0].value == 100.0

    def test_wilder_recurrence_known_values(self):
        """period 2 over 1,2,1,2,1:
        seed ag=al=0.5 → 50; ag=.75 al=.25 → 75; ag=.375 al=.625 → 37.5
        """
        values = rsi_values([1.0, 2.0, 1.0, 2.0, 1.0], period=2)
        assert values == pytest.approx([50.0, 75.0, 37.5])

    def test_alignment_and_bounds(self, three_dip_series):
        points = compute_rsi(three_dip_series, period=14)
        assert len(points) == len(three_dip_series) - 14
        for i, p in enumerate(points):
            assert p.index == 14 + i
            assert p.time == three_dip_series[14 + i].time
            assert 0.0 <= p.value <= 100.0

    def test_non_positive_period_returns_empty(self):
        assert rsi_values([1.0, 2.0, 3.0], period=0) == []


class TestHelpers:

    def test_current_rsi_default_when_short(self):
        assert current_rsi(make_series([1.0, 2.0]), period=14) == 50.0

    def test_current_rsi_last_value(self, three_dip_series):
        points = compute_rsi(three_dip_series, period=14)
        assert current_rsi(three_dip_series, 14) == points[-1].value

    def test_rsi_status(self):
        assert rsi_status(30.0, 50, 70) == "buy"
        assert rsi_status(75.0, 50, 70) == "sell"
        assert rsi_status(60.0, 50, 70) == "neutral"
        assert rsi_status(50.0, 50, 70) == "neutral"

    def test_crossed_below(self):
        assert crossed(50.0, 49.9, 50.0, "below") is True
        assert crossed(49.0, 48.0, 50.0, "below") is False
        assert crossed(55.0, 50.0, 50.0, "below") is False

    def test_crossed_above(self):
        assert crossed(70.0, 70.1, 70.0, "above") is True
        assert crossed(71.0, 72.0, 70.0, "above") is False

    def test_crossed_bad_direction(self):
        with pytest.raises(ValueError):
            crossed(1.0, 2.0, 1.5, "sideways")
