"""Relative Strength Index — Wilder-smoothed oscillator.  Pure functions, no I/O."""

from rsiscan.market.models import Bar
from rsiscan.signals.models import OscillatorPoint


def _rsi_from_avgs(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi_values(closes: list[float], period: int = 14) -> list[float]:
    """Calculate Wilder's RSI over a list of closing prices.

    Algorithm (Wilder-smoothed):
        1. delta = close[i] - close[i-1]
        2. Separate gains (positive) and losses (|negative|).
        3. Seed average gain/loss = SMA of first *period* deltas.
        4. Subsequent: avg = (prev_avg × (period-1) + current) / period
        5. RS = avg_gain / avg_loss  (avg_loss == 0 → RSI 100)
        6. RSI = 100 - 100 / (1 + RS)

    Returns ``len(closes) - period`` values; value ``i`` belongs to close
    ``period + i``.  Fewer than ``period + 1`` closes yield ``[]``.
    """
    if period <= 0 or len(closes) < period + 1:
        return []

    deltas = [closes[i] - closes[i - 1] for i in range(1, len(closes))]
    gains = [max(d, 0.0) for d in deltas]
    losses = [max(-d, 0.0) for d in deltas]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period
    values = [_rsi_from_avgs(avg_gain, avg_loss)]

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        values.append(_rsi_from_avgs(avg_gain, avg_loss))

    return values


def compute_rsi(series: list[Bar], period: int = 14) -> list[OscillatorPoint]:
    """RSI points aligned to *series*.

    The first *period* bars produce no point; point ``i`` aligns to
    ``series[period + i]``.  A series shorter than ``period + 1`` bars is
    insufficient data and yields an empty list.
    """
    values = rsi_values([b.close for b in series], period)
    return [
        OscillatorPoint(
            time=series[period + i].time,
            value=value,
            index=period + i,
        )
        for i, value in enumerate(values)
    ]


def current_rsi(series: list[Bar], period: int = 14, default: float = 50.0) -> float:
    """Most recent RSI value, or *default* when the series is too short."""
    values = rsi_values([b.close for b in series], period)
    return values[-1] if values else default


def rsi_status(value: float, oversold: float, overbought: float) -> str:
    """Classify an RSI reading as ``"buy"``, ``"sell"`` or ``"neutral"``."""
    if value < oversold:
        return "buy"
    if value > overbought:
        return "sell"
    return "neutral"


def crossed(previous: float, current: float, threshold: float, direction: str) -> bool:
    """Did the oscillator cross *threshold* between two consecutive readings?

    ``"below"``: previous >= threshold and current < threshold.
    ``"above"``: previous <= threshold and current > threshold.
    """
    if direction == "below":
        return previous >= threshold and current < threshold
    if direction == "above":
        return previous <= threshold and current > threshold
    raise ValueError(f"direction must be 'below' or 'above', got {direction!r}")
