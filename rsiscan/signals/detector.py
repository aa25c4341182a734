"""Threshold detector — turns an oscillator series into discrete signals.

Two policies are supported and are not interchangeable:

* ``EDGE``: one signal per strict crossing into the zone.  Consecutive
  in-zone points never re-trigger until the oscillator leaves the zone.
* ``SUSTAINED``: every in-zone point is a candidate, but a candidate within
  ``lookforward_bars`` of the previously emitted signal is suppressed so one
  reversal is not counted many times.

The overbought side mirrors both inequalities.
"""

from rsiscan.market.models import Bar
from rsiscan.signals.indicators import crossed
from rsiscan.signals.models import (
    DetectionMode,
    OscillatorPoint,
    Side,
    Signal,
    Thresholds,
)


def _in_zone(value: float, thresholds: Thresholds, side: Side) -> bool:
    if side == Side.OVERSOLD:
        return value < thresholds.oversold
    return value > thresholds.overbought


def _make_signal(point: OscillatorPoint, series: list[Bar], side: Side) -> Signal:
    return Signal(
        time=point.time,
        entry_price=series[point.index].close,
        index=point.index,
        side=side,
    )


def detect_signals(
    points: list[OscillatorPoint],
    series: list[Bar],
    thresholds: Thresholds,
    mode: DetectionMode = DetectionMode.SUSTAINED,
    side: Side = Side.OVERSOLD,
    lookforward_bars: int = 1,
) -> list[Signal]:
    """Scan *points* and emit signals according to *mode*.

    Args:
        points: Output of ``compute_rsi`` over *series*.
        series: The bars the points align to (entry price source).
        thresholds: Oversold/overbought levels.
        mode: ``EDGE`` or ``SUSTAINED``.
        side: Which zone to watch.
        lookforward_bars: Suppression distance for ``SUSTAINED`` mode.

    Returns signals in chronological order.
    """
    mode = DetectionMode(mode)
    side = Side(side)
    if mode == DetectionMode.EDGE:
        return _detect_edges(points, series, thresholds, side)
    return _detect_sustained(points, series, thresholds, side, lookforward_bars)


def _detect_edges(
    points: list[OscillatorPoint],
    series: list[Bar],
    thresholds: Thresholds,
    side: Side,
) -> list[Signal]:
    if side == Side.OVERSOLD:
        threshold, direction = thresholds.oversold, "below"
    else:
        threshold, direction = thresholds.overbought, "above"

    signals: list[Signal] = []
    for prev, point in zip(points, points[1:]):
        if crossed(prev.value, point.value, threshold, direction):
            signals.append(_make_signal(point, series, side))
    return signals


def _detect_sustained(
    points: list[OscillatorPoint],
    series: list[Bar],
    thresholds: Thresholds,
    side: Side,
    lookforward_bars: int,
) -> list[Signal]:
    signals: list[Signal] = []
    last_index = None
    for point in points:
        if not _in_zone(point.value, thresholds, side):
            continue
        if last_index is not None and point.index - last_index < lookforward_bars:
            continue
        signals.append(_make_signal(point, series, side))
        last_index = point.index
    return signals
