"""Signal data models — oscillator output and detected threshold events."""

from dataclasses import dataclass
from enum import Enum


class DetectionMode(str, Enum):
    """How threshold events are turned into signals."""

    EDGE = "edge"  # strict crossing into the zone
    SUSTAINED = "sustained"  # any in-zone bar, overlap-suppressed


class Side(str, Enum):
    """Which threshold the detector watches."""

    OVERSOLD = "oversold"
    OVERBOUGHT = "overbought"


@dataclass(frozen=True)
class Thresholds:
    """Oscillator zone boundaries."""

    oversold: float
    overbought: float


@dataclass(frozen=True)
class OscillatorPoint:
    """One RSI value aligned to series bar ``index``."""

    time: int
    value: float
    index: int


@dataclass(frozen=True)
class Signal:
    """A detected threshold event; the triggering bar's close is the entry."""

    time: int
    entry_price: float
    index: int
    side: Side = Side.OVERSOLD
