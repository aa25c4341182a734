"""Market data models — typed representation of a price bar."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Bar:
    """A single OHLCV bar.

    ``time`` is a Unix timestamp in seconds; timestamps within a series are
    strictly increasing.  ``volume`` may be missing for some providers.
    """

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


def last_close(series: list[Bar]) -> float:
    """Close of the most recent bar, or 0.0 for an empty series."""
    if not series:
        return 0.0
    return series[-1].close


def average_volume(series: list[Bar], window: int = 100) -> float:
    """Mean volume over the last *window* bars (missing volume counts as 0)."""
    recent = series[-window:]
    if not recent:
        return 0.0
    return sum(b.volume or 0.0 for b in recent) / len(recent)


@dataclass(frozen=True)
class Horizon:
    """One analysis timeframe: bar resolution, history range and window.

    ``lookforward_bars`` defaults to one trading day of bars.
    """

    name: str
    resolution: str  # "1m", "5m", "1d", ...
    range: str  # history requested from the provider, e.g. "7d"
    bars_per_day: int
    minutes_per_bar: int
    lookforward_bars: Optional[int] = None

    @property
    def window(self) -> int:
        """Bars examined after each signal."""
        if self.lookforward_bars is not None:
            return self.lookforward_bars
        return self.bars_per_day

    @property
    def days_back(self) -> int:
        """History range in calendar days (``"60d"`` → 60)."""
        unit = self.range[-1]
        count = int(self.range[:-1])
        if unit == "d":
            return count
        if unit == "w":
            return count * 7
        if unit == "y":
            return count * 365
        raise ValueError(f"Unsupported range {self.range!r}")


# 1-minute bars for the past 7 days; Yahoo serves at most 7 days of 1m data
SHORT_TERM = Horizon(
    name="short_term",
    resolution="1m",
    range="7d",
    bars_per_day=390,
    minutes_per_bar=1,
)

# 5-minute bars for the past 60 days
LONG_TERM = Horizon(
    name="long_term",
    resolution="5m",
    range="60d",
    bars_per_day=78,
    minutes_per_bar=5,
)
