"""Backtest data models — per-signal outcomes and per-horizon metrics."""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class Outcome:
    """What happened after one signal within the lookahead window.

    ``hits[k]`` / ``bars_to_hit[k]`` refer to the k-th configured target.
    Excursions are percentages of the entry price and never negative.
    """

    hits: tuple[bool, ...]
    bars_to_hit: tuple[Optional[int], ...]
    max_gain_pct: float
    max_drawdown_pct: float
    bars_observed: int

    @property
    def reached_target_a(self) -> bool:
        return bool(self.hits) and self.hits[0]

    @property
    def reached_target_b(self) -> bool:
        return len(self.hits) > 1 and self.hits[1]

    @property
    def bars_to_target_a(self) -> Optional[int]:
        return self.bars_to_hit[0] if self.bars_to_hit else None


@dataclass(frozen=True)
class TimeframeMetrics:
    """Aggregate reliability statistics for one series at one horizon.

    Win rates are percentages (0-100).  ``data_points`` is the number of
    bars analysed; 0 marks a horizon with no usable data.
    """

    total_signals: int
    wins: tuple[int, ...]
    win_rates: tuple[float, ...]
    avg_bars_to_target_a: float
    avg_minutes_to_target_a: float
    avg_max_gain: float
    avg_max_drawdown: float
    signal_strength: int
    data_points: int

    @classmethod
    def empty(cls, target_count: int = 2) -> "TimeframeMetrics":
        """Zeroed metrics used for insufficient data and errored results."""
        return cls(
            total_signals=0,
            wins=(0,) * target_count,
            win_rates=(0.0,) * target_count,
            avg_bars_to_target_a=0.0,
            avg_minutes_to_target_a=0.0,
            avg_max_gain=0.0,
            avg_max_drawdown=0.0,
            signal_strength=0,
            data_points=0,
        )

    @property
    def wins_at_target_a(self) -> int:
        return self.wins[0] if self.wins else 0

    @property
    def wins_at_target_b(self) -> int:
        return self.wins[1] if len(self.wins) > 1 else 0

    @property
    def win_rate_at_target_a(self) -> float:
        return self.win_rates[0] if self.win_rates else 0.0

    @property
    def win_rate_at_target_b(self) -> float:
        return self.win_rates[1] if len(self.win_rates) > 1 else 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["wins"] = list(self.wins)
        data["win_rates"] = list(self.win_rates)
        data["wins_at_target_a"] = self.wins_at_target_a
        data["wins_at_target_b"] = self.wins_at_target_b
        data["win_rate_at_target_a"] = self.win_rate_at_target_a
        data["win_rate_at_target_b"] = self.win_rate_at_target_b
        return data
