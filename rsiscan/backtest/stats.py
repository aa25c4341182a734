"""Backtest statistics — aggregation, scoring and horizon fusion.

Pure functions over simulated outcomes.  Percentages are 0-100 throughout.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from rsiscan.backtest.models import Outcome, TimeframeMetrics
from rsiscan.errors import CombinerIncompleteDataError, ConfigurationError


@dataclass(frozen=True)
class ScoringPolicy:
    """Every tunable constant of the signal-strength score.

    ``sample_size_breakpoints`` is a sequence of ``(min_signals, score)``
    pairs; the first pair whose threshold is met wins.  Below the lowest
    threshold each signal earns ``sample_size_per_signal`` points.
    """

    win_rate_weight: float = 0.5
    risk_reward_weight: float = 0.3
    sample_size_weight: float = 0.2
    risk_reward_scale: float = 50.0
    neutral_risk_reward: float = 50.0
    sample_size_breakpoints: tuple[tuple[int, float], ...] = (
        (10, 100.0),
        (5, 70.0),
        (3, 50.0),
    )
    sample_size_per_signal: float = 15.0

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if the policy is not well formed."""
        weights = (
            self.win_rate_weight,
            self.risk_reward_weight,
            self.sample_size_weight,
        )
        if any(w < 0 for w in weights):
            raise ConfigurationError("score weights must be non-negative")
        if not math.isclose(sum(weights), 1.0):
            raise ConfigurationError(
                f"score weights must sum to 1.0, got {sum(weights)}"
            )
        if not self.sample_size_breakpoints:
            raise ConfigurationError("sample_size_breakpoints must not be empty")
        ordered = sorted(self.sample_size_breakpoints, reverse=True)
        scores = [s for _, s in ordered]
        if scores != sorted(scores, reverse=True):
            raise ConfigurationError(
                "sample-size scores must not decrease as the signal count grows"
            )
        if scores[0] != 100 or any(n <= 0 for n, _ in ordered):
            raise ConfigurationError(
                "sample-size breakpoints need positive counts and must "
                "saturate at a score of 100"
            )
        if self.sample_size_per_signal < 0:
            raise ConfigurationError("sample_size_per_signal must be >= 0")


DEFAULT_POLICY = ScoringPolicy()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


# ── Aggregation ──────────────────────────────────────────────────────────


def aggregate_outcomes(
    outcomes: list[Outcome],
    target_count: int = 2,
    minutes_per_bar: int = 1,
    data_points: int = 0,
    policy: Optional[ScoringPolicy] = None,
) -> TimeframeMetrics:
    """Reduce the outcomes of one series/horizon to summary metrics.

    Time-to-target-A is averaged over the outcomes that hit target A only;
    it is 0 when none did.  Excursion averages include every outcome.
    The returned metrics carry their ``signal_strength`` score.
    """
    count = len(outcomes)
    wins = tuple(
        sum(1 for o in outcomes if k < len(o.hits) and o.hits[k])
        for k in range(target_count)
    )
    win_rates = tuple(
        (w / count) * 100.0 if count > 0 else 0.0 for w in wins
    )

    hit_times = [o.bars_to_target_a for o in outcomes if o.reached_target_a]
    avg_bars = sum(hit_times) / len(hit_times) if hit_times else 0.0

    avg_gain = sum(o.max_gain_pct for o in outcomes) / count if count else 0.0
    avg_dd = sum(o.max_drawdown_pct for o in outcomes) / count if count else 0.0

    metrics = TimeframeMetrics(
        total_signals=count,
        wins=wins,
        win_rates=win_rates,
        avg_bars_to_target_a=avg_bars,
        avg_minutes_to_target_a=avg_bars * minutes_per_bar,
        avg_max_gain=avg_gain,
        avg_max_drawdown=avg_dd,
        signal_strength=0,
        data_points=data_points,
    )
    return replace(metrics, signal_strength=score_metrics(metrics, policy))


# ── Scoring ──────────────────────────────────────────────────────────────


def risk_reward_score(
    avg_max_gain: float,
    avg_max_drawdown: float,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> float:
    """Gain/drawdown ratio scaled to 0-100; neutral when there is no drawdown."""
    if avg_max_drawdown <= 0:
        return policy.neutral_risk_reward
    return min(100.0, policy.risk_reward_scale * avg_max_gain / avg_max_drawdown)


def sample_size_score(
    total_signals: int, policy: ScoringPolicy = DEFAULT_POLICY,
) -> float:
    """Step credit for the number of signals, saturating at the top step."""
    ordered = sorted(policy.sample_size_breakpoints, reverse=True)
    for min_signals, score in ordered:
        if total_signals >= min_signals:
            return min(100.0, score)
    lowest_score = ordered[-1][1]
    return min(lowest_score, max(0, total_signals) * policy.sample_size_per_signal)


def score_metrics(
    metrics: TimeframeMetrics, policy: Optional[ScoringPolicy] = None,
) -> int:
    """Composite 0-100 signal-strength score.

    score = w1 × win_rate_A + w2 × risk_reward + w3 × sample_size
    """
    policy = policy or DEFAULT_POLICY
    raw = (
        policy.win_rate_weight * metrics.win_rate_at_target_a
        + policy.risk_reward_weight
        * risk_reward_score(metrics.avg_max_gain, metrics.avg_max_drawdown, policy)
        + policy.sample_size_weight
        * sample_size_score(metrics.total_signals, policy)
    )
    return max(0, min(100, round_half_up(raw)))


# ── Multi-timeframe fusion ───────────────────────────────────────────────


def combine_scores(
    short_score: float, long_score: float, weight_short: float = 0.6,
) -> int:
    """Weighted fusion of a short- and a long-horizon score."""
    if not 0.0 <= weight_short <= 1.0:
        raise ConfigurationError(
            f"weight_short must be within [0, 1], got {weight_short}"
        )
    combined = weight_short * short_score + (1.0 - weight_short) * long_score
    return max(0, min(100, round_half_up(combined)))


def combine_metrics(
    short: TimeframeMetrics,
    long: TimeframeMetrics,
    weight_short: float = 0.6,
) -> int:
    """Combine two horizons' scores.

    Raises ``CombinerIncompleteDataError`` when either horizon analysed zero
    bars; the caller decides whether to substitute a score or error out.
    """
    missing = [
        name
        for name, m in (("short-term", short), ("long-term", long))
        if m.data_points == 0
    ]
    if missing:
        raise CombinerIncompleteDataError(
            f"Incomplete data: no {' or '.join(missing)} bars"
        )
    return combine_scores(short.signal_strength, long.signal_strength, weight_short)
