"""Backtest engine — single-horizon signal backtest for one bar series.

RSI → threshold detection → outcome replay per signal → aggregation and
scoring.  The same pipeline serves every horizon; only the ``Horizon``
(resolution, bars per day, lookahead window) changes.
"""

import logging

from rsiscan.backtest.models import TimeframeMetrics
from rsiscan.backtest.simulator import has_full_horizon, simulate_outcome
from rsiscan.backtest.stats import aggregate_outcomes
from rsiscan.market.models import Bar, Horizon
from rsiscan.signals.detector import detect_signals
from rsiscan.signals.indicators import compute_rsi
from rsiscan.signals.models import Signal

logger = logging.getLogger("rsiscan.backtest")


class TimeframeAnalyzer:
    """Backtests RSI threshold signals on historical bars.

    Args:
        config: A ``ScanConfig`` (period, thresholds, mode, side, targets,
            history requirement and scoring policy are read from it).
    """

    def __init__(self, config) -> None:
        self._config = config

    # ── Public API ───────────────────────────────────────────────────────

    def signals(self, series: list[Bar], horizon: Horizon) -> list[Signal]:
        """Signals eligible for outcome simulation on *series*."""
        cfg = self._config
        window = horizon.window
        points = compute_rsi(series, cfg.period)
        signals = detect_signals(
            points,
            series,
            cfg.thresholds,
            mode=cfg.mode,
            side=cfg.side,
            lookforward_bars=window,
        )
        if cfg.require_full_horizon:
            signals = [s for s in signals if has_full_horizon(series, s, window)]
        return signals

    def analyze(self, series: list[Bar], horizon: Horizon) -> TimeframeMetrics:
        """Compute the metrics of *series* at *horizon*.

        Series shorter than ``period + min_history_bars`` are insufficient
        data and return zeroed metrics.
        """
        cfg = self._config
        target_count = len(cfg.targets)
        if len(series) < cfg.period + cfg.min_history_bars:
            logger.debug(
                "%s: %d bars is insufficient for RSI(%d)",
                horizon.name, len(series), cfg.period,
            )
            return TimeframeMetrics.empty(target_count)

        outcomes = [
            simulate_outcome(series, signal, horizon.window, cfg.targets)
            for signal in self.signals(series, horizon)
        ]
        return aggregate_outcomes(
            outcomes,
            target_count=target_count,
            minutes_per_bar=horizon.minutes_per_bar,
            data_points=len(series),
            policy=cfg.scoring,
        )
