"""Scanner data models — scan configuration, per-instrument results, response."""

from dataclasses import asdict, dataclass, field, replace
from typing import Optional

from rsiscan.backtest.models import TimeframeMetrics
from rsiscan.backtest.stats import ScoringPolicy
from rsiscan.errors import ConfigurationError
from rsiscan.market.models import LONG_TERM, SHORT_TERM, Horizon
from rsiscan.signals.models import DetectionMode, Side, Thresholds

# Leveraged ETFs scanned when no symbols are given
DEFAULT_UNIVERSE: tuple[str, ...] = (
    # 3x
    "TQQQ", "SOXL", "UPRO", "SPXL", "TECL", "FAS", "TNA", "LABU", "FNGU", "NAIL",
    "DPST", "DFEN", "RETL", "MIDU", "UDOW", "URTY", "WEBL", "HIBL", "WANT", "DUSL",
    # 2x
    "QLD", "SSO", "UWM", "DDM", "MVV", "SAA", "UYG", "ROM", "USD", "UGE",
)


@dataclass(frozen=True)
class ScanConfig:
    """Every parameter of one scan invocation.

    ``lookforward_bars=None`` lets each horizon use one trading day of bars.
    ``missing_horizon_score=None`` marks a dual-horizon instrument as errored
    when one horizon has no data; an int substitutes that score instead.
    """

    period: int = 14
    oversold: float = 50.0
    overbought: float = 70.0
    targets: tuple[float, ...] = (0.015, 0.02)
    lookforward_bars: Optional[int] = None
    horizon: str = "dual"  # "single" or "dual"
    mode: DetectionMode = DetectionMode.SUSTAINED
    side: Side = Side.OVERSOLD
    short_horizon: Horizon = SHORT_TERM
    long_horizon: Horizon = LONG_TERM
    batch_size: int = 2
    batch_delay_seconds: float = 0.5
    weight_short: float = 0.6
    min_history_bars: int = 100
    require_full_horizon: bool = True
    missing_horizon_score: Optional[int] = None
    volume_window: int = 100
    min_win_rate: Optional[float] = None
    min_signals: Optional[int] = None
    in_zone_only: bool = False
    scoring: ScoringPolicy = field(default_factory=ScoringPolicy)

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))
        try:
            object.__setattr__(self, "mode", DetectionMode(self.mode))
            object.__setattr__(self, "side", Side(self.side))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from None

    @property
    def thresholds(self) -> Thresholds:
        return Thresholds(oversold=self.oversold, overbought=self.overbought)

    @property
    def is_dual(self) -> bool:
        return self.horizon == "dual"

    def horizons(self) -> tuple[Horizon, ...]:
        """Horizons analysed for each instrument, short-term first."""
        chosen = [self.short_horizon]
        if self.is_dual:
            chosen.append(self.long_horizon)
        if self.lookforward_bars is not None:
            chosen = [replace(h, lookforward_bars=self.lookforward_bars) for h in chosen]
        return tuple(chosen)

    def validate(self) -> None:
        """Raise ``ConfigurationError`` describing the first invalid parameter."""
        if not isinstance(self.period, int) or self.period <= 0:
            raise ConfigurationError(f"period must be a positive integer, got {self.period}")
        for name in ("oversold", "overbought"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(f"{name} must be within [0, 100], got {value}")
        if self.oversold >= self.overbought:
            raise ConfigurationError(
                f"oversold ({self.oversold}) must be below overbought ({self.overbought})"
            )
        if not self.targets:
            raise ConfigurationError("targets must contain at least one gain")
        if any(t <= 0 for t in self.targets):
            raise ConfigurationError(f"targets must be positive fractions, got {self.targets}")
        if self.lookforward_bars is not None and self.lookforward_bars <= 0:
            raise ConfigurationError(
                f"lookforward_bars must be positive, got {self.lookforward_bars}"
            )
        if self.horizon not in ("single", "dual"):
            raise ConfigurationError(
                f"horizon must be 'single' or 'dual', got {self.horizon!r}"
            )
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.batch_delay_seconds < 0:
            raise ConfigurationError(
                f"batch_delay_seconds must be >= 0, got {self.batch_delay_seconds}"
            )
        if not 0 <= self.weight_short <= 1:
            raise ConfigurationError(
                f"weight_short must be within [0, 1], got {self.weight_short}"
            )
        if self.min_history_bars < 0 or self.volume_window < 1:
            raise ConfigurationError("min_history_bars and volume_window out of range")
        if self.missing_horizon_score is not None and not 0 <= self.missing_horizon_score <= 100:
            raise ConfigurationError(
                f"missing_horizon_score must be within [0, 100], got {self.missing_horizon_score}"
            )
        if self.min_win_rate is not None and not 0 <= self.min_win_rate <= 100:
            raise ConfigurationError(
                f"min_win_rate must be within [0, 100], got {self.min_win_rate}"
            )
        if self.min_signals is not None and self.min_signals < 0:
            raise ConfigurationError(f"min_signals must be >= 0, got {self.min_signals}")
        self.scoring.validate()

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mode"] = self.mode.value
        data["side"] = self.side.value
        data["targets"] = list(self.targets)
        return data


@dataclass(frozen=True)
class ScanResult:
    """Terminal record for one instrument in one scan."""

    symbol: str
    current_price: float
    current_rsi: float
    avg_volume: float
    short_term: TimeframeMetrics
    long_term: Optional[TimeframeMetrics]
    combined_score: int
    in_zone: bool
    error: Optional[str] = None

    @classmethod
    def failed(
        cls, symbol: str, error: str, target_count: int = 2, dual: bool = True,
    ) -> "ScanResult":
        """Errored result with zeroed metrics."""
        return cls(
            symbol=symbol,
            current_price=0.0,
            current_rsi=0.0,
            avg_volume=0.0,
            short_term=TimeframeMetrics.empty(target_count),
            long_term=TimeframeMetrics.empty(target_count) if dual else None,
            combined_score=0,
            in_zone=False,
            error=error,
        )

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "current_price": self.current_price,
            "current_rsi": self.current_rsi,
            "avg_volume": self.avg_volume,
            "short_term": self.short_term.to_dict(),
            "long_term": self.long_term.to_dict() if self.long_term else None,
            "combined_score": self.combined_score,
            "in_zone": self.in_zone,
            "error": self.error,
        }


@dataclass(frozen=True)
class ScanResponse:
    """Ranked results plus the effective configuration that produced them."""

    results: list[ScanResult]
    timestamp: str
    config: ScanConfig
    data_source: str = ""

    def methodology(self) -> dict:
        """Plain-language description of how the scores were produced."""
        cfg = self.config
        comparison = "below" if cfg.side == Side.OVERSOLD else "above"
        level = cfg.oversold if cfg.side == Side.OVERSOLD else cfg.overbought
        trigger = (
            f"RSI({cfg.period}) crosses {comparison} {level:g}"
            if cfg.mode == DetectionMode.EDGE
            else f"RSI({cfg.period}) {comparison} {level:g} (one signal per window)"
        )
        horizons = {
            h.name: {
                "resolution": h.resolution,
                "range": h.range,
                "target_window_bars": h.window,
            }
            for h in cfg.horizons()
        }
        return {
            "horizons": horizons,
            "signal_trigger": trigger,
            "targets": [f"{t * 100:g}% gain" for t in cfg.targets],
            "score_formula": (
                f"Combined: {cfg.weight_short * 100:g}% short-term + "
                f"{(1 - cfg.weight_short) * 100:g}% long-term"
                if cfg.is_dual
                else "Single horizon signal strength"
            ),
        }

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "timestamp": self.timestamp,
            "config": self.config.to_dict(),
            "data_source": self.data_source,
            "methodology": self.methodology(),
        }
