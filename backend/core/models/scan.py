"""Scanner result models.

Every result carries ``symbol`` and ``price`` plus the classification and
provenance fields that justify it.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ScanResult(BaseModel):
    """Fields shared by every scanner result."""

    symbol: str
    price: float


class TrendDipResult(ScanResult):
    change_24h: float = 0.0
    quote_volume: float = 0.0
    ema200: float
    ema200_distance_pct: float
    rsi: dict[str, float] = Field(default_factory=dict)
    rsi_1h: float
    dip_level: str


class VolumeSpikeResult(ScanResult):
    volume_multiple: float
    candle_change_pct: float = 0.0
    change_24h: float = 0.0
    quote_volume: float = 0.0
    spike_level: str
    fallback: bool = False


class LevelType(str, Enum):
    """Support/resistance classification."""

    SUPPORT = "Support"
    RESISTANCE = "Resistance"
    BREAKOUT = "Breakout"
    BREAKDOWN = "Breakdown"


class SupportResistanceResult(ScanResult):
    mode: str
    type: LevelType | None = None
    level: float
    target: float | None = None
    distance_percent: float
    tests: int = 0
    risk_reward: float | None = None
    rsi: float = 50.0
    volume_ratio: float = 0.0
    period_high: float
    period_low: float
    badges: list[str] = Field(default_factory=list)


class MomentumSignal(str, Enum):
    """Momentum classification ladder outcomes."""

    TOPPED = "TOPPED"
    RIDE = "RIDE"
    MOMENTUM = "MOMENTUM"
    CAUTION = "CAUTION"
    HEATED = "HEATED"


class MomentumResult(ScanResult):
    change_24h: float
    volume_factor: float
    rsi: float
    stop_loss: float | None = None
    risk_pct: float | None = None
    signal: MomentumSignal


class UpsideChecklist(BaseModel):
    """The five "likely 10% upside" conditions."""

    volatility_expanding: bool = False
    momentum_rising: bool = False
    trend_recovering: bool = False
    volume_improved: bool = False
    resistance_headroom: bool = False
    min_conditions: int = 4

    @property
    def conditions_met(self) -> int:
        return sum(
            [
                self.volatility_expanding,
                self.momentum_rising,
                self.trend_recovering,
                self.volume_improved,
                self.resistance_headroom,
            ]
        )

    @property
    def likely(self) -> bool:
        return self.conditions_met >= self.min_conditions


class UpsideAssessment(BaseModel):
    likely: bool
    conditions_met: int
    conditions: dict[str, bool]


class HighPotentialResult(ScanResult):
    score: int
    passes: bool
    checklist: dict[str, bool] = Field(default_factory=dict)
    likely_10_percent_upside: UpsideAssessment
    rsi: float
    volume_ratio: float
    atr_pct: float
    nearest_resistance: float | None = None
    badges: list[str] = Field(default_factory=list)


class ConfluenceRecord(BaseModel):
    """Per-symbol fold of several scanners' findings."""

    symbol: str
    price: float
    score: int = 0
    sources: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    reasons: list[str] = Field(default_factory=list)

    def add_source(self, source: str) -> None:
        if source not in self.sources:
            self.sources.append(source)

    def award(self, points: int, reason: str, tag: str | None = None) -> None:
        """Record one scoring contribution."""
        if tag and tag not in self.tags:
            self.tags.append(tag)
        self.score += points
        self.reasons.append(f"{reason} (+{points})")
