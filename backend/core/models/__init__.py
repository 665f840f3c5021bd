"""Data models (pydantic)."""

from core.models.kline import Candle, OHLCV, Ticker24h, to_arrays
from core.models.analysis import (
    IndicatorResult,
    Recommendation,
    Signal,
    TechnicalAnalysis,
    recommendation_for,
)
from core.models.scan import (
    ConfluenceRecord,
    HighPotentialResult,
    LevelType,
    MomentumResult,
    MomentumSignal,
    ScanResult,
    SupportResistanceResult,
    TrendDipResult,
    UpsideAssessment,
    UpsideChecklist,
    VolumeSpikeResult,
)
from core.models.config import (
    ConfluenceConfig,
    HighPotentialConfig,
    MomentumConfig,
    SupportResistanceConfig,
    TrendDipConfig,
    VolumeSpikeConfig,
)

__all__ = [
    "Candle",
    "OHLCV",
    "Ticker24h",
    "to_arrays",
    "IndicatorResult",
    "Recommendation",
    "Signal",
    "TechnicalAnalysis",
    "recommendation_for",
    "ConfluenceRecord",
    "HighPotentialResult",
    "LevelType",
    "MomentumResult",
    "MomentumSignal",
    "ScanResult",
    "SupportResistanceResult",
    "TrendDipResult",
    "UpsideAssessment",
    "UpsideChecklist",
    "VolumeSpikeResult",
    "ConfluenceConfig",
    "HighPotentialConfig",
    "MomentumConfig",
    "SupportResistanceConfig",
    "TrendDipConfig",
    "VolumeSpikeConfig",
]
