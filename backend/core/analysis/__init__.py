"""Indicator scoring and degraded-mode data (pure logic)."""

from core.analysis.scoring import meets_bullish_criteria, score_indicators
from core.analysis.synthetic import (
    INTERVAL_MS,
    MIN_SYNTHETIC_CANDLES,
    derive_seed,
    generate_synthetic_candles,
)

__all__ = [
    "meets_bullish_criteria",
    "score_indicators",
    "INTERVAL_MS",
    "MIN_SYNTHETIC_CANDLES",
    "derive_seed",
    "generate_synthetic_candles",
]
