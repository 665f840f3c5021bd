"""Technical analysis result models."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from core.models.kline import Candle


class Signal(str, Enum):
    """Direction an indicator points to."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Recommendation(str, Enum):
    """Recommendation bucket derived from the total score."""

    STRONG_BUY = "strong_buy"
    BUY = "buy"
    HOLD = "hold"
    SELL = "sell"
    STRONG_SELL = "strong_sell"


# Inclusive on the stated side
STRONG_BUY_SCORE = 15
BUY_SCORE = 5
SELL_SCORE = -5
STRONG_SELL_SCORE = -15


def recommendation_for(total_score: int) -> Recommendation:
    """Map a total indicator score to a recommendation bucket."""
    if total_score >= STRONG_BUY_SCORE:
        return Recommendation.STRONG_BUY
    if total_score >= BUY_SCORE:
        return Recommendation.BUY
    if total_score <= STRONG_SELL_SCORE:
        return Recommendation.STRONG_SELL
    if total_score <= SELL_SCORE:
        return Recommendation.SELL
    return Recommendation.HOLD


class IndicatorResult(BaseModel):
    """Scored reading of one indicator.

    Tier is the weight class (1 = high conviction, 3 = context only). The
    score is fixed per indicator rule and is not derived from the tier.
    """

    model_config = ConfigDict(frozen=True)

    value: float
    signal: Signal
    score: int
    tier: Literal[1, 2, 3]
    description: str


class TechnicalAnalysis(BaseModel):
    """Scored recommendation for one symbol.

    ``total_score`` and ``recommendation`` are computed from ``indicators`` so
    they can never disagree with the indicator map.
    """

    symbol: str
    price: float
    indicators: dict[str, IndicatorResult] = Field(default_factory=dict)
    candles: list[Candle] = Field(default_factory=list)
    calculation_timestamp: datetime
    latest_data_time: datetime
    degraded: bool = False

    @computed_field
    @property
    def total_score(self) -> int:
        return sum(result.score for result in self.indicators.values())

    @computed_field
    @property
    def recommendation(self) -> Recommendation:
        return recommendation_for(self.total_score)
