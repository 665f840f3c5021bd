"""Trend-dip rules: buy the dip only inside an established uptrend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.errors import InsufficientHistoryError
from core.indicators import ema
from core.models.config import TrendDipConfig


@dataclass(frozen=True)
class UptrendGate:
    passed: bool
    price: float
    ema: float
    distance_pct: float


def check_uptrend(
    symbol: str,
    closes: Sequence[float],
    period: int = 200,
) -> UptrendGate:
    """
    Check that the latest close sits above the long EMA.

    Raises:
        InsufficientHistoryError: fewer than ``period`` closes
    """
    if len(closes) < period:
        raise InsufficientHistoryError(symbol, period, len(closes))

    price = float(closes[-1])
    long_ema = ema(closes, period)
    distance = (price - long_ema) / long_ema * 100 if long_ema else 0.0
    return UptrendGate(price > long_ema, price, long_ema, distance)


def dip_level(rsi_value: float, config: TrendDipConfig | None = None) -> str:
    """deep / moderate / shallow by the ranking-timeframe RSI."""
    config = config or TrendDipConfig()
    if rsi_value < config.deep_dip_rsi:
        return "deep"
    if rsi_value < config.moderate_dip_rsi:
        return "moderate"
    return "shallow"
