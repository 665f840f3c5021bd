"""Momentum classification ladder and pivot stop-loss search.

The ladder is strict first-match-wins:

1. RSI above the topped threshold -> TOPPED
2. strong change, strong volume, RSI not stretched -> RIDE when a tight
   stop exists, else MOMENTUM
3. moderate change and volume -> MOMENTUM, downgraded to CAUTION when the
   stop is too far away
4. otherwise CAUTION, upgraded to HEATED when RSI is hot
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.indicators import find_pivot_lows
from core.models.config import MomentumConfig
from core.models.kline import Candle
from core.models.scan import MomentumResult, MomentumSignal

SIGNAL_PRIORITY = {
    MomentumSignal.RIDE: 0,
    MomentumSignal.MOMENTUM: 1,
    MomentumSignal.HEATED: 2,
    MomentumSignal.CAUTION: 3,
    MomentumSignal.TOPPED: 4,
}


def volume_factor(
    quote_volume_24h: float,
    daily_candles: Sequence[Candle],
    days: int = 14,
) -> float:
    """
    Current 24h dollar volume relative to the average daily dollar volume.

    The last daily candle is today's partial bar and is excluded.

    Returns:
        The factor, or 0.0 when no completed days are available
    """
    completed = list(daily_candles)[-days - 1:-1]
    if not completed:
        return 0.0
    average = float(np.mean([c.dollar_volume for c in completed]))
    if average <= 0:
        return 0.0
    return quote_volume_24h / average


def _latest_pivot_below(
    lows: np.ndarray,
    price: float,
    start: int,
    end: int,
    span: int,
) -> float | None:
    for i in reversed(find_pivot_lows(lows, span, start, end)):
        if lows[i] < price:
            return float(lows[i])
    return None


def find_stop_loss(
    lows: Sequence[float],
    price: float,
    window: int = 30,
    fallback_window: int = 60,
    span: int = 2,
) -> float | None:
    """
    Find a pivot-low stop below ``price``.

    The most recent pivot below price within the last ``window`` bars is
    used. When there is none the search moves to the bars between ``window``
    and ``fallback_window`` back.

    Returns:
        Stop price, or None when no valid pivot exists
    """
    arr = np.asarray(lows, dtype=np.float64)
    n = len(arr)
    if n == 0:
        return None

    stop = _latest_pivot_below(arr, price, n - window, n, span)
    if stop is not None:
        return stop
    return _latest_pivot_below(arr, price, n - fallback_window, n - window, span)


def risk_percent(price: float, stop: float | None) -> float | None:
    if stop is None or price <= 0:
        return None
    return (price - stop) / price * 100


def classify_momentum(
    change_24h: float,
    factor: float,
    rsi: float,
    risk_pct: float | None,
    config: MomentumConfig | None = None,
) -> MomentumSignal:
    """
    Apply the momentum ladder.

    Args:
        change_24h: 24h price change (percent)
        factor: Volume factor
        rsi: Hourly RSI
        risk_pct: Distance to the stop (percent); None when no stop was found
    """
    config = config or MomentumConfig()

    if rsi > config.topped_rsi:
        return MomentumSignal.TOPPED

    if (
        change_24h > config.ride_change
        and factor > config.ride_volume_factor
        and rsi < config.ride_max_rsi
    ):
        if risk_pct is not None and risk_pct <= config.ride_max_risk_pct:
            return MomentumSignal.RIDE
        return MomentumSignal.MOMENTUM

    if change_24h > config.momentum_change and factor > config.momentum_volume_factor:
        if risk_pct is not None and risk_pct > config.momentum_max_risk_pct:
            return MomentumSignal.CAUTION
        return MomentumSignal.MOMENTUM

    if rsi > config.heated_rsi:
        return MomentumSignal.HEATED
    return MomentumSignal.CAUTION


def rank_momentum(results: list[MomentumResult]) -> list[MomentumResult]:
    """Signal priority first, then 24h change descending."""
    return sorted(
        results,
        key=lambda r: (SIGNAL_PRIORITY[r.signal], -r.change_24h, r.symbol),
    )
