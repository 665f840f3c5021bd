"""Support/resistance bounce and breakout rules.

Bounce mode asks whether price is sitting on the period low (support) or
under the period high (resistance). Breakout mode compares price with the
extremes of the prior period, excluding the most recent bar so that the
bar doing the breaking does not define the level it breaks.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.indicators import sma
from core.models.config import SupportResistanceConfig
from core.models.kline import OHLCV
from core.models.scan import LevelType, SupportResistanceResult

BOUNCE = "bounce"
BREAKOUT = "breakout"


def candles_for_lookback(
    days: int,
    config: SupportResistanceConfig | None = None,
) -> tuple[str, int]:
    """
    Convert a lookback in days to an (interval, candle count) pair.

    4h candles are used up to ``intraday_max_days``, daily candles beyond.
    """
    config = config or SupportResistanceConfig()
    days = max(int(days), 1)
    if days <= config.intraday_max_days:
        return "4h", days * config.candles_per_day_4h
    return "1d", days


def tolerance_for(interval: str, config: SupportResistanceConfig | None = None) -> float:
    config = config or SupportResistanceConfig()
    return config.tolerance_1d if interval == "1d" else config.tolerance_4h


def count_tests(values: Sequence[float], level: float, band: float = 0.015) -> int:
    """
    Count distinct entries of a series into the band around ``level``.

    Consecutive bars inside the band count as one test.
    """
    if level <= 0:
        return 0
    arr = np.asarray(values, dtype=np.float64)
    inside = np.abs(arr - level) / level <= band
    entries = int(inside[0]) if len(inside) else 0
    entries += int(np.sum(inside[1:] & ~inside[:-1]))
    return entries


def _volume_ratio(volumes: np.ndarray, period: int) -> float:
    if len(volumes) < 2:
        return 0.0
    average = sma(volumes[:-1], period)
    return float(volumes[-1] / average) if average > 0 else 0.0


def _bounce_badges(
    level_type: LevelType,
    rsi: float,
    tests: int,
    config: SupportResistanceConfig,
) -> list[str]:
    badges = []
    if (
        level_type is LevelType.SUPPORT
        and rsi < config.golden_setup_rsi
        and tests >= config.strong_level_tests
    ):
        badges.append("Golden Setup")
    if rsi < config.oversold_rsi:
        badges.append("Oversold")
    if level_type is LevelType.SUPPORT and tests >= config.strong_level_tests:
        badges.append("Strong Support")
    if tests <= config.weak_level_tests:
        badges.append("Weak Level")
    return badges


def classify_bounce(
    symbol: str,
    price: float,
    data: OHLCV,
    rsi: float,
    tolerance: float,
    config: SupportResistanceConfig | None = None,
) -> SupportResistanceResult | None:
    """
    Classify price against the period extremes.

    Args:
        symbol: Trading pair
        price: Current price
        data: Lookback candles as arrays
        rsi: RSI on the same candles
        tolerance: Max relative distance to the level (ratio, e.g. 0.05)

    Returns:
        Support or Resistance result; None when price is near neither
    """
    config = config or SupportResistanceConfig()
    if len(data.closes) == 0 or price <= 0:
        return None

    period_low = float(np.min(data.lows))
    period_high = float(np.max(data.highs))
    if period_low <= 0:
        return None

    support_distance = abs(price - period_low) / period_low
    resistance_distance = abs(period_high - price) / price

    if support_distance < tolerance:
        level_type = LevelType.SUPPORT
        level, target = period_low, period_high
        distance = support_distance
        tests = count_tests(data.lows, level, config.touch_tolerance)
        touched = price - period_low
        opposite = period_high - price
    elif resistance_distance < tolerance:
        level_type = LevelType.RESISTANCE
        level, target = period_high, period_low
        distance = resistance_distance
        tests = count_tests(data.highs, level, config.touch_tolerance)
        touched = period_high - price
        opposite = price - period_low
    else:
        return None

    risk_reward = round(opposite / touched, 2) if touched > 0 else None

    return SupportResistanceResult(
        symbol=symbol,
        price=price,
        mode=BOUNCE,
        type=level_type,
        level=level,
        target=target,
        distance_percent=round(distance * 100, 2),
        tests=tests,
        risk_reward=risk_reward,
        rsi=round(rsi, 2),
        volume_ratio=round(_volume_ratio(data.volumes, config.volume_average_period), 2),
        period_high=period_high,
        period_low=period_low,
        badges=_bounce_badges(level_type, rsi, tests, config),
    )


def classify_breakout(
    symbol: str,
    price: float,
    data: OHLCV,
    rsi: float,
    config: SupportResistanceConfig | None = None,
) -> SupportResistanceResult | None:
    """
    Classify price against the prior period's high and low.

    Breakout when price is within [lower, upper] percent of the prior high,
    otherwise Breakdown when within the same window beyond the prior low.

    Returns:
        Breakout/Breakdown result; None when neither window matches
    """
    config = config or SupportResistanceConfig()
    exclude = config.breakout_exclude_bars
    if len(data.closes) <= exclude or price <= 0:
        return None

    prior_high = float(np.max(data.highs[:-exclude]))
    prior_low = float(np.min(data.lows[:-exclude]))
    if prior_high <= 0 or prior_low <= 0:
        return None

    above_high_pct = (price - prior_high) / prior_high * 100
    below_low_pct = (prior_low - price) / prior_low * 100
    lower, upper = config.breakout_lower_pct, config.breakout_upper_pct

    if lower <= above_high_pct <= upper:
        level_type, level, beyond_pct = LevelType.BREAKOUT, prior_high, above_high_pct
        strong = rsi > config.strong_momentum_rsi
    elif lower <= below_low_pct <= upper:
        level_type, level, beyond_pct = LevelType.BREAKDOWN, prior_low, below_low_pct
        strong = rsi < config.breakdown_momentum_rsi
    else:
        return None

    volume_ratio = _volume_ratio(data.volumes, config.volume_average_period)
    badges = ["Confirmed" if beyond_pct > 0 else "Approaching"]
    if strong:
        badges.append("Strong Momentum")
    if volume_ratio >= config.high_volume_multiple:
        badges.append("High Volume")

    return SupportResistanceResult(
        symbol=symbol,
        price=price,
        mode=BREAKOUT,
        type=level_type,
        level=level,
        distance_percent=round(abs(beyond_pct), 2),
        rsi=round(rsi, 2),
        volume_ratio=round(volume_ratio, 2),
        period_high=prior_high,
        period_low=prior_low,
        badges=badges,
    )


def is_confirmed(result: SupportResistanceResult) -> bool:
    return "Confirmed" in result.badges


def rank_bounces(results: list[SupportResistanceResult]) -> list[SupportResistanceResult]:
    """Nearest level first."""
    return sorted(results, key=lambda r: (r.distance_percent, r.symbol))


def rank_breakouts(results: list[SupportResistanceResult]) -> list[SupportResistanceResult]:
    """Confirmed first, then nearest."""
    return sorted(
        results, key=lambda r: (not is_confirmed(r), r.distance_percent, r.symbol)
    )
