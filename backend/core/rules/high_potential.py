"""High-potential checklist and "likely 10% upside" assessment."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from core.indicators import (
    atr_series,
    ema_series,
    macd,
    obv_series,
    rsi_series,
    sma,
)
from core.models.config import HighPotentialConfig
from core.models.kline import OHLCV
from core.models.scan import UpsideAssessment, UpsideChecklist


@dataclass(frozen=True)
class PotentialScore:
    score: int
    passes: bool
    checklist: dict[str, bool]
    rsi: float
    volume_ratio: float
    atr_pct: float
    ema20: float
    ema50: float


def _latest(series: np.ndarray, default: float) -> float:
    valid = series[~np.isnan(series)]
    return float(valid[-1]) if len(valid) else default


def score_potential(data: OHLCV, config: HighPotentialConfig | None = None) -> PotentialScore:
    """
    Weighted bullish checklist on the latest bar.

    Args:
        data: Scan timeframe candles as arrays
        config: Weights and thresholds

    Returns:
        PotentialScore; ``passes`` when the score reaches ``pass_score``
    """
    config = config or HighPotentialConfig()
    closes, volumes = data.closes, data.volumes
    price = float(closes[-1]) if len(closes) else 0.0

    ema20 = _latest(ema_series(closes, 20), price)
    ema50 = _latest(ema_series(closes, 50), price)
    rsi_values = rsi_series(closes, 14)
    rsi_now = float(rsi_values[-1]) if len(rsi_values) else 50.0
    histogram = macd(closes).histogram

    average_volume = sma(volumes[:-1], config.volume_average_period) if len(volumes) > 1 else 0.0
    volume_ratio = float(volumes[-1] / average_volume) if average_volume > 0 else 0.0
    previous_above = len(volumes) > 1 and average_volume > 0 and volumes[-2] > average_volume

    obv = obv_series(closes, volumes)
    bars = config.obv_slope_bars
    obv_rising = len(obv) > bars and obv[-1] - obv[-1 - bars] > 0

    atr_values = atr_series(data.highs, data.lows, closes, 14)
    atr_now = float(atr_values[-1]) if len(atr_values) else 0.0
    atr_pct = atr_now / price * 100 if price > 0 else 0.0

    checklist = {
        "price_above_ema20": price > ema20,
        "ema20_above_ema50": ema20 > ema50,
        "rsi_in_range": config.rsi_low <= rsi_now <= config.rsi_high,
        "macd_positive": histogram > 0,
        "volume_ok": volume_ratio >= config.volume_ratio_min or bool(previous_above),
        "obv_rising": bool(obv_rising),
        "volatility_healthy": config.atr_pct_low <= atr_pct <= config.atr_pct_high,
    }
    weights = {
        "price_above_ema20": config.weight_price_above_ema20,
        "ema20_above_ema50": config.weight_ema20_above_ema50,
        "rsi_in_range": config.weight_rsi_in_range,
        "macd_positive": config.weight_macd_positive,
        "volume_ok": config.weight_volume_ok,
        "obv_rising": config.weight_obv_rising,
        "volatility_healthy": config.weight_volatility_healthy,
    }
    score = sum(weights[name] for name, ok in checklist.items() if ok)

    return PotentialScore(
        score=score,
        passes=score >= config.pass_score,
        checklist=checklist,
        rsi=rsi_now,
        volume_ratio=volume_ratio,
        atr_pct=atr_pct,
        ema20=ema20,
        ema50=ema50,
    )


def evaluate_upside(
    data: OHLCV,
    nearest_resistance: float | None,
    config: HighPotentialConfig | None = None,
) -> UpsideChecklist:
    """Evaluate the five "likely 10% upside" conditions."""
    config = config or HighPotentialConfig()
    closes, volumes = data.closes, data.volumes
    price = float(closes[-1]) if len(closes) else 0.0

    atr_values = atr_series(data.highs, data.lows, closes, 14)
    lookback = config.atr_lookback
    volatility_expanding = len(atr_values) > lookback and atr_values[-1] > atr_values[-1 - lookback]

    rsi_values = rsi_series(closes, 14)
    rsi_back = config.rsi_lookback
    momentum_rising = len(rsi_values) > rsi_back and rsi_values[-1] > rsi_values[-1 - rsi_back]

    ema20 = ema_series(closes, 20)
    ema50 = ema_series(closes, 50)
    trend_bullish = len(closes) >= 50 and ema20[-1] > ema50[-1]
    ema20_rising = len(closes) > 20 and ema20[-1] > ema20[-2]
    trend_recovering = bool(trend_bullish) or (
        len(closes) >= 20 and price > ema20[-1] and bool(ema20_rising)
    )

    window = config.volume_window
    volume_improved = len(volumes) >= 2 * window and (
        np.mean(volumes[-window:]) > np.mean(volumes[-2 * window:-window])
    )

    if nearest_resistance is None or price <= 0:
        resistance_headroom = True
    else:
        resistance_headroom = (nearest_resistance - price) / price * 100 >= config.min_headroom_pct

    return UpsideChecklist(
        volatility_expanding=bool(volatility_expanding),
        momentum_rising=bool(momentum_rising),
        trend_recovering=bool(trend_recovering),
        volume_improved=bool(volume_improved),
        resistance_headroom=bool(resistance_headroom),
        min_conditions=config.upside_min_conditions,
    )


def to_assessment(checklist: UpsideChecklist) -> UpsideAssessment:
    return UpsideAssessment(
        likely=checklist.likely,
        conditions_met=checklist.conditions_met,
        conditions=checklist.model_dump(exclude={"min_conditions"}),
    )


def potential_badges(potential: PotentialScore, upside: UpsideChecklist) -> list[str]:
    badges = []
    if upside.likely:
        badges.append("Likely +10%")
    if potential.checklist["price_above_ema20"] and potential.checklist["ema20_above_ema50"]:
        badges.append("Trend Aligned")
    if potential.checklist["obv_rising"] and potential.volume_ratio >= 1.5:
        badges.append("Accumulation")
    return badges
