"""Technical indicators (pure math, no I/O)."""

from core.indicators.indicators import (
    ADX,
    MACD,
    BollingerBands,
    IndicatorCalculator,
    IndicatorSnapshot,
    ParabolicSar,
    Stochastic,
    adx,
    atr,
    atr_series,
    bollinger_bands,
    cci,
    ema,
    ema_series,
    highest,
    lowest,
    macd,
    macd_series,
    mfi,
    obv,
    obv_series,
    parabolic_sar,
    rsi,
    rsi_series,
    sma,
    stochastic,
    true_range,
    volume_oscillator,
    vwap,
    williams_r,
)
from core.indicators.levels import (
    SupportResistanceLevels,
    find_levels,
    find_pivot_highs,
    find_pivot_lows,
    liquidity_zones,
    soft_zones,
)

__all__ = [
    "ADX",
    "MACD",
    "BollingerBands",
    "IndicatorCalculator",
    "IndicatorSnapshot",
    "ParabolicSar",
    "Stochastic",
    "adx",
    "atr",
    "atr_series",
    "bollinger_bands",
    "cci",
    "ema",
    "ema_series",
    "highest",
    "lowest",
    "macd",
    "macd_series",
    "mfi",
    "obv",
    "obv_series",
    "parabolic_sar",
    "rsi",
    "rsi_series",
    "sma",
    "stochastic",
    "true_range",
    "volume_oscillator",
    "vwap",
    "williams_r",
    "SupportResistanceLevels",
    "find_levels",
    "find_pivot_highs",
    "find_pivot_lows",
    "liquidity_zones",
    "soft_zones",
]
