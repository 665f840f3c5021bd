"""Scanner configuration models.

Thresholds are heuristics tuned against live scans, not derived from a
model. They are configuration and every scanner accepts its own override.
"""

from __future__ import annotations

from pydantic import BaseModel


class TrendDipConfig(BaseModel):
    """Trend-dip scanner parameters."""

    universe_size: int = 50

    # Uptrend gate on the 4h chart
    trend_interval: str = "4h"
    trend_ema_period: int = 200
    trend_limit: int = 250

    # Multi-timeframe RSI
    rsi_timeframes: list[str] = ["15m", "1h", "4h", "1d", "1w"]
    rsi_period: int = 14
    rsi_limit: int = 100
    rank_timeframe: str = "1h"

    deep_dip_rsi: float = 30.0
    moderate_dip_rsi: float = 45.0


class VolumeSpikeConfig(BaseModel):
    """Volume-spike scanner parameters."""

    universe_size: int = 50
    interval: str = "1h"
    limit: int = 50
    average_period: int = 20
    min_multiple: float = 1.5

    # spike_level bands (volume multiple)
    extreme_multiple: float = 5.0
    high_multiple: float = 3.0
    moderate_multiple: float = 2.0

    fallback_count: int = 3


class SupportResistanceConfig(BaseModel):
    """Support/resistance scanner parameters."""

    universe_size: int = 50

    # Lookback conversion: 4h candles up to this many days, daily beyond
    intraday_max_days: int = 30
    candles_per_day_4h: int = 6
    default_days: int = 30
    min_candles: int = 10

    # Bounce tolerance (as ratio) per data granularity
    tolerance_4h: float = 0.05
    tolerance_1d: float = 0.20

    # Band around a level that counts as a test
    touch_tolerance: float = 0.015

    # Breakout window: [-2%, +15%] around the prior extreme
    breakout_lower_pct: float = -2.0
    breakout_upper_pct: float = 15.0
    breakout_exclude_bars: int = 1

    golden_setup_rsi: float = 40.0
    oversold_rsi: float = 30.0
    strong_level_tests: int = 3
    weak_level_tests: int = 1

    strong_momentum_rsi: float = 60.0
    breakdown_momentum_rsi: float = 40.0
    high_volume_multiple: float = 1.5
    volume_average_period: int = 20


class MomentumConfig(BaseModel):
    """Momentum scanner parameters."""

    universe_size: int = 100

    min_change_24h: float = 3.0
    min_volume_factor: float = 1.2
    volume_days: int = 14

    # Classification ladder
    topped_rsi: float = 85.0
    ride_change: float = 5.0
    ride_volume_factor: float = 2.0
    ride_max_rsi: float = 75.0
    ride_max_risk_pct: float = 8.0
    momentum_change: float = 3.0
    momentum_volume_factor: float = 1.5
    momentum_max_risk_pct: float = 10.0
    heated_rsi: float = 75.0

    # Stop-loss pivot search on hourly candles: last 30h, then 30-60h back
    stop_interval: str = "1h"
    stop_limit: int = 100
    pivot_window: int = 30
    pivot_fallback_window: int = 60
    pivot_span: int = 2


class HighPotentialConfig(BaseModel):
    """High-potential checklist parameters."""

    universe_size: int = 50
    interval: str = "4h"
    limit: int = 200
    min_candles: int = 60

    # Checklist weights
    weight_price_above_ema20: int = 1
    weight_ema20_above_ema50: int = 2
    weight_rsi_in_range: int = 1
    weight_macd_positive: int = 1
    weight_volume_ok: int = 1
    weight_obv_rising: int = 1
    weight_volatility_healthy: int = 1
    pass_score: int = 5

    rsi_low: float = 45.0
    rsi_high: float = 80.0
    volume_ratio_min: float = 0.8
    volume_average_period: int = 20
    obv_slope_bars: int = 5
    atr_pct_low: float = 0.5
    atr_pct_high: float = 8.0

    # Upside checklist
    atr_lookback: int = 10
    rsi_lookback: int = 3
    volume_window: int = 5
    min_headroom_pct: float = 10.0
    upside_min_conditions: int = 4


class ConfluenceConfig(BaseModel):
    """Confluence scoring parameters."""

    breakout_bonus: int = 30
    confirmed_breakout_bonus: int = 10
    support_bonus: int = 15
    momentum_bonus: int = 25
    heated_bonus: int = 10
    volume_surge_bonus: int = 20
    extreme_volume_bonus: int = 10
    trend_dip_bonus: int = 15
    deep_dip_bonus: int = 10
    golden_setup_bonus: int = 20

    two_source_bonus: int = 15
    three_source_bonus: int = 30

    support_volume_bonus: int = 15
    breakout_volume_bonus: int = 20
    dip_support_bonus: int = 15

    top_picks_count: int = 10
    top_picks_min_score: int = 30
    hot_setups_count: int = 5
    hot_setups_min_score: int = 45
