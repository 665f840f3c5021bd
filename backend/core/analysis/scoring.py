"""Indicator scoring rules.

Each indicator reading is turned into a signal, a fixed score and a tier:

    indicator          rule                                   score        tier
    vwap               price above / below                    +1 / -1      3
    rsi                >=70 / <=30 / otherwise                -2 / +2 / 0  2
    macd               MACD above / below signal              +9 / -9      1
    ema_crossover      EMA20 above / below EMA50              +9 / -9      1
    bb_squeeze         squeeze / normal                       +1 / 0       2
    adx                > 25 / otherwise                       +3 / 0       1
    plus_di            +DI above / below -DI                  +2 / -2      2
    stochastic         %K > 80 / < 20 / otherwise             -1 / +2 / 0  2
    williams_r         > -20 / < -80 / otherwise              -1 / +2 / 0  2
    cci                > 100 / < -100 / otherwise             -2 / +3 / 0  2
    mfi                > 80 / < 20 / otherwise                -2 / +3 / 0  1
    obv                positive / otherwise                   +1 / -1      3
    atr                context only                           0            3
    parabolic_sar      uptrend / downtrend / unknown          +2 / -2 / 0  2
    volume_oscillator  > 5 / < -5 / otherwise                 +1 / -1 / 0  3
"""

from __future__ import annotations

from core.indicators import IndicatorSnapshot
from core.models.analysis import IndicatorResult, Signal

BULLISH = Signal.BULLISH
BEARISH = Signal.BEARISH
NEUTRAL = Signal.NEUTRAL


def _overbought_label(signal: Signal) -> str:
    if signal is BEARISH:
        return "Overbought"
    if signal is BULLISH:
        return "Oversold"
    return "Normal"


def score_indicators(snapshot: IndicatorSnapshot) -> dict[str, IndicatorResult]:
    """Apply the fixed scoring rules to an indicator snapshot."""
    s = snapshot
    price = s.price
    results: dict[str, IndicatorResult] = {}

    above_vwap = price > s.vwap
    results["vwap"] = IndicatorResult(
        value=s.vwap,
        signal=BULLISH if above_vwap else BEARISH,
        score=1 if above_vwap else -1,
        tier=3,
        description=f"Price {'above' if above_vwap else 'below'} VWAP ({s.vwap:.2f})",
    )

    if s.rsi >= 70:
        rsi_signal, rsi_score = BEARISH, -2
    elif s.rsi <= 30:
        rsi_signal, rsi_score = BULLISH, 2
    else:
        rsi_signal, rsi_score = NEUTRAL, 0
    results["rsi"] = IndicatorResult(
        value=s.rsi,
        signal=rsi_signal,
        score=rsi_score,
        tier=2,
        description=f"RSI: {s.rsi:.1f} - {_overbought_label(rsi_signal)}",
    )

    macd_bullish = s.macd.macd > s.macd.signal
    results["macd"] = IndicatorResult(
        value=s.macd.macd,
        signal=BULLISH if macd_bullish else BEARISH,
        score=9 if macd_bullish else -9,
        tier=1,
        description=f"MACD {'above' if macd_bullish else 'below'} signal line",
    )

    ema_bullish = s.ema20 > s.ema50
    results["ema_crossover"] = IndicatorResult(
        value=s.ema20 - s.ema50,
        signal=BULLISH if ema_bullish else BEARISH,
        score=9 if ema_bullish else -9,
        tier=1,
        description=f"EMA20 {'above' if ema_bullish else 'below'} EMA50",
    )

    squeeze = s.bollinger.squeeze
    results["bb_squeeze"] = IndicatorResult(
        value=1.0 if squeeze else 0.0,
        signal=BULLISH if squeeze else NEUTRAL,
        score=1 if squeeze else 0,
        tier=2,
        description=f"Bollinger Bands {'in squeeze' if squeeze else 'normal'}",
    )

    strong_trend = s.adx.adx > 25
    results["adx"] = IndicatorResult(
        value=s.adx.adx,
        signal=BULLISH if strong_trend else NEUTRAL,
        score=3 if strong_trend else 0,
        tier=1,
        description=f"ADX: {s.adx.adx:.1f} - {'Strong trend' if strong_trend else 'Weak trend'}",
    )

    di_bullish = s.adx.plus_di > s.adx.minus_di
    results["plus_di"] = IndicatorResult(
        value=s.adx.plus_di,
        signal=BULLISH if di_bullish else BEARISH,
        score=2 if di_bullish else -2,
        tier=2,
        description=f"+DI ({s.adx.plus_di:.1f}) vs -DI ({s.adx.minus_di:.1f})",
    )

    k = s.stochastic.k
    if k > 80:
        stoch_signal, stoch_score = BEARISH, -1
    elif k < 20:
        stoch_signal, stoch_score = BULLISH, 2
    else:
        stoch_signal, stoch_score = NEUTRAL, 0
    results["stochastic"] = IndicatorResult(
        value=k,
        signal=stoch_signal,
        score=stoch_score,
        tier=2,
        description=f"Stochastic %K: {k:.1f} - {_overbought_label(stoch_signal)}",
    )

    wr = s.williams_r
    if wr > -20:
        wr_signal, wr_score = BEARISH, -1
    elif wr < -80:
        wr_signal, wr_score = BULLISH, 2
    else:
        wr_signal, wr_score = NEUTRAL, 0
    results["williams_r"] = IndicatorResult(
        value=wr,
        signal=wr_signal,
        score=wr_score,
        tier=2,
        description=f"Williams %R: {wr:.1f} - {_overbought_label(wr_signal)}",
    )

    if s.cci > 100:
        cci_signal, cci_score = BEARISH, -2
    elif s.cci < -100:
        cci_signal, cci_score = BULLISH, 3
    else:
        cci_signal, cci_score = NEUTRAL, 0
    results["cci"] = IndicatorResult(
        value=s.cci,
        signal=cci_signal,
        score=cci_score,
        tier=2,
        description=f"CCI: {s.cci:.1f} - {_overbought_label(cci_signal)}",
    )

    if s.mfi > 80:
        mfi_signal, mfi_score = BEARISH, -2
    elif s.mfi < 20:
        mfi_signal, mfi_score = BULLISH, 3
    else:
        mfi_signal, mfi_score = NEUTRAL, 0
    results["mfi"] = IndicatorResult(
        value=s.mfi,
        signal=mfi_signal,
        score=mfi_score,
        tier=1,
        description=f"MFI: {s.mfi:.1f} - {_overbought_label(mfi_signal)}",
    )

    obv_up = s.obv > 0
    results["obv"] = IndicatorResult(
        value=s.obv,
        signal=BULLISH if obv_up else BEARISH,
        score=1 if obv_up else -1,
        tier=3,
        description=(
            f"OBV: {s.obv:.0f} - Volume "
            f"{'supporting uptrend' if obv_up else 'supporting downtrend'}"
        ),
    )

    results["atr"] = IndicatorResult(
        value=s.atr,
        signal=NEUTRAL,
        score=0,
        tier=3,
        description=f"ATR: {s.atr:.4f} - Market volatility indicator",
    )

    trend = s.parabolic_sar.trend
    psar_score = {BULLISH: 2, BEARISH: -2}.get(trend, 0)
    trend_label = {BULLISH: "Uptrend", BEARISH: "Downtrend"}.get(trend, "No trend")
    results["parabolic_sar"] = IndicatorResult(
        value=s.parabolic_sar.sar,
        signal=trend,
        score=psar_score,
        tier=2,
        description=f"PSAR: {s.parabolic_sar.sar:.2f} - {trend_label} signal",
    )

    vo = s.volume_oscillator
    if vo > 5:
        vo_signal, vo_score = BULLISH, 1
    elif vo < -5:
        vo_signal, vo_score = BEARISH, -1
    else:
        vo_signal, vo_score = NEUTRAL, 0
    results["volume_oscillator"] = IndicatorResult(
        value=vo,
        signal=vo_signal,
        score=vo_score,
        tier=3,
        description=f"Volume Osc: {vo:.2f}% - {'Above' if vo > 0 else 'Below'} average volume",
    )

    return results


def meets_bullish_criteria(
    indicators: dict[str, IndicatorResult],
    total_score: int,
    min_criteria: int = 3,
    min_total_score: int = 10,
) -> bool:
    """Bulk-scan filter: EMA trend, healthy RSI, MACD and ADX agreement.

    At least ``min_criteria`` of the four must hold and the total score must
    exceed ``min_total_score``.
    """
    ema_positive = indicators.get("ema_crossover")
    rsi_reading = indicators.get("rsi")
    macd_reading = indicators.get("macd")
    adx_reading = indicators.get("adx")

    criteria = [
        ema_positive is not None and ema_positive.signal is BULLISH,
        rsi_reading is not None and 40 < rsi_reading.value < 70,
        macd_reading is not None and macd_reading.signal is BULLISH,
        adx_reading is not None and adx_reading.value > 25,
    ]
    return sum(criteria) >= min_criteria and total_score > min_total_score
