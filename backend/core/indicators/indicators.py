"""Technical indicators for symbol analysis.

Pure NumPy implementations over float sequences. Every public function has a
minimum history length; below it the function returns a neutral default
instead of NaN:

    sma / ema            -> last value (0.0 for empty input)
    rsi                  -> 50.0
    macd                 -> MACD(0, 0, 0)
    bollinger_bands      -> bands collapsed onto the last price, no squeeze
    vwap                 -> last close when there is no volume, 0.0 if empty
    stochastic           -> %K = %D = 50.0
    williams_r           -> -50.0
    cci                  -> 0.0
    mfi                  -> 50.0
    obv                  -> 0.0
    atr                  -> 0.0
    parabolic_sar        -> SAR at the last close, neutral trend
    volume_oscillator    -> 0.0
    adx                  -> ADX(0, 0, 0)

RSI, ATR and ADX use Wilder's smoothing: seed with the simple average of the
first period, then ``avg = (avg * (period - 1) + new) / period``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.models.analysis import Signal
from core.models.kline import OHLCV


@dataclass(frozen=True)
class MACD:
    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float
    width: float
    squeeze: bool


@dataclass(frozen=True)
class Stochastic:
    k: float
    d: float


@dataclass(frozen=True)
class ParabolicSar:
    sar: float
    trend: Signal


@dataclass(frozen=True)
class ADX:
    adx: float
    plus_di: float
    minus_di: float


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _last(values: np.ndarray) -> float:
    return float(values[-1]) if len(values) else 0.0


# =============================================================================
# Series helpers
# =============================================================================

def ema_series(values: Sequence[float], period: int) -> np.ndarray:
    """EMA over the whole series, seeded with the SMA of the first period.

    Returns:
        Array of the input length with NaN before index ``period - 1``.
    """
    arr = _as_array(values)
    result = np.full(len(arr), np.nan)
    if len(arr) < period:
        return result

    multiplier = 2.0 / (period + 1)
    result[period - 1] = np.mean(arr[:period])
    for i in range(period, len(arr)):
        result[i] = arr[i] * multiplier + result[i - 1] * (1 - multiplier)

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi_series(closes: Sequence[float], period: int = 14) -> np.ndarray:
    """RSI values from the first complete period onwards (Wilder smoothing).

    Returns:
        Array of length ``len(closes) - period`` (empty when too short).
    """
    arr = _as_array(closes)
    if len(arr) < period + 1:
        return np.array([], dtype=np.float64)

    deltas = np.diff(arr)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    out = [_rsi_value(avg_gain, avg_loss)]

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        out.append(_rsi_value(avg_gain, avg_loss))

    return np.array(out, dtype=np.float64)


def true_range(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> np.ndarray:
    """
    Calculate True Range.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))
    The first bar has no previous close and uses high - low.
    """
    h, l, c = _as_array(highs), _as_array(lows), _as_array(closes)
    if len(h) == 0:
        return np.array([], dtype=np.float64)

    tr = h - l
    if len(h) > 1:
        prev_close = c[:-1]
        tr[1:] = np.maximum.reduce([
            h[1:] - l[1:],
            np.abs(h[1:] - prev_close),
            np.abs(l[1:] - prev_close),
        ])
    return tr


def atr_series(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> np.ndarray:
    """ATR values (Wilder) starting at the first complete period.

    Only true ranges that have a previous close are used, so ``period + 1``
    candles are needed for the first value.
    """
    tr = true_range(highs, lows, closes)[1:]
    if len(tr) < period:
        return np.array([], dtype=np.float64)

    out = [float(np.mean(tr[:period]))]
    for i in range(period, len(tr)):
        out.append((out[-1] * (period - 1) + tr[i]) / period)

    return np.array(out, dtype=np.float64)


def obv_series(closes: Sequence[float], volumes: Sequence[float]) -> np.ndarray:
    """Cumulative On Balance Volume, starting at 0 on the first bar."""
    c, v = _as_array(closes), _as_array(volumes)
    if len(c) == 0:
        return np.array([], dtype=np.float64)
    direction = np.sign(np.diff(c))
    return np.concatenate([[0.0], np.cumsum(direction * v[1:])])


def macd_series(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """MACD line, signal line and histogram over the aligned valid region."""
    empty = np.array([], dtype=np.float64)
    arr = _as_array(closes)
    if len(arr) < slow + signal - 1:
        return empty, empty, empty

    line = (ema_series(arr, fast) - ema_series(arr, slow))[slow - 1:]
    signal_line = ema_series(line, signal)[signal - 1:]
    line = line[signal - 1:]
    return line, signal_line, line - signal_line


# =============================================================================
# Public API - latest value per indicator
# =============================================================================

def sma(values: Sequence[float], period: int) -> float:
    """
    Calculate Simple Moving Average of the latest ``period`` values.

    Args:
        values: Sequence of price values
        period: SMA period

    Returns:
        SMA value, or the last value when history is shorter than period
    """
    arr = _as_array(values)
    if len(arr) < period:
        return _last(arr)
    return float(np.mean(arr[-period:]))


def ema(values: Sequence[float], period: int) -> float:
    """
    Calculate Exponential Moving Average.

    Args:
        values: Sequence of price values
        period: EMA period

    Returns:
        Latest EMA value, or the last value when history is shorter than period
    """
    arr = _as_array(values)
    if len(arr) < period:
        return _last(arr)
    return float(ema_series(arr, period)[-1])


def highest(values: Sequence[float], period: int) -> float:
    """Highest value over the lookback period (whole series if shorter)."""
    arr = _as_array(values)
    if len(arr) == 0:
        return 0.0
    return float(np.max(arr[-period:]))


def lowest(values: Sequence[float], period: int) -> float:
    """Lowest value over the lookback period (whole series if shorter)."""
    arr = _as_array(values)
    if len(arr) == 0:
        return 0.0
    return float(np.min(arr[-period:]))


def rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Calculate Relative Strength Index using Wilder's smoothing.

    Args:
        closes: Sequence of close prices
        period: RSI period

    Returns:
        RSI in [0, 100]; 50.0 when fewer than ``period + 1`` closes
    """
    series = rsi_series(closes, period)
    if len(series) == 0:
        return 50.0
    return float(series[-1])


def macd(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACD:
    """
    Calculate MACD = EMA(fast) - EMA(slow) with an EMA(signal) signal line.

    Returns:
        Latest MACD, signal and histogram; zeros when fewer than
        ``slow + signal - 1`` closes
    """
    line, signal_line, hist = macd_series(closes, fast, slow, signal)
    if len(line) == 0:
        return MACD(0.0, 0.0, 0.0)
    return MACD(float(line[-1]), float(signal_line[-1]), float(hist[-1]))


def bollinger_bands(
    closes: Sequence[float],
    period: int = 20,
    num_std: float = 2.0,
    squeeze_threshold: float = 0.1,
) -> BollingerBands:
    """
    Calculate Bollinger Bands over the latest ``period`` closes.

    The squeeze flag is set when (upper - lower) / middle is below
    ``squeeze_threshold``.
    """
    arr = _as_array(closes)
    if len(arr) < period:
        price = _last(arr)
        return BollingerBands(price, price, price, 0.0, False)

    window = arr[-period:]
    middle = float(np.mean(window))
    std = float(np.std(window))
    upper = middle + num_std * std
    lower = middle - num_std * std
    width = (upper - lower) / middle if middle else 0.0
    return BollingerBands(upper, middle, lower, width, width < squeeze_threshold)


def vwap(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
) -> float:
    """
    Calculate cumulative Volume Weighted Average Price over the series.

    Uses the typical price (high + low + close) / 3.
    """
    c, v = _as_array(closes), _as_array(volumes)
    if len(c) == 0:
        return 0.0
    total_volume = float(np.sum(v))
    if total_volume <= 0:
        return _last(c)
    typical = (_as_array(highs) + _as_array(lows) + c) / 3
    return float(np.sum(typical * v) / total_volume)


def stochastic(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    k_period: int = 14,
    d_period: int = 3,
) -> Stochastic:
    """
    Calculate the Stochastic Oscillator.

    %D is the SMA of the last ``d_period`` %K readings.
    """
    h, l, c = _as_array(highs), _as_array(lows), _as_array(closes)
    n = len(c)
    if n < k_period + d_period - 1:
        return Stochastic(50.0, 50.0)

    k_values = []
    for end in range(n - d_period + 1, n + 1):
        hh = np.max(h[end - k_period:end])
        ll = np.min(l[end - k_period:end])
        span = hh - ll
        k_values.append(50.0 if span == 0 else (c[end - 1] - ll) / span * 100)

    return Stochastic(float(k_values[-1]), float(np.mean(k_values)))


def williams_r(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float:
    """Calculate Williams %R in [-100, 0]."""
    h, l, c = _as_array(highs), _as_array(lows), _as_array(closes)
    if len(c) < period:
        return -50.0
    hh = np.max(h[-period:])
    ll = np.min(l[-period:])
    if hh == ll:
        return -50.0
    return float((hh - c[-1]) / (hh - ll) * -100)


def cci(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 20,
) -> float:
    """Calculate the Commodity Channel Index."""
    c = _as_array(closes)
    if len(c) < period:
        return 0.0
    typical = (_as_array(highs) + _as_array(lows) + c) / 3
    window = typical[-period:]
    mean = np.mean(window)
    mean_deviation = np.mean(np.abs(window - mean))
    if mean_deviation == 0:
        return 0.0
    return float((typical[-1] - mean) / (0.015 * mean_deviation))


def mfi(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    volumes: Sequence[float],
    period: int = 14,
) -> float:
    """Calculate the Money Flow Index over the latest ``period`` bars."""
    c = _as_array(closes)
    n = len(c)
    if n < period + 1:
        return 50.0

    typical = (_as_array(highs) + _as_array(lows) + c) / 3
    money_flow = typical * _as_array(volumes)
    positive = 0.0
    negative = 0.0
    for i in range(n - period, n):
        if typical[i] > typical[i - 1]:
            positive += money_flow[i]
        elif typical[i] < typical[i - 1]:
            negative += money_flow[i]

    if negative == 0:
        return 100.0 if positive > 0 else 50.0
    return float(100 - 100 / (1 + positive / negative))


def obv(closes: Sequence[float], volumes: Sequence[float]) -> float:
    """Calculate On Balance Volume at the latest bar."""
    if len(closes) < 2:
        return 0.0
    return float(obv_series(closes, volumes)[-1])


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float:
    """
    Calculate Average True Range (Wilder's smoothing).

    Returns:
        Latest ATR, or 0.0 when fewer than ``period + 1`` candles
    """
    series = atr_series(highs, lows, closes, period)
    if len(series) == 0:
        return 0.0
    return float(series[-1])


def parabolic_sar(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    af_start: float = 0.02,
    af_step: float = 0.02,
    af_max: float = 0.2,
) -> ParabolicSar:
    """Calculate Wilder's Parabolic SAR and the trend it implies."""
    h, l, c = _as_array(highs), _as_array(lows), _as_array(closes)
    n = len(c)
    if n < 2:
        return ParabolicSar(_last(c), Signal.NEUTRAL)

    uptrend = h[1] + l[1] >= h[0] + l[0]
    sar = l[0] if uptrend else h[0]
    extreme = h[0] if uptrend else l[0]
    af = af_start

    for i in range(1, n):
        sar = sar + af * (extreme - sar)
        prior = slice(max(0, i - 2), i)
        if uptrend:
            sar = min(sar, float(np.min(l[prior])))
            if l[i] < sar:
                uptrend, sar, extreme, af = False, extreme, l[i], af_start
            elif h[i] > extreme:
                extreme = h[i]
                af = min(af + af_step, af_max)
        else:
            sar = max(sar, float(np.max(h[prior])))
            if h[i] > sar:
                uptrend, sar, extreme, af = True, extreme, h[i], af_start
            elif l[i] < extreme:
                extreme = l[i]
                af = min(af + af_step, af_max)

    return ParabolicSar(float(sar), Signal.BULLISH if uptrend else Signal.BEARISH)


def volume_oscillator(
    volumes: Sequence[float],
    short_period: int = 5,
    long_period: int = 10,
) -> float:
    """Percentage difference between short and long volume SMAs."""
    v = _as_array(volumes)
    if len(v) < long_period:
        return 0.0
    long_avg = float(np.mean(v[-long_period:]))
    if long_avg == 0:
        return 0.0
    short_avg = float(np.mean(v[-short_period:]))
    return (short_avg - long_avg) / long_avg * 100


def adx(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> ADX:
    """
    Calculate ADX with +DI/-DI using Wilder smoothing.

    Needs ``2 * period + 1`` candles: ``period`` to smooth TR/DM, then
    ``period`` DX readings to seed the ADX average.
    """
    h, l = _as_array(highs), _as_array(lows)
    if len(h) < 2 * period + 1:
        return ADX(0.0, 0.0, 0.0)

    tr = true_range(highs, lows, closes)[1:]
    up_move = h[1:] - h[:-1]
    down_move = l[:-1] - l[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)

    def smooth(arr: np.ndarray) -> np.ndarray:
        out = [float(np.sum(arr[:period]))]
        for value in arr[period:]:
            out.append(out[-1] - out[-1] / period + value)
        return np.array(out)

    tr_s, plus_s, minus_s = smooth(tr), smooth(plus_dm), smooth(minus_dm)
    with np.errstate(divide="ignore", invalid="ignore"):
        plus_di = np.where(tr_s == 0, 0.0, plus_s / tr_s * 100)
        minus_di = np.where(tr_s == 0, 0.0, minus_s / tr_s * 100)
        di_sum = plus_di + minus_di
        dx = np.where(di_sum == 0, 0.0, np.abs(plus_di - minus_di) / di_sum * 100)

    adx_value = float(np.mean(dx[:period]))
    for value in dx[period:]:
        adx_value = (adx_value * (period - 1) + value) / period

    return ADX(adx_value, float(plus_di[-1]), float(minus_di[-1]))


# =============================================================================
# IndicatorCalculator class
# =============================================================================

@dataclass(frozen=True)
class IndicatorSnapshot:
    """Latest value of every indicator in the analysis suite."""

    price: float
    rsi: float
    macd: MACD
    ema20: float
    ema50: float
    bollinger: BollingerBands
    vwap: float
    adx: ADX
    stochastic: Stochastic
    williams_r: float
    cci: float
    mfi: float
    obv: float
    atr: float
    parabolic_sar: ParabolicSar
    volume_oscillator: float


class IndicatorCalculator:
    """Calculator for the full indicator suite used by symbol analysis."""

    def __init__(
        self,
        rsi_period: int = 14,
        ema_fast: int = 20,
        ema_slow: int = 50,
        atr_period: int = 14,
        adx_period: int = 14,
    ):
        self.rsi_period = rsi_period
        self.ema_fast = ema_fast
        self.ema_slow = ema_slow
        self.atr_period = atr_period
        self.adx_period = adx_period

    @property
    def min_history(self) -> int:
        """Candles needed for every indicator to leave its neutral default."""
        return max(self.ema_slow, 2 * self.adx_period + 1, 26 + 9 - 1)

    def calculate_latest(self, data: OHLCV) -> IndicatorSnapshot:
        """
        Calculate indicators for the latest bar.

        Args:
            data: OHLCV arrays (ascending by time)

        Returns:
            IndicatorSnapshot; indicators with too little history hold their
            neutral defaults
        """
        highs, lows, closes, volumes = data.highs, data.lows, data.closes, data.volumes
        return IndicatorSnapshot(
            price=_last(closes),
            rsi=rsi(closes, self.rsi_period),
            macd=macd(closes),
            ema20=ema(closes, self.ema_fast),
            ema50=ema(closes, self.ema_slow),
            bollinger=bollinger_bands(closes),
            vwap=vwap(highs, lows, closes, volumes),
            adx=adx(highs, lows, closes, self.adx_period),
            stochastic=stochastic(highs, lows, closes),
            williams_r=williams_r(highs, lows, closes),
            cci=cci(highs, lows, closes),
            mfi=mfi(highs, lows, closes, volumes),
            obv=obv(closes, volumes),
            atr=atr(highs, lows, closes, self.atr_period),
            parabolic_sar=parabolic_sar(highs, lows, closes),
            volume_oscillator=volume_oscillator(volumes),
        )
