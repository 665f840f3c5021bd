"""Tests for support/resistance rules and scanner."""

import numpy as np
import pytest

from app.services.scanners.support_resistance import SupportResistanceScanner
from core.models.config import SupportResistanceConfig
from core.models.kline import OHLCV
from core.models.scan import LevelType
from core.rules.support_resistance import (
    candles_for_lookback,
    classify_bounce,
    classify_breakout,
    count_tests,
    rank_breakouts,
)

from conftest import make_candles, make_ticker


def arrays(highs, lows, closes=None, volumes=None) -> OHLCV:
    n = len(highs)
    closes = closes if closes is not None else [(h + l) / 2 for h, l in zip(highs, lows)]
    volumes = volumes if volumes is not None else [1_000.0] * n
    return OHLCV(
        opens=np.asarray(closes, dtype=np.float64),
        highs=np.asarray(highs, dtype=np.float64),
        lows=np.asarray(lows, dtype=np.float64),
        closes=np.asarray(closes, dtype=np.float64),
        volumes=np.asarray(volumes, dtype=np.float64),
    )


# Range 100-200 with the low touched three separate times
RANGE = arrays(
    highs=[150, 200, 160, 110, 150, 180, 150, 110, 160, 170, 130, 150],
    lows=[120, 150, 130, 100, 120, 150, 120, 101, 130, 140, 100.5, 120],
)


class TestLookback:

    @pytest.mark.parametrize(
        "days,expected",
        [(1, ("4h", 6)), (7, ("4h", 42)), (30, ("4h", 180)), (31, ("1d", 31)), (90, ("1d", 90))],
    )
    def test_conversion(self, days, expected):
        assert candles_for_lookback(days) == expected


class TestCountTests:

    def test_consecutive_bars_count_once(self):
        assert count_tests([100, 100.5, 120, 101, 130, 99.5], 100.0) == 3

    def test_none_inside(self):
        assert count_tests([120, 130], 100.0) == 0


class TestBounce:

    def test_price_at_low_is_support(self):
        result = classify_bounce("X", 100.0, RANGE, rsi=35.0, tolerance=0.05)

        assert result.type is LevelType.SUPPORT
        assert result.distance_percent == pytest.approx(0.0)
        assert result.level == 100.0
        assert result.target == 200.0
        assert result.risk_reward is None  # zero distance to the level
        assert result.tests == 3
        assert "Golden Setup" in result.badges
        assert "Strong Support" in result.badges

    def test_midpoint_has_no_type(self):
        assert classify_bounce("X", 150.0, RANGE, rsi=50.0, tolerance=0.05) is None

    def test_daily_tolerance_is_wider(self):
        assert classify_bounce("X", 115.0, RANGE, rsi=50.0, tolerance=0.05) is None
        result = classify_bounce("X", 115.0, RANGE, rsi=50.0, tolerance=0.20)
        assert result.type is LevelType.SUPPORT
        assert result.risk_reward == pytest.approx(85.0 / 15.0, abs=0.01)

    def test_resistance(self):
        result = classify_bounce("X", 196.0, RANGE, rsi=72.0, tolerance=0.05)
        assert result.type is LevelType.RESISTANCE
        assert result.level == 200.0
        assert result.distance_percent == pytest.approx(4.0 / 196.0 * 100, abs=0.01)
        assert "Weak Level" in result.badges
        assert "Golden Setup" not in result.badges

    def test_oversold_badge(self):
        result = classify_bounce("X", 101.0, RANGE, rsi=25.0, tolerance=0.05)
        assert "Oversold" in result.badges


class TestBreakout:

    def _series(self, last_high, last_low, last_close, last_volume=1_000.0):
        highs = [110.0] * 25 + [last_high]
        lows = [90.0] * 25 + [last_low]
        closes = [100.0] * 25 + [last_close]
        volumes = [1_000.0] * 25 + [last_volume]
        return arrays(highs, lows, closes, volumes)

    def test_confirmed_breakout(self):
        data = self._series(116.0, 108.0, 115.0, last_volume=2_000.0)
        result = classify_breakout("X", 115.0, data, rsi=65.0)

        assert result.type is LevelType.BREAKOUT
        assert result.level == 110.0  # last bar excluded from the prior period
        assert result.distance_percent == pytest.approx(4.55, abs=0.01)
        assert result.badges == ["Confirmed", "Strong Momentum", "High Volume"]

    def test_approaching_breakout(self):
        data = self._series(109.0, 107.0, 108.5)
        result = classify_breakout("X", 108.5, data, rsi=55.0)
        assert result.type is LevelType.BREAKOUT
        assert result.badges == ["Approaching"]

    def test_too_far_above(self):
        data = self._series(140.0, 125.0, 130.0)
        assert classify_breakout("X", 130.0, data, rsi=70.0) is None

    def test_breakdown(self):
        data = self._series(90.0, 85.0, 86.0)
        result = classify_breakout("X", 86.0, data, rsi=30.0)
        assert result.type is LevelType.BREAKDOWN
        assert result.level == 90.0
        assert "Confirmed" in result.badges
        assert "Strong Momentum" in result.badges

    def test_inside_range(self):
        data = self._series(102.0, 98.0, 100.0)
        assert classify_breakout("X", 100.0, data, rsi=50.0) is None

    def test_confirmed_ranked_first(self):
        near = classify_breakout("NEAR", 108.5, self._series(109.0, 107.0, 108.5), rsi=50.0)
        far = classify_breakout("FAR", 118.0, self._series(119.0, 112.0, 118.0), rsi=50.0)
        assert [r.symbol for r in rank_breakouts([near, far])] == ["FAR", "NEAR"]


@pytest.mark.asyncio
class TestSupportResistanceScanner:

    async def test_bounce_scan(self, gateway, analyzer, universe):
        # Falling into the period low
        falling = [200.0 - i * 2 for i in range(50)] + [102.0] * 10
        gateway.tickers = [make_ticker("DIPUSDT"), make_ticker("MIDUSDT")]
        gateway.klines[("DIPUSDT", "4h")] = make_candles(falling, spread=0.0)
        gateway.klines[("MIDUSDT", "4h")] = make_candles(
            [100.0] * 20 + [200.0] * 20 + [150.0] * 20, spread=0.0
        )

        scanner = SupportResistanceScanner(analyzer=analyzer, universe=universe, batch_delay=0)
        results = await scanner.scan(mode="bounce", days=10)

        assert [r.symbol for r in results] == ["DIPUSDT"]
        assert results[0].type is LevelType.SUPPORT
        assert gateway.kline_calls[0][1:] == ("4h", 60)

    async def test_long_lookback_uses_daily(self, gateway, analyzer, universe):
        gateway.tickers = [make_ticker("BTCUSDT")]
        scanner = SupportResistanceScanner(analyzer=analyzer, universe=universe, batch_delay=0)

        assert await scanner.scan(mode="breakout", days=60) == []
        assert gateway.kline_calls == [("BTCUSDT", "1d", 60)]

    async def test_breakout_scan(self, gateway, analyzer, universe):
        closes = [100.0] * 40 + [112.0]
        gateway.tickers = [make_ticker("UPUSDT")]
        gateway.klines[("UPUSDT", "4h")] = make_candles(closes, spread=0.01)

        scanner = SupportResistanceScanner(
            analyzer=analyzer,
            universe=universe,
            config=SupportResistanceConfig(),
            batch_delay=0,
        )
        results = await scanner.scan(mode="breakout", days=7)

        assert len(results) == 1
        assert results[0].type is LevelType.BREAKOUT
        assert "Confirmed" in results[0].badges
