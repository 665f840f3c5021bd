"""Tests for the trend-dip gate and scanner."""

import pytest

from app.services.analyzer import SymbolAnalyzer
from app.services.scanners.trend_dip import TrendDipScanner
from app.services.universe import UniverseProvider
from core.errors import InsufficientHistoryError, TransientFetchError
from core.rules.trend_dip import check_uptrend, dip_level

from conftest import FakeGateway, fixed_wall_clock, make_candles, make_ticker

RISING = [100 * 1.005 ** i for i in range(250)]
FALLING = [200 * 0.995 ** i for i in range(250)]


class TestUptrendGate:

    def test_rising_passes(self):
        gate = check_uptrend("X", RISING)
        assert gate.passed
        assert gate.price == pytest.approx(RISING[-1])
        assert gate.distance_pct > 0

    def test_falling_fails(self):
        gate = check_uptrend("X", FALLING)
        assert not gate.passed
        assert gate.distance_pct < 0

    def test_short_history_raises(self):
        with pytest.raises(InsufficientHistoryError) as exc:
            check_uptrend("X", RISING[:150])
        assert exc.value.required == 200
        assert exc.value.available == 150


class TestDipLevel:

    @pytest.mark.parametrize(
        "value,level",
        [(10.0, "deep"), (29.99, "deep"), (30.0, "moderate"), (44.9, "moderate"), (45.0, "shallow"), (70.0, "shallow")],
    )
    def test_bands(self, value, level):
        assert dip_level(value) == level


class WeeklyDownGateway(FakeGateway):
    """Weekly candles always fail to load."""

    async def get_klines(self, symbol, interval, limit):
        if interval == "1w":
            self.kline_calls.append((symbol, interval, limit))
            raise TransientFetchError("weekly unavailable", symbol=symbol)
        return await super().get_klines(symbol, interval, limit)


@pytest.mark.asyncio
class TestTrendDipScanner:

    async def test_ranks_by_hourly_rsi(self, gateway, analyzer, universe):
        gateway.tickers = [
            make_ticker("CALMUSDT"),
            make_ticker("DIPUSDT"),
            make_ticker("DOWNUSDT"),
            make_ticker("NEWUSDT"),
        ]
        gateway.klines[("CALMUSDT", "4h")] = make_candles(RISING)
        gateway.klines[("CALMUSDT", "1h")] = make_candles(RISING[:100])
        gateway.klines[("DIPUSDT", "4h")] = make_candles(RISING)
        gateway.klines[("DIPUSDT", "1h")] = make_candles(FALLING[:100])
        gateway.klines[("DOWNUSDT", "4h")] = make_candles(FALLING)
        gateway.klines[("NEWUSDT", "4h")] = make_candles(RISING[:50])

        scanner = TrendDipScanner(analyzer=analyzer, universe=universe, batch_delay=0)
        results = await scanner.scan()

        assert [r.symbol for r in results] == ["DIPUSDT", "CALMUSDT"]
        dip, calm = results
        assert dip.rsi_1h == pytest.approx(0.0)
        assert dip.dip_level == "deep"
        assert calm.rsi_1h == pytest.approx(100.0)
        assert calm.dip_level == "shallow"
        assert set(dip.rsi) == {"15m", "1h", "4h", "1d", "1w"}
        # No 15m candles: too short for RSI
        assert dip.rsi["15m"] == 50.0

    async def test_failed_timeframe_reads_neutral(self, cache):
        gateway = WeeklyDownGateway()
        gateway.tickers = [make_ticker("UPUSDT")]
        gateway.klines[("UPUSDT", "4h")] = make_candles(RISING)
        gateway.klines[("UPUSDT", "1h")] = make_candles(FALLING[:100])
        analyzer = SymbolAnalyzer(gateway, cache, clock=fixed_wall_clock, batch_delay=0)
        universe = UniverseProvider(gateway, ["BTCUSDT"])

        scanner = TrendDipScanner(analyzer=analyzer, universe=universe, batch_delay=0)
        results = await scanner.scan()

        assert len(results) == 1
        assert results[0].rsi["1w"] == 50.0
        assert results[0].rsi["4h"] == pytest.approx(100.0)

    async def test_limit(self, gateway, analyzer, universe):
        gateway.tickers = [make_ticker(f"T{i}USDT") for i in range(3)]
        for i in range(3):
            gateway.klines[(f"T{i}USDT", "4h")] = make_candles(RISING)

        scanner = TrendDipScanner(analyzer=analyzer, universe=universe, batch_delay=0)
        assert len(await scanner.scan(limit=2)) == 2
