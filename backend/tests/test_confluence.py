"""Tests for confluence aggregation."""

import pytest

from app.services.confluence import ConfluenceAggregator
from core.models.scan import (
    ConfluenceRecord,
    LevelType,
    MomentumResult,
    MomentumSignal,
    SupportResistanceResult,
    TrendDipResult,
    VolumeSpikeResult,
)
from core.rules.protocol import Scanner


class StubScanner:
    """Returns canned results; support/resistance results are keyed by mode."""

    def __init__(self, name, results=None, by_mode=None, error=None):
        self._name = name
        self.results = results or []
        self.by_mode = by_mode or {}
        self.error = error
        self.calls = []

    @property
    def name(self):
        return self._name

    async def scan(self, **params):
        self.calls.append(params)
        if self.error:
            raise self.error
        if "mode" in params:
            return self.by_mode.get(params["mode"], [])
        return self.results


def level(symbol, type_, badges=(), mode="bounce"):
    return SupportResistanceResult(
        symbol=symbol, price=10.0, mode=mode, type=type_, level=9.8,
        distance_percent=2.0, period_high=12.0, period_low=9.8, badges=list(badges),
    )


def momentum(symbol, signal):
    return MomentumResult(
        symbol=symbol, price=20.0, change_24h=6.0, volume_factor=2.5, rsi=65.0, signal=signal,
    )


def spike(symbol, level_="high", fallback=False):
    return VolumeSpikeResult(
        symbol=symbol, price=30.0, volume_multiple=0.0 if fallback else 3.2,
        spike_level=level_, fallback=fallback,
    )


def dip(symbol, dip_level="moderate"):
    return TrendDipResult(
        symbol=symbol, price=40.0, ema200=35.0, ema200_distance_pct=14.0,
        rsi_1h=38.0, dip_level=dip_level,
    )


def build_scanners(momentum_error=None):
    return {
        "support_resistance": StubScanner(
            "support_resistance",
            by_mode={
                "bounce": [
                    level("SOLUSDT", LevelType.SUPPORT, badges=["Golden Setup", "Strong Support"]),
                    level("XRPUSDT", LevelType.RESISTANCE),
                ],
                "breakout": [
                    level("BTCUSDT", LevelType.BREAKOUT, badges=["Confirmed"], mode="breakout"),
                    level("LTCUSDT", LevelType.BREAKDOWN, badges=["Confirmed"], mode="breakout"),
                ],
            },
        ),
        "volume_spike": StubScanner(
            "volume_spike",
            results=[spike("SOLUSDT"), spike("DOGEUSDT", level_="elevated", fallback=True)],
        ),
        "momentum": StubScanner(
            "momentum",
            results=[
                momentum("BTCUSDT", MomentumSignal.RIDE),
                momentum("ETHUSDT", MomentumSignal.TOPPED),
                momentum("AVAXUSDT", MomentumSignal.CAUTION),
            ],
            error=momentum_error,
        ),
        "trend_dip": StubScanner(
            "trend_dip", results=[dip("SOLUSDT"), dip("ADAUSDT", dip_level="deep")]
        ),
    }


@pytest.mark.asyncio
class TestTopPicks:

    async def test_scores_and_ranking(self):
        aggregator = ConfluenceAggregator(build_scanners())
        picks = await aggregator.top_picks()

        assert [p.symbol for p in picks] == ["SOLUSDT", "BTCUSDT"]
        sol, btc = picks

        # support 15 + golden 20 + volume 20 + dip 15 + three sources 30
        # + support/volume 15 + dip/support 15
        assert sol.score == 130
        assert sol.sources == ["bounce", "volume_spike", "trend_dip"]
        assert sol.tags == ["Support", "Golden Setup", "Volume Surge", "Trend Dip"]
        assert sol.price == 10.0

        # breakout 30 + confirmed 10 + momentum 25 + two sources 15
        assert btc.score == 80
        assert set(btc.tags) == {"Breakout", "Momentum"}

    async def test_bearish_findings_ignored(self):
        aggregator = ConfluenceAggregator(build_scanners())
        records = aggregator.fold(await aggregator.collect(["bounce", "breakout", "momentum", "volume_spike"]))

        symbols = {r.symbol for r in records}
        assert symbols.isdisjoint({"XRPUSDT", "LTCUSDT", "ETHUSDT", "AVAXUSDT", "DOGEUSDT"})

    async def test_min_score_filters(self):
        aggregator = ConfluenceAggregator(build_scanners())
        picks = await aggregator.top_picks(min_score=0)
        ada = next(p for p in picks if p.symbol == "ADAUSDT")
        assert ada.score == 25

    async def test_count(self):
        aggregator = ConfluenceAggregator(build_scanners())
        assert [p.symbol for p in await aggregator.top_picks(count=1)] == ["SOLUSDT"]

    async def test_failing_scanner_contributes_nothing(self):
        aggregator = ConfluenceAggregator(build_scanners(momentum_error=RuntimeError("down")))
        picks = await aggregator.top_picks()

        btc = next(p for p in picks if p.symbol == "BTCUSDT")
        assert btc.score == 40
        assert btc.sources == ["breakout"]

    async def test_missing_scanner(self):
        scanners = build_scanners()
        del scanners["trend_dip"]
        picks = await ConfluenceAggregator(scanners).top_picks()
        sol = next(p for p in picks if p.symbol == "SOLUSDT")
        assert "Trend Dip" not in sol.tags

    async def test_scanner_params(self):
        scanners = build_scanners()
        await ConfluenceAggregator(scanners).top_picks()
        modes = sorted(c["mode"] for c in scanners["support_resistance"].calls)
        assert modes == ["bounce", "breakout"]


@pytest.mark.asyncio
class TestHotSetups:

    async def test_fast_sources_only(self):
        scanners = build_scanners()
        setups = await ConfluenceAggregator(scanners).hot_setups()

        assert [s.symbol for s in setups] == ["BTCUSDT"]
        assert scanners["trend_dip"].calls == []
        assert [c["mode"] for c in scanners["support_resistance"].calls] == ["breakout"]

    async def test_breakout_with_volume(self):
        scanners = build_scanners()
        scanners["volume_spike"].results = [spike("BTCUSDT", level_="extreme")]
        setups = await ConfluenceAggregator(scanners).hot_setups()

        # 40 breakout + 25 momentum + 30 volume + 30 three sources + 20 pairing
        assert setups[0].symbol == "BTCUSDT"
        assert setups[0].score == 145


class TestRank:

    def test_ties_prefer_more_sources_then_symbol(self):
        records = [
            ConfluenceRecord(symbol="BBB", price=1.0, score=50, sources=["a"]),
            ConfluenceRecord(symbol="AAA", price=1.0, score=50, sources=["a"]),
            ConfluenceRecord(symbol="CCC", price=1.0, score=50, sources=["a", "b"]),
            ConfluenceRecord(symbol="DDD", price=1.0, score=70, sources=["a"]),
            ConfluenceRecord(symbol="EEE", price=1.0, score=10, sources=["a"]),
        ]
        ranked = ConfluenceAggregator.rank(records, count=10, min_score=30)
        assert [r.symbol for r in ranked] == ["DDD", "CCC", "AAA", "BBB"]

    def test_stub_is_a_scanner(self):
        assert isinstance(StubScanner("x"), Scanner)
