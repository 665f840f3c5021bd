"""Confluence aggregation: symbols flagged by several scanners at once.

Scanner outputs are folded into one ConfluenceRecord per symbol. Each
bullish finding earns points, and symbols seen by more than one scanner
earn confluence and pairing bonuses on top. Bearish or exhausted findings
(Resistance, Breakdown, TOPPED, CAUTION) and volume-spike placeholders are
ignored.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from core.models.config import ConfluenceConfig
from core.models.scan import (
    ConfluenceRecord,
    LevelType,
    MomentumResult,
    MomentumSignal,
    ScanResult,
    SupportResistanceResult,
    TrendDipResult,
    VolumeSpikeResult,
)
from core.rules.protocol import Scanner

logger = logging.getLogger(__name__)

# Source tags
BOUNCE = "bounce"
BREAKOUT = "breakout"
VOLUME_SPIKE = "volume_spike"
MOMENTUM = "momentum"
TREND_DIP = "trend_dip"


@dataclass(frozen=True)
class ScanJob:
    source: str
    scanner: str
    params: dict[str, Any]


SCAN_JOBS = {
    BOUNCE: ScanJob(BOUNCE, "support_resistance", {"mode": "bounce"}),
    BREAKOUT: ScanJob(BREAKOUT, "support_resistance", {"mode": "breakout"}),
    VOLUME_SPIKE: ScanJob(VOLUME_SPIKE, "volume_spike", {}),
    MOMENTUM: ScanJob(MOMENTUM, "momentum", {}),
    TREND_DIP: ScanJob(TREND_DIP, "trend_dip", {}),
}

TOP_PICKS_SOURCES = (BOUNCE, BREAKOUT, VOLUME_SPIKE, MOMENTUM, TREND_DIP)
HOT_SETUPS_SOURCES = (BREAKOUT, VOLUME_SPIKE, MOMENTUM)


class ConfluenceAggregator:
    """Runs scanners in parallel and ranks symbols by combined evidence."""

    def __init__(
        self,
        scanners: Mapping[str, Scanner],
        config: ConfluenceConfig | None = None,
    ):
        self.scanners = scanners
        self.config = config or ConfluenceConfig()

    async def _run_job(self, job: ScanJob) -> list[ScanResult]:
        scanner = self.scanners.get(job.scanner)
        if scanner is None:
            logger.warning(f"Confluence: scanner '{job.scanner}' not configured")
            return []
        return await scanner.scan(**job.params)

    async def collect(self, sources: Sequence[str]) -> dict[str, list[ScanResult]]:
        """Run the scanners behind ``sources``; failures contribute nothing."""
        jobs = [SCAN_JOBS[source] for source in sources]
        outcomes = await asyncio.gather(
            *(self._run_job(job) for job in jobs), return_exceptions=True
        )

        collected: dict[str, list[ScanResult]] = {}
        for job, outcome in zip(jobs, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Confluence: {job.source} scan failed: {outcome}")
                collected[job.source] = []
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                collected[job.source] = outcome
        return collected

    def _record(
        self,
        records: dict[str, ConfluenceRecord],
        result: ScanResult,
    ) -> ConfluenceRecord:
        record = records.get(result.symbol)
        if record is None:
            record = ConfluenceRecord(symbol=result.symbol, price=result.price)
            records[result.symbol] = record
        elif record.price <= 0 < result.price:
            record.price = result.price
        return record

    def _fold_one(
        self,
        records: dict[str, ConfluenceRecord],
        source: str,
        result: ScanResult,
    ) -> None:
        cfg = self.config

        if isinstance(result, SupportResistanceResult):
            if result.type is LevelType.SUPPORT:
                record = self._record(records, result)
                record.add_source(source)
                record.award(cfg.support_bonus, "At support", tag="Support")
                if "Golden Setup" in result.badges:
                    record.award(cfg.golden_setup_bonus, "Golden Setup", tag="Golden Setup")
            elif result.type is LevelType.BREAKOUT:
                record = self._record(records, result)
                record.add_source(source)
                record.award(cfg.breakout_bonus, "Breakout", tag="Breakout")
                if "Confirmed" in result.badges:
                    record.award(cfg.confirmed_breakout_bonus, "Confirmed breakout")

        elif isinstance(result, MomentumResult):
            if result.signal in (MomentumSignal.RIDE, MomentumSignal.MOMENTUM):
                record = self._record(records, result)
                record.add_source(source)
                record.award(cfg.momentum_bonus, f"Momentum {result.signal.value}", tag="Momentum")
            elif result.signal is MomentumSignal.HEATED:
                record = self._record(records, result)
                record.add_source(source)
                record.award(cfg.heated_bonus, "Heated momentum", tag="Momentum")

        elif isinstance(result, VolumeSpikeResult):
            if result.fallback:
                return
            record = self._record(records, result)
            record.add_source(source)
            record.award(cfg.volume_surge_bonus, "Volume Surge", tag="Volume Surge")
            if result.spike_level == "extreme":
                record.award(cfg.extreme_volume_bonus, "Extreme volume")

        elif isinstance(result, TrendDipResult):
            record = self._record(records, result)
            record.add_source(source)
            record.award(cfg.trend_dip_bonus, "Dip in uptrend", tag="Trend Dip")
            if result.dip_level == "deep":
                record.award(cfg.deep_dip_bonus, "Deep dip")

    def _apply_confluence(self, record: ConfluenceRecord) -> None:
        cfg = self.config
        agreeing = len(record.sources)
        if agreeing >= 3:
            record.award(cfg.three_source_bonus, f"{agreeing} scanners agree")
        elif agreeing == 2:
            record.award(cfg.two_source_bonus, "2 scanners agree")

        tags = set(record.tags)
        if {"Support", "Volume Surge"} <= tags:
            record.award(cfg.support_volume_bonus, "Support with volume")
        if {"Breakout", "Volume Surge"} <= tags:
            record.award(cfg.breakout_volume_bonus, "Breakout with volume")
        if {"Trend Dip", "Support"} <= tags:
            record.award(cfg.dip_support_bonus, "Dip into support")

    def fold(self, collected: Mapping[str, Sequence[ScanResult]]) -> list[ConfluenceRecord]:
        """Fold scanner outputs into scored per-symbol records."""
        records: dict[str, ConfluenceRecord] = {}
        for source, results in collected.items():
            for result in results:
                self._fold_one(records, source, result)

        for record in records.values():
            self._apply_confluence(record)
        return list(records.values())

    @staticmethod
    def rank(
        records: list[ConfluenceRecord],
        count: int,
        min_score: int,
    ) -> list[ConfluenceRecord]:
        """Filter by score, sort descending (more sources, then symbol) and truncate."""
        qualified = [r for r in records if r.score >= min_score]
        qualified.sort(key=lambda r: (-r.score, -len(r.sources), r.symbol))
        return qualified[:count]

    async def top_picks(
        self,
        count: int | None = None,
        min_score: int | None = None,
    ) -> list[ConfluenceRecord]:
        """Best setups across every bullish scanner."""
        cfg = self.config
        collected = await self.collect(TOP_PICKS_SOURCES)
        picks = self.rank(
            self.fold(collected),
            count or cfg.top_picks_count,
            cfg.top_picks_min_score if min_score is None else min_score,
        )
        logger.info(f"Top picks: {len(picks)} symbols")
        return picks

    async def hot_setups(
        self,
        count: int | None = None,
        min_score: int | None = None,
    ) -> list[ConfluenceRecord]:
        """Fast-moving setups: breakouts, volume spikes and momentum only."""
        cfg = self.config
        collected = await self.collect(HOT_SETUPS_SOURCES)
        setups = self.rank(
            self.fold(collected),
            count or cfg.hot_setups_count,
            cfg.hot_setups_min_score if min_score is None else min_score,
        )
        logger.info(f"Hot setups: {len(setups)} symbols")
        return setups
