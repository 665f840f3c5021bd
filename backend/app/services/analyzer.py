"""Per-symbol technical analysis.

Turns raw candles into a scored recommendation. Candles come from the shared
KlineCache or the gateway; when the gateway fails the analyzer falls back to
deterministic synthetic candles (degraded mode) so callers always receive a
well-formed TechnicalAnalysis.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from app.clients.gateway import MarketDataGateway
from app.services.batching import run_in_batches
from app.storage.kline_cache import KlineCache
from core.analysis import (
    INTERVAL_MS,
    generate_synthetic_candles,
    meets_bullish_criteria,
    score_indicators,
)
from core.errors import TransientFetchError
from core.indicators import IndicatorCalculator
from core.models.analysis import TechnicalAnalysis
from core.models.kline import Candle, to_arrays

logger = logging.getLogger(__name__)

# Intervals the gateway understands
SUPPORTED_INTERVALS = ("5m", "15m", "30m", "1h", "2h", "4h", "1d", "1w")
DEFAULT_INTERVAL = "1h"


def resolve_interval(timeframe: str) -> str:
    """Map a user timeframe to a gateway interval (unknown -> 1h)."""
    normalized = (timeframe or "").strip()
    if normalized in SUPPORTED_INTERVALS:
        return normalized
    if normalized.lower() in SUPPORTED_INTERVALS:
        return normalized.lower()
    return DEFAULT_INTERVAL


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class SymbolAnalyzer:
    """Scores one symbol at a time and hands candles to the scanners."""

    def __init__(
        self,
        gateway: MarketDataGateway,
        cache: KlineCache,
        clock: Callable[[], datetime] = utc_now,
        seed: int = 0,
        calculator: IndicatorCalculator | None = None,
        batch_size: int = 8,
        batch_delay: float = 0.1,
    ):
        self.gateway = gateway
        self.cache = cache
        self.clock = clock
        self.seed = seed
        self.calculator = calculator or IndicatorCalculator()
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def get_candles(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """
        Cache-or-gateway candle fetch.

        Raises:
            TransientFetchError: when the gateway fails
        """
        key = (symbol, interval, limit)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        candles = await self.gateway.get_klines(symbol, interval, limit)
        if candles:
            self.cache.set(key, candles)
        return candles

    def synthetic_candles(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """Deterministic stand-in series ending at the current interval boundary."""
        step = INTERVAL_MS.get(interval, INTERVAL_MS[DEFAULT_INTERVAL])
        now_ms = int(self.clock().timestamp() * 1000)
        end_time = now_ms - now_ms % step
        return generate_synthetic_candles(symbol, interval, limit, end_time, self.seed)

    def analyze_candles(
        self,
        symbol: str,
        candles: Sequence[Candle],
        degraded: bool = False,
    ) -> TechnicalAnalysis:
        """Score a candle series."""
        snapshot = self.calculator.calculate_latest(to_arrays(candles))
        return TechnicalAnalysis(
            symbol=symbol,
            price=snapshot.price,
            indicators=score_indicators(snapshot),
            candles=list(candles),
            calculation_timestamp=self.clock(),
            latest_data_time=_to_datetime(candles[-1].timestamp),
            degraded=degraded,
        )

    async def analyze_symbol(
        self,
        symbol: str,
        timeframe: str = "1h",
        limit: int = 100,
    ) -> TechnicalAnalysis:
        """
        Analyze a symbol on one timeframe.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            timeframe: Requested timeframe; unknown values resolve to 1h
            limit: Number of candles to analyze

        Returns:
            TechnicalAnalysis; ``degraded`` is set when synthetic candles
            were used
        """
        symbol = symbol.upper()
        interval = resolve_interval(timeframe)

        try:
            candles = await self.get_candles(symbol, interval, limit)
        except TransientFetchError as e:
            logger.warning(f"{symbol} {interval}: fetch failed, using synthetic data: {e}")
            candles = []

        if not candles:
            return self.analyze_candles(
                symbol, self.synthetic_candles(symbol, interval, limit), degraded=True
            )

        return self.analyze_candles(symbol, candles)

    async def scan_bullish(
        self,
        symbols: Sequence[str],
        timeframe: str = "4h",
        limit: int = 100,
        min_score: int = 10,
    ) -> list[TechnicalAnalysis]:
        """
        Analyze many symbols and keep the strongly bullish ones.

        A symbol qualifies with at least 3 of 4 criteria (EMA crossover
        bullish, RSI in (40, 70), MACD bullish, ADX > 25) and a total score
        above ``min_score``. Degraded analyses are never reported.

        Returns:
            Qualifying analyses, highest score first
        """
        async def analyze(symbol: str) -> TechnicalAnalysis | None:
            analysis = await self.analyze_symbol(symbol, timeframe, limit)
            if analysis.degraded:
                return None
            if meets_bullish_criteria(
                analysis.indicators, analysis.total_score, min_total_score=min_score
            ):
                return analysis
            return None

        results = await run_in_batches(
            list(symbols), analyze, self.batch_size, self.batch_delay, label="scan_bullish"
        )
        results.sort(key=lambda a: (-a.total_score, a.symbol))
        logger.info(f"scan_bullish: {len(results)}/{len(symbols)} symbols qualified")
        return results
