"""Trend-dip scanner: oversold pullbacks inside a 4h uptrend."""

from __future__ import annotations

import asyncio
import logging

from app.services.scanners.base import BaseScanner, truncate
from core.indicators import rsi
from core.models.config import TrendDipConfig
from core.models.kline import Ticker24h, to_arrays
from core.models.scan import TrendDipResult
from core.rules.registry import register_scanner
from core.rules.trend_dip import check_uptrend, dip_level

logger = logging.getLogger(__name__)

NEUTRAL_RSI = 50.0


@register_scanner("trend_dip")
class TrendDipScanner(BaseScanner):
    """Ranks uptrending symbols by how deep their 1h RSI has dipped."""

    name = "trend_dip"
    config_class = TrendDipConfig
    config: TrendDipConfig

    async def rsi_by_timeframe(self, symbol: str) -> dict[str, float]:
        """RSI per configured timeframe; failed timeframes read 50."""
        cfg = self.config
        outcomes = await asyncio.gather(
            *(
                self.analyzer.get_candles(symbol, tf, cfg.rsi_limit)
                for tf in cfg.rsi_timeframes
            ),
            return_exceptions=True,
        )

        values: dict[str, float] = {}
        for tf, outcome in zip(cfg.rsi_timeframes, outcomes):
            if isinstance(outcome, Exception):
                logger.debug(f"{symbol} {tf}: RSI unavailable: {outcome}")
                values[tf] = NEUTRAL_RSI
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                closes = [c.close for c in outcome]
                values[tf] = round(rsi(closes, cfg.rsi_period), 2)
        return values

    async def evaluate(self, ticker: Ticker24h) -> TrendDipResult | None:
        cfg = self.config
        symbol = ticker.symbol
        candles = await self.analyzer.get_candles(symbol, cfg.trend_interval, cfg.trend_limit)
        gate = check_uptrend(symbol, to_arrays(candles).closes, cfg.trend_ema_period)
        if not gate.passed:
            return None

        rsi_values = await self.rsi_by_timeframe(symbol)
        rank_rsi = rsi_values.get(cfg.rank_timeframe, NEUTRAL_RSI)
        return TrendDipResult(
            symbol=symbol,
            price=gate.price,
            change_24h=ticker.price_change_percent,
            quote_volume=ticker.quote_volume,
            ema200=round(gate.ema, 8),
            ema200_distance_pct=round(gate.distance_pct, 2),
            rsi=rsi_values,
            rsi_1h=rank_rsi,
            dip_level=dip_level(rank_rsi, cfg),
        )

    async def _scan(
        self,
        limit: int | None = None,
        universe_size: int | None = None,
        **_: object,
    ) -> list[TrendDipResult]:
        tickers = await self.universe.top_volume(universe_size or self.config.universe_size)
        results = await self._run(tickers, self.evaluate)
        results.sort(key=lambda r: (r.rsi_1h, r.symbol))
        return truncate(results, limit)
