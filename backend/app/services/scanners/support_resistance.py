"""Support/resistance scanner in bounce or breakout mode."""

from __future__ import annotations

from app.services.scanners.base import BaseScanner, truncate
from core.errors import InsufficientHistoryError
from core.indicators import rsi
from core.models.config import SupportResistanceConfig
from core.models.kline import Ticker24h, to_arrays
from core.models.scan import SupportResistanceResult
from core.rules.registry import register_scanner
from core.rules.support_resistance import (
    BOUNCE,
    BREAKOUT,
    candles_for_lookback,
    classify_bounce,
    classify_breakout,
    rank_bounces,
    rank_breakouts,
    tolerance_for,
)


@register_scanner("support_resistance")
class SupportResistanceScanner(BaseScanner):
    """Finds symbols sitting on a period extreme or breaking out of one."""

    name = "support_resistance"
    config_class = SupportResistanceConfig
    config: SupportResistanceConfig

    async def evaluate(
        self,
        ticker: Ticker24h,
        mode: str,
        interval: str,
        count: int,
    ) -> SupportResistanceResult | None:
        cfg = self.config
        candles = await self.analyzer.get_candles(ticker.symbol, interval, count)
        if len(candles) < cfg.min_candles:
            raise InsufficientHistoryError(ticker.symbol, cfg.min_candles, len(candles))

        data = to_arrays(candles)
        price = float(data.closes[-1])
        rsi_value = rsi(data.closes)

        if mode == BREAKOUT:
            return classify_breakout(ticker.symbol, price, data, rsi_value, cfg)
        return classify_bounce(
            ticker.symbol, price, data, rsi_value, tolerance_for(interval, cfg), cfg
        )

    async def _scan(
        self,
        mode: str = BOUNCE,
        days: int | None = None,
        limit: int | None = None,
        universe_size: int | None = None,
        **_: object,
    ) -> list[SupportResistanceResult]:
        cfg = self.config
        mode = BREAKOUT if mode == BREAKOUT else BOUNCE
        interval, count = candles_for_lookback(days or cfg.default_days, cfg)
        tickers = await self.universe.top_volume(universe_size or cfg.universe_size)

        async def evaluate(ticker: Ticker24h) -> SupportResistanceResult | None:
            return await self.evaluate(ticker, mode, interval, count)

        results = await self._run(tickers, evaluate)
        ranked = rank_breakouts(results) if mode == BREAKOUT else rank_bounces(results)
        return truncate(ranked, limit)
