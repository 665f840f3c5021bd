"""High-potential scanner: weighted bullish checklist plus upside odds."""

from __future__ import annotations

from app.services.analyzer import resolve_interval
from app.services.scanners.base import BaseScanner, truncate
from core.errors import InsufficientHistoryError
from core.indicators import find_levels
from core.models.config import HighPotentialConfig
from core.models.kline import Ticker24h, to_arrays
from core.models.scan import HighPotentialResult
from core.rules.high_potential import (
    evaluate_upside,
    potential_badges,
    score_potential,
    to_assessment,
)
from core.rules.registry import register_scanner


@register_scanner("high_potential")
class HighPotentialScanner(BaseScanner):
    """Reports symbols that pass the weighted checklist."""

    name = "high_potential"
    config_class = HighPotentialConfig
    config: HighPotentialConfig

    async def evaluate(self, ticker: Ticker24h, interval: str) -> HighPotentialResult | None:
        cfg = self.config
        candles = await self.analyzer.get_candles(ticker.symbol, interval, cfg.limit)
        if len(candles) < cfg.min_candles:
            raise InsufficientHistoryError(ticker.symbol, cfg.min_candles, len(candles))

        data = to_arrays(candles)
        potential = score_potential(data, cfg)
        if not potential.passes:
            return None

        price = float(data.closes[-1])
        levels = find_levels(data.highs, data.lows, price)
        upside = evaluate_upside(data, levels.nearest_resistance, cfg)

        return HighPotentialResult(
            symbol=ticker.symbol,
            price=price,
            score=potential.score,
            passes=potential.passes,
            checklist=potential.checklist,
            likely_10_percent_upside=to_assessment(upside),
            rsi=round(potential.rsi, 2),
            volume_ratio=round(potential.volume_ratio, 2),
            atr_pct=round(potential.atr_pct, 2),
            nearest_resistance=levels.nearest_resistance,
            badges=potential_badges(potential, upside),
        )

    async def _scan(
        self,
        timeframe: str | None = None,
        limit: int | None = None,
        universe_size: int | None = None,
        **_: object,
    ) -> list[HighPotentialResult]:
        cfg = self.config
        interval = resolve_interval(timeframe) if timeframe else cfg.interval
        tickers = await self.universe.top_volume(universe_size or cfg.universe_size)

        async def evaluate(ticker: Ticker24h) -> HighPotentialResult | None:
            return await self.evaluate(ticker, interval)

        results = await self._run(tickers, evaluate)
        results.sort(
            key=lambda r: (-r.score, not r.likely_10_percent_upside.likely, r.symbol)
        )
        return truncate(results, limit)
