"""Momentum scanner: top gainers with real volume behind the move."""

from __future__ import annotations

from app.services.scanners.base import BaseScanner, truncate
from core.errors import InsufficientHistoryError
from core.indicators import rsi
from core.models.config import MomentumConfig
from core.models.kline import Ticker24h, to_arrays
from core.models.scan import MomentumResult
from core.rules.momentum import (
    classify_momentum,
    find_stop_loss,
    rank_momentum,
    risk_percent,
    volume_factor,
)
from core.rules.registry import register_scanner


@register_scanner("momentum")
class MomentumScanner(BaseScanner):
    """Classifies gainers into RIDE / MOMENTUM / HEATED / CAUTION / TOPPED."""

    name = "momentum"
    config_class = MomentumConfig
    config: MomentumConfig

    async def evaluate(self, ticker: Ticker24h) -> MomentumResult | None:
        cfg = self.config
        symbol = ticker.symbol

        daily = await self.analyzer.get_candles(symbol, "1d", cfg.volume_days + 1)
        factor = volume_factor(ticker.quote_volume, daily, cfg.volume_days)
        if factor < cfg.min_volume_factor:
            return None

        hourly = await self.analyzer.get_candles(symbol, cfg.stop_interval, cfg.stop_limit)
        if len(hourly) < cfg.pivot_span * 2 + 1:
            raise InsufficientHistoryError(symbol, cfg.pivot_span * 2 + 1, len(hourly))

        data = to_arrays(hourly)
        price = ticker.last_price if ticker.last_price > 0 else float(data.closes[-1])
        rsi_value = rsi(data.closes)
        stop = find_stop_loss(
            data.lows, price, cfg.pivot_window, cfg.pivot_fallback_window, cfg.pivot_span
        )
        risk = risk_percent(price, stop)

        return MomentumResult(
            symbol=symbol,
            price=price,
            change_24h=ticker.price_change_percent,
            volume_factor=round(factor, 2),
            rsi=round(rsi_value, 2),
            stop_loss=stop,
            risk_pct=round(risk, 2) if risk is not None else None,
            signal=classify_momentum(ticker.price_change_percent, factor, rsi_value, risk, cfg),
        )

    async def _scan(
        self,
        limit: int | None = None,
        universe_size: int | None = None,
        **_: object,
    ) -> list[MomentumResult]:
        cfg = self.config
        gainers = await self.universe.top_gainers(universe_size or cfg.universe_size)
        movers = [t for t in gainers if t.price_change_percent >= cfg.min_change_24h]
        results = await self._run(movers, self.evaluate)
        return truncate(rank_momentum(results), limit)
