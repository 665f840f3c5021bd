"""Volume-spike scanner: unusual buying volume on the latest candle."""

from __future__ import annotations

from app.services.scanners.base import BaseScanner, truncate
from core.errors import InsufficientHistoryError
from core.models.config import VolumeSpikeConfig
from core.models.kline import Ticker24h
from core.models.scan import VolumeSpikeResult
from core.rules.registry import register_scanner
from core.rules.volume_spike import is_spike, spike_level


@register_scanner("volume_spike")
class VolumeSpikeScanner(BaseScanner):
    """Reports bullish candles trading well above their average volume."""

    name = "volume_spike"
    config_class = VolumeSpikeConfig
    config: VolumeSpikeConfig

    async def evaluate(self, ticker: Ticker24h) -> VolumeSpikeResult | None:
        cfg = self.config
        candles = await self.analyzer.get_candles(ticker.symbol, cfg.interval, cfg.limit)
        if len(candles) < cfg.average_period + 1:
            raise InsufficientHistoryError(ticker.symbol, cfg.average_period + 1, len(candles))

        qualifies, multiple = is_spike(candles, cfg)
        if not qualifies:
            return None

        last = candles[-1]
        change = (last.close - last.open) / last.open * 100 if last.open else 0.0
        return VolumeSpikeResult(
            symbol=ticker.symbol,
            price=last.close,
            volume_multiple=round(multiple, 2),
            candle_change_pct=round(change, 2),
            change_24h=ticker.price_change_percent,
            quote_volume=ticker.quote_volume,
            spike_level=spike_level(multiple, cfg),
        )

    def fallback_results(self, tickers: list[Ticker24h]) -> list[VolumeSpikeResult]:
        """Placeholder entries so a quiet market still returns something."""
        by_symbol = {t.symbol: t for t in tickers}
        results = []
        for placeholder in self.universe.fallback(self.config.fallback_count):
            ticker = by_symbol.get(placeholder.symbol, placeholder)
            results.append(
                VolumeSpikeResult(
                    symbol=ticker.symbol,
                    price=ticker.last_price,
                    volume_multiple=0.0,
                    change_24h=ticker.price_change_percent,
                    quote_volume=ticker.quote_volume,
                    spike_level="elevated",
                    fallback=True,
                )
            )
        return results

    async def _scan(
        self,
        limit: int | None = None,
        universe_size: int | None = None,
        **_: object,
    ) -> list[VolumeSpikeResult]:
        tickers = await self.universe.top_volume(universe_size or self.config.universe_size)
        results = await self._run(tickers, self.evaluate)
        if not results:
            return self.fallback_results(tickers)

        results.sort(key=lambda r: (-r.volume_multiple, r.symbol))
        return truncate(results, limit)
