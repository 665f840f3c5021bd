"""Tradable universe resolution with a static fallback."""

from __future__ import annotations

import logging
from typing import Sequence

from app.clients.gateway import MarketDataGateway
from core.errors import TransientFetchError, UniverseUnavailableError
from core.models.kline import Ticker24h
from core.rules.universe import filter_tradable

logger = logging.getLogger(__name__)


def _bare_ticker(symbol: str) -> Ticker24h:
    """Ticker placeholder for a symbol whose 24h stats are unknown."""
    return Ticker24h(symbol=symbol, last_price=0.0)


class UniverseProvider:
    """Resolves which symbols a scan covers.

    When tickers cannot be fetched the exchange symbol list is tried next,
    then the configured fallback symbols.
    """

    def __init__(self, gateway: MarketDataGateway, fallback_symbols: Sequence[str]):
        self.gateway = gateway
        self.fallback_symbols = filter_tradable(fallback_symbols)

    def fallback(self, n: int | None = None) -> list[Ticker24h]:
        symbols = self.fallback_symbols if n is None else self.fallback_symbols[:n]
        return [_bare_ticker(s) for s in symbols]

    async def all_symbols(self) -> list[str]:
        try:
            return await self.gateway.get_all_usdt_pairs()
        except (UniverseUnavailableError, TransientFetchError) as e:
            logger.warning(f"Symbol list unavailable, using fallback: {e}")
            return list(self.fallback_symbols)

    async def top_volume(self, n: int) -> list[Ticker24h]:
        """Top ``n`` pairs by quote volume."""
        try:
            tickers = await self.gateway.get_top_volume_pairs(n)
            if tickers:
                return tickers
        except (UniverseUnavailableError, TransientFetchError) as e:
            logger.warning(f"Tickers unavailable: {e}")

        symbols = await self.all_symbols()
        return [_bare_ticker(s) for s in symbols[:n]]

    async def top_gainers(self, n: int) -> list[Ticker24h]:
        """Top ``n`` pairs by 24h change.

        The fallback carries no 24h change, so change filters drop it.
        """
        try:
            return await self.gateway.get_top_gainers(n)
        except (UniverseUnavailableError, TransientFetchError) as e:
            logger.warning(f"Gainers unavailable, using fallback: {e}")
            return self.fallback(n)
