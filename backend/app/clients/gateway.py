"""Market data gateway contract.

Scanners and the analyzer depend on this protocol, never on a concrete
exchange client, so tests can swap in an in-memory gateway.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.models.kline import Candle, Ticker24h


@runtime_checkable
class MarketDataGateway(Protocol):
    """Source of candles and 24h tickers.

    Implementations raise ``TransientFetchError`` for network, HTTP and
    rate-limit failures and ``UniverseUnavailableError`` when the symbol
    list cannot be produced.
    """

    async def get_klines(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """Latest ``limit`` candles, ascending by open time."""
        ...

    async def get_top_volume_pairs(self, n: int) -> list[Ticker24h]:
        """Top ``n`` tradable USDT pairs by 24h quote volume."""
        ...

    async def get_all_usdt_pairs(self) -> list[str]:
        """Every trading USDT pair on the exchange."""
        ...

    async def get_top_gainers(self, n: int) -> list[Ticker24h]:
        """Top ``n`` tradable USDT pairs by 24h change."""
        ...
