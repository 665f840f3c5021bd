"""Shared fixtures: in-memory gateway, manual clocks and candle builders."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

import pytest

from app.services.analyzer import SymbolAnalyzer
from app.services.universe import UniverseProvider
from app.storage.kline_cache import KlineCache
from core.errors import TransientFetchError, UniverseUnavailableError
from core.models.kline import Candle, Ticker24h

HOUR_MS = 3_600_000
START_MS = 1_700_000_000_000


def make_candles(
    closes: Sequence[float],
    volumes: Sequence[float] | None = None,
    opens: Sequence[float] | None = None,
    spread: float = 0.005,
    step_ms: int = HOUR_MS,
    start_ms: int = START_MS,
) -> list[Candle]:
    """Build candles around a close series.

    Opens default to the previous close, highs/lows sit ``spread`` beyond
    the candle body.
    """
    candles = []
    for i, close in enumerate(closes):
        open_ = opens[i] if opens is not None else (closes[i - 1] if i else close)
        volume = volumes[i] if volumes is not None else 1_000.0
        candles.append(
            Candle(
                timestamp=start_ms + i * step_ms,
                open=open_,
                high=max(open_, close) * (1 + spread),
                low=min(open_, close) * (1 - spread),
                close=close,
                volume=volume,
            )
        )
    return candles


def make_ticker(
    symbol: str,
    price: float = 100.0,
    change: float = 0.0,
    quote_volume: float = 10_000_000.0,
) -> Ticker24h:
    return Ticker24h.model_validate(
        {
            "symbol": symbol,
            "lastPrice": str(price),
            "priceChangePercent": str(change),
            "quoteVolume": str(quote_volume),
        }
    )


class FakeGateway:
    """In-memory MarketDataGateway.

    Candles are looked up by (symbol, interval), then by symbol alone.
    """

    def __init__(
        self,
        klines: dict | None = None,
        tickers: list[Ticker24h] | None = None,
        failing: set[str] | None = None,
        universe_down: bool = False,
    ):
        self.klines = klines or {}
        self.tickers = tickers or []
        self.failing = failing or set()
        self.universe_down = universe_down
        self.kline_calls: list[tuple[str, str, int]] = []

    async def get_klines(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        self.kline_calls.append((symbol, interval, limit))
        if symbol in self.failing:
            raise TransientFetchError("connection reset", symbol=symbol)
        series = self.klines.get((symbol, interval), self.klines.get(symbol, []))
        return list(series[-limit:])

    async def get_top_volume_pairs(self, n: int) -> list[Ticker24h]:
        if self.universe_down:
            raise TransientFetchError("tickers unavailable")
        return sorted(self.tickers, key=lambda t: t.quote_volume, reverse=True)[:n]

    async def get_all_usdt_pairs(self) -> list[str]:
        if self.universe_down:
            raise UniverseUnavailableError("exchangeInfo unavailable")
        return [t.symbol for t in self.tickers]

    async def get_top_gainers(self, n: int) -> list[Ticker24h]:
        if self.universe_down:
            raise TransientFetchError("tickers unavailable")
        return sorted(self.tickers, key=lambda t: t.price_change_percent, reverse=True)[:n]


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


FIXED_NOW = datetime(2024, 1, 15, 12, 30, tzinfo=timezone.utc)


def fixed_wall_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> KlineCache:
    return KlineCache(ttl=60, max_size=500, clock=clock)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def analyzer(gateway: FakeGateway, cache: KlineCache) -> SymbolAnalyzer:
    return SymbolAnalyzer(gateway, cache, clock=fixed_wall_clock, batch_delay=0)


@pytest.fixture
def universe(gateway: FakeGateway) -> UniverseProvider:
    return UniverseProvider(gateway, ["BTCUSDT", "ETHUSDT", "SOLUSDT", "BNBUSDT"])
