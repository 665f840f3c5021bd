"""Binance spot REST API client for candles and 24h tickers."""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from core.errors import TransientFetchError, UniverseUnavailableError
from core.models.kline import Candle, Ticker24h
from core.rules.universe import filter_tradable, is_tradable

logger = logging.getLogger(__name__)

# Binance caps /klines at 1000 rows on spot
MAX_KLINES = 1000

# Gainers below this 24h quote volume are too thin to trade
MIN_GAINER_QUOTE_VOLUME = 1_000_000


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 1200):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait_time = self.last_call + self.interval - loop.time()
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = loop.time()


class BinanceRestClient:
    """Binance spot REST API client implementing MarketDataGateway."""

    BASE_URL = "https://api.binance.com/api/v3"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        calls_per_minute: int = 1200,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.rate_limiter = RateLimiter(calls_per_minute)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        symbol: str | None = None,
    ) -> Any:
        """Make a GET request with rate limiting.

        Raises:
            TransientFetchError: on any transport or HTTP status failure, or a
                body that is not JSON
        """
        await self.rate_limiter.acquire()
        client = await self._get_client()
        try:
            response = await client.get(endpoint, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise TransientFetchError(
                f"{endpoint} returned {e.response.status_code}", symbol=symbol
            ) from e
        except httpx.HTTPError as e:
            raise TransientFetchError(f"{endpoint} failed: {e}", symbol=symbol) from e
        except ValueError as e:
            raise TransientFetchError(f"{endpoint} returned invalid JSON", symbol=symbol) from e

    async def get_klines(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """
        Fetch the latest candles from Binance.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            interval: Candle interval (e.g., "1h", "4h")
            limit: Number of candles (capped at 1000)

        Returns:
            Candles ascending by open time
        """
        params = {
            "symbol": symbol,
            "interval": interval,
            "limit": max(1, min(limit, MAX_KLINES)),
        }
        data = await self._request("/klines", params, symbol=symbol)
        try:
            return [Candle.from_binance(item) for item in data]
        except (IndexError, TypeError, ValueError) as e:
            raise TransientFetchError(f"Malformed klines for {symbol}: {e}", symbol=symbol) from e

    async def get_tickers(self) -> list[Ticker24h]:
        """Fetch and validate every 24h ticker.

        Malformed rows are skipped.
        """
        data = await self._request("/ticker/24hr")
        if not isinstance(data, list):
            raise TransientFetchError(f"Unexpected /ticker/24hr payload: {type(data).__name__}")

        tickers = []
        for item in data:
            try:
                tickers.append(Ticker24h.model_validate(item))
            except ValidationError:
                logger.debug(f"Skipping malformed ticker: {item!r:.80}")
        return tickers

    async def get_top_volume_pairs(self, n: int) -> list[Ticker24h]:
        """Top ``n`` tradable USDT pairs by 24h quote volume."""
        tickers = [t for t in await self.get_tickers() if is_tradable(t.symbol)]
        tickers.sort(key=lambda t: t.quote_volume, reverse=True)
        return tickers[:n]

    async def get_top_gainers(self, n: int) -> list[Ticker24h]:
        """Top ``n`` tradable USDT pairs by 24h change with at least 1M quote volume."""
        tickers = [
            t for t in await self.get_tickers()
            if is_tradable(t.symbol) and t.quote_volume >= MIN_GAINER_QUOTE_VOLUME
        ]
        tickers.sort(key=lambda t: t.price_change_percent, reverse=True)
        return tickers[:n]

    async def get_all_usdt_pairs(self) -> list[str]:
        """
        List every trading USDT pair.

        Raises:
            UniverseUnavailableError: when exchange info cannot be fetched
                or has an unexpected shape
        """
        try:
            data = await self._request("/exchangeInfo")
        except TransientFetchError as e:
            raise UniverseUnavailableError(str(e)) from e

        if not isinstance(data, dict) or not isinstance(data.get("symbols"), list):
            raise UniverseUnavailableError("exchangeInfo returned an unexpected payload")

        symbols = [
            s["symbol"]
            for s in data["symbols"]
            if isinstance(s, dict) and "symbol" in s
            and s.get("status") == "TRADING" and s.get("quoteAsset") == "USDT"
        ]
        if not symbols:
            raise UniverseUnavailableError("exchangeInfo returned no USDT pairs")
        return filter_tradable(symbols)
