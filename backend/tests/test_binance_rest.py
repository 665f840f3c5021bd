"""Tests for the Binance REST gateway against a mocked transport."""

import asyncio

import httpx
import pytest

from app.clients.binance_rest import BinanceRestClient, RateLimiter
from app.clients.gateway import MarketDataGateway
from core.errors import TransientFetchError, UniverseUnavailableError

KLINE_ROW = [
    1_700_000_000_000, "100.0", "110.0", "95.0", "105.0", "1234.5",
    1_700_003_599_999, "129622.5", 42, "600.0", "63000.0", "0",
]

TICKERS = [
    {"symbol": "BTCUSDT", "lastPrice": "42000", "priceChangePercent": "2.5", "quoteVolume": "9000000000"},
    {"symbol": "PEPEUSDT", "lastPrice": "0.000001", "priceChangePercent": "25.0", "quoteVolume": "50000000"},
    {"symbol": "THINUSDT", "lastPrice": "1.0", "priceChangePercent": "40.0", "quoteVolume": "20000"},
    {"symbol": "USDCUSDT", "lastPrice": "1.0", "priceChangePercent": "0.01", "quoteVolume": "8000000000"},
    {"symbol": "BTCUPUSDT", "lastPrice": "10.0", "priceChangePercent": "8.0", "quoteVolume": "3000000"},
    {"symbol": "ETHBTC", "lastPrice": "0.05", "priceChangePercent": "1.0", "quoteVolume": "900"},
    {"symbol": "BROKENUSDT", "priceChangePercent": "1.0"},
]

EXCHANGE_INFO = {
    "symbols": [
        {"symbol": "BTCUSDT", "status": "TRADING", "quoteAsset": "USDT"},
        {"symbol": "OLDUSDT", "status": "BREAK", "quoteAsset": "USDT"},
        {"symbol": "ETHBTC", "status": "TRADING", "quoteAsset": "BTC"},
        {"symbol": "ETHDOWNUSDT", "status": "TRADING", "quoteAsset": "USDT"},
        {"symbol": "SOLUSDT", "status": "TRADING", "quoteAsset": "USDT"},
    ]
}


def make_client(handler) -> BinanceRestClient:
    return BinanceRestClient(
        base_url="https://api.test/api/v3",
        calls_per_minute=60_000,
        transport=httpx.MockTransport(handler),
    )


def route(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/klines"):
        return httpx.Response(200, json=[KLINE_ROW])
    if path.endswith("/ticker/24hr"):
        return httpx.Response(200, json=TICKERS)
    if path.endswith("/exchangeInfo"):
        return httpx.Response(200, json=EXCHANGE_INFO)
    return httpx.Response(404)


@pytest.mark.asyncio
class TestBinanceRestClient:

    async def test_implements_gateway(self):
        client = make_client(route)
        assert isinstance(client, MarketDataGateway)
        await client.close()

    async def test_get_klines(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return route(request)

        client = make_client(handler)
        candles = await client.get_klines("BTCUSDT", "1h", 5000)
        await client.close()

        assert seen == {"symbol": "BTCUSDT", "interval": "1h", "limit": "1000"}
        assert len(candles) == 1
        candle = candles[0]
        assert candle.timestamp == 1_700_000_000_000
        assert (candle.open, candle.high, candle.low, candle.close) == (100.0, 110.0, 95.0, 105.0)
        assert candle.volume == 1234.5
        assert candle.close_time == 1_700_003_599_999

    @pytest.mark.parametrize("status", [418, 429, 500, 503])
    async def test_http_errors_are_transient(self, status):
        client = make_client(lambda request: httpx.Response(status))
        with pytest.raises(TransientFetchError) as exc:
            await client.get_klines("BTCUSDT", "1h", 10)
        await client.close()
        assert exc.value.symbol == "BTCUSDT"
        assert str(status) in str(exc.value)

    async def test_network_errors_are_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(TransientFetchError):
            await client.get_klines("BTCUSDT", "1h", 10)
        await client.close()

    async def test_malformed_klines(self):
        client = make_client(lambda request: httpx.Response(200, json=[["x"]]))
        with pytest.raises(TransientFetchError):
            await client.get_klines("BTCUSDT", "1h", 10)
        await client.close()

    async def test_top_volume_pairs_filters_universe(self):
        client = make_client(route)
        tickers = await client.get_top_volume_pairs(10)
        await client.close()

        assert [t.symbol for t in tickers] == ["BTCUSDT", "PEPEUSDT", "THINUSDT"]
        assert tickers[0].last_price == 42_000.0
        assert tickers[0].price_change_percent == 2.5

    async def test_top_gainers_requires_volume(self):
        client = make_client(route)
        gainers = await client.get_top_gainers(10)
        await client.close()

        assert [t.symbol for t in gainers] == ["PEPEUSDT", "BTCUSDT"]

    async def test_all_usdt_pairs(self):
        client = make_client(route)
        assert await client.get_all_usdt_pairs() == ["BTCUSDT", "SOLUSDT"]
        await client.close()

    async def test_exchange_info_down(self):
        client = make_client(lambda request: httpx.Response(503))
        with pytest.raises(UniverseUnavailableError):
            await client.get_all_usdt_pairs()
        await client.close()

    async def test_exchange_info_empty(self):
        client = make_client(lambda request: httpx.Response(200, json={"symbols": []}))
        with pytest.raises(UniverseUnavailableError):
            await client.get_all_usdt_pairs()
        await client.close()

    async def test_non_json_body_is_transient(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>gateway</html>"))
        with pytest.raises(TransientFetchError, match="invalid JSON") as exc:
            await client.get_klines("BTCUSDT", "1h", 10)
        await client.close()
        assert exc.value.symbol == "BTCUSDT"

    async def test_unexpected_ticker_payload(self):
        client = make_client(lambda request: httpx.Response(200, json={"code": -1003}))
        with pytest.raises(TransientFetchError):
            await client.get_top_volume_pairs(10)
        await client.close()

    @pytest.mark.parametrize("payload", [[], {"symbols": "none"}, {"symbols": ["BTCUSDT", {"status": "TRADING"}]}])
    async def test_exchange_info_unexpected_shape(self, payload):
        client = make_client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(UniverseUnavailableError):
            await client.get_all_usdt_pairs()
        await client.close()

    async def test_exchange_info_not_json(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(UniverseUnavailableError):
            await client.get_all_usdt_pairs()
        await client.close()


@pytest.mark.asyncio
class TestRateLimiter:

    async def test_spaces_calls(self):
        limiter = RateLimiter(calls_per_minute=600)
        loop = asyncio.get_running_loop()

        start = loop.time()
        for _ in range(3):
            await limiter.acquire()

        # 0.1s interval, first call is free
        assert loop.time() - start >= 0.19
