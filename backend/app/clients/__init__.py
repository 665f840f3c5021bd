"""Exchange clients."""

from app.clients.binance_rest import BinanceRestClient, RateLimiter
from app.clients.gateway import MarketDataGateway

__all__ = [
    "BinanceRestClient",
    "MarketDataGateway",
    "RateLimiter",
]
