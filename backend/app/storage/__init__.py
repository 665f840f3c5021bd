"""Data storage layer."""

from app.storage.kline_cache import CacheEntry, CacheKey, KlineCache

__all__ = [
    "CacheEntry",
    "CacheKey",
    "KlineCache",
]
