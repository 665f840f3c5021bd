"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Binance spot API
    binance_base_url: str = "https://api.binance.com/api/v3"
    request_timeout: float = 10.0
    calls_per_minute: int = 1200

    # Kline cache
    kline_cache_ttl: float = 60.0
    kline_cache_max_size: int = 500

    # Scan batching (5-10 symbols, 50-200 ms between batches)
    scan_batch_size: int = 8
    scan_batch_delay: float = 0.1

    # Universe
    universe_size: int = 50
    fallback_symbols: list[str] = [
        "BTCUSDT", "ETHUSDT", "BNBUSDT", "SOLUSDT", "XRPUSDT",
        "ADAUSDT", "DOGEUSDT", "AVAXUSDT", "DOTUSDT", "LINKUSDT",
    ]

    # Degraded-mode synthetic data
    analyzer_seed: int = 0

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
