"""Candle (OHLCV) and 24h ticker data models."""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class Candle(BaseModel):
    """OHLCV candle. Series are ordered ascending by timestamp."""

    model_config = ConfigDict(frozen=True)

    timestamp: int  # open time, epoch ms
    open: float
    high: float
    low: float
    close: float
    volume: float
    close_time: int | None = None

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) candle."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """Check if this is a bearish (red) candle."""
        return self.close < self.open

    @property
    def dollar_volume(self) -> float:
        """Approximate quote volume of the candle."""
        return self.close * self.volume

    @classmethod
    def from_binance(cls, item: Sequence) -> "Candle":
        """Build a candle from a raw Binance kline array."""
        return cls(
            timestamp=int(item[0]),
            open=float(item[1]),
            high=float(item[2]),
            low=float(item[3]),
            close=float(item[4]),
            volume=float(item[5]),
            close_time=int(item[6]) if len(item) > 6 else None,
        )


@dataclass(frozen=True)
class OHLCV:
    """Column view of a candle series as float64 arrays."""

    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray


def to_arrays(candles: Sequence[Candle]) -> OHLCV:
    """Split a candle series into numpy columns."""
    return OHLCV(
        opens=np.array([c.open for c in candles], dtype=np.float64),
        highs=np.array([c.high for c in candles], dtype=np.float64),
        lows=np.array([c.low for c in candles], dtype=np.float64),
        closes=np.array([c.close for c in candles], dtype=np.float64),
        volumes=np.array([c.volume for c in candles], dtype=np.float64),
    )


class Ticker24h(BaseModel):
    """Binance 24h rolling ticker, validated at the gateway boundary."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    symbol: str
    last_price: float = Field(alias="lastPrice")
    price_change_percent: float = Field(default=0.0, alias="priceChangePercent")
    high_price: float = Field(default=0.0, alias="highPrice")
    low_price: float = Field(default=0.0, alias="lowPrice")
    volume: float = 0.0
    quote_volume: float = Field(default=0.0, alias="quoteVolume")

    @property
    def base_asset(self) -> str:
        """Base asset for a USDT-quoted symbol."""
        if self.symbol.endswith("USDT"):
            return self.symbol[: -len("USDT")]
        return self.symbol
