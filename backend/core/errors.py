"""Scanner error taxonomy.

- TransientFetchError: network/rate-limit failure fetching candles or tickers.
  SymbolAnalyzer answers it with degraded-mode synthetic data, never a retry.
- InsufficientHistoryError: fewer candles than a rule needs. The calling
  scanner skips the symbol and keeps going.
- UniverseUnavailableError: the tradable symbol list cannot be fetched.
  Scanners substitute the static fallback symbol list.
"""

from __future__ import annotations


class ScannerError(Exception):
    """Base class for all scanner errors."""


class TransientFetchError(ScannerError):
    """Upstream market data could not be fetched."""

    def __init__(self, message: str, symbol: str | None = None):
        super().__init__(message)
        self.symbol = symbol


class InsufficientHistoryError(ScannerError):
    """Not enough candles to evaluate a rule."""

    def __init__(self, symbol: str, required: int, available: int):
        super().__init__(
            f"{symbol}: need {required} candles, got {available}"
        )
        self.symbol = symbol
        self.required = required
        self.available = available


class UniverseUnavailableError(ScannerError):
    """The tradable symbol universe could not be listed."""
