"""Tradable-universe filter.

Stablecoins, fiat pairs and leveraged tokens are never scanned.
"""

from __future__ import annotations

import re
from typing import Iterable

QUOTE_ASSET = "USDT"

EXCLUDED_BASE_ASSETS = frozenset(
    {"USDT", "USDC", "BUSD", "DAI", "TUSD", "FDUSD", "USDP", "EUR", "GBP"}
)

# BTCUP, ETHDOWN, XRPBULL, ADABEAR, BTC3L, ETH5S
_LEVERAGED_SUFFIX = re.compile(r"(UP|DOWN|BULL|BEAR|[1-5]L|[1-5]S)$")


def base_asset(symbol: str) -> str:
    """Strip the USDT quote from a symbol."""
    symbol = symbol.upper()
    if symbol.endswith(QUOTE_ASSET):
        return symbol[: -len(QUOTE_ASSET)]
    return symbol


def is_tradable(symbol: str) -> bool:
    """True for USDT pairs whose base asset is neither stable nor leveraged."""
    symbol = symbol.upper()
    if not symbol.endswith(QUOTE_ASSET):
        return False
    base = base_asset(symbol)
    if not base or base in EXCLUDED_BASE_ASSETS:
        return False
    return _LEVERAGED_SUFFIX.search(base) is None


def filter_tradable(symbols: Iterable[str]) -> list[str]:
    """Keep tradable symbols, preserving order and dropping duplicates."""
    seen: set[str] = set()
    result: list[str] = []
    for symbol in symbols:
        if symbol in seen or not is_tradable(symbol):
            continue
        seen.add(symbol)
        result.append(symbol)
    return result
