"""Business services."""

from app.services.analyzer import SymbolAnalyzer, resolve_interval
from app.services.batching import run_in_batches
from app.services.confluence import ConfluenceAggregator
from app.services.scanners import build_scanners
from app.services.universe import UniverseProvider

__all__ = [
    "ConfluenceAggregator",
    "SymbolAnalyzer",
    "UniverseProvider",
    "build_scanners",
    "resolve_interval",
    "run_in_batches",
]
