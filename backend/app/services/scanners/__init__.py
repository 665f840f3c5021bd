"""Registered market scanners.

Importing this package registers every scanner by name.
"""

from app.services.scanners.base import BaseScanner
from app.services.scanners.high_potential import HighPotentialScanner
from app.services.scanners.momentum import MomentumScanner
from app.services.scanners.support_resistance import SupportResistanceScanner
from app.services.scanners.trend_dip import TrendDipScanner
from app.services.scanners.volume_spike import VolumeSpikeScanner
from core.rules.registry import create_scanner, list_scanners

__all__ = [
    "BaseScanner",
    "HighPotentialScanner",
    "MomentumScanner",
    "SupportResistanceScanner",
    "TrendDipScanner",
    "VolumeSpikeScanner",
    "build_scanners",
]


def build_scanners(analyzer, universe, batch_size: int = 8, batch_delay: float = 0.1):
    """Instantiate every registered scanner with shared dependencies."""
    return {
        name: create_scanner(
            name,
            analyzer=analyzer,
            universe=universe,
            batch_size=batch_size,
            batch_delay=batch_delay,
        )
        for name in list_scanners()
    }
