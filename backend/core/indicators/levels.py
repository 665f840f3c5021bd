"""Support and resistance level detection.

Three detectors are unioned:
1. Swing extrema - a bar whose low (high) is strictly below (above) its
   neighbours on each side.
2. Liquidity zones - sorted lows/highs grouped while adjacent values differ
   by less than a percentage threshold; each group of two or more emits its
   mean.
3. Soft zones - min, max and midpoint over a trailing window.

The candidates are deduplicated, split around the current price and capped
per side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class SupportResistanceLevels:
    """Support levels below price (nearest first) and resistance above."""

    support: list[float]
    resistance: list[float]

    @property
    def nearest_support(self) -> float | None:
        return self.support[0] if self.support else None

    @property
    def nearest_resistance(self) -> float | None:
        return self.resistance[0] if self.resistance else None


def _is_pivot(values: np.ndarray, i: int, span: int, lower: bool) -> bool:
    if i - span < 0 or i + span >= len(values):
        return False
    neighbours = np.concatenate([values[i - span:i], values[i + 1:i + span + 1]])
    if lower:
        return bool(np.all(values[i] < neighbours))
    return bool(np.all(values[i] > neighbours))


def find_pivot_lows(
    lows: Sequence[float],
    span: int = 2,
    start: int = 0,
    end: int | None = None,
) -> list[int]:
    """
    Indices of pivot lows within ``[start, end)``.

    A pivot low is strictly lower than ``span`` neighbours on each side.
    Neighbours outside the window are still consulted.
    """
    arr = np.asarray(lows, dtype=np.float64)
    end = len(arr) if end is None else min(end, len(arr))
    return [i for i in range(max(start, 0), end) if _is_pivot(arr, i, span, lower=True)]


def find_pivot_highs(
    highs: Sequence[float],
    span: int = 2,
    start: int = 0,
    end: int | None = None,
) -> list[int]:
    """Indices of pivot highs within ``[start, end)``."""
    arr = np.asarray(highs, dtype=np.float64)
    end = len(arr) if end is None else min(end, len(arr))
    return [i for i in range(max(start, 0), end) if _is_pivot(arr, i, span, lower=False)]


def liquidity_zones(
    values: Sequence[float],
    threshold_pct: float = 0.5,
    min_cluster: int = 2,
) -> list[float]:
    """Cluster sorted prices; each cluster of ``min_cluster`` or more emits its mean."""
    ordered = sorted(float(v) for v in values if v > 0)
    zones: list[float] = []
    cluster: list[float] = []

    for value in ordered:
        if cluster and (value - cluster[-1]) / cluster[-1] * 100 >= threshold_pct:
            if len(cluster) >= min_cluster:
                zones.append(float(np.mean(cluster)))
            cluster = []
        cluster.append(value)

    if len(cluster) >= min_cluster:
        zones.append(float(np.mean(cluster)))
    return zones


def soft_zones(
    highs: Sequence[float],
    lows: Sequence[float],
    window: int = 20,
) -> list[float]:
    """Trailing-window low, high and midpoint."""
    if len(highs) == 0 or len(lows) == 0:
        return []
    low = float(np.min(np.asarray(lows, dtype=np.float64)[-window:]))
    high = float(np.max(np.asarray(highs, dtype=np.float64)[-window:]))
    return [low, high, (low + high) / 2]


def _dedupe(levels: list[float], tolerance_pct: float) -> list[float]:
    merged: list[float] = []
    for level in sorted(levels):
        if merged and (level - merged[-1]) / merged[-1] * 100 < tolerance_pct:
            continue
        merged.append(level)
    return merged


def find_levels(
    highs: Sequence[float],
    lows: Sequence[float],
    price: float,
    span: int = 2,
    zone_threshold_pct: float = 0.5,
    soft_window: int = 20,
    dedupe_pct: float = 0.1,
    max_levels: int = 5,
) -> SupportResistanceLevels:
    """
    Detect support and resistance levels around ``price``.

    Args:
        highs: High prices (ascending by time)
        lows: Low prices
        price: Reference price used to split the levels
        span: Neighbours on each side for swing extrema
        zone_threshold_pct: Max gap between clustered prices (percent)
        soft_window: Trailing window for soft zones
        dedupe_pct: Levels closer than this (percent) are merged
        max_levels: Cap per side

    Returns:
        SupportResistanceLevels with support descending and resistance
        ascending, i.e. nearest level first on both sides
    """
    h = np.asarray(highs, dtype=np.float64)
    l = np.asarray(lows, dtype=np.float64)
    if len(h) == 0 or len(l) == 0 or price <= 0:
        return SupportResistanceLevels([], [])

    candidates: list[float] = []
    candidates += [float(l[i]) for i in find_pivot_lows(l, span)]
    candidates += [float(h[i]) for i in find_pivot_highs(h, span)]
    candidates += liquidity_zones(l, zone_threshold_pct)
    candidates += liquidity_zones(h, zone_threshold_pct)
    candidates += soft_zones(h, l, soft_window)

    levels = _dedupe([c for c in candidates if c > 0], dedupe_pct)
    support = sorted((lv for lv in levels if lv <= price), reverse=True)[:max_levels]
    resistance = sorted(lv for lv in levels if lv > price)[:max_levels]
    return SupportResistanceLevels(support, resistance)
