"""Volume-spike rules."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.models.config import VolumeSpikeConfig
from core.models.kline import Candle


def volume_multiple(volumes: Sequence[float], period: int = 20) -> float:
    """
    Latest volume relative to the average of the ``period`` bars before it.

    Returns:
        The multiple, or 0.0 when there is no prior volume to compare with
    """
    arr = np.asarray(volumes, dtype=np.float64)
    if len(arr) < 2:
        return 0.0
    prior = arr[-period - 1:-1]
    average = float(np.mean(prior))
    if average <= 0:
        return 0.0
    return float(arr[-1] / average)


def spike_level(multiple: float, config: VolumeSpikeConfig | None = None) -> str:
    config = config or VolumeSpikeConfig()
    if multiple >= config.extreme_multiple:
        return "extreme"
    if multiple >= config.high_multiple:
        return "high"
    if multiple >= config.moderate_multiple:
        return "moderate"
    return "elevated"


def is_spike(
    candles: Sequence[Candle],
    config: VolumeSpikeConfig | None = None,
) -> tuple[bool, float]:
    """Return (qualifies, multiple) for the latest candle.

    A spike needs the minimum multiple on a bullish candle.
    """
    config = config or VolumeSpikeConfig()
    if len(candles) < 2:
        return False, 0.0
    multiple = volume_multiple([c.volume for c in candles], config.average_period)
    last = candles[-1]
    return multiple >= config.min_multiple and last.is_bullish, multiple
