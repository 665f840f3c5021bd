"""Fixed-size batch execution for per-symbol scan work.

Symbols within a batch run concurrently; batches are separated by a short
delay to stay under exchange rate limits. A failing symbol is logged and
dropped, it never aborts the scan.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

from core.errors import InsufficientHistoryError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_BATCH_SIZE = 8
DEFAULT_BATCH_DELAY = 0.1


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R | None]],
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY,
    label: str = "scan",
) -> list[R]:
    """
    Run ``worker`` over ``items`` in concurrent batches.

    Args:
        items: Work items (usually symbols)
        worker: Coroutine returning a result, or None to skip the item
        batch_size: Items per concurrent batch
        delay: Seconds to sleep between batches
        label: Prefix for log messages

    Returns:
        Non-None results in input order
    """
    results: list[R] = []
    batch_size = max(batch_size, 1)

    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        outcomes = await asyncio.gather(
            *(worker(item) for item in batch), return_exceptions=True
        )

        for item, outcome in zip(batch, outcomes):
            if isinstance(outcome, InsufficientHistoryError):
                logger.debug(f"{label}: skipping {item}: {outcome}")
            elif isinstance(outcome, Exception):
                logger.warning(f"{label}: {item} failed: {outcome}")
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is not None:
                results.append(outcome)

        if delay > 0 and start + batch_size < len(items):
            await asyncio.sleep(delay)

    return results
