"""Shared scanner plumbing: dependencies, batching and failure policy."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from pydantic import BaseModel

from app.services.analyzer import SymbolAnalyzer
from app.services.batching import run_in_batches
from app.services.universe import UniverseProvider
from core.errors import ScannerError
from core.models.scan import ScanResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BaseScanner:
    """Base class for registered scanners.

    Subclasses set ``name`` and ``config_class`` and implement ``_scan``.
    """

    name: str = ""
    config_class: type[BaseModel] = BaseModel

    def __init__(
        self,
        analyzer: SymbolAnalyzer,
        universe: UniverseProvider,
        config: BaseModel | None = None,
        batch_size: int = 8,
        batch_delay: float = 0.1,
    ):
        self.analyzer = analyzer
        self.universe = universe
        self.config = config or self.config_class()
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def scan(self, **params: Any) -> list[ScanResult]:
        """Run the scan; a scan that cannot start yields an empty list."""
        try:
            results = await self._scan(**params)
        except ScannerError as e:
            logger.error(f"{self.name}: scan aborted: {e}")
            return []
        except Exception as e:
            logger.exception(f"{self.name}: scan failed: {e}")
            return []
        logger.info(f"{self.name}: {len(results)} results")
        return results

    async def _scan(self, **params: Any) -> list[ScanResult]:
        raise NotImplementedError

    async def _run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R | None]],
    ) -> list[R]:
        return await run_in_batches(
            items, worker, self.batch_size, self.batch_delay, label=self.name
        )


def truncate(results: list[R], limit: int | None) -> list[R]:
    return results[:limit] if limit else results
