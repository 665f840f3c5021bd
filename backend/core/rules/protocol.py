"""Scanner protocol defining the interface all scanners must implement."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.models.scan import ScanResult


@runtime_checkable
class Scanner(Protocol):
    """Protocol that all market scanners must implement.

    A scanner applies one rule set over the tradable universe and returns
    its findings ranked best-first. Per-symbol failures never escape
    ``scan``; a scan that cannot even start returns an empty list.
    """

    @property
    def name(self) -> str:
        """Unique scanner identifier (e.g., 'volume_spike')."""
        ...

    async def scan(self, **params: Any) -> list[ScanResult]:
        """Run the scan.

        Args:
            **params: Scanner-specific overrides (limit, mode, days, ...).

        Returns:
            Ranked scan results.
        """
        ...
