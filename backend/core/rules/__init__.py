"""Scanner rules (pure logic), scanner protocol and registry."""

from core.rules.protocol import Scanner
from core.rules.registry import (
    create_scanner,
    get_scanner_class,
    list_scanners,
    register_scanner,
)

__all__ = [
    "Scanner",
    "create_scanner",
    "get_scanner_class",
    "list_scanners",
    "register_scanner",
]
