"""Scanner registry for discovering and instantiating scanners.

Usage:
    @register_scanner("my_scanner")
    class MyScanner:
        ...

    scanner = create_scanner("my_scanner", analyzer=analyzer)
    names = list_scanners()
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Global registry: scanner_name -> scanner_class
_REGISTRY: dict[str, type] = {}


def register_scanner(name: str):
    """Decorator to register a scanner class under a given name.

    Raises:
        ValueError: If a scanner with the same name is already registered.
    """

    def decorator(cls):
        if name in _REGISTRY:
            raise ValueError(
                f"Scanner '{name}' is already registered by {_REGISTRY[name].__name__}"
            )
        _REGISTRY[name] = cls
        logger.debug("Registered scanner: %s -> %s", name, cls.__name__)
        return cls

    return decorator


def get_scanner_class(name: str) -> type:
    """Get the scanner class by name (without instantiating).

    Raises:
        KeyError: If no scanner is registered under the given name.
    """
    cls = _REGISTRY.get(name)
    if cls is None:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none)"
        raise KeyError(f"Unknown scanner '{name}'. Available: {available}")
    return cls


def create_scanner(name: str, **kwargs: Any):
    """Create a scanner instance by name.

    Args:
        name: Registered scanner name.
        **kwargs: Arguments passed to the scanner constructor.
    """
    return get_scanner_class(name)(**kwargs)


def list_scanners() -> list[str]:
    """Return a sorted list of registered scanner names."""
    return sorted(_REGISTRY.keys())
