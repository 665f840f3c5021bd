"""Scanner application: market data access, caching, scanners and CLI."""
