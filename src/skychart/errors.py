"""Exceptions raised by skychart."""


class SkyChartError(Exception):
    """Base exception for skychart errors."""


class UnknownBodyError(SkyChartError):
    """Raised when the ephemeris provider is asked for an unsupported body."""

    def __init__(self, body: str, available: list[str]):
        self.body = body
        self.available = available
        super().__init__(f"Unknown body: '{body}' (available: {', '.join(sorted(available))})")


class CatalogError(SkyChartError):
    """Raised when a catalog file cannot be read at all."""
