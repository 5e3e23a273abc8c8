"""Exception types raised by the exporter."""

from __future__ import annotations

from typing import Optional


class ExporterError(Exception):
    """Base class for exporter errors."""


class ConfigError(ExporterError):
    """Raised when exporter configuration is missing or invalid."""


class FetchError(ExporterError):
    """Raised when the source page could not be retrieved."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {message}")


class FieldParseError(ExporterError, ValueError):
    """Raised when a table cell cannot be coerced to a number."""

    def __init__(self, text: Optional[str]) -> None:
        self.text = text
        super().__init__(f"Cannot parse {text!r} as a number")
