"""Error taxonomy for the asset directory layer."""

from __future__ import annotations

from typing import Optional


class AssetDirectoryError(Exception):
    """Base class for every error raised by this layer."""


class ExtractionError(AssetDirectoryError):
    """Raw scanned or typed text could not be turned into a lookup key."""


class MalformedInput(ExtractionError):
    def __init__(self, raw_text: str) -> None:
        super().__init__(f"Not an absolute URL: {raw_text!r}")
        self.raw_text = raw_text


class MissingIdentifier(ExtractionError):
    def __init__(self, raw_text: str) -> None:
        super().__init__(f"No asset identifier parameter in {raw_text!r}")
        self.raw_text = raw_text


class CatalogError(AssetDirectoryError):
    """Transport, timeout or protocol failure talking to the catalog."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExportEmpty(AssetDirectoryError):
    """An export produced no rows."""


__all__ = [
    "AssetDirectoryError",
    "CatalogError",
    "ExportEmpty",
    "ExtractionError",
    "MalformedInput",
    "MissingIdentifier",
]
