"""Persist the last used list filters between sessions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from common.config import settings
from common.logging import get_logger

LOGGER = get_logger(__name__)

CACHE_FILENAME = "asset_filters.json"


class FilterCache:
    """JSON file holding the last shareable parameters.

    Keys in ``blacklist`` (exact-match lookups such as serial numbers) are
    never written, so a restored session does not silently re-apply them.
    """

    def __init__(self, path: Optional[Path] = None, blacklist: Optional[Iterable[str]] = None) -> None:
        self.path = path or Path(settings.filter_cache_dir).expanduser() / CACHE_FILENAME
        self.blacklist = frozenset(
            settings.filter_cache_blacklist if blacklist is None else blacklist
        )

    def load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text())
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable filter cache", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(raw, dict):
            return {}
        return {
            str(key): str(value)
            for key, value in raw.items()
            if key not in self.blacklist and value is not None
        }

    def save(self, params: Dict[str, str]) -> None:
        """Write the parameters atomically."""
        payload = {key: value for key, value in params.items() if key not in self.blacklist}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(".tmp")
            tmp_path.write_text(json.dumps(payload, indent=2))
            tmp_path.replace(self.path)
        except OSError as exc:
            LOGGER.warning("Could not persist filter cache", path=str(self.path), error=str(exc))

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


__all__ = ["FilterCache"]
