"""Route paths handed to the navigation capability."""

from __future__ import annotations

from typing import Callable, List, Optional

Navigator = Callable[[str], None]


def asset_detail_path(facility_id: str, asset_id: str) -> str:
    return f"/facility/{facility_id}/assets/{asset_id}"


def create_asset_path(facility_id: Optional[str]) -> Optional[str]:
    """Path of the create form, or None when a facility must be picked first."""
    if not facility_id:
        return None
    return f"/facility/{facility_id}/assets/new"


class RecordingNavigator:
    """Navigator that only remembers where it was sent (CLI and tests)."""

    def __init__(self) -> None:
        self.visited: List[str] = []

    def __call__(self, path: str) -> None:
        self.visited.append(path)

    @property
    def last(self) -> Optional[str]:
        return self.visited[-1] if self.visited else None


__all__ = ["Navigator", "RecordingNavigator", "asset_detail_path", "create_asset_path"]
