"""Pydantic schema helpers shared by services."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class DirectoryModel(BaseModel):
    """Base model for catalog payloads: ORM-friendly, tolerant of extra keys."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, extra="ignore")

    def dump_json_ready(self, **kwargs: Any) -> dict[str, Any]:
        return self.model_dump(mode="json", **kwargs)


class Pagination(BaseModel):
    total: int
    limit: int = 18
    offset: int = 0

    @property
    def page(self) -> int:
        if self.limit <= 0:
            return 1
        return self.offset // self.limit + 1

    @property
    def page_count(self) -> int:
        if self.limit <= 0:
            return 1
        return max(1, -(-self.total // self.limit))


__all__ = ["DirectoryModel", "Pagination"]
