"""Canonical filter state and its shareable parameter form.

A ``FilterSet`` is the single source of truth for the asset list. It is
immutable; every edit goes through one of the pure transition helpers below,
which enforce two rules:

* ``location`` only exists alongside ``facility``; changing or clearing the
  facility clears the location in the same step.
* any edit that is not a pure page change sends the view back to page 1.

The shareable form is a flat ``str -> str`` mapping suitable for a query
string. It adds ``limit`` and the derived ``offset``; ``offset`` is
informational and never read back.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PAGE_SIZE = 18

FILTER_KEYS: Tuple[str, ...] = (
    "name",
    "serial_number",
    "qr_code_id",
    "facility",
    "location",
    "asset_class",
    "status",
    "warranty_amc_end_of_validity_before",
    "warranty_amc_end_of_validity_after",
    "search",
)
PAGINATION_KEYS: Tuple[str, ...] = ("page", "page_size")

PAGE_PARAM = "page"
LIMIT_PARAM = "limit"
OFFSET_PARAM = "offset"

# FilterSet field -> catalog request field, where they differ.
REQUEST_FIELD_NAMES: Dict[str, str] = {"search": "search_text"}


class FilterSet(BaseModel):
    """All active list filters plus pagination."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Optional[str] = None
    serial_number: Optional[str] = None
    qr_code_id: Optional[str] = None
    facility: Optional[str] = None
    location: Optional[str] = None
    asset_class: Optional[str] = None
    status: Optional[str] = None
    warranty_amc_end_of_validity_before: Optional[str] = None
    warranty_amc_end_of_validity_after: Optional[str] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @field_validator(*FILTER_KEYS, mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def active_filters(self) -> Dict[str, str]:
        """Populated filter fields, in canonical key order."""
        active: Dict[str, str] = {}
        for key in FILTER_KEYS:
            value = getattr(self, key)
            if value is not None:
                active[key] = value
        return active

    def is_unconstrained(self) -> bool:
        return not self.active_filters()


def _check_key(key: str) -> None:
    if key not in FILTER_KEYS:
        raise KeyError(f"Unknown filter key: {key}")


def apply_changes(filters: FilterSet, changes: Mapping[str, Optional[str]]) -> FilterSet:
    """Apply filter edits with the facility/location and page-reset rules."""
    if not changes:
        return filters
    for key in changes:
        _check_key(key)

    updated = filters.model_dump()
    updated.update(changes)
    candidate = FilterSet(**{**updated, "page": 1})

    facility_changed = "facility" in changes and candidate.facility != filters.facility
    if facility_changed and "location" not in changes:
        # A location from the previous facility is never valid for the new one.
        candidate = candidate.model_copy(update={"location": None})
    if candidate.facility is None and candidate.location is not None:
        candidate = candidate.model_copy(update={"location": None})
    return candidate


def set_filter(filters: FilterSet, key: str, value: Optional[str]) -> FilterSet:
    return apply_changes(filters, {key: value})


def clear_filters(filters: FilterSet, keys: Iterable[str]) -> FilterSet:
    return apply_changes(filters, {key: None for key in keys})


def clear_all(filters: FilterSet) -> FilterSet:
    return FilterSet(page_size=filters.page_size)


def set_page(filters: FilterSet, page: int) -> FilterSet:
    if page < 1:
        raise ValueError(f"Page must be >= 1, got {page}")
    return filters.model_copy(update={"page": page})


def serialize(filters: FilterSet) -> Dict[str, str]:
    """FilterSet -> shareable parameters."""
    params = dict(filters.active_filters())
    params[PAGE_PARAM] = str(filters.page)
    params[LIMIT_PARAM] = str(filters.page_size)
    params[OFFSET_PARAM] = str(filters.offset)
    return params


def _positive_int(raw: Optional[str], default: int) -> int:
    try:
        value = int(str(raw))
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def deserialize(params: Mapping[str, Any], page_size: int = DEFAULT_PAGE_SIZE) -> FilterSet:
    """Shareable parameters -> FilterSet.

    Unknown keys and ``offset`` are ignored; malformed numbers fall back to
    defaults; a location without a facility is dropped.
    """
    values: Dict[str, Any] = {key: params.get(key) for key in FILTER_KEYS}
    if not values.get("facility"):
        values["location"] = None
    return FilterSet(
        **values,
        page=_positive_int(params.get(PAGE_PARAM), 1),
        page_size=_positive_int(params.get(LIMIT_PARAM), page_size),
    )


def to_catalog_query(filters: FilterSet) -> Dict[str, Any]:
    """Catalog search request for one page of ``filters``."""
    query: Dict[str, Any] = {"limit": filters.page_size, "offset": filters.offset}
    for key, value in filters.active_filters().items():
        if key == "location" and not filters.facility:
            continue
        query[REQUEST_FIELD_NAMES.get(key, key)] = value
    return query


def to_export_query(filters: FilterSet, limit: int) -> Dict[str, Any]:
    """Same filters, one page holding ``limit`` rows."""
    query = to_catalog_query(filters)
    query["limit"] = limit
    query["offset"] = 0
    return query


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "FILTER_KEYS",
    "FilterSet",
    "apply_changes",
    "clear_all",
    "clear_filters",
    "deserialize",
    "serialize",
    "set_filter",
    "set_page",
    "to_catalog_query",
    "to_export_query",
]
