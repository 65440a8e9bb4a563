"""Keep the filter state, its shareable form and the fetched page in step."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Set, Tuple
from urllib.parse import urlencode, urlsplit, urlunsplit

from common.logging import get_logger
from common.notifications import NotificationService

from . import filters as fs
from .catalog import CatalogClient
from .errors import CatalogError
from .filters import FilterSet
from .models import AssetPage, AssetRecord
from .storage import FilterCache

LOGGER = get_logger(__name__)

FETCH_FAILED_MESSAGE = "Could not load assets"


@dataclass(frozen=True)
class FilterBadge:
    label: str
    key: str
    value: str


class QueryStateSynchronizer:
    """Sole owner of the asset list ``FilterSet``.

    Every change schedules a catalog fetch. Fetches are numbered when issued
    and a response is applied only if it belongs to the most recently issued
    one, so a slow stale request can never overwrite a newer result.
    A failed fetch keeps the previous page visible and notifies the user.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        notifier: NotificationService,
        *,
        filters: Optional[FilterSet] = None,
        page_size: int = fs.DEFAULT_PAGE_SIZE,
        cache: Optional[FilterCache] = None,
    ) -> None:
        self._catalog = catalog
        self._notifier = notifier
        self._cache = cache
        self._filters = filters or FilterSet(page_size=page_size)
        self._issued = 0
        self._applied: Optional[int] = None
        self._page = AssetPage()
        self._applied_filters: Optional[FilterSet] = None
        self._pending: Set["asyncio.Task[None]"] = set()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def filters(self) -> FilterSet:
        return self._filters

    @property
    def parameters(self) -> Dict[str, str]:
        return fs.serialize(self._filters)

    @property
    def total_count(self) -> int:
        return self._page.count

    @property
    def assets(self) -> Tuple[AssetRecord, ...]:
        return tuple(self._page.results)

    @property
    def results_exist(self) -> bool:
        records = self._page.results
        return bool(records) and any(record.has_identity for record in records)

    @property
    def applied_filters(self) -> Optional[FilterSet]:
        """Filters the visible page was fetched with."""
        return self._applied_filters

    @property
    def loading(self) -> bool:
        return self._applied != self._issued and bool(self._pending)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_filter(self, key: str, value: Optional[str]) -> "asyncio.Task[None]":
        return self._replace(fs.set_filter(self._filters, key, value))

    def update(self, **changes: Optional[str]) -> "asyncio.Task[None]":
        return self._replace(fs.apply_changes(self._filters, changes))

    def clear_filter(self, keys: Iterable[str]) -> "asyncio.Task[None]":
        return self._replace(fs.clear_filters(self._filters, keys))

    def clear_all(self) -> "asyncio.Task[None]":
        return self._replace(fs.clear_all(self._filters))

    def set_page(self, page: int) -> "asyncio.Task[None]":
        return self._replace(fs.set_page(self._filters, page))

    def load_parameters(self, params: Mapping[str, Any]) -> "asyncio.Task[None]":
        return self._replace(fs.deserialize(params, page_size=self._filters.page_size))

    def restore(self, params: Optional[Mapping[str, Any]] = None) -> "asyncio.Task[None]":
        """Start from explicit parameters, else from the cache, else defaults."""
        if not params and self._cache is not None:
            params = self._cache.load()
        return self.load_parameters(params or {})

    def _replace(self, new_filters: FilterSet) -> "asyncio.Task[None]":
        self._filters = new_filters
        if self._cache is not None:
            self._cache.save(fs.serialize(new_filters))
        return self.refresh()

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def refresh(self) -> "asyncio.Task[None]":
        """Issue a fetch for the current filters on the running loop."""
        self._issued += 1
        task = asyncio.get_running_loop().create_task(
            self._fetch(self._issued, self._filters)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_idle(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _fetch(self, token: int, snapshot: FilterSet) -> None:
        query = fs.to_catalog_query(snapshot)
        try:
            page = await self._catalog.list_assets(query)
        except CatalogError as exc:
            if token != self._issued:
                LOGGER.debug("Discarded stale fetch failure", token=token, latest=self._issued)
                return
            LOGGER.warning("Asset fetch failed", token=token, error=str(exc))
            self._notifier.error(FETCH_FAILED_MESSAGE)
            return

        if token != self._issued:
            LOGGER.debug("Discarded stale fetch response", token=token, latest=self._issued)
            return
        self._page = page
        self._applied = token
        self._applied_filters = snapshot
        LOGGER.debug("Applied asset page", token=token, count=page.count, rows=len(page.results))

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def share_url(self, base_url: str) -> str:
        scheme, netloc, path, _query, fragment = urlsplit(base_url)
        return urlunsplit((scheme, netloc, path, urlencode(self.parameters), fragment))

    async def badges(self) -> List[FilterBadge]:
        """Human-readable chips for the active filters."""
        current = self._filters
        badges: List[FilterBadge] = []

        if current.facility:
            facility_name = await self._lookup_name(
                self._catalog.get_facility(current.facility), current.facility
            )
            badges.append(FilterBadge("Facility", "facility", facility_name))
        if current.search:
            badges.append(FilterBadge("Name/Serial No./QR ID", "search", current.search))
        if current.asset_class:
            badges.append(FilterBadge("Asset Class", "asset_class", current.asset_class))
        if current.status:
            badges.append(FilterBadge("Status", "status", current.status.replace("_", " ")))
        if current.facility and current.location:
            location_name = await self._lookup_name(
                self._catalog.get_location(current.facility, current.location), current.location
            )
            badges.append(FilterBadge("Location", "location", location_name))
        if current.warranty_amc_end_of_validity_before:
            badges.append(
                FilterBadge(
                    "Warranty AMC End Of Validity Before",
                    "warranty_amc_end_of_validity_before",
                    current.warranty_amc_end_of_validity_before,
                )
            )
        if current.warranty_amc_end_of_validity_after:
            badges.append(
                FilterBadge(
                    "Warranty AMC End Of Validity After",
                    "warranty_amc_end_of_validity_after",
                    current.warranty_amc_end_of_validity_after,
                )
            )
        return badges

    @staticmethod
    async def _lookup_name(lookup: Awaitable[Any], fallback: str) -> str:
        try:
            record = await lookup
        except CatalogError as exc:
            LOGGER.debug("Badge label lookup failed", fallback=fallback, error=str(exc))
            return fallback
        return record.name if record is not None and record.name else fallback


__all__ = ["FETCH_FAILED_MESSAGE", "FilterBadge", "QueryStateSynchronizer"]
