"""Wire the catalog client, list state, scanner and export together."""

from __future__ import annotations

from typing import Optional, Set

from common.config import Settings, settings as default_settings
from common.logging import get_logger
from common.notifications import NotificationService, get_notification_service
from common.security import Authorizer, authorize_for, non_read_only_users

from .catalog import CatalogClient
from .errors import CatalogError
from .export import ExportFormat, ExportOrchestrator, ExportPayload, ExportRequest
from .navigation import Navigator, create_asset_path
from .resolution import ResolutionPipeline
from .scanner import ScanModeController
from .storage import FilterCache
from .synchronizer import QueryStateSynchronizer

LOGGER = get_logger(__name__)

EXPORT_EMPTY_MESSAGE = "No assets to export"


class AssetDirectory:
    """The asset list screen without its markup.

    Holds the user's roles and applies the checks that gate export and
    creation before delegating to the components.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        navigate: Navigator,
        *,
        roles: Optional[Set[str]] = None,
        notifier: Optional[NotificationService] = None,
        cache: Optional[FilterCache] = None,
        config: Optional[Settings] = None,
    ) -> None:
        config = config or default_settings
        self.catalog = catalog
        self.navigate = navigate
        self.roles: Set[str] = set(roles or ())
        self.notifier = notifier or get_notification_service()
        self.can_import_export: Authorizer = authorize_for(config.import_export_roles)
        self.pipeline = ResolutionPipeline(catalog, navigate, self.notifier)
        self.scanner = ScanModeController(self.pipeline, self.notifier)
        self.listing = QueryStateSynchronizer(
            catalog, self.notifier, page_size=config.assets_page_size, cache=cache
        )
        self.exporter = ExportOrchestrator(catalog)

    @property
    def export_enabled(self) -> bool:
        return self.can_import_export(self.roles) and self.listing.total_count > 0

    async def facility_name(self) -> Optional[str]:
        facility_id = self.listing.filters.facility
        if not facility_id:
            return None
        try:
            facility = await self.catalog.get_facility(facility_id)
        except CatalogError as exc:
            LOGGER.warning("Facility lookup failed", facility_id=facility_id, error=str(exc))
            return None
        return facility.name if facility and facility.name else None

    async def export(self, export_format: ExportFormat) -> Optional[ExportPayload]:
        if not self.export_enabled:
            LOGGER.info(
                "Export not available",
                authorized=self.can_import_export(self.roles),
                total=self.listing.total_count,
            )
            return None
        request = ExportRequest(
            filters=self.listing.filters,
            format=export_format,
            limit=self.listing.total_count,
            facility_name=await self.facility_name(),
        )
        payload = await self.exporter.export_all(request)
        if payload is None:
            self.notifier.error(EXPORT_EMPTY_MESSAGE)
        return payload

    def create_asset(self, facility_id: Optional[str] = None) -> Optional[str]:
        """Navigate to the create form.

        Uses the picked facility, else the facility filter. Returns None when
        neither exists or the user is read-only.
        """
        if not non_read_only_users(self.roles):
            return None
        path = create_asset_path(facility_id or self.listing.filters.facility)
        if path is not None:
            self.navigate(path)
        return path


__all__ = ["AssetDirectory", "EXPORT_EMPTY_MESSAGE"]
