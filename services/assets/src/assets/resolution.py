"""Resolve scanned or typed tag text to exactly one asset.

Pipeline: extract code -> registry lookup -> key-scoped catalog search.
Every path ends in a single ``Outcome``; navigation and notifications are
applied only once that outcome is known.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from common.logging import get_logger
from common.notifications import NotificationService

from .catalog import CatalogClient
from .errors import CatalogError, ExtractionError
from .identifiers import extract_identifier
from .navigation import Navigator, asset_detail_path

LOGGER = get_logger(__name__)

# One more than a unique match, so duplicates are detectable.
SEARCH_LIMIT = 2


class FailureReason(str, Enum):
    INVALID_INPUT = "invalid_input"
    REGISTRY_LOOKUP_MISS = "registry_lookup_miss"
    CATALOG_MISS = "catalog_miss"
    AMBIGUOUS = "ambiguous"


MESSAGES = {
    FailureReason.INVALID_INPUT: "Invalid Asset Id",
    FailureReason.REGISTRY_LOOKUP_MISS: "Invalid Asset Id",
    FailureReason.CATALOG_MISS: "Asset not found",
    FailureReason.AMBIGUOUS: "Multiple assets match this code",
}


@dataclass(frozen=True)
class Navigate:
    facility_id: str
    asset_id: str

    @property
    def path(self) -> str:
        return asset_detail_path(self.facility_id, self.asset_id)


@dataclass(frozen=True)
class Failed:
    reason: FailureReason
    message: str
    transport_error: bool = False


Outcome = Union[Navigate, Failed]


def _failed(reason: FailureReason, *, transport_error: bool = False) -> Failed:
    return Failed(reason=reason, message=MESSAGES[reason], transport_error=transport_error)


class ResolutionPipeline:
    def __init__(
        self,
        catalog: CatalogClient,
        navigate: Navigator,
        notifier: NotificationService,
    ) -> None:
        self._catalog = catalog
        self._navigate = navigate
        self._notifier = notifier

    async def lookup(self, raw_text: str) -> Outcome:
        """Compute the outcome without navigating or notifying."""
        try:
            candidate = extract_identifier(raw_text)
        except ExtractionError as exc:
            LOGGER.info("Rejected scan input", error=str(exc), kind=type(exc).__name__)
            return _failed(FailureReason.INVALID_INPUT)

        try:
            registry = await self._catalog.lookup_registry(candidate.code)
            if registry is None:
                return _failed(FailureReason.REGISTRY_LOOKUP_MISS)

            key = registry.search_key(candidate.code)
            page = await self._catalog.list_assets({"qr_code_id": key, "limit": SEARCH_LIMIT})
        except CatalogError as exc:
            LOGGER.warning(
                "Asset lookup failed",
                code=candidate.code,
                transport_error=True,
                error=str(exc),
                status_code=exc.status_code,
            )
            return _failed(FailureReason.REGISTRY_LOOKUP_MISS, transport_error=True)

        matches = page.results
        if len(matches) > 1 or page.count > 1:
            return _failed(FailureReason.AMBIGUOUS)
        if len(matches) == 1:
            match = matches[0]
            if match.id and match.facility_id:
                return Navigate(facility_id=match.facility_id, asset_id=match.id)
        return _failed(FailureReason.CATALOG_MISS)

    async def resolve(self, raw_text: str) -> Outcome:
        """Resolve and apply the single terminal side effect."""
        outcome = await self.lookup(raw_text)
        if isinstance(outcome, Navigate):
            LOGGER.info(
                "Asset resolved", facility_id=outcome.facility_id, asset_id=outcome.asset_id
            )
            self._navigate(outcome.path)
        else:
            LOGGER.info(
                "Asset resolution failed",
                reason=outcome.reason.value,
                transport_error=outcome.transport_error,
            )
            self._notifier.error(outcome.message)
        return outcome


__all__ = [
    "FailureReason",
    "Failed",
    "MESSAGES",
    "Navigate",
    "Outcome",
    "ResolutionPipeline",
    "SEARCH_LIMIT",
]
