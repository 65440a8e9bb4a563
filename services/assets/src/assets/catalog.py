"""HTTP client for the remote asset catalog."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from common.config import Settings, settings as default_settings
from common.http import build_async_client
from common.logging import get_logger

from .errors import CatalogError
from .models import AssetPage, FacilityRecord, LocationRecord, RegistryRecord

LOGGER = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

LIST_ASSETS_PATH = "/api/v1/asset/"
REGISTRY_PATH = "/api/v1/public/asset/{code}/"
FACILITY_PATH = "/api/v1/getallfacilities/{facility_id}/"
LOCATION_PATH = "/api/v1/facility/{facility_id}/asset_location/{location_id}/"


def path_segment(value: str) -> str:
    """Percent-encode ``value`` so it stays a single path segment.

    Scanned codes are untrusted and must never change which endpoint is
    requested.
    """
    encoded = quote(str(value), safe="")
    if encoded in (".", ".."):
        return encoded.replace(".", "%2E")
    return encoded


class CatalogClient:
    """Async client for catalog search, registry and facility lookups.

    Every failure that is not a plain "not found" surfaces as ``CatalogError``
    so callers only have to distinguish data, no data and failure.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = build_async_client(
            base_url=self._base_url,
            bearer_token=token,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "CatalogClient":
        config = config or default_settings
        return cls(
            config.catalog_base_url,
            token=config.catalog_token,
            timeout=config.catalog_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(
        self, path: str, params: Optional[Mapping[str, Any]] = None, *, allow_missing: bool = False
    ) -> Optional[Any]:
        try:
            response = await self._client.get(path, params=dict(params or {}))
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            LOGGER.warning("Catalog request failed", path=path, error=str(exc))
            raise CatalogError(f"Request to {path} failed: {exc}") from exc

        if allow_missing and response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            LOGGER.warning(
                "Catalog returned error status", path=path, status_code=response.status_code
            )
            raise CatalogError(
                f"Catalog returned {response.status_code} for {path}",
                status_code=response.status_code,
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise CatalogError(f"Invalid JSON from {path}") from exc

    @staticmethod
    def _validate(model: Type[RecordT], payload: Any, what: str) -> RecordT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise CatalogError(f"Unexpected {what} payload: {exc}") from exc

    async def list_assets(self, query: Mapping[str, Any]) -> AssetPage:
        payload = await self._get(LIST_ASSETS_PATH, query)
        return self._validate(AssetPage, payload, "asset list")

    async def lookup_registry(self, code: str) -> Optional[RegistryRecord]:
        payload = await self._get(
            REGISTRY_PATH.format(code=path_segment(code)), allow_missing=True
        )
        if not payload:
            return None
        return self._validate(RegistryRecord, payload, "registry")

    async def get_facility(self, facility_id: str) -> Optional[FacilityRecord]:
        payload = await self._get(
            FACILITY_PATH.format(facility_id=path_segment(facility_id)), allow_missing=True
        )
        if not payload:
            return None
        return self._validate(FacilityRecord, payload, "facility")

    async def get_location(self, facility_id: str, location_id: str) -> Optional[LocationRecord]:
        payload = await self._get(
            LOCATION_PATH.format(
                facility_id=path_segment(facility_id), location_id=path_segment(location_id)
            ),
            allow_missing=True,
        )
        if not payload:
            return None
        return self._validate(LocationRecord, payload, "location")


__all__ = ["CatalogClient", "path_segment"]
