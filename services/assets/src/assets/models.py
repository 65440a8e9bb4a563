"""Catalog data models (read-only copies of remote records)."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, field_validator

from common.schemas import DirectoryModel

ASSET_CLASS_ICONS: Dict[str, str] = {
    "ONVIF": "l-camera",
    "HL7MONITOR": "l-monitor-heart-rate",
    "VENTILATOR": "l-lungs",
    "NONE": "l-box",
}


class CatalogRecord(DirectoryModel):
    """Frozen base: this layer never mutates catalog data."""

    model_config = ConfigDict(
        from_attributes=True, populate_by_name=True, extra="ignore", frozen=True
    )


class FacilityRecord(CatalogRecord):
    id: Optional[str] = None
    name: str = ""


class LocationRecord(CatalogRecord):
    id: Optional[str] = None
    name: str = ""
    facility: Optional[FacilityRecord] = None


class AssetRecord(CatalogRecord):
    """Asset as returned by the catalog search."""

    id: Optional[str] = None
    name: str = ""
    location_object: Optional[LocationRecord] = None
    is_working: Optional[bool] = None
    latest_status: Optional[str] = None
    warranty_amc_end_of_validity: Optional[date] = None
    asset_class: Optional[str] = None
    serial_number: Optional[str] = None
    qr_code_id: Optional[str] = None
    status: Optional[str] = None

    @field_validator("warranty_amc_end_of_validity", mode="before")
    @classmethod
    def _blank_date(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @property
    def facility_id(self) -> Optional[str]:
        if self.location_object and self.location_object.facility:
            return self.location_object.facility.id
        return None

    @property
    def facility_name(self) -> Optional[str]:
        if self.location_object and self.location_object.facility:
            return self.location_object.facility.name
        return None

    @property
    def location_name(self) -> Optional[str]:
        return self.location_object.name if self.location_object else None

    @property
    def has_identity(self) -> bool:
        return bool(self.id)

    @property
    def is_down(self) -> bool:
        return self.latest_status == "Down"

    @property
    def working_label(self) -> str:
        return "Working" if self.is_working else "Not Working"

    @property
    def class_icon(self) -> str:
        return ASSET_CLASS_ICONS.get(self.asset_class or "NONE", ASSET_CLASS_ICONS["NONE"])

    @property
    def detail_path(self) -> Optional[str]:
        if not self.id or not self.facility_id:
            return None
        return f"/facility/{self.facility_id}/assets/{self.id}"


class AssetPage(CatalogRecord):
    results: List[AssetRecord] = []
    count: int = 0


class RegistryRecord(CatalogRecord):
    """Public registry entry behind a printed tag code."""

    id: Optional[str] = None
    qr_code_id: Optional[str] = None
    name: Optional[str] = None

    def search_key(self, scanned_code: str) -> str:
        return self.qr_code_id or scanned_code


__all__ = [
    "ASSET_CLASS_ICONS",
    "AssetPage",
    "AssetRecord",
    "FacilityRecord",
    "LocationRecord",
    "RegistryRecord",
]
