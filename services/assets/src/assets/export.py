"""Bulk export of the full filtered asset set."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from common.logging import get_logger

from .catalog import CatalogClient
from .errors import CatalogError, ExportEmpty
from .filters import FilterSet, to_export_query
from .models import AssetRecord

LOGGER = get_logger(__name__)

ALL_FACILITIES = "all"

CSV_COLUMNS = (
    "id",
    "name",
    "asset_class",
    "serial_number",
    "qr_code_id",
    "status",
    "is_working",
    "latest_status",
    "warranty_amc_end_of_validity",
    "location_id",
    "location_name",
    "facility_id",
    "facility_name",
)


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"

    @property
    def media_type(self) -> str:
        return "application/json" if self is ExportFormat.JSON else "text/csv"


@dataclass(frozen=True)
class ExportRequest:
    """One export cycle: a filter snapshot and the row count to fetch."""

    filters: FilterSet
    format: ExportFormat
    limit: int
    facility_name: Optional[str] = None

    @property
    def filename(self) -> str:
        return f"assets_{self.facility_name or ALL_FACILITIES}.{self.format.value}"


@dataclass(frozen=True)
class ExportPayload:
    filename: str
    content: bytes
    media_type: str


Serializer = Callable[[Sequence[AssetRecord]], bytes]


def serialize_json(records: Sequence[AssetRecord]) -> bytes:
    rows = [record.model_dump(mode="json") for record in records]
    return json.dumps(rows, indent=2).encode("utf-8")


def _csv_row(record: AssetRecord) -> Dict[str, Any]:
    row = record.model_dump(mode="json", exclude={"location_object"})
    location = record.location_object
    row["location_id"] = location.id if location else None
    row["location_name"] = record.location_name
    row["facility_id"] = record.facility_id
    row["facility_name"] = record.facility_name
    return {column: "" if row.get(column) is None else row[column] for column in CSV_COLUMNS}


def serialize_csv(records: Sequence[AssetRecord]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(CSV_COLUMNS))
    writer.writeheader()
    for record in records:
        writer.writerow(_csv_row(record))
    return buffer.getvalue().encode("utf-8")


SERIALIZERS: Dict[ExportFormat, Serializer] = {
    ExportFormat.JSON: serialize_json,
    ExportFormat.CSV: serialize_csv,
}


class ExportOrchestrator:
    """Re-fetch the whole filtered set in one page and serialize it.

    Authorization and the non-empty total are checked by the caller.
    """

    def __init__(
        self, catalog: CatalogClient, serializers: Optional[Dict[ExportFormat, Serializer]] = None
    ) -> None:
        self._catalog = catalog
        self._serializers = dict(SERIALIZERS if serializers is None else serializers)

    async def fetch_records(self, request: ExportRequest) -> List[AssetRecord]:
        if request.limit <= 0:
            raise ExportEmpty("Nothing to export")
        page = await self._catalog.list_assets(to_export_query(request.filters, request.limit))
        if not page.results:
            raise ExportEmpty("Catalog returned no rows")
        return list(page.results)

    async def export_all(self, request: ExportRequest) -> Optional[ExportPayload]:
        try:
            records = await self.fetch_records(request)
        except ExportEmpty as exc:
            LOGGER.info("Export produced no data", reason=str(exc), format=request.format.value)
            return None
        except CatalogError as exc:
            LOGGER.warning("Export fetch failed", error=str(exc), format=request.format.value)
            return None

        content = self._serializers[request.format](records)
        LOGGER.info(
            "Exported assets",
            rows=len(records),
            format=request.format.value,
            filename=request.filename,
        )
        return ExportPayload(
            filename=request.filename,
            content=content,
            media_type=request.format.media_type,
        )


__all__ = [
    "ExportFormat",
    "ExportOrchestrator",
    "ExportPayload",
    "ExportRequest",
    "SERIALIZERS",
    "serialize_csv",
    "serialize_json",
]
