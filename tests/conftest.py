"""Shared fixtures for asset directory tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

ROOT = Path(__file__).resolve().parents[1]
for src in ("services/common/src", "services/assets/src", "services/cli/src"):
    path = str(ROOT / src)
    if path not in sys.path:
        sys.path.insert(0, path)

from assets.models import AssetPage, AssetRecord, FacilityRecord, RegistryRecord  # noqa: E402
from assets.navigation import RecordingNavigator  # noqa: E402
from common.notifications import NotificationService  # noqa: E402


def make_asset(
    asset_id: Optional[str] = "A9",
    facility_id: Optional[str] = "F2",
    name: str = "Ventilator 1",
    **extra: Any,
) -> AssetRecord:
    payload: Dict[str, Any] = {
        "id": asset_id,
        "name": name,
        "location_object": {
            "id": "L1",
            "name": "ICU",
            "facility": {"id": facility_id, "name": "General Hospital"} if facility_id else None,
        },
        "is_working": True,
    }
    payload.update(extra)
    return AssetRecord.model_validate(payload)


def make_page(records: List[AssetRecord], count: Optional[int] = None) -> AssetPage:
    return AssetPage(results=records, count=len(records) if count is None else count)


@pytest.fixture
def notifier() -> NotificationService:
    """Fresh notifier per test so history assertions stay isolated."""
    return NotificationService()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def catalog() -> AsyncMock:
    """Catalog client double returning one asset behind code QR123."""
    mock = AsyncMock()
    mock.lookup_registry = AsyncMock(return_value=RegistryRecord(id="R1", qr_code_id="K1"))
    mock.list_assets = AsyncMock(return_value=make_page([make_asset()]))
    mock.get_facility = AsyncMock(return_value=FacilityRecord(id="F2", name="General Hospital"))
    mock.get_location = AsyncMock(return_value=None)
    return mock
