"""Warranty / AMC validity indicators."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

URGENT_WINDOW_DAYS = 30
WARNING_WINDOW_DAYS = 90


class WarrantyStatus(str, Enum):
    EXPIRED = "expired"
    EXPIRING_URGENT = "expiring_urgent"
    EXPIRING_WARNING = "expiring_warning"

    @property
    def label(self) -> str:
        if self is WarrantyStatus.EXPIRED:
            return "AMC/Warranty Expired"
        return "AMC/Warranty Expiring Soon"


def classify_warranty(
    end_of_validity: Optional[date], today: Optional[date] = None
) -> Optional[WarrantyStatus]:
    """Return the indicator for an end date, or None when nothing is shown."""
    if end_of_validity is None:
        return None
    today = today or date.today()
    if end_of_validity < today:
        return WarrantyStatus.EXPIRED
    remaining = (end_of_validity - today).days
    if remaining <= URGENT_WINDOW_DAYS:
        return WarrantyStatus.EXPIRING_URGENT
    if remaining <= WARNING_WINDOW_DAYS:
        return WarrantyStatus.EXPIRING_WARNING
    return None


__all__ = ["WarrantyStatus", "classify_warranty"]
