"""Client-side access layer for the remote asset catalog."""

from .catalog import CatalogClient
from .directory import AssetDirectory
from .export import ExportFormat, ExportOrchestrator, ExportPayload, ExportRequest
from .filters import FilterSet, deserialize, serialize
from .identifiers import IdentifierCandidate, extract_identifier
from .resolution import Failed, FailureReason, Navigate, ResolutionPipeline
from .scanner import ScanMode, ScanModeController
from .synchronizer import FilterBadge, QueryStateSynchronizer
from .warranty import WarrantyStatus, classify_warranty

__all__ = [
    "AssetDirectory",
    "CatalogClient",
    "ExportFormat",
    "ExportOrchestrator",
    "ExportPayload",
    "ExportRequest",
    "Failed",
    "FailureReason",
    "FilterBadge",
    "FilterSet",
    "IdentifierCandidate",
    "Navigate",
    "QueryStateSynchronizer",
    "ResolutionPipeline",
    "ScanMode",
    "ScanModeController",
    "WarrantyStatus",
    "classify_warranty",
    "deserialize",
    "extract_identifier",
    "serialize",
]
