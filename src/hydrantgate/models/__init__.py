"""Data models for hydrantgate."""

from hydrantgate.models.asset import AssetRecord, BoundingBox, GeoPoint
from hydrantgate.models.location import FixTimestamp, LocationFix, parse_fix_timestamp
from hydrantgate.models.proximity import ProximityResult
from hydrantgate.models.report import ReportDraft, ReportStatus, ReportType

__all__ = [
    "AssetRecord",
    "BoundingBox",
    "FixTimestamp",
    "GeoPoint",
    "LocationFix",
    "ProximityResult",
    "ReportDraft",
    "ReportStatus",
    "ReportType",
    "parse_fix_timestamp",
]
