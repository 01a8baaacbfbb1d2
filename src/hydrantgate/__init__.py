"""hydrantgate - Async geospatial asset cache and proximity-gated reporting."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("hydrantgate")
except PackageNotFoundError:
    __version__ = "0+local"
from hydrantgate._source import AssetSource, FileAssetSource, HttpAssetSource
from hydrantgate.cache import AssetCache, CacheState
from hydrantgate.client import HydrantGateClient
from hydrantgate.config import WORLD, AdmissibleRegion, GateConfig, LocationOptions
from hydrantgate.exceptions import (
    AssetSourceError,
    DistanceExceededError,
    EmptyDataError,
    FetchError,
    HydrantGateConfigError,
    HydrantGateError,
    LocationError,
    LocationTimeoutError,
    LocationUnsupportedError,
    PermissionDeniedError,
    PositionUnavailableError,
    SchemaError,
    classify_location_error,
)
from hydrantgate.location import LocationProvider, LocationService, WatchSubscription
from hydrantgate.models import (
    AssetRecord,
    BoundingBox,
    GeoPoint,
    LocationFix,
    ProximityResult,
    ReportDraft,
    ReportStatus,
    ReportType,
)
from hydrantgate.parser import ParseReport, parse_assets
from hydrantgate.proximity import ProximityGate
from hydrantgate.reporting import ReportSink, ReportSubmitter
from hydrantgate.spatial import SpatialQueryEngine, bounds_around, calculate_distance

__all__ = [
    "__version__",
    "WORLD",
    "AdmissibleRegion",
    "AssetCache",
    "AssetRecord",
    "AssetSource",
    "AssetSourceError",
    "BoundingBox",
    "CacheState",
    "DistanceExceededError",
    "EmptyDataError",
    "FetchError",
    "FileAssetSource",
    "GateConfig",
    "GeoPoint",
    "HttpAssetSource",
    "HydrantGateClient",
    "HydrantGateConfigError",
    "HydrantGateError",
    "LocationError",
    "LocationFix",
    "LocationOptions",
    "LocationProvider",
    "LocationService",
    "LocationTimeoutError",
    "LocationUnsupportedError",
    "ParseReport",
    "PermissionDeniedError",
    "PositionUnavailableError",
    "ProximityGate",
    "ProximityResult",
    "ReportDraft",
    "ReportSink",
    "ReportStatus",
    "ReportSubmitter",
    "ReportType",
    "SchemaError",
    "SpatialQueryEngine",
    "WatchSubscription",
    "bounds_around",
    "calculate_distance",
    "classify_location_error",
    "parse_assets",
]
