"""High-level async client tying the cache, queries and proximity gate together."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from hydrantgate._source import AssetSource, source_from_config
from hydrantgate.cache import AssetCache
from hydrantgate.config import GateConfig, LocationOptions
from hydrantgate.exceptions import HydrantGateError
from hydrantgate.location import LocationProvider, LocationService, WatchCallback, WatchSubscription
from hydrantgate.models.asset import AssetRecord, BoundingBox, GeoPoint
from hydrantgate.models.location import LocationFix
from hydrantgate.models.proximity import ProximityResult
from hydrantgate.models.report import ReportType
from hydrantgate.proximity import ProximityGate
from hydrantgate.reporting import ReportSink, ReportSubmitter
from hydrantgate.spatial import SpatialQueryEngine

_logger = logging.getLogger(__name__)


class HydrantGateClient:
    """Async client for nearby-asset queries and proximity-gated reports.

    Usage::

        async with HydrantGateClient(config, provider=provider) as client:
            hydrants = await client.get_by_radius(GeoPoint(latitude=40.71, longitude=-74.0))
            result = await client.verify_proximity(hydrants[0])
    """

    def __init__(
        self,
        config: GateConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        provider: LocationProvider | None = None,
        source: AssetSource | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._source = source
        self._provider = provider
        self._cache: AssetCache | None = None
        self._engine: SpatialQueryEngine | None = None
        self._location = LocationService(provider)
        self._gate = ProximityGate(
            self._location,
            threshold_m=config.proximity_threshold_m,
            epsilon_deg=config.defaulted_fix_epsilon_deg,
            max_fix_age_s=config.max_fix_age_s,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> HydrantGateClient:
        source = self._source
        if source is None:
            if self._config.source_url and self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            source = source_from_config(self._config, self._http_session)
        self._cache = AssetCache(source, region=self._config.region)
        self._engine = SpatialQueryEngine(self._cache)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._cache is not None:
            await self._cache.aclose()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._cache = None
        self._engine = None

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def config(self) -> GateConfig:
        return self._config

    @property
    def cache(self) -> AssetCache:
        if self._cache is None:
            raise HydrantGateError("Client not initialized. Use 'async with HydrantGateClient(...) as client:'")
        return self._cache

    @property
    def engine(self) -> SpatialQueryEngine:
        if self._engine is None:
            raise HydrantGateError("Client not initialized. Use 'async with HydrantGateClient(...) as client:'")
        return self._engine

    @property
    def location(self) -> LocationService:
        return self._location

    @property
    def gate(self) -> ProximityGate:
        return self._gate

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    async def get_by_bounds(self, bounds: BoundingBox, limit: int | None = None) -> list[AssetRecord]:
        """Assets inside *bounds*, at most *limit* (default from config)."""
        return await self.engine.get_by_bounds(bounds, self._config.bounds_limit if limit is None else limit)

    async def get_by_radius(
        self,
        center: GeoPoint,
        radius_km: float | None = None,
        limit: int | None = None,
    ) -> list[AssetRecord]:
        """Assets within *radius_km* of *center* (defaults from config)."""
        return await self.engine.get_by_radius(
            center,
            self._config.radius_km if radius_km is None else radius_km,
            self._config.bounds_limit if limit is None else limit,
        )

    def invalidate_cache(self) -> None:
        """Force a reload of the asset source on the next query."""
        self.cache.invalidate()

    # ------------------------------------------------------------------
    # Location and reporting
    # ------------------------------------------------------------------

    async def acquire_location(self, options: LocationOptions | None = None) -> LocationFix:
        return await self._location.acquire(options)

    def watch_location(self, callback: WatchCallback, options: LocationOptions | None = None) -> WatchSubscription:
        return self._location.watch(callback, options)

    async def verify_proximity(self, target: GeoPoint, candidate_fix: LocationFix | None = None) -> ProximityResult:
        return await self._gate.verify(target, candidate_fix)

    async def submit_report(
        self,
        sink: ReportSink,
        target: GeoPoint,
        report_type: ReportType | str,
        description: str,
        *,
        candidate_fix: LocationFix | None = None,
        photo: bytes | None = None,
    ) -> tuple[ProximityResult, Mapping[str, Any]]:
        """Verify proximity to *target* and create the report via *sink*."""
        submitter = ReportSubmitter(self._gate, sink)
        return await submitter.submit(
            target,
            report_type,
            description,
            candidate_fix=candidate_fix,
            photo=photo,
        )
