"""Bounding-box and radius queries over the cached assets.

Queries scan the cached snapshot linearly and never mutate it. Radius
queries pre-filter with a derived bounding box and then keep only
records whose great-circle distance is within the radius, because the
box over-includes its corners relative to the circle.
"""

from __future__ import annotations

import logging
import math

from hydrantgate._constants import (
    DEFAULT_BOUNDS_LIMIT,
    DEFAULT_RADIUS_KM,
    EARTH_RADIUS_KM,
    KM_PER_DEGREE,
)
from hydrantgate.cache import AssetCache
from hydrantgate.models.asset import AssetRecord, BoundingBox, GeoPoint

_logger = logging.getLogger(__name__)


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres (haversine, R = 6371 km)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push a fractionally above 1 for antipodal points.
    a = min(1.0, a)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def bounds_around(center: GeoPoint, radius_km: float) -> BoundingBox:
    """Bounding box covering a circle of *radius_km* around *center*.

    Uses 111 km per degree of latitude, scaled by ``cos(latitude)`` for
    longitude. Near the poles the longitude span is widened to the full
    range rather than dividing by zero.
    """
    if radius_km < 0:
        raise ValueError(f"radius_km must be non-negative, got {radius_km}")
    lat_delta = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(center.latitude))
    if cos_lat <= 1e-12:
        west, east = -180.0, 180.0
    else:
        lon_delta = radius_km / (KM_PER_DEGREE * cos_lat)
        west, east = center.longitude - lon_delta, center.longitude + lon_delta
    return BoundingBox(
        north=center.latitude + lat_delta,
        south=center.latitude - lat_delta,
        east=east,
        west=west,
    )


class SpatialQueryEngine:
    """Answer spatial queries against an :class:`AssetCache`.

    Usage::

        engine = SpatialQueryEngine(cache)
        nearby = await engine.get_by_radius(GeoPoint(latitude=40.71, longitude=-74.0), 1.0)
    """

    def __init__(self, cache: AssetCache) -> None:
        self._cache = cache

    @property
    def cache(self) -> AssetCache:
        return self._cache

    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        return calculate_distance(lat1, lon1, lat2, lon2)

    async def get_by_bounds(self, bounds: BoundingBox, limit: int = DEFAULT_BOUNDS_LIMIT) -> list[AssetRecord]:
        """Records inside *bounds* (inclusive), in cache order, at most *limit*."""
        records = await self._cache.get_or_load()
        if limit <= 0:
            return []

        matched: list[AssetRecord] = []
        total = 0
        for record in records:
            if bounds.contains(record.latitude, record.longitude):
                total += 1
                if len(matched) < limit:
                    matched.append(record)

        _logger.debug(
            "Found %d assets in bounds (%d total, limited to %d)",
            len(matched),
            total,
            limit,
        )
        return matched

    async def get_by_radius(
        self,
        center: GeoPoint,
        radius_km: float = DEFAULT_RADIUS_KM,
        limit: int = DEFAULT_BOUNDS_LIMIT,
    ) -> list[AssetRecord]:
        """Records within *radius_km* of *center*, at most *limit*.

        The bounding-box stage fetches ``2 * limit`` candidates before the
        exact distance filter, then the result is truncated to *limit*.
        """
        bounds = bounds_around(center, radius_km)
        if limit <= 0:
            await self._cache.get_or_load()
            return []

        candidates = await self.get_by_bounds(bounds, limit * 2)
        nearby = [
            record
            for record in candidates
            if calculate_distance(center.latitude, center.longitude, record.latitude, record.longitude) <= radius_km
        ]
        return nearby[:limit]

    async def nearest(
        self,
        center: GeoPoint,
        radius_km: float = DEFAULT_RADIUS_KM,
        limit: int = DEFAULT_BOUNDS_LIMIT,
    ) -> list[tuple[AssetRecord, float]]:
        """Radius query results paired with their distance in km, closest first."""
        records = await self.get_by_radius(center, radius_km, limit)
        ranked = [
            (record, calculate_distance(center.latitude, center.longitude, record.latitude, record.longitude))
            for record in records
        ]
        ranked.sort(key=lambda pair: pair[1])
        return ranked
