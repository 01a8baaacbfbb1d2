"""Library configuration for hydrantgate."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from hydrantgate._constants import (
    DEFAULT_BOUNDS_LIMIT,
    DEFAULT_MAX_FIX_AGE_S,
    DEFAULT_PROXIMITY_THRESHOLD_M,
    DEFAULT_RADIUS_KM,
    DEFAULT_SOURCE_PATH,
    DEFAULTED_FIX_EPSILON_DEG,
)
from hydrantgate.exceptions import HydrantGateConfigError


@dataclasses.dataclass(frozen=True)
class AdmissibleRegion:
    """Rectangle a dataset's records must fall inside to be kept.

    Bounds are inclusive. The default covers New York City, where the
    hydrant dataset comes from.
    """

    min_latitude: float = 40.0
    max_latitude: float = 41.0
    min_longitude: float = -75.0
    max_longitude: float = -73.0

    def __post_init__(self) -> None:
        if self.min_latitude > self.max_latitude or self.min_longitude > self.max_longitude:
            raise HydrantGateConfigError(f"Admissible region is inverted: {self}")

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.min_latitude <= latitude <= self.max_latitude
            and self.min_longitude <= longitude <= self.max_longitude
        )

    @classmethod
    def parse(cls, value: str) -> AdmissibleRegion:
        """Parse ``"south,north,west,east"`` into a region."""
        parts = [part.strip() for part in value.split(",")]
        if len(parts) != 4:
            raise HydrantGateConfigError(f"Region must be 'south,north,west,east', got {value!r}")
        try:
            south, north, west, east = (float(part) for part in parts)
        except ValueError as exc:
            raise HydrantGateConfigError(f"Region has a non-numeric bound: {value!r}") from exc
        return cls(min_latitude=south, max_latitude=north, min_longitude=west, max_longitude=east)


#: Accepts every coordinate on the globe.
WORLD = AdmissibleRegion(-90.0, 90.0, -180.0, 180.0)


@dataclasses.dataclass(frozen=True)
class LocationOptions:
    """Options for a single location request.

    Parameters
    ----------
    timeout : float
        Seconds the provider may spend producing a fix.
    max_age : float
        Maximum age in seconds of a cached fix the provider may return.
        ``0`` forces a fresh measurement.
    high_accuracy : bool
        Ask the provider for its accurate (GPS) tier.
    fallback_on_timeout : bool
        When a high accuracy request times out, make exactly one more
        attempt at low accuracy.
    """

    timeout: float = 8.0
    max_age: float = 600.0
    high_accuracy: bool = False
    fallback_on_timeout: bool = True

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_age < 0:
            raise ValueError(f"max_age must be non-negative, got {self.max_age}")

    @classmethod
    def for_watch(cls) -> LocationOptions:
        """Defaults for continuous position watches."""
        return cls(timeout=10.0, max_age=60.0, high_accuracy=True, fallback_on_timeout=False)

    @classmethod
    def fresh(cls, timeout: float = 15.0) -> LocationOptions:
        """Options that only accept a new high accuracy measurement."""
        return cls(timeout=timeout, max_age=0.0, high_accuracy=True, fallback_on_timeout=False)


@dataclasses.dataclass(frozen=True)
class GateConfig:
    """Library configuration.

    Parameters
    ----------
    source_url : str or None
        URL of the asset CSV. Takes precedence over ``source_path``.
    source_path : str or None
        Filesystem path of the asset CSV.
    region : AdmissibleRegion
        Records outside this rectangle are dropped while parsing.
    fetch_timeout : float
        Total seconds allowed for fetching the source over HTTP.
    proximity_threshold_m : float
        Maximum reporter-to-target distance, in metres, for a report.
    defaulted_fix_epsilon_deg : float
        A fix within this many degrees of the target is treated as
        defaulted and re-acquired.
    max_fix_age_s : float
        A candidate fix older than this many seconds is treated as stale
        and re-acquired.
    bounds_limit : int
        Default result limit for spatial queries.
    radius_km : float
        Default radius for nearby queries.
    """

    source_url: str | None = None
    source_path: str | None = DEFAULT_SOURCE_PATH
    region: AdmissibleRegion = dataclasses.field(default_factory=AdmissibleRegion)
    fetch_timeout: float = 30.0
    proximity_threshold_m: float = DEFAULT_PROXIMITY_THRESHOLD_M
    defaulted_fix_epsilon_deg: float = DEFAULTED_FIX_EPSILON_DEG
    max_fix_age_s: float = DEFAULT_MAX_FIX_AGE_S
    bounds_limit: int = DEFAULT_BOUNDS_LIMIT
    radius_km: float = DEFAULT_RADIUS_KM

    @classmethod
    def from_env(cls, **overrides: Any) -> GateConfig:
        """Create configuration from ``HYDRANTGATE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url = env.get("HYDRANTGATE_SOURCE_URL")
        if url:
            config_kwargs["source_url"] = url
        path = env.get("HYDRANTGATE_SOURCE_PATH")
        if path:
            config_kwargs["source_path"] = path

        region_env = env.get("HYDRANTGATE_REGION")
        if region_env is not None and "region" not in overrides:
            config_kwargs["region"] = AdmissibleRegion.parse(region_env)

        _ENV_FLOAT_MAP = {
            "HYDRANTGATE_FETCH_TIMEOUT": "fetch_timeout",
            "HYDRANTGATE_PROXIMITY_THRESHOLD_M": "proximity_threshold_m",
            "HYDRANTGATE_MAX_FIX_AGE_S": "max_fix_age_s",
            "HYDRANTGATE_RADIUS_KM": "radius_km",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise HydrantGateConfigError(f"{env_key} must be a number, got {val!r}") from exc

        limit_env = env.get("HYDRANTGATE_BOUNDS_LIMIT")
        if limit_env is not None and "bounds_limit" not in overrides:
            try:
                config_kwargs["bounds_limit"] = int(limit_env)
            except ValueError as exc:
                raise HydrantGateConfigError(f"HYDRANTGATE_BOUNDS_LIMIT must be an integer, got {limit_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
