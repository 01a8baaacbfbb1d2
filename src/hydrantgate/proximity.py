"""Proximity gate for report submission.

A report may only proceed when an independently measured, fresh fix
lies within the threshold distance of the target. A missing fix, a stale
one, or one that sits on top of the target (the caller's position was
defaulted to the target instead of being measured) is never accepted as
proof of presence: the gate takes a new high accuracy fix with
``max_age=0``.
"""

from __future__ import annotations

import logging

from hydrantgate._constants import (
    DEFAULT_MAX_FIX_AGE_S,
    DEFAULT_PROXIMITY_THRESHOLD_M,
    DEFAULTED_FIX_EPSILON_DEG,
)
from hydrantgate.config import LocationOptions
from hydrantgate.exceptions import DistanceExceededError
from hydrantgate.location import LocationService
from hydrantgate.models.asset import GeoPoint
from hydrantgate.models.location import LocationFix
from hydrantgate.models.proximity import ProximityResult
from hydrantgate.spatial import calculate_distance

_logger = logging.getLogger(__name__)


def is_defaulted_fix(target: GeoPoint, fix: LocationFix, epsilon_deg: float = DEFAULTED_FIX_EPSILON_DEG) -> bool:
    """Return True when *fix* matches *target* within *epsilon_deg* on both axes."""
    return abs(fix.latitude - target.latitude) < epsilon_deg and abs(fix.longitude - target.longitude) < epsilon_deg


class ProximityGate:
    """Accept or reject a report based on the reporter's distance to the target."""

    def __init__(
        self,
        location: LocationService,
        *,
        threshold_m: float = DEFAULT_PROXIMITY_THRESHOLD_M,
        epsilon_deg: float = DEFAULTED_FIX_EPSILON_DEG,
        max_fix_age_s: float = DEFAULT_MAX_FIX_AGE_S,
        fresh_options: LocationOptions | None = None,
    ) -> None:
        if threshold_m < 0:
            raise ValueError(f"threshold_m must be non-negative, got {threshold_m}")
        if max_fix_age_s < 0:
            raise ValueError(f"max_fix_age_s must be non-negative, got {max_fix_age_s}")
        self._location = location
        self._threshold_m = threshold_m
        self._epsilon_deg = epsilon_deg
        self._max_fix_age_s = max_fix_age_s
        self._fresh_options = fresh_options or LocationOptions.fresh()

    @property
    def threshold_m(self) -> float:
        return self._threshold_m

    @property
    def max_fix_age_s(self) -> float:
        return self._max_fix_age_s

    def _needs_fresh_fix(self, target: GeoPoint, fix: LocationFix | None) -> bool:
        if fix is None:
            return True
        if is_defaulted_fix(target, fix, self._epsilon_deg):
            return True
        return fix.age_seconds() > self._max_fix_age_s

    async def verify(self, target: GeoPoint, candidate_fix: LocationFix | None = None) -> ProximityResult:
        """Check the reporter's distance to *target*.

        Raises
        ------
        LocationError
            If a fresh fix was required and could not be acquired. This
            is a location failure, not a rejected check.
        """
        fix = candidate_fix
        reacquired = False
        if self._needs_fresh_fix(target, fix):
            _logger.debug("Candidate fix missing, stale or defaulted to target; acquiring a fresh fix")
            fix = await self._location.acquire(self._fresh_options)
            reacquired = True

        distance_m = calculate_distance(fix.latitude, fix.longitude, target.latitude, target.longitude) * 1000.0
        accepted = distance_m <= self._threshold_m
        _logger.debug(
            "Proximity check: distance=%.1fm threshold=%.1fm accepted=%s",
            distance_m,
            self._threshold_m,
            accepted,
        )
        return ProximityResult(
            accepted=accepted,
            distance_m=distance_m,
            threshold_m=self._threshold_m,
            reacquired=reacquired,
        )

    async def require(self, target: GeoPoint, candidate_fix: LocationFix | None = None) -> ProximityResult:
        """Like :meth:`verify` but raise :class:`DistanceExceededError` on rejection."""
        result = await self.verify(target, candidate_fix)
        if not result.accepted:
            raise DistanceExceededError(result.distance_m, result.threshold_m)
        return result
