from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from hydrantgate.exceptions import DistanceExceededError, LocationError, PermissionDeniedError
from hydrantgate.location import LocationService
from hydrantgate.models.asset import GeoPoint
from hydrantgate.models.location import LocationFix
from hydrantgate.proximity import ProximityGate, is_defaulted_fix
from hydrantgate.spatial import calculate_distance

_TARGET = GeoPoint(latitude=40.0, longitude=-74.0)


def _fix_north_of(point: GeoPoint, meters: float) -> LocationFix:
    return LocationFix(
        latitude=point.latitude + math.degrees(meters / 6_371_000.0),
        longitude=point.longitude,
        accuracy=5.0,
    )


class _FreshFixProvider:
    """Single-shot provider returning a fixed fix and recording requests."""

    def __init__(self, fix: LocationFix | None = None, error: LocationError | None = None) -> None:
        self._fix = fix
        self._error = error
        self.calls: list[dict[str, Any]] = []

    async def get_position(self, *, timeout: float, max_age: float, high_accuracy: bool) -> LocationFix:
        self.calls.append({"timeout": timeout, "max_age": max_age, "high_accuracy": high_accuracy})
        if self._error is not None:
            raise self._error
        assert self._fix is not None
        return self._fix

    def watch_position(self, *_args: Any, **_kwargs: Any) -> int:  # pragma: no cover
        raise NotImplementedError

    def clear_watch(self, watch_id: int) -> None:  # pragma: no cover
        raise NotImplementedError


def _gate(provider: _FreshFixProvider | None = None, **kwargs: Any) -> ProximityGate:
    return ProximityGate(LocationService(provider or _FreshFixProvider()), **kwargs)


@pytest.mark.asyncio
async def test_fix_exactly_at_threshold_is_accepted() -> None:
    fix = _fix_north_of(_TARGET, 50.0)
    exact_m = calculate_distance(fix.latitude, fix.longitude, _TARGET.latitude, _TARGET.longitude) * 1000.0
    assert exact_m == pytest.approx(50.0, abs=1e-6)

    result = await _gate(threshold_m=exact_m).verify(_TARGET, fix)

    assert result.accepted
    assert result.distance_m == exact_m
    assert not result.reacquired


@pytest.mark.asyncio
async def test_default_threshold_boundary() -> None:
    gate = _gate()

    inside = await gate.verify(_TARGET, _fix_north_of(_TARGET, 49.99))
    outside = await gate.verify(_TARGET, _fix_north_of(_TARGET, 50.1))

    assert gate.threshold_m == 50.0
    assert inside.accepted
    assert inside.distance_m == pytest.approx(49.99, abs=1e-6)
    assert not outside.accepted
    assert outside.distance_m == pytest.approx(50.1, abs=1e-6)
    assert outside.threshold_m == 50.0


@pytest.mark.asyncio
async def test_missing_fix_triggers_fresh_high_accuracy_acquisition() -> None:
    provider = _FreshFixProvider(_fix_north_of(_TARGET, 10.0))

    result = await _gate(provider).verify(_TARGET, None)

    assert result.accepted
    assert result.reacquired
    assert len(provider.calls) == 1
    assert provider.calls[0]["high_accuracy"] is True
    assert provider.calls[0]["max_age"] == 0.0


@pytest.mark.asyncio
async def test_fix_defaulted_to_target_is_never_trusted() -> None:
    provider = _FreshFixProvider(_fix_north_of(_TARGET, 500.0))
    defaulted = LocationFix(latitude=_TARGET.latitude + 5e-5, longitude=_TARGET.longitude - 5e-5, accuracy=1.0)

    result = await _gate(provider).verify(_TARGET, defaulted)

    assert result.reacquired
    assert not result.accepted
    assert result.distance_m == pytest.approx(500.0, abs=1e-3)
    assert provider.calls[0] == {"timeout": 15.0, "max_age": 0.0, "high_accuracy": True}


@pytest.mark.asyncio
async def test_acquisition_failure_is_a_location_error_not_a_rejection() -> None:
    provider = _FreshFixProvider(error=PermissionDeniedError("denied", code=1))

    with pytest.raises(PermissionDeniedError):
        await _gate(provider).verify(_TARGET, None)


@pytest.mark.asyncio
async def test_independent_fix_is_used_without_reacquiring() -> None:
    provider = _FreshFixProvider(_fix_north_of(_TARGET, 1.0))

    result = await _gate(provider).verify(_TARGET, _fix_north_of(_TARGET, 30.0))

    assert result.accepted
    assert provider.calls == []


@pytest.mark.asyncio
async def test_require_raises_distance_exceeded() -> None:
    with pytest.raises(DistanceExceededError) as exc_info:
        await _gate().require(_TARGET, _fix_north_of(_TARGET, 120.0))

    assert exc_info.value.distance_m == pytest.approx(120.0, abs=1e-6)
    assert exc_info.value.threshold_m == 50.0


@pytest.mark.asyncio
async def test_require_returns_result_when_accepted() -> None:
    result = await _gate().require(_TARGET, _fix_north_of(_TARGET, 20.0))

    assert result.accepted


def test_is_defaulted_fix_epsilon() -> None:
    assert is_defaulted_fix(_TARGET, LocationFix(latitude=40.00005, longitude=-74.0, accuracy=1.0))
    assert not is_defaulted_fix(_TARGET, LocationFix(latitude=40.0002, longitude=-74.0, accuracy=1.0))
    assert not is_defaulted_fix(_TARGET, LocationFix(latitude=40.0, longitude=-74.0002, accuracy=1.0))


def test_negative_threshold_rejected() -> None:
    with pytest.raises(ValueError):
        _gate(threshold_m=-1.0)


@pytest.mark.asyncio
async def test_stale_fix_is_reacquired() -> None:
    provider = _FreshFixProvider(_fix_north_of(_TARGET, 300.0))
    near = _fix_north_of(_TARGET, 22.0)
    stale = near.model_copy(update={"timestamp": datetime.now(UTC) - timedelta(days=30)})

    result = await _gate(provider).verify(_TARGET, stale)

    assert result.reacquired
    assert not result.accepted
    assert result.distance_m == pytest.approx(300.0, abs=1e-3)
    assert provider.calls == [{"timeout": 15.0, "max_age": 0.0, "high_accuracy": True}]


@pytest.mark.asyncio
async def test_fix_within_max_age_is_trusted() -> None:
    provider = _FreshFixProvider(_fix_north_of(_TARGET, 300.0))
    recent = _fix_north_of(_TARGET, 22.0).model_copy(update={"timestamp": datetime.now(UTC) - timedelta(seconds=30)})

    result = await _gate(provider, max_fix_age_s=120.0).verify(_TARGET, recent)

    assert result.accepted
    assert not result.reacquired
    assert provider.calls == []


def test_negative_max_fix_age_rejected() -> None:
    with pytest.raises(ValueError):
        _gate(max_fix_age_s=-1.0)
