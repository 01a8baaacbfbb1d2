from __future__ import annotations

import pytest

from hydrantgate.config import AdmissibleRegion, GateConfig, LocationOptions
from hydrantgate.exceptions import HydrantGateConfigError

_ENV_KEYS = (
    "HYDRANTGATE_SOURCE_URL",
    "HYDRANTGATE_SOURCE_PATH",
    "HYDRANTGATE_REGION",
    "HYDRANTGATE_FETCH_TIMEOUT",
    "HYDRANTGATE_PROXIMITY_THRESHOLD_M",
    "HYDRANTGATE_MAX_FIX_AGE_S",
    "HYDRANTGATE_RADIUS_KM",
    "HYDRANTGATE_BOUNDS_LIMIT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = GateConfig()

    assert config.source_url is None
    assert config.source_path == "hydrants.csv"
    assert config.region == AdmissibleRegion(40.0, 41.0, -75.0, -73.0)
    assert config.proximity_threshold_m == 50.0
    assert config.defaulted_fix_epsilon_deg == 1e-4
    assert config.max_fix_age_s == 60.0
    assert config.bounds_limit == 500
    assert config.radius_km == 2.0


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HYDRANTGATE_SOURCE_URL", "https://example.org/hydrants.csv")
    monkeypatch.setenv("HYDRANTGATE_REGION", "33, 35, -119, -117")
    monkeypatch.setenv("HYDRANTGATE_PROXIMITY_THRESHOLD_M", "75")
    monkeypatch.setenv("HYDRANTGATE_BOUNDS_LIMIT", "100")
    monkeypatch.setenv("HYDRANTGATE_MAX_FIX_AGE_S", "30")

    config = GateConfig.from_env()

    assert config.source_url == "https://example.org/hydrants.csv"
    assert config.region == AdmissibleRegion(33.0, 35.0, -119.0, -117.0)
    assert config.proximity_threshold_m == 75.0
    assert config.bounds_limit == 100
    assert config.max_fix_age_s == 30.0


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HYDRANTGATE_PROXIMITY_THRESHOLD_M", "75")
    monkeypatch.setenv("HYDRANTGATE_REGION", "not,a,region,here")

    config = GateConfig.from_env(proximity_threshold_m=30.0, region=AdmissibleRegion())

    assert config.proximity_threshold_m == 30.0
    assert config.region == AdmissibleRegion()


def test_from_env_rejects_bad_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HYDRANTGATE_FETCH_TIMEOUT", "soon")

    with pytest.raises(HydrantGateConfigError):
        GateConfig.from_env()


@pytest.mark.parametrize("value", ["40,41,-75", "a,b,c,d", "41,40,-75,-73"])
def test_region_parse_rejects_invalid(value: str) -> None:
    with pytest.raises(HydrantGateConfigError):
        AdmissibleRegion.parse(value)


def test_region_contains_is_inclusive() -> None:
    region = AdmissibleRegion()

    assert region.contains(40.0, -75.0)
    assert region.contains(41.0, -73.0)
    assert not region.contains(41.0001, -74.0)


def test_location_option_presets() -> None:
    assert LocationOptions() == LocationOptions(
        timeout=8.0, max_age=600.0, high_accuracy=False, fallback_on_timeout=True
    )
    assert LocationOptions.for_watch() == LocationOptions(
        timeout=10.0, max_age=60.0, high_accuracy=True, fallback_on_timeout=False
    )
    fresh = LocationOptions.fresh()
    assert fresh.high_accuracy
    assert fresh.max_age == 0.0


@pytest.mark.parametrize(("timeout", "max_age"), [(0.0, 1.0), (-1.0, 1.0), (1.0, -0.5)])
def test_location_options_validation(timeout: float, max_age: float) -> None:
    with pytest.raises(ValueError):
        LocationOptions(timeout=timeout, max_age=max_age)
