from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

import pytest
from pydantic import ValidationError

from hydrantgate.exceptions import DistanceExceededError
from hydrantgate.location import LocationService
from hydrantgate.models.asset import AssetRecord
from hydrantgate.models.location import LocationFix
from hydrantgate.models.report import ReportDraft, ReportStatus, ReportType
from hydrantgate.proximity import ProximityGate
from hydrantgate.reporting import ReportSubmitter

_HYDRANT = AssetRecord(latitude=40.7128, longitude=-74.0060)


def _fix_north_of(meters: float) -> LocationFix:
    return LocationFix(
        latitude=_HYDRANT.latitude + math.degrees(meters / 6_371_000.0),
        longitude=_HYDRANT.longitude,
        accuracy=4.0,
    )


class _RecordingSink:
    def __init__(self) -> None:
        self.drafts: list[ReportDraft] = []

    async def create_report(self, draft: ReportDraft) -> Mapping[str, Any]:
        self.drafts.append(draft)
        return {"id": len(self.drafts), **draft.model_dump(exclude={"photo"})}


class _NoProvider:
    async def get_position(self, **_kwargs: Any) -> LocationFix:
        raise AssertionError("location must not be requested")

    def watch_position(self, *_args: Any, **_kwargs: Any) -> int:  # pragma: no cover
        raise NotImplementedError

    def clear_watch(self, watch_id: int) -> None:  # pragma: no cover
        raise NotImplementedError


def _submitter(sink: _RecordingSink) -> ReportSubmitter:
    return ReportSubmitter(ProximityGate(LocationService(_NoProvider())), sink)


@pytest.mark.asyncio
async def test_accepted_report_carries_target_coordinates() -> None:
    sink = _RecordingSink()
    reporter_fix = _fix_north_of(25.0)

    result, created = await _submitter(sink).submit(
        _HYDRANT,
        ReportType.HYDRANT,
        "  Cap missing, leaking  ",
        candidate_fix=reporter_fix,
    )

    assert result.accepted
    assert created["id"] == 1
    draft = sink.drafts[0]
    assert (draft.latitude, draft.longitude) == (_HYDRANT.latitude, _HYDRANT.longitude)
    assert draft.latitude != reporter_fix.latitude
    assert draft.description == "Cap missing, leaking"
    assert draft.status == ReportStatus.PENDING
    assert draft.photo is None


@pytest.mark.asyncio
async def test_rejected_report_never_reaches_sink() -> None:
    sink = _RecordingSink()

    with pytest.raises(DistanceExceededError):
        await _submitter(sink).submit(_HYDRANT, "hydrant", "Leaking", candidate_fix=_fix_north_of(80.0))

    assert sink.drafts == []


@pytest.mark.asyncio
async def test_invalid_details_fail_before_location_check() -> None:
    sink = _RecordingSink()

    with pytest.raises(ValidationError):
        await _submitter(sink).submit(_HYDRANT, "spaceship", "Leaking", candidate_fix=_fix_north_of(10.0))
    with pytest.raises(ValidationError):
        await _submitter(sink).submit(_HYDRANT, ReportType.HYDRANT, "   ", candidate_fix=_fix_north_of(10.0))

    assert sink.drafts == []


def test_report_type_values() -> None:
    assert {t.value for t in ReportType} == {
        "streetlight",
        "hydrant",
        "pothole",
        "sidewalk",
        "graffiti",
        "trash",
        "other",
    }


def test_empty_photo_normalized_to_none() -> None:
    draft = ReportDraft(latitude=40.7, longitude=-74.0, type="pothole", description="Deep", photo=b"")

    assert draft.photo is None
    assert draft.type is ReportType.POTHOLE
