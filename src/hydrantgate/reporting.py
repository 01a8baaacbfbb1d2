"""Proximity-gated report submission.

Report storage is owned by an external collaborator (:class:`ReportSink`).
This module only decides whether a report may be created and, if so,
hands over the *target's* coordinates together with the report details.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from hydrantgate.models.asset import GeoPoint
from hydrantgate.models.location import LocationFix
from hydrantgate.models.proximity import ProximityResult
from hydrantgate.models.report import ReportDraft, ReportType
from hydrantgate.proximity import ProximityGate

_logger = logging.getLogger(__name__)


class ReportSink(Protocol):
    """Externally owned report-creation step."""

    async def create_report(self, draft: ReportDraft) -> Mapping[str, Any]:
        ...


class ReportSubmitter:
    """Verify proximity, then create the report through a :class:`ReportSink`."""

    def __init__(self, gate: ProximityGate, sink: ReportSink) -> None:
        self._gate = gate
        self._sink = sink

    async def submit(
        self,
        target: GeoPoint,
        report_type: ReportType | str,
        description: str,
        *,
        candidate_fix: LocationFix | None = None,
        photo: bytes | None = None,
    ) -> tuple[ProximityResult, Mapping[str, Any]]:
        """Create a report for *target* if the reporter is close enough.

        The draft is validated before any location work so that a bad
        report type or empty description fails fast.

        Raises
        ------
        pydantic.ValidationError
            If the report details are invalid.
        DistanceExceededError
            If the reporter is farther than the gate's threshold.
        LocationError
            If a fresh fix was required and could not be acquired.
        """
        draft = ReportDraft(
            latitude=target.latitude,
            longitude=target.longitude,
            type=report_type,
            description=description,
            photo=photo,
        )
        result = await self._gate.require(target, candidate_fix)
        created = await self._sink.create_report(draft)
        _logger.debug("Report of type %s created at %.6f,%.6f", draft.type, draft.latitude, draft.longitude)
        return result, created
