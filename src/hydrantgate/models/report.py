"""Report draft handed to the report-creation collaborator."""

from __future__ import annotations

from enum import StrEnum

from pydantic import ConfigDict, Field, field_validator

from hydrantgate.models.asset import GeoPoint


class ReportType(StrEnum):
    STREETLIGHT = "streetlight"
    HYDRANT = "hydrant"
    POTHOLE = "pothole"
    SIDEWALK = "sidewalk"
    GRAFFITI = "graffiti"
    TRASH = "trash"
    OTHER = "other"


class ReportStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class ReportDraft(GeoPoint):
    """A verified report ready for creation.

    ``latitude``/``longitude`` are the target asset's coordinates, never
    the reporter's measured position.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    type: ReportType
    description: str = Field(min_length=1)
    photo: bytes | None = Field(default=None, repr=False)
    status: ReportStatus = ReportStatus.PENDING

    @field_validator("photo")
    @classmethod
    def _empty_photo_is_none(cls, value: bytes | None) -> bytes | None:
        return value or None
