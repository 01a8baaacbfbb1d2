"""Device location fix model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BeforeValidator, ConfigDict, Field

from hydrantgate.models.asset import GeoPoint

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_fix_timestamp(value: Any) -> datetime:
    """Convert an epoch timestamp (seconds **or** milliseconds) to a UTC datetime.

    Location providers commonly report milliseconds; datetimes pass
    through, naive ones are assumed to be UTC.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    ts = float(value)
    if ts >= _MS_THRESHOLD:
        ts /= 1000.0
    return datetime.fromtimestamp(ts, tz=UTC)


FixTimestamp = Annotated[datetime, BeforeValidator(parse_fix_timestamp)]


class LocationFix(GeoPoint):
    """A single reported device location.

    Produced only by the location service and never persisted.

    Parameters
    ----------
    latitude, longitude : float
        Reported position in decimal degrees.
    accuracy : float
        Radius of the 95% confidence circle, in metres.
    timestamp : datetime
        When the provider measured the position (UTC).
    """

    model_config = ConfigDict(frozen=True)

    accuracy: float = Field(ge=0.0)
    timestamp: FixTimestamp = Field(default_factory=lambda: datetime.now(UTC))

    def age_seconds(self, now: datetime | None = None) -> float:
        """Seconds elapsed since the fix was measured."""
        current = now or datetime.now(UTC)
        return (current - self.timestamp).total_seconds()
