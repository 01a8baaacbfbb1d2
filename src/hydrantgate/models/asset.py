"""Asset and geometry models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)


class AssetRecord(GeoPoint):
    """A geocoded infrastructure asset (e.g. a fire hydrant).

    Records are only created by the parser after their coordinates
    passed both the global range check and the dataset's admissible
    region, and are immutable afterwards.
    """


class BoundingBox(BaseModel):
    """Latitude/longitude rectangle with inclusive edges.

    No antimeridian wraparound: ``west`` must not exceed ``east``.

    Parameters
    ----------
    north, south : float
        Latitude edges, ``south <= north``.
    east, west : float
        Longitude edges, ``west <= east``.
    """

    model_config = ConfigDict(frozen=True)

    north: float
    south: float
    east: float
    west: float

    @model_validator(mode="after")
    def _check_orientation(self) -> BoundingBox:
        if self.south > self.north:
            raise ValueError(f"south ({self.south}) must not exceed north ({self.north})")
        if self.west > self.east:
            raise ValueError(f"west ({self.west}) must not exceed east ({self.east})")
        return self

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east
