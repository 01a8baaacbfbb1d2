"""Proximity check result model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ProximityResult(BaseModel):
    """Outcome of a proximity check.

    Parameters
    ----------
    accepted : bool
        ``distance_m <= threshold_m``.
    distance_m : float
        Great-circle distance between the fix and the target, in metres.
    threshold_m : float
        Threshold the distance was compared against.
    reacquired : bool
        Whether the gate had to take a fresh fix because the candidate
        was missing or defaulted to the target.
    """

    model_config = ConfigDict(frozen=True)

    accepted: bool
    distance_m: float
    threshold_m: float
    reacquired: bool = False
