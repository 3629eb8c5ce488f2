"""
Kinetic-impactor deflection outcome.

Decides whether a velocity change applied ahead of the encounter moves the
asteroid far enough along its track to miss; the answer selects the nominal
or deflected orbit used by the propagator and the closest-approach search.
"""
from typing import Literal, NamedTuple

from pydantic import BaseModel, Field

from neotrack.constants import DAY, R_EARTH


class DeflectionParams(BaseModel):
    """
    Velocity change applied to the asteroid and how early it is applied.

    `direction` is recorded for display only. The outcome estimate treats
    every velocity change as along-track.
    """
    delta_v_m_s: float = Field(..., description="Velocity change imparted (m/s)")
    lead_time_days: float = Field(..., ge=0.0, description="Time between deflection and encounter (days)")
    direction: Literal['along-track', 'cross-track', 'radial'] = Field(
        'along-track', description="Direction of the applied velocity change"
    )


class DeflectionOutcome(NamedTuple):
    along_track_shift_km: float
    avoids_impact: bool


def estimate_deflection_outcome(params: DeflectionParams, encounter_distance_km: float = R_EARTH) -> DeflectionOutcome:
    """
    Linearized along-track displacement s = |dv| * t at the encounter.

    The asteroid is considered to miss when s exceeds the encounter
    distance (one Earth radius by default).
    """
    shift_km = abs(params.delta_v_m_s) * params.lead_time_days * DAY / 1000.0
    return DeflectionOutcome(along_track_shift_km=shift_km, avoids_impact=shift_km > encounter_distance_km)
