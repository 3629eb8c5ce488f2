"""
Near-Earth object records as delivered by the NASA NeoWs API.

Fetching is done elsewhere; these models validate the decoded JSON and turn
it into orbital elements and close-approach records. Bad provider data is
never an error here: orbital data that fails validation is replaced by the
registry's elements for the body.
"""
import logging
from typing import Any, List, Literal, Mapping, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from neotrack.bodies import ElementsRegistry, default_registry
from neotrack.orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)


class NeoOrbitalData(BaseModel):
    """
    The `orbital_data` block of a NeoWs object.

    NeoWs encodes numbers as strings; pydantic coerces them. Angles are in
    degrees, the epoch is a Julian Day and the period is in days.
    """
    model_config = ConfigDict(extra='ignore')

    semi_major_axis: float = Field(..., gt=0.0, description="Semi-major axis (AU)")
    eccentricity: float = Field(..., ge=0.0, lt=1.0, description="Eccentricity")
    inclination: float = Field(..., description="Inclination (deg)")
    ascending_node_longitude: float = Field(..., description="Longitude of the ascending node (deg)")
    perihelion_argument: float = Field(..., description="Argument of perihelion (deg)")
    mean_anomaly: float = Field(..., description="Mean anomaly at epoch (deg)")
    epoch_osculation: float = Field(..., description="Osculation epoch (JD)")
    orbital_period: Optional[float] = Field(None, gt=0.0, description="Orbital period (days)")

    def to_elements(self) -> OrbitalElements:
        return OrbitalElements(
            a=self.semi_major_axis,
            e=self.eccentricity,
            i=self.inclination,
            Omega=self.ascending_node_longitude,
            omega=self.perihelion_argument,
            M0=self.mean_anomaly,
            epoch=self.epoch_osculation,
            period=self.orbital_period,
        )


class ApproachRecord(BaseModel):
    """
    One close approach of an asteroid to a planet.

    `close_approach` is either a date string (ISO-8601 or NeoWs
    "2029-Apr-13 21:46") or Unix seconds.
    """
    model_config = ConfigDict(frozen=True)

    close_approach: Union[float, str]
    miss_distance_km: float = Field(..., ge=0.0)
    relative_velocity_km_s: float = Field(0.0, ge=0.0)
    orbiting_body: str = 'Earth'

    @property
    def precision(self) -> Literal['day', 'minute']:
        """Resolution the approach time is known to."""
        if isinstance(self.close_approach, str) and ':' not in self.close_approach:
            return 'day'
        return 'minute'

    @classmethod
    def from_neo(cls, entry: Mapping[str, Any]) -> 'ApproachRecord':
        """
        Build a record from a NeoWs `close_approach_data` entry.

        `epoch_date_close_approach` (milliseconds) is preferred over the
        full date string, which is preferred over the day-only date.
        """
        epoch_ms = entry.get('epoch_date_close_approach')
        if epoch_ms is not None:
            when = float(epoch_ms) / 1000.0
        else:
            when = entry.get('close_approach_date_full') or entry.get('close_approach_date') or ''

        return cls(
            close_approach=when,
            miss_distance_km=(entry.get('miss_distance') or {}).get('kilometers'),
            relative_velocity_km_s=(entry.get('relative_velocity') or {}).get('kilometers_per_second', 0.0),
            orbiting_body=entry.get('orbiting_body') or 'Earth',
        )


def approaches_from_neo(neo: Mapping[str, Any], orbiting_body: Optional[str] = 'Earth') -> List[ApproachRecord]:
    """
    Close-approach records of a NeoWs object, optionally restricted to one
    orbiting body. Entries that fail validation are logged and skipped.
    """
    records = []
    for entry in neo.get('close_approach_data') or []:
        try:
            record = ApproachRecord.from_neo(entry)
        except ValidationError as exc:
            logger.info("Skipping invalid close-approach entry for %s: %d error(s)",
                        neo.get('name', '?'), exc.error_count())
            continue
        if orbiting_body is None or record.orbiting_body == orbiting_body:
            records.append(record)
    return records


def resolve_elements(
    identifier,
    orbital_data: Optional[Mapping[str, Any]] = None,
    registry: Optional[ElementsRegistry] = None,
    rng: Optional[np.random.Generator] = None,
) -> OrbitalElements:
    """
    Orbital elements for an asteroid, always returning something usable.

    Provider data is used when it validates. Otherwise the registry's
    tabulated elements for the identifier are used, and for unknown
    identifiers generated fallback elements.

    Args:
        identifier: NeoWs id, designation or name
        orbital_data: Decoded NeoWs `orbital_data`, or None when unavailable
        registry: Registry to fall back on (default_registry by default)
        rng: Random generator for fallback elements

    Returns:
        OrbitalElements
    """
    if registry is None:
        registry = default_registry

    if orbital_data is not None:
        try:
            return NeoOrbitalData.model_validate(orbital_data).to_elements()
        except ValidationError as exc:
            logger.warning("Invalid orbital data for %r (%d error(s)), using fallback elements",
                           identifier, exc.error_count())

    return registry.resolve(identifier, rng)
