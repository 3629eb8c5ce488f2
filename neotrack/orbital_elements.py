"""
Orbital elements representation for the Sun's planets and small bodies.
"""
import math
from typing import NamedTuple, Optional

from neotrack.constants import TWO_PI, YEAR_DAYS

# Applied by a successful deflection
DEFLECTION_ECCENTRICITY_FACTOR = 1.5
DEFLECTION_MAX_ECCENTRICITY = 0.99
DEFLECTION_PERIAPSIS_SHIFT = 10.0  # deg


class OrbitalElements(NamedTuple):
    """
    Keplerian orbital elements of a body orbiting the Sun.

    All angular quantities are in degrees. The tuple is immutable; methods
    that model a change to the orbit return a new value.

    Attributes:
        a: Semi-major axis (AU)
        e: Eccentricity (dimensionless, 0 ≤ e < 1 for elliptical orbits)
        i: Inclination relative to the ecliptic (deg)
        Omega: Longitude of the ascending node (deg)
        omega: Argument of periapsis (deg)
        M0: Mean anomaly at epoch (deg)
        epoch: Julian Day at which the elements are valid
        period: Orbital period (days), or None to derive it from `a`

    Note:
        - Only elliptical orbits (0 ≤ e < 1) are meaningful here
        - Eccentricity is not validated
    """
    a: float  # semi-major axis (AU)
    e: float  # eccentricity
    i: float  # inclination (deg)
    Omega: float  # longitude of ascending node (deg)
    omega: float  # argument of periapsis (deg)
    M0: float  # mean anomaly at epoch (deg)
    epoch: float  # reference epoch (JD)
    period: Optional[float] = None  # orbital period (days)

    def period_days(self) -> float:
        """Orbital period in days, from Kepler's third law when not given."""
        if self.period:
            return self.period
        return YEAR_DAYS * self.a ** 1.5

    def mean_motion(self) -> float:
        """Mean motion in rad/day."""
        if self.period:
            return TWO_PI / self.period
        return TWO_PI / self.a ** 1.5 / YEAR_DAYS

    def deflected(self) -> 'OrbitalElements':
        """
        Elements of the same body after a successful deflection.

        The eccentricity is raised (capped below 1) and the periapsis is
        rotated; every other element is unchanged.
        """
        return self._replace(
            e=min(self.e * DEFLECTION_ECCENTRICITY_FACTOR, DEFLECTION_MAX_ECCENTRICITY),
            omega=self.omega + DEFLECTION_PERIAPSIS_SHIFT,
        )

    def in_radians(self) -> tuple[float, float, float, float]:
        """Return (i, Omega, omega, M0) in radians."""
        return (math.radians(self.i), math.radians(self.Omega),
                math.radians(self.omega), math.radians(self.M0))
