"""
Keplerian propagation of heliocentric orbits.

Solves Kepler's equation, converts orbital elements plus a simulation time
into heliocentric ecliptic positions, and samples the orbit ellipse for
display.
"""
import logging
import math
from functools import lru_cache, partial
from typing import NamedTuple, Tuple

import jax
import jax.numpy as jnp

from .orbital_elements import OrbitalElements
from .constants import DAY, JD_UNIX_EPOCH, SCENE_UNITS_PER_AU, TWO_PI

logger = logging.getLogger(__name__)

KEPLER_TOL = 1e-6  # rad
KEPLER_MAX_ITER = 50


class OrbitalPosition(NamedTuple):
    """
    Position of a body at one instant.

    Attributes:
        position: Heliocentric ecliptic position [x, y, z] in scene units
        true_anomaly: True anomaly (rad)
        radius: Distance from the Sun (AU)
    """
    position: jnp.ndarray  # [x, y, z] (scene units)
    true_anomaly: float  # (rad)
    radius: float  # (AU)


class Ephemeris(NamedTuple):
    """Positions, true anomalies and radii of one body at many instants."""
    positions: jnp.ndarray  # (n, 3) (scene units)
    true_anomaly: jnp.ndarray  # (n,) (rad)
    radius: jnp.ndarray  # (n,) (AU)


def solve_kepler(M: float, e: float, tol: float = KEPLER_TOL, max_iter: int = KEPLER_MAX_ITER) -> float:
    """
    Solve Kepler's equation M = E - e*sin(E) for eccentric anomaly E
    using Newton-Raphson iteration.

    If the iteration cap is reached the last iterate is returned and a
    warning is logged; no error is raised. Eccentricity is not checked.

    Parameters
    ----------
    M : float
        Mean anomaly (rad)
    e : float
        Eccentricity
    tol : float, optional
        Convergence tolerance on the Newton step (rad)
    max_iter : int, optional
        Maximum number of iterations

    Returns
    -------
    E : float
        Eccentric anomaly (rad)
    """
    E = M + e * math.sin(M)
    for _ in range(max_iter):
        dE = (E - e * math.sin(E) - M) / (1.0 - e * math.cos(E))
        E -= dE
        if abs(dE) < tol:
            return E

    logger.warning("Kepler solve did not converge after %d iterations (M=%.6f, e=%.6f)", max_iter, M, e)
    return E


@partial(jax.jit, static_argnames=('max_iter',))
def _newton_kepler(M, e, tol, max_iter):
    # Initial guess: first-order expansion in e
    E0 = M + e * jnp.sin(M)

    def cond_fn(carry):
        _, dE, k = carry
        return (k < max_iter) & jnp.any(jnp.abs(dE) >= tol)

    def body_fn(carry):
        E, _, k = carry
        dE = (E - e * jnp.sin(E) - M) / (1.0 - e * jnp.cos(E))
        return E - dE, dE, k + 1

    E, dE, _ = jax.lax.while_loop(cond_fn, body_fn, (E0, jnp.full_like(E0, jnp.inf), 0))
    return E, jnp.abs(dE) < tol


def solve_kepler_vec(M, e, tol: float = KEPLER_TOL, max_iter: int = KEPLER_MAX_ITER) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """
    Vectorized version of solve_kepler that handles arrays of M and e.

    Iterates until every element has converged or the cap is reached.

    Parameters
    ----------
    M : jnp.ndarray
        Array of mean anomalies (rad)
    e : jnp.ndarray or float
        Eccentricities, broadcast against M
    tol : float, optional
        Tolerance for convergence
    max_iter : int, optional
        Maximum number of iterations

    Returns
    -------
    E : jnp.ndarray
        Array of eccentric anomalies
    converged : jnp.ndarray
        Boolean mask, False where the cap was reached first
    """
    M, e = jnp.broadcast_arrays(jnp.asarray(M, dtype=float), jnp.asarray(e, dtype=float))
    return _newton_kepler(M, e, tol, max_iter)


def julian_day(t):
    """Julian Day of a Unix time t in seconds (UTC)."""
    return t / DAY + JD_UNIX_EPOCH


def mean_anomaly(elements: OrbitalElements, t):
    """
    Mean anomaly (rad) at Unix time t, reduced into [0, 2*pi).

    jnp.mod takes the sign of the divisor, so times before the epoch also
    land in range.
    """
    dt = julian_day(t) - elements.epoch
    M = math.radians(elements.M0) + elements.mean_motion() * dt
    return jnp.mod(M, TWO_PI)


def true_anomaly(E, e):
    """True anomaly from eccentric anomaly using the half-angle relation."""
    beta = e / (1.0 + jnp.sqrt(1.0 - e**2))
    return E + 2.0 * jnp.arctan(beta * jnp.sin(E) / (1.0 - beta * jnp.cos(E)))


def rotation_matrix(i: float, Omega: float, omega: float) -> jnp.ndarray:
    """
    Rotation from the orbital (perifocal) plane to the ecliptic frame.

    Equal to Rz(Omega) @ Rx(i) @ Rz(omega); angles in radians.
    """
    cos_O, sin_O = math.cos(Omega), math.sin(Omega)
    cos_w, sin_w = math.cos(omega), math.sin(omega)
    cos_i, sin_i = math.cos(i), math.sin(i)

    return jnp.array([
        [cos_O * cos_w - sin_O * sin_w * cos_i, -cos_O * sin_w - sin_O * cos_w * cos_i, sin_O * sin_i],
        [sin_O * cos_w + cos_O * sin_w * cos_i, -sin_O * sin_w + cos_O * cos_w * cos_i, -cos_O * sin_i],
        [sin_w * sin_i, cos_w * sin_i, cos_i],
    ], dtype=float)


@jax.jit
def _plane_to_ecliptic(r, nu, rotation):
    # Position in orbital plane, periapsis along +x
    in_plane = jnp.stack([r * jnp.cos(nu), r * jnp.sin(nu), jnp.zeros_like(r)], axis=-1)
    return in_plane @ rotation.T


def _rotation_for(elements: OrbitalElements) -> jnp.ndarray:
    i, Omega, omega, _ = elements.in_radians()
    return rotation_matrix(i, Omega, omega)


def propagate_many(elements: OrbitalElements, times, scale: float = SCENE_UNITS_PER_AU) -> Ephemeris:
    """
    Heliocentric positions of a body at many Unix times.

    Parameters
    ----------
    elements : OrbitalElements
        Orbit of the body
    times : array_like
        Unix times in seconds (UTC)
    scale : float, optional
        Scene units per AU

    Returns
    -------
    Ephemeris
        Positions in scene units, true anomalies and radii in AU
    """
    times = jnp.atleast_1d(jnp.asarray(times, dtype=float))
    e = elements.e

    # Mean anomaly at each time
    M = mean_anomaly(elements, times)

    # Solve for eccentric anomaly
    E, converged = solve_kepler_vec(M, e)
    if not bool(jnp.all(converged)):
        n_bad = int(jnp.sum(~converged))
        logger.warning("Kepler solve did not converge for %d of %d epochs (e=%.6f)", n_bad, times.size, e)

    # True anomaly
    nu = true_anomaly(E, e)

    # Distance
    r = elements.a * (1.0 - e * jnp.cos(E))

    positions = _plane_to_ecliptic(r, nu, _rotation_for(elements)) * scale
    return Ephemeris(positions=positions, true_anomaly=nu, radius=r)


def propagate(elements: OrbitalElements, t: float, scale: float = SCENE_UNITS_PER_AU) -> OrbitalPosition:
    """
    Convert orbital elements to a heliocentric position at Unix time t.

    The result is computed from scratch on every call.

    Examples:
        >>> from neotrack.bodies import default_registry
        >>> earth = default_registry.planet('Earth')
        >>> pos = propagate(earth, 1.7e9)
        >>> pos.radius  # AU
    """
    ephem = propagate_many(elements, t, scale)
    return OrbitalPosition(
        position=ephem.positions[0],
        true_anomaly=float(ephem.true_anomaly[0]),
        radius=float(ephem.radius[0]),
    )


@lru_cache(maxsize=128)
def orbit_points(elements: OrbitalElements, count: int = 360, scale: float = SCENE_UNITS_PER_AU) -> jnp.ndarray:
    """
    Closed loop of points tracing the orbit ellipse.

    True anomaly is split uniformly into `count` steps and the first point
    is repeated at the end, giving `count + 1` rows. The radius comes from
    the conic equation, so no Kepler solve is needed. Results are cached
    per (elements, count, scale).

    Returns:
        Array of shape (count + 1, 3) in scene units
    """
    if count < 1:
        raise ValueError(f"count must be positive, got {count}")

    a, e = elements.a, elements.e
    nu = jnp.arange(count, dtype=float) * (TWO_PI / count)
    r = a * (1.0 - e**2) / (1.0 + e * jnp.cos(nu))

    points = _plane_to_ecliptic(r, nu, _rotation_for(elements)) * scale
    return jnp.concatenate([points, points[:1]], axis=0)
