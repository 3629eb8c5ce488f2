"""
Asteroid-Earth geometry over time.

Finds the simulation time of closest approach for the "go to impact" view,
samples the approach trajectory for plotting, and reports the separation
in physical units.
"""
import logging
import math
from typing import Callable, List, NamedTuple, Optional

import jax.numpy as jnp
import numpy as np

from neotrack.astrodynamics import propagate_many
from neotrack.config import DEFAULT_SEARCH, DEFAULT_TRAJECTORY_POINTS, SearchConfig
from neotrack.constants import KMPAU, LUNAR_DISTANCE, SCENE_UNITS_PER_AU
from neotrack.orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)


class SearchCancelled(RuntimeError):
    """Raised when a closest-approach search is cancelled between batches."""


class ClosestApproach(NamedTuple):
    """
    Result of a closest-approach scan.

    Attributes:
        time: Unix time of the selected candidate (s)
        distance: Asteroid-Earth separation at that time (scene units)
        index: Candidate number k, time = start + k*step
        early_exit: True when the scan stopped below the closeness threshold
    """
    time: float
    distance: float
    index: int
    early_exit: bool


class TrajectoryPoint(NamedTuple):
    position: jnp.ndarray  # asteroid [x, y, z] (scene units)
    time: float  # Unix time (s)
    distance_to_earth: float  # (scene units)


class Telemetry(NamedTuple):
    distance_km: float
    distance_ld: float  # lunar distances
    relative_speed_km_s: float
    eta_hours: float


def scene_units_to_km(distance: float, scale: float = SCENE_UNITS_PER_AU) -> float:
    """Convert a scene-unit distance to km."""
    return distance * KMPAU / scale


def _asteroid_orbit(asteroid: OrbitalElements, deflected: bool) -> OrbitalElements:
    return asteroid.deflected() if deflected else asteroid


def separation(asteroid: OrbitalElements, earth: OrbitalElements, times, scale: float = SCENE_UNITS_PER_AU) -> jnp.ndarray:
    """Euclidean asteroid-Earth distance (scene units) at each Unix time."""
    r_ast = propagate_many(asteroid, times, scale).positions
    r_earth = propagate_many(earth, times, scale).positions
    return jnp.linalg.norm(r_ast - r_earth, axis=1)


def search_closest_approach(
    start: float,
    asteroid: OrbitalElements,
    earth: OrbitalElements,
    deflected: bool = False,
    *,
    config: SearchConfig = DEFAULT_SEARCH,
    scale: float = SCENE_UNITS_PER_AU,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> ClosestApproach:
    """
    Fixed-step scan for the time of minimum asteroid-Earth separation.

    Candidates are ``start + k*config.step_seconds`` for
    ``k = 0..config.steps``. The running minimum is tracked with a strict
    comparison, so ties keep the earliest candidate. The scan stops at the
    first candidate closer than ``config.threshold``; that candidate is
    always the running minimum, since no earlier one was below the
    threshold. Without such a candidate the overall minimum is returned.

    Candidates are evaluated in vectorized batches of ``config.chunk_size``.
    ``should_cancel`` is polled before each batch and a true result raises
    SearchCancelled.

    Args:
        start: Unix time of the first candidate (s)
        asteroid: Nominal asteroid elements
        earth: Earth elements
        deflected: Propagate the deflected asteroid orbit instead
        config: Step, horizon, threshold and batch size
        scale: Scene units per AU
        should_cancel: Optional cancellation poll

    Returns:
        ClosestApproach for the selected candidate
    """
    orbit = _asteroid_orbit(asteroid, deflected)
    n_candidates = config.steps + 1
    best_index = 0
    best_distance = math.inf

    for lo in range(0, n_candidates, config.chunk_size):
        if should_cancel is not None and should_cancel():
            raise SearchCancelled(f"Closest-approach search cancelled after {lo} of {n_candidates} candidates")

        k = np.arange(lo, min(lo + config.chunk_size, n_candidates))
        times = start + k * config.step_seconds
        distances = np.asarray(separation(orbit, earth, times, scale))

        close = np.flatnonzero(distances < config.threshold)
        if close.size:
            j = int(close[0])
            logger.debug("Closest-approach scan stopped at candidate %d (%.6f scene units)", lo + j, distances[j])
            return ClosestApproach(time=float(times[j]), distance=float(distances[j]), index=lo + j, early_exit=True)

        j = int(np.argmin(distances))
        if distances[j] < best_distance:
            best_index = lo + j
            best_distance = float(distances[j])

    return ClosestApproach(
        time=float(start + best_index * config.step_seconds),
        distance=best_distance,
        index=best_index,
        early_exit=False,
    )


def find_closest_approach(
    start: float,
    asteroid: OrbitalElements,
    earth: OrbitalElements,
    deflected: bool = False,
    **kwargs,
) -> float:
    """Unix time of closest approach; see search_closest_approach."""
    return search_closest_approach(start, asteroid, earth, deflected, **kwargs).time


def sample_trajectory(
    asteroid: OrbitalElements,
    earth: OrbitalElements,
    start: float,
    stop: float,
    count: int = DEFAULT_TRAJECTORY_POINTS,
    deflected: bool = False,
    scale: float = SCENE_UNITS_PER_AU,
) -> List[TrajectoryPoint]:
    """
    Asteroid positions and Earth distances at `count` evenly spaced times
    from start to stop inclusive, for plotting.
    """
    if count < 2:
        raise ValueError(f"count must be at least 2, got {count}")

    orbit = _asteroid_orbit(asteroid, deflected)
    times = np.linspace(start, stop, count)
    r_ast = propagate_many(orbit, times, scale).positions
    r_earth = propagate_many(earth, times, scale).positions
    distances = np.asarray(jnp.linalg.norm(r_ast - r_earth, axis=1))

    return [
        TrajectoryPoint(position=r_ast[k], time=float(times[k]), distance_to_earth=float(distances[k]))
        for k in range(count)
    ]


def telemetry(
    asteroid: OrbitalElements,
    earth: OrbitalElements,
    t: float,
    relative_speed_km_s: float,
    deflected: bool = False,
    scale: float = SCENE_UNITS_PER_AU,
) -> Telemetry:
    """
    Asteroid-Earth distance at time t in km and lunar distances, with the
    time to cover it at the given relative speed.
    """
    distance = float(separation(_asteroid_orbit(asteroid, deflected), earth, t, scale)[0])
    distance_km = scene_units_to_km(distance, scale)
    eta_hours = distance_km / (relative_speed_km_s * 3600.0) if relative_speed_km_s > 0 else math.inf
    return Telemetry(
        distance_km=distance_km,
        distance_ld=distance_km / LUNAR_DISTANCE,
        relative_speed_km_s=relative_speed_km_s,
        eta_hours=eta_hours,
    )
