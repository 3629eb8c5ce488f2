# Configure JAX to use double precision (64-bit floats) throughout the package
import jax
jax.config.update("jax_enable_x64", True)

from .orbital_elements import OrbitalElements

from .constants import (
    # Constants
    KMPAU,
    DAY,
    YEAR,
    JD_UNIX_EPOCH,
    JD_J2000,
    R_EARTH,
    LUNAR_DISTANCE,
    SCENE_UNITS_PER_AU,
)

from .astrodynamics import (
    # Functions
    OrbitalPosition,
    Ephemeris,
    solve_kepler,
    solve_kepler_vec,
    julian_day,
    mean_anomaly,
    true_anomaly,
    rotation_matrix,
    propagate,
    propagate_many,
    orbit_points,
)

from .config import (
    SearchConfig,
    SceneConfig,
    DEFAULT_SEARCH,
    DEFAULT_SCENE,
    make_search_config,
)

from .bodies import (
    # Registry
    Body,
    ElementsRegistry,
    load_registry,
    fallback_elements,
    default_registry,
    DEFAULT_ASTEROID_ELEMENTS,
)

from .approach import (
    # Closest approach
    ClosestApproach,
    TrajectoryPoint,
    Telemetry,
    SearchCancelled,
    search_closest_approach,
    find_closest_approach,
    sample_trajectory,
    scene_units_to_km,
    telemetry,
)

from .neo import (
    # Provider records
    ApproachRecord,
    NeoOrbitalData,
    approaches_from_neo,
    resolve_elements,
)

from .risk import (
    # Approach timing and risk
    ApproachInfo,
    ApproachAssessment,
    ApproachDateError,
    RiskLevel,
    to_unix_seconds,
    analyze_approach,
    classify_risk,
    format_time_until,
    assess_approach,
    assess_approaches,
    next_future_approach,
)

from .deflection import (
    DeflectionParams,
    DeflectionOutcome,
    estimate_deflection_outcome,
)

# Alias for compatibility with the scene code's naming
AU_KM = KMPAU

__all__ = [
    # Constants
    "AU_KM",
    "KMPAU",
    "DAY",
    "YEAR",
    "JD_UNIX_EPOCH",
    "JD_J2000",
    "R_EARTH",
    "LUNAR_DISTANCE",
    "SCENE_UNITS_PER_AU",

    # Named tuples
    "OrbitalElements",
    "OrbitalPosition",
    "Ephemeris",
    "ClosestApproach",
    "TrajectoryPoint",
    "Telemetry",
    "ApproachAssessment",
    "DeflectionOutcome",

    # Propagation
    "solve_kepler",
    "solve_kepler_vec",
    "julian_day",
    "mean_anomaly",
    "true_anomaly",
    "rotation_matrix",
    "propagate",
    "propagate_many",
    "orbit_points",

    # Configuration
    "SearchConfig",
    "SceneConfig",
    "DEFAULT_SEARCH",
    "DEFAULT_SCENE",
    "make_search_config",

    # Registry
    "Body",
    "ElementsRegistry",
    "load_registry",
    "fallback_elements",
    "default_registry",
    "DEFAULT_ASTEROID_ELEMENTS",

    # Closest approach
    "SearchCancelled",
    "search_closest_approach",
    "find_closest_approach",
    "sample_trajectory",
    "scene_units_to_km",
    "telemetry",

    # Provider records
    "ApproachRecord",
    "NeoOrbitalData",
    "approaches_from_neo",
    "resolve_elements",

    # Approach timing and risk
    "ApproachInfo",
    "ApproachDateError",
    "RiskLevel",
    "to_unix_seconds",
    "analyze_approach",
    "classify_risk",
    "format_time_until",
    "assess_approach",
    "assess_approaches",
    "next_future_approach",

    # Deflection
    "DeflectionParams",
    "estimate_deflection_outcome",
]
