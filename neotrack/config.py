from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from neotrack.constants import SCENE_UNITS_PER_AU

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_SEARCH_STEP_SECONDS = 1800.0  # 30 minute candidate spacing
DEFAULT_SEARCH_STEPS = 2000  # candidates are start + k*step for k = 0..steps
DEFAULT_CLOSE_THRESHOLD = 0.05  # scene units, "close enough" to stop scanning
DEFAULT_SEARCH_CHUNK = 250  # candidates evaluated per vectorized batch
DEFAULT_ORBIT_POINTS = 360
DEFAULT_TRAJECTORY_POINTS = 200


@dataclass(frozen=True, slots=True)
class SearchConfig:
    step_seconds: float = DEFAULT_SEARCH_STEP_SECONDS
    steps: int = DEFAULT_SEARCH_STEPS
    threshold: float = DEFAULT_CLOSE_THRESHOLD
    chunk_size: int = DEFAULT_SEARCH_CHUNK

    @property
    def horizon_seconds(self) -> float:
        return self.step_seconds * self.steps


@dataclass(frozen=True, slots=True)
class SceneConfig:
    scene_units_per_au: float = SCENE_UNITS_PER_AU
    orbit_points: int = DEFAULT_ORBIT_POINTS
    trajectory_points: int = DEFAULT_TRAJECTORY_POINTS


DEFAULT_SEARCH = SearchConfig()
DEFAULT_SCENE = SceneConfig()


def make_search_config(
    step_seconds: Optional[float] = None,
    steps: Optional[int] = None,
    threshold: Optional[float] = None,
    *,
    chunk_size: Optional[int] = None,
) -> SearchConfig:
    """Normalize CLI-style inputs into a SearchConfig."""
    step = DEFAULT_SEARCH_STEP_SECONDS if step_seconds is None or step_seconds <= 0 else float(step_seconds)
    n = DEFAULT_SEARCH_STEPS if steps is None or steps < 0 else int(steps)
    thresh = DEFAULT_CLOSE_THRESHOLD if threshold is None or threshold < 0 else float(threshold)
    chunk = DEFAULT_SEARCH_CHUNK if chunk_size is None or chunk_size < 1 else int(chunk_size)
    return SearchConfig(step_seconds=step, steps=n, threshold=thresh, chunk_size=chunk)
