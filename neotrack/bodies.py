import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Literal, Mapping, Optional, Tuple

import numpy as np
import pydantic
from pydantic import ConfigDict

from neotrack.constants import JD_J2000
from neotrack.orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)

# Bounds for generated placeholder orbits
FALLBACK_A_RANGE = (1.2, 1.7)  # AU
FALLBACK_E_RANGE = (0.1, 0.4)
FALLBACK_I_RANGE = (0.0, 20.0)  # deg
FALLBACK_PERIOD_RANGE = (300.0, 700.0)  # days

# Used when the asteroid provider fails outright
DEFAULT_ASTEROID_ELEMENTS = OrbitalElements(
    a=1.5, e=0.2, i=10.0, Omega=80.0, omega=60.0, M0=0.0, epoch=JD_J2000, period=500.0
)


class Body(pydantic.BaseModel):
    """
    A body with tabulated heliocentric orbital elements.

    Attributes:
        name: Name of the body (e.g., "Earth", "Apophis")
        id: Catalogue identifier (NAIF id for planets, designation number for small bodies)
        kind: "planet" or "small"
        elements: Orbital elements of the body
        aliases: Other names the body is looked up by
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)  # Allow OrbitalElements (NamedTuple)

    name: str
    id: str
    kind: Literal['planet', 'small']
    elements: OrbitalElements
    aliases: Tuple[str, ...] = ()

    def is_planet(self) -> bool:
        return self.kind == 'planet'

    def is_small_body(self) -> bool:
        return self.kind == 'small'

    def __repr__(self) -> str:
        return f"Body(id={self.id}, name='{self.name}', kind={self.kind})"

    def __str__(self) -> str:
        return f"{self.name} (ID: {self.id})"


def _normalize(identifier) -> str:
    return ' '.join(str(identifier).split()).casefold()


def fallback_elements(identifier, rng: Optional[np.random.Generator] = None) -> OrbitalElements:
    """
    Plausible but arbitrary near-Earth orbit for an unrecognized body.

    The values are visualization filler: a in [1.2, 1.7) AU, e in [0.1, 0.4),
    i in [0, 20) deg, the remaining angles in [0, 360) deg and a period in
    [300, 700) days. Pass a seeded ``numpy.random.Generator`` for
    reproducible output.

    Args:
        identifier: Name or id the caller failed to resolve (only logged)
        rng: Random generator, a fresh unseeded one by default

    Returns:
        OrbitalElements referenced to J2000.0
    """
    if rng is None:
        rng = np.random.default_rng()

    elements = OrbitalElements(
        a=float(rng.uniform(*FALLBACK_A_RANGE)),
        e=float(rng.uniform(*FALLBACK_E_RANGE)),
        i=float(rng.uniform(*FALLBACK_I_RANGE)),
        Omega=float(rng.uniform(0.0, 360.0)),
        omega=float(rng.uniform(0.0, 360.0)),
        M0=float(rng.uniform(0.0, 360.0)),
        epoch=JD_J2000,
        period=float(rng.uniform(*FALLBACK_PERIOD_RANGE)),
    )
    logger.info("Generated fallback elements for unknown body %r", identifier)
    return elements


@dataclass(frozen=True, slots=True)
class ElementsRegistry:
    """
    Read-only table of known bodies.

    Lookups accept the body name, its id or any alias, case-insensitively.
    """
    bodies: Mapping[str, Body]
    index: Mapping[str, str]

    def get(self, identifier) -> Optional[Body]:
        name = self.index.get(_normalize(identifier))
        return None if name is None else self.bodies[name]

    def elements(self, identifier) -> Optional[OrbitalElements]:
        body = self.get(identifier)
        return None if body is None else body.elements

    def planet(self, name: str) -> OrbitalElements:
        body = self.get(name)
        if body is None or not body.is_planet():
            raise ValueError(f"Unknown planet '{name}'")
        return body.elements

    def planets(self) -> Tuple[Body, ...]:
        return tuple(b for b in self.bodies.values() if b.is_planet())

    def small_bodies(self) -> Tuple[Body, ...]:
        return tuple(b for b in self.bodies.values() if b.is_small_body())

    def resolve(self, identifier, rng: Optional[np.random.Generator] = None) -> OrbitalElements:
        """Tabulated elements for a known body, else generated fallback elements."""
        elements = self.elements(identifier)
        if elements is not None:
            return elements
        return fallback_elements(identifier, rng)

    def __contains__(self, identifier) -> bool:
        return _normalize(identifier) in self.index

    def __len__(self) -> int:
        return len(self.bodies)


def load_registry(data_dir: Optional[Path] = None) -> ElementsRegistry:
    """
    Load planets and named small bodies from the CSV files.

    Returns:
        ElementsRegistry with every body found
    """
    # Data directory ships next to this file
    if data_dir is None:
        data_dir = Path(__file__).parent / 'data'
    bodies = {}
    index = {}

    # Configuration for each body type
    body_configs = [
        {
            'filename': 'planets.csv',
            'id_key_options': ['# Planet ID', '#Planet ID', 'Planet ID'],
            'kind': 'planet',
            'required': True,
        },
        {
            'filename': 'small_bodies.csv',
            'id_key_options': ['# Body ID', '#Body ID', 'Body ID'],
            'kind': 'small',
            'required': False,
        },
    ]

    for config in body_configs:
        filepath = data_dir / config['filename']

        if not filepath.exists():
            if config['required']:
                raise FileNotFoundError(f"Missing body data file {filepath}")
            continue

        with open(filepath, 'r', encoding='utf-8') as f:
            reader = csv.DictReader(f)
            for row in reader:
                id_key = next((key for key in config['id_key_options'] if key in row), None)
                if id_key is None:
                    continue

                period = row.get('Period (days)') or None
                elements = OrbitalElements(
                    a=float(row['Semi-Major Axis (AU)']),
                    e=float(row['Eccentricity ()']),
                    i=float(row['Inclination (deg)']),
                    Omega=float(row['Longitude of the Ascending Node (deg)']),
                    omega=float(row['Argument of Periapsis (deg)']),
                    M0=float(row['Mean Anomaly at Epoch (deg)']),
                    epoch=float(row['Epoch (JD)']),
                    period=None if period is None else float(period),
                )

                aliases = tuple(a.strip() for a in (row.get('Aliases') or '').split(';') if a.strip())
                body = Body(
                    name=row['Name'].strip(),
                    id=row[id_key].strip(),
                    kind=config['kind'],
                    elements=elements,
                    aliases=aliases,
                )
                bodies[body.name] = body
                for key in (body.name, body.id, *body.aliases):
                    index[_normalize(key)] = body.name

    logger.debug("Loaded %d bodies from %s", len(bodies), data_dir)
    return ElementsRegistry(bodies=MappingProxyType(bodies), index=MappingProxyType(index))


default_registry = load_registry()
