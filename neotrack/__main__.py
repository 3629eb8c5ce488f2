"""
Command-line interface for neotrack.

Usage:
    # Heliocentric position of a planet or asteroid now
    python -m neotrack position Earth

    # Closed orbit ellipse with 90 segments
    python -m neotrack orbit Apophis --count 90

    # "Go to impact": time of closest approach to Earth
    python -m neotrack impact Apophis --start 1861920000 --deflected

    # Risk level of a close approach
    python -m neotrack risk "2029-Apr-13 21:46" --miss-km 38000
"""

import argparse
import json
import logging
import re
import sys
import time
from typing import List, Optional

import numpy as np

from neotrack.approach import search_closest_approach, scene_units_to_km
from neotrack.astrodynamics import orbit_points, propagate
from neotrack.bodies import default_registry
from neotrack.config import DEFAULT_SCENE, make_search_config
from neotrack.risk import analyze_approach, classify_risk, format_time_until


def _cmd_position(args) -> dict:
    elements = default_registry.resolve(args.body)
    t = time.time() if args.time is None else args.time
    pos = propagate(elements, t, scale=args.scale)
    return {
        "body": args.body,
        "time": t,
        "position": np.asarray(pos.position).tolist(),
        "true_anomaly_rad": pos.true_anomaly,
        "radius_au": pos.radius,
    }


def _cmd_orbit(args) -> dict:
    elements = default_registry.resolve(args.body)
    points = orbit_points(elements, args.count, args.scale)
    return {"body": args.body, "points": np.asarray(points).tolist()}


def _cmd_impact(args) -> dict:
    asteroid = default_registry.resolve(args.asteroid)
    earth = default_registry.planet('Earth')
    start = time.time() if args.start is None else args.start
    config = make_search_config(args.step, args.steps, args.threshold)
    result = search_closest_approach(start, asteroid, earth, args.deflected, config=config, scale=args.scale)
    return {
        "asteroid": args.asteroid,
        "deflected": args.deflected,
        "time": result.time,
        "distance_scene": result.distance,
        "distance_km": scene_units_to_km(result.distance, args.scale),
        "early_exit": result.early_exit,
        "in": format_time_until(result.time - start),
    }


UNIX_SECONDS_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _approach_time(text: str):
    """Unix seconds when the argument is a plain number, otherwise the date string."""
    if UNIX_SECONDS_PATTERN.fullmatch(text.strip()):
        return float(text)
    return text


def _cmd_risk(args) -> dict:
    now = time.time() if args.now is None else args.now
    info = analyze_approach(args.date, now, args.precision)
    return {
        "approach": info.model_dump(),
        "risk": classify_risk(info, args.miss_km).value,
        "countdown": format_time_until(info.time_until),
    }


def _cmd_bodies(args) -> dict:
    return {
        body.name: {"id": body.id, "kind": body.kind, "elements": body.elements._asdict()}
        for body in default_registry.bodies.values()
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m neotrack",
        description="Keplerian positions, closest approaches and risk levels for near-Earth asteroids.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase logging verbosity (-v info, -vv debug).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    position = subparsers.add_parser("position", help="Heliocentric position of a body at a time")
    position.add_argument("body", help="Body name, id or alias (unknown names get generated elements)")
    position.add_argument("--time", type=float, default=None, help="Unix time in seconds (default: now)")
    position.set_defaults(func=_cmd_position)

    orbit = subparsers.add_parser("orbit", help="Closed loop of points tracing an orbit")
    orbit.add_argument("body", help="Body name, id or alias")
    orbit.add_argument("--count", type=int, default=DEFAULT_SCENE.orbit_points,
                       help=f"Number of segments (default: {DEFAULT_SCENE.orbit_points})")
    orbit.set_defaults(func=_cmd_orbit)

    impact = subparsers.add_parser("impact", help="Time of closest asteroid-Earth approach")
    impact.add_argument("asteroid", help="Asteroid name, id or alias")
    impact.add_argument("--start", type=float, default=None, help="Unix time to start scanning (default: now)")
    impact.add_argument("--deflected", action="store_true", help="Use the deflected asteroid orbit")
    impact.add_argument("--step", type=float, default=None, help="Candidate spacing in seconds (default: 1800)")
    impact.add_argument("--steps", type=int, default=None, help="Number of steps to scan (default: 2000)")
    impact.add_argument("--threshold", type=float, default=None,
                        help="Stop below this separation in scene units (default: 0.05)")
    impact.set_defaults(func=_cmd_impact)

    risk = subparsers.add_parser("risk", help="Timing and risk level of a close approach")
    risk.add_argument("date", type=_approach_time, help="Approach date (ISO-8601, NeoWs format) or Unix seconds")
    risk.add_argument("--miss-km", type=float, required=True, help="Miss distance in km")
    risk.add_argument("--now", type=float, default=None, help="Reference Unix time (default: now)")
    risk.add_argument("--precision", choices=("day", "minute", "second"), default="minute",
                      help="Display precision (default: minute)")
    risk.set_defaults(func=_cmd_risk)

    bodies = subparsers.add_parser("bodies", help="List the tabulated bodies")
    bodies.set_defaults(func=_cmd_bodies)

    for sub in (position, orbit, impact):
        sub.add_argument("--scale", type=float, default=DEFAULT_SCENE.scene_units_per_au,
                         help=f"Scene units per AU (default: {DEFAULT_SCENE.scene_units_per_au})")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        result = args.func(args)
    except ValueError as exc:
        parser.error(str(exc))

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
