#!/usr/bin/env python3
"""
Command-line navigation calculator.

Usage:
    starcoords course --from 0,0,0 --to 1000000,0,0 --accel 1 --at 5.32
    starcoords where mora-highport --catalog data/mora_system.json --time 24
    starcoords distance mora-highport jump-point --catalog data/mora_system.json --accel 2
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from .config import EngineConfig
from .errors import CoordinateError
from .locations import (
    LocationCatalog,
    get_distance_between_locations,
    get_location_position,
    load_catalog,
    plan_course_between_locations,
)
from .logging_config import setup_logging
from .transit import (
    Course,
    calculate_course,
    move_along_course,
    peak_velocity_kmh,
)
from .units import km_to_au
from .vectors import Position, create_position

logger = logging.getLogger(__name__)


def parse_vector(text: str) -> Position:
    """Parse "x,y,z" (km) into a system-frame position."""
    parts = text.split(",")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"Expected x,y[,z] in km, got {text!r}")
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected numbers, got {text!r}") from None
    try:
        return create_position(*values)
    except CoordinateError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def format_position(position: Position) -> str:
    return f"({position.x:,.1f}, {position.y:,.1f}, {position.z:,.1f}) km"


def print_course(course: Course, at_hours: Optional[float] = None) -> None:
    print(f"Distance:      {course.distance_km:,.0f} km ({km_to_au(course.distance_km):.6f} AU)")
    print(f"Acceleration:  {course.acceleration_g:.2f} g ({course.acceleration_kmh2:,.0f} km/h^2)")
    print(f"Transit time:  {course.total_time_hours:.2f} h")
    print(f"Turnaround:    {course.turnaround_time_hours:.2f} h")
    print(f"Peak velocity: {peak_velocity_kmh(course):,.0f} km/h")
    if at_hours is not None:
        state = move_along_course(course, at_hours)
        print(
            f"At {at_hours:.2f} h: {format_position(state.position)}, "
            f"{state.speed_kmh:,.0f} km/h, {state.phase.value}"
        )


def _load(args: argparse.Namespace, config: EngineConfig,
          parser: argparse.ArgumentParser) -> LocationCatalog:
    path = args.catalog or config.catalog_path
    if path is None:
        parser.error("no catalog given (use --catalog or set STARCOORDS_CATALOG)")
    return load_catalog(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="starcoords",
        description="Positions, distances and flip-and-burn transits in a star system",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    starcoords course --from 0,0,0 --to 1000000,0,0 --accel 1
    starcoords where mora-highport --catalog data/mora_system.json --time 24
        """
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: STARCOORDS_LOG_LEVEL or WARNING)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    course = subparsers.add_parser("course", help="Plan a flip-and-burn between two points")
    course.add_argument("--from", dest="origin", type=parse_vector, required=True,
                        help="Origin x,y,z in km")
    course.add_argument("--to", dest="destination", type=parse_vector, required=True,
                        help="Destination x,y,z in km")
    course.add_argument("--accel", type=float, default=None,
                        help="Acceleration in g (default: config)")
    course.add_argument("--at", type=float, default=None,
                        help="Report ship state this many hours after departure")

    where = subparsers.add_parser("where", help="Absolute position of a catalog location")
    where.add_argument("location", help="Location id or name")
    where.add_argument("--catalog", default=None, help="Star-system catalog JSON")
    where.add_argument("--time", type=float, default=0.0, help="Simulation time (hours)")

    distance = subparsers.add_parser("distance", help="Distance between two catalog locations")
    distance.add_argument("origin", help="Origin location id or name")
    distance.add_argument("destination", help="Destination location id or name")
    distance.add_argument("--catalog", default=None, help="Star-system catalog JSON")
    distance.add_argument("--time", type=float, default=0.0, help="Simulation time (hours)")
    distance.add_argument("--accel", type=float, default=None,
                          help="Also plan a transit at this acceleration (g)")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = EngineConfig.from_env()
        if args.log_level:
            config = replace(config, log_level=args.log_level)
    except CoordinateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(config.log_level_value, config.log_file)

    try:
        if args.command == "course":
            accel = args.accel if args.accel is not None else config.default_acceleration_g
            course = calculate_course(args.origin, args.destination, accel)
            print_course(course, args.at)

        elif args.command == "where":
            catalog = _load(args, config, parser)
            location = catalog.get(args.location)
            position = get_location_position(args.location, catalog, args.time)
            print(f"{location.label} ({location.name}) at t={args.time:.2f} h: "
                  f"{format_position(position)}")

        elif args.command == "distance":
            catalog = _load(args, config, parser)
            distance_km = get_distance_between_locations(
                args.origin, args.destination, catalog, args.time
            )
            print(f"{args.origin} -> {args.destination} at t={args.time:.2f} h: "
                  f"{distance_km:,.0f} km ({km_to_au(distance_km):.4f} AU)")
            if distance_km <= config.position_tolerance_km:
                print("Locations coincide, no transit needed")
            elif args.accel is not None:
                course = plan_course_between_locations(
                    args.origin, args.destination, catalog, args.accel, args.time
                )
                print_course(course)

    except (CoordinateError, FileNotFoundError) as e:
        logger.info(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
