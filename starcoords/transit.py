"""
Transit Planner: constant-acceleration "flip-and-burn" courses.

A ship accelerates at a constant rate toward its destination for the first
half of the distance, flips, and decelerates at the same rate for the
second half, arriving at rest. Straight-line path, no gravity.

Closed form, with d the distance (km) and a the acceleration (km/h^2):
- total time      t = 2 * sqrt(d / a)
- turnaround      t / 2, at the geometric midpoint
- peak velocity   a * t / 2
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import numpy as np

from .errors import FrameMismatchError, ValidationError
from .units import g_to_kmh2
from .vectors import Position, Velocity, distance_between


# =============================================================================
# ENUMS AND DATACLASSES
# =============================================================================

class TransitPhase(Enum):
    """Where a ship is within a flip-and-burn course."""
    NOT_STARTED = "not_started"
    ACCELERATING = "accelerating"
    DECELERATING = "decelerating"
    ARRIVED = "arrived"


@dataclass(frozen=True)
class Course:
    """
    An immutable flip-and-burn course between two points.

    Created once per transit order and never mutated; evaluate it at any
    elapsed time with move_along_course.

    Attributes:
        origin_position: Departure point
        destination_position: Arrival point (same frame as origin)
        acceleration_g: Burn acceleration in g
        departure_time_hours: Simulation time the burn starts
        distance_km: Straight-line distance (derived)
        acceleration_kmh2: Burn acceleration in km/h^2 (derived)
        total_time_hours: Time from departure to arrival (derived)
        turnaround_time_hours: Elapsed time of the flip (derived)
    """
    origin_position: Position
    destination_position: Position
    acceleration_g: float
    departure_time_hours: float = 0.0
    distance_km: float = field(init=False)
    acceleration_kmh2: float = field(init=False)
    total_time_hours: float = field(init=False)
    turnaround_time_hours: float = field(init=False)

    def __post_init__(self) -> None:
        """Validate inputs and precompute the flip-and-burn timings."""
        if self.origin_position.frame != self.destination_position.frame:
            raise FrameMismatchError(
                expected=self.origin_position.frame,
                actual=self.destination_position.frame,
            )
        _check_acceleration(self.acceleration_g)
        if (isinstance(self.departure_time_hours, bool)
                or not isinstance(self.departure_time_hours, (int, float))
                or not math.isfinite(self.departure_time_hours)):
            raise ValidationError(
                f"Departure time must be a finite number, got {self.departure_time_hours!r}"
            )

        distance = distance_between(self.origin_position, self.destination_position)
        accel = g_to_kmh2(self.acceleration_g)
        total = 2.0 * math.sqrt(distance / accel)

        object.__setattr__(self, "distance_km", distance)
        object.__setattr__(self, "acceleration_kmh2", accel)
        object.__setattr__(self, "total_time_hours", total)
        object.__setattr__(self, "turnaround_time_hours", total / 2.0)

    @property
    def frame(self) -> str:
        return self.origin_position.frame

    @property
    def direction(self) -> Position:
        """Unit vector from origin to destination (zero for a zero-length course)."""
        if self.distance_km == 0:
            return Position.origin(self.frame)
        return (self.destination_position - self.origin_position) / self.distance_km

    @property
    def midpoint(self) -> Position:
        """Turnaround point."""
        return self.origin_position + (
            self.destination_position - self.origin_position) * 0.5


@dataclass(frozen=True)
class TransitState:
    """Position and velocity of a ship at one point along a course."""
    position: Position
    velocity: Velocity
    elapsed_hours: float
    phase: TransitPhase

    @property
    def speed_kmh(self) -> float:
        return self.velocity.speed


def _check_hours(what: str, hours: float) -> None:
    # +/-inf are allowed: they clamp to the course ends
    if isinstance(hours, bool) or not isinstance(hours, (int, float)) or math.isnan(hours):
        raise ValidationError(f"{what} must be a number, got {hours!r}")


def _check_acceleration(acceleration_g: float) -> None:
    if isinstance(acceleration_g, bool) or not isinstance(acceleration_g, (int, float)):
        raise ValidationError(f"Acceleration must be a number, got {acceleration_g!r}")
    if not math.isfinite(acceleration_g) or acceleration_g <= 0:
        raise ValidationError(
            f"Acceleration must be a positive finite number of g, got {acceleration_g}"
        )


# =============================================================================
# COURSE PLANNING
# =============================================================================

def calculate_course(
    origin: Position,
    destination: Position,
    acceleration_g: float,
    departure_time_hours: float = 0.0
) -> Course:
    """
    Plan a flip-and-burn course.

    Args:
        origin: Departure point
        destination: Arrival point, same frame as origin
        acceleration_g: Burn acceleration in g (> 0)
        departure_time_hours: Simulation time the burn starts

    Returns:
        Course with precomputed distance, total and turnaround times

    Raises:
        ValidationError: Acceleration <= 0 or non-finite
        FrameMismatchError: Origin and destination in different frames
    """
    return Course(
        origin_position=origin,
        destination_position=destination,
        acceleration_g=acceleration_g,
        departure_time_hours=departure_time_hours,
    )


def flip_and_burn_time(distance_km: float, acceleration_g: float) -> float:
    """
    Time to cover a distance with a symmetric flip-and-burn.

    t = 2 * sqrt(d / a)

    Args:
        distance_km: Distance to cover (km)
        acceleration_g: Burn acceleration in g

    Returns:
        Transit time in hours
    """
    _check_acceleration(acceleration_g)
    if not math.isfinite(distance_km) or distance_km < 0:
        raise ValidationError(f"Distance must be a finite number >= 0, got {distance_km}")
    return 2.0 * math.sqrt(distance_km / g_to_kmh2(acceleration_g))


def get_time_to_destination(course: Course) -> float:
    """Total transit time of a course (hours)."""
    return course.total_time_hours


def arrival_time_hours(course: Course) -> float:
    """Simulation time at which the ship arrives."""
    return course.departure_time_hours + course.total_time_hours


def has_arrived(course: Course, time_hours: float) -> bool:
    """True once the simulation clock has reached the arrival time."""
    _check_hours("Simulation time", time_hours)
    return time_hours >= arrival_time_hours(course)


def peak_velocity_kmh(course: Course) -> float:
    """Speed at the turnaround point (km/h)."""
    return course.acceleration_kmh2 * course.turnaround_time_hours


# =============================================================================
# COURSE EVALUATION
# =============================================================================

def move_along_course(course: Course, elapsed_hours: float) -> TransitState:
    """
    Ship position and velocity a given time after departure.

    Piecewise kinematics:
    - elapsed <= t/2: s = a*e^2 / 2, v = a*e
    - elapsed >  t/2: s = d - a*(t - e)^2 / 2, v = a*(t - e)

    Clamped at both ends: before departure the ship is at the origin at
    rest, after arrival it is at the destination at rest.

    Args:
        course: Planned course
        elapsed_hours: Time since departure (hours)

    Returns:
        TransitState with position, velocity and phase
    """
    _check_hours("Elapsed time", elapsed_hours)

    frame = course.frame
    total = course.total_time_hours

    if elapsed_hours <= 0:
        return TransitState(
            position=course.origin_position,
            velocity=Velocity.zero(frame),
            elapsed_hours=float(elapsed_hours),
            phase=TransitPhase.NOT_STARTED,
        )
    if elapsed_hours >= total:
        return TransitState(
            position=course.destination_position,
            velocity=Velocity.zero(frame),
            elapsed_hours=float(elapsed_hours),
            phase=TransitPhase.ARRIVED,
        )

    a = course.acceleration_kmh2
    if elapsed_hours <= course.turnaround_time_hours:
        covered = 0.5 * a * elapsed_hours ** 2
        speed = a * elapsed_hours
        phase = TransitPhase.ACCELERATING
    else:
        remaining = total - elapsed_hours
        covered = course.distance_km - 0.5 * a * remaining ** 2
        speed = a * remaining
        phase = TransitPhase.DECELERATING

    direction = course.direction
    position = course.origin_position + direction * covered
    velocity = Velocity(
        direction.x * speed,
        direction.y * speed,
        direction.z * speed,
        frame,
    )
    return TransitState(
        position=position,
        velocity=velocity,
        elapsed_hours=float(elapsed_hours),
        phase=phase,
    )


def position_at_time(course: Course, time_hours: float) -> TransitState:
    """Evaluate a course at an absolute simulation time."""
    _check_hours("Simulation time", time_hours)
    return move_along_course(course, time_hours - course.departure_time_hours)


def sample_course(course: Course, num_samples: int = 50) -> np.ndarray:
    """
    Sample positions evenly over a course.

    Args:
        course: Planned course
        num_samples: Number of samples including both endpoints (>= 2)

    Returns:
        Array of shape (num_samples, 4): elapsed hours, x, y, z (km)
    """
    if num_samples < 2:
        raise ValidationError("sample_course needs at least 2 samples")

    times = np.linspace(0.0, course.total_time_hours, num_samples)
    samples = np.empty((num_samples, 4))
    for i, t in enumerate(times):
        state = move_along_course(course, float(t))
        samples[i] = (t, state.position.x, state.position.y, state.position.z)
    return samples


# =============================================================================
# SHIP TEMPLATES
# =============================================================================

def acceleration_g_from_template(template: Mapping[str, Any]) -> float:
    """
    Read a ship template's thrust rating (in g).

    Args:
        template: Ship template record with a "thrust" field

    Returns:
        Acceleration in g

    Raises:
        ValidationError: Missing, non-numeric or non-positive thrust
    """
    if "thrust" not in template:
        raise ValidationError(
            f"Ship template '{template.get('name', 'unknown')}' has no thrust rating"
        )
    thrust = template["thrust"]
    _check_acceleration(thrust)
    return float(thrust)
