"""
Orbital Resolver for the starcoords engine.

Bodies move on circular orbits around a parent body, recursively:
star -> planet -> moon -> station. A body's absolute position is the sum of
the orbital offsets along its parent chain, ending at the origin body (the
star), which always sits at (0, 0, 0) in the system frame.

Orbit model:
- angle(t) = 2*pi * (t / period) + phase
- offset(t) = (r*cos(angle), r*sin(angle), 0) in the parent's local frame
- period == 0 means stationary at the phase angle (e.g. a fixed jump point)

All functions take simulation time explicitly; nothing here reads a clock
or keeps state between calls. PositionCache is a helper the caller owns.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Union

from .errors import BodyNotFoundError, OrbitChainCycleError, ValidationError
from .units import TWO_PI
from .vectors import (
    SYSTEM_FRAME,
    Position,
    Velocity,
    local_frame,
)


# =============================================================================
# ORBITAL BODY
# =============================================================================

@dataclass(frozen=True)
class OrbitalBody:
    """
    A body on a circular orbit around its parent.

    Attributes:
        id: Unique body identifier
        parent_id: Id of the body this one orbits (None for the system origin)
        orbital_radius_km: Orbit radius (km)
        period_hours: Orbital period (hours); 0 means stationary
        phase_at_epoch_rad: Angle along the orbit at t = 0 (radians)
        name: Display name
        body_type: Catalog type ("Star", "Planet", "Moon", ...)
    """
    id: str
    parent_id: Optional[str] = None
    orbital_radius_km: float = 0.0
    period_hours: float = 0.0
    phase_at_epoch_rad: float = 0.0
    name: str = ""
    body_type: str = ""

    def __post_init__(self) -> None:
        """Validate orbital parameters."""
        if not isinstance(self.id, str) or not self.id:
            raise ValidationError("Body id must be a non-empty string")
        if self.parent_id is not None and (
                not isinstance(self.parent_id, str) or not self.parent_id):
            raise ValidationError(f"Body '{self.id}': parent id must be a non-empty string")
        if self.parent_id == self.id:
            raise ValidationError(f"Body '{self.id}' cannot orbit itself")
        for name in ("orbital_radius_km", "period_hours", "phase_at_epoch_rad"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(f"{self.id}: {name} must be a number")
            if not math.isfinite(value):
                raise ValidationError(f"{self.id}: {name} must be finite")
            object.__setattr__(self, name, float(value))
        if self.orbital_radius_km < 0:
            raise ValidationError(f"{self.id}: orbital radius must be >= 0")
        if self.period_hours < 0:
            raise ValidationError(f"{self.id}: orbital period must be >= 0")

    @property
    def is_origin(self) -> bool:
        """True for the body the system frame is anchored on."""
        return self.parent_id is None

    @property
    def is_stationary(self) -> bool:
        return self.period_hours == 0

    @property
    def angular_velocity_rad_h(self) -> float:
        """Angular velocity along the orbit (rad/h), 0 when stationary."""
        if self.is_stationary:
            return 0.0
        return TWO_PI / self.period_hours


@dataclass(frozen=True)
class OrbitalState:
    """Absolute position and velocity of a body at one simulation time."""
    body_id: str
    time_hours: float
    position: Position
    velocity: Velocity


BodyRegistry = Mapping[str, OrbitalBody]


def _check_time(time_hours: float) -> float:
    if isinstance(time_hours, bool) or not isinstance(time_hours, (int, float)):
        raise ValidationError(f"Simulation time must be a number, got {time_hours!r}")
    if not math.isfinite(time_hours):
        raise ValidationError(f"Simulation time must be finite, got {time_hours}")
    return float(time_hours)


def resolve_body(body: Union[OrbitalBody, str], bodies: BodyRegistry) -> OrbitalBody:
    """
    Accept a body or a body id and return the body.

    Raises:
        BodyNotFoundError: If an id is given that is not in bodies
    """
    if isinstance(body, OrbitalBody):
        return body
    try:
        return bodies[body]
    except KeyError:
        raise BodyNotFoundError(body) from None


def orbital_angle(body: OrbitalBody, time_hours: float) -> float:
    """Angle along the orbit at time_hours (radians, not wrapped)."""
    time_hours = _check_time(time_hours)
    if body.is_stationary:
        return body.phase_at_epoch_rad
    return TWO_PI * (time_hours / body.period_hours) + body.phase_at_epoch_rad


# =============================================================================
# LOCAL ORBITAL MOTION
# =============================================================================

def get_orbital_position(body: OrbitalBody, time_hours: float) -> Position:
    """
    Offset of a body from its parent at a given time.

    Args:
        body: The orbiting body
        time_hours: Simulation time (hours)

    Returns:
        Position in the parent's local frame. The origin body returns
        (0, 0, 0) in the system frame.
    """
    if body.is_origin:
        _check_time(time_hours)
        return Position.origin(SYSTEM_FRAME)

    angle = orbital_angle(body, time_hours)
    r = body.orbital_radius_km
    return Position(
        r * math.cos(angle),
        r * math.sin(angle),
        0.0,
        local_frame(body.parent_id),
    )


def get_orbital_velocity(body: OrbitalBody, time_hours: float) -> Velocity:
    """
    Velocity of a body relative to its parent (km/h).

    Analytic derivative of the orbital offset:
    v = (-r*w*sin(angle), r*w*cos(angle), 0), w = 2*pi / period.
    """
    if body.is_origin:
        _check_time(time_hours)
        return Velocity.zero(SYSTEM_FRAME)

    frame = local_frame(body.parent_id)
    if body.is_stationary:
        _check_time(time_hours)
        return Velocity.zero(frame)

    angle = orbital_angle(body, time_hours)
    speed = body.orbital_radius_km * body.angular_velocity_rad_h
    return Velocity(-speed * math.sin(angle), speed * math.cos(angle), 0.0, frame)


# =============================================================================
# PARENT CHAIN
# =============================================================================

def iter_parent_chain(body: OrbitalBody, bodies: BodyRegistry) -> Iterator[OrbitalBody]:
    """
    Yield body, its parent, grandparent, ... stopping before the origin body.

    Walks iteratively with a visited-id set.

    Raises:
        OrbitChainCycleError: If an id repeats before the origin is reached
        BodyNotFoundError: If a parent id is missing from bodies
    """
    visited: set[str] = set()
    chain: list[str] = []
    current = body
    while not current.is_origin:
        if current.id in visited:
            chain.append(current.id)
            raise OrbitChainCycleError(chain)
        visited.add(current.id)
        chain.append(current.id)
        yield current

        parent = bodies.get(current.parent_id)
        if parent is None:
            raise BodyNotFoundError(current.parent_id, referenced_by=current.id)
        current = parent


def get_absolute_position(
    body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> Position:
    """
    Absolute position of a body in the system frame.

    Sums the body's orbital offset with those of every ancestor.

    Args:
        body: Body to locate
        bodies: Registry of all bodies, keyed by id
        time_hours: Simulation time (hours)

    Returns:
        Position in the system frame

    Raises:
        OrbitChainCycleError: Parent chain never reaches the origin
        BodyNotFoundError: A parent id is not in bodies
    """
    time_hours = _check_time(time_hours)
    x = y = z = 0.0
    for link in iter_parent_chain(body, bodies):
        offset = get_orbital_position(link, time_hours)
        x += offset.x
        y += offset.y
        z += offset.z
    return Position(x, y, z, SYSTEM_FRAME)


def get_absolute_velocity(
    body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> Velocity:
    """Absolute velocity of a body in the system frame (km/h)."""
    time_hours = _check_time(time_hours)
    vx = vy = vz = 0.0
    for link in iter_parent_chain(body, bodies):
        v = get_orbital_velocity(link, time_hours)
        vx += v.vx
        vy += v.vy
        vz += v.vz
    return Velocity(vx, vy, vz, SYSTEM_FRAME)


def update_orbiting_body(
    body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> OrbitalState:
    """
    Fresh absolute position and instantaneous velocity of a body.

    Meant to be called by the simulation tick loop once per tick.
    """
    return OrbitalState(
        body_id=body.id,
        time_hours=_check_time(time_hours),
        position=get_absolute_position(body, bodies, time_hours),
        velocity=get_absolute_velocity(body, bodies, time_hours),
    )


# =============================================================================
# CALLER-OWNED CACHE
# =============================================================================

class PositionCache:
    """
    Memo of absolute body positions for a single simulation time.

    The engine never uses this itself. The subsystem that advances the
    simulation clock owns an instance; asking for a different time than the
    cached one drops every entry.
    """

    def __init__(self, bodies: BodyRegistry):
        self.bodies = bodies
        self._time_hours: Optional[float] = None
        self._positions: dict[str, Position] = {}

    @property
    def time_hours(self) -> Optional[float]:
        return self._time_hours

    def __len__(self) -> int:
        return len(self._positions)

    def position(self, body_id: str, time_hours: float) -> Position:
        """Absolute position of body_id at time_hours, computed at most once per time."""
        time_hours = _check_time(time_hours)
        if time_hours != self._time_hours:
            self._positions.clear()
            self._time_hours = time_hours

        cached = self._positions.get(body_id)
        if cached is None:
            body = resolve_body(body_id, self.bodies)
            cached = get_absolute_position(body, self.bodies, time_hours)
            self._positions[body_id] = cached
        return cached

    def invalidate(self) -> None:
        """Drop every cached entry."""
        self._positions.clear()
        self._time_hours = None
