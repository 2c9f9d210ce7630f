"""
Vector primitives for the starcoords engine.

Position (km) and Velocity (km/h) are immutable 3D values tagged with the
reference frame they are expressed in:

- "system": absolute frame anchored at the system origin (the star)
- "local:<bodyId>": frame translated to a body's current position

Arithmetic between two tagged values is only allowed when the tags match.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Optional

from .errors import FrameMismatchError, ValidationError
from .units import AU_IN_KM, km_to_au


# =============================================================================
# FRAME TAGS
# =============================================================================

SYSTEM_FRAME = "system"
LOCAL_FRAME_PREFIX = "local:"


def local_frame(body_id: str) -> str:
    """Frame tag for the frame centered on a body."""
    if not isinstance(body_id, str) or not body_id:
        raise ValidationError("Local frame needs a non-empty body id")
    return LOCAL_FRAME_PREFIX + body_id


def frame_body_id(frame: str) -> Optional[str]:
    """
    Parse a frame tag.

    Args:
        frame: "system" or "local:<bodyId>"

    Returns:
        The body id for a local frame, None for the system frame

    Raises:
        ValidationError: If the tag is missing or malformed
    """
    if frame == SYSTEM_FRAME:
        return None
    if isinstance(frame, str) and frame.startswith(LOCAL_FRAME_PREFIX):
        body_id = frame[len(LOCAL_FRAME_PREFIX):]
        if body_id:
            return body_id
    raise ValidationError(f"Invalid frame tag: {frame!r}")


def _check_components(kind: str, values: dict[str, object]) -> dict[str, float]:
    checked = {}
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ValidationError(f"{kind}.{name} must be a number, got {value!r}")
        value = float(value)
        if not math.isfinite(value):
            raise ValidationError(f"{kind}.{name} must be finite, got {value}")
        checked[name] = value
    return checked


def _require_same_frame(a: str, b: str) -> None:
    if a != b:
        raise FrameMismatchError(expected=a, actual=b)


# =============================================================================
# POSITION
# =============================================================================

@dataclass(frozen=True)
class Position:
    """
    A point in space, in kilometers.

    Attributes:
        x: X coordinate (km)
        y: Y coordinate (km)
        z: Z coordinate (km)
        frame: Frame tag the coordinates are expressed in
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    frame: str = SYSTEM_FRAME

    def __post_init__(self) -> None:
        frame_body_id(self.frame)
        checked = _check_components("Position", {"x": self.x, "y": self.y, "z": self.z})
        for name, value in checked.items():
            object.__setattr__(self, name, value)

    def __add__(self, other: Position) -> Position:
        _require_same_frame(self.frame, other.frame)
        return Position(self.x + other.x, self.y + other.y, self.z + other.z, self.frame)

    def __sub__(self, other: Position) -> Position:
        _require_same_frame(self.frame, other.frame)
        return Position(self.x - other.x, self.y - other.y, self.z - other.z, self.frame)

    def __mul__(self, scalar: float) -> Position:
        return Position(self.x * scalar, self.y * scalar, self.z * scalar, self.frame)

    def __rmul__(self, scalar: float) -> Position:
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Position:
        if scalar == 0:
            raise ValidationError("Cannot divide position by zero")
        return Position(self.x / scalar, self.y / scalar, self.z / scalar, self.frame)

    def __neg__(self) -> Position:
        return Position(-self.x, -self.y, -self.z, self.frame)

    @property
    def magnitude(self) -> float:
        """Distance from the frame origin (km)."""
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def distance_to(self, other: Position) -> float:
        """Distance to another position in the same frame (km)."""
        return (self - other).magnitude

    def is_close(self, other: Position, tolerance_km: float = 1e-6) -> bool:
        """Same frame and every component within tolerance_km."""
        if self.frame != other.frame:
            return False
        return (abs(self.x - other.x) <= tolerance_km and
                abs(self.y - other.y) <= tolerance_km and
                abs(self.z - other.z) <= tolerance_km)

    def with_frame(self, frame: str) -> Position:
        """Same components, retagged. Used by frame transforms only."""
        return Position(self.x, self.y, self.z, frame)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def in_au(self) -> tuple[float, float, float]:
        """Components converted to AU."""
        return (km_to_au(self.x), km_to_au(self.y), km_to_au(self.z))

    @classmethod
    def origin(cls, frame: str = SYSTEM_FRAME) -> Position:
        return cls(0.0, 0.0, 0.0, frame)

    def __repr__(self) -> str:
        return f"Position({self.x:.6g}, {self.y:.6g}, {self.z:.6g}, frame={self.frame!r})"


# =============================================================================
# VELOCITY
# =============================================================================

@dataclass(frozen=True)
class Velocity:
    """
    A velocity vector, in km/h.

    Attributes:
        vx: X component (km/h)
        vy: Y component (km/h)
        vz: Z component (km/h)
        frame: Frame tag the components are expressed in
    """
    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0
    frame: str = SYSTEM_FRAME

    def __post_init__(self) -> None:
        frame_body_id(self.frame)
        checked = _check_components("Velocity", {"vx": self.vx, "vy": self.vy, "vz": self.vz})
        for name, value in checked.items():
            object.__setattr__(self, name, value)

    def __add__(self, other: Velocity) -> Velocity:
        _require_same_frame(self.frame, other.frame)
        return Velocity(self.vx + other.vx, self.vy + other.vy, self.vz + other.vz, self.frame)

    def __sub__(self, other: Velocity) -> Velocity:
        _require_same_frame(self.frame, other.frame)
        return Velocity(self.vx - other.vx, self.vy - other.vy, self.vz - other.vz, self.frame)

    def __mul__(self, scalar: float) -> Velocity:
        return Velocity(self.vx * scalar, self.vy * scalar, self.vz * scalar, self.frame)

    def __rmul__(self, scalar: float) -> Velocity:
        return self.__mul__(scalar)

    def __neg__(self) -> Velocity:
        return Velocity(-self.vx, -self.vy, -self.vz, self.frame)

    @property
    def speed(self) -> float:
        """Velocity magnitude (km/h)."""
        return math.sqrt(self.vx**2 + self.vy**2 + self.vz**2)

    def displacement(self, hours: float) -> Position:
        """Distance covered in `hours` at this velocity, as a position offset."""
        return Position(self.vx * hours, self.vy * hours, self.vz * hours, self.frame)

    def with_frame(self, frame: str) -> Velocity:
        return Velocity(self.vx, self.vy, self.vz, frame)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.vx, self.vy, self.vz)

    @classmethod
    def zero(cls, frame: str = SYSTEM_FRAME) -> Velocity:
        return cls(0.0, 0.0, 0.0, frame)

    def __repr__(self) -> str:
        return f"Velocity({self.vx:.6g}, {self.vy:.6g}, {self.vz:.6g}, frame={self.frame!r})"


# =============================================================================
# CONSTRUCTORS AND DISTANCE
# =============================================================================

def create_position(
    x: float,
    y: float,
    z: float = 0.0,
    frame: str = SYSTEM_FRAME,
    unit: str = "km"
) -> Position:
    """
    Create a validated position.

    Args:
        x: X coordinate
        y: Y coordinate
        z: Z coordinate
        frame: Frame tag ("system" or "local:<bodyId>")
        unit: "km" or "au"; AU input is converted to km

    Returns:
        Position in km

    Raises:
        ValidationError: Bad frame tag, unit, or non-finite component
    """
    if frame is None:
        raise ValidationError("Position requires a frame tag")
    if unit == "au":
        components = _check_components("Position", {"x": x, "y": y, "z": z})
        return Position(
            components["x"] * AU_IN_KM,
            components["y"] * AU_IN_KM,
            components["z"] * AU_IN_KM,
            frame,
        )
    if unit != "km":
        raise ValidationError(f"Unknown distance unit: {unit!r}")
    return Position(x, y, z, frame)


def create_velocity(
    vx: float,
    vy: float,
    vz: float = 0.0,
    frame: str = SYSTEM_FRAME
) -> Velocity:
    """Create a validated velocity in km/h."""
    if frame is None:
        raise ValidationError("Velocity requires a frame tag")
    return Velocity(vx, vy, vz, frame)


def distance_between(a: Position, b: Position) -> float:
    """
    Euclidean distance between two positions (km).

    Raises:
        FrameMismatchError: If a and b are expressed in different frames
    """
    return (a - b).magnitude
