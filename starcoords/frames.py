"""
Reference frame transforms.

A local frame is the system frame translated so its origin sits on a body's
current absolute position. Local frames do not rotate with the body (bodies
carry no spin data), so every transform here is a pure translation.
"""

from __future__ import annotations

from .errors import FrameMismatchError
from .orbits import (
    BodyRegistry,
    OrbitalBody,
    get_absolute_position,
    get_absolute_velocity,
    resolve_body,
)
from .vectors import (
    SYSTEM_FRAME,
    Position,
    Velocity,
    frame_body_id,
    local_frame,
)


def system_to_local(
    position: Position,
    origin_body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> Position:
    """
    Express a system-frame position relative to a body.

    Args:
        position: Position in the system frame
        origin_body: Body the local frame is centered on
        bodies: Registry of all bodies
        time_hours: Simulation time (hours)

    Returns:
        Position tagged "local:<origin_body.id>"

    Raises:
        FrameMismatchError: If position is not in the system frame
    """
    if position.frame != SYSTEM_FRAME:
        raise FrameMismatchError(expected=SYSTEM_FRAME, actual=position.frame)
    origin = get_absolute_position(origin_body, bodies, time_hours)
    return (position - origin).with_frame(local_frame(origin_body.id))


def local_to_system(
    position: Position,
    origin_body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> Position:
    """
    Express a body-local position in the system frame.

    Inverse of system_to_local.

    Raises:
        FrameMismatchError: If position is not tagged "local:<origin_body.id>"
    """
    expected = local_frame(origin_body.id)
    if position.frame != expected:
        raise FrameMismatchError(expected=expected, actual=position.frame)
    origin = get_absolute_position(origin_body, bodies, time_hours)
    return position.with_frame(SYSTEM_FRAME) + origin


def get_relative_position(
    body: OrbitalBody,
    reference_body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> Position:
    """Position of body as seen from reference_body, in reference_body's local frame."""
    absolute = get_absolute_position(body, bodies, time_hours)
    return system_to_local(absolute, reference_body, bodies, time_hours)


def convert_frame(
    position: Position,
    target_frame: str,
    bodies: BodyRegistry,
    time_hours: float
) -> Position:
    """
    Convert a position between any two frames.

    Handles system -> local, local -> system and local -> other local.
    Bodies named by the frame tags are looked up in bodies.
    """
    target_body_id = frame_body_id(target_frame)
    if position.frame == target_frame:
        return position

    source_body_id = frame_body_id(position.frame)
    if source_body_id is None:
        absolute = position
    else:
        absolute = local_to_system(
            position, resolve_body(source_body_id, bodies), bodies, time_hours
        )

    if target_body_id is None:
        return absolute
    return system_to_local(
        absolute, resolve_body(target_body_id, bodies), bodies, time_hours
    )


def velocity_system_to_local(
    velocity: Velocity,
    origin_body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> Velocity:
    """Velocity relative to a moving body (subtracts the body's own velocity)."""
    if velocity.frame != SYSTEM_FRAME:
        raise FrameMismatchError(expected=SYSTEM_FRAME, actual=velocity.frame)
    origin_velocity = get_absolute_velocity(origin_body, bodies, time_hours)
    return (velocity - origin_velocity).with_frame(local_frame(origin_body.id))


def velocity_local_to_system(
    velocity: Velocity,
    origin_body: OrbitalBody,
    bodies: BodyRegistry,
    time_hours: float
) -> Velocity:
    """Inverse of velocity_system_to_local."""
    expected = local_frame(origin_body.id)
    if velocity.frame != expected:
        raise FrameMismatchError(expected=expected, actual=velocity.frame)
    origin_velocity = get_absolute_velocity(origin_body, bodies, time_hours)
    return velocity.with_frame(SYSTEM_FRAME) + origin_velocity
