"""Coordinate and orbital-mechanics engine for starship operations."""

from .errors import (
    CoordinateError,
    ValidationError,
    FrameMismatchError,
    OrbitChainCycleError,
    LocationNotFoundError,
    BodyNotFoundError,
)

from .units import (
    AU_IN_KM,
    KM_PER_HOUR_1G,
    HOURS_PER_YEAR,
    au_to_km,
    km_to_au,
    g_to_kmh2,
    bearing_to_radians,
    kepler_period_hours,
)

from .vectors import (
    SYSTEM_FRAME,
    Position,
    Velocity,
    local_frame,
    frame_body_id,
    create_position,
    create_velocity,
    distance_between,
)

from .orbits import (
    OrbitalBody,
    OrbitalState,
    PositionCache,
    resolve_body,
    orbital_angle,
    get_orbital_position,
    get_orbital_velocity,
    iter_parent_chain,
    get_absolute_position,
    get_absolute_velocity,
    update_orbiting_body,
)

from .frames import (
    system_to_local,
    local_to_system,
    get_relative_position,
    convert_frame,
    velocity_system_to_local,
    velocity_local_to_system,
)

from .transit import (
    Course,
    TransitPhase,
    TransitState,
    calculate_course,
    flip_and_burn_time,
    get_time_to_destination,
    arrival_time_hours,
    has_arrived,
    peak_velocity_kmh,
    move_along_course,
    position_at_time,
    sample_course,
    acceleration_g_from_template,
)

from .locations import (
    Location,
    FixedLocation,
    OrbitLocation,
    LocationCatalog,
    load_catalog,
    get_location_position,
    get_distance_between_locations,
    get_body_position,
    plan_course_between_locations,
    find_nearest_location,
)

from .config import EngineConfig
from .logging_config import setup_logging

__all__ = [
    # Errors
    "CoordinateError",
    "ValidationError",
    "FrameMismatchError",
    "OrbitChainCycleError",
    "LocationNotFoundError",
    "BodyNotFoundError",
    # Units
    "AU_IN_KM",
    "KM_PER_HOUR_1G",
    "HOURS_PER_YEAR",
    "au_to_km",
    "km_to_au",
    "g_to_kmh2",
    "bearing_to_radians",
    "kepler_period_hours",
    # Vectors
    "SYSTEM_FRAME",
    "Position",
    "Velocity",
    "local_frame",
    "frame_body_id",
    "create_position",
    "create_velocity",
    "distance_between",
    # Orbital resolver
    "OrbitalBody",
    "OrbitalState",
    "PositionCache",
    "resolve_body",
    "orbital_angle",
    "get_orbital_position",
    "get_orbital_velocity",
    "iter_parent_chain",
    "get_absolute_position",
    "get_absolute_velocity",
    "update_orbiting_body",
    # Reference frames
    "system_to_local",
    "local_to_system",
    "get_relative_position",
    "convert_frame",
    "velocity_system_to_local",
    "velocity_local_to_system",
    # Transit planner
    "Course",
    "TransitPhase",
    "TransitState",
    "calculate_course",
    "flip_and_burn_time",
    "get_time_to_destination",
    "arrival_time_hours",
    "has_arrived",
    "peak_velocity_kmh",
    "move_along_course",
    "position_at_time",
    "sample_course",
    "acceleration_g_from_template",
    # Location bridge
    "Location",
    "FixedLocation",
    "OrbitLocation",
    "LocationCatalog",
    "load_catalog",
    "get_location_position",
    "get_distance_between_locations",
    "get_body_position",
    "plan_course_between_locations",
    "find_nearest_location",
    # Configuration
    "EngineConfig",
    "setup_logging",
]
