"""
Location Bridge: named catalog locations resolved to absolute positions.

A location (starport, highport, jump point, downport) is anchored to a body.
Two kinds exist:

- FixedLocation: a fixed offset in the parent body's local frame. Surface
  locations are fixed locations with a zero offset.
- OrbitLocation: circles the parent body on its own circular orbit.

Catalogs are validated when they are built, so a bad parent id or a cyclic
parent chain is reported before the simulation runs instead of surfacing
as a wrong position later.

Catalog files use the star-system JSON format:

    {
      "celestialObjects": [
        {"id": "...", "type": "Star", "name": "..."},
        {"id": "...", "type": "Planet", "orbitAU": 2.52, "bearing": 344}
      ],
      "locations": [
        {"id": "...", "name": "...", "parentId": "...", "orbitalAltitudeKm": 400}
      ]
    }
"""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from .errors import (
    BodyNotFoundError,
    CoordinateError,
    LocationNotFoundError,
    ValidationError,
)
from .frames import local_to_system
from .orbits import (
    OrbitalBody,
    get_absolute_position,
    get_orbital_position,
    iter_parent_chain,
)
from .transit import Course, calculate_course
from .units import au_to_km, bearing_to_radians, kepler_period_hours
from .vectors import Position, distance_between, local_frame

logger = logging.getLogger(__name__)


# =============================================================================
# LOCATION KINDS
# =============================================================================

@dataclass(frozen=True)
class Location(ABC):
    """
    A named place anchored to a body.

    Attributes:
        name: Catalog key
        parent_body_id: Id of the body the location is attached to
        label: Display name (defaults to the key)
        location_type: Catalog type ("highport", "jump-point", ...)
    """
    name: str
    parent_body_id: str
    label: str = ""
    location_type: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError("Location name must be a non-empty string")
        if not isinstance(self.parent_body_id, str) or not self.parent_body_id:
            raise ValidationError(f"Location '{self.name}' needs a parent body id")
        if not self.label:
            object.__setattr__(self, "label", self.name)

    @property
    def frame(self) -> str:
        """Local frame of the parent body."""
        return local_frame(self.parent_body_id)

    @abstractmethod
    def local_offset(self, time_hours: float) -> Position:
        """Offset from the parent body, in the parent's local frame."""


@dataclass(frozen=True)
class FixedLocation(Location):
    """Location at a constant offset from its parent body (km)."""
    local_offset_km: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        super().__post_init__()
        if len(self.local_offset_km) != 3:
            raise ValidationError(f"Location '{self.name}': offset must have 3 components")
        # Position validates the components
        offset = Position(*self.local_offset_km, frame=self.frame)
        object.__setattr__(self, "local_offset_km", offset.to_tuple())

    def local_offset(self, time_hours: float) -> Position:
        return Position(*self.local_offset_km, frame=self.frame)


@dataclass(frozen=True)
class OrbitLocation(Location):
    """Location on its own circular orbit around the parent body."""
    orbital_radius_km: float = 0.0
    period_hours: float = 0.0
    phase_at_epoch_rad: float = 0.0

    def __post_init__(self) -> None:
        super().__post_init__()
        # OrbitalBody validates radius, period and phase
        self.as_body()

    def as_body(self) -> OrbitalBody:
        """The orbit expressed as a body so the Orbital Resolver can evaluate it."""
        return OrbitalBody(
            id=f"location:{self.name}",
            parent_id=self.parent_body_id,
            orbital_radius_km=self.orbital_radius_km,
            period_hours=self.period_hours,
            phase_at_epoch_rad=self.phase_at_epoch_rad,
            name=self.label,
            body_type=self.location_type,
        )

    def local_offset(self, time_hours: float) -> Position:
        return get_orbital_position(self.as_body(), time_hours)


# =============================================================================
# CATALOG
# =============================================================================

class LocationCatalog:
    """
    Bodies and locations of one star system, validated on construction.

    Raises on construction:
        ValidationError: Duplicate ids or labels, no origin body, unknown parents
        OrbitChainCycleError: A body's parent chain loops
    """

    def __init__(
        self,
        bodies: Iterable[OrbitalBody],
        locations: Iterable[Location] = (),
        name: str = ""
    ):
        self.name = name
        self.bodies: dict[str, OrbitalBody] = {}
        self.locations: dict[str, Location] = {}

        for body in bodies:
            if body.id in self.bodies:
                raise ValidationError(f"Duplicate body id '{body.id}'")
            self.bodies[body.id] = body
        for location in locations:
            if location.name in self.locations:
                raise ValidationError(f"Duplicate location '{location.name}'")
            self.locations[location.name] = location

        self._validate()

    def _validate(self) -> None:
        origins = [b.id for b in self.bodies.values() if b.is_origin]
        if not origins:
            raise ValidationError(f"Catalog '{self.name}' has no origin body")
        if len(origins) > 1:
            logger.warning(
                f"Catalog '{self.name}' has {len(origins)} origin bodies, "
                f"all placed at the system origin: {origins}"
            )

        for body in self.bodies.values():
            try:
                for _ in iter_parent_chain(body, self.bodies):
                    pass
            except BodyNotFoundError as e:
                logger.warning(f"Catalog '{self.name}': {e}")
                raise ValidationError(str(e)) from e
            except CoordinateError as e:
                logger.warning(f"Catalog '{self.name}': {e}")
                raise

        labels: dict[str, str] = {}
        for location in self.locations.values():
            if location.label in labels:
                message = (
                    f"Locations '{labels[location.label]}' and '{location.name}' "
                    f"share the label '{location.label}'"
                )
                logger.warning(f"Catalog '{self.name}': {message}")
                raise ValidationError(message)
            labels[location.label] = location.name

            if location.parent_body_id not in self.bodies:
                message = (
                    f"Location '{location.name}' is attached to unknown body "
                    f"'{location.parent_body_id}'"
                )
                logger.warning(f"Catalog '{self.name}': {message}")
                raise ValidationError(message)

    def __contains__(self, name: object) -> bool:
        try:
            self.get(name)
        except LocationNotFoundError:
            return False
        return True

    def get(self, name: Any) -> Location:
        """
        Look up a location by catalog key, falling back to its display label.

        Raises:
            LocationNotFoundError: If neither matches
        """
        location = self.locations.get(name)
        if location is not None:
            return location
        for candidate in self.locations.values():
            if candidate.label == name:
                return candidate
        raise LocationNotFoundError(name)

    def body(self, body_id: str) -> OrbitalBody:
        """Look up a body by id."""
        try:
            return self.bodies[body_id]
        except KeyError:
            raise BodyNotFoundError(body_id) from None

    @property
    def location_names(self) -> list[str]:
        return list(self.locations)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LocationCatalog:
        """
        Build a catalog from star-system JSON data.

        Raises:
            ValidationError: If the data is not shaped like a star-system
                record or any entry is invalid
        """
        _require_mapping(data, "Star system")
        name = data.get("name", "")
        bodies = _parse_bodies(_require_list(data, "celestialObjects"))
        locations = [_parse_location(entry) for entry in _require_list(data, "locations")]
        catalog = cls(bodies, locations, name=name)
        logger.debug(
            f"Built catalog '{name}': {len(catalog.bodies)} bodies, "
            f"{len(catalog.locations)} locations"
        )
        return catalog


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{what} must be a JSON object, got {value!r}")
    return value


def _require_list(data: Mapping[str, Any], key: str) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be a list, got {value!r}")
    return value


def _number(entry: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    _require_mapping(entry, f"Value holding '{key}'")
    value = entry.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"'{entry.get('id', '?')}': {key} must be a number, got {value!r}"
        )
    return float(value)


def _require_id(entry: Mapping[str, Any], kind: str) -> str:
    entry_id = entry.get("id")
    if not isinstance(entry_id, str) or not entry_id:
        raise ValidationError(f"{kind} entry without an id: {dict(entry)!r}")
    return entry_id


def _parse_bodies(objects: Iterable[Mapping[str, Any]]) -> list[OrbitalBody]:
    objects = [_require_mapping(o, "Celestial object") for o in objects]
    star = next((o for o in objects if o.get("type") == "Star"), None)
    if star is None:
        raise ValidationError("Star system has no object of type 'Star'")
    star_id = _require_id(star, "Celestial object")

    bodies = [OrbitalBody(
        id=star_id,
        parent_id=None,
        name=star.get("name", star_id),
        body_type="Star",
    )]

    for obj in objects:
        if obj is star:
            continue
        body_id = _require_id(obj, "Celestial object")
        orbit_au = _number(obj, "orbitAU")

        if obj.get("orbitKm") is not None:
            radius_km = _number(obj, "orbitKm")
        else:
            radius_km = au_to_km(orbit_au)

        if obj.get("orbitPeriodHours") is not None:
            period_hours = _number(obj, "orbitPeriodHours")
        else:
            period_hours = kepler_period_hours(orbit_au)

        bodies.append(OrbitalBody(
            id=body_id,
            parent_id=obj.get("parentId") or obj.get("parent") or star_id,
            orbital_radius_km=radius_km,
            period_hours=period_hours,
            phase_at_epoch_rad=bearing_to_radians(_number(obj, "bearing")),
            name=obj.get("name", body_id),
            body_type=obj.get("type", ""),
        ))
    return bodies


def _parse_location(entry: Mapping[str, Any]) -> Location:
    _require_mapping(entry, "Location")
    location_id = _require_id(entry, "Location")
    parent_id = entry.get("parentId") or entry.get("linkedTo")
    if not parent_id:
        raise ValidationError(f"Location '{location_id}' has no parentId or linkedTo")

    common = {
        "name": location_id,
        "parent_body_id": parent_id,
        "label": entry.get("name", location_id),
        "location_type": entry.get("type", ""),
    }

    if entry.get("surface"):
        return FixedLocation(**common)

    offset = entry.get("offsetKm")
    if offset is not None:
        _require_mapping(offset, f"Location '{location_id}': offsetKm")
        return FixedLocation(
            **common,
            local_offset_km=(
                _number(offset, "x"), _number(offset, "y"), _number(offset, "z")
            ),
        )

    if entry.get("orbitKm") is not None:
        radius_km = _number(entry, "orbitKm")
    else:
        radius_km = _number(entry, "orbitalAltitudeKm")
    phase = bearing_to_radians(_number(entry, "bearing"))
    period_hours = _number(entry, "orbitPeriodHours")
    if radius_km < 0:
        raise ValidationError(f"Location '{location_id}': orbital radius must be >= 0")
    if period_hours < 0:
        raise ValidationError(f"Location '{location_id}': orbital period must be >= 0")

    if period_hours > 0:
        return OrbitLocation(
            **common,
            orbital_radius_km=radius_km,
            period_hours=period_hours,
            phase_at_epoch_rad=phase,
        )
    return FixedLocation(
        **common,
        local_offset_km=(radius_km * math.cos(phase), radius_km * math.sin(phase), 0.0),
    )


def load_catalog(path: Union[str, Path]) -> LocationCatalog:
    """
    Load a star-system catalog from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file is not valid JSON or its contents are invalid
    """
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog not found: {path}")

    with open(catalog_path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Catalog {catalog_path} is not valid JSON: {e}") from e

    catalog = LocationCatalog.from_dict(data)
    logger.info(
        f"Loaded catalog '{catalog.name or catalog_path.stem}' from {catalog_path}: "
        f"{len(catalog.bodies)} bodies, {len(catalog.locations)} locations"
    )
    return catalog


# =============================================================================
# BRIDGE OPERATIONS
# =============================================================================

def get_location_position(
    location_name: str,
    catalog: LocationCatalog,
    time_hours: float
) -> Position:
    """
    Absolute position of a named location.

    Args:
        location_name: Catalog key or display label
        catalog: Validated catalog
        time_hours: Simulation time (hours)

    Returns:
        Position in the system frame

    Raises:
        LocationNotFoundError: If the name is not in the catalog
    """
    location = catalog.get(location_name)
    parent = catalog.body(location.parent_body_id)
    offset = location.local_offset(time_hours)
    return local_to_system(offset, parent, catalog.bodies, time_hours)


def get_distance_between_locations(
    name_a: str,
    name_b: str,
    catalog: LocationCatalog,
    time_hours: float
) -> float:
    """Distance between two named locations at a given time (km)."""
    return distance_between(
        get_location_position(name_a, catalog, time_hours),
        get_location_position(name_b, catalog, time_hours),
    )


def get_body_position(
    body_id: str,
    catalog: LocationCatalog,
    time_hours: float
) -> Position:
    """Absolute position of a catalog body by id."""
    return get_absolute_position(catalog.body(body_id), catalog.bodies, time_hours)


def plan_course_between_locations(
    name_a: str,
    name_b: str,
    catalog: LocationCatalog,
    acceleration_g: float,
    departure_time_hours: float = 0.0
) -> Course:
    """
    Flip-and-burn course between two named locations.

    Both endpoints are taken at the departure time; the destination's motion
    during the transit is not led.
    """
    origin = get_location_position(name_a, catalog, departure_time_hours)
    destination = get_location_position(name_b, catalog, departure_time_hours)
    return calculate_course(origin, destination, acceleration_g, departure_time_hours)


def find_nearest_location(
    position: Position,
    catalog: LocationCatalog,
    time_hours: float,
    exclude: Optional[Iterable[str]] = None
) -> tuple[Location, float]:
    """
    Closest catalog location to a system-frame position.

    Returns:
        (location, distance_km)

    Raises:
        ValidationError: If the catalog has no eligible location
    """
    excluded = set(exclude or ())
    best: Optional[tuple[Location, float]] = None
    for name, location in catalog.locations.items():
        if name in excluded:
            continue
        distance = distance_between(
            position, get_location_position(name, catalog, time_hours)
        )
        if best is None or distance < best[1]:
            best = (location, distance)
    if best is None:
        raise ValidationError(f"Catalog '{catalog.name}' has no locations to compare against")
    return best
