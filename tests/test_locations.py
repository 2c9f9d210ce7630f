"""
Tests for the Location Bridge.

Tests cover:
1. Location kinds (fixed offset, surface, own orbit)
2. Catalog validation at build time
3. Parsing the star-system JSON format
4. Resolving named locations to absolute positions
5. Distances, course planning and nearest-location queries
"""

import json
import math
from pathlib import Path

import pytest

from starcoords.errors import (
    BodyNotFoundError,
    LocationNotFoundError,
    OrbitChainCycleError,
    ValidationError,
)
from starcoords.locations import (
    FixedLocation,
    LocationCatalog,
    OrbitLocation,
    find_nearest_location,
    get_body_position,
    get_distance_between_locations,
    get_location_position,
    load_catalog,
    plan_course_between_locations,
)
from starcoords.orbits import OrbitalBody, get_absolute_position
from starcoords.units import AU_IN_KM
from starcoords.vectors import Position, distance_between


MORA_CATALOG = Path(__file__).parent.parent / "data" / "mora_system.json"


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def simple_catalog():
    """A 1 AU-ish planet with a zero-offset Highport."""
    bodies = [
        OrbitalBody(id="sol", body_type="Star"),
        OrbitalBody(
            id="terra", parent_id="sol",
            orbital_radius_km=150_000_000, period_hours=8766,
        ),
    ]
    locations = [FixedLocation(name="Highport", parent_body_id="terra")]
    return LocationCatalog(bodies, locations, name="Sol")


@pytest.fixture
def mora():
    return load_catalog(MORA_CATALOG)


@pytest.fixture
def mora_data():
    with open(MORA_CATALOG) as f:
        return json.load(f)


# =============================================================================
# LOCATION KINDS
# =============================================================================

class TestLocationKinds:
    """Tests for FixedLocation and OrbitLocation."""

    def test_fixed_location_offset(self):
        loc = FixedLocation(name="depot", parent_body_id="giant",
                            local_offset_km=(0, 250_000, 1000))
        offset = loc.local_offset(123.0)
        assert offset.frame == "local:giant"
        assert offset.to_tuple() == (0.0, 250_000.0, 1000.0)

    def test_label_defaults_to_name(self):
        assert FixedLocation(name="depot", parent_body_id="giant").label == "depot"

    def test_fixed_location_rejects_bad_offset(self):
        with pytest.raises(ValidationError):
            FixedLocation(name="depot", parent_body_id="giant",
                          local_offset_km=(0, math.nan, 0))

    def test_fixed_location_rejects_short_offset(self):
        with pytest.raises(ValidationError):
            FixedLocation(name="depot", parent_body_id="giant", local_offset_km=(1, 2))

    def test_location_needs_parent(self):
        with pytest.raises(ValidationError):
            FixedLocation(name="nowhere", parent_body_id="")

    def test_orbit_location_moves(self):
        loc = OrbitLocation(name="station", parent_body_id="moon",
                            orbital_radius_km=2000, period_hours=4)
        start = loc.local_offset(0)
        quarter = loc.local_offset(1)
        assert start.to_tuple() == pytest.approx((2000, 0, 0))
        assert quarter.to_tuple() == pytest.approx((0, 2000, 0), abs=1e-9)
        assert start.frame == "local:moon"

    def test_orbit_location_rejects_negative_radius(self):
        with pytest.raises(ValidationError):
            OrbitLocation(name="station", parent_body_id="moon",
                          orbital_radius_km=-1, period_hours=4)

    def test_orbit_location_as_body(self):
        body = OrbitLocation(name="station", parent_body_id="moon",
                             orbital_radius_km=2000, period_hours=4).as_body()
        assert body.parent_id == "moon"
        assert body.period_hours == 4


# =============================================================================
# CATALOG VALIDATION
# =============================================================================

class TestCatalogValidation:
    """Tests for validation when a catalog is built."""

    def test_unknown_location_parent(self):
        with pytest.raises(ValidationError, match="ghost"):
            LocationCatalog(
                [OrbitalBody(id="sol")],
                [FixedLocation(name="Highport", parent_body_id="ghost")],
            )

    def test_unknown_body_parent(self):
        with pytest.raises(ValidationError, match="ghost"):
            LocationCatalog([
                OrbitalBody(id="sol"),
                OrbitalBody(id="terra", parent_id="ghost", orbital_radius_km=1),
            ])

    def test_cycle_detected_at_build_time(self):
        with pytest.raises(OrbitChainCycleError):
            LocationCatalog([
                OrbitalBody(id="sol"),
                OrbitalBody(id="a", parent_id="b", orbital_radius_km=1),
                OrbitalBody(id="b", parent_id="a", orbital_radius_km=1),
            ])

    def test_no_origin_body(self):
        with pytest.raises(ValidationError, match="origin"):
            LocationCatalog([
                OrbitalBody(id="a", parent_id="b"),
                OrbitalBody(id="b", parent_id="a"),
            ])

    def test_duplicate_body(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            LocationCatalog([OrbitalBody(id="sol"), OrbitalBody(id="sol")])

    def test_duplicate_location(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            LocationCatalog(
                [OrbitalBody(id="sol")],
                [FixedLocation(name="x", parent_body_id="sol"),
                 FixedLocation(name="x", parent_body_id="sol")],
            )

    def test_multiple_origins_warn(self, caplog):
        with caplog.at_level("WARNING", logger="starcoords"):
            catalog = LocationCatalog([OrbitalBody(id="a"), OrbitalBody(id="b")])
        assert len(catalog.bodies) == 2
        assert "origin bodies" in caplog.text


# =============================================================================
# PARSING
# =============================================================================

class TestCatalogParsing:
    """Tests for LocationCatalog.from_dict and load_catalog."""

    def test_loads_mora(self, mora):
        assert mora.name == "Mora"
        assert "3124-mainworld" in mora.bodies
        assert len(mora.locations) == 6

    def test_star_is_origin(self, mora):
        star = mora.body("3124-star-dimoph")
        assert star.is_origin

    def test_orbit_au_converted(self, mora):
        assert mora.body("3124-mainworld").orbital_radius_km == pytest.approx(2.52 * AU_IN_KM)

    def test_explicit_period_wins(self, mora):
        assert mora.body("3124-mainworld").period_hours == 27888

    def test_kepler_period_fallback(self, mora):
        expected = 6.8 ** 1.5 * 8760
        assert mora.body("3124-gas-giant").period_hours == pytest.approx(expected)

    def test_orbit_km_wins_over_au(self, mora):
        assert mora.body("3124-moon-tavi").orbital_radius_km == 310_000

    def test_bearing_becomes_phase(self, mora):
        assert mora.body("3124-mainworld").phase_at_epoch_rad == pytest.approx(math.radians(344))

    def test_location_kinds(self, mora):
        assert isinstance(mora.get("mora-downport"), FixedLocation)
        assert isinstance(mora.get("secundus-fuel-depot"), FixedLocation)
        assert isinstance(mora.get("tavi-mining-station"), OrbitLocation)

    def test_linked_to_parent(self, mora):
        assert mora.get("tavi-mining-station").parent_body_id == "3124-moon-tavi"

    def test_missing_star(self, mora_data):
        mora_data["celestialObjects"] = [
            o for o in mora_data["celestialObjects"] if o["type"] != "Star"
        ]
        with pytest.raises(ValidationError, match="Star"):
            LocationCatalog.from_dict(mora_data)

    def test_non_numeric_orbit(self, mora_data):
        mora_data["celestialObjects"][1]["orbitAU"] = "far"
        with pytest.raises(ValidationError, match="orbitAU"):
            LocationCatalog.from_dict(mora_data)

    def test_negative_period(self, mora_data):
        mora_data["celestialObjects"][1]["orbitPeriodHours"] = -5
        with pytest.raises(ValidationError):
            LocationCatalog.from_dict(mora_data)

    def test_negative_location_period(self, mora_data):
        mora_data["locations"][2]["orbitPeriodHours"] = -5
        with pytest.raises(ValidationError, match="exit-jump-space"):
            LocationCatalog.from_dict(mora_data)

    @pytest.mark.parametrize("key", ["orbitKm", "orbitalAltitudeKm"])
    def test_negative_location_radius(self, mora_data, key):
        entry = mora_data["locations"][0]
        entry.pop("orbitalAltitudeKm")
        entry[key] = -400
        with pytest.raises(ValidationError, match="radius"):
            LocationCatalog.from_dict(mora_data)

    def test_negative_radius_on_orbiting_location(self, mora_data):
        mora_data["locations"][4]["orbitKm"] = -2000
        with pytest.raises(ValidationError, match="tavi-mining-station"):
            LocationCatalog.from_dict(mora_data)

    def test_offset_must_be_object(self, mora_data):
        mora_data["locations"][5]["offsetKm"] = [0, 250_000, 1000]
        with pytest.raises(ValidationError, match="offsetKm"):
            LocationCatalog.from_dict(mora_data)

    @pytest.mark.parametrize("key", ["celestialObjects", "locations"])
    def test_entries_must_be_objects(self, mora_data, key):
        mora_data[key].append("3124-stray")
        with pytest.raises(ValidationError, match="3124-stray"):
            LocationCatalog.from_dict(mora_data)

    @pytest.mark.parametrize("key", ["celestialObjects", "locations"])
    def test_sections_must_be_lists(self, mora_data, key):
        mora_data[key] = {"id": "3124-mainworld"}
        with pytest.raises(ValidationError, match=key):
            LocationCatalog.from_dict(mora_data)

    def test_top_level_must_be_object(self, mora_data):
        with pytest.raises(ValidationError):
            LocationCatalog.from_dict([mora_data])

    def test_duplicate_labels_rejected(self, mora_data):
        mora_data["locations"][3]["name"] = "Exit Jump Space"
        with pytest.raises(ValidationError, match="Exit Jump Space"):
            LocationCatalog.from_dict(mora_data)

    def test_location_without_parent(self, mora_data):
        del mora_data["locations"][0]["parentId"]
        with pytest.raises(ValidationError, match="mora-highport"):
            LocationCatalog.from_dict(mora_data)

    def test_location_with_unknown_parent(self, mora_data):
        mora_data["locations"][0]["parentId"] = "3124-nowhere"
        with pytest.raises(ValidationError, match="3124-nowhere"):
            LocationCatalog.from_dict(mora_data)

    def test_load_from_tmp_file(self, tmp_path, mora_data):
        path = tmp_path / "system.json"
        path.write_text(json.dumps(mora_data))
        catalog = load_catalog(path)
        assert catalog.location_names == [e["id"] for e in mora_data["locations"]]

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError, match="not valid JSON"):
            load_catalog(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "missing.json")


# =============================================================================
# LOOKUP
# =============================================================================

class TestLookup:
    """Tests for catalog lookup."""

    def test_lookup_by_key(self, mora):
        assert mora.get("mora-highport").label == "Mora Highport"

    def test_lookup_by_label(self, mora):
        assert mora.get("Mora Highport").name == "mora-highport"

    def test_contains(self, mora):
        assert "jump-point" in mora
        assert "Jump Point" in mora
        assert "Regina Highport" not in mora

    def test_unknown_location(self, mora):
        with pytest.raises(LocationNotFoundError) as exc_info:
            get_location_position("Regina Highport", mora, 0)
        assert "Regina Highport" in str(exc_info.value)

    def test_not_found_is_key_error(self, mora):
        with pytest.raises(KeyError):
            mora.get("nowhere")

    def test_unknown_body(self, mora):
        with pytest.raises(BodyNotFoundError):
            mora.body("3124-nowhere")


# =============================================================================
# POSITIONS
# =============================================================================

class TestLocationPositions:
    """Tests for get_location_position and friends."""

    @pytest.mark.parametrize("t", [0.0, 8766 / 4, 1234.5])
    def test_zero_offset_equals_body_position(self, simple_catalog, t):
        """Highport with a zero offset sits exactly on its body."""
        terra = simple_catalog.body("terra")
        expected = get_absolute_position(terra, simple_catalog.bodies, t)
        assert get_location_position("Highport", simple_catalog, t) == expected

    def test_highport_reference_positions(self, simple_catalog):
        start = get_location_position("Highport", simple_catalog, 0)
        quarter = get_location_position("Highport", simple_catalog, 8766 / 4)
        assert start.to_tuple() == pytest.approx((150_000_000, 0, 0))
        assert quarter.x == pytest.approx(0, abs=1e-3)
        assert quarter.y == pytest.approx(150_000_000)

    def test_result_is_system_frame(self, mora):
        assert get_location_position("jump-point", mora, 10).frame == "system"

    def test_downport_on_mainworld(self, mora):
        t = 500.0
        assert get_location_position("mora-downport", mora, t) == \
            get_body_position("3124-mainworld", mora, t)

    def test_highport_400km_up(self, mora):
        t = 42.0
        world = get_body_position("3124-mainworld", mora, t)
        port = get_location_position("mora-highport", mora, t)
        assert distance_between(world, port) == pytest.approx(400, rel=1e-6)

    def test_mainworld_distance_from_star(self, mora):
        pos = get_body_position("3124-mainworld", mora, 0)
        assert pos.magnitude == pytest.approx(2.52 * AU_IN_KM)
        assert pos.in_au()[0] == pytest.approx(2.52 * math.cos(math.radians(344)))

    def test_fuel_depot_offset(self, mora):
        t = 100.0
        giant = get_body_position("3124-gas-giant", mora, t)
        depot = get_location_position("secundus-fuel-depot", mora, t)
        assert (depot - giant).to_tuple() == pytest.approx((0, 250_000, 1000), abs=1e-3)

    def test_mining_station_orbits_moon(self, mora):
        moon_a = get_body_position("3124-moon-tavi", mora, 0)
        moon_b = get_body_position("3124-moon-tavi", mora, 1.5)
        a = get_location_position("tavi-mining-station", mora, 0) - moon_a
        b = get_location_position("tavi-mining-station", mora, 1.5) - moon_b
        assert a.magnitude == pytest.approx(2000, rel=1e-6)
        assert b.magnitude == pytest.approx(2000, rel=1e-6)
        # Half a period later the station is on the opposite side
        assert a.x == pytest.approx(-b.x, abs=1e-3)

    def test_label_resolves_same_position(self, mora):
        assert get_location_position("Jump Point", mora, 7) == \
            get_location_position("jump-point", mora, 7)


# =============================================================================
# DISTANCES, COURSES, NEAREST
# =============================================================================

class TestBridgeQueries:
    """Tests for distance, course and nearest-location queries."""

    def test_jump_points_3000000km_apart(self, mora):
        d = get_distance_between_locations("jump-point", "exit-jump-space", mora, 0)
        assert d == pytest.approx(3_000_000, rel=1e-6)

    def test_jump_point_distance_constant_over_time(self, mora):
        a = get_distance_between_locations("jump-point", "exit-jump-space", mora, 0)
        b = get_distance_between_locations("jump-point", "exit-jump-space", mora, 5000)
        assert a == pytest.approx(b, rel=1e-6)

    def test_highport_to_jump_point(self, mora):
        d = get_distance_between_locations("mora-highport", "jump-point", mora, 0)
        assert 1_000_000 < d < 2_000_000

    def test_distance_is_symmetric(self, mora):
        ab = get_distance_between_locations("mora-highport", "secundus-fuel-depot", mora, 3)
        ba = get_distance_between_locations("secundus-fuel-depot", "mora-highport", mora, 3)
        assert ab == ba

    def test_plan_course(self, mora):
        course = plan_course_between_locations(
            "mora-highport", "jump-point", mora, 2.0, departure_time_hours=12.0
        )
        assert course.departure_time_hours == 12.0
        assert course.origin_position == get_location_position("mora-highport", mora, 12.0)
        assert course.destination_position == get_location_position("jump-point", mora, 12.0)
        assert course.distance_km == pytest.approx(
            get_distance_between_locations("mora-highport", "jump-point", mora, 12.0)
        )

    def test_plan_course_unknown_location(self, mora):
        with pytest.raises(LocationNotFoundError):
            plan_course_between_locations("mora-highport", "nowhere", mora, 1.0)

    def test_nearest_location(self, mora):
        t = 10.0
        near_jump = get_location_position("jump-point", mora, t) + Position(50, 0, 0)
        location, distance = find_nearest_location(near_jump, mora, t)
        assert location.name == "jump-point"
        assert distance == pytest.approx(50, rel=1e-6)

    def test_nearest_location_with_exclusions(self, mora):
        t = 0.0
        world = get_body_position("3124-mainworld", mora, t)
        location, _ = find_nearest_location(world, mora, t)
        assert location.name == "mora-downport"
        location, distance = find_nearest_location(
            world, mora, t, exclude=["mora-downport"]
        )
        assert location.name == "mora-highport"
        assert distance == pytest.approx(400, rel=1e-6)

    def test_nearest_location_empty_catalog(self):
        catalog = LocationCatalog([OrbitalBody(id="sol")], name="Empty")
        with pytest.raises(ValidationError):
            find_nearest_location(Position(0, 0, 0), catalog, 0)

    def test_body_position_unknown(self, mora):
        with pytest.raises(BodyNotFoundError):
            get_body_position("3124-nowhere", mora, 0)
