"""
Units and constants shared by every starcoords module.

Conventions:
- Distances in kilometers
- Times in hours
- Speeds in km/h
- Accelerations in km/h^2 (or g where the name says so)
- Angles in radians; degree "bearings" only appear in catalog files
"""

from __future__ import annotations

import math


# =============================================================================
# CONSTANTS
# =============================================================================

# Kilometers in one Astronomical Unit (IAU 2012)
AU_IN_KM = 149_597_870.7

# Velocity gained per hour of 1g burn (km/h per hour, i.e. km/h^2).
# This is the game's 1g unit and is used for every transit calculation.
KM_PER_HOUR_1G = 35_280.0

# Calendar year used for orbital period estimates
HOURS_PER_YEAR = 8760.0

TWO_PI = 2.0 * math.pi


# =============================================================================
# CONVERSIONS
# =============================================================================

def au_to_km(au: float) -> float:
    """Convert Astronomical Units to kilometers."""
    return au * AU_IN_KM


def km_to_au(km: float) -> float:
    """Convert kilometers to Astronomical Units."""
    return km / AU_IN_KM


def g_to_kmh2(acceleration_g: float) -> float:
    """Convert an acceleration in g to km/h^2."""
    return acceleration_g * KM_PER_HOUR_1G


def bearing_to_radians(bearing_deg: float) -> float:
    """Convert a catalog bearing (degrees) to radians."""
    return math.radians(bearing_deg)


def kepler_period_hours(orbit_au: float) -> float:
    """
    Estimate a circular orbital period from its radius.

    Kepler's third law for a one-solar-mass primary: P^2 = a^3, with P in
    years and a in AU.

    Args:
        orbit_au: Orbital radius in AU

    Returns:
        Orbital period in hours (one year for non-positive radii)
    """
    if orbit_au <= 0:
        return HOURS_PER_YEAR
    return math.sqrt(orbit_au ** 3) * HOURS_PER_YEAR
