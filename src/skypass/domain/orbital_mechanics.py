# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbital mechanics constants and closed-form helpers.

All quantities in km, km/s and seconds unless a suffix says otherwise.
"""
import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class _OrbitalConstants:
    """Standard orbital constants (WGS84 / EGM96 values, km units)."""
    MU_EARTH: float = 398600.4418          # km³/s², gravitational parameter
    R_EARTH: float = 6371.0                # km, mean radius
    J2_EARTH: float = 1.08262668e-3        # zonal harmonics (EGM96, unnormalized)
    J3_EARTH: float = -2.5327e-6
    J4_EARTH: float = -1.6196e-6
    J5_EARTH: float = -2.2730e-7
    J6_EARTH: float = 5.4068e-7
    EARTH_OMEGA: float = 1.99096871e-7     # rad/s, mean motion of the Sun (SSO condition)
    EARTH_ROTATION_RATE: float = 7.2921159e-5  # rad/s, sidereal rotation rate
    # WGS84 ellipsoid
    R_EARTH_EQUATORIAL: float = 6378.137           # km, semi-major axis
    R_EARTH_POLAR: float = 6356.7523142            # km, semi-minor axis
    FLATTENING: float = 1.0 / 298.257223563
    E_SQUARED: float = 0.00669437999014            # first eccentricity squared
    # Third bodies
    MU_SUN: float = 1.32712440018e11       # km³/s²
    MU_MOON: float = 4902.800066           # km³/s²
    AU_KM: float = 1.495978707e8           # km
    SECONDS_PER_DAY: float = 86400.0


OrbitalConstants: _OrbitalConstants = _OrbitalConstants()


def mean_motion_rad_s(semi_major_axis_km: float, mu: float = OrbitalConstants.MU_EARTH) -> float:
    """Keplerian mean motion n = sqrt(mu / a³) in rad/s."""
    if semi_major_axis_km <= 0:
        raise ValueError(f"semi-major axis must be positive, got {semi_major_axis_km}")
    return math.sqrt(mu / semi_major_axis_km**3)


def orbital_period_s(semi_major_axis_km: float, mu: float = OrbitalConstants.MU_EARTH) -> float:
    """Two-body orbital period T = 2π sqrt(a³ / mu) in seconds."""
    if semi_major_axis_km <= 0:
        raise ValueError(f"semi-major axis must be positive, got {semi_major_axis_km}")
    return 2.0 * math.pi * math.sqrt(semi_major_axis_km**3 / mu)


def sso_inclination_deg(altitude_km: float) -> float:
    """
    Calculate Sun-synchronous orbit inclination for a circular orbit.

    Uses the J2 nodal regression condition dΩ/dt = 360°/year:
        cos(i) = -(2 * ω_sun / (3 * J2 * Re²)) * (a^3.5 / √μ)

    Args:
        altitude_km: Altitude above the equatorial radius (km).

    Returns:
        Inclination in degrees (retrograde, > 90°).
    """
    c = OrbitalConstants
    a = altitude_km + c.R_EARTH_EQUATORIAL
    cos_i = -(2 * c.EARTH_OMEGA / (3 * c.J2_EARTH * c.R_EARTH_EQUATORIAL**2)) * (
        a**3.5 / float(np.sqrt(c.MU_EARTH))
    )
    if cos_i < -1.0 or cos_i > 1.0:
        raise ValueError(f"no Sun-synchronous inclination at {altitude_km} km (cos_i={cos_i})")
    return float(np.degrees(np.arccos(cos_i)))


def j2_raan_rate(n: float, a: float, e: float, i_rad: float) -> float:
    """
    J2 secular rate of RAAN.

    dΩ/dt = -3/2 · n · J2 · (R_E/a)² · cos(i) / (1-e²)²

    Args:
        n: Mean motion (rad/s).
        a: Semi-major axis (km).
        e: Eccentricity.
        i_rad: Inclination (radians).

    Returns:
        RAAN rate in rad/s. Negative for prograde, positive for retrograde.
    """
    c = OrbitalConstants
    p_ratio = (c.R_EARTH_EQUATORIAL / a) ** 2
    return float(-1.5 * n * c.J2_EARTH * p_ratio * np.cos(i_rad) / (1 - e**2) ** 2)


def j2_arg_perigee_rate(n: float, a: float, e: float, i_rad: float) -> float:
    """
    J2 secular rate of argument of perigee.

    dω/dt = 3/2 · n · J2 · (R_E/a)² · (2 - 5/2·sin²i) / (1-e²)²

    Zero at the critical inclination (~63.4°).
    """
    c = OrbitalConstants
    p_ratio = (c.R_EARTH_EQUATORIAL / a) ** 2
    return float(1.5 * n * c.J2_EARTH * p_ratio * (2 - 2.5 * np.sin(i_rad) ** 2) / (1 - e**2) ** 2)


def sphere_of_influence_km(
    semi_major_axis_km: float,
    mass_secondary: float,
    mass_primary: float,
) -> float:
    """
    Laplace sphere-of-influence radius r_SOI = a · (m / M)^(2/5).

    Masses may be given in any consistent unit (gravitational parameters
    work as well). Moon about Earth gives ~66,000 km.
    """
    if mass_primary <= 0 or mass_secondary <= 0:
        raise ValueError("masses must be positive")
    return semi_major_axis_km * (mass_secondary / mass_primary) ** 0.4
