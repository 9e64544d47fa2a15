# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Coordinate frame conversions.

Pure mathematical transformations between ECI, ECEF, and Geodetic frames.

Reference frames:
    ECI: Earth-Centered Inertial (non-rotating)
    ECEF: Earth-Centered Earth-Fixed (rotating with Earth)
    Geodetic: Latitude, Longitude, Altitude (WGS84 ellipsoid)

The ECI→ECEF rotation is a simple Z-axis rotation by the Greenwich
Mean Sidereal Time (GMST) angle. Precession, nutation and polar motion
are ignored: errors of a few km in LEO position, acceptable for mission
design, not for operations. ECEF→Geodetic iterates Bowring's latitude
update on the WGS84 ellipsoid.
"""
import math
from datetime import datetime, timezone

from skypass.domain.orbital_mechanics import OrbitalConstants

Vec3 = tuple[float, float, float]

_J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def as_utc(epoch: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if epoch.tzinfo is None:
        return epoch.replace(tzinfo=timezone.utc)
    return epoch


def gmst_rad(epoch: datetime) -> float:
    """
    Compute Greenwich Mean Sidereal Time for a given UTC epoch.

    Uses the IAU formula based on Julian centuries from J2000.0:
        GMST(°) = 280.46061837 + 360.98564736629 * (JD - 2451545.0)
                  + 0.000387933 * T² - T³/38710000

    Args:
        epoch: UTC datetime (naive values are taken as UTC).

    Returns:
        GMST in radians, normalized to [0, 2π).
    """
    delta = as_utc(epoch) - _J2000
    jd_since_j2000 = delta.total_seconds() / 86400.0
    t_centuries = jd_since_j2000 / 36525.0

    gmst_deg = (
        280.46061837
        + 360.98564736629 * jd_since_j2000
        + 0.000387933 * t_centuries**2
        - t_centuries**3 / 38710000.0
    )
    gmst_deg = gmst_deg % 360.0
    return math.radians(gmst_deg)


def _rotate_z(vec: Vec3, angle_rad: float) -> Vec3:
    """Frame rotation R_z(angle): expresses vec in a frame turned by +angle."""
    cos_t = math.cos(angle_rad)
    sin_t = math.sin(angle_rad)
    return (
        cos_t * vec[0] + sin_t * vec[1],
        -sin_t * vec[0] + cos_t * vec[1],
        vec[2],
    )


def eci_to_ecef(pos_eci: Vec3, gmst_angle_rad: float) -> Vec3:
    """
    Rotate an ECI vector into ECEF by the GMST angle.

        [x_ecef]   [ cos(θ)  sin(θ)  0] [x_eci]
        [y_ecef] = [-sin(θ)  cos(θ)  0] [y_eci]
        [z_ecef]   [   0       0     1] [z_eci]

    Velocities may be passed through the same rotation; the ω×r
    transport term is not applied.
    """
    return _rotate_z(pos_eci, gmst_angle_rad)


def ecef_to_eci(pos_ecef: Vec3, gmst_angle_rad: float) -> Vec3:
    """Inverse of eci_to_ecef: rotate an ECEF vector back by -GMST."""
    return _rotate_z(pos_ecef, -gmst_angle_rad)


def ecef_to_geodetic(pos_ecef: Vec3) -> tuple[float, float, float]:
    """
    Convert ECEF position to geodetic coordinates (WGS84 ellipsoid).

    Args:
        pos_ecef: Position in ECEF frame (x, y, z) in km.

    Returns:
        (latitude_deg, longitude_deg, altitude_km)
        Latitude in [-90, 90], longitude in (-180, 180].
    """
    c = OrbitalConstants
    a = c.R_EARTH_EQUATORIAL
    b = c.R_EARTH_POLAR
    e2 = c.E_SQUARED

    x, y, z = pos_ecef
    p = math.hypot(x, y)
    lon_rad = math.atan2(y, x)

    lat_rad = math.atan2(z, p * (1.0 - e2))
    for _ in range(10):
        sin_lat = math.sin(lat_rad)
        n = a / math.sqrt(1.0 - e2 * sin_lat**2)
        new_lat = math.atan2(z + e2 * n * sin_lat, p)
        if abs(new_lat - lat_rad) < 1e-14:
            lat_rad = new_lat
            break
        lat_rad = new_lat

    sin_lat = math.sin(lat_rad)
    cos_lat = math.cos(lat_rad)
    n = a / math.sqrt(1.0 - e2 * sin_lat**2)

    if abs(cos_lat) > 1e-10:
        alt = p / cos_lat - n
    else:
        alt = abs(z) - b

    return math.degrees(lat_rad), math.degrees(lon_rad), alt


def geodetic_to_ecef(lat_deg: float, lon_deg: float, alt_km: float) -> Vec3:
    """
    Convert geodetic coordinates to ECEF position (WGS84 ellipsoid).

    Inverse of ecef_to_geodetic.

    Returns:
        (x, y, z) in km, ECEF frame.
    """
    c = OrbitalConstants
    a = c.R_EARTH_EQUATORIAL
    e2 = c.E_SQUARED

    lat_rad = math.radians(lat_deg)
    lon_rad = math.radians(lon_deg)
    sin_lat = math.sin(lat_rad)
    cos_lat = math.cos(lat_rad)

    n = a / math.sqrt(1.0 - e2 * sin_lat**2)

    x = (n + alt_km) * cos_lat * math.cos(lon_rad)
    y = (n + alt_km) * cos_lat * math.sin(lon_rad)
    z = (n * (1.0 - e2) + alt_km) * sin_lat
    return x, y, z
