# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Topocentric observation geometry.

Computes azimuth, elevation, and slant range from a ground station
to a satellite given in ECEF coordinates, via the South-East-Zenith
(SEZ) local frame.

"""
import math
from dataclasses import dataclass

import numpy as np

from skypass.domain.coordinate_frames import geodetic_to_ecef
from skypass.domain.errors import InvalidStationError

# Horizontal range (km) below which azimuth is undefined.
_ZENITH_EPS_KM = 1e-9
# |cos(lat)| below which the station sits on a pole and North is undefined.
_POLE_EPS = 1e-12


@dataclass(frozen=True)
class GroundStation:
    """A ground station; read-only input to the pass predictor."""
    name: str
    lat_deg: float
    lon_deg: float
    alt_km: float = 0.0
    min_elevation_deg: float = 5.0
    active: bool = True
    station_id: str = ""

    def __post_init__(self) -> None:
        coords = (self.lat_deg, self.lon_deg, self.alt_km, self.min_elevation_deg)
        if not all(math.isfinite(v) for v in coords):
            raise InvalidStationError(f"station {self.name!r} has non-finite coordinates: {coords}")
        if not -90.0 <= self.lat_deg <= 90.0:
            raise InvalidStationError(f"station {self.name!r} latitude out of range: {self.lat_deg}")
        if not -90.0 <= self.min_elevation_deg <= 90.0:
            raise InvalidStationError(
                f"station {self.name!r} minimum elevation out of range: {self.min_elevation_deg}"
            )
        if not self.station_id:
            object.__setattr__(self, "station_id", self.name)


@dataclass(frozen=True)
class Observation:
    """Topocentric observation: azimuth, elevation, slant range."""
    azimuth_deg: float
    elevation_deg: float
    slant_range_km: float


def _ecef_to_sez(
    range_ecef: tuple[float, float, float],
    lat_rad: float,
    lon_rad: float,
) -> tuple[float, float, float]:
    """
    Rotate an ECEF range vector into the South-East-Zenith frame.

    Returns:
        (S, E, Z) components in km.
    """
    sin_lat = float(np.sin(lat_rad))
    cos_lat = float(np.cos(lat_rad))
    sin_lon = float(np.sin(lon_rad))
    cos_lon = float(np.cos(lon_rad))

    rot = np.array([
        [sin_lat * cos_lon, sin_lat * sin_lon, -cos_lat],
        [-sin_lon, cos_lon, 0.0],
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],
    ])
    sez = rot @ np.array(range_ecef)
    return float(sez[0]), float(sez[1]), float(sez[2])


def station_ecef(station: GroundStation) -> tuple[float, float, float]:
    """Station position in ECEF (km)."""
    return geodetic_to_ecef(station.lat_deg, station.lon_deg, station.alt_km)


def compute_observation(
    station: GroundStation,
    satellite_ecef: tuple[float, float, float],
    station_position_ecef: tuple[float, float, float] | None = None,
) -> Observation:
    """
    Compute topocentric azimuth, elevation, and slant range.

    Azimuth is undefined, and reported as 0°, when the satellite is
    straight overhead (or coincides with the station) and at a polar
    station, where North has no direction. Elevation and slant range
    are unaffected.

    Args:
        station: Ground station with geodetic coordinates.
        satellite_ecef: Satellite ECEF position (x, y, z) in km.
        station_position_ecef: Precomputed station ECEF position, to skip
            the geodetic conversion in sweeps.

    Returns:
        Observation with azimuth [0, 360) clockwise from North,
        elevation [-90, 90], and slant range in km.
    """
    if station_position_ecef is None:
        station_position_ecef = station_ecef(station)

    range_vec = np.array(satellite_ecef) - np.array(station_position_ecef)
    lat_rad = math.radians(station.lat_deg)
    lon_rad = math.radians(station.lon_deg)
    south, east, zenith = _ecef_to_sez(
        (float(range_vec[0]), float(range_vec[1]), float(range_vec[2])), lat_rad, lon_rad,
    )

    slant_range = math.sqrt(south**2 + east**2 + zenith**2)
    horizontal = math.hypot(south, east)

    elevation_deg = math.degrees(math.atan2(zenith, horizontal)) if slant_range > 0.0 else 90.0
    # polar station: azimuth pinned to 0 whatever the stated longitude
    if horizontal < _ZENITH_EPS_KM or abs(math.cos(lat_rad)) < _POLE_EPS:
        azimuth_deg = 0.0
    else:
        azimuth_deg = math.degrees(math.atan2(east, -south)) % 360.0
        if azimuth_deg >= 360.0:
            azimuth_deg = 0.0

    return Observation(
        azimuth_deg=azimuth_deg,
        elevation_deg=elevation_deg,
        slant_range_km=slant_range,
    )
