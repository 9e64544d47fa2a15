# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Analytical solar ephemeris.

Low-precision Sun position using Meeus "Astronomical Algorithms" Ch. 25 /
Vallado simplified algorithm. Accuracy ~0.01°, sufficient for SRP,
third-body and shadow modeling.
"""
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

from skypass.domain.coordinate_frames import as_utc
from skypass.domain.orbital_mechanics import OrbitalConstants

_J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@dataclass(frozen=True)
class SunPosition:
    """Sun position at a given epoch."""
    position_eci_km: tuple[float, float, float]
    right_ascension_rad: float
    declination_rad: float
    distance_km: float


def julian_centuries_j2000(epoch: datetime) -> float:
    """Julian centuries since J2000.0 (2000-01-01 12:00:00 UTC)."""
    dt_seconds = (as_utc(epoch) - _J2000).total_seconds()
    return dt_seconds / (36525.0 * 86400.0)


def sun_position_eci(epoch: datetime) -> SunPosition:
    """Low-precision analytical solar ephemeris.

    Args:
        epoch: UTC datetime for Sun position computation.

    Returns:
        SunPosition with ECI coordinates (km), RA, Dec, and distance.
    """
    T = julian_centuries_j2000(epoch)

    M_deg = (357.52911 + 35999.05029 * T) % 360.0
    M_rad = float(np.radians(M_deg))

    # Ecliptic longitude: mean longitude + equation of center
    L0_deg = 280.46646 + 36000.76983 * T
    C_deg = ((1.914602 - 0.004817 * T) * float(np.sin(M_rad))
             + 0.019993 * float(np.sin(2.0 * M_rad)))
    L_rad = float(np.radians((L0_deg + C_deg) % 360.0))

    eps_rad = float(np.radians(23.439291 - 0.0130042 * T))

    ra_rad = float(np.arctan2(np.cos(eps_rad) * np.sin(L_rad), np.cos(L_rad)))
    dec_rad = float(np.arcsin(np.sin(eps_rad) * np.sin(L_rad)))

    r_au = 1.00014 - 0.01671 * float(np.cos(M_rad)) - 0.00014 * float(np.cos(2.0 * M_rad))
    distance_km = r_au * OrbitalConstants.AU_KM

    cos_dec = float(np.cos(dec_rad))
    x = distance_km * float(np.cos(ra_rad)) * cos_dec
    y = distance_km * float(np.sin(ra_rad)) * cos_dec
    z = distance_km * float(np.sin(dec_rad))

    return SunPosition(
        position_eci_km=(x, y, z),
        right_ascension_rad=ra_rad,
        declination_rad=dec_rad,
        distance_km=distance_km,
    )
