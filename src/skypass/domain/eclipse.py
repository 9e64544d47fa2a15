# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Cylindrical Earth-shadow test.

Binary umbra model: the satellite is in shadow only when it is on the
anti-Sun side of Earth and inside the cylinder of Earth's equatorial
radius along the Earth-Sun line. No penumbra.
"""
import numpy as np

from skypass.domain.orbital_mechanics import OrbitalConstants


def is_in_shadow(
    sat_position_eci_km,
    sun_position_eci_km,
    earth_radius_km: float = OrbitalConstants.R_EARTH_EQUATORIAL,
) -> bool:
    """True if the satellite lies in Earth's cylindrical shadow.

    1. Unit vector from the satellite to the Sun
    2. If the satellite's projection on that direction is >= 0 → sunlit
    3. Otherwise compare the perpendicular distance to the shadow axis
       with the Earth radius
    """
    r = np.asarray(sat_position_eci_km, dtype=float)
    to_sun = np.asarray(sun_position_eci_km, dtype=float) - r
    to_sun_mag = float(np.linalg.norm(to_sun))
    if to_sun_mag == 0.0:
        return False
    sun_dir = to_sun / to_sun_mag

    proj = float(np.dot(r, sun_dir))
    if proj >= 0.0:
        return False

    perp_sq = float(np.dot(r, r)) - proj * proj
    return perp_sq < earth_radius_km * earth_radius_km
