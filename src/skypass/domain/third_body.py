# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Lunar ephemeris and third-body tidal acceleration.

Analytical lunar ephemeris (Meeus Ch. 47, leading terms) and the
direct + indirect third-body acceleration shared by the Sun and Moon
force models.
"""
import math
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from skypass.domain.solar import julian_centuries_j2000


@dataclass(frozen=True)
class MoonPosition:
    """Moon position at a given epoch."""
    position_eci_km: tuple[float, float, float]
    right_ascension_rad: float
    declination_rad: float
    distance_km: float


def moon_position_eci(epoch: datetime) -> MoonPosition:
    """Analytical lunar ephemeris (Meeus Ch. 47 simplified).

    Computes geocentric ecliptic coordinates of the Moon, then converts
    to equatorial ECI. Accuracy ~0.5° in position, sufficient for
    perturbation modeling.
    """
    T = julian_centuries_j2000(epoch)

    # Fundamental arguments (degrees)
    L_prime = (218.3165 + 481267.8813 * T) % 360.0    # mean longitude
    D = (297.8502 + 445267.1115 * T) % 360.0          # mean elongation
    M = (357.5291 + 35999.0503 * T) % 360.0           # Sun mean anomaly
    M_prime = (134.9634 + 477198.8676 * T) % 360.0    # Moon mean anomaly
    F = (93.2721 + 483202.0175 * T) % 360.0           # argument of latitude

    D_r = math.radians(D)
    M_r = math.radians(M)
    Mp_r = math.radians(M_prime)
    F_r = math.radians(F)

    lam = L_prime + (
        6.289 * math.sin(Mp_r)
        - 1.274 * math.sin(2 * D_r - Mp_r)
        + 0.658 * math.sin(2 * D_r)
        - 0.214 * math.sin(2 * Mp_r)
        - 0.186 * math.sin(M_r)
        + 0.114 * math.sin(2 * F_r)
    )
    beta = (
        5.128 * math.sin(F_r)
        + 0.281 * math.sin(Mp_r + F_r)
        - 0.278 * math.sin(Mp_r - F_r)
        - 0.173 * math.sin(2 * D_r - F_r)
    )
    distance_km = (
        385001.0
        - 20905.0 * math.cos(Mp_r)
        - 3699.0 * math.cos(2 * D_r - Mp_r)
        - 2956.0 * math.cos(2 * D_r)
        + 570.0 * math.cos(2 * Mp_r)
    )

    # Ecliptic → equatorial
    lam_r = math.radians(lam)
    beta_r = math.radians(beta)
    eps_r = math.radians(23.439291 - 0.0130042 * T)

    x_ecl = distance_km * math.cos(beta_r) * math.cos(lam_r)
    y_ecl = distance_km * math.cos(beta_r) * math.sin(lam_r)
    z_ecl = distance_km * math.sin(beta_r)

    x = x_ecl
    y = y_ecl * math.cos(eps_r) - z_ecl * math.sin(eps_r)
    z = y_ecl * math.sin(eps_r) + z_ecl * math.cos(eps_r)

    ra_rad = math.atan2(y, x)
    dec_rad = math.asin(max(-1.0, min(1.0, z / distance_km)))

    return MoonPosition(
        position_eci_km=(x, y, z),
        right_ascension_rad=ra_rad,
        declination_rad=dec_rad,
        distance_km=distance_km,
    )


def third_body_acceleration(
    mu_body: float,
    r_body: np.ndarray,
    r_sat: np.ndarray,
) -> np.ndarray:
    """Third-body tidal acceleration.

    a = μ · (d/|d|³ − r_body/|r_body|³)
    where d = r_body − r_sat

    Args:
        mu_body: Gravitational parameter of the perturbing body (km³/s²).
        r_body: ECI position of the perturbing body (km).
        r_sat: ECI position of the satellite (km).

    Returns:
        Acceleration vector (km/s²).
    """
    d = r_body - r_sat
    d_mag = float(np.linalg.norm(d))
    rb_mag = float(np.linalg.norm(r_body))
    return mu_body * (d / d_mag**3 - r_body / rb_mag**3)
