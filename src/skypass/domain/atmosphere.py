# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Exponential atmospheric density model.

Piecewise exponential density with altitude-dependent scale height
(Vallado 4th ed. Table 8-4, moderate solar activity), valid from the
surface to 1000 km. Altitudes outside that range have zero density as
far as the drag force model is concerned.
"""
import bisect
import math

MIN_ALTITUDE_KM = 0.0
MAX_ALTITUDE_KM = 1000.0

# (base altitude km, base density kg/m³, scale height km)
_ATMOSPHERE_TABLE: tuple[tuple[float, float, float], ...] = (
    (0, 1.225, 7.249),
    (25, 3.899e-02, 6.349),
    (30, 1.774e-02, 6.682),
    (40, 3.972e-03, 7.554),
    (50, 1.057e-03, 8.382),
    (60, 3.206e-04, 7.714),
    (70, 8.770e-05, 6.549),
    (80, 1.905e-05, 5.799),
    (90, 3.396e-06, 5.382),
    (100, 5.297e-07, 5.877),
    (110, 9.661e-08, 7.263),
    (120, 2.438e-08, 9.473),
    (130, 8.484e-09, 12.636),
    (140, 3.845e-09, 16.149),
    (150, 2.070e-09, 22.523),
    (180, 5.464e-10, 29.740),
    (200, 2.789e-10, 37.105),
    (250, 7.248e-11, 45.546),
    (300, 2.418e-11, 53.628),
    (350, 9.518e-12, 53.298),
    (400, 3.725e-12, 58.515),
    (450, 1.585e-12, 60.828),
    (500, 6.967e-13, 63.822),
    (600, 1.454e-13, 71.835),
    (700, 3.614e-14, 88.667),
    (800, 1.170e-14, 124.64),
    (900, 5.245e-15, 181.05),
    (1000, 3.019e-15, 268.00),
)

_BASE_ALTITUDES = tuple(row[0] for row in _ATMOSPHERE_TABLE)


def atmospheric_density(altitude_km: float) -> float:
    """Atmospheric density at the given altitude.

    Finds the table bracket, then evaluates
    rho = rho_base * exp(-(h - h_base) / H).

    Args:
        altitude_km: Altitude above the equatorial radius in km.

    Returns:
        Density in kg/m³; 0.0 outside [0, 1000] km or for non-finite input.
    """
    if not math.isfinite(altitude_km):
        return 0.0
    if altitude_km < MIN_ALTITUDE_KM or altitude_km > MAX_ALTITUDE_KM:
        return 0.0

    idx = bisect.bisect_right(_BASE_ALTITUDES, altitude_km) - 1
    h_base, rho_base, scale_height = _ATMOSPHERE_TABLE[idx]
    return rho_base * math.exp(-(altitude_km - h_base) / scale_height)
