# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Kepler's equation and anomaly conversions for elliptical orbits.

Conversions use the half-angle tangent forms, valid for 0 <= e < 1.
All returned angles are normalized to [0, 2π).
"""
import math

from skypass.domain.errors import InvalidOrbitError

_TWO_PI = 2.0 * math.pi


def normalize_angle(angle_rad: float) -> float:
    """Wrap an angle to [0, 2π)."""
    wrapped = math.fmod(angle_rad, _TWO_PI)
    if wrapped < 0.0:
        wrapped += _TWO_PI
    # fmod of a tiny negative number can round up to exactly 2π
    if wrapped >= _TWO_PI:
        wrapped = 0.0
    return wrapped


def _check_elliptical(e: float) -> None:
    if not math.isfinite(e) or e < 0.0 or e >= 1.0:
        raise InvalidOrbitError(f"eccentricity must be in [0, 1), got {e}")


def solve_kepler_equation(
    mean_anomaly_rad: float,
    e: float,
    tol: float = 1e-12,
    max_iter: int = 50,
) -> float:
    """
    Solve M = E - e·sin(E) for the eccentric anomaly E.

    Newton-Raphson starting from E0 = M (or π for e >= 0.8, where the
    M starting guess can overshoot). Converges in a handful of iterations
    for e <= 0.9; closer to e = 1 the result is returned after max_iter
    iterations with reduced accuracy rather than raising.

    Args:
        mean_anomaly_rad: Mean anomaly M (radians, any range).
        e: Eccentricity in [0, 1).
        tol: Convergence tolerance on the Newton correction (radians).
        max_iter: Iteration cap.

    Returns:
        Eccentric anomaly E in [0, 2π).

    Raises:
        InvalidOrbitError: If e is outside [0, 1).
    """
    _check_elliptical(e)
    m = normalize_angle(mean_anomaly_rad)
    if e == 0.0:
        return m

    big_e = m if e < 0.8 else math.pi
    for _ in range(max_iter):
        f = big_e - e * math.sin(big_e) - m
        f_prime = 1.0 - e * math.cos(big_e)
        delta = f / f_prime
        big_e -= delta
        if abs(delta) < tol:
            break
    return normalize_angle(big_e)


def true_to_eccentric(nu_rad: float, e: float) -> float:
    """True anomaly → eccentric anomaly: tan(E/2) = sqrt((1-e)/(1+e)) tan(ν/2)."""
    _check_elliptical(e)
    big_e = 2.0 * math.atan2(
        math.sqrt(1.0 - e) * math.sin(nu_rad / 2.0),
        math.sqrt(1.0 + e) * math.cos(nu_rad / 2.0),
    )
    return normalize_angle(big_e)


def eccentric_to_true(ecc_anomaly_rad: float, e: float) -> float:
    """Eccentric anomaly → true anomaly: tan(ν/2) = sqrt((1+e)/(1-e)) tan(E/2)."""
    _check_elliptical(e)
    nu = 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(ecc_anomaly_rad / 2.0),
        math.sqrt(1.0 - e) * math.cos(ecc_anomaly_rad / 2.0),
    )
    return normalize_angle(nu)


def eccentric_to_mean(ecc_anomaly_rad: float, e: float) -> float:
    """Kepler's equation in the forward direction: M = E - e·sin(E)."""
    _check_elliptical(e)
    return normalize_angle(ecc_anomaly_rad - e * math.sin(ecc_anomaly_rad))


def mean_to_eccentric(mean_anomaly_rad: float, e: float) -> float:
    """Mean anomaly → eccentric anomaly (alias of solve_kepler_equation)."""
    return solve_kepler_equation(mean_anomaly_rad, e)


def true_to_mean(nu_rad: float, e: float) -> float:
    return eccentric_to_mean(true_to_eccentric(nu_rad, e), e)


def mean_to_true(mean_anomaly_rad: float, e: float) -> float:
    return eccentric_to_true(solve_kepler_equation(mean_anomaly_rad, e), e)
