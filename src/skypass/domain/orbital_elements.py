# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Classical orbital elements and Cartesian state vectors.

Conversions between the osculating ellipse (a, e, i, Ω, ω, ν) and the
ECI position/velocity the numerical integrator advances. Degenerate
geometries resolve to conventional zero angles:

    equatorial (no node line)   → RAAN = 0, ω measured from the x-axis
                                   (longitude of periapsis)
    circular (no periapsis)     → ω = 0, ν measured from the node
                                   (argument of latitude)
    circular and equatorial     → RAAN = ω = 0, ν is the true longitude
"""
import math
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from skypass.domain.errors import EscapeTrajectoryError, InvalidOrbitError
from skypass.domain.kepler import normalize_angle
from skypass.domain.orbital_mechanics import OrbitalConstants

# Below these relative magnitudes the node line / periapsis is undefined.
_NODE_EPS = 1e-11
_ECC_EPS = 1e-11

# Eccentricities this close to 1 are treated as unbound.
_ESCAPE_MARGIN = 1e-9


@dataclass(frozen=True)
class OrbitalElements:
    """Osculating classical elements. Angles in degrees, a in km."""
    semi_major_axis_km: float
    eccentricity: float
    inclination_deg: float
    raan_deg: float
    arg_perigee_deg: float
    true_anomaly_deg: float

    def __post_init__(self) -> None:
        values = (
            self.semi_major_axis_km, self.eccentricity, self.inclination_deg,
            self.raan_deg, self.arg_perigee_deg, self.true_anomaly_deg,
        )
        if not all(math.isfinite(v) for v in values):
            raise InvalidOrbitError(f"orbital elements must be finite, got {values}")
        if self.eccentricity < 0.0:
            raise InvalidOrbitError(f"eccentricity must be >= 0, got {self.eccentricity}")
        if self.semi_major_axis_km == 0.0:
            raise InvalidOrbitError("semi-major axis must be non-zero")

    @property
    def is_elliptical(self) -> bool:
        """True for a bound ellipse (0 <= e < 1, a > 0)."""
        return self.eccentricity < 1.0 and self.semi_major_axis_km > 0.0

    @property
    def semi_latus_rectum_km(self) -> float:
        return self.semi_major_axis_km * (1.0 - self.eccentricity**2)


@dataclass(frozen=True)
class StateVector:
    """ECI position (km) and velocity (km/s) at an instant."""
    time: datetime
    position_eci_km: tuple[float, float, float]
    velocity_eci_km_s: tuple[float, float, float]

    def as_array(self) -> np.ndarray:
        """(x, y, z, vx, vy, vz) as a float array."""
        return np.array(self.position_eci_km + self.velocity_eci_km_s, dtype=float)

    @property
    def radius_km(self) -> float:
        return float(np.linalg.norm(self.position_eci_km))

    @property
    def speed_km_s(self) -> float:
        return float(np.linalg.norm(self.velocity_eci_km_s))


def require_elliptical(elements: OrbitalElements) -> None:
    """Raise InvalidOrbitError unless the elements describe a bound ellipse."""
    if not elements.is_elliptical:
        raise InvalidOrbitError(
            f"elliptical orbit required (0 <= e < 1, a > 0), got "
            f"e={elements.eccentricity}, a={elements.semi_major_axis_km} km"
        )


def keplerian_to_cartesian(
    elements: OrbitalElements,
    mu: float = OrbitalConstants.MU_EARTH,
    allow_hyperbolic: bool = False,
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """
    Convert classical elements to an ECI position/velocity pair.

    The state is built in the perifocal (PQW) frame from the semi-latus
    rectum and true anomaly, then rotated by ω, i and Ω (3-1-3 sequence).

    Args:
        elements: Orbital elements (angles in degrees).
        mu: Gravitational parameter (km³/s²).
        allow_hyperbolic: Accept e > 1 (with a < 0). Parabolic e == 1 is
            always rejected since a is undefined there.

    Returns:
        (position_eci_km, velocity_eci_km_s)

    Raises:
        InvalidOrbitError: If the elements are not elliptical and
            hyperbolic support was not requested, or the requested true
            anomaly lies beyond the hyperbola's asymptote.
    """
    e = elements.eccentricity
    if allow_hyperbolic:
        if abs(e - 1.0) < _ESCAPE_MARGIN:
            raise InvalidOrbitError("parabolic orbits (e == 1) are not supported")
        if e > 1.0 and elements.semi_major_axis_km > 0.0:
            raise InvalidOrbitError("hyperbolic elements require a negative semi-major axis")
    else:
        require_elliptical(elements)

    nu = math.radians(elements.true_anomaly_deg)
    cos_nu = float(np.cos(nu))
    sin_nu = float(np.sin(nu))

    p = elements.semi_latus_rectum_km
    denom = 1.0 + e * cos_nu
    if denom <= 0.0:
        raise InvalidOrbitError(
            f"true anomaly {elements.true_anomaly_deg}° is beyond the asymptote for e={e}"
        )
    r = p / denom

    p_factor = float(np.sqrt(mu / p))
    pos_pqw = np.array([r * cos_nu, r * sin_nu, 0.0])
    vel_pqw = np.array([-p_factor * sin_nu, p_factor * (e + cos_nu), 0.0])

    raan = math.radians(elements.raan_deg)
    argp = math.radians(elements.arg_perigee_deg)
    inc = math.radians(elements.inclination_deg)
    cO, sO = float(np.cos(raan)), float(np.sin(raan))
    co, so = float(np.cos(argp)), float(np.sin(argp))
    ci, si = float(np.cos(inc)), float(np.sin(inc))

    rotation = np.array([
        [cO * co - sO * so * ci, -cO * so - sO * co * ci, sO * si],
        [sO * co + cO * so * ci, -sO * so + cO * co * ci, -cO * si],
        [so * si, co * si, ci],
    ])

    pos = rotation @ pos_pqw
    vel = rotation @ vel_pqw
    return (
        (float(pos[0]), float(pos[1]), float(pos[2])),
        (float(vel[0]), float(vel[1]), float(vel[2])),
    )


def _clamped_acos(x: float) -> float:
    return math.acos(max(-1.0, min(1.0, x)))


def cartesian_to_keplerian(
    state: StateVector,
    mu: float = OrbitalConstants.MU_EARTH,
    allow_unbound: bool = False,
) -> OrbitalElements:
    """
    Convert an ECI state vector to osculating classical elements.

    Builds the angular momentum h = r × v, node vector n = k × h and
    eccentricity vector e = (v × h)/μ - r/|r|. See the module docstring
    for the conventions used when the node line or periapsis is undefined.

    Args:
        state: Cartesian state (km, km/s).
        mu: Gravitational parameter (km³/s²).
        allow_unbound: Return elements for e >= 1 (a <= 0 or infinite
            energy) instead of raising.

    Returns:
        OrbitalElements with angles in degrees.

    Raises:
        EscapeTrajectoryError: If the state is unbound and allow_unbound
            is False.
        InvalidOrbitError: For a zero position or rectilinear (h = 0) state.
    """
    r = np.array(state.position_eci_km, dtype=float)
    v = np.array(state.velocity_eci_km_s, dtype=float)
    r_mag = float(np.linalg.norm(r))
    v_mag = float(np.linalg.norm(v))
    if r_mag == 0.0:
        raise InvalidOrbitError("position vector must be non-zero")

    h = np.cross(r, v)
    h_mag = float(np.linalg.norm(h))
    if h_mag == 0.0:
        raise InvalidOrbitError("rectilinear state (r parallel to v) has no orbital plane")

    node = np.array([-h[1], h[0], 0.0])
    n_mag = float(np.linalg.norm(node))

    e_vec = np.cross(v, h) / mu - r / r_mag
    e = float(np.linalg.norm(e_vec))

    energy = 0.5 * v_mag * v_mag - mu / r_mag
    if e >= 1.0 - _ESCAPE_MARGIN or energy >= 0.0:
        if not allow_unbound:
            raise EscapeTrajectoryError(
                f"state is not a bound ellipse (e={e:.9f}, energy={energy:.6e} km²/s²)"
            )
        if abs(energy) < 1e-15:
            raise InvalidOrbitError("parabolic state has no finite semi-major axis")

    a = -mu / (2.0 * energy)
    inc = _clamped_acos(float(h[2]) / h_mag)

    equatorial = n_mag < _NODE_EPS * h_mag
    circular = e < _ECC_EPS
    retrograde = h[2] < 0.0

    # RAAN
    if equatorial:
        raan = 0.0
    else:
        raan = _clamped_acos(float(node[0]) / n_mag)
        if node[1] < 0.0:
            raan = 2.0 * math.pi - raan

    # Argument of periapsis
    if circular:
        argp = 0.0
    elif equatorial:
        # Longitude of periapsis, measured in the orbit's sense of motion
        ey = -e_vec[1] if retrograde else e_vec[1]
        argp = math.atan2(float(ey), float(e_vec[0]))
    else:
        argp = _clamped_acos(float(np.dot(node, e_vec)) / (n_mag * e))
        if e_vec[2] < 0.0:
            argp = 2.0 * math.pi - argp

    # True anomaly (or its substitutes)
    if not circular:
        nu = _clamped_acos(float(np.dot(e_vec, r)) / (e * r_mag))
        if float(np.dot(r, v)) < 0.0:
            nu = 2.0 * math.pi - nu
    elif equatorial:
        ry = -r[1] if retrograde else r[1]
        nu = math.atan2(float(ry), float(r[0]))
    else:
        nu = _clamped_acos(float(np.dot(node, r)) / (n_mag * r_mag))
        if r[2] < 0.0:
            nu = 2.0 * math.pi - nu

    return OrbitalElements(
        semi_major_axis_km=a,
        eccentricity=e,
        inclination_deg=math.degrees(inc),
        raan_deg=math.degrees(normalize_angle(raan)),
        arg_perigee_deg=math.degrees(normalize_angle(argp)),
        true_anomaly_deg=math.degrees(normalize_angle(nu)),
    )
