# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Analytic Keplerian propagation with optional J2 secular drift.

Mean anomaly advances linearly at n = sqrt(μ/a³); RAAN and argument of
perigee optionally drift at their J2 secular rates. Every query solves
Kepler's equation once, so the cost is O(1) regardless of the time
offset. This is the cheap path for animation and pass sweeps; use
numerical_propagation for accumulated perturbation effects.
"""
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from skypass.domain.coordinate_frames import as_utc, eci_to_ecef, gmst_rad
from skypass.domain.kepler import (
    eccentric_to_true,
    normalize_angle,
    solve_kepler_equation,
    true_to_mean,
)
from skypass.domain.orbital_elements import (
    OrbitalElements,
    StateVector,
    keplerian_to_cartesian,
    require_elliptical,
)
from skypass.domain.orbital_mechanics import (
    OrbitalConstants,
    j2_arg_perigee_rate,
    j2_raan_rate,
    mean_motion_rad_s,
)


@dataclass(frozen=True)
class AnalyticOrbit:
    """Frozen analytic propagation state: elements plus derived rates."""
    elements: OrbitalElements
    epoch: datetime
    mean_motion_rad_s: float
    mean_anomaly_rad: float
    j2_raan_rate: float = 0.0
    j2_arg_perigee_rate: float = 0.0

    @property
    def includes_j2(self) -> bool:
        return self.j2_raan_rate != 0.0 or self.j2_arg_perigee_rate != 0.0


def derive_analytic_orbit(
    elements: OrbitalElements,
    epoch: datetime,
    include_j2: bool = False,
) -> AnalyticOrbit:
    """
    Precompute mean motion, initial mean anomaly and J2 rates.

    Args:
        elements: Osculating elements at epoch (must be elliptical).
        epoch: Reference time of the elements.
        include_j2: If True, compute J2 secular RAAN/ω drift rates.

    Raises:
        InvalidOrbitError: If the elements are not elliptical.
    """
    require_elliptical(elements)
    a = elements.semi_major_axis_km
    e = elements.eccentricity
    n = mean_motion_rad_s(a, OrbitalConstants.MU_EARTH)
    m0 = true_to_mean(math.radians(elements.true_anomaly_deg), e)

    raan_rate = 0.0
    argp_rate = 0.0
    if include_j2:
        inc = math.radians(elements.inclination_deg)
        raan_rate = j2_raan_rate(n, a, e, inc)
        argp_rate = j2_arg_perigee_rate(n, a, e, inc)

    return AnalyticOrbit(
        elements=elements,
        epoch=as_utc(epoch),
        mean_motion_rad_s=n,
        mean_anomaly_rad=m0,
        j2_raan_rate=raan_rate,
        j2_arg_perigee_rate=argp_rate,
    )


def elements_after(orbit: AnalyticOrbit, dt_s: float) -> OrbitalElements:
    """Elements dt_s seconds after the orbit's epoch."""
    e = orbit.elements.eccentricity
    m = orbit.mean_anomaly_rad + orbit.mean_motion_rad_s * dt_s
    ecc_anomaly = solve_kepler_equation(m, e)
    nu = eccentric_to_true(ecc_anomaly, e)

    raan = math.radians(orbit.elements.raan_deg) + orbit.j2_raan_rate * dt_s
    argp = math.radians(orbit.elements.arg_perigee_deg) + orbit.j2_arg_perigee_rate * dt_s

    return replace(
        orbit.elements,
        raan_deg=math.degrees(normalize_angle(raan)),
        arg_perigee_deg=math.degrees(normalize_angle(argp)),
        true_anomaly_deg=math.degrees(nu),
    )


def elements_at(orbit: AnalyticOrbit, target_time: datetime) -> OrbitalElements:
    """Elements at an absolute time."""
    dt = (as_utc(target_time) - orbit.epoch).total_seconds()
    return elements_after(orbit, dt)


def propagate_to(orbit: AnalyticOrbit, target_time: datetime) -> StateVector:
    """
    Propagate the analytic orbit to target_time.

    Returns:
        StateVector in ECI (km, km/s) stamped with target_time.
    """
    target_time = as_utc(target_time)
    pos, vel = keplerian_to_cartesian(elements_at(orbit, target_time))
    return StateVector(time=target_time, position_eci_km=pos, velocity_eci_km_s=vel)


def propagate_ecef_to(orbit: AnalyticOrbit, target_time: datetime) -> tuple[float, float, float]:
    """Propagate to target_time and rotate the position into ECEF (km)."""
    state = propagate_to(orbit, target_time)
    return eci_to_ecef(state.position_eci_km, gmst_rad(target_time))


def position_at_time(
    elements: OrbitalElements,
    epoch: datetime,
    dt_s: float,
    include_j2: bool = False,
) -> tuple[float, float, float]:
    """
    ECI position (km) dt_s seconds after epoch.

    One-shot convenience over derive_analytic_orbit; sweeps should
    derive the orbit once and call propagate_to repeatedly.
    """
    orbit = derive_analytic_orbit(elements, epoch, include_j2=include_j2)
    return propagate_to(orbit, orbit.epoch + timedelta(seconds=dt_s)).position_eci_km
