# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Numerical orbit propagation with RK4 and pluggable force models.

4th-order Runge-Kutta integrator, fixed step, over the Cartesian state
(x, y, z, vx, vy, vz) in km and km/s. The integrator sums whichever
force models are enabled; each model is a pure function of
(epoch, position, velocity, ephemerides) and owns its validity range.

Sun and Moon positions are evaluated once per macro step and shared by
all four RK4 stages. The bodies move negligibly within one step and the
ephemeris series dominate the per-step cost otherwise.
"""
import logging
import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Protocol, runtime_checkable

import numpy as np

from skypass.domain.atmosphere import MAX_ALTITUDE_KM, MIN_ALTITUDE_KM, atmospheric_density
from skypass.domain.coordinate_frames import as_utc
from skypass.domain.eclipse import is_in_shadow
from skypass.domain.errors import InvalidSpacecraftError, PropagationCancelled
from skypass.domain.orbital_elements import (
    OrbitalElements,
    StateVector,
    keplerian_to_cartesian,
    require_elliptical,
)
from skypass.domain.orbital_mechanics import OrbitalConstants, orbital_period_s
from skypass.domain.solar import sun_position_eci
from skypass.domain.third_body import moon_position_eci, third_body_acceleration
from skypass.domain.trajectory import MAX_TRAJECTORY_SAMPLES, Trajectory

logger = logging.getLogger(__name__)


# --- Configuration ---

@dataclass(frozen=True)
class PerturbationConfig:
    """Independent force-model toggles. Central gravity is always on."""
    j2: bool = False
    j3_j6: bool = False
    drag: bool = False
    srp: bool = False
    third_body_moon: bool = False
    third_body_sun: bool = False


@dataclass(frozen=True)
class SpacecraftProperties:
    """Physical properties used by the drag and SRP models.

    cd: drag coefficient (dimensionless, typically 2.0-2.5)
    cr: SRP reflectivity coefficient (1.0 absorbing .. 2.0 specular)
    area_m2: cross-sectional area (m²)
    mass_kg: spacecraft mass (kg)
    """
    cd: float = 2.2
    cr: float = 1.2
    area_m2: float = 0.01
    mass_kg: float = 4.0

    def __post_init__(self) -> None:
        for name in ("cd", "cr", "area_m2", "mass_kg"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise InvalidSpacecraftError(f"{name} must be positive and finite, got {value}")

    @property
    def area_to_mass(self) -> float:
        """A/m in m²/kg."""
        return self.area_m2 / self.mass_kg

    @property
    def ballistic_coefficient(self) -> float:
        """B_c = C_d * A / m (m²/kg)."""
        return self.cd * self.area_to_mass


DEFAULT_PERTURBATION_CONFIG = PerturbationConfig(j2=True, drag=True)
DEFAULT_SPACECRAFT = SpacecraftProperties()


# --- Types ---

@dataclass(frozen=True)
class Ephemerides:
    """Sun/Moon ECI positions (km) shared by one macro step; None if unused."""
    sun_position_km: np.ndarray | None = None
    moon_position_km: np.ndarray | None = None


@runtime_checkable
class ForceModel(Protocol):
    """Structural typing port for pluggable force models."""

    needs_sun: bool
    needs_moon: bool

    def acceleration(
        self,
        epoch: datetime,
        position: np.ndarray,
        velocity: np.ndarray,
        ephemerides: Ephemerides,
    ) -> np.ndarray: ...


# --- Force models ---

class TwoBodyGravity:
    """Central body gravitational acceleration: a = -mu * r / |r|^3."""

    needs_sun = False
    needs_moon = False

    def __init__(self, mu: float = OrbitalConstants.MU_EARTH) -> None:
        self._mu = mu

    def acceleration(self, epoch, position, velocity, ephemerides):
        r = float(np.linalg.norm(position))
        return (-self._mu / (r * r * r)) * position


class J2Perturbation:
    """J2 zonal harmonic perturbation acceleration (closed form)."""

    needs_sun = False
    needs_moon = False

    def acceleration(self, epoch, position, velocity, ephemerides):
        c = OrbitalConstants
        r2 = float(np.dot(position, position))
        r = math.sqrt(r2)
        r5 = r2 * r2 * r
        coeff = -1.5 * c.J2_EARTH * c.MU_EARTH * c.R_EARTH_EQUATORIAL**2 / r5

        x, y, z = position
        z2_r2 = z * z / r2
        return np.array([
            coeff * x * (1.0 - 5.0 * z2_r2),
            coeff * y * (1.0 - 5.0 * z2_r2),
            coeff * z * (3.0 - 5.0 * z2_r2),
        ])


def _legendre_with_derivative(n_max: int, s: float) -> tuple[list[float], list[float]]:
    """Legendre polynomials P_n(s) and derivatives P'_n(s) for n = 0..n_max.

    Bonnet recursion for P_n and P'_n = n·P_{n-1} + s·P'_{n-1}, which
    stays finite at s = ±1 (poles).
    """
    p = [1.0, s]
    dp = [0.0, 1.0]
    for n in range(2, n_max + 1):
        p.append(((2 * n - 1) * s * p[n - 1] - (n - 1) * p[n - 2]) / n)
        dp.append(n * p[n - 1] + s * dp[n - 1])
    return p, dp


class ZonalHarmonics:
    """Zonal harmonic accelerations J_n for the requested degrees.

    Gradient of the zonal potential U_n = -(μ/r)·J_n·(R/r)^n·P_n(z/r):

        a_x,y = μ J_n R^n / r^(n+2) · (x,y)/r · [(n+1)·P_n + s·P'_n]
        a_z   = μ J_n R^n / r^(n+2) · [(n+1)·s·P_n - (1 - s²)·P'_n]

    with s = z/r. Degree 2 reduces to the closed-form J2 expression and
    degree 3 to Vallado's J3 terms.
    """

    needs_sun = False
    needs_moon = False

    _COEFFICIENTS = {
        2: OrbitalConstants.J2_EARTH,
        3: OrbitalConstants.J3_EARTH,
        4: OrbitalConstants.J4_EARTH,
        5: OrbitalConstants.J5_EARTH,
        6: OrbitalConstants.J6_EARTH,
    }

    def __init__(self, degrees: tuple[int, ...] = (3, 4, 5, 6)) -> None:
        unknown = [n for n in degrees if n not in self._COEFFICIENTS]
        if unknown:
            raise ValueError(f"zonal degrees must be within 2..6, got {unknown}")
        self._degrees = tuple(sorted(set(degrees)))
        self._n_max = max(self._degrees) if self._degrees else 0

    @property
    def degrees(self) -> tuple[int, ...]:
        return self._degrees

    def acceleration(self, epoch, position, velocity, ephemerides):
        if not self._degrees:
            return np.zeros(3)
        c = OrbitalConstants
        r = float(np.linalg.norm(position))
        s = float(position[2]) / r
        p, dp = _legendre_with_derivative(self._n_max, s)

        radial_xy = 0.0
        axial_z = 0.0
        mu_r2 = c.MU_EARTH / (r * r)
        for n in self._degrees:
            scale = mu_r2 * self._COEFFICIENTS[n] * (c.R_EARTH_EQUATORIAL / r) ** n
            radial_xy += scale * ((n + 1) * p[n] + s * dp[n])
            axial_z += scale * ((n + 1) * s * p[n] - (1.0 - s * s) * dp[n])

        return np.array([
            radial_xy * float(position[0]) / r,
            radial_xy * float(position[1]) / r,
            axial_z,
        ])


class AtmosphericDragForce:
    """Atmospheric drag acceleration with co-rotating atmosphere.

    a = -0.5 * rho * Cd * (A/m) * |v_rel| * v_rel
    where v_rel = v - ω_E × r. Zero outside 0-1000 km altitude or where
    the density is non-positive.
    """

    needs_sun = False
    needs_moon = False

    def __init__(self, spacecraft: SpacecraftProperties) -> None:
        self._spacecraft = spacecraft

    def acceleration(self, epoch, position, velocity, ephemerides):
        r = float(np.linalg.norm(position))
        alt_km = r - OrbitalConstants.R_EARTH_EQUATORIAL
        if alt_km < MIN_ALTITUDE_KM or alt_km > MAX_ALTITUDE_KM:
            return np.zeros(3)
        rho = atmospheric_density(alt_km)
        if rho <= 0.0:
            return np.zeros(3)

        omega_e = OrbitalConstants.EARTH_ROTATION_RATE
        v_rel = np.array([
            velocity[0] + omega_e * position[1],
            velocity[1] - omega_e * position[0],
            velocity[2],
        ])
        v_rel_mag = float(np.linalg.norm(v_rel))
        if v_rel_mag < 1e-12:
            return np.zeros(3)

        # rho in kg/m³ and v in km/s: |v|·v carries 1e6 m²/s², /1e3 back to km/s²
        factor = -0.5 * self._spacecraft.ballistic_coefficient * rho * v_rel_mag * 1e3
        return factor * v_rel


class SolarRadiationPressureForce:
    """Solar radiation pressure, cannonball model with cylindrical shadow.

    a = -Cr * P_sr * (A/m) * (AU/|d|)^2 * d_hat
    where d points from the satellite to the Sun. Zero in Earth's shadow.
    """

    needs_sun = True
    needs_moon = False

    _P_SR: float = 4.56e-6  # N/m², solar radiation pressure at 1 AU

    def __init__(self, spacecraft: SpacecraftProperties) -> None:
        self._spacecraft = spacecraft

    def acceleration(self, epoch, position, velocity, ephemerides):
        sun = ephemerides.sun_position_km
        if sun is None:
            sun = np.array(sun_position_eci(epoch).position_eci_km)

        if is_in_shadow(position, sun):
            return np.zeros(3)

        d = sun - position
        d_mag = float(np.linalg.norm(d))
        au_ratio_sq = (OrbitalConstants.AU_KM / d_mag) ** 2
        # N/m² · m²/kg = m/s², /1e3 to km/s²
        factor = -self._spacecraft.cr * self._P_SR * self._spacecraft.area_to_mass * au_ratio_sq / 1e3
        return factor * (d / d_mag)


class ThirdBodyForce:
    """Sun or Moon point-mass perturbation (direct + indirect term)."""

    def __init__(self, body: str) -> None:
        if body not in ("sun", "moon"):
            raise ValueError(f"third body must be 'sun' or 'moon', got {body!r}")
        self._body = body
        self.needs_sun = body == "sun"
        self.needs_moon = body == "moon"
        self._mu = OrbitalConstants.MU_SUN if body == "sun" else OrbitalConstants.MU_MOON

    @property
    def body(self) -> str:
        return self._body

    def acceleration(self, epoch, position, velocity, ephemerides):
        if self._body == "sun":
            r_body = ephemerides.sun_position_km
            if r_body is None:
                r_body = np.array(sun_position_eci(epoch).position_eci_km)
        else:
            r_body = ephemerides.moon_position_km
            if r_body is None:
                r_body = np.array(moon_position_eci(epoch).position_eci_km)
        return third_body_acceleration(self._mu, r_body, position)


def build_force_models(
    config: PerturbationConfig,
    spacecraft: SpacecraftProperties = DEFAULT_SPACECRAFT,
) -> list[ForceModel]:
    """Ordered force models for the enabled subset; central gravity first."""
    models: list[ForceModel] = [TwoBodyGravity()]
    if config.j2:
        models.append(J2Perturbation())
    if config.j3_j6:
        models.append(ZonalHarmonics((3, 4, 5, 6)))
    if config.drag:
        models.append(AtmosphericDragForce(spacecraft))
    if config.srp:
        models.append(SolarRadiationPressureForce(spacecraft))
    if config.third_body_moon:
        models.append(ThirdBodyForce("moon"))
    if config.third_body_sun:
        models.append(ThirdBodyForce("sun"))
    return models


def evaluate_ephemerides(epoch: datetime, force_models: list[ForceModel]) -> Ephemerides:
    """Sun/Moon positions needed by the given models at epoch."""
    need_sun = any(fm.needs_sun for fm in force_models)
    need_moon = any(fm.needs_moon for fm in force_models)
    return Ephemerides(
        sun_position_km=np.array(sun_position_eci(epoch).position_eci_km) if need_sun else None,
        moon_position_km=np.array(moon_position_eci(epoch).position_eci_km) if need_moon else None,
    )


# --- RK4 integrator ---

def rk4_step(
    t_s: float,
    state: np.ndarray,
    h: float,
    deriv_fn: Callable[[float, np.ndarray], np.ndarray],
) -> tuple[float, np.ndarray]:
    """Single 4th-order Runge-Kutta integration step.

    Args:
        t_s: Current time (seconds).
        state: Current state vector.
        h: Step size (seconds).
        deriv_fn: Derivative function f(t, state) -> d(state)/dt.

    Returns:
        (t_new, state_new)
    """
    k1 = deriv_fn(t_s, state)
    k2 = deriv_fn(t_s + 0.5 * h, state + 0.5 * h * k1)
    k3 = deriv_fn(t_s + 0.5 * h, state + 0.5 * h * k2)
    k4 = deriv_fn(t_s + h, state + h * k3)
    return t_s + h, state + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def _step_plan(total_s: float, step_s: float) -> tuple[int, float]:
    """Number of RK4 steps and the step actually used under the sample cap."""
    num_steps = max(1, math.ceil(total_s / step_s))
    max_steps = MAX_TRAJECTORY_SAMPLES - 1
    if num_steps > max_steps:
        return max_steps, total_s / max_steps
    return num_steps, step_s


def _to_state(time: datetime, sv: np.ndarray) -> StateVector:
    return StateVector(
        time=time,
        position_eci_km=(float(sv[0]), float(sv[1]), float(sv[2])),
        velocity_eci_km_s=(float(sv[3]), float(sv[4]), float(sv[5])),
    )


# --- Main propagation function ---

def propagate_numerical(
    elements: OrbitalElements,
    epoch: datetime,
    num_orbits: float,
    step_s: float,
    config: PerturbationConfig = DEFAULT_PERTURBATION_CONFIG,
    spacecraft: SpacecraftProperties = DEFAULT_SPACECRAFT,
    cancel_event: threading.Event | None = None,
    force_models: list[ForceModel] | None = None,
) -> Trajectory:
    """Numerical integration with summed force model accelerations.

    1. Convert elements -> Cartesian ECI via keplerian_to_cartesian
    2. Build the force model list from config (or use force_models)
    3. Step ceil(num_orbits * period / step_s) times with RK4
    4. Return the Trajectory, including the initial state

    When the step count would exceed MAX_TRAJECTORY_SAMPLES the step is
    coarsened so that the whole span still fits; the step actually used
    is reported as Trajectory.effective_step_s.

    Args:
        elements: Initial osculating elements (elliptical).
        epoch: Time of the initial elements.
        num_orbits: Span, in two-body orbital periods.
        step_s: Requested integration step (seconds).
        config: Force-model toggles.
        spacecraft: Drag/SRP physical properties.
        cancel_event: Checked every step; when set the run stops with
            PropagationCancelled and the partial trajectory is discarded.
        force_models: Explicit force model list, overriding config.

    Raises:
        InvalidOrbitError: If the elements are not elliptical.
        ValueError: If num_orbits or step_s is not positive and finite.
        PropagationCancelled: If cancel_event is set during the run.
    """
    require_elliptical(elements)
    if not math.isfinite(num_orbits) or num_orbits <= 0:
        raise ValueError(f"num_orbits must be positive, got {num_orbits}")
    if not math.isfinite(step_s) or step_s <= 0:
        raise ValueError(f"step_s must be positive, got {step_s}")

    ref_epoch = as_utc(epoch)
    if force_models is None:
        force_models = build_force_models(config, spacecraft)
    model_names = tuple(type(fm).__name__ for fm in force_models)

    total_s = orbital_period_s(elements.semi_major_axis_km) * num_orbits
    num_steps, effective_step = _step_plan(total_s, step_s)
    if effective_step > step_s:
        logger.warning(
            "Trajectory capped at %d samples: step coarsened from %.3f s to %.3f s",
            MAX_TRAJECTORY_SAMPLES, step_s, effective_step,
        )

    pos, vel = keplerian_to_cartesian(elements)
    state_vec = np.array(pos + vel, dtype=float)

    ephemerides = Ephemerides()

    def deriv_fn(t_s: float, sv: np.ndarray) -> np.ndarray:
        current_epoch = ref_epoch + timedelta(seconds=t_s)
        p = sv[:3]
        v = sv[3:]
        acc = np.zeros(3)
        for fm in force_models:
            acc += fm.acceleration(current_epoch, p, v, ephemerides)
        return np.concatenate((v, acc))

    points: list[StateVector] = [_to_state(ref_epoch, state_vec)]
    t_current = 0.0
    for i in range(1, num_steps + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise PropagationCancelled(
                f"propagation cancelled after {i - 1} of {num_steps} steps"
            )
        # Sun/Moon once per macro step, shared by the four RK4 stages
        ephemerides = evaluate_ephemerides(ref_epoch + timedelta(seconds=t_current), force_models)
        _, state_vec = rk4_step(t_current, state_vec, effective_step, deriv_fn)
        t_current = i * effective_step
        points.append(_to_state(ref_epoch + timedelta(seconds=t_current), state_vec))

    logger.debug(
        "Propagated %d steps of %.3f s with %s", num_steps, effective_step, ", ".join(model_names),
    )

    return Trajectory(
        points=tuple(points),
        epoch=ref_epoch,
        requested_step_s=float(step_s),
        effective_step_s=float(effective_step),
        force_model_names=model_names,
    )
