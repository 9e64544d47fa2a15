# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Propagation modes and their results.

A PropagationRequest is a plain value describing one run. run_propagation
turns it into one of two result variants:

    AnalyticPropagation : closed-form orbit, evaluated on demand
    NumericalPropagation: precomputed Trajectory, interpolated on demand

Consumers call state_at / osculating_elements, which dispatch on the
variant, instead of branching on a mode string.
"""
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from skypass.domain.coordinate_frames import as_utc
from skypass.domain.numerical_propagation import (
    DEFAULT_SPACECRAFT,
    PerturbationConfig,
    SpacecraftProperties,
    propagate_numerical,
)
from skypass.domain.orbital_elements import (
    OrbitalElements,
    StateVector,
    cartesian_to_keplerian,
)
from skypass.domain.orbital_mechanics import orbital_period_s
from skypass.domain.propagation import (
    AnalyticOrbit,
    derive_analytic_orbit,
    elements_at,
    propagate_to,
)
from skypass.domain.trajectory import Trajectory, interpolate_trajectory


class PropagationMode(Enum):
    """Which propagator feeds downstream consumers."""
    KEPLERIAN = "keplerian"
    NUMERICAL_J2 = "numerical-j2"
    NUMERICAL_FULL = "numerical-full"

    @property
    def is_numerical(self) -> bool:
        return self is not PropagationMode.KEPLERIAN


_MODE_CONFIGS = {
    PropagationMode.KEPLERIAN: PerturbationConfig(),
    PropagationMode.NUMERICAL_J2: PerturbationConfig(j2=True),
    PropagationMode.NUMERICAL_FULL: PerturbationConfig(
        j2=True, j3_j6=True, drag=True, srp=True,
        third_body_moon=True, third_body_sun=True,
    ),
}


def config_for_mode(mode: PropagationMode | str, **overrides: bool) -> PerturbationConfig:
    """
    Default perturbation toggles for a mode, with per-flag overrides.

    Example:
        config_for_mode("numerical-full", srp=False)
    """
    return replace(_MODE_CONFIGS[PropagationMode(mode)], **overrides)


@dataclass(frozen=True)
class PropagationRequest:
    """Everything one propagation run depends on; no hidden inputs."""
    elements: OrbitalElements
    epoch: datetime
    mode: PropagationMode = PropagationMode.NUMERICAL_J2
    num_orbits: float = 10.0
    step_s: float = 30.0
    perturbations: PerturbationConfig | None = None
    spacecraft: SpacecraftProperties = DEFAULT_SPACECRAFT
    include_secular_j2: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", PropagationMode(self.mode))
        object.__setattr__(self, "epoch", as_utc(self.epoch))

    @property
    def effective_perturbations(self) -> PerturbationConfig:
        if self.perturbations is not None:
            return self.perturbations
        return config_for_mode(self.mode)

    @property
    def span_s(self) -> float:
        """Requested span in seconds (num_orbits two-body periods)."""
        return self.num_orbits * orbital_period_s(self.elements.semi_major_axis_km)


@dataclass(frozen=True)
class AnalyticPropagation:
    """Closed-form result: states are computed per query in O(1)."""
    request: PropagationRequest
    orbit: AnalyticOrbit = field(repr=False)


@dataclass(frozen=True)
class NumericalPropagation:
    """Integrated result: states are interpolated from the trajectory."""
    request: PropagationRequest
    trajectory: Trajectory = field(repr=False)

    @property
    def effective_step_s(self) -> float:
        return self.trajectory.effective_step_s


PropagationResult = AnalyticPropagation | NumericalPropagation


def run_propagation(
    request: PropagationRequest,
    cancel_event: threading.Event | None = None,
) -> PropagationResult:
    """
    Execute a propagation request.

    Keplerian mode derives the analytic orbit (with J2 secular drift when
    include_secular_j2 is set); numerical modes integrate the trajectory
    with the request's perturbations, defaulting to the mode's toggles.

    Raises:
        InvalidOrbitError: If the elements are not elliptical.
        PropagationCancelled: If cancel_event is set during integration.
    """
    if request.mode is PropagationMode.KEPLERIAN:
        orbit = derive_analytic_orbit(
            request.elements, request.epoch, include_j2=request.include_secular_j2,
        )
        return AnalyticPropagation(request=request, orbit=orbit)

    trajectory = propagate_numerical(
        request.elements,
        request.epoch,
        request.num_orbits,
        request.step_s,
        config=request.effective_perturbations,
        spacecraft=request.spacecraft,
        cancel_event=cancel_event,
    )
    return NumericalPropagation(request=request, trajectory=trajectory)


def state_at(result: PropagationResult, time: datetime) -> StateVector:
    """ECI state at time, whichever propagator produced the result.

    Numerical results clamp to the trajectory's end points outside the
    propagated span.
    """
    if isinstance(result, AnalyticPropagation):
        return propagate_to(result.orbit, time)
    if isinstance(result, NumericalPropagation):
        state = interpolate_trajectory(result.trajectory, time)
        if state is None:
            raise ValueError("numerical propagation produced an empty trajectory")
        return state
    raise TypeError(f"unsupported propagation result: {type(result).__name__}")


def osculating_elements(result: PropagationResult, time: datetime) -> OrbitalElements:
    """Osculating classical elements at time.

    Raises:
        EscapeTrajectoryError: If the numerical state has become unbound.
    """
    if isinstance(result, AnalyticPropagation):
        return elements_at(result.orbit, time)
    return cartesian_to_keplerian(state_at(result, time))


def covered_span(result: PropagationResult) -> tuple[datetime, datetime] | None:
    """(start, end) of a numerical trajectory; None for analytic results."""
    if isinstance(result, NumericalPropagation):
        return result.trajectory.start, result.trajectory.end
    return None
