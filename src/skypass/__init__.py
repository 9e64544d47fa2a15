# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
skypass

Orbit propagation and ground-station visibility for small-satellite
mission design. Includes frame transforms (ECI, ECEF, geodetic,
topocentric), an analytic Keplerian propagator with J2 secular drift,
a fixed-step RK4 propagator with togglable J2, J3-J6, drag, SRP and
Sun/Moon third-body forces, trajectory interpolation, and pass
prediction with contact statistics.
"""

from skypass.domain.errors import (
    InvalidOrbitError,
    EscapeTrajectoryError,
    InvalidSpacecraftError,
    InvalidStationError,
    PropagationCancelled,
)
from skypass.domain.orbital_mechanics import (
    OrbitalConstants,
    orbital_period_s,
    mean_motion_rad_s,
    sso_inclination_deg,
    j2_raan_rate,
    j2_arg_perigee_rate,
    sphere_of_influence_km,
)
from skypass.domain.kepler import (
    solve_kepler_equation,
    true_to_eccentric,
    eccentric_to_true,
    eccentric_to_mean,
    mean_to_eccentric,
    true_to_mean,
    mean_to_true,
)
from skypass.domain.orbital_elements import (
    OrbitalElements,
    StateVector,
    keplerian_to_cartesian,
    cartesian_to_keplerian,
)
from skypass.domain.coordinate_frames import (
    gmst_rad,
    eci_to_ecef,
    ecef_to_eci,
    ecef_to_geodetic,
    geodetic_to_ecef,
)
from skypass.domain.observation import (
    GroundStation,
    Observation,
    compute_observation,
)
from skypass.domain.propagation import (
    AnalyticOrbit,
    derive_analytic_orbit,
    propagate_to,
    position_at_time,
)
from skypass.domain.numerical_propagation import (
    PerturbationConfig,
    SpacecraftProperties,
    DEFAULT_PERTURBATION_CONFIG,
    DEFAULT_SPACECRAFT,
    build_force_models,
    propagate_numerical,
)
from skypass.domain.trajectory import (
    MAX_TRAJECTORY_SAMPLES,
    Trajectory,
    interpolate_trajectory,
)
from skypass.domain.propagation_result import (
    PropagationMode,
    PropagationRequest,
    PropagationResult,
    AnalyticPropagation,
    NumericalPropagation,
    config_for_mode,
    run_propagation,
    state_at,
    osculating_elements,
)
from skypass.domain.pass_prediction import (
    PassQuality,
    PassRecord,
    TrackPoint,
    PassMetrics,
    ContactGap,
    grade_pass,
    predict_passes,
    compute_pass_metrics,
    compute_contact_gaps,
)
from skypass.domain.ground_track import (
    GroundTrackPoint,
    compute_ground_track,
)

__version__ = "0.1.0"
