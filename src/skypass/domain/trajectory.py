# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Propagated trajectories and time interpolation.

A Trajectory is the immutable output of one numerical propagation run.
interpolate_trajectory decouples query cadence from the integration
step: binary search for the bracketing samples, then linear
interpolation of position and velocity independently.
"""
import bisect
from dataclasses import dataclass
from datetime import datetime

from skypass.domain.coordinate_frames import as_utc
from skypass.domain.orbital_elements import StateVector

MAX_TRAJECTORY_SAMPLES = 50_000


@dataclass(frozen=True)
class Trajectory:
    """Time-ascending state samples from a single propagation run."""
    points: tuple[StateVector, ...]
    epoch: datetime
    requested_step_s: float
    effective_step_s: float
    force_model_names: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    @property
    def coarsened(self) -> bool:
        """True when the step was enlarged to respect the sample cap."""
        return self.effective_step_s > self.requested_step_s

    @property
    def start(self) -> datetime:
        return self.points[0].time

    @property
    def end(self) -> datetime:
        return self.points[-1].time

    @property
    def duration_s(self) -> float:
        if not self.points:
            return 0.0
        return (self.end - self.start).total_seconds()


def _lerp3(
    a: tuple[float, float, float],
    b: tuple[float, float, float],
    frac: float,
) -> tuple[float, float, float]:
    return (
        a[0] + frac * (b[0] - a[0]),
        a[1] + frac * (b[1] - a[1]),
        a[2] + frac * (b[2] - a[2]),
    )


def interpolate_trajectory(trajectory: Trajectory, t: datetime) -> StateVector | None:
    """
    State at an arbitrary time from a precomputed trajectory.

    Queries outside the covered span clamp to the first/last sample
    (no extrapolation). A query exactly on a sample's timestamp returns
    that sample unchanged. The trajectory must be strictly time-ordered.

    Args:
        trajectory: Trajectory to sample.
        t: Query time.

    Returns:
        Interpolated StateVector, or None for an empty trajectory.
    """
    points = trajectory.points
    if not points:
        return None
    t = as_utc(t)
    if t <= points[0].time:
        return points[0]
    if t >= points[-1].time:
        return points[-1]

    hi = bisect.bisect_right(points, t, key=lambda p: p.time)
    lo = hi - 1
    p0 = points[lo]
    if p0.time == t:
        return p0
    p1 = points[hi]

    frac = (t - p0.time).total_seconds() / (p1.time - p0.time).total_seconds()
    return StateVector(
        time=t,
        position_eci_km=_lerp3(p0.position_eci_km, p1.position_eci_km, frac),
        velocity_eci_km_s=_lerp3(p0.velocity_eci_km_s, p1.velocity_eci_km_s, frac),
    )
