# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Ground track computation.

Samples a propagation result over time and converts each position to
geodetic coordinates (lat/lon/alt) via the ECI -> ECEF -> Geodetic
pipeline. Works for both analytic and numerical results.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from skypass.domain.coordinate_frames import (
    as_utc,
    ecef_to_geodetic,
    eci_to_ecef,
    gmst_rad,
)
from skypass.domain.propagation_result import PropagationResult, state_at


@dataclass(frozen=True)
class GroundTrackPoint:
    """A single point on a satellite's ground track."""
    time: datetime
    lat_deg: float
    lon_deg: float
    alt_km: float


def compute_ground_track(
    result: PropagationResult,
    start: datetime | None = None,
    duration: timedelta = timedelta(hours=3),
    step: timedelta = timedelta(seconds=60),
) -> list[GroundTrackPoint]:
    """
    Compute the sub-satellite ground track over a time interval.

    Args:
        result: Analytic or numerical propagation result.
        start: UTC datetime for the first point; defaults to the epoch.
        duration: Total time span to compute.
        step: Time between consecutive points.

    Returns:
        List of GroundTrackPoint objects from start to start+duration.

    Raises:
        ValueError: If step is zero or negative.
    """
    step_seconds = step.total_seconds()
    if step_seconds <= 0:
        raise ValueError(f"Step must be positive, got {step}")

    start = as_utc(start) if start is not None else result.request.epoch
    num_points = math.floor(duration.total_seconds() / step_seconds + 1e-9) + 1

    points: list[GroundTrackPoint] = []
    for i in range(max(num_points, 1)):
        current_time = start + timedelta(seconds=i * step_seconds)
        state = state_at(result, current_time)
        pos_ecef = eci_to_ecef(state.position_eci_km, gmst_rad(current_time))
        lat_deg, lon_deg, alt_km = ecef_to_geodetic(pos_ecef)
        points.append(GroundTrackPoint(
            time=current_time,
            lat_deg=lat_deg,
            lon_deg=lon_deg,
            alt_km=alt_km,
        ))

    return points
