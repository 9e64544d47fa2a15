# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Ground-station pass prediction.

Sweeps a propagation result at a fixed cadence, converts each sample to
ECEF once, and drives one OUTSIDE_VIEW → IN_VIEW → OUTSIDE_VIEW state
machine per active station:

    AOS: first sample with elevation >= the station's minimum elevation
    TCA: sample with the highest elevation seen during the pass
    LOS: first sample back below the threshold

Passes shorter than 60 s are dropped as grazing contacts. A pass still in
view when the window ends has no observed LOS and is not reported.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum

from skypass.domain.coordinate_frames import as_utc, eci_to_ecef, gmst_rad
from skypass.domain.observation import GroundStation, compute_observation, station_ecef
from skypass.domain.propagation_result import PropagationResult, covered_span, state_at

logger = logging.getLogger(__name__)

MIN_PASS_DURATION_S = 60.0
DEFAULT_STEP = timedelta(seconds=30)

# Fraction of the nominal data rate achieved over a pass.
LINK_EFFICIENCY = 0.7


class PassQuality(Enum):
    """Pass grade from maximum elevation."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"


def grade_pass(max_elevation_deg: float) -> PassQuality:
    """≥60° → A, ≥30° → B, ≥10° → C, otherwise D."""
    if max_elevation_deg >= 60.0:
        return PassQuality.A
    if max_elevation_deg >= 30.0:
        return PassQuality.B
    if max_elevation_deg >= 10.0:
        return PassQuality.C
    return PassQuality.D


@dataclass(frozen=True)
class TrackPoint:
    """One in-view sample of a pass; time_offset_s is measured from AOS."""
    azimuth_deg: float
    elevation_deg: float
    time_offset_s: float


@dataclass(frozen=True)
class PassRecord:
    """A single contact pass between one station and the satellite."""
    station_name: str
    station_id: str
    aos: datetime
    los: datetime
    tca: datetime
    max_elevation_deg: float
    aos_azimuth_deg: float
    los_azimuth_deg: float
    duration_s: float
    quality: PassQuality
    track: tuple[TrackPoint, ...] = field(default=(), repr=False)


class _ViewState(Enum):
    OUTSIDE_VIEW = "outside"
    IN_VIEW = "in_view"


class _StationSweep:
    """Per-station pass state machine fed one sample at a time."""

    def __init__(self, station: GroundStation, record_track: bool) -> None:
        self.station = station
        self.position_ecef = station_ecef(station)
        self._record_track = record_track
        self._state = _ViewState.OUTSIDE_VIEW
        self._aos = None
        self._aos_az = 0.0
        self._max_el = 0.0
        self._tca = None
        self._last_az = 0.0
        self._track: list[TrackPoint] = []
        self.passes: list[PassRecord] = []

    def feed(self, time: datetime, sat_ecef) -> None:
        obs = compute_observation(self.station, sat_ecef, self.position_ecef)
        el = obs.elevation_deg

        if el >= self.station.min_elevation_deg:
            if self._state is _ViewState.OUTSIDE_VIEW:
                self._state = _ViewState.IN_VIEW
                self._aos = time
                self._aos_az = obs.azimuth_deg
                self._max_el = el
                self._tca = time
                self._track = []
            elif el > self._max_el:
                self._max_el = el
                self._tca = time
            self._last_az = obs.azimuth_deg
            if self._record_track:
                self._track.append(TrackPoint(
                    azimuth_deg=obs.azimuth_deg,
                    elevation_deg=el,
                    time_offset_s=(time - self._aos).total_seconds(),
                ))
        elif self._state is _ViewState.IN_VIEW:
            self._state = _ViewState.OUTSIDE_VIEW
            self._close(time)

    def _close(self, los: datetime) -> None:
        duration_s = (los - self._aos).total_seconds()
        if duration_s < MIN_PASS_DURATION_S:
            return
        self.passes.append(PassRecord(
            station_name=self.station.name,
            station_id=self.station.station_id,
            aos=self._aos,
            los=los,
            tca=self._tca,
            max_elevation_deg=self._max_el,
            aos_azimuth_deg=self._aos_az,
            los_azimuth_deg=self._last_az,
            duration_s=duration_s,
            quality=grade_pass(self._max_el),
            track=tuple(self._track),
        ))

    @property
    def in_view(self) -> bool:
        return self._state is _ViewState.IN_VIEW


def predict_passes(
    source: PropagationResult,
    stations: list[GroundStation],
    start: datetime | None = None,
    duration: timedelta = timedelta(days=1),
    step: timedelta = DEFAULT_STEP,
    record_track: bool = False,
) -> list[PassRecord]:
    """
    Predict contact passes over a set of ground stations.

    Inactive stations are skipped. Each sample is propagated and rotated
    to ECEF once, then shared by all stations. A station that never
    rises above its threshold yields no passes.

    Args:
        source: Analytic or numerical propagation result.
        stations: Ground stations (each with its own minimum elevation).
        start: Window start (UTC); defaults to the propagation epoch.
        duration: Window length.
        step: Sweep cadence.
        record_track: Attach the in-view az/el samples to each pass.

    Returns:
        Passes from all stations, sorted by AOS.

    Raises:
        ValueError: If step is not positive or duration is negative.
    """
    step_seconds = step.total_seconds()
    if step_seconds <= 0:
        raise ValueError(f"Step must be positive, got {step}")
    duration_seconds = duration.total_seconds()
    if duration_seconds < 0:
        raise ValueError(f"Duration must be non-negative, got {duration}")

    start = as_utc(start) if start is not None else source.request.epoch
    sweeps = [_StationSweep(s, record_track) for s in stations if s.active]
    if not sweeps:
        return []

    span = covered_span(source)
    if span is not None and start + duration > span[1]:
        logger.warning(
            "Pass window ends %s after the propagated trajectory; positions past %s are held at the last sample",
            start + duration - span[1], span[1].isoformat(),
        )

    num_samples = math.floor(duration_seconds / step_seconds + 1e-9) + 1
    for i in range(num_samples):
        current_time = start + timedelta(seconds=i * step_seconds)
        state = state_at(source, current_time)
        sat_ecef = eci_to_ecef(state.position_eci_km, gmst_rad(current_time))
        for sweep in sweeps:
            sweep.feed(current_time, sat_ecef)

    passes: list[PassRecord] = []
    for sweep in sweeps:
        if sweep.in_view:
            logger.debug("Pass over %s still open at window end; not reported", sweep.station.name)
        passes.extend(sweep.passes)
    passes.sort(key=lambda p: p.aos)
    return passes


# --- Contact statistics ---

@dataclass(frozen=True)
class PassMetrics:
    """Aggregate contact statistics over a prediction window."""
    passes_per_day: float
    mean_pass_duration_min: float
    max_gap_hours: float
    daily_contact_min: float
    daily_data_mb: float
    total_contact_min: float
    total_passes: int


@dataclass(frozen=True)
class ContactGap:
    """Interval without contact between consecutive passes."""
    start: datetime
    end: datetime
    duration_hours: float
    is_longest: bool = False


def compute_pass_metrics(
    passes: list[PassRecord],
    duration_days: float,
    data_rate_kbps: float,
) -> PassMetrics:
    """
    Contact statistics for a pass list.

    Per-day figures divide by max(1, duration_days). Data volume assumes
    the nominal rate over the whole contact time at LINK_EFFICIENCY, in
    MiB. With no passes the whole window counts as one gap.
    """
    days = max(1.0, duration_days)
    if not passes:
        return PassMetrics(
            passes_per_day=0.0,
            mean_pass_duration_min=0.0,
            max_gap_hours=duration_days * 24.0,
            daily_contact_min=0.0,
            daily_data_mb=0.0,
            total_contact_min=0.0,
            total_passes=0,
        )

    ordered = sorted(passes, key=lambda p: p.aos)
    total_contact_s = sum(p.duration_s for p in ordered)
    max_gap_s = 0.0
    for prev, cur in zip(ordered, ordered[1:]):
        max_gap_s = max(max_gap_s, (cur.aos - prev.los).total_seconds())

    daily_contact_s = total_contact_s / days
    daily_bits = data_rate_kbps * 1000.0 * daily_contact_s * LINK_EFFICIENCY

    return PassMetrics(
        passes_per_day=len(ordered) / days,
        mean_pass_duration_min=total_contact_s / len(ordered) / 60.0,
        max_gap_hours=max_gap_s / 3600.0,
        daily_contact_min=daily_contact_s / 60.0,
        daily_data_mb=daily_bits / 8.0 / 1024.0 / 1024.0,
        total_contact_min=total_contact_s / 60.0,
        total_passes=len(ordered),
    )


def compute_contact_gaps(passes: list[PassRecord]) -> list[ContactGap]:
    """Gaps between consecutive passes (by AOS); overlaps are skipped.

    The single longest gap is flagged with is_longest.
    """
    ordered = sorted(passes, key=lambda p: p.aos)
    gaps: list[ContactGap] = []
    for prev, cur in zip(ordered, ordered[1:]):
        gap_s = (cur.aos - prev.los).total_seconds()
        if gap_s > 0:
            gaps.append(ContactGap(start=prev.los, end=cur.aos, duration_hours=gap_s / 3600.0))

    if gaps:
        longest = max(range(len(gaps)), key=lambda i: gaps[i].duration_hours)
        gaps[longest] = replace(gaps[longest], is_longest=True)
    return gaps
