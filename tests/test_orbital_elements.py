# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for classical elements ↔ Cartesian state conversion."""
import math
from dataclasses import replace
from datetime import datetime, timezone

import numpy as np
import pytest

from skypass.domain.errors import EscapeTrajectoryError, InvalidOrbitError
from skypass.domain.orbital_elements import (
    OrbitalElements,
    StateVector,
    cartesian_to_keplerian,
    keplerian_to_cartesian,
)
from skypass.domain.orbital_mechanics import OrbitalConstants

_EPOCH = datetime(2026, 3, 20, 12, 0, 0, tzinfo=timezone.utc)


def _state(elements: OrbitalElements) -> StateVector:
    pos, vel = keplerian_to_cartesian(elements)
    return StateVector(time=_EPOCH, position_eci_km=pos, velocity_eci_km_s=vel)


def _angle_diff_deg(a: float, b: float) -> float:
    return abs((a - b + 180.0) % 360.0 - 180.0)


@pytest.fixture
def leo():
    return OrbitalElements(
        semi_major_axis_km=6878.137,
        eccentricity=0.001,
        inclination_deg=97.4,
        raan_deg=45.0,
        arg_perigee_deg=30.0,
        true_anomaly_deg=60.0,
    )


# ── Value types ──────────────────────────────────────────────────

class TestOrbitalElements:

    def test_frozen(self, leo):
        with pytest.raises(AttributeError):
            leo.eccentricity = 0.5  # type: ignore[misc]

    def test_replace_produces_new_value(self, leo):
        moved = replace(leo, true_anomaly_deg=90.0)
        assert moved.true_anomaly_deg == 90.0
        assert leo.true_anomaly_deg == 60.0

    @pytest.mark.parametrize("field,value", [
        ("eccentricity", -0.1),
        ("semi_major_axis_km", 0.0),
        ("inclination_deg", float("nan")),
        ("raan_deg", float("inf")),
    ])
    def test_invalid_values_rejected(self, leo, field, value):
        with pytest.raises(InvalidOrbitError):
            replace(leo, **{field: value})

    def test_invalid_orbit_error_is_value_error(self, leo):
        with pytest.raises(ValueError):
            replace(leo, eccentricity=-1.0)

    def test_is_elliptical(self, leo):
        assert leo.is_elliptical
        assert not replace(leo, eccentricity=1.2, semi_major_axis_km=-9000.0).is_elliptical


class TestStateVector:

    def test_derived_magnitudes(self):
        sv = StateVector(time=_EPOCH, position_eci_km=(3.0, 4.0, 0.0), velocity_eci_km_s=(0.0, 0.0, 2.0))
        assert sv.radius_km == pytest.approx(5.0)
        assert sv.speed_km_s == pytest.approx(2.0)
        assert list(sv.as_array()) == [3.0, 4.0, 0.0, 0.0, 0.0, 2.0]


# ── Elements → state ─────────────────────────────────────────────

class TestKeplerianToCartesian:

    def test_circular_radius_and_speed(self):
        a = 7000.0
        el = OrbitalElements(a, 0.0, 51.6, 10.0, 0.0, 123.0)
        pos, vel = keplerian_to_cartesian(el)
        assert np.linalg.norm(pos) == pytest.approx(a)
        assert np.linalg.norm(vel) == pytest.approx(math.sqrt(OrbitalConstants.MU_EARTH / a))

    def test_equatorial_periapsis_on_x_axis(self):
        el = OrbitalElements(8000.0, 0.1, 0.0, 0.0, 0.0, 0.0)
        pos, vel = keplerian_to_cartesian(el)
        assert pos[0] == pytest.approx(8000.0 * 0.9)
        assert pos[1] == pytest.approx(0.0, abs=1e-9)
        assert vel[0] == pytest.approx(0.0, abs=1e-12)
        assert vel[1] > 0

    def test_polar_orbit_reaches_pole(self):
        el = OrbitalElements(7000.0, 0.0, 90.0, 0.0, 0.0, 90.0)
        pos, _ = keplerian_to_cartesian(el)
        assert pos[2] == pytest.approx(7000.0)

    def test_hyperbolic_rejected_by_default(self):
        el = OrbitalElements(-20000.0, 1.5, 30.0, 0.0, 0.0, 0.0)
        with pytest.raises(InvalidOrbitError):
            keplerian_to_cartesian(el)

    def test_hyperbolic_allowed_on_request(self):
        el = OrbitalElements(-20000.0, 1.5, 30.0, 0.0, 0.0, 0.0)
        pos, _ = keplerian_to_cartesian(el, allow_hyperbolic=True)
        assert np.linalg.norm(pos) == pytest.approx(20000.0 * 0.5)

    def test_hyperbolic_beyond_asymptote_rejected(self):
        el = OrbitalElements(-20000.0, 1.5, 30.0, 0.0, 0.0, 150.0)
        with pytest.raises(InvalidOrbitError):
            keplerian_to_cartesian(el, allow_hyperbolic=True)

    def test_parabolic_always_rejected(self):
        el = OrbitalElements(-20000.0, 1.0, 30.0, 0.0, 0.0, 0.0)
        with pytest.raises(InvalidOrbitError):
            keplerian_to_cartesian(el, allow_hyperbolic=True)


# ── State → elements ─────────────────────────────────────────────

class TestCartesianToKeplerian:

    def test_round_trip_broad_sample(self):
        """Elements survive a state round trip to 1e-6 relative tolerance."""
        for a in (6578.0, 7178.0, 26560.0, 42164.0):
            for e in (0.001, 0.1, 0.4, 0.8):
                for inc in (1.0, 28.5, 63.4, 97.4, 135.0, 179.0):
                    el = OrbitalElements(a, e, inc, 250.0, 80.0, 200.0)
                    back = cartesian_to_keplerian(_state(el))
                    assert back.semi_major_axis_km == pytest.approx(a, rel=1e-6)
                    assert back.eccentricity == pytest.approx(e, rel=1e-6)
                    assert back.inclination_deg == pytest.approx(inc, rel=1e-6)
                    assert _angle_diff_deg(back.raan_deg, 250.0) < 1e-6 * 360
                    assert _angle_diff_deg(back.arg_perigee_deg, 80.0) < 1e-6 * 360
                    assert _angle_diff_deg(back.true_anomaly_deg, 200.0) < 1e-6 * 360

    def test_equatorial_uses_longitude_of_periapsis(self):
        el = OrbitalElements(8000.0, 0.05, 0.0, 40.0, 30.0, 10.0)
        back = cartesian_to_keplerian(_state(el))
        assert back.raan_deg == 0.0
        assert _angle_diff_deg(back.arg_perigee_deg, 70.0) < 1e-8
        assert _angle_diff_deg(back.true_anomaly_deg, 10.0) < 1e-8

    def test_retrograde_equatorial_round_trip(self):
        el = OrbitalElements(8000.0, 0.05, 180.0, 0.0, 30.0, 10.0)
        back = cartesian_to_keplerian(_state(el))
        assert back.raan_deg == 0.0
        assert back.inclination_deg == pytest.approx(180.0)
        pos, _ = keplerian_to_cartesian(back)
        assert np.allclose(pos, _state(el).position_eci_km, atol=1e-6)

    def test_circular_uses_argument_of_latitude(self):
        el = OrbitalElements(7000.0, 0.0, 51.6, 100.0, 0.0, 75.0)
        back = cartesian_to_keplerian(_state(el))
        assert back.arg_perigee_deg == 0.0
        assert _angle_diff_deg(back.raan_deg, 100.0) < 1e-8
        assert _angle_diff_deg(back.true_anomaly_deg, 75.0) < 1e-6

    def test_circular_equatorial_true_longitude(self):
        el = OrbitalElements(7000.0, 0.0, 0.0, 0.0, 0.0, 123.0)
        back = cartesian_to_keplerian(_state(el))
        assert back.raan_deg == 0.0
        assert back.arg_perigee_deg == 0.0
        assert _angle_diff_deg(back.true_anomaly_deg, 123.0) < 1e-8

    def test_no_nan_in_degenerate_cases(self):
        for el in (
            OrbitalElements(7000.0, 0.0, 0.0, 0.0, 0.0, 0.0),
            OrbitalElements(7000.0, 0.0, 180.0, 0.0, 0.0, 270.0),
        ):
            back = cartesian_to_keplerian(_state(el))
            assert all(math.isfinite(v) for v in (
                back.raan_deg, back.arg_perigee_deg, back.true_anomaly_deg,
            ))

    def test_escape_velocity_flagged(self):
        r = 7000.0
        v_esc = math.sqrt(2 * OrbitalConstants.MU_EARTH / r)
        sv = StateVector(time=_EPOCH, position_eci_km=(r, 0.0, 0.0), velocity_eci_km_s=(0.0, v_esc * 1.1, 0.0))
        with pytest.raises(EscapeTrajectoryError):
            cartesian_to_keplerian(sv)

    def test_escape_error_is_invalid_orbit(self):
        assert issubclass(EscapeTrajectoryError, InvalidOrbitError)

    def test_unbound_allowed_on_request(self):
        r = 7000.0
        v_esc = math.sqrt(2 * OrbitalConstants.MU_EARTH / r)
        sv = StateVector(time=_EPOCH, position_eci_km=(r, 0.0, 0.0), velocity_eci_km_s=(0.0, v_esc * 1.1, 0.0))
        el = cartesian_to_keplerian(sv, allow_unbound=True)
        assert el.eccentricity > 1.0
        assert el.semi_major_axis_km < 0.0

    def test_rectilinear_state_rejected(self):
        sv = StateVector(time=_EPOCH, position_eci_km=(7000.0, 0.0, 0.0), velocity_eci_km_s=(1.0, 0.0, 0.0))
        with pytest.raises(InvalidOrbitError):
            cartesian_to_keplerian(sv)
