# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for coordinate frame conversions (ECI→ECEF→Geodetic)."""
import math
from datetime import datetime, timezone

import pytest

from skypass.domain.coordinate_frames import (
    as_utc,
    ecef_to_eci,
    ecef_to_geodetic,
    eci_to_ecef,
    geodetic_to_ecef,
    gmst_rad,
)
from skypass.domain.orbital_mechanics import OrbitalConstants


# ── GMST computation ──────────────────────────────────────────────

class TestGMST:

    def test_gmst_returns_radians_in_range(self):
        """GMST must be in [0, 2π)."""
        epoch = datetime(2026, 3, 20, 12, 0, 0, tzinfo=timezone.utc)
        theta = gmst_rad(epoch)
        assert 0 <= theta < 2 * math.pi

    def test_gmst_j2000_epoch_reference(self):
        """At J2000.0 (2000-01-01 12:00 UTC), GMST ≈ 280.46°."""
        j2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert gmst_rad(j2000) == pytest.approx(math.radians(280.46061837), abs=1e-9)

    def test_gmst_advances_with_time(self):
        """6 hours ≈ π/2 radians of Earth rotation."""
        t1 = datetime(2026, 6, 15, 0, 0, 0, tzinfo=timezone.utc)
        t2 = datetime(2026, 6, 15, 6, 0, 0, tzinfo=timezone.utc)
        diff = (gmst_rad(t2) - gmst_rad(t1)) % (2 * math.pi)
        assert abs(diff - math.pi / 2) < math.radians(2)

    def test_naive_datetime_is_utc(self):
        naive = datetime(2026, 6, 15, 3, 0, 0)
        aware = datetime(2026, 6, 15, 3, 0, 0, tzinfo=timezone.utc)
        assert gmst_rad(naive) == gmst_rad(aware)
        assert as_utc(naive).tzinfo is timezone.utc


# ── ECI ↔ ECEF ────────────────────────────────────────────────────

class TestECItoECEF:

    def test_identity_at_zero_gmst(self):
        pos = (7000.0, 100.0, -300.0)
        assert eci_to_ecef(pos, 0.0) == pytest.approx(pos)

    def test_90deg_rotation(self):
        """ECI x-axis appears at ECEF -y after a quarter turn of the Earth."""
        x, y, z = eci_to_ecef((7000.0, 0.0, 0.0), math.pi / 2)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(-7000.0)
        assert z == 0.0

    def test_rotation_preserves_magnitude(self):
        pos = (6778.0, 1234.0, 3456.0)
        r = math.sqrt(sum(p**2 for p in pos))
        for angle_deg in (0, 45, 90, 135, 180, 270):
            out = eci_to_ecef(pos, math.radians(angle_deg))
            assert math.sqrt(sum(p**2 for p in out)) == pytest.approx(r)

    def test_z_unchanged(self):
        assert eci_to_ecef((1.0, 2.0, 3.0), 1.234)[2] == 3.0

    def test_inverse(self):
        pos = (6778.0, -1234.0, 3456.0)
        angle = 2.345
        back = ecef_to_eci(eci_to_ecef(pos, angle), angle)
        assert back == pytest.approx(pos, abs=1e-9)


# ── Geodetic ─────────────────────────────────────────────────────

class TestGeodetic:

    def test_equator_prime_meridian(self):
        x, y, z = geodetic_to_ecef(0.0, 0.0, 0.0)
        assert x == pytest.approx(OrbitalConstants.R_EARTH_EQUATORIAL)
        assert y == pytest.approx(0.0)
        assert z == pytest.approx(0.0)

    def test_north_pole(self):
        x, y, z = geodetic_to_ecef(90.0, 0.0, 0.0)
        assert math.hypot(x, y) == pytest.approx(0.0, abs=1e-9)
        assert z == pytest.approx(OrbitalConstants.R_EARTH_POLAR, abs=1e-6)

    def test_pole_to_geodetic(self):
        lat, _, alt = ecef_to_geodetic((0.0, 0.0, OrbitalConstants.R_EARTH_POLAR + 500.0))
        assert lat == pytest.approx(90.0)
        assert alt == pytest.approx(500.0, abs=1e-6)

    def test_round_trip_sub_meter(self):
        for lat in (-89.9, -45.0, -10.0, 0.0, 33.3, 78.23, 89.9):
            for lon in (-179.0, -60.0, 0.0, 15.39, 120.0, 180.0):
                for alt in (0.0, 0.5, 500.0, 35786.0):
                    pos = geodetic_to_ecef(lat, lon, alt)
                    lat2, lon2, alt2 = ecef_to_geodetic(pos)
                    back = geodetic_to_ecef(lat2, lon2, alt2)
                    dist = math.sqrt(sum((a - b) ** 2 for a, b in zip(pos, back)))
                    assert dist < 1e-3, f"lat={lat}, lon={lon}, alt={alt}: {dist} km"
                    assert lat2 == pytest.approx(lat, abs=1e-8)
                    assert alt2 == pytest.approx(alt, abs=1e-6)

    def test_longitude_range(self):
        _, lon, _ = ecef_to_geodetic(geodetic_to_ecef(0.0, 200.0, 0.0))
        assert -180.0 < lon <= 180.0
        assert lon == pytest.approx(-160.0)
