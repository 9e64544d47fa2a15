# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the exponential atmospheric density model."""
import math

import pytest

from skypass.domain.atmosphere import MAX_ALTITUDE_KM, MIN_ALTITUDE_KM, atmospheric_density


class TestAtmosphericDensity:

    def test_sea_level(self):
        assert atmospheric_density(0.0) == pytest.approx(1.225)

    def test_table_base_values(self):
        assert atmospheric_density(400.0) == pytest.approx(3.725e-12)
        assert atmospheric_density(1000.0) == pytest.approx(3.019e-15)

    def test_interpolates_within_band(self):
        """Half way through a band the density follows exp(-Δh/H)."""
        expected = 3.725e-12 * math.exp(-25.0 / 58.515)
        assert atmospheric_density(425.0) == pytest.approx(expected)

    def test_monotonically_decreasing(self):
        altitudes = [h * 10.0 for h in range(0, 101)]
        densities = [atmospheric_density(h) for h in altitudes]
        for lower, upper in zip(densities, densities[1:]):
            assert upper < lower

    def test_leo_order_of_magnitude(self):
        assert 1e-13 < atmospheric_density(500.0) < 1e-11

    @pytest.mark.parametrize("alt", [-1.0, 1000.1, 5000.0, float("nan"), float("inf")])
    def test_zero_outside_validity(self, alt):
        assert atmospheric_density(alt) == 0.0

    def test_validity_bounds(self):
        assert MIN_ALTITUDE_KM == 0.0
        assert MAX_ALTITUDE_KM == 1000.0
