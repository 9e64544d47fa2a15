# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the cylindrical Earth-shadow test."""
import numpy as np
import pytest

from skypass.domain.eclipse import is_in_shadow
from skypass.domain.orbital_mechanics import OrbitalConstants

_SUN = (1.496e8, 0.0, 0.0)
R_EQ = OrbitalConstants.R_EARTH_EQUATORIAL


class TestIsInShadow:

    def test_sunlit_side(self):
        assert not is_in_shadow((7000.0, 0.0, 0.0), _SUN)

    def test_behind_earth(self):
        assert is_in_shadow((-7000.0, 0.0, 0.0), _SUN)

    def test_anti_sun_side_outside_cylinder(self):
        assert not is_in_shadow((-7000.0, R_EQ + 10.0, 0.0), _SUN)

    def test_anti_sun_side_inside_cylinder(self):
        assert is_in_shadow((-7000.0, R_EQ - 10.0, 0.0), _SUN)

    def test_terminator_is_sunlit(self):
        assert not is_in_shadow((0.0, 7000.0, 0.0), _SUN)

    def test_accepts_arrays(self):
        assert is_in_shadow(np.array([0.0, 0.0, 0.0]) - np.array([7000.0, 0.0, 0.0]), np.array(_SUN))

    @pytest.mark.parametrize("radius", [100.0, 6000.0])
    def test_custom_radius(self, radius):
        sat = (-7000.0, radius + 50.0, 0.0)
        assert not is_in_shadow(sat, _SUN, earth_radius_km=radius)
        assert is_in_shadow(sat, _SUN, earth_radius_km=radius + 100.0)
