#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 17:02:11 2026

@author: Mike
"""

import unittest
from math import sqrt, pi
from pytest import approx
import numpy as np
import numpy.testing as npt

from optibench.util.misc_math import (normalize, is_kinda_big, isanumber,
                                      is_finite_vec, transverse_radius,
                                      solve_quadratic, intersect_aabb,
                                      perpendicular_frame, euler2quat,
                                      quat2euler, rotate_about_axis)
from optibench.util.spectral_colors import (wavelength_to_rgb,
                                            wavelength_to_hex, is_visible)


class MiscMathTestCase(unittest.TestCase):

    def test_normalize(self):
        v0 = normalize(np.array([0., 0., 0.]))
        npt.assert_array_equal(v0, np.array([0., 0., 0.]))

        v1 = normalize(np.array([1., 1., 1.]))
        sqrRt3 = sqrt(3)/3
        npt.assert_allclose(v1, np.array([sqrRt3, sqrRt3, sqrRt3]),
                            rtol=1e-14)

    def test_number_checks(self):
        assert is_kinda_big(np.inf)
        assert is_kinda_big(-1e10)
        assert not is_kinda_big(1e4)
        assert isanumber('1.5')
        assert not isanumber('N-BK7')
        assert not isanumber(None)
        assert is_finite_vec([1., 2., 3.])
        assert not is_finite_vec([1., np.nan, 3.])
        assert transverse_radius([3., 4., 10.]) == approx(5.)

    def test_solve_quadratic(self):
        assert solve_quadratic(1., -3., 2.) == approx([1., 2.])
        assert solve_quadratic(1., 0., 1.) == []
        assert solve_quadratic(0., 2., -4.) == approx([2.])
        assert solve_quadratic(0., 0., 1.) == []
        roots = solve_quadratic(1., 1e8, 1.)
        assert roots[1] == approx(-1e-8, rel=1e-6)

    def test_intersect_aabb(self):
        box_min = np.array([-1., -1., -1.])
        box_max = np.array([1., 1., 1.])
        hit, t_min, t_max = intersect_aabb(np.array([0., 0., -5.]),
                                           np.array([0., 0., 1.]),
                                           box_min, box_max)
        assert hit
        assert t_min == approx(4.)
        assert t_max == approx(6.)

        # parallel to a slab and outside of it
        hit, _, _ = intersect_aabb(np.array([0., 2., -5.]),
                                   np.array([0., 0., 1.]), box_min, box_max)
        assert not hit

        # box behind the ray
        hit, _, _ = intersect_aabb(np.array([0., 0., 5.]),
                                   np.array([0., 0., 1.]), box_min, box_max)
        assert not hit

    def test_perpendicular_frame(self):
        for d in (np.array([0., 0., 1.]), np.array([0., 1., 0.]),
                  normalize(np.array([1., 2., 3.]))):
            right, up = perpendicular_frame(d)
            assert np.dot(right, d) == approx(0., abs=1e-12)
            assert np.dot(up, d) == approx(0., abs=1e-12)
            assert np.dot(right, up) == approx(0., abs=1e-12)
            assert np.linalg.norm(right) == approx(1.)
            assert np.linalg.norm(up) == approx(1.)

    def test_euler_round_trip(self):
        angles = (0.1, -0.2, 0.3)
        q = euler2quat(*angles)
        assert np.linalg.norm(q) == approx(1.)
        npt.assert_allclose(quat2euler(q), angles, atol=1e-12)

    def test_rotate_about_axis(self):
        v = rotate_about_axis(np.array([1., 0., 0.]),
                              np.array([0., 0., 1.]), pi/2)
        npt.assert_allclose(v, [0., 1., 0.], atol=1e-12)


class SpectralColorsTestCase(unittest.TestCase):

    def test_visible_range(self):
        assert is_visible(550.)
        assert not is_visible(300.)
        assert wavelength_to_hex(300.) == '#888888'
        assert wavelength_to_hex(1064.) == '#888888'

    def test_colors(self):
        r, g, b = wavelength_to_rgb(700.)
        assert r > 0.
        assert g == 0.
        assert b == 0.
        r, g, b = wavelength_to_rgb(450.)
        assert b == approx(1.)
        hex_str = wavelength_to_hex(532.)
        assert hex_str.startswith('#')
        assert len(hex_str) == 7


if __name__ == '__main__':
    unittest.main(verbosity=3)
