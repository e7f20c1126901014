#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 18:52:26 2026

@author: Mike
"""

import unittest
from math import sqrt
from pytest import approx
import numpy as np
import numpy.testing as npt

from optibench.util.misc_math import normalize
from optibench.raytr.rays import Ray
from optibench.raytr.raytrace import bend
from optibench.raytr.traceerror import TraceTIRError
from optibench.elem.lenses import IdealLens, SphericalLens, CylindricalLens


class IdealLensTestCase(unittest.TestCase):
    def setUp(self):
        self.lens = IdealLens(focal_length=50.)

    def test_focus(self):
        for h in (1., 5., 10.):
            ray = Ray([0., h, -10.], [0., 0., 1.])
            out = self.lens.interact(ray, self.lens.chk_intersection(ray))[0]
            t = -out.origin[1]/out.direction[1]
            z_cross = out.origin[2] + t*out.direction[2]
            assert z_cross == approx(50., abs=1e-9)

    def test_axial_ray(self):
        ray = Ray([0., 0., -10.], [0., 0., 1.])
        out = self.lens.interact(ray, self.lens.chk_intersection(ray))[0]
        npt.assert_allclose(out.direction, [0., 0., 1.])
        assert out.opl == approx(10.)

    def test_phase(self):
        ray = Ray([0., 5., -10.], [0., 0., 1.])
        out = self.lens.interact(ray, self.lens.chk_intersection(ray))[0]
        assert out.opl == approx(10. - 25./100.)

    def test_malformed(self):
        lens = IdealLens(focal_length=0.)
        assert lens.is_malformed()
        ray = Ray([0., 0., -10.], [0., 0., 1.])
        hit = lens.chk_intersection(ray)
        assert hit.is_blocked
        assert lens.interact(ray, hit) == []

    def test_abcd(self):
        assert self.lens.get_abcd() == (1., 0., -0.02, 1.)


class SphericalLensTestCase(unittest.TestCase):

    def test_flat_plate(self):
        plate = SphericalLens(r1=np.inf, r2=np.inf, thickness=5.,
                              material=1.5)
        ray = Ray([0., 0., -10.], [0., 0., 1.])
        out = plate.interact(ray, plate.chk_intersection(ray))[0]
        npt.assert_allclose(out.origin, [0., 0., 2.5], atol=1e-12)
        npt.assert_allclose(out.direction, [0., 0., 1.], atol=1e-12)
        assert out.opl == approx(7.5 + 5.*1.5)
        npt.assert_allclose(out.entry_point, [0., 0., -2.5], atol=1e-12)

        d_in = normalize(np.array([0., 0.2, 1.]))
        ray = Ray([0., -2., -10.], d_in)
        out = plate.interact(ray, plate.chk_intersection(ray))[0]
        npt.assert_allclose(out.direction, d_in, atol=1e-12)

    def test_total_internal_reflection(self):
        # plano-convex, the marginal ray meets the back face at 53 degrees
        lens = SphericalLens(r1=np.inf, r2=-10., thickness=8.,
                             aperture_radius=9., material=1.5)
        assert not lens.is_malformed()
        ray = Ray([0., 8., -20.], [0., 0., 1.])
        hit = lens.chk_intersection(ray)
        assert hit is not None
        assert lens.interact(ray, hit) == []

        # a paraxial ray gets through and is focused
        ray = Ray([0., 1., -20.], [0., 0., 1.])
        out = lens.interact(ray, lens.chk_intersection(ray))
        assert len(out) == 1
        assert out[0].direction[1] < 0.

    def test_focal_length(self):
        lens = SphericalLens(r1=50., r2=-50., thickness=5., material=1.5)
        # lensmaker's equation
        phi = 0.5*(2/50. - 0.5*5./(1.5*50.*50.))
        assert lens.focal_length() == approx(1/phi)
        assert lens.get_aperture_radius() == approx(12.7)

    def test_catalog_glass(self):
        lens = SphericalLens(material='N-BK7, Schott')
        assert lens.medium_index(587.5618e-9) == approx(1.5168, abs=1e-4)

    def test_malformed(self):
        lens = SphericalLens(r1=5., r2=-50., aperture_radius=10.)
        assert lens.is_malformed()
        ray = Ray([0., 0., -10.], [0., 0., 1.])
        hit = lens.chk_intersection(ray)
        assert hit.is_blocked
        assert lens.interact(ray, hit) == []

    def test_rim_absorbs(self):
        lens = SphericalLens(r1=50., r2=-50., thickness=5.,
                             aperture_radius=12.7, material=1.5)
        ray = Ray([0., -20., 0.], [0., 1., 0.])
        hit = lens.chk_intersection(ray)
        assert hit.is_blocked
        assert hit.face == 'rim'


class CylindricalLensTestCase(unittest.TestCase):
    def setUp(self):
        self.lens = CylindricalLens(r1=50., thickness=5., material=1.5)

    def test_power_in_v_only(self):
        ray = Ray([5., 0., -10.], [0., 0., 1.])
        out = self.lens.interact(ray, self.lens.chk_intersection(ray))[0]
        npt.assert_allclose(out.direction, [0., 0., 1.], atol=1e-12)

        ray = Ray([0., 5., -10.], [0., 0., 1.])
        out = self.lens.interact(ray, self.lens.chk_intersection(ray))[0]
        assert out.direction[0] == approx(0., abs=1e-12)
        assert out.direction[1] < 0.

    def test_abcd_xy(self):
        abcd_x, abcd_y = self.lens.get_abcd_xy()
        assert abcd_x == approx((1., 5./1.5, 0., 1.))
        assert abcd_y[2] == approx(-0.5/50.)

    def test_rectangular_aperture(self):
        lens = CylindricalLens(aperture_radius=5., width=30.)
        assert lens.in_aperture([14., 4., 0.])
        assert not lens.in_aperture([4., 6., 0.])


class BendTestCase(unittest.TestCase):

    def test_snell(self):
        s = 0.5
        d = np.array([0., s, sqrt(1 - s*s)])
        d_out = bend(d, np.array([0., 0., -1.]), 1., 1.5)
        assert d_out[1]*1.5 == approx(s)
        assert np.linalg.norm(d_out) == approx(1.)

    def test_tir(self):
        d = normalize(np.array([0., 1., 1.]))
        with self.assertRaises(TraceTIRError):
            bend(d, np.array([0., 0., -1.]), 1.5, 1.)


if __name__ == '__main__':
    unittest.main(verbosity=3)
