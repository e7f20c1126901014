#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 17:48:37 2026

@author: Mike
"""

import unittest
from math import sqrt
from pytest import approx
import numpy as np
import numpy.testing as npt

from optibench.raytr.traceerror import TraceMissedSurfaceError
from optibench.elem.profiles import (Spherical, Cylindrical, Cylinder, Cone,
                                     Annulus, intersect_plane, try_intersect,
                                     facing_normal, sphere_chord)


class SphericalProfileTestCase(unittest.TestCase):
    def setUp(self):
        self.dir0 = np.array([0., 0., 1.])
        self.p0 = np.array([0., 0., -1.])
        self.p1 = np.array([0., 1., -1.])
        self.eps = 1.0e-12
        self.z_dir = 1.0

    def test_planar_sphere(self):
        s1 = Spherical(c=0.0)
        s, pt = s1.intersect(self.p0, self.dir0, self.eps, self.z_dir)
        assert s == approx(1.0)
        npt.assert_allclose(pt, [0., 0., 0.], atol=1e-14)

        s, pt = s1.intersect(self.p1, self.dir0, self.eps, self.z_dir)
        assert s == approx(1.0)
        npt.assert_allclose(pt, [0., 1., 0.], atol=1e-14)

    def test_convex_sphere(self):
        r2 = 10
        s2 = Spherical(r=r2)
        assert s2.cv == approx(0.1)

        s, pt = s2.intersect(self.p1, self.dir0, self.eps, self.z_dir)
        sag = r2 - sqrt(r2*r2 - 1.)
        assert pt[2] == approx(sag)
        assert s2.sag(0., 1.) == approx(sag)
        assert s2.f(pt) == approx(0., abs=1e-12)

        n = s2.normal(pt)
        n_truth = np.array([0., -1., r2 - sag])
        npt.assert_allclose(n, n_truth/np.linalg.norm(n_truth), atol=1e-12)

    def test_sag_beyond_radius(self):
        s = Spherical(r=5.)
        with self.assertRaises(TraceMissedSurfaceError):
            s.sag(0., 6.)

    def test_cylindrical(self):
        c = Cylindrical(r=10.)
        # no power along x
        s, pt = c.intersect(np.array([1., 0., -1.]), self.dir0, self.eps,
                            self.z_dir)
        assert pt[2] == approx(0., abs=1e-12)
        s, pt = c.intersect(np.array([0., 1., -1.]), self.dir0, self.eps,
                            self.z_dir)
        assert pt[2] == approx(c.sag(0., 1.))

    def test_miss(self):
        s = Spherical(r=1.)
        with self.assertRaises(TraceMissedSurfaceError):
            s.intersect(np.array([0., 2., -1.]), self.dir0, self.eps,
                        self.z_dir)
        assert try_intersect(s, np.array([0., 2., -1.]), self.dir0,
                             self.eps) is None


class BarrelProfileTestCase(unittest.TestCase):
    def setUp(self):
        self.eps = 1.0e-12

    def test_cylinder(self):
        cyl = Cylinder(2., -1., 1.)
        s, pt = cyl.intersect(np.array([0., 0., 0.]), np.array([1., 0., 0.]),
                              self.eps)
        assert s == approx(2.)
        # outside the z range
        with self.assertRaises(TraceMissedSurfaceError):
            cyl.intersect(np.array([0., 0., 3.]), np.array([1., 0., 0.]),
                          self.eps)

    def test_cone(self):
        cone = Cone(0., 1., 2., 3.)
        assert cone.radius_at(1.) == approx(2.)
        s, pt = cone.intersect(np.array([0., 0., 1.]),
                               np.array([1., 0., 0.]), self.eps)
        assert s == approx(2.)
        npt.assert_allclose(pt, [2., 0., 1.], atol=1e-12)
        with self.assertRaises(ValueError):
            Cone(1., 1., 1., 2.)

    def test_annulus(self):
        ring = Annulus(1., 0.5, 2.)
        d = np.array([0., 0., 1.])
        s, pt = ring.intersect(np.array([1., 0., 0.]), d, self.eps)
        assert s == approx(1.)
        with self.assertRaises(TraceMissedSurfaceError):
            ring.intersect(np.array([0.2, 0., 0.]), d, self.eps)
        with self.assertRaises(TraceMissedSurfaceError):
            ring.intersect(np.array([3., 0., 0.]), d, self.eps)

    def test_plane(self):
        s, pt = intersect_plane(np.array([1., 1., -2.]),
                                np.array([0., 0., 1.]), 1e-6)
        assert s == approx(2.)
        with self.assertRaises(TraceMissedSurfaceError):
            intersect_plane(np.array([1., 1., 2.]), np.array([0., 0., 1.]),
                            1e-6)

    def test_try_intersect_offset(self):
        s, pt, n = try_intersect(Spherical(c=0.), np.array([0., 0., -5.]),
                                 np.array([0., 0., 1.]), 1e-6, z_vertex=2.)
        assert s == approx(7.)
        npt.assert_allclose(pt, [0., 0., 2.])

    def test_facing_normal(self):
        d = np.array([0., 0., 1.])
        npt.assert_array_equal(facing_normal(np.array([0., 0., 1.]), d),
                               [0., 0., -1.])
        npt.assert_array_equal(facing_normal(np.array([0., 0., -1.]), d),
                               [0., 0., -1.])

    def test_sphere_chord(self):
        center = np.zeros(3)
        d = np.array([0., 0., 1.])
        t0, t1 = sphere_chord(center, 1., np.array([0., 0., -5.]), d)
        assert t0 == approx(4.)
        assert t1 == approx(6.)
        # starting inside
        t0, t1 = sphere_chord(center, 1., np.zeros(3), d)
        assert t0 == 0.
        assert t1 == approx(1.)
        # sphere behind the ray, and a miss
        assert sphere_chord(center, 1., np.array([0., 0., 5.]), d) is None
        assert sphere_chord(center, 1., np.array([0., 2., -5.]), d) is None


if __name__ == '__main__':
    unittest.main(verbosity=3)
