#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 18:31:09 2026

@author: Mike
"""

import unittest
from math import pi, sqrt, cos, sin
from pytest import approx
import numpy as np
import numpy.testing as npt

from optibench.util.misc_math import euler2quat
from optibench.raytr.rays import Ray
from optibench.raytr.raytrace import trace_scene
from optibench.elem.scene import Scene
from optibench.elem.mirrors import (Mirror, CurvedMirror, GalvoScanHead,
                                    DualGalvoScanHead)


class MirrorTestCase(unittest.TestCase):
    def setUp(self):
        self.mirror = Mirror(rotation=euler2quat(pi/4, 0., 0.))
        self.mirror.id = 3

    def test_fold(self):
        ray = Ray([0., 0., -20.], [0., 0., 1.])
        hit = self.mirror.chk_intersection(ray)
        assert hit.t == approx(20.)
        out = self.mirror.interact(ray, hit)
        assert len(out) == 1
        npt.assert_allclose(out[0].direction, [0., 1., 0.], atol=1e-12)
        npt.assert_allclose(out[0].polarization, [-1., 0.])
        assert out[0].opl == approx(20.)
        assert out[0].exit_surface_id == 3

    def test_back_side_reflects(self):
        ray = Ray([0., 0., 20.], [0., 0., -1.])
        hit = self.mirror.chk_intersection(ray)
        out = self.mirror.interact(ray, hit)
        npt.assert_allclose(out[0].direction, [0., -1., 0.], atol=1e-12)

    def test_outside_aperture(self):
        ray = Ray([20., 0., -20.], [0., 0., 1.])
        assert self.mirror.chk_intersection(ray) is None

    def test_abcd(self):
        assert self.mirror.get_abcd() == (1., 0., 0., 1.)
        assert self.mirror.get_aperture_radius() == approx(12.7)


class CurvedMirrorTestCase(unittest.TestCase):
    def setUp(self):
        self.cm = CurvedMirror(radius_of_curvature=100., thickness=3.)

    def test_focus(self):
        ray = Ray([0., 2., -100.], [0., 0., 1.])
        hit = self.cm.chk_intersection(ray)
        assert hit is not None
        assert not hit.is_blocked
        out = self.cm.interact(ray, hit)[0]
        # reflected back toward the axis
        assert out.direction[2] < 0.
        assert out.direction[1] < 0.
        t = -out.origin[1]/out.direction[1]
        z_cross = out.origin[2] + t*out.direction[2]
        assert z_cross == approx(-1.5 - self.cm.focal_length, abs=0.05)

    def test_back_is_blocked(self):
        ray = Ray([0., 2., 100.], [0., 0., -1.])
        hit = self.cm.chk_intersection(ray)
        assert hit.is_blocked
        assert self.cm.interact(ray, hit) == []

    def test_abcd(self):
        assert self.cm.get_abcd()[2] == approx(-0.02)
        flat = CurvedMirror(radius_of_curvature=1e10)
        assert flat.get_abcd()[2] == 0.

    def test_malformed(self):
        cm = CurvedMirror(diameter=25.4, radius_of_curvature=10.)
        assert cm.is_malformed()
        ray = Ray([0., 0., -20.], [0., 0., 1.])
        hit = cm.chk_intersection(ray)
        assert hit.is_blocked


class GalvoTestCase(unittest.TestCase):

    def test_rest_position(self):
        galvo = GalvoScanHead(rotation=euler2quat(pi/4, 0., 0.))
        ray = Ray([0., 0., -20.], [0., 0., 1.])
        out = galvo.interact(ray, galvo.chk_intersection(ray))[0]
        npt.assert_allclose(out.direction, [0., 1., 0.], atol=1e-12)

    def test_mirror_doubling(self):
        angle = 0.05
        galvo = GalvoScanHead(rotation=euler2quat(pi/4, 0., 0.),
                              scan_y=angle)
        ray = Ray([0., 0., -20.], [0., 0., 1.])
        out = galvo.interact(ray, galvo.chk_intersection(ray))[0]
        npt.assert_allclose(out.direction, [0., cos(2*angle), sin(2*angle)],
                            atol=1e-12)
        npt.assert_allclose(out.polarization, [-1., 0.])


class DualGalvoTestCase(unittest.TestCase):
    def setUp(self):
        self.dual = DualGalvoScanHead()
        self.scene = Scene([self.dual])

    def test_periscope(self):
        paths = trace_scene(self.scene, [Ray([-40., 0., 0.], [1., 0., 0.])])
        assert len(paths) == 1
        path = paths[0]
        assert len(path) == 3
        npt.assert_allclose(path[1].origin, [-7.5, 0., 0.], atol=1e-9)
        npt.assert_allclose(path[1].direction, [0., 1., 0.], atol=1e-12)
        npt.assert_allclose(path[2].origin, [-7.5, 15., 0.], atol=1e-9)
        npt.assert_allclose(path[2].direction, [0., 0., 1.], atol=1e-12)

    def test_one_sided(self):
        paths = trace_scene(self.scene, [Ray([10., 0., 0.], [-1., 0., 0.])])
        assert len(paths[0]) == 1
        assert paths[0][0].hit_component == self.dual.id

    def test_scan_tilts_mirror(self):
        self.dual.scan_x = 0.01
        pivot, n1 = self.dual.mirror_planes()[0]
        npt.assert_allclose(pivot, [-7.5, 0., 0.])
        assert np.dot(n1, [-1., 1., 0.])/sqrt(2.) == approx(cos(0.01))


if __name__ == '__main__':
    unittest.main(verbosity=3)
