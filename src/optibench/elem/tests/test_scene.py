#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 18:05:51 2026

@author: Mike
"""

import unittest
from math import pi
from pytest import approx
import numpy as np
import numpy.testing as npt

from optibench.util.misc_math import euler2quat
from optibench.raytr.rays import Ray
from optibench.elem.scene import Scene
from optibench.elem.properties import get_property, set_property
from optibench.elem.mirrors import Mirror, GalvoScanHead
from optibench.elem.lenses import IdealLens
from optibench.elem.objectives import AplanaticObjective


class SceneTestCase(unittest.TestCase):
    def setUp(self):
        self.m1 = Mirror(label='M1')
        self.l1 = IdealLens(label='L1')
        self.scene = Scene([self.m1, self.l1])

    def test_ids(self):
        assert self.m1.id == 0
        assert self.l1.id == 1
        assert self.scene[1] is self.l1
        assert self.scene[7] is None
        assert len(self.scene) == 2
        assert list(self.scene) == [self.m1, self.l1]

    def test_ids_are_not_reused(self):
        self.scene.remove(0)
        assert self.m1.id is None
        assert 0 not in self.scene
        m2 = Mirror()
        assert self.scene.add(m2) == 2
        assert self.scene.find_by_label('L1') is self.l1

    def test_find(self):
        assert self.scene.find(IdealLens) is self.l1
        assert self.scene.find(GalvoScanHead) is None
        assert self.scene.find_all(Mirror) == [self.m1]

    def test_fingerprint(self):
        fp = self.scene.fingerprint()
        assert self.scene.fingerprint() == fp
        self.l1.set_position(0., 0., 10.)
        assert self.scene.fingerprint() != fp


class ComponentFrameTestCase(unittest.TestCase):

    def test_world_local_round_trip(self):
        m = Mirror(position=(1., 2., 3.), rotation=euler2quat(0.1, 0.2, 0.3))
        p = np.array([4., -5., 6.])
        npt.assert_allclose(m.to_world_point(m.to_local_point(p)), p,
                            atol=1e-12)
        lw = m.local_to_world.dot(np.append(p, 1.))
        npt.assert_allclose(m.world_to_local.dot(lw)[:3], p, atol=1e-12)

    def test_axis(self):
        m = Mirror(rotation=euler2quat(0., pi/2, 0.))
        npt.assert_allclose(m.axis(), [1., 0., 0.], atol=1e-12)
        m.set_rotation(pi/2, 0., 0.)
        npt.assert_allclose(m.axis(), [0., -1., 0.], atol=1e-12)

    def test_parent_composition(self):
        parent = Mirror(position=(0., 0., 10.),
                        rotation=euler2quat(0., pi/2, 0.))
        child = Mirror(position=(0., 0., 5.), parent=parent)
        npt.assert_allclose(child.to_world_point(np.zeros(3)),
                            [5., 0., 10.], atol=1e-12)
        # moving the parent moves the child
        parent.set_position(0., 0., 20.)
        npt.assert_allclose(child.to_world_point(np.zeros(3)),
                            [5., 0., 20.], atol=1e-12)

    def test_broadphase_miss(self):
        m = Mirror(diameter=10.)
        ray = Ray([20., 0., -10.], [0., 0., 1.])
        assert m.chk_intersection(ray) is None

    def test_version(self):
        m = Mirror()
        v = m.version
        m.position = (1., 0., 0.)
        m.rotation = euler2quat(0., 0., 0.1)
        m.update()
        assert m.version == v + 3


class PropertyTestCase(unittest.TestCase):
    def setUp(self):
        self.galvo = GalvoScanHead(scan_x=0.)

    def test_position(self):
        set_property(self.galvo, 'position.y', 3.5)
        assert get_property(self.galvo, 'position.y') == approx(3.5)
        npt.assert_allclose(self.galvo.position, [0., 3.5, 0.])

    def test_rotation(self):
        set_property(self.galvo, 'rotation.z', 0.25)
        assert get_property(self.galvo, 'rotation.z') == approx(0.25)
        assert get_property(self.galvo, 'rotation.x') == approx(0., abs=1e-12)

    def test_attribute(self):
        v = self.galvo.version
        set_property(self.galvo, 'scan_x', 0.05)
        assert get_property(self.galvo, 'scan_x') == 0.05
        assert self.galvo.version > v

    def test_recalculate(self):
        obj = AplanaticObjective(NA=0.5, magnification=20.)
        set_property(obj, 'magnification', 40.)
        assert obj.focal_length == approx(5.)
        assert obj.pupil_radius == approx(2.5)

    def test_unknown_path(self):
        with self.assertRaises(ValueError):
            get_property(self.galvo, 'scan_z')
        with self.assertRaises(ValueError):
            set_property(self.galvo, 'label', 1.)
        with self.assertRaises(ValueError):
            get_property(self.galvo, 'position.w')


if __name__ == '__main__':
    unittest.main(verbosity=3)
