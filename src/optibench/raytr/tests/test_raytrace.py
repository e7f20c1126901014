#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 20:55:03 2026

@author: Mike
"""

import unittest
from math import pi
from pytest import approx
import numpy as np
import numpy.testing as npt

from optibench.util.misc_math import euler2quat, normalize
from optibench.raytr.rays import Ray, HitRecord
from optibench.raytr.raytrace import reflect, find_nearest_hit, trace_scene
from optibench.elem.scene import Scene
from optibench.elem.mirrors import Mirror
from optibench.elem.plates import BeamSplitter
from optibench.elem.lenses import IdealLens
from optibench.elem.stops import Blocker
from optibench.elem.sources import Laser, create_source_rays


class ReflectTestCase(unittest.TestCase):

    def test_reflect(self):
        d = normalize(np.array([0., 1., 1.]))
        d_out = reflect(d, np.array([0., 0., -1.]))
        npt.assert_allclose(d_out, normalize(np.array([0., 1., -1.])))
        # normal length doesn't matter
        d_out2 = reflect(d, np.array([0., 0., -3.]))
        npt.assert_allclose(d_out2, d_out)


class RayTestCase(unittest.TestCase):

    def test_child(self):
        ray = Ray([0., 0., 0.], [0., 0., 1.], wavelength=488e-9,
                  source_id=4, is_main_ray=True)
        ray.interaction_distance = 10.
        ray.hit_component = 2
        child = ray.child(origin=ray.point_at(10.))
        npt.assert_allclose(child.origin, [0., 0., 10.])
        assert child.source_id == 4
        assert child.is_main_ray
        assert child.wavelength_nm == approx(488.)
        assert child.interaction_distance is None
        assert child.hit_component is None

    def test_hit_record(self):
        hit = HitRecord(1., [0., 0., 1.], [0., 0., -1.])
        assert isinstance(hit.point, np.ndarray)
        assert not hit.is_blocked


class NearestHitTestCase(unittest.TestCase):
    def setUp(self):
        self.near = IdealLens(position=(0., 0., 10.))
        self.far = IdealLens(position=(0., 0., 20.))
        self.scene = Scene([self.far, self.near])

    def test_nearest(self):
        ray = Ray([0., 0., 0.], [0., 0., 1.])
        comp, hit = find_nearest_hit(self.scene, ray)
        assert comp is self.near
        assert hit.t == approx(10.)

    def test_skip(self):
        ray = Ray([0., 0., 0.], [0., 0., 1.])
        comp, hit = find_nearest_hit(self.scene, ray,
                                     skip=lambda c: c is self.near)
        assert comp is self.far

    def test_hit_eps(self):
        ray = Ray([0., 0., 9.9995], [0., 0., 1.])
        comp, hit = find_nearest_hit(self.scene, ray)
        assert comp is self.far

    def test_miss(self):
        ray = Ray([0., 0., 0.], [0., 0., -1.])
        assert find_nearest_hit(self.scene, ray) == (None, None)


class TraceSceneTestCase(unittest.TestCase):
    def setUp(self):
        self.laser = Laser(position=(0., 0., -50.))
        self.bs = BeamSplitter(split_ratio=0.4,
                               rotation=euler2quat(pi/4, 0., 0.))
        self.scene = Scene([self.laser, self.bs])

    def test_branches(self):
        rays = create_source_rays(self.scene, 1, mode='center')
        paths = trace_scene(self.scene, rays)
        assert len(paths) == 2
        reflected, transmitted = paths
        assert reflected[0] is transmitted[0]
        assert reflected[0].hit_component == self.bs.id
        assert reflected[0].interaction_distance == approx(47.)
        npt.assert_allclose(reflected[-1].direction, [0., 1., 0.],
                            atol=1e-12)
        npt.assert_allclose(transmitted[-1].direction, [0., 0., 1.],
                            atol=1e-12)
        assert reflected[-1].interaction_distance is None

    def test_energy(self):
        rays = create_source_rays(self.scene, 32)
        paths = trace_scene(self.scene, rays)
        for src in rays:
            leaves = [p[-1].intensity for p in paths if p[0] is src]
            assert sum(leaves) <= src.intensity*(1 + 1e-12)

    def test_unit_directions(self):
        rays = create_source_rays(self.scene, 32)
        for path in trace_scene(self.scene, rays):
            for ray in path:
                assert np.linalg.norm(ray.direction) == approx(1.)

    def test_idempotent(self):
        paths1 = trace_scene(self.scene,
                             create_source_rays(self.scene, 32))
        paths2 = trace_scene(self.scene,
                             create_source_rays(self.scene, 32))
        assert len(paths1) == len(paths2)
        for p1, p2 in zip(paths1, paths2):
            assert len(p1) == len(p2)
            for r1, r2 in zip(p1, p2):
                npt.assert_array_equal(r1.origin, r2.origin)
                npt.assert_array_equal(r1.direction, r2.direction)
                assert r1.intensity == r2.intensity

    def test_extinguished(self):
        rays = create_source_rays(self.scene, 1, mode='center')
        paths = trace_scene(self.scene, rays, absorption_eps=0.7)
        assert len(paths) == 2
        for path in paths:
            assert len(path) == 2
            assert path[-1].hit_component is None


class TraceLimitsTestCase(unittest.TestCase):

    def test_max_depth(self):
        # a ray trapped between two facing mirrors
        scene = Scene([Mirror(), Mirror(position=(0., 0., 10.))])
        paths = trace_scene(scene, [Ray([0., 0., 5.], [0., 0., 1.])],
                            max_depth=5)
        assert len(paths) == 1
        assert len(paths[0]) == 6
        assert paths[0][-1].interaction_distance is None

    def test_invalid_source_ray(self):
        scene = Scene([Mirror()])
        paths = trace_scene(scene, [Ray([np.nan, 0., -5.], [0., 0., 1.])])
        assert paths == []

    def test_absorbed(self):
        block = Blocker()
        scene = Scene([block])
        paths = trace_scene(scene, [Ray([0., 0., -20.], [0., 0., 1.])])
        assert len(paths[0]) == 1
        assert paths[0][0].hit_component == block.id


if __name__ == '__main__':
    unittest.main(verbosity=3)
