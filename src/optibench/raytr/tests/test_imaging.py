#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 21:07:19 2026

@author: Mike
"""

import unittest
from math import pi, sqrt
from pytest import approx
import numpy as np
import numpy.testing as npt

from optibench.util.misc_math import euler2quat
from optibench.raytr.rays import Ray
from optibench.raytr.raytrace import trace_scene
from optibench.raytr import imaging
from optibench.elem.scene import Scene
from optibench.elem.sources import Laser, create_source_rays
from optibench.elem.sample import Sample
from optibench.oprops.spectral import SpectralProfile
from optibench.elem.detectors import Camera, Card
from optibench.parax.beam_propagation import propagate_beams


def solve(scene):
    paths = trace_scene(scene, create_source_rays(scene, 1, mode='center'))
    return propagate_beams(paths, scene)


class HelperTestCase(unittest.TestCase):

    def test_detector_basis(self):
        cam = Camera(position=(0., 0., 30.),
                     rotation=euler2quat(pi, 0., 0.))
        origin, w, u, v = imaging.detector_basis(cam)
        npt.assert_allclose(origin, [0., 0., 30.])
        npt.assert_allclose(w, [0., 0., -1.], atol=1e-12)
        npt.assert_allclose(u, [1., 0., 0.], atol=1e-12)
        npt.assert_allclose(v, [0., -1., 0.], atol=1e-12)

        origin, w, u, v = imaging.detector_basis(cam, mirrored=True)
        npt.assert_allclose(u, [-1., 0., 0.], atol=1e-12)
        npt.assert_allclose(v, [0., 1., 0.], atol=1e-12)

    def test_active_wavelengths(self):
        assert imaging.active_wavelengths(Scene(), []) == [532e-9]
        scene = Scene([Laser(wavelength=488., position=(0., 0., -50.)),
                       Sample()])
        wvls = imaging.active_wavelengths(scene, solve(scene))
        assert wvls == approx([520e-9, 488e-9])

    def test_cone_direction(self):
        rng = np.random.default_rng(0)
        w = np.array([0., 0., 1.])
        u = np.array([1., 0., 0.])
        v = np.array([0., 1., 0.])
        sin_max = 0.2
        for i in range(50):
            d = imaging.cone_direction(w, u, v, sin_max, rng)
            assert np.linalg.norm(d) == approx(1.)
            assert d[2] >= sqrt(1. - sin_max**2) - 1e-12

    def test_subsample_paths(self):
        paths = list(range(100))
        picked = imaging.subsample_paths(paths, 8)
        assert len(picked) == 8
        assert picked[0] == 0
        assert picked[1] == 61
        assert len(set(picked)) == 8
        assert imaging.subsample_paths(paths[:5], 8) == paths[:5]


class TraceBackwardTestCase(unittest.TestCase):
    def setUp(self):
        self.laser = Laser(wavelength=488., position=(0., 0., -50.))
        self.sample = Sample()
        self.scene = Scene([self.laser, self.sample])
        self.branches = solve(self.scene)
        self.rng = np.random.default_rng(0)

    def test_sample_fluorescence(self):
        ray = Ray([0., 0., 30.], [0., 0., -1.], wavelength=520e-9)
        result = imaging.trace_backward(self.scene, ray, self.branches,
                                        self.rng)
        assert result.radiance > 0.
        assert not result.absorbed
        assert len(result.path) == 2
        assert ray.hit_component == self.sample.id
        assert ray.interaction_distance == approx(29.5)
        npt.assert_allclose(result.path[-1].termination_point,
                            [0., 0., 0.5], atol=1e-9)

    def test_off_band_laser_does_not_excite(self):
        self.laser.wavelength = 633.
        self.laser.update()
        branches = solve(self.scene)
        ray = Ray([0., 0., 30.], [0., 0., -1.], wavelength=520e-9)
        result = imaging.trace_backward(self.scene, ray, branches, self.rng)
        # the red beam is outside the excitation band and the 520 nm filter
        assert result.radiance < 1e-15

    def test_excitation_follows_spectrum(self):
        ray = Ray([0., 0., 30.], [0., 0., -1.], wavelength=520e-9)
        on_band = imaging.trace_backward(self.scene, ray, self.branches,
                                         self.rng).radiance
        peak = self.sample.excitation_spectrum.transmission(488.)
        # fully absorbing at 488 nm
        self.sample.excitation_spectrum = SpectralProfile('longpass', 300.)
        ray = Ray([0., 0., 30.], [0., 0., -1.], wavelength=520e-9)
        full = imaging.trace_backward(self.scene, ray, self.branches,
                                      self.rng).radiance
        assert full == approx(on_band/peak)

    def test_no_fluorescence_without_efficiency(self):
        self.sample.fluorescence_efficiency = 0.
        ray = Ray([0., 0., 30.], [0., 0., -1.], wavelength=520e-9)
        result = imaging.trace_backward(self.scene, ray, self.branches,
                                        self.rng)
        # no beam at 520 nm to transmit either
        assert result.radiance == 0.

    def test_transmitted_background(self):
        ray = Ray([0., 0., 30.], [0., 0., -1.], wavelength=488e-9)
        result = imaging.trace_backward(self.scene, ray, self.branches,
                                        self.rng)
        assert result.radiance > 0.

    def test_laser_hit(self):
        ray = Ray([0., 3., -10.], [0., 0., -1.], wavelength=488e-9)
        result = imaging.trace_backward(self.scene, ray, self.branches,
                                        self.rng)
        assert result.radiance == approx(self.laser.power)
        assert ray.interaction_distance == approx(40.)

        off_band = Ray([0., 3., -10.], [0., 0., -1.], wavelength=520e-9)
        result = imaging.trace_backward(self.scene, off_band, self.branches,
                                        self.rng)
        assert result.radiance == 0.

    def test_escape(self):
        ray = Ray([0., 0., 30.], [0., 0., 1.], wavelength=520e-9)
        result = imaging.trace_backward(self.scene, ray, self.branches,
                                        self.rng)
        assert result.radiance == 0.
        assert not result.absorbed
        assert len(result.path) == 1
        assert result.path[-1].interaction_distance == approx(50.)

    def test_cards_are_transparent(self):
        card = Card(position=(0., 0., 10.))
        self.scene.add(card)
        ray = Ray([0., 0., 30.], [0., 0., -1.], wavelength=520e-9)
        result = imaging.trace_backward(self.scene, ray, self.branches,
                                        self.rng)
        assert result.radiance > 0.
        assert len(card.hits) == 0


class RenderCameraTestCase(unittest.TestCase):
    def setUp(self):
        self.scene = Scene([Laser(wavelength=488., position=(0., 0., -50.)),
                            Sample()])
        self.camera = Camera(position=(0., 0., 30.),
                             rotation=euler2quat(pi, 0., 0.),
                             width=0.9, height=0.9, res_x=3, res_y=3,
                             sensor_na=0.001, samples_per_pixel=2)
        self.scene.add(self.camera)
        self.branches = solve(self.scene)

    def test_render(self):
        result = imaging.render_camera(self.scene, self.camera,
                                       self.branches)
        assert result.res_x == 3
        assert result.res_y == 3
        assert result.emission_image.shape == (9,)
        assert result.excitation_image.shape == (9,)
        assert np.all(result.emission_image > 0.)
        assert 0 < len(result.paths) <= 9
        for path in result.paths:
            assert path[0].source_id == self.camera.id

    def test_deterministic(self):
        r1 = imaging.render_camera(self.scene, self.camera, self.branches,
                                   rng=np.random.default_rng(0))
        r2 = imaging.render_camera(self.scene, self.camera, self.branches,
                                   rng=np.random.default_rng(0))
        npt.assert_array_equal(r1.emission_image, r2.emission_image)
        npt.assert_array_equal(r1.excitation_image, r2.excitation_image)

    def test_frame_progress(self):
        frame = imaging.CameraFrame(self.scene, self.camera, self.branches,
                                    np.random.default_rng(0))
        assert frame.progress == 0.
        frame.render_row()
        assert frame.next_row == 1
        assert frame.progress == approx(1/3)
        assert not frame.done
        frame.render_row()
        frame.render_row()
        assert frame.done
        npt.assert_allclose(frame.sensor_point(1, 1), [0., 0., 30.],
                            atol=1e-12)


if __name__ == '__main__':
    unittest.main(verbosity=3)
