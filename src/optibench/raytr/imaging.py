#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Backward Monte-Carlo image formation for cameras and PMTs

    Rays are cast from the detector into the optics, through the same
    components used by the forward trace, until they reach the sample, a
    light source, or escape. At the sample the Gaussian beam field from
    :mod:`~optibench.parax.beam_propagation` supplies the excitation that
    drives fluorescence, and the illumination behind the sample supplies the
    transmitted (brightfield) light.

    Refraction is reciprocal, so lenses are traversed exactly as in the
    forward direction. Spectral elements act at the backward ray's
    wavelength, i.e. the emission wavelength being imaged.

.. Created on Sun Oct 18 09:36:51 2026

.. codeauthor: Michael J. Hayford
"""
import logging
from math import pi, sqrt, sin, cos, exp

import numpy as np

import optibench.optical.model_constants as mc
from optibench.util.misc_math import normalize
from optibench.raytr import BackwardResult, PixelResult, RenderResult
from optibench.raytr.rays import Ray, Coherence
from optibench.raytr.raytrace import find_nearest_hit
from optibench.parax.beam_propagation import query_intensity_multi_beam
from optibench.elem.detectors import Camera, PMT, Card
from optibench.elem.sources import Laser, Lamp
from optibench.elem.sample import Sample

logger = logging.getLogger(__name__)

# emission wavelength assumed for a PMT when there is no sample, meters
default_pmt_wavelength = 520.0e-9


def detector_basis(detector, mirrored=False):
    """ world (origin, w, u, v) of a detector's sensing frame

    A camera image is mirrored in both u and v, like a real sensor behind a
    lens; a PMT is not.
    """
    r, t = detector.world_tfrm()
    sign = -1. if mirrored else 1.
    w = normalize(r.dot(np.array([0., 0., 1.])))
    u = normalize(r.dot(np.array([sign, 0., 0.])))
    v = normalize(r.dot(np.array([0., sign, 0.])))
    return np.array(t), w, u, v


def active_wavelengths(scene, branches):
    """ wavelengths, in meters, to be imaged

    The sample emission wavelength comes first, then the wavelength of
    every beam branch.
    """
    wvls = []
    sample = scene.find(Sample)
    if sample is not None:
        wvls.append(sample.emission_wavelength*1e-9)
    for branch in branches:
        if len(branch) > 0 and branch[0].wavelength not in wvls:
            wvls.append(branch[0].wavelength)
    if len(wvls) == 0:
        wvls.append(mc.DEFAULT_WAVELENGTH)
    return wvls


def cone_direction(w, u, v, sin_max, rng):
    """ random direction in the cone of half angle asin(sin_max) about w

    The azimuth is uniform and sinθ = sin_max·sqrt(U), which weights the
    sampling toward the axis.
    """
    phi = 2*pi*rng.random()
    sin_theta = sin_max*sqrt(rng.random())
    cos_theta = sqrt(1. - sin_theta*sin_theta)
    d = cos_theta*w + sin_theta*cos(phi)*u + sin_theta*sin(phi)*v
    return normalize(d)


def _choose_child(children, rng):
    total = sum(c.intensity for c in children)
    pick = rng.random()*total
    for child in children:
        pick -= child.intensity
        if pick <= 0.:
            return child, total
    return children[0], total


def sample_radiance(sample, ray, hit, branches, throughput):
    """ (radiance, terminal ray) of a backward ray entering the sample

    The transmitted light is the beam field at the far side of the sample,
    at the ray's wavelength, attenuated along the chord through it. The
    fluorescence is the excitation field at the chord midpoint, weighted by
    the sample's excitation spectrum at each beam's wavelength, converted at
    the sample's efficiency and emission spectrum.
    """
    bounds = sample.volume_intersection(ray)
    if bounds is None:
        return None
    t_near, t_far = bounds
    near_pt = ray.point_at(t_near)
    far_pt = ray.point_at(t_far)

    background = query_intensity_multi_beam(far_pt, branches,
                                            wavelength=ray.wavelength)
    chord = sample.chord_length(ray)
    transmission = exp(-sample.absorption*chord)

    fluorescence = 0.
    emission_t = sample.emission_spectrum.transmission(ray.wavelength_nm)
    if (sample.fluorescence_efficiency > 0. and
            emission_t > mc.EMISSION_EPS and chord > 0.):
        mid_pt = ray.point_at(0.5*(t_near + t_far))
        excitation_t = sample.excitation_spectrum.transmission
        excitation = query_intensity_multi_beam(
            mid_pt, branches, spectral_weight=lambda wvl: excitation_t(wvl*1e9))
        fluorescence = (excitation*sample.fluorescence_efficiency *
                        emission_t*chord)

    exiting = background*transmission + fluorescence
    terminal = ray.child(origin=hit.point, intensity=max(0.1, exiting),
                         opl=ray.opl + t_near, termination_point=near_pt)
    return exiting*throughput, terminal


def trace_backward(scene, start_ray, branches, rng, max_depth=mc.MAX_DEPTH,
                   hit_eps=mc.HIT_EPS, throughput_eps=mc.THROUGHPUT_EPS,
                   wavelength_tol=mc.LASER_WAVELENGTH_TOL):
    """ Trace one backward ray from a detector and collect its radiance.

    At a beam splitting component one child is followed, chosen at random
    with probability proportional to its intensity; the path throughput
    keeps track of the energy lost along the way.

    Args:
        scene: the :class:`~optibench.elem.scene.Scene`
        start_ray: the backward :class:`~.rays.Ray` leaving the detector
        branches: Gaussian beam branches supplying the illumination
        rng: a :class:`numpy.random.Generator`
        max_depth: maximum number of interactions
        hit_eps: minimum accepted hit distance
        throughput_eps: the path ends when its throughput falls below this
        wavelength_tol: a laser only contributes to rays within this
            distance of its wavelength, meters

    Returns:
        a :class:`~optibench.raytr.BackwardResult`
    """
    path = [start_ray]
    ray = start_ray
    throughput = 1.0
    absorbed = False

    def skip_detectors(comp):
        return isinstance(comp, (Camera, PMT, Card))

    def skip_cards(comp):
        return isinstance(comp, Card)

    for depth in range(max_depth):
        comp, hit = find_nearest_hit(
            scene, ray, hit_eps=hit_eps,
            skip=skip_detectors if depth == 0 else skip_cards)
        if hit is None:
            ray.interaction_distance = mc.ESCAPE_SEGMENT_LENGTH
            break

        ray.interaction_distance = hit.t
        ray.hit_component = comp.id

        if isinstance(comp, (Laser, Lamp)):
            if (isinstance(comp, Laser) and
                    abs(comp.wavelength*1e-9 - ray.wavelength) >
                    wavelength_tol):
                break
            radiance = throughput*comp.power
            path.append(ray.child(origin=hit.point, intensity=radiance,
                                  opl=ray.opl + hit.t,
                                  termination_point=hit.point))
            return BackwardResult(radiance, path, False)

        if isinstance(comp, Sample):
            collected = sample_radiance(comp, ray, hit, branches, throughput)
            if collected is None:
                break
            radiance, terminal = collected
            path.append(terminal)
            return BackwardResult(radiance, path, False)

        children = comp.interact(ray, hit)
        if len(children) == 0:
            absorbed = True
            break

        child, total = _choose_child(children, rng)
        if total < 1e-12:
            absorbed = True
            break
        if ray.intensity > 1e-12:
            throughput *= total/ray.intensity

        path.append(child)
        ray = child
        if throughput < throughput_eps:
            absorbed = True
            break

    if path[-1].interaction_distance is None:
        path[-1].interaction_distance = mc.ESCAPE_SEGMENT_LENGTH

    # only light collected at the sample counts; escaped rays carry none
    return BackwardResult(0., path, absorbed)


def render_pixel(scene, origin, basis, sin_max, num_samples, wavelengths,
                 branches, rng, source_id=None, **kwargs):
    """ Average the radiance of num_samples backward rays per wavelength.

    Args:
        origin: world point the rays leave from
        basis: (w, u, v) world axes of the detector
        sin_max: sine of the acceptance half angle
        source_id: tag for the backward rays, normally the detector id
        kwargs: passed to :func:`trace_backward`

    Returns:
        a :class:`~optibench.raytr.PixelResult`
    """
    w, u, v = basis
    radiance_sum = 0.
    best_path = None
    best_radiance = 0.
    for s in range(num_samples):
        d = cone_direction(w, u, v, sin_max, rng)
        for wvl in wavelengths:
            pol_angle = pi*rng.random()
            ray = Ray(origin, d, wavelength=wvl, intensity=1.0,
                      polarization=(cos(pol_angle), sin(pol_angle)),
                      footprint_radius=0.1, coherence=Coherence.COHERENT,
                      source_id=source_id)
            try:
                result = trace_backward(scene, ray, branches, rng, **kwargs)
            except Exception as err:
                logger.warning("backward sample %d failed: %s", s, err)
                continue
            radiance_sum += result.radiance
            if result.radiance > best_radiance and len(result.path) > 1:
                best_radiance = result.radiance
                best_path = result.path

    denom = num_samples*len(wavelengths)
    radiance = radiance_sum/denom if denom > 0 else 0.
    return PixelResult(radiance, best_path)


def subsample_paths(paths, max_paths=mc.MAX_VIS_PATHS):
    """ at most max_paths of paths, spread over the list by the golden ratio

    A golden ratio sequence doesn't alias with the pixel grid the paths
    were collected over.
    """
    if len(paths) <= max_paths:
        return list(paths)
    n = len(paths)
    return [paths[int(i*mc.GOLDEN_CONJUGATE*n) % n] for i in range(max_paths)]


class CameraFrame:
    """ Image accumulator for one camera render, filled a scanline at a time.

    Attributes:
        emission: flat, row-major radiance image
        excitation: flat, row-major beam intensity at the sensor
        next_row: index of the next scanline to render
    """

    def __init__(self, scene, camera, branches, rng, **kwargs):
        self.scene = scene
        self.camera = camera
        self.branches = branches
        self.rng = rng
        self.trace_kwargs = kwargs
        self.res_x = camera.res_x
        self.res_y = camera.res_y
        self.emission = np.zeros(self.res_x*self.res_y)
        self.excitation = np.zeros(self.res_x*self.res_y)
        self.candidates = []
        self.next_row = 0

        self.origin, w, u, v = detector_basis(camera, mirrored=True)
        self.basis = w, u, v
        self.wavelengths = active_wavelengths(scene, branches)
        self.sin_max = min(camera.sensor_na, 1.0)

    @property
    def done(self):
        return self.next_row >= self.res_y

    @property
    def progress(self):
        return self.next_row/self.res_y if self.res_y > 0 else 1.0

    def sensor_point(self, px, py):
        cam = self.camera
        w, u, v = self.basis
        su = ((px + 0.5)/self.res_x - 0.5)*cam.width
        sv = ((py + 0.5)/self.res_y - 0.5)*cam.height
        return self.origin + su*u + sv*v

    def render_row(self):
        """ render the next scanline """
        py = self.next_row
        cam = self.camera
        for px in range(self.res_x):
            idx = py*self.res_x + px
            pt = self.sensor_point(px, py)
            try:
                self.excitation[idx] = query_intensity_multi_beam(
                    pt, self.branches)
                pixel = render_pixel(self.scene, pt, self.basis,
                                     self.sin_max, cam.samples_per_pixel,
                                     self.wavelengths, self.branches,
                                     self.rng, source_id=cam.id,
                                     **self.trace_kwargs)
            except Exception as err:
                logger.warning("%s: pixel (%d, %d) failed: %s", cam.label,
                               px, py, err)
                continue
            self.emission[idx] = pixel.radiance
            if pixel.best_path is not None:
                self.candidates.append(pixel.best_path)
        self.next_row += 1

    def result(self, max_vis_paths=mc.MAX_VIS_PATHS):
        return RenderResult(self.emission, self.excitation,
                            subsample_paths(self.candidates, max_vis_paths),
                            self.res_x, self.res_y)


def render_camera(scene, camera, branches, rng=None,
                  max_vis_paths=mc.MAX_VIS_PATHS, **kwargs):
    """ Render the emission and excitation images of a camera.

    Args:
        scene: the :class:`~optibench.elem.scene.Scene`
        camera: the :class:`~optibench.elem.detectors.Camera`
        branches: Gaussian beam branches from
            :func:`~optibench.parax.beam_propagation.propagate_beams`
        rng: a :class:`numpy.random.Generator`; a generator seeded with 0
            if None
        max_vis_paths: maximum number of backward paths returned
        kwargs: passed to :func:`trace_backward`

    Returns:
        a :class:`~optibench.raytr.RenderResult`
    """
    if rng is None:
        rng = np.random.default_rng(0)
    logger.info("rendering %s, %dx%d", camera.label, camera.res_x,
                camera.res_y)
    frame = CameraFrame(scene, camera, branches, rng, **kwargs)
    while not frame.done:
        frame.render_row()
    return frame.result(max_vis_paths)


def render_pmt_pixel(scene, pmt, branches, rng=None, **kwargs):
    """ Radiance collected by a PMT at its current pose.

    The PMT is a one pixel camera imaging the sample emission wavelength.

    Returns:
        a :class:`~optibench.raytr.PixelResult`
    """
    if rng is None:
        rng = np.random.default_rng(0)
    origin, w, u, v = detector_basis(pmt)
    sample = scene.find(Sample)
    wvl = (sample.emission_wavelength*1e-9 if sample is not None
           else default_pmt_wavelength)
    return render_pixel(scene, origin, (w, u, v), min(pmt.sensor_na, 1.0),
                        pmt.samples_per_pixel, [wvl], branches, rng,
                        source_id=pmt.id, **kwargs)
