#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Light sources and the generation of the rays they emit

    Sources emit along their local +w axis. A laser or lamp housing is a
    box behind the emitting face that absorbs any ray striking it.

.. Created on Sat Oct 17 10:27:33 2026

.. codeauthor: Michael J. Hayford
"""
import logging
from math import pi, sin, cos, exp, radians

import numpy as np

from optibench.util.misc_math import (normalize, intersect_aabb,
                                      perpendicular_frame, rotate_about_axis)
from optibench.raytr.rays import Ray, HitRecord, Coherence
from optibench.elem.component import OpticalComponent
from optibench.elem.detectors import PMT
from optibench.elem.sample import Sample

logger = logging.getLogger(__name__)

# distance in front of a source where its rays start
emission_offset = 3.0

first_ring_count = 24
inner_ring_count = 12


def radius_fractions(count=100):
    """ ring radii as fractions of the beam radius: 1, 1/2, 1/4, 3/4, ... """
    fractions = [1.]
    level = 1
    while len(fractions) < count:
        denom = 1 << level
        fractions.extend(k/denom for k in range(1, denom, 2))
        level += 1
    return fractions[:count]


def snap_to_ring_boundary(n):
    """ round a ray count up so that every ring is complete """
    if n <= first_ring_count:
        return first_ring_count
    excess = n - first_ring_count
    k = -(-excess // inner_ring_count)
    return first_ring_count + k*inner_ring_count


def box_hit(p, d, box_min, box_max, eps):
    """ blocked hit on the outside of a box, or None """
    is_hit, t_min, t_max = intersect_aabb(p, d, box_min, box_max)
    if not is_hit:
        return None
    t = t_min if t_min > eps else t_max
    if not t > eps:
        return None
    pt = p + t*d
    # the struck face is the one the point lies closest to
    dist = np.minimum(np.abs(pt - box_min), np.abs(pt - box_max))
    axis = int(np.argmin(dist))
    n = np.zeros(3)
    n[axis] = (-1. if abs(pt[axis] - box_min[axis]) < abs(pt[axis] -
                                                         box_max[axis])
               else 1.)
    return HitRecord(t, pt, n, is_blocked=True, face='housing')


class BoxHousingSource(OpticalComponent):
    """ Source whose housing is an absorbing box. """
    housing_min = np.array([-10., -10., -10.])
    housing_max = np.array([10., 10., 0.])

    def bounds(self):
        return self.housing_min, self.housing_max

    def intersect(self, ray_local):
        return box_hit(ray_local.origin, ray_local.direction,
                       self.housing_min, self.housing_max, self.eps)

    def emission_origin(self):
        return self.to_world_point(np.array([0., 0., emission_offset]))


class Laser(BoxHousingSource):
    """ Coherent, collimated Gaussian beam source.

    Attributes:
        wavelength: in nm
        power: total beam power
        beam_radius: radius of the sampled ray bundle, mm
        beam_waist: 1/e² waist radius used for Gaussian beam propagation
        polarization: Jones vector of the emitted light
    """
    label_format = 'LASER{}'
    housing_min = np.array([-12.5, -7.5, -50.])
    housing_max = np.array([12.5, 7.5, 0.])

    def __init__(self, wavelength=532., power=1., beam_radius=2.,
                 beam_waist=2., polarization=(1., 0.), **kwargs):
        super().__init__(**kwargs)
        self.wavelength = wavelength
        self.power = power
        self.beam_radius = beam_radius
        self.beam_waist = beam_waist
        self.polarization = np.array(polarization, dtype=complex)


class Lamp(BoxHousingSource):
    """ Incoherent broadband source emitting a set of discrete wavelengths.

    Attributes:
        spectral_wavelengths: emitted wavelengths, in nm
    """
    label_format = 'LAMP{}'
    housing_min = np.array([-15., -11., -20.])
    housing_max = np.array([15., 11., 3.])

    def __init__(self, power=1., beam_radius=3., beam_waist=3.,
                 spectral_wavelengths=None, **kwargs):
        super().__init__(**kwargs)
        self.power = power
        self.beam_radius = beam_radius
        self.beam_waist = beam_waist
        self.spectral_wavelengths = (list(range(340, 821, 40))
                                     if spectral_wavelengths is None
                                     else list(spectral_wavelengths))


class PointSource(OpticalComponent):
    """ Fan of rays diverging from a point, in the local u-w plane.

    The source has no body; rays never intersect it.
    """
    label_format = 'PS{}'

    def __init__(self, wavelength=532., cone_angle=25., ray_count=11,
                 **kwargs):
        super().__init__(**kwargs)
        self.wavelength = wavelength
        self.cone_angle = cone_angle
        self.ray_count = ray_count

    def bounds(self):
        return np.zeros(3), np.zeros(3)

    def chk_intersection(self, ray):
        return None

    def generate_rays(self):
        forward = self.axis()
        fan_axis = self.to_world_dir(np.array([0., 1., 0.]))
        half_angle = radians(self.cone_angle)
        origin = self.position
        n = self.ray_count
        rays = []
        for i in range(n):
            angle = 0. if n < 2 else (i/(n - 1) - 0.5)*2*half_angle
            d = normalize(rotate_about_axis(forward, fan_axis, angle))
            rays.append(Ray(origin, d, wavelength=self.wavelength*1e-9,
                            intensity=1.0, coherence=Coherence.COHERENT,
                            source_id=self.id, is_main_ray=(i == n//2)))
        return rays


def ring_rays(origin, direction, beam_radius, total_rays, wavelength,
              intensity, coherence, source_id, polarization=(1., 0.)):
    """ Rays on concentric rings about a central ray.

    The outer ring has 24 rays and inner rings 12; the count is rounded up
    to fill whole rings. Coherent rays are weighted by the Gaussian profile
    :math:`e^{-2 r^2}` in normalized radius.
    """
    snapped = snap_to_ring_boundary(total_rays)
    fractions = radius_fractions()
    right, true_up = perpendicular_frame(direction, up=(0., 1., 0.),
                                         alt_up=(0., 0., 1.), threshold=0.9)
    rays = []
    ring = 0
    while len(rays) < snapped and ring < len(fractions):
        r_norm = fractions[ring]
        ring_radius = beam_radius*r_norm
        count = first_ring_count if ring == 0 else inner_ring_count
        offset = ring*pi/7
        weight = (exp(-2*r_norm*r_norm) if coherence == Coherence.COHERENT
                  else intensity)
        for i in range(count):
            phi = offset + 2*pi*i/count
            p = (origin + sin(phi)*ring_radius*true_up +
                 cos(phi)*ring_radius*right)
            rays.append(Ray(p, direction, wavelength=wavelength,
                            intensity=weight, polarization=polarization,
                            coherence=coherence, source_id=source_id))
        ring += 1
    return rays


def create_source_rays(scene, ray_count, mode='full'):
    """ Create the initial rays for all the sources in a scene.

    Args:
        scene: iterable of components
        ray_count: requested number of bundle rays per source
        mode: 'full' for the main ray plus ring bundle, 'center' for the
              main rays only

    Returns:
        list of :class:`~.rays.Ray`
    """
    if mode not in ('full', 'center'):
        raise ValueError(f"unknown source ray mode: {mode}")
    comps = list(scene)
    source_rays = []
    for laser in (c for c in comps if isinstance(c, Laser)):
        origin = laser.emission_origin()
        d = normalize(laser.axis())
        wvl = laser.wavelength*1e-9
        source_rays.append(Ray(origin, d, wavelength=wvl,
                               intensity=laser.power,
                               polarization=laser.polarization,
                               coherence=Coherence.COHERENT,
                               source_id=laser.id, is_main_ray=True))
        if mode == 'full':
            source_rays.extend(ring_rays(origin, d, laser.beam_radius,
                                         max(1, ray_count), wvl,
                                         laser.power, Coherence.COHERENT,
                                         laser.id, laser.polarization))

    for lamp in (c for c in comps if isinstance(c, Lamp)):
        origin = lamp.emission_origin()
        d = normalize(lamp.axis())
        for wvl_nm in lamp.spectral_wavelengths:
            wvl = wvl_nm*1e-9
            source_rays.append(Ray(origin, d, wavelength=wvl,
                                   intensity=lamp.power,
                                   coherence=Coherence.INCOHERENT,
                                   source_id=lamp.id, is_main_ray=True))
            if mode == 'full':
                n = max(1, ray_count)
                if n >= 16:
                    n = max(1, n//2)
                source_rays.extend(ring_rays(origin, d, lamp.beam_radius, n,
                                             wvl, lamp.power,
                                             Coherence.INCOHERENT, lamp.id))

    samples = [c for c in comps if isinstance(c, Sample)]
    em_wvl = (samples[0].emission_wavelength if len(samples) > 0
              else 520.)*1e-9
    for pmt in (c for c in comps if isinstance(c, PMT)):
        d = normalize(pmt.axis())
        source_rays.append(Ray(pmt.position + d, d, wavelength=em_wvl,
                               intensity=0.3, coherence=Coherence.COHERENT,
                               source_id=pmt.id))

    for ps in (c for c in comps if isinstance(c, PointSource)):
        source_rays.extend(ps.generate_rays())

    logger.debug("created %d source rays", len(source_rays))
    return source_rays

