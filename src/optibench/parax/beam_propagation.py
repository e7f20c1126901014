#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Gaussian beam propagation along traced ray paths

    The main ray path of each source is used as the skeleton of a Gaussian
    beam. The q-parameters in the u-w and v-w planes are propagated through
    free space between interactions and transformed by each struck
    component's ABCD matrices.

.. Created on Thu Oct 15 14:06:18 2026

.. codeauthor: Michael J. Hayford
"""
import logging
from collections import namedtuple
from math import pi, sqrt, exp, cos, sin

import numpy as np

import optibench.optical.model_constants as mc
from optibench.util.misc_math import perpendicular_frame
from optibench.parax.gaussian import (GaussianBeamSegment, initial_q,
                                      beam_radius, apply_abcd,
                                      propagate_free_space)

logger = logging.getLogger(__name__)

FieldSample = namedtuple('FieldSample', ['intensity', 'polarization', 'phase'])
FieldSample.intensity.__doc__ = "irradiance of the beam at the query point"
FieldSample.polarization.__doc__ = "Jones vector of the beam segment"
FieldSample.phase.__doc__ = "optical phase at the query point, radians"

default_waist = 2.0
default_glass_index = 1.5


def propagate_beams(paths, scene, beam_power_eps=mc.BEAM_POWER_EPS,
                    final_length=mc.FINAL_SEGMENT_LENGTH,
                    clip_truncation=mc.CLIP_TRUNCATION):
    """ Propagate Gaussian beams along the main ray paths.

    Args:
        paths: ray paths from :func:`~.raytrace.trace_scene`
        scene: the :class:`~.scene.Scene` the paths were traced in
        beam_power_eps: a beam is ended when its power drops below this
        final_length: length of the segment leaving the last interaction
        clip_truncation: a beam is reset to the aperture size when the
            ratio of aperture to beam radius falls below this value

    Returns:
        list of :class:`~.gaussian.GaussianBeamSegment` lists, one per
        main ray branch
    """
    main_paths = [p for p in paths if len(p) > 0 and p[0].is_main_ray]
    all_segments = []
    for path in main_paths:
        try:
            segments = propagate_branch(path, scene, beam_power_eps,
                                        final_length, clip_truncation)
        except Exception as err:
            logger.warning("beam propagation failed for source %s: %s",
                           path[0].source_id, err)
            continue
        if len(segments) > 0:
            all_segments.append(segments)
    logger.debug("propagated %d beam branches", len(all_segments))
    return all_segments


def propagate_branch(path, scene, beam_power_eps=mc.BEAM_POWER_EPS,
                     final_length=mc.FINAL_SEGMENT_LENGTH,
                     clip_truncation=mc.CLIP_TRUNCATION):
    """ beam segments along a single ray path """
    wvl = path[0].wavelength
    wvl_mm = wvl*1.0e3

    source = scene[path[0].source_id]
    waist = getattr(source, 'beam_waist', default_waist)

    qx = initial_q(waist, wvl_mm)
    qy = initial_q(waist, wvl_mm)

    segments = []
    for i, ray in enumerate(path):
        power = ray.intensity
        if power < beam_power_eps:
            break

        if ray.interaction_distance is not None:
            seg_len = ray.interaction_distance
        elif i < len(path) - 1:
            seg_len = float(np.linalg.norm(path[i + 1].origin - ray.origin))
        else:
            seg_len = final_length
        if seg_len < 1e-6:
            continue

        # leg inside the component the ray just left
        if ray.entry_point is not None:
            leg = ray.origin - ray.entry_point
            leg_len = float(np.linalg.norm(leg))
            if leg_len >= 1e-6:
                glass = scene[ray.exit_surface_id]
                n_glass = None if glass is None \
                    else glass.medium_index(wvl)
                if n_glass is None:
                    n_glass = default_glass_index
                qx_end = propagate_free_space(qx, leg_len)
                qy_end = propagate_free_space(qy, leg_len)
                segments.append(GaussianBeamSegment(
                    ray.entry_point, ray.origin, leg/leg_len, wvl, power,
                    qx, qx_end, qy, qy_end, ray.polarization, ray.opl,
                    n_glass))
                qx, qy = qx_end, qy_end

        qx_end = propagate_free_space(qx, seg_len)
        qy_end = propagate_free_space(qy, seg_len)
        segments.append(GaussianBeamSegment(
            ray.origin, ray.point_at(seg_len), ray.direction, wvl, power,
            qx, qx_end, qy, qy_end, ray.polarization, ray.opl, 1.0))
        qx, qy = qx_end, qy_end

        comp = scene[ray.hit_component]
        if comp is None:
            continue
        abcd_x, abcd_y = comp.get_abcd_xy()
        aperture = comp.get_aperture_radius()
        w_max = max(beam_radius(qx, wvl_mm), beam_radius(qy, wvl_mm))
        if aperture > 0. and aperture/w_max < clip_truncation:
            # clipped, restart with a waist the size of the aperture
            qx = initial_q(aperture, wvl_mm)
            qy = initial_q(aperture, wvl_mm)
        else:
            qx = apply_abcd(qx, abcd_x)
            qy = apply_abcd(qy, abcd_y)

    return segments


def nearest_segment(point, segments):
    """ (segment, distance along it, distance from it) nearest point """
    best = None
    best_dist = np.inf
    best_t = 0.
    for seg in segments:
        seg_len = seg.length
        if seg_len < 1e-6:
            continue
        seg_dir = (seg.end - seg.start)/seg_len
        along = np.dot(point - seg.start, seg_dir)
        t = min(max(along, 0.), seg_len)
        dist = float(np.linalg.norm(point - (seg.start + t*seg_dir)))
        if dist < best_dist:
            best, best_dist, best_t = seg, dist, t
    return best, best_t, best_dist


def query_intensity(point, segments, radius_limit=mc.QUERY_RADIUS_LIMIT):
    """ Gaussian beam field of one branch at a world point.

    Args:
        point: the query point
        segments: the segments of one beam branch
        radius_limit: points farther than this many beam radii from the
            nearest segment are outside the beam

    Returns:
        a :class:`FieldSample`, or None if the point is outside the beam
    """
    point = np.asarray(point, dtype=float)
    seg, t, dist = nearest_segment(point, segments)
    if seg is None:
        return None

    seg_dir = (seg.end - seg.start)/seg.length
    n = seg.refractive_index if seg.refractive_index else 1.0
    eff_wvl = seg.wavelength_mm/n

    qx, qy = seg.q_at(t)
    wx = beam_radius(qx, eff_wvl)
    wy = beam_radius(qy, eff_wvl)
    if wx <= 0. or wy <= 0.:
        return None
    if dist > radius_limit*max(wx, wy):
        return None

    to_pt = point - seg.start
    along = np.dot(to_pt, seg_dir)
    transverse = to_pt - along*seg_dir
    right, local_up = perpendicular_frame(seg_dir, up=(0., 1., 0.),
                                          alt_up=(1., 0., 0.),
                                          threshold=0.99)
    x = np.dot(transverse, right)
    y = np.dot(transverse, local_up)

    intensity = (seg.power/(pi*wx*wy))*exp(-2*(x*x/(wx*wx) + y*y/(wy*wy)))
    k = 2*pi/seg.wavelength_mm
    phase = k*(seg.opl + t*n)
    return FieldSample(intensity, seg.polarization, phase)


def query_intensity_multi_beam(point, branches, wavelength=None,
                               wavelength_tol=mc.LASER_WAVELENGTH_TOL,
                               spectral_weight=None):
    """ Total irradiance at a point, summing the branch fields coherently.

    Args:
        point: the query point
        branches: beam branches from :func:`propagate_beams`
        wavelength: if given, in meters, only branches within
            wavelength_tol of it contribute
        spectral_weight: if given, a function of a branch wavelength in
            meters returning the fraction of that branch's irradiance to
            count, e.g. an absorption spectrum

    Returns:
        :math:`|E_x|^2 + |E_y|^2` of the summed field
    """
    ex = 0j
    ey = 0j
    for branch in branches:
        if len(branch) == 0:
            continue
        if (wavelength is not None and
                abs(branch[0].wavelength - wavelength) > wavelength_tol):
            continue
        field = query_intensity(point, branch)
        if field is None or field.intensity < 1e-12:
            continue
        weight = 1.0
        if spectral_weight is not None:
            weight = spectral_weight(branch[0].wavelength)
            if weight <= 0.:
                continue
        amp = sqrt(field.intensity*weight)
        phasor = complex(cos(field.phase), sin(field.phase))
        ex += amp*field.polarization[0]*phasor
        ey += amp*field.polarization[1]*phasor
    return abs(ex)**2 + abs(ey)**2
