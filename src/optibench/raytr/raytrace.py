#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Functions to support ray tracing a scene of optical components

    The forward tracer follows every ray from its source, through the
    globally nearest component hit at each step, and unrolls beam splits
    into independent path branches.

.. Created on Mon Oct 12 11:05:31 2026

.. codeauthor: Michael J. Hayford
"""
import logging

import numpy as np
from numpy.linalg import norm
from math import sqrt, copysign

import optibench.optical.model_constants as mc
from optibench.util.misc_math import is_finite_vec
from .traceerror import TraceTIRError

logger = logging.getLogger(__name__)


def bend(d_in, normal, n_in, n_out):
    """ refract incoming direction, d_in, about normal """
    try:
        normal_len = norm(normal)
        cosI = np.dot(d_in, normal)/normal_len
        sinI_sqr = 1.0 - cosI*cosI
        n_cosIp = copysign(sqrt(n_out*n_out - n_in*n_in*sinI_sqr), cosI)
        alpha = n_cosIp - n_in*cosI
        d_out = (n_in*d_in + alpha*normal/normal_len)/n_out
        return d_out
    except ValueError:
        raise TraceTIRError(d_in, normal, n_in, n_out)


def reflect(d_in, normal):
    """ reflect incoming direction, d_in, about normal """
    normal_len = norm(normal)
    cosI = np.dot(d_in, normal)/normal_len
    d_out = d_in - 2.0*cosI*normal/normal_len
    return d_out


def find_nearest_hit(scene, ray, hit_eps=mc.HIT_EPS, skip=None):
    """ Find the globally nearest component hit along ray.

    Args:
        scene: iterable of components
        ray: the world space :class:`~.rays.Ray`
        hit_eps: hits closer than this are ignored
        skip: optional predicate; components for which it is True are not
              tested

    Returns:
        (**component**, **hit**), both None if nothing is struck
    """
    nearest_t = np.inf
    nearest_hit = None
    nearest_comp = None
    for comp in scene:
        if skip is not None and skip(comp):
            continue
        hit = comp.chk_intersection(ray)
        if hit is not None and hit_eps < hit.t < nearest_t:
            nearest_t = hit.t
            nearest_hit = hit
            nearest_comp = comp
    return nearest_comp, nearest_hit


def trace_scene(scene, source_rays, max_depth=mc.MAX_DEPTH,
                hit_eps=mc.HIT_EPS, absorption_eps=mc.ABSORPTION_EPS):
    """ fundamental forward raytrace function

    Args:
        scene: the :class:`~.scene.Scene` (or any iterable of components)
        source_rays: the rays to be traced
        max_depth: maximum number of interactions along a branch
        hit_eps: minimum accepted hit distance
        absorption_eps: rays below this intensity are not propagated

    Returns:
        a list of ray paths, one per branch. Each path is a list of
        :class:`~.rays.Ray` snapshots, oldest first. The ray ending a
        segment on a hit has its `interaction_distance` and `hit_component`
        set; the last ray of an escaping branch has neither.
    """
    all_paths = []
    for src_ray in source_rays:
        if not (is_finite_vec(src_ray.origin) and
                is_finite_vec(src_ray.direction)):
            logger.warning("skipping invalid source ray from %s",
                           src_ray.source_id)
            continue
        _trace_branch(scene, src_ray, [src_ray], 0, all_paths,
                      max_depth, hit_eps, absorption_eps)

    logger.debug("traced %d source rays into %d paths",
                 len(source_rays), len(all_paths))
    return all_paths


def _trace_branch(scene, ray, path, depth, all_paths,
                  max_depth, hit_eps, absorption_eps):
    if depth >= max_depth:
        all_paths.append(path)
        return

    comp, hit = find_nearest_hit(scene, ray, hit_eps=hit_eps)

    # escapes to infinity
    if hit is None:
        all_paths.append(path)
        return

    ray.interaction_distance = hit.t
    ray.hit_component = comp.id

    children = comp.interact(ray, hit)

    # absorbed or blocked
    if len(children) == 0:
        all_paths.append(path)
        return

    for child in children:
        child.interaction_distance = None
        child.hit_component = None
        if child.intensity < absorption_eps:
            # extinguished; kept for display only
            all_paths.append(path + [child])
            continue
        _trace_branch(scene, child, path + [child], depth + 1, all_paths,
                      max_depth, hit_eps, absorption_eps)
