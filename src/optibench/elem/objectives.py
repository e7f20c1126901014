#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Microscope objectives

    :class:`AplanaticObjective` is an ideal objective modeled as a phase
    surface on the Abbe reference sphere, inside a barrel that absorbs stray
    light. :class:`Objective` is a multi-element achromat built from
    :class:`~.lenses.SphericalLens` elements.

    Both objectives look toward the sample along -w; the front focal point
    is on the -w axis.

.. Created on Fri Oct 16 13:42:05 2026

.. codeauthor: Michael J. Hayford
"""
import logging
from math import sqrt

import numpy as np

from optibench.util.misc_math import normalize, transverse_radius
from optibench.raytr.rays import HitRecord
from optibench.raytr.traceerror import (TraceEvanescentRayError,
                                        TraceMissedSurfaceError,
                                        TraceRayBlockedError)
from optibench.elem.component import OpticalComponent, closest_hit
from optibench.elem.lenses import SphericalLens
from optibench.elem.profiles import (Spherical, Cylinder, Cone, Annulus,
                                     try_intersect)

logger = logging.getLogger(__name__)


class AplanaticObjective(OpticalComponent):
    """ Infinity corrected objective obeying the Abbe sine condition.

    The optical surface is the reference sphere of radius
    :math:`R_s = n f` centered on the front focal point,
    :math:`(0, 0, -R_s)`, with its vertex at the local origin. A ray
    striking it at transverse position r has its transverse momentum,
    :math:`p = n\\,d_\\perp`, changed to

    :math:`p_{out} = p_{in} - r/f`

    which maps a ray leaving the focus at angle θ onto a collimated ray at
    height :math:`h = f\\,n\\sin\\theta` for any θ inside the aperture.

    Attributes:
        NA: numerical aperture
        magnification: with tube_lens_focal, sets the focal length
        immersion_index: refractive index on the sample side
        working_distance: distance from the focus to the front of the barrel
        tube_lens_focal: focal length of the matching tube lens
        diameter: outer diameter of the barrel
    """
    label_format = 'OBJ{}'

    def __init__(self, NA=0.25, magnification=10., immersion_index=1.,
                 working_distance=10., tube_lens_focal=200., diameter=20.,
                 **kwargs):
        super().__init__(**kwargs)
        self.NA = NA
        self.magnification = magnification
        self.immersion_index = immersion_index
        self.working_distance = working_distance
        self.tube_lens_focal = tube_lens_focal
        self.diameter = diameter
        self.recalculate()

    def listobj_str(self):
        o_str = super().listobj_str()
        o_str += (f"NA={self.NA}  mag={self.magnification}  "
                  f"n={self.immersion_index}  f={self.focal_length}\n")
        return o_str

    def recalculate(self):
        """ update the derived quantities after a parameter change """
        self.focal_length = self.tube_lens_focal/self.magnification
        self.pupil_radius = self.focal_length*self.NA
        self.sphere_radius = self.immersion_index*self.focal_length
        self.update()

    def is_malformed(self):
        f = self.focal_length
        return (not np.isfinite(f) or f <= 0. or not self.NA > 0. or
                self.NA >= self.immersion_index or
                not self.working_distance > 0.)

    def barrel_geometry(self):
        """ (w_front, r_open, r_front, w_cone, r_body, w_back)

        The front cap opening passes the full aperture cone from the focus,
        and the cone wall opens at least as fast as the aperture cone.
        """
        rs = self.sphere_radius
        w_focus = -rs
        sin_max = self.NA/self.immersion_index
        tan_max = sin_max/sqrt(1. - sin_max*sin_max)
        r_body = max(self.diameter/2, self.pupil_radius + 1.)
        sag_edge = rs - sqrt(rs*rs - self.pupil_radius*self.pupil_radius)

        w_front = min(w_focus + self.working_distance, -sag_edge - 0.5)
        r_open = (w_front - w_focus)*tan_max
        r_front = min(r_open + 1., r_body)
        w_cone = w_front + (r_body - r_front)/tan_max
        w_back = max(5., w_cone + 1.)
        return w_front, r_open, r_front, w_cone, r_body, w_back

    def bounds(self):
        if self.is_malformed():
            r = self.diameter/2
            return np.array([-r, -r, -0.5]), np.array([r, r, 0.5])
        w_front, r_open, r_front, w_cone, r_body, w_back = \
            self.barrel_geometry()
        return (np.array([-r_body, -r_body, w_front - 0.1]),
                np.array([r_body, r_body, w_back + 0.1]))

    def barrel_hit(self, p, d):
        w_front, r_open, r_front, w_cone, r_body, w_back = \
            self.barrel_geometry()
        walls = [('front_cap', Annulus(w_front, r_open, r_front)),
                 ('back_cap', Annulus(w_back, self.pupil_radius, r_body)),
                 ('cylinder', Cylinder(r_body, w_cone, w_back))]
        if w_cone > w_front:
            walls.append(('cone', Cone(w_front, r_front, w_cone, r_body)))
        hits = []
        for face, wall in walls:
            wall_hit = try_intersect(wall, p, d, self.eps)
            if wall_hit is not None:
                s, pt, n = wall_hit
                hits.append(HitRecord(s, pt, n, is_blocked=True, face=face))
        return closest_hit(hits)

    def reference_sphere(self):
        return Spherical(c=-1.0/self.sphere_radius)

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction

        barrel = self.barrel_hit(p, d)

        sphere_hit = try_intersect(self.reference_sphere(), p, d, self.eps)
        if sphere_hit is None:
            return barrel
        s, pt, n = sphere_hit
        if barrel is not None and barrel.t <= s:
            return barrel
        if transverse_radius(pt) > self.pupil_radius:
            return HitRecord(s, pt, n, is_blocked=True, face='stop')
        return HitRecord(s, pt, n, face='phase')

    def interact_base(self, ray, hit):
        d, normal = self.local_incidence(ray, hit)
        pt = hit.local_point
        if d[2] > 0.:
            n_in, n_out = self.immersion_index, 1.0
        else:
            n_in, n_out = 1.0, self.immersion_index

        p_out = n_in*d[:2] - pt[:2]/self.focal_length
        t_out = p_out/n_out
        t_sqr = t_out.dot(t_out)
        if t_sqr > 1.:
            raise TraceEvanescentRayError(self, pt, d, normal, n_in, n_out)
        w_out = np.copysign(sqrt(1. - t_sqr), d[2])
        d_out = normalize(np.array([t_out[0], t_out[1], w_out]))

        rs = self.sphere_radius
        h = transverse_radius(pt)
        delta_opl = -(rs - sqrt(max(rs*rs - h*h, 0.)))
        return [self.spawn(ray, hit, direction=self.to_world_dir(d_out),
                           delta_opl=delta_opl)]

    def get_abcd(self):
        return 1., 0., -1.0/self.focal_length, 1.

    def get_aperture_radius(self):
        return self.pupil_radius


class Objective(OpticalComponent):
    """ Four element, three group achromatic objective.

    The elements are :class:`~.lenses.SphericalLens` children whose poses
    are relative to the objective. A hit record's `surface` is the index of
    the struck element.
    """
    label_format = 'OBJ{}'
    # (w position, r1, r2, thickness, aperture radius, index)
    prescription = [
        (0.74, 6.76, 8.56, 5.48, 6., 1.788),
        (9.42, 55.04, -40.14, 3.28, 7., 1.788),
        (23.98, 59.28, 15.86, 2.20, 7., 1.785),
        # cemented to the previous element; the 0.01 air gap keeps the
        # shared surface resolvable by the tracer
        (27.01, 15.86, -40.14, 3.84, 7., 1.517),
        ]

    def __init__(self, focal_length=20., **kwargs):
        super().__init__(**kwargs)
        self.focal_length = focal_length
        self.elements = []
        for i, (w, r1, r2, t, ra, n) in enumerate(self.prescription):
            lens = SphericalLens(r1=r1, r2=r2, thickness=t,
                                 aperture_radius=ra, material=n,
                                 label=f"{self.label}.{i + 1}",
                                 position=(0., 0., w), parent=self)
            self.elements.append(lens)

    def listobj_str(self):
        o_str = super().listobj_str()
        for e in self.elements:
            o_str += e.listobj_str()
        return o_str

    def bounds(self):
        box_min = np.full(3, np.inf)
        box_max = np.full(3, -np.inf)
        for e in self.elements:
            e_min, e_max = e.bounds()
            box_min = np.minimum(box_min, e_min + e.position)
            box_max = np.maximum(box_max, e_max + e.position)
        return box_min, box_max

    def is_malformed(self):
        return any(e.is_malformed() for e in self.elements)

    def intersect(self, ray_local):
        hits = []
        for i, e in enumerate(self.elements):
            p_e = e.parent_to_local_point(ray_local.origin)
            d_e = e.parent_to_local_dir(ray_local.direction)
            hit = e.intersect(ray_local.child(origin=p_e, direction=d_e))
            if hit is not None:
                hits.append(HitRecord(hit.t,
                                      e.local_to_parent_point(hit.point),
                                      e.local_to_parent_dir(hit.normal),
                                      is_blocked=hit.is_blocked, surface=i,
                                      face=hit.face))
        return closest_hit(hits)

    def interact_base(self, ray, hit):
        if hit.surface is None:
            raise TraceMissedSurfaceError(self)
        element = self.elements[hit.surface]
        # redo the hit in the element's own frame
        e_hit = element.chk_intersection(ray)
        if e_hit is None:
            raise TraceMissedSurfaceError(element)
        if e_hit.is_blocked:
            raise TraceRayBlockedError(element, e_hit.point)
        return element.interact_base(ray, e_hit)

    def medium_index(self, wavelength):
        return None

    def get_abcd(self):
        return 1., 0., -1.0/self.focal_length, 1.

    def get_aperture_radius(self):
        return min(e.aperture_radius for e in self.elements)
