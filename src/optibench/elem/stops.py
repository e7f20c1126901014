#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Stops and beam blocks

    Every hit on one of these components is a blocked hit, so the ray is
    absorbed. Rays through an opening don't intersect the component at all.

.. Created on Fri Oct 16 16:05:19 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np

from optibench.raytr.rays import HitRecord
from optibench.raytr.traceerror import TraceMissedSurfaceError
from optibench.elem.component import (OpticalComponent, PlanarComponent,
                                      closest_hit)
from optibench.elem.profiles import (Cylinder, Annulus, intersect_plane,
                                     try_intersect)


def plate_normal(d):
    return np.array([0., 0., -1. if d[2] > 0. else 1.])


class Aperture(PlanarComponent):
    """ Iris: a circular opening in an annular housing at w=0. """
    label_format = 'A{}'

    def __init__(self, opening_diameter=10., housing_diameter=25.,
                 **kwargs):
        super().__init__(aperture_radius=housing_diameter/2, **kwargs)
        self.opening_diameter = opening_diameter
        self.housing_diameter = housing_diameter

    def half_extent(self):
        r = self.housing_diameter/2
        return r, r

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        s, pt = intersect_plane(p, d, self.eps)
        r_sqr = pt[0]*pt[0] + pt[1]*pt[1]
        r_in = self.opening_diameter/2
        r_out = self.housing_diameter/2
        if r_sqr < r_in*r_in or r_sqr > r_out*r_out:
            return None
        return HitRecord(s, pt, plate_normal(d), is_blocked=True,
                         face='housing')

    def get_aperture_radius(self):
        return self.opening_diameter/2


class SlitAperture(PlanarComponent):
    """ Rectangular slit, slit_width along u and slit_height along v, in a
    square housing.
    """
    label_format = 'S{}'

    def __init__(self, slit_width=5., slit_height=20., housing_size=25.,
                 **kwargs):
        super().__init__(aperture_radius=housing_size/2, **kwargs)
        self.slit_width = slit_width
        self.slit_height = slit_height
        self.housing_size = housing_size

    def half_extent(self):
        h = self.housing_size/2
        return h, h

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        s, pt = intersect_plane(p, d, self.eps)
        h = self.housing_size/2
        if abs(pt[0]) > h or abs(pt[1]) > h:
            return None
        if abs(pt[0]) < self.slit_width/2 and abs(pt[1]) < self.slit_height/2:
            return None
        return HitRecord(s, pt, plate_normal(d), is_blocked=True,
                         face='housing')

    def get_aperture_radius(self):
        return self.slit_width/2


class Blocker(OpticalComponent):
    """ Solid cylindrical beam block along w, with flat end caps. """
    label_format = 'B{}'

    def __init__(self, diameter=20., thickness=5., **kwargs):
        super().__init__(**kwargs)
        self.diameter = diameter
        self.thickness = thickness

    def bounds(self):
        r = self.diameter/2
        ht = self.thickness/2
        return np.array([-r, -r, -ht]), np.array([r, r, ht])

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        r = self.diameter/2
        ht = self.thickness/2
        hits = []
        for face, profile in (('side', Cylinder(r, -ht, ht)),
                              ('front', Annulus(-ht, 0., r)),
                              ('back', Annulus(ht, 0., r))):
            h = try_intersect(profile, p, d, self.eps)
            if h is not None:
                s, pt, n = h
                hits.append(HitRecord(s, pt, n, is_blocked=True, face=face))
        hit = closest_hit(hits)
        if hit is None:
            raise TraceMissedSurfaceError(self)
        return hit
