#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Reflective components: flat and spherical mirrors and galvo scanners

    All mirrors apply a π phase shift to the Jones vector of the reflected
    ray.

.. Created on Wed Oct 14 09:11:58 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np

from optibench.util.misc_math import is_kinda_big, rotate_about_axis
from optibench.raytr.rays import HitRecord
from optibench.raytr.raytrace import reflect
from optibench.oprops import jones
from optibench.elem.component import (OpticalComponent, PlanarComponent,
                                      closest_hit)
from optibench.elem.profiles import Spherical, Cylinder, try_intersect


class Mirror(PlanarComponent):
    """ Flat circular mirror in the w=0 plane, reflective on both sides. """
    label_format = 'M{}'

    def __init__(self, diameter=25.4, **kwargs):
        super().__init__(aperture_radius=diameter/2, **kwargs)

    @property
    def diameter(self):
        return 2*self.aperture_radius

    @diameter.setter
    def diameter(self, dia):
        self.aperture_radius = dia/2

    def interact_base(self, ray, hit):
        d_out = reflect(ray.direction, hit.normal)
        return [self.spawn(ray, hit, direction=d_out,
                           polarization=jones.mirror_flip(ray.polarization))]


class CurvedMirror(OpticalComponent):
    """ Spherical mirror with a reflective front face.

    The reflective cap has its vertex at w = -thickness/2 and faces -w. A
    positive radius of curvature puts the center of curvature on the -w
    side, so the mirror is concave and focuses light; a radius whose
    magnitude is kinda big is flat. The back face and rim of the
    mirror blank absorb.

    Attributes:
        diameter: clear aperture diameter
        radius_of_curvature: R; focal length is R/2
        thickness: thickness of the mirror blank
    """
    label_format = 'CM{}'

    def __init__(self, diameter=25.4, radius_of_curvature=100.,
                 thickness=3., **kwargs):
        super().__init__(**kwargs)
        self.diameter = diameter
        self.radius_of_curvature = radius_of_curvature
        self.thickness = thickness

    @property
    def focal_length(self):
        return self.radius_of_curvature/2

    def curvature(self):
        r = self.radius_of_curvature
        return 0. if is_kinda_big(r) else 1.0/r

    def bounds(self):
        ra = self.diameter/2
        zmax = self.thickness/2 + self._max_sag() + 0.1
        return np.array([-ra, -ra, -zmax]), np.array([ra, ra, zmax])

    def _max_sag(self):
        ra = self.diameter/2
        cv = self.curvature()
        if cv == 0.:
            return 0.
        r = abs(1/cv)
        return r - np.sqrt(max(r*r - ra*ra, 0.))

    def is_malformed(self):
        r = self.radius_of_curvature
        ra = self.diameter/2
        return (np.isnan(r) or r == 0. or not self.thickness >= 0. or
                not ra > 0. or (not is_kinda_big(r) and ra >= abs(r)))

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        ra = self.diameter/2
        half_t = self.thickness/2
        # center of curvature on the reflective (-w) side for R > 0
        profile = Spherical(c=-self.curvature())
        hits = []

        front = try_intersect(profile, p, d, self.eps, z_vertex=-half_t)
        if front is not None:
            s, pt, n = front
            if pt[0]*pt[0] + pt[1]*pt[1] <= ra*ra:
                # profile normal points +w at the vertex; reflective side
                # faces -w
                outward = -n
                blocked = np.dot(outward, d) >= 0.
                hits.append(HitRecord(s, pt, outward, is_blocked=blocked,
                                      face='front'))

        back = try_intersect(profile, p, d, self.eps, z_vertex=half_t)
        if back is not None:
            s, pt, n = back
            if pt[0]*pt[0] + pt[1]*pt[1] <= ra*ra:
                hits.append(HitRecord(s, pt, n, is_blocked=True, face='back'))

        rim = try_intersect(Cylinder(ra, -half_t - self._max_sag(),
                                     half_t + self._max_sag()),
                            p, d, self.eps)
        if rim is not None:
            s, pt, n = rim
            hits.append(HitRecord(s, pt, n, is_blocked=True, face='rim'))

        return closest_hit(hits)

    def interact_base(self, ray, hit):
        d_out = reflect(ray.direction, hit.normal)
        return [self.spawn(ray, hit, direction=d_out,
                           polarization=jones.mirror_flip(ray.polarization))]

    def get_abcd(self):
        return 1., 0., -2.0*self.curvature(), 1.

    def get_aperture_radius(self):
        return self.diameter/2


class GalvoScanHead(PlanarComponent):
    """ Two axis galvanometer scan head pivoting about a single point.

    The beam reflects off the w=0 plane, then is deflected by twice the
    mechanical scan angles: 2·scan_x about the component's y axis and
    2·scan_y about its x axis, both taken in world space.

    Attributes:
        scan_x: horizontal mechanical scan angle, radians
        scan_y: vertical mechanical scan angle, radians
    """
    label_format = 'G{}'

    def __init__(self, diameter=15., thickness=2., scan_x=0., scan_y=0.,
                 **kwargs):
        super().__init__(aperture_radius=diameter/2, **kwargs)
        self.thickness = thickness
        self.scan_x = scan_x
        self.scan_y = scan_y

    @property
    def diameter(self):
        return 2*self.aperture_radius

    @diameter.setter
    def diameter(self, dia):
        self.aperture_radius = dia/2

    def interact_base(self, ray, hit):
        d_out = reflect(ray.direction, hit.normal)
        if abs(self.scan_x) > 1e-10:
            y_axis = self.to_world_dir(np.array([0., 1., 0.]))
            d_out = rotate_about_axis(d_out, y_axis, 2*self.scan_x)
        if abs(self.scan_y) > 1e-10:
            x_axis = self.to_world_dir(np.array([1., 0., 0.]))
            d_out = rotate_about_axis(d_out, x_axis, 2*self.scan_y)
        return [self.spawn(ray, hit, direction=d_out,
                           polarization=jones.mirror_flip(ray.polarization))]


class DualGalvoScanHead(OpticalComponent):
    """ Pair of galvo mirrors separated by mirror_spacing.

    Mirror 1 pivots about (-s/2, 0, 0) about the z axis by scan_x and
    folds a +x beam toward +y. Mirror 2 pivots about (-s/2, s, 0) about the
    x axis by scan_y and folds it toward +z. Both mirrors are one sided.
    """
    label_format = 'DG{}'

    def __init__(self, mirror_spacing=15., mirror_diameter=12., scan_x=0.,
                 scan_y=0., **kwargs):
        super().__init__(**kwargs)
        self.mirror_spacing = mirror_spacing
        self.mirror_diameter = mirror_diameter
        self.scan_x = scan_x
        self.scan_y = scan_y

    def bounds(self):
        ext = max(20., self.mirror_spacing + self.mirror_diameter)
        return np.array([-ext, -ext, -ext]), np.array([ext, ext, ext])

    def mirror_planes(self):
        """ [(pivot, unit normal), ...] of the two mirrors, local frame """
        half_s = self.mirror_spacing/2
        n1 = rotate_about_axis(np.array([-1., 1., 0.])/np.sqrt(2.),
                               np.array([0., 0., 1.]), self.scan_x)
        p1 = np.array([-half_s, 0., 0.])
        n2 = rotate_about_axis(np.array([0., -1., 1.])/np.sqrt(2.),
                               np.array([1., 0., 0.]), self.scan_y)
        p2 = np.array([-half_s, self.mirror_spacing, 0.])
        return [(p1, n1), (p2, n2)]

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        radius = self.mirror_diameter/2
        hits = []
        for i, (pivot, n) in enumerate(self.mirror_planes()):
            d_n = np.dot(d, n)
            if abs(d_n) < 1e-6:
                continue
            s = np.dot(n, pivot - p)/d_n
            if not s > self.eps:
                continue
            pt = p + s*d
            if np.linalg.norm(pt - pivot) <= radius:
                # the reflective face looks along n
                hits.append(HitRecord(s, pt, n, is_blocked=d_n >= 0.,
                                      surface=i))
        return closest_hit(hits)

    def interact_base(self, ray, hit):
        d_out = reflect(ray.direction, hit.normal)
        return [self.spawn(ray, hit, direction=d_out,
                           polarization=jones.mirror_flip(ray.polarization))]

    def get_aperture_radius(self):
        return self.mirror_diameter/2
