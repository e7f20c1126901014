#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Refractive lens components

    :class:`IdealLens` is a paraxial phase surface. :class:`SphericalLens`
    and :class:`CylindricalLens` are thick lenses traced with real surface
    intersections and vector Snell's law at both faces.

    For the thick lenses the front vertex is at w = -thickness/2 and the
    back vertex at w = +thickness/2. A positive radius of curvature puts the
    center of curvature on the +w side of the vertex.

.. Created on Fri Oct 16 09:20:47 2026

.. codeauthor: Michael J. Hayford
"""
import logging

import numpy as np

import optibench.optical.model_constants as mc
from optibench.util.misc_math import (normalize, is_kinda_big,
                                      transverse_radius)
from optibench.raytr.rays import HitRecord
from optibench.raytr.raytrace import bend
from optibench.raytr.traceerror import (TraceMissedSurfaceError,
                                        TraceRayBlockedError)
from optibench.oprops.medium import decode_medium, index_at
from optibench.parax.gaussian import thick_lens_abcd
from optibench.elem.component import (OpticalComponent, PlanarComponent,
                                      closest_hit)
from optibench.elem.profiles import (Spherical, Cylindrical, Cylinder,
                                     try_intersect, facing_normal)

logger = logging.getLogger(__name__)


def curvature_of(r):
    """ 1/r, with 0 for a radius that is kinda big """
    return 0. if is_kinda_big(r) else 1.0/r


class IdealLens(PlanarComponent):
    """ Aberration free thin lens in the w=0 plane.

    A ray at height h is deflected toward the axis by
    :math:`v_{out} = v_{in} - (h/f)\\hat{r}`, and its optical path length
    changes by :math:`-h^2/2f`.
    """
    label_format = 'L{}'

    def __init__(self, focal_length=50., aperture_radius=12.7, **kwargs):
        super().__init__(aperture_radius=aperture_radius, **kwargs)
        self.focal_length = focal_length
        self.half_thickness = 0.01

    def is_malformed(self):
        f = self.focal_length
        return (super().is_malformed() or not np.isfinite(f) or f == 0.)

    def interact_base(self, ray, hit):
        d, n = self.local_incidence(ray, hit)
        pt = hit.local_point
        h = transverse_radius(pt)
        if h < 1e-10:
            d_out = d
        else:
            r_hat = np.array([pt[0]/h, pt[1]/h, 0.])
            d_out = normalize(d - (h/self.focal_length)*r_hat)
        delta_opl = -(h*h)/(2*self.focal_length)
        return [self.spawn(ray, hit, direction=self.to_world_dir(d_out),
                           delta_opl=delta_opl)]

    def get_abcd(self):
        return 1., 0., -1.0/self.focal_length, 1.


class SphericalLens(OpticalComponent):
    """ Thick singlet with spherical front and back faces.

    Attributes:
        r1: front radius of curvature
        r2: back radius of curvature
        thickness: center thickness
        aperture_radius: clear aperture radius
        material: refractive index or glass name, see
            :func:`~.medium.decode_medium`
    """
    label_format = 'L{}'
    profile_type = Spherical

    def __init__(self, r1=50., r2=-50., thickness=5., aperture_radius=12.7,
                 material=1.5168, **kwargs):
        super().__init__(**kwargs)
        self.r1 = r1
        self.r2 = r2
        self.thickness = thickness
        self.aperture_radius = aperture_radius
        self.material = material

    @property
    def material(self):
        return self._material

    @material.setter
    def material(self, mat):
        if isinstance(mat, str):
            self.medium = decode_medium(*mat.split(','))
        else:
            self.medium = decode_medium(mat)
        self._material = mat

    def listobj_str(self):
        o_str = super().listobj_str()
        o_str += (f"r1={self.r1}  r2={self.r2}  t={self.thickness}  "
                  f"ra={self.aperture_radius}  mat={self.medium.name()}\n")
        return o_str

    def medium_index(self, wavelength):
        return index_at(self.medium, wavelength)

    def front_profile(self):
        return self.profile_type(c=curvature_of(self.r1))

    def back_profile(self):
        return self.profile_type(c=curvature_of(self.r2))

    def vertices(self):
        half_t = self.thickness/2
        return -half_t, half_t

    def edge_height(self):
        """ transverse height at which the rim meets the faces """
        return self.aperture_radius

    def edge_z(self):
        """ w coordinates of the front and back faces at the rim """
        h = self.edge_height()
        z1, z2 = self.vertices()
        return (z1 + self.front_profile().sag(0., h),
                z2 + self.back_profile().sag(0., h))

    def edge_thickness(self):
        z1, z2 = self.edge_z()
        return z2 - z1

    def focal_length(self, wavelength=mc.DEFAULT_WAVELENGTH):
        abcd = self.get_abcd(wavelength)
        return np.inf if abcd[2] == 0. else -1/abcd[2]

    def is_malformed(self):
        ra = self.aperture_radius
        t = self.thickness
        if not (np.isfinite(ra) and ra > 0. and np.isfinite(t) and t > 0.):
            return True
        for r in (self.r1, self.r2):
            if np.isnan(r) or r == 0.:
                return True
            if not is_kinda_big(r) and self.edge_height() >= abs(r):
                return True
        return self.edge_thickness() < 0.

    def bounds(self):
        ra = self.aperture_radius
        if self.is_malformed():
            return np.array([-ra, -ra, -0.5]), np.array([ra, ra, 0.5])
        z1, z2 = self.vertices()
        ze1, ze2 = self.edge_z()
        z_min = min(z1, ze1) - 0.1
        z_max = max(z2, ze2) + 0.1
        return np.array([-ra, -ra, z_min]), np.array([ra, ra, z_max])

    def in_aperture(self, pt):
        return pt[0]*pt[0] + pt[1]*pt[1] <= \
            self.aperture_radius*self.aperture_radius

    def rim_hit(self, p, d):
        ze1, ze2 = self.edge_z()
        rim = try_intersect(Cylinder(self.aperture_radius, ze1, ze2),
                            p, d, self.eps)
        if rim is None:
            return None
        s, pt, n = rim
        return HitRecord(s, pt, n, is_blocked=True, face='rim')

    def face_hits(self, p, d):
        """ hits on the front and back faces, inside the clear aperture """
        z1, z2 = self.vertices()
        hits = []
        for face, profile, z_vertex in (('front', self.front_profile(), z1),
                                        ('back', self.back_profile(), z2)):
            face_hit = try_intersect(profile, p, d, self.eps,
                                     z_vertex=z_vertex)
            if face_hit is not None:
                s, pt, n = face_hit
                if self.in_aperture(pt):
                    hits.append(HitRecord(s, pt, n, face=face))
        return hits

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        hits = self.face_hits(p, d)
        hits.append(self.rim_hit(p, d))
        return closest_hit(hits)

    def interact_base(self, ray, hit):
        d, n1 = self.local_incidence(ray, hit)
        n_glass = self.medium_index(ray.wavelength)

        d_in = normalize(bend(d, n1, 1.0, n_glass))

        # internal leg to the opposite face
        p1 = hit.local_point
        exit_face = 'back' if hit.face == 'front' else 'front'
        candidates = [h for h in self.face_hits(p1, d_in)
                      if h.face == exit_face]
        candidates.append(self.rim_hit(p1, d_in))
        exit_hit = closest_hit(candidates)
        if exit_hit is None:
            raise TraceMissedSurfaceError(self)
        if exit_hit.is_blocked:
            raise TraceRayBlockedError(self, exit_hit.point)

        n2 = facing_normal(normalize(exit_hit.normal), d_in)
        d_out = normalize(bend(d_in, n2, n_glass, 1.0))

        t_int = exit_hit.t
        logger.debug("%s: internal leg %.4f in n=%.4f", self.label, t_int,
                     n_glass)
        return [ray.child(origin=self.to_world_point(exit_hit.point),
                          direction=self.to_world_dir(d_out),
                          opl=ray.opl + hit.t + t_int*n_glass,
                          entry_point=hit.point)]

    def get_abcd(self, wavelength=mc.DEFAULT_WAVELENGTH):
        n = self.medium_index(wavelength)
        return thick_lens_abcd(self.r1, self.r2, self.thickness, n)

    def get_aperture_radius(self):
        return self.aperture_radius


class CylindricalLens(SphericalLens):
    """ Thick lens with cylindrical faces, curved in the v-w plane.

    The clear aperture is the rectangle \\|u| <= width/2,
    \\|v| <= aperture_radius. The lens has power only in the v-w plane;
    in the u-w plane it acts as a plate of thickness t.
    """
    label_format = 'CL{}'
    profile_type = Cylindrical

    def __init__(self, r1=50., r2=1e10, thickness=5., aperture_radius=12.7,
                 width=25.4, material=1.5168, **kwargs):
        self.width = width
        super().__init__(r1=r1, r2=r2, thickness=thickness,
                         aperture_radius=aperture_radius, material=material,
                         **kwargs)

    def is_malformed(self):
        return (super().is_malformed() or not np.isfinite(self.width) or
                not self.width > 0.)

    def bounds(self):
        box_min, box_max = super().bounds()
        hw = self.width/2
        box_min[0], box_max[0] = -hw, hw
        return box_min, box_max

    def in_aperture(self, pt):
        return (abs(pt[0]) <= self.width/2 and
                abs(pt[1]) <= self.aperture_radius)

    def rim_hit(self, p, d):
        """ nearest hit on the four flat side walls of the lens """
        ze1, ze2 = self.edge_z()
        z_lo, z_hi = min(ze1, ze2), max(ze1, ze2)
        half_sizes = (self.width/2, self.aperture_radius)
        hits = []
        for axis in (0, 1):
            other = 1 - axis
            if abs(d[axis]) < 1e-12:
                continue
            for side in (-1., 1.):
                s = (side*half_sizes[axis] - p[axis])/d[axis]
                if not s > self.eps:
                    continue
                pt = p + s*d
                if (abs(pt[other]) <= half_sizes[other] and
                        z_lo <= pt[2] <= z_hi):
                    n = np.zeros(3)
                    n[axis] = side
                    hits.append(HitRecord(s, pt, n, is_blocked=True,
                                          face='rim'))
        return closest_hit(hits)

    def get_abcd_xy(self, wavelength=mc.DEFAULT_WAVELENGTH):
        n = self.medium_index(wavelength)
        abcd_x = (1., self.thickness/n, 0., 1.)
        abcd_y = thick_lens_abcd(self.r1, self.r2, self.thickness, n)
        return abcd_x, abcd_y
