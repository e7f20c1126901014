#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Module for the surface shapes used by optical components

    The profiles module captures the geometric shape aspect of a component's
    faces. The :class:`~.SurfaceProfile` base class specifies an api that
    subclasses implement to provide different shapes. All shapes are defined
    in a local frame with the w (z) axis along the component's optical axis.

    Each profile's `intersect` returns the distance along the ray, *s*, and
    the intersection point, or raises
    :exc:`~optibench.raytr.traceerror.TraceMissedSurfaceError`.

.. Created on Tue Oct 13 09:14:22 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np
from math import sqrt, copysign

from optibench.util.misc_math import normalize, solve_quadratic
from optibench.raytr.traceerror import TraceMissedSurfaceError


class SurfaceProfile:
    """Base class for surface profiles. """

    def __repr__(self):
        return "{!s}()".format(type(self).__name__)

    def f(self, p):
        """Returns the value of the profile surface function at point
        :math:`\\boldsymbol{p}`.

        :math:`f({\\boldsymbol{p}}) = 0`
        """
        pass

    def df(self, p):
        """Returns the gradient of the profile surface function at point
        :math:`\\boldsymbol{p}`.
        """
        pass

    def normal(self, p):
        """Returns the unit normal of the profile at point
        :math:`\\boldsymbol{p}`.
        """
        return normalize(self.df(p))

    def intersect(self, p, d, eps, z_dir):
        ''' Intersect a profile, starting from an arbitrary point.

        Args:
            p:  start point of the ray in the profile's coordinate system
            d:  direction cosine of the ray in the profile's coordinate system
            eps: hits closer than this are rejected
            z_dir: +1 if propagation positive direction, -1 if otherwise

        Returns:
            tuple: distance to intersection point *s1*, intersection point *p*

        Raises:
            :exc:`~optibench.raytr.traceerror.TraceMissedSurfaceError`
        '''
        pass


class Spherical(SurfaceProfile):
    """ Spherical surface profile parameterized by curvature.

    The sag :math:`z` is given by:

    :math:`z = R - \\sqrt{R^2 - x^2 - y^2}`

    where :math:`R = 1/c`. The vertex is at the origin; a positive
    curvature puts the center of curvature at +z.
    """

    def __init__(self, c=0.0, r=None):
        """ initialize a Spherical profile.

        Args:
            c: curvature
            r: radius of curvature. If zero, taken as planar. If r is
                specified, it overrides any input for c (curvature).
        """
        if r is not None:
            self.r = r
        else:
            self.cv = c

    @property
    def r(self):
        if self.cv != 0.0:
            return 1.0/self.cv
        else:
            return 0.0

    @r.setter
    def r(self, radius):
        if radius != 0.0:
            self.cv = 1.0/radius
        else:
            self.cv = 0.0

    def __str__(self):
        return type(self).__name__ + " " + str(self.cv)

    def __repr__(self):
        return "{!s}(c={})".format(type(self).__name__, self.cv)

    def listobj_str(self):
        o_str = f"profile: {type(self).__name__}\n"
        o_str += f"c={self.cv},   r={self.r}\n"
        return o_str

    def intersect(self, p, d, eps, z_dir):
        ''' Intersection with a sphere, starting from an arbitrary point. '''
        # Substitute expressions equivalent to Welford's 4.8 and 4.9
        # For quadratic equation ax**2 + bx + c = 0:
        #  ax2 = 2a
        #  cx2 = 2c
        ax2 = self.cv
        cx2 = self.cv * p.dot(p) - 2*p[2]
        b = self.cv * d.dot(p) - d[2]
        try:
            # Use z_dir to pick correct root
            s = cx2/(z_dir*sqrt(b*b - ax2*cx2) - b)
        except (ValueError, ZeroDivisionError):
            raise TraceMissedSurfaceError(self)

        if not s > eps:
            raise TraceMissedSurfaceError(self)
        p1 = p + s*d
        return s, p1

    def f(self, p):
        return p[2] - 0.5*self.cv*(np.dot(p, p))

    def df(self, p):
        return np.array(
                [-self.cv*p[0], -self.cv*p[1], 1.0-self.cv*p[2]])

    def sag(self, x, y):
        if self.cv != 0.0:
            r = 1/self.cv
            adj_sqr = r*r - x*x - y*y
            if adj_sqr < 0.:
                raise TraceMissedSurfaceError(self, (x, y))
            adj = sqrt(adj_sqr)
            return r*(1 - abs(adj/r))
        else:
            return 0.


class Cylindrical(SurfaceProfile):
    """ Cylindrical profile with curvature in the y-z plane.

    The surface is straight along x.
    """

    def __init__(self, c=0.0, r=None):
        if r is not None:
            self.cv = 1.0/r if r != 0.0 else 0.0
        else:
            self.cv = c

    def __repr__(self):
        return "{!s}(c={})".format(type(self).__name__, self.cv)

    def intersect(self, p, d, eps, z_dir):
        ax2 = self.cv*(1. - d[0]*d[0])
        cx2 = self.cv*(p[1]*p[1] + p[2]*p[2]) - 2.0*p[2]
        b = self.cv*(d[1]*p[1] + d[2]*p[2]) - d[2]
        try:
            s = cx2/(z_dir*sqrt(b*b - ax2*cx2) - b)
        except (ValueError, ZeroDivisionError):
            raise TraceMissedSurfaceError(self)

        if not s > eps:
            raise TraceMissedSurfaceError(self)
        p1 = p + s*d
        return s, p1

    def f(self, p):
        return p[2] - 0.5*self.cv*(p[1]*p[1] + p[2]*p[2])

    def df(self, p):
        return np.array([0., -self.cv*p[1], 1.0-self.cv*p[2]])

    def sag(self, x, y):
        if self.cv != 0.0:
            r = 1/self.cv
            adj_sqr = r*r - y*y
            if adj_sqr < 0.:
                raise TraceMissedSurfaceError(self, (x, y))
            return r*(1 - abs(sqrt(adj_sqr)/r))
        else:
            return 0.


class Cylinder(SurfaceProfile):
    """ Circular barrel wall of radius r about the z axis, z0 <= z <= z1. """

    def __init__(self, r, z0, z1):
        self.r = r
        self.z0 = min(z0, z1)
        self.z1 = max(z0, z1)

    def __repr__(self):
        return (f"{type(self).__name__}(r={self.r}, z0={self.z0}, "
                f"z1={self.z1})")

    def intersect(self, p, d, eps, z_dir=None):
        a = d[0]*d[0] + d[1]*d[1]
        b = 2.0*(p[0]*d[0] + p[1]*d[1])
        c = p[0]*p[0] + p[1]*p[1] - self.r*self.r
        for s in solve_quadratic(a, b, c):
            if s > eps:
                p1 = p + s*d
                if self.z0 <= p1[2] <= self.z1:
                    return s, p1
        raise TraceMissedSurfaceError(self)

    def f(self, p):
        return p[0]*p[0] + p[1]*p[1] - self.r*self.r

    def df(self, p):
        return np.array([2.*p[0], 2.*p[1], 0.])


class Cone(SurfaceProfile):
    """ Conical frustum about the z axis.

    The radius varies linearly from r0 at z0 to r1 at z1.
    """

    def __init__(self, z0, r0, z1, r1):
        if z0 == z1:
            raise ValueError("cone frustum needs distinct end planes")
        self.z0 = z0
        self.r0 = r0
        self.z1 = z1
        self.r1 = r1

    def __repr__(self):
        return (f"{type(self).__name__}(z0={self.z0}, r0={self.r0}, "
                f"z1={self.z1}, r1={self.r1})")

    @property
    def slope(self):
        return (self.r1 - self.r0)/(self.z1 - self.z0)

    def radius_at(self, z):
        return self.r0 + self.slope*(z - self.z0)

    def intersect(self, p, d, eps, z_dir=None):
        k = self.slope
        m0 = self.r0 + k*(p[2] - self.z0)
        a = d[0]*d[0] + d[1]*d[1] - k*k*d[2]*d[2]
        b = 2.0*(p[0]*d[0] + p[1]*d[1] - k*d[2]*m0)
        c = p[0]*p[0] + p[1]*p[1] - m0*m0
        z_min = min(self.z0, self.z1)
        z_max = max(self.z0, self.z1)
        for s in solve_quadratic(a, b, c):
            if s > eps:
                p1 = p + s*d
                # reject the mirror image nappe of the cone
                if z_min <= p1[2] <= z_max and self.radius_at(p1[2]) >= 0.:
                    return s, p1
        raise TraceMissedSurfaceError(self)

    def f(self, p):
        m = self.radius_at(p[2])
        return p[0]*p[0] + p[1]*p[1] - m*m

    def df(self, p):
        m = self.radius_at(p[2])
        return np.array([2.*p[0], 2.*p[1], -2.*self.slope*m])


class Annulus(SurfaceProfile):
    """ Flat ring r_in < r <= r_out in the plane z = z0.

    An r_in of 0 makes a full disk.
    """

    def __init__(self, z0, r_in, r_out):
        self.z0 = z0
        self.r_in = r_in
        self.r_out = r_out

    def __repr__(self):
        return (f"{type(self).__name__}(z0={self.z0}, r_in={self.r_in}, "
                f"r_out={self.r_out})")

    def intersect(self, p, d, eps, z_dir=None):
        if d[2] == 0.:
            raise TraceMissedSurfaceError(self)
        s = (self.z0 - p[2])/d[2]
        if not s > eps:
            raise TraceMissedSurfaceError(self)
        p1 = p + s*d
        r_sqr = p1[0]*p1[0] + p1[1]*p1[1]
        if self.r_in*self.r_in < r_sqr <= self.r_out*self.r_out or \
           (self.r_in == 0. and r_sqr == 0.):
            return s, p1
        raise TraceMissedSurfaceError(self)

    def f(self, p):
        return p[2] - self.z0

    def df(self, p):
        return np.array([0., 0., 1.])


def intersect_plane(p, d, eps, z0=0.):
    """ distance along d from p to the plane z = z0

    Raises:
        :exc:`~optibench.raytr.traceerror.TraceMissedSurfaceError`
    """
    if d[2] == 0.:
        raise TraceMissedSurfaceError()
    s = (z0 - p[2])/d[2]
    if not s > eps:
        raise TraceMissedSurfaceError()
    return s, p + s*d


def try_intersect(profile, p, d, eps, z_vertex=0., z_dir=None):
    """ Intersect a profile whose origin is shifted to z = z_vertex.

    Returns:
        (s, p1, n) with p1 and the unit profile normal n in the caller's
        frame, or None if the profile is missed
    """
    offset = np.array([0., 0., z_vertex])
    if z_dir is None:
        z_dir = copysign(1.0, d[2])
    try:
        s, p1 = profile.intersect(p - offset, d, eps, z_dir)
    except TraceMissedSurfaceError:
        return None
    return s, p1 + offset, profile.normal(p1)


def facing_normal(normal, d):
    """ return normal, flipped if needed to oppose direction d """
    return normal if np.dot(normal, d) < 0. else -normal


def sphere_chord(center, radius, p, d):
    """ Entry and exit distances of a ray through a sphere.

    Args:
        center: sphere center
        radius: sphere radius
        p: ray start point
        d: unit ray direction

    Returns:
        (t_entry, t_exit) clipped to start at 0 when p is inside the
        sphere, or None if the sphere is missed or lies behind the ray
    """
    oc = p - center
    b = 2.0*np.dot(oc, d)
    c = np.dot(oc, oc) - radius*radius
    roots = solve_quadratic(np.dot(d, d), b, c)
    if len(roots) < 2 or roots[1] <= 0.:
        return None
    return max(roots[0], 0.), roots[1]
