#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" miscellaneous functions for working with numpy vectors and floats

.. Created on Mon Oct 12 09:31:40 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np
from numpy.linalg import norm
from math import sqrt
import transforms3d as t3d


def is_kinda_big(x: float, kinda_big: float = 1e8) -> bool:
    """ Test for IEEE inf as well as any \\|x| > kinda_big  """
    if np.isinf(x):
        return True
    elif np.abs(x) > kinda_big:
        return True
    else:
        return False


def isanumber(a):
    """ returns true if input a can be converted to floating point number """
    try:
        float(a)
        bool_a = True
    except ValueError:
        bool_a = False
    except TypeError:
        bool_a = False

    return bool_a


def normalize(v):
    """ return normalized version of input vector v """
    length = norm(v)
    if length == 0.0:
        return v
    else:
        return v/length


def is_finite_vec(v) -> bool:
    """ True if every component of v is finite """
    return bool(np.all(np.isfinite(v)))


def transverse_radius(p) -> float:
    """ radial distance of p from the local w (optical) axis """
    return sqrt(p[0]*p[0] + p[1]*p[1])


def solve_quadratic(a: float, b: float, c: float,
                    eps: float = 1e-12) -> list[float]:
    """ Solve a*t**2 + b*t + c = 0 for real roots.

    Args:
        a, b, c: the polynomial coefficients
        eps: magnitude of `a` treated as zero

    Returns:
        the real roots in ascending order, an empty list if none exist.
        When `a` is negligible the linear root is returned, if any.
    """
    if abs(a) < eps:
        if abs(b) < eps:
            return []
        return [-c/b]
    disc = b*b - 4.0*a*c
    if disc < 0.0:
        return []
    if disc == 0.0:
        return [-b/(2.0*a)]
    # numerically stable form, avoids cancellation between -b and sqrt(disc)
    q = -0.5*(b + np.copysign(sqrt(disc), b))
    t0 = q/a
    t1 = c/q if q != 0.0 else -t0
    return sorted([t0, t1])


def intersect_aabb(origin, direction, box_min, box_max):
    """ Slab test of a ray against an axis aligned box.

    Zero direction components are handled without division: the ray is
    inside that slab for all t or for none.

    Returns:
        (**hit**, **t_min**, **t_max**), hit is True if the box is struck at
        positive distance along the ray
    """
    t_min = -np.inf
    t_max = np.inf
    for i in range(3):
        if direction[i] == 0.0:
            if origin[i] < box_min[i] or origin[i] > box_max[i]:
                return False, 0.0, 0.0
            continue
        inv_d = 1.0/direction[i]
        t0 = (box_min[i] - origin[i])*inv_d
        t1 = (box_max[i] - origin[i])*inv_d
        if t0 > t1:
            t0, t1 = t1, t0
        t_min = max(t_min, t0)
        t_max = min(t_max, t1)
        if t_min > t_max:
            return False, 0.0, 0.0
    return t_max > 0.0, t_min, t_max


def perpendicular_frame(d, up=(0., 1., 0.), alt_up=(1., 0., 0.),
                        threshold=0.99):
    """ Return unit vectors (right, true_up) transverse to direction d.

    `up` is replaced by `alt_up` when it is nearly parallel to d.
    """
    up = np.array(up, dtype=float)
    if abs(np.dot(d, up)) > threshold:
        up = np.array(alt_up, dtype=float)
    right = normalize(np.cross(d, up))
    true_up = normalize(np.cross(right, d))
    return right, true_up


# --- rotations. Quaternions are (w, x, y, z) as in transforms3d
def euler2quat(rx: float, ry: float, rz: float):
    """ unit quaternion from XYZ Euler angles (radians), rotating frame """
    return t3d.euler.euler2quat(rx, ry, rz, axes='rxyz')


def quat2euler(q):
    """ XYZ Euler angles (radians), rotating frame, from a quaternion """
    return np.array(t3d.euler.quat2euler(q, axes='rxyz'))


def quat2mat(q):
    return t3d.quaternions.quat2mat(q)


def rotate_about_axis(v, axis, angle: float):
    """ rotate vector v by angle (radians) about axis """
    rot_mat = t3d.axangles.axangle2mat(axis, angle)
    return rot_mat.dot(v)
