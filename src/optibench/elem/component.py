#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Base class for the optical components placed on the bench

    An :class:`OpticalComponent` owns a pose (position and unit quaternion)
    and answers two questions about a ray: where does it strike the
    component (:meth:`~.OpticalComponent.chk_intersection`), and what rays
    leave the interaction (:meth:`~.OpticalComponent.interact`).

    Subclasses implement the geometry in a local frame, with the w (z) axis
    along the optical axis and u, v (x, y) transverse, by overriding
    :meth:`~.OpticalComponent.intersect` and
    :meth:`~.OpticalComponent.interact_base`. Both may raise
    :exc:`~optibench.raytr.traceerror.TraceError`; the public wrappers turn
    those into a miss or an absorbed ray so that only the affected ray
    branch ends.

.. Created on Tue Oct 13 10:47:03 2026

.. codeauthor: Michael J. Hayford
"""
import logging

import numpy as np
import transforms3d as t3d

from optibench.util.misc_math import (normalize, is_finite_vec, intersect_aabb,
                                      euler2quat, quat2mat)
from optibench.raytr.rays import HitRecord
from optibench.raytr.traceerror import TraceError
from optibench.elem.profiles import facing_normal

logger = logging.getLogger(__name__)

identity_abcd = (1., 0., 0., 1.)


class OpticalComponent:
    """ Base class for all optical components.

    Attributes:
        id: stable integer id assigned when added to a
            :class:`~.scene.Scene`, None otherwise
        label: display name
        parent: the composite component this one is part of, or None. The
            pose is then relative to the parent's local frame.
        version: mutation counter, bumped by every pose or property change
    """
    label_format = 'C{}'
    serial_number = 0
    # minimum distance accepted by intersect implementations
    eps = 1.0e-6

    def __init__(self, label=None, position=(0., 0., 0.), rotation=None,
                 parent=None):
        if label is None:
            OpticalComponent.serial_number += 1
            self.label = self.label_format.format(
                OpticalComponent.serial_number)
        else:
            self.label = label
        self.id = None
        self.parent = parent
        self.version = 0
        self._position = np.array(position, dtype=float)
        self._rotation = (np.array([1., 0., 0., 0.]) if rotation is None
                          else normalize(np.array(rotation, dtype=float)))
        self._tfrm_key = None
        self._tfrm = None

    def __str__(self):
        return f"{type(self).__name__}: {self.label}"

    def __repr__(self):
        return (f"{type(self).__name__}(label={self.label!r}, "
                f"position={self.position.tolist()})")

    def listobj_str(self):
        o_str = f"{type(self).__name__}: {self.label}  id={self.id}\n"
        o_str += f"position={self.position},  rotation={self.rotation}\n"
        o_str += f"version={self.version}\n"
        return o_str

    # --- pose
    @property
    def position(self):
        return self._position

    @position.setter
    def position(self, pos):
        self._position = np.array(pos, dtype=float)
        self.version += 1

    @property
    def rotation(self):
        """ unit quaternion (w, x, y, z) """
        return self._rotation

    @rotation.setter
    def rotation(self, q):
        self._rotation = normalize(np.array(q, dtype=float))
        self.version += 1

    def set_position(self, x, y, z):
        self.position = (x, y, z)

    def set_rotation(self, rx, ry, rz):
        """ set the rotation from XYZ Euler angles, in radians """
        self.rotation = euler2quat(rx, ry, rz)

    def update(self):
        """ mark the component as changed after direct attribute edits """
        self.version += 1

    # --- transforms
    def local_tfrm(self):
        """ (rot_mat, translation) from this local frame to the parent's """
        return quat2mat(self._rotation), self._position

    def world_tfrm(self):
        """ (rot_mat, translation) from this local frame to world

        The transform is cached until the pose of this component or any
        parent changes.
        """
        key = (tuple(self._position), tuple(self._rotation),
               None if self.parent is None else self.parent._world_key())
        if key != self._tfrm_key:
            r, t = self.local_tfrm()
            if self.parent is not None:
                r_p, t_p = self.parent.world_tfrm()
                r, t = r_p.dot(r), r_p.dot(t) + t_p
            self._tfrm = r, t
            self._tfrm_key = key
        return self._tfrm

    def _world_key(self):
        return (tuple(self._position), tuple(self._rotation),
                None if self.parent is None else self.parent._world_key())

    @property
    def local_to_world(self):
        """ 4x4 affine matrix from the local frame to world """
        r, t = self.world_tfrm()
        return t3d.affines.compose(t, r, np.ones(3))

    @property
    def world_to_local(self):
        """ 4x4 affine matrix from world to the local frame """
        r, t = self.world_tfrm()
        return t3d.affines.compose(-r.T.dot(t), r.T, np.ones(3))

    def to_local_point(self, p):
        r, t = self.world_tfrm()
        return r.T.dot(np.asarray(p) - t)

    def to_local_dir(self, d):
        r, t = self.world_tfrm()
        return r.T.dot(d)

    def to_world_point(self, p):
        r, t = self.world_tfrm()
        return r.dot(p) + t

    def to_world_dir(self, d):
        r, t = self.world_tfrm()
        return r.dot(d)

    def parent_to_local_point(self, p):
        r, t = self.local_tfrm()
        return r.T.dot(np.asarray(p) - t)

    def parent_to_local_dir(self, d):
        r, t = self.local_tfrm()
        return r.T.dot(d)

    def local_to_parent_point(self, p):
        r, t = self.local_tfrm()
        return r.dot(p) + t

    def local_to_parent_dir(self, d):
        r, t = self.local_tfrm()
        return r.dot(d)

    def axis(self):
        """ world direction of the local +w (optical) axis """
        return self.to_world_dir(np.array([0., 0., 1.]))

    # --- geometry
    def bounds(self):
        """ local axis-aligned bounding box as (box_min, box_max) """
        return np.array([-10., -10., -10.]), np.array([10., 10., 10.])

    def is_malformed(self):
        """ True if the parameters can't describe a physical component """
        return False

    def intersect(self, ray_local):
        """ Return the nearest forward hit of a local frame ray, or None.

        The returned :class:`~.rays.HitRecord` is in local coordinates and
        its normal faces the incoming ray.

        Raises:
            :exc:`~optibench.raytr.traceerror.TraceError`: treated as a miss
        """
        return None

    def absorbing_plate(self, ray_local):
        """ blocked hit with the w=0 plane inside the transverse bounds """
        p, d = ray_local.origin, ray_local.direction
        if d[2] == 0.:
            return None
        s = -p[2]/d[2]
        if not s > self.eps:
            return None
        pt = p + s*d
        box_min, box_max = self.bounds()
        if not (box_min[0] <= pt[0] <= box_max[0] and
                box_min[1] <= pt[1] <= box_max[1]):
            return None
        n = np.array([0., 0., -1. if d[2] > 0. else 1.])
        return HitRecord(s, pt, n, is_blocked=True, face='plate')

    def chk_intersection(self, ray):
        """ Intersect a world space ray with this component.

        Returns:
            a world space :class:`~.rays.HitRecord`, or None if the
            component is missed
        """
        p_loc = self.to_local_point(ray.origin)
        d_loc = normalize(self.to_local_dir(ray.direction))

        box_min, box_max = self.bounds()
        is_hit, t_min, t_max = intersect_aabb(p_loc, d_loc, box_min, box_max)
        if not is_hit:
            return None

        ray_local = ray.child(origin=p_loc, direction=d_loc)
        try:
            if self.is_malformed():
                hit = self.absorbing_plate(ray_local)
            else:
                hit = self.intersect(ray_local)
        except TraceError as err:
            logger.debug("%s: intersection failed, %s", self.label,
                         type(err).__name__)
            return None

        if hit is None:
            return None

        pt_world = self.to_world_point(hit.point)
        n_loc = facing_normal(normalize(hit.normal), d_loc)
        n_world = normalize(self.to_world_dir(n_loc))
        t_world = float(np.linalg.norm(pt_world - ray.origin))
        if not np.isfinite(t_world):
            return None
        return HitRecord(t_world, pt_world, n_world,
                         local_point=hit.point, local_normal=n_loc,
                         local_direction=d_loc, is_blocked=hit.is_blocked,
                         surface=hit.surface, face=hit.face)

    # --- physics
    def interact_base(self, ray, hit):
        """ Return the list of rays leaving an interaction.

        Subclasses override this. The default is a perfect absorber.

        Raises:
            :exc:`~optibench.raytr.traceerror.TraceError`: the ray is
            absorbed
        """
        return []

    def interact(self, ray, hit):
        """ Compute the rays leaving the interaction of ray at hit.

        Blocked hits and trace errors absorb the ray. Children with non
        finite values are dropped, the rest get unit directions and are
        tagged with this component's id.
        """
        if hit.is_blocked:
            return []
        try:
            children = self.interact_base(ray, hit)
        except TraceError as err:
            logger.debug("%s: ray terminated, %s", self.label,
                         type(err).__name__)
            return []

        rays = []
        for child in children:
            if not (is_finite_vec(child.origin) and
                    is_finite_vec(child.direction) and
                    np.isfinite(child.intensity) and
                    is_finite_vec(child.polarization)):
                logger.debug("%s: dropped non-finite ray", self.label)
                continue
            d_len = np.linalg.norm(child.direction)
            if d_len == 0.:
                continue
            child.direction = child.direction/d_len
            child.exit_surface_id = self.id
            rays.append(child)
        return rays

    def spawn(self, ray, hit, direction=None, delta_opl=0., **kwargs):
        """ Return a child of ray leaving the hit point.

        The optical path length grows by the incoming segment length plus
        delta_opl.
        """
        if direction is None:
            direction = ray.direction
        return ray.child(origin=hit.point, direction=direction,
                         opl=ray.opl + hit.t + delta_opl, **kwargs)

    def local_incidence(self, ray, hit):
        """ local ray direction and unit normal at hit, facing the ray """
        d = (hit.local_direction if hit.local_direction is not None
             else normalize(self.to_local_dir(ray.direction)))
        n = (hit.local_normal if hit.local_normal is not None
             else facing_normal(normalize(self.to_local_dir(hit.normal)), d))
        return d, n

    # --- paraxial
    def get_abcd(self):
        """ paraxial ray transfer matrix as (A, B, C, D) """
        return identity_abcd

    def get_abcd_xy(self):
        """ ray transfer matrices for the u-w and v-w planes """
        abcd = self.get_abcd()
        return abcd, abcd

    def get_aperture_radius(self):
        """ clear aperture radius in mm; 0 means unclipped """
        return 0.0

    def medium_index(self, wavelength):
        """ refractive index inside the component, None if not a solid """
        return None


def closest_hit(hits):
    """ the hit with the smallest t, or None """
    hits = [h for h in hits if h is not None]
    return min(hits, key=lambda h: h.t) if len(hits) > 0 else None


class PlanarComponent(OpticalComponent):
    """ Component whose optical surface is the w=0 plane.

    The clear aperture is a disk of radius `aperture_radius`; subclasses
    with other shapes override :meth:`in_aperture` and :meth:`half_extent`.
    A ray landing outside the aperture misses the component.
    """
    half_thickness = 0.5

    def __init__(self, aperture_radius=12.7, **kwargs):
        super().__init__(**kwargs)
        self.aperture_radius = aperture_radius

    def half_extent(self):
        """ transverse (u, v) half sizes of the bounding box """
        return self.aperture_radius, self.aperture_radius

    def bounds(self):
        hu, hv = self.half_extent()
        ht = self.half_thickness
        return np.array([-hu, -hv, -ht]), np.array([hu, hv, ht])

    def in_aperture(self, pt):
        return pt[0]*pt[0] + pt[1]*pt[1] <= \
            self.aperture_radius*self.aperture_radius

    def is_malformed(self):
        hu, hv = self.half_extent()
        return not (np.isfinite(hu) and np.isfinite(hv))

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        if abs(d[2]) < 1e-12:
            return None
        s = -p[2]/d[2]
        if not s > self.eps:
            return None
        pt = p + s*d
        if not self.in_aperture(pt):
            return None
        n = np.array([0., 0., -1. if d[2] > 0. else 1.])
        return HitRecord(s, pt, n)

    def get_aperture_radius(self):
        return self.aperture_radius
