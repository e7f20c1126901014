#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Ray and intersection data shared by the solvers

    Coordinates are in mm in the world frame unless noted. Wavelengths are
    carried in meters; spectral functions take nm.

.. Created on Mon Oct 12 10:41:52 2026

.. codeauthor: Michael J. Hayford
"""
import enum

import attr
import numpy as np


class Coherence(enum.Enum):
    COHERENT = 0
    INCOHERENT = 1


def as_vector(v):
    return np.array(v, dtype=float)


def as_jones(j):
    return np.array(j, dtype=complex)


def opt_vector(v):
    return None if v is None else np.array(v, dtype=float)


def x_polarized():
    return np.array([1.+0.j, 0.+0.j])


@attr.s(eq=False)
class Ray:
    """ A ray snapshot at the start of one straight segment.

    Attributes:
        origin: start point of the segment
        direction: unit direction vector
        wavelength: wavelength in meters
        intensity: power fraction carried by the ray, >= 0
        polarization: Jones vector, the magnitude encodes relative amplitude
        opl: accumulated optical path length at `origin`, mm
        footprint_radius: nominal radius of the ray's footprint, mm
        coherence: :class:`Coherence` of the originating source
        source_id: id of the emitting component
        is_main_ray: True for the central ray of a source
        exit_surface_id: id of the component that produced this ray
        interaction_distance: length of this segment, if it ends on a hit
        hit_component: id of the component that ends this segment
        termination_point: point where a backward path ended
        entry_point: where a thick component was entered, for rays leaving it
    """
    origin = attr.ib(converter=as_vector)
    direction = attr.ib(converter=as_vector)
    wavelength = attr.ib(default=532.0e-9)
    intensity = attr.ib(default=1.0)
    polarization = attr.ib(factory=x_polarized, converter=as_jones)
    opl = attr.ib(default=0.0)
    footprint_radius = attr.ib(default=0.0)
    coherence = attr.ib(default=Coherence.COHERENT)
    source_id = attr.ib(default=None)
    is_main_ray = attr.ib(default=False)
    exit_surface_id = attr.ib(default=None)
    interaction_distance = attr.ib(default=None)
    hit_component = attr.ib(default=None)
    termination_point = attr.ib(default=None, converter=opt_vector)
    entry_point = attr.ib(default=None, converter=opt_vector)

    @property
    def wavelength_nm(self):
        return self.wavelength*1.0e9

    def point_at(self, t):
        return self.origin + t*self.direction

    def child(self, **kwargs):
        """ Return a new ray derived from this one.

        Source data is inherited. Per-segment bookkeeping is cleared, then
        `kwargs` override any attribute.
        """
        kwargs.setdefault('interaction_distance', None)
        kwargs.setdefault('hit_component', None)
        kwargs.setdefault('termination_point', None)
        kwargs.setdefault('entry_point', None)
        return attr.evolve(self, **kwargs)

    def listobj_str(self):
        o_str = f"ray: wvl={self.wavelength_nm:.1f}nm, I={self.intensity:.6g}\n"
        o_str += f"origin={self.origin},  dir={self.direction}\n"
        o_str += f"pol={self.polarization},  opl={self.opl:.6g}\n"
        return o_str


@attr.s(eq=False)
class HitRecord:
    """ Intersection of a ray with a component.

    Attributes:
        t: positive distance along the ray
        point: hit location. Local from `intersect`, world afterward
        normal: unit normal facing the incoming ray
        local_point: hit point in the component's local frame
        local_normal: normal in the component's local frame
        local_direction: ray direction in the component's local frame
        is_blocked: True if the hit is on a housing, outside the clear
            aperture; the ray is absorbed
        surface: None for the component itself, else the index of the
            struck child of a composite component
        face: optional label of the struck face
    """
    t = attr.ib()
    point = attr.ib(converter=as_vector)
    normal = attr.ib(converter=as_vector)
    local_point = attr.ib(default=None, converter=opt_vector)
    local_normal = attr.ib(default=None, converter=opt_vector)
    local_direction = attr.ib(default=None, converter=opt_vector)
    is_blocked = attr.ib(default=False)
    surface = attr.ib(default=None)
    face = attr.ib(default=None)
