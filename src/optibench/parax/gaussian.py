#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Gaussian beam q-parameter functions and beam segments

    The complex beam parameter, q, is related to the beam radius, w, and
    wavefront radius of curvature, R, by

    :math:`1/q = 1/R - i\\lambda/(\\pi w^2)`

    so Im(1/q) < 0 for a physical beam, and a waist has a purely imaginary
    q = i·z_R. Lengths and wavelengths in this module are in mm, except for
    the wavelength carried by a :class:`GaussianBeamSegment`, which is in
    meters like the rays it was derived from.

.. Created on Thu Oct 15 08:52:31 2026

.. codeauthor: Michael J. Hayford
"""
from collections import namedtuple
from math import pi, sqrt, isinf

import attr
import numpy as np

from optibench.util.misc_math import is_kinda_big
from optibench.raytr.rays import as_vector, as_jones, x_polarized

BeamSample = namedtuple('BeamSample', ['z', 'wx', 'wy'])
BeamSample.z.__doc__ = "distance from the segment start"
BeamSample.wx.__doc__ = "beam radius in the u-w plane"
BeamSample.wy.__doc__ = "beam radius in the v-w plane"

# beam radius reported for a q that doesn't describe a beam
invalid_beam_radius = 100.


def initial_q(waist, wavelength_mm):
    """ q at a beam waist: i·π·w0²/λ """
    return complex(0., pi*waist*waist/wavelength_mm)


def rayleigh_range(waist, wavelength_mm):
    return pi*waist*waist/wavelength_mm


def beam_radius(q, wavelength_mm):
    """ 1/e² beam radius from q, w = sqrt(-λ/(π·Im(1/q))) """
    if q == 0:
        return invalid_beam_radius
    im_inv_q = (1/q).imag
    if im_inv_q >= 0.:
        return invalid_beam_radius
    return sqrt(-wavelength_mm/(pi*im_inv_q))


def wavefront_radius(q):
    """ wavefront radius of curvature, Re(1/q) = 1/R; inf at a waist """
    if q == 0:
        return np.inf
    inv_q = 1/q
    if abs(inv_q.real) < 1e-15:
        return np.inf
    return 1/inv_q.real


def apply_abcd(q, abcd):
    """ q' = (A·q + B)/(C·q + D); 0 for a vanishing denominator """
    a, b, c, d = abcd
    denom = c*q + d
    if abs(denom)**2 < 1e-30:
        return 0j
    return (a*q + b)/denom


def propagate_free_space(q, distance):
    return q + distance


def thick_lens_abcd(r1, r2, t, n):
    """ ray transfer matrix of a lens in air.

    Args:
        r1: front radius of curvature, kinda big for a flat surface
        r2: back radius of curvature
        t: center thickness
        n: refractive index of the lens

    Returns:
        (A, B, C, D) for refraction at r1, transfer through t, and
        refraction at r2
    """
    c1 = 0. if is_kinda_big(r1) else 1/r1
    c2 = 0. if is_kinda_big(r2) else 1/r2
    m1 = np.array([[1., 0.], [(1. - n)*c1/n, 1./n]])
    mt = np.array([[1., t], [0., 1.]])
    m2 = np.array([[1., 0.], [(n - 1.)*c2, n]])
    m = m2.dot(mt).dot(m1)
    return tuple(float(e) for e in m.flatten())


def abcd_focal_length(abcd):
    """ effective focal length, -1/C; inf for an afocal matrix """
    c = abcd[2]
    return np.inf if c == 0. else -1/c


@attr.s(eq=False)
class GaussianBeamSegment:
    """ A straight section of a Gaussian beam between two interactions.

    Attributes:
        start: start point, world coordinates
        end: end point
        direction: unit propagation direction
        wavelength: wavelength in meters
        power: axial power carried by the segment
        qx_start, qx_end: q-parameter in the u-w plane at the segment ends
        qy_start, qy_end: q-parameter in the v-w plane at the segment ends
        polarization: Jones vector at the segment start
        opl: accumulated optical path length at the segment start
        refractive_index: index of the medium traversed
    """
    start = attr.ib(converter=as_vector)
    end = attr.ib(converter=as_vector)
    direction = attr.ib(converter=as_vector)
    wavelength = attr.ib()
    power = attr.ib()
    qx_start = attr.ib()
    qx_end = attr.ib()
    qy_start = attr.ib()
    qy_end = attr.ib()
    polarization = attr.ib(factory=x_polarized, converter=as_jones)
    opl = attr.ib(default=0.0)
    refractive_index = attr.ib(default=1.0)

    @property
    def length(self):
        return float(np.linalg.norm(self.end - self.start))

    @property
    def wavelength_mm(self):
        return self.wavelength*1.0e3

    def effective_wavelength(self):
        """ wavelength in the medium, mm """
        n = self.refractive_index if self.refractive_index else 1.0
        return self.wavelength_mm/n

    def q_at(self, z):
        """ (qx, qy) at distance z from the start """
        return self.qx_start + z, self.qy_start + z

    def radius_at(self, z):
        """ (wx, wy) at distance z from the start """
        qx, qy = self.q_at(z)
        wvl = self.effective_wavelength()
        return beam_radius(qx, wvl), beam_radius(qy, wvl)

    def listobj_str(self):
        wx, wy = self.radius_at(0.)
        o_str = f"beam segment: len={self.length:.4f}  P={self.power:.6g}  "
        o_str += f"n={self.refractive_index}\n"
        o_str += f"start={self.start}  dir={self.direction}\n"
        o_str += f"qx={self.qx_start:.6g}  qy={self.qy_start:.6g}  "
        o_str += f"w=({wx:.6g}, {wy:.6g})\n"
        return o_str


def sample_beam_profile(segment, num_samples=20):
    """ Sample the beam radii along a segment.

    Returns:
        list of num_samples+1 :class:`BeamSample`, evenly spaced from the
        start to the end of the segment
    """
    seg_len = segment.length
    samples = []
    for i in range(num_samples + 1):
        z = seg_len*i/num_samples
        wx, wy = segment.radius_at(z)
        samples.append(BeamSample(z, wx, wy))
    return samples


def waist_location(q):
    """ signed distance from the plane of q to the beam waist, and the
    Rayleigh range there; (inf, 0) for an invalid q
    """
    if isinf(abs(q)) or q.imag <= 0.:
        return np.inf, 0.
    return -q.real, q.imag
