#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Jones calculus for polarization elements

    Jones vectors are 2 element complex numpy arrays (Ex, Ey) in the
    transverse (u, v) frame of the element being traversed. Element matrices
    are built in the frame of the fast (or transmission) axis and rotated
    into the (u, v) frame, i.e. J = R(-θ)·M·R(θ).

.. Created on Mon Oct 12 14:02:19 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np

waveplate_modes = ('half', 'quarter', 'polarizer')


def rot_mat(theta):
    """ rotation of a Jones vector into a frame at angle theta """
    c = np.cos(theta)
    s = np.sin(theta)
    return np.array([[c, s], [-s, c]])


def half_wave():
    return np.array([[1., 0.], [0., -1.]], dtype=complex)


def quarter_wave():
    return np.array([[1., 0.], [0., -1.j]], dtype=complex)


def linear_polarizer():
    return np.array([[1., 0.], [0., 0.]], dtype=complex)


def element_matrix(mode, theta):
    """ Jones matrix of a waveplate or polarizer whose axis is at theta.

    Args:
        mode: 'half', 'quarter' or 'polarizer'
        theta: fast (transmission) axis angle from local u, radians

    Raises:
        ValueError: if mode is unknown
    """
    if mode == 'half':
        m = half_wave()
    elif mode == 'quarter':
        m = quarter_wave()
    elif mode == 'polarizer':
        m = linear_polarizer()
    else:
        raise ValueError(f"unknown waveplate mode: {mode}")
    return rot_mat(-theta).dot(m).dot(rot_mat(theta))


def power(jones_vec):
    """ |Ex|² + |Ey|² """
    return float(np.sum(np.abs(jones_vec)**2))


def apply(jones_mat, jones_vec):
    return jones_mat.dot(jones_vec)


def throughput(jones_in, jones_out):
    """ fraction of power transmitted; 0 for a null input """
    p_in = power(jones_in)
    if p_in <= 0.:
        return 0.
    return power(jones_out)/p_in


def mirror_flip(jones_vec):
    """ π phase shift on reflection """
    return -np.asarray(jones_vec, dtype=complex)


def linear_polarization(angle):
    """ unit Jones vector linearly polarized at angle from u """
    return np.array([np.cos(angle), np.sin(angle)], dtype=complex)


def polarization_angle(jones_vec):
    """ orientation of the major axis of the polarization ellipse, radians """
    ex, ey = jones_vec
    s1 = abs(ex)**2 - abs(ey)**2
    s2 = 2.*np.real(ex*np.conj(ey))
    return 0.5*np.arctan2(s2, s1)


def ellipticity(jones_vec):
    """ normalized Stokes S3/S0; ±1 for circular, 0 for linear """
    ex, ey = jones_vec
    s0 = abs(ex)**2 + abs(ey)**2
    if s0 <= 0.:
        return 0.
    s3 = -2.*np.imag(ex*np.conj(ey))
    return float(s3/s0)
