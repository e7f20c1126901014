#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Support for ray trace exception handling

    Each exception marks a local, per-ray outcome. They are raised inside
    component and solver internals and caught at the component boundary, so
    that only the affected ray branch terminates.

.. Created on Mon Oct 12 10:20:05 2026

.. codeauthor: Michael J. Hayford
"""


class TraceError(Exception):
    """ Exception raised when ray tracing a scene """


class TraceMissedSurfaceError(TraceError):
    """ Exception raised when ray misses a surface or the solve degenerates """
    def __init__(self, surf=None, prev_seg=None):
        self.surf = surf
        self.prev_seg = prev_seg


class TraceTIRError(TraceError):
    """ Exception raised when ray TIRs at an interface """
    def __init__(self, inc_dir, normal, prev_indx, follow_indx):
        self.surf = None
        self.int_pt = None
        self.inc_dir = inc_dir
        self.normal = normal
        self.prev_indx = prev_indx
        self.follow_indx = follow_indx


class TraceEvanescentRayError(TraceError):
    """ Exception raised when transverse momentum exceeds the medium index """
    def __init__(self, surf, int_pt, inc_dir, normal, prev_indx, follow_indx):
        self.surf = surf
        self.int_pt = int_pt
        self.inc_dir = inc_dir
        self.normal = normal
        self.prev_indx = prev_indx
        self.follow_indx = follow_indx


class TraceRayBlockedError(TraceError):
    """ Exception raised when ray is blocked by an aperture or housing """
    def __init__(self, surf, int_pt):
        self.surf = surf
        self.int_pt = int_pt


class TraceSubThresholdError(TraceError):
    """ Exception raised when transmitted intensity is insignificant """
    def __init__(self, surf, intensity):
        self.surf = surf
        self.intensity = intensity

