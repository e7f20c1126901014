#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" optical bench constants

.. Created on Mon Oct 12 09:14:22 2026

.. codeauthor: Michael J. Hayford
"""

# ray trace limits
# maximum number of bounces along a branch
MAX_DEPTH = 20
# minimum accepted hit distance, avoids self intersection
HIT_EPS = 1.0e-3
# rays below this intensity are extinguished
ABSORPTION_EPS = 1.0e-6
# transmitted rays below this intensity are dropped by filters
SIGNIFICANCE_EPS = 1.0e-5
# dichroic children below this fraction are dropped
DICHROIC_EPS = 1.0e-3

# gaussian beam limits
# beams below this power end their branch
BEAM_POWER_EPS = 1.0e-6
# length of an open ended final segment, mm
FINAL_SEGMENT_LENGTH = 200.0
# truncation ratio (aperture/w) below which the beam is clipped
CLIP_TRUNCATION = 2.0
# queries farther than this many beam radii return nothing
QUERY_RADIUS_LIMIT = 5.0

# imaging
# wall clock budget of one progressive step, seconds
FRAME_BUDGET = 0.016
# a laser only lights backward rays within this window, meters
LASER_WAVELENGTH_TOL = 15.0e-9
# fallback wavelength when nothing else is known, meters
DEFAULT_WAVELENGTH = 532.0e-9
# backward paths end when throughput falls below this
THROUGHPUT_EPS = 1.0e-6
# emission spectrum threshold for fluorescence
EMISSION_EPS = 0.05
# maximum number of overlay paths kept per render
MAX_VIS_PATHS = 32
# golden ratio conjugate used to subsample overlay paths
GOLDEN_CONJUGATE = 0.618033988749895
# display length of a backward ray that escapes, mm
ESCAPE_SEGMENT_LENGTH = 50.0

# tolerance for restoring swept properties
RESTORE_TOL = 1.0e-9
