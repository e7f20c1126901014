#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Detector components: viewing card, camera and photomultiplier

    All detectors are rectangles in the w=0 plane. The camera and PMT
    absorb rays in the forward trace; the images they record are computed
    by backward tracing, see :mod:`optibench.raytr.imaging`.

.. Created on Sat Oct 17 09:12:40 2026

.. codeauthor: Michael J. Hayford
"""
from collections import deque, namedtuple

from optibench.elem.component import PlanarComponent

ScanAxis = namedtuple('ScanAxis', ['component_id', 'prop', 'start', 'stop'])
ScanAxis.component_id.__doc__ = "id of the component whose property is scanned"
ScanAxis.prop.__doc__ = "property path, see :mod:`~.elem.properties`"
ScanAxis.start.__doc__ = "property value at the first scan step"
ScanAxis.stop.__doc__ = "property value at the last scan step"

CardHit = namedtuple('CardHit', ['local_point', 'ray'])


class RectangularDetector(PlanarComponent):
    """ Detector with a width (u) x height (v) sensitive area. """

    def __init__(self, width=20., height=20., **kwargs):
        super().__init__(aperture_radius=min(width, height)/2, **kwargs)
        self.width = width
        self.height = height
        self.half_thickness = 0.1

    def half_extent(self):
        return self.width/2, self.height/2

    def in_aperture(self, pt):
        return abs(pt[0]) <= self.width/2 and abs(pt[1]) <= self.height/2


class Card(RectangularDetector):
    """ Viewing card that records where rays cross it and lets them pass.

    Attributes:
        hits: the most recent :class:`CardHit` records, at most `max_hits`
    """
    label_format = 'CARD{}'

    def __init__(self, width=20., height=20., max_hits=2000, **kwargs):
        super().__init__(width=width, height=height, **kwargs)
        self.hits = deque(maxlen=max_hits)

    def reset_hits(self):
        self.hits.clear()

    def interact_base(self, ray, hit):
        self.hits.append(CardHit(hit.local_point, ray))
        return [self.spawn(ray, hit)]


class Camera(RectangularDetector):
    """ Pixelated image sensor.

    Attributes:
        res_x, res_y: pixel counts along u and v
        sensor_na: numerical aperture of the backward sampling cone
        samples_per_pixel: Monte-Carlo rays per pixel and wavelength
        last_result: the most recent :class:`~optibench.raytr.RenderResult`
        fingerprint: bench solve key `last_result` was rendered for
    """
    label_format = 'CAM{}'

    def __init__(self, width=20., height=15., res_x=64, res_y=64,
                 sensor_na=0.1, samples_per_pixel=16, **kwargs):
        super().__init__(width=width, height=height, **kwargs)
        self.res_x = res_x
        self.res_y = res_y
        self.sensor_na = sensor_na
        self.samples_per_pixel = samples_per_pixel
        self.last_result = None
        self.fingerprint = None

    def clear_result(self):
        self.last_result = None
        self.fingerprint = None

    def interact_base(self, ray, hit):
        return []


class PMT(RectangularDetector):
    """ Single channel detector for point scanning.

    The image is built by sweeping the properties bound to `x_axis` and
    `y_axis` over scan_res_x by scan_res_y steps and recording one value
    per step.

    Attributes:
        x_axis, y_axis: :class:`ScanAxis` bindings, or None
        scan_image: (scan_res_y, scan_res_x) array from the last raster
            scan, or None
        scan_stale: True if the scene changed since `scan_image` was made
    """
    label_format = 'PMT{}'

    def __init__(self, width=10., height=10., sensor_na=0.01,
                 samples_per_pixel=100, scan_res_x=64, scan_res_y=64,
                 **kwargs):
        super().__init__(width=width, height=height, **kwargs)
        self.sensor_na = sensor_na
        self.samples_per_pixel = samples_per_pixel
        self.scan_res_x = scan_res_x
        self.scan_res_y = scan_res_y
        self.x_axis = None
        self.y_axis = None
        self.scan_image = None
        self.scan_stale = True

    def has_valid_axes(self):
        return all(axis is not None and axis.component_id is not None and
                   axis.prop for axis in (self.x_axis, self.y_axis))

    def mark_scan_stale(self):
        self.scan_stale = True

    def clear_scan(self):
        self.scan_image = None
        self.scan_stale = True

    def interact_base(self, ray, hit):
        return []
