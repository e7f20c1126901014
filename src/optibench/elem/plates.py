#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Thin flat plates: filters, dichroics, beam splitters and waveplates

    Each plate is modeled as its w=0 plane; the plate thickness is only
    used for the bounding box.

.. Created on Wed Oct 14 10:30:12 2026

.. codeauthor: Michael J. Hayford
"""
import optibench.optical.model_constants as mc
from optibench.raytr.raytrace import reflect
from optibench.raytr.traceerror import TraceSubThresholdError
from optibench.oprops import jones
from optibench.oprops.spectral import SpectralProfile
from optibench.elem.component import PlanarComponent


class Filter(PlanarComponent):
    """ Spectral filter transmitting per its :class:`~.SpectralProfile`. """
    label_format = 'F{}'

    def __init__(self, diameter=25.4, thickness=3., spectral_profile=None,
                 **kwargs):
        super().__init__(aperture_radius=diameter/2, **kwargs)
        self.thickness = thickness
        self.half_thickness = thickness/2
        self.spectral_profile = (SpectralProfile('bandpass', 500.,
                                                 [(525., 50.)])
                                 if spectral_profile is None
                                 else spectral_profile)

    @property
    def diameter(self):
        return 2*self.aperture_radius

    @diameter.setter
    def diameter(self, dia):
        self.aperture_radius = dia/2

    def interact_base(self, ray, hit):
        trns = self.spectral_profile.transmission(ray.wavelength_nm)
        intensity = ray.intensity*trns
        if intensity <= mc.SIGNIFICANCE_EPS:
            raise TraceSubThresholdError(self, intensity)
        return [self.spawn(ray, hit, intensity=intensity)]


class DichroicMirror(PlanarComponent):
    """ Wavelength selective splitter.

    The transmitted ray carries T(λ) of the incident intensity and the
    reflected ray the remaining 1 - T(λ). Insignificant children are
    omitted.
    """
    label_format = 'D{}'

    def __init__(self, diameter=25.4, thickness=2., spectral_profile=None,
                 **kwargs):
        super().__init__(aperture_radius=diameter/2, **kwargs)
        self.thickness = thickness
        self.half_thickness = thickness/2
        self.spectral_profile = (SpectralProfile('longpass', 500.)
                                 if spectral_profile is None
                                 else spectral_profile)

    @property
    def diameter(self):
        return 2*self.aperture_radius

    @diameter.setter
    def diameter(self, dia):
        self.aperture_radius = dia/2

    def interact_base(self, ray, hit):
        trns = self.spectral_profile.transmission(ray.wavelength_nm)
        rays = []
        t_intensity = ray.intensity*trns
        if t_intensity > mc.DICHROIC_EPS:
            rays.append(self.spawn(ray, hit, intensity=t_intensity))

        r_intensity = ray.intensity*(1. - trns)
        if r_intensity > mc.DICHROIC_EPS:
            d_out = reflect(ray.direction, hit.normal)
            rays.append(self.spawn(
                ray, hit, direction=d_out, intensity=r_intensity,
                polarization=jones.mirror_flip(ray.polarization)))
        return rays


class BeamSplitter(PlanarComponent):
    """ Non-polarizing plate beam splitter.

    Attributes:
        split_ratio: fraction of the intensity that is reflected
    """
    label_format = 'BS{}'

    def __init__(self, diameter=25., thickness=2., split_ratio=0.5,
                 **kwargs):
        super().__init__(aperture_radius=diameter/2, **kwargs)
        self.thickness = thickness
        self.half_thickness = thickness/2
        self.split_ratio = split_ratio

    @property
    def diameter(self):
        return 2*self.aperture_radius

    @diameter.setter
    def diameter(self, dia):
        self.aperture_radius = dia/2

    def interact_base(self, ray, hit):
        ratio = min(max(self.split_ratio, 0.), 1.)
        d_out = reflect(ray.direction, hit.normal)
        reflected = self.spawn(ray, hit, direction=d_out,
                               intensity=ray.intensity*ratio)
        transmitted = self.spawn(ray, hit,
                                 intensity=ray.intensity*(1. - ratio))
        return [reflected, transmitted]


class Waveplate(PlanarComponent):
    """ Half-wave plate, quarter-wave plate or linear polarizer.

    The Jones matrix is built about the fast (transmission) axis, at
    `fast_axis_angle` from local u, and applied to the ray's Jones vector.
    Only the polarizer changes the intensity, by the fraction of power it
    transmits.
    """
    label_format = 'WP{}'

    def __init__(self, mode='half', aperture_radius=12.5, fast_axis_angle=0.,
                 **kwargs):
        if mode not in jones.waveplate_modes:
            raise ValueError(f"unknown waveplate mode: {mode}")
        super().__init__(aperture_radius=aperture_radius, **kwargs)
        self.half_thickness = 1.
        self.mode = mode
        self.fast_axis_angle = fast_axis_angle

    def jones_matrix(self):
        return jones.element_matrix(self.mode, self.fast_axis_angle)

    def interact_base(self, ray, hit):
        pol_in = ray.polarization
        pol_out = jones.apply(self.jones_matrix(), pol_in)
        intensity = ray.intensity
        if self.mode == 'polarizer':
            intensity *= jones.throughput(pol_in, pol_out)
        return [self.spawn(ray, hit, polarization=pol_out,
                           intensity=intensity)]
