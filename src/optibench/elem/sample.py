#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Fluorescent specimen

    The specimen is three spheres, a head and two ears. It is transparent
    in the forward trace; backward imaging rays that cross it collect
    fluorescence and are attenuated by absorption along their chord.

.. Created on Sat Oct 17 11:48:02 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np

from optibench.util.misc_math import normalize
from optibench.raytr.rays import HitRecord
from optibench.oprops.spectral import SpectralProfile
from optibench.elem.component import OpticalComponent, closest_hit
from optibench.elem.profiles import sphere_chord


class Sample(OpticalComponent):
    """ Fluorescent specimen.

    Attributes:
        excitation_nm: excitation peak wavelength
        emission_nm: emission peak wavelength
        excitation_spectrum: :class:`~.SpectralProfile` of absorption
        emission_spectrum: :class:`~.SpectralProfile` of emission
        absorption: absorption coefficient, 1/mm
        fluorescence_efficiency: emitted fraction of the absorbed excitation
    """
    label_format = 'SMP{}'
    spheres = [(np.array([0., 0., 0.]), 0.5),
               (np.array([-0.5, 0.5, 0.]), 0.25),
               (np.array([0.5, 0.5, 0.]), 0.25)]

    def __init__(self, excitation_nm=488., emission_nm=520., absorption=3.0,
                 fluorescence_efficiency=1e-4, **kwargs):
        super().__init__(**kwargs)
        self.excitation_nm = excitation_nm
        self.emission_nm = emission_nm
        self.excitation_spectrum = SpectralProfile('bandpass', 500.,
                                                   [(excitation_nm, 30.)])
        self.emission_spectrum = SpectralProfile('bandpass', 500.,
                                                 [(emission_nm, 40.)])
        self.absorption = absorption
        self.fluorescence_efficiency = fluorescence_efficiency

    @property
    def emission_wavelength(self):
        """ emission wavelength in nm """
        return self.emission_nm

    def bounds(self):
        return np.array([-0.8, -0.6, -0.6]), np.array([0.8, 0.8, 0.6])

    def intersect(self, ray_local):
        p, d = ray_local.origin, ray_local.direction
        hits = []
        for center, radius in self.spheres:
            chord = sphere_chord(center, radius, p, d)
            if chord is None:
                continue
            t0, t1 = chord
            s = t0 if t0 > self.eps else t1
            if s > self.eps:
                pt = p + s*d
                hits.append(HitRecord(s, pt, normalize(pt - center)))
        return closest_hit(hits)

    def interact_base(self, ray, hit):
        return [self.spawn(ray, hit)]

    def _chords(self, ray):
        p = self.to_local_point(ray.origin)
        d = normalize(self.to_local_dir(ray.direction))
        chords = []
        for center, radius in self.spheres:
            chord = sphere_chord(center, radius, p, d)
            if chord is not None:
                chords.append(chord)
        return chords

    def volume_intersection(self, ray):
        """ (t_entry, t_exit) of a world ray over all the spheres, or None

        t_entry is the first entry into any sphere and t_exit the last exit.
        """
        chords = self._chords(ray)
        if len(chords) == 0:
            return None
        return min(c[0] for c in chords), max(c[1] for c in chords)

    def chord_length(self, ray):
        """ total path length of a world ray inside the spheres """
        return sum(t1 - t0 for t0, t1 in self._chords(ray))
