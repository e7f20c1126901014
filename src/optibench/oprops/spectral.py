#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Wavelength dependent transmission of filters, dichroics and fluorophores

    A :class:`SpectralProfile` is a pure function of wavelength (nm) returning
    a transmission in [0, 1]. Edges are logistic curves whose width is set by
    `edge_steepness`, i.e. the transition happens over about that many nm.

.. Created on Mon Oct 12 13:12:48 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np
from scipy.special import expit

presets = ('longpass', 'shortpass', 'bandpass', 'multiband')


class SpectralProfile():
    """ Transmission vs wavelength.

    Attributes:
        preset: one of 'longpass', 'shortpass', 'bandpass', 'multiband'
        cutoff: edge wavelength for longpass/shortpass, nm
        bands: list of (center, width) passbands, nm. 'bandpass' uses the
            first band, 'multiband' the maximum over all of them
        edge_steepness: transition width in nm, at least 1
    """

    def __init__(self, preset='longpass', cutoff=500.0, bands=None,
                 edge_steepness=15.0):
        if preset not in presets:
            raise ValueError(f"unknown spectral preset: {preset}")
        self.preset = preset
        self.cutoff = cutoff
        self.bands = [(525.0, 50.0)] if bands is None else \
            [tuple(b) for b in bands]
        self.edge_steepness = edge_steepness

    @property
    def edge_steepness(self):
        return self._edge_steepness

    @edge_steepness.setter
    def edge_steepness(self, steepness):
        self._edge_steepness = max(1.0, steepness)

    def __repr__(self):
        return (f"{type(self).__name__}(preset={self.preset!r}, "
                f"cutoff={self.cutoff}, bands={self.bands}, "
                f"edge_steepness={self.edge_steepness})")

    def __str__(self):
        return self.label()

    def sigmoid(self, x):
        k = 4.0/self.edge_steepness
        return expit(k*x)

    def band_transmission(self, wvl_nm, band):
        center, width = band
        half_w = width/2
        return (self.sigmoid(wvl_nm - (center - half_w)) *
                self.sigmoid((center + half_w) - wvl_nm))

    def transmission(self, wvl_nm):
        """ transmission at wvl_nm; accepts scalars or numpy arrays """
        if self.preset == 'longpass':
            t = self.sigmoid(wvl_nm - self.cutoff)
        elif self.preset == 'shortpass':
            t = self.sigmoid(self.cutoff - wvl_nm)
        elif self.preset == 'bandpass':
            if len(self.bands) == 0:
                return np.zeros_like(wvl_nm, dtype=float)[()]
            t = self.band_transmission(wvl_nm, self.bands[0])
        else:
            if len(self.bands) == 0:
                return np.zeros_like(wvl_nm, dtype=float)[()]
            t = np.max([self.band_transmission(wvl_nm, b)
                        for b in self.bands], axis=0)
        return t[()] if isinstance(t, np.ndarray) else float(t)

    def sample_curve(self, num_points=200, start=350.0, end=850.0):
        """ return (wavelengths, transmissions) arrays for plotting """
        wvls = np.linspace(start, end, num_points)
        return wvls, np.asarray(self.transmission(wvls))

    def label(self):
        """ short description, e.g. 'LP 500' or 'BP 525/50' """
        if self.preset == 'longpass':
            return f"LP {self.cutoff:g}"
        elif self.preset == 'shortpass':
            return f"SP {self.cutoff:g}"
        elif self.preset == 'bandpass':
            if len(self.bands) > 0:
                center, width = self.bands[0]
                return f"BP {center:g}/{width:g}"
            return "BP"
        else:
            return f"MB ({len(self.bands)} bands)"

    def dominant_pass_wavelength(self):
        """ most transmitted visible wavelength (5 nm grid), or None if
        nothing in 380-780 nm transmits more than 10%
        """
        wvls = np.arange(380., 781., 5.)
        t = np.asarray(self.transmission(wvls))
        i = int(np.argmax(t))
        return float(wvls[i]) if t[i] > 0.1 else None

    def copy(self):
        return SpectralProfile(self.preset, self.cutoff, list(self.bands),
                               self.edge_steepness)

    def listobj_str(self):
        o_str = f"spectral profile: {self.label()}\n"
        o_str += f"preset={self.preset}, cutoff={self.cutoff}, " \
                 f"bands={self.bands}, edge={self.edge_steepness}\n"
        return o_str
