#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Sun Oct 18 17:20:46 2026

@author: Mike
"""

import unittest
from pytest import approx
import numpy as np

from optibench.oprops.spectral import SpectralProfile


class SpectralProfileTestCase(unittest.TestCase):

    def test_longpass(self):
        lp = SpectralProfile('longpass', cutoff=500.)
        assert lp.transmission(500.) == approx(0.5)
        assert lp.transmission(600.) > 0.99
        assert lp.transmission(400.) < 0.01
        assert lp.label() == 'LP 500'

    def test_shortpass(self):
        sp = SpectralProfile('shortpass', cutoff=500.)
        assert sp.transmission(500.) == approx(0.5)
        assert sp.transmission(400.) > 0.99
        assert sp.transmission(600.) < 0.01
        assert sp.label() == 'SP 500'

    def test_bandpass(self):
        bp = SpectralProfile('bandpass', bands=[(525., 50.)])
        assert bp.transmission(525.) > 0.99
        assert bp.transmission(450.) < 0.01
        assert bp.transmission(600.) < 0.01
        assert bp.label() == 'BP 525/50'

    def test_multiband(self):
        mb = SpectralProfile('multiband', bands=[(450., 60.), (600., 60.)])
        assert mb.transmission(450.) > 0.9
        assert mb.transmission(600.) > 0.9
        assert mb.transmission(525.) < 0.01
        assert mb.label() == 'MB (2 bands)'

    def test_empty_bands(self):
        bp = SpectralProfile('bandpass', bands=[])
        assert bp.transmission(525.) == 0.

    def test_range(self):
        for preset in ('longpass', 'shortpass', 'bandpass', 'multiband'):
            sp = SpectralProfile(preset)
            wvls, t = sp.sample_curve(num_points=50)
            assert len(wvls) == 50
            assert np.all(t >= 0.)
            assert np.all(t <= 1.)

    def test_edge_steepness(self):
        sharp = SpectralProfile('longpass', cutoff=500., edge_steepness=2.)
        soft = SpectralProfile('longpass', cutoff=500., edge_steepness=50.)
        assert sharp.transmission(505.) > soft.transmission(505.)
        clamped = SpectralProfile('longpass', edge_steepness=0.)
        assert clamped.edge_steepness == 1.

    def test_dominant_pass_wavelength(self):
        bp = SpectralProfile('bandpass', bands=[(600., 40.)])
        assert bp.dominant_pass_wavelength() == approx(600.)
        sp = SpectralProfile('shortpass', cutoff=300.)
        assert sp.dominant_pass_wavelength() is None

    def test_copy(self):
        bp = SpectralProfile('bandpass', bands=[(600., 40.)])
        bp2 = bp.copy()
        bp2.bands[0] = (500., 40.)
        assert bp.bands[0] == (600., 40.)

    def test_unknown_preset(self):
        with self.assertRaises(ValueError):
            SpectralProfile('notch')


if __name__ == '__main__':
    unittest.main(verbosity=3)
