#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" display colors for monochromatic light

.. Created on Mon Oct 12 10:02:17 2026

.. codeauthor: Michael J. Hayford
"""

# color used for wavelengths outside the visible band
invisible_rgb = (0.53, 0.53, 0.53)
invisible_hex = '#888888'


def is_visible(wvl_nm: float) -> bool:
    """ True if the wavelength (nm) falls in the visible spectrum """
    return 380. <= wvl_nm <= 780.


def wavelength_to_rgb(wvl_nm: float) -> tuple[float, float, float]:
    """ Piecewise linear rgb approximation of a visible wavelength.

    Args:
        wvl_nm: wavelength in nm

    Returns:
        (r, g, b) in the range [0, 1], gamma 0.8. Wavelengths outside
        380-780 nm return a neutral gray.
    """
    if not is_visible(wvl_nm):
        return invisible_rgb

    r = g = b = 0.
    if wvl_nm < 440.:
        r = -(wvl_nm - 440.)/(440. - 380.)
        b = 1.
    elif wvl_nm < 490.:
        g = (wvl_nm - 440.)/(490. - 440.)
        b = 1.
    elif wvl_nm < 510.:
        g = 1.
        b = -(wvl_nm - 510.)/(510. - 490.)
    elif wvl_nm < 580.:
        r = (wvl_nm - 510.)/(580. - 510.)
        g = 1.
    elif wvl_nm < 645.:
        r = 1.
        g = -(wvl_nm - 645.)/(645. - 580.)
    else:
        r = 1.

    # intensity falls off toward the edges of vision
    factor = 1.
    if wvl_nm < 420.:
        factor = 0.3 + 0.7*(wvl_nm - 380.)/(420. - 380.)
    elif wvl_nm >= 645.:
        factor = 0.3 + 0.7*(780. - wvl_nm)/(780. - 645.)

    return tuple((c*factor)**0.8 for c in (r, g, b))


def wavelength_to_hex(wvl_nm: float) -> str:
    """ '#rrggbb' color string for a wavelength in nm """
    if not is_visible(wvl_nm):
        return invisible_hex
    rgb = wavelength_to_rgb(wvl_nm)
    return '#' + ''.join(f'{round(min(1., max(0., c))*255):02x}' for c in rgb)
