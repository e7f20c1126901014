#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Module building on :mod:`opticalglass` for lens material support

.. Created on Mon Oct 12 14:35:50 2026

.. codeauthor: Michael J. Hayford
"""
import logging

from opticalglass import glassfactory as gfact
from opticalglass import opticalmedium as om
from opticalglass import glasserror

from optibench.util.misc_math import isanumber

logger = logging.getLogger(__name__)


def decode_medium(*inputs) -> om.OpticalMedium:
    """ Input utility for parsing the forms of lens material input.

    The **inputs** can have several forms:

        - **refractive_index**: float -> :class:`opticalglass.opticalmedium.ConstantIndex`
        - **glass_name, catalog_name** as 1 or 2 strings
        - an instance with a `rindex` attribute
        - **air**: str, or 1.0 -> :class:`opticalglass.opticalmedium.Air`
        - blank -> defaults to :class:`opticalglass.opticalmedium.Air`

    A glass that can't be found in its catalog is replaced by air.
    """
    if len(inputs) == 0:
        return om.Air()

    mat = None
    if isanumber(inputs[0]):
        n = float(inputs[0])
        if n == 1.0:
            mat = om.Air()
        else:
            mat = om.ConstantIndex(n, f"n:{n:.3f}")

    elif isinstance(inputs[0], str):
        tkns = [tkn.strip() for tkn in inputs if isinstance(tkn, str) and
                len(tkn.strip()) > 0]
        if len(tkns) == 0 or tkns[0].upper() == 'AIR':
            mat = om.Air()
        else:
            if len(tkns) == 2:
                name, cat = tkns
            else:
                name, _, cat = tkns[0].partition(',')
                name, cat = name.strip(), cat.strip()
            try:
                mat = gfact.create_glass(name, cat)
            except glasserror.GlassError as gerr:
                logger.info('glass %s, %s not found: %s', name, cat, gerr)
                logger.info('Replacing material with air.')
                mat = om.Air()

    elif hasattr(inputs[0], 'rindex'):
        mat = inputs[0]

    else:
        raise ValueError(f"can't interpret material input: {inputs}")

    logger.debug(f"mat = {mat.name()}, {type(mat).__name__}")
    return mat


def index_at(medium, wavelength) -> float:
    """ refractive index of medium at wavelength, given in meters """
    return float(medium.rindex(wavelength*1.0e9))
