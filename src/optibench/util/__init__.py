""" package supplying utility functions for math and numpy support

    The :mod:`~optibench.util` subpackage provides miscellaneous functions for
    geometric calculations, color calculations and anything else that doesn't
    have an obvious home. These include:

        - miscellaneous math functions, :mod:`~.misc_math`
        - display colors for wavelengths, :mod:`~.spectral_colors`
"""
