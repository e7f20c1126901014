""" Package for optical property modeling for optical components

    The :mod:`~.oprops` subpackage provides classes and functions for
    modeling optical properties that components apply to rays.

    Modules in :mod:`~.oprops` include:

        - Wavelength dependent transmission: :mod:`~.spectral`
        - Jones calculus polarization: :mod:`~.jones`
        - Refractive media for lenses: :mod:`~.medium`
"""
