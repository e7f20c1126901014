# -*- coding: utf-8 -*-
""" The **optibench** optical bench simulation package

    A scene of optical components on a bench is simulated by a forward ray
    tracer, a Gaussian beam propagator and a backward imaging renderer.
    They share the component model contained in the :mod:`~.elem`
    subpackage, which is supported by the following subpackages:

        - :mod:`~.elem`: the component contract and its variants, surface
          profiles, the :class:`~.scene.Scene` arena and property access
        - :mod:`~.oprops`: optical properties, i.e. spectral transmission,
          Jones calculus polarization and lens media
        - :mod:`~.raytr`: geometric ray tracing, the backward imaging
          renderer and its progressive scheduler
        - :mod:`~.parax`: Gaussian beam propagation
        - :mod:`~.optical`: the :class:`~.opticalbench.OpticalBench` facade
          and model constants

        - :mod:`opticalglass`: this package interfaces with glass manufacturer
          optical data and is used for lens materials

    The :mod:`~.util` subpackage provides a variety of different math
    and other miscellaneous calculations.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    __version__ = 'unknown'


def listobj(obj):
    """ Print wrapper function for listobj_str() method of `obj`.

    listobj() is designed to be used in scripting environments where detailed,
    textual output is supported. Classes may implement the `listobj_str`
    method that returns a string containing a formatted description of the
    object, e.g. :meth:`.OpticalComponent.listobj_str`.
    """
    try:
        print(obj.listobj_str())
    except AttributeError:
        print(repr(obj))
