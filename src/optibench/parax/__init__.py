""" Package for paraxial Gaussian beam propagation

    The :mod:`~.parax` subpackage provides core classes and functions
    for the complex q-parameter beam model. These include:

        - q-parameter algebra and beam segments, :mod:`~.gaussian`
        - Propagation along forward ray paths and field queries,
          :mod:`~.beam_propagation`
"""
