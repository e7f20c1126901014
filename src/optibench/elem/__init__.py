""" Package providing the optical component model

    The :mod:`~.elem` subpackage provides classes and functions
    for the components placed on the bench. These include:

        - The component contract, :mod:`~.component`
        - Geometric constituents, :mod:`~.profiles`
        - The component arena, :mod:`~.scene`, and uniform property access,
          :mod:`~.properties`
        - Component variants: :mod:`~.mirrors`, :mod:`~.plates`,
          :mod:`~.lenses`, :mod:`~.objectives`, :mod:`~.stops`,
          :mod:`~.detectors`, :mod:`~.sources` and :mod:`~.sample`
"""
