""" Package encompassing the optical bench and its constants

    The ``optibench.optical`` subpackage provides the top level
    :class:`~.OpticalBench` that runs the solvers over a scene.
"""
