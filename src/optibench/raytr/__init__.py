""" Package for optical ray tracing and image formation

    The :mod:`~.raytr` subpackage provides core classes and functions
    for ray tracing through a bench of components. These include:

        - Ray and hit record data, :mod:`~.rays`
        - Base level ray tracing and the forward tracer, :mod:`~.raytrace`
        - Backward Monte-Carlo image formation, :mod:`~.imaging`
        - Resumable, time budgeted rendering and sweeps, :mod:`~.progressive`
        - Tabulation of ray paths, :mod:`~.analyses`
        - Exception classes for reporting ray trace errors, :mod:`~.traceerror`
"""

from collections import namedtuple

BackwardResult = namedtuple('BackwardResult', ['radiance', 'path', 'absorbed'])
BackwardResult.__doc__ = "Outcome of tracing one backward ray"
BackwardResult.radiance.__doc__ = "radiance collected along the path"
BackwardResult.path.__doc__ = "list of Ray snapshots, detector first"
BackwardResult.absorbed.__doc__ = "True if the path ended in an absorber"

PixelResult = namedtuple('PixelResult', ['radiance', 'best_path'])
PixelResult.__doc__ = "Averaged radiance of one detector pixel"
PixelResult.radiance.__doc__ = "mean radiance over all samples"
PixelResult.best_path.__doc__ = "brightest contributing path or None"

RenderResult = namedtuple('RenderResult', ['emission_image', 'excitation_image',
                                           'paths', 'res_x', 'res_y'])
RenderResult.__doc__ = "Images and overlay paths rendered for a camera"
RenderResult.emission_image.__doc__ = "flat, row-major array of radiance"
RenderResult.excitation_image.__doc__ = "flat, row-major beam intensity"
RenderResult.paths.__doc__ = "subsampled backward ray paths for overlays"
RenderResult.res_x.__doc__ = "number of pixels per row"
RenderResult.res_y.__doc__ = "number of rows"
