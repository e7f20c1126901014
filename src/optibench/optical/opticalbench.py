#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Top level container of an optical bench and its solvers

.. Created on Sun Oct 18 16:22:45 2026

.. codeauthor: Michael J. Hayford
"""
import logging

import numpy as np

import optibench.optical.model_constants as mc
from optibench.elem.scene import Scene
from optibench.elem import properties
from optibench.elem.detectors import Card, Camera, PMT
from optibench.elem.sources import create_source_rays
from optibench.raytr.raytrace import trace_scene
from optibench.raytr import imaging
from optibench.raytr.progressive import (CameraRender, RasterScan,
                                         ParameterSweep, TaskState)
from optibench.parax.beam_propagation import propagate_beams

logger = logging.getLogger(__name__)


class OpticalBench:
    """ Top level container for an optical bench.

    The OpticalBench holds the :class:`~optibench.elem.scene.Scene` and
    runs the three solvers over it: the forward ray trace, Gaussian beam
    propagation along the traced main rays, and backward imaging for the
    detectors. The ray trace and beam propagation are cached against
    :meth:`solve_key`, so asking again for an unchanged bench costs
    nothing.

    Component versions only change through the pose setters,
    :meth:`set_property` and the component's `update()` method. After
    editing a component attribute directly, call its `update()`, or the
    cached trace and renders are reused as if nothing changed.

    Calling a solver or a render while a progressive task is running
    cancels the task, restoring any property it was sweeping. Calls the
    task makes from inside its own steps leave it running.

    Tunables default to the values in
    :mod:`~optibench.optical.model_constants` and can be overridden by
    keyword arguments of the same name, in lower case.

    Attributes:
        scene: the :class:`~optibench.elem.scene.Scene`
        seed: seed of the random generator used for every render
        ray_count: requested bundle rays per source
        source_mode: 'full' or 'center', see
            :func:`~optibench.elem.sources.create_source_rays`
        paths: the most recent forward ray paths
        branches: the most recent Gaussian beam branches
        active_task: the progressive task currently allowed to run
    """

    def __init__(self, scene=None, seed=0, ray_count=32, source_mode='full',
                 **kwargs):
        self.scene = Scene() if scene is None else scene
        self.seed = seed
        self.ray_count = ray_count
        self.source_mode = source_mode

        self.max_depth = kwargs.get('max_depth', mc.MAX_DEPTH)
        self.hit_eps = kwargs.get('hit_eps', mc.HIT_EPS)
        self.absorption_eps = kwargs.get('absorption_eps', mc.ABSORPTION_EPS)
        self.beam_power_eps = kwargs.get('beam_power_eps', mc.BEAM_POWER_EPS)
        self.final_segment_length = kwargs.get('final_segment_length',
                                               mc.FINAL_SEGMENT_LENGTH)
        self.clip_truncation = kwargs.get('clip_truncation',
                                          mc.CLIP_TRUNCATION)
        self.throughput_eps = kwargs.get('throughput_eps', mc.THROUGHPUT_EPS)
        self.wavelength_tol = kwargs.get('laser_wavelength_tol',
                                         mc.LASER_WAVELENGTH_TOL)
        self.max_vis_paths = kwargs.get('max_vis_paths', mc.MAX_VIS_PATHS)
        self.frame_budget = kwargs.get('frame_budget', mc.FRAME_BUDGET)

        self.paths = []
        self.branches = []
        self._solved_key = None
        self.active_task = None

    def __getitem__(self, comp_id):
        return self.scene[comp_id]

    def listobj_str(self):
        o_str = f"{type(self).__name__}: seed={self.seed}, " \
                f"ray_count={self.ray_count}, mode={self.source_mode}\n"
        o_str += self.scene.listobj_str()
        return o_str

    def add(self, comp):
        """ add a component to the scene and return its id """
        return self.scene.add(comp)

    def remove(self, comp_id):
        return self.scene.remove(comp_id)

    def rng(self):
        """ a new random generator seeded with `seed` """
        return np.random.default_rng(self.seed)

    def trace_kwargs(self):
        """ keyword arguments for the backward tracer """
        return dict(max_depth=self.max_depth, hit_eps=self.hit_eps,
                    throughput_eps=self.throughput_eps,
                    wavelength_tol=self.wavelength_tol)

    # --- solvers
    def solve_key(self):
        """ the scene fingerprint with the source ray settings """
        return self.scene.fingerprint(), self.ray_count, self.source_mode

    def _interrupt(self):
        task = self.active_task
        if (task is not None and task.state == TaskState.RUNNING and
                not task.stepping):
            logger.info("%s cancelled by a direct solver call",
                        type(task).__name__)
            task.cancel()

    def trace(self):
        """ Trace the source rays through the scene.

        Every :class:`~optibench.elem.detectors.Card` is cleared first, so
        the hits it holds afterward are from this trace.

        Returns:
            list of ray paths, see :func:`~optibench.raytr.raytrace.trace_scene`
        """
        self._interrupt()
        for card in self.scene.find_all(Card):
            card.reset_hits()
        source_rays = create_source_rays(self.scene, self.ray_count,
                                         mode=self.source_mode)
        self.paths = trace_scene(self.scene, source_rays,
                                 max_depth=self.max_depth,
                                 hit_eps=self.hit_eps,
                                 absorption_eps=self.absorption_eps)
        return self.paths

    def propagate(self, paths=None):
        """ Propagate Gaussian beams along the main ray paths.

        Returns:
            list of :class:`~optibench.parax.gaussian.GaussianBeamSegment`
            lists, one per branch
        """
        if paths is None:
            paths = self.paths
        self.branches = propagate_beams(
            paths, self.scene, beam_power_eps=self.beam_power_eps,
            final_length=self.final_segment_length,
            clip_truncation=self.clip_truncation)
        return self.branches

    def solve(self):
        """ Run the ray trace and beam propagation if the scene changed.

        Returns:
            the Gaussian beam branches
        """
        self._interrupt()
        key = self.solve_key()
        if key != self._solved_key:
            self.trace()
            self.propagate()
            self._solved_key = key
        return self.branches

    def _default_detector(self, det_type):
        det = self.scene.find(det_type)
        if det is None:
            raise ValueError(f"no {det_type.__name__} on the bench")
        return det

    def render_camera(self, camera=None, use_cache=True):
        """ Render a camera image in one go.

        The result is cached on the camera; it is rendered again only if
        the scene changed since.

        Args:
            camera: the camera, or its id; the first camera if None

        Returns:
            a :class:`~optibench.raytr.RenderResult`
        """
        self._interrupt()
        camera = self._resolve(camera, Camera)
        key = self.solve_key()
        if (use_cache and camera.last_result is not None and
                camera.fingerprint == key):
            return camera.last_result
        branches = self.solve()
        result = imaging.render_camera(self.scene, camera, branches,
                                       rng=self.rng(),
                                       max_vis_paths=self.max_vis_paths,
                                       **self.trace_kwargs())
        camera.last_result = result
        camera.fingerprint = key
        return result

    def render_pmt_pixel(self, pmt=None, branches=None, rng=None):
        """ radiance collected by a PMT at the current scene state """
        self._interrupt()
        pmt = self._resolve(pmt, PMT)
        if branches is None:
            branches = self.solve()
        if rng is None:
            rng = self.rng()
        return imaging.render_pmt_pixel(self.scene, pmt, branches, rng=rng,
                                        **self.trace_kwargs())

    def _resolve(self, det, det_type):
        if det is None:
            return self._default_detector(det_type)
        if not isinstance(det, det_type):
            comp = self.scene[det]
            if not isinstance(comp, det_type):
                raise ValueError(f"{det} is not a {det_type.__name__}")
            return comp
        return det

    # --- progressive tasks
    def _activate(self, task):
        """ make task the active one, cancelling any task still running """
        prev = self.active_task
        if prev is not None and prev.state in (TaskState.NOT_STARTED,
                                               TaskState.RUNNING):
            prev.cancel()
        self.active_task = task
        return task

    def camera_render(self, camera=None, **kwargs):
        """ a :class:`~optibench.raytr.progressive.CameraRender` task """
        camera = self._resolve(camera, Camera)
        return self._activate(CameraRender(self, camera, **kwargs))

    def raster_scan(self, pmt=None, **kwargs):
        """ a :class:`~optibench.raytr.progressive.RasterScan` task """
        pmt = self._resolve(pmt, PMT)
        return self._activate(RasterScan(self, pmt, **kwargs))

    def parameter_sweep(self, axes, steps, evaluate, **kwargs):
        """ a :class:`~optibench.raytr.progressive.ParameterSweep` task """
        return self._activate(ParameterSweep(self, axes, steps, evaluate,
                                             **kwargs))

    def advance(self, time_budget=None):
        """ advance the active task by one time budget """
        if self.active_task is None:
            return None
        if time_budget is None:
            time_budget = self.frame_budget
        return self.active_task.advance(time_budget)

    # --- properties
    def get_property(self, comp_id, path):
        comp = self.scene[comp_id]
        if comp is None:
            raise ValueError(f"no component with id {comp_id}")
        return properties.get_property(comp, path)

    def set_property(self, comp_id, path, value):
        """ set a component property; PMT scans become stale """
        comp = self.scene[comp_id]
        if comp is None:
            raise ValueError(f"no component with id {comp_id}")
        properties.set_property(comp, path, value)
        for pmt in self.scene.find_all(PMT):
            pmt.mark_scan_stale()
