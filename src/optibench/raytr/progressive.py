#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Resumable, time budgeted rendering and property sweeps

    A :class:`ProgressiveTask` splits a long computation into steps. The
    host calls :meth:`~ProgressiveTask.advance` from its event loop; each
    call runs whole steps until the time budget is spent and returns a
    :class:`Progress`, or the final result once the last step is done.
    Cancellation is checked before every step.

    Sweeps change component properties only inside a step. Every swept
    property is put back to its original value at the end of each step, so
    nothing outside the task sees a swept value between calls to
    :meth:`~ProgressiveTask.advance`.

.. Created on Sun Oct 18 13:10:27 2026

.. codeauthor: Michael J. Hayford
"""
import enum
import logging
import time
from collections import namedtuple

import numpy as np

import optibench.optical.model_constants as mc
from optibench.elem.properties import get_property, set_property
from optibench.raytr.imaging import CameraFrame

logger = logging.getLogger(__name__)

Progress = namedtuple('Progress', ['fraction', 'completed', 'total'])
Progress.__doc__ = "Partial progress of a running task"
Progress.fraction.__doc__ = "fraction of the work done, in [0, 1]"
Progress.completed.__doc__ = "number of steps done"
Progress.total.__doc__ = "total number of steps"


class TaskState(enum.Enum):
    NOT_STARTED = 0
    RUNNING = 1
    DONE = 2
    CANCELLED = 3


class CancelToken:
    """ Cancellation flag that can be shared between tasks. """

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self):
        return self._cancelled


class ProgressiveTask:
    """ Base class of the resumable tasks.

    Subclasses implement :meth:`start`, :meth:`step` and :meth:`finish`,
    and may extend :meth:`cleanup`.

    Attributes:
        state: the :class:`TaskState`
        result: the value returned by :meth:`finish`, once DONE
        cancel_token: the :class:`CancelToken` checked before each step
        stepping: True while :meth:`start` or :meth:`step` is running
    """

    def __init__(self, cancel_token=None, clock=time.perf_counter):
        self.state = TaskState.NOT_STARTED
        self.result = None
        self.cancel_token = (CancelToken() if cancel_token is None
                             else cancel_token)
        self.clock = clock
        self.completed = 0
        self.stepping = False

    def total_steps(self):
        return 1

    def progress(self):
        total = self.total_steps()
        fraction = min(self.completed/total, 1.0) if total > 0 else 1.0
        return Progress(fraction, self.completed, total)

    def start(self):
        """ prepare the task; called by the first :meth:`advance` """
        pass

    def step(self):
        """ do one unit of work; return True when there is no more to do """
        return True

    def finish(self):
        """ return the result of the completed task """
        return None

    def cleanup(self):
        """ release anything held by the task, after it is done or cancelled
        """
        pass

    def advance(self, time_budget=mc.FRAME_BUDGET):
        """ Run steps until time_budget seconds are spent.

        At least one step is run per call.

        Returns:
            the result if the task completed, a :class:`Progress` if it
            has more to do, or None if it was cancelled
        """
        if self.state == TaskState.DONE:
            return self.result
        if self.state == TaskState.CANCELLED:
            return None

        if self.state == TaskState.NOT_STARTED:
            if self.cancel_token.cancelled:
                self._cancel()
                return None
            self.stepping = True
            try:
                self.start()
            finally:
                self.stepping = False
            self.state = TaskState.RUNNING

        t_start = self.clock()
        while True:
            if self.cancel_token.cancelled:
                self._cancel()
                return None
            self.stepping = True
            try:
                is_last = self.step()
            except Exception:
                self.cleanup()
                self.state = TaskState.CANCELLED
                raise
            finally:
                self.stepping = False
            self.completed += 1
            if is_last:
                try:
                    self.result = self.finish()
                finally:
                    self.cleanup()
                self.state = TaskState.DONE
                return self.result
            if self.clock() - t_start >= time_budget:
                return self.progress()

    def cancel(self):
        """ cancel the task between steps and restore what it changed """
        self.cancel_token.cancel()
        if self.state in (TaskState.NOT_STARTED, TaskState.RUNNING):
            self._cancel()

    def run(self):
        """ run the task to completion and return its result """
        while self.state in (TaskState.NOT_STARTED, TaskState.RUNNING):
            outcome = self.advance(time_budget=np.inf)
            if not isinstance(outcome, Progress):
                return outcome
        return self.result

    def _cancel(self):
        if self.state == TaskState.RUNNING:
            self.cleanup()
        self.state = TaskState.CANCELLED
        logger.info("%s cancelled after %d steps", type(self).__name__,
                    self.completed)


class CameraRender(ProgressiveTask):
    """ Render a camera image one scanline per step.

    The finished :class:`~optibench.raytr.RenderResult` is stored on the
    camera along with the bench solve key it was rendered for.
    """

    def __init__(self, bench, camera, **kwargs):
        super().__init__(**kwargs)
        self.bench = bench
        self.camera = camera
        self.frame = None
        self.fingerprint = None

    def total_steps(self):
        return self.camera.res_y

    def start(self):
        logger.info("progressive render of %s started", self.camera.label)
        self.fingerprint = self.bench.solve_key()
        branches = self.bench.solve()
        self.frame = CameraFrame(self.bench.scene, self.camera, branches,
                                 self.bench.rng(), **self.bench.trace_kwargs())

    def step(self):
        if not self.frame.done:
            self.frame.render_row()
        return self.frame.done

    def finish(self):
        result = self.frame.result(self.bench.max_vis_paths)
        self.camera.last_result = result
        self.camera.fingerprint = self.fingerprint
        logger.info("progressive render of %s done", self.camera.label)
        return result


class PropertySnapshot:
    """ Saved values of a set of component properties.

    Pose properties are saved as the full position or rotation so that
    restoring them is exact.
    """

    def __init__(self, scene, axes):
        self.saved = []
        for axis in axes:
            comp = scene[axis.component_id]
            if comp is None:
                raise ValueError(f"no component with id {axis.component_id}")
            value = get_property(comp, axis.prop)
            self.saved.append((comp, axis.prop, value, comp.position.copy(),
                               comp.rotation.copy()))

    def restore(self):
        for comp, prop, value, position, rotation in reversed(self.saved):
            kind = prop.partition('.')[0]
            if kind == 'position':
                comp.position = position
            elif kind == 'rotation':
                comp.rotation = rotation
            else:
                set_property(comp, prop, value)


def interpolate(start, stop, i, n):
    """ value i of n evenly spaced values from start to stop, inclusive """
    if n < 2:
        return start
    return start + (stop - start)*i/(n - 1)


class ParameterSweep(ProgressiveTask):
    """ Step a set of properties together and evaluate the bench at each step.

    Every :class:`~optibench.elem.detectors.ScanAxis` in `axes` goes
    linearly from its start to its stop value over `steps` steps. At each
    step `evaluate(bench, i)` is called and its return value collected.

    The result is the list of the evaluated values. The original property
    values are restored after every step, and again when the sweep ends,
    however it ends.
    """

    def __init__(self, bench, axes, steps, evaluate, **kwargs):
        super().__init__(**kwargs)
        self.bench = bench
        self.axes = list(axes)
        self.steps = steps
        self.evaluate = evaluate
        self.snapshot = None
        self.values = []

    def total_steps(self):
        return self.steps

    def start(self):
        logger.info("sweep of %d properties over %d steps started",
                    len(self.axes), self.steps)
        self.snapshot = PropertySnapshot(self.bench.scene, self.axes)

    def step(self):
        i = self.completed
        if i >= self.steps:
            return True
        scene = self.bench.scene
        for axis in self.axes:
            set_property(scene[axis.component_id], axis.prop,
                         interpolate(axis.start, axis.stop, i, self.steps))
        try:
            self.values.append(self.evaluate(self.bench, i))
        except Exception as err:
            logger.warning("sweep step %d failed: %s", i, err)
            self.values.append(None)
        finally:
            self.snapshot.restore()
        return i + 1 >= self.steps

    def finish(self):
        logger.info("sweep done")
        return self.values

    def cleanup(self):
        if self.snapshot is not None:
            self.snapshot.restore()
            self.snapshot = None


class RasterScan(ProgressiveTask):
    """ Build a PMT image by scanning its x and y axis properties.

    Each of the scan_res_x by scan_res_y steps sets the two bound
    properties, reruns the forward trace and beam propagation, and records
    the radiance collected by the PMT. Rows advance along y, pixels within
    a row along x.

    The result, a (scan_res_y, scan_res_x) array, is also stored as the
    PMT's `scan_image`.
    """

    def __init__(self, bench, pmt, **kwargs):
        super().__init__(**kwargs)
        if not pmt.has_valid_axes():
            raise ValueError(f"{pmt.label} has no x and y scan axes")
        self.bench = bench
        self.pmt = pmt
        self.image = None
        self.snapshot = None
        self.rng = None

    def total_steps(self):
        return self.pmt.scan_res_x*self.pmt.scan_res_y

    def start(self):
        pmt = self.pmt
        logger.info("raster scan of %s started, %dx%d", pmt.label,
                    pmt.scan_res_x, pmt.scan_res_y)
        pmt.clear_scan()
        self.image = np.zeros((pmt.scan_res_y, pmt.scan_res_x))
        self.snapshot = PropertySnapshot(self.bench.scene,
                                         (pmt.x_axis, pmt.y_axis))
        self.rng = self.bench.rng()

    def step(self):
        pmt = self.pmt
        nx, ny = pmt.scan_res_x, pmt.scan_res_y
        i = self.completed
        if i >= nx*ny:
            return True
        py, px = divmod(i, nx)
        scene = self.bench.scene
        x_axis, y_axis = pmt.x_axis, pmt.y_axis
        set_property(scene[x_axis.component_id], x_axis.prop,
                     interpolate(x_axis.start, x_axis.stop, px, nx))
        set_property(scene[y_axis.component_id], y_axis.prop,
                     interpolate(y_axis.start, y_axis.stop, py, ny))
        try:
            branches = self.bench.solve()
            pixel = self.bench.render_pmt_pixel(pmt, branches=branches,
                                                rng=self.rng)
            self.image[py, px] = pixel.radiance
        except Exception as err:
            logger.warning("%s: scan point (%d, %d) failed: %s", pmt.label,
                           px, py, err)
        finally:
            self.snapshot.restore()
        return i + 1 >= nx*ny

    def finish(self):
        self.pmt.scan_image = self.image
        self.pmt.scan_stale = False
        logger.info("raster scan of %s done", self.pmt.label)
        return self.image

    def cleanup(self):
        if self.snapshot is not None:
            self.snapshot.restore()
            self.snapshot = None
