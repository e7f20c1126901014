#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Uniform access to the animatable properties of components

    A property is named by a path string:

        - 'position.x', 'position.y', 'position.z'
        - 'rotation.x', 'rotation.y', 'rotation.z': XYZ Euler angles, in
          radians, of the component's rotation quaternion
        - any numeric attribute, e.g. 'scan_x' or 'spectral_profile.cutoff'

.. Created on Tue Oct 13 15:02:44 2026

.. codeauthor: Michael J. Hayford
"""
import numpy as np

from optibench.util.misc_math import euler2quat, quat2euler

axis_index = {'x': 0, 'y': 1, 'z': 2}


def _pose_axis(path):
    kind, _, axis = path.partition('.')
    if kind in ('position', 'rotation') and axis in axis_index:
        return kind, axis_index[axis]
    return None, None


def _resolve(comp, path):
    """ return (owner, attr_name) for a dotted attribute path """
    owner = comp
    *parents, attr_name = path.split('.')
    try:
        for name in parents:
            owner = getattr(owner, name)
        value = getattr(owner, attr_name)
    except AttributeError:
        raise ValueError(f"{comp.label} has no property '{path}'")
    if isinstance(value, bool) or not isinstance(value, (int, float,
                                                         np.number)):
        raise ValueError(f"property '{path}' of {comp.label} is not a "
                         f"number")
    return owner, attr_name


def get_property(comp, path):
    """ current value of the property at path

    Raises:
        ValueError: if comp has no numeric property at path
    """
    kind, i = _pose_axis(path)
    if kind == 'position':
        return float(comp.position[i])
    elif kind == 'rotation':
        return float(quat2euler(comp.rotation)[i])
    owner, attr_name = _resolve(comp, path)
    return getattr(owner, attr_name)


def set_property(comp, path, value):
    """ set the property at path and mark the component as changed

    Components with derived state get their `recalculate()` called.

    Raises:
        ValueError: if comp has no numeric property at path
    """
    kind, i = _pose_axis(path)
    if kind == 'position':
        pos = comp.position.copy()
        pos[i] = value
        comp.position = pos
    elif kind == 'rotation':
        euler = quat2euler(comp.rotation)
        euler[i] = value
        comp.rotation = euler2quat(*euler)
    else:
        owner, attr_name = _resolve(comp, path)
        if isinstance(getattr(owner, attr_name), (int, np.integer)):
            value = int(round(value))
        setattr(owner, attr_name, value)

    if hasattr(comp, 'recalculate'):
        comp.recalculate()
    comp.version += 1
