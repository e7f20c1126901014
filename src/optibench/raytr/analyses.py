#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Tabulation and listing of traced ray paths

.. Created on Sun Oct 18 15:41:09 2026

.. codeauthor: Michael J. Hayford
"""
import pandas as pd

from optibench.util.spectral_colors import wavelength_to_hex

path_columns = ['x', 'y', 'z', 'l', 'm', 'n', 'dst', 'wvl', 'intensity',
                'opl', 'hit', 'color']


def path_df(path):
    """ return a |DataFrame| with one row per segment of a ray path """
    rows = []
    for r in path:
        p, d = r.origin, r.direction
        rows.append([p[0], p[1], p[2], d[0], d[1], d[2],
                     r.interaction_distance, r.wavelength_nm, r.intensity,
                     r.opl, r.hit_component, wavelength_to_hex(r.wavelength_nm)])
    df = pd.DataFrame(rows, columns=path_columns)
    df.index.names = ['seg']
    return df


def paths_df(paths):
    """ return a |DataFrame| of all the paths, keyed by branch number """
    if len(paths) == 0:
        return pd.DataFrame(columns=path_columns)
    return pd.concat([path_df(p) for p in paths], keys=range(len(paths)),
                     names=['branch'])


def list_path(path):
    """ pretty print a ray path """
    colHeader = "            X            Y            Z           L" \
                "            M            N               Len        I"
    print(colHeader)

    colFormats = "{:3d}: {:12.5f} {:12.5f} {:12.5g} {:12.6f} {:12.6f} " \
                 "{:12.6f} {:>12s} {:8.4g}"

    for i, r in enumerate(path):
        p, d = r.origin, r.direction
        dst = ('inf' if r.interaction_distance is None
               else f"{r.interaction_distance:.5g}")
        print(colFormats.format(i, p[0], p[1], p[2], d[0], d[1], d[2], dst,
                                r.intensity))
