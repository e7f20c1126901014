#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright © 2026 Michael J. Hayford
""" Arena of the components on an optical bench

.. Created on Tue Oct 13 14:20:36 2026

.. codeauthor: Michael J. Hayford
"""
import logging

logger = logging.getLogger(__name__)


class Scene:
    """ Maintain the components of the bench, indexed by stable integer ids.

    Ids are handed out in insertion order and never reused, so a component
    keeps its id for the life of the scene. Iteration follows insertion
    order.

    Attributes:
        components: dict of id: component
    """

    def __init__(self, components=None):
        self.components = {}
        self._next_id = 0
        if components is not None:
            for comp in components:
                self.add(comp)

    def __len__(self):
        return len(self.components)

    def __iter__(self):
        return iter(self.components.values())

    def __contains__(self, comp_id):
        return comp_id in self.components

    def __getitem__(self, comp_id):
        """ the component with comp_id; None if there isn't one """
        return self.components.get(comp_id)

    def listobj_str(self):
        o_str = f"{type(self).__name__}: {len(self)} components\n"
        for comp_id, comp in self.components.items():
            o_str += f"{comp_id}: {comp}\n"
        return o_str

    def add(self, comp):
        """ add comp to the scene and return its id """
        comp_id = self._next_id
        self._next_id += 1
        comp.id = comp_id
        self.components[comp_id] = comp
        logger.debug("added %s as %d", comp.label, comp_id)
        return comp_id

    def remove(self, comp_id):
        comp = self.components.pop(comp_id)
        comp.id = None
        return comp

    def find(self, comp_type):
        """ the first component that is an instance of comp_type, or None """
        return next((c for c in self if isinstance(c, comp_type)), None)

    def find_all(self, comp_type):
        return [c for c in self if isinstance(c, comp_type)]

    def find_by_label(self, label):
        return next((c for c in self if c.label == label), None)

    def fingerprint(self):
        """ tuple identifying the current state of every component """
        return tuple((comp_id, comp.version)
                     for comp_id, comp in self.components.items())
