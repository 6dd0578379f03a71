# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Impact tree layout engine.

"""
Layout and collision avoidance for impact tree canvases.

Cards (objective, outcome, opportunity, solution, assumption, metric,
research) form a forest that is arranged automatically on a 2D canvas:

- visibility: collapse state and the visible subset
- layout: recursive tree layout in horizontal or vertical orientation
- optimize: spatial index, overlap resolution, subtree reorganization
  and viewport fitting
- canvas: user intents (create, delete, drag, reparent, collapse, ...)
- io: tree documents and JSON Lines positions
"""

from . import layout
from . import optimize
from . import io
from .canvas import ImpactCanvas
from .config import LayoutConfig, load_config
from .geometry import Box, Point
from .model import CanvasState, Edge, Node, NodeKind, Orientation
from .store import NodeStore

__version__ = '0.1.0'

__all__ = [
    'layout',
    'optimize',
    'io',
    'ImpactCanvas',
    'LayoutConfig',
    'load_config',
    'Box',
    'Point',
    'CanvasState',
    'Edge',
    'Node',
    'NodeKind',
    'Orientation',
    'NodeStore',
]
