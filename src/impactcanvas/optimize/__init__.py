# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Impact tree layout optimization algorithms.

"""
Passes that refine or constrain node positions:

- Spatial index (grid bucketing of node boxes)
- Overlap resolution (push, ring search, subtree ring search)
- Subtree reorganization (re-layout around a moved node)
- Centering (home view and fit-to-screen pan/zoom)
"""

from .spatial_index import SpatialIndex, node_box
from .overlap import (
    Placement,
    PlacementStatus,
    resolve_single,
    find_free_position,
    find_free_subtree_position,
)
from .reorganize import (
    ReorganizeResult,
    handle_branch_drag,
    move_node_with_children,
    reorganize_subtree,
    translate_subtree,
)
from .centering import home_position, fit_to_screen

__all__ = [
    'SpatialIndex',
    'node_box',
    'Placement',
    'PlacementStatus',
    'resolve_single',
    'find_free_position',
    'find_free_subtree_position',
    'ReorganizeResult',
    'handle_branch_drag',
    'move_node_with_children',
    'reorganize_subtree',
    'translate_subtree',
    'home_position',
    'fit_to_screen',
]
