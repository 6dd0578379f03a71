# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Impact tree layout algorithms.

"""
Layout algorithms for impact tree canvases.

Provides the hierarchical tree layout used for full re-layouts and the
building blocks (extents, child placement) reused by subtree
reorganization.
"""

from .hierarchical import (
    hierarchical,
    layout_nodes,
    layout_subtree,
    subtree_extents,
    child_positions,
)

__all__ = [
    'hierarchical',
    'layout_nodes',
    'layout_subtree',
    'subtree_extents',
    'child_positions',
]
