# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Incremental re-layout of a single subtree.

"""
Subtree reorganization after drags, reparenting and child insertion.

The tree layout is re-run from one anchor node while every node outside
the subtree stays where it is and acts as an obstacle. Each child first
tries its pure-tree position, then cross-axis offsets of one slot at a
time (0, +1, -1, +2, -2, ...). A child that finds no clear slot within
``reorganize_attempts`` is placed at its pure-tree position anyway and
reported in ``ReorganizeResult.fallback_ids``.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional
import logging

from ..config import LayoutConfig
from ..geometry import Point, snap_to_grid
from ..layout.hierarchical import children_map, child_positions, from_axes, subtree_extents
from ..model import Node, Orientation
from ..store import collect_descendants
from ..visibility import visible_nodes
from .overlap import Placement, find_free_subtree_position, resolve_single
from .spatial_index import SpatialIndex, node_box

logger = logging.getLogger(__name__)


@dataclass
class ReorganizeResult:
    """Updated nodes plus how the placements were obtained."""
    nodes: List[Node]
    anchor: Optional[Placement] = None
    fallback_ids: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        anchor_degraded = self.anchor is not None and self.anchor.degraded
        return anchor_degraded or bool(self.fallback_ids)


def cross_offsets(attempts: int) -> Iterator[int]:
    """0, 1, -1, 2, -2, ... limited to ``attempts`` values."""
    step = 0
    produced = 0
    while produced < attempts:
        if step == 0:
            yield 0
            produced += 1
        else:
            for value in (step, -step):
                if produced >= attempts:
                    return
                yield value
                produced += 1
        step += 1


def translate_subtree(nodes: List[Node], node_id: str, delta: Point) -> List[Node]:
    """Shift a node and all of its descendants (hidden ones too) by ``delta``."""
    by_id = {n.id: n for n in nodes}
    if node_id not in by_id:
        return nodes
    moving = {node_id, *collect_descendants(by_id, node_id)}
    return [n.with_position(n.position + delta) if n.id in moving else n for n in nodes]


def reorganize_subtree(
    nodes: List[Node],
    node_id: str,
    orientation: Orientation = Orientation.HORIZONTAL,
    config: Optional[LayoutConfig] = None
) -> ReorganizeResult:
    """
    Re-layout the visible part of a subtree around its fixed root.

    Args:
        nodes: Full node list.
        node_id: Subtree root; keeps its current position.
        orientation: Growth direction.
        config: Layout constants.

    Returns:
        ReorganizeResult with the full node list; unknown or hidden roots
        return the input unchanged.
    """
    config = config or LayoutConfig()
    by_id = {n.id: n for n in nodes}
    visible = visible_nodes(nodes)
    if node_id not in by_id or node_id not in {n.id for n in visible}:
        return ReorganizeResult(nodes)

    subtree = {node_id, *collect_descendants(by_id, node_id)}
    visible_subtree = [n for n in visible if n.id in subtree]
    children = children_map(visible_subtree)
    extents = subtree_extents(children, [node_id])

    index = SpatialIndex.from_nodes(visible, config, exclude=subtree)
    anchor = by_id[node_id].position
    index.insert(node_id, node_box(anchor, config))

    slot = config.slot_size(orientation)
    positions: Dict[str, Point] = {node_id: anchor}
    fallback_ids: List[str] = []
    stack = [node_id]

    while stack:
        parent_id = stack.pop()
        placed = []
        for child, ideal in child_positions(positions[parent_id], children.get(parent_id, []),
                                            extents, orientation, config):
            ideal = snap_to_grid(ideal, config.grid_size)
            chosen = None
            for k in cross_offsets(config.reorganize_attempts):
                candidate = ideal + from_axes(0.0, k * slot, orientation)
                if index.is_free(node_box(candidate, config)):
                    chosen = candidate
                    break
            if chosen is None:
                logger.debug(f"No clear slot for {child}; keeping tree position {ideal}")
                fallback_ids.append(child)
                chosen = ideal
            positions[child] = chosen
            index.insert(child, node_box(chosen, config))
            placed.append(child)
        stack.extend(reversed(placed))

    updated = [n.with_position(positions[n.id]) if n.id in positions else n for n in nodes]
    return ReorganizeResult(updated, fallback_ids=fallback_ids)


def move_node_with_children(
    nodes: List[Node],
    node_id: str,
    new_position: Point,
    orientation: Orientation = Orientation.HORIZONTAL,
    config: Optional[LayoutConfig] = None
) -> ReorganizeResult:
    """
    Move a node with its whole subtree to a clear spot, then tidy it.

    1. Find a clear anchor near ``new_position`` for the subtree's box.
    2. Translate the node and every descendant by the same delta.
    3. Re-layout the subtree around the anchor (``reorganize_subtree``).
    """
    config = config or LayoutConfig()
    by_id = {n.id: n for n in nodes}
    node = by_id.get(node_id)
    if node is None:
        return ReorganizeResult(nodes)

    anchor = find_free_subtree_position(visible_nodes(nodes), node_id, new_position, config)
    moved = translate_subtree(nodes, node_id, anchor.position - node.position)
    result = reorganize_subtree(moved, node_id, orientation, config)
    result.anchor = anchor
    return result


def handle_branch_drag(
    nodes: List[Node],
    node_id: str,
    new_position: Point,
    orientation: Orientation = Orientation.HORIZONTAL,
    config: Optional[LayoutConfig] = None
) -> ReorganizeResult:
    """
    Drop a dragged card.

    Leaves are pushed clear with ``resolve_single``; cards with children
    move as a branch with ``move_node_with_children``.
    """
    config = config or LayoutConfig()
    target = next((n for n in nodes if n.id == node_id), None)
    if target is None:
        return ReorganizeResult(nodes)

    if target.children:
        return move_node_with_children(nodes, node_id, new_position, orientation, config)

    others = [n for n in visible_nodes(nodes) if n.id != node_id]
    placement = resolve_single(others, target, new_position, config)
    updated = [n.with_position(placement.position) if n.id == node_id else n for n in nodes]
    return ReorganizeResult(updated, anchor=placement)
