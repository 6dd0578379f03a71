# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Hierarchical (tree) layout algorithm for impact trees.

"""
Hierarchical layout arranging each tree of the visible forest.

Children sit one level step from their parent along the growth axis
(x when horizontal, y when vertical). Along the cross axis each child
subtree owns a contiguous band sized by its extent, the number of leaf
slots below it, and the parent is centred on the bands of its children.

Both passes use explicit stacks: extents are computed post-order and
positions assigned pre-order, so deep trees do not hit the recursion
limit.
"""

from typing import Dict, List, Optional, Tuple

from ..config import LayoutConfig
from ..geometry import Point, snap_to_grid
from ..model import Node, Orientation
from ..visibility import visible_nodes


def to_axes(point: Point, orientation: Orientation) -> Tuple[float, float]:
    """Split a point into (growth, cross) coordinates."""
    if orientation == Orientation.VERTICAL:
        return point.y, point.x
    return point.x, point.y


def from_axes(growth: float, cross: float, orientation: Orientation) -> Point:
    if orientation == Orientation.VERTICAL:
        return Point(cross, growth)
    return Point(growth, cross)


def children_map(nodes: List[Node]) -> Dict[str, List[str]]:
    """
    Visible child lists of a visible forest.

    Collapsed nodes, individually hidden children and children outside the
    given list are dropped.
    """
    by_id = {n.id: n for n in nodes}
    result: Dict[str, List[str]] = {}
    for node in nodes:
        if node.collapsed:
            result[node.id] = []
            continue
        hidden = set(node.hidden_children)
        result[node.id] = [
            c for c in node.children
            if c in by_id and c not in hidden and by_id[c].parent_id == node.id
        ]
    return result


def find_roots(nodes: List[Node]) -> List[str]:
    """Nodes whose parent is absent from the forest, in input order."""
    ids = {n.id for n in nodes}
    return [n.id for n in nodes if n.parent_id is None or n.parent_id not in ids]


def subtree_extents(children: Dict[str, List[str]], roots: List[str]) -> Dict[str, int]:
    """
    Cross-axis slot count of every subtree reachable from ``roots``.

    A leaf is 1; an inner node is the sum of its children's extents.
    """
    extents: Dict[str, int] = {}
    seen = set()
    for root in roots:
        if root in seen:
            continue
        seen.add(root)
        stack: List[Tuple[str, bool]] = [(root, False)]
        while stack:
            nid, done = stack.pop()
            if done:
                total = sum(extents.get(c, 0) for c in children.get(nid, []))
                extents[nid] = max(1, total)
                continue
            stack.append((nid, True))
            for child in reversed(children.get(nid, [])):
                if child not in seen:
                    seen.add(child)
                    stack.append((child, False))
    return extents


def child_positions(
    parent_position: Point,
    child_ids: List[str],
    extents: Dict[str, int],
    orientation: Orientation,
    config: LayoutConfig
) -> List[Tuple[str, Point]]:
    """
    Pure-tree positions of a parent's children.

    Returns:
        (child_id, position) pairs in child order.
    """
    if not child_ids:
        return []
    slot = config.slot_size(orientation)
    growth, cross = to_axes(parent_position, orientation)
    child_growth = growth + config.level_step(orientation)
    total = sum(extents.get(c, 1) for c in child_ids)

    placed = []
    offset = 0
    for child in child_ids:
        extent = extents.get(child, 1)
        child_cross = cross + (offset + extent / 2 - total / 2) * slot
        placed.append((child, from_axes(child_growth, child_cross, orientation)))
        offset += extent
    return placed


def layout_subtree(
    root_id: str,
    root_position: Point,
    children: Dict[str, List[str]],
    extents: Dict[str, int],
    orientation: Orientation,
    config: LayoutConfig
) -> Dict[str, Point]:
    """Position a subtree with its root pinned at ``root_position``."""
    positions: Dict[str, Point] = {root_id: root_position}
    stack = [root_id]
    while stack:
        nid = stack.pop()
        placed = child_positions(positions[nid], children.get(nid, []),
                                 extents, orientation, config)
        fresh = [(child, pos) for child, pos in placed if child not in positions]
        for child, pos in fresh:
            positions[child] = pos
        stack.extend(child for child, _ in reversed(fresh))
    return positions


def hierarchical(
    nodes: List[Node],
    orientation: Orientation = Orientation.HORIZONTAL,
    config: Optional[LayoutConfig] = None
) -> Dict[str, Point]:
    """
    Compute positions for a visible forest.

    Args:
        nodes: The visible forest (see ``visibility.visible_nodes``).
        orientation: Growth direction.
        config: Layout constants; defaults when omitted.

    Returns:
        Dictionary mapping node IDs to grid-aligned positions. The result
        depends only on the arguments.
    """
    config = config or LayoutConfig()
    if not nodes:
        return {}

    children = children_map(nodes)
    roots = find_roots(nodes)
    extents = subtree_extents(children, roots)
    slot = config.slot_size(orientation)

    positions: Dict[str, Point] = {}
    root_growth, cross = to_axes(config.root_position(orientation), orientation)
    previous_extent: Optional[int] = None

    for root in roots:
        extent = extents.get(root, 1)
        if previous_extent is not None:
            cross += (previous_extent + extent) * slot / 2 + config.tree_gap
        tree = layout_subtree(root, from_axes(root_growth, cross, orientation),
                              children, extents, orientation, config)
        for nid, pos in tree.items():
            positions.setdefault(nid, snap_to_grid(pos, config.grid_size))
        previous_extent = extent

    return positions


def layout_nodes(
    nodes: List[Node],
    orientation: Orientation = Orientation.HORIZONTAL,
    config: Optional[LayoutConfig] = None
) -> List[Node]:
    """
    Re-layout every visible node of a full node list.

    Hidden nodes keep their stored positions.
    """
    positions = hierarchical(visible_nodes(nodes), orientation, config)
    return [n.with_position(positions[n.id]) if n.id in positions else n for n in nodes]
