# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Collapse handling and visible-subset derivation.

"""
Visibility filter for impact trees.

A node is visible when it can be reached from a root without passing
through a collapsed ancestor or an individually hidden child link.
"""

from dataclasses import replace
from typing import Dict, List, Set
import logging

from .model import Edge, Node

logger = logging.getLogger(__name__)


def visible_nodes(nodes: List[Node]) -> List[Node]:
    """
    Visible nodes in depth-first pre-order, roots in input order.

    Roots are nodes without a parent or whose parent is missing.
    """
    by_id: Dict[str, Node] = {n.id: n for n in nodes}
    result: List[Node] = []
    seen: Set[str] = set()

    for root in nodes:
        if root.parent_id is not None and root.parent_id in by_id:
            continue
        stack = [root.id]
        while stack:
            nid = stack.pop()
            if nid in seen or nid not in by_id:
                continue
            seen.add(nid)
            node = by_id[nid]
            result.append(node)
            if node.collapsed:
                continue
            hidden = set(node.hidden_children)
            stack.extend(c for c in reversed(node.children) if c not in hidden)

    return result


def visible_ids(nodes: List[Node]) -> Set[str]:
    return {n.id for n in visible_nodes(nodes)}


def visible_edges(nodes: List[Node], edges: List[Edge]) -> List[Edge]:
    """Edges whose endpoints are both visible."""
    ids = visible_ids(nodes)
    return [e for e in edges if e.from_node_id in ids and e.to_node_id in ids]


def is_hiding_children(node: Node) -> bool:
    """Collapsed, or every child individually hidden."""
    if node.collapsed:
        return True
    return bool(node.children) and set(node.children) <= set(node.hidden_children)


def toggle_collapse(nodes: List[Node], node_id: str) -> List[Node]:
    """
    Flip a node between Expanded and Collapsed.

    Nodes without children and unknown ids return the input unchanged.
    Both transitions clear ``hidden_children``.
    """
    target = next((n for n in nodes if n.id == node_id), None)
    if target is None or not target.children:
        return nodes

    collapsed = not is_hiding_children(target)
    updated = replace(target, collapsed=collapsed, hidden_children=[])
    logger.debug(f"{'Collapsed' if collapsed else 'Expanded'} {node_id}")
    return [updated if n.id == node_id else n for n in nodes]


def toggle_child_visibility(nodes: List[Node], parent_id: str, child_id: str) -> List[Node]:
    """
    Per-child hide/show.

    Kept for data compatibility: ``hidden_children`` is honoured when
    filtering, but toggling a single child is not supported and returns the
    input unchanged. Use ``toggle_collapse`` on the parent.
    """
    logger.debug(f"Per-child visibility toggle ignored for {parent_id} -> {child_id}")
    return nodes
