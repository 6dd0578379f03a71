"""Shared fixtures for impact canvas tests."""

from itertools import combinations

import pytest

from impactcanvas.config import LayoutConfig
from impactcanvas.geometry import Point
from impactcanvas.model import Node, NodeKind
from impactcanvas.optimize.spatial_index import node_box


def make_forest(links, positions=None, kinds=None, collapsed=()):
    """
    Build a consistent node list.

    Args:
        links: (id, parent_id) pairs in insertion order; parent None for roots.
        positions: Optional {id: (x, y)}.
        kinds: Optional {id: NodeKind}; default OPPORTUNITY.
        collapsed: Ids to mark collapsed.
    """
    positions = positions or {}
    kinds = kinds or {}
    nodes = {}
    for node_id, parent_id in links:
        nodes[node_id] = Node(
            id=node_id,
            kind=kinds.get(node_id, NodeKind.OPPORTUNITY),
            position=Point(*positions.get(node_id, (0.0, 0.0))),
            parent_id=parent_id,
            collapsed=node_id in collapsed,
        )
        if parent_id is not None:
            nodes[parent_id].children.append(node_id)
    return list(nodes.values())


def overlapping_pairs(nodes, config=None):
    config = config or LayoutConfig()
    return [
        (a.id, b.id) for a, b in combinations(nodes, 2)
        if node_box(a.position, config).intersects(node_box(b.position, config))
    ]


@pytest.fixture
def config():
    return LayoutConfig()


@pytest.fixture
def forest():
    return make_forest


@pytest.fixture
def overlaps():
    return overlapping_pairs
