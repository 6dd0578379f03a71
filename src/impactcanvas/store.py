# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# In-memory forest of impact tree cards.

"""
Node store: the forest of cards and the edges mirroring parent links.

Every mutator keeps three views in sync:
    - ``node.parent_id``
    - ``parent.children``
    - the edge list (one edge per parent link)

Unknown ids are no-ops rather than errors.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple
import logging

from .geometry import Point
from .model import Edge, Node, create_edge

logger = logging.getLogger(__name__)


def collect_descendants(nodes_by_id: Mapping[str, Node], node_id: str) -> List[str]:
    """
    Ids of every descendant of ``node_id`` in pre-order.

    Follows ``children`` lists and never visits a node twice, so a corrupt
    cyclic input terminates.
    """
    root = nodes_by_id.get(node_id)
    if root is None:
        return []
    result: List[str] = []
    seen: Set[str] = {node_id}
    stack = list(reversed(root.children))
    while stack:
        nid = stack.pop()
        if nid in seen or nid not in nodes_by_id:
            continue
        seen.add(nid)
        result.append(nid)
        stack.extend(reversed(nodes_by_id[nid].children))
    return result


def delete_subtree(
    nodes: List[Node], edges: List[Edge], node_id: str
) -> Tuple[List[Node], List[Edge]]:
    """
    Remove a node with all descendants and their edges.

    Returns new lists; the inputs are returned unchanged when the id is
    unknown.
    """
    store = NodeStore.from_lists(nodes, edges)
    if not store.remove_subtree(node_id):
        return nodes, edges
    return store.nodes(), store.edges()


class NodeStore:
    """
    Ordered collection of nodes plus the edge list.

    Nodes keep insertion order; roots are reported in that order, which
    makes layout deterministic.
    """

    def __init__(self):
        self._nodes: Dict[str, Node] = {}
        self._edges: List[Edge] = []

    @classmethod
    def from_lists(cls, nodes: Iterable[Node], edges: Iterable[Edge] = ()) -> 'NodeStore':
        """Build a store from existing lists (copied, not shared)."""
        store = cls()
        for node in nodes:
            store._nodes[node.id] = node.copy()
        store._edges = list(edges)
        return store

    def copy(self) -> 'NodeStore':
        return NodeStore.from_lists(self._nodes.values(), self._edges)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def edges(self) -> List[Edge]:
        return list(self._edges)

    def by_id(self) -> Dict[str, Node]:
        return dict(self._nodes)

    def roots(self) -> List[Node]:
        return [n for n in self._nodes.values()
                if n.parent_id is None or n.parent_id not in self._nodes]

    def children_of(self, node_id: str) -> List[Node]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [self._nodes[c] for c in node.children if c in self._nodes]

    def descendants(self, node_id: str) -> List[str]:
        return collect_descendants(self._nodes, node_id)

    def ancestors(self, node_id: str) -> List[str]:
        """Parent chain from the direct parent up to the root."""
        result: List[str] = []
        seen = {node_id}
        node = self._nodes.get(node_id)
        while node is not None and node.parent_id is not None:
            if node.parent_id in seen:
                break
            seen.add(node.parent_id)
            result.append(node.parent_id)
            node = self._nodes.get(node.parent_id)
        return result

    def is_descendant(self, ancestor_id: str, candidate_id: str) -> bool:
        return candidate_id in set(self.descendants(ancestor_id))

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> Node:
        """
        Insert a node, linking it under ``node.parent_id`` when that exists.

        A missing parent turns the node into a root.
        """
        node = node.copy()
        if node.id in self._nodes:
            raise ValueError(f"Duplicate node id: {node.id}")
        parent = self._nodes.get(node.parent_id) if node.parent_id else None
        if node.parent_id is not None and parent is None:
            logger.debug(f"Parent {node.parent_id} not found; adding {node.id} as root")
            node.parent_id = None
        self._nodes[node.id] = node
        if parent is not None:
            self._link(parent.id, node.id)
        return node

    def remove_subtree(self, node_id: str) -> List[str]:
        """Delete a node, its descendants and every touching edge."""
        node = self._nodes.get(node_id)
        if node is None:
            return []
        removed = [node_id] + self.descendants(node_id)
        removed_set = set(removed)
        if node.parent_id in self._nodes:
            parent = self._nodes[node.parent_id]
            parent.children = [c for c in parent.children if c != node_id]
            parent.hidden_children = [c for c in parent.hidden_children if c != node_id]
        for nid in removed:
            del self._nodes[nid]
        self._edges = [
            e for e in self._edges
            if e.from_node_id not in removed_set and e.to_node_id not in removed_set
        ]
        return removed

    def can_reparent(self, node_id: str, new_parent_id: Optional[str]) -> bool:
        """True when attaching ``node_id`` under ``new_parent_id`` keeps a forest."""
        if node_id not in self._nodes:
            return False
        if new_parent_id is None:
            return True
        if new_parent_id == node_id or new_parent_id not in self._nodes:
            return False
        return not self.is_descendant(node_id, new_parent_id)

    def reparent(self, node_id: str, new_parent_id: Optional[str]) -> bool:
        """
        Move ``node_id`` under ``new_parent_id`` (None makes it a root).

        Only structure changes; positions are left to the layout engine.

        Returns:
            False, leaving the store untouched, when the node or parent is
            unknown or the move would create a cycle.
        """
        if not self.can_reparent(node_id, new_parent_id):
            logger.debug(f"Rejected reparent of {node_id} under {new_parent_id}")
            return False
        self._unlink(node_id)
        node = self._nodes[node_id]
        node.parent_id = new_parent_id
        if new_parent_id is not None:
            self._link(new_parent_id, node_id)
        return True

    def update(self, node_id: str, **changes) -> Optional[Node]:
        """Change non-structural fields; structure goes through reparent."""
        node = self._nodes.get(node_id)
        if node is None:
            return None
        forbidden = {'id', 'parent_id', 'children'} & set(changes)
        if forbidden:
            raise ValueError(f"Structural fields cannot be updated directly: {sorted(forbidden)}")
        for key, value in changes.items():
            if not hasattr(node, key):
                raise ValueError(f"Unknown node field: {key}")
            setattr(node, key, value)
        return node

    def set_position(self, node_id: str, position: Point) -> None:
        node = self._nodes.get(node_id)
        if node is not None:
            node.position = position

    def update_positions(self, positions: Mapping[str, Point]) -> None:
        for nid, pos in positions.items():
            self.set_position(nid, pos)

    def replace_nodes(self, nodes: Iterable[Node]) -> None:
        """Swap in updated copies of known nodes (e.g. an engine result)."""
        for node in nodes:
            if node.id in self._nodes:
                self._nodes[node.id] = node.copy()

    def _link(self, parent_id: str, child_id: str) -> None:
        parent = self._nodes[parent_id]
        if child_id not in parent.children:
            parent.children.append(child_id)
        self._edges.append(create_edge(parent_id, child_id))

    def _unlink(self, node_id: str) -> None:
        node = self._nodes[node_id]
        old_parent = self._nodes.get(node.parent_id) if node.parent_id else None
        if old_parent is not None:
            old_parent.children = [c for c in old_parent.children if c != node_id]
            old_parent.hidden_children = [c for c in old_parent.hidden_children if c != node_id]
        self._edges = [e for e in self._edges if e.to_node_id != node_id]
        node.parent_id = None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> List[str]:
        """
        Check the forest invariants.

        Returns:
            Human-readable problems; empty when the store is consistent.
        """
        problems: List[str] = []
        nodes = self._nodes

        for node in nodes.values():
            if node.parent_id is not None:
                parent = nodes.get(node.parent_id)
                if parent is None:
                    problems.append(f"{node.id}: parent {node.parent_id} does not exist")
                elif node.id not in parent.children:
                    problems.append(f"{node.id}: missing from children of {parent.id}")
            for child_id in node.children:
                child = nodes.get(child_id)
                if child is None:
                    problems.append(f"{node.id}: child {child_id} does not exist")
                elif child.parent_id != node.id:
                    problems.append(f"{node.id}: child {child_id} has parent {child.parent_id}")
            if len(set(node.children)) != len(node.children):
                problems.append(f"{node.id}: duplicate children")

        for node_id in nodes:
            seen = {node_id}
            current = nodes[node_id].parent_id
            while current is not None and current in nodes:
                if current in seen:
                    problems.append(f"{node_id}: parent chain contains a cycle")
                    break
                seen.add(current)
                current = nodes[current].parent_id

        links = {(n.parent_id, n.id) for n in nodes.values() if n.parent_id in nodes}
        edge_links: Dict[Tuple[str, str], int] = {}
        for edge in self._edges:
            key = (edge.from_node_id, edge.to_node_id)
            edge_links[key] = edge_links.get(key, 0) + 1
        for key, count in edge_links.items():
            if key not in links:
                problems.append(f"edge {key[0]} -> {key[1]} has no parent link")
            elif count > 1:
                problems.append(f"edge {key[0]} -> {key[1]} is duplicated")
        for key in sorted(links - set(edge_links)):
            problems.append(f"parent link {key[0]} -> {key[1]} has no edge")

        return problems
