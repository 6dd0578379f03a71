"""Tests for the NodeStore forest."""

import pytest

from impactcanvas.geometry import Point
from impactcanvas.model import TITLE_PLACEHOLDERS, Node, NodeKind, create_node
from impactcanvas.store import NodeStore, delete_subtree


def _store():
    # r -> a -> (a1, a2); r -> b
    store = NodeStore()
    for nid, parent in [('r', None), ('a', 'r'), ('a1', 'a'), ('a2', 'a'), ('b', 'r')]:
        store.add_node(Node(nid, NodeKind.OPPORTUNITY, parent_id=parent))
    return store


class TestNodeStore:
    """Tests for NodeStore mutators and queries."""

    def test_add_links_parent_and_edge(self):
        """Adding a child updates children and the edge list together."""
        store = _store()
        assert store.get('r').children == ['a', 'b']
        assert store.get('a').children == ['a1', 'a2']
        assert {(e.from_node_id, e.to_node_id) for e in store.edges()} == {
            ('r', 'a'), ('a', 'a1'), ('a', 'a2'), ('r', 'b')
        }
        assert store.validate() == []

    def test_add_with_unknown_parent_becomes_root(self):
        """A missing parent is treated as no parent."""
        store = NodeStore()
        node = store.add_node(Node('x', NodeKind.SOLUTION, parent_id='ghost'))
        assert node.parent_id is None
        assert [n.id for n in store.roots()] == ['x']
        assert store.edges() == []

    def test_duplicate_id_rejected(self):
        """Ids are unique."""
        store = _store()
        with pytest.raises(ValueError):
            store.add_node(Node('a', NodeKind.OUTCOME))

    def test_remove_subtree(self):
        """Deleting removes descendants and every touching edge."""
        store = _store()
        removed = store.remove_subtree('a')
        assert removed == ['a', 'a1', 'a2']
        assert [n.id for n in store.nodes()] == ['r', 'b']
        assert store.get('r').children == ['b']
        assert [(e.from_node_id, e.to_node_id) for e in store.edges()] == [('r', 'b')]
        assert store.validate() == []

    def test_remove_unknown_is_noop(self):
        """Unknown ids change nothing."""
        store = _store()
        assert store.remove_subtree('nope') == []
        assert len(store) == 5

    def test_delete_subtree_returns_inputs_for_unknown(self, forest):
        """The list form returns its inputs when nothing is deleted."""
        nodes = forest([('r', None), ('c', 'r')])
        edges = []
        out_nodes, out_edges = delete_subtree(nodes, edges, 'zzz')
        assert out_nodes is nodes
        assert out_edges is edges

    def test_reparent_moves_link_and_edge(self):
        """Reparenting keeps children, parent and edges in sync."""
        store = _store()
        assert store.reparent('a2', 'b')
        assert store.get('a').children == ['a1']
        assert store.get('b').children == ['a2']
        assert store.get('a2').parent_id == 'b'
        assert store.validate() == []

    def test_reparent_to_root(self):
        """None detaches the node into its own tree."""
        store = _store()
        assert store.reparent('a', None)
        assert [n.id for n in store.roots()] == ['r', 'a']
        assert store.validate() == []

    def test_reparent_rejects_cycles(self):
        """Self, descendants and unknown parents are rejected untouched."""
        store = _store()
        before = [(n.id, n.parent_id, list(n.children)) for n in store.nodes()]
        assert not store.reparent('r', 'a1')
        assert not store.reparent('a', 'a')
        assert not store.reparent('a', 'ghost')
        assert not store.reparent('ghost', 'r')
        assert [(n.id, n.parent_id, list(n.children)) for n in store.nodes()] == before

    def test_update_rejects_structure(self):
        """Structural fields go through reparent."""
        store = _store()
        store.update('a', title='Grow revenue')
        assert store.get('a').title == 'Grow revenue'
        with pytest.raises(ValueError):
            store.update('a', parent_id='b')
        assert store.update('ghost', title='x') is None

    def test_queries(self):
        """Descendants, ancestors and children lookups."""
        store = _store()
        assert store.descendants('r') == ['a', 'a1', 'a2', 'b']
        assert store.ancestors('a2') == ['a', 'r']
        assert [n.id for n in store.children_of('a')] == ['a1', 'a2']
        assert store.is_descendant('r', 'a2')
        assert not store.is_descendant('a', 'b')

    def test_from_lists_copies(self, forest):
        """Stores never share node objects with the caller."""
        nodes = forest([('r', None), ('c', 'r')])
        store = NodeStore.from_lists(nodes)
        store.set_position('c', Point(40, 40))
        assert nodes[1].position == Point(0, 0)

    def test_validate_reports_problems(self):
        """Inconsistent links are reported."""
        store = NodeStore.from_lists([
            Node('p', NodeKind.OUTCOME, children=['c']),
            Node('c', NodeKind.SOLUTION, parent_id='other'),
        ])
        problems = store.validate()
        assert any('does not exist' in p for p in problems)
        assert any('has parent' in p for p in problems)


class TestCreateNode:
    """Tests for model defaults."""

    def test_defaults_from_kind(self):
        """New cards get the kind's title and a kind-prefixed id."""
        node = create_node(NodeKind.ASSUMPTION, test_category='value')
        assert node.title == 'New Assumption Test'
        assert node.id.startswith('assumption-')
        assert node.children == []

    def test_unknown_test_category(self):
        """Only the four test categories are accepted."""
        with pytest.raises(ValueError):
            create_node(NodeKind.ASSUMPTION, test_category='speed')

    def test_kind_parse(self):
        """Kinds parse case-insensitively."""
        assert NodeKind.parse('Outcome') is NodeKind.OUTCOME
        with pytest.raises(ValueError):
            NodeKind.parse('epic')

    def test_placeholders_cover_every_kind(self):
        """Each kind has an example title."""
        assert set(TITLE_PLACEHOLDERS) == set(NodeKind)


class TestStorePositions:
    """Tests for bulk position updates and copies."""

    def test_update_positions_ignores_unknown(self):
        """Known ids move; unknown ids are skipped."""
        store = _store()
        store.update_positions({'a': Point(20, 40), 'ghost': Point(1, 1)})
        assert store.get('a').position == Point(20, 40)
        assert 'ghost' not in store

    def test_copy_is_independent(self):
        """Changes to a copy leave the original store alone."""
        store = _store()
        clone = store.copy()
        clone.remove_subtree('a')
        clone.set_position('b', Point(60, 60))
        assert len(store) == 5
        assert store.get('b').position == Point(0, 0)
