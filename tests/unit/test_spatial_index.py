"""Tests for the uniform grid spatial index."""

import random
from itertools import combinations

import pytest

from impactcanvas.config import LayoutConfig
from impactcanvas.geometry import Box, Point
from impactcanvas.optimize.spatial_index import SpatialIndex, node_box


class TestNodeBox:
    """Tests for margined card boxes."""

    def test_margin_on_every_side(self):
        """Half the minimum spacing surrounds the card."""
        box = node_box(Point(100, 300), LayoutConfig())
        assert box == Box(75, 275, 425, 469)


class TestSpatialIndex:
    """Tests for SpatialIndex queries."""

    def test_overlapping_matches_brute_force(self):
        """Grid queries agree with checking every pair."""
        rng = random.Random(7)
        boxes = {}
        index = SpatialIndex(cell_size=400)
        for i in range(120):
            x, y = rng.uniform(-2000, 2000), rng.uniform(-2000, 2000)
            box = Box(x, y, x + rng.uniform(10, 600), y + rng.uniform(10, 300))
            boxes[f'n{i}'] = box
            index.insert(f'n{i}', box)

        for _ in range(50):
            x, y = rng.uniform(-2200, 2200), rng.uniform(-2200, 2200)
            query = Box(x, y, x + 350, y + 194)
            expected = {nid for nid, box in boxes.items() if box.intersects(query)}
            assert set(index.overlapping(query)) == expected

    def test_boxes_spanning_several_cells(self):
        """A box wider than a cell is found from any cell it covers."""
        index = SpatialIndex(cell_size=100)
        index.insert('wide', Box(0, 0, 450, 50))
        assert index.overlapping(Box(390, 10, 400, 20)) == ['wide']
        assert index.overlapping(Box(10, 10, 20, 20)) == ['wide']

    def test_touching_is_free(self):
        """Shared edges do not count as overlap."""
        index = SpatialIndex()
        index.insert('a', Box(0, 0, 100, 100))
        assert index.is_free(Box(100, 0, 200, 100))
        assert not index.is_free(Box(99, 0, 200, 100))

    def test_remove_and_reinsert(self):
        """Removed boxes stop blocking; re-inserting moves a box."""
        index = SpatialIndex()
        index.insert('a', Box(0, 0, 100, 100))
        index.remove('a')
        assert index.is_free(Box(0, 0, 100, 100))
        assert 'a' not in index

        index.insert('a', Box(500, 500, 600, 600))
        index.insert('a', Box(0, 0, 10, 10))
        assert len(index) == 1
        assert index.box_of('a') == Box(0, 0, 10, 10)
        assert index.is_free(Box(500, 500, 600, 600))

    def test_exclude(self):
        """Excluded ids are ignored."""
        index = SpatialIndex()
        index.insert('a', Box(0, 0, 100, 100))
        assert index.is_free(Box(10, 10, 20, 20), exclude=['a'])

    def test_from_nodes_skips_excluded(self, forest):
        """Bulk construction honours exclude."""
        nodes = forest([('a', None), ('b', None)], positions={'a': (0, 0), 'b': (1000, 0)})
        index = SpatialIndex.from_nodes(nodes, LayoutConfig(), exclude=['b'])
        assert 'a' in index
        assert 'b' not in index

    def test_invalid_cell_size(self):
        """Cells must have a positive size."""
        with pytest.raises(ValueError):
            SpatialIndex(cell_size=0)

    def test_no_pairwise_overlap_grid(self):
        """A tiled grid of touching boxes reports no overlaps."""
        config = LayoutConfig()
        positions = [Point(i * 350, j * 194) for i in range(4) for j in range(4)]
        boxes = [node_box(p, config) for p in positions]
        assert not any(a.intersects(b) for a, b in combinations(boxes, 2))

    def test_candidates_are_bucket_level(self):
        """Cell candidates include near misses that exact queries drop."""
        index = SpatialIndex(cell_size=400)
        index.insert('a', Box(0, 0, 100, 100))
        query = Box(200, 200, 300, 300)
        assert index.candidates(query) == ['a']
        assert index.overlapping(query) == []

    def test_from_nodes_cell_size_follows_cards(self, forest):
        """Bulk construction sizes cells from the card dimensions."""
        nodes = forest([('a', None)])
        assert SpatialIndex.from_nodes(nodes, LayoutConfig()).cell_size == 1060
        config = LayoutConfig(node_width=600)
        assert SpatialIndex.from_nodes(nodes, config).cell_size == 1960
