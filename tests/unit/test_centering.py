"""Tests for viewport pan/zoom computation."""

import pytest

from impactcanvas.config import LayoutConfig
from impactcanvas.geometry import Point
from impactcanvas.model import CanvasState, Node, NodeKind, Orientation
from impactcanvas.optimize.centering import (
    content_box,
    fit_to_screen,
    home_position,
    pan_by,
    zoom_in,
    zoom_out,
)


def _outcome(node_id, x, y):
    return Node(node_id, NodeKind.OUTCOME, Point(x, y))


class TestFitToScreen:
    """Tests for fit_to_screen."""

    def test_fit_caps_zoom_at_one(self):
        """Content that fits at 100% is centred without magnifying."""
        nodes = [_outcome('a', 0, 0), _outcome('b', 500, 456)]
        state = fit_to_screen(nodes, 1000, 800)
        assert state.zoom == 1.0
        assert state.pan == Point(100, 100)

    def test_fit_scales_up_when_allowed(self):
        """A higher cap lets the content grow to the padded viewport."""
        config = LayoutConfig(fit_max_zoom=2.0)
        nodes = [_outcome('a', 0, 0), _outcome('b', 500, 456)]
        state = fit_to_screen(nodes, 1000, 800, config)
        assert state.zoom == pytest.approx(1.125)
        assert state.pan.x == pytest.approx(50)
        assert state.pan.y == pytest.approx(62.5)

    def test_fit_clamps_to_min_zoom(self):
        """Tiny viewports never go below the minimum zoom."""
        state = fit_to_screen([_outcome('a', 0, 0), _outcome('b', 500, 456)], 100, 100)
        assert state.zoom == 0.1
        assert state.pan == Point(pytest.approx(10), pytest.approx(20))

    def test_fit_keeps_orientation(self):
        """Only zoom and pan change."""
        state = CanvasState(orientation=Orientation.VERTICAL)
        result = fit_to_screen([_outcome('a', 0, 0)], 1000, 800, state=state)
        assert result.orientation == Orientation.VERTICAL

    def test_empty_falls_back_to_home(self):
        """No content: default home view."""
        state = fit_to_screen([], 1000, 800)
        assert state.zoom == 1.0
        assert state.pan == Point(100, 100)

    def test_content_box(self):
        """Card extent is included."""
        box = content_box([_outcome('a', -100, 50)], LayoutConfig())
        assert box.as_tuple() == (-100, 50, 200, 194)
        assert content_box([], LayoutConfig()) is None


class TestHomePosition:
    """Tests for home_position."""

    def test_centres_top_left_outcome(self):
        """The outcome with the smallest x + y is centred in 800x600."""
        nodes = [
            Node('obj', NodeKind.OBJECTIVE, Point(0, 0)),
            _outcome('first', 200, 100),
            _outcome('second', 100, 400),
        ]
        state = home_position(nodes)
        assert state.zoom == 1.0
        assert state.pan == Point(50, 128)

    def test_tie_keeps_list_order(self):
        """Equal sums pick the earlier card."""
        state = home_position([_outcome('a', 100, 0), _outcome('b', 0, 100)])
        assert state.pan == Point(400 - 250, 300 - 72)

    def test_without_outcomes(self):
        """Default pan, zoom reset, orientation kept."""
        current = CanvasState(zoom=2.5, pan=Point(3, 4), orientation=Orientation.VERTICAL)
        state = home_position([Node('s', NodeKind.SOLUTION)], state=current)
        assert state == CanvasState(zoom=1.0, pan=Point(100, 100),
                                    orientation=Orientation.VERTICAL)


class TestZoom:
    """Tests for zoom stepping and panning."""

    def test_zoom_steps(self):
        """Zoom moves by the configured step."""
        assert zoom_in(CanvasState()).zoom == 1.1
        assert zoom_out(CanvasState()).zoom == 0.9

    def test_zoom_clamped(self):
        """Zoom stays within the configured bounds."""
        assert zoom_in(CanvasState(zoom=3.0)).zoom == 3.0
        assert zoom_out(CanvasState(zoom=0.1)).zoom == 0.1

    def test_pan_by(self):
        """Panning offsets the current pan."""
        assert pan_by(CanvasState(), 10, -5).pan == Point(10, -5)
