"""Tests for geometry primitives and layout configuration."""

import logging

import pytest

from impactcanvas.config import CONFIG_ENV_VAR, LayoutConfig, load_config
from impactcanvas.geometry import Box, Point, bounding_box, snap_candidates, snap_to_grid
from impactcanvas.model import Orientation


class TestGeometry:
    """Tests for Point, Box and snapping."""

    def test_snap_rounds_half_up(self):
        """Halfway values snap upward, like Math.round."""
        assert snap_to_grid(Point(10, 30), 20) == Point(20, 40)
        assert snap_to_grid(Point(-10, 9.9), 20) == Point(0, 0)
        assert snap_to_grid(Point(103, 207), 20) == Point(100, 200)

    def test_snap_candidates_nearest_first(self):
        """Rounded point first, remaining corners after."""
        candidates = snap_candidates(Point(13, 5), 20)
        assert candidates[0] == Point(20, 0)
        assert set(candidates) == {Point(0, 0), Point(20, 0), Point(0, 20), Point(20, 20)}

    def test_touching_boxes_do_not_intersect(self):
        """Shared edges are not overlap."""
        a = Box(0, 0, 10, 10)
        assert not a.intersects(Box(10, 0, 20, 10))
        assert not a.intersects(Box(0, 10, 10, 20))
        assert a.intersects(Box(9, 9, 20, 20))

    def test_bounding_box(self):
        """Union of several boxes; None for no boxes."""
        box = bounding_box([Box(0, 0, 10, 10), Box(-5, 20, 3, 30)])
        assert box == Box(-5, 0, 10, 30)
        assert box.center == Point(2.5, 15)
        assert bounding_box([]) is None


class TestLayoutConfig:
    """Tests for LayoutConfig and load_config."""

    def test_orientation_helpers(self):
        """Growth and cross sizes swap with orientation."""
        config = LayoutConfig()
        assert config.level_step(Orientation.HORIZONTAL) == 400
        assert config.slot_size(Orientation.HORIZONTAL) == 200
        assert config.level_step(Orientation.VERTICAL) == 240
        assert config.slot_size(Orientation.VERTICAL) == 360
        assert config.root_position(Orientation.VERTICAL) == Point(400, 100)
        assert config.node_margin == 25

    def test_invalid_values_rejected(self):
        """Non-positive sizes raise ValueError."""
        with pytest.raises(ValueError):
            LayoutConfig(node_width=0)
        with pytest.raises(ValueError):
            LayoutConfig(min_zoom=2.0, max_zoom=1.0)

    def test_load_yaml_with_layout_section(self, tmp_path):
        """Values under 'layout:' override defaults; lists become tuples."""
        path = tmp_path / "layout.yaml"
        path.write_text("layout:\n  grid_size: 10\n  far_offset: [500, 0]\n")
        config = load_config(path)
        assert config.grid_size == 10
        assert config.far_offset == (500, 0)
        assert config.node_width == 300

    def test_unknown_keys_warn(self, tmp_path, caplog):
        """Unknown keys are ignored with a warning."""
        path = tmp_path / "layout.yaml"
        path.write_text("tree_gap: 40\nnot_a_setting: 1\n")
        with caplog.at_level(logging.WARNING, logger="impactcanvas.config"):
            config = load_config(path)
        assert config.tree_gap == 40
        assert "not_a_setting" in caplog.text

    def test_non_mapping_rejected(self, tmp_path):
        """A YAML list is not a config."""
        path = tmp_path / "layout.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_env_var_and_defaults(self, tmp_path, monkeypatch):
        """Environment variable is used; otherwise defaults apply."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert load_config() == LayoutConfig()

        path = tmp_path / "custom.yaml"
        path.write_text("cell_size: 800\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().cell_size == 800

    def test_missing_explicit_file(self, tmp_path):
        """An explicit path must exist."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_steps_follow_card_size(self):
        """Unset steps grow with the card and the gap between cards."""
        config = LayoutConfig(min_node_spacing=60)
        assert config.slot_size(Orientation.HORIZONTAL) == 240
        assert config.level_step(Orientation.HORIZONTAL) == 400
        config = LayoutConfig(node_height=200)
        assert config.slot_size(Orientation.HORIZONTAL) == 280
        assert config.level_step(Orientation.VERTICAL) == 300

    def test_explicit_steps_kept(self):
        """Explicit steps win over the derived ones."""
        config = LayoutConfig(horizontal_slot_size=260, vertical_level_step=400)
        assert config.slot_size(Orientation.HORIZONTAL) == 260
        assert config.level_step(Orientation.VERTICAL) == 400

    def test_explicit_step_too_small(self):
        """Steps that would let margined cards overlap are rejected."""
        with pytest.raises(ValueError):
            LayoutConfig(horizontal_slot_size=150)
        with pytest.raises(ValueError):
            LayoutConfig(node_height=200, horizontal_slot_size=200)

    def test_index_cell_size(self):
        """Cells default to three margined cards; an explicit size wins."""
        assert LayoutConfig().index_cell_size() == 1060
        assert LayoutConfig(cell_size=500).index_cell_size() == 500
        with pytest.raises(ValueError):
            LayoutConfig(cell_size=0)

    def test_empty_layout_section(self, tmp_path):
        """A bare 'layout:' key gives the defaults."""
        path = tmp_path / "layout.yaml"
        path.write_text("layout:\n")
        assert load_config(path) == LayoutConfig()

    def test_layout_section_must_be_mapping(self, tmp_path):
        """A list under 'layout:' is rejected."""
        path = tmp_path / "layout.yaml"
        path.write_text("layout: [1, 2]\n")
        with pytest.raises(ValueError):
            load_config(path)
