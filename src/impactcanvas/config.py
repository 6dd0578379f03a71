# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Layout configuration.

Usage:
    from impactcanvas.config import LayoutConfig, load_config

    config = LayoutConfig()                  # built-in defaults
    config = load_config('config/layout.yaml')

    step = config.level_step(Orientation.VERTICAL)

Lookup order when ``load_config()`` is called without a path:
    1. $IMPACTCANVAS_CONFIG
    2. config/layout.yaml (relative to the working directory)
    3. built-in defaults
"""

import math
import os
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
import logging

import yaml

from .geometry import Point
from .model import Orientation

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = 'IMPACTCANVAS_CONFIG'
DEFAULT_CONFIG_PATH = Path('config/layout.yaml')


@dataclass
class LayoutConfig:
    """Every tunable constant of the layout engine."""
    # Card geometry
    node_width: float = 300.0
    node_height: float = 144.0
    min_node_spacing: float = 50.0
    grid_size: float = 20.0

    # Tree layout (per orientation); None derives the value from the card size
    horizontal_level_step: Optional[float] = None
    horizontal_slot_size: Optional[float] = None
    vertical_level_step: Optional[float] = None
    vertical_slot_size: Optional[float] = None
    level_gap: float = 40.0
    horizontal_root: Tuple[float, float] = (100.0, 300.0)
    vertical_root: Tuple[float, float] = (400.0, 100.0)
    tree_gap: float = 80.0

    # Spatial index; None means three margined cards wide
    cell_size: Optional[float] = None

    # Single node push resolution
    push_step: float = 40.0
    max_push_iterations: int = 60

    # Ring search
    ring_step: float = 40.0
    max_rings: int = 25
    fallback_offsets: Tuple[Tuple[float, float], ...] = (
        (1200.0, 0.0), (0.0, 1200.0), (-1200.0, 0.0), (0.0, -1200.0),
    )
    far_offset: Tuple[float, float] = (2000.0, 2000.0)

    # Subtree reorganization
    reorganize_attempts: int = 12

    # Viewport
    default_pan: Tuple[float, float] = (100.0, 100.0)
    reference_viewport: Tuple[float, float] = (800.0, 600.0)
    fit_padding: float = 50.0
    fit_max_zoom: float = 1.0
    min_zoom: float = 0.1
    max_zoom: float = 3.0
    zoom_step: float = 0.1

    def __post_init__(self):
        for name in ('node_width', 'node_height', 'grid_size', 'push_step', 'ring_step'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.cell_size is not None and self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.min_node_spacing < 0 or self.level_gap < 0:
            raise ValueError("min_node_spacing and level_gap must not be negative")

        # Explicit steps must still keep margined cards apart
        minimums = {
            'horizontal_level_step': self.node_width + self.min_node_spacing,
            'horizontal_slot_size': self.node_height + self.min_node_spacing,
            'vertical_level_step': self.node_height + self.min_node_spacing,
            'vertical_slot_size': self.node_width + self.min_node_spacing,
        }
        for name, minimum in minimums.items():
            value = getattr(self, name)
            if value is not None and value < minimum:
                raise ValueError(f"{name} must be at least {minimum} for these card sizes, got {value}")
        if not 0 < self.min_zoom <= self.max_zoom:
            raise ValueError("zoom bounds must satisfy 0 < min_zoom <= max_zoom")
        # YAML yields lists
        self.horizontal_root = tuple(self.horizontal_root)
        self.vertical_root = tuple(self.vertical_root)
        self.fallback_offsets = tuple(tuple(o) for o in self.fallback_offsets)
        self.far_offset = tuple(self.far_offset)
        self.default_pan = tuple(self.default_pan)
        self.reference_viewport = tuple(self.reference_viewport)

    @property
    def node_margin(self) -> float:
        """Half the minimum gap, applied on every side of a card."""
        return self.min_node_spacing / 2

    def _round_up(self, value: float, multiple: float) -> float:
        return math.ceil(value / multiple) * multiple

    def level_step(self, orientation: Orientation) -> float:
        """
        Distance between a parent and its children along the growth axis.

        Unless set explicitly: card length along the growth axis plus
        ``min_node_spacing`` and ``level_gap``, rounded up to the grid.
        """
        if orientation == Orientation.VERTICAL:
            explicit, length = self.vertical_level_step, self.node_height
        else:
            explicit, length = self.horizontal_level_step, self.node_width
        if explicit is not None:
            return explicit
        return self._round_up(length + self.min_node_spacing + self.level_gap, self.grid_size)

    def slot_size(self, orientation: Orientation) -> float:
        """
        Cross-axis size of one extent unit.

        Unless set explicitly: card length across the growth axis plus
        ``min_node_spacing``, rounded up to two grid cells so half slots
        stay on the grid.
        """
        if orientation == Orientation.VERTICAL:
            explicit, length = self.vertical_slot_size, self.node_width
        else:
            explicit, length = self.horizontal_slot_size, self.node_height
        if explicit is not None:
            return explicit
        return self._round_up(length + self.min_node_spacing, 2 * self.grid_size)

    def index_cell_size(self) -> float:
        """Spatial index cell side; defaults to three margined cards."""
        if self.cell_size is not None:
            return self.cell_size
        card = max(self.node_width, self.node_height) + self.min_node_spacing
        return self._round_up(3 * card, self.grid_size)

    def root_position(self, orientation: Orientation) -> Point:
        if orientation == Orientation.VERTICAL:
            return Point(*self.vertical_root)
        return Point(*self.horizontal_root)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _find_config_path() -> Optional[Path]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def load_config(path: Optional[Union[str, Path]] = None) -> LayoutConfig:
    """
    Load a LayoutConfig from YAML, merged over the defaults.

    Args:
        path: YAML file. When omitted the environment variable and the
              default location are tried; if neither exists the defaults
              are returned.

    Returns:
        LayoutConfig instance.

    Raises:
        FileNotFoundError: An explicit path does not exist.
        ValueError: The file is not a mapping or holds invalid values.
    """
    config_path = Path(path) if path else _find_config_path()
    if config_path is None:
        return LayoutConfig()

    with open(config_path, encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a mapping at top level")

    # Accept an optional top-level 'layout:' section
    data = data.get('layout', data)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: 'layout' section must be a mapping")

    known = {f.name for f in fields(LayoutConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {config_path}: {', '.join(unknown)}")

    config = LayoutConfig(**{k: v for k, v in data.items() if k in known})
    logger.debug(f"Loaded layout config from {config_path}")
    return config
