# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Viewport pan/zoom fitting.

"""
Pan and zoom computation for the canvas viewport.

Unlike a layout pass these functions never move cards; they return the
canvas transform (``zoom``, ``pan``) under which the forest is centred or
fitted inside a viewport. A card at ``p`` appears on screen at
``p * zoom + pan``.
"""

from dataclasses import replace
from typing import List, Optional

import numpy as np

from ..config import LayoutConfig
from ..geometry import Box, Point
from ..model import CanvasState, Node, NodeKind


def content_box(nodes: List[Node], config: LayoutConfig) -> Optional[Box]:
    """Bounding box of the cards (without margins), or None when empty."""
    if not nodes:
        return None
    pos = np.array([[n.position.x, n.position.y] for n in nodes], dtype=float)
    min_x, min_y = pos.min(axis=0)
    max_x, max_y = pos.max(axis=0)
    return Box(float(min_x), float(min_y),
               float(max_x) + config.node_width, float(max_y) + config.node_height)


def home_position(
    nodes: List[Node],
    config: Optional[LayoutConfig] = None,
    state: Optional[CanvasState] = None
) -> CanvasState:
    """
    Centre the top-left-most outcome card in the reference viewport at zoom 1.

    Args:
        nodes: Visible cards.
        config: Layout constants (reference viewport, default pan).
        state: Current canvas state; its orientation is preserved.

    Returns:
        New CanvasState. Without outcome cards the default pan is used.
    """
    config = config or LayoutConfig()
    state = state or CanvasState()
    default = replace(state, zoom=1.0, pan=Point(*config.default_pan))

    outcomes = [n for n in nodes if n.kind == NodeKind.OUTCOME]
    if not outcomes:
        return default

    # Ties keep the first card in list order
    top_left = min(outcomes, key=lambda n: n.position.x + n.position.y)
    center_x = top_left.position.x + config.node_width / 2
    center_y = top_left.position.y + config.node_height / 2
    ref_w, ref_h = config.reference_viewport
    return replace(state, zoom=1.0, pan=Point(ref_w / 2 - center_x, ref_h / 2 - center_y))


def fit_to_screen(
    nodes: List[Node],
    viewport_width: float,
    viewport_height: float,
    config: Optional[LayoutConfig] = None,
    state: Optional[CanvasState] = None
) -> CanvasState:
    """
    Scale and centre the forest inside a viewport.

    zoom = clamp(min(scale_x, scale_y, fit_max_zoom), min_zoom) where the
    scales fit the content box plus padding on each side. Empty or
    zero-area content falls back to ``home_position``.
    """
    config = config or LayoutConfig()
    state = state or CanvasState()

    box = content_box(nodes, config)
    if box is None or box.width <= 0 or box.height <= 0:
        return home_position(nodes, config, state)

    padding = config.fit_padding
    scale_x = (viewport_width - padding * 2) / box.width
    scale_y = (viewport_height - padding * 2) / box.height
    zoom = max(min(scale_x, scale_y, config.fit_max_zoom), config.min_zoom)

    pan = Point(
        (viewport_width - box.width * zoom) / 2 - box.left * zoom,
        (viewport_height - box.height * zoom) / 2 - box.top * zoom,
    )
    return replace(state, zoom=zoom, pan=pan)


def _clamp_zoom(zoom: float, config: LayoutConfig) -> float:
    return min(max(zoom, config.min_zoom), config.max_zoom)


def zoom_in(state: CanvasState, config: Optional[LayoutConfig] = None) -> CanvasState:
    config = config or LayoutConfig()
    return replace(state, zoom=round(_clamp_zoom(state.zoom + config.zoom_step, config), 6))


def zoom_out(state: CanvasState, config: Optional[LayoutConfig] = None) -> CanvasState:
    config = config or LayoutConfig()
    return replace(state, zoom=round(_clamp_zoom(state.zoom - config.zoom_step, config), 6))


def pan_by(state: CanvasState, dx: float, dy: float) -> CanvasState:
    return replace(state, pan=state.pan + Point(dx, dy))
