# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Impact tree canvas: user intents mapped onto the layout engine.

Usage:
    from impactcanvas.canvas import ImpactCanvas

    canvas = ImpactCanvas(on_change=lambda snapshot, hint: store.save(snapshot))
    root = canvas.create_node('outcome')
    child = canvas.create_node('opportunity', parent_id=root.id)
    canvas.move_node(child.id, Point(900, 300))
    canvas.toggle_collapse(root.id)
    view = canvas.fit_to_screen(1280, 720)

Every mutating call updates the node store first, then positions, and
finally notifies listeners once with a full snapshot and an activity hint.
Listeners are the persistence seam; the canvas never waits on them.
"""

from dataclasses import replace
from functools import partial
from typing import Callable, List, Optional
import logging

from .config import LayoutConfig
from .geometry import Point, snap_to_grid
from .io import TreeSnapshot
from .layout.hierarchical import from_axes, layout_nodes, to_axes
from .model import CanvasState, Edge, Node, NodeKind, Orientation, create_node
from .optimize.centering import fit_to_screen, home_position, zoom_in, zoom_out
from .optimize.overlap import Placement, find_free_position
from .optimize.reorganize import (
    ReorganizeResult,
    handle_branch_drag,
    move_node_with_children,
    reorganize_subtree,
)
from .scheduler import FrameScheduler
from .store import NodeStore
from . import visibility

logger = logging.getLogger(__name__)

ChangeListener = Callable[[TreeSnapshot, str], None]


class ImpactCanvas:
    """
    One editable impact tree with its canvas state.

    Attributes:
        store: The node store (single writer: this canvas).
        state: Current pan, zoom and orientation.
        config: Layout constants.
        last_placement: Outcome of the most recent placement search, so
            callers can report degraded placements.
    """

    def __init__(
        self,
        snapshot: Optional[TreeSnapshot] = None,
        config: Optional[LayoutConfig] = None,
        scheduler: Optional[FrameScheduler] = None,
        on_change: Optional[ChangeListener] = None
    ):
        snapshot = snapshot or TreeSnapshot()
        self.config = config or LayoutConfig()
        self.store = NodeStore.from_lists(snapshot.nodes, snapshot.edges)
        self.state = replace(snapshot.canvas_state)
        self.scheduler = scheduler
        self.last_placement: Optional[Placement] = None
        self.last_result: Optional[ReorganizeResult] = None
        self._listeners: List[ChangeListener] = [on_change] if on_change else []

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def orientation(self) -> Orientation:
        return self.state.orientation

    def snapshot(self) -> TreeSnapshot:
        return TreeSnapshot(
            nodes=[n.copy() for n in self.store.nodes()],
            edges=self.store.edges(),
            canvas_state=replace(self.state),
        )

    def visible_nodes(self) -> List[Node]:
        return visibility.visible_nodes(self.store.nodes())

    def visible_edges(self) -> List[Edge]:
        return visibility.visible_edges(self.store.nodes(), self.store.edges())

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _changed(self, hint: str) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot, hint)

    def _apply(self, result: ReorganizeResult) -> None:
        self.store.replace_nodes(result.nodes)
        self.last_result = result
        if result.anchor is not None:
            self.last_placement = result.anchor
        if result.fallback_ids:
            logger.info(f"Placed {len(result.fallback_ids)} node(s) without a clear slot")

    # ------------------------------------------------------------------
    # Placement helpers
    # ------------------------------------------------------------------

    def _desired_position(self, parent: Optional[Node], skip: str = "") -> Point:
        """Where a new child of ``parent`` would ideally go."""
        o = self.orientation
        if parent is None:
            return self.config.root_position(o)
        growth, cross = to_axes(parent.position, o)
        shown = {n.id for n in self.visible_nodes()}
        crosses = [
            to_axes(child.position, o)[1]
            for child in self.store.children_of(parent.id)
            if child.id in shown and child.id != skip
        ]
        if crosses:
            cross = max(crosses) + self.config.slot_size(o)
        return from_axes(growth + self.config.level_step(o), cross, o)

    def _expand(self, node: Node) -> None:
        if node.collapsed or node.hidden_children:
            self.store.update(node.id, collapsed=False, hidden_children=[])

    # ------------------------------------------------------------------
    # Node intents
    # ------------------------------------------------------------------

    def create_node(
        self,
        kind,
        parent_id: Optional[str] = None,
        position: Optional[Point] = None,
        test_category: Optional[str] = None
    ) -> Optional[Node]:
        """
        Add a card, optionally under ``parent_id``.

        Without an explicit position the card goes one level past the
        parent, after its last visible child, moved to the nearest clear
        spot. When the parent already had children its subtree is
        reorganized afterwards.

        Returns:
            The stored node, or None when ``parent_id`` is unknown.
        """
        kind = NodeKind.parse(kind)
        parent = self.store.get(parent_id) if parent_id is not None else None
        if parent_id is not None and parent is None:
            logger.debug(f"Cannot create child of unknown node {parent_id}")
            return None

        had_children = False
        if parent is not None:
            self._expand(parent)
            had_children = bool(parent.children)

        if position is None:
            placement = find_free_position(self.visible_nodes(), self._desired_position(parent),
                                           self.config)
            self.last_placement = placement
            position = placement.position
        else:
            position = snap_to_grid(position, self.config.grid_size)

        node = self.store.add_node(create_node(kind, position, parent_id, test_category))
        if parent is not None and had_children:
            self._apply(reorganize_subtree(self.store.nodes(), parent.id,
                                           self.orientation, self.config))

        logger.debug(f"Created {node.id} under {parent_id}")
        self._changed("node_created")
        return self.store.get(node.id)

    def update_node(self, node_id: str, **changes) -> Optional[Node]:
        """Edit title, description and other non-structural fields."""
        if 'position' in changes:
            raise ValueError("Positions change through move_node")
        node = self.store.update(node_id, **changes)
        if node is not None:
            self._changed("node_updated")
        return node

    def delete_node(self, node_id: str) -> bool:
        """Delete a card with its whole subtree."""
        removed = self.store.remove_subtree(node_id)
        if not removed:
            return False
        logger.debug(f"Deleted {len(removed)} node(s) rooted at {node_id}")
        self._changed("node_deleted")
        return True

    def move_node(self, node_id: str, position: Point) -> Optional[ReorganizeResult]:
        """Drop a dragged card (or branch) at ``position``."""
        if node_id not in self.store:
            return None
        result = handle_branch_drag(self.store.nodes(), node_id, position,
                                    self.orientation, self.config)
        self._apply(result)
        self._changed("node_moved")
        return result

    def drag_node(self, node_id: str, position: Point) -> None:
        """
        Pointer-move update; coalesced per frame when a scheduler is set.
        """
        if self.scheduler is None:
            self.move_node(node_id, position)
            return
        self.scheduler.schedule(('move', node_id), partial(self.move_node, node_id, position))

    def reparent(self, node_id: str, new_parent_id: Optional[str]) -> bool:
        """
        Attach a card (with its subtree) to a new parent, or make it a root.

        Self-attachment, unknown ids and attaching under a descendant are
        rejected as no-ops. After the move the whole forest is re-laid out.
        """
        node = self.store.get(node_id)
        if node is None or not self.store.can_reparent(node_id, new_parent_id):
            logger.debug(f"Reparent of {node_id} under {new_parent_id} rejected")
            return False

        had_children = bool(node.children)
        self.store.reparent(node_id, new_parent_id)
        parent = self.store.get(new_parent_id) if new_parent_id is not None else None
        if parent is not None:
            self._expand(parent)

        desired = self._desired_position(parent, skip=node_id)
        if had_children:
            self._apply(move_node_with_children(self.store.nodes(), node_id, desired,
                                                self.orientation, self.config))
        else:
            placement = find_free_position(self.visible_nodes(), desired, self.config,
                                           exclude=[node_id])
            self.last_placement = placement
            self.store.set_position(node_id, placement.position)

        self.store.replace_nodes(layout_nodes(self.store.nodes(), self.orientation, self.config))
        self._changed("node_reparented")
        return True

    def toggle_collapse(self, node_id: str) -> bool:
        """
        Collapse or expand a card's children.

        Expanding reorganizes the re-shown subtree around the card.
        """
        node = self.store.get(node_id)
        if node is None or not node.children:
            return False
        self.store.replace_nodes(visibility.toggle_collapse(self.store.nodes(), node_id))
        if not self.store.get(node_id).collapsed:
            self._apply(reorganize_subtree(self.store.nodes(), node_id,
                                           self.orientation, self.config))
        self._changed("node_collapse_toggled")
        return True

    def toggle_child_visibility(self, parent_id: str, child_id: str) -> bool:
        """Per-child hiding is not supported; always a no-op."""
        visibility.toggle_child_visibility(self.store.nodes(), parent_id, child_id)
        return False

    # ------------------------------------------------------------------
    # Whole-canvas intents
    # ------------------------------------------------------------------

    def auto_layout(self) -> None:
        """Re-layout the visible forest and return to the home view."""
        self.store.replace_nodes(layout_nodes(self.store.nodes(), self.orientation, self.config))
        self.state = home_position(self.visible_nodes(), self.config, self.state)
        self._changed("auto_layout")

    def set_orientation(self, orientation) -> None:
        self.state = replace(self.state, orientation=Orientation.parse(orientation))
        self.store.replace_nodes(layout_nodes(self.store.nodes(), self.orientation, self.config))
        self.state = home_position(self.visible_nodes(), self.config, self.state)
        self._changed("orientation_changed")

    def toggle_orientation(self) -> Orientation:
        self.set_orientation(self.orientation.flipped())
        return self.orientation

    def reset_to_home(self) -> CanvasState:
        self.state = home_position(self.visible_nodes(), self.config, self.state)
        self._changed("view_home")
        return self.state

    def fit_to_screen(self, viewport_width: float, viewport_height: float) -> CanvasState:
        self.state = fit_to_screen(self.visible_nodes(), viewport_width, viewport_height,
                                   self.config, self.state)
        self._changed("view_fit")
        return self.state

    def zoom_in(self) -> CanvasState:
        self.state = zoom_in(self.state, self.config)
        self._changed("view_zoom")
        return self.state

    def zoom_out(self) -> CanvasState:
        self.state = zoom_out(self.state, self.config)
        self._changed("view_zoom")
        return self.state
