# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Collision-free placement search.

"""
Overlap resolution for single cards and whole subtrees.

Three searches, all returning grid-snapped positions:

- resolve_single: push the card away from the nearest overlapping card,
  one fixed step at a time.
- find_free_position: expanding-ring search around the desired point,
  cardinal directions before diagonals.
- find_free_subtree_position: the same ring search, testing the bounding
  box of a whole subtree against the cards outside it.

Searches are bounded. When they run out the result is flagged
``PlacementStatus.FALLBACK`` instead of raising.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Set
import logging
import math

from ..config import LayoutConfig
from ..geometry import Box, Point, bounding_box, snap_candidates, snap_to_grid
from ..model import Node
from ..store import collect_descendants
from .spatial_index import SpatialIndex, node_box

logger = logging.getLogger(__name__)

# Right, down, left, up, then the diagonals (screen coordinates)
RING_ANGLES = (0, 90, 180, 270, 45, 135, 225, 315)


class PlacementStatus(Enum):
    """How a placement was obtained."""
    FREE = "free"          # desired position was already clear
    FOUND = "found"        # search found a clear position
    FALLBACK = "fallback"  # search exhausted; best-effort position


@dataclass(frozen=True)
class Placement:
    """Result of a placement search."""
    position: Point
    status: PlacementStatus

    @property
    def degraded(self) -> bool:
        return self.status == PlacementStatus.FALLBACK


def ring_points(center: Point, config: LayoutConfig) -> Iterator[Point]:
    """Snapped test points on rings of growing radius around ``center``."""
    for ring in range(1, config.max_rings + 1):
        radius = ring * config.ring_step
        for angle in RING_ANGLES:
            rad = math.radians(angle)
            offset = Point(round(math.cos(rad), 12) * radius, round(math.sin(rad), 12) * radius)
            yield snap_to_grid(center + offset, config.grid_size)


def _ring_search(
    desired: Point,
    is_free: Callable[[Point], bool],
    config: LayoutConfig
) -> Placement:
    start = snap_to_grid(desired, config.grid_size)
    if is_free(start):
        return Placement(start, PlacementStatus.FREE)

    tried: Set[Point] = {start}
    for point in ring_points(start, config):
        if point in tried:
            continue
        tried.add(point)
        if is_free(point):
            return Placement(point, PlacementStatus.FOUND)

    for dx, dy in config.fallback_offsets:
        point = snap_to_grid(start + Point(dx, dy), config.grid_size)
        if is_free(point):
            logger.debug(f"Ring search exhausted near {desired}; using fallback offset ({dx}, {dy})")
            return Placement(point, PlacementStatus.FALLBACK)

    far = snap_to_grid(start + Point(*config.far_offset), config.grid_size)
    logger.warning(f"No clear position near {desired}; placing at far offset {far}")
    return Placement(far, PlacementStatus.FALLBACK)


def find_free_position(
    nodes: Iterable[Node],
    desired: Point,
    config: Optional[LayoutConfig] = None,
    exclude: Iterable[str] = ()
) -> Placement:
    """
    Nearest clear spot for a new card around ``desired``.

    Args:
        nodes: Obstacles (normally the visible nodes).
        desired: Preferred top-left position.
        config: Layout constants.
        exclude: Ids ignored as obstacles (e.g. the card being placed).

    Returns:
        Placement; FREE when ``desired`` (snapped) is already clear.
    """
    config = config or LayoutConfig()
    index = SpatialIndex.from_nodes(nodes, config, exclude=exclude)
    return _ring_search(desired, lambda p: index.is_free(node_box(p, config)), config)


def subtree_box(nodes_by_id, subtree_ids: Iterable[str], config: LayoutConfig) -> Optional[Box]:
    """Union of the margined boxes of the given nodes."""
    return bounding_box(
        node_box(nodes_by_id[nid].position, config)
        for nid in subtree_ids if nid in nodes_by_id
    )


def find_free_subtree_position(
    nodes: List[Node],
    moving_id: str,
    desired: Point,
    config: Optional[LayoutConfig] = None
) -> Placement:
    """
    Clear anchor position for a node moved together with its subtree.

    The subtree's bounding box is translated by ``candidate - current`` and
    tested against nodes outside the subtree only. Descendants missing from
    ``nodes`` (e.g. hidden ones) do not take part in the test.
    """
    config = config or LayoutConfig()
    by_id = {n.id: n for n in nodes}
    moving = by_id.get(moving_id)
    if moving is None:
        return Placement(snap_to_grid(desired, config.grid_size), PlacementStatus.FREE)

    subtree = [moving_id] + collect_descendants(by_id, moving_id)
    box = subtree_box(by_id, subtree, config)
    index = SpatialIndex.from_nodes(nodes, config, exclude=subtree)
    current = moving.position

    def is_free(point: Point) -> bool:
        return index.is_free(box.translate(point - current))

    return _ring_search(desired, is_free, config)


def _snap_clear(point: Point, index: SpatialIndex, exclude: Set[str],
                config: LayoutConfig) -> Optional[Point]:
    for candidate in snap_candidates(point, config.grid_size):
        if index.is_free(node_box(candidate, config), exclude):
            return candidate
    return None


def resolve_single(
    nodes: Iterable[Node],
    target: Node,
    desired: Point,
    config: Optional[LayoutConfig] = None
) -> Placement:
    """
    Push a single card out of any overlap.

    Each iteration moves the position one ``push_step`` along the vector
    from the nearest overlapping card's centre to the card's own centre
    (rightward when the centres coincide), until the box is clear or
    ``max_push_iterations`` is reached.

    Args:
        nodes: Every other card; ``target`` itself is ignored if present.
        target: The card being placed.
        desired: Requested top-left position.
        config: Layout constants.

    Returns:
        Placement; FALLBACK carries the last pushed position.
    """
    config = config or LayoutConfig()
    index = SpatialIndex.from_nodes(nodes, config, exclude=[target.id])
    exclude = {target.id}
    half = Point(config.node_width / 2, config.node_height / 2)

    position = desired
    for iteration in range(config.max_push_iterations):
        hits = index.overlapping(node_box(position, config), exclude)
        if not hits:
            snapped = _snap_clear(position, index, exclude, config)
            if snapped is not None:
                status = PlacementStatus.FREE if iteration == 0 else PlacementStatus.FOUND
                return Placement(snapped, status)
            hits = index.overlapping(node_box(snap_to_grid(position, config.grid_size), config), exclude)

        center = position + half

        def distance(nid: str) -> float:
            return (center - index.box_of(nid).center).length()

        nearest = min(hits, key=lambda nid: (distance(nid), nid))
        direction = center - index.box_of(nearest).center
        length = direction.length()
        if length < 1e-9:
            direction = Point(1.0, 0.0)
        else:
            direction = direction.scale(1.0 / length)
        position = position + direction.scale(config.push_step)

    logger.debug(f"Push resolution for {target.id} hit the iteration limit")
    return Placement(snap_to_grid(position, config.grid_size), PlacementStatus.FALLBACK)
