# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Uniform grid spatial index with NumPy box tests.

"""
Uniform grid bucketing of margined node boxes.

Each box is stored in every cell it touches. A query unions the cells
under the query rectangle, then runs one vectorised intersection test
over the candidates instead of checking every pair of nodes.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set, Tuple
import math

import numpy as np

from ..config import LayoutConfig
from ..geometry import Box, Point
from ..model import Node

Cell = Tuple[int, int]


def node_box(position: Point, config: LayoutConfig) -> Box:
    """Margined bounding box of a card placed at ``position``."""
    m = config.node_margin
    return Box(position.x - m, position.y - m,
               position.x + config.node_width + m,
               position.y + config.node_height + m)


class SpatialIndex:
    """
    Grid index over node boxes.

    Supports incremental ``insert``/``remove`` so a caller placing nodes
    one by one can register each placement as a new obstacle.
    """

    def __init__(self, cell_size: float = 400.0):
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.cell_size = cell_size
        self._cells: Dict[Cell, List[int]] = defaultdict(list)
        self._ids: List[str] = []
        self._slots: Dict[str, int] = {}
        self._boxes: List[Tuple[float, float, float, float]] = []
        self._alive: List[bool] = []
        self._array: Optional[np.ndarray] = None

    @classmethod
    def from_nodes(
        cls,
        nodes: Iterable[Node],
        config: LayoutConfig,
        exclude: Iterable[str] = ()
    ) -> 'SpatialIndex':
        """Build an index over ``nodes`` in one pass, skipping ``exclude``."""
        skip = set(exclude)
        index = cls(config.index_cell_size())
        for node in nodes:
            if node.id not in skip:
                index.insert(node.id, node_box(node.position, config))
        return index

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._slots

    def _cell_range(self, box: Box) -> Iterable[Cell]:
        size = self.cell_size
        x0 = math.floor(box.left / size)
        x1 = math.floor(box.right / size)
        y0 = math.floor(box.top / size)
        y1 = math.floor(box.bottom / size)
        for cx in range(x0, x1 + 1):
            for cy in range(y0, y1 + 1):
                yield (cx, cy)

    def insert(self, node_id: str, box: Box) -> None:
        """Add or replace the box stored for ``node_id``."""
        if node_id in self._slots:
            self.remove(node_id)
        slot = len(self._ids)
        self._ids.append(node_id)
        self._boxes.append(box.as_tuple())
        self._alive.append(True)
        self._slots[node_id] = slot
        for cell in self._cell_range(box):
            self._cells[cell].append(slot)
        self._array = None

    def remove(self, node_id: str) -> None:
        slot = self._slots.pop(node_id, None)
        if slot is not None:
            self._alive[slot] = False

    def candidates(self, box: Box) -> List[str]:
        """Ids whose cells overlap ``box`` (bucket-level, not exact)."""
        return [self._ids[s] for s in self._candidate_slots(box)]

    def _candidate_slots(self, box: Box) -> List[int]:
        found: Set[int] = set()
        for cell in self._cell_range(box):
            bucket = self._cells.get(cell)
            if bucket:
                found.update(bucket)
        return sorted(s for s in found if self._alive[s])

    def overlapping(self, box: Box, exclude: Iterable[str] = ()) -> List[str]:
        """Ids whose stored box strictly intersects ``box``, in insertion order."""
        slots = self._candidate_slots(box)
        if not slots:
            return []
        if self._array is None:
            self._array = np.asarray(self._boxes, dtype=float)
        cand = self._array[slots]
        hit = (
            (cand[:, 0] < box.right) & (box.left < cand[:, 2]) &
            (cand[:, 1] < box.bottom) & (box.top < cand[:, 3])
        )
        skip = set(exclude)
        return [self._ids[s] for s, h in zip(slots, hit) if h and self._ids[s] not in skip]

    def is_free(self, box: Box, exclude: Iterable[str] = ()) -> bool:
        return not self.overlapping(box, exclude)

    def box_of(self, node_id: str) -> Optional[Box]:
        slot = self._slots.get(node_id)
        if slot is None:
            return None
        return Box(*self._boxes[slot])
