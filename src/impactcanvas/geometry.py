# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Canvas geometry primitives.

"""
Points, boxes and grid snapping for canvas coordinates.

Boxes use screen orientation: y grows downward, so ``top < bottom``.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class Point:
    """A position in canvas units."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> 'Point':
        return Point(self.x * factor, self.y * factor)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> 'Point':
        d = d or {}
        return cls(float(d.get("x", 0.0)), float(d.get("y", 0.0)))


ORIGIN = Point(0.0, 0.0)


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle given by its edges."""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Point:
        return Point((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    def intersects(self, other: 'Box') -> bool:
        """Strict interior overlap; boxes sharing an edge do not intersect."""
        return (
            self.left < other.right and other.left < self.right and
            self.top < other.bottom and other.top < self.bottom
        )

    def translate(self, delta: Point) -> 'Box':
        return Box(self.left + delta.x, self.top + delta.y,
                   self.right + delta.x, self.bottom + delta.y)

    def union(self, other: 'Box') -> 'Box':
        return Box(min(self.left, other.left), min(self.top, other.top),
                   max(self.right, other.right), max(self.bottom, other.bottom))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)


def bounding_box(boxes: Iterable[Box]) -> Optional[Box]:
    """Smallest box containing all ``boxes``, or None when empty."""
    result = None
    for box in boxes:
        result = box if result is None else result.union(box)
    return result


def snap_value(value: float, grid: float) -> float:
    """Round half-up to the nearest grid line."""
    if grid <= 0:
        return value
    return math.floor(value / grid + 0.5) * grid


def snap_to_grid(point: Point, grid: float) -> Point:
    return Point(snap_value(point.x, grid), snap_value(point.y, grid))


def snap_candidates(point: Point, grid: float) -> Tuple[Point, ...]:
    """
    Grid points around ``point``, nearest first.

    The rounded point comes first, followed by the remaining floor/ceil
    combinations ordered by distance (ties broken by coordinates).
    """
    if grid <= 0:
        return (point,)
    xs = {math.floor(point.x / grid) * grid, math.ceil(point.x / grid) * grid}
    ys = {math.floor(point.y / grid) * grid, math.ceil(point.y / grid) * grid}
    rounded = snap_to_grid(point, grid)
    others = sorted(
        (Point(x, y) for x in xs for y in ys if Point(x, y) != rounded),
        key=lambda p: ((p - point).length(), p.x, p.y)
    )
    return (rounded, *others)
