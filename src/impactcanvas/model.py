# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Impact tree data model.

"""
Cards, connections and canvas state of an impact tree.

Only ``Node.position`` is written by the layout engine; every other
field belongs to the interaction and persistence layers.
"""

import random
import string
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .geometry import Point, ORIGIN


class NodeKind(Enum):
    """Card types of an impact tree."""
    OBJECTIVE = "objective"
    OUTCOME = "outcome"
    OPPORTUNITY = "opportunity"
    SOLUTION = "solution"
    ASSUMPTION = "assumption"
    METRIC = "metric"
    RESEARCH = "research"

    @classmethod
    def parse(cls, value: Any) -> 'NodeKind':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown node kind: {value!r}") from None


class Orientation(Enum):
    """Growth direction of children."""
    HORIZONTAL = "horizontal"  # children extend rightward
    VERTICAL = "vertical"      # children extend downward

    @classmethod
    def parse(cls, value: Any) -> 'Orientation':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown orientation: {value!r}") from None

    def flipped(self) -> 'Orientation':
        if self == Orientation.HORIZONTAL:
            return Orientation.VERTICAL
        return Orientation.HORIZONTAL


TEST_CATEGORIES = ("viability", "value", "feasibility", "usability")

DEFAULT_TITLES: Dict[NodeKind, str] = {
    NodeKind.OBJECTIVE: "New Objective",
    NodeKind.OUTCOME: "New Outcome",
    NodeKind.OPPORTUNITY: "New Opportunity",
    NodeKind.SOLUTION: "New Solution",
    NodeKind.ASSUMPTION: "New Assumption Test",
    NodeKind.METRIC: "New Metric",
    NodeKind.RESEARCH: "New Research",
}

DEFAULT_DESCRIPTIONS: Dict[NodeKind, str] = {
    NodeKind.OBJECTIVE: "State the objective this tree serves",
    NodeKind.OUTCOME: "Define the desired business outcome",
    NodeKind.OPPORTUNITY: "Identify the market opportunity",
    NodeKind.SOLUTION: "Design the solution approach",
    NodeKind.ASSUMPTION: "Test key assumptions",
    NodeKind.METRIC: "Define how progress is measured",
    NodeKind.RESEARCH: "Plan the research activity",
}

TITLE_PLACEHOLDERS: Dict[NodeKind, str] = {
    NodeKind.OBJECTIVE: "e.g., Increase monthly revenue by 20%",
    NodeKind.OUTCOME: "e.g., Higher customer satisfaction scores",
    NodeKind.OPPORTUNITY: "e.g., Expand to mobile app market",
    NodeKind.SOLUTION: "e.g., Build automated email system",
    NodeKind.ASSUMPTION: "e.g., Users will pay $10/month for premium",
    NodeKind.METRIC: "e.g., Weekly active users",
    NodeKind.RESEARCH: "e.g., Survey 100 existing customers",
}


def _random_suffix(length: int = 9) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return ''.join(random.choice(alphabet) for _ in range(length))


def generate_node_id(kind: NodeKind) -> str:
    """Id of the form ``<kind>-<millis>-<random>``."""
    return f"{kind.value}-{int(time.time() * 1000)}-{_random_suffix()}"


def generate_edge_id() -> str:
    return f"conn-{int(time.time() * 1000)}-{_random_suffix()}"


@dataclass
class Node:
    """A card in the tree."""
    id: str
    kind: NodeKind
    position: Point = ORIGIN
    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)
    collapsed: bool = False
    hidden_children: List[str] = field(default_factory=list)
    title: str = ""
    description: str = ""
    test_category: Optional[str] = None
    template_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def with_position(self, position: Point) -> 'Node':
        return replace(self, position=position)

    def copy(self) -> 'Node':
        return replace(
            self,
            children=list(self.children),
            hidden_children=list(self.hidden_children),
            template_data=dict(self.template_data),
        )


def create_node(
    kind: NodeKind,
    position: Point = ORIGIN,
    parent_id: Optional[str] = None,
    test_category: Optional[str] = None,
    node_id: Optional[str] = None,
) -> Node:
    """Build a fresh card with the kind's default title and description."""
    if test_category is not None and test_category not in TEST_CATEGORIES:
        raise ValueError(f"Unknown test category: {test_category!r}")
    return Node(
        id=node_id or generate_node_id(kind),
        kind=kind,
        position=position,
        parent_id=parent_id,
        title=DEFAULT_TITLES[kind],
        description=DEFAULT_DESCRIPTIONS[kind],
        test_category=test_category,
    )


@dataclass(frozen=True)
class Edge:
    """Connection mirroring one parent -> child link."""
    id: str
    from_node_id: str
    to_node_id: str


def create_edge(from_node_id: str, to_node_id: str) -> Edge:
    return Edge(id=generate_edge_id(), from_node_id=from_node_id, to_node_id=to_node_id)


@dataclass
class CanvasState:
    """Pan, zoom and orientation of one canvas."""
    zoom: float = 1.0
    pan: Point = ORIGIN
    orientation: Orientation = Orientation.HORIZONTAL
