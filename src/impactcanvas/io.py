# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
#
# Tree document and JSON Lines I/O.

"""
Reading and writing impact tree documents.

A tree document is one JSON object in the persisted wire shape:

    {
      "nodes": [{"id", "type", "title", "description", "position",
                 "parentId", "children", "isCollapsed", "hiddenChildren",
                 "testCategory", "templateData"}, ...],
      "connections": [{"id", "fromNodeId", "toNodeId"}, ...],
      "canvasState": {"zoom", "pan": {"x", "y"}, "orientation"}
    }

Positions can also be streamed as JSON Lines, one
``{"type": "position", "id", "x", "y"}`` object per line, for piping
into other tools.

Usage:
    from impactcanvas.io import load_tree, save_tree, write_positions

    snapshot = load_tree('tree.json')
    save_tree(snapshot, 'tree.json')
    write_positions({n.id: n.position for n in snapshot.nodes}, sys.stdout)
"""

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, TextIO, Union

from .geometry import Point
from .model import CanvasState, Edge, Node, NodeKind, Orientation


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class TreeSnapshot:
    """Full persisted state of one canvas."""
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    canvas_state: CanvasState = field(default_factory=CanvasState)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node_to_dict(n) for n in self.nodes],
            "connections": [edge_to_dict(e) for e in self.edges],
            "canvasState": canvas_state_to_dict(self.canvas_state),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'TreeSnapshot':
        if not isinstance(d, dict):
            raise ValueError("Tree document must be a JSON object")
        return cls(
            nodes=[node_from_dict(n) for n in d.get("nodes", [])],
            edges=[edge_from_dict(e) for e in d.get("connections", [])],
            canvas_state=canvas_state_from_dict(d.get("canvasState")),
        )


# ============================================================================
# CONVERSION
# ============================================================================

def node_to_dict(node: Node) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": node.id,
        "type": node.kind.value,
        "title": node.title,
        "description": node.description,
        "position": node.position.to_dict(),
        "children": list(node.children),
    }
    if node.parent_id is not None:
        d["parentId"] = node.parent_id
    if node.collapsed:
        d["isCollapsed"] = True
    if node.hidden_children:
        d["hiddenChildren"] = list(node.hidden_children)
    if node.test_category is not None:
        d["testCategory"] = node.test_category
    if node.template_data:
        d["templateData"] = dict(node.template_data)
    return d


def node_from_dict(d: Dict[str, Any]) -> Node:
    try:
        node_id = d["id"]
    except (KeyError, TypeError):
        raise ValueError(f"Node record without id: {d!r}") from None
    return Node(
        id=str(node_id),
        kind=NodeKind.parse(d.get("type", "objective")),
        position=Point.from_dict(d.get("position")),
        parent_id=d.get("parentId"),
        children=list(d.get("children") or []),
        collapsed=bool(d.get("isCollapsed", False)),
        hidden_children=list(d.get("hiddenChildren") or []),
        title=d.get("title", ""),
        description=d.get("description", ""),
        test_category=d.get("testCategory"),
        template_data=dict(d.get("templateData") or {}),
    )


def edge_to_dict(edge: Edge) -> Dict[str, Any]:
    return {"id": edge.id, "fromNodeId": edge.from_node_id, "toNodeId": edge.to_node_id}


def edge_from_dict(d: Dict[str, Any]) -> Edge:
    try:
        return Edge(id=str(d["id"]), from_node_id=d["fromNodeId"], to_node_id=d["toNodeId"])
    except (KeyError, TypeError):
        raise ValueError(f"Malformed connection record: {d!r}") from None


def canvas_state_to_dict(state: CanvasState) -> Dict[str, Any]:
    return {
        "zoom": state.zoom,
        "pan": state.pan.to_dict(),
        "orientation": state.orientation.value,
    }


def canvas_state_from_dict(d: Any) -> CanvasState:
    d = d or {}
    zoom = float(d.get("zoom", 1.0))
    if zoom <= 0:
        raise ValueError(f"Canvas zoom must be positive, got {zoom}")
    return CanvasState(
        zoom=zoom,
        pan=Point.from_dict(d.get("pan")),
        orientation=Orientation.parse(d.get("orientation", "horizontal")),
    )


# ============================================================================
# FILES
# ============================================================================

def load_tree(path: Union[str, Path]) -> TreeSnapshot:
    """Read a tree document from a JSON file."""
    with open(path, encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}: invalid JSON ({e})") from e
    return TreeSnapshot.from_dict(data)


def save_tree(snapshot: TreeSnapshot, path: Union[str, Path]) -> None:
    """Write a tree document as indented JSON."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2)
        f.write('\n')


def dump_tree(snapshot: TreeSnapshot, stream: TextIO = sys.stdout) -> None:
    json.dump(snapshot.to_dict(), stream, ensure_ascii=False, indent=2)
    stream.write('\n')


# ============================================================================
# JSON LINES
# ============================================================================

def write_positions(positions: Mapping[str, Point], stream: TextIO = sys.stdout) -> None:
    """Write positions as JSON Lines."""
    for node_id, pos in positions.items():
        record = {"type": "position", "id": node_id, "x": pos.x, "y": pos.y}
        print(json.dumps(record, ensure_ascii=False), file=stream)


def read_positions(stream: TextIO = sys.stdin) -> Iterator[Dict[str, Any]]:
    """Yield position records from a JSON Lines stream, skipping other lines."""
    for line in stream:
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict) and obj.get("type") == "position":
            yield obj


def read_positions_dict(stream: TextIO = sys.stdin) -> Dict[str, Point]:
    """Read positions as dict {id: Point}."""
    return {r["id"]: Point(float(r["x"]), float(r["y"])) for r in read_positions(stream)}
