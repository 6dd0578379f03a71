#!/usr/bin/env python3
# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Command line access to the impact tree layout engine.

Usage:
    impactcanvas layout tree.json -o tree.laid-out.json --orientation vertical
    impactcanvas layout tree.json --positions          # JSON Lines to stdout
    impactcanvas fit tree.json --width 1280 --height 720
    impactcanvas home tree.json
    impactcanvas validate tree.json
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from itertools import combinations
from typing import List, Optional

from .config import load_config
from .io import TreeSnapshot, canvas_state_to_dict, dump_tree, load_tree, save_tree, write_positions
from .layout.hierarchical import layout_nodes
from .model import Orientation
from .optimize.centering import fit_to_screen, home_position
from .optimize.spatial_index import node_box
from .store import NodeStore
from .visibility import visible_nodes

logger = logging.getLogger(__name__)


def _load(args) -> TreeSnapshot:
    return load_tree(args.input)


def cmd_layout(args, config) -> int:
    snapshot = _load(args)
    orientation = (Orientation.parse(args.orientation) if args.orientation
                   else snapshot.canvas_state.orientation)
    nodes = layout_nodes(snapshot.nodes, orientation, config)
    state = replace(snapshot.canvas_state, orientation=orientation)
    result = TreeSnapshot(nodes=nodes, edges=snapshot.edges, canvas_state=state)
    logger.info(f"Laid out {len(visible_nodes(nodes))} visible of {len(nodes)} nodes ({orientation.value})")

    if args.positions:
        write_positions({n.id: n.position for n in visible_nodes(nodes)}, sys.stdout)
    elif args.output:
        save_tree(result, args.output)
    else:
        dump_tree(result, sys.stdout)
    return 0


def cmd_fit(args, config) -> int:
    snapshot = _load(args)
    state = fit_to_screen(visible_nodes(snapshot.nodes), args.width, args.height,
                          config, snapshot.canvas_state)
    print(json.dumps(canvas_state_to_dict(state)))
    return 0


def cmd_home(args, config) -> int:
    snapshot = _load(args)
    state = home_position(visible_nodes(snapshot.nodes), config, snapshot.canvas_state)
    print(json.dumps(canvas_state_to_dict(state)))
    return 0


def cmd_validate(args, config) -> int:
    snapshot = _load(args)
    store = NodeStore.from_lists(snapshot.nodes, snapshot.edges)
    problems = store.validate()

    shown = visible_nodes(snapshot.nodes)
    for a, b in combinations(shown, 2):
        if node_box(a.position, config).intersects(node_box(b.position, config)):
            problems.append(f"overlap: {a.id} and {b.id}")

    for problem in problems:
        print(problem)
    if problems:
        logger.warning(f"{len(problems)} problem(s) found")
        return 1
    print(f"OK: {len(snapshot.nodes)} nodes, {len(snapshot.edges)} connections")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='impactcanvas',
        description='Lay out impact trees and compute canvas views'
    )
    parser.add_argument('--config', help='YAML layout config (default: $IMPACTCANVAS_CONFIG or config/layout.yaml)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('layout', help='Re-layout the visible forest')
    p.add_argument('input', help='Tree JSON document')
    p.add_argument('-o', '--output', help='Write the laid-out document here')
    p.add_argument('--orientation', choices=[o.value for o in Orientation])
    p.add_argument('--positions', action='store_true', help='Emit JSON Lines positions instead')
    p.set_defaults(func=cmd_layout)

    p = sub.add_parser('fit', help='Pan/zoom fitting the forest in a viewport')
    p.add_argument('input', help='Tree JSON document')
    p.add_argument('--width', type=float, required=True)
    p.add_argument('--height', type=float, required=True)
    p.set_defaults(func=cmd_fit)

    p = sub.add_parser('home', help='Pan/zoom centred on the top-left outcome')
    p.add_argument('input', help='Tree JSON document')
    p.set_defaults(func=cmd_home)

    p = sub.add_parser('validate', help='Check forest invariants and overlaps')
    p.add_argument('input', help='Tree JSON document')
    p.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    try:
        config = load_config(args.config)
        return args.func(args, config)
    except (OSError, ValueError) as e:
        logger.error(str(e))
        return 2


if __name__ == '__main__':
    sys.exit(main())
