#!/usr/bin/env python3
"""
Apply half-edge mesh operators to a surface file.

Usage:
    python scripts/process_mesh.py input.ply output.ply --op smooth --iterations 5
    python scripts/process_mesh.py input.ply output.ply --op inflate --inflate-factor 0.1
"""

import argparse
import os
import sys
import time

# Add project root to path so we can import from src
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.algorithms import OPERATIONS, apply_operation
from src.config import MeshOpsConfig
from src.logging_utils import configure_logging
from src.mesh import MeshError
from src.mesh.conversion import load_halfedge_mesh, save_halfedge_mesh


def build_parser():
    parser = argparse.ArgumentParser(description='Half-edge mesh processing')
    parser.add_argument('input', help='Input surface file (any format pyvista reads)')
    parser.add_argument('output', help='Output surface file')
    parser.add_argument('--op', choices=OPERATIONS, default='smooth',
                        help='Operation to apply (default: smooth)')
    parser.add_argument('--iterations', type=int, default=None,
                        help='Number of passes (default: 1)')
    parser.add_argument('--inflate-factor', dest='inflate_factor', type=float, default=None,
                        help='Step along the vertex normal for inflate/deflate')
    parser.add_argument('--no-center', dest='center_on_load', action='store_false', default=None,
                        help='Keep the input coordinates instead of centring at the origin')
    parser.add_argument('--match-edges-by-id', dest='match_edges_by_id', action='store_true', default=None,
                        help='Look edges up by vertex id instead of by position')
    parser.add_argument('--log-level', dest='log_level', default=None,
                        help='Logging level (default: INFO)')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = MeshOpsConfig.from_args(args)
    configure_logging(config.log_level)

    try:
        mesh = load_halfedge_mesh(args.input, config)
    except MeshError as exc:
        print(f"Cannot build a half-edge mesh from {args.input}: {exc}")
        return 1

    print(f"Loaded {args.input}: {len(mesh.vertices)} vertices, {len(mesh.faces)} faces")

    start_time = time.time()
    try:
        changes = apply_operation(mesh, args.op, config)
    except MeshError as exc:
        print(f"{args.op} refused: {exc}")
        return 1
    elapsed = time.time() - start_time

    moved = max((len(c.vertex_ids) for c in changes), default=0)
    print(f"Applied {args.op} x{config.iterations} in {elapsed:.3f}s ({moved} vertices moved)")

    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    save_halfedge_mesh(mesh, args.output)
    print(f"Mesh written to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
