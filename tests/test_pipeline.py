"""Lightweight smoke tests for the half-edge mesh pipeline.

Why this file exists:
- It can be run directly via `python tests/test_pipeline.py`

These tests are intentionally fast and data-free (no mesh files required).
They validate that construction and the core operators run end to end and
return correctly-shaped, finite outputs.
"""

from __future__ import annotations

import os
import sys

import numpy as np

# Allow running this file directly via `python tests/test_pipeline.py`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def _make_unit_cube_mesh() -> tuple[np.ndarray, np.ndarray]:
    """Return a simple triangulated cube surface mesh.

    - 8 vertices
    - 12 triangles, CCW seen from outside

    This is closed and non-degenerate, so every vertex has a normal.
    """

    verts = np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
            [1.0, 0.0, 1.0],
            [1.0, 1.0, 1.0],
            [0.0, 1.0, 1.0],
        ],
        dtype=np.float64,
    )

    faces = np.array(
        [
            # bottom (z=0)
            [0, 2, 1],
            [0, 3, 2],
            # top (z=1)
            [4, 5, 6],
            [4, 6, 7],
            # front (y=0)
            [0, 1, 5],
            [0, 5, 4],
            # back (y=1)
            [3, 6, 2],
            [3, 7, 6],
            # left (x=0)
            [0, 7, 3],
            [0, 4, 7],
            # right (x=1)
            [1, 2, 6],
            [1, 6, 5],
        ],
        dtype=np.int64,
    )

    return verts - 0.5, faces


def _assert_finite_array(name: str, arr: np.ndarray) -> None:
    if not np.isfinite(arr).all():
        bad = np.argwhere(~np.isfinite(arr))[:10]
        raise AssertionError(f"{name} contains non-finite values at indices: {bad.tolist()}")


def test_mesh_operators_smoke() -> None:
    # Import here to keep module import lightweight.
    from src.mesh import HalfEdgeMesh
    from src.algorithms import (
        cotangent_laplacian_smoothing,
        inflate_deflate,
        laplacian_smooth_sharpen,
        vertex_normals,
    )

    verts, faces = _make_unit_cube_mesh()

    mesh = HalfEdgeMesh.from_polygon_soup(verts, faces)
    assert len(mesh.vertices) == 8
    assert len(mesh.half_edges) == 36
    assert not any(h.is_boundary for h in mesh.half_edges)

    normals = vertex_normals(mesh)
    assert normals.shape == verts.shape
    _assert_finite_array("normals", normals)
    # Outward: every normal points away from the centre
    assert np.all(np.sum(normals * verts, axis=1) > 0)

    inflated = inflate_deflate(mesh, 0.1)
    assert inflated.displacement.shape == verts.shape
    _assert_finite_array("inflated", mesh.positions)

    smoothed = laplacian_smooth_sharpen(mesh, smooth=True)
    assert smoothed.displacement.shape == verts.shape
    _assert_finite_array("smoothed", mesh.positions)

    sharpened = laplacian_smooth_sharpen(mesh, smooth=False)
    _assert_finite_array("sharpened", mesh.positions)
    assert sharpened.revision == smoothed.revision + 1

    lap = cotangent_laplacian_smoothing(verts, faces, iterations=2)
    assert lap.shape == verts.shape
    _assert_finite_array("cotangent_laplacian", lap)


def test_main_entrypoint_reports_success(capsys) -> None:
    assert main() == 0
    assert "OK" in capsys.readouterr().out


def main() -> int:
    """CLI entrypoint for a quick check without pytest."""

    test_mesh_operators_smoke()
    print("OK: half-edge mesh operators executed successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
