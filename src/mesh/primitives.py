"""Small polygon soups used by the demo app, the CLI and the tests."""

from __future__ import annotations

import numpy as np


def tetrahedron_soup() -> tuple[np.ndarray, list[list[int]]]:
    """Regular tetrahedron centred at the origin, faces CCW seen from outside."""
    verts = np.array(
        [
            [1.0, 1.0, 1.0],
            [1.0, -1.0, -1.0],
            [-1.0, 1.0, -1.0],
            [-1.0, -1.0, 1.0],
        ],
        dtype=np.float64,
    )
    faces = [[0, 1, 2], [0, 2, 3], [0, 3, 1], [1, 3, 2]]
    return verts, faces


def cube_soup() -> tuple[np.ndarray, list[list[int]]]:
    """Unit cube with quad faces, centred at the origin."""
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
    ) - 0.5
    faces = [
        [0, 3, 2, 1],  # bottom (z=0)
        [4, 5, 6, 7],  # top (z=1)
        [0, 1, 5, 4],  # front (y=0)
        [3, 7, 6, 2],  # back (y=1)
        [0, 4, 7, 3],  # left (x=0)
        [1, 2, 6, 5],  # right (x=1)
    ]
    return verts, faces


def grid_soup(n: int = 5, spacing: float = 1.0, bump_height: float = 0.0,
              noise: float = 0.0, seed=None) -> tuple[np.ndarray, list[list[int]]]:
    """
    Triangulated n x n planar grid in the z=0 plane.

    Args:
        n: vertices per side (>= 2)
        spacing: distance between neighbouring grid vertices
        bump_height: z offset given to the centre vertex
        noise: standard deviation of gaussian z noise on every vertex
        seed: seed for the noise generator

    Returns:
        verts (n*n, 3) centred in x/y, and CCW triangles seen from +z.
        Vertex ``i * n + j`` sits at column ``j``, row ``i``.
    """
    if n < 2:
        raise ValueError("grid needs at least 2 vertices per side")

    jj, ii = np.meshgrid(np.arange(n), np.arange(n))
    verts = np.zeros((n * n, 3), dtype=np.float64)
    verts[:, 0] = jj.ravel() * spacing
    verts[:, 1] = ii.ravel() * spacing
    verts[:, :2] -= verts[:, :2].mean(axis=0)

    if noise > 0:
        rng = np.random.default_rng(seed)
        verts[:, 2] += rng.normal(0.0, noise, n * n)
    if bump_height:
        verts[grid_center_index(n), 2] += bump_height

    faces = []
    for i in range(n - 1):
        for j in range(n - 1):
            a = i * n + j
            b = a + 1
            c = a + n + 1
            d = a + n
            faces.append([a, b, c])
            faces.append([a, c, d])
    return verts, faces


def grid_center_index(n: int) -> int:
    return (n // 2) * n + n // 2
