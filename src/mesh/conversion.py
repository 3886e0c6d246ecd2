"""Bridges between pyvista PolyData and the half-edge mesh.

PyVista/VTK handles the file formats. This module only turns its padded face
connectivity into the oriented polygon soup that :class:`HalfEdgeMesh` consumes,
and back again for saving or rendering.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
import pyvista as pv

from src.config import MeshOpsConfig
from src.logging_utils import get_logger

from .halfedge import HalfEdgeMesh

logger = get_logger(__name__)

_COLOR_ARRAYS = ("colors", "RGB", "RGBA", "Colors")


def _unpad_faces(padded: np.ndarray) -> List[List[int]]:
    """Split VTK's ``[n, i0, .., in-1, n, ...]`` connectivity into face lists."""
    faces = []
    k = 0
    padded = np.asarray(padded, dtype=np.int64).ravel()
    while k < padded.size:
        n = int(padded[k])
        faces.append([int(v) for v in padded[k + 1:k + 1 + n]])
        k += n + 1
    return faces


def _pad_faces(faces: List[List[int]]) -> np.ndarray:
    padded = []
    for ids in faces:
        padded.append(len(ids))
        padded.extend(ids)
    return np.asarray(padded, dtype=np.int64)


def center_positions(points: np.ndarray) -> np.ndarray:
    """Translate points so their centroid sits at the origin."""
    points = np.asarray(points, dtype=np.float64)
    if points.shape[0] == 0:
        return points.copy()
    return points - points.mean(axis=0)


def polygon_soup_from_polydata(
    poly: pv.PolyData,
) -> Tuple[np.ndarray, List[List[int]], Optional[np.ndarray]]:
    """
    Extract positions, face loops and optional colours from a PolyData.

    Returns:
        points: (N, 3) float64
        faces: list of vertex-id lists in the order VTK stores them
        colors: (N, 3) floats in [0, 1], or None if the data has no colours
    """
    if poly.n_strips:
        logger.warning("Converting %d triangle strips to triangles", poly.n_strips)
        poly = poly.triangulate()
    if poly.n_lines or poly.n_verts:
        logger.warning(
            "Ignoring %d line and %d vertex cells; only polygons become faces",
            poly.n_lines, poly.n_verts,
        )

    points = np.asarray(poly.points, dtype=np.float64)
    faces = _unpad_faces(poly.faces)

    colors = None
    for name in _COLOR_ARRAYS:
        if name in poly.point_data:
            values = np.asarray(poly.point_data[name])
            if values.ndim == 2 and values.shape[1] >= 3:
                colors = values[:, :3].astype(np.float64)
                if np.issubdtype(values.dtype, np.integer):
                    colors = colors / 255.0
                break
    return points, faces, colors


def mesh_to_polydata(mesh: HalfEdgeMesh, include_colors: bool = True) -> pv.PolyData:
    faces = [mesh.face_vertices(f) for f in range(len(mesh.faces))]
    if faces:
        poly = pv.PolyData(mesh.positions.copy(), _pad_faces(faces))
    else:
        poly = pv.PolyData(mesh.positions.copy())
    if include_colors and mesh.vertices:
        poly.point_data["colors"] = mesh.colors()
    return poly


def halfedge_mesh_from_polydata(poly: pv.PolyData, config: Optional[MeshOpsConfig] = None) -> HalfEdgeMesh:
    config = config or MeshOpsConfig()
    points, faces, colors = polygon_soup_from_polydata(poly)
    if config.center_on_load:
        points = center_positions(points)
    return HalfEdgeMesh.from_polygon_soup(
        points, faces, colors,
        default_color=config.default_color,
        match_edges_by_id=config.match_edges_by_id,
    )


def load_halfedge_mesh(path: str, config: Optional[MeshOpsConfig] = None) -> HalfEdgeMesh:
    """Read any surface format pyvista understands into a half-edge mesh."""
    data = pv.read(path)
    if not isinstance(data, pv.PolyData):
        data = data.extract_surface()
    logger.debug("Read %s: %d points, %d cells", path, data.n_points, data.n_cells)
    return halfedge_mesh_from_polydata(data, config)


def save_halfedge_mesh(mesh: HalfEdgeMesh, path: str) -> None:
    mesh_to_polydata(mesh).save(path)
    logger.info("Saved mesh to %s", path)
