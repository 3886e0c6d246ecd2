"""Render cache, plotly figures, pyvista conversion, config and the CLI."""

from __future__ import annotations

import argparse
import os

import numpy as np
import plotly.graph_objects as go
import pytest
import pyvista as pv

from src.algorithms import inflate_deflate, laplacian_smooth_sharpen
from src.config import MeshOpsConfig
from src.mesh import HalfEdgeMesh, grid_soup, tetrahedron_soup
from src.mesh.conversion import (
    center_positions,
    halfedge_mesh_from_polydata,
    load_halfedge_mesh,
    mesh_to_polydata,
    polygon_soup_from_polydata,
    save_halfedge_mesh,
)
from src.viz import RenderCache, mesh_figure


def _make_grid_mesh(n: int = 4) -> HalfEdgeMesh:
    verts, faces = grid_soup(n, bump_height=0.5)
    return HalfEdgeMesh.from_polygon_soup(verts, faces)


def _quad_polydata() -> pv.PolyData:
    points = np.array(
        [
            [1.0, 1.0, 0.0],
            [2.0, 1.0, 0.0],
            [2.0, 2.0, 0.0],
            [1.0, 2.0, 0.0],
        ]
    )
    return pv.PolyData(points, np.array([4, 0, 1, 2, 3]))


def test_render_cache_tracks_changes() -> None:
    mesh = _make_grid_mesh()
    cache = RenderCache(mesh)
    assert cache.stale

    first = cache.buffers()
    assert not cache.stale
    assert cache.buffers() is first
    assert first.triangles.size == 3 * 2 * 3 * 3
    assert first.edges.size == 2 * len(mesh.half_edges)

    laplacian_smooth_sharpen(mesh, smooth=True)
    assert cache.stale
    second = cache.buffers()
    assert cache.rebuild_count == 1
    assert second.triangles is first.triangles
    assert np.array_equal(second.positions, mesh.positions)
    assert second.revision == mesh.revision

    verts, faces = tetrahedron_soup()
    mesh.load(verts, faces)
    third = cache.buffers()
    assert cache.rebuild_count == 2
    assert third.triangles.size == 12

    cache.close()
    inflate_deflate(mesh, 0.1)
    assert not cache.stale


def test_mesh_figure_traces() -> None:
    mesh = _make_grid_mesh()
    buffers = RenderCache(mesh).buffers()

    fig = mesh_figure(buffers)
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 2
    assert isinstance(fig.data[0], go.Mesh3d)
    assert len(fig.data[0].i) == buffers.triangles.size // 3

    plain = mesh_figure(buffers, show_wireframe=False, intensity=np.arange(len(mesh.vertices)))
    assert len(plain.data) == 1
    assert plain.data[0].intensity is not None


def test_polydata_to_soup() -> None:
    points, faces, colors = polygon_soup_from_polydata(_quad_polydata())
    assert points.shape == (4, 3)
    assert faces == [[0, 1, 2, 3]]
    assert colors is None


def test_polydata_colors_are_scaled() -> None:
    poly = _quad_polydata()
    poly.point_data["RGB"] = np.full((4, 3), 255, dtype=np.uint8)
    _, _, colors = polygon_soup_from_polydata(poly)
    assert np.allclose(colors, 1.0)


def test_polydata_strips_become_triangles() -> None:
    points = np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [1.0, 1.0, 0.0],
        ]
    )
    poly = pv.PolyData(points, strips=np.array([4, 0, 1, 2, 3]))

    _, faces, _ = polygon_soup_from_polydata(poly)
    assert len(faces) == 2
    assert all(len(f) == 3 for f in faces)

    mesh = halfedge_mesh_from_polydata(poly)
    assert len(mesh.faces) == 2
    assert len(mesh.outgoing_edges(1)) == 3


def test_mesh_from_polydata_carries_config() -> None:
    config = MeshOpsConfig(match_edges_by_id=True, default_color=(1.0, 0.0, 0.0))
    mesh = halfedge_mesh_from_polydata(_quad_polydata(), config)
    assert mesh.match_edges_by_id
    assert np.allclose(mesh.colors(), [1.0, 0.0, 0.0])


def test_apply_operation_keeps_committed_passes(monkeypatch) -> None:
    from src.algorithms import apply_operation, operations
    from src.mesh import DegenerateGeometryError

    mesh = _make_grid_mesh()
    real_pass = operations.apply_pass
    calls = []

    def failing_second_pass(mesh, op, config):
        calls.append(op)
        if len(calls) == 2:
            raise DegenerateGeometryError("collapsed")
        return real_pass(mesh, op, config)

    monkeypatch.setattr(operations, "apply_pass", failing_second_pass)
    seen = []
    revision = mesh.revision
    with pytest.raises(DegenerateGeometryError):
        apply_operation(mesh, "smooth", MeshOpsConfig(iterations=3), on_pass=seen.append)

    assert len(seen) == 1
    assert seen[0].kind == "smooth"
    assert mesh.revision == revision + 1


def test_apply_operation_runs_every_pass() -> None:
    from src.algorithms import OPERATIONS, apply_operation

    for op in OPERATIONS:
        mesh = _make_grid_mesh()
        changes = apply_operation(mesh, op, MeshOpsConfig(iterations=2))
        assert [c.kind for c in changes] == [op, op]
    with pytest.raises(ValueError):
        apply_operation(_make_grid_mesh(), "twist", MeshOpsConfig())


def test_mesh_from_polydata_is_centered() -> None:
    mesh = halfedge_mesh_from_polydata(_quad_polydata())
    assert np.allclose(mesh.positions.mean(axis=0), 0.0)
    assert len(mesh.half_edges) == 8

    raw = halfedge_mesh_from_polydata(_quad_polydata(), MeshOpsConfig(center_on_load=False))
    assert np.allclose(raw.positions[0], [1.0, 1.0, 0.0])


def test_center_positions() -> None:
    pts = np.array([[0.0, 0.0, 0.0], [2.0, 4.0, 6.0]])
    assert np.allclose(center_positions(pts), [[-1.0, -2.0, -3.0], [1.0, 2.0, 3.0]])
    assert center_positions(np.zeros((0, 3))).shape == (0, 3)


def test_mesh_to_polydata() -> None:
    mesh = _make_grid_mesh()
    poly = mesh_to_polydata(mesh)
    assert poly.n_points == len(mesh.vertices)
    assert poly.n_cells == len(mesh.faces)
    assert np.allclose(poly.point_data["colors"], mesh.colors())


def test_save_and_load_round_trip(tmp_path) -> None:
    mesh = _make_grid_mesh()
    path = str(tmp_path / "grid.vtk")
    save_halfedge_mesh(mesh, path)

    loaded = load_halfedge_mesh(path, MeshOpsConfig(center_on_load=False))
    assert np.allclose(loaded.positions, mesh.positions)
    assert [loaded.face_vertices(f) for f in range(len(loaded.faces))] == [
        mesh.face_vertices(f) for f in range(len(mesh.faces))
    ]


def test_config_defaults_and_args() -> None:
    config = MeshOpsConfig()
    assert config.iterations == 1
    assert config.default_color == (0.5, 0.5, 0.5)

    args = argparse.Namespace(iterations=3, inflate_factor=None, unrelated="x")
    config = MeshOpsConfig.from_args(args)
    assert config.iterations == 3
    assert config.inflate_factor == MeshOpsConfig().inflate_factor

    with pytest.raises(ValueError):
        MeshOpsConfig(iterations=-1)
    with pytest.raises(ValueError):
        MeshOpsConfig(default_color=(1.0, 0.0))


def test_cli_smooths_a_file(tmp_path) -> None:
    from scripts.process_mesh import main

    src_path = str(tmp_path / "in.vtk")
    out_path = str(tmp_path / "out" / "smoothed.vtk")
    save_halfedge_mesh(_make_grid_mesh(5), src_path)

    assert main([src_path, out_path, "--op", "smooth", "--iterations", "2"]) == 0
    assert os.path.exists(out_path)

    result = load_halfedge_mesh(out_path, MeshOpsConfig(center_on_load=False))
    assert len(result.vertices) == 25
    assert np.abs(result.positions[:, 2]).max() < 0.5
