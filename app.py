"""Streamlit demo app for the half-edge mesh operators.

Each button is one user action: inflate/deflate along vertex normals, or one
curvature-flow smoothing/sharpening step. The plot reads the mesh through a
RenderCache, which is marked stale by the mesh's change events.

Design constraints:
- No `pv.Plotter().show()` or anything that opens a native window. We use Plotly WebGL.
"""

from __future__ import annotations

import os
import tempfile
from typing import Optional

import numpy as np
import pyvista as pv
import streamlit as st

from src.algorithms import apply_operation
from src.config import MeshOpsConfig
from src.logging_utils import configure_logging
from src.mesh import HalfEdgeMesh, MeshError, cube_soup, grid_soup, tetrahedron_soup
from src.mesh.conversion import load_halfedge_mesh
from src.viz import RenderCache, mesh_figure


# ---- PyVista configuration (safe: no windows) ----
pv.OFF_SCREEN = True


DEMO_MESHES = {
    "Bumpy grid": lambda: grid_soup(15, bump_height=2.0, noise=0.05, seed=0),
    "Tetrahedron": tetrahedron_soup,
    "Cube (quads)": cube_soup,
}


def _load_demo(name: str, config: MeshOpsConfig) -> HalfEdgeMesh:
    verts, faces = DEMO_MESHES[name]()
    return HalfEdgeMesh.from_polygon_soup(
        verts, faces,
        default_color=config.default_color,
        match_edges_by_id=config.match_edges_by_id,
    )


def _load_upload(upload, config: MeshOpsConfig) -> HalfEdgeMesh:
    suffix = os.path.splitext(upload.name)[1]
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
        tmp.write(upload.getvalue())
        path = tmp.name
    try:
        return load_halfedge_mesh(path, config)
    finally:
        os.remove(path)


def _set_mesh(mesh: HalfEdgeMesh, source: str) -> None:
    old: Optional[RenderCache] = st.session_state.get("render_cache")
    if old is not None:
        old.close()
    st.session_state["mesh"] = mesh
    st.session_state["render_cache"] = RenderCache(mesh)
    st.session_state["source"] = source
    st.session_state["last_change"] = None


def _run_action(action: str, config: MeshOpsConfig) -> None:
    mesh: HalfEdgeMesh = st.session_state["mesh"]
    applied = []

    def _record(change):
        applied.append(change)
        st.session_state["last_change"] = change

    try:
        apply_operation(mesh, action, config, on_pass=_record)
    except MeshError as exc:
        st.error(
            f"{action.capitalize()} refused after {len(applied)} of "
            f"{config.iterations} passes: {exc}"
        )


def main() -> None:
    st.set_page_config(page_title="Half-Edge Mesh Lab", layout="wide")
    config = MeshOpsConfig()
    configure_logging(config.log_level)

    st.title("Half-Edge Mesh Lab")

    with st.sidebar:
        st.markdown("## Mesh")
        demo = st.selectbox("Demo mesh", list(DEMO_MESHES.keys()), index=0)
        upload = st.file_uploader("...or upload a surface", type=["ply", "stl", "obj", "vtk", "vtp"])

        source = upload.name if upload is not None else demo
        reload_clicked = st.button("Reload")
        if reload_clicked or st.session_state.get("source") != source:
            try:
                mesh = _load_upload(upload, config) if upload is not None else _load_demo(demo, config)
            except MeshError as exc:
                st.error(f"Cannot build a half-edge mesh: {exc}")
                st.stop()
            _set_mesh(mesh, source)

        st.markdown("---")
        st.markdown("## Operators")
        config.inflate_factor = st.slider("Inflate step", 0.005, 0.5, float(config.inflate_factor), 0.005)
        config.iterations = st.slider("Passes per click", 1, 10, int(config.iterations))
        show_wireframe = st.checkbox("Show half-edges", value=True)
        color_by_displacement = st.checkbox("Color by last displacement", value=False)

        cols = st.columns(2)
        if cols[0].button("Inflate"):
            _run_action("inflate", config)
        if cols[1].button("Deflate"):
            _run_action("deflate", config)
        cols = st.columns(2)
        if cols[0].button("Smooth"):
            _run_action("smooth", config)
        if cols[1].button("Sharpen"):
            _run_action("sharpen", config)

    mesh: HalfEdgeMesh = st.session_state["mesh"]
    cache: RenderCache = st.session_state["render_cache"]
    change = st.session_state.get("last_change")

    intensity = None
    if color_by_displacement and change is not None and change.displacement is not None:
        intensity = np.linalg.norm(change.displacement, axis=1)

    buffers = cache.buffers()
    st.plotly_chart(
        mesh_figure(buffers, show_wireframe=show_wireframe, intensity=intensity),
        use_container_width=True,
    )

    cols = st.columns(4)
    cols[0].metric("Vertices", len(mesh.vertices))
    cols[1].metric("Half-edges", len(mesh.half_edges))
    cols[2].metric("Faces", len(mesh.faces))
    cols[3].metric("Revision", buffers.revision)


if __name__ == "__main__":
    main()
