"""Plotly figures built from render buffers (WebGL, no native windows)."""

from __future__ import annotations

from typing import Optional

import numpy as np
import plotly.graph_objects as go

from .render_cache import RenderBuffers

PLOT_SCENE_BG = "#ffffff"
WIRE_COLOR = "rgba(15, 23, 42, 0.55)"


def _scene_cube_bounds(v: np.ndarray, padding: float = 0.06):
    if v.shape[0] == 0:
        return np.zeros(3), 1.0
    lo = v.min(axis=0)
    hi = v.max(axis=0)
    center = (lo + hi) / 2
    half = float(np.max(hi - lo)) / 2
    half = max(half, 1e-6) * (1 + padding)
    return center, half


def _color_strings(colors: np.ndarray) -> list:
    rgb = np.clip(np.rint(colors * 255), 0, 255).astype(int)
    return [f"rgb({r},{g},{b})" for r, g, b in rgb]


def _edge_segments(positions: np.ndarray, edges: np.ndarray):
    """x/y/z coordinate lists with None separators between line segments."""
    pairs = edges.reshape(-1, 2)
    xs, ys, zs = [], [], []
    for a, b in pairs:
        for axis, out in enumerate((xs, ys, zs)):
            out.extend((positions[a, axis], positions[b, axis], None))
    return xs, ys, zs


def mesh_figure(
    buffers: RenderBuffers,
    *,
    show_wireframe: bool = True,
    intensity: Optional[np.ndarray] = None,
    height: int = 620,
) -> go.Figure:
    """
    Shaded mesh plus optional half-edge wireframe.

    Vertex colours from the mesh are used unless ``intensity`` is given, in
    which case it drives a continuous colour scale (e.g. displacement).
    """
    v = buffers.positions
    tris = buffers.triangles.reshape(-1, 3)
    center, half = _scene_cube_bounds(v)

    mesh_kwargs = dict(
        x=v[:, 0],
        y=v[:, 1],
        z=v[:, 2],
        i=tris[:, 0],
        j=tris[:, 1],
        k=tris[:, 2],
        opacity=1.0,
        flatshading=True,
        hoverinfo="skip",
        name="Mesh",
        showscale=False,
    )
    if intensity is not None:
        mesh_kwargs.update(intensity=np.asarray(intensity, dtype=np.float32), colorscale="Viridis")
    else:
        mesh_kwargs.update(vertexcolor=_color_strings(buffers.colors))

    fig = go.Figure()
    fig.add_trace(go.Mesh3d(**mesh_kwargs))

    if show_wireframe and buffers.edges.size:
        xs, ys, zs = _edge_segments(v, buffers.edges)
        fig.add_trace(
            go.Scatter3d(
                x=xs,
                y=ys,
                z=zs,
                mode="lines",
                line=dict(color=WIRE_COLOR, width=2),
                hoverinfo="skip",
                name="Edges",
            )
        )

    fig.update_layout(
        margin=dict(l=0, r=0, t=0, b=0),
        showlegend=False,
        height=height,
        scene=dict(
            xaxis=dict(visible=False, range=[center[0] - half, center[0] + half]),
            yaxis=dict(visible=False, range=[center[1] - half, center[1] + half]),
            zaxis=dict(visible=False, range=[center[2] - half, center[2] + half]),
            bgcolor=PLOT_SCENE_BG,
            aspectmode="cube",
        ),
    )
    return fig
