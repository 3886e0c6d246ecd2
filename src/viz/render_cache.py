"""Render buffers kept in sync with a mesh through its change events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from src.mesh.halfedge import HalfEdgeMesh, MeshChange


@dataclass(frozen=True)
class RenderBuffers:
    positions: np.ndarray  # (N, 3)
    colors: np.ndarray  # (N, 3)
    triangles: np.ndarray  # flat, 3 ids per triangle
    edges: np.ndarray  # flat, 2 ids per half-edge
    revision: int


class RenderCache:
    """
    Lazily rebuilt render buffers for one mesh.

    Position updates only refresh the vertex data; index buffers are rebuilt
    after a topology rebuild.
    """

    def __init__(self, mesh: HalfEdgeMesh):
        self.mesh = mesh
        self.rebuild_count = 0
        self._buffers: Optional[RenderBuffers] = None
        self._topology_stale = True
        self._positions_stale = True
        mesh.subscribe(self._on_change)

    def _on_change(self, change: MeshChange) -> None:
        self._positions_stale = True
        if change.topology_changed:
            self._topology_stale = True

    @property
    def stale(self) -> bool:
        return self._positions_stale or self._topology_stale

    def buffers(self) -> RenderBuffers:
        if not self.stale and self._buffers is not None:
            return self._buffers

        if self._topology_stale or self._buffers is None:
            triangles = self.mesh.triangle_indices()
            edges = self.mesh.edge_indices()
            colors = self.mesh.colors()
            self.rebuild_count += 1
        else:
            triangles = self._buffers.triangles
            edges = self._buffers.edges
            colors = self._buffers.colors

        self._buffers = RenderBuffers(
            positions=self.mesh.positions.copy(),
            colors=colors,
            triangles=triangles,
            edges=edges,
            revision=self.mesh.revision,
        )
        self._topology_stale = False
        self._positions_stale = False
        return self._buffers

    def close(self) -> None:
        self.mesh.unsubscribe(self._on_change)
