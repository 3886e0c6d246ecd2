"""
Half-edge mesh stored as an arena of integer handles.

Vertices, half-edges and faces live in three index-stable lists owned by
:class:`HalfEdgeMesh`. Every cross reference (``head``, ``pair``, ``next`` ...)
is an index into one of those lists, so the mutually referencing graph has no
Python reference cycles. Vertex positions are kept in a single ``(N, 3)``
float array indexed by vertex id.

Geometric operators never change topology. They compute new positions from a
snapshot and hand the whole array to :meth:`HalfEdgeMesh.commit_positions`,
which notifies subscribers (e.g. a render cache) with a :class:`MeshChange`.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from src.logging_utils import get_logger

from .errors import ConstructionError, DegenerateGeometryError, TopologyError

logger = get_logger(__name__)

DEFAULT_COLOR = (0.5, 0.5, 0.5)


@dataclass
class Vertex:
    id: int
    color: Tuple[float, float, float]
    outgoing: Optional[int] = None  # any half-edge whose tail is this vertex


@dataclass
class HalfEdge:
    index: int
    head: int
    face: Optional[int] = None  # None on the boundary
    pair: Optional[int] = None
    prev: Optional[int] = None
    next: Optional[int] = None

    @property
    def is_boundary(self) -> bool:
        return self.face is None


@dataclass
class Face:
    index: int
    boundary_edge: Optional[int] = None


@dataclass(eq=False)
class MeshChange:
    """Emitted after every mutation; tells renderers their buffers are stale."""

    kind: str
    revision: int
    vertex_ids: Tuple[int, ...] = ()
    displacement: Optional[np.ndarray] = None

    @property
    def topology_changed(self) -> bool:
        return self.kind == "rebuild"


Listener = Callable[[MeshChange], None]


class HalfEdgeMesh:
    """Polygon mesh with half-edge connectivity."""

    def __init__(self, default_color: Sequence[float] = DEFAULT_COLOR, match_edges_by_id: bool = False):
        self.vertices: List[Vertex] = []
        self.half_edges: List[HalfEdge] = []
        self.faces: List[Face] = []
        self.positions = np.zeros((0, 3), dtype=np.float64)
        self.default_color = tuple(float(c) for c in default_color)
        self.match_edges_by_id = match_edges_by_id
        self.revision = 0
        self._listeners: List[Listener] = []

    @classmethod
    def from_polygon_soup(cls, positions, faces, colors=None, **kwargs) -> "HalfEdgeMesh":
        mesh = cls(**kwargs)
        mesh.load(positions, faces, colors)
        return mesh

    def __repr__(self) -> str:
        return (
            f"HalfEdgeMesh(vertices={len(self.vertices)}, "
            f"half_edges={len(self.half_edges)}, faces={len(self.faces)})"
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self.vertices = []
        self.half_edges = []
        self.faces = []
        self.positions = np.zeros((0, 3), dtype=np.float64)

    def load(self, positions, faces, colors=None) -> MeshChange:
        """
        Rebuild the mesh from an oriented polygon soup.

        Args:
            positions: (N, 3) vertex positions, already centred by the loader
            faces: iterable of vertex-id sequences, each in CCW order and
                consistently oriented with its neighbours
            colors: optional (N, 3) per-vertex colours

        Returns:
            The ``rebuild`` change event.

        Raises:
            ConstructionError: if the soup cannot form a manifold half-edge
                graph. The mesh is left empty in that case.
        """
        points = self._validate_positions(positions)
        vertex_colors = self._validate_colors(colors, points.shape[0])
        loops = self._validate_faces(faces, points.shape[0])

        self.clear()
        try:
            self._build(points, vertex_colors, loops)
        except ConstructionError:
            self.clear()
            raise

        logger.info(
            "Initialized half edge mesh with %d vertices, %d half edges, %d faces",
            len(self.vertices), len(self.half_edges), len(self.faces),
        )
        return self._notify("rebuild", vertex_ids=range(len(self.vertices)))

    @staticmethod
    def _validate_positions(positions) -> np.ndarray:
        points = np.array(positions, dtype=np.float64)
        if points.size == 0:
            return np.zeros((0, 3), dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ConstructionError(f"positions must be shaped (N, 3), got {points.shape}")
        if not np.isfinite(points).all():
            raise ConstructionError("positions contain non-finite values")
        return points

    def _validate_colors(self, colors, num_verts: int) -> np.ndarray:
        if colors is None:
            return np.tile(np.asarray(self.default_color, dtype=np.float64), (num_verts, 1))
        values = np.asarray(colors, dtype=np.float64)
        if values.shape != (num_verts, 3):
            raise ConstructionError(
                f"colors must be shaped ({num_verts}, 3), got {values.shape}"
            )
        return values

    @staticmethod
    def _validate_faces(faces, num_verts: int) -> List[List[int]]:
        loops = []
        for index, face in enumerate(faces):
            ids = [int(v) for v in face]
            if len(ids) < 3:
                raise ConstructionError(f"face {index} has {len(ids)} vertices, at least 3 are required")
            if len(set(ids)) != len(ids):
                raise ConstructionError(f"face {index} repeats a vertex: {ids}")
            bad = [v for v in ids if v < 0 or v >= num_verts]
            if bad:
                raise ConstructionError(f"face {index} references unknown vertices {bad}")
            loops.append(ids)
        return loops

    def _add_half_edge(self, tail: int, head: int, face: Optional[int]) -> HalfEdge:
        """Append a half-edge from ``tail`` to ``head`` owned by ``face``."""
        hedge = HalfEdge(index=len(self.half_edges), head=head, face=face)
        self.half_edges.append(hedge)
        if face is not None:
            self.vertices[tail].outgoing = hedge.index
        return hedge

    def _build(self, points: np.ndarray, colors: np.ndarray, loops: List[List[int]]) -> None:
        self.positions = points
        for i in range(points.shape[0]):
            self.vertices.append(Vertex(id=i, color=tuple(float(c) for c in colors[i])))

        # Face loops, keyed by directed (tail, head) vertex ids
        directed: Dict[Tuple[int, int], int] = {}
        for ids in loops:
            face = Face(index=len(self.faces))
            self.faces.append(face)
            loop = []
            for k, tail in enumerate(ids):
                head = ids[(k + 1) % len(ids)]
                if (tail, head) in directed:
                    raise ConstructionError(
                        f"directed edge {tail}->{head} is used by more than one face "
                        "(non-manifold or inconsistently oriented input)"
                    )
                hedge = self._add_half_edge(tail, head, face.index)
                directed[(tail, head)] = hedge.index
                face.boundary_edge = hedge.index
                loop.append(hedge)
            for k, hedge in enumerate(loop):
                following = loop[(k + 1) % len(loop)]
                hedge.next = following.index
                following.prev = hedge.index

        # Pair interior edges; synthesize a face-less twin where none exists.
        # Boundary twins are indexed by their tail vertex.
        boundary_by_tail: Dict[int, int] = {}
        for (tail, head), index in directed.items():
            twin = directed.get((head, tail))
            if twin is not None:
                self.half_edges[index].pair = twin
                continue
            if head in boundary_by_tail:
                raise ConstructionError(
                    f"vertex {head} has more than one outgoing boundary edge (non-manifold vertex)"
                )
            boundary = self._add_half_edge(head, tail, None)
            boundary.pair = index
            self.half_edges[index].pair = boundary.index
            boundary_by_tail[head] = boundary.index

        # Close the boundary loops
        for index in boundary_by_tail.values():
            boundary = self.half_edges[index]
            successor = boundary_by_tail.get(boundary.head)
            if successor is None:
                raise ConstructionError(f"boundary at vertex {boundary.head} does not continue")
            if self.half_edges[successor].prev is not None:
                raise ConstructionError(f"boundary loops cross at vertex {boundary.head}")
            boundary.next = successor
            self.half_edges[successor].prev = index

        self._check_vertex_rings()

    def _check_vertex_rings(self) -> None:
        """Every outgoing half-edge of a vertex must be reachable around its ring."""
        if not self.half_edges:
            return
        tails = np.array([self.half_edges[e.prev].head for e in self.half_edges], dtype=np.int64)
        expected = np.bincount(tails, minlength=len(self.vertices))
        for vertex in self.vertices:
            if vertex.outgoing is None:
                continue
            try:
                ring = self.outgoing_edges(vertex.id)
            except TopologyError as exc:
                raise ConstructionError(str(exc)) from exc
            if len(ring) != expected[vertex.id]:
                raise ConstructionError(
                    f"vertex {vertex.id} is non-manifold: its ring reaches {len(ring)} "
                    f"of {expected[vertex.id]} outgoing half-edges"
                )

    # ------------------------------------------------------------------
    # Topology queries
    # ------------------------------------------------------------------

    def edge_tail(self, edge: int) -> Optional[int]:
        prev = self.half_edges[edge].prev
        return None if prev is None else self.half_edges[prev].head

    def edge_vertices(self, edge: int) -> List[int]:
        """Return ``[head, tail]`` of a half-edge, or ``[]`` if it is not linked yet."""
        tail = self.edge_tail(edge)
        if tail is None:
            return []
        return [self.half_edges[edge].head, tail]

    def face_edges(self, face: int) -> List[int]:
        """Half-edges bounding ``face`` in CCW order, starting at its boundary edge."""
        start = self.faces[face].boundary_edge
        if start is None:
            return []
        edges = [start]
        current = self.half_edges[start].next
        while current != start:
            if len(edges) > len(self.half_edges):
                raise TopologyError(f"face {face} loop does not close")
            edges.append(current)
            current = self.half_edges[current].next
        return edges

    def face_vertices(self, face: int) -> List[int]:
        return [self.half_edges[e].head for e in self.face_edges(face)]

    def outgoing_edges(self, vertex: int) -> List[int]:
        """
        Walk the ring of half-edges leaving ``vertex``.

        Each step goes ``prev.pair``; boundary half-edges are part of the ring,
        so boundary vertices are handled the same way as interior ones.
        """
        start = self.vertices[vertex].outgoing
        if start is None:
            return []
        ring = []
        current = start
        while True:
            ring.append(current)
            current = self.half_edges[self.half_edges[current].prev].pair
            if current == start:
                return ring
            if len(ring) > len(self.half_edges):
                raise TopologyError(f"ring around vertex {vertex} does not close")

    def vertex_neighbors(self, vertex: int) -> List[int]:
        return [self.half_edges[e].head for e in self.outgoing_edges(vertex)]

    def attached_faces(self, vertex: int) -> List[int]:
        faces = []
        for e in self.outgoing_edges(vertex):
            face = self.half_edges[e].face
            if face is not None:
                faces.append(face)
        return faces

    def edge_between(self, vertex: int, other: int, by_id: Optional[bool] = None) -> Optional[int]:
        """
        Return the half-edge from ``vertex`` to ``other``, or None.

        Neighbours are matched by exact position unless ``by_id`` is set, so
        two vertices sharing a position are ambiguous in that mode. When
        ``by_id`` is None the mesh-wide ``match_edges_by_id`` setting applies.
        """
        if by_id is None:
            by_id = self.match_edges_by_id
        for e in self.outgoing_edges(vertex):
            head = self.half_edges[e].head
            if by_id:
                if head == other:
                    return e
            elif np.array_equal(self.positions[head], self.positions[other]):
                return e
        return None

    # ------------------------------------------------------------------
    # Render buffers
    # ------------------------------------------------------------------

    def triangle_indices(self) -> np.ndarray:
        """Fan triangulation of every face, 3 vertex ids per triangle."""
        indices = []
        for face in range(len(self.faces)):
            ids = self.face_vertices(face)
            for t in range(1, len(ids) - 1):
                indices.extend((ids[0], ids[t], ids[t + 1]))
        return np.asarray(indices, dtype=np.uint32)

    def edge_indices(self) -> np.ndarray:
        """2 vertex ids per half-edge; both halves of an interior edge appear."""
        indices = []
        for edge in range(len(self.half_edges)):
            indices.extend(self.edge_vertices(edge))
        return np.asarray(indices, dtype=np.uint32)

    def colors(self) -> np.ndarray:
        if not self.vertices:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array([v.color for v in self.vertices], dtype=np.float64)

    # ------------------------------------------------------------------
    # Mutation and change events
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Listener:
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, kind: str, vertex_ids=(), displacement=None) -> MeshChange:
        self.revision += 1
        change = MeshChange(
            kind=kind,
            revision=self.revision,
            vertex_ids=tuple(int(v) for v in vertex_ids),
            displacement=displacement,
        )
        for listener in list(self._listeners):
            listener(change)
        return change

    def commit_positions(self, new_positions, kind: str = "positions", vertex_ids=None) -> MeshChange:
        """
        Replace every vertex position at once and notify listeners.

        Args:
            new_positions: (N, 3) array computed from a snapshot of ``positions``
            kind: label carried by the change event ("smooth", "inflate", ...)
            vertex_ids: vertices reported as moved; defaults to those whose
                position actually changed

        Returns:
            MeshChange with the applied displacement.
        """
        new = np.array(new_positions, dtype=np.float64)
        if new.shape != self.positions.shape:
            raise ValueError(f"expected positions shaped {self.positions.shape}, got {new.shape}")
        if not np.isfinite(new).all():
            raise DegenerateGeometryError(f"{kind} produced non-finite vertex positions")
        displacement = new - self.positions
        if vertex_ids is None:
            vertex_ids = np.flatnonzero(np.any(displacement != 0, axis=1))
        self.positions = new
        return self._notify(kind, vertex_ids=vertex_ids, displacement=displacement)

    def copy(self) -> "HalfEdgeMesh":
        """Independent copy of topology and positions, without listeners."""
        clone = type(self)(default_color=self.default_color, match_edges_by_id=self.match_edges_by_id)
        clone.vertices = copy.deepcopy(self.vertices)
        clone.half_edges = copy.deepcopy(self.half_edges)
        clone.faces = copy.deepcopy(self.faces)
        clone.positions = self.positions.copy()
        clone.revision = self.revision
        return clone
