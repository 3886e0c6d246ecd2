"""
Half-edge mesh data structure.
"""

from .errors import (
    MeshError,
    ConstructionError,
    TopologyError,
    DegenerateGeometryError,
)
from .halfedge import (
    DEFAULT_COLOR,
    Vertex,
    HalfEdge,
    Face,
    MeshChange,
    HalfEdgeMesh,
)
from .primitives import tetrahedron_soup, cube_soup, grid_soup, grid_center_index

__all__ = [
    # Errors
    'MeshError',
    'ConstructionError',
    'TopologyError',
    'DegenerateGeometryError',
    # Topology
    'DEFAULT_COLOR',
    'Vertex',
    'HalfEdge',
    'Face',
    'MeshChange',
    'HalfEdgeMesh',
    # Demo geometry
    'tetrahedron_soup',
    'cube_soup',
    'grid_soup',
    'grid_center_index',
]
