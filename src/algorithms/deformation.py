"""Inflate / deflate vertices along their normals."""

from src.logging_utils import get_logger

from .geometry import vertex_normal, vertex_normals

logger = get_logger(__name__)


def inflate_deflate(mesh, factor, vertex=None):
    """
    Move vertices by ``factor`` times their unit normal.

    A positive factor inflates, a negative one deflates. With ``vertex`` set
    only that vertex moves; otherwise every non-isolated vertex moves, with
    all normals taken from the positions before the call.

    Args:
        mesh: HalfEdgeMesh
        factor: signed step length along the normal
        vertex: optional vertex index

    Returns:
        MeshChange describing the committed update
    """
    factor = float(factor)
    kind = "inflate" if factor >= 0 else "deflate"
    snapshot = mesh.positions

    if vertex is not None:
        new_positions = snapshot.copy()
        new_positions[vertex] += factor * vertex_normal(mesh, vertex)
        logger.debug("%s vertex %d by %g", kind, vertex, factor)
        return mesh.commit_positions(new_positions, kind=kind, vertex_ids=[vertex])

    normals = vertex_normals(mesh)
    logger.debug("%s %d vertices by %g", kind, len(mesh.vertices), factor)
    return mesh.commit_positions(snapshot + factor * normals, kind=kind)
