"""
Per-face and per-vertex geometric estimates on a half-edge mesh.
"""

import numpy as np

from src.mesh.errors import DegenerateGeometryError


def face_area(mesh, face):
    """
    Area of a face by fan triangulation from its first vertex.

    Exact for planar convex polygons; for non-planar or concave faces this is
    the sum of the fan triangle areas, not the true surface area.

    Args:
        mesh: HalfEdgeMesh
        face: face index

    Returns:
        float area
    """
    ids = mesh.face_vertices(face)
    if len(ids) < 3:
        return 0.0
    pts = mesh.positions[ids]
    spokes = pts[1:] - pts[0]
    cross = np.cross(spokes[:-1], spokes[1:])
    return float(np.sum(np.linalg.norm(cross, axis=1)) / 2)


def face_normal(mesh, face):
    """
    Unnormalized normal from the first fan triangle of the face.

    Its length is twice that triangle's area; vertex normals rely on that
    scaling, so it is not normalized here.
    """
    ids = mesh.face_vertices(face)
    if len(ids) < 3:
        return np.zeros(3)
    p0, p1, p2 = mesh.positions[ids[:3]]
    return np.cross(p1 - p0, p2 - p0)


def vertex_normal(mesh, vertex):
    """
    Unit vertex normal from the attached faces.

    Each face normal is weighted by its area, and the sum is divided by the
    number of attached faces before normalizing.

    Raises:
        DegenerateGeometryError: the vertex has no attached face, or the
            weighted normals cancel out.
    """
    faces = mesh.attached_faces(vertex)
    if not faces:
        raise DegenerateGeometryError(f"vertex {vertex} has no attached faces; its normal is undefined")

    normal = np.zeros(3)
    for face in faces:
        normal += face_area(mesh, face) * face_normal(mesh, face)
    normal /= len(faces)

    length = np.linalg.norm(normal)
    if not np.isfinite(length) or length == 0:
        raise DegenerateGeometryError(f"normal at vertex {vertex} has zero length")
    return normal / length


def vertex_normals(mesh):
    """
    Unit normals for every vertex, all computed from the current positions.

    Isolated vertices (no incident half-edge) get a zero vector.

    Returns:
        normals: (N, 3) array
    """
    normals = np.zeros((len(mesh.vertices), 3))
    for vertex in mesh.vertices:
        if vertex.outgoing is None:
            continue
        normals[vertex.id] = vertex_normal(mesh, vertex.id)
    return normals
