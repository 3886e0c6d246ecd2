import numpy as np
from scipy import sparse

from src.logging_utils import get_logger
from src.mesh.errors import DegenerateGeometryError
from src.mesh.halfedge import HalfEdgeMesh

logger = get_logger(__name__)

# Cotangent used when tan(angle) <= 0, i.e. for right/obtuse angles and
# zero-width angles. Keeps every edge weight strictly positive.
_CLAMPED_COTANGENT = 1.0


def vector_angle(a, b):
    """
    Unsigned angle between two vectors in [0, pi].

    A zero-length vector is treated as perpendicular to everything.
    """
    mag = np.linalg.norm(a) * np.linalg.norm(b)
    cosine = np.dot(a, b) / mag if mag else 0.0
    return float(np.arccos(np.clip(cosine, -1.0, 1.0)))


def cotangent(angle):
    tangent = np.tan(angle)
    if tangent <= 0:
        return _CLAMPED_COTANGENT
    return float(1.0 / tangent)


def opposite_vertices(mesh, edge):
    """
    The two vertices facing half-edge ``edge`` across its adjacent faces.

    For ``edge = i -> j`` these are the head of ``prev.pair`` (the third vertex
    of the face left of the edge) and the head of ``pair.prev.pair`` (the third
    vertex on the other side). On the boundary the face-less side resolves
    through the boundary loop.
    """
    hedges = mesh.half_edges
    hedge = hedges[edge]
    opp1 = hedges[hedges[hedge.prev].pair].head
    twin = hedges[hedge.pair]
    opp2 = hedges[hedges[twin.prev].pair].head
    return opp1, opp2


def edge_cotangent_weight(mesh, edge, positions=None):
    """
    Cotangent weight ``(cot(alpha) + cot(beta)) / 2`` of a half-edge.

    Args:
        mesh: HalfEdgeMesh
        edge: half-edge index, read as ``i -> j``
        positions: optional (N, 3) snapshot; defaults to ``mesh.positions``
    """
    P = mesh.positions if positions is None else positions
    i = mesh.edge_tail(edge)
    j = mesh.half_edges[edge].head
    opp1, opp2 = opposite_vertices(mesh, edge)

    alpha = vector_angle(P[i] - P[opp1], P[j] - P[opp1])
    beta = vector_angle(P[i] - P[opp2], P[j] - P[opp2])
    return (cotangent(alpha) + cotangent(beta)) / 2


def cotangent_weight_matrix(mesh, positions=None):
    """
    Build the sparse matrix W with W[i, j] = w_ij for every ring edge i -> j.

    Rows of isolated vertices are empty.
    """
    P = mesh.positions if positions is None else positions
    num_verts = len(mesh.vertices)

    rows, cols, data = [], [], []
    for vertex in mesh.vertices:
        for edge in mesh.outgoing_edges(vertex.id):
            rows.append(vertex.id)
            cols.append(mesh.half_edges[edge].head)
            data.append(edge_cotangent_weight(mesh, edge, P))

    W = sparse.coo_matrix(
        (np.asarray(data, dtype=np.float64),
         (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
        shape=(num_verts, num_verts),
    )
    # Convert to CSR for efficient arithmetic
    W = W.tocsr()
    W.sum_duplicates()
    return W


def laplacian_deltas(mesh, positions=None):
    """
    Curvature-flow Laplacian of every vertex from one position snapshot.

    delta_i = (sum_j w_ij * P_j) / (sum_j w_ij) - P_i

    Args:
        mesh: HalfEdgeMesh
        positions: optional (N, 3) snapshot; defaults to ``mesh.positions``

    Returns:
        deltas: (N, 3) array, zero for isolated vertices

    Raises:
        DegenerateGeometryError: a vertex with neighbours has a weight sum
            that is not positive and finite.
    """
    P = np.asarray(mesh.positions if positions is None else positions, dtype=np.float64)
    W = cotangent_weight_matrix(mesh, P)

    totals = np.asarray(W.sum(axis=1)).ravel()
    has_ring = np.array([v.outgoing is not None for v in mesh.vertices], dtype=bool)
    singular = has_ring & ~(np.isfinite(totals) & (totals > 0))
    if np.any(singular):
        raise DegenerateGeometryError(
            f"cotangent weights do not sum to a positive value at vertices "
            f"{np.flatnonzero(singular)[:10].tolist()}"
        )

    inv_totals = np.zeros(len(totals))
    inv_totals[has_ring] = 1.0 / totals[has_ring]
    averages = (W @ P) * inv_totals[:, None]

    deltas = np.zeros_like(P)
    deltas[has_ring] = averages[has_ring] - P[has_ring]
    return deltas


def laplacian_smooth_sharpen(mesh, smooth=True):
    """
    One curvature-flow step: P + delta when smoothing, P - delta when sharpening.

    All deltas come from the positions before the call and are committed
    together, so the result does not depend on vertex order.

    Returns:
        MeshChange whose ``displacement`` is the applied per-vertex offset
    """
    deltas = laplacian_deltas(mesh)
    sign = 1.0 if smooth else -1.0
    kind = "smooth" if smooth else "sharpen"
    logger.debug("%s step on %d vertices", kind, len(mesh.vertices))
    return mesh.commit_positions(mesh.positions + sign * deltas, kind=kind)


def cotangent_laplacian_smoothing(verts, faces, iterations, smooth=True):
    """
    Apply curvature-flow smoothing (or sharpening) to a polygon soup.

    Args:
        verts: (N, 3) vertex positions
        faces: CCW face index lists or (M, 3) array
        iterations: number of passes
        smooth: False to sharpen instead

    Returns:
        new_verts: (N, 3) processed positions
    """
    mesh = HalfEdgeMesh.from_polygon_soup(verts, faces)
    for _ in range(iterations):
        laplacian_smooth_sharpen(mesh, smooth=smooth)
    return mesh.positions
