"""
Core geometric algorithms on half-edge meshes.
"""

from .geometry import (
    face_area,
    face_normal,
    vertex_normal,
    vertex_normals,
)
from .deformation import inflate_deflate
from .smoothing import (
    vector_angle,
    cotangent,
    opposite_vertices,
    edge_cotangent_weight,
    cotangent_weight_matrix,
    laplacian_deltas,
    laplacian_smooth_sharpen,
    cotangent_laplacian_smoothing,
)
from .operations import OPERATIONS, apply_pass, apply_operation

__all__ = [
    # Face / vertex estimates
    'face_area',
    'face_normal',
    'vertex_normal',
    'vertex_normals',
    # Deformation
    'inflate_deflate',
    # Curvature-flow smoothing
    'vector_angle',
    'cotangent',
    'opposite_vertices',
    'edge_cotangent_weight',
    'cotangent_weight_matrix',
    'laplacian_deltas',
    'laplacian_smooth_sharpen',
    'cotangent_laplacian_smoothing',
    # User actions
    'OPERATIONS',
    'apply_pass',
    'apply_operation',
]
