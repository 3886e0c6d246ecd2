"""
Rendering helpers fed by the mesh's render buffers.
"""

from .render_cache import RenderBuffers, RenderCache
from .figures import mesh_figure

__all__ = [
    'RenderBuffers',
    'RenderCache',
    'mesh_figure',
]
