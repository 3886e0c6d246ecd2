"""Named user actions (smooth, sharpen, inflate, deflate) run for several passes."""

from src.logging_utils import get_logger

from .deformation import inflate_deflate
from .smoothing import laplacian_smooth_sharpen

logger = get_logger(__name__)

OPERATIONS = ('smooth', 'sharpen', 'inflate', 'deflate')


def apply_pass(mesh, op, config):
    """Run one pass of ``op`` and return its MeshChange."""
    if op == 'smooth':
        return laplacian_smooth_sharpen(mesh, smooth=True)
    if op == 'sharpen':
        return laplacian_smooth_sharpen(mesh, smooth=False)
    if op == 'inflate':
        return inflate_deflate(mesh, abs(config.inflate_factor))
    if op == 'deflate':
        return inflate_deflate(mesh, -abs(config.inflate_factor))
    raise ValueError(f"Unknown operation: {op}")


def apply_operation(mesh, op, config, on_pass=None):
    """
    Run ``op`` ``config.iterations`` times.

    Every pass commits to the mesh on its own, so when pass k raises, passes
    1..k-1 stay applied. ``on_pass`` is called with each committed change, which
    lets callers keep their view of the mesh in step even when a later pass fails.

    Returns:
        list of MeshChange, one per pass
    """
    if op not in OPERATIONS:
        raise ValueError(f"Unknown operation: {op}")
    changes = []
    for _ in range(config.iterations):
        change = apply_pass(mesh, op, config)
        changes.append(change)
        if on_pass is not None:
            on_pass(change)
    logger.debug("%s x%d applied", op, len(changes))
    return changes
