"""Exceptions raised by the half-edge mesh and the operators built on it."""


class MeshError(ValueError):
    """Base class for invalid mesh input or state."""


class ConstructionError(MeshError):
    """The polygon soup cannot be turned into a consistent half-edge graph."""


class TopologyError(MeshError):
    """A face loop or vertex ring does not close (corrupted adjacency)."""


class DegenerateGeometryError(MeshError):
    """A numeric quantity is undefined, e.g. a normal or weight sum of zero."""
