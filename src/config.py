"""Runtime settings shared by the CLI, the demo app and the mesh builder."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Tuple


@dataclass
class MeshOpsConfig:
    # Step applied along the unit vertex normal per inflate/deflate action
    inflate_factor: float = 0.05
    # Number of smoothing / sharpening passes per action
    iterations: int = 1
    # Vertex colour used when the loader provides none
    default_color: Tuple[float, float, float] = field(default=(0.5, 0.5, 0.5))
    # Default matching mode of HalfEdgeMesh.edge_between(); False matches by position
    match_edges_by_id: bool = False
    center_on_load: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if self.iterations < 0:
            raise ValueError("iterations must be non-negative")
        if len(self.default_color) != 3:
            raise ValueError("default_color must have 3 components")
        self.default_color = tuple(float(c) for c in self.default_color)

    @classmethod
    def from_args(cls, args: Any) -> "MeshOpsConfig":
        """Build a config from an argparse namespace, ignoring unset values."""
        known = {f.name for f in fields(cls)}
        values = {
            name: value
            for name, value in vars(args).items()
            if name in known and value is not None
        }
        return cls(**values)
