"""
3D density volume sweep for voxelization.

The flat buffer is Y-major: index ``y * n * n + z * n + x``. Downstream
meshing treats any value >= 0 as solid.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import structlog

from .context import EvaluationOptions, create_evaluation_context
from .graph_model import EdgeLike, NodeLike

logger = structlog.get_logger()


@dataclass
class VolumeResult:
    densities: np.ndarray
    resolution: int
    y_slices: int
    min_value: float
    max_value: float

    def as_3d(self) -> np.ndarray:
        """View the flat buffer as ``[y, z, x]``."""
        return self.densities.reshape(self.y_slices, self.resolution, self.resolution)

    def solid_mask(self) -> np.ndarray:
        return self.as_3d() >= 0

    def to_dict(self) -> dict:
        return {
            "densities": self.densities.tolist(),
            "resolution": self.resolution,
            "ySlices": self.y_slices,
            "minValue": self.min_value,
            "maxValue": self.max_value,
        }


def evaluate_density_volume(
    nodes: Iterable[NodeLike],
    edges: Iterable[EdgeLike],
    resolution: int = 32,
    range_min: float = -64.0,
    range_max: float = 64.0,
    y_min: float = 0.0,
    y_max: float = 64.0,
    y_slices: int = 32,
    root_node_id: Optional[str] = None,
    options: Optional[EvaluationOptions] = None,
) -> VolumeResult:
    """
    Evaluate a density graph across a 3D volume.

    X and Z step over ``[range_min, range_max)`` in ``resolution`` cells;
    Y steps linearly from ``y_min`` to ``y_max`` inclusive across
    ``y_slices`` slices. A single slice samples ``y_min`` only.
    """
    n = max(1, int(resolution))
    slices = max(1, int(y_slices))
    densities = np.zeros(n * n * slices, dtype=np.float32)

    ctx = create_evaluation_context(nodes, edges, root_node_id, options)
    if ctx is None:
        logger.debug("Volume evaluation without a root", resolution=n, y_slices=slices)
        return VolumeResult(densities, n, slices, 0.0, 0.0)

    step_xz = (range_max - range_min) / n
    step_y = (y_max - y_min) / (slices - 1) if slices > 1 else 0.0
    min_value = math.inf
    max_value = -math.inf

    for yi in range(slices):
        wy = y_min + yi * step_y
        for zi in range(n):
            wz = range_min + zi * step_xz
            for xi in range(n):
                wx = range_min + xi * step_xz
                value = ctx.sample(wx, wy, wz)
                densities[yi * n * n + zi * n + xi] = value
                if value < min_value:
                    min_value = value
                if value > max_value:
                    max_value = value

    return VolumeResult(
        densities,
        n,
        slices,
        min_value if math.isfinite(min_value) else 0.0,
        max_value if math.isfinite(max_value) else 0.0,
    )
