"""
2D density grid sweep for preview heatmaps.

Cells are laid out row-major (``row * n + col``); ``col`` walks X and ``row``
walks Z across ``[range_min, range_max)`` at a fixed Y level.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import structlog

from .context import EvaluationContext, EvaluationOptions, create_evaluation_context
from .graph_model import EdgeLike, NodeLike

logger = structlog.get_logger()


@dataclass
class DensityGridResult:
    """Flat row-major density values with their observed range."""

    values: np.ndarray
    min_value: float
    max_value: float

    @property
    def resolution(self) -> int:
        return int(math.isqrt(self.values.size))

    def as_2d(self) -> np.ndarray:
        """View the flat buffer as ``[row, col]``."""
        n = self.resolution
        return self.values.reshape(n, n)

    def to_dict(self) -> dict:
        return {
            "values": self.values.tolist(),
            "minValue": self.min_value,
            "maxValue": self.max_value,
        }


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def sweep_grid(
    ctx: Optional[EvaluationContext],
    resolution: int,
    range_min: float,
    range_max: float,
    y_level: float,
) -> DensityGridResult:
    """Sample an existing context over an ``n x n`` XZ grid."""
    n = max(1, int(resolution))
    values = np.zeros(n * n, dtype=np.float32)
    if ctx is None:
        return DensityGridResult(values, 0.0, 0.0)

    step = (range_max - range_min) / n
    min_value = math.inf
    max_value = -math.inf

    for row in range(n):
        z = range_min + row * step
        for col in range(n):
            x = range_min + col * step
            value = ctx.sample(x, y_level, z)
            values[row * n + col] = value
            if value < min_value:
                min_value = value
            if value > max_value:
                max_value = value

    return DensityGridResult(values, _finite_or_zero(min_value), _finite_or_zero(max_value))


def evaluate_density_grid(
    nodes: Iterable[NodeLike],
    edges: Iterable[EdgeLike],
    resolution: int = 128,
    range_min: float = -64.0,
    range_max: float = 64.0,
    y_level: float = 64.0,
    root_node_id: Optional[str] = None,
    options: Optional[EvaluationOptions] = None,
) -> DensityGridResult:
    """
    Evaluate a density graph across a 2D grid.

    Args:
        nodes: Graph nodes (``Node`` instances or editor dicts)
        edges: Graph edges (``Edge`` instances or editor dicts)
        resolution: Cells per side; the buffer holds ``resolution ** 2`` values
        range_min: Lower bound of the X and Z world range
        range_max: Upper bound (exclusive) of the X and Z world range
        y_level: Height of the sampled slice
        root_node_id: Explicit root overriding root resolution
        options: Content field heights for height-reference nodes

    Returns:
        DensityGridResult; all zeros with min = max = 0 when the graph has no root
    """
    ctx = create_evaluation_context(nodes, edges, root_node_id, options)
    if ctx is None:
        logger.debug("Grid evaluation without a root", resolution=resolution)
    return sweep_grid(ctx, resolution, range_min, range_max, y_level)
