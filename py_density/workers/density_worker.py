"""Density grid worker entry point."""

from typing import Any, Dict, Mapping

import structlog

from ..core.grid import evaluate_density_grid
from .messages import DensityWorkerRequest, WorkerError

logger = structlog.get_logger()


def handle_message(message: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Run one grid sweep for a worker request.

    Returns ``{"values", "minValue", "maxValue"}`` with ``values`` as the
    float32 buffer itself, or ``{"error": message}`` when the request is
    invalid or the sweep raises.
    """
    try:
        request = DensityWorkerRequest.model_validate(message)
        logger.info("Density worker received message", nodes=len(request.nodes), resolution=request.resolution)
        result = evaluate_density_grid(
            request.nodes,
            request.edges,
            request.resolution,
            request.range_min,
            request.range_max,
            request.y_level,
            request.root_node_id,
            request.evaluation_options(),
        )
    except Exception as e:
        logger.warning("Density worker failed", error=str(e))
        return WorkerError(error=str(e)).model_dump()

    logger.info("Density grid evaluated", resolution=request.resolution,
                min_value=result.min_value, max_value=result.max_value)
    return {
        "values": result.values,
        "minValue": result.min_value,
        "maxValue": result.max_value,
    }
