"""Density volume worker entry point."""

from typing import Any, Dict, Mapping

import structlog

from ..core.volume import evaluate_density_volume
from .messages import VolumeWorkerRequest, WorkerError

logger = structlog.get_logger()


def handle_message(message: Mapping[str, Any]) -> Dict[str, Any]:
    """Run one volume sweep; ``{"error": message}`` on failure."""
    try:
        request = VolumeWorkerRequest.model_validate(message)
        logger.info("Volume worker received message", nodes=len(request.nodes),
                    resolution=request.resolution, y_slices=request.y_slices)
        result = evaluate_density_volume(
            request.nodes,
            request.edges,
            request.resolution,
            request.range_min,
            request.range_max,
            request.y_min,
            request.y_max,
            request.y_slices,
            request.root_node_id,
            request.evaluation_options(),
        )
    except Exception as e:
        logger.warning("Volume worker failed", error=str(e))
        return WorkerError(error=str(e)).model_dump()

    logger.info("Density volume evaluated", resolution=result.resolution, y_slices=result.y_slices,
                min_value=result.min_value, max_value=result.max_value)
    return {
        "densities": result.densities,
        "resolution": result.resolution,
        "ySlices": result.y_slices,
        "minValue": result.min_value,
        "maxValue": result.max_value,
    }
