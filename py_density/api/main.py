"""FastAPI main application."""

import logging
from typing import Any, Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from ..config import settings
from ..core.grid import DensityGridResult
from ..core.grid_analysis import compute_histogram, compute_statistics
from ..core.node_types import NodeType, get_eval_status
from ..core.volume import VolumeResult
from ..workers.client import create_volume_worker_instance, create_worker_instance

# Configure logging
logging.basicConfig(format="%(message)s", level=getattr(logging, settings.log_level.upper(), logging.INFO))

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Density Graph Preview API",
    description="Evaluates density node graphs into preview grids and voxel volumes",
    version=__version__
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class GraphRequest(BaseModel):
    """Node graph shared by every sweep request."""

    model_config = ConfigDict(populate_by_name=True)

    nodes: List[Dict[str, Any]] = Field(..., description="Graph nodes: {id, type, fields} or editor node objects")
    edges: List[Dict[str, Any]] = Field(default_factory=list, description="Edges: {source, target, targetHandle}")
    root_node_id: Optional[str] = Field(None, alias="rootNodeId", description="Explicit root node")
    options: Optional[Dict[str, Any]] = Field(None, description="Evaluation options, e.g. contentFields")


class GridRequest(GraphRequest):
    """Request to evaluate a 2D preview grid."""

    resolution: int = Field(settings.default_resolution, ge=1, le=settings.max_resolution)
    range_min: float = Field(settings.default_range_min, alias="rangeMin")
    range_max: float = Field(settings.default_range_max, alias="rangeMax")
    y_level: float = Field(settings.default_y_level, alias="yLevel")


class VolumeRequest(GraphRequest):
    """Request to evaluate a 3D density volume."""

    resolution: int = Field(32, ge=1, le=settings.max_resolution)
    range_min: float = Field(settings.default_range_min, alias="rangeMin")
    range_max: float = Field(settings.default_range_max, alias="rangeMax")
    y_min: float = Field(0.0, alias="yMin")
    y_max: float = Field(settings.default_world_height, alias="yMax")
    y_slices: int = Field(32, ge=1, le=settings.max_resolution, alias="ySlices")


class GridResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resolution: int
    values: List[float]
    min_value: float = Field(..., serialization_alias="minValue")
    max_value: float = Field(..., serialization_alias="maxValue")


class VolumeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resolution: int
    y_slices: int = Field(..., serialization_alias="ySlices")
    densities: List[float]
    min_value: float = Field(..., serialization_alias="minValue")
    max_value: float = Field(..., serialization_alias="maxValue")


class StatisticsResponse(GridResponse):
    statistics: Dict[str, float]
    histogram: Dict[str, Any]


class NodeTypeStatus(BaseModel):
    type: str
    known: bool
    status: str


def _run_grid(request: GridRequest) -> DensityGridResult:
    # One client per request so concurrent requests do not supersede each other
    client = create_worker_instance()
    try:
        return client.evaluate(request.model_dump(by_alias=True)).result()
    finally:
        client.close()


def _run_volume(request: VolumeRequest) -> VolumeResult:
    client = create_volume_worker_instance()
    try:
        return client.evaluate(request.model_dump(by_alias=True)).result()
    finally:
        client.close()


def _grid_response(request: GridRequest, result: DensityGridResult) -> dict:
    return {
        "resolution": request.resolution,
        "values": result.values.tolist(),
        "min_value": result.min_value,
        "max_value": result.max_value,
    }


# Event handlers
@app.on_event("startup")
async def startup_event():
    logger.info("Starting Density Graph Preview API", version=__version__)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Density Graph Preview API")


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Density Graph Preview API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/density/grid", response_model=GridResponse, response_model_by_alias=True)
def evaluate_grid(request: GridRequest):
    """Evaluate the graph over a row-major ``resolution x resolution`` XZ grid."""
    logger.info("Grid evaluation requested", nodes=len(request.nodes), resolution=request.resolution)
    if request.range_max <= request.range_min:
        raise HTTPException(status_code=422, detail="rangeMax must be greater than rangeMin")
    return _grid_response(request, _run_grid(request))


@app.post("/density/volume", response_model=VolumeResponse, response_model_by_alias=True)
def evaluate_volume(request: VolumeRequest):
    """Evaluate the graph over a Y-major volume (``y * n * n + z * n + x``)."""
    logger.info("Volume evaluation requested", nodes=len(request.nodes),
                resolution=request.resolution, y_slices=request.y_slices)
    if request.range_max <= request.range_min:
        raise HTTPException(status_code=422, detail="rangeMax must be greater than rangeMin")
    result = _run_volume(request)
    return {
        "resolution": result.resolution,
        "y_slices": result.y_slices,
        "densities": result.densities.tolist(),
        "min_value": result.min_value,
        "max_value": result.max_value,
    }


@app.post("/density/grid/statistics", response_model=StatisticsResponse, response_model_by_alias=True)
def evaluate_grid_statistics(request: GridRequest, bins: int = Query(32, ge=1, le=256)):
    """Evaluate a grid and summarize its value distribution."""
    if request.range_max <= request.range_min:
        raise HTTPException(status_code=422, detail="rangeMax must be greater than rangeMin")
    result = _run_grid(request)
    histogram = compute_histogram(result.values, bins)
    response = _grid_response(request, result)
    response["statistics"] = compute_statistics(result.values).to_dict()
    response["histogram"] = {"bins": histogram.bins, "binEdges": histogram.bin_edges}
    return response


@app.get("/node-types/{type_name}/status", response_model=NodeTypeStatus)
async def node_type_status(type_name: str):
    """Report how faithfully a node type is evaluated."""
    return {
        "type": type_name,
        "known": NodeType.parse(type_name) is not None,
        "status": get_eval_status(type_name).value,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
