"""
Worker message contract.

Requests and responses use the editor's camelCase keys on the wire;
attributes are snake_case in Python.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.context import EvaluationOptions


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EvaluationOptionsModel(_WireModel):
    content_fields: Dict[str, float] = Field(default_factory=dict, alias="contentFields")

    def to_options(self) -> EvaluationOptions:
        return EvaluationOptions(content_fields=dict(self.content_fields))


class DensityWorkerRequest(_WireModel):
    """2D grid sweep request."""

    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]] = Field(default_factory=list)
    resolution: int = Field(..., ge=1)
    range_min: float = Field(..., alias="rangeMin")
    range_max: float = Field(..., alias="rangeMax")
    y_level: float = Field(..., alias="yLevel")
    root_node_id: Optional[str] = Field(None, alias="rootNodeId")
    options: Optional[EvaluationOptionsModel] = None

    def evaluation_options(self) -> Optional[EvaluationOptions]:
        return self.options.to_options() if self.options else None


class VolumeWorkerRequest(_WireModel):
    """3D volume sweep request."""

    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]] = Field(default_factory=list)
    resolution: int = Field(..., ge=1)
    range_min: float = Field(..., alias="rangeMin")
    range_max: float = Field(..., alias="rangeMax")
    y_min: float = Field(..., alias="yMin")
    y_max: float = Field(..., alias="yMax")
    y_slices: int = Field(..., ge=1, alias="ySlices")
    root_node_id: Optional[str] = Field(None, alias="rootNodeId")
    options: Optional[EvaluationOptionsModel] = None

    def evaluation_options(self) -> Optional[EvaluationOptions]:
        return self.options.to_options() if self.options else None


class WorkerError(_WireModel):
    error: str
