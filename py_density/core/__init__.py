"""
Core density graph evaluation.
"""

from .graph_model import Node, Edge
from .node_types import NodeType, EvalStatus, get_eval_status, is_density_type
from .context import EvaluationContext, EvaluationOptions, create_evaluation_context
from .grid import DensityGridResult, evaluate_density_grid
from .volume import VolumeResult, evaluate_density_volume

__all__ = ['Node', 'Edge', 'NodeType', 'EvalStatus', 'get_eval_status', 'is_density_type',
           'EvaluationContext', 'EvaluationOptions', 'create_evaluation_context',
           'DensityGridResult', 'evaluate_density_grid', 'VolumeResult', 'evaluate_density_volume']
