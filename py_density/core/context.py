"""
Evaluation context for density graphs.

A context is built once per graph version and reused for every sample of a
sweep. It owns:
- the adjacency index (target id -> handle -> source id)
- seed-keyed noise generators (see ``noise.NoiseCache``)
- built manual-curve tables, keyed by curve node id
- the per-sample memo cache used by ``CacheOnce`` nodes
- the cycle guard holding the node ids on the live evaluation stack
"""

import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional, Set, Tuple

import structlog

from ..config import settings
from .curves import CurveFn, MANUAL_CURVE, ManualCurve, curve_subtype, get_curve_evaluator
from .evaluator import evaluate_node
from .graph_model import EdgeLike, Node, NodeLike, build_input_index, coerce_edges, coerce_nodes
from .noise import NoiseCache
from .root_resolution import resolve_root

logger = structlog.get_logger()

MemoKey = Tuple[int, float, float, float]

_NO_INPUTS: Mapping[str, str] = {}

# Python frames one graph level can occupy (evaluate, handler, input, memo closure)
FRAMES_PER_NODE = 8
RECURSION_HEADROOM = 1000


@dataclass
class EvaluationOptions:
    """Externally supplied evaluation inputs."""

    # Content field heights from the world structure, e.g. {"Base": 100, "Water": 100, "Bedrock": 0}
    content_fields: Dict[str, float] = field(default_factory=dict)


class EvaluationContext:
    """Reusable evaluator over one graph; see ``create_evaluation_context``."""

    def __init__(
        self,
        nodes: Iterable[Node],
        inputs: Dict[str, Dict[str, str]],
        root_id: str,
        options: Optional[EvaluationOptions] = None,
    ):
        self.nodes: Dict[str, Node] = {n.id: n for n in nodes}
        self.node_index: Dict[str, int] = {node_id: i for i, node_id in enumerate(self.nodes)}
        self.inputs = inputs
        self.root_id = root_id
        self.options = options or EvaluationOptions()
        self.content_fields = self.options.content_fields
        self.noise = NoiseCache()

        self.world_height = settings.default_world_height
        self.base_height = settings.default_base_height
        self.curve_samples = settings.curve_samples_per_segment
        self.gradient_epsilon = settings.gradient_epsilon

        self._curves: Dict[str, Optional[CurveFn]] = {}
        self._splines: Dict[str, Optional[ManualCurve]] = {}
        self._memo: Dict[MemoKey, float] = {}
        self._visiting: Set[str] = set()

    # Sampling

    def clear_memo(self) -> None:
        """Drop per-sample memoized values; call before each independent sample."""
        self._memo.clear()

    def sample(self, x: float, y: float, z: float) -> float:
        """Evaluate the root at one independent sample position."""
        self.clear_memo()
        return self.evaluate(self.root_id, x, y, z)

    @contextmanager
    def _visit(self, node_id: str) -> Iterator[None]:
        self._visiting.add(node_id)
        try:
            yield
        finally:
            self._visiting.discard(node_id)

    @property
    def in_progress(self) -> Set[str]:
        return set(self._visiting)

    def evaluate(self, node_id: str, x: float, y: float, z: float) -> float:
        """
        Evaluate ``node_id`` at ``(x, y, z)``.

        Re-entering a node already on the evaluation stack yields 0 (cycle
        guard). Arithmetic faults inside a node degrade to 0 for that node;
        a ``RecursionError`` propagates rather than zeroing the result.
        """
        if node_id in self._visiting:
            return 0.0
        node = self.nodes.get(node_id)
        if node is None:
            return 0.0

        with self._visit(node_id):
            try:
                return float(evaluate_node(self, node, x, y, z))
            except (ArithmeticError, ValueError, TypeError) as e:
                logger.debug("Node evaluation fault", node_id=node_id, node_type=node.type, error=str(e))
                return 0.0

    # Helpers used by node handlers

    def inputs_of(self, node_id: str) -> Mapping[str, str]:
        return self.inputs.get(node_id, _NO_INPUTS)

    def input(self, node: Node, handle: str, x: float, y: float, z: float) -> float:
        """Evaluate whatever is wired into ``handle`` of ``node``; 0 when unconnected."""
        source = self.inputs_of(node.id).get(handle)
        if source is None:
            return 0.0
        return self.evaluate(source, x, y, z)

    def has_input(self, node: Node, handle: str) -> bool:
        return handle in self.inputs_of(node.id)

    def memoized(self, node: Node, x: float, y: float, z: float, compute: Callable[[], float]) -> float:
        key = (self.node_index[node.id], x, y, z)
        cached = self._memo.get(key)
        if cached is None:
            cached = compute()
            self._memo[key] = cached
        return cached

    def _curve_for(self, curve_node_id: str) -> Optional[CurveFn]:
        if curve_node_id not in self._curves:
            curve_node = self.nodes.get(curve_node_id)
            curve_fn: Optional[CurveFn] = None
            if curve_node is not None:
                subtype = curve_subtype(curve_node.type)
                if subtype == MANUAL_CURVE:
                    curve_fn = ManualCurve.from_raw(curve_node.fields.get("Points"), self.curve_samples)
                else:
                    curve_fn = get_curve_evaluator(subtype, curve_node.fields)
            self._curves[curve_node_id] = curve_fn
        return self._curves[curve_node_id]

    def apply_curve(self, node: Node, handle: str, value: float) -> float:
        """Pass ``value`` through the curve attached at ``handle``; identity when absent."""
        curve_node_id = self.inputs_of(node.id).get(handle)
        if curve_node_id is None:
            return value
        curve_fn = self._curve_for(curve_node_id)
        return curve_fn(value) if curve_fn is not None else value

    def apply_spline(self, node: Node, value: float) -> float:
        """Interpolate ``value`` through the node's own ``Points`` field."""
        if node.id not in self._splines:
            self._splines[node.id] = ManualCurve.from_raw(node.fields.get("Points"), self.curve_samples)
        spline = self._splines[node.id]
        return spline(value) if spline is not None else value


def ensure_recursion_headroom(node_count: int) -> None:
    """
    Raise the interpreter recursion limit so a chain of ``node_count`` nodes fits.

    The limit is only ever raised; it is process-wide and other threads may
    be relying on the current value.
    """
    needed = node_count * FRAMES_PER_NODE + RECURSION_HEADROOM
    if sys.getrecursionlimit() < needed:
        logger.debug("Raising recursion limit", previous=sys.getrecursionlimit(), limit=needed)
        sys.setrecursionlimit(needed)


def create_evaluation_context(
    nodes: Iterable[NodeLike],
    edges: Iterable[EdgeLike],
    root_node_id: Optional[str] = None,
    options: Optional[EvaluationOptions] = None,
) -> Optional[EvaluationContext]:
    """
    Create a reusable evaluation context from a node graph.

    Returns None when the graph is empty or no root can be resolved.
    """
    node_list = coerce_nodes(nodes)
    if not node_list:
        return None
    edge_list = coerce_edges(edges)

    root = resolve_root(node_list, edge_list, root_node_id)
    if root is None:
        logger.debug("No density root found", nodes=len(node_list))
        return None

    logger.debug("Evaluation context created", root_id=root.id, root_type=root.type,
                 nodes=len(node_list), edges=len(edge_list))
    ensure_recursion_headroom(len(node_list))
    return EvaluationContext(node_list, build_input_index(edge_list), root.id, options)
