"""Root node resolution shared by every sweep driver."""

from typing import Callable, Iterable, List, Optional, Sequence

from .graph_model import Edge, Node
from .node_types import is_density_type

TERRAIN_SLOT = "Terrain"

RootRule = Callable[[Sequence[Node], Sequence[Edge]], Optional[Node]]


def _designated_output(nodes: Sequence[Node], edges: Sequence[Edge]) -> Optional[Node]:
    return next((n for n in nodes if n.output_node), None)


def _terrain_slot(nodes: Sequence[Node], edges: Sequence[Edge]) -> Optional[Node]:
    return next((n for n in nodes if n.biome_field == TERRAIN_SLOT), None)


def _terminal_density(nodes: Sequence[Node], edges: Sequence[Edge]) -> Optional[Node]:
    sources = {e.source for e in edges}
    return next((n for n in nodes if n.id not in sources and is_density_type(n.type)), None)


def _any_density(nodes: Sequence[Node], edges: Sequence[Edge]) -> Optional[Node]:
    return next((n for n in nodes if is_density_type(n.type)), None)


# Ordered policy: the first rule that yields a node wins
ROOT_POLICY: List[RootRule] = [
    _designated_output,
    _terrain_slot,
    _terminal_density,
    _any_density,
]


def resolve_root(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    root_node_id: Optional[str] = None,
    policy: Iterable[RootRule] = ROOT_POLICY,
) -> Optional[Node]:
    """
    Pick the node a sweep evaluates.

    An explicit ``root_node_id`` that names an existing node overrides the
    policy. Otherwise the rules are tried in order:

    1. the node flagged as the designated output
    2. the node tagged for the "Terrain" output slot
    3. the first terminal node (no outgoing edges) of a density type
    4. the first node of a density type anywhere

    Returns None when nothing qualifies.
    """
    if root_node_id:
        explicit = next((n for n in nodes if n.id == root_node_id), None)
        if explicit is not None:
            return explicit

    for rule in policy:
        root = rule(nodes, edges)
        if root is not None:
            return root
    return None
