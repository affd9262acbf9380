"""
Graph model consumed by the density evaluator.

Nodes and edges arrive from the graph editor either as plain dictionaries
(``{"id", "type", "fields"}``) or in the editor's wrapped form
(``{"id", "data": {"type", "fields", ...}}``). Ordered child collections are
carried as indexed target handles such as ``Inputs[2]``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import structlog

logger = structlog.get_logger()

DEFAULT_HANDLE = "Input"


@dataclass
class Node:
    """A graph node: identity, type tag and typed parameter fields."""

    id: str
    type: str
    fields: Dict[str, Any] = field(default_factory=dict)
    output_node: bool = False  # user-designated output
    biome_field: Optional[str] = None  # output slot tag, e.g. "Terrain"

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Node":
        """Build a node from either the flat or the editor-wrapped form."""
        data = raw.get("data")
        source = data if isinstance(data, Mapping) else raw
        fields = source.get("fields") or {}
        return cls(
            id=str(raw["id"]),
            type=str(source.get("type") or ""),
            fields=dict(fields) if isinstance(fields, Mapping) else {},
            output_node=source.get("_outputNode") is True,
            biome_field=source.get("_biomeField"),
        )


@dataclass
class Edge:
    """A connection from ``source``'s output into ``target_handle`` of ``target``."""

    source: str
    target: str
    target_handle: Optional[str] = None

    @property
    def handle(self) -> str:
        return self.target_handle or DEFAULT_HANDLE

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Edge":
        handle = raw.get("targetHandle", raw.get("target_handle"))
        return cls(
            source=str(raw["source"]),
            target=str(raw["target"]),
            target_handle=str(handle) if handle is not None else None,
        )


NodeLike = Union[Node, Mapping[str, Any]]
EdgeLike = Union[Edge, Mapping[str, Any]]


def coerce_nodes(nodes: Iterable[NodeLike]) -> List[Node]:
    """Parse nodes, skipping entries without an ``id``."""
    result = []
    for n in nodes:
        if isinstance(n, Node):
            result.append(n)
        elif isinstance(n, Mapping) and n.get("id") is not None:
            result.append(Node.from_dict(n))
        else:
            logger.debug("Skipping malformed node", node=repr(n)[:80])
    return result


def coerce_edges(edges: Iterable[EdgeLike]) -> List[Edge]:
    """Parse edges, skipping entries without both a ``source`` and a ``target``."""
    result = []
    for e in edges:
        if isinstance(e, Edge):
            result.append(e)
        elif isinstance(e, Mapping) and e.get("source") is not None and e.get("target") is not None:
            result.append(Edge.from_dict(e))
        else:
            logger.debug("Skipping malformed edge", edge=repr(e)[:80])
    return result


def indexed_handle(name: str, index: int) -> str:
    return f"{name}[{index}]"


def build_input_index(edges: Iterable[Edge]) -> Dict[str, Dict[str, str]]:
    """
    Build the adjacency index: target id -> handle -> source id.

    A later edge into the same handle replaces an earlier one, matching the
    editor's single-connection-per-handle rule.
    """
    index: Dict[str, Dict[str, str]] = {}
    for edge in edges:
        index.setdefault(edge.target, {})[edge.handle] = edge.source
    return index

