"""
Load graphs from YAML (or already-parsed dictionaries).

Format::

    name: matmul
    symbols: {N: 4}
    containers:
      - {name: A, shape: [N, N], element_size: 8}
    nodes:
      - {id: A_in, type: access, data: A}
      - id: outer
        type: map
        ranges:
          - {var: i, start: 0, end: N-1}
        body:
          - id: compute
            type: tasklet
            accesses:
              - {data: A, mode: read, index: [i, 0]}
    edges:
      - [A_in, outer]
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ..data.access import AccessMode, SymbolicAccess
from ..data.container import DataContainer, Dimension
from ..data.ranges import Range
from ..errors import GraphDescriptionError
from ..symbolic import evaluate
from .graph import Graph

logger = logging.getLogger(__name__)

_MEMORY_TYPES = ("access", "memory", "data")
_MAP_TYPES = ("map",)
_COMPUTATION_TYPES = ("tasklet", "computation")


def _resolve_dimension(item, symbols: Dict, where: str) -> Dimension:
    if isinstance(item, dict):
        item = item.get("value", item.get("name"))
    value = evaluate(item, symbols)
    if not isinstance(value, int) or value < 0:
        raise GraphDescriptionError(f"{where}: cannot resolve dimension {item!r}")
    return Dimension(str(item), value)


def _container_from_dict(data: Dict, symbols: Dict) -> DataContainer:
    name = data.get("name")
    if not name:
        raise GraphDescriptionError("Container without a name")
    shape = [_resolve_dimension(d, symbols, name) for d in data.get("shape", [])]
    strides = data.get("strides")
    if strides is not None:
        strides = [_resolve_dimension(s, symbols, name) for s in strides]
    try:
        return DataContainer(
            name=name,
            shape=shape,
            element_size=int(data.get("element_size", 1)),
            start_offset=int(evaluate(data.get("start_offset", 0), symbols) or 0),
            alignment=int(data.get("alignment", 0)),
            storage=data.get("storage"),
            inverse=bool(data.get("inverse", False)),
            strides=strides,
        )
    except ValueError as exc:
        raise GraphDescriptionError(str(exc)) from exc


def _bound(value, symbols: Dict):
    """Fold a bound to a number when the graph symbols resolve it."""
    resolved = evaluate(value, symbols)
    return resolved if resolved is not None else str(value)


def _range_from_dict(data: Dict, symbols: Dict) -> Range:
    itvar = data.get("var", data.get("itvar"))
    if itvar is None or "start" not in data or "end" not in data:
        raise GraphDescriptionError(f"Incomplete range: {data}")
    return Range(
        itvar=str(itvar),
        start=_bound(data["start"], symbols),
        end=_bound(data["end"], symbols),
        step=_bound(data.get("step", 1), symbols),
        free_symbol=data.get("free_symbol"),
        free_symbol_default=data.get("free_symbol_default"),
    )


class _Builder:
    def __init__(self, graph: Graph):
        self.graph = graph
        self.handles: Dict[str, int] = {}

    def add_nodes(self, items: List[Dict], parent: Optional[int]) -> None:
        for item in items or []:
            self.add_node(item, parent)

    def add_node(self, item: Dict, parent: Optional[int]) -> int:
        node_type = str(item.get("type", "")).lower()
        label = str(item.get("id", item.get("label", "")))
        symbols = self.graph.symbols

        if node_type in _MEMORY_TYPES:
            container = item.get("data", item.get("container"))
            handle = self.graph.add_memory(
                container, parent=parent,
                mode=AccessMode.parse(item.get("mode", "readwrite")),
                label=label,
            )
        elif node_type in _MAP_TYPES:
            ranges = [_range_from_dict(r, symbols) for r in item.get("ranges", [])]
            handle = self.graph.add_map(ranges, parent=parent, label=label)
            self.add_nodes(item.get("body", []), handle)
        elif node_type in _COMPUTATION_TYPES:
            try:
                accesses = [SymbolicAccess.from_dict(a) for a in item.get("accesses", [])]
            except KeyError as exc:
                raise GraphDescriptionError(f"{label}: access without {exc}") from exc
            handle = self.graph.add_computation(
                accesses, parent=parent, label=label, code=item.get("code", "")
            )
        else:
            raise GraphDescriptionError(f"Unknown node type {node_type!r} for {label or item}")

        key = label or str(handle)
        if key in self.handles:
            raise GraphDescriptionError(f"Duplicate node id: {key}")
        self.handles[key] = handle
        return handle

    def lookup(self, ref) -> int:
        key = str(ref)
        if key in self.handles:
            return self.handles[key]
        if isinstance(ref, int) and 0 <= ref < len(self.graph):
            return ref
        raise GraphDescriptionError(f"Edge refers to unknown node {ref!r}")


def graph_from_dict(data: Dict) -> Graph:
    """
    Build a graph from a parsed description.

    Args:
        data: Description dictionary (see module docstring)

    Returns:
        The populated Graph

    Raises:
        GraphDescriptionError: On malformed input
    """
    if not isinstance(data, dict):
        raise GraphDescriptionError("Graph description must be a mapping")

    graph = Graph(name=str(data.get("name", "graph")), symbols=data.get("symbols") or {})
    for entry in data.get("containers", []) or []:
        graph.add_container(_container_from_dict(entry, graph.symbols))

    builder = _Builder(graph)
    builder.add_nodes(data.get("nodes", []), None)

    for edge in data.get("edges", []) or []:
        if isinstance(edge, dict):
            src, dst = edge.get("src"), edge.get("dst")
        else:
            src, dst = edge
        graph.add_edge(builder.lookup(src), builder.lookup(dst))

    logger.debug("Loaded %r: %s", graph, graph.summary())
    return graph


def load_graph(path) -> Graph:
    """Load a graph description from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Graph description not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    return graph_from_dict(data)
