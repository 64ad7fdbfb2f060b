"""
Iteration-space enumeration (map simulation).

A map's ranges are bound one at a time, outermost first, and at the
innermost level the map body is asked for its accesses under the full
scope. The ordered list of (scope, access map, accesses) triples is the
trace used both for playback and for stack-distance computation.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..data.access import AccessMap, ConcreteAccess
from ..data.ranges import Range
from ..errors import DataDependentAccessError, UnsupportedGraphError
from ..graph.graph import Graph
from ..graph.nodes import ComputationNode, MapNode
from ..symbolic import Scope

logger = logging.getLogger(__name__)


@dataclass
class TraceEntry:
    """
    One innermost iteration of a map.

    Attributes:
        scope: Full variable binding (outer scope plus this map's variables)
        access_map: Accesses grouped by container
        accesses: Accesses in the order they were produced
    """
    scope: Dict[str, float]
    access_map: AccessMap = field(default_factory=AccessMap)
    accesses: List[ConcreteAccess] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "scope": dict(self.scope),
            "accesses": [
                {"data": a.container, "mode": a.mode.value, "index": list(a.index)}
                for a in self.accesses
            ],
        }


def iterate_scopes(ranges: Sequence[Range], scope: Optional[Scope] = None) -> Iterator[Dict]:
    """
    Enumerate the Cartesian product of ranges in row-major nested order.

    Inner ranges are evaluated under the values already bound by outer
    ones, so triangular loop nests work. A range that stays symbolic
    under the scope contributes no values, which empties that branch.

    Raises:
        ZeroStepError: If a step evaluates to 0
    """
    scope = dict(scope or {})
    if not ranges:
        yield scope
        return

    first, rest = ranges[0], ranges[1:]
    if not first.is_static(scope):
        logger.debug("Range %s unresolved under %s; branch skipped", first.label(), scope)
        return
    for value in first.values(scope):
        inner = dict(scope)
        inner[first.itvar] = value
        yield from iterate_scopes(rest, inner)


def computation_accesses(node: ComputationNode, scope: Scope) -> Tuple[AccessMap, List[ConcreteAccess]]:
    """Resolve a computation's declared accesses under a scope."""
    access_map = AccessMap()
    ordered = []
    for symbolic in node.accesses:
        access = symbolic.resolve(scope)
        access_map.add_access(access)
        ordered.append(access)
    return access_map, ordered


def accesses_for(graph: Graph, node_ids: Sequence[int], scope: Scope) -> Tuple[AccessMap, List[ConcreteAccess]]:
    """
    Accesses of a set of sibling nodes under a scope.

    Computations contribute their accesses directly. Nested maps are
    enumerated under the scope and contribute every access of every
    iteration. Memory nodes contribute nothing.

    Returns:
        (access map, ordered accesses)
    """
    access_map = AccessMap()
    ordered: List[ConcreteAccess] = []
    for handle in node_ids:
        node = graph.node(handle)
        if isinstance(node, ComputationNode):
            sub_map, sub_accesses = computation_accesses(node, scope)
        elif isinstance(node, MapNode):
            sub_map = AccessMap()
            sub_accesses = []
            for inner_scope in iterate_scopes(node.ranges, scope):
                inner_map, inner_accesses = accesses_for(graph, node.children, inner_scope)
                sub_map.merge(inner_map)
                sub_accesses.extend(inner_accesses)
        else:
            continue
        access_map.merge(sub_map)
        ordered.extend(sub_accesses)
    return access_map, ordered


def check_static_volume(graph: Graph, map_id: int, symbols: Optional[Scope] = None) -> None:
    """
    Reject maps containing accesses whose element count is not exactly 1.

    Raises:
        DataDependentAccessError: For the first offending access
    """
    pending = list(graph.children_of(map_id))
    while pending:
        node = graph.node(pending.pop(0))
        if isinstance(node, MapNode):
            pending.extend(node.children)
        elif isinstance(node, ComputationNode):
            for access in node.accesses:
                if access.volume_under(symbols) != 1:
                    raise DataDependentAccessError(
                        f"Access to {access.container} in {node.label} has volume "
                        f"{access.volume!r}; only single-element accesses are supported",
                        node=node.id,
                    )


class MapSimulation:
    """
    Enumerates the full trace of one map.

    Args:
        graph: Owning graph
        map_id: Handle of the map to simulate
        symbols: Global symbol bindings, the base scope
        scope: Extra bindings from enclosing maps

    A nested map is enumerated together with the ranges of its enclosing
    maps that the scope does not already bind, so its trace covers every
    outer iteration.
    """

    def __init__(self, graph: Graph, map_id: int,
                 symbols: Optional[Scope] = None,
                 scope: Optional[Scope] = None):
        node = graph.node(map_id)
        if not isinstance(node, MapNode):
            raise UnsupportedGraphError(f"Node {node.label} is not a map", node=map_id)
        self.graph = graph
        self.map_id = map_id
        self.node = node
        self.base_scope: Dict = dict(symbols or {})
        self.base_scope.update(scope or {})
        self.ranges: List[Range] = []
        for ancestor in reversed(graph.ancestors(map_id)):
            for outer in graph.node(ancestor).ranges:
                if outer.itvar not in self.base_scope:
                    self.ranges.append(outer)
        self.ranges.extend(node.ranges)

    def simulate(self) -> List[TraceEntry]:
        """
        Produce the ordered trace.

        Raises:
            ZeroStepError: If any range step evaluates to 0
            DataDependentAccessError: If an access volume is not 1
        """
        check_static_volume(self.graph, self.map_id, self.base_scope)
        trace: List[TraceEntry] = []
        for scope in iterate_scopes(self.ranges, self.base_scope):
            access_map, accesses = accesses_for(self.graph, self.node.children, scope)
            trace.append(TraceEntry(scope, access_map, accesses))
        logger.debug("Map %s: %d iterations", self.node.label, len(trace))
        return trace
