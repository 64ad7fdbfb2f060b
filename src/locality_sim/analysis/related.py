"""
Related-access lookup.

Given a concrete element of one container, find what else the graph
touches when it touches that element: the iteration variables are
recovered from the computations' symbolic index expressions and the
remaining accesses are evaluated under them.
"""

import re
from typing import Dict, List, Optional, Sequence

from ..data.access import AccessMap
from ..graph.graph import Graph
from ..graph.nodes import ComputationNode, MapNode
from ..simulation.enumerator import accesses_for
from ..symbolic import Scope, evaluate

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _scope_from_index(node: ComputationNode, container: str,
                      index: Sequence[int], symbols: Scope) -> Optional[Dict]:
    sources = [a for a in node.accesses if a.container == container]
    if not sources:
        return None
    scope = dict(symbols)
    for access in sources:
        for expr, value in zip(access.index, index):
            if isinstance(expr, str) and _IDENTIFIER.match(expr.strip()):
                scope[expr.strip()] = value
    return scope


def _computation_related(graph: Graph, node: ComputationNode, container: str,
                         index: Sequence[int], symbols: Scope) -> AccessMap:
    result = AccessMap()
    scope = _scope_from_index(node, container, index, symbols)
    if scope is None:
        return result

    for access in node.accesses:
        if access.container == container:
            continue
        result.add(access.container, access.mode, [evaluate(e, scope) for e in access.index])

    # Accesses of the enclosing map body under the recovered scope come
    # first. A top-level computation is its own body.
    siblings = [node.id] if node.parent is None else graph.children_of(node.parent)
    enclosing, _ = accesses_for(graph, siblings, scope)
    result.merge(enclosing, first=True)
    return result


def _collect(graph: Graph, node_ids: List[int], container: str,
             index: Sequence[int], symbols: Scope, result: AccessMap) -> None:
    for handle in node_ids:
        node = graph.node(handle)
        if isinstance(node, MapNode):
            _collect(graph, node.children, container, index, symbols, result)
        elif isinstance(node, ComputationNode):
            result.merge(_computation_related(graph, node, container, index, symbols))


def related_accesses(graph: Graph, container: str, index: Sequence[int],
                     symbols: Optional[Scope] = None) -> AccessMap:
    """
    Accesses related to one element of a container.

    Args:
        graph: Graph to search
        container: Source container name
        index: Concrete index into the source container
        symbols: Global symbol bindings

    Returns:
        Access map of the related accesses. Components that cannot be
        recovered from the index stay None.
    """
    result = AccessMap()
    _collect(graph, graph.children_of(None), container, list(index),
             dict(symbols if symbols is not None else graph.symbols), result)
    return result
