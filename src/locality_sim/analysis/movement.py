"""
Memory-movement volume per edge.

Every miss on a container moves one cache line, so an edge attached to
a container's memory node carries ``line size x misses`` bytes.
"""

from typing import Dict, Tuple

from ..context import SimulationContext
from ..graph.graph import Graph
from ..graph.nodes import MemoryNode

Edge = Tuple[int, int]


def movement_volumes(ctx: SimulationContext, graph: Graph) -> Dict[Edge, int]:
    """
    Bytes moved over each edge touching a memory node.

    With line grouping disabled a miss moves a single element. The
    volumes are also collected into ``ctx.histograms.movement``.

    Returns:
        (src, dst) -> bytes
    """
    ctx.histograms.movement.clear()
    volumes: Dict[Edge, int] = {}
    for src, dst in graph.edges:
        memory = None
        for handle in (src, dst):
            node = graph.node(handle)
            if isinstance(node, MemoryNode):
                memory = node
                break
        if memory is None:
            continue
        container = ctx.containers.get(memory.container)
        if container is None:
            continue
        line = ctx.cache_line_bytes if ctx.cache_line_bytes > 0 else container.element_size
        volume = line * ctx.total_misses(memory.container)
        volumes[(src, dst)] = volume
        ctx.histograms.movement.add(volume)
    return volumes
