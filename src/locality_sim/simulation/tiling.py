"""
Tiling-region matching.

A tiling region is one iteration (scope) of a map adjacent to a
container's memory node. For a given cell, the regions touching it are
those whose access map holds an entry for the container at exactly
that index. Matched regions are told apart by border colour.
"""

from typing import TYPE_CHECKING, Dict, List, Mapping, Sequence, Tuple

from ..data.access import AccessMap
from ..graph.graph import Graph
from ..graph.nodes import MapNode
from .enumerator import TraceEntry

if TYPE_CHECKING:
    from ..context import SimulationContext

# Kelly's 20 colours of maximum contrast.
KELLY_COLORS = [
    0xFFB300, 0x803E75, 0xFF6800, 0xA6BDD7, 0xC10020,
    0xCEA262, 0x817066, 0x007D34, 0xF6768E, 0x00538A,
    0xFF7A5C, 0x53377A, 0xFF8E00, 0xB32851, 0xF4C800,
    0x7F180D, 0x93AA00, 0x593315, 0xF13A13, 0x232C16,
]

Region = Tuple[Dict, AccessMap]


def adjacent_maps(graph: Graph, container: str) -> List[int]:
    """Maps connected by an edge to any memory node of the container."""
    result = []
    for memory in graph.memory_nodes(container):
        for neighbor in graph.neighbors(memory):
            if isinstance(graph.node(neighbor), MapNode) and neighbor not in result:
                result.append(neighbor)
    return result


def tiling_regions(graph: Graph, traces: Mapping[int, Sequence[TraceEntry]],
                   container: str, index: Sequence[int]) -> List[Region]:
    """
    Regions of adjacent maps that access ``container`` at ``index``.

    Args:
        graph: Owning graph
        traces: Map handle -> precomputed trace
        container: Container name
        index: Concrete index

    Returns:
        (scope, access map) pairs in map order, then trace order
    """
    regions: List[Region] = []
    for map_id in adjacent_maps(graph, container):
        for entry in traces.get(map_id, []):
            if entry.access_map.contains(container, index):
                regions.append((entry.scope, entry.access_map))
    return regions


def region_color(position: int) -> int:
    return KELLY_COLORS[position % len(KELLY_COLORS)]


def mark_tiling_regions(ctx: "SimulationContext", regions: Sequence[Region]) -> int:
    """
    Add the i-th region's colour to every cell the region touches.

    Returns:
        Number of cells that received a new colour
    """
    marked = 0
    for position, (_, access_map) in enumerate(regions):
        color = region_color(position)
        for container, entries in access_map.items():
            for _, index in entries:
                for cell in ctx.matching_cells(container, index):
                    if color not in cell.border_colors:
                        cell.border_colors.append(color)
                        marked += 1
    return marked


def clear_tiling_marks(ctx: "SimulationContext") -> None:
    for cell in ctx.all_cells():
        cell.border_colors.clear()
