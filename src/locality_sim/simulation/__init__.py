"""
Simulation core: ranges, iteration-space enumeration, the LRU access
stack, cache-line resolution and tiling regions.
"""

from .stack import COLD_MISS, AccessStack, LinkedStack
from .cache_line import cache_line, line_key
from .enumerator import (
    MapSimulation,
    TraceEntry,
    accesses_for,
    check_static_volume,
    iterate_scopes,
)
from .tiling import KELLY_COLORS, adjacent_maps, tiling_regions

__all__ = [
    "COLD_MISS",
    "AccessStack",
    "LinkedStack",
    "cache_line",
    "line_key",
    "MapSimulation",
    "TraceEntry",
    "accesses_for",
    "check_static_volume",
    "iterate_scopes",
    "KELLY_COLORS",
    "adjacent_maps",
    "tiling_regions",
]
