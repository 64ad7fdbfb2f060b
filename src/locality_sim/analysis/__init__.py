"""
Analysis: histograms, per-cell counters, related accesses and memory
movement.
"""

from .histogram import METRICS, GlobalHistograms, Histogram
from .cells import CellCounters

__all__ = [
    "METRICS",
    "GlobalHistograms",
    "Histogram",
    "CellCounters",
]
