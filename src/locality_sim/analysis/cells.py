"""
Per-cell counters of a container.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from ..simulation.stack import COLD_MISS

Metric = Optional[Union[int, float]]


def _normalise(value) -> Union[int, float]:
    value = float(value)
    return int(value) if value.is_integer() else value


@dataclass
class CellCounters:
    """
    Counters of one container element.

    Attributes:
        container: Container name
        index: Element index
        stacked_accesses: Accesses currently marked on the cell
        stack_distances: Distance -> number of touches (cold touches at -1)
        stack_distances_flattened: Warm distances in touch order
        cold_misses: Number of cold touches
        total_misses: Touches that were cold or at/above the threshold
        border_colors: Tiling-region colours marking the cell
    """
    container: str
    index: Tuple[int, ...]
    stacked_accesses: int = 0
    stack_distances: Counter = field(default_factory=Counter)
    stack_distances_flattened: List[int] = field(default_factory=list)
    cold_misses: int = 0
    total_misses: int = 0
    border_colors: List[int] = field(default_factory=list)

    @property
    def median_distance(self) -> Metric:
        if not self.stack_distances_flattened:
            return None
        return _normalise(np.median(self.stack_distances_flattened))

    @property
    def min_distance(self) -> Metric:
        if not self.stack_distances_flattened:
            return None
        return int(np.min(self.stack_distances_flattened))

    @property
    def max_distance(self) -> Metric:
        if not self.stack_distances_flattened:
            return None
        return int(np.max(self.stack_distances_flattened))

    def metric(self, name: str) -> Metric:
        """Value of a reuse metric: ``median``, ``min``, ``max`` or ``misses``."""
        if name == "median":
            return self.median_distance
        if name == "min":
            return self.min_distance
        if name == "max":
            return self.max_distance
        if name == "misses":
            return self.total_misses
        raise ValueError(f"Unknown reuse metric: {name}")

    def record(self, distance: int) -> None:
        """Count one touch at the given distance."""
        self.stack_distances[distance] += 1
        if distance == COLD_MISS:
            self.cold_misses += 1
        else:
            self.stack_distances_flattened.append(distance)

    def distance_histogram(self) -> Tuple[List[Union[int, str]], List[int]]:
        """
        Labels and counts for a per-cell distance chart.

        Labels run from 0 to the largest warm distance, followed by
        ``"Cold"``.
        """
        warm = [d for d in self.stack_distances if d >= 0]
        top = max(warm) if warm else -1
        labels: List[Union[int, str]] = list(range(top + 1))
        counts = [self.stack_distances.get(d, 0) for d in range(top + 1)]
        labels.append("Cold")
        counts.append(self.stack_distances.get(COLD_MISS, 0))
        return labels, counts

    def to_dict(self) -> Dict:
        return {
            "container": self.container,
            "index": list(self.index),
            "stacked_accesses": self.stacked_accesses,
            "stack_distances": dict(sorted(self.stack_distances.items())),
            "cold_misses": self.cold_misses,
            "total_misses": self.total_misses,
            "median": self.median_distance,
            "min": self.min_distance,
            "max": self.max_distance,
        }
