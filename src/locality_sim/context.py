"""
Simulation context.

Owns every piece of mutable state of one simulation: per-cell counters,
the global histograms and the map traces. Nothing is shared between
contexts, so two simulations never interfere.
"""

import itertools
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .analysis.cells import CellCounters
from .analysis.histogram import GlobalHistograms
from .data.container import DataContainer
from .simulation.stack import COLD_MISS

CellKey = Tuple[str, Tuple[int, ...]]


def _positive(value: int) -> Optional[int]:
    return value if value > 0 else None


class SimulationContext:
    """
    State of one simulation.

    Args:
        containers: Container name -> container
        cache_line_bytes: Line size in bytes; 0 disables line grouping
        reuse_distance_threshold: Warm touches at or above this distance
            count as misses
    """

    def __init__(self, containers: Mapping[str, DataContainer],
                 cache_line_bytes: int = 32,
                 reuse_distance_threshold: int = 10):
        self.containers: Dict[str, DataContainer] = dict(containers)
        self.cache_line_bytes = cache_line_bytes
        self.reuse_distance_threshold = reuse_distance_threshold
        self.cells: Dict[CellKey, CellCounters] = {}
        self.histograms = GlobalHistograms()
        self.traces: Dict[int, list] = {}

    # =========================================================================
    # Cells
    # =========================================================================

    def cell(self, container: str, index: Sequence[int],
             create: bool = True) -> Optional[CellCounters]:
        """
        Counters of one element, created on first use.

        Returns:
            None for unknown containers and out-of-bounds indices
        """
        data = self.containers.get(container)
        if data is None or not data.contains(index):
            return None
        key = (container, tuple(int(v) for v in index))
        counters = self.cells.get(key)
        if counters is None and create:
            counters = CellCounters(container, key[1])
            self.cells[key] = counters
        return counters

    def all_cells(self) -> List[CellCounters]:
        return list(self.cells.values())

    def cells_of(self, container: str) -> List[CellCounters]:
        return [c for (name, _), c in self.cells.items() if name == container]

    def matching_cells(self, container: str, index: Sequence) -> List[CellCounters]:
        """
        Cells addressed by a possibly partial index.

        An unresolved (None) component matches the whole dimension; an
        out-of-range component matches nothing.
        """
        data = self.containers.get(container)
        if data is None or len(index) != data.ndim:
            return []
        choices = []
        for value, dim in zip(index, data.shape):
            if value is None:
                choices.append(range(dim.value))
            elif isinstance(value, int) and 0 <= value < dim.value:
                choices.append((value,))
            else:
                return []
        return [self.cell(container, combo) for combo in itertools.product(*choices)]

    # =========================================================================
    # Access marking
    # =========================================================================

    def mark_access(self, container: str, index: Sequence, count: int = 1) -> int:
        """
        Add to the stacked access count of every matching cell.

        Returns:
            Number of cells marked
        """
        cells = self.matching_cells(container, index)
        for cell in cells:
            old = cell.stacked_accesses
            cell.stacked_accesses = old + count
            self.histograms.access.move(_positive(old), _positive(cell.stacked_accesses))
        return len(cells)

    def unmark_access(self, container: str, index: Sequence, count: int = 1) -> int:
        cells = self.matching_cells(container, index)
        for cell in cells:
            old = cell.stacked_accesses
            cell.stacked_accesses = max(old - count, 0)
            self.histograms.access.move(_positive(old), _positive(cell.stacked_accesses))
        return len(cells)

    def clear_accesses(self) -> None:
        for cell in self.cells.values():
            if cell.stacked_accesses > 0:
                self.histograms.access.remove(cell.stacked_accesses)
                cell.stacked_accesses = 0

    def marked_cells(self) -> int:
        return sum(1 for c in self.cells.values() if c.stacked_accesses > 0)

    # =========================================================================
    # Reuse distances
    # =========================================================================

    def is_miss(self, distance: int) -> bool:
        return distance == COLD_MISS or distance >= self.reuse_distance_threshold

    def record_touch(self, cell: CellCounters, distance: int) -> None:
        """
        Record one stack touch on a cell and update the histograms.

        Metric histograms are reclassified from the cell's old value to
        its new one; the miss count moves only when the touch is a miss.
        """
        old_metrics = (cell.median_distance, cell.min_distance, cell.max_distance)
        cell.record(distance)
        self.histograms.reuse_distance.add(distance)

        new_metrics = (cell.median_distance, cell.min_distance, cell.max_distance)
        tables = (
            self.histograms.median_reuse_distance,
            self.histograms.min_reuse_distance,
            self.histograms.max_reuse_distance,
        )
        for table, old, new in zip(tables, old_metrics, new_metrics):
            table.move(old, new)

        if self.is_miss(distance):
            old = cell.total_misses
            cell.total_misses = old + 1
            self.histograms.misses.move(_positive(old), cell.total_misses)

    def heat(self, cell: CellCounters, metric: Optional[str] = None) -> float:
        """
        Heat-map position of a cell in [0, 1].

        Without a metric the cell is ranked by its stacked access count;
        otherwise by the reuse metric against the matching histogram.
        """
        if metric is None:
            return self.histograms.access.rank(cell.stacked_accesses)
        return self.histograms.for_metric(metric).rank_at_least(cell.metric(metric))

    def total_misses(self, container: Optional[str] = None) -> int:
        cells = self.all_cells() if container is None else self.cells_of(container)
        return sum(c.total_misses for c in cells)

    def cold_misses(self, container: Optional[str] = None) -> int:
        cells = self.all_cells() if container is None else self.cells_of(container)
        return sum(c.cold_misses for c in cells)

    def touches(self) -> int:
        return sum(sum(c.stack_distances.values()) for c in self.cells.values())

    # =========================================================================
    # Export
    # =========================================================================

    def snapshot(self) -> Dict:
        """Plain-data copy of all counters and histograms."""
        return {
            "cells": {
                f"{name}{list(index)}": cell.to_dict()
                for (name, index), cell in sorted(self.cells.items())
            },
            "histograms": self.histograms.to_dict(),
        }
