"""
Incrementally maintained histograms.

Every mutation touches at most two buckets; the sorted key list used
for heat-map ranking is cached and rebuilt only after the key set
changes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


class Histogram:
    """
    Mapping value -> number of occurrences.

    Buckets that drop to zero are removed so ``sorted_keys`` only ever
    lists values that currently occur.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._counts: Dict[float, int] = {}
        self._sorted: Optional[List[float]] = None

    def add(self, value, count: int = 1) -> None:
        if value is None or count <= 0:
            return
        if value not in self._counts:
            self._sorted = None
        self._counts[value] = self._counts.get(value, 0) + count

    def remove(self, value, count: int = 1) -> None:
        """
        Withdraw occurrences of a value.

        Raises:
            KeyError: If the value has fewer occurrences than ``count``
        """
        if value is None or count <= 0:
            return
        current = self._counts.get(value, 0)
        if current < count:
            raise KeyError(f"{self.name or 'histogram'}: cannot remove {count} x {value!r}")
        if current == count:
            del self._counts[value]
            self._sorted = None
        else:
            self._counts[value] = current - count

    def move(self, old, new) -> None:
        """Reclassify one occurrence from ``old`` to ``new``; None means absent."""
        if old == new:
            return
        self.remove(old)
        self.add(new)

    def get(self, value) -> int:
        return self._counts.get(value, 0)

    def total(self) -> int:
        return sum(self._counts.values())

    def sorted_keys(self) -> List[float]:
        if self._sorted is None:
            self._sorted = sorted(self._counts)
        return self._sorted

    def rank(self, value) -> float:
        """
        Position of an exact key scaled to [0, 1].

        Returns 0.0 for a missing key or a single-key histogram.
        """
        keys = self.sorted_keys()
        if value not in self._counts or len(keys) < 2:
            return 0.0
        return keys.index(value) / (len(keys) - 1)

    def rank_at_least(self, value) -> float:
        """Position of the first key ``>= value`` scaled to [0, 1]."""
        keys = self.sorted_keys()
        if value is None or len(keys) < 2:
            return 0.0
        for position, key in enumerate(keys):
            if key >= value:
                return position / (len(keys) - 1)
        return 0.0

    def clear(self) -> None:
        self._counts.clear()
        self._sorted = None

    def items(self):
        return [(k, self._counts[k]) for k in self.sorted_keys()]

    def to_dict(self) -> Dict:
        return {k: self._counts[k] for k in self.sorted_keys()}

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, value) -> bool:
        return value in self._counts

    def __eq__(self, other) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"Histogram({self.name}, {self.to_dict()})"


METRICS = ("median", "min", "max", "misses")


@dataclass
class GlobalHistograms:
    """
    Histograms shared by every cell of one simulation.

    Attributes:
        access: Stacked access count per cell (cells with a count > 0)
        reuse_distance: Distance of every touch, cold touches as -1
        median_reuse_distance: Median warm distance per cell
        min_reuse_distance: Minimum warm distance per cell
        max_reuse_distance: Maximum warm distance per cell
        misses: Total misses per cell (cells with at least one miss)
        movement: Memory-movement volume per edge
    """
    access: Histogram = field(default_factory=lambda: Histogram("access"))
    reuse_distance: Histogram = field(default_factory=lambda: Histogram("reuse_distance"))
    median_reuse_distance: Histogram = field(default_factory=lambda: Histogram("median"))
    min_reuse_distance: Histogram = field(default_factory=lambda: Histogram("min"))
    max_reuse_distance: Histogram = field(default_factory=lambda: Histogram("max"))
    misses: Histogram = field(default_factory=lambda: Histogram("misses"))
    movement: Histogram = field(default_factory=lambda: Histogram("movement"))

    def for_metric(self, metric: str) -> Histogram:
        """Histogram used to rank a cell by a reuse metric."""
        table = {
            "median": self.median_reuse_distance,
            "min": self.min_reuse_distance,
            "max": self.max_reuse_distance,
            "misses": self.misses,
        }
        if metric not in table:
            raise ValueError(f"Unknown reuse metric: {metric} (expected one of {METRICS})")
        return table[metric]

    def all(self) -> Dict[str, Histogram]:
        return {
            "access": self.access,
            "reuse_distance": self.reuse_distance,
            "median_reuse_distance": self.median_reuse_distance,
            "min_reuse_distance": self.min_reuse_distance,
            "max_reuse_distance": self.max_reuse_distance,
            "misses": self.misses,
            "movement": self.movement,
        }

    def clear(self, include_access: bool = True) -> None:
        for name, histogram in self.all().items():
            if name == "access" and not include_access:
                continue
            histogram.clear()

    def to_dict(self) -> Dict[str, Dict]:
        return {name: h.to_dict() for name, h in self.all().items()}
