"""
Locality simulator.

Runs every map of a graph through the iteration-space enumerator, feeds
the top-level traces through an LRU stack at cache-line granularity and
aggregates per-cell counters into the global histograms.

Recalculation always starts from an empty context, so running it twice
on unchanged input gives identical counters.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from tqdm import tqdm

from .analysis.movement import movement_volumes
from .context import SimulationContext
from .errors import UnsupportedGraphError
from .graph.graph import Graph
from .simulation.cache_line import line_key
from .simulation.enumerator import MapSimulation, TraceEntry
from .simulation.stack import AccessStack
from .utils import Timer

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """
    Configuration of a simulation.

    Attributes:
        cache_line_bytes: Cache-line size in bytes; 0 disables grouping
        reuse_distance_threshold: Warm touches at or above this distance
            count as misses
        show_all_accesses: Mark every access of every top-level trace on
            the cells after the reuse analysis
        symbols: Global symbol values, the base scope of every evaluation
        progress: Show a progress bar over the maps
    """
    cache_line_bytes: int = 32
    reuse_distance_threshold: int = 10
    show_all_accesses: bool = True
    symbols: Dict[str, float] = field(default_factory=dict)
    progress: bool = False

    def __post_init__(self):
        if self.cache_line_bytes is None or self.cache_line_bytes < 0:
            raise ValueError("cache_line_bytes must be >= 0")

    @classmethod
    def from_dict(cls, data: Dict) -> "SimulatorConfig":
        return cls(
            cache_line_bytes=int(data.get("cache_line_bytes", 32)),
            reuse_distance_threshold=int(data.get("reuse_distance_threshold", 10)),
            show_all_accesses=bool(data.get("show_all_accesses", True)),
            symbols=dict(data.get("symbols") or {}),
            progress=bool(data.get("progress", False)),
        )

    @classmethod
    def from_yaml(cls, config_path) -> "SimulatorConfig":
        """
        Load a configuration from a YAML file.

        Args:
            config_path: Path to the YAML file

        Returns:
            SimulatorConfig with defaults for missing keys
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Simulator config not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls.from_dict(data)

    def to_dict(self) -> Dict:
        return {
            "cache_line_bytes": self.cache_line_bytes,
            "reuse_distance_threshold": self.reuse_distance_threshold,
            "show_all_accesses": self.show_all_accesses,
            "symbols": dict(self.symbols),
        }


@dataclass
class SimulationResult:
    """
    Results of one simulation.

    Attributes:
        context: Cells, histograms and traces
        errors: Map handle -> reason the map was skipped
        movement: (src, dst) edge -> bytes moved
        timings: Section name -> seconds
    """
    context: SimulationContext
    errors: Dict[int, str] = field(default_factory=dict)
    movement: Dict[Tuple[int, int], int] = field(default_factory=dict)
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def traces(self) -> Dict[int, List[TraceEntry]]:
        return self.context.traces

    @property
    def histograms(self):
        return self.context.histograms

    @property
    def total_misses(self) -> int:
        return self.context.total_misses()

    @property
    def cold_misses(self) -> int:
        return self.context.cold_misses()

    @property
    def touches(self) -> int:
        return self.context.touches()

    @property
    def miss_rate(self) -> float:
        touches = self.touches
        return self.total_misses / touches if touches > 0 else 0.0

    def misses_by_container(self) -> Dict[str, int]:
        return {name: self.context.total_misses(name) for name in self.context.containers}

    def summary(self) -> Dict:
        return {
            "cells": len(self.context.cells),
            "touches": self.touches,
            "cold_misses": self.cold_misses,
            "total_misses": self.total_misses,
            "miss_rate": self.miss_rate,
            "misses_by_container": self.misses_by_container(),
            "skipped_maps": len(self.errors),
        }

    def to_dict(self) -> Dict:
        return {
            "summary": self.summary(),
            "errors": {int(k): v for k, v in self.errors.items()},
            "movement": [
                {"src": src, "dst": dst, "bytes": volume}
                for (src, dst), volume in self.movement.items()
            ],
            **self.context.snapshot(),
        }


class Simulator:
    """
    Reuse-distance simulator for one graph.

    Example:
        >>> sim = Simulator(graph, SimulatorConfig(cache_line_bytes=64))
        >>> result = sim.recalculate_all()
        >>> result.total_misses
    """

    def __init__(self, graph: Graph, config: Optional[SimulatorConfig] = None):
        self.graph = graph
        self.config = config or SimulatorConfig()
        self.reset()

    def reset(self) -> None:
        """Start a new context from the current configuration."""
        self.symbols = dict(self.graph.symbols)
        self.symbols.update(self.config.symbols)
        self.context = SimulationContext(
            self.graph.containers,
            cache_line_bytes=self.config.cache_line_bytes,
            reuse_distance_threshold=self.config.reuse_distance_threshold,
        )

    def compute_traces(self) -> Dict[int, str]:
        """
        Enumerate every map's trace into the context.

        Returns:
            Map handle -> error message for maps that could not be simulated
        """
        errors: Dict[int, str] = {}
        maps = self.graph.map_nodes()
        for map_id in tqdm(maps, desc="Enumerating maps", disable=not self.config.progress):
            try:
                trace = MapSimulation(self.graph, map_id, self.symbols).simulate()
            except UnsupportedGraphError as exc:
                label = self.graph.node(map_id).label
                logger.warning("Skipping map %s: %s", label, exc)
                errors[map_id] = str(exc)
                continue
            self.context.traces[map_id] = trace
        return errors

    def calculate_stack_distances(self, trace: List[TraceEntry]) -> int:
        """
        Run one trace through a fresh LRU stack.

        Accesses are processed in trace order. Unresolved or out-of-bounds
        accesses are skipped.

        Returns:
            Number of stack touches
        """
        stack = AccessStack()
        touches = 0
        for entry in trace:
            for access in entry.accesses:
                container = self.context.containers.get(access.container)
                if container is None or not access.is_resolved:
                    continue
                key = line_key(container, access.index, self.config.cache_line_bytes)
                if key is None:
                    continue
                distance = stack.touch(key)
                cell = self.context.cell(container.name, access.index)
                self.context.record_touch(cell, distance)
                touches += 1
        return touches

    def show_all(self) -> None:
        """Mark every access of every top-level trace on its cells."""
        self.context.clear_accesses()
        for map_id in self.graph.top_level_maps():
            for entry in self.context.traces.get(map_id, []):
                for access in entry.accesses:
                    self.context.mark_access(access.container, access.index)

    def recalculate_all(self) -> SimulationResult:
        """
        Build a new context and derive all counters and histograms again.

        Line size, threshold and symbols are read from ``self.config`` on
        every call, and results returned earlier keep their own context.

        Returns:
            SimulationResult wrapping the context
        """
        timer = Timer()
        self.reset()

        with timer.section("traces"):
            errors = self.compute_traces()

        with timer.section("stack_distances"):
            for map_id in self.graph.top_level_maps():
                trace = self.context.traces.get(map_id)
                if trace:
                    self.calculate_stack_distances(trace)

        if self.config.show_all_accesses:
            with timer.section("show_all"):
                self.show_all()

        with timer.section("movement"):
            movement = movement_volumes(self.context, self.graph)

        result = SimulationResult(self.context, errors, movement, dict(timer.times))
        logger.info(
            "Simulated %s: %d touches, %d misses, %d maps skipped",
            self.graph.name, result.touches, result.total_misses, len(errors),
        )
        return result

    run = recalculate_all


def simulate(graph: Graph, config: Optional[SimulatorConfig] = None) -> SimulationResult:
    """Simulate a graph with a fresh context."""
    return Simulator(graph, config).recalculate_all()
