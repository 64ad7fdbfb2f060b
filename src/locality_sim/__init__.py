"""
locality-sim: memory-access simulation and cache reuse-distance analysis
for nested-loop dataflow graphs.

Given maps (loop nests) over shaped containers, the simulator enumerates
the concrete iteration space, resolves symbolic index expressions to
element addresses, groups elements into cache lines, computes exact LRU
stack (reuse) distances per element, and aggregates the results into
histograms for heat-map display.

Quick Start:
    from locality_sim import load_graph, simulate, SimulatorConfig

    graph = load_graph("matmul.yaml")
    result = simulate(graph, SimulatorConfig(cache_line_bytes=64))
    print(result.summary())
"""

__version__ = "0.1.0"

from locality_sim.errors import (
    DataDependentAccessError,
    GraphDescriptionError,
    LocalitySimError,
    UnsupportedGraphError,
    ZeroStepError,
)
from locality_sim.symbolic import evaluate
from locality_sim.data import (
    AccessMap,
    AccessMode,
    ConcreteAccess,
    DataContainer,
    Dimension,
    Range,
    SymbolicAccess,
    compute_strides,
)
from locality_sim.graph import Graph, graph_from_dict, load_graph
from locality_sim.simulation import (
    AccessStack,
    MapSimulation,
    TraceEntry,
    cache_line,
    tiling_regions,
)
from locality_sim.analysis import GlobalHistograms, Histogram
from locality_sim.context import SimulationContext
from locality_sim.simulator import SimulationResult, Simulator, SimulatorConfig, simulate
from locality_sim.playback import Playback

__all__ = [
    "LocalitySimError",
    "UnsupportedGraphError",
    "ZeroStepError",
    "DataDependentAccessError",
    "GraphDescriptionError",
    "evaluate",
    "AccessMap",
    "AccessMode",
    "ConcreteAccess",
    "DataContainer",
    "Dimension",
    "Range",
    "SymbolicAccess",
    "compute_strides",
    "Graph",
    "graph_from_dict",
    "load_graph",
    "AccessStack",
    "MapSimulation",
    "TraceEntry",
    "cache_line",
    "tiling_regions",
    "GlobalHistograms",
    "Histogram",
    "SimulationContext",
    "SimulationResult",
    "Simulator",
    "SimulatorConfig",
    "simulate",
    "Playback",
]
