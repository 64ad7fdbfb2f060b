"""
Dataflow graph: node variants, the arena graph and the YAML loader.
"""

from .nodes import ComputationNode, MapNode, MemoryNode, Node, NodeKind
from .graph import Graph
from .loader import graph_from_dict, load_graph

__all__ = [
    "ComputationNode",
    "MapNode",
    "MemoryNode",
    "Node",
    "NodeKind",
    "Graph",
    "graph_from_dict",
    "load_graph",
]
