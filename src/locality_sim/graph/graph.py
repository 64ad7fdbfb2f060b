"""
Arena-backed dataflow graph.

All nodes live in one list and are addressed by their index. Parent
and child relations, as well as edges, are stored as handles.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..data.access import AccessMode, SymbolicAccess
from ..data.container import DataContainer
from ..errors import GraphDescriptionError
from ..data.ranges import Range
from .nodes import ComputationNode, MapNode, MemoryNode, Node, NodeKind


class Graph:
    """
    A dataflow graph of computations, maps and memory nodes.

    Example:
        >>> g = Graph()
        >>> g.add_container(DataContainer("A", [4]))
        >>> m = g.add_map([Range("i", 0, 3)])
        >>> t = g.add_computation([SymbolicAccess("A", AccessMode.READ_ONLY, ("i",))], parent=m)
    """

    def __init__(self, name: str = "graph", symbols: Optional[Dict] = None):
        self.name = name
        self.symbols: Dict = dict(symbols or {})
        self.nodes: List[Node] = []
        self.edges: List[Tuple[int, int]] = []
        self.containers: Dict[str, DataContainer] = {}

    # =========================================================================
    # Construction
    # =========================================================================

    def add_container(self, container: DataContainer) -> DataContainer:
        if container.name in self.containers:
            raise GraphDescriptionError(f"Duplicate container: {container.name}")
        self.containers[container.name] = container
        return container

    def _add(self, node: Node, parent: Optional[int]) -> int:
        if parent is not None:
            owner = self.node(parent)
            if not isinstance(owner, MapNode):
                raise GraphDescriptionError(
                    f"Parent {parent} of {node.label or node.kind.value} is not a map"
                )
        node.id = len(self.nodes)
        node.parent = parent
        if not node.label:
            node.label = f"{node.kind.value}_{node.id}"
        self.nodes.append(node)
        if parent is not None:
            self.nodes[parent].children.append(node.id)
        return node.id

    def add_memory(self, container: str, parent: Optional[int] = None,
                   mode: AccessMode = AccessMode.READ_WRITE,
                   label: str = "") -> int:
        """Add a memory node for a registered container."""
        if container not in self.containers:
            raise GraphDescriptionError(f"Unknown container: {container}")
        return self._add(MemoryNode(label=label or container, container=container, mode=mode), parent)

    def add_computation(self, accesses: Iterable[SymbolicAccess],
                        parent: Optional[int] = None,
                        label: str = "", code: str = "") -> int:
        """Add a computation declaring its accesses."""
        accesses = list(accesses)
        for access in accesses:
            if access.container not in self.containers:
                raise GraphDescriptionError(
                    f"Access to unknown container {access.container!r} in {label or 'computation'}"
                )
        return self._add(ComputationNode(label=label, accesses=accesses, code=code), parent)

    def add_map(self, ranges: Sequence[Range], parent: Optional[int] = None,
                label: str = "") -> int:
        return self._add(MapNode(label=label, ranges=list(ranges)), parent)

    def add_edge(self, src: int, dst: int) -> None:
        for handle in (src, dst):
            if handle < 0 or handle >= len(self.nodes):
                raise GraphDescriptionError(f"Edge refers to unknown node {handle}")
        self.edges.append((src, dst))

    # =========================================================================
    # Queries
    # =========================================================================

    def node(self, handle: int) -> Node:
        if handle < 0 or handle >= len(self.nodes):
            raise GraphDescriptionError(f"Unknown node {handle}")
        return self.nodes[handle]

    def kind(self, handle: int) -> NodeKind:
        return self.node(handle).kind

    def children_of(self, parent: Optional[int]) -> List[int]:
        """Body of a map, or the top-level nodes for ``None``."""
        if parent is None:
            return [n.id for n in self.nodes if n.parent is None]
        node = self.node(parent)
        return list(node.children) if isinstance(node, MapNode) else []

    def map_nodes(self) -> List[int]:
        return [n.id for n in self.nodes if isinstance(n, MapNode)]

    def top_level_maps(self) -> List[int]:
        return [n.id for n in self.nodes if isinstance(n, MapNode) and n.parent is None]

    def memory_nodes(self, container: Optional[str] = None) -> List[int]:
        return [
            n.id for n in self.nodes
            if isinstance(n, MemoryNode) and (container is None or n.container == container)
        ]

    def computations(self) -> List[int]:
        return [n.id for n in self.nodes if isinstance(n, ComputationNode)]

    def in_edges(self, handle: int) -> List[Tuple[int, int]]:
        return [e for e in self.edges if e[1] == handle]

    def out_edges(self, handle: int) -> List[Tuple[int, int]]:
        return [e for e in self.edges if e[0] == handle]

    def neighbors(self, handle: int) -> List[int]:
        """Nodes directly connected to a node by an edge, in edge order."""
        result = []
        for src, dst in self.edges:
            other = dst if src == handle else src if dst == handle else None
            if other is not None and other not in result:
                result.append(other)
        return result

    def ancestors(self, handle: int) -> List[int]:
        """Enclosing maps, innermost first."""
        chain = []
        parent = self.node(handle).parent
        while parent is not None:
            chain.append(parent)
            parent = self.nodes[parent].parent
        return chain

    def find(self, label: str) -> Optional[int]:
        for node in self.nodes:
            if node.label == label:
                return node.id
        return None

    def summary(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in NodeKind}
        for node in self.nodes:
            counts[node.kind.value] += 1
        counts["edges"] = len(self.edges)
        counts["containers"] = len(self.containers)
        return counts

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"Graph({self.name}, {len(self.nodes)} nodes, {len(self.edges)} edges)"
