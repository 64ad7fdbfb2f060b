"""
Node variants of a dataflow graph.

The set is closed: computations (tasklets) declaring accesses, maps
(loop nests) owning a body of child nodes, and memory nodes standing
for a container. Nodes refer to each other by integer handle only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional

from ..data.access import AccessMode, SymbolicAccess
from ..data.ranges import Range


class NodeKind(Enum):
    COMPUTATION = "computation"
    MAP = "map"
    MEMORY = "memory"


@dataclass
class Node:
    """
    Common node fields.

    Attributes:
        id: Handle in the owning graph
        label: Display name
        parent: Handle of the enclosing map, None at top level
    """
    kind: ClassVar[NodeKind]

    id: int = -1
    label: str = ""
    parent: Optional[int] = None


@dataclass
class ComputationNode(Node):
    """A computation declaring the accesses it performs per invocation."""
    kind: ClassVar[NodeKind] = NodeKind.COMPUTATION

    accesses: List[SymbolicAccess] = field(default_factory=list)
    code: str = ""


@dataclass
class MapNode(Node):
    """A loop nest; ``children`` are the handles of its body."""
    kind: ClassVar[NodeKind] = NodeKind.MAP

    ranges: List[Range] = field(default_factory=list)
    children: List[int] = field(default_factory=list)

    @property
    def range_label(self) -> str:
        return "[" + ", ".join(r.label() for r in self.ranges) + "]"


@dataclass
class MemoryNode(Node):
    """An access node for one container."""
    kind: ClassVar[NodeKind] = NodeKind.MEMORY

    container: str = ""
    mode: AccessMode = AccessMode.READ_WRITE
