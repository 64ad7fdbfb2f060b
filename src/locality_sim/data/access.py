"""
Memory access types: symbolic accesses declared by computations and
the concrete accesses they resolve to under a scope.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import GraphDescriptionError
from ..symbolic import Number, Scope, evaluate, evaluate_all


class AccessMode(Enum):
    """Direction of a memory access."""
    READ_ONLY = "read"
    WRITE = "write"
    READ_WRITE = "readwrite"

    @classmethod
    def parse(cls, value: Union[str, "AccessMode"]) -> "AccessMode":
        """Parse ``read``/``r``/``in``, ``write``/``w``/``out`` or ``readwrite``/``rw``."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "").replace("-", "")
        aliases = {
            "read": cls.READ_ONLY,
            "readonly": cls.READ_ONLY,
            "r": cls.READ_ONLY,
            "in": cls.READ_ONLY,
            "write": cls.WRITE,
            "w": cls.WRITE,
            "out": cls.WRITE,
            "readwrite": cls.READ_WRITE,
            "rw": cls.READ_WRITE,
            "inout": cls.READ_WRITE,
        }
        if key not in aliases:
            raise GraphDescriptionError(f"Unknown access mode: {value!r}")
        return aliases[key]


Index = Tuple[Optional[Number], ...]


@dataclass(frozen=True)
class ConcreteAccess:
    """
    An access under a concrete scope.

    Index components are None where the expression was unresolved.
    """
    container: str
    mode: AccessMode
    index: Index

    @property
    def is_resolved(self) -> bool:
        return all(isinstance(v, int) and not isinstance(v, bool) for v in self.index)


@dataclass(frozen=True)
class SymbolicAccess:
    """
    An access as declared by a computation.

    Attributes:
        container: Name of the accessed container
        mode: Access direction
        index: One expression (string or number) per dimension
        volume: Number of elements touched; must evaluate to 1
    """
    container: str
    mode: AccessMode
    index: Tuple[Union[str, Number], ...]
    volume: Union[str, Number] = 1

    def resolve(self, scope: Optional[Scope] = None) -> ConcreteAccess:
        """Evaluate every index expression under a scope."""
        return ConcreteAccess(
            self.container, self.mode, tuple(evaluate_all(self.index, scope))
        )

    def volume_under(self, scope: Optional[Scope] = None) -> Optional[Number]:
        return evaluate(self.volume, scope)

    @classmethod
    def from_dict(cls, data: Dict) -> "SymbolicAccess":
        index = data.get("index", [])
        if isinstance(index, (str, int, float)):
            index = [index]
        return cls(
            container=str(data["data"]),
            mode=AccessMode.parse(data.get("mode", "read")),
            index=tuple(index),
            volume=data.get("volume", 1),
        )

    def to_dict(self) -> Dict:
        return {
            "data": self.container,
            "mode": self.mode.value,
            "index": list(self.index),
            "volume": self.volume,
        }


class AccessMap(dict):
    """
    Container name -> ordered list of (mode, index) pairs.

    Order within a list follows the order accesses were produced.
    """

    def add(self, container: str, mode: AccessMode, index: Sequence) -> None:
        self.setdefault(container, []).append((mode, tuple(index)))

    def add_access(self, access: ConcreteAccess) -> None:
        self.add(access.container, access.mode, access.index)

    def merge(self, other: "AccessMap", first: bool = False) -> None:
        """
        Merge another map into this one.

        Args:
            other: Map to merge
            first: Place the other map's entries before this map's
        """
        for container, entries in other.items():
            current = self.get(container, [])
            self[container] = list(entries) + current if first else current + list(entries)

    def contains(self, container: str, index: Sequence) -> bool:
        """True if the map holds an entry for the container at exactly this index."""
        target = tuple(index)
        return any(entry == target for _, entry in self.get(container, []))

    def accesses(self) -> Iterator[ConcreteAccess]:
        for container, entries in self.items():
            for mode, index in entries:
                yield ConcreteAccess(container, mode, index)

    def count(self) -> int:
        return sum(len(entries) for entries in self.values())

    def to_dict(self) -> Dict[str, List[Dict]]:
        return {
            container: [
                {"mode": mode.value, "index": list(index)} for mode, index in entries
            ]
            for container, entries in self.items()
        }
