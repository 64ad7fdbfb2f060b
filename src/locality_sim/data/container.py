"""
Addressing model for memory containers.

A container maps an N-D index to a flat element position through
per-dimension strides, and from there to a byte offset:

    flat_index(idx)  = start_offset + sum(idx[k] * strides[k])
    byte_offset(idx) = flat_index(idx) * element_size + alignment

``start_offset`` is counted in elements, ``alignment`` in bytes.
"""

import itertools
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class Dimension:
    """
    A named size.

    Attributes:
        name: Symbolic name (``"N"``, ``"M*N"``, or the literal value)
        value: Resolved numeric value
    """
    name: str
    value: int

    def __str__(self) -> str:
        return self.name

    @classmethod
    def of(cls, item) -> "Dimension":
        """Build from a Dimension, a plain int, a (name, value) pair or a dict."""
        if isinstance(item, Dimension):
            return item
        if isinstance(item, dict):
            return cls(str(item.get("name", item["value"])), int(item["value"]))
        if isinstance(item, (tuple, list)):
            name, value = item
            return cls(str(name), int(value))
        return cls(str(item), int(item))


def _product_name(dims: Sequence[Dimension]) -> str:
    if not dims:
        return "1"
    return "*".join(d.name for d in dims)


def compute_strides(shape: Sequence[Dimension], inverse: bool = False) -> List[Dimension]:
    """
    Derive element strides from a shape by cumulative product.

    Row-major by default (last dimension has unit stride). With
    ``inverse`` the layout is column-major (first dimension has unit
    stride).

    Args:
        shape: Ordered dimensions
        inverse: Column-major layout

    Returns:
        One stride Dimension per shape dimension
    """
    shape = [Dimension.of(d) for d in shape]
    n = len(shape)
    strides: List[Dimension] = []
    for k in range(n):
        inner = shape[:k] if inverse else shape[k + 1:]
        value = int(np.prod([d.value for d in inner])) if inner else 1
        strides.append(Dimension(_product_name(inner), value))
    return strides


@dataclass
class DataContainer:
    """
    A named, shaped memory region.

    Attributes:
        name: Container identity
        shape: Ordered dimensions
        element_size: Bytes per element
        start_offset: Base offset in elements
        alignment: Byte offset added after scaling by element size
        storage: Storage class tag (display only)
        inverse: Column-major layout when strides are derived
        strides: Explicit strides; derived from the shape when omitted
    """
    name: str
    shape: List[Dimension]
    element_size: int = 1
    start_offset: int = 0
    alignment: int = 0
    storage: Optional[str] = None
    inverse: bool = False
    strides: Optional[List[Dimension]] = None

    def __post_init__(self):
        self.shape = [Dimension.of(d) for d in self.shape]
        if self.strides is None:
            self.strides = compute_strides(self.shape, self.inverse)
        else:
            self.strides = [Dimension.of(s) for s in self.strides]
        if len(self.strides) != len(self.shape):
            raise ValueError(
                f"{self.name}: {len(self.strides)} strides for "
                f"{len(self.shape)} dimensions"
            )
        if self.element_size <= 0:
            raise ValueError(f"{self.name}: element_size must be positive")

    # -----------------------------------------------------------------
    # Properties
    # -----------------------------------------------------------------

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def dims(self) -> Tuple[int, ...]:
        """Resolved dimension sizes."""
        return tuple(d.value for d in self.shape)

    @property
    def stride_values(self) -> Tuple[int, ...]:
        return tuple(s.value for s in self.strides)

    @property
    def size(self) -> int:
        """Number of elements."""
        return int(np.prod(self.dims)) if self.shape else 1

    @property
    def base_offset(self) -> int:
        """Byte offset of index (0, ..., 0)."""
        return self.start_offset * self.element_size + self.alignment

    # -----------------------------------------------------------------
    # Addressing
    # -----------------------------------------------------------------

    def flat_index(self, index: Sequence[int]) -> int:
        """
        Flat element position of an index.

        Raises:
            ValueError: If the index rank does not match the container
        """
        if len(index) != len(self.strides):
            raise ValueError(
                f"{self.name}: index {tuple(index)} has rank {len(index)}, "
                f"expected {len(self.strides)}"
            )
        return self.start_offset + sum(
            int(i) * s.value for i, s in zip(index, self.strides)
        )

    def byte_offset(self, index: Sequence[int]) -> int:
        """Byte offset of an index: flat position scaled, plus alignment."""
        return self.flat_index(index) * self.element_size + self.alignment

    def unflatten(self, flat: int) -> Optional[Tuple[int, ...]]:
        """
        Reconstruct the index stored at a flat element position.

        Strides are divided out largest first, which covers row-major,
        column-major and explicit layouts alike. Equal strides only occur
        next to a size-1 dimension, so the larger dimension divides first.

        Returns:
            The index, or None when the position lies before the base,
            outside a dimension's bound, or in padding between elements.
        """
        remainder = int(flat) - self.start_offset
        if remainder < 0:
            return None

        order = sorted(
            range(self.ndim),
            key=lambda k: (self.strides[k].value, self.shape[k].value),
            reverse=True,
        )
        index = [0] * self.ndim
        for k in order:
            stride = self.strides[k].value
            if stride <= 0:
                continue
            component, remainder = divmod(remainder, stride)
            if component >= self.shape[k].value:
                return None
            index[k] = component
        if remainder != 0:
            return None
        return tuple(index)

    def contains(self, index: Sequence) -> bool:
        """True if the index is concrete and within every bound."""
        if len(index) != self.ndim:
            return False
        for value, dim in zip(index, self.shape):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                return False
            if value < 0 or value >= dim.value:
                return False
        return True

    def iter_indices(self) -> Iterator[Tuple[int, ...]]:
        """Every valid index in row-major order."""
        return itertools.product(*(range(d.value) for d in self.shape))

    # -----------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict) -> "DataContainer":
        """Create a container from a dictionary."""
        strides = data.get("strides")
        return cls(
            name=data["name"],
            shape=[Dimension.of(d) for d in data.get("shape", [])],
            element_size=int(data.get("element_size", 1)),
            start_offset=int(data.get("start_offset", 0)),
            alignment=int(data.get("alignment", 0)),
            storage=data.get("storage"),
            inverse=bool(data.get("inverse", False)),
            strides=[Dimension.of(s) for s in strides] if strides is not None else None,
        )

    def to_dict(self) -> Dict[str, Union[str, int, bool, list, None]]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "shape": [{"name": d.name, "value": d.value} for d in self.shape],
            "strides": [{"name": s.name, "value": s.value} for s in self.strides],
            "element_size": self.element_size,
            "start_offset": self.start_offset,
            "alignment": self.alignment,
            "storage": self.storage,
            "inverse": self.inverse,
        }

    def __repr__(self) -> str:
        shape = ", ".join(str(d) for d in self.shape)
        return f"DataContainer({self.name}[{shape}], es={self.element_size})"
