"""
Cache-line resolution.

Touching one element is modelled as touching every element that shares
its ``line_bytes``-sized, byte-aligned window. Siblings are found by
counting the element slots before and after the target inside its line
and mapping each slot back to an index with the container's strides.
"""

from typing import Hashable, List, Optional, Sequence, Tuple

from ..data.container import DataContainer


def _is_concrete(index: Sequence) -> bool:
    return all(isinstance(v, int) and not isinstance(v, bool) for v in index)


def cache_line(container: DataContainer, index: Sequence,
               line_bytes: Optional[int]) -> List[Tuple[int, ...]]:
    """
    Indices sharing a cache line with ``index``, target included.

    Args:
        container: Accessed container
        index: Concrete index into the container
        line_bytes: Cache-line size in bytes; ``None`` or ``<= 0``
            disables grouping

    Returns:
        Sibling indices in ascending address order. Empty when grouping
        is disabled or the index is unresolved or of the wrong rank.
        Slots that fall outside the container or in padding are dropped.
    """
    if line_bytes is None or line_bytes <= 0:
        return []
    if len(index) != container.ndim or not _is_concrete(index):
        return []

    es = container.element_size
    flat = container.flat_index(index)
    bytes_before = (flat * es + container.alignment) % line_bytes
    n_before = bytes_before // es
    n_after = max((line_bytes - bytes_before - es) // es, 0)

    siblings = []
    for position in range(flat - n_before, flat + n_after + 1):
        candidate = container.unflatten(position)
        if candidate is not None:
            siblings.append(candidate)
    return siblings


def line_key(container: DataContainer, index: Sequence,
             line_bytes: Optional[int]) -> Optional[Tuple[str, Hashable]]:
    """
    Stack key of the line an access falls into.

    The key is the container name plus the first in-bounds index of the
    line, so lines of different containers never coincide. With grouping
    disabled every in-bounds element is its own line.

    Returns:
        The key, or None when the access cannot be placed.
    """
    if not container.contains(index):
        return None
    if line_bytes is None or line_bytes <= 0:
        return container.name, tuple(index)
    line = cache_line(container, index, line_bytes)
    if not line:
        return None
    return container.name, line[0]
