"""
Data model: containers and their addressing, loop ranges, and memory
accesses.
"""

from .container import DataContainer, Dimension, compute_strides
from .ranges import Range
from .access import AccessMap, AccessMode, ConcreteAccess, SymbolicAccess

__all__ = [
    "DataContainer",
    "Dimension",
    "compute_strides",
    "Range",
    "AccessMap",
    "AccessMode",
    "ConcreteAccess",
    "SymbolicAccess",
]
