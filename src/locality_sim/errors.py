"""
Error types raised by the locality simulator.

Unresolved symbolic values are never errors: the resolver returns None
and downstream code skips the work. The types below cover graphs the
simulator cannot model at all.
"""

from typing import Optional


class LocalitySimError(Exception):
    """Base class for all locality simulator errors."""


class UnsupportedGraphError(LocalitySimError):
    """
    A subgraph that cannot be simulated.

    Fatal for the offending map only; the simulator records it and
    continues with sibling maps.

    Attributes:
        node: Handle of the offending node, when known
    """

    def __init__(self, message: str, node: Optional[int] = None):
        super().__init__(message)
        self.node = node

    def __str__(self) -> str:
        base = super().__str__()
        if self.node is None:
            return base
        return f"{base} (node {self.node})"


class ZeroStepError(UnsupportedGraphError):
    """A loop range whose step is, or evaluates to, zero."""


class DataDependentAccessError(UnsupportedGraphError):
    """An access whose volume is not statically one element."""


class GraphDescriptionError(LocalitySimError, ValueError):
    """Malformed graph description (unknown node, container or mode)."""
