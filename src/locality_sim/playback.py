"""
Trace playback.

Replays a map's trace one iteration at a time, marking each iteration's
accesses on the cells. Marks accumulate across steps, and the final
counters depend only on which steps were applied, never on timing.
"""

from typing import List, Optional, Sequence

from .context import SimulationContext
from .data.access import AccessMap
from .simulation.enumerator import TraceEntry


def apply_access_map(ctx: SimulationContext, access_map: AccessMap) -> int:
    """
    Mark every access of an access map.

    Returns:
        Number of cell marks applied
    """
    marked = 0
    for container, entries in access_map.items():
        for _, index in entries:
            marked += ctx.mark_access(container, index)
    return marked


class Playback:
    """
    Step-wise driver over one trace.

    Args:
        ctx: Context whose cells are marked
        trace: Trace to replay
    """

    def __init__(self, ctx: SimulationContext, trace: Sequence[TraceEntry]):
        self.ctx = ctx
        self.trace: List[TraceEntry] = list(trace)
        self.position = 0

    @property
    def finished(self) -> bool:
        return self.position >= len(self.trace)

    @property
    def current(self) -> Optional[TraceEntry]:
        """Last applied entry."""
        return self.trace[self.position - 1] if self.position > 0 else None

    def step(self) -> Optional[TraceEntry]:
        """Apply the next entry; None once the trace is exhausted."""
        if self.finished:
            return None
        entry = self.trace[self.position]
        apply_access_map(self.ctx, entry.access_map)
        self.position += 1
        return entry

    def run(self, steps: Optional[int] = None) -> int:
        """
        Apply up to ``steps`` entries (all remaining when None).

        Returns:
            Number of entries applied
        """
        applied = 0
        while not self.finished and (steps is None or applied < steps):
            self.step()
            applied += 1
        return applied

    def reset(self) -> None:
        self.ctx.clear_accesses()
        self.position = 0

    def show_all(self) -> int:
        self.reset()
        return self.run()

    def show(self, position: int) -> TraceEntry:
        """
        Show a single entry, as when the iteration variables are pinned.

        Raises:
            IndexError: If the position is outside the trace
        """
        if position < 0 or position >= len(self.trace):
            raise IndexError(f"Trace position {position} out of range")
        entry = self.trace[position]
        self.ctx.clear_accesses()
        apply_access_map(self.ctx, entry.access_map)
        self.position = position + 1
        return entry
