"""
Utility functions for the locality simulator.
"""

import contextlib
import time
from typing import Dict, Iterator, Tuple


def parse_index(text: str) -> Tuple[int, ...]:
    """
    Parse a comma-separated index such as ``"1,2"``.

    Raises:
        ValueError: If a component is not an integer
    """
    text = text.strip().strip("[]()")
    if not text:
        return ()
    return tuple(int(part) for part in text.split(","))


def format_bytes(n: float, precision: int = 1) -> str:
    """Format a byte count with a binary unit suffix."""
    value = float(n)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if abs(value) < 1024 or unit == "GiB":
            if unit == "B":
                return f"{int(value)} B"
            return f"{value:.{precision}f} {unit}"
        value /= 1024
    return f"{value:.{precision}f} GiB"


def format_ratio(part: int, whole: int, precision: int = 1) -> str:
    """Format ``part/whole`` as a percentage; ``-`` when whole is 0."""
    if whole <= 0:
        return "-"
    return f"{100.0 * part / whole:.{precision}f}%"


class Timer:
    """Accumulating section timer."""

    def __init__(self):
        self.times: Dict[str, float] = {}
        self._starts: Dict[str, float] = {}

    def start(self, name: str) -> None:
        self._starts[name] = time.perf_counter()

    def stop(self, name: str) -> float:
        """Stop a section and return its elapsed time (0.0 if never started)."""
        if name not in self._starts:
            return 0.0
        elapsed = time.perf_counter() - self._starts.pop(name)
        self.times[name] = self.times.get(name, 0.0) + elapsed
        return elapsed

    @contextlib.contextmanager
    def section(self, name: str) -> Iterator[None]:
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)

    def report(self) -> str:
        lines = ["Timing:"]
        for name, elapsed in sorted(self.times.items(), key=lambda x: -x[1]):
            lines.append(f"  {name}: {elapsed * 1000:.1f} ms")
        return "\n".join(lines)
