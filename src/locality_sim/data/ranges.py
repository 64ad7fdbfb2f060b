"""
Loop ranges of a map (one iteration dimension each).
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple, Union

from ..errors import ZeroStepError
from ..symbolic import Number, Scope, evaluate

Bound = Union[str, Number]


@dataclass
class Range:
    """
    One dimension of a loop nest.

    Bounds are inclusive: the iteration variable takes ``start``,
    ``start + step``, ... while it stays ``<= end`` (``>= end`` for a
    negative step).

    Attributes:
        itvar: Iteration variable name
        start: First value (number or expression)
        end: Last value, inclusive (number or expression)
        step: Increment; must not be zero
        free_symbol: Symbol a bound depends on when it is unresolved
        free_symbol_default: Value bound to ``free_symbol`` unless the
            scope already provides one
    """
    itvar: str
    start: Bound
    end: Bound
    step: Bound = 1
    free_symbol: Optional[str] = None
    free_symbol_default: Optional[Number] = None

    def __post_init__(self):
        if not isinstance(self.step, str) and self.step == 0:
            raise ZeroStepError(f"Range {self.itvar} has a step of 0")

    def _scope_with_defaults(self, scope: Optional[Scope]) -> Scope:
        merged = dict(scope or {})
        if self.free_symbol and self.free_symbol not in merged:
            default = self.free_symbol_default
            merged[self.free_symbol] = default if default is not None else 0
        return merged

    def bounds(self, scope: Optional[Scope] = None) -> Optional[Tuple[Number, Number, Number]]:
        """
        Evaluate start, end and step under a scope.

        Returns:
            (start, end, step), or None if any of them is unresolved

        Raises:
            ZeroStepError: If the step evaluates to 0
        """
        scope = self._scope_with_defaults(scope)
        start = evaluate(self.start, scope)
        end = evaluate(self.end, scope)
        step = evaluate(self.step, scope)
        if step == 0:
            raise ZeroStepError(f"Range {self.itvar} has a step of 0")
        if start is None or end is None or step is None:
            return None
        return start, end, step

    def values(self, scope: Optional[Scope] = None) -> Iterator[Number]:
        """
        Concrete values of the iteration variable.

        Yields nothing when a bound is unresolved.
        """
        resolved = self.bounds(scope)
        if resolved is None:
            return
        start, end, step = resolved
        value = start
        if step > 0:
            while value <= end:
                yield value
                value += step
        else:
            while value >= end:
                yield value
                value += step

    def is_static(self, scope: Optional[Scope] = None) -> bool:
        return self.bounds(scope) is not None

    def label(self) -> str:
        """Display form, e.g. ``i=0:N-1`` or ``i=0:N-1:2``."""
        text = f"{self.itvar}={self.start}:{self.end}"
        step = evaluate(self.step)
        if step is None or step > 1 or step < 0:
            text += f":{self.step}"
        return text

    @classmethod
    def from_dict(cls, data: Dict) -> "Range":
        """
        Create a range from a dictionary.

        Accepts ``var``/``itvar``, ``start``, ``end`` and optional
        ``step``, ``free_symbol`` and ``free_symbol_default``.
        """
        return cls(
            itvar=str(data.get("itvar", data.get("var"))),
            start=data["start"],
            end=data["end"],
            step=data.get("step", 1),
            free_symbol=data.get("free_symbol"),
            free_symbol_default=data.get("free_symbol_default"),
        )

    def to_dict(self) -> Dict:
        result = {
            "itvar": self.itvar,
            "start": self.start,
            "end": self.end,
            "step": self.step,
        }
        if self.free_symbol is not None:
            result["free_symbol"] = self.free_symbol
            result["free_symbol_default"] = self.free_symbol_default
        return result
