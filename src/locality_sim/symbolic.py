"""
Symbolic expression resolver.

Index and range expressions arrive as strings over iteration variables
and graph symbols (``"i + 1"``, ``"N - 1"``, ``"int_floor(N, 2)"``).
They are parsed once with sympy, cached, and substituted under a scope
(variable name -> number) on every evaluation.

Evaluation never raises: anything that cannot be reduced to a finite
real number under the given scope resolves to ``None``.
"""

import logging
import math
import numbers
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Union

import sympy
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]
Scope = Dict[str, Number]

_TRANSFORMATIONS = standard_transformations + (convert_xor,)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _int_floor(a, b):
    return sympy.floor(a / b)


def _int_ceil(a, b):
    return sympy.ceiling(a / b)


# Functions available inside expressions. Every other identifier is
# bound to a plain Symbol so names like N, S or E never collide with
# sympy's own objects.
FUNCTIONS = {
    "floor": sympy.floor,
    "ceiling": sympy.ceiling,
    "ceil": sympy.ceiling,
    "min": sympy.Min,
    "Min": sympy.Min,
    "max": sympy.Max,
    "Max": sympy.Max,
    "Mod": sympy.Mod,
    "mod": sympy.Mod,
    "abs": sympy.Abs,
    "Abs": sympy.Abs,
    "int_floor": _int_floor,
    "int_ceil": _int_ceil,
}


@lru_cache(maxsize=4096)
def parse(expr: str) -> sympy.Expr:
    """
    Parse an expression string into a sympy expression.

    ``^`` is read as exponentiation, as in the graph format.

    Raises:
        Any parser error; ``evaluate`` turns those into ``None``.
    """
    local_dict = dict(FUNCTIONS)
    for name in set(_IDENTIFIER.findall(expr)):
        if name not in local_dict:
            local_dict[name] = sympy.Symbol(name)
    return parse_expr(
        expr,
        local_dict=local_dict,
        transformations=_TRANSFORMATIONS,
        evaluate=True,
    )


def _to_number(value: sympy.Basic) -> Optional[Number]:
    if value.free_symbols:
        return None
    if value.is_Integer:
        return int(value)
    if not value.is_number:
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    if result.is_integer():
        return int(result)
    return result


def evaluate(expr, scope: Optional[Scope] = None) -> Optional[Number]:
    """
    Evaluate an expression under a variable binding.

    Args:
        expr: Plain number, expression string or sympy expression
        scope: Variable name -> concrete number

    Returns:
        The numeric value, or None when the expression is unresolved
        (unknown symbol, non-numeric or non-finite result, parse error).
    """
    if isinstance(expr, bool) or expr is None:
        return None
    if isinstance(expr, (int, float)):
        return expr
    if isinstance(expr, numbers.Integral):
        return int(expr)
    if isinstance(expr, numbers.Real):
        return float(expr)

    try:
        if isinstance(expr, sympy.Basic):
            parsed = expr
        else:
            parsed = parse(str(expr).strip())
        if scope:
            bindings = {
                symbol: sympy.sympify(scope[symbol.name])
                for symbol in parsed.free_symbols
                if symbol.name in scope and scope[symbol.name] is not None
            }
            if bindings:
                parsed = parsed.xreplace(bindings)
        return _to_number(parsed)
    except Exception as exc:  # parse and arithmetic errors mean "unresolved"
        logger.debug("Unresolved expression %r: %s", expr, exc)
        return None


def evaluate_all(exprs: Iterable, scope: Optional[Scope] = None) -> List[Optional[Number]]:
    """Evaluate every expression of an index tuple."""
    return [evaluate(e, scope) for e in exprs]


def is_resolved(values: Iterable) -> bool:
    """True when no component of an evaluated tuple is None."""
    return all(v is not None for v in values)


def free_symbols(expr) -> List[str]:
    """Names of the variables an expression refers to, sorted."""
    if isinstance(expr, (int, float)) or expr is None:
        return []
    try:
        parsed = expr if isinstance(expr, sympy.Basic) else parse(str(expr).strip())
    except Exception:
        return []
    return sorted(s.name for s in parsed.free_symbols)
