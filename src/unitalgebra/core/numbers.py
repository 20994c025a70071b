"""
unitalgebra.core.numbers
========================

Exact-rational helpers.

Conversion factors are always `fractions.Fraction`. Values supplied by
callers may be `int`, `Fraction`, `Decimal` or `float`; arithmetic is done on
exact fractions and the result is handed back in the caller's numeric kind
(see `restore_kind`).
"""

from __future__ import annotations

import math
import operator
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Union

Number = Union[int, Fraction, Decimal, float]

# Higher rank wins when two kinds are combined.
_KIND_RANK = {int: 0, Fraction: 1, Decimal: 2, float: 3}


def is_number(value: Any) -> bool:
    return isinstance(value, (int, Fraction, Decimal, float)) and not isinstance(value, bool)


def parse_ratio(text: str) -> Fraction:
    """Parse ``"n"``, ``"n/d"`` or ``"1.5e-3"`` style strings exactly.

    Both sides of a ratio may be decimal literals, e.g. ``"0.0254/72"``.
    """
    text = text.strip().replace("_", "")
    if "/" in text:
        num, _, den = text.partition("/")
        denominator = Fraction(den.strip())
        if denominator == 0:
            raise ValueError(f"Zero denominator in ratio {text!r}")
        return Fraction(num.strip()) / denominator
    return Fraction(text)


def to_fraction(value: Any) -> Fraction:
    """Convert a number (or ratio string) to an exact `Fraction`.

    Floats are converted through their shortest repr so that ``0.3048``
    becomes ``Fraction(381, 1250)`` rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a valid numeric value")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Non-finite value {value!r} cannot be made exact")
        return Fraction(repr(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Non-finite value {value!r} cannot be made exact")
        return Fraction(value)
    if isinstance(value, str):
        return parse_ratio(value)
    raise TypeError(f"Expected a number, got {type(value).__name__}")


def restore_kind(result: Fraction, like: Number) -> Number:
    """Return `result` in the numeric kind of `like`.

    - ``int`` stays ``int`` while the result is integral, otherwise it is
      promoted to ``Fraction``.
    - ``Fraction`` stays ``Fraction``.
    - ``Decimal`` is rendered with the current decimal context precision.
    - ``float`` is the correctly rounded float of the exact result.
    """
    if isinstance(like, bool):
        raise TypeError("bool is not a valid numeric value")
    if isinstance(like, float):
        return float(result)
    if isinstance(like, Decimal):
        return Decimal(result.numerator) / Decimal(result.denominator)
    if isinstance(like, int) and result.denominator == 1:
        return int(result)
    return result


def wider_kind(a: Number, b: Number) -> Number:
    """Return whichever of `a`, `b` has the wider numeric kind."""
    rank_a = _KIND_RANK.get(type(a), 1)
    rank_b = _KIND_RANK.get(type(b), 1)
    return a if rank_a >= rank_b else b


def _combine(op: Callable[[Fraction, Fraction], Fraction], a: Number, b: Number) -> Number:
    result = op(to_fraction(a), to_fraction(b))
    return restore_kind(result, wider_kind(a, b))


def add(a: Number, b: Number) -> Number:
    return _combine(operator.add, a, b)


def sub(a: Number, b: Number) -> Number:
    return _combine(operator.sub, a, b)


def mult(a: Number, b: Number) -> Number:
    return _combine(operator.mul, a, b)


def div(a: Number, b: Number) -> Number:
    return _combine(operator.truediv, a, b)


def power(a: Number, n: int) -> Number:
    return restore_kind(to_fraction(a) ** n, a)


def split_integer(value: Number) -> tuple[Number, Number]:
    """Split `value` into its integer part (truncated toward zero) and remainder.

    The integer part is an ``int`` for exact kinds and keeps the kind of
    `value` for ``Decimal`` and ``float``.
    """
    exact = to_fraction(value)
    whole = math.trunc(exact)
    remainder = exact - whole
    if isinstance(value, (Decimal, float)):
        return restore_kind(Fraction(whole), value), restore_kind(remainder, value)
    return whole, restore_kind(remainder, value)


__all__ = [
    "Number",
    "is_number",
    "parse_ratio",
    "to_fraction",
    "restore_kind",
    "wider_kind",
    "add",
    "sub",
    "mult",
    "div",
    "power",
    "split_integer",
]
