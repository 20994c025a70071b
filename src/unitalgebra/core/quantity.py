"""
unitalgebra.core.quantity
=========================

Defines `Quantity`, a value paired with a unit name.

Quantities are immutable: conversion, arithmetic and rounding always return
a new instance. Arithmetic that needs unit knowledge (conversion for ``+``
and ``-``, unit products for ``*`` and ``/``, comparisons) goes through the
default engine, so ``Quantity(1, "meter") * Quantity(1, "meter")`` is
``Quantity(1, "square_meter")``. Units that only exist in another engine
(built with ``UnitEngine.build(additional_units=...)``) need that engine
passed explicitly to `Quantity.to`, `Quantity.to_base` or
`Quantity.compare`, or installed as the default with
``unitalgebra.initialize``.

Values may be `int`, `Fraction`, `Decimal` or `float`. Results keep the
numeric kind of their inputs, with exact arithmetic underneath.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import (
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_DOWN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    ROUND_UP,
    Decimal,
    localcontext,
)
from fractions import Fraction
from typing import TYPE_CHECKING, Any

from unitalgebra.core import numbers
from unitalgebra.core.compound import CompoundUnit
from unitalgebra.core.numbers import Number

if TYPE_CHECKING:  # pragma: no cover - typing aid only
    from unitalgebra.engine import UnitEngine

ROUNDING_MODES = {
    "half_up": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
    "half_down": ROUND_HALF_DOWN,
    "up": ROUND_UP,
    "down": ROUND_DOWN,
    "ceiling": ROUND_CEILING,
    "floor": ROUND_FLOOR,
}


def _default_engine() -> "UnitEngine":
    # Import here to avoid import-time cycles; read the attribute each time so
    # that `initialize()` rebinding is honoured.
    from unitalgebra import engine

    return engine.DEFAULT_ENGINE


@dataclass(frozen=True, slots=True)
class Quantity:
    """
    A value expressed in a unit.

    Attributes
    ----------
    value : int | Fraction | Decimal | float
        The magnitude.
    unit : str
        The unit name. Use `Quantity.new` to canonicalize a user-supplied
        name; the constructor stores it as given.
    """

    value: Number
    unit: str

    def __post_init__(self) -> None:
        if isinstance(self.unit, CompoundUnit):
            object.__setattr__(self, "unit", self.unit.name)
        if not isinstance(self.unit, str):
            raise TypeError(f"Quantity unit must be a string, got {type(self.unit).__name__}")
        if not numbers.is_number(self.value):
            raise TypeError(f"Quantity value must be a number, got {type(self.value).__name__}")
        if isinstance(self.value, float) and not math.isfinite(self.value):
            raise ValueError("Quantity value must be finite")
        if isinstance(self.value, Decimal) and not self.value.is_finite():
            raise ValueError("Quantity value must be finite")

    @classmethod
    def new(cls, value: Number, unit: str, engine: "UnitEngine | None" = None) -> "Quantity":
        """Create a quantity, canonicalizing `unit` (raises `UnknownUnitError`)."""
        engine = engine or _default_engine()
        return cls(value, engine.canonicalize(unit).name)

    # --- conversion ---------------------------------------------------------
    def to(self, unit: str, engine: "UnitEngine | None" = None) -> "Quantity":
        """Convert to `unit` with `engine` (the default engine when omitted)."""
        return (engine or _default_engine()).convert(self, unit)

    def to_base(self, engine: "UnitEngine | None" = None) -> "Quantity":
        return (engine or _default_engine()).convert_to_base(self)

    # --- comparison ---------------------------------------------------------
    def compare(self, other: "Quantity", engine: "UnitEngine | None" = None) -> int:
        """Return -1, 0 or 1 after converting `other` into this quantity's unit."""
        if not isinstance(other, Quantity):
            raise TypeError(f"Cannot compare Quantity with type {type(other)}")
        mine = numbers.to_fraction(self.value)
        theirs = numbers.to_fraction(other.to(self.unit, engine).value)
        return (mine > theirs) - (mine < theirs)

    def __lt__(self, other: "Quantity") -> bool:
        return self.compare(other) < 0

    def __le__(self, other: "Quantity") -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: "Quantity") -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: "Quantity") -> bool:
        return self.compare(other) >= 0

    # --- arithmetic ---------------------------------------------------------
    def __add__(self, other: "Quantity") -> "Quantity":
        if not isinstance(other, Quantity):
            return NotImplemented
        # return in left operand's unit
        return Quantity(numbers.add(self.value, other.to(self.unit).value), self.unit)

    def __sub__(self, other: "Quantity") -> "Quantity":
        if not isinstance(other, Quantity):
            return NotImplemented
        return Quantity(numbers.sub(self.value, other.to(self.unit).value), self.unit)

    def __neg__(self) -> "Quantity":
        return Quantity(-self.value, self.unit)

    def __abs__(self) -> "Quantity":
        return Quantity(abs(self.value), self.unit)

    def __mul__(self, other: Any) -> "Quantity":
        # quantity × scalar
        if numbers.is_number(other):
            return Quantity(numbers.mult(self.value, other), self.unit)
        if not isinstance(other, Quantity):
            return NotImplemented
        # quantity × quantity
        engine = _default_engine()
        unit = engine.canonicalize(self.unit) * engine.canonicalize(other.unit)
        return Quantity(numbers.mult(self.value, other.value), unit.name)

    def __rmul__(self, other: Any) -> "Quantity":
        # allows 3 * Quantity(2, "meter")
        if numbers.is_number(other):
            return self.__mul__(other)
        return NotImplemented

    def __truediv__(self, other: Any) -> "Quantity":
        # quantity / scalar
        if numbers.is_number(other):
            return Quantity(numbers.div(self.value, other), self.unit)
        if not isinstance(other, Quantity):
            return NotImplemented
        # quantity / quantity
        engine = _default_engine()
        unit = engine.canonicalize(self.unit) / engine.canonicalize(other.unit)
        return Quantity(numbers.div(self.value, other.value), unit.name)

    def __rtruediv__(self, other: Any) -> "Quantity":
        # scalar / quantity -> reciprocal unit
        if not numbers.is_number(other):
            return NotImplemented
        unit = _default_engine().canonicalize(self.unit) ** -1
        return Quantity(numbers.div(other, self.value), unit.name)

    def __pow__(self, n: int) -> "Quantity":
        unit = _default_engine().canonicalize(self.unit) ** n
        return Quantity(numbers.power(self.value, n), unit.name)

    # --- rounding -----------------------------------------------------------
    def round(self, places: int = 0, mode: str = "half_even") -> "Quantity":
        """
        Round the value to `places` decimal places.

        Parameters
        ----------
        places : int, optional
            Number of decimal places, by default 0. Negative values round to
            tens, hundreds, ...
        mode : str, optional
            One of ``half_up``, ``half_even`` (default), ``half_down``,
            ``up``, ``down``, ``ceiling`` or ``floor``.

        Returns
        -------
        Quantity
            The rounded quantity, in the same numeric kind as the value.
        """
        try:
            rounding = ROUNDING_MODES[mode]
        except KeyError:
            raise ValueError(
                f"Unknown rounding mode {mode!r}; expected one of {sorted(ROUNDING_MODES)}"
            ) from None

        exact = numbers.to_fraction(self.value)
        with localcontext() as ctx:
            ctx.prec = max(50, len(str(abs(exact.numerator))) + places + 10)
            as_decimal = Decimal(exact.numerator) / Decimal(exact.denominator)
            rounded = as_decimal.quantize(Decimal(1).scaleb(-places), rounding=rounding)

        if isinstance(self.value, Decimal):
            return Quantity(rounded, self.unit)
        return Quantity(numbers.restore_kind(Fraction(rounded), self.value), self.unit)

    # --- rendering ----------------------------------------------------------
    def to_float(self) -> float:
        return float(self.value)

    def __str__(self) -> str:
        value = self.value
        if isinstance(value, Fraction):
            value = float(value)
        return f"{value} {self.unit}" if self.unit else f"{value}"


__all__ = ["Quantity", "ROUNDING_MODES"]
