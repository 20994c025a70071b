"""
unitalgebra.conversion.factors
==============================

Conversion factors and the base conversion table.

A conversion factor maps a value in some unit to its base unit. Two kinds
exist:

- `LinearFactor` for affine conversions, ``base = value * factor + offset``,
  with `factor` and `offset` held as exact `Fraction` values.
- `FunctionFactor` for scales that are described by a pair of functions
  rather than a factor (celsius and fahrenheit are defined this way).

Both kinds expose ``to_base`` / ``from_base`` over exact fractions, so the
converter can chain any two factors without caring which kind it holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Callable, ClassVar, Dict, Mapping, Tuple, Union

from unitalgebra.core.numbers import to_fraction

Transform = Callable[[Fraction], Fraction]


@dataclass(frozen=True, slots=True)
class LinearFactor:
    base_unit: str
    factor: Fraction = Fraction(1)
    offset: Fraction = Fraction(0)

    is_linear: ClassVar[bool] = True

    def __post_init__(self) -> None:
        if self.factor == 0:
            raise ValueError(f"Conversion factor to {self.base_unit!r} must be non-zero")

    @property
    def is_scalar(self) -> bool:
        """True when the conversion is a pure multiplication (no offset)."""
        return self.offset == 0

    def to_base(self, value: Fraction) -> Fraction:
        return value * self.factor + self.offset

    def from_base(self, value: Fraction) -> Fraction:
        return (value - self.offset) / self.factor

    def then(self, other: "LinearFactor") -> "LinearFactor":
        """Compose with `other`, which converts this factor's base unit onward."""
        return LinearFactor(
            other.base_unit,
            self.factor * other.factor,
            self.offset * other.factor + other.offset,
        )


@dataclass(frozen=True, slots=True)
class FunctionFactor:
    base_unit: str
    name: str
    to_base_fn: Transform = field(compare=False, repr=False)
    from_base_fn: Transform = field(compare=False, repr=False)

    is_linear: ClassVar[bool] = False
    is_scalar: ClassVar[bool] = False

    def to_base(self, value: Fraction) -> Fraction:
        return self.to_base_fn(value)

    def from_base(self, value: Fraction) -> Fraction:
        return self.from_base_fn(value)


ConversionFactor = Union[LinearFactor, FunctionFactor]


# ---------------------------------------------------------------------------
# Function conversions
# ---------------------------------------------------------------------------
_KELVIN_AT_ZERO_CELSIUS = Fraction(27315, 100)
_FAHRENHEIT_AT_ZERO_CELSIUS = Fraction(32)
_FAHRENHEIT_PER_CELSIUS = Fraction(9, 5)


def _celsius_to_kelvin(value: Fraction) -> Fraction:
    return value + _KELVIN_AT_ZERO_CELSIUS


def _kelvin_to_celsius(value: Fraction) -> Fraction:
    return value - _KELVIN_AT_ZERO_CELSIUS


def _fahrenheit_to_kelvin(value: Fraction) -> Fraction:
    return (value - _FAHRENHEIT_AT_ZERO_CELSIUS) / _FAHRENHEIT_PER_CELSIUS + _KELVIN_AT_ZERO_CELSIUS


def _kelvin_to_fahrenheit(value: Fraction) -> Fraction:
    return (value - _KELVIN_AT_ZERO_CELSIUS) * _FAHRENHEIT_PER_CELSIUS + _FAHRENHEIT_AT_ZERO_CELSIUS


FUNCTIONS: Mapping[str, Tuple[Transform, Transform]] = {
    "celsius": (_celsius_to_kelvin, _kelvin_to_celsius),
    "fahrenheit": (_fahrenheit_to_kelvin, _kelvin_to_fahrenheit),
}


# ---------------------------------------------------------------------------
# Base table
# ---------------------------------------------------------------------------

def factor_from_config(name: str, entry: Mapping[str, Any]) -> ConversionFactor:
    """Build a conversion factor from one ``conversions.yaml`` entry.

    An entry names its ``base_unit`` and either a ``function`` (a key of
    `FUNCTIONS`) or a ``factor`` and optional ``offset``. Factors may be
    integers, decimal strings or ``"n/d"`` ratios.
    """
    try:
        base_unit = entry["base_unit"]
    except (KeyError, TypeError):
        raise ValueError(f"Conversion for {name!r} must declare a base_unit") from None

    function = entry.get("function")
    if function is not None:
        if "factor" in entry or "offset" in entry:
            raise ValueError(f"Conversion for {name!r} cannot have both a function and a factor")
        try:
            to_base, from_base = FUNCTIONS[function]
        except KeyError:
            raise ValueError(f"Unknown conversion function {function!r} for {name!r}") from None
        return FunctionFactor(base_unit, function, to_base, from_base)

    return LinearFactor(
        base_unit,
        to_fraction(entry.get("factor", 1)),
        to_fraction(entry.get("offset", 0)),
    )


def base_table_from_config(conversions: Mapping[str, Mapping[str, Any]]) -> Dict[str, ConversionFactor]:
    """Build the base conversion table from the ``conversions`` mapping."""
    return {name: factor_from_config(name, entry) for name, entry in conversions.items()}


def with_identity_entries(table: Mapping[str, ConversionFactor]) -> Dict[str, ConversionFactor]:
    """Return a copy of `table` in which every base unit converts to itself."""
    completed = dict(table)
    for factor in table.values():
        completed.setdefault(factor.base_unit, LinearFactor(factor.base_unit))
    return completed


__all__ = [
    "LinearFactor",
    "FunctionFactor",
    "ConversionFactor",
    "FUNCTIONS",
    "factor_from_config",
    "base_table_from_config",
    "with_identity_entries",
]
