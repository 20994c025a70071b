"""
unitalgebra.conversion.converter
================================

Converts quantities between units.

For each side of a conversion the converter finds a conversion factor (from
the derived table, or composed on the fly from the unit's canonical parts)
and the unit's *base unit*: the canonical product of the parts' base units
with common factors cancelled. The two base units then decide how the value
is converted:

- equal base units: ``(value * f1 + o1 - o2) / f2`` (or the function pair);
- reciprocal base units (``mile_per_gallon`` vs ``liter_per_100_kilometer``):
  the value is converted to its base, inverted, then scaled into the target.
  Both units must share a category, or sit in a pair of categories declared
  as inverses in the units table (``meter`` never becomes ``per_meter``);
- otherwise, if both units are in the same category, each factor is followed
  through the table to the category's base unit and the comparison is
  retried (``quarter`` defined in years vs ``month`` defined in seconds).

All arithmetic is on exact fractions; the result is returned in the numeric
kind of the input value.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import TYPE_CHECKING, Optional, Tuple, Union

from unitalgebra.conversion.derived import ConversionTable
from unitalgebra.conversion.factors import ConversionFactor, LinearFactor
from unitalgebra.core.compound import CURRENCY, NUMBER, CompoundUnit, UnitPart
from unitalgebra.core.exceptions import (
    IncompatibleUnitsError,
    UnitError,
    UnitNotConvertibleError,
    UnknownCategoryError,
)
from unitalgebra.core.numbers import restore_kind, to_fraction
from unitalgebra.core.quantity import Quantity
from unitalgebra.units.prefixes import prefix_factor

if TYPE_CHECKING:
    from unitalgebra.units.registry import UnitsRegistry

logger = logging.getLogger(__name__)

UnitLike = Union[str, CompoundUnit]

_MAX_REBASE_STEPS = 16


class Converter:
    """Conversion over a registry and a derived `ConversionTable`."""

    def __init__(self, registry: "UnitsRegistry", table: ConversionTable) -> None:
        self._registry = registry
        self._table = table

    # ------------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------------
    def canonicalize(self, unit: UnitLike) -> CompoundUnit:
        if isinstance(unit, CompoundUnit):
            return unit
        return self._registry.canonicalize(unit)

    def _is_base(self, name: str) -> bool:
        return self._registry.is_base_unit(name)

    def _entry(self, unit: UnitLike, compound: CompoundUnit) -> Optional[ConversionFactor]:
        if isinstance(unit, str):
            factor = self._table.get(self._registry.resolve_alias(self._registry.normalize(unit)))
            if factor is not None:
                return factor
        return self._table.get(compound.name)

    def _part_base(self, part: UnitPart) -> CompoundUnit:
        if part.kind == NUMBER:
            return CompoundUnit()
        if part.kind == CURRENCY:
            return CompoundUnit((part,))
        factor = self._table.get(part.atom)
        if factor is None:
            raise UnitNotConvertibleError(f"Unit {part.atom!r} has no known conversion")
        return self.canonicalize(factor.base_unit) ** part.power

    def _compose_base(self, compound: CompoundUnit) -> CompoundUnit:
        numerator = CompoundUnit()
        denominator = CompoundUnit()
        for part, sign in compound.parts():
            base = self._part_base(part)
            if sign > 0:
                numerator = numerator.merge(base)
            else:
                denominator = denominator.merge(base)
        return numerator.per(denominator).reduce(self._is_base)

    def _part_factor(self, part: UnitPart) -> Fraction:
        if part.kind == NUMBER:
            return Fraction(int(part.atom)) ** part.power
        if part.kind == CURRENCY:
            return Fraction(1)
        factor = self._table.get(part.atom)
        if factor is None:
            raise UnitNotConvertibleError(f"Unit {part.atom!r} has no known conversion")
        if not factor.is_scalar:
            raise UnitNotConvertibleError(
                f"Unit {part.atom!r} has a non-multiplicative conversion and cannot be "
                "combined with prefixes, powers or other units"
            )
        return (factor.factor * prefix_factor(part.prefix)) ** part.power

    def _resolve(self, unit: UnitLike) -> Tuple[ConversionFactor, str]:
        """Return the conversion factor and reduced base unit name for `unit`."""
        compound = self.canonicalize(unit)
        entry = self._entry(unit, compound)
        if entry is not None:
            base = self.canonicalize(entry.base_unit).reduce(self._is_base)
            return entry, base.name

        base = self._compose_base(compound)
        factor = Fraction(1)
        for part, sign in compound.parts():
            part_factor = self._part_factor(part)
            factor = factor * part_factor if sign > 0 else factor / part_factor
        return LinearFactor(base.name, factor), base.name

    # ------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------
    def conversion_for(self, unit: UnitLike) -> ConversionFactor:
        """Conversion factor from `unit` to its base unit."""
        return self._resolve(unit)[0]

    def base_unit(self, unit: UnitLike) -> str:
        """Canonical base unit name of `unit` (e.g. ``"meter_per_second"``)."""
        return self._resolve(unit)[1]

    def is_convertible(self, unit: UnitLike) -> bool:
        try:
            self._resolve(unit)
        except UnitError:
            return False
        return True

    def category_of(self, unit: UnitLike) -> str:
        """
        Category of `unit`.

        Declared categories (from the units table) take precedence; otherwise
        the category is found from the unit's base unit.

        Raises
        ------
        UnknownUnitError
            If the name cannot be parsed.
        UnknownCategoryError
            If the unit's base unit belongs to no category.
        """
        compound = self.canonicalize(unit)
        if isinstance(unit, str):
            declared = self._registry.declared_category(
                self._registry.resolve_alias(self._registry.normalize(unit))
            )
            if declared is not None:
                return declared
        declared = self._registry.declared_category(compound.name)
        if declared is not None:
            return declared

        if compound.is_atomic:
            part = compound.numerator[0]
            if part.kind == CURRENCY:
                return "currency"
            if part.kind != NUMBER:
                return self._registry.get(part.atom).category

        try:
            base = self.base_unit(compound)
        except UnitNotConvertibleError:
            base = None
        category = None if base is None else self._registry.category_for_base(base)
        if category is None:
            raise UnknownCategoryError(f"The unit {compound.name!r} is not in any known category")
        return category

    def _category_or_none(self, unit: UnitLike) -> Optional[str]:
        try:
            return self.category_of(unit)
        except UnitError:
            return None

    # ------------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------------
    def _rebase(self, factor: ConversionFactor) -> ConversionFactor:
        """Follow `factor`'s base unit through the table until it is a fixed point."""
        seen = set()
        while isinstance(factor, LinearFactor) and len(seen) < _MAX_REBASE_STEPS:
            seen.add(factor.base_unit)
            try:
                onward, onward_base = self._resolve(factor.base_unit)
            except UnitError:
                return factor
            if not isinstance(onward, LinearFactor) or onward_base in seen:
                return factor
            if onward.base_unit == factor.base_unit and onward.factor == 1 and onward.offset == 0:
                return factor
            factor = factor.then(LinearFactor(onward_base, onward.factor, onward.offset))
        return factor

    def _reduced(self, name: str) -> str:
        return self.canonicalize(name).reduce(self._is_base).name

    def _reciprocal(self, name: str) -> str:
        return self.canonicalize(name).reciprocal().name

    def _reciprocal_categories(self, source: UnitLike, target: UnitLike) -> bool:
        """Both categories are known and equal, or declared inverses of each other."""
        source_category = self._category_or_none(source)
        target_category = self._category_or_none(target)
        if source_category is None or target_category is None:
            return False
        return source_category == target_category or self._registry.are_inverse_categories(
            source_category, target_category
        )

    @staticmethod
    def _direct(value: Fraction, source: ConversionFactor, target: ConversionFactor) -> Fraction:
        if isinstance(source, LinearFactor) and isinstance(target, LinearFactor):
            return (value * source.factor + source.offset - target.offset) / target.factor
        return target.from_base(source.to_base(value))

    @staticmethod
    def _inverse(
        value: Fraction,
        source: ConversionFactor,
        target: ConversionFactor,
        from_unit: str,
        to_unit: str,
    ) -> Fraction:
        if not (source.is_scalar and target.is_scalar):
            raise IncompatibleUnitsError(from_unit, to_unit)
        base_value = value * source.factor
        if base_value == 0:
            raise ZeroDivisionError(f"Cannot convert zero {from_unit!r} to the reciprocal unit {to_unit!r}")
        return 1 / base_value / target.factor

    def convert(self, quantity: Quantity, to: UnitLike) -> Quantity:
        """
        Convert `quantity` to the unit `to`.

        Parameters
        ----------
        quantity : Quantity
            Source value and unit.
        to : str | CompoundUnit
            Target unit name.

        Returns
        -------
        Quantity
            A new quantity in the canonical name of `to`. The value keeps the
            numeric kind of ``quantity.value`` (``int`` results are promoted
            to ``Fraction`` only when they are not integral).

        Raises
        ------
        UnknownUnitError
            If either unit cannot be parsed.
        UnitNotConvertibleError
            If either unit has no conversion factor.
        IncompatibleUnitsError
            If the units do not share a base unit or category.
        """
        source_unit = self.canonicalize(quantity.unit)
        target_unit = self.canonicalize(to)
        source, source_base = self._resolve(quantity.unit)
        target, target_base = self._resolve(to)
        if source_unit == target_unit:
            return Quantity(quantity.value, target_unit.name)

        value = to_fraction(quantity.value)

        if source_base == target_base:
            result = self._direct(value, source, target)
        elif source_base == self._reciprocal(target_base):
            if not self._reciprocal_categories(quantity.unit, to):
                raise IncompatibleUnitsError(source_unit.name, target_unit.name)
            result = self._inverse(value, source, target, source_unit.name, target_unit.name)
        else:
            source_category = self._category_or_none(quantity.unit)
            target_category = self._category_or_none(to)
            if source_category is None or source_category != target_category:
                raise IncompatibleUnitsError(source_unit.name, target_unit.name)
            source = self._rebase(source)
            target = self._rebase(target)
            if self._reduced(source.base_unit) != self._reduced(target.base_unit):
                raise IncompatibleUnitsError(source_unit.name, target_unit.name)
            logger.debug(
                "Converted %s to %s through the %s category base %s",
                source_unit.name, target_unit.name, source_category, source.base_unit,
            )
            result = self._direct(value, source, target)

        return Quantity(restore_kind(result, quantity.value), target_unit.name)

    def convert_to_base(self, quantity: Quantity) -> Quantity:
        """Convert `quantity` to its base unit."""
        return self.convert(quantity, self.base_unit(quantity.unit))


__all__ = ["Converter"]
