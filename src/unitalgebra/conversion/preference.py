"""
unitalgebra.conversion.preference
=================================

Locale-aware unit preferences.

The preference table is keyed ``category -> usage -> [scope] -> [alt] ->
territory -> [unit names]``. A lookup walks a fixed chain from the most
specific key path to the least, first for the requested territory and then
for the world territory ``"001"``::

    [scope, alt, T] -> [scope, T] -> [alt, T] -> [T]      for T in (territory, "001")

A hit is either a plain unit list or a list of ``{units, geq}`` entries. For
the latter the quantity is converted to its base unit and the first entry
whose ``geq`` it reaches is taken (an entry without ``geq`` always matches),
so 0.05 mile on a US road is shown in feet and 5 mile in miles. The first
hit that yields units wins; if nothing matches, the quantity's own unit is
returned unchanged.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from unitalgebra.conversion.converter import Converter
from unitalgebra.core.exceptions import UnknownUnitPreferenceError, UnknownUsageError
from unitalgebra.core.numbers import split_integer, to_fraction
from unitalgebra.core.quantity import Quantity
from unitalgebra.units.locale import WORLD, Territories

logger = logging.getLogger(__name__)

SCOPES = ("small",)
ALTS = ("informal",)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


class PreferenceTable(Mapping[str, Any]):
    """Read-only nested preference mapping."""

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        self._data = _freeze(data or {})

    def __getitem__(self, category: str) -> Any:
        return self._data[category]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def usages(self, category: str) -> Tuple[str, ...]:
        return tuple(self._data.get(category, {}))

    def lookup(self, *path: str) -> Optional[Tuple[Any, ...]]:
        """Entry list at `path` (unit names or ``{units, geq}`` mappings), or None."""
        node: Any = self._data
        for key in path:
            if not isinstance(node, Mapping) or key not in node:
                return None
            node = node[key]
        if isinstance(node, tuple) and node:
            return node
        return None


def preference_chain(
    scope: Optional[str], alt: Optional[str], territory: str
) -> Iterator[Tuple[str, ...]]:
    """Key paths tried for one lookup, most specific first. Paths holding None are skipped."""
    for t in dict.fromkeys((territory, WORLD)):
        for path in ((scope, alt, t), (scope, t), (alt, t), (t,)):
            if None not in path:
                yield path


class PreferenceResolver:
    def __init__(self, table: PreferenceTable, converter: Converter, territories: Territories) -> None:
        self._table = table
        self._converter = converter
        self._territories = territories

    @property
    def table(self) -> PreferenceTable:
        return self._table

    def _territory(self, territory: Optional[str], locale: Optional[str]) -> str:
        if territory is not None:
            return self._territories.validate(territory)
        if locale is not None:
            return self._territories.from_locale(locale)
        return WORLD

    def _select(self, entries: Tuple[Any, ...], quantity: Quantity) -> Optional[Tuple[str, ...]]:
        """Units of the first entry the quantity qualifies for, or None."""
        if not isinstance(entries[0], Mapping):
            return entries
        base_value: Optional[Fraction] = None
        for entry in entries:
            geq = entry.get("geq")
            if geq is not None:
                if base_value is None:
                    base_value = to_fraction(self._converter.convert_to_base(quantity).value)
                if base_value < to_fraction(geq):
                    continue
            return tuple(entry["units"])
        return None

    def preferred_units(
        self,
        quantity: Quantity,
        usage: Optional[str],
        scope: Optional[str] = None,
        alt: Optional[str] = None,
        territory: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> List[str]:
        """
        Preferred units for presenting `quantity` in a territory.

        Parameters
        ----------
        quantity : Quantity
            The quantity whose category selects the preference data.
        usage : str
            Usage within the category, e.g. ``"person_height"`` or ``"road"``.
        scope : str, optional
            ``"small"`` for small magnitudes where the data distinguishes them.
        alt : str, optional
            ``"informal"`` for informal presentation.
        territory : str, optional
            Territory code. Takes precedence over `locale`.
        locale : str, optional
            Locale identifier used to find the territory when none is given.

        Returns
        -------
        list[str]
            Unit names, most significant first.

        Raises
        ------
        ValueError
            If `scope` or `alt` is not one of the supported values.
        UnknownUsageError
            If `usage` is None or not defined for the category.
        UnknownUnitPreferenceError
            If the category has no preference data at all.
        LocaleError, UnknownTerritoryError
            From territory resolution.
        """
        if scope is not None and scope not in SCOPES:
            raise ValueError(f"Unknown preference scope {scope!r}, expected one of {SCOPES!r}")
        if alt is not None and alt not in ALTS:
            raise ValueError(f"Unknown preference alt {alt!r}, expected one of {ALTS!r}")

        category = self._converter.category_of(quantity.unit)
        if category not in self._table:
            raise UnknownUnitPreferenceError(
                f"No known unit preferences for the category {category!r}"
            )
        usages = self._table[category]
        if usage is None or usage not in usages:
            raise UnknownUsageError(
                f"The usage {usage!r} is not known for the category {category!r}. "
                f"Known usages are {sorted(usages)!r}"
            )

        code = self._territory(territory, locale)
        for path in preference_chain(scope, alt, code):
            entries = self._table.lookup(category, usage, *path)
            units = None if entries is None else self._select(entries, quantity)
            if units is not None:
                logger.debug("Preference %s/%s%s -> %s", category, usage, list(path), units)
                return list(units)
        return [quantity.unit]

    def decompose(self, quantity: Quantity, units: Sequence[str]) -> List[Quantity]:
        """
        Split `quantity` across `units` (e.g. ``["foot", "inch"]``).

        Every unit but the last receives the integer part of the remaining
        amount; the last receives the exact remainder. Leading zero parts are
        omitted, so 0.5 foot decomposes to 6 inch.
        """
        if not units:
            raise ValueError("decompose requires at least one unit")
        parts: List[Quantity] = []
        remaining = quantity
        for unit in units[:-1]:
            converted = self._converter.convert(remaining, unit)
            whole, remainder = split_integer(converted.value)
            if whole != 0:
                parts.append(Quantity(whole, converted.unit))
            remaining = Quantity(remainder, converted.unit)
        last = self._converter.convert(remaining, units[-1])
        if to_fraction(last.value) != 0 or not parts:
            parts.append(last)
        return parts

    def localize(
        self,
        quantity: Quantity,
        usage: Optional[str],
        scope: Optional[str] = None,
        alt: Optional[str] = None,
        territory: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> List[Quantity]:
        """Convert `quantity` into the preferred units for the territory."""
        units = self.preferred_units(quantity, usage, scope=scope, alt=alt, territory=territory, locale=locale)
        return self.decompose(quantity, units)


__all__ = ["PreferenceTable", "PreferenceResolver", "preference_chain"]
