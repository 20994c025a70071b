"""
unitalgebra.conversion.derived
==============================

Derivation of the complete conversion table.

Starting from the authored base table, `derive` resolves every localizable
unit name by repeatedly applying four rules, in priority order:

1. SI prefix:   ``kilometer``        -> factor(meter) * 1000
2. Exponent:    ``square_foot``      -> factor(foot) ** 2
3. Per:         ``mile_per_gallon``  -> factor(mile) / factor(gallon)
4. Compound:    ``kilowatt_hour``    -> factor(kilowatt) * factor(hour)

Each pass reads the table as it stood when the pass began; the rules'
results are merged in the order above and never replace an existing entry.
Passes repeat until one resolves nothing. Names still unresolved are
recorded as unconvertible rather than raised.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional

from unitalgebra.conversion.factors import ConversionFactor, LinearFactor
from unitalgebra.core.compound import CompoundUnit
from unitalgebra.core.exceptions import UnitError
from unitalgebra.units.prefixes import PREFIXES_BY_LENGTH

logger = logging.getLogger(__name__)

Canonicalizer = Callable[[str], CompoundUnit]

_EXPONENT_PREFIXES = (("square_", 2), ("cubic_", 3))
_PER = "_per_"
_NUMERIC_OPERAND_RE = re.compile(r"^([0-9]+)_(.+)$")


class ConversionTable(Mapping[str, ConversionFactor]):
    """Read-only mapping of unit name to `ConversionFactor`.

    `unconvertible` lists the localizable names for which no factor could be
    derived.
    """

    __slots__ = ("_entries", "_unconvertible")

    def __init__(
        self,
        entries: Mapping[str, ConversionFactor],
        unconvertible: Iterable[str] = (),
    ) -> None:
        self._entries = MappingProxyType(dict(entries))
        self._unconvertible = frozenset(unconvertible)

    def __getitem__(self, name: str) -> ConversionFactor:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"ConversionTable({len(self._entries)} entries, "
            f"{len(self._unconvertible)} unconvertible)"
        )

    @property
    def unconvertible(self) -> FrozenSet[str]:
        return self._unconvertible


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------
class _Rules:
    """The four derivation rules bound to a canonicalizer."""

    def __init__(
        self,
        canonicalize: Canonicalizer,
        base_units: FrozenSet[str],
        non_prefixable: Callable[[str], bool],
    ) -> None:
        self._canonicalize = canonicalize
        self._base_units = base_units
        self._non_prefixable = non_prefixable

    def _target(self, compound: CompoundUnit) -> str:
        return compound.reduce(self._base_units.__contains__).name

    def _structure(self, name: str) -> Optional[CompoundUnit]:
        try:
            return self._canonicalize(name)
        except UnitError:
            return None

    @staticmethod
    def _scalar(factor: Optional[ConversionFactor]) -> Optional[LinearFactor]:
        if isinstance(factor, LinearFactor) and factor.is_scalar:
            return factor
        return None

    def _operand(self, name: str, table: Mapping[str, ConversionFactor]) -> Optional[LinearFactor]:
        factor = self._scalar(table.get(name))
        if factor is not None:
            return factor
        m = _NUMERIC_OPERAND_RE.match(name)
        if m is None:
            return None
        rest = self._scalar(table.get(m.group(2)))
        if rest is None:
            return None
        return LinearFactor(rest.base_unit, rest.factor * int(m.group(1)))

    def si_prefix(self, unit: str, table: Mapping[str, ConversionFactor]) -> Optional[ConversionFactor]:
        for prefix in PREFIXES_BY_LENGTH:
            if not unit.startswith(prefix.name):
                continue
            if self._non_prefixable(unit[len(prefix.name):]):
                continue
            base = table.get(unit[len(prefix.name):])
            if isinstance(base, LinearFactor):
                return LinearFactor(base.base_unit, base.factor * prefix.factor, base.offset)
        return None

    def exponent(self, unit: str, table: Mapping[str, ConversionFactor]) -> Optional[ConversionFactor]:
        for word, power in _EXPONENT_PREFIXES:
            if not unit.startswith(word):
                continue
            base = self._scalar(table.get(unit[len(word):]))
            if base is None:
                continue
            target = self._structure(base.base_unit)
            if target is None:
                continue
            return LinearFactor(self._target(target ** power), base.factor ** power)
        return None

    def per(self, unit: str, table: Mapping[str, ConversionFactor]) -> Optional[ConversionFactor]:
        if unit.count(_PER) != 1:
            return None
        num_name, den_name = unit.split(_PER)
        numerator = self._operand(num_name, table)
        denominator = self._operand(den_name, table)
        if numerator is None or denominator is None:
            return None
        num_target = self._structure(numerator.base_unit)
        den_target = self._structure(denominator.base_unit)
        if num_target is None or den_target is None:
            return None
        return LinearFactor(
            self._target(num_target.per(den_target)),
            numerator.factor / denominator.factor,
        )

    def compound(self, unit: str, table: Mapping[str, ConversionFactor]) -> Optional[ConversionFactor]:
        words = unit.split("_")
        for i in range(1, len(words)):
            first = self._operand("_".join(words[:i]), table)
            second = self._operand("_".join(words[i:]), table)
            if first is None or second is None:
                continue
            first_target = self._structure(first.base_unit)
            second_target = self._structure(second.base_unit)
            if first_target is None or second_target is None:
                continue
            return LinearFactor(
                self._target(first_target.merge(second_target)),
                first.factor * second.factor,
            )
        return None


def derive(
    base_table: Mapping[str, ConversionFactor],
    units: Iterable[str],
    canonicalize: Canonicalizer,
    base_units: Iterable[str] = (),
    non_prefixable: Callable[[str], bool] = lambda name: False,
) -> ConversionTable:
    """
    Compute the closure of derivable conversions.

    Parameters
    ----------
    base_table : Mapping[str, ConversionFactor]
        Authored conversions, including identity entries for base units.
    units : Iterable[str]
        The universe of localizable unit names to resolve.
    canonicalize : Callable[[str], CompoundUnit]
        Parser used to combine base-unit targets.
    base_units : Iterable[str]
        Category base-unit names; a numerator or denominator equal to one of
        these is never cancelled against the other side.
    non_prefixable : Callable[[str], bool]
        Names that never take an SI prefix (``hour``, ``kilogram``); a
        prefixed form of one of these is left unconvertible.

    Returns
    -------
    ConversionTable
        Base entries plus every derived entry. Names that no rule resolves
        are listed in ``ConversionTable.unconvertible``.

    Notes
    -----
    The result depends only on the inputs and the order of `units`, so
    deriving twice from the same inputs yields equal tables.
    """
    rules = _Rules(canonicalize, frozenset(base_units), non_prefixable)
    ordered_rules = (rules.si_prefix, rules.exponent, rules.per, rules.compound)

    table: Dict[str, ConversionFactor] = dict(base_table)
    pending = [u for u in dict.fromkeys(units) if u not in table]
    passes = 0

    while pending:
        passes += 1
        found: Dict[str, ConversionFactor] = {}
        for rule in ordered_rules:
            for unit in pending:
                if unit in found:
                    continue
                factor = rule(unit, table)
                if factor is not None:
                    found[unit] = factor

        logger.debug(
            "Derivation pass %d resolved %d of %d pending units",
            passes, len(found), len(pending),
        )
        if not found:
            break
        table.update(found)
        pending = [u for u in pending if u not in found]

    logger.debug(
        "Derived %d conversions from %d base entries in %d passes; %d unconvertible: %s",
        len(table) - len(base_table), len(base_table), passes, len(pending), pending,
    )
    return ConversionTable(table, pending)


__all__ = ["ConversionTable", "derive"]
