"""
unitalgebra.units.parser
========================

Turns unit names such as ``"kilogram-meter-per-square-second"`` or
``"liter_per_100_kilometer"`` into a canonical `CompoundUnit`.

Grammar (after normalization to lower case with ``_`` separators):

  name    := stream ['_per_' stream] | 'per_' stream
  stream  := term ('_' term)*
  term    := [power '_'] atom
  power   := 'square' | 'cubic' | 'pow4' .. 'pow9'
  atom    := 'curr_' CODE | DIGITS | UNIT | PREFIX UNIT

UNIT is any atomic unit known to the registry (longest match wins, and a
match must end on a ``_`` boundary). PREFIX is an SI or binary prefix written
directly in front of a prefixable UNIT.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, List

from unitalgebra.core.compound import CompoundUnit, UnitPart
from unitalgebra.core.exceptions import UnknownUnitError
from unitalgebra.units.prefixes import POWER_PREFIXES, PREFIXES_BY_LENGTH

if TYPE_CHECKING:
    from unitalgebra.units.registry import UnitsRegistry

_PER = "_per_"
_POWER_RE = re.compile(r"(square|cubic|pow[4-9])_")
_NUMBER_RE = re.compile(r"[0-9]+(?=_|$)")
_CURRENCY_RE = re.compile(r"curr_([a-z]{3})(?=_|$)")
_POW_N_RE = re.compile(r"pow[0-9]+_")


class _UnitNameTokenizer:
    """Tokenizes one ``per`` stream into `UnitPart` entries."""

    def __init__(self, text: str, reg: "UnitsRegistry", source: str):
        self.s = text
        self.n = len(text)
        self.i = 0
        self.reg = reg
        self.source = source

    def parse(self) -> List[UnitPart]:
        parts = [self._parse_term()]
        while self.i < self.n:
            self._eat("_")
            parts.append(self._parse_term())
        return parts

    # term := [power '_'] atom
    def _parse_term(self) -> UnitPart:
        power = self._parse_power()
        part = self._parse_atom()
        return part.with_power(part.power * power)

    def _parse_power(self) -> int:
        m = _POWER_RE.match(self.s, self.i)
        if m is None:
            if _POW_N_RE.match(self.s, self.i):
                raise UnknownUnitError(
                    f"Unsupported power prefix at {self.s[self.i:]!r} in {self.source!r}; "
                    "only square, cubic and pow4..pow9 are recognized"
                )
            return 1
        if m.end() >= self.n:
            raise UnknownUnitError(f"Power prefix without a unit in {self.source!r}")
        self.i = m.end()
        return POWER_PREFIXES[m.group(1)]

    def _parse_atom(self) -> UnitPart:
        self._expand_alias()

        m = _CURRENCY_RE.match(self.s, self.i)
        if m is not None:
            code = m.group(1)
            if code not in self.reg.currencies:
                raise UnknownUnitError(f"Unknown currency code {code.upper()!r} in {self.source!r}")
            self.i = m.end()
            return self.reg.currency_part(code)

        m = _NUMBER_RE.match(self.s, self.i)
        if m is not None:
            self.i = m.end()
            return self.reg.number_part(m.group(0))

        name = self.reg.match_unit(self.s, self.i)
        if name is not None:
            self.i += len(name)
            return self.reg.unit_part(name)

        for prefix in PREFIXES_BY_LENGTH:
            if not self.s.startswith(prefix.name, self.i):
                continue
            start = self.i + len(prefix.name)
            name = self.reg.match_unit(self.s, start)
            if name is not None and not self.reg.is_non_prefixable(name):
                self.i = start + len(name)
                return self.reg.unit_part(name, prefix.name)

        raise UnknownUnitError(
            f"Unknown unit was detected at {self.s[self.i:]!r} in {self.source!r}"
        )

    # ---- token helpers ----
    def _expand_alias(self) -> None:
        match = self.reg.match_alias(self.s, self.i)
        if match is not None:
            alias, canonical = match
            self.s = self.s[:self.i] + canonical + self.s[self.i + len(alias):]
            self.n = len(self.s)

    def _eat(self, tok: str) -> None:
        if not self.s.startswith(tok, self.i):
            got = self.s[self.i:self.i + len(tok)]
            raise UnknownUnitError(f"Expected {tok!r} at {self.i} in {self.source!r}, got {got!r}")
        self.i += len(tok)


def _split_per(text: str, source: str) -> tuple[str, str]:
    if text.startswith("per_"):
        numerator, denominator = "", text[len("per_"):]
        if _PER in f"_{denominator}":
            raise UnknownUnitError(f"Unit {source!r} has more than one 'per' boundary")
        return numerator, denominator

    pieces = text.split(_PER)
    if len(pieces) > 2:
        raise UnknownUnitError(f"Unit {source!r} has more than one 'per' boundary")
    if len(pieces) == 2:
        return pieces[0], pieces[1]
    return text, ""


def parse_unit_name(name: str, reg: "UnitsRegistry") -> CompoundUnit:
    """
    Parse a unit name into its canonical `CompoundUnit`.

    Parameters
    ----------
    name : str
        Raw unit name. Hyphens, underscores and spaces are interchangeable
        and case is ignored.
    reg : UnitsRegistry
        Registry providing atomic units, aliases and ordering.

    Returns
    -------
    CompoundUnit
        Numerator and denominator groups, each collapsed and sorted.
        The empty string yields the dimensionless unit.

    Raises
    ------
    UnknownUnitError
        If any token cannot be resolved, or if the name contains more than
        one ``per`` boundary.

    Examples
    --------
    >>> parse_unit_name("meter-meter", reg).name
    'square_meter'
    >>> parse_unit_name("meter_kilometer", reg).name
    'kilometer_meter'
    """
    text = reg.resolve_alias(reg.normalize(name))
    if not text:
        return CompoundUnit()

    num_text, den_text = _split_per(text, name)
    numerator = _UnitNameTokenizer(num_text, reg, name).parse() if num_text else []
    denominator = _UnitNameTokenizer(den_text, reg, name).parse() if den_text else []
    return CompoundUnit.from_groups(numerator, denominator)
