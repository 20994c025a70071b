"""
unitalgebra.units.prefixes
==========================

SI, binary and power prefixes used in unit names.

SI and binary prefixes are written directly in front of a unit
(``kilometer``, ``kibibyte``); power prefixes are separate words
(``square_meter``, ``cubic_foot``).
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Mapping, Tuple


@dataclass(frozen=True, slots=True)
class Prefix:
    name: str
    factor: Fraction


SI_PREFIXES: Tuple[Prefix, ...] = (
    Prefix("quetta", Fraction(10) ** 30),
    Prefix("ronna", Fraction(10) ** 27),
    Prefix("yotta", Fraction(10) ** 24),
    Prefix("zetta", Fraction(10) ** 21),
    Prefix("exa", Fraction(10) ** 18),
    Prefix("peta", Fraction(10) ** 15),
    Prefix("tera", Fraction(10) ** 12),
    Prefix("giga", Fraction(10) ** 9),
    Prefix("mega", Fraction(10) ** 6),
    Prefix("kilo", Fraction(10) ** 3),
    Prefix("hecto", Fraction(10) ** 2),
    Prefix("deka", Fraction(10)),
    Prefix("deci", Fraction(10) ** -1),
    Prefix("centi", Fraction(10) ** -2),
    Prefix("milli", Fraction(10) ** -3),
    Prefix("micro", Fraction(10) ** -6),
    Prefix("nano", Fraction(10) ** -9),
    Prefix("pico", Fraction(10) ** -12),
    Prefix("femto", Fraction(10) ** -15),
    Prefix("atto", Fraction(10) ** -18),
    Prefix("zepto", Fraction(10) ** -21),
    Prefix("yocto", Fraction(10) ** -24),
    Prefix("ronto", Fraction(10) ** -27),
    Prefix("quecto", Fraction(10) ** -30),
)

BINARY_PREFIXES: Tuple[Prefix, ...] = (
    Prefix("kibi", Fraction(2) ** 10),
    Prefix("mebi", Fraction(2) ** 20),
    Prefix("gibi", Fraction(2) ** 30),
    Prefix("tebi", Fraction(2) ** 40),
    Prefix("pebi", Fraction(2) ** 50),
    Prefix("exbi", Fraction(2) ** 60),
    Prefix("zebi", Fraction(2) ** 70),
    Prefix("yobi", Fraction(2) ** 80),
)

PREFIXES: Tuple[Prefix, ...] = SI_PREFIXES + BINARY_PREFIXES

# Longest names first so that matching is greedy.
PREFIXES_BY_LENGTH: Tuple[Prefix, ...] = tuple(
    sorted(PREFIXES, key=lambda p: len(p.name), reverse=True)
)

PREFIX_FACTORS: Mapping[str, Fraction] = {p.name: p.factor for p in PREFIXES}

# Power words accepted by the parser. Only ``square`` and ``cubic`` take part
# in derivation; ``pow4``..``pow9`` exist so that products such as
# square_meter * square_meter have a canonical, re-parseable name.
POWER_PREFIXES: Dict[str, int] = {
    "square": 2,
    "cubic": 3,
    **{f"pow{n}": n for n in range(4, 10)},
}


def prefix_factor(name: str) -> Fraction:
    """Factor for prefix `name`; the empty prefix has factor 1."""
    if not name:
        return Fraction(1)
    try:
        return PREFIX_FACTORS[name]
    except KeyError:
        raise ValueError(f"Unknown prefix {name!r}") from None

