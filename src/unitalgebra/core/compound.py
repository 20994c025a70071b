"""
unitalgebra.core.compound
=========================

The canonical structure produced by the unit name parser.

A `CompoundUnit` is a numerator group and a denominator group of
`UnitPart` entries. Each part is an atomic unit (optionally carrying an SI or
binary prefix), a numeric literal such as the ``100`` in
``liter_per_100_kilometer``, or a currency such as ``curr_usd``, raised to a
positive integer power.

Within a group, identical parts are collapsed into one entry whose power is
the sum of the originals, and entries are sorted by the ordering key the
parser attached to each part. The key is not part of equality, so two
structurally equal units compare equal regardless of who built them.

Two kinds of algebra are offered:

- `merge` / `per` concatenate groups *without* cancelling common parts.
  This is how base units are combined (``cubic_meter_per_meter`` must stay
  distinct from ``square_meter``).
- ``*``, ``/`` and ``**`` perform full algebraic cancellation, which is what
  arithmetic on quantities needs (``meter * meter == square_meter``,
  ``meter / meter`` is dimensionless).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from fractions import Fraction
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

# (kind rank, base index, negated prefix factor)
OrderKey = Tuple[int, int, Fraction]

UNIT = "unit"
NUMBER = "number"
CURRENCY = "currency"

_POWER_NAMES = {2: "square", 3: "cubic"}
MAX_POWER = 9

_UNORDERED: OrderKey = (3, 0, Fraction(0))


def power_prefix(power: int) -> str:
    """Return the name prefix for `power` (``""``, ``"square_"``, ``"pow4_"``...)."""
    if power < 1:
        raise ValueError(f"power must be a positive integer, got {power}")
    if power == 1:
        return ""
    if power > MAX_POWER:
        raise ValueError(f"powers above {MAX_POWER} cannot be named (got {power})")
    return f"{_POWER_NAMES.get(power, f'pow{power}')}_"


@dataclass(frozen=True, slots=True)
class UnitPart:
    """One factor of a compound unit."""

    atom: str
    prefix: str = ""
    power: int = 1
    kind: str = UNIT
    order: OrderKey = field(default=_UNORDERED, compare=False, hash=False, repr=False)

    def __post_init__(self) -> None:
        if self.power < 1:
            raise ValueError(f"UnitPart power must be a positive integer, got {self.power}")

    @property
    def key(self) -> Tuple[str, str, str]:
        """Identity of the part, ignoring its power."""
        return (self.kind, self.prefix, self.atom)

    @property
    def base_name(self) -> str:
        """The part's name without a power prefix (``"kilometer"``)."""
        return f"{self.prefix}{self.atom}"

    @property
    def name(self) -> str:
        return f"{power_prefix(self.power)}{self.base_name}"

    @property
    def sort_key(self) -> tuple:
        return (*self.order, self.atom)

    def with_power(self, power: int) -> "UnitPart":
        return replace(self, power=power)


def collapse(parts: Iterable[UnitPart]) -> Tuple[UnitPart, ...]:
    """Combine identical parts by summing powers, then sort canonically."""
    combined: Dict[Tuple[str, str, str], UnitPart] = {}
    for part in parts:
        existing = combined.get(part.key)
        if existing is None:
            combined[part.key] = part
        else:
            combined[part.key] = existing.with_power(existing.power + part.power)
    return tuple(sorted(combined.values(), key=lambda p: p.sort_key))


@dataclass(frozen=True, slots=True)
class CompoundUnit:
    numerator: Tuple[UnitPart, ...] = ()
    denominator: Tuple[UnitPart, ...] = ()

    @classmethod
    def from_groups(
        cls,
        numerator: Iterable[UnitPart],
        denominator: Iterable[UnitPart] = (),
    ) -> "CompoundUnit":
        return cls(collapse(numerator), collapse(denominator))

    # --- rendering -----------------------------------------------------------
    @property
    def name(self) -> str:
        """Canonical unit name, e.g. ``"kilogram_meter_per_square_second"``."""
        num = "_".join(p.name for p in self.numerator)
        den = "_".join(p.name for p in self.denominator)
        if not den:
            return num
        if not num:
            return f"per_{den}"
        return f"{num}_per_{den}"

    @property
    def numerator_name(self) -> str:
        return "_".join(p.name for p in self.numerator)

    @property
    def denominator_name(self) -> str:
        return "_".join(p.name for p in self.denominator)

    def __str__(self) -> str:
        return self.name

    # --- queries --------------------------------------------------------------
    @property
    def is_dimensionless(self) -> bool:
        return not self.numerator and not self.denominator

    @property
    def is_atomic(self) -> bool:
        """True for a single unprefixed-or-prefixed part with power 1 and no denominator."""
        return (
            len(self.numerator) == 1
            and not self.denominator
            and self.numerator[0].power == 1
        )

    def parts(self) -> Iterator[Tuple[UnitPart, int]]:
        """Yield ``(part, sign)`` pairs; sign is ``1`` for numerator, ``-1`` for denominator."""
        for part in self.numerator:
            yield part, 1
        for part in self.denominator:
            yield part, -1

    # --- grouping algebra (no cancellation) ----------------------------------
    def reciprocal(self) -> "CompoundUnit":
        return CompoundUnit(self.denominator, self.numerator)

    def merge(self, other: "CompoundUnit") -> "CompoundUnit":
        """Multiply without cancelling common parts across the ``per`` boundary."""
        return CompoundUnit.from_groups(
            self.numerator + other.numerator,
            self.denominator + other.denominator,
        )

    def per(self, other: "CompoundUnit") -> "CompoundUnit":
        """Divide without cancelling common parts across the ``per`` boundary."""
        return self.merge(other.reciprocal())

    def reduce(self, keep: Callable[[str], bool] = lambda name: False) -> "CompoundUnit":
        """Cancel parts common to numerator and denominator.

        Cancellation is skipped when `keep` accepts either the numerator's or
        the denominator's name on its own. Base units such as
        ``cubic_meter_per_meter`` rely on this to stay unreduced.
        """
        if not self.numerator or not self.denominator:
            return self
        if keep(self.numerator_name) or keep(self.denominator_name):
            return self
        return self._cancelled()

    # --- full algebra ---------------------------------------------------------
    def _exponents(self) -> Dict[Tuple[str, str, str], Tuple[int, UnitPart]]:
        exponents: Dict[Tuple[str, str, str], Tuple[int, UnitPart]] = {}
        for part, sign in self.parts():
            exp, _ = exponents.get(part.key, (0, part))
            exponents[part.key] = (exp + sign * part.power, part)
        return exponents

    @staticmethod
    def _from_exponents(
        exponents: Dict[Tuple[str, str, str], Tuple[int, UnitPart]],
    ) -> "CompoundUnit":
        numerator: List[UnitPart] = []
        denominator: List[UnitPart] = []
        for exp, part in exponents.values():
            if exp > 0:
                numerator.append(part.with_power(exp))
            elif exp < 0:
                denominator.append(part.with_power(-exp))
        return CompoundUnit.from_groups(numerator, denominator)

    def _cancelled(self) -> "CompoundUnit":
        return self._from_exponents(self._exponents())

    def __mul__(self, other: "CompoundUnit") -> "CompoundUnit":
        if not isinstance(other, CompoundUnit):
            return NotImplemented
        return self.merge(other)._cancelled()

    def __truediv__(self, other: "CompoundUnit") -> "CompoundUnit":
        if not isinstance(other, CompoundUnit):
            return NotImplemented
        return self.per(other)._cancelled()

    def __pow__(self, n: int) -> "CompoundUnit":
        if not isinstance(n, int) or isinstance(n, bool):
            raise TypeError("Exponent must be an integer")
        if n == 0:
            return CompoundUnit()
        if n < 0:
            return self.reciprocal() ** -n
        return CompoundUnit(
            tuple(p.with_power(p.power * n) for p in self.numerator),
            tuple(p.with_power(p.power * n) for p in self.denominator),
        )


__all__ = [
    "UNIT",
    "NUMBER",
    "CURRENCY",
    "MAX_POWER",
    "OrderKey",
    "UnitPart",
    "CompoundUnit",
    "collapse",
    "power_prefix",
]
