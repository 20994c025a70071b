"""
unitalgebra.units.registry
==========================

The atomic unit registry.

- Encapsulates the known atomic units in a `UnitsRegistry` (thread-safe).
- Data-driven: units, categories, measurement systems, aliases and the
  canonical base-unit order come from ``units.yaml``.
- Normalization of user spellings (case, hyphens, whitespace, ``metre``).
- Knows which units refuse SI prefixes (``kilogram``, ``celsius``, ...).
- Memoizes canonicalization results per registry.

The registry does not parse compound names itself; `canonicalize` hands the
work to `unitalgebra.units.parser` and caches the outcome.
"""
from __future__ import annotations

import re
import threading
import unicodedata
from collections import OrderedDict
from dataclasses import dataclass, field
from fractions import Fraction
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from unitalgebra.core.compound import CURRENCY, NUMBER, UNIT, OrderKey, UnitPart
from unitalgebra.core.exceptions import UnknownUnitError
from unitalgebra.units.data import load_table
from unitalgebra.units.prefixes import prefix_factor

if TYPE_CHECKING:  # pragma: no cover - typing aid only
    from unitalgebra.core.compound import CompoundUnit

# Same bound as the compiled-expression cache of the unit parser.
CANONICAL_CACHE_SIZE = 4096


@dataclass(frozen=True, slots=True)
class AtomicUnit:
    name: str
    category: str
    systems: FrozenSet[str] = field(default_factory=frozenset)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------
_SEPARATORS_RE = re.compile(r"[\s\-]+")
_REPEATED_UNDERSCORE_RE = re.compile(r"_{2,}")


def normalize_name(name: str) -> str:
    """Normalize a user-provided unit name.

    Rules:
    - Unicode normalize to NFC and strip surrounding whitespace.
    - Lower-case.
    - Hyphens and runs of whitespace become ``_``; repeated ``_`` collapse.
    """
    if not isinstance(name, str):
        raise TypeError(f"Unit name must be a string, got {type(name).__name__}")
    s = unicodedata.normalize("NFC", name.strip()).lower()
    s = _SEPARATORS_RE.sub("_", s)
    s = _REPEATED_UNDERSCORE_RE.sub("_", s)
    return s.strip("_")


# ---------------------------------------------------------------------------
# Units registry
# ---------------------------------------------------------------------------
class UnitsRegistry:
    """Thread-safe registry of `AtomicUnit` objects.

    Besides atomic units it holds the localizable unit names (the universe
    the derivation engine must cover), aliases, spelling variants, currency
    codes and the ordered ``(category, base_unit)`` table that drives the
    canonical sort order.
    """

    def __init__(self, base_units: Iterable[Tuple[str, str]] = ()) -> None:
        self._lock = threading.RLock()
        self._units: Dict[str, AtomicUnit] = {}
        self._aliases: Dict[str, str] = {}
        self._spellings: Dict[str, str] = {}
        self._non_prefixable: set[str] = set()
        self._localizable: Dict[str, str] = {}
        self._currencies: FrozenSet[str] = frozenset()
        self._inverse_categories: set[FrozenSet[str]] = set()
        self._base_units: Tuple[Tuple[str, str], ...] = tuple(
            (category, base) for category, base in base_units
        )
        self._category_index = {cat: i for i, (cat, _) in enumerate(self._base_units)}
        self._names_desc: Tuple[str, ...] = ()
        self._aliases_desc: Tuple[str, ...] = ()
        self._cache: "OrderedDict[str, CompoundUnit]" = OrderedDict()

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def set_non_prefixable(self, names: Iterable[str]) -> None:
        """Mark unit names that must not accept SI prefixes (e.g. 'kilogram', 'hour')."""
        with self._lock:
            self._non_prefixable = {normalize_name(n) for n in names}
            self._cache.clear()

    def is_non_prefixable(self, name: str) -> bool:
        return normalize_name(name) in self._non_prefixable

    def set_currencies(self, codes: Iterable[str]) -> None:
        with self._lock:
            self._currencies = frozenset(c.strip().lower() for c in codes)
            self._cache.clear()

    @property
    def currencies(self) -> FrozenSet[str]:
        return self._currencies

    def register_inverse_categories(self, category: str, inverse: str) -> None:
        """Declare that `category` and `inverse` measure reciprocal quantities."""
        with self._lock:
            self._inverse_categories.add(frozenset((category, inverse)))

    def are_inverse_categories(self, a: str, b: str) -> bool:
        return a != b and frozenset((a, b)) in self._inverse_categories

    # -------------------------- public API ---------------------------------
    def register(self, unit: AtomicUnit, replace: bool = False) -> None:
        """Register (or overwrite if replace is True) an `AtomicUnit` under its name."""
        name = normalize_name(unit.name)
        if name != unit.name:
            raise ValueError(f"Unit name {unit.name!r} is not in normalized form ({name!r})")
        with self._lock:
            if not replace:
                if name in self._units:
                    raise ValueError(
                        f"Cannot register unit '{name}': a unit with this name already exists."
                    )
                if name in self._aliases:
                    raise ValueError(
                        f"Cannot register unit '{name}': an alias with this name already exists."
                    )
            self._units[name] = unit
            self._localizable.setdefault(name, unit.category)
            self._names_desc = tuple(sorted(self._units, key=len, reverse=True))
            self._cache.clear()

    def register_alias(self, alias: str, canonical: str, replace: bool = False) -> None:
        """Make `alias` a whole-token synonym of `canonical` (e.g. 'metric_ton' -> 'tonne')."""
        key = normalize_name(alias)
        with self._lock:
            if not replace and key in self._units and key != canonical:
                raise ValueError(
                    f"Cannot register alias '{alias}': a unit with the name '{key}' already exists."
                )
            self._aliases[key] = normalize_name(canonical)
            self._aliases_desc = tuple(sorted(self._aliases, key=len, reverse=True))
            self._cache.clear()

    def register_spelling(self, variant: str, canonical: str) -> None:
        """Register a spelling variant replaced anywhere in a name ('metre' -> 'meter')."""
        with self._lock:
            self._spellings[normalize_name(variant)] = normalize_name(canonical)
            self._cache.clear()

    def register_localizable(self, name: str, category: str) -> None:
        """Add a (possibly compound) unit name to the localizable universe."""
        with self._lock:
            self._localizable[normalize_name(name)] = category

    def has(self, name: str) -> bool:
        try:
            self.get(name)
            return True
        except UnknownUnitError:
            return False

    def get(self, name: str) -> AtomicUnit:
        """Look up an atomic unit by name or alias.

        Raises `UnknownUnitError` if unknown.
        """
        key = self.normalize(name)
        with self._lock:
            key = self._aliases.get(key, key)
            unit = self._units.get(key)
        if unit is None:
            raise UnknownUnitError(f"Unknown unit: {name!r}")
        return unit

    def all(self) -> Mapping[str, AtomicUnit]:
        with self._lock:
            return dict(self._units)

    def localizable(self) -> Mapping[str, str]:
        """Localizable unit names mapped to their declared category."""
        with self._lock:
            return dict(self._localizable)

    def declared_category(self, name: str) -> Optional[str]:
        return self._localizable.get(name)

    # ------------------------ base unit order -------------------------------
    @property
    def base_units(self) -> Tuple[Tuple[str, str], ...]:
        """Ordered ``(category, base_unit)`` pairs."""
        return self._base_units

    def base_unit_names(self) -> FrozenSet[str]:
        return frozenset(base for _, base in self._base_units)

    def is_base_unit(self, name: str) -> bool:
        return any(base == name for _, base in self._base_units)

    def category_for_base(self, base_unit: str) -> Optional[str]:
        for category, base in self._base_units:
            if base == base_unit:
                return category
        return None

    def base_unit_for_category(self, category: str) -> Optional[str]:
        index = self._category_index.get(category)
        return None if index is None else self._base_units[index][1]

    def base_index(self, atom: str) -> int:
        """Position of `atom`'s category in the base-unit table (unknown sorts last)."""
        unit = self._units.get(atom)
        index = None if unit is None else self._category_index.get(unit.category)
        return len(self._base_units) if index is None else index

    @staticmethod
    def prefix_rank(prefix: str) -> Fraction:
        """Sort rank of a prefix; larger magnitudes rank first."""
        return -prefix_factor(prefix)

    def order_for(self, atom: str, prefix: str = "") -> OrderKey:
        """Canonical ordering key for an atomic unit part.

        Known units sort by their category's position in the base-unit table,
        then by prefix magnitude (largest first). Units whose category has no
        position sort after all others.
        """
        return (2, self.base_index(atom), self.prefix_rank(prefix))

    # ------------------------ parser support --------------------------------
    def normalize(self, name: str) -> str:
        s = normalize_name(name)
        for variant, canonical in self._spellings.items():
            if variant in s:
                s = s.replace(variant, canonical)
        return s

    def resolve_alias(self, name: str) -> str:
        return self._aliases.get(name, name)

    def match_alias(self, text: str, pos: int) -> Optional[Tuple[str, str]]:
        """Longest alias starting at `pos` and ending on a ``_`` boundary."""
        for alias in self._aliases_desc:
            if _matches_at(text, pos, alias):
                return alias, self._aliases[alias]
        return None

    def match_unit(self, text: str, pos: int) -> Optional[str]:
        """Longest atomic unit name starting at `pos` and ending on a ``_`` boundary."""
        for name in self._names_desc:
            if _matches_at(text, pos, name):
                return name
        return None

    def unit_part(self, atom: str, prefix: str = "", power: int = 1) -> UnitPart:
        return UnitPart(atom, prefix, power, UNIT, self.order_for(atom, prefix))

    @staticmethod
    def number_part(digits: str, power: int = 1) -> UnitPart:
        return UnitPart(str(int(digits)), "", power, NUMBER, (1, 0, Fraction(0)))

    @staticmethod
    def currency_part(code: str, power: int = 1) -> UnitPart:
        return UnitPart(f"curr_{code}", "", power, CURRENCY, (0, 0, Fraction(0)))

    def canonicalize(self, name: str) -> "CompoundUnit":
        """Parse `name` into its canonical `CompoundUnit`.

        Results are memoized per registry in an LRU keyed by the normalized
        name, holding at most `CANONICAL_CACHE_SIZE` entries.
        """
        from unitalgebra.units.parser import parse_unit_name  # local import

        key = self.normalize(name)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                return cached
        compound = parse_unit_name(name, self)
        with self._lock:
            self._cache[key] = compound
            self._cache.move_to_end(key)
            while len(self._cache) > CANONICAL_CACHE_SIZE:
                self._cache.popitem(last=False)
        return compound


def _matches_at(text: str, pos: int, word: str) -> bool:
    end = pos + len(word)
    return text.startswith(word, pos) and (end == len(text) or text[end] == "_")


# ---------------------------------------------------------------------------
# Bootstrap a registry from the units table
# ---------------------------------------------------------------------------

def build_registry(config: Mapping[str, Any]) -> UnitsRegistry:
    """Build a registry from the contents of ``units.yaml``."""
    reg = UnitsRegistry(tuple(pair) for pair in config.get("base_units", ()))

    for category, units in (config.get("units") or {}).items():
        for name, systems in (units or {}).items():
            reg.register(AtomicUnit(name, category, frozenset(systems or ())))

    for category, names in (config.get("localizable") or {}).items():
        for name in names or ():
            reg.register_localizable(name, category)

    for alias, canonical in (config.get("aliases") or {}).items():
        reg.register_alias(alias, canonical)

    for variant, canonical in (config.get("spellings") or {}).items():
        reg.register_spelling(variant, canonical)

    for category, inverse in (config.get("inverse_categories") or {}).items():
        reg.register_inverse_categories(category, inverse)

    reg.set_non_prefixable(config.get("non_prefixable") or ())
    reg.set_currencies(config.get("currencies") or ())
    return reg


def _bootstrap_default_registry() -> UnitsRegistry:
    return build_registry(load_table("units"))
