"""
unitalgebra.units.lookup
========================

Resolves free-form unit tokens (``"km"``, ``"feet"``, ``"W"``) to canonical
unit names, and parses strings like ``"22 km"`` into quantities.

Tokens are looked up, in order, in the symbol table, as unit names, and as
plural forms. A token may name several units (``"m"`` is meter, minute and
month); filters narrow the candidates down by category or unit name.
"""
from __future__ import annotations

import re
from decimal import Decimal
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Union

from unitalgebra.core.exceptions import AmbiguousUnitError, UnitError, UnknownUnitError
from unitalgebra.core.quantity import Quantity
from unitalgebra.units.registry import UnitsRegistry

Filter = Union[str, Iterable[str], None]

_NUMBER = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?"
_VALUE_FIRST_RE = re.compile(rf"^\s*(?P<value>{_NUMBER})\s*(?P<unit>\S.*?)\s*$")
_UNIT_FIRST_RE = re.compile(rf"^\s*(?P<unit>\S.*?)\s*(?P<value>{_NUMBER})\s*$")
_PLURAL_SUFFIXES = ("es", "s")


def _as_set(value: Filter) -> frozenset:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset((value,))
    return frozenset(value)


def parse_number(text: str) -> Union[int, Decimal]:
    """Parse a numeric literal as an ``int``, or a ``Decimal`` if it has a fraction or exponent."""
    text = text.strip()
    if re.fullmatch(r"[-+]?\d+", text):
        return int(text)
    return Decimal(text)


class UnitLookup:
    def __init__(
        self,
        symbols: Mapping[str, Sequence[str]],
        plurals: Mapping[str, str],
        registry: UnitsRegistry,
        category_of: Callable[[str], str],
    ) -> None:
        self._symbols = {str(k): list(v) if isinstance(v, (list, tuple)) else [v] for k, v in symbols.items()}
        self._plurals = {str(k).lower(): v for k, v in plurals.items()}
        self._registry = registry
        self._category_of = category_of

    # ---- candidates ----
    def _canonical(self, name: str) -> Optional[str]:
        try:
            return self._registry.canonicalize(name).name or None
        except UnitError:
            return None

    def _candidates(self, token: str) -> List[str]:
        names = self._symbols.get(token) or self._symbols.get(token.lower())
        if names:
            return list(dict.fromkeys(names))

        name = self._canonical(token)
        if name is not None:
            return [name]

        lowered = token.strip().lower()
        if lowered in self._plurals:
            return [self._plurals[lowered]]
        for suffix in _PLURAL_SUFFIXES:
            if lowered.endswith(suffix):
                name = self._canonical(lowered[: -len(suffix)])
                if name is not None:
                    return [name]
        return []

    def _matches(self, name: str, wanted: frozenset) -> bool:
        if name in wanted:
            return True
        try:
            return self._category_of(name) in wanted
        except UnitError:
            return False

    # ---- public API ----
    def match_unit(self, token: str, only: Filter = None, exclude: Filter = None) -> str:
        """
        Resolve `token` to a single canonical unit name.

        Parameters
        ----------
        token : str
            A symbol, unit name or plural (``"km"``, ``"kilometre"``, ``"feet"``).
        only : str | Iterable[str], optional
            Keep only candidates whose category or name is listed.
        exclude : str | Iterable[str], optional
            Drop candidates whose category or name is listed.

        Raises
        ------
        UnknownUnitError
            If no candidate is left.
        AmbiguousUnitError
            If more than one candidate is left.
        """
        if not isinstance(token, str) or not token.strip():
            raise UnknownUnitError(f"Unknown unit {token!r}")
        only_set, exclude_set = _as_set(only), _as_set(exclude)

        candidates = self._candidates(token.strip())
        if only_set:
            candidates = [c for c in candidates if self._matches(c, only_set)]
        if exclude_set:
            candidates = [c for c in candidates if not self._matches(c, exclude_set)]

        if not candidates:
            raise UnknownUnitError(f"Unknown unit {token!r}")
        if len(candidates) > 1:
            raise AmbiguousUnitError(token, candidates)
        return candidates[0]

    def parse_quantity(self, text: str, only: Filter = None, exclude: Filter = None) -> Quantity:
        """Parse ``"22 km"`` or ``"km 22"`` into a `Quantity` with a canonical unit."""
        m = _VALUE_FIRST_RE.match(text) or _UNIT_FIRST_RE.match(text)
        if m is None:
            raise UnknownUnitError(f"Could not parse a quantity from {text!r}")
        value = parse_number(m.group("value"))
        return Quantity(value, self.match_unit(m.group("unit"), only=only, exclude=exclude))


__all__ = ["UnitLookup", "parse_number"]
