"""
unitalgebra.units.locale
========================

Resolution of locale identifiers to territory codes.

Only the part of BCP 47 that decides a territory is understood: the language,
optional script and region subtags, and the ``-u-rg-`` region override
extension (``en-US-u-rg-gbzzzz`` prefers British units).
"""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional

from unitalgebra.core.exceptions import LocaleError, UnknownTerritoryError

WORLD = "001"

_LOCALE_RE = re.compile(
    r"""
    ^(?P<language>[a-z]{2,3}|[a-z]{5,8}|root)
    (?:[-_](?P<script>[a-z]{4}))?
    (?:[-_](?P<region>[a-z]{2}|[0-9]{3}))?
    (?P<rest>(?:[-_][a-z0-9]{1,8})*)$
    """,
    re.IGNORECASE | re.VERBOSE,
)
_RG_RE = re.compile(r"[-_]u(?:[-_][a-z0-9]{2,8})*?[-_]rg[-_]([a-z]{2}|[0-9]{3})zzzz(?=[-_]|$)", re.IGNORECASE)


class Territories:
    """Known territory codes plus the likely region of each language."""

    def __init__(self, known: Iterable[str] = (), likely_regions: Optional[Mapping[str, str]] = None):
        self._known = frozenset(str(t).upper() for t in known) | {WORLD}
        self._likely = {k.lower(): str(v).upper() for k, v in (likely_regions or {}).items()}

    @property
    def known(self) -> frozenset:
        return self._known

    def validate(self, territory: str) -> str:
        """Return the upper-cased territory code, or raise `UnknownTerritoryError`."""
        code = str(territory).strip().upper()
        if code not in self._known:
            raise UnknownTerritoryError(f"The territory {territory!r} is unknown")
        return code

    def from_locale(self, locale: str) -> str:
        """
        Territory for a locale identifier.

        A ``-u-rg-`` override wins over the region subtag; a locale with
        neither uses the likely region of its language, and finally the
        world territory ``"001"``.

        Raises
        ------
        LocaleError
            If `locale` is not a well-formed identifier.
        UnknownTerritoryError
            If the territory it names is unknown.
        """
        if not isinstance(locale, str):
            raise LocaleError(f"Locale must be a string, got {type(locale).__name__}")
        m = _LOCALE_RE.match(locale.strip())
        if m is None:
            raise LocaleError(f"The locale {locale!r} could not be parsed")

        override = _RG_RE.search(m.group("rest") or "")
        if override is not None:
            return self.validate(override.group(1))
        if m.group("region"):
            return self.validate(m.group("region"))
        return self._likely.get(m.group("language").lower(), WORLD)


def build_territories(config: Mapping) -> Territories:
    """Build `Territories` from ``territories.yaml`` contents."""
    known = set(config.get("known") or ())
    known.update((config.get("measurement_system") or {}).keys())
    return Territories(known, config.get("likely_regions") or {})


__all__ = ["WORLD", "Territories", "build_territories"]
