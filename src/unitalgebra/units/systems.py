"""
unitalgebra.units.systems
=========================

Measurement systems (``metric``, ``si``, ``ussystem``, ``uksystem``) of units
and territories.
"""
from __future__ import annotations

from typing import Callable, List, Mapping, Optional

from unitalgebra.core.compound import UNIT, CompoundUnit
from unitalgebra.core.exceptions import UnknownMeasurementSystemError
from unitalgebra.units.locale import WORLD, Territories
from unitalgebra.units.registry import UnitsRegistry

DEFAULT_SYSTEM = "metric"


class MeasurementSystems:
    def __init__(
        self,
        registry: UnitsRegistry,
        canonicalize: Callable[[str], CompoundUnit],
        territories: Territories,
        by_territory: Optional[Mapping[str, str]] = None,
        temperature: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._registry = registry
        self._canonicalize = canonicalize
        self._territories = territories
        self._by_territory = {str(k).upper(): v for k, v in (by_territory or {}).items()}
        self._temperature = {str(k).upper(): v for k, v in (temperature or {}).items()}

        known = set(self._by_territory.values()) | set(self._temperature.values())
        for unit in registry.all().values():
            known.update(unit.systems)
        self._known = frozenset(known)

    @property
    def known(self) -> frozenset:
        return self._known

    def for_territory(self, territory: str, category: Optional[str] = None) -> str:
        """Measurement system used in `territory`, optionally for one category.

        Only ``temperature`` has category-specific data; the United States
        measures most things in ``ussystem`` but Liberia and Myanmar measure
        temperature in ``metric``, for example.
        """
        code = self._territories.validate(territory)
        if category == "temperature" and code in self._temperature:
            return self._temperature[code]
        return self._by_territory.get(code, self._by_territory.get(WORLD, DEFAULT_SYSTEM))

    def for_unit(self, name: str) -> List[str]:
        """
        Measurement systems a unit belongs to.

        For a compound unit this is the set of systems shared by every atomic
        part; numeric and currency parts do not constrain it.

        Raises
        ------
        UnknownUnitError
            If `name` cannot be parsed.
        UnknownMeasurementSystemError
            If the parts share no system.
        """
        compound = self._canonicalize(name)
        systems = None
        for part, _ in compound.parts():
            if part.kind != UNIT:
                continue
            tags = self._registry.get(part.atom).systems
            systems = set(tags) if systems is None else systems & tags
        if not systems:
            raise UnknownMeasurementSystemError(
                f"The unit {compound.name!r} does not belong to any measurement system"
            )
        return sorted(systems)

    def is_in(self, name: str, system: str) -> bool:
        """True if the unit `name` belongs to `system`."""
        if system not in self._known:
            raise UnknownMeasurementSystemError(f"The measurement system {system!r} is unknown")
        try:
            return system in self.for_unit(name)
        except UnknownMeasurementSystemError:
            return False


__all__ = ["DEFAULT_SYSTEM", "MeasurementSystems"]
