"""
unitalgebra.engine
==================

`UnitEngine` wires the registry, the derived conversion table, the converter,
the preference resolver and the locale helpers together.

Everything is built eagerly by `UnitEngine.build`; afterwards an engine is
read-only and can be shared between threads. The module-level
`DEFAULT_ENGINE` is built at import from the packaged data tables and can be
replaced with `initialize`.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from unitalgebra.conversion.converter import Converter, UnitLike
from unitalgebra.conversion.derived import ConversionTable, derive
from unitalgebra.conversion.factors import (
    ConversionFactor,
    base_table_from_config,
    factor_from_config,
    with_identity_entries,
)
from unitalgebra.conversion.preference import PreferenceResolver, PreferenceTable
from unitalgebra.core.compound import CompoundUnit
from unitalgebra.core.numbers import Number
from unitalgebra.core.quantity import Quantity
from unitalgebra.units.data import PathLike, load_tables
from unitalgebra.units.locale import Territories, build_territories
from unitalgebra.units.lookup import Filter, UnitLookup
from unitalgebra.units.registry import AtomicUnit, UnitsRegistry, build_registry, normalize_name
from unitalgebra.units.systems import MeasurementSystems

logger = logging.getLogger(__name__)

_CUSTOM_UNIT_KEYS = frozenset({"name", "category", "base_unit", "factor", "offset", "function", "systems"})


def _custom_unit(spec: Mapping[str, Any]) -> Tuple[AtomicUnit, ConversionFactor]:
    unknown = set(spec) - _CUSTOM_UNIT_KEYS
    if unknown:
        raise ValueError(f"Unknown keys {sorted(unknown)} in custom unit definition {spec!r}")
    for key in ("name", "category", "base_unit"):
        if not spec.get(key):
            raise ValueError(f"Custom unit definition {spec!r} is missing {key!r}")

    name = normalize_name(spec["name"])
    unit = AtomicUnit(name, spec["category"], frozenset(spec.get("systems") or ()))
    entry = {k: v for k, v in spec.items() if k in ("base_unit", "factor", "offset", "function")}
    entry["base_unit"] = normalize_name(entry["base_unit"])
    return unit, factor_from_config(name, entry)


class UnitEngine:
    """A fully built unit engine."""

    def __init__(
        self,
        registry: UnitsRegistry,
        table: ConversionTable,
        preferences: PreferenceTable,
        territories: Territories,
        territory_config: Optional[Mapping[str, Any]] = None,
        symbols: Optional[Mapping[str, Any]] = None,
    ) -> None:
        territory_config = territory_config or {}
        symbols = symbols or {}

        self.registry = registry
        self.table = table
        self.territories = territories
        self.converter = Converter(registry, table)
        self.preferences = PreferenceResolver(preferences, self.converter, territories)
        self.systems = MeasurementSystems(
            registry,
            self.converter.canonicalize,
            territories,
            territory_config.get("measurement_system"),
            territory_config.get("temperature"),
        )
        self.lookup = UnitLookup(
            symbols.get("symbols") or {},
            symbols.get("plurals") or {},
            registry,
            self.converter.category_of,
        )

    @classmethod
    def build(
        cls,
        data_dir: Optional[PathLike] = None,
        additional_units: Iterable[Mapping[str, Any]] = (),
    ) -> "UnitEngine":
        """
        Load the data tables and derive every conversion.

        Parameters
        ----------
        data_dir : str | Path, optional
            Directory holding the YAML tables. Defaults to the packaged data.
        additional_units : Iterable[Mapping]
            Custom atomic units. Each mapping has ``name``, ``category`` and
            ``base_unit``, plus ``factor`` and ``offset`` (or ``function``)
            and an optional list of ``systems``. The base unit may be any
            convertible unit, e.g. ``{"name": "quarter", "category":
            "duration", "base_unit": "year", "factor": "1/4"}``.
        """
        tables = load_tables(data_dir)
        registry = build_registry(tables["units"])
        base_table = base_table_from_config(tables["conversions"])

        for spec in additional_units:
            unit, factor = _custom_unit(spec)
            registry.register(unit)
            base_table[unit.name] = factor
            logger.debug("Registered custom unit %s based on %s", unit.name, factor.base_unit)

        table = derive(
            with_identity_entries(base_table),
            registry.localizable(),
            registry.canonicalize,
            registry.base_unit_names(),
            registry.is_non_prefixable,
        )
        return cls(
            registry,
            table,
            PreferenceTable(tables["preferences"]),
            build_territories(tables["territories"]),
            tables["territories"],
            tables["symbols"],
        )

    def __repr__(self) -> str:
        return f"UnitEngine({len(self.registry.all())} units, {self.table!r})"

    # ------------------------------------------------------------------------
    # Canonicalization and conversion
    # ------------------------------------------------------------------------
    def canonicalize(self, name: UnitLike) -> CompoundUnit:
        return self.converter.canonicalize(name)

    def canonical_name(self, name: UnitLike) -> str:
        return self.canonicalize(name).name

    def new(self, value: Number, unit: str) -> Quantity:
        return Quantity.new(value, unit, engine=self)

    def convert(self, quantity: Quantity, to: UnitLike) -> Quantity:
        if not isinstance(quantity, Quantity):
            raise TypeError(f"Expected a Quantity, got {type(quantity).__name__}")
        return self.converter.convert(quantity, to)

    def convert_to_base(self, quantity: Quantity) -> Quantity:
        return self.converter.convert_to_base(quantity)

    def is_convertible(self, name: UnitLike) -> bool:
        return self.converter.is_convertible(name)

    def category_of(self, name: UnitLike) -> str:
        return self.converter.category_of(name)

    def base_unit(self, name: UnitLike) -> str:
        return self.converter.base_unit(name)

    def conversion_for(self, name: UnitLike) -> ConversionFactor:
        return self.converter.conversion_for(name)

    def unconvertible_units(self) -> frozenset:
        return self.table.unconvertible

    # ------------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------------
    def preferred_units(
        self,
        quantity: Quantity,
        usage: Optional[str],
        scope: Optional[str] = None,
        alt: Optional[str] = None,
        territory: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> List[str]:
        return self.preferences.preferred_units(
            quantity, usage, scope=scope, alt=alt, territory=territory, locale=locale
        )

    def decompose(self, quantity: Quantity, units: List[str]) -> List[Quantity]:
        return self.preferences.decompose(quantity, units)

    def localize(
        self,
        quantity: Quantity,
        usage: Optional[str],
        scope: Optional[str] = None,
        alt: Optional[str] = None,
        territory: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> List[Quantity]:
        return self.preferences.localize(
            quantity, usage, scope=scope, alt=alt, territory=territory, locale=locale
        )

    def territory_from_locale(self, locale: str) -> str:
        return self.territories.from_locale(locale)

    # ------------------------------------------------------------------------
    # Measurement systems and lookup
    # ------------------------------------------------------------------------
    def measurement_system_for_territory(self, territory: str, category: Optional[str] = None) -> str:
        return self.systems.for_territory(territory, category)

    def measurement_systems_for_unit(self, name: str) -> List[str]:
        return self.systems.for_unit(name)

    def is_measurement_system(self, name: str, system: str) -> bool:
        return self.systems.is_in(name, system)

    def match_unit(self, token: str, only: Filter = None, exclude: Filter = None) -> str:
        return self.lookup.match_unit(token, only=only, exclude=exclude)

    def parse_quantity(self, text: str, only: Filter = None, exclude: Filter = None) -> Quantity:
        return self.lookup.parse_quantity(text, only=only, exclude=exclude)


# ---------------------------------------------------------------------------
# Default engine
# ---------------------------------------------------------------------------
_init_lock = threading.Lock()

DEFAULT_ENGINE: UnitEngine = UnitEngine.build()


def get_default_engine() -> UnitEngine:
    return DEFAULT_ENGINE


def initialize(
    data_dir: Optional[PathLike] = None,
    additional_units: Iterable[Mapping[str, Any]] = (),
) -> UnitEngine:
    """Build a new engine and make it the default one.

    The previous engine stays valid for anyone still holding it.
    """
    global DEFAULT_ENGINE
    engine = UnitEngine.build(data_dir, additional_units)
    with _init_lock:
        DEFAULT_ENGINE = engine
    logger.info(
        "Unit engine initialized: %d conversions, %d unconvertible units",
        len(engine.table), len(engine.table.unconvertible),
    )
    return engine


__all__ = ["UnitEngine", "DEFAULT_ENGINE", "get_default_engine", "initialize"]
