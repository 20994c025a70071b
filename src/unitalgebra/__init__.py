"""
unitalgebra: canonical unit names, exact unit conversion and locale unit preferences.

unitalgebra parses compound unit names such as ``kilogram-meter-per-square-second``
into a canonical form, derives conversions between them over exact rationals and
picks the units a territory prefers for a given usage. This module exposes a
minimal, stable public API. The default engine is built lazily on first use to
avoid import-time side effects.
"""

from importlib import metadata as _metadata
from pathlib import Path as _Path

__license__ = "MIT"

# Try to read the installed package version first; fall back to pyproject.toml for local dev.
try:
    __version__ = _metadata.version("unitalgebra")
except _metadata.PackageNotFoundError:
    import tomllib
    with open(_Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

from typing import TYPE_CHECKING, Any, Iterable, List, Mapping, Optional

from unitalgebra.core.compound import CompoundUnit
from unitalgebra.core.exceptions import (
    AmbiguousUnitError,
    IncompatibleUnitsError,
    LocaleError,
    UnitError,
    UnitNotConvertibleError,
    UnknownCategoryError,
    UnknownMeasurementSystemError,
    UnknownTerritoryError,
    UnknownUnitError,
    UnknownUnitPreferenceError,
    UnknownUsageError,
)
from unitalgebra.core.quantity import Quantity

if TYPE_CHECKING:  # pragma: no cover - typing aid only
    from unitalgebra.engine import UnitEngine

# Lazy access helpers -------------------------------------------------------

def _get_default_engine() -> "UnitEngine":
    # Import here to avoid import-time side-effects / circular imports.
    from unitalgebra import engine  # local import
    return engine.DEFAULT_ENGINE


def initialize(data_dir: Optional[str] = None, additional_units: Iterable[Mapping[str, Any]] = ()) -> "UnitEngine":
    """Rebuild the default engine, optionally from other data or with custom units."""
    from unitalgebra import engine  # local import
    return engine.initialize(data_dir, additional_units)


def canonicalize(name: str) -> CompoundUnit:
    return _get_default_engine().canonicalize(name)


def new(value: Any, unit: str) -> Quantity:
    return _get_default_engine().new(value, unit)


def convert(quantity: Quantity, to: str) -> Quantity:
    return _get_default_engine().convert(quantity, to)


def convert_to_base(quantity: Quantity) -> Quantity:
    return _get_default_engine().convert_to_base(quantity)


def is_convertible(name: str) -> bool:
    return _get_default_engine().is_convertible(name)


def category_of(name: str) -> str:
    return _get_default_engine().category_of(name)


def unconvertible_units() -> frozenset:
    return _get_default_engine().unconvertible_units()


def preferred_units(
    quantity: Quantity,
    usage: Optional[str],
    scope: Optional[str] = None,
    alt: Optional[str] = None,
    territory: Optional[str] = None,
    locale: Optional[str] = None,
) -> List[str]:
    return _get_default_engine().preferred_units(
        quantity, usage, scope=scope, alt=alt, territory=territory, locale=locale
    )


def decompose(quantity: Quantity, units: List[str]) -> List[Quantity]:
    return _get_default_engine().decompose(quantity, units)


def localize(
    quantity: Quantity,
    usage: Optional[str],
    scope: Optional[str] = None,
    alt: Optional[str] = None,
    territory: Optional[str] = None,
    locale: Optional[str] = None,
) -> List[Quantity]:
    return _get_default_engine().localize(
        quantity, usage, scope=scope, alt=alt, territory=territory, locale=locale
    )


def measurement_system_for_territory(territory: str, category: Optional[str] = None) -> str:
    return _get_default_engine().measurement_system_for_territory(territory, category)


def measurement_systems_for_unit(name: str) -> List[str]:
    return _get_default_engine().measurement_systems_for_unit(name)


def is_measurement_system(name: str, system: str) -> bool:
    return _get_default_engine().is_measurement_system(name, system)


def match_unit(token: str, only: Any = None, exclude: Any = None) -> str:
    return _get_default_engine().match_unit(token, only=only, exclude=exclude)


def parse_quantity(text: str, only: Any = None, exclude: Any = None) -> Quantity:
    return _get_default_engine().parse_quantity(text, only=only, exclude=exclude)


# Public names exposed by the package. Keep this minimal and stable.
__all__ = [
    "__version__",
    "__license__",
    "CompoundUnit",
    "Quantity",
    "initialize",
    "canonicalize",
    "new",
    "convert",
    "convert_to_base",
    "is_convertible",
    "category_of",
    "unconvertible_units",
    "preferred_units",
    "decompose",
    "localize",
    "measurement_system_for_territory",
    "measurement_systems_for_unit",
    "is_measurement_system",
    "match_unit",
    "parse_quantity",
    "UnitError",
    "UnknownUnitError",
    "UnitNotConvertibleError",
    "AmbiguousUnitError",
    "IncompatibleUnitsError",
    "UnknownCategoryError",
    "UnknownUsageError",
    "UnknownUnitPreferenceError",
    "LocaleError",
    "UnknownTerritoryError",
    "UnknownMeasurementSystemError",
]
