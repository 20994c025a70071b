"""
unitalgebra.core.exceptions
===========================

Error hierarchy shared by the parser, converter and preference resolver.

Every error derives from `UnitError`, which is itself a `ValueError`, so
callers that only care about "bad unit input" can catch `ValueError`.
Errors are raised at the public boundary and never mutate the engine's
tables, so a failed request has no effect on later ones.
"""

from __future__ import annotations


class UnitError(ValueError):
    """Base class for all unit errors."""


class UnknownUnitError(UnitError):
    """A unit name or token cannot be resolved to any known unit."""


class UnitNotConvertibleError(UnknownUnitError):
    """The unit is known but no conversion factor exists or can be derived."""


class AmbiguousUnitError(UnitError):
    """An abbreviated unit token matches more than one unit under the given filters."""

    def __init__(self, token: str, candidates: list[str]) -> None:
        self.token = token
        self.candidates = list(candidates)
        super().__init__(
            f"The string {token!r} ambiguously resolves to {self.candidates!r}. "
            "Use the `only` or `exclude` filters to select one."
        )


class IncompatibleUnitsError(UnitError):
    """Conversion or arithmetic was requested between incompatible units."""

    def __init__(self, from_unit: str, to_unit: str) -> None:
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__(
            f"Operations can only be performed between units with the same "
            f"category and base unit. Received {from_unit!r} and {to_unit!r}"
        )


class UnknownCategoryError(UnitError):
    """The unit does not belong to any known unit category."""


class UnknownUsageError(UnitError):
    """The requested usage is not defined for the unit's category."""


class UnknownUnitPreferenceError(UnknownUsageError):
    """No preference data exists for the unit's category."""


class LocaleError(UnitError):
    """A locale identifier could not be parsed."""


class UnknownTerritoryError(UnitError):
    """A territory code is not known."""


class UnknownMeasurementSystemError(UnitError):
    """A unit has no measurement system, or an unknown system was named."""


__all__ = [
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
