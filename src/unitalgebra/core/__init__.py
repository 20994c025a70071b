"""Core value types: compound units, quantities, numbers and errors."""

from unitalgebra.core.compound import CompoundUnit, UnitPart
from unitalgebra.core.quantity import Quantity

__all__ = ["CompoundUnit", "UnitPart", "Quantity"]
