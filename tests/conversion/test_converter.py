from decimal import Decimal
from fractions import Fraction

import pytest

from unitalgebra.core.exceptions import (
    IncompatibleUnitsError,
    UnitNotConvertibleError,
    UnknownCategoryError,
    UnknownUnitError,
)
from unitalgebra.core.quantity import Quantity
from unitalgebra.units.prefixes import BINARY_PREFIXES, SI_PREFIXES


# -------------------------------
# Prefix closure
# -------------------------------

@pytest.mark.parametrize("prefix", SI_PREFIXES, ids=lambda p: p.name)
def test_every_si_prefix_converts(engine, prefix):
    q = engine.convert(Quantity(1, f"{prefix.name}meter"), "meter")
    assert q == Quantity(prefix.factor, "meter")


@pytest.mark.parametrize("prefix", BINARY_PREFIXES, ids=lambda p: p.name)
def test_every_binary_prefix_converts(engine, prefix):
    assert engine.convert(Quantity(1, f"{prefix.name}byte"), "byte").value == prefix.factor


# -------------------------------
# Scalar conversions
# -------------------------------

@pytest.mark.parametrize(
    "value, source, target, expected",
    [
        (1, "foot", "inch", 12),
        (1, "mile", "kilometer", Fraction("1.609344")),
        (1, "kilometer_per_hour", "meter_per_second", Fraction(5, 18)),
        (1, "square_foot", "square_inch", 144),
        (1, "acre_foot", "cubic_meter", Fraction("4046.8564224") * Fraction("0.3048")),
        (3600000, "joule", "kilowatt_hour", 1),
        (1, "kibibyte", "bit", 8192),
        (90, "degree", "revolution", Fraction(1, 4)),
        (1, "newton", "kilogram_meter_per_square_second", 1),
        (1, "gram_per_liter", "kilogram_per_cubic_meter", 1),
    ],
)
def test_convert(engine, value, source, target, expected):
    assert engine.convert(Quantity(value, source), target).value == expected


def test_result_unit_is_canonical(engine):
    assert engine.convert(Quantity(3600000, "joule"), "kilowatt_hour") == Quantity(1, "hour_kilowatt")


def test_round_trip_is_exact(engine):
    original = Quantity(Fraction(123, 7), "mile")
    there = engine.convert(original, "kilometer")
    assert engine.convert(there, "mile") == original


def test_alias_and_spelling(engine):
    assert engine.convert(Quantity(1, "kilometre"), "metre") == Quantity(1000, "meter")
    psi = engine.convert(Quantity(1, "pound_per_square_inch"), "pascal")
    assert psi.value == Fraction("4.4482216152605") / Fraction("0.0254") ** 2


# -------------------------------
# Offset and function scales
# -------------------------------

@pytest.mark.parametrize(
    "value, source, target, expected",
    [
        (100, "celsius", "fahrenheit", 212),
        (32, "fahrenheit", "celsius", 0),
        (0, "kelvin", "celsius", Fraction("-273.15")),
        (0, "celsius", "rankine", Fraction("491.67")),
        (-40, "celsius", "fahrenheit", -40),
    ],
)
def test_temperatures(engine, value, source, target, expected):
    assert engine.convert(Quantity(value, source), target).value == expected


def test_function_scale_in_compound_is_not_convertible(engine):
    with pytest.raises(UnitNotConvertibleError):
        engine.convert(Quantity(1, "celsius_per_second"), "kelvin_per_second")


# -------------------------------
# Reciprocal units
# -------------------------------

def test_mile_per_gallon_to_liter_per_100_kilometer(engine):
    q = engine.convert(Quantity(30, "mile_per_gallon"), "liter_per_100_kilometer")
    assert q.unit == "liter_per_100_kilometer"
    assert q.value == Fraction("0.003785411784") * 10 ** 8 / (30 * Fraction("1609.344"))
    assert float(q.value) == pytest.approx(7.84049, rel=1e-5)


def test_reciprocal_of_composed_unit(engine):
    assert engine.convert(Quantity(1, "meter_per_cubic_meter"), "liter_per_100_kilometer").value == 10 ** 8


def test_reciprocal_round_trip(engine):
    mpg = Quantity(Fraction(30), "mile_per_gallon")
    back = engine.convert(engine.convert(mpg, "liter_per_100_kilometer"), "mile_per_gallon")
    assert back == mpg


def test_reciprocal_needs_inverse_categories(engine, monkeypatch):
    with pytest.raises(IncompatibleUnitsError):
        engine.convert(Quantity(2, "meter"), "per_meter")

    monkeypatch.setattr(engine.registry, "_inverse_categories", set())
    with pytest.raises(IncompatibleUnitsError):
        engine.convert(Quantity(1, "meter_per_cubic_meter"), "liter_per_100_kilometer")
    # both sides declared as consumption
    q = engine.convert(Quantity(30, "mile_per_gallon"), "liter_per_100_kilometer")
    assert q.unit == "liter_per_100_kilometer"


def test_zero_into_reciprocal_unit(engine):
    with pytest.raises(ZeroDivisionError):
        engine.convert(Quantity(0, "mile_per_gallon"), "liter_per_100_kilometer")


# -------------------------------
# Category fallback
# -------------------------------

def test_custom_unit_defined_on_another_unit(quarter_engine):
    assert quarter_engine.convert(Quantity(1, "quarter"), "month") == Quantity(3, "month")
    assert quarter_engine.convert(Quantity(6, "month"), "quarter") == Quantity(2, "quarter")
    assert quarter_engine.category_of("quarter") == "duration"


@pytest.mark.parametrize(
    "source, target",
    [
        ("meter", "liter"),
        ("kilogram", "second"),
        ("celsius", "meter"),
        ("curr_usd", "curr_eur"),
        ("meter", "per_meter"),
        ("second", "per_second"),
        ("per_second", "second"),
    ],
)
def test_incompatible(engine, source, target):
    with pytest.raises(IncompatibleUnitsError) as err:
        engine.convert(Quantity(1, source), target)
    assert err.value.to_unit == engine.canonical_name(target)


def test_unknown_units(engine):
    with pytest.raises(UnknownUnitError):
        engine.convert(Quantity(1, "frobnitz"), "meter")
    with pytest.raises(UnitNotConvertibleError):
        engine.convert(Quantity(1, "generic"), "kelvin")


def test_convert_requires_a_quantity(engine):
    with pytest.raises(TypeError):
        engine.convert(5, "meter")


# -------------------------------
# Numeric kinds
# -------------------------------

def test_numeric_kind_is_kept(engine):
    as_float = engine.convert(Quantity(1.5, "foot"), "meter")
    assert isinstance(as_float.value, float) and as_float.value == pytest.approx(0.4572)

    as_decimal = engine.convert(Quantity(Decimal("1.5"), "foot"), "meter")
    assert as_decimal.value == Decimal("0.4572")

    as_fraction = engine.convert(Quantity(Fraction(1, 2), "kilometer"), "meter")
    assert isinstance(as_fraction.value, Fraction) and as_fraction.value == 500

    as_int = engine.convert(Quantity(2, "kilometer"), "meter")
    assert isinstance(as_int.value, int) and as_int.value == 2000


def test_int_promoted_to_fraction_when_not_integral(engine):
    q = engine.convert(Quantity(1, "inch"), "foot")
    assert q.value == Fraction(1, 12) and isinstance(q.value, Fraction)


def test_same_unit_returns_value_unchanged(engine):
    q = engine.convert(Quantity(Decimal("1.10"), "metre"), "meter")
    assert str(q.value) == "1.10"
    assert q.unit == "meter"


# -------------------------------
# Queries
# -------------------------------

def test_convert_to_base(engine):
    assert engine.convert_to_base(Quantity(1, "kilometer_per_hour")) == Quantity(Fraction(5, 18), "meter_per_second")
    assert engine.convert_to_base(Quantity(2, "liter")) == Quantity(Fraction(1, 500), "cubic_meter")


@pytest.mark.parametrize(
    "unit, base",
    [
        ("kilometer", "meter"),
        ("newton", "kilogram_meter_per_square_second"),
        ("mile_per_gallon", "meter_per_cubic_meter"),
        ("liter_per_kilometer", "cubic_meter_per_meter"),
        ("foot_per_minute", "meter_per_second"),
        ("curr_usd_per_gallon", "curr_usd_per_cubic_meter"),
    ],
)
def test_base_unit(engine, unit, base):
    assert engine.base_unit(unit) == base


@pytest.mark.parametrize(
    "unit, category",
    [
        ("kilometer", "length"),
        ("foot_per_minute", "speed"),
        ("mile_per_gallon", "consumption"),
        ("curr_usd", "currency"),
        ("kilowatt_hour", "energy"),
        ("hour_kilowatt", "energy"),
        ("square_mile", "area"),
    ],
)
def test_category_of(engine, unit, category):
    assert engine.category_of(unit) == category


def test_category_of_unknown_combination(engine):
    with pytest.raises(UnknownCategoryError):
        engine.category_of("meter_second")


@pytest.mark.parametrize(
    "unit, convertible",
    [("kilometer", True), ("foot_per_fortnight", False), ("generic", False), ("yottabyte_per_hour", True)],
)
def test_is_convertible(engine, unit, convertible):
    assert engine.is_convertible(unit) is convertible
