from fractions import Fraction

import pytest

from unitalgebra.conversion.factors import (
    FunctionFactor,
    LinearFactor,
    base_table_from_config,
    factor_from_config,
    with_identity_entries,
)


def test_linear_factor_from_config():
    assert factor_from_config("inch", {"base_unit": "meter", "factor": "0.0254"}) == LinearFactor(
        "meter", Fraction(127, 5000)
    )
    assert factor_from_config("meter", {"base_unit": "meter"}) == LinearFactor("meter")


def test_float_factor_is_exact():
    assert factor_from_config("foot", {"base_unit": "meter", "factor": 0.3048}).factor == Fraction(381, 1250)


def test_function_factor_from_config():
    celsius = factor_from_config("celsius", {"base_unit": "kelvin", "function": "celsius"})
    assert isinstance(celsius, FunctionFactor)
    assert not celsius.is_scalar
    assert celsius.to_base(Fraction(0)) == Fraction(27315, 100)
    assert celsius.from_base(Fraction(27315, 100)) == 0


def test_fahrenheit_function():
    fahrenheit = factor_from_config("fahrenheit", {"base_unit": "kelvin", "function": "fahrenheit"})
    assert fahrenheit.to_base(Fraction(212)) == Fraction(37315, 100)
    assert fahrenheit.from_base(Fraction(27315, 100)) == 32


@pytest.mark.parametrize(
    "entry",
    [
        {"factor": 2},
        {"base_unit": "kelvin", "function": "celsius", "factor": 1},
        {"base_unit": "kelvin", "function": "reaumur"},
        {"base_unit": "meter", "factor": 0},
    ],
)
def test_invalid_entries(entry):
    with pytest.raises(ValueError):
        factor_from_config("x", entry)


def test_linear_factor_round_trip():
    f = LinearFactor("kelvin", Fraction(5, 9), Fraction(10))
    assert not f.is_scalar
    assert f.from_base(f.to_base(Fraction(7, 3))) == Fraction(7, 3)


def test_then_composes_onward():
    quarter = LinearFactor("year", Fraction(1, 4))
    year = LinearFactor("second", Fraction(31556952))
    assert quarter.then(year) == LinearFactor("second", Fraction(31556952, 4))


def test_with_identity_entries():
    table = base_table_from_config({"foot": {"base_unit": "meter", "factor": "0.3048"}})
    completed = with_identity_entries(table)
    assert completed["meter"] == LinearFactor("meter")
    assert "meter" not in table
