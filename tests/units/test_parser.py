# tests/units/test_parser.py
import pytest

from unitalgebra.core.compound import CURRENCY, CompoundUnit
from unitalgebra.core.exceptions import UnknownUnitError
from unitalgebra.units.parser import _split_per, _UnitNameTokenizer, parse_unit_name


# --------------------------
# Tokenizer
# --------------------------

def test_tokenize_single_stream(reg):
    parts = _UnitNameTokenizer("square_kilometer_hour", reg, "square_kilometer_hour").parse()
    assert [(p.prefix, p.atom, p.power) for p in parts] == [("kilo", "meter", 2), ("", "hour", 1)]


def test_tokenize_longest_unit_wins(reg):
    parts = _UnitNameTokenizer("fluid_ounce_imperial", reg, "fluid_ounce_imperial").parse()
    assert [p.atom for p in parts] == ["fluid_ounce_imperial"]


def test_split_per():
    assert _split_per("meter_per_second", "x") == ("meter", "second")
    assert _split_per("per_second", "x") == ("", "second")
    assert _split_per("meter", "x") == ("meter", "")


# --------------------------
# Canonical names
# --------------------------

@pytest.mark.parametrize(
    "raw, canonical",
    [
        ("meter", "meter"),
        ("meter-meter", "square_meter"),
        ("square_meter_meter", "cubic_meter"),
        ("meter_kilometer", "kilometer_meter"),
        ("second_meter", "meter_second"),
        ("kilogram-meter-per-square-second", "kilogram_meter_per_square_second"),
        ("Meter Per Second", "meter_per_second"),
        ("metre", "meter"),
        ("centilitre", "centiliter"),
        ("metric_ton", "tonne"),
        ("metric_ton_per_hour", "tonne_per_hour"),
        ("part_per_million", "permillion"),
        ("degree_celsius", "celsius"),
        ("meter_per_second_squared", "meter_per_square_second"),
        ("liter_per_100_kilometer", "liter_per_100_kilometer"),
        ("per_second", "per_second"),
        ("pow4_meter", "pow4_meter"),
        ("kibibyte", "kibibyte"),
        ("quectometer", "quectometer"),
        ("gallon_curr_usd", "curr_usd_gallon"),
        ("curr_eur_per_liter", "curr_eur_per_liter"),
        ("acre_foot", "foot_acre"),
        ("kilowatt_hour", "hour_kilowatt"),
        ("ampere_second_kilogram", "kilogram_second_ampere"),
    ],
)
def test_canonical_names(reg, raw, canonical):
    assert parse_unit_name(raw, reg).name == canonical


@pytest.mark.parametrize(
    "raw",
    [
        "kilometer_per_hour",
        "mile_per_gallon_imperial",
        "pound_force_per_square_inch",
        "kilogram_square_meter_per_cubic_second_square_ampere",
        "liter_per_100_kilometer",
        "curr_usd_per_gallon",
        "meter_kilometer_millimeter",
        "square_meter_square_meter",
        "per_square_second",
        "hour_kilowatt",
    ],
)
def test_canonicalization_is_idempotent(reg, raw):
    once = reg.canonicalize(raw)
    assert reg.canonicalize(once.name) == once


def test_separators_are_interchangeable(reg):
    names = ["kilometer per hour", "kilometer-per-hour", "KILOMETER_PER_HOUR", " kilometer  per - hour "]
    assert len({parse_unit_name(n, reg) for n in names}) == 1


def test_empty_name_is_dimensionless(reg):
    assert parse_unit_name("", reg) == CompoundUnit()


def test_currency_part(reg):
    unit = parse_unit_name("curr_gbp", reg)
    assert unit.numerator[0].kind == CURRENCY


# --------------------------
# Errors
# --------------------------

@pytest.mark.parametrize(
    "raw",
    [
        "frobnitz",
        "meter_per_second_per_second",
        "per_meter_per_second",
        "pow2_meter",
        "pow10_meter",
        "square",
        "kilominute",
        "millikilogram",
        "kilokilometer",
        "curr_xyz",
        "meters",
    ],
)
def test_unknown_units_raise(reg, raw):
    with pytest.raises(UnknownUnitError):
        parse_unit_name(raw, reg)


def test_unknown_unit_is_a_value_error(reg):
    with pytest.raises(ValueError):
        parse_unit_name("frobnitz", reg)
