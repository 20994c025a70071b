# pytest tests for unitalgebra.units.registry
#
# These tests exercise normalization, aliases, registration rules, the base
# unit order and the canonicalization cache. They use an isolated registry
# instance built from the packaged units table.

import threading
from fractions import Fraction

import pytest

import unitalgebra.units.registry as regmod
from unitalgebra.core.exceptions import UnknownUnitError
from unitalgebra.units.registry import AtomicUnit, UnitsRegistry, build_registry, normalize_name


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Meter", "meter"),
        ("  Kilo-Meter  per Hour ", "kilo_meter_per_hour"),
        ("meter__per___second", "meter_per_second"),
        ("-meter-", "meter"),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


def test_normalize_name_requires_str():
    with pytest.raises(TypeError):
        normalize_name(3)


def test_spelling_variants(reg):
    assert reg.normalize("Kilometre") == "kilometer"
    assert reg.normalize("litre") == "liter"


# ---------------------------------------------------------------------------
# Lookup and registration
# ---------------------------------------------------------------------------

def test_get_and_has(reg):
    assert reg.get("meter") == AtomicUnit("meter", "length", frozenset({"metric", "si"}))
    assert reg.get("metric_ton").name == "tonne"
    assert reg.has("Meter")
    assert "foot" in reg
    assert "frobnitz" not in reg
    with pytest.raises(UnknownUnitError):
        reg.get("frobnitz")


def test_register_duplicate_raises(reg):
    with pytest.raises(ValueError):
        reg.register(AtomicUnit("meter", "length"))
    reg.register(AtomicUnit("meter", "length", frozenset({"metric"})), replace=True)
    assert reg.get("meter").systems == frozenset({"metric"})


def test_register_requires_normalized_name(reg):
    with pytest.raises(ValueError):
        reg.register(AtomicUnit("Smoot", "length"))


def test_register_alias_over_unit_raises(reg):
    with pytest.raises(ValueError):
        reg.register_alias("foot", "meter")


def test_registered_unit_is_parsed_and_localizable(reg):
    with pytest.raises(UnknownUnitError):
        reg.canonicalize("kilosmoot")
    reg.register(AtomicUnit("smoot", "length", frozenset({"ussystem"})))
    assert reg.canonicalize("kilosmoot").name == "kilosmoot"
    assert reg.localizable()["smoot"] == "length"


def test_non_prefixable(reg):
    assert reg.is_non_prefixable("Hour")
    assert not reg.is_non_prefixable("meter")


def test_currencies(reg):
    assert "usd" in reg.currencies
    reg.set_currencies(["XTS"])
    assert reg.currencies == frozenset({"xts"})


def test_inverse_categories(reg):
    assert reg.are_inverse_categories("consumption", "consumption_inverse")
    assert reg.are_inverse_categories("consumption_inverse", "consumption")
    assert not reg.are_inverse_categories("length", "length")
    assert not reg.are_inverse_categories("length", "consumption")


def test_declared_category(reg):
    assert reg.declared_category("mile_per_gallon") == "consumption"
    assert reg.declared_category("meter") == "length"
    assert reg.declared_category("meter_second") is None


# ---------------------------------------------------------------------------
# Base units and ordering
# ---------------------------------------------------------------------------

def test_base_units(reg):
    assert reg.base_units[0] == ("luminous_intensity", "candela")
    assert reg.category_for_base("cubic_meter_per_meter") == "consumption"
    assert reg.category_for_base("meter_second") is None
    assert reg.base_unit_for_category("length") == "meter"
    assert reg.base_unit_for_category("nonsense") is None
    assert reg.is_base_unit("kilogram")
    assert not reg.is_base_unit("gram")
    assert "meter_per_cubic_meter" in reg.base_unit_names()


def test_base_index_and_prefix_rank(reg):
    assert reg.base_index("foot") == reg.base_index("meter") == 2
    assert reg.base_index("nope") == len(reg.base_units)
    assert reg.prefix_rank("kilo") < reg.prefix_rank("") < reg.prefix_rank("milli")
    assert reg.order_for("meter", "kilo") == (2, 2, Fraction(-1000))


def test_units_without_base_position_sort_last(reg):
    reg.register(AtomicUnit("widget", "gizmo"))
    assert reg.canonicalize("widget_meter").name == "meter_widget"


# ---------------------------------------------------------------------------
# Canonicalization cache and threads
# ---------------------------------------------------------------------------

def test_canonicalize_is_memoized(reg):
    assert reg.canonicalize("meter_per_second") is reg.canonicalize("meter_per_second")


def test_spelling_variants_share_a_cache_entry(reg):
    first = reg.canonicalize("Meter-per-Second")
    assert reg.canonicalize("meter per second") is first
    assert len(reg._cache) == 1


def test_canonicalization_cache_is_bounded(reg, monkeypatch):
    monkeypatch.setattr(regmod, "CANONICAL_CACHE_SIZE", 8)
    for n in range(1, 51):
        reg.canonicalize(f"{n}_gram")
    assert len(reg._cache) == 8
    # least recently used entries go first
    assert "50_gram" in reg._cache
    assert "1_gram" not in reg._cache
    assert reg.canonicalize("1_gram").name == "1_gram"


def test_concurrent_canonicalization(reg):
    names = ["kilometer_per_hour", "square_foot", "mile_per_gallon", "hour_kilowatt"] * 25
    results = {}
    errors = []

    def work(i, name):
        try:
            results[i] = reg.canonicalize(name)
        except Exception as exc:  # pragma: no cover - reported below
            errors.append(exc)

    threads = [threading.Thread(target=work, args=(i, n)) for i, n in enumerate(names)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    for i, name in enumerate(names):
        assert results[i] == reg.canonicalize(name)


# ---------------------------------------------------------------------------
# Building from config
# ---------------------------------------------------------------------------

def test_build_registry_from_config():
    reg = build_registry(
        {
            "base_units": [["length", "meter"], ["duration", "second"]],
            "units": {"length": {"meter": ["si"]}, "duration": {"second": ["si"]}},
            "localizable": {"speed": ["meter_per_second"]},
            "aliases": {"metre_per_sec": "meter_per_second"},
        }
    )
    assert isinstance(reg, UnitsRegistry)
    assert reg.canonicalize("second_meter").name == "meter_second"
    assert reg.canonicalize("metre_per_sec").name == "meter_per_second"
    assert reg.localizable() == {"meter": "length", "second": "duration", "meter_per_second": "speed"}


def test_bootstrap_builds_independent_registries():
    a = regmod._bootstrap_default_registry()
    b = regmod._bootstrap_default_registry()
    a.register(AtomicUnit("smoot", "length"))
    assert "smoot" in a and "smoot" not in b
