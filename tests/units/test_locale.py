import pytest

from unitalgebra.core.exceptions import LocaleError, UnknownTerritoryError
from unitalgebra.units.locale import Territories, build_territories


@pytest.fixture
def territories(engine):
    return engine.territories


@pytest.mark.parametrize(
    "locale, territory",
    [
        ("en-AU", "AU"),
        ("en_GB", "GB"),
        ("fr-FR", "FR"),
        ("zh-Hant-TW", "TW"),
        ("es-419", "419"),
        ("en", "US"),
        ("de", "DE"),
        ("nb", "NO"),
        ("tlh", "001"),
        ("en-US-u-rg-gbzzzz", "GB"),
        ("en-u-ca-gregory-rg-auzzzz", "AU"),
        ("en-US-u-ca-gregory", "US"),
    ],
)
def test_territory_from_locale(territories, locale, territory):
    assert territories.from_locale(locale) == territory


@pytest.mark.parametrize("locale", ["", "e", "!!", "en--US", "en-US-"])
def test_unparseable_locale(territories, locale):
    with pytest.raises(LocaleError):
        territories.from_locale(locale)


def test_locale_must_be_a_string(territories):
    with pytest.raises(LocaleError):
        territories.from_locale(None)


def test_unknown_territory_in_locale(territories):
    with pytest.raises(UnknownTerritoryError):
        territories.from_locale("en-QQ")


def test_validate(territories):
    assert territories.validate("us") == "US"
    assert territories.validate("001") == "001"
    with pytest.raises(UnknownTerritoryError):
        territories.validate("QQ")


def test_world_is_always_known():
    assert Territories().validate("001") == "001"


def test_build_territories_includes_measurement_system_keys():
    t = build_territories({"measurement_system": {"XA": "metric"}, "likely_regions": {"xx": "XA"}})
    assert t.validate("XA") == "XA"
    assert t.from_locale("xx") == "XA"
