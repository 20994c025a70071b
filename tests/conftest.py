# tests/conftest.py
import pytest

import unitalgebra.engine as engine_mod
import unitalgebra.units.registry as regmod


@pytest.fixture(scope="session")
def engine():
    return engine_mod.DEFAULT_ENGINE


@pytest.fixture
def reg():
    """Fresh registry built from the packaged units table."""
    return regmod._bootstrap_default_registry()


@pytest.fixture
def restore_default_engine(monkeypatch):
    """Let a test call initialize() without leaking the new engine."""
    monkeypatch.setattr(engine_mod, "DEFAULT_ENGINE", engine_mod.DEFAULT_ENGINE)
    yield


QUARTER = {"name": "quarter", "category": "duration", "base_unit": "year", "factor": "1/4"}


@pytest.fixture
def quarter_engine():
    return engine_mod.UnitEngine.build(additional_units=[QUARTER])
