"""
unitalgebra.units.data
======================

Loading of the static unit data tables.

The tables are YAML files shipped in ``unitalgebra/data``. A different
directory can be supplied to load alternative data; tables that the engine
cannot work without (``units`` and ``conversions``) must exist there, the
others fall back to empty tables with a warning.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

REQUIRED_TABLES = ("units", "conversions")
OPTIONAL_TABLES = ("preferences", "territories", "symbols")

PathLike = Union[str, Path]


def load_table(name: str, data_dir: Optional[PathLike] = None, *, required: bool = True) -> Dict[str, Any]:
    """Load ``<data_dir>/<name>.yaml`` and return its top-level mapping."""
    path = Path(data_dir) if data_dir is not None else DATA_DIR
    path = path / f"{name}.yaml"
    if not path.exists():
        if required:
            raise FileNotFoundError(f"Unit data table not found: {path}")
        logger.warning("Unit data table %s not found; using an empty table", path)
        return {}

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Unit data table {path} must contain a mapping at the top level")

    logger.debug("Loaded unit data table %s (%d entries)", path, len(data))
    return data


@lru_cache(maxsize=1)
def _default_tables() -> Dict[str, Dict[str, Any]]:
    return _load_all(None)


def _load_all(data_dir: Optional[PathLike]) -> Dict[str, Dict[str, Any]]:
    tables = {name: load_table(name, data_dir) for name in REQUIRED_TABLES}
    for name in OPTIONAL_TABLES:
        tables[name] = load_table(name, data_dir, required=False)
    return tables


def load_tables(data_dir: Optional[PathLike] = None) -> Dict[str, Dict[str, Any]]:
    """Load every data table. The packaged tables are read once and cached."""
    if data_dir is None:
        return _default_tables()
    return _load_all(data_dir)
