from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..recommendations.cache import clear_cache
from ..recommendations.models import Package
from ..recommendations.scoring import normalize_text
from .config import DEFAULT_CATALOG_CONFIG

logger = logging.getLogger(__name__)

_df: pd.DataFrame | None = None
_catalog_path: Path = DEFAULT_CATALOG_CONFIG.processed_path


def _load(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path)

    for column in ("name", "category", "theme", "description", "inclusions"):
        df[column] = df[column].fillna("").astype(str)

    # Lowercase category for case-insensitive lookup
    df["category_lower"] = df["category"].map(normalize_text)

    logger.info("Loaded %d packages from %s", len(df), path)
    return df


def get_dataframe() -> pd.DataFrame:
    """Return the in-memory package DataFrame, loading it on first call."""
    global _df
    if _df is None:
        _df = _load(_catalog_path)
    return _df


def _row_to_package(row: pd.Series) -> Package:
    return Package(
        id=int(row["id"]),
        name=row["name"],
        category=row["category"],
        price=float(row["price"]) if pd.notna(row["price"]) else None,
        capacity=int(row["capacity"]) if pd.notna(row["capacity"]) else None,
        theme=row["theme"],
        description=row["description"],
        inclusions=row["inclusions"],
    )


def get_packages(category: str | None = None) -> list[Package]:
    """Return catalog packages, optionally only those of ``category``."""
    df = get_dataframe()
    if category and category.strip():
        df = df[df["category_lower"] == normalize_text(category)]
    return [_row_to_package(row) for _, row in df.sort_values("id").iterrows()]


def get_categories() -> list[str]:
    df = get_dataframe()
    return sorted(c for c in df["category_lower"].unique().tolist() if c)


def reload(path: Path | None = None) -> pd.DataFrame:
    """Re-read the catalog (optionally from a new file) and drop cached results."""
    global _df, _catalog_path
    if path is not None:
        _catalog_path = path
    _df = _load(_catalog_path)
    clear_cache()
    return _df
