from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig


CANONICAL_COLUMNS: List[str] = [
    "id",
    "name",
    "category",
    "price",
    "capacity",
    "theme",
    "description",
    "inclusions",
]

_TEXT_COLUMNS = ["name", "category", "theme", "description", "inclusions"]


def _normalize_price(price: float | int | str | None) -> float | None:
    if price is None:
        return None
    raw = str(price).strip()
    # Exports sometimes carry a currency sign and thousands separators ("₱45,000.00")
    raw = raw.lstrip("₱$").replace(",", "").strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value or value < 0:
        return None
    return value


def _normalize_capacity(capacity: float | int | str | None) -> int | None:
    value = _normalize_price(capacity)
    if value is None or value < 1:
        return None
    return int(value)


def normalize_packages(df: pd.DataFrame) -> pd.DataFrame:
    """Map a raw package export onto the canonical catalog columns."""

    def _first_present(columns: List[str]) -> str | None:
        for col in columns:
            if col in df.columns:
                return col
        return None

    col_id = _first_present(["package_id", "id"])
    col_name = _first_present(["package_name", "name"])
    col_category = _first_present(["package_category", "category", "type", "event_type"])
    col_price = _first_present(["package_price", "price"])
    col_capacity = _first_present(["capacity", "package_capacity", "max_guests"])
    col_theme = _first_present(["theme", "package_theme", "motif"])
    col_description = _first_present(["package_description", "description"])
    col_inclusions = _first_present(["package_inclusions", "inclusions"])

    canonical = pd.DataFrame(index=df.index)
    if col_id:
        canonical["id"] = pd.to_numeric(df[col_id], errors="coerce")
    else:
        canonical["id"] = pd.Series(range(1, len(df) + 1), index=df.index)

    for column, source in [
        ("name", col_name),
        ("category", col_category),
        ("theme", col_theme),
        ("description", col_description),
        ("inclusions", col_inclusions),
    ]:
        canonical[column] = df[source].fillna("").astype(str).str.strip() if source else ""

    canonical["category"] = canonical["category"].str.lower()
    canonical["price"] = df[col_price].apply(_normalize_price) if col_price else None
    canonical["capacity"] = df[col_capacity].apply(_normalize_capacity) if col_capacity else None

    # Rows without a usable id cannot be referenced by recommendations
    canonical = canonical.dropna(subset=["id"])
    canonical["id"] = canonical["id"].astype(int)
    canonical["capacity"] = canonical["capacity"].astype("Int64")
    canonical = canonical.drop_duplicates(subset=["id"], keep="last")

    return canonical[CANONICAL_COLUMNS].sort_values("id").reset_index(drop=True)


def run_ingestion(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> Path:
    """
    Execute the catalog ingestion pipeline.

    Steps:
    - Read the raw package export.
    - Map raw fields into the canonical Package schema.
    - Persist cleaned data as CSV for the recommender.
    """
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    raw = pd.read_csv(config.raw_export_path)
    canonical = normalize_packages(raw)

    output_path = config.processed_path
    canonical.to_csv(output_path, index=False)
    return output_path


if __name__ == "__main__":
    path = run_ingestion()
    print(f"Ingestion complete. Processed catalog saved to: {path}")
