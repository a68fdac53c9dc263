"""
Catalog configuration.

The raw export is whatever the booking application dumps for its event
packages; the processed CSV is what the recommender reads.
"""

from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Configuration for the package catalog ingestion and loading.
    """

    raw_export_path: Path = _DATA_DIR / "raw" / "event_packages.csv"
    processed_data_dir: Path = _DATA_DIR / "processed"
    processed_filename: str = "packages.csv"

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_CATALOG_CONFIG = CatalogConfig()
