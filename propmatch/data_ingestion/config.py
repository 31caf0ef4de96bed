from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _default_raw_path() -> Path:
    override = os.getenv("PROPMATCH_RAW_DATA")
    return Path(override) if override else _DATA_DIR / "raw" / "properties.json"


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the listing ingestion pipeline.
    """

    raw_data_path: Path = field(default_factory=_default_raw_path)
    processed_data_dir: Path = _DATA_DIR / "processed"
    processed_filename: str = "listings.csv"
    placeholder_image: str = "/placeholder.svg"

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
