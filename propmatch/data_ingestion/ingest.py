from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)


CANONICAL_COLUMNS: List[str] = [
    "id",
    "title",
    "city",
    "type",
    "price",
    "square_meters",
    "bedrooms",
    "image",
]

# Canonical column -> accepted raw column names, first match wins.
RAW_COLUMN_CANDIDATES: dict[str, List[str]] = {
    "id": ["id"],
    "title": ["titulo", "title"],
    "city": ["ciudad", "city"],
    "type": ["tipo", "type"],
    "price": ["precio", "price"],
    "square_meters": ["metros_cuadrados", "square_meters", "squareMeters"],
    "bedrooms": ["ambientes", "bedrooms"],
    "image": ["imagen", "image"],
}

_REQUIRED = ["id", "city", "type", "price", "square_meters", "bedrooms"]


def _normalize_id(value: object) -> str | None:
    if value is None or pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def _normalize_text(value: object) -> str | None:
    if value is None or pd.isna(value):
        return None
    text = str(value)
    return text if text.strip() else None


def load_raw_listings(path: Path) -> pd.DataFrame:
    """Read a raw listings export (a JSON array of records)."""
    return pd.read_json(path, orient="records", convert_dates=False)


def normalize_listings(
    raw: pd.DataFrame, config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> pd.DataFrame:
    """
    Map a raw listings frame onto ``CANONICAL_COLUMNS``.

    Rows missing an id, city or type, with a non-positive price or size, or
    with a negative or non-integer bedroom count are dropped.
    """

    def _first_present(columns: List[str]) -> str | None:
        for col in columns:
            if col in raw.columns:
                return col
        return None

    canonical = pd.DataFrame(index=raw.index)
    for target, candidates in RAW_COLUMN_CANDIDATES.items():
        col = _first_present(candidates)
        canonical[target] = raw[col] if col else pd.NA

    canonical["id"] = canonical["id"].apply(_normalize_id)
    canonical["title"] = canonical["title"].apply(_normalize_text).fillna("")
    canonical["city"] = canonical["city"].apply(_normalize_text)
    canonical["type"] = canonical["type"].apply(_normalize_text)
    canonical["image"] = (
        canonical["image"].apply(_normalize_text).fillna(config.placeholder_image)
    )
    for col in ("price", "square_meters", "bedrooms"):
        canonical[col] = pd.to_numeric(canonical[col], errors="coerce")

    valid = canonical[_REQUIRED].notna().all(axis=1)
    valid &= canonical["price"] > 0
    valid &= canonical["square_meters"] > 0
    valid &= canonical["bedrooms"] >= 0
    valid &= canonical["bedrooms"].fillna(-1) % 1 == 0

    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Dropped %d malformed listing rows during ingestion", dropped)

    canonical = canonical.loc[valid].copy()
    canonical["bedrooms"] = canonical["bedrooms"].astype(int)
    canonical["price"] = canonical["price"].astype(float)
    canonical["square_meters"] = canonical["square_meters"].astype(float)

    duplicated = canonical["id"].duplicated(keep="first")
    if duplicated.any():
        logger.warning("Dropped %d listings with duplicate ids", int(duplicated.sum()))
        canonical = canonical.loc[~duplicated]

    return canonical[CANONICAL_COLUMNS].reset_index(drop=True)


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the ingestion pipeline.

    Steps:
    - Read the raw listings export.
    - Map raw fields into the canonical Listing schema.
    - Persist cleaned data as CSV for the recommendation service.
    """
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    raw = load_raw_listings(config.raw_data_path)
    canonical = normalize_listings(raw, config)

    output_path = config.processed_path
    canonical.to_csv(output_path, index=False)
    logger.info("Wrote %d listings to %s", len(canonical), output_path)
    return output_path


if __name__ == "__main__":
    path = run_ingestion()
    print(f"Ingestion complete. Processed data saved to: {path}")
