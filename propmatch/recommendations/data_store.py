from __future__ import annotations

import logging

import pandas as pd

from ..data_ingestion.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from ..data_ingestion.ingest import load_raw_listings, normalize_listings
from .models import Listing

logger = logging.getLogger(__name__)

_listings: tuple[Listing, ...] | None = None
_by_id: dict[str, Listing] = {}


def _load_frame(config: IngestionConfig) -> pd.DataFrame:
    # Prefer the processed CSV; fall back to normalising the raw export.
    if config.processed_path.exists():
        df = pd.read_csv(
            config.processed_path,
            dtype={"id": str, "title": str, "city": str, "type": str, "image": str},
        )
        df["title"] = df["title"].fillna("")
        df["image"] = df["image"].fillna(config.placeholder_image)
        return df
    return normalize_listings(load_raw_listings(config.raw_data_path), config)


def frame_to_listings(df: pd.DataFrame) -> tuple[Listing, ...]:
    """Convert a canonical listings frame into ``Listing`` models."""
    return tuple(Listing(**record) for record in df.to_dict(orient="records"))


def load_listings(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> tuple[Listing, ...]:
    """(Re)load the corpus from disk and replace the in-memory copy."""
    global _listings, _by_id
    _listings = frame_to_listings(_load_frame(config))
    _by_id = {listing.id: listing for listing in _listings}
    logger.info("Loaded %d listings", len(_listings))
    return _listings


def get_listings() -> tuple[Listing, ...]:
    """Return the in-memory listing corpus, loading it on first call."""
    if _listings is None:
        return load_listings()
    return _listings


def get_listing(listing_id: str) -> Listing | None:
    get_listings()
    return _by_id.get(listing_id)
