from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RecommendationConfig:
    default_limit: int = int(os.getenv("PROPMATCH_DEFAULT_LIMIT", "3"))
    max_limit: int = 20
    default_page_size: int = 10
    max_page_size: int = 50
    max_page: int = 100
    cache_ttl: float = float(os.getenv("PROPMATCH_CACHE_TTL", "300"))
    cache_max_entries: int = 128


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
