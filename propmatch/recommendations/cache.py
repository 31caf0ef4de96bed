from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from typing import Any, Sequence

from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .data_store import get_listings
from .engine import SimilarityEngine
from .filters import ListingFilters, filter_listings
from .models import Listing

logger = logging.getLogger(__name__)

_engines: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()
_hits: int = 0
_misses: int = 0


def _make_key(filters: ListingFilters, corpus: Sequence[Listing]) -> str:
    normalized = json.dumps(
        {"filters": filters.cache_key(), "corpus": hash(tuple(corpus))},
        sort_keys=True,
    )
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def _evict(now: float, ttl: float, max_entries: int) -> None:
    # Caller holds _lock.
    expired = [k for k, e in _engines.items() if now - e["created_at"] >= ttl]
    for k in expired:
        _engines.pop(k, None)
    while _engines and len(_engines) >= max_entries:
        oldest = min(_engines, key=lambda k: _engines[k]["created_at"])
        _engines.pop(oldest, None)


def get_engine(
    filters: ListingFilters,
    corpus: Sequence[Listing] | None = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> SimilarityEngine | None:
    """Return an engine over the filtered corpus, or ``None`` if it is empty.

    Engines are memoised per filter combination so repeated requests against
    the same view reuse the computed statistics.  Safe to call from the
    FastAPI thread pool.
    """
    global _hits, _misses
    if corpus is None:
        corpus = get_listings()

    key = _make_key(filters, corpus)
    with _lock:
        entry = _engines.get(key)
        if entry and time.time() - entry["created_at"] < config.cache_ttl:
            _hits += 1
            return entry["engine"]
        _engines.pop(key, None)
        _misses += 1

    filtered = filter_listings(corpus, filters)
    if not filtered:
        logger.warning("No listings match filters %s; no engine built", filters.cache_key())
        return None

    engine = SimilarityEngine(filtered)
    with _lock:
        now = time.time()
        _evict(now, config.cache_ttl, config.cache_max_entries)
        _engines[key] = {"engine": engine, "created_at": now}
    return engine


def get_cache_stats() -> dict:
    with _lock:
        total = _hits + _misses
        return {
            "size": len(_engines),
            "hits": _hits,
            "misses": _misses,
            "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
        }


def clear_cache() -> None:
    global _hits, _misses
    with _lock:
        _engines.clear()
        _hits = 0
        _misses = 0
