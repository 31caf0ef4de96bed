from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query

from .recommendations.cache import get_cache_stats, get_engine
from .recommendations.config import DEFAULT_RECOMMENDATION_CONFIG as CONFIG
from .recommendations.data_store import get_listing, get_listings
from .recommendations.filters import (
    ALL,
    MIN_PAGE,
    ListingFilters,
    available_cities,
    available_types,
    filter_listings,
    paginate,
)
from .recommendations.models import (
    Listing,
    ListingPage,
    MarketStats,
    MetadataResponse,
    RecommendationResponse,
)

app = FastAPI(title="Listing Recommendation API", version="1.0.0")


def listing_filters(
    search: str = Query(default="", max_length=200),
    city: str = Query(default=ALL),
    type: str = Query(default=ALL),
) -> ListingFilters:
    return ListingFilters(search=search, city=city, type=type)


def _require_listing(listing_id: str) -> Listing:
    listing = get_listing(listing_id)
    if listing is None:
        raise HTTPException(status_code=404, detail=f"Listing {listing_id} not found")
    return listing


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata", response_model=MetadataResponse)
def metadata() -> MetadataResponse:
    listings = get_listings()
    return MetadataResponse(
        cities=available_cities(listings),
        types=available_types(listings),
        total_listings=len(listings),
    )


# ── Listings ─────────────────────────────────────────────────────────────


@app.get("/listings", response_model=ListingPage)
def listings(
    filters: ListingFilters = Depends(listing_filters),
    page: int = Query(default=MIN_PAGE, ge=MIN_PAGE, le=CONFIG.max_page),
    page_size: int = Query(default=CONFIG.default_page_size, ge=1, le=CONFIG.max_page_size),
) -> ListingPage:
    return paginate(filter_listings(get_listings(), filters), page, page_size)


@app.get("/listings/{listing_id}", response_model=Listing)
def listing_detail(listing_id: str) -> Listing:
    return _require_listing(listing_id)


# ── Recommendations ──────────────────────────────────────────────────────


@app.get("/listings/{listing_id}/recommendations", response_model=RecommendationResponse)
def recommendations(
    listing_id: str,
    filters: ListingFilters = Depends(listing_filters),
    limit: int = Query(default=CONFIG.default_limit, ge=0, le=CONFIG.max_limit),
) -> RecommendationResponse:
    target = _require_listing(listing_id)

    # Recommendations are scoped to the currently filtered view.
    engine = get_engine(filters)
    if engine is None:
        return RecommendationResponse(target_id=target.id, recommendations=[], total_candidates=0)

    candidates = engine.candidates_for(target)
    return RecommendationResponse(
        target_id=target.id,
        recommendations=engine.rank(target, candidates, limit),
        total_candidates=len(candidates),
    )


@app.get("/listings/{listing_id}/market-stats", response_model=MarketStats | None)
def market_stats(
    listing_id: str,
    filters: ListingFilters = Depends(listing_filters),
) -> MarketStats | None:
    target = _require_listing(listing_id)
    engine = get_engine(filters)
    if engine is None:
        return None
    return engine.market_stats(target)


# ── Diagnostics ──────────────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()
