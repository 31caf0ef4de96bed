from __future__ import annotations

import math
from typing import Iterable, Sequence

from pydantic import BaseModel, Field

from .models import Listing, ListingPage

ALL = "all"
MIN_PAGE = 1


class ListingFilters(BaseModel):
    search: str = Field(default="", description="Substring of the title or city")
    city: str = Field(default=ALL, description='Exact city, or "all"')
    type: str = Field(default=ALL, description='Exact property type, or "all"')

    def cache_key(self) -> tuple[str, str, str]:
        return (self.search.strip().lower(), self.city, self.type)


def matches(listing: Listing, filters: ListingFilters) -> bool:
    term = filters.search.strip().lower()
    matches_search = term in listing.title.lower() or term in listing.city.lower()
    matches_city = filters.city == ALL or listing.city == filters.city
    matches_type = filters.type == ALL or listing.type == filters.type
    return matches_search and matches_city and matches_type


def filter_listings(listings: Iterable[Listing], filters: ListingFilters) -> list[Listing]:
    return [listing for listing in listings if matches(listing, filters)]


def available_cities(listings: Iterable[Listing]) -> list[str]:
    return sorted({listing.city for listing in listings})


def available_types(listings: Iterable[Listing]) -> list[str]:
    return sorted({listing.type for listing in listings})


def paginate(
    items: Sequence[Listing], page: int = MIN_PAGE, page_size: int = 10,
) -> ListingPage:
    """Return one 1-based page of *items*; pages past the end are empty."""
    if page < MIN_PAGE:
        raise ValueError(f"page must be >= {MIN_PAGE}")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    start = (page - 1) * page_size
    return ListingPage(
        items=list(items[start:start + page_size]),
        current_page=page,
        total_pages=math.ceil(len(items) / page_size),
        page_size=page_size,
        total_items=len(items),
    )
