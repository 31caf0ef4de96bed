from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .constants import PricePosition, ReasonKey


class Listing(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    city: str
    type: str
    price: float = Field(..., gt=0)
    square_meters: float = Field(..., gt=0)
    bedrooms: int = Field(..., ge=0)
    image: str | None = None


class RangeStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    avg: float

    @property
    def spread(self) -> float:
        return self.max - self.min


class CorpusStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    price_stats: RangeStats
    size_stats: RangeStats


class RecommendationReason(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: ReasonKey
    value: str | int | float


class CategoryScores(BaseModel):
    location: int = Field(..., ge=0, le=100)
    type: int = Field(..., ge=0, le=100)
    price: int = Field(..., ge=0, le=100)
    size: int = Field(..., ge=0, le=100)
    rooms: int = Field(..., ge=0, le=100)


class RecommendationResult(BaseModel):
    listing: Listing
    score: float = Field(..., ge=0.0, le=1.0)
    match_percentage: int = Field(..., ge=0, le=100)
    reasons: list[RecommendationReason] = Field(..., min_length=1)
    category_scores: CategoryScores

    @computed_field
    @property
    def candidate_id(self) -> str:
        return self.listing.id

    @property
    def reason_keys(self) -> list[str]:
        return [r.key.value for r in self.reasons]


class CityStats(BaseModel):
    city: str
    count: int
    avg_price: int | None = None
    price_position: PricePosition | None = None


class TypeStats(BaseModel):
    type: str
    count: int
    avg_price: int | None = None


class MarketStats(BaseModel):
    total_listings: int
    city_stats: CityStats
    type_stats: TypeStats


# ── API payloads ─────────────────────────────────────────────────────────


class RecommendationResponse(BaseModel):
    target_id: str
    recommendations: list[RecommendationResult]
    total_candidates: int


class ListingPage(BaseModel):
    items: list[Listing]
    current_page: int
    total_pages: int
    page_size: int
    total_items: int


class MetadataResponse(BaseModel):
    cities: list[str]
    types: list[str]
    total_listings: int
