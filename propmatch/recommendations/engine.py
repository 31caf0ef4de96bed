"""
Similarity engine for listing recommendations.

Given a corpus of listings the engine computes price and size statistics once,
then scores any candidate against a target listing on five attributes:

* **location** – exact city match (0 or 1)
* **type** – exact property-type match (0 or 1)
* **price** – normalised price difference, plus a bonus when the candidate is
  within ±20% of the target's price
* **size** – normalised square-metre difference
* **rooms** – step function over the bedroom difference

The weighted sum of the five similarities is the final score.  Each result also
carries an ordered list of reasons explaining the match and a 0-100 breakdown
per attribute.

The engine holds no mutable state after construction.  When the corpus
changes (e.g. the user applies a filter) build a new engine.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

import numpy as np

from .constants import (
    ATTRIBUTE_PRIORITY,
    DEFAULT_RESULT_LIMIT,
    PRICE_BONUS,
    PRICE_BONUS_RANGE,
    PRICE_SIMILARITY_THRESHOLD,
    ROOMS_SIMILARITY_FLOOR,
    ROOMS_SIMILARITY_STEPS,
    ROOMS_SIMILARITY_THRESHOLD,
    SIZE_SIMILARITY_THRESHOLD,
    WEIGHTS,
    PricePosition,
    ReasonKey,
)
from .models import (
    CategoryScores,
    CityStats,
    CorpusStatistics,
    Listing,
    MarketStats,
    RangeStats,
    RecommendationReason,
    RecommendationResult,
    TypeStats,
)

logger = logging.getLogger(__name__)


class EmptyCorpusError(ValueError):
    """Raised when statistics are requested for an empty listing corpus."""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _range_stats(values: np.ndarray) -> RangeStats:
    lo = float(values.min())
    hi = float(values.max())
    # Float summation can drift a hair outside [min, max].
    avg = min(max(float(values.mean()), lo), hi)
    return RangeStats(min=lo, max=hi, avg=avg)


def build_statistics(listings: Sequence[Listing]) -> CorpusStatistics:
    """Compute min/max/avg of price and size over *listings*."""
    if not listings:
        raise EmptyCorpusError("Cannot compute statistics for an empty corpus")

    prices = np.fromiter((listing.price for listing in listings), dtype=float, count=len(listings))
    sizes = np.fromiter((listing.square_meters for listing in listings), dtype=float, count=len(listings))
    return CorpusStatistics(price_stats=_range_stats(prices), size_stats=_range_stats(sizes))


def _normalized_similarity(a: float, b: float, stats: RangeStats) -> float:
    spread = stats.spread
    if spread == 0:
        return 1.0
    return max(0.0, 1.0 - abs(a - b) / spread)


def rooms_similarity(target: Listing, candidate: Listing) -> float:
    diff = abs(target.bedrooms - candidate.bedrooms)
    return ROOMS_SIMILARITY_STEPS.get(diff, ROOMS_SIMILARITY_FLOOR)


def location_similarity(target: Listing, candidate: Listing) -> float:
    return 1.0 if candidate.city == target.city else 0.0


def type_similarity(target: Listing, candidate: Listing) -> float:
    return 1.0 if candidate.type == target.type else 0.0


def derive_reasons(
    candidate: Listing, scores: dict[str, float],
) -> list[RecommendationReason]:
    """Explain a match as an ordered list of ``(key, value)`` reasons.

    The five threshold checks are independent and emitted in fixed order.
    When none of them fires, a single fallback reason is derived from the
    best-scoring attribute (ties go to the earlier attribute in
    ``ATTRIBUTE_PRIORITY``).
    """
    checks: list[tuple[bool, ReasonKey, str | int | float]] = [
        (scores["location"] == 1, ReasonKey.same_city, candidate.city),
        (scores["type"] == 1, ReasonKey.same_type, candidate.type),
        (scores["price"] > PRICE_SIMILARITY_THRESHOLD, ReasonKey.similar_price, candidate.price),
        (scores["size"] > SIZE_SIMILARITY_THRESHOLD, ReasonKey.similar_size, candidate.square_meters),
        (scores["rooms"] >= ROOMS_SIMILARITY_THRESHOLD, ReasonKey.compatible_bedrooms, candidate.bedrooms),
    ]
    reasons = [RecommendationReason(key=key, value=value) for fired, key, value in checks if fired]
    if reasons:
        return reasons

    # max() keeps the first maximal element, which gives the priority tie-break.
    best = max(ATTRIBUTE_PRIORITY, key=lambda name: scores[name])
    if best == "price":
        return [RecommendationReason(key=ReasonKey.compatible_price_range, value=candidate.price)]
    if best == "size":
        return [RecommendationReason(key=ReasonKey.suitable_size, value=candidate.square_meters)]
    if best == "rooms":
        return [RecommendationReason(key=ReasonKey.similar_distribution, value=candidate.bedrooms)]
    # Only reachable when every attribute scored 0.
    return [RecommendationReason(key=ReasonKey.interesting_option, value="")]


def _mean_price(listings: Sequence[Listing]) -> float | None:
    if not listings:
        return None
    return float(np.mean([listing.price for listing in listings]))


class SimilarityEngine:
    """Score and rank listings against a target listing.

    The corpus is copied into a tuple on construction and statistics are
    computed once.  All public methods are pure.
    """

    def __init__(self, listings: Iterable[Listing]) -> None:
        self._listings: tuple[Listing, ...] = tuple(listings)
        self._statistics = build_statistics(self._listings)
        logger.debug(
            "Built similarity engine over %d listings (price %s, size %s)",
            len(self._listings),
            self._statistics.price_stats,
            self._statistics.size_stats,
        )

    @property
    def listings(self) -> tuple[Listing, ...]:
        return self._listings

    @property
    def statistics(self) -> CorpusStatistics:
        return self._statistics

    # ── Per-attribute similarity ────────────────────────────────────────

    def price_similarity(self, target: Listing, candidate: Listing) -> float:
        stats = self._statistics.price_stats
        if stats.spread == 0:
            return 1.0

        diff = abs(target.price - candidate.price)
        base = _normalized_similarity(target.price, candidate.price, stats)
        if diff <= target.price * PRICE_BONUS_RANGE:
            return min(1.0, base + PRICE_BONUS)
        return base

    def size_similarity(self, target: Listing, candidate: Listing) -> float:
        return _normalized_similarity(
            target.square_meters, candidate.square_meters, self._statistics.size_stats,
        )

    def attribute_scores(self, target: Listing, candidate: Listing) -> dict[str, float]:
        return {
            "location": location_similarity(target, candidate),
            "type": type_similarity(target, candidate),
            "price": self.price_similarity(target, candidate),
            "size": self.size_similarity(target, candidate),
            "rooms": rooms_similarity(target, candidate),
        }

    # ── Scoring & ranking ───────────────────────────────────────────────

    def score(self, target: Listing, candidate: Listing) -> RecommendationResult:
        scores = self.attribute_scores(target, candidate)
        total = sum(scores[name] * WEIGHTS[name] for name in ATTRIBUTE_PRIORITY)
        total = min(1.0, max(0.0, total))

        return RecommendationResult(
            listing=candidate,
            score=total,
            match_percentage=_round_half_up(total * 100),
            reasons=derive_reasons(candidate, scores),
            category_scores=CategoryScores(
                **{name: _round_half_up(value * 100) for name, value in scores.items()}
            ),
        )

    def rank(
        self,
        target: Listing,
        candidates: Iterable[Listing],
        k: int = DEFAULT_RESULT_LIMIT,
    ) -> list[RecommendationResult]:
        """Score *candidates* and return the top *k*, best first.

        Ties keep their input order.
        """
        if k <= 0:
            return []
        results = [self.score(target, c) for c in candidates]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:k]

    def candidates_for(self, target: Listing) -> list[Listing]:
        """Return the corpus without the target (matched by id)."""
        return [listing for listing in self._listings if listing.id != target.id]

    def get_recommendations(
        self, target: Listing, limit: int = DEFAULT_RESULT_LIMIT,
    ) -> list[RecommendationResult]:
        return self.rank(target, self.candidates_for(target), limit)

    # ── Market context ──────────────────────────────────────────────────

    def market_stats(self, target: Listing) -> MarketStats:
        same_city = [listing for listing in self._listings if listing.city == target.city]
        same_type = [listing for listing in self._listings if listing.type == target.type]

        city_avg = _mean_price(same_city)
        type_avg = _mean_price(same_type)

        position: PricePosition | None = None
        if city_avg is not None:
            position = PricePosition.above if target.price > city_avg else PricePosition.below

        return MarketStats(
            total_listings=len(self._listings),
            city_stats=CityStats(
                city=target.city,
                count=len(same_city),
                avg_price=_round_half_up(city_avg) if city_avg is not None else None,
                price_position=position,
            ),
            type_stats=TypeStats(
                type=target.type,
                count=len(same_type),
                avg_price=_round_half_up(type_avg) if type_avg is not None else None,
            ),
        )
