from __future__ import annotations

from enum import Enum

# ---------------------------------------------------------------------------
# Scoring weights
# ---------------------------------------------------------------------------
# Each attribute similarity lies in [0, 1] and the weights sum to 1.0, so the
# weighted score also lies in [0, 1].

WEIGHTS: dict[str, float] = {
    "location": 0.30,
    "type": 0.25,
    "price": 0.25,
    "size": 0.15,
    "rooms": 0.05,
}

# Fallback tie-break order when no reason threshold is met.
ATTRIBUTE_PRIORITY: tuple[str, ...] = ("location", "type", "price", "size", "rooms")

# ---------------------------------------------------------------------------
# Reason thresholds
# ---------------------------------------------------------------------------

PRICE_SIMILARITY_THRESHOLD = 0.7  # strictly greater
SIZE_SIMILARITY_THRESHOLD = 0.8  # strictly greater
ROOMS_SIMILARITY_THRESHOLD = 0.8  # greater or equal

# Candidate within +/-20% of the *target's* price earns a flat bonus.
PRICE_BONUS_RANGE = 0.2
PRICE_BONUS = 0.3

# Bedroom difference -> similarity. Differences past the table use the floor.
ROOMS_SIMILARITY_STEPS: dict[int, float] = {
    0: 1.0,
    1: 0.8,
    2: 0.6,
    3: 0.4,
}
ROOMS_SIMILARITY_FLOOR = 0.2

DEFAULT_RESULT_LIMIT = 3


class ReasonKey(str, Enum):
    same_city = "same_city"
    same_type = "same_type"
    similar_price = "similar_price"
    similar_size = "similar_size"
    compatible_bedrooms = "compatible_bedrooms"
    compatible_price_range = "compatible_price_range"
    suitable_size = "suitable_size"
    similar_distribution = "similar_distribution"
    interesting_option = "interesting_option"


class PricePosition(str, Enum):
    above = "above"
    below = "below"
