"""
Listing recommendation engine.

Responsibilities:
- Compute price and size statistics over the (filtered) listing corpus.
- Score candidates against a target listing on location, type, price, size
  and bedrooms using fixed weights.
- Explain each match with ordered key/value reasons.
- Rank candidates and report market context for the target.
"""
