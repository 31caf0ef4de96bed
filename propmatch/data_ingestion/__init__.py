"""
Listing ingestion package.

Responsibilities:
- Read the raw listings export (JSON with Spanish field names).
- Normalize it into the canonical Listing schema.
- Persist a cleaned dataset locally for the recommendation service.
"""
