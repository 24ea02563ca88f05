"""
Tactica - Tier Filter
======================
Narrows the corpus to documents about a tier (Town Hall level) with a
graduated fallback, so retrieval never runs on a near-empty pool just
because tier-specific content is sparse.

Policy:
    1. No tier            → the corpus unchanged.
    2. ≥ N exact matches  → the exact matches.
    3. ≥ N exact ∪ tier±1 → that union (deduplicated by document key).
    4. Otherwise          → the full corpus (breadth over emptiness).
"""

from __future__ import annotations

from collections.abc import Sequence
from itertools import chain

from tactica.src.core.models import Document
from tactica.src.utils.logger import get_logger
from tactica.src.utils.text_utils import mentions_tier

logger = get_logger(__name__)

DEFAULT_MIN_MATCHES = 5


def filter_by_tier(tier: int | None, documents: Sequence[Document], min_matches: int = DEFAULT_MIN_MATCHES) -> Sequence[Document]:
    if not tier:
        return documents

    exact = [doc for doc in documents if mentions_tier(doc.content, tier)]
    if len(exact) >= min_matches:
        logger.debug("[TIER] %d exact match(es) for tier %d.", len(exact), tier)
        return exact

    nearby = (doc for doc in documents if mentions_tier(doc.content, tier - 1) or mentions_tier(doc.content, tier + 1))
    combined: list[Document] = []
    seen: set[tuple[str, str]] = set()
    for doc in chain(exact, nearby):
        if doc.key not in seen:
            seen.add(doc.key)
            combined.append(doc)

    if len(combined) >= min_matches:
        logger.debug("[TIER] %d exact + nearby match(es) for tier %d.", len(combined), tier)
        return combined

    logger.debug("[TIER] Only %d match(es) for tier %d; using the full corpus.", len(combined), tier)
    return documents
