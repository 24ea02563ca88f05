"""
Tactica - Hybrid Retriever
===========================
Merges the semantic and keyword branches into one candidate list and
applies intent-aware recall boosts.

Strategy:
    1. Semantic top-K and keyword top-K over the tier-filtered pool.
    2. Merge, deduplicating by ``(id, category)``; the semantic copy of
       a document wins over its keyword copy.
    3. Give every survivor a similarity score (keyword-only hits get
       cosine computed lazily) so MMR sees one uniform signal.
    4. Boost:
       - ``upgrade_priority`` with ``item_type`` → the 3 most similar
         corpus documents whose ``type`` equals it or whose content
         mentions it.
       - ``attack_strategy`` with ``focus_unit`` → the 2 most similar
         corpus documents whose name or content mentions the unit.
       Boosts draw from the *unfiltered* corpus and only add documents
       not already present.

Without a query vector (embedding backend down) the semantic branch is
skipped and similarity is the keyword score normalised to ``[0, 1]``.

The output order is not meaningful; ranking happens in MMR.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from tactica.src.core.models import AttackStrategyAnalysis, Document, QueryAnalysis, ScoredCandidate, UpgradePriorityAnalysis
from tactica.src.core.similarity import Vector, cosine_similarity, keyword_score, keyword_search, semantic_search
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BRANCH_K = 7
DEFAULT_UPGRADE_BOOST = 3
DEFAULT_ATTACK_BOOST = 2

SimilarityFn = Callable[[Document], float]


def merge_candidates(*branches: Iterable[ScoredCandidate]) -> list[ScoredCandidate]:
    """Concatenate *branches*, keeping the first candidate seen for each document key."""
    merged: list[ScoredCandidate] = []
    seen: set[tuple[str, str]] = set()
    for branch in branches:
        for candidate in branch:
            if candidate.key in seen:
                continue
            seen.add(candidate.key)
            merged.append(candidate)
    return merged


def _similarity_fn(query_vector: Vector | None, keywords: Sequence[str], keyword_hits: Sequence[ScoredCandidate]) -> SimilarityFn:
    if query_vector is not None:
        return lambda doc: cosine_similarity(query_vector, doc.embedding)

    top_score = max((c.keyword_score or 0 for c in keyword_hits), default=0)
    if top_score == 0:
        return lambda doc: 0.0
    return lambda doc: min(keyword_score(keywords, doc) / top_score, 1.0)


def _boost(candidates: list[ScoredCandidate], corpus: Iterable[Document], matches: Callable[[Document], bool], limit: int, similarity_of: SimilarityFn) -> int:
    pool = [ScoredCandidate(document=doc, similarity=similarity_of(doc)) for doc in corpus if matches(doc)]
    pool.sort(key=lambda c: c.similarity, reverse=True)

    present = {c.key for c in candidates}
    added = 0
    for candidate in pool[:limit]:
        if candidate.key not in present:
            candidates.append(candidate)
            present.add(candidate.key)
            added += 1
    return added


def hybrid_search(
    query_vector: Vector | None,
    keywords: Sequence[str],
    pool: Sequence[Document],
    corpus: Sequence[Document],
    analysis: QueryAnalysis,
    top_k: int = DEFAULT_BRANCH_K,
    upgrade_boost: int = DEFAULT_UPGRADE_BOOST,
    attack_boost: int = DEFAULT_ATTACK_BOOST,
) -> list[ScoredCandidate]:
    """
    Build the deduplicated, fully-scored candidate list for one request.

    Parameters
    ----------
    query_vector
        Query embedding, or ``None`` for keyword-only retrieval.
    keywords
        Output of ``extract_keywords``.
    pool
        Tier-filtered documents searched by both branches.
    corpus
        Full corpus, source of intent boosts.
    analysis
        Query interpretation driving the boosts.
    """
    semantic = semantic_search(query_vector, pool, top_k) if query_vector is not None else []
    keyword = keyword_search(keywords, pool, top_k)

    similarity_of = _similarity_fn(query_vector, keywords, keyword)
    candidates = [
        c if c.similarity is not None else c.model_copy(update={"similarity": similarity_of(c.document)})
        for c in merge_candidates(semantic, keyword)
    ]

    boosted = 0
    if isinstance(analysis, UpgradePriorityAnalysis) and analysis.item_type:
        item_type = analysis.item_type.lower()
        boosted = _boost(candidates, corpus, lambda d: d.metadata.type == item_type or item_type in d.content.lower(), upgrade_boost, similarity_of)
    elif isinstance(analysis, AttackStrategyAnalysis) and analysis.focus_unit:
        unit = analysis.focus_unit.lower()
        boosted = _boost(candidates, corpus, lambda d: unit in d.metadata.name.lower() or unit in d.content.lower(), attack_boost, similarity_of)

    logger.debug("[HYBRID] semantic=%d keyword=%d boosted=%d → %d candidate(s).", len(semantic), len(keyword), boosted, len(candidates))
    return candidates
