"""
Tactica - Diversity Selector (Maximum Marginal Relevance)
==========================================================
Greedy re-ranking that trades query relevance against redundancy with
what has already been picked:

    mmr(d) = λ · sim(d, query) − (1 − λ) · max_{s ∈ selected} sim(d, s)

The selection is seeded with the most similar candidate; each round
adds the remaining candidate with the highest MMR score, ties going to
the one encountered first.  ``λ = 1`` reduces to plain top-K by
similarity, ``λ = 0`` to maximal spread.

Cost is O(K · n) document-to-document cosines; n stays around 20 by
construction of the hybrid retriever.
"""

from __future__ import annotations

from collections.abc import Sequence

from tactica.src.core.models import ScoredCandidate
from tactica.src.core.similarity import cosine_similarity
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)


def maximal_marginal_relevance(candidates: Sequence[ScoredCandidate], top_k: int, lambda_: float = 0.7) -> list[ScoredCandidate]:
    """
    Select ``min(top_k, len(candidates))`` candidates in MMR order.

    Every candidate must already carry a ``similarity`` score.

    Raises
    ------
    ValueError
        If ``lambda_`` is outside ``[0, 1]``.
    """
    if not 0.0 <= lambda_ <= 1.0:
        raise ValueError(f"lambda_ must be within [0, 1], got {lambda_}")
    if top_k <= 0 or not candidates:
        return []

    ranked = sorted(candidates, key=lambda c: c.similarity or 0.0, reverse=True)
    if len(ranked) <= top_k:
        return ranked

    selected = [ranked[0]]
    remaining = ranked[1:]

    # Running max similarity of each remaining candidate to the selected set
    redundancy = [cosine_similarity(c.document.embedding, selected[0].document.embedding) for c in remaining]

    while len(selected) < top_k and remaining:
        best_index = 0
        best_score = float("-inf")
        for i, candidate in enumerate(remaining):
            score = lambda_ * (candidate.similarity or 0.0) - (1.0 - lambda_) * redundancy[i]
            if score > best_score:
                best_score = score
                best_index = i

        chosen = remaining.pop(best_index)
        redundancy.pop(best_index)
        selected.append(chosen)

        for i, candidate in enumerate(remaining):
            redundancy[i] = max(redundancy[i], cosine_similarity(candidate.document.embedding, chosen.document.embedding))

    logger.debug("[MMR] Selected %d of %d candidate(s) (λ=%.2f).", len(selected), len(candidates), lambda_)
    return selected
