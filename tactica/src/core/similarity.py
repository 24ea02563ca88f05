"""
Tactica - Similarity Engine
============================
Two independent scorers over a (possibly tier-filtered) document list:

``semantic_search``
    Cosine similarity between the query vector and every document
    vector.  Ranking is a stable sort, so ties keep corpus order.

``keyword_search``
    Weighted keyword overlap:

    ======================================  =======
    keyword is a substring of the content   +1
    keyword is a substring of ``name``      +2
    keyword equals ``type`` (any case)      +3
    ======================================  =======

    Documents scoring 0 are dropped.  Matching is plain substring
    containment, so a short keyword can hit inside a longer word.

Both scorers are pure functions of their arguments and can run
concurrently against the shared corpus.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from tactica.config.vocabulary import DOMAIN_ABBREVIATIONS, STOP_WORDS
from tactica.src.core.models import Document, ScoredCandidate
from tactica.src.utils.logger import get_logger
from tactica.src.utils.text_utils import extract_tier, is_tier_token, normalise_text, tier_tokens, tokenize

logger = get_logger(__name__)

Vector = Sequence[float]

_MIN_KEYWORD_LENGTH = 3

_CONTENT_WEIGHT = 1
_NAME_WEIGHT = 2
_TYPE_WEIGHT = 3


# ══════════════════════════════════════════════════════════════════════
#  VECTOR SIMILARITY
# ══════════════════════════════════════════════════════════════════════


def cosine_similarity(a: Vector, b: Vector) -> float:
    """
    Cosine similarity of two vectors, clipped to ``[-1, 1]``.

    Returns ``0.0`` when either vector has zero magnitude.

    Raises
    ------
    ValueError
        If both vectors are non-zero but of different dimensionality.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    norm_a = float(np.linalg.norm(va)) if va.size else 0.0
    norm_b = float(np.linalg.norm(vb)) if vb.size else 0.0
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    if va.shape != vb.shape:
        raise ValueError(f"Dimension mismatch: {va.shape[0]} vs {vb.shape[0]}")

    return float(np.clip(np.dot(va, vb) / (norm_a * norm_b), -1.0, 1.0))


def semantic_search(query_vector: Vector, documents: Iterable[Document], top_k: int) -> list[ScoredCandidate]:
    """Top *top_k* documents by cosine similarity to *query_vector*."""
    scored = [ScoredCandidate(document=doc, similarity=cosine_similarity(query_vector, doc.embedding)) for doc in documents]
    scored.sort(key=lambda c: c.similarity, reverse=True)
    return scored[:top_k]


# ══════════════════════════════════════════════════════════════════════
#  KEYWORD SCORING
# ══════════════════════════════════════════════════════════════════════


def extract_keywords(query: str) -> list[str]:
    """
    Turn a free-text query into search keywords.

    Steps:
        1. Lower-case, strip punctuation, split on whitespace.
        2. Drop stop words and tokens shorter than 3 characters.
        3. Keep domain abbreviations (``th``, ``war``, ``coc``) and
           tier tokens (``t9``) regardless of step 2.
        4. If the query names a tier, add its canonical tokens
           (``t9``, ``th9``, ``townhall9``).

    Order of first appearance is preserved; duplicates are removed.
    """
    keywords: list[str] = []

    for token in tokenize(normalise_text(query)):
        keep = token in DOMAIN_ABBREVIATIONS or is_tier_token(token) or (len(token) >= _MIN_KEYWORD_LENGTH and token not in STOP_WORDS)
        if keep and token not in keywords:
            keywords.append(token)

    tier = extract_tier(query)
    if tier is not None:
        for token in tier_tokens(tier):
            if token not in keywords:
                keywords.append(token)

    return keywords


def keyword_score(keywords: Iterable[str], document: Document) -> int:
    """Weighted keyword overlap between *keywords* and one document."""
    content = document.content.lower()
    name = document.metadata.name.lower()
    doc_type = document.metadata.type.lower()

    score = 0
    for keyword in keywords:
        kw = keyword.lower()
        if kw in content:
            score += _CONTENT_WEIGHT
        if name and kw in name:
            score += _NAME_WEIGHT
        if doc_type and kw == doc_type:
            score += _TYPE_WEIGHT
    return score


def keyword_search(keywords: Sequence[str], documents: Iterable[Document], top_k: int) -> list[ScoredCandidate]:
    """Top *top_k* documents by keyword score; zero-score documents are excluded."""
    if not keywords:
        return []

    matches: list[ScoredCandidate] = []
    for doc in documents:
        score = keyword_score(keywords, doc)
        if score > 0:
            matches.append(ScoredCandidate(document=doc, keyword_score=score))

    matches.sort(key=lambda c: c.keyword_score, reverse=True)
    logger.debug("[KEYWORD] %d match(es) for %s, keeping %d.", len(matches), keywords, min(top_k, len(matches)))
    return matches[:top_k]
