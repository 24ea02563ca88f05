"""
Tactica - Retrieval Engine
===========================
One parameterised retrieval core behind both call sites:

``retrieve(query, analysis)``
    Conversational path.  Flow:
        1. Interpret the query (unless an analysis is supplied).
        2. Tier filter → candidate pool.
        3. Embed the query (or degrade to keyword-only).
        4. Hybrid search: semantic ∪ keyword + intent boosts.
        5. MMR down to ``ADVISOR_TOP_K`` with ``ADVISOR_MMR_LAMBDA``.

``retrieve_for_entities(names, kind)``
    Scenario path.  Each entity name becomes its own search key
    ("Information about <name> <kind>"); documents whose ``name``
    equals the entity form the pool when any exist, else the whole
    corpus.  Each lookup runs the same hybrid + MMR core with
    ``SIMULATOR_MMR_LAMBDA`` and keeps ``ENTITY_MATCHES`` documents.

Concurrency
-----------
The engine holds no per-request state.  Each call takes one snapshot
of the corpus tuple, so a concurrent ``CorpusStore.reload`` never mixes
two corpus versions inside a request.

Usage:
    engine = RetrievalEngine(store, provider)
    docs = engine.retrieve("What should I upgrade first at T9?")
"""

from __future__ import annotations

import time
from collections.abc import Sequence

from tactica.config.settings import Settings, settings
from tactica.src.core.diversity import maximal_marginal_relevance
from tactica.src.core.errors import EmbeddingServiceFailure
from tactica.src.core.hybrid_retriever import hybrid_search, merge_candidates
from tactica.src.core.models import Document, GeneralAnalysis, QueryAnalysis, RankedDocument, ScoredCandidate
from tactica.src.core.providers import Embedder
from tactica.src.core.query_interpreter import analyze_query
from tactica.src.core.similarity import Vector, extract_keywords
from tactica.src.core.tier_filter import filter_by_tier
from tactica.src.database.corpus_store import CorpusStore
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)


class RetrievalEngine:
    """
    Turns a query or a list of entity names into ranked reference documents.

    Parameters
    ----------
    corpus
        A loaded ``CorpusStore``.
    embedder
        Any ``Embedder``-compatible object (injected backend or stub).
    cfg
        Retrieval parameters; defaults to the global settings.
    """

    __slots__ = ("_corpus", "_embedder", "_cfg")

    def __init__(self, corpus: CorpusStore, embedder: Embedder, cfg: Settings | None = None) -> None:
        self._corpus = corpus
        self._embedder = embedder
        self._cfg = cfg or settings

    # ══════════════════════════════════════════════════════════════════
    #  CONVERSATIONAL PATH
    # ══════════════════════════════════════════════════════════════════

    def retrieve(self, query: str, analysis: QueryAnalysis | None = None, top_k: int | None = None, lambda_: float | None = None) -> list[RankedDocument]:
        """
        Retrieve a small, diverse document set for a free-text question.

        Raises
        ------
        CorpusUnavailable
            The corpus was never loaded.
        EmbeddingServiceFailure
            The query could not be embedded and keyword degradation is off.
        """
        t_start = time.perf_counter()
        analysis = analysis if analysis is not None else analyze_query(query)
        corpus = self._corpus.documents

        pool = filter_by_tier(analysis.tier_level, corpus, self._cfg.TIER_MIN_MATCHES)
        logger.info("[RETRIEVE] Pool: %d of %d document(s) (tier=%s).", len(pool), len(corpus), analysis.tier_level)

        selected = self._rank(query, extract_keywords(query), pool, corpus, analysis, top_k or self._cfg.ADVISOR_TOP_K, self._cfg.ADVISOR_MMR_LAMBDA if lambda_ is None else lambda_)

        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[RETRIEVE] %d document(s) for intent=%s in %.1fms.", len(selected), analysis.intent.value, elapsed_ms)
        return [RankedDocument.from_candidate(c) for c in selected]

    # ══════════════════════════════════════════════════════════════════
    #  SCENARIO PATH
    # ══════════════════════════════════════════════════════════════════

    def retrieve_for_entities(self, entity_names: Sequence[str], entity_kind: str = "", per_entity: int | None = None) -> list[RankedDocument]:
        """
        Look up reference documents for each named entity.

        Results keep entity order and carry no duplicate document keys;
        callers combining several calls must deduplicate across them.
        """
        t_start = time.perf_counter()
        corpus = self._corpus.documents
        limit = per_entity or self._cfg.ENTITY_MATCHES

        per_name: list[list[ScoredCandidate]] = []
        for name in entity_names:
            search_text = f"Information about {name} {entity_kind}".strip()
            target = name.lower()
            exact = [doc for doc in corpus if doc.metadata.name.lower() == target]
            pool = exact or corpus
            per_name.append(self._rank(search_text, extract_keywords(name), pool, corpus, GeneralAnalysis(), limit, self._cfg.SIMULATOR_MMR_LAMBDA))

        merged = merge_candidates(*per_name)
        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[ENTITY] %d document(s) for %d %s entit(ies) in %.1fms.", len(merged), len(entity_names), entity_kind or "unnamed", elapsed_ms)
        return [RankedDocument.from_candidate(c) for c in merged]

    # ══════════════════════════════════════════════════════════════════
    #  SHARED CORE
    # ══════════════════════════════════════════════════════════════════

    def _rank(self, search_text: str, keywords: list[str], pool: Sequence[Document], corpus: Sequence[Document], analysis: QueryAnalysis, top_k: int, lambda_: float) -> list[ScoredCandidate]:
        if not pool:
            return []

        query_vector = self._embed(search_text)
        candidates = hybrid_search(query_vector, keywords, pool, corpus, analysis, top_k=self._cfg.SEARCH_TOP_K, upgrade_boost=self._cfg.UPGRADE_BOOST_LIMIT, attack_boost=self._cfg.ATTACK_BOOST_LIMIT)
        return maximal_marginal_relevance(candidates, top_k, lambda_)


    def _embed(self, text: str) -> Vector | None:
        """Embed *text*; ``None`` means keyword-only retrieval."""
        try:
            return self._embedder.embed_query(text)
        except EmbeddingServiceFailure:
            if not self._cfg.DEGRADE_TO_KEYWORDS:
                raise
            logger.warning("[RETRIEVE] Embedding unavailable — degrading to keyword-only search for '%s'.", text[:50])
            return None
