"""
Unit tests for candidate merging and intent boosts
"""
import pytest

from conftest import make_doc
from tactica.src.core.hybrid_retriever import hybrid_search, merge_candidates
from tactica.src.core.models import AttackStrategyAnalysis, GeneralAnalysis, ScoredCandidate, UpgradePriorityAnalysis


class TestMergeCandidates:
    """Test key-based deduplication"""

    def test_first_copy_wins(self):
        doc = make_doc("cannon", "Cannon")
        semantic = [ScoredCandidate(document=doc, similarity=0.9)]
        keyword = [ScoredCandidate(document=doc, keyword_score=3)]

        merged = merge_candidates(semantic, keyword)

        assert len(merged) == 1
        assert merged[0].similarity == 0.9

    def test_same_id_different_category_kept(self):
        a = make_doc("cannon", "Cannon", category="basic_info")
        b = make_doc("cannon", "Cannon stats", category="stats")
        assert len(merge_candidates([ScoredCandidate(document=a)], [ScoredCandidate(document=b)])) == 2


class TestHybridSearch:
    """Test the merged, scored candidate list"""

    def test_no_duplicate_keys(self, corpus_docs):
        candidates = hybrid_search([1.0, 0.1, 0.0], ["upgrade", "cannon", "t9"], corpus_docs, corpus_docs, GeneralAnalysis(), top_k=7)

        keys = [c.key for c in candidates]
        assert len(keys) == len(set(keys))
        assert all(c.similarity is not None for c in candidates)

    def test_upgrade_boost_draws_from_full_corpus(self, corpus_docs):
        pool = [d for d in corpus_docs if d.metadata.type == "troop"]
        analysis = UpgradePriorityAnalysis(item_type="hero")

        candidates = hybrid_search([0.0, 1.0, 0.0], ["dragon"], pool, corpus_docs, analysis, top_k=7)

        assert "archer_queen" in {c.document.metadata.id for c in candidates}

    def test_upgrade_boost_limit(self, corpus_docs):
        analysis = UpgradePriorityAnalysis(item_type="defense")

        candidates = hybrid_search([0.0, 0.0, 1.0], [], [corpus_docs[5]], corpus_docs, analysis, top_k=7, upgrade_boost=2)

        assert len(candidates) == 3

    def test_attack_boost_matches_unit_name(self, corpus_docs):
        pool = [d for d in corpus_docs if d.metadata.type == "defense"]
        analysis = AttackStrategyAnalysis(focus_unit="balloon")

        candidates = hybrid_search([1.0, 0.0, 0.0], [], pool, corpus_docs, analysis, top_k=2, attack_boost=2)

        ids = [c.document.metadata.id for c in candidates]
        assert "balloon" in ids
        assert len(ids) == 3

    def test_keyword_only_mode(self, corpus_docs):
        candidates = hybrid_search(None, ["cannon"], corpus_docs, corpus_docs, GeneralAnalysis(), top_k=7)

        assert {c.document.metadata.id for c in candidates} == {"cannon"}
        assert max(c.similarity for c in candidates) == pytest.approx(1.0)
        assert all(0.0 <= c.similarity <= 1.0 for c in candidates)

    def test_nothing_matches(self):
        assert hybrid_search(None, ["zzz"], [], [], GeneralAnalysis()) == []
