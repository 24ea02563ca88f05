"""
Tests for the strategy advisor: prompt building, answer post-processing and the full pipeline
"""
from conftest import UPGRADE_QUERY, StubGenerator
from tactica.config.prompt_templates import ADVISOR_STOP_SEQUENCES, ADVISOR_SYSTEM_PROMPT
from tactica.src.core.advisor import StrategyAdvisor, build_advisor_prompt, format_response
from tactica.src.core.context_assembler import assemble_context
from tactica.src.core.models import AttackStrategyAnalysis, BaseDesignAnalysis, GeneralAnalysis, Intent, ResourceManagementAnalysis, UpgradePriorityAnalysis
from tactica.src.core.retrieval_engine import RetrievalEngine


class TestBuildAdvisorPrompt:
    """Test intent-specific prompt content"""

    def test_upgrade_instructions(self):
        analysis = UpgradePriorityAnalysis(tier_level=9, focus="defense")
        prompt = build_advisor_prompt("what next?", analysis, assemble_context([], analysis))

        assert 'USER QUERY: "what next?"' in prompt
        assert "- Town Hall Level: 9" in prompt
        assert "Consider the player's Town Hall level (9)" in prompt
        assert "Focus specifically on defensive upgrades" in prompt
        assert "(No relevant reference documents found.)" in prompt

    def test_attack_labels_and_instructions(self):
        analysis = AttackStrategyAnalysis(attack_type="air", focus_unit="dragon", purpose="war")
        prompt = build_advisor_prompt("dragons?", analysis, assemble_context([], analysis))

        assert "- Focus Troop: dragon" in prompt
        assert "- Attack Type: air" in prompt
        assert "- Town Hall Level: Unknown" in prompt
        assert "Focus on air-based strategies" in prompt
        assert "Optimize for 3-star attacks" in prompt

    def test_base_and_resource_defaults(self):
        base = BaseDesignAnalysis(tier_level=11)
        resource = ResourceManagementAnalysis(resource_type="dark_elixir", goal="saving")

        assert "base design principles for a general base" in build_advisor_prompt("q", base, assemble_context([], base))
        assert "Provide advice on saving dark elixir" in build_advisor_prompt("q", resource, assemble_context([], resource))

    def test_general_has_no_intent_instructions(self):
        analysis = GeneralAnalysis()
        prompt = build_advisor_prompt("q", analysis, assemble_context([], analysis))
        assert "- Intent: general" in prompt
        assert "Town Hall level (" not in prompt


class TestFormatResponse:
    """Test answer post-processing"""

    def test_rewrites_citations(self):
        assert format_response("Use dragons [Document 2].", GeneralAnalysis()) == "Use dragons [Source: Document 2]."

    def test_strips_echoed_headings(self):
        cleaned = format_response("IMPORTANT GUIDELINES:Build walls.", GeneralAnalysis())
        assert cleaned == "Build walls."

    def test_restructures_bare_upgrade_answer(self):
        raw = "Start here.\n\nLaboratory first.\n\nThen walls.\n\nGood luck."

        formatted = format_response(raw, UpgradePriorityAnalysis(tier_level=9))

        assert formatted == (
            "# Upgrade Priority Guide for TH9\n\n"
            "Start here.\n\n"
            "## Priority 1: Laboratory first.\n\n"
            "## Priority 2: Then walls.\n\n"
            "## Final Recommendations\n\nGood luck."
        )

    def test_keeps_structured_upgrade_answer(self):
        raw = "Upgrade the lab.\n\nThen walls.\n\nGood luck."
        assert format_response(raw, UpgradePriorityAnalysis(tier_level=9)) == raw

    def test_keeps_short_upgrade_answer(self):
        raw = "Lab first.\n\nThen walls."
        assert format_response(raw, UpgradePriorityAnalysis()) == raw

    def test_other_intents_untouched(self):
        raw = "One.\n\nTwo.\n\nThree."
        assert format_response(raw, AttackStrategyAnalysis()) == raw


class TestStrategyAdvisor:
    """Test the full advisor pipeline with stub backends"""

    def test_process_query(self, store, embedder, cfg):
        generator = StubGenerator("Upgrade the Cannon first [Document 1].")
        advisor = StrategyAdvisor(RetrievalEngine(store, embedder, cfg), generator, cfg)

        result = advisor.process_query(UPGRADE_QUERY)

        assert result.intent is Intent.UPGRADE_PRIORITY
        assert result.parameters == {"tierLevel": 9}
        assert result.response == "Upgrade the Cannon first [Source: Document 1]."
        assert len(result.sources) == cfg.ADVISOR_TOP_K
        assert result.sources[0]["name"] == "Cannon"
        assert result.metadata["context_count"] == cfg.ADVISOR_TOP_K
        assert result.metadata["query_keywords"] == ["upgrade", "first", "t9", "th9", "townhall9"]
        assert "generated_at" in result.metadata

    def test_generator_arguments(self, store, embedder, cfg, generator):
        StrategyAdvisor(RetrievalEngine(store, embedder, cfg), generator, cfg).process_query(UPGRADE_QUERY)

        call = generator.calls[0]
        assert call["system"] == ADVISOR_SYSTEM_PROMPT
        assert call["stop"] == ADVISOR_STOP_SEQUENCES
        assert call["max_tokens"] == cfg.ADVISOR_MAX_TOKENS
        assert "[Document 1]" in call["prompt"]

    def test_build_context_only(self, store, embedder, cfg, generator):
        analysis, context = StrategyAdvisor(RetrievalEngine(store, embedder, cfg), generator, cfg).build_context(UPGRADE_QUERY)

        assert analysis.tier_level == 9
        assert len(context.excerpts) == cfg.ADVISOR_TOP_K
        assert generator.calls == []
