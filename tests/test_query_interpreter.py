"""
Unit tests for intent classification and parameter extraction
"""
import pytest
from pydantic import ValidationError

from tactica.src.core.models import QUERY_ANALYSIS_ADAPTER, AttackStrategyAnalysis, GeneralAnalysis, Intent, UpgradePriorityAnalysis
from tactica.src.core.query_interpreter import INTENT_RULES, IntentRule, analyze_query


class TestAnalyzeQuery:
    """Test the rule cascade end to end"""

    def test_upgrade_priority_with_tier(self):
        analysis = analyze_query("What should I upgrade first at T9?")

        assert isinstance(analysis, UpgradePriorityAnalysis)
        assert analysis.intent is Intent.UPGRADE_PRIORITY
        assert analysis.tier_level == 9
        assert analysis.params == {"tierLevel": 9}

    def test_attack_strategy_parameters(self):
        analysis = analyze_query("Best dragon attack for clan war at TH10")

        assert isinstance(analysis, AttackStrategyAnalysis)
        assert analysis.params == {"tierLevel": 10, "attackType": "air", "focusUnit": "dragon", "purpose": "war"}

    def test_upgrade_outranks_attack(self):
        # "army" is attack vocabulary, but the upgrade rule is checked first
        analysis = analyze_query("What troops should I upgrade for my army?")

        assert analysis.intent is Intent.UPGRADE_PRIORITY
        assert analysis.params == {"itemType": "troop", "focus": "offense"}

    def test_base_design(self):
        analysis = analyze_query("Show me a good farming base layout")

        assert analysis.intent is Intent.BASE_DESIGN
        assert analysis.params == {"baseType": "farming"}

    def test_resource_management(self):
        analysis = analyze_query("How do I save dark elixir?")

        assert analysis.intent is Intent.RESOURCE_MANAGEMENT
        assert analysis.params == {"resourceType": "dark_elixir", "goal": "saving"}

    def test_general_fallback(self):
        analysis = analyze_query("Tell me about the Clan Castle")

        assert isinstance(analysis, GeneralAnalysis)
        assert analysis.params == {}

    def test_empty_query(self):
        assert analyze_query("").intent is Intent.GENERAL

    def test_custom_rule_table(self):
        rules = (IntentRule(name="always", predicate=lambda t: True, model=AttackStrategyAnalysis, extractor=lambda t, p: None),)
        assert analyze_query("anything at all", rules=rules).intent is Intent.ATTACK_STRATEGY


class TestIntentRules:
    """Test each rule of the table in isolation"""

    def test_rule_order(self):
        assert [rule.name for rule in INTENT_RULES] == ["upgrade_priority", "attack_strategy", "base_design", "resource_management"]

    def test_upgrade_pair_predicate(self):
        upgrade = INTENT_RULES[0]
        assert upgrade.matches("which hero to max first")
        assert not upgrade.matches("which hero is strongest")

    def test_base_pair_predicate(self):
        base = INTENT_RULES[2]
        assert base.matches("where to place each building")


class TestQueryAnalysisModel:
    """Test the tagged union wire format"""

    def test_validate_camel_case_payload(self):
        analysis = QUERY_ANALYSIS_ADAPTER.validate_python({"intent": "attack_strategy", "tierLevel": 11, "attackType": "ground"})

        assert isinstance(analysis, AttackStrategyAnalysis)
        assert analysis.tier_level == 11
        assert analysis.params == {"tierLevel": 11, "attackType": "ground"}

    def test_rejects_foreign_field_values(self):
        with pytest.raises(ValidationError):
            QUERY_ANALYSIS_ADAPTER.validate_python({"intent": "base_design", "baseType": "underwater"})

    def test_rejects_unknown_intent(self):
        with pytest.raises(ValidationError):
            QUERY_ANALYSIS_ADAPTER.validate_python({"intent": "shopping"})
