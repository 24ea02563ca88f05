"""
Tactica - Query Interpreter
============================
Classifies a free-text question into an ``Intent`` and extracts the
parameters that intent cares about.

Algorithm
---------
1. Extract a tier level (``T9``, ``tier 9``, ``town hall 9``) from the
   raw text.  It seeds ``tier_level`` whatever the final intent is.
2. Walk ``INTENT_RULES`` top-down over the lower-cased text.  The first
   rule whose predicate matches decides the intent; no match means
   ``general``.  Upgrade vocabulary overlaps attack vocabulary
   ("army", "troop"), so the table order is part of the contract.
3. Run the matched rule's extractor.  Every extractor scans its
   keyword tables first-match-wins and only sets what it finds.

The interpreter is pure and never raises.

Usage:
    from tactica.src.core.query_interpreter import analyze_query
    analysis = analyze_query("What should I upgrade first at T9?")
    analysis.intent   # Intent.UPGRADE_PRIORITY
    analysis.params   # {"tierLevel": 9}
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from tactica.config.vocabulary import ATTACK_KEYWORDS, ATTACK_PURPOSES, ATTACK_TYPES, BASE_KEYWORD_PAIRS, BASE_KEYWORDS, BASE_TYPES, RESOURCE_GOALS, RESOURCE_KEYWORDS, UNIT_NAMES, UPGRADE_FOCUS, UPGRADE_ITEM_TYPES, UPGRADE_KEYWORD_PAIRS, UPGRADE_KEYWORDS
from tactica.src.core.models import AttackStrategyAnalysis, BaseDesignAnalysis, GeneralAnalysis, Intent, QueryAnalysis, ResourceManagementAnalysis, UpgradePriorityAnalysis
from tactica.src.utils.logger import get_logger
from tactica.src.utils.text_utils import extract_tier

logger = get_logger(__name__)

Params = dict[str, Any]


# ── Scan helpers ──────────────────────────────────────────────────────

def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def _contains_pair(text: str, pairs: Iterable[tuple[str, str]]) -> bool:
    return any(a in text and b in text for a, b in pairs)


def _first_match(text: str, table: Iterable[tuple[str, str]]) -> str | None:
    for keyword, value in table:
        if keyword in text:
            return value
    return None


def _set_first(params: Params, field: str, text: str, table: Iterable[tuple[str, str]]) -> None:
    value = _first_match(text, table)
    if value is not None:
        params[field] = value


# ── Per-intent extractors ─────────────────────────────────────────────

def _extract_upgrade(text: str, params: Params) -> None:
    _set_first(params, "item_type", text, UPGRADE_ITEM_TYPES)
    _set_first(params, "focus", text, UPGRADE_FOCUS)


def _extract_attack(text: str, params: Params) -> None:
    _set_first(params, "attack_type", text, ATTACK_TYPES)
    for unit in UNIT_NAMES:
        if unit in text:
            params["focus_unit"] = unit
            break
    _set_first(params, "purpose", text, ATTACK_PURPOSES)


def _extract_base(text: str, params: Params) -> None:
    _set_first(params, "base_type", text, BASE_TYPES)


def _extract_resource(text: str, params: Params) -> None:
    if "gold" in text:
        params["resource_type"] = "gold"
    elif "elixir" in text and "dark" in text:
        params["resource_type"] = "dark_elixir"
    elif "elixir" in text:
        params["resource_type"] = "elixir"
    elif "gem" in text:
        params["resource_type"] = "gems"
    _set_first(params, "goal", text, RESOURCE_GOALS)


# ══════════════════════════════════════════════════════════════════════
#  RULE TABLE
# ══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class IntentRule:
    """One row of the classification cascade."""

    name: str
    predicate: Callable[[str], bool]
    model: Callable[..., QueryAnalysis]
    extractor: Callable[[str, Params], None]

    def matches(self, text: str) -> bool:
        return self.predicate(text)

    def build(self, text: str, params: Params) -> QueryAnalysis:
        self.extractor(text, params)
        return self.model(**params)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        name=Intent.UPGRADE_PRIORITY.value,
        predicate=lambda t: _contains_any(t, UPGRADE_KEYWORDS) or _contains_pair(t, UPGRADE_KEYWORD_PAIRS),
        model=UpgradePriorityAnalysis,
        extractor=_extract_upgrade,
    ),
    IntentRule(
        name=Intent.ATTACK_STRATEGY.value,
        predicate=lambda t: _contains_any(t, ATTACK_KEYWORDS),
        model=AttackStrategyAnalysis,
        extractor=_extract_attack,
    ),
    IntentRule(
        name=Intent.BASE_DESIGN.value,
        predicate=lambda t: _contains_any(t, BASE_KEYWORDS) or _contains_pair(t, BASE_KEYWORD_PAIRS),
        model=BaseDesignAnalysis,
        extractor=_extract_base,
    ),
    IntentRule(
        name=Intent.RESOURCE_MANAGEMENT.value,
        predicate=lambda t: _contains_any(t, RESOURCE_KEYWORDS),
        model=ResourceManagementAnalysis,
        extractor=_extract_resource,
    ),
)


def analyze_query(query: str, rules: tuple[IntentRule, ...] = INTENT_RULES) -> QueryAnalysis:
    """
    Classify *query* and extract intent-specific parameters.

    Returns
    -------
    QueryAnalysis
        The variant matching the first rule that fired, or
        ``GeneralAnalysis`` when none did.
    """
    text = query.lower()
    params: Params = {}

    tier = extract_tier(text)
    if tier is not None:
        params["tier_level"] = tier

    for rule in rules:
        if rule.matches(text):
            analysis = rule.build(text, params)
            break
    else:
        analysis = GeneralAnalysis(**params)

    logger.debug("[INTENT] '%s' → %s %s", query[:60], analysis.intent.value, analysis.params)
    return analysis
