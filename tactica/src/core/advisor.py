"""
Tactica - Strategy Advisor
===========================
Conversational call site of the retrieval engine.

Flow:
    1. Interpret the question (intent + parameters).
    2. Retrieve a diverse context set.
    3. Assemble the context and build an intent-specific prompt.
    4. Call the injected generator.
    5. Post-process the answer (strip echoed prompt headings, normalise
       citations, structure bare upgrade answers).

Usage:
    advisor = StrategyAdvisor(engine, provider)
    result = advisor.process_query("Best TH9 air attack for war?")
"""

from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict

from tactica.config.prompt_templates import ADVISOR_PROMPT_TEMPLATE, ADVISOR_STOP_SEQUENCES, ADVISOR_SYSTEM_PROMPT, ATTACK_PURPOSE_INSTRUCTIONS, ATTACK_TYPE_INSTRUCTIONS, INTENT_INSTRUCTIONS, RESPONSE_ARTIFACTS, UPGRADE_FOCUS_INSTRUCTIONS
from tactica.config.settings import Settings, settings
from tactica.src.core.context_assembler import RetrievalContext, assemble_context
from tactica.src.core.models import AttackStrategyAnalysis, BaseDesignAnalysis, Intent, QueryAnalysis, ResourceManagementAnalysis, UpgradePriorityAnalysis
from tactica.src.core.providers import Generator
from tactica.src.core.query_interpreter import analyze_query
from tactica.src.core.retrieval_engine import RetrievalEngine
from tactica.src.core.similarity import extract_keywords
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)

_CITATION_RE = re.compile(r"\[Document (\d+)\]")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")

# Labels for the QUERY ANALYSIS block, in display order
_PARAM_LABELS: tuple[tuple[str, str], ...] = (
    ("focus_unit", "Focus Troop"),
    ("attack_type", "Attack Type"),
    ("base_type", "Base Type"),
    ("item_type", "Item Type"),
)


class AdvisorResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    intent: Intent
    parameters: dict[str, Any]
    response: str
    sources: list[dict[str, Any]]
    metadata: dict[str, Any]


# ══════════════════════════════════════════════════════════════════════
#  PROMPT CONSTRUCTION
# ══════════════════════════════════════════════════════════════════════


def _intent_instructions(analysis: QueryAnalysis) -> str:
    template = INTENT_INSTRUCTIONS.get(analysis.intent.value)
    if template is None:
        return ""

    tier = analysis.tier_level or "unknown"
    parts: list[str] = []

    if isinstance(analysis, UpgradePriorityAnalysis):
        parts.append(template.format(tier=tier))
        if analysis.focus:
            parts.append(UPGRADE_FOCUS_INSTRUCTIONS[analysis.focus])
    elif isinstance(analysis, AttackStrategyAnalysis):
        parts.append(template.format(tier=tier))
        if analysis.attack_type:
            parts.append(ATTACK_TYPE_INSTRUCTIONS[analysis.attack_type])
        if analysis.purpose:
            parts.append(ATTACK_PURPOSE_INSTRUCTIONS[analysis.purpose])
    elif isinstance(analysis, BaseDesignAnalysis):
        parts.append(template.format(tier=tier, base_type=analysis.base_type or "general"))
    elif isinstance(analysis, ResourceManagementAnalysis):
        resource = (analysis.resource_type or "resources").replace("_", " ")
        parts.append(template.format(tier=tier, goal=analysis.goal or "managing", resource_type=resource))

    return "\n".join(parts)


def _analysis_block(analysis: QueryAnalysis) -> str:
    lines = [
        f"- Intent: {analysis.intent.value.replace('_', ' ')}",
        f"- Town Hall Level: {analysis.tier_level or 'Unknown'}",
    ]
    for field, label in _PARAM_LABELS:
        value = getattr(analysis, field, None)
        if value:
            lines.append(f"- {label}: {value}")
    return "\n".join(lines)


def build_advisor_prompt(query: str, analysis: QueryAnalysis, context: RetrievalContext) -> str:
    """Fill ``ADVISOR_PROMPT_TEMPLATE`` for one question."""
    return ADVISOR_PROMPT_TEMPLATE.format(query=query, analysis=_analysis_block(analysis), context=context.render(), instructions=_intent_instructions(analysis))


# ══════════════════════════════════════════════════════════════════════
#  RESPONSE POST-PROCESSING
# ══════════════════════════════════════════════════════════════════════


def format_response(response: str, analysis: QueryAnalysis) -> str:
    """
    Clean a raw model answer.

    Steps:
        1. Remove prompt headings the model echoed back.
        2. Rewrite ``[Document N]`` as ``[Source: Document N]``.
        3. For upgrade questions answered without any "Priority" /
           "Upgrade" heading and with ≥ 3 paragraphs, restructure into
           intro → numbered priorities → final recommendations.
    """
    cleaned = response
    for artifact in RESPONSE_ARTIFACTS:
        cleaned = cleaned.replace(artifact, "")
    cleaned = _CITATION_RE.sub(r"[Source: Document \1]", cleaned)

    if analysis.intent is not Intent.UPGRADE_PRIORITY or "Priority" in cleaned or "Upgrade" in cleaned:
        return cleaned

    paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT_RE.split(cleaned) if p.strip()]
    if len(paragraphs) < 3:
        return cleaned

    title = f"TH{analysis.tier_level}" if analysis.tier_level else "Your Town Hall"
    sections = [f"# Upgrade Priority Guide for {title}", paragraphs[0]]
    sections.extend(f"## Priority {i}: {p}" for i, p in enumerate(paragraphs[1:-1], 1))
    sections.append(f"## Final Recommendations\n\n{paragraphs[-1]}")
    return "\n\n".join(sections)


# ══════════════════════════════════════════════════════════════════════
#  ADVISOR
# ══════════════════════════════════════════════════════════════════════


class StrategyAdvisor:
    """
    Answers strategy questions with retrieval-grounded generation.

    Parameters
    ----------
    engine
        Shared ``RetrievalEngine``.
    generator
        Any ``Generator``-compatible backend.
    cfg
        Generation parameters; defaults to the global settings.
    """

    __slots__ = ("_engine", "_generator", "_cfg")

    def __init__(self, engine: RetrievalEngine, generator: Generator, cfg: Settings | None = None) -> None:
        self._engine = engine
        self._generator = generator
        self._cfg = cfg or settings


    def build_context(self, query: str, analysis: QueryAnalysis | None = None) -> tuple[QueryAnalysis, RetrievalContext]:
        """Interpret + retrieve + assemble, without calling the generator."""
        analysis = analysis if analysis is not None else analyze_query(query)
        documents = self._engine.retrieve(query, analysis)
        return analysis, assemble_context(documents, analysis)


    def process_query(self, query: str, analysis: QueryAnalysis | None = None) -> AdvisorResponse:
        """
        Full advisor pipeline for one question.

        Raises
        ------
        CorpusUnavailable, EmbeddingServiceFailure, GenerationServiceFailure
            Propagated unchanged to the caller.
        """
        t_start = time.perf_counter()
        analysis, context = self.build_context(query, analysis)
        logger.info("[ADVISOR] intent=%s params=%s context=%d", analysis.intent.value, analysis.params, len(context.excerpts))

        prompt = build_advisor_prompt(query, analysis, context)

        t_llm = time.perf_counter()
        raw = self._generator.generate(prompt, system=ADVISOR_SYSTEM_PROMPT, temperature=self._cfg.LLM_TEMPERATURE, max_tokens=self._cfg.ADVISOR_MAX_TOKENS, stop=ADVISOR_STOP_SEQUENCES)
        llm_ms = (time.perf_counter() - t_llm) * 1000

        total_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[ADVISOR] Pipeline total: %.1fms (llm=%.1fms, %d chars)", total_ms, llm_ms, len(raw))

        return AdvisorResponse(
            query=query,
            intent=analysis.intent,
            parameters=analysis.params,
            response=format_response(raw, analysis),
            sources=context.sources(),
            metadata={"context_count": len(context.excerpts), "query_keywords": extract_keywords(query), "generated_at": datetime.now(timezone.utc).isoformat()},
        )
