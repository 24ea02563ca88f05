"""
Tactica - Battle Simulator
===========================
Scenario call site of the retrieval engine: describes an attacking army
and a defending base, grounds the description with per-entity reference
documents, and asks the generator to narrate and score the battle.

Flow:
    1. Army lookups: troops, spells, heroes, siege machine
       (``engine.retrieve_for_entities`` per kind), deduplicated here,
       capped at ``SIMULATOR_ARMY_LIMIT``.
    2. Base lookups: defenses plus the Town Hall level, capped at
       ``SIMULATOR_BASE_LIMIT``.
    3. Build the simulation prompt and call the generator.
    4. Parse sections, stars and destruction percentage from the
       answer and rate the attack's effectiveness.

Parsing is tolerant: missing headings leave empty sections, stars can be
read from words ("two stars"), and a star count without a percentage
yields a conventional estimate (1★ → 55 %, 2★ → 75 %, 3★ → 100 %).
"""

from __future__ import annotations

import re
import time
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from tactica.config.prompt_templates import DEFENSE_INFO_FALLBACK, SIMULATION_PROMPT_TEMPLATE, SIMULATION_STOP_SEQUENCES, TROOP_INFO_FALLBACK
from tactica.config.settings import Settings, settings
from tactica.src.core.models import RankedDocument
from tactica.src.core.providers import Generator
from tactica.src.core.retrieval_engine import RetrievalEngine
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)

_ARMY_DOC_TYPES = {"troop", "spell", "hero"}
_DEFENSE_DOC_TYPE = "defense"

_SECTION_HEADERS: dict[str, str] = {
    "summary": "Battle Summary",
    "strategy": "Attack Strategy Analysis",
    "key_moments": "Key Moments",
    "result": "Final Result",
    "recommendations": "Recommendations",
}

_STARS_RE = re.compile(r"(\d+)\s*stars?", re.IGNORECASE)
_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*%\s*destruction", re.IGNORECASE)
_PERCENT_ALT_RE = re.compile(r"destruction.*?(\d+(?:\.\d+)?)\s*%", re.IGNORECASE)

_STAR_WORDS: tuple[tuple[str, int], ...] = (("two stars", 2), ("three stars", 3), ("one star", 1))
_STAR_ESTIMATES: dict[int, float] = {1: 55.0, 2: 75.0, 3: 100.0}


def _section_re(header: str) -> re.Pattern[str]:
    others = "|".join(re.escape(h) for h in _SECTION_HEADERS.values() if h != header)
    return re.compile(rf"^[#*\s]*{re.escape(header)}[:*\s]*\n(.*?)(?=^[#*\s]*(?:{others})|\Z)", re.IGNORECASE | re.DOTALL | re.MULTILINE)


_SECTION_RES: dict[str, re.Pattern[str]] = {key: _section_re(header) for key, header in _SECTION_HEADERS.items()}


# ══════════════════════════════════════════════════════════════════════
#  SCENARIO MODELS
# ══════════════════════════════════════════════════════════════════════


class ArmyComposition(BaseModel):
    """Attacking army: unit name → quantity, hero name → level."""

    town_hall: int | None = None
    troops: dict[str, int] = Field(default_factory=dict)
    spells: dict[str, int] = Field(default_factory=dict)
    heroes: dict[str, int] = Field(default_factory=dict)
    siege_machine: str | None = None


class Walls(BaseModel):
    level: int | None = None
    quantity: int | None = None


class ClanCastle(BaseModel):
    level: int
    troops: str


class BaseLayout(BaseModel):
    """Defending base: building / trap name → count, hero name → level."""

    town_hall_level: int | None = None
    layout: str | None = None
    defenses: dict[str, int] = Field(default_factory=dict)
    walls: Walls | None = None
    traps: dict[str, int] = Field(default_factory=dict)
    clan_castle: ClanCastle | None = None
    heroes: dict[str, int] = Field(default_factory=dict)


class BattleSections(BaseModel):
    summary: str = ""
    strategy: str = ""
    key_moments: str = ""
    result: str = ""
    recommendations: str = ""


class BattleOutcome(BaseModel):
    stars: int = 0
    destruction_percentage: float = 0.0


class SimulationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_response: str
    sections: BattleSections
    outcome: BattleOutcome
    effectiveness: str


# ══════════════════════════════════════════════════════════════════════
#  PROMPT & PARSING
# ══════════════════════════════════════════════════════════════════════


def _counted(title: str, items: dict[str, int]) -> list[str]:
    if not items:
        return []
    return [f"{title}:"] + [f"- {qty}x {name}" for name, qty in items.items()]


def _levelled(title: str, items: dict[str, int]) -> list[str]:
    if not items:
        return []
    return [f"{title}:"] + [f"- {name} (Level {level})" for name, level in items.items()]


def describe_army(army: ArmyComposition) -> str:
    lines = ["Attacking Army:", f"Town Hall Level: {army.town_hall or 'Unknown'}"]
    lines += _counted("Troops", army.troops)
    lines += _counted("Spells", army.spells)
    lines += _levelled("Heroes", army.heroes)
    if army.siege_machine:
        lines.append(f"Siege Machine: {army.siege_machine}")
    return "\n".join(lines)


def describe_base(base: BaseLayout) -> str:
    lines = ["Defending Base:", f"Town Hall Level: {base.town_hall_level or 'Unknown'}", f"Layout Type: {base.layout or 'Unknown'}"]
    lines += _counted("Defenses", base.defenses)
    if base.walls:
        lines.append(f"Walls: Level {base.walls.level or 'Unknown'}, Quantity: {base.walls.quantity or 'Unknown'}")
    lines += _counted("Traps", base.traps)
    if base.clan_castle:
        lines.append(f"Clan Castle: Level {base.clan_castle.level}, Contains {base.clan_castle.troops}")
    lines += _levelled("Defending Heroes", base.heroes)
    return "\n".join(lines)


def _reference_block(docs: Iterable[RankedDocument], types: set[str]) -> str:
    blocks = [
        f"## {d.document.metadata.name} ({d.document.metadata.type})\n{d.document.content.strip()}"
        for d in docs
        if d.document.metadata.type in types
    ]
    return "\n\n".join(blocks)


def build_simulation_prompt(army: ArmyComposition, base: BaseLayout, army_docs: list[RankedDocument], base_docs: list[RankedDocument]) -> str:
    return SIMULATION_PROMPT_TEMPLATE.format(
        army=describe_army(army),
        base=describe_base(base),
        troop_info=_reference_block(army_docs, _ARMY_DOC_TYPES) or TROOP_INFO_FALLBACK,
        defense_info=_reference_block(base_docs, {_DEFENSE_DOC_TYPE}) or DEFENSE_INFO_FALLBACK,
    )


def rate_effectiveness(stars: int, destruction_percentage: float) -> str:
    if stars == 3:
        return "Excellent"
    if stars == 2 and destruction_percentage >= 75:
        return "Good"
    if stars == 2 or (stars == 1 and destruction_percentage >= 65):
        return "Fair"
    return "Poor"


def parse_simulation_results(response: str) -> SimulationResult:
    """
    Split a simulation answer into its five sections and read the outcome.

    Stars and destruction are searched in the "Final Result" section
    first, then in the whole answer.  When no heading is recognised the
    whole answer becomes the summary.
    """
    found: dict[str, str] = {}
    for key, pattern in _SECTION_RES.items():
        match = pattern.search(response)
        if match and match.group(1).strip():
            found[key] = match.group(1).strip()
    if not found:
        logger.warning("[SIMULATE] No section headings recognised; using the raw answer as the summary.")
        found["summary"] = response.strip()
    sections = BattleSections(**found)

    result_text = sections.result
    stars_match = _STARS_RE.search(result_text) or _STARS_RE.search(response)
    stars = int(stars_match.group(1)) if stars_match else 0

    if stars == 0:
        lowered = (result_text or response).lower()
        stars = next((count for words, count in _STAR_WORDS if words in lowered), 0)

    pct_match = _PERCENT_RE.search(result_text) or _PERCENT_RE.search(response) or _PERCENT_ALT_RE.search(result_text) or _PERCENT_ALT_RE.search(response)
    destruction = float(pct_match.group(1)) if pct_match else 0.0

    if destruction == 0.0 and stars in _STAR_ESTIMATES:
        destruction = _STAR_ESTIMATES[stars]
        logger.debug("[SIMULATE] No destruction figure; estimating %.0f%% from %d star(s).", destruction, stars)

    return SimulationResult(raw_response=response, sections=sections, outcome=BattleOutcome(stars=stars, destruction_percentage=destruction), effectiveness=rate_effectiveness(stars, destruction))


# ══════════════════════════════════════════════════════════════════════
#  SIMULATOR
# ══════════════════════════════════════════════════════════════════════


def _dedupe(docs: Iterable[RankedDocument]) -> list[RankedDocument]:
    unique: list[RankedDocument] = []
    seen: set[tuple[str, str]] = set()
    for doc in docs:
        if doc.key not in seen:
            seen.add(doc.key)
            unique.append(doc)
    return unique


class BattleSimulator:
    """
    Simulates an attack of *army* against *base*.

    Parameters
    ----------
    engine
        Shared ``RetrievalEngine``.
    generator
        Any ``Generator``-compatible backend.
    cfg
        Limits and generation parameters; defaults to the global settings.
    """

    __slots__ = ("_engine", "_generator", "_cfg")

    def __init__(self, engine: RetrievalEngine, generator: Generator, cfg: Settings | None = None) -> None:
        self._engine = engine
        self._generator = generator
        self._cfg = cfg or settings


    def retrieve_army_docs(self, army: ArmyComposition) -> list[RankedDocument]:
        groups = [
            ([name for name, qty in army.troops.items() if qty > 0], "troop"),
            ([name for name, qty in army.spells.items() if qty > 0], "spell"),
            ([name for name, level in army.heroes.items() if level > 0], "hero"),
            ([army.siege_machine] if army.siege_machine else [], "siege machine"),
        ]
        docs: list[RankedDocument] = []
        for names, kind in groups:
            if names:
                docs.extend(self._engine.retrieve_for_entities(names, kind))
        return _dedupe(docs)[: self._cfg.SIMULATOR_ARMY_LIMIT]


    def retrieve_base_docs(self, base: BaseLayout) -> list[RankedDocument]:
        docs: list[RankedDocument] = []
        defenses = [name for name, qty in base.defenses.items() if qty > 0]
        if defenses:
            docs.extend(self._engine.retrieve_for_entities(defenses, "defense"))
        if base.town_hall_level:
            docs.extend(self._engine.retrieve_for_entities([f"Town Hall level {base.town_hall_level}"]))
        return _dedupe(docs)[: self._cfg.SIMULATOR_BASE_LIMIT]


    def simulate_battle(self, army: ArmyComposition, base: BaseLayout) -> SimulationResult:
        """
        Run one simulation end to end.

        Raises
        ------
        CorpusUnavailable, EmbeddingServiceFailure, GenerationServiceFailure
            Propagated unchanged to the caller.
        """
        t_start = time.perf_counter()
        army_docs = self.retrieve_army_docs(army)
        base_docs = self.retrieve_base_docs(base)
        logger.info("[SIMULATE] Retrieved %d army and %d base document(s).", len(army_docs), len(base_docs))

        prompt = build_simulation_prompt(army, base, army_docs, base_docs)
        raw = self._generator.generate(prompt, temperature=self._cfg.LLM_TEMPERATURE, max_tokens=self._cfg.SIMULATOR_MAX_TOKENS, stop=SIMULATION_STOP_SEQUENCES)
        result = parse_simulation_results(raw)

        total_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[SIMULATE] %d star(s), %.0f%% destruction (%s) in %.1fms.", result.outcome.stars, result.outcome.destruction_percentage, result.effectiveness, total_ms)
        return result
