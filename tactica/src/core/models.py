"""
Tactica - Domain Models
========================
Typed records flowing through the retrieval pipeline.

``Document``
    One retrievable unit of game knowledge (text + metadata + vector).
    Loaded once by ``CorpusStore``, never mutated afterwards.

``QueryAnalysis``
    Discriminated union on ``intent``.  Each variant carries only the
    parameters that make sense for its intent; parameters the
    interpreter did not find are *unset* (absent from ``params``), not
    ``None``-valued.

``ScoredCandidate`` / ``RankedDocument``
    Per-request wrappers adding similarity and keyword scores.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

# Dedup key: ids repeat across categories (basic_info / stats / ...)
DocumentKey = tuple[str, str]


# ══════════════════════════════════════════════════════════════════════
#  CORPUS RECORDS
# ══════════════════════════════════════════════════════════════════════


class DocumentMetadata(BaseModel):
    """Descriptive fields attached to every corpus document."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    type: str = ""
    category: str = ""
    url: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> str:
        return str(v)


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    metadata: DocumentMetadata
    embedding: tuple[float, ...] = ()

    @property
    def key(self) -> DocumentKey:
        return (self.metadata.id, self.metadata.category)


# ══════════════════════════════════════════════════════════════════════
#  QUERY ANALYSIS (tagged union)
# ══════════════════════════════════════════════════════════════════════


class Intent(str, Enum):
    GENERAL = "general"
    UPGRADE_PRIORITY = "upgrade_priority"
    ATTACK_STRATEGY = "attack_strategy"
    BASE_DESIGN = "base_design"
    RESOURCE_MANAGEMENT = "resource_management"


class _AnalysisBase(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    tier_level: int | None = None

    @property
    def params(self) -> dict[str, Any]:
        """Extracted parameters only, keyed by their camelCase wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude={"intent"}, mode="json")


class GeneralAnalysis(_AnalysisBase):
    intent: Literal[Intent.GENERAL] = Intent.GENERAL


class UpgradePriorityAnalysis(_AnalysisBase):
    intent: Literal[Intent.UPGRADE_PRIORITY] = Intent.UPGRADE_PRIORITY
    item_type: str | None = None
    focus: Literal["offense", "defense"] | None = None


class AttackStrategyAnalysis(_AnalysisBase):
    intent: Literal[Intent.ATTACK_STRATEGY] = Intent.ATTACK_STRATEGY
    attack_type: Literal["air", "ground"] | None = None
    focus_unit: str | None = None
    purpose: Literal["farming", "war", "trophy"] | None = None


class BaseDesignAnalysis(_AnalysisBase):
    intent: Literal[Intent.BASE_DESIGN] = Intent.BASE_DESIGN
    base_type: Literal["farming", "war", "trophy", "hybrid"] | None = None


class ResourceManagementAnalysis(_AnalysisBase):
    intent: Literal[Intent.RESOURCE_MANAGEMENT] = Intent.RESOURCE_MANAGEMENT
    resource_type: Literal["gold", "elixir", "dark_elixir", "gems"] | None = None
    goal: Literal["saving", "farming", "spending"] | None = None


QueryAnalysis = Annotated[
    Union[GeneralAnalysis, UpgradePriorityAnalysis, AttackStrategyAnalysis, BaseDesignAnalysis, ResourceManagementAnalysis],
    Field(discriminator="intent"),
]

# Validates ``{"intent": "...", "tierLevel": 9, ...}`` payloads from callers
QUERY_ANALYSIS_ADAPTER: TypeAdapter[QueryAnalysis] = TypeAdapter(QueryAnalysis)


# ══════════════════════════════════════════════════════════════════════
#  SCORED RESULTS
# ══════════════════════════════════════════════════════════════════════


class ScoredCandidate(BaseModel):
    """A corpus document plus whichever scores one retrieval call produced."""

    model_config = ConfigDict(frozen=True)

    document: Document
    similarity: float | None = None
    keyword_score: int | None = None

    @property
    def key(self) -> DocumentKey:
        return self.document.key


class RankedDocument(BaseModel):
    """Final, ranked output of the engine."""

    model_config = ConfigDict(frozen=True)

    document: Document
    similarity: float
    keyword_score: int | None = None

    @property
    def key(self) -> DocumentKey:
        return self.document.key

    @property
    def relevance(self) -> int:
        """Similarity as a whole percentage, rounding halves up."""
        return math.floor(self.similarity * 100 + 0.5)

    @classmethod
    def from_candidate(cls, candidate: ScoredCandidate) -> RankedDocument:
        return cls(document=candidate.document, similarity=candidate.similarity or 0.0, keyword_score=candidate.keyword_score)
