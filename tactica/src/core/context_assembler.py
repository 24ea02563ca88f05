"""
Tactica - Context Assembler
============================
Packs the ranked documents and the query interpretation into the
structure handed to the generation prompt builders.

No ranking decisions happen here: documents keep the order they arrive
in, relevance is ``round(similarity × 100)``, and an empty document
list is a valid context.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict

from tactica.config.prompt_templates import NO_CONTEXT_PLACEHOLDER
from tactica.src.core.models import Intent, QueryAnalysis, RankedDocument


class ContextExcerpt(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    name: str
    type: str
    category: str
    url: str | None
    content: str
    relevance: int


class RetrievalContext(BaseModel):
    """Ordered excerpts plus the intent and parameters that produced them."""

    model_config = ConfigDict(frozen=True)

    intent: Intent
    params: dict[str, Any]
    excerpts: tuple[ContextExcerpt, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.excerpts

    def render(self) -> str:
        """Numbered document block for a prompt, e.g. ``[Document 1] Cannon: ...``."""
        if not self.excerpts:
            return NO_CONTEXT_PLACEHOLDER

        blocks: list[str] = []
        for ex in self.excerpts:
            label = f"{ex.name}: " if ex.name else ""
            blocks.append(f"[Document {ex.index}] ({ex.category}, relevance {ex.relevance}%) {label}{ex.content.strip()}")
        return "\n\n".join(blocks)

    def sources(self) -> list[dict[str, Any]]:
        """Citation list in the shape returned to API callers."""
        return [
            {"name": ex.name or "Unknown", "type": ex.type or "Unknown", "category": ex.category or "Unknown", "url": ex.url, "relevance": ex.relevance}
            for ex in self.excerpts
        ]


def assemble_context(documents: Sequence[RankedDocument], analysis: QueryAnalysis) -> RetrievalContext:
    excerpts = tuple(
        ContextExcerpt(
            index=i,
            name=doc.document.metadata.name,
            type=doc.document.metadata.type,
            category=doc.document.metadata.category,
            url=doc.document.metadata.url,
            content=doc.document.content,
            relevance=doc.relevance,
        )
        for i, doc in enumerate(documents, 1)
    )
    return RetrievalContext(intent=analysis.intent, params=analysis.params, excerpts=excerpts)
