"""
Tactica - Text Utilities
=========================
Helpers for query normalisation and tier ("Town Hall level") detection.

Tier mentions come in several equivalent spellings: ``T9``, ``TH9``,
``th 9``, ``tier 9``, ``town hall 9``, ``townhall 9``.  The same
pattern family is used to *extract* a tier from a query and to test
whether a document *mentions* a tier, so both sides agree on spelling.

These helpers are stateless and side-effect-free.
"""

from __future__ import annotations

import re
from functools import lru_cache

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")

# Longer prefixes first so "th9" is not read as "t" + "h9"
_TIER_PREFIX = r"(?:town\s*hall|tier|th|t)"
_TIER_QUERY_RE = re.compile(rf"(?<![a-z0-9]){_TIER_PREFIX}\s*(\d{{1,2}})(?!\d)", re.IGNORECASE)
_TIER_TOKEN_RE = re.compile(r"^(?:townhall|tier|th|t)\d{1,2}$")


def normalise_text(text: str) -> str:
    """Lower-case *text* and strip punctuation, keeping word characters and whitespace."""
    return _PUNCTUATION_RE.sub("", text.lower())


def tokenize(text: str) -> list[str]:
    """Split normalised text on whitespace runs."""
    return [t for t in _WHITESPACE_RE.split(text.strip()) if t]


def extract_tier(text: str) -> int | None:
    """
    Return the first tier level mentioned in *text*, or ``None``.

    Examples::

        "What should I upgrade first at T9?"  → 9
        "best tier 12 army"                   → 12
        "Town Hall 7 farming base"            → 7
        "what to upgrade next"                → None
    """
    match = _TIER_QUERY_RE.search(text)
    if match is None:
        return None
    return int(match.group(1))


def is_tier_token(token: str) -> bool:
    """True for single-token tier spellings such as ``t9`` or ``th12``."""
    return bool(_TIER_TOKEN_RE.match(token))


def tier_tokens(level: int) -> list[str]:
    """Canonical keyword tokens for a tier level."""
    return [f"t{level}", f"th{level}", f"townhall{level}"]


@lru_cache(maxsize=64)
def _tier_mention_re(level: int) -> re.Pattern[str]:
    return re.compile(rf"(?<![a-z0-9])(?:town ?hall|tier|th|t) ?{level}(?!\d)")


def mentions_tier(text: str, level: int) -> bool:
    """True when *text* mentions *level* under any accepted spelling."""
    if level < 1:
        return False
    return _tier_mention_re(level).search(text.lower()) is not None
