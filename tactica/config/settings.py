"""
Tactica - Centralized Configuration
====================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Providers
---------
``LLM_PROVIDER`` selects the embedding / generation backend (``ollama``
or ``gemini``).  The setting is only *read* here; the backend object
itself is built by ``tactica.src.core.providers.build_provider`` and
injected into the retrieval engine, the advisor and the simulator.

Security
--------
- ``GOOGLE_API_KEY`` is typed as ``SecretStr``.  It is optional for the
  Ollama backend but **required** when ``LLM_PROVIDER="gemini"``; the
  model validator refuses to start without it.  The raw value is never
  exposed in repr, logs, or tracebacks.

Paths
-----
All filesystem paths are ``Path.resolve()``-d at class level so they
work identically on Windows, WSL, and Linux.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).

    Attributes
    ----------
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    LLM_PROVIDER : Literal["ollama", "gemini"]
        Backend used for query embeddings and text generation.
    GOOGLE_API_KEY : SecretStr | None
        API key for Google AI Studio.  Required for ``gemini``.
    CORPUS_BACKEND : Literal["json", "lancedb"]
        Where ``CorpusStore`` reads the precomputed corpus from.
    SEARCH_TOP_K : int
        Per-branch K of the hybrid search (semantic and keyword).
    ADVISOR_TOP_K, ADVISOR_MMR_LAMBDA : int, float
        Final context size and relevance/diversity trade-off for
        advisor queries.
    SIMULATOR_MMR_LAMBDA : float
        MMR trade-off for battle-scenario entity lookups.
    DEGRADE_TO_KEYWORDS : bool
        When the query cannot be embedded, fall back to keyword-only
        retrieval instead of failing the request.
    """

    # ── Resolved Absolute Paths ────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    DATA_PROCESSED_DIR: Path = BASE_DIR / "data" / "processed"
    CORPUS_PATH: Path = DATA_PROCESSED_DIR / "embeddings.json"
    LANCEDB_PATH: Path = BASE_DIR / "data" / "lancedb"

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"

    # ── Provider Selection ─────────────────────────────────────────────
    LLM_PROVIDER: Literal["ollama", "gemini"] = "ollama"
    GOOGLE_API_KEY: SecretStr | None = None

    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_LLM_MODEL: str = "mistral:7b"
    OLLAMA_EMBEDDING_MODEL: str = "nomic-embed-text"

    GEMINI_MODEL_NAME: str = "gemini-1.5-flash"
    GEMINI_EMBEDDING_MODEL: str = "models/embedding-001"

    # ── Corpus ─────────────────────────────────────────────────────────
    CORPUS_BACKEND: Literal["json", "lancedb"] = "json"
    LANCEDB_TABLE_NAME: str = "tactica_docs"

    # ── Retrieval Parameters ───────────────────────────────────────────
    SEARCH_TOP_K: int = 7
    ADVISOR_TOP_K: int = 5
    ADVISOR_MMR_LAMBDA: float = 0.7
    SIMULATOR_MMR_LAMBDA: float = 0.5
    ENTITY_MATCHES: int = 2
    SIMULATOR_ARMY_LIMIT: int = 5
    SIMULATOR_BASE_LIMIT: int = 3
    TIER_MIN_MATCHES: int = 5
    UPGRADE_BOOST_LIMIT: int = 3
    ATTACK_BOOST_LIMIT: int = 2
    DEGRADE_TO_KEYWORDS: bool = True

    # ── Generation Parameters ──────────────────────────────────────────
    LLM_TEMPERATURE: float = 0.5
    ADVISOR_MAX_TOKENS: int = 2048
    SIMULATOR_MAX_TOKENS: int = 1024

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("ADVISOR_MMR_LAMBDA", "SIMULATOR_MMR_LAMBDA")
    @classmethod
    def _lambda_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"MMR lambda must be within [0, 1], got {v}")
        return v


    @field_validator("SEARCH_TOP_K", "ADVISOR_TOP_K", "ENTITY_MATCHES", "SIMULATOR_ARMY_LIMIT", "SIMULATOR_BASE_LIMIT", "TIER_MIN_MATCHES")
    @classmethod
    def _positive_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Retrieval counts must be ≥ 1, got {v}")
        return v


    @model_validator(mode="after")
    def _gemini_needs_key(self) -> "Settings":
        if self.LLM_PROVIDER == "gemini" and self.GOOGLE_API_KEY is None:
            raise ValueError("GOOGLE_API_KEY is required when LLM_PROVIDER='gemini'")
        return self

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from tactica.config.settings import settings
settings = Settings()
