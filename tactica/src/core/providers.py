"""
Tactica - Embedding & Generation Providers
===========================================
Adapters around the remote model backends.  The retrieval engine, the
advisor and the simulator receive a provider object through their
constructors; nothing in the pipeline reads a global provider switch.

``Embedder`` / ``Generator``
    Structural types.  Anything exposing ``embed_query`` (LangChain
    embeddings included) is an ``Embedder``; tests pass plain stubs.

``OllamaProvider``
    Local Ollama daemon through the ``ollama`` client.

``GeminiProvider``
    Google Gemini through ``langchain-google-genai``.

``build_provider(settings)``
    Picks the adapter named by ``settings.LLM_PROVIDER``.

Backend exceptions are logged and re-raised as
``EmbeddingServiceFailure`` / ``GenerationServiceFailure``; no adapter
retries.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tactica.config.settings import Settings
from tactica.src.core.errors import EmbeddingServiceFailure, GenerationServiceFailure
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)

# Sampling knobs shared by both backends
_TOP_P = 0.9
_TOP_K = 40


@runtime_checkable
class Embedder(Protocol):
    """Anything that can turn a query into a vector."""

    def embed_query(self, text: str) -> list[float]: ...


@runtime_checkable
class Generator(Protocol):
    """Anything that can turn a prompt into text."""

    def generate(self, prompt: str, *, system: str | None = None, temperature: float = 0.5, max_tokens: int = 1024, stop: list[str] | None = None) -> str: ...


# ══════════════════════════════════════════════════════════════════════
#  OLLAMA
# ══════════════════════════════════════════════════════════════════════


class OllamaProvider:
    """Embedding + generation against a local Ollama daemon."""

    __slots__ = ("_client", "_model", "_embedding_model")

    def __init__(self, base_url: str, model: str, embedding_model: str) -> None:
        import ollama

        self._client = ollama.Client(host=base_url)
        self._model = model
        self._embedding_model = embedding_model
        logger.info("Ollama provider ready: %s (llm=%s, embeddings=%s)", base_url, model, embedding_model)


    def embed_query(self, text: str) -> list[float]:
        try:
            response = self._client.embeddings(model=self._embedding_model, prompt=text)
        except Exception as exc:
            logger.error("Ollama embedding failed: %s", exc)
            raise EmbeddingServiceFailure(f"Ollama embedding failed: {exc}") from exc
        return list(response["embedding"])


    def generate(self, prompt: str, *, system: str | None = None, temperature: float = 0.5, max_tokens: int = 1024, stop: list[str] | None = None) -> str:
        options = {"temperature": temperature, "num_predict": max_tokens, "top_p": _TOP_P, "top_k": _TOP_K, "stop": stop or []}
        try:
            response = self._client.generate(model=self._model, prompt=prompt, system=system, options=options, stream=False)
        except Exception as exc:
            logger.error("Ollama generation failed: %s", exc)
            raise GenerationServiceFailure(f"Ollama generation failed: {exc}") from exc
        return str(response["response"])


# ══════════════════════════════════════════════════════════════════════
#  GEMINI
# ══════════════════════════════════════════════════════════════════════


class GeminiProvider:
    """Embedding + generation through Google Gemini (LangChain wrappers)."""

    __slots__ = ("_api_key", "_model", "_embeddings")

    def __init__(self, api_key: str, model: str, embedding_model: str) -> None:
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        self._api_key = api_key
        self._model = model
        self._embeddings = GoogleGenerativeAIEmbeddings(model=embedding_model, google_api_key=api_key)
        logger.info("Gemini provider ready (llm=%s, embeddings=%s)", model, embedding_model)


    def embed_query(self, text: str) -> list[float]:
        try:
            return list(self._embeddings.embed_query(text))
        except Exception as exc:
            logger.error("Gemini embedding failed: %s", exc)
            raise EmbeddingServiceFailure(f"Gemini embedding failed: {exc}") from exc


    def generate(self, prompt: str, *, system: str | None = None, temperature: float = 0.5, max_tokens: int = 1024, stop: list[str] | None = None) -> str:
        from langchain_core.messages import HumanMessage, SystemMessage
        from langchain_google_genai import ChatGoogleGenerativeAI

        llm = ChatGoogleGenerativeAI(model=self._model, temperature=temperature, top_p=_TOP_P, top_k=_TOP_K, max_output_tokens=max_tokens, google_api_key=self._api_key)
        messages = ([SystemMessage(content=system)] if system else []) + [HumanMessage(content=prompt)]
        try:
            response = llm.invoke(messages, stop=stop)
        except Exception as exc:
            logger.error("Gemini generation failed: %s", exc)
            raise GenerationServiceFailure(f"Gemini generation failed: {exc}") from exc
        return response.content if isinstance(response.content, str) else str(response.content)


# ══════════════════════════════════════════════════════════════════════
#  FACTORY
# ══════════════════════════════════════════════════════════════════════


def build_provider(cfg: Settings) -> OllamaProvider | GeminiProvider:
    """Instantiate the backend selected by ``cfg.LLM_PROVIDER``."""
    if cfg.LLM_PROVIDER == "gemini":
        if cfg.GOOGLE_API_KEY is None:
            raise ValueError("GOOGLE_API_KEY is required for the gemini provider.")
        return GeminiProvider(api_key=cfg.GOOGLE_API_KEY.get_secret_value(), model=cfg.GEMINI_MODEL_NAME, embedding_model=cfg.GEMINI_EMBEDDING_MODEL)
    return OllamaProvider(base_url=cfg.OLLAMA_BASE_URL, model=cfg.OLLAMA_LLM_MODEL, embedding_model=cfg.OLLAMA_EMBEDDING_MODEL)
