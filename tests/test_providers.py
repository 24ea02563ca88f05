"""
Tests for the provider adapters with the backend clients mocked out
"""
from unittest.mock import MagicMock, patch

import pytest

from tactica.config.settings import Settings
from tactica.src.core.errors import EmbeddingServiceFailure, GenerationServiceFailure
from tactica.src.core.providers import Embedder, GeminiProvider, Generator, OllamaProvider, build_provider


class TestOllamaProvider:
    """Test the Ollama adapter"""

    def setup_method(self):
        self.patcher = patch("ollama.Client")
        self.client_cls = self.patcher.start()
        self.client = self.client_cls.return_value
        self.provider = OllamaProvider(base_url="http://ollama:11434", model="mistral:7b", embedding_model="nomic-embed-text")

    def teardown_method(self):
        self.patcher.stop()

    def test_satisfies_protocols(self):
        assert isinstance(self.provider, Embedder)
        assert isinstance(self.provider, Generator)
        self.client_cls.assert_called_once_with(host="http://ollama:11434")

    def test_embed_query(self):
        self.client.embeddings.return_value = {"embedding": [0.1, 0.2]}

        assert self.provider.embed_query("dragon") == [0.1, 0.2]
        self.client.embeddings.assert_called_once_with(model="nomic-embed-text", prompt="dragon")

    def test_embed_failure(self):
        self.client.embeddings.side_effect = ConnectionError("refused")

        with pytest.raises(EmbeddingServiceFailure):
            self.provider.embed_query("dragon")

    def test_generate(self):
        self.client.generate.return_value = {"response": "Use dragons."}

        answer = self.provider.generate("prompt", system="sys", temperature=0.2, max_tokens=64, stop=["END"])

        assert answer == "Use dragons."
        kwargs = self.client.generate.call_args.kwargs
        assert kwargs["model"] == "mistral:7b"
        assert kwargs["system"] == "sys"
        assert kwargs["options"]["num_predict"] == 64
        assert kwargs["options"]["stop"] == ["END"]

    def test_generate_failure(self):
        self.client.generate.side_effect = RuntimeError("model not found")

        with pytest.raises(GenerationServiceFailure):
            self.provider.generate("prompt")


class TestGeminiProvider:
    """Test the Gemini adapter"""

    @patch("langchain_google_genai.GoogleGenerativeAIEmbeddings")
    def test_embed_failure(self, embeddings_cls):
        embeddings_cls.return_value.embed_query.side_effect = RuntimeError("quota")
        provider = GeminiProvider(api_key="key", model="gemini-1.5-flash", embedding_model="models/embedding-001")

        with pytest.raises(EmbeddingServiceFailure):
            provider.embed_query("dragon")

    @patch("langchain_google_genai.ChatGoogleGenerativeAI")
    @patch("langchain_google_genai.GoogleGenerativeAIEmbeddings")
    def test_generate(self, embeddings_cls, chat_cls):
        chat_cls.return_value.invoke.return_value = MagicMock(content="Use hogs.")
        provider = GeminiProvider(api_key="key", model="gemini-1.5-flash", embedding_model="models/embedding-001")

        assert provider.generate("prompt", system="sys") == "Use hogs."
        messages = chat_cls.return_value.invoke.call_args.args[0]
        assert [m.content for m in messages] == ["sys", "prompt"]


class TestBuildProvider:
    """Test backend selection"""

    @patch("ollama.Client")
    def test_default_is_ollama(self, client_cls, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        assert isinstance(build_provider(Settings(_env_file=None)), OllamaProvider)

    @patch("langchain_google_genai.GoogleGenerativeAIEmbeddings")
    def test_gemini(self, embeddings_cls):
        cfg = Settings(_env_file=None, LLM_PROVIDER="gemini", GOOGLE_API_KEY="key")
        assert isinstance(build_provider(cfg), GeminiProvider)
