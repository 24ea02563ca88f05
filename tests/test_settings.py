"""
Tests for configuration defaults and validators
"""
import pytest
from pydantic import ValidationError

from tactica.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LLM_PROVIDER", "GOOGLE_API_KEY", "ADVISOR_MMR_LAMBDA", "SIMULATOR_MMR_LAMBDA", "ADVISOR_TOP_K"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Test settings loading"""

    def test_defaults(self):
        cfg = Settings(_env_file=None)

        assert cfg.LLM_PROVIDER == "ollama"
        assert cfg.ADVISOR_TOP_K == 5
        assert cfg.ADVISOR_MMR_LAMBDA == 0.7
        assert cfg.SIMULATOR_MMR_LAMBDA == 0.5
        assert cfg.TIER_MIN_MATCHES == 5
        assert cfg.DEGRADE_TO_KEYWORDS is True
        assert cfg.CORPUS_PATH.name == "embeddings.json"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ADVISOR_TOP_K", "8")
        assert Settings(_env_file=None).ADVISOR_TOP_K == 8

    @pytest.mark.parametrize("value", [-0.1, 1.01])
    def test_lambda_out_of_range(self, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ADVISOR_MMR_LAMBDA=value)

    def test_counts_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ENTITY_MATCHES=0)

    def test_gemini_requires_key(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LLM_PROVIDER="gemini")

    def test_key_is_secret(self):
        cfg = Settings(_env_file=None, LLM_PROVIDER="gemini", GOOGLE_API_KEY="abcd1234")

        assert cfg.GOOGLE_API_KEY.get_secret_value() == "abcd1234"
        assert "abcd1234" not in repr(cfg)
