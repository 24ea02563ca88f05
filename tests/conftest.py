"""
Shared fixtures: a small hand-built corpus, stub embedding/generation
backends, and settings isolated from any local .env file.
"""
import pytest

from tactica.config.settings import Settings
from tactica.src.core.errors import EmbeddingServiceFailure
from tactica.src.core.models import Document, DocumentMetadata
from tactica.src.database.corpus_store import CorpusStore

UPGRADE_QUERY = "What should I upgrade first at T9?"
UPGRADE_QUERY_VECTOR = [1.0, 0.1, 0.0]


def make_doc(doc_id, content, name="", doc_type="", category="basic_info", embedding=(1.0, 0.0, 0.0), url=None):
    """Build a corpus Document with sensible defaults"""
    return Document(
        content=content,
        metadata=DocumentMetadata(id=doc_id, name=name, type=doc_type, category=category, url=url),
        embedding=tuple(embedding),
    )


class StubEmbedder:
    """Returns canned vectors; unknown texts get the default vector"""

    def __init__(self, vectors=None, default=(0.5, 0.5, 0.5)):
        self.vectors = vectors or {}
        self.default = list(default)
        self.calls = []

    def embed_query(self, text):
        self.calls.append(text)
        return list(self.vectors.get(text, self.default))


class FailingEmbedder:
    """Embedding backend that is always down"""

    def embed_query(self, text):
        raise EmbeddingServiceFailure("embedding backend offline")


class StubGenerator:
    """Records every prompt and returns a fixed answer"""

    def __init__(self, answer="Stub answer."):
        self.answer = answer
        self.calls = []

    def generate(self, prompt, *, system=None, temperature=0.5, max_tokens=1024, stop=None):
        self.calls.append({"prompt": prompt, "system": system, "temperature": temperature, "max_tokens": max_tokens, "stop": stop})
        return self.answer


@pytest.fixture
def cfg():
    """Default settings, ignoring the developer's .env"""
    return Settings(_env_file=None)


@pytest.fixture
def corpus_docs():
    """Eight documents; six mention Town Hall 9 in some spelling"""
    return [
        make_doc("cannon", "Cannon is a single-target ground defense. At T9 upgrade the Cannon to level 12.", name="Cannon", doc_type="defense", embedding=(0.9, 0.1, 0.0), url="https://example.org/cannon"),
        make_doc("air_defense", "Air Defense protects against air troops. Key upgrade at T9.", name="Air Defense", doc_type="defense", embedding=(0.8, 0.3, 0.1)),
        make_doc("archer_queen", "Archer Queen hero upgrade priority for TH9 attacks.", name="Archer Queen", doc_type="hero", embedding=(0.7, 0.0, 0.7)),
        make_doc("dragon", "Dragon is an air troop unlocked at TH7. Strong at T9 in war.", name="Dragon", doc_type="troop", embedding=(0.1, 0.9, 0.2)),
        make_doc("balloon", "Balloon targets defenses. Good at T8.", name="Balloon", doc_type="troop", embedding=(0.2, 0.8, 0.1)),
        make_doc("gold_mine", "Gold Mine produces gold. Improve it at TH10.", name="Gold Mine", doc_type="resource", embedding=(0.0, 0.2, 0.9)),
        make_doc("wall", "Walls slow ground troops at town hall 9.", name="Wall", doc_type="defense", embedding=(0.6, 0.1, 0.2)),
        make_doc("cannon", "Cannon stats: damage per second at TH9 level 12.", name="Cannon", doc_type="defense", category="stats", embedding=(0.85, 0.15, 0.0)),
    ]


@pytest.fixture
def store(corpus_docs):
    return CorpusStore.from_documents(corpus_docs)


@pytest.fixture
def embedder():
    return StubEmbedder({UPGRADE_QUERY: UPGRADE_QUERY_VECTOR})


@pytest.fixture
def generator():
    return StubGenerator()
