"""
Tests for CorpusStore loading, validation and LanceDB round trip
"""
import json

import pytest

from conftest import make_doc
from tactica.src.core.errors import CorpusUnavailable
from tactica.src.database.corpus_store import CorpusStore


def _record(doc_id, embedding=(0.1, 0.2, 0.3), **metadata):
    return {"content": f"{doc_id} content", "metadata": {"id": doc_id, **metadata}, "embedding": list(embedding)}


@pytest.fixture
def corpus_file(tmp_path):
    def write(payload):
        path = tmp_path / "embeddings.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return write


class TestJsonBackend:
    """Test loading the precomputed JSON corpus"""

    def test_load(self, corpus_file):
        path = corpus_file([_record("cannon", name="Cannon", type="defense", category="basic_info"), _record(42)])
        store = CorpusStore(backend="json", corpus_path=path)

        assert store.load() == 2
        assert store.is_loaded
        assert store.documents[0].metadata.name == "Cannon"
        assert store.documents[1].metadata.id == "42"
        assert store.documents[1].metadata.category == ""

    def test_not_loaded(self):
        store = CorpusStore()

        assert not store.is_loaded
        assert store.count() == 0
        with pytest.raises(CorpusUnavailable):
            store.documents

    def test_missing_file(self, tmp_path):
        with pytest.raises(CorpusUnavailable):
            CorpusStore(corpus_path=tmp_path / "missing.json").load()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(CorpusUnavailable):
            CorpusStore(corpus_path=path).load()

    def test_not_an_array(self, corpus_file):
        with pytest.raises(CorpusUnavailable):
            CorpusStore(corpus_path=corpus_file({"content": "x"})).load()

    def test_malformed_record(self, corpus_file):
        with pytest.raises(CorpusUnavailable):
            CorpusStore(corpus_path=corpus_file([{"metadata": {"id": "x"}}])).load()

    def test_mixed_dimensions(self, corpus_file):
        path = corpus_file([_record("a", (0.1, 0.2)), _record("b", (0.1, 0.2, 0.3))])

        with pytest.raises(CorpusUnavailable):
            CorpusStore(corpus_path=path).load()

    def test_failed_reload_keeps_previous_corpus(self, corpus_file):
        path = corpus_file([_record("a")])
        store = CorpusStore(corpus_path=path)
        store.load()

        path.write_text("not json", encoding="utf-8")
        with pytest.raises(CorpusUnavailable):
            store.reload()

        assert [d.metadata.id for d in store.documents] == ["a"]

    def test_reload_swaps(self, corpus_file):
        path = corpus_file([_record("a")])
        store = CorpusStore(corpus_path=path)
        store.load()
        before = store.documents

        corpus_file([_record("a"), _record("b")])
        store.reload()

        assert len(before) == 1
        assert store.count() == 2


class TestFromDocuments:
    """Test the in-memory constructor"""

    def test_from_documents(self):
        store = CorpusStore.from_documents([make_doc("a", "a"), make_doc("b", "b")])
        assert store.count() == 2
        assert repr(store) == "CorpusStore(backend='json', documents=2)"

    def test_rejects_mixed_dimensions(self):
        with pytest.raises(CorpusUnavailable):
            CorpusStore.from_documents([make_doc("a", "a", embedding=(1.0,)), make_doc("b", "b", embedding=(1.0, 0.0))])


class TestLanceDbBackend:
    """Test exporting to and loading from LanceDB"""

    def test_round_trip(self, tmp_path):
        docs = [make_doc("cannon", "Cannon content", name="Cannon", doc_type="defense", embedding=(0.5, 0.25, 0.0), url="https://example.org/cannon"), make_doc("dragon", "Dragon content", name="Dragon", doc_type="troop", embedding=(0.0, 1.0, 0.0))]
        db_path = tmp_path / "lancedb"

        source = CorpusStore.from_documents(docs, db_path=db_path)
        assert source.write_lancedb(drop=True) == 2

        loaded = CorpusStore(backend="lancedb", db_path=db_path)
        assert loaded.load() == 2
        by_id = {d.metadata.id: d for d in loaded.documents}
        assert by_id["cannon"].metadata.url == "https://example.org/cannon"
        assert by_id["cannon"].embedding == pytest.approx((0.5, 0.25, 0.0))
        assert by_id["dragon"].metadata.type == "troop"

    def test_missing_table(self, tmp_path):
        with pytest.raises(CorpusUnavailable):
            CorpusStore(backend="lancedb", db_path=tmp_path / "empty").load()
