"""
Tactica - CorpusStore
======================
Read-only, in-memory document corpus with two loaders:

  • **JSON** — the precomputed ``embeddings.json`` produced by the
    offline pipeline: ``[{"content", "metadata", "embedding"}, ...]``.
  • **LanceDB** — a table following ``CORPUS_SCHEMA``; also the target
    of ``write_lancedb`` used by the import script.

Design decisions:
  • **Atomic swap** — ``load()`` builds a complete new tuple and swaps
    the reference under ``_lock``; readers grab the current tuple and
    never observe a partial corpus.
  • **Validation at the boundary** — every record goes through the
    ``Document`` model and all embeddings must share one
    dimensionality.  Any failure is a ``CorpusUnavailable``.
  • **No mutation** — retrieval only ever reads ``documents``.

Usage:
    from tactica.src.database.corpus_store import CorpusStore
    store = CorpusStore.from_settings(settings)
    store.load()
    docs = store.documents
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Literal

import lancedb
import pyarrow as pa
from pydantic import ValidationError

from tactica.config.settings import Settings
from tactica.src.core.errors import CorpusUnavailable
from tactica.src.core.models import Document
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)

# ── Type Aliases ──────────────────────────────────────────────────────
CorpusRecord = dict[str, Any]

# ── LanceDB Table Schema ──────────────────────────────────────────────
CORPUS_SCHEMA = pa.schema([
    pa.field("vector", pa.list_(pa.float32())),
    pa.field("content", pa.utf8()),
    pa.field("doc_id", pa.utf8()),
    pa.field("name", pa.utf8()),
    pa.field("type", pa.utf8()),
    pa.field("category", pa.utf8()),
    pa.field("url", pa.utf8()),
])


def _to_row(doc: Document) -> CorpusRecord:
    meta = doc.metadata
    return {"vector": list(doc.embedding), "content": doc.content, "doc_id": meta.id, "name": meta.name, "type": meta.type, "category": meta.category, "url": meta.url}


def _from_row(row: CorpusRecord) -> CorpusRecord:
    return {
        "content": row.get("content") or "",
        "metadata": {"id": row.get("doc_id"), "name": row.get("name") or "", "type": row.get("type") or "", "category": row.get("category") or "", "url": row.get("url")},
        "embedding": row.get("vector") or (),
    }


class CorpusStore:
    """
    Holds the document corpus for the lifetime of the process.

    Parameters
    ----------
    backend
        ``"json"`` or ``"lancedb"``.
    corpus_path
        JSON corpus file (``json`` backend).
    db_path, table_name
        LanceDB location (``lancedb`` backend and ``write_lancedb``).
    """

    __slots__ = ("_backend", "_corpus_path", "_db_path", "_table_name", "_documents", "_lock")

    def __init__(self, backend: Literal["json", "lancedb"] = "json", corpus_path: Path | str | None = None, db_path: Path | str | None = None, table_name: str = "tactica_docs") -> None:
        self._backend = backend
        self._corpus_path = Path(corpus_path) if corpus_path else None
        self._db_path = str(db_path) if db_path else None
        self._table_name = table_name
        self._documents: tuple[Document, ...] | None = None
        self._lock = threading.Lock()


    @classmethod
    def from_settings(cls, cfg: Settings) -> CorpusStore:
        return cls(backend=cfg.CORPUS_BACKEND, corpus_path=cfg.CORPUS_PATH, db_path=cfg.LANCEDB_PATH, table_name=cfg.LANCEDB_TABLE_NAME)


    @classmethod
    def from_documents(cls, documents: Iterable[Document], **kwargs: Any) -> CorpusStore:
        """Build a store that is already loaded with *documents*; *kwargs* go to the constructor."""
        store = cls(**kwargs)
        store._swap(cls._validate(list(documents)))
        return store

    # ══════════════════════════════════════════════════════════════════
    #  READ ACCESS
    # ══════════════════════════════════════════════════════════════════

    @property
    def documents(self) -> tuple[Document, ...]:
        """Current corpus snapshot.  Raises ``CorpusUnavailable`` before the first load."""
        snapshot = self._documents
        if snapshot is None:
            raise CorpusUnavailable("Corpus has not been loaded.")
        return snapshot


    @property
    def is_loaded(self) -> bool:
        return self._documents is not None


    def count(self) -> int:
        return len(self._documents or ())

    # ══════════════════════════════════════════════════════════════════
    #  LOADING
    # ══════════════════════════════════════════════════════════════════

    def load(self) -> int:
        """
        (Re)load the corpus from the configured backend and swap it in.

        Returns
        -------
        int
            Number of documents now held.

        Raises
        ------
        CorpusUnavailable
            On any read, parse or validation failure.  The previously
            loaded corpus, if any, stays in place.
        """
        records = self._read_json() if self._backend == "json" else self._read_lancedb()
        documents = self._validate(records)
        self._swap(documents)
        logger.info("Corpus loaded: %d document(s) from %s backend.", len(documents), self._backend)
        return len(documents)


    reload = load


    def _swap(self, documents: tuple[Document, ...]) -> None:
        with self._lock:
            self._documents = documents


    def _read_json(self) -> list[Any]:
        if self._corpus_path is None:
            raise CorpusUnavailable("No corpus path configured for the json backend.")
        try:
            raw = json.loads(self._corpus_path.read_text(encoding="utf-8"))
        except OSError as exc:
            logger.error("Cannot read corpus file %s: %s", self._corpus_path, exc)
            raise CorpusUnavailable(f"Cannot read corpus file {self._corpus_path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error("Corpus file %s is not valid JSON: %s", self._corpus_path, exc)
            raise CorpusUnavailable(f"Corpus file {self._corpus_path} is not valid JSON: {exc}") from exc

        if not isinstance(raw, list):
            raise CorpusUnavailable(f"Corpus file {self._corpus_path} must contain a JSON array.")
        return raw


    def _read_lancedb(self) -> list[CorpusRecord]:
        if self._db_path is None:
            raise CorpusUnavailable("No LanceDB path configured.")
        try:
            db = lancedb.connect(self._db_path)
            if self._table_name not in db.table_names():
                raise CorpusUnavailable(f"LanceDB table '{self._table_name}' does not exist at {self._db_path}.")
            rows = db.open_table(self._table_name).to_arrow().to_pylist()
        except OSError as exc:
            logger.error("LanceDB filesystem error at %s: %s", self._db_path, exc)
            raise CorpusUnavailable(f"LanceDB filesystem error at {self._db_path}: {exc}") from exc
        return [_from_row(row) for row in rows]


    @staticmethod
    def _validate(records: list[Any]) -> tuple[Document, ...]:
        documents: list[Document] = []
        for i, record in enumerate(records):
            if isinstance(record, Document):
                documents.append(record)
                continue
            try:
                documents.append(Document.model_validate(record))
            except ValidationError as exc:
                raise CorpusUnavailable(f"Corpus record {i} is malformed: {exc.error_count()} error(s).") from exc

        dimensions = {len(doc.embedding) for doc in documents}
        if len(dimensions) > 1:
            raise CorpusUnavailable(f"Corpus embeddings have mixed dimensionality: {sorted(dimensions)}")
        return tuple(documents)

    # ══════════════════════════════════════════════════════════════════
    #  EXPORT
    # ══════════════════════════════════════════════════════════════════

    def write_lancedb(self, drop: bool = False) -> int:
        """
        Persist the loaded corpus into the LanceDB table.

        Parameters
        ----------
        drop
            Drop an existing table first instead of appending to it.

        Returns
        -------
        int
            Rows written.
        """
        if self._db_path is None:
            raise CorpusUnavailable("No LanceDB path configured.")

        rows = [_to_row(doc) for doc in self.documents]
        db = lancedb.connect(self._db_path)

        if drop and self._table_name in db.table_names():
            db.drop_table(self._table_name)
            logger.warning("Dropped table '%s'.", self._table_name)

        if self._table_name in db.table_names():
            table = db.open_table(self._table_name)
        else:
            table = db.create_table(self._table_name, schema=CORPUS_SCHEMA)
            logger.info("Created new table '%s'.", self._table_name)

        if rows:
            table.add(rows)
        logger.info("Wrote %d row(s). Table '%s' now has %d total rows.", len(rows), self._table_name, table.count_rows())
        return len(rows)


    def __repr__(self) -> str:
        return f"CorpusStore(backend='{self._backend}', documents={self.count()})"
