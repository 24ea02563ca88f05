"""
Tactica - Corpus Import Script
===============================
CLI entry point that orchestrates:
    1. Load settings (fail-fast on configuration errors).
    2. Read the precomputed JSON corpus (``CORPUS_PATH``).
    3. Write it into the LanceDB table (optionally dropping it first).
    4. Print a structured execution summary with timing breakdown.

Flags:
    --drop       Drop the LanceDB table before importing.
    --drop-only  Drop the table and exit immediately (no import).

Usage:
    python -m tactica.scripts.setup_db              # Append to the table
    python -m tactica.scripts.setup_db --drop       # Drop table, re-import
    python -m tactica.scripts.setup_db --drop-only  # Drop table and exit
"""

from __future__ import annotations

import argparse
import sys
import time


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="setup_db", description="Tactica — Import the precomputed JSON corpus into LanceDB.")
    parser.add_argument("--drop", action="store_true", default=False, help="Drop the LanceDB table before importing.")
    parser.add_argument("--drop-only", action="store_true", default=False, help="Drop the LanceDB table and exit (no import).")
    return parser.parse_args()


# ── Main Orchestration ─────────────────────────────────────────────────

def main() -> None:
    args = _parse_args()
    t_start = time.perf_counter()

    # ── 0. Load settings + .env (timed) ────────────────────────────────
    t_settings = time.perf_counter()
    try:
        from tactica.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        sys.exit(1)
    settings_ms = (time.perf_counter() - t_settings) * 1000

    from tactica.src.core.errors import CorpusUnavailable
    from tactica.src.database.corpus_store import CorpusStore
    from tactica.src.utils.logger import get_logger
    logger = get_logger(__name__)

    logger.info("Settings loaded in %.1fms", settings_ms)
    _print_header(settings)

    if args.drop_only:
        import lancedb

        db = lancedb.connect(str(settings.LANCEDB_PATH))
        if settings.LANCEDB_TABLE_NAME in db.table_names():
            db.drop_table(settings.LANCEDB_TABLE_NAME)
            logger.warning("--drop-only: table '%s' dropped. Exiting.", settings.LANCEDB_TABLE_NAME)
        else:
            logger.info("--drop-only: table '%s' does not exist. Exiting.", settings.LANCEDB_TABLE_NAME)
        _print_footer(0, time.perf_counter() - t_start, settings_ms, 0.0, 0.0)
        return

    # ── 1. Read the JSON corpus (timed) ────────────────────────────────
    t_read = time.perf_counter()
    store = CorpusStore(backend="json", corpus_path=settings.CORPUS_PATH, db_path=settings.LANCEDB_PATH, table_name=settings.LANCEDB_TABLE_NAME)
    try:
        store.load()
    except CorpusUnavailable as exc:
        logger.error("Cannot import corpus: %s", exc)
        sys.exit(1)
    read_ms = (time.perf_counter() - t_read) * 1000

    # ── 2. Write into LanceDB (timed) ──────────────────────────────────
    t_write = time.perf_counter()
    written = store.write_lancedb(drop=args.drop)
    write_ms = (time.perf_counter() - t_write) * 1000

    # ── 3. Print execution summary ─────────────────────────────────────
    _print_footer(written, time.perf_counter() - t_start, settings_ms, read_ms, write_ms)


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_header(settings: object) -> None:
    print()
    print("=" * 60)
    print("  TACTICA — Corpus Import")
    print("=" * 60)
    print(f"  Environment  : {settings.ENV}")                 # type: ignore[attr-defined]
    print(f"  Corpus file  : {settings.CORPUS_PATH}")         # type: ignore[attr-defined]
    print(f"  LanceDB path : {settings.LANCEDB_PATH}")        # type: ignore[attr-defined]
    print(f"  Table        : {settings.LANCEDB_TABLE_NAME}")  # type: ignore[attr-defined]
    print("=" * 60)
    print()


def _print_footer(rows: int, elapsed: float, settings_ms: float, read_ms: float, write_ms: float) -> None:
    print()
    print("=" * 60)
    print("  EXECUTION SUMMARY")
    print("-" * 60)
    print(f"  Documents written    : {rows}")
    print("-" * 60)
    print("  TIMING BREAKDOWN")
    print("-" * 60)
    print(f"  Settings + .env load : {settings_ms:>8.1f}ms")
    print(f"  Corpus read          : {read_ms:>8.1f}ms")
    print(f"  LanceDB write        : {write_ms:>8.1f}ms")
    print(f"  Total elapsed        : {elapsed:>8.2f}s")
    print("=" * 60)
    print()


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
