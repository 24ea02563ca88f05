"""
Tactica - Command-line Front End
=================================
Runs one advisor question or one battle simulation against the
configured provider and corpus.

Usage:
    python -m tactica.scripts.ask "What should I upgrade first at TH9?"
    python -m tactica.scripts.ask --simulate
    python -m tactica.scripts.ask --simulate --army army.json --base base.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from tactica.config.settings import settings
from tactica.src.core.advisor import StrategyAdvisor
from tactica.src.core.errors import TacticaError
from tactica.src.core.providers import build_provider
from tactica.src.core.retrieval_engine import RetrievalEngine
from tactica.src.core.simulator import ArmyComposition, BaseLayout, BattleSimulator
from tactica.src.database.corpus_store import CorpusStore
from tactica.src.utils.logger import get_logger

logger = get_logger(__name__)

SAMPLE_ARMY = ArmyComposition(
    town_hall=9,
    troops={"Dragon": 8, "Balloon": 10, "Minion": 5},
    spells={"Lightning Spell": 3, "Rage Spell": 2},
    heroes={"Archer Queen": 20, "Barbarian King": 20},
)

SAMPLE_BASE = BaseLayout(
    town_hall_level=9,
    layout="war",
    defenses={"Air Defense": 4, "Archer Tower": 5, "Wizard Tower": 4, "Air Sweeper": 2},
    walls={"level": 8, "quantity": 250},
    traps={"Seeking Air Mine": 4, "Air Bomb": 4},
    clan_castle={"level": 5, "troops": "Lava Hound"},
    heroes={"Archer Queen": 20},
)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ask", description="Tactica — Ask a strategy question or simulate a battle.")
    parser.add_argument("query", nargs="?", help="Strategy question for the advisor.")
    parser.add_argument("--simulate", action="store_true", default=False, help="Run a battle simulation instead of a question.")
    parser.add_argument("--army", type=Path, help="JSON file with an army composition (defaults to a sample army).")
    parser.add_argument("--base", type=Path, help="JSON file with a base layout (defaults to a sample base).")
    return parser.parse_args()


def _load_model(path: Path | None, model: type, default):
    if path is None:
        return default
    return model.model_validate(json.loads(path.read_text(encoding="utf-8")))


def main() -> None:
    args = _parse_args()
    if not args.simulate and not args.query:
        print("Provide a question, or --simulate.")
        sys.exit(2)

    try:
        store = CorpusStore.from_settings(settings)
        store.load()
        provider = build_provider(settings)
        engine = RetrievalEngine(store, provider)

        if args.simulate:
            army = _load_model(args.army, ArmyComposition, SAMPLE_ARMY)
            base = _load_model(args.base, BaseLayout, SAMPLE_BASE)
            result = BattleSimulator(engine, provider).simulate_battle(army, base)
            print(result.raw_response)
            print()
            print("=" * 60)
            print(f"  Stars        : {result.outcome.stars}")
            print(f"  Destruction  : {result.outcome.destruction_percentage:.0f}%")
            print(f"  Effectiveness: {result.effectiveness}")
            print("=" * 60)
        else:
            answer = StrategyAdvisor(engine, provider).process_query(args.query)
            print(answer.response)
            print()
            print(f"Intent: {answer.intent.value}  Parameters: {answer.parameters}")
            for source in answer.sources:
                print(f"  - {source['name']} ({source['category']}, {source['relevance']}%)")
    except TacticaError as exc:
        logger.error("Request failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
