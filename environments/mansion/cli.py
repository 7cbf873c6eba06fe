from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, Iterator, List, Optional

from ._dossier import Dossier
from ._exploration import ExplorationEngine
from ._models import Outcome
from ._render import render_dossier, render_event, render_exits
from ._scenario import Scenario, load_scenario
from ._verdict import judge

LOG_LEVEL_ENV_VAR = "MANSION_LOG_LEVEL"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detective game: explore the mansion and accuse the culprit")
    parser.add_argument("--scenario", default=None, help="Path to a scenario YAML (default: bundled mansion)")
    parser.add_argument("--log-level", default=os.getenv(LOG_LEVEL_ENV_VAR, "WARNING"), type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--moves", default=None, help='Scripted choices instead of prompts, e.g. "l,r,q"')
    parser.add_argument("--accuse", default=None, help="Suspect to accuse instead of prompting")
    return parser


def _scripted(moves: str) -> Iterator[str]:
    for token in moves.split(","):
        yield token.strip()
    # a script that forgets to quit still ends the walk
    while True:
        yield "q"


def play(
    scenario: Scenario,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    moves: Optional[str] = None,
    accused: Optional[str] = None,
) -> Optional[Outcome]:
    """Play one game; returns the outcome, or None when the case is unresolvable."""
    room_map = scenario.build_map()
    registry = scenario.build_registry()
    dossier = Dossier()
    engine = ExplorationEngine(room_map, dossier, listener=lambda event: write(render_event(event)))
    script = _scripted(moves) if moves is not None else None

    write(f"--- {scenario.title}: exploration started ---")
    engine.start()
    while not engine.ended:
        write(render_exits([side.value for side in engine.current.exits]))
        choice = next(script) if script is not None else read("Your choice (l/r/q): ")
        engine.step(choice)

    write(render_dossier(dossier))

    outcome = None
    if dossier.is_empty:
        for event in judge(None, registry, ""):
            write(render_event(event))
    else:
        write("Suspects: " + ", ".join(scenario.suspect_names()))
        name = accused if accused is not None else read("Accusation - name the culprit: ")
        events = judge(dossier.root, registry, name.strip())
        for event in events:
            write(render_event(event))
        outcome = events[-1].outcome

    room_map.teardown()
    dossier.clear()
    registry.clear()
    return outcome


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    scenario = load_scenario(args.scenario)
    outcome = play(scenario, moves=args.moves, accused=args.accuse)
    return 0 if outcome is Outcome.SUCCESS else 1
