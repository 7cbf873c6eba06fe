"""Mansion Detective Environment.

Explore a binary tree of rooms, collect clues into a dossier, accuse a suspect.
An accusation succeeds when at least two collected clues point to the accused.

Usage:
    from environments.mansion import Actor

    actor = Actor()
    session = await actor.create_session()
    await actor.move(session["session_id"], "left")
    await actor.move(session["session_id"], "quit")
    result = await actor.accuse(session["session_id"], "Mordomo")
"""

from .env import Actor
from ._registry import ClueRegistry, SuspectAssociation, UNKNOWN_SUSPECT
from ._rooms import Room, RoomMap, Side, build_room, visit_and_collect
from ._dossier import ClueRecord, Dossier, insert_clue, inorder_traverse
from ._exploration import ExplorationEngine, Direction, parse_choice
from ._verdict import SUCCESS_THRESHOLD, judge, tally, verdict
from ._scenario import Scenario, load_scenario
from ._session import SessionManager, SessionStatus
from ._task import MansionTask
from ._models import Classification, Outcome

__all__ = [
    "Actor",
    "ClueRegistry",
    "SuspectAssociation",
    "UNKNOWN_SUSPECT",
    "Room",
    "RoomMap",
    "Side",
    "build_room",
    "visit_and_collect",
    "ClueRecord",
    "Dossier",
    "insert_clue",
    "inorder_traverse",
    "ExplorationEngine",
    "Direction",
    "parse_choice",
    "SUCCESS_THRESHOLD",
    "judge",
    "tally",
    "verdict",
    "Scenario",
    "load_scenario",
    "SessionManager",
    "SessionStatus",
    "MansionTask",
    "Classification",
    "Outcome",
]
