"""Session management for mansion games.

This module handles the stateful multi-turn interaction between a player
(human or agent) and one mansion: exploration moves, then a single
accusation.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ._dossier import Dossier
from ._exploration import ExplorationEngine
from ._models import EvaluationResult, Notification, Outcome, SessionSummary, Verdict
from ._registry import ClueRegistry
from ._rooms import RoomMap
from ._scenario import Scenario, load_scenario
from ._verdict import judge

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    """Status of a mansion session."""
    EXPLORING = "exploring"        # Moves allowed
    ACCUSING = "accusing"          # Exploration over, waiting for an accusation
    SOLVED = "solved"              # Accusation backed by enough evidence
    FAILED = "failed"              # Accusation lacked evidence
    UNRESOLVABLE = "unresolvable"  # Exploration ended with an empty dossier


FINISHED = (SessionStatus.SOLVED, SessionStatus.FAILED, SessionStatus.UNRESOLVABLE)


@dataclass
class SessionInfo:
    """Information returned when starting a session."""
    session_id: str
    scenario: str
    start_room: str
    exits: List[str]
    suspects: List[str]
    rooms: int


@dataclass
class SessionState:
    """Complete state of a mansion session."""
    session_id: str
    scenario: Scenario
    room_map: RoomMap
    registry: ClueRegistry
    dossier: Dossier
    engine: ExplorationEngine
    opening: List[Notification] = field(default_factory=list)
    events: List[Notification] = field(default_factory=list)
    status: SessionStatus = SessionStatus.EXPLORING
    accused_name: Optional[str] = None
    valid_count: int = 0
    outcome: Optional[Outcome] = None

    @property
    def moves(self) -> int:
        return self.engine.moves

    @property
    def score(self) -> float:
        return 1.0 if self.outcome is Outcome.SUCCESS else 0.0

    def to_dict(self) -> dict:
        """Convert session state to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "scenario": self.scenario.title,
            "current_room": self.engine.current.name,
            "exits": [side.value for side in self.engine.current.exits],
            "moves": self.moves,
            "dossier": list(self.dossier),
            "status": self.status.value,
            "accused_name": self.accused_name,
            "valid_count": self.valid_count,
            "outcome": self.outcome.value if self.outcome else None,
        }

    def evaluation(self) -> EvaluationResult:
        return EvaluationResult(
            score=self.score,
            accused_name=self.accused_name,
            valid_count=self.valid_count,
            outcome=self.outcome,
            clues_collected=len(self.dossier),
            moves=self.moves,
            status=self.status.value,
        )


class SessionManager:
    """Manages multiple independent mansion sessions.

    This class handles:
    - Creating sessions from a scenario (the reference mansion by default)
    - Applying moves while a session is exploring
    - Judging the single accusation once exploration is over
    - Tearing down map, dossier and registry when a session closes
    """

    def __init__(self, max_sessions: int = 1000):
        """Initialize session manager.

        Args:
            max_sessions: Maximum number of open sessions
        """
        self.sessions: Dict[str, SessionState] = {}
        self.max_sessions = max_sessions

    def create_session(
        self,
        scenario: Optional[Scenario] = None,
        session_id: Optional[str] = None
    ) -> SessionInfo:
        """Create a new session and enter the first room.

        Args:
            scenario: Scenario to play (default: ``load_scenario()``)
            session_id: Optional custom session ID

        Returns:
            SessionInfo with session details
        """
        if len(self.sessions) >= self.max_sessions:
            self._cleanup_old_sessions()
            if len(self.sessions) >= self.max_sessions:
                raise RuntimeError("Maximum number of sessions reached")

        if session_id is None:
            session_id = str(uuid.uuid4())
        if session_id in self.sessions:
            raise ValueError(f"Session already exists: {session_id}")

        scenario = scenario or load_scenario()
        room_map = scenario.build_map()
        registry = scenario.build_registry()
        dossier = Dossier()
        engine = ExplorationEngine(room_map, dossier)

        state = SessionState(
            session_id=session_id,
            scenario=scenario,
            room_map=room_map,
            registry=registry,
            dossier=dossier,
            engine=engine,
        )
        state.opening = engine.start()
        state.events.extend(state.opening)
        self.sessions[session_id] = state
        logger.info("Created session %s for %r", session_id, scenario.title)

        return SessionInfo(
            session_id=session_id,
            scenario=scenario.title,
            start_room=engine.current.name,
            exits=[side.value for side in engine.current.exits],
            suspects=scenario.suspect_names(),
            rooms=len(room_map),
        )

    def opening_events(self, session_id: str) -> List[Notification]:
        """Notifications produced by entering the first room."""
        return list(self._get_session(session_id).opening)

    def move(self, session_id: str, choice: str) -> dict:
        """Apply one directional choice.

        Args:
            session_id: Session identifier
            choice: ``left``, ``right`` or ``quit`` (or an accepted alias)

        Returns:
            Dictionary with the notifications and the updated status
        """
        state = self._get_session(session_id, SessionStatus.EXPLORING)
        events = state.engine.step(choice)
        state.events.extend(events)

        if state.engine.ended:
            if state.dossier.is_empty:
                # nothing to weigh; no accusation is asked for
                state.status = SessionStatus.UNRESOLVABLE
                unresolvable = judge(None, state.registry, "")
                events = events + unresolvable
                state.events.extend(unresolvable)
            else:
                state.status = SessionStatus.ACCUSING
            logger.info("Session %s finished exploring: %s", session_id, state.status.value)

        return {
            "events": events,
            "current_room": state.engine.current.name,
            "exits": [side.value for side in state.engine.current.exits],
            "moves": state.moves,
            "status": state.status.value,
        }

    def accuse(self, session_id: str, accused_name: str) -> dict:
        """Judge the accusation against the session's dossier.

        Args:
            session_id: Session identifier
            accused_name: Suspect name (exact match)

        Returns:
            Dictionary with the classification notifications and the result
        """
        state = self._get_session(session_id, SessionStatus.ACCUSING)
        accused_name = accused_name.strip()
        events = judge(state.dossier.root, state.registry, accused_name)
        state.events.extend(events)

        final: Verdict = events[-1]
        state.accused_name = accused_name
        state.valid_count = final.valid_count
        state.outcome = final.outcome
        state.status = SessionStatus.SOLVED if final.outcome is Outcome.SUCCESS else SessionStatus.FAILED

        result = state.evaluation().model_dump()
        result["events"] = events
        return result

    def get_session_state(self, session_id: str) -> dict:
        """Get current state of a session.

        Args:
            session_id: Session identifier

        Returns:
            Dictionary with session state
        """
        return self._get_session(session_id).to_dict()

    def get_event_history(self, session_id: str) -> List[dict]:
        """Get every notification a session has produced, oldest first."""
        return [event.model_dump(mode="json") for event in self._get_session(session_id).events]

    def summarize(self, session_id: str, conversation: List[Dict[str, str]]) -> SessionSummary:
        state = self._get_session(session_id)
        return SessionSummary(
            session_id=session_id,
            scenario=state.scenario.title,
            score=state.score,
            moves=state.moves,
            dossier=list(state.dossier),
            accused_name=state.accused_name,
            outcome=state.outcome,
            conversation=conversation,
        )

    def close_session(self, session_id: str):
        """Tear down and remove a session.

        Args:
            session_id: Session identifier
        """
        state = self.sessions.pop(session_id, None)
        if state is None:
            return
        rooms = state.room_map.teardown()
        clues = state.dossier.clear()
        associations = state.registry.clear()
        logger.debug("Closed session %s (released %d rooms, %d clues, %d associations)",
                     session_id, rooms, clues, associations)

    def _get_session(
        self,
        session_id: str,
        required: Optional[SessionStatus] = None
    ) -> SessionState:
        """Get a session, raising error if not found or not in the required status."""
        if session_id not in self.sessions:
            raise ValueError(f"Session not found: {session_id}")

        state = self.sessions[session_id]
        if required is not None and state.status != required:
            raise ValueError(f"Session is not {required.value} (status: {state.status.value})")

        return state

    def _cleanup_old_sessions(self):
        """Remove finished sessions to free up space."""
        to_remove = [sid for sid, state in self.sessions.items() if state.status in FINISHED]
        for sid in to_remove[:len(to_remove) // 2 or len(to_remove)]:
            self.close_session(sid)


# Global session manager instance
_session_manager = SessionManager()


def get_session_manager() -> SessionManager:
    """Get the global session manager instance."""
    return _session_manager
