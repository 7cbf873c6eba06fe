"""Exploration engine: walks the room map one directional choice at a time.

States:
- AT_ROOM(current): waiting for the next choice
- ENDED: the player chose to quit (terminal)

Every transition returns the notifications it produced; the engine never
raises for a blocked direction, an unknown choice or a dead end.
"""

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional

from ._dossier import Dossier
from ._models import (
    ClueAddedToDossier,
    ClueCollected,
    DeadEnd,
    ExplorationEnded,
    InvalidOrBlockedChoice,
    Notification,
    RoomEntered,
)
from ._rooms import Room, RoomMap, Side, visit_and_collect

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    QUIT = "quit"


# single letters and words, English and Portuguese (e/d/s)
CHOICE_ALIASES = {
    "l": Direction.LEFT,
    "left": Direction.LEFT,
    "e": Direction.LEFT,
    "esquerda": Direction.LEFT,
    "r": Direction.RIGHT,
    "right": Direction.RIGHT,
    "d": Direction.RIGHT,
    "direita": Direction.RIGHT,
    "q": Direction.QUIT,
    "quit": Direction.QUIT,
    "s": Direction.QUIT,
    "sair": Direction.QUIT,
}


def parse_choice(token: str) -> Optional[Direction]:
    """Map a raw input token to a direction, case-insensitively."""
    return CHOICE_ALIASES.get(token.strip().lower())


class ExplorationState(Enum):
    AT_ROOM = "at_room"
    ENDED = "ended"


class ExplorationEngine:
    """State machine over a ``RoomMap`` that fills a ``Dossier``.

    Several engines may walk the same map and dossier one after another;
    collected rooms stay collected, so a clue is picked up at most once.
    """

    def __init__(
        self,
        room_map: RoomMap,
        dossier: Optional[Dossier] = None,
        listener: Optional[Callable[[Notification], None]] = None
    ):
        if room_map.root is None:
            raise ValueError("Cannot explore an empty map")
        self.room_map = room_map
        self.dossier = dossier if dossier is not None else Dossier()
        self.listener = listener
        self.state = ExplorationState.AT_ROOM
        self.current: Room = room_map.root
        self.moves = 0
        self.history: List[Notification] = []
        self._started = False

    @property
    def ended(self) -> bool:
        return self.state is ExplorationState.ENDED

    def start(self) -> List[Notification]:
        """Enter the root room. Idempotent."""
        if self._started:
            return []
        self._started = True
        events: List[Notification] = []
        self._enter(self.current, events)
        return self._publish(events)

    def step(self, choice: str) -> List[Notification]:
        """Apply one directional choice and return the resulting notifications."""
        if self.ended:
            raise RuntimeError("Exploration has ended")
        events: List[Notification] = []
        if not self._started:
            self._started = True
            self._enter(self.current, events)

        direction = parse_choice(choice)
        if direction is Direction.QUIT:
            self.state = ExplorationState.ENDED
            logger.debug("Exploration ended in %s after %d move(s)", self.current.name, self.moves)
            events.append(ExplorationEnded())
            return self._publish(events)

        target = None
        if direction is Direction.LEFT:
            target = self.current.child(Side.LEFT)
        elif direction is Direction.RIGHT:
            target = self.current.child(Side.RIGHT)

        if target is None:
            events.append(InvalidOrBlockedChoice(choice=choice))
            return self._publish(events)

        self.moves += 1
        logger.debug("Moved %s from %s to %s", direction.value, self.current.name, target.name)
        self.current = target
        self._enter(target, events)
        return self._publish(events)

    def run(self, choices: Iterable[str]) -> List[Notification]:
        """Feed choices until the engine ends or the choices run out."""
        events = self.start()
        for choice in choices:
            if self.ended:
                break
            events.extend(self.step(choice))
        return events

    def _enter(self, room: Room, events: List[Notification]) -> None:
        events.append(RoomEntered(room_name=room.name, exits=[s.value for s in room.exits]))
        clue = visit_and_collect(room)
        if clue is not None:
            events.append(ClueCollected(room_name=room.name, clue_text=clue))
            if self.dossier.insert(clue):
                events.append(ClueAddedToDossier(clue_text=clue))
        if room.is_dead_end:
            events.append(DeadEnd(room_name=room.name))

    def _publish(self, events: List[Notification]) -> List[Notification]:
        self.history.extend(events)
        if self.listener is not None:
            for event in events:
                self.listener(event)
        return events
