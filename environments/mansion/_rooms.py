"""Room map: the static binary tree of rooms the player walks through.

Rooms are passive records with two writable child slots; ``RoomMap`` is the
builder that wires them together from an ordered list of entries and owns the
resulting tree. The only mutation after construction is the per-room
``collected`` flag, set the first time a room's clue is picked up.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Side(str, Enum):
    """Child slot of a room."""
    LEFT = "left"
    RIGHT = "right"


@dataclass
class Room:
    """A room in the mansion. An empty ``clue`` means the room holds none."""
    name: str
    clue: str = ""
    left: Optional["Room"] = None
    right: Optional["Room"] = None
    collected: bool = False

    @property
    def has_clue(self) -> bool:
        """True while the room still holds an uncollected clue."""
        return bool(self.clue) and not self.collected

    @property
    def exits(self) -> List[Side]:
        return [side for side in Side if self.child(side) is not None]

    @property
    def is_dead_end(self) -> bool:
        return self.left is None and self.right is None

    def child(self, side: Side) -> Optional["Room"]:
        return self.left if side is Side.LEFT else self.right


@dataclass
class MapStats:
    """Statistics about the map structure."""
    rooms: int
    height: int
    clue_rooms: int
    leaf_count: int


MapEntry = Tuple[Optional[str], Optional[Side], str, str]


def build_room(name: str, clue: str = "") -> Room:
    """Create an unlinked room."""
    return Room(name=name, clue=clue or "")


def visit_and_collect(room: Room) -> Optional[str]:
    """Collect the room's clue on the first visit.

    Returns:
        The clue text the first time a room with a clue is visited, ``None``
        for rooms without a clue and for every later visit.
    """
    if not room.has_clue:
        return None
    room.collected = True
    logger.debug("Collected clue in %s", room.name)
    return room.clue


class RoomMap:
    """A binary tree of uniquely named rooms.

    The first room added without a parent becomes the root; every other room
    hangs off a named parent on a free side. Any wiring error raises
    ``ValueError`` and leaves the map unusable, so callers should treat it as
    fatal.
    """

    def __init__(self):
        self.root: Optional[Room] = None
        self._rooms: Dict[str, Room] = {}

    @classmethod
    def from_entries(cls, entries: Iterable[MapEntry]) -> "RoomMap":
        """Build a map from ``(parent_name, side, name, clue)`` tuples.

        The root entry has ``parent_name`` and ``side`` set to ``None``.
        """
        room_map = cls()
        for parent_name, side, name, clue in entries:
            room_map.add(parent_name, side, name, clue)
        if room_map.root is None:
            raise ValueError("Map has no rooms")
        return room_map

    def add(
        self,
        parent_name: Optional[str],
        side: Optional[Side],
        name: str,
        clue: str = ""
    ) -> Room:
        """Create a room and link it under ``parent_name`` on ``side``."""
        if not name:
            raise ValueError("Room name must not be empty")
        if name in self._rooms:
            raise ValueError(f"Duplicate room name: {name!r}")

        if parent_name is None:
            if self.root is not None:
                raise ValueError(f"Map already has a root ({self.root.name!r}); "
                                 f"{name!r} needs a parent")
            room = build_room(name, clue)
            self.root = room
        else:
            parent = self._rooms.get(parent_name)
            if parent is None:
                raise ValueError(f"Unknown parent room {parent_name!r} for {name!r}")
            if side is None:
                raise ValueError(f"Room {name!r} needs a side under {parent_name!r}")
            side = Side(side)
            if parent.child(side) is not None:
                raise ValueError(f"{parent_name!r} already has a {side.value} room")
            room = build_room(name, clue)
            if side is Side.LEFT:
                parent.left = room
            else:
                parent.right = room

        self._rooms[name] = room
        logger.debug("Added room %r under %r (%s)", name, parent_name, side)
        return room

    def get(self, name: str) -> Room:
        if name not in self._rooms:
            raise ValueError(f"Room not found: {name}")
        return self._rooms[name]

    def __contains__(self, name: object) -> bool:
        return name in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        """Pre-order walk from the root."""
        stack = [self.root] if self.root is not None else []
        while stack:
            room = stack.pop()
            yield room
            if room.right is not None:
                stack.append(room.right)
            if room.left is not None:
                stack.append(room.left)

    def remaining_clues(self) -> List[str]:
        """Clues not yet collected, in pre-order."""
        return [room.clue for room in self if room.has_clue]

    def get_stats(self) -> MapStats:
        height = 0
        stack: List[Tuple[Room, int]] = [(self.root, 0)] if self.root is not None else []
        while stack:
            room, depth = stack.pop()
            height = max(height, depth)
            for child in (room.left, room.right):
                if child is not None:
                    stack.append((child, depth + 1))
        rooms = list(self)
        return MapStats(
            rooms=len(rooms),
            height=height,
            clue_rooms=sum(1 for r in rooms if r.clue),
            leaf_count=sum(1 for r in rooms if r.is_dead_end),
        )

    def teardown(self) -> int:
        """Unlink every room in post-order and return how many were released."""
        released = 0
        stack: List[Tuple[Room, bool]] = [(self.root, False)] if self.root is not None else []
        while stack:
            room, children_done = stack.pop()
            if children_done:
                room.left = None
                room.right = None
                released += 1
                continue
            stack.append((room, True))
            for child in (room.right, room.left):
                if child is not None:
                    stack.append((child, False))
        self.root = None
        self._rooms.clear()
        return released
