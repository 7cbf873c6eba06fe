"""Scenario loading: the mansion topology and clue associations as data.

A scenario file is YAML with three lists: ``rooms`` (parents before
children, the first entry is the root), ``associations`` (clue -> suspect,
inserted in file order) and an optional ``suspects`` list shown to players.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from ._registry import DEFAULT_BUCKET_COUNT, ClueRegistry
from ._rooms import RoomMap, Side

logger = logging.getLogger(__name__)

SCENARIO_ENV_VAR = "MANSION_SCENARIO"


def get_default_scenario_path() -> Path:
    """The reference mansion bundled with the package."""
    return Path(__file__).parent / "data" / "mansion.yaml"


class RoomEntry(BaseModel):
    name: str
    clue: str = ""
    parent: Optional[str] = None
    side: Optional[Side] = None

    @field_validator("clue", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class AssociationEntry(BaseModel):
    clue: str
    suspect: str


class Scenario(BaseModel):
    """A validated scenario, ready to build a map and a registry."""

    title: str = "Mansion"
    bucket_count: int = Field(default=DEFAULT_BUCKET_COUNT, ge=1)
    suspects: List[str] = Field(default_factory=list)
    rooms: List[RoomEntry]
    associations: List[AssociationEntry] = Field(default_factory=list)

    @field_validator("rooms")
    @classmethod
    def _root_first(cls, rooms: List[RoomEntry]) -> List[RoomEntry]:
        if not rooms:
            raise ValueError("scenario needs at least one room")
        if rooms[0].parent is not None:
            raise ValueError(f"first room {rooms[0].name!r} must be the root (no parent)")
        return rooms

    def build_map(self) -> RoomMap:
        return RoomMap.from_entries(
            (room.parent, room.side, room.name, room.clue) for room in self.rooms
        )

    def build_registry(self) -> ClueRegistry:
        return ClueRegistry.from_pairs(
            ((a.clue, a.suspect) for a in self.associations),
            bucket_count=self.bucket_count,
        )

    def suspect_names(self) -> List[str]:
        """Suspects to offer at accusation time."""
        if self.suspects:
            return list(self.suspects)
        return list(dict.fromkeys(a.suspect for a in self.associations))

    def unregistered_clues(self) -> List[str]:
        known = {a.clue for a in self.associations}
        return [room.clue for room in self.rooms if room.clue and room.clue not in known]


def parse_scenario(data: Dict[str, Any]) -> Scenario:
    """Validate raw scenario data.

    Raises:
        ValueError: if the data is not a valid scenario.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Scenario must be a mapping, got {type(data).__name__}")
    scenario = Scenario.model_validate(data)
    for clue in scenario.unregistered_clues():
        logger.info("Room clue has no registered suspect: %r", clue)
    return scenario


def load_scenario(path: Optional[Union[str, Path]] = None) -> Scenario:
    """Load a scenario file.

    Args:
        path: YAML file to read. Defaults to ``$MANSION_SCENARIO`` and then to
            the bundled reference mansion.
    """
    if path is None:
        path = os.getenv(SCENARIO_ENV_VAR) or get_default_scenario_path()
    filepath = Path(path)
    with open(filepath, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    scenario = parse_scenario(data)
    logger.debug("Loaded scenario %r from %s (%d rooms)", scenario.title, filepath, len(scenario.rooms))
    return scenario
