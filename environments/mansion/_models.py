"""Data models for mansion challenges, game notifications and evaluations."""

import time
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class Classification(str, Enum):
    """How a collected clue relates to the accused suspect."""
    VALID = "valid"                # points at the accused
    IRRELEVANT = "irrelevant"      # points at another known suspect
    UNASSOCIATED = "unassociated"  # not in the registry


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class Challenge(BaseModel):
    """Challenge specification for evaluation.

    This follows the affinetes Challenge pattern for compatibility.
    """

    env: str
    prompt: str
    extra: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[float] = Field(default_factory=lambda: time.time())


class MansionChallenge(Challenge):
    """Extended challenge for a mansion game with session tracking."""

    session_id: str
    scenario: str
    task_id: Optional[int] = None


# ==================== Notifications ====================

class RoomEntered(BaseModel):
    kind: Literal["room_entered"] = "room_entered"
    room_name: str
    exits: List[str]


class ClueCollected(BaseModel):
    kind: Literal["clue_collected"] = "clue_collected"
    room_name: str
    clue_text: str


class InvalidOrBlockedChoice(BaseModel):
    kind: Literal["invalid_choice"] = "invalid_choice"
    choice: str = ""


class DeadEnd(BaseModel):
    kind: Literal["dead_end"] = "dead_end"
    room_name: str


class ExplorationEnded(BaseModel):
    kind: Literal["exploration_ended"] = "exploration_ended"


class ClueAddedToDossier(BaseModel):
    kind: Literal["clue_added"] = "clue_added"
    clue_text: str


class EvidenceClassified(BaseModel):
    kind: Literal["evidence_classified"] = "evidence_classified"
    clue_text: str
    classification: Classification
    associated_suspect: str


class CaseUnresolvable(BaseModel):
    kind: Literal["case_unresolvable"] = "case_unresolvable"


class Verdict(BaseModel):
    kind: Literal["verdict"] = "verdict"
    accused_name: str
    valid_count: int
    outcome: Outcome


Notification = Union[
    RoomEntered,
    ClueCollected,
    InvalidOrBlockedChoice,
    DeadEnd,
    ExplorationEnded,
    ClueAddedToDossier,
    EvidenceClassified,
    CaseUnresolvable,
    Verdict,
]


# ==================== Results ====================

class EvaluationResult(BaseModel):
    """Result of evaluating a finished game."""

    score: float
    accused_name: Optional[str]
    valid_count: int
    outcome: Optional[Outcome]
    clues_collected: int
    moves: int
    status: str


class SessionSummary(BaseModel):
    """Summary of a completed session."""

    session_id: str
    scenario: str
    score: float
    moves: int
    dossier: List[str]
    accused_name: Optional[str]
    outcome: Optional[Outcome]
    conversation: List[Dict[str, str]]
