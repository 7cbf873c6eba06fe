"""Verdict evaluation: weigh the dossier against an accusation."""

import logging
from typing import Callable, List, Optional

from ._dossier import ClueRecord, inorder_traverse
from ._models import (
    CaseUnresolvable,
    Classification,
    EvidenceClassified,
    Notification,
    Outcome,
    Verdict,
)
from ._registry import UNKNOWN_SUSPECT, ClueRegistry

logger = logging.getLogger(__name__)

SUCCESS_THRESHOLD = 2


def classify(suspect_name: str, accused_name: str) -> Classification:
    if suspect_name == accused_name:
        return Classification.VALID
    if suspect_name == UNKNOWN_SUSPECT:
        return Classification.UNASSOCIATED
    return Classification.IRRELEVANT


def tally(
    dossier_root: Optional[ClueRecord],
    registry: ClueRegistry,
    accused_name: str,
    emit: Optional[Callable[[EvidenceClassified], None]] = None
) -> int:
    """Count dossier clues whose registered suspect is ``accused_name``.

    Clues are visited in order; each produces an ``EvidenceClassified``
    notification through ``emit``.
    """
    count = 0
    for clue_text in inorder_traverse(dossier_root):
        suspect = registry.lookup(clue_text)
        classification = classify(suspect, accused_name)
        if classification is Classification.VALID:
            count += 1
        if emit is not None:
            emit(EvidenceClassified(
                clue_text=clue_text,
                classification=classification,
                associated_suspect=suspect,
            ))
    return count


def verdict(count: int) -> Outcome:
    return Outcome.SUCCESS if count >= SUCCESS_THRESHOLD else Outcome.FAILURE


def judge(
    dossier_root: Optional[ClueRecord],
    registry: ClueRegistry,
    accused_name: str
) -> List[Notification]:
    """Classify every clue and close with a ``Verdict``.

    An empty dossier cannot support any accusation and yields only
    ``CaseUnresolvable``.
    """
    if dossier_root is None:
        return [CaseUnresolvable()]

    events: List[Notification] = []
    count = tally(dossier_root, registry, accused_name, events.append)
    outcome = verdict(count)
    logger.info("Accusation of %s: %d valid clue(s) -> %s", accused_name, count, outcome.value)
    events.append(Verdict(accused_name=accused_name, valid_count=count, outcome=outcome))
    return events
