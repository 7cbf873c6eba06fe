"""Plain-text rendering of game notifications."""

from typing import Iterable, List

from ._models import Classification, Notification, Outcome

_EXIT_KEYS = {"left": "[L] Left", "right": "[R] Right"}


def render_event(event: Notification) -> str:
    kind = event.kind
    if kind == "room_entered":
        return f"You are in: {event.room_name}"
    if kind == "clue_collected":
        return f"Clue found in {event.room_name}: \"{event.clue_text}\""
    if kind == "clue_added":
        return f"\"{event.clue_text}\" added to the dossier."
    if kind == "dead_end":
        return f"Dead end: {event.room_name} has no further paths."
    if kind == "invalid_choice":
        return "Invalid choice or blocked path. Try again."
    if kind == "exploration_ended":
        return "The detective leaves the mansion."
    if kind == "evidence_classified":
        if event.classification is Classification.VALID:
            return f"  -> [VALID] \"{event.clue_text}\" points to {event.associated_suspect}."
        if event.classification is Classification.IRRELEVANT:
            return f"  -> [IRRELEVANT] \"{event.clue_text}\" points to {event.associated_suspect}."
        return f"  -> [UNASSOCIATED] \"{event.clue_text}\" is not linked to any known suspect."
    if kind == "case_unresolvable":
        return "No clues were collected. The case cannot be concluded."
    if kind == "verdict":
        summary = f"{event.accused_name} is linked to {event.valid_count} valid clue(s)."
        if event.outcome is Outcome.SUCCESS:
            return f"{summary}\nSUCCESS! Enough evidence to arrest {event.accused_name}. Case closed."
        return f"{summary}\nFAILURE! Not enough evidence. {event.accused_name} walks free."
    raise ValueError(f"Unknown notification kind: {kind}")


def render_events(events: Iterable[Notification]) -> str:
    return "\n".join(render_event(e) for e in events)


def render_exits(exits: List[str]) -> str:
    options = [_EXIT_KEYS[e] for e in exits if e in _EXIT_KEYS]
    options.append("[Q] Quit")
    return "Paths: " + " | ".join(options)


def render_dossier(clues: Iterable[str]) -> str:
    lines = ["--- Collected clues (alphabetical) ---"]
    lines.extend(f"- {clue}" for clue in clues)
    return "\n".join(lines)
