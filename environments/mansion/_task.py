"""Mansion Task implementation.

Provides the task interface for the detective game following the affinetes
Challenge/Response pattern.
"""

import re
import random
from typing import List, Optional, Tuple

from ._models import MansionChallenge
from ._render import render_dossier, render_events, render_exits
from ._scenario import Scenario, load_scenario
from ._session import SessionManager, SessionStatus, get_session_manager


class MansionTask:
    """Mansion Task following affinetes patterns.

    This task implements a multi-turn interactive environment where:
    1. A session is opened on a scenario and the agent starts in the entrance
    2. The agent moves LEFT/RIGHT through the rooms, collecting clues
    3. The agent QUITs exploring and ACCUSEs one suspect
    4. The accusation scores 1.0 when at least two clues back it

    Interaction Protocol:
    - generate() creates a new session and returns the challenge prompt
    - process_response() applies the commands found in an agent message
    - evaluate() replays a whole plan in one go (single turn)
    """

    COMMAND_PATTERN = re.compile(
        r'\b(?:MOVE\s+(LEFT|RIGHT)\b|(QUIT)\b|ACCUSE\s+(\S+))',
        re.IGNORECASE
    )
    MAX_TURNS = 50

    def __init__(
        self,
        scenario: Optional[Scenario] = None,
        session_manager: Optional[SessionManager] = None
    ):
        """Initialize the task.

        Args:
            scenario: Scenario to play (default: the reference mansion)
            session_manager: Session manager (default: the global one)
        """
        self.scenario = scenario or load_scenario()
        self.session_manager = session_manager or get_session_manager()

    async def generate(self, task_id: Optional[int] = None) -> MansionChallenge:
        """Generate a new mansion challenge.

        The mansion is fixed, so ``task_id`` only labels the session.
        """
        if task_id is None:
            task_id = random.randint(0, 2**31 - 1)
        info = self.session_manager.create_session(self.scenario)
        opening = render_events(self.session_manager.opening_events(info.session_id))

        return MansionChallenge(
            env="mansion",
            session_id=info.session_id,
            scenario=info.scenario,
            task_id=task_id,
            prompt=self._build_prompt(info.suspects, opening, info.exits),
            extra={
                "rooms": info.rooms,
                "suspects": info.suspects,
                "start_room": info.start_room,
            },
        )

    def _build_prompt(self, suspects: List[str], opening: str, exits: List[str]) -> str:
        """Build the initial challenge prompt."""
        return f"""You are a detective exploring a mansion to solve a crime.
The mansion is a tree of rooms: from each room you may go LEFT or RIGHT into
a deeper room, but never back. Clues are collected automatically when you
enter a room that holds one.

Commands (you may issue several per message, they run in order):
- MOVE LEFT
- MOVE RIGHT
- QUIT → stop exploring
- ACCUSE <name> → after QUIT, name the culprit (one word, exact spelling)

Suspects: {', '.join(suspects)}

The accusation succeeds if at least 2 of your collected clues point to the
accused. If you QUIT without any clue, the case cannot be concluded.

{opening}
{render_exits(exits)}"""

    async def process_response(
        self,
        session_id: str,
        response: str
    ) -> Tuple[str, bool, Optional[dict]]:
        """Process an agent response.

        Args:
            session_id: Session identifier
            response: Agent's response text

        Returns:
            Tuple of (result_message, is_complete, evaluation_result)
        """
        commands = self._parse_commands(response)
        if not commands:
            return (
                "Could not parse your response. Please use:\n"
                "- MOVE LEFT\n"
                "- MOVE RIGHT\n"
                "- QUIT\n"
                "- ACCUSE <name>",
                False,
                None
            )

        lines: List[str] = []
        for command, argument in commands:
            state = self.session_manager.get_session_state(session_id)
            status = state["status"]

            if command == "ACCUSE":
                if status != SessionStatus.ACCUSING.value:
                    lines.append("Error: QUIT exploring before you ACCUSE.")
                    continue
                result = self.session_manager.accuse(session_id, argument)
                lines.append(render_events(result.pop("events")))
                return ("\n".join(lines), True, result)

            if status != SessionStatus.EXPLORING.value:
                lines.append("Error: exploration is over. ACCUSE a suspect.")
                continue

            outcome = self.session_manager.move(session_id, command)
            lines.append(render_events(outcome["events"]))
            if outcome["status"] == SessionStatus.EXPLORING.value:
                lines.append(render_exits(outcome["exits"]))
            elif outcome["status"] == SessionStatus.UNRESOLVABLE.value:
                final = self.session_manager.get_session_state(session_id)
                return ("\n".join(lines), True, {"score": 0.0, "status": final["status"]})
            else:
                dossier = self.session_manager.get_session_state(session_id)["dossier"]
                lines.append(render_dossier(dossier))
                lines.append("Now ACCUSE a suspect.")

        return ("\n".join(lines), False, None)

    async def evaluate(
        self,
        response: str,
        challenge: MansionChallenge
    ) -> float:
        """Evaluate a final response (for single-turn compatibility).

        Every command in the response is replayed in order; a plan that never
        reaches an accusation scores 0.0.

        Args:
            response: Agent's full response
            challenge: The original challenge

        Returns:
            Score from 0.0 to 1.0
        """
        try:
            for command, argument in self._parse_commands(response):
                state = self.session_manager.get_session_state(challenge.session_id)
                if command == "ACCUSE":
                    if state["status"] == SessionStatus.ACCUSING.value:
                        return self.session_manager.accuse(challenge.session_id, argument)["score"]
                    continue
                if state["status"] == SessionStatus.EXPLORING.value:
                    self.session_manager.move(challenge.session_id, command)
        except ValueError:
            return 0.0
        return 0.0

    def _parse_commands(self, response: str) -> List[Tuple[str, str]]:
        """Extract ``(command, argument)`` pairs in the order they appear."""
        commands: List[Tuple[str, str]] = []
        for match in self.COMMAND_PATTERN.finditer(response):
            direction, quit_word, accused = match.groups()
            if direction:
                commands.append((direction.lower(), ""))
            elif quit_word:
                commands.append(("quit", ""))
            else:
                commands.append(("ACCUSE", accused.strip(".,;:!?\"'")))
        return commands
