"""Append-only record of debate turns."""

import logging
from types import MappingProxyType

from src.models import AgentRole, Turn

logger = logging.getLogger(__name__)


class ConversationLog:
    """Ordered, append-only list of turns.

    Turn indices are assigned here, so they always run 1..N without gaps.
    Callers only ever see immutable tuple snapshots, and each turn's
    sections are a read-only view over a private copy.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def __len__(self) -> int:
        return len(self._turns)

    def append(self, role: AgentRole, raw_text: str, sections: dict[str, str] | None = None) -> Turn:
        turn = Turn(
            role=role,
            turn_index=len(self._turns) + 1,
            raw_text=raw_text,
            sections=MappingProxyType(dict(sections)) if sections else None,
        )
        self._turns.append(turn)
        logger.debug("Appended turn %d (%s)", turn.turn_index, role.value)
        return turn

    def snapshot(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def count(self, role: AgentRole) -> int:
        return sum(1 for t in self._turns if t.role is role)
