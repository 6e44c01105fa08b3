"""Decide from a Critic turn whether the critique loop may stop."""

import logging
import re
from collections.abc import Mapping

from config.config_loader import DebateSettings
from src.models import AgentRole, TerminationDecision, TerminationStatus, Turn

logger = logging.getLogger(__name__)

_REASON_SEPARATORS = " \t\r\n:;,.-"


_NEGATION = re.compile(r"\b(?:not|never|no)[ \t_-]*$", re.IGNORECASE)


def _find_directive(sections: Mapping[str, str] | None, label: str) -> str | None:
    if not sections:
        return None
    wanted = label.strip().casefold()
    for key, body in sections.items():
        if key.strip().casefold() == wanted:
            return body
    return None


def _find_token(body: str, token: str) -> re.Match[str] | None:
    """First whole-word, exact-case occurrence of ``token`` that is not negated."""
    for match in re.finditer(rf"(?<!\w){re.escape(token)}(?!\w)", body):
        if _NEGATION.search(body, 0, match.start()):
            continue
        return match
    return None


def evaluate_termination(turn: Turn, settings: DebateSettings) -> TerminationDecision:
    """Read the directive section of a Critic turn.

    Silence never counts as satisfaction: a missing directive, a directive
    without a status token, or one carrying both tokens all ask for another
    round.

    Raises:
        ValueError: If ``turn`` was not spoken by the Critic.
    """
    if turn.role is not AgentRole.CRITIC:
        raise ValueError(f"Only Critic turns carry a directive, got {turn.role.value}")

    body = _find_directive(turn.sections, settings.directive_label)
    if body is None:
        logger.info("Turn %d has no '%s' section; asking for another round",
                    turn.turn_index, settings.directive_label)
        return TerminationDecision(TerminationStatus.NEEDS_MORE_ROUNDS, "")

    satisfied = _find_token(body, settings.satisfied_token)
    needs_more = _find_token(body, settings.continue_token)

    if needs_more:
        if satisfied:
            logger.warning("Turn %d directive carries both status tokens; asking for another round",
                           turn.turn_index)
        status, deciding = TerminationStatus.NEEDS_MORE_ROUNDS, needs_more
    elif satisfied:
        status, deciding = TerminationStatus.SATISFIED, satisfied
    else:
        logger.info("Turn %d directive has no status token", turn.turn_index)
        return TerminationDecision(TerminationStatus.NEEDS_MORE_ROUNDS, body.strip())

    reason = body[deciding.end():].strip(_REASON_SEPARATORS)
    return TerminationDecision(status, reason)
