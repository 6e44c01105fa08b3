"""Debate orchestration: phase/round state machine over the four personas."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence

from config.config_loader import DebateSettings
from src.conversation import ConversationLog
from src.errors import ErrorKind, GatewayError
from src.gateway import AgentGateway
from src.models import AgentRole, DebatePhase, DebateResult, Document, Turn
from src.parser import parse_sections
from src.termination import evaluate_termination

logger = logging.getLogger(__name__)

OnUpdate = Callable[[tuple[Turn, ...]], None]


class _DebateRun:
    """State of a single run. Discarded once the run returns."""

    def __init__(
        self,
        gateway: AgentGateway,
        settings: DebateSettings,
        corpus: Sequence[Document],
        on_update: OnUpdate | None,
    ) -> None:
        self.gateway = gateway
        self.settings = settings
        self.corpus = tuple(corpus)
        self.on_update = on_update
        self.log = ConversationLog()
        self.phase = DebatePhase.OPENING
        self.rounds = 0

    async def take_turn(self, role: AgentRole) -> Turn:
        """Invoke one persona, then parse and append its reply.

        A failed invocation raises before anything is appended.
        """
        timeout = self.settings.turn_timeout_sec or None
        try:
            raw_text = await asyncio.wait_for(
                self.gateway.invoke(role, self.corpus, self.log.snapshot()),
                timeout=timeout,
            )
        except TimeoutError as exc:
            raise GatewayError(
                f"{role.value} did not respond within {timeout}s", ErrorKind.UNAVAILABLE
            ) from exc

        sections = parse_sections(raw_text, self.settings.min_section_length)
        turn = self.log.append(role, raw_text, sections)
        logger.info(
            "Turn %d: %s (%s)",
            turn.turn_index,
            role.value,
            f"{len(sections)} sections" if sections else "unstructured",
        )
        if self.on_update:
            self.on_update(self.log.snapshot())
        return turn

    async def opening(self) -> DebatePhase:
        await self.take_turn(AgentRole.RESEARCHER)
        self.rounds = 1
        return DebatePhase.ITERATIVE_CRITIQUE

    async def iterative_critique(self) -> DebatePhase:
        while True:
            critique = await self.take_turn(AgentRole.CRITIC)
            decision = evaluate_termination(critique, self.settings)
            logger.info("Round %d/%d: critic says %s %s",
                        self.rounds, self.settings.max_rounds, decision.status.value, decision.reason)

            if decision.satisfied:
                return DebatePhase.SYNTHESIS_VALIDATION
            if self.rounds >= self.settings.max_rounds:
                logger.warning("Round budget of %d exhausted without the critic being satisfied",
                               self.settings.max_rounds)
                return DebatePhase.SYNTHESIS_VALIDATION

            await self.take_turn(AgentRole.RESEARCHER)
            self.rounds += 1

    async def synthesis_validation(self) -> DebatePhase:
        await self.take_turn(AgentRole.SYNTHESIZER)
        await self.take_turn(AgentRole.VALIDATOR)
        return DebatePhase.COMPLETE


class DebateOrchestrator:
    """Runs Researcher → Critic loop → Synthesizer → Validator.

    Strictly sequential: one gateway call outstanding at a time, and the
    conversation is only written from here.
    """

    def __init__(self, gateway: AgentGateway, settings: DebateSettings) -> None:
        if settings.max_rounds < 1:
            raise ValueError(f"max_rounds must be >= 1, got {settings.max_rounds}")
        self._gateway = gateway
        self._settings = settings

    async def run(
        self,
        corpus: Sequence[Document],
        on_update: OnUpdate | None = None,
    ) -> DebateResult:
        """Run the full debate.

        Args:
            corpus: Documents under discussion.
            on_update: Optional callback invoked with the conversation snapshot
                after every appended turn.

        Returns:
            DebateResult. On a gateway failure ``success`` is False, ``error``
            carries the failure message and the turns appended before the
            failure are kept.
        """
        run = _DebateRun(self._gateway, self._settings, corpus, on_update)
        handlers: dict[DebatePhase, Callable[[], Awaitable[DebatePhase]]] = {
            DebatePhase.OPENING: run.opening,
            DebatePhase.ITERATIVE_CRITIQUE: run.iterative_critique,
            DebatePhase.SYNTHESIS_VALIDATION: run.synthesis_validation,
        }
        start = time.monotonic()
        logger.info("Starting debate over %d documents (max %d rounds)",
                    len(run.corpus), self._settings.max_rounds)

        while run.phase is not DebatePhase.COMPLETE:
            try:
                next_phase = await handlers[run.phase]()
            except GatewayError as exc:
                logger.error("Debate stopped in %s after %d turns: %s",
                             run.phase.value, len(run.log), exc)
                return DebateResult(
                    conversation=run.log.snapshot(),
                    success=False,
                    rounds=run.rounds,
                    phase=run.phase,
                    duration_sec=time.monotonic() - start,
                    error=str(exc),
                    error_kind=exc.kind,
                )
            logger.debug("Phase %s -> %s", run.phase.value, next_phase.value)
            run.phase = next_phase

        logger.info("Debate complete: %d turns, %d rounds", len(run.log), run.rounds)
        return DebateResult(
            conversation=run.log.snapshot(),
            success=True,
            rounds=run.rounds,
            phase=run.phase,
            duration_sec=time.monotonic() - start,
        )
