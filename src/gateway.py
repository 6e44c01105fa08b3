"""Agent gateway: turns a role, the corpus and the discussion into one persona reply."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from config.config_loader import PromptsConfig
from src.errors import ErrorKind, GatewayError
from src.models import AgentRole, Document, Turn
from src.providers.base import AIProvider, ProviderError

logger = logging.getLogger(__name__)


class AgentGateway(ABC):
    """Contract between the orchestrator and whatever produces persona text."""

    @abstractmethod
    async def invoke(
        self,
        role: AgentRole,
        corpus: Sequence[Document],
        conversation: Sequence[Turn],
    ) -> str:
        """Produce one reply for ``role``.

        Raises:
            GatewayError: Unavailable, RateLimited, QuotaExceeded or Malformed.
        """
        ...


def format_corpus(corpus: Sequence[Document]) -> str:
    """Render documents as numbered blocks separated by ``---``."""
    blocks = []
    for idx, doc in enumerate(corpus, start=1):
        blocks.append(
            f"Paper {idx}: {doc.title}\n"
            f"Abstract: {doc.abstract}\n"
            f"Methodology: {doc.methodology}\n"
            f"Key Findings: {doc.key_findings}\n"
            f"Results: {doc.results}\n"
            f"Limitations: {doc.limitations}"
        )
    return "\n\n---\n\n".join(blocks)


def format_discussion(conversation: Sequence[Turn]) -> str:
    if not conversation:
        return ""
    lines = [f"{turn.role.value}: {turn.raw_text}" for turn in conversation]
    return "\n\nPrevious discussion:\n" + "\n\n".join(lines)


class LLMAgentGateway(AgentGateway):
    """AgentGateway backed by a single AIProvider.

    Persona wording comes from configuration; this class only decides which
    instruction each role gets and how the context is laid out.
    """

    def __init__(self, provider: AIProvider, prompts: PromptsConfig) -> None:
        self._provider = provider
        self._prompts = prompts

    def build_instruction(self, role: AgentRole, corpus: Sequence[Document], conversation: Sequence[Turn]) -> str:
        if role is AgentRole.RESEARCHER and conversation:
            template = self._prompts.rebuttal
        else:
            template = self._prompts.instructions[role]
        return template.format(paper_count=len(corpus), role=role.value)

    def build_prompt(self, role: AgentRole, corpus: Sequence[Document], conversation: Sequence[Turn]) -> str:
        return (
            self.build_instruction(role, corpus, conversation)
            + "\n\n"
            + format_corpus(corpus)
            + format_discussion(conversation)
        )

    async def invoke(
        self,
        role: AgentRole,
        corpus: Sequence[Document],
        conversation: Sequence[Turn],
    ) -> str:
        prompt = self.build_prompt(role, corpus, conversation)
        logger.info("%s responding (turn %d) via %s", role.value, len(conversation) + 1, self._provider.name())

        try:
            response = await self._provider.generate(self._prompts.system[role], prompt)
        except GatewayError:
            raise
        except Exception as exc:
            raise ProviderError(self._provider.name(), f"Unexpected error: {exc}") from exc

        if not response.content or not response.content.strip():
            raise ProviderError(self._provider.name(), f"Empty reply for {role.value}", ErrorKind.MALFORMED)

        logger.debug("Response from %s, length: %d", role.value, len(response.content))
        return response.content
