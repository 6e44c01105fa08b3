"""Dataclasses and enums for the research council debate."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from src.errors import ErrorKind


class AgentRole(str, Enum):
    RESEARCHER = "Researcher"
    CRITIC = "Critic"
    SYNTHESIZER = "Synthesizer"
    VALIDATOR = "Validator"


class DebatePhase(str, Enum):
    OPENING = "opening"
    ITERATIVE_CRITIQUE = "iterative_critique"
    SYNTHESIS_VALIDATION = "synthesis_validation"
    COMPLETE = "complete"


class TerminationStatus(str, Enum):
    SATISFIED = "satisfied"
    NEEDS_MORE_ROUNDS = "needs_more_rounds"


@dataclass(frozen=True)
class Document:
    title: str
    abstract: str = ""
    methodology: str = ""
    key_findings: str = ""
    results: str = ""
    limitations: str = ""
    year: int | None = None
    source: str | None = None  # citation, arXiv id or file path


@dataclass(frozen=True)
class RoleProfile:
    display_name: str      # "Dr. Research"
    color: str             # hex, used by console output
    description: str


@dataclass(frozen=True)
class Turn:
    role: AgentRole
    turn_index: int        # 1-based position in the conversation
    raw_text: str
    sections: Mapping[str, str] | None = None  # read-only view
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class TerminationDecision:
    status: TerminationStatus
    reason: str = ""

    @property
    def satisfied(self) -> bool:
        return self.status is TerminationStatus.SATISFIED


@dataclass
class ModelResponse:
    provider: str          # "gemini", "openai", "claude"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None


@dataclass
class DebateResult:
    conversation: tuple[Turn, ...]
    success: bool
    rounds: int                              # critique rounds reached
    phase: DebatePhase                       # last phase entered
    duration_sec: float = 0.0
    error: str | None = None
    error_kind: ErrorKind | None = None

    def last_turn(self, role: AgentRole) -> Turn | None:
        """Return the most recent turn spoken by ``role``, if any."""
        for turn in reversed(self.conversation):
            if turn.role is role:
                return turn
        return None
