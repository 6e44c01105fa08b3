"""Shared pytest fixtures."""

from collections.abc import Sequence
from pathlib import Path
from types import MappingProxyType
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DebateSettings, DefaultsConfig, ModelConfig, PromptsConfig
from src.errors import GatewayError
from src.gateway import AgentGateway
from src.models import AgentRole, Document, ModelResponse, RoleProfile, Turn
from src.providers.base import AIProvider

RESEARCHER_REPLY = """## Key Patterns
- Lab studies report far higher accuracy than field deployments (Papers 1, 2, 3)

## Research Gaps
- No study validates synthetic-data models in the field
"""

CRITIC_SATISFIED = """## Methodological Concerns
- Field accuracy numbers mix different climate zones

## Debate Status
SATISFIED - the revised analysis separates lab and field contexts.
"""

CRITIC_UNSATISFIED = """## Methodological Concerns
- The 'accuracy gap' framing treats lab results as the baseline

## Debate Status
NEEDS_MORE_ROUNDS - the framing issue is still open.
"""

CRITIC_SILENT = """## Methodological Concerns
- The analysis ignores missing-data rates reported in Papers 3 and 4
"""

SYNTHESIZER_REPLY = """## Points of Agreement
- Data infrastructure matters as much as model architecture

## Proposed Hypothesis
- Hybrid physics/ML models close most of the deployment gap
"""

VALIDATOR_REPLY = """## Verified Claims
- Hybrid models reached 78% accuracy (Paper 5, Results)

## Confidence Assessment
- Overall confidence: Medium
"""


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="test",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        system={role: f"You are the {role.value}." for role in AgentRole},
        instructions={
            AgentRole.RESEARCHER: "Analyze these {paper_count} research papers:",
            AgentRole.CRITIC: "Critique the analysis:",
            AgentRole.SYNTHESIZER: "Synthesize the debate:",
            AgentRole.VALIDATOR: "Validate the conclusions:",
        },
        rebuttal="Address the Critic's concerns:",
    )


@pytest.fixture
def sample_profiles() -> MappingProxyType:
    return MappingProxyType({
        role: RoleProfile(display_name=f"Dr. {role.value}", color="blue", description="")
        for role in AgentRole
    })


@pytest.fixture
def sample_settings() -> DebateSettings:
    return DebateSettings(max_rounds=3, turn_timeout_sec=5)


@pytest.fixture
def sample_app_config(
    tmp_path: Path,
    sample_prompts_config: PromptsConfig,
    sample_profiles: MappingProxyType,
    sample_settings: DebateSettings,
) -> AppConfig:
    return AppConfig(
        defaults=DefaultsConfig(provider="gemini", output_dir=tmp_path / "output"),
        debate=sample_settings,
        models={
            "gemini": ModelConfig("gemini", "gemini", "gemini-2.5-flash", "GEMINI_API_KEY", 60, 1024),
            "claude": ModelConfig("claude", "anthropic", "claude-sonnet-4-5", "ANTHROPIC_API_KEY", 60, 1024),
        },
        prompts=sample_prompts_config,
        roles=sample_profiles,
        available_providers={"gemini", "claude"},
    )


@pytest.fixture
def sample_corpus() -> list[Document]:
    return [
        Document(
            title="Deep Learning for Climate Prediction: A Laboratory Study",
            abstract="Evaluates CNN, LSTM and Transformer models on synthetic climate data.",
            methodology="Controlled laboratory study using synthetic data.",
            key_findings="94% temperature accuracy.",
            results="CNN-LSTM hybrid reached 94% accuracy.",
            limitations="Synthetic data only.",
            year=2024,
        ),
        Document(
            title="Real-World Deployment of AI Climate Models",
            abstract="24-month deployment across 15 agricultural regions.",
            methodology="Field deployment with 150 weather stations.",
            key_findings="67% precipitation accuracy.",
            results="System uptime 78%.",
            limitations="Tropical climates only.",
            year=2024,
        ),
    ]


class ScriptedGateway(AgentGateway):
    """Test double AgentGateway replaying canned replies per role.

    ``critic_replies`` is consumed in order; the last entry repeats. ``fail_on_call``
    raises ``failure`` on that (1-based) invocation instead of replying.
    """

    def __init__(
        self,
        critic_replies: Sequence[str] = (CRITIC_SATISFIED,),
        fail_on_call: int | None = None,
        failure: Exception | None = None,
    ) -> None:
        self.critic_replies = list(critic_replies)
        self.fail_on_call = fail_on_call
        self.failure = failure or GatewayError("service unavailable")
        self.calls: list[tuple[AgentRole, int]] = []

    async def invoke(self, role: AgentRole, corpus: Sequence[Document], conversation: Sequence[Turn]) -> str:
        self.calls.append((role, len(conversation)))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise self.failure
        if role is AgentRole.CRITIC:
            critic_count = sum(1 for r, _ in self.calls if r is AgentRole.CRITIC)
            return self.critic_replies[min(critic_count, len(self.critic_replies)) - 1]
        return {
            AgentRole.RESEARCHER: RESEARCHER_REPLY,
            AgentRole.SYNTHESIZER: SYNTHESIZER_REPLY,
            AgentRole.VALIDATOR: VALIDATOR_REPLY,
        }[role]


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "Mock response") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        self.generate = AsyncMock(  # type: ignore[assignment]
            return_value=ModelResponse(
                provider=provider_name,
                model="mock-model",
                content=response_content,
                latency_sec=0.1,
                token_count=10,
            )
        )

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def generate(self, system_prompt: str, prompt: str) -> ModelResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return ModelResponse(self._name, "mock-model", self._response_content, 0.1, 10)


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
