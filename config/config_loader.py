"""Load settings.yaml into typed dataclasses. Validates roles and API keys at startup."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import yaml

from src.models import AgentRole, RoleProfile

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    temperature: float = 0.7
    base_url: str | None = None


@dataclass
class PromptsConfig:
    system: dict[AgentRole, str]
    instructions: dict[AgentRole, str]
    rebuttal: str          # Researcher instruction once the debate is under way


@dataclass(frozen=True)
class DebateSettings:
    max_rounds: int = 3
    directive_label: str = "Debate Status"
    satisfied_token: str = "SATISFIED"
    continue_token: str = "NEEDS_MORE_ROUNDS"
    min_section_length: int = 20
    turn_timeout_sec: float = 180.0


@dataclass
class DefaultsConfig:
    provider: str
    output_dir: Path


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    debate: DebateSettings
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    roles: Mapping[AgentRole, RoleProfile]
    available_providers: set[str] = field(default_factory=set)


def _per_role(raw: dict, section: str, key: str | None = None) -> dict[AgentRole, str]:
    """Pick one string per AgentRole out of a mapping keyed by lowercase role name."""
    values: dict[AgentRole, str] = {}
    for role in AgentRole:
        entry = raw.get(role.value.lower())
        if entry is None:
            raise ValueError(f"settings.yaml: '{section}' has no entry for role {role.value}")
        if key is not None:
            if key not in entry:
                raise ValueError(f"settings.yaml: '{section}.{role.value.lower()}' is missing '{key}'")
            entry = entry[key]
        values[role] = str(entry)
    return values


def _load_roles(raw: dict) -> Mapping[AgentRole, RoleProfile]:
    profiles: dict[AgentRole, RoleProfile] = {}
    for role in AgentRole:
        entry = raw.get(role.value.lower())
        if entry is None:
            raise ValueError(f"settings.yaml: 'roles' has no entry for role {role.value}")
        profiles[role] = RoleProfile(
            display_name=str(entry["name"]),
            color=str(entry.get("color", "white")),
            description=str(entry.get("description", "")),
        )
    return MappingProxyType(profiles)


def load_debate_settings(raw: dict) -> DebateSettings:
    """Build DebateSettings from the ``debate`` block, falling back to defaults."""
    settings = DebateSettings(
        max_rounds=int(raw.get("max_rounds", DebateSettings.max_rounds)),
        directive_label=str(raw.get("directive_label", DebateSettings.directive_label)),
        satisfied_token=str(raw.get("satisfied_token", DebateSettings.satisfied_token)),
        continue_token=str(raw.get("continue_token", DebateSettings.continue_token)),
        min_section_length=int(raw.get("min_section_length", DebateSettings.min_section_length)),
        turn_timeout_sec=float(raw.get("turn_timeout_sec", DebateSettings.turn_timeout_sec)),
    )
    if settings.max_rounds < 1:
        raise ValueError(f"debate.max_rounds must be >= 1, got {settings.max_rounds}")
    if settings.satisfied_token.casefold() == settings.continue_token.casefold():
        raise ValueError("debate.satisfied_token and debate.continue_token must differ")
    return settings


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if a role
    lacks a prompt or profile or the debate limits are invalid.
    Logs missing API keys but does not raise; callers check
    available_providers.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        provider=str(defaults_raw["provider"]),
        output_dir=Path(defaults_raw["output_dir"]),
    )

    debate = load_debate_settings(raw.get("debate") or {})

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        system=_per_role(prompts_raw, "prompts", "system"),
        instructions=_per_role(prompts_raw, "prompts", "instruction"),
        rebuttal=str(prompts_raw["researcher"].get("rebuttal", prompts_raw["researcher"]["instruction"])),
    )

    roles = _load_roles(raw["roles"])

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            temperature=float(model_raw.get("temperature", 0.7)),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s, set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        debate=debate,
        models=models,
        prompts=prompts,
        roles=roles,
        available_providers=available_providers,
    )
