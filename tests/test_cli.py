"""Tests for provider and settings selection in src/cli.py."""

import click
import pytest

from src.cli import PROVIDER_CLASSES, _build_provider, _effective_settings, _pick_provider_name
from src.providers.gemini import GeminiProvider


def test_pick_requested_provider(sample_app_config):
    assert _pick_provider_name(sample_app_config, "claude") == "claude"


def test_pick_default_provider(sample_app_config):
    assert _pick_provider_name(sample_app_config, None) == "gemini"


def test_pick_falls_back_when_default_unavailable(sample_app_config):
    sample_app_config.available_providers = {"claude"}
    assert _pick_provider_name(sample_app_config, None) == "claude"


def test_pick_unknown_provider(sample_app_config):
    with pytest.raises(click.UsageError, match="Unknown provider"):
        _pick_provider_name(sample_app_config, "grok")


def test_pick_provider_without_key(sample_app_config):
    sample_app_config.available_providers = {"gemini"}
    with pytest.raises(click.UsageError, match="ANTHROPIC_API_KEY"):
        _pick_provider_name(sample_app_config, "claude")


def test_pick_nothing_available(sample_app_config):
    sample_app_config.available_providers = set()
    with pytest.raises(click.UsageError, match="No providers available"):
        _pick_provider_name(sample_app_config, None)


def test_build_provider_by_sdk(sample_app_config, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    assert isinstance(_build_provider(sample_app_config, "gemini"), GeminiProvider)


def test_provider_classes_cover_bundled_sdks():
    assert set(PROVIDER_CLASSES) == {"gemini", "anthropic", "openai"}


def test_effective_settings_default(sample_app_config):
    assert _effective_settings(sample_app_config, None) is sample_app_config.debate


def test_effective_settings_override_keeps_other_fields(sample_app_config):
    settings = _effective_settings(sample_app_config, 6)
    assert settings.max_rounds == 6
    assert settings.turn_timeout_sec == sample_app_config.debate.turn_timeout_sec
    assert settings.directive_label == sample_app_config.debate.directive_label


def test_effective_settings_rejects_zero(sample_app_config):
    with pytest.raises(click.BadParameter):
        _effective_settings(sample_app_config, 0)
