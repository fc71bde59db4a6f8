"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from ose_referee.core.config import (
    CharacterSettings,
    DiceSettings,
    RulesSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from ose_referee.core.exceptions import ConfigurationError


class TestRulesSettings:
    """Tests for RulesSettings configuration."""

    def test_defaults_use_bundled_documents(self) -> None:
        """Test that no override paths are set by default."""
        settings = RulesSettings()

        assert settings.game_system_path is None
        assert settings.experts_path is None

    def test_existing_override_path(self, tmp_path: Path) -> None:
        """Test that an existing file is accepted as an override."""
        rules_file = tmp_path / "rules.json"
        rules_file.write_text("{}", encoding="utf-8")

        settings = RulesSettings(game_system_path=rules_file)

        assert settings.game_system_path == rules_file

    def test_missing_override_path_raises(self, tmp_path: Path) -> None:
        """Test that a path to a missing file is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            RulesSettings(experts_path=tmp_path / "missing.json")

        assert exc_info.value.details["config_key"] == "rules"


class TestCharacterSettings:
    """Tests for CharacterSettings configuration."""

    def test_default_values(self) -> None:
        """Test default character settings."""
        settings = CharacterSettings()

        assert settings.default_ability_score == 9
        assert settings.directory_shards == 16

    def test_ability_score_bounds(self) -> None:
        """Test that the default ability score must be a legal score."""
        with pytest.raises(ValueError):
            CharacterSettings(default_ability_score=19)


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self) -> None:
        """Test default settings initialization."""
        settings = Settings()

        assert settings.app_name == "OSE Referee"
        assert settings.log_level == "INFO"
        assert settings.debug is False
        assert settings.is_production is True
        assert isinstance(settings.dice, DiceSettings)
        assert settings.dice.seed is None

    def test_settings_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test settings loaded from environment variables."""
        settings = get_settings()

        assert settings.debug is True
        assert settings.is_production is False
        assert settings.log_level == "DEBUG"
        assert settings.dice.seed == 1234
        assert settings.character.default_ability_score == 10

    def test_settings_cached(self) -> None:
        """Test that get_settings returns the same instance until cleared."""
        first = get_settings()

        assert get_settings() is first

        clear_settings_cache()

        assert get_settings() is not first

    def test_invalid_settings_wrapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that invalid environment values raise ConfigurationError."""
        monkeypatch.setenv("OSE_REFEREE_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            get_settings()
