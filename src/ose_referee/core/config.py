"""Configuration management for the OSE referee.

Centralized settings using pydantic-settings, read from environment
variables and an optional .env file.

Example:
    >>> from ose_referee.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.character.default_ability_score
    9

Environment Variables:
    OSE_REFEREE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    OSE_REFEREE_JSON_LOGS: Emit JSON log lines instead of console output
    OSE_REFEREE_RULES_GAME_SYSTEM_PATH: Override for the bundled rules tables
    OSE_REFEREE_RULES_EXPERTS_PATH: Override for the bundled expert list
    OSE_REFEREE_DICE_SEED: Seed for the process-wide dice roller
    OSE_REFEREE_CHARACTER_DEFAULT_ABILITY_SCORE: Starting value of every ability
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ose_referee.core.constants import DEFAULT_ABILITY_SCORE, MAX_ABILITY_SCORE, MIN_ABILITY_SCORE
from ose_referee.core.exceptions import ConfigurationError


class RulesSettings(BaseSettings):
    """Locations of the rules documents.

    Attributes:
        game_system_path: Rules tables JSON; None uses the bundled tables.
        experts_path: Expert list JSON; None uses the bundled list.
    """

    model_config = SettingsConfigDict(
        env_prefix="OSE_REFEREE_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    game_system_path: Path | None = Field(
        default=None,
        description="Override path for the game system rules tables",
    )
    experts_path: Path | None = Field(
        default=None,
        description="Override path for the expert definitions",
    )

    @field_validator("game_system_path", "experts_path", mode="after")
    @classmethod
    def ensure_file_exists(cls, value: Path | None) -> Path | None:
        """Reject override paths that do not point at a file.

        Args:
            value: The configured path, if any.

        Returns:
            The validated path.

        Raises:
            ConfigurationError: If the path is set but is not a file.
        """
        if value is not None and not value.is_file():
            raise ConfigurationError(
                f"Rules file not found: {value}",
                config_key="rules",
                details={"path": str(value)},
            )
        return value


class DiceSettings(BaseSettings):
    """Configuration for the process-wide dice roller.

    Attributes:
        seed: Optional seed for reproducible rolls.
    """

    model_config = SettingsConfigDict(
        env_prefix="OSE_REFEREE_DICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    seed: int | None = Field(
        default=None,
        description="Random seed for reproducible rolls",
    )


class CharacterSettings(BaseSettings):
    """Configuration for new characters and the character directory.

    Attributes:
        default_ability_score: Value every ability starts at.
        directory_shards: Number of independently locked directory shards.
    """

    model_config = SettingsConfigDict(
        env_prefix="OSE_REFEREE_CHARACTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_ability_score: int = Field(
        default=DEFAULT_ABILITY_SCORE,
        ge=MIN_ABILITY_SCORE,
        le=MAX_ABILITY_SCORE,
        description="Starting value of every ability score",
    )
    directory_shards: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Number of lock shards in the character directory",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Emit JSON log lines.
        rules: Rules document locations.
        dice: Dice roller settings.
        character: Character defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="OSE_REFEREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="OSE Referee",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)
    dice: DiceSettings = Field(default_factory=DiceSettings)
    character: CharacterSettings = Field(default_factory=CharacterSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "RulesSettings",
    "DiceSettings",
    "CharacterSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
