"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        OseRefereeError: Base exception for all application errors.
        ConfigurationError: Configuration-related errors.
        GameEngineError: Rules engine errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from ose_referee.core.config import (
    CharacterSettings,
    DiceSettings,
    RulesSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from ose_referee.core.exceptions import (
    CharacterNotInitializedError,
    ConfigurationError,
    DiceRollError,
    GameEngineError,
    InvalidArgumentError,
    InvalidGameStateError,
    OseRefereeError,
    RulesLoadError,
)
from ose_referee.core.logging import (
    bind_context,
    bound_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "OseRefereeError",
    # Configuration exceptions
    "ConfigurationError",
    "RulesLoadError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidArgumentError",
    "DiceRollError",
    "InvalidGameStateError",
    "CharacterNotInitializedError",
    # Configuration
    "Settings",
    "RulesSettings",
    "DiceSettings",
    "CharacterSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "bound_context",
    "clear_context",
]
