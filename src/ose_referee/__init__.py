"""OSE Referee - character rules engine for an Old-School Essentials game master.

The engine tracks one character per conversation: ability scores, class,
experience and everything derived from them through the rules tables.
Python owns the rules and the dice; the language model on the other side
of the tool layer only asks for changes and reads back the results.

Example:
    >>> from ose_referee import CharacterStateService
    >>>
    >>> service = CharacterStateService.from_settings()
    >>> service.update_ability_scores("conv-1", {"Str": 16, "Con": 13})
    >>> service.update_character_class("conv-1", "Fighter")
    >>> print(service.update_experience("conv-1", 2000))

Modules:
    core: Configuration, logging, constants and the exception hierarchy.
    models: Closed vocabularies, state components and the Character aggregate.
    rules: Rules document schema, loading, lookups and progression.
    engine: Dice, the character directory, the session service and tool dispatch.
"""

from __future__ import annotations

# Core
from ose_referee.core.config import Settings, get_settings
from ose_referee.core.exceptions import OseRefereeError
from ose_referee.core.logging import configure_logging, get_logger

# Dice
from ose_referee.engine.dice import DiceRoller, DiceType

# Models
from ose_referee.models.enums import (
    AbilityType,
    Alignment,
    CharacterClass,
    CharacterRace,
    CoinType,
    Language,
)

# Rules
from ose_referee.rules.loader import get_expert_registry, get_rules_registry
from ose_referee.rules.registry import RulesRegistry

# Character & Service
from ose_referee.models.character import Character
from ose_referee.engine.directory import CharacterDirectory
from ose_referee.engine.service import CharacterStateService
from ose_referee.engine.tools import ToolCall, ToolDispatcher, ToolResult


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "OseRefereeError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Dice
    "DiceRoller",
    "DiceType",
    # Models
    "AbilityType",
    "Alignment",
    "CharacterClass",
    "CharacterRace",
    "CoinType",
    "Language",
    "Character",
    # Rules
    "RulesRegistry",
    "get_rules_registry",
    "get_expert_registry",
    # Engine
    "CharacterDirectory",
    "CharacterStateService",
    "ToolCall",
    "ToolDispatcher",
    "ToolResult",
]
