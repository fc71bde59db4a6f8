"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the OSE referee test suite.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator

    from ose_referee.engine.directory import CharacterDirectory
    from ose_referee.engine.service import CharacterStateService
    from ose_referee.models.character import Character
    from ose_referee.rules.registry import RulesRegistry


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings, rules and roller caches around each test."""
    from ose_referee.core.config import clear_settings_cache
    from ose_referee.engine.dice import set_default_roller
    from ose_referee.rules.loader import clear_rules_cache

    clear_settings_cache()
    clear_rules_cache()
    set_default_roller(None)
    yield
    clear_settings_cache()
    clear_rules_cache()
    set_default_roller(None)


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "OSE_REFEREE_DEBUG": "true",
        "OSE_REFEREE_LOG_LEVEL": "DEBUG",
        "OSE_REFEREE_DICE_SEED": "1234",
        "OSE_REFEREE_CHARACTER_DEFAULT_ABILITY_SCORE": "10",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Dice Fixtures
# =============================================================================


class ScriptedRandom:
    """Random source that replays scripted values.

    ``randint`` returns the next scripted roll, or the lowest face once
    the script runs out. ``choice`` returns the element at the next
    scripted index, or the first element.
    """

    def __init__(self, rolls: Sequence[int] = (), choices: Sequence[int] = ()) -> None:
        self.rolls = list(rolls)
        self.choices = list(choices)
        self.randint_calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.randint_calls.append((a, b))
        if self.rolls:
            return self.rolls.pop(0)
        return a

    def choice(self, seq: Sequence[Any]) -> Any:
        index = self.choices.pop(0) if self.choices else 0
        return seq[index]


@pytest.fixture
def scripted_random() -> ScriptedRandom:
    """Provide an empty scripted random source tests can load with rolls."""
    return ScriptedRandom()


@pytest.fixture
def scripted_roller(scripted_random: ScriptedRandom) -> Any:
    """Create a DiceRoller driven by the scripted random source."""
    from ose_referee.engine.dice import DiceRoller

    return DiceRoller(scripted_random)


@pytest.fixture
def dice_roller() -> Any:
    """Create a seeded DiceRoller for reproducible tests."""
    from ose_referee.engine.dice import DiceRoller

    return DiceRoller(seed=42)


# =============================================================================
# Rules Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def game_system() -> Any:
    """Load the bundled OSE rules tables once per test session."""
    from ose_referee.rules.loader import load_game_system

    return load_game_system()


@pytest.fixture
def registry(game_system: Any) -> RulesRegistry:
    """Create a rules registry over the bundled tables."""
    from ose_referee.rules.registry import RulesRegistry

    return RulesRegistry(game_system)


@pytest.fixture
def empty_registry() -> RulesRegistry:
    """Create a rules registry with no tables at all."""
    from ose_referee.rules.registry import RulesRegistry
    from ose_referee.rules.schema import GameSystemConfig

    return RulesRegistry(GameSystemConfig())


# =============================================================================
# Character Fixtures
# =============================================================================


@pytest.fixture
def sample_ability_scores() -> dict[str, int]:
    """Provide sample ability scores for a strong, hardy fighter.

    Returns:
        Dictionary of ability scores keyed by abbreviation.
    """
    return {
        "Str": 16,
        "Dex": 14,
        "Con": 13,
        "Int": 13,
        "Wis": 9,
        "Cha": 8,
    }


@pytest.fixture
def character(registry: RulesRegistry, scripted_roller: Any) -> Character:
    """Create an unclassed character bound to the bundled rules."""
    from ose_referee.models.character import Character

    return Character.create(registry=registry, roller=scripted_roller)


@pytest.fixture
def fighter(
    character: Character,
    scripted_random: ScriptedRandom,
    sample_ability_scores: dict[str, int],
) -> Character:
    """Create a level 1 fighter whose first hit die rolls a 6."""
    from ose_referee.models.enums import AbilityType, CharacterClass

    character.set_ability_scores(
        {AbilityType(key): value for key, value in sample_ability_scores.items()}
    )
    scripted_random.rolls = [6]
    character.set_character_class(CharacterClass.FIGHTER)
    return character


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def directory(registry: RulesRegistry, scripted_roller: Any) -> CharacterDirectory:
    """Create an empty character directory."""
    from ose_referee.engine.directory import CharacterDirectory

    return CharacterDirectory(registry=registry, roller=scripted_roller, shards=4)


@pytest.fixture
def service(directory: CharacterDirectory) -> CharacterStateService:
    """Create a character state service over the test directory."""
    from ose_referee.engine.service import CharacterStateService

    return CharacterStateService(directory)
