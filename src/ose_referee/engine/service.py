"""Session-keyed operations exposed to the orchestration layer.

Every call names the conversation it applies to. The service resolves
the session's character through the directory, holds that session's
lock while it works, and returns either the updated character summary
(for mutations) or the requested value (for queries). Text arguments
for classes, races, abilities and the like are resolved into the closed
enums here, so callers may pass what a language model produced.
"""

from __future__ import annotations

import json
from collections.abc import Mapping

from ose_referee.core.config import get_settings
from ose_referee.core.exceptions import InvalidArgumentError
from ose_referee.core.logging import configure_logging, get_logger
from ose_referee.engine.dice import DiceType, parse_dice_type
from ose_referee.engine.directory import CharacterDirectory
from ose_referee.engine.tools import tool
from ose_referee.models.components import Background, Personality, PersonalityBackground
from ose_referee.models.enums import (
    AbilityType,
    Alignment,
    CharacterClass,
    CharacterRace,
    CoinType,
    Language,
    coerce_enum,
)
from ose_referee.rules.loader import get_rules_registry


logger = get_logger(__name__)


def _merge_notes(
    current: Background | Personality, updates: Mapping[str, str] | None, field_name: str
) -> Background | Personality:
    if not updates:
        return current
    unknown = sorted(set(updates) - set(type(current).model_fields))
    if unknown:
        raise InvalidArgumentError(
            f"Unknown {field_name} fields: {', '.join(unknown)}",
            field_name=field_name,
            invalid_value=unknown,
        )
    return type(current).model_validate({**current.model_dump(), **updates})


class CharacterStateService:
    """Character operations keyed by conversation session id.

    Example:
        >>> service = CharacterStateService.from_settings()
        >>> service.update_character_class("conv-1", "Fighter")
        >>> service.update_experience("conv-1", 2500)
    """

    def __init__(self, directory: CharacterDirectory) -> None:
        self._directory = directory

    @classmethod
    def from_settings(cls) -> CharacterStateService:
        """Build a service over a fresh directory and the configured rules.

        Also configures logging from the application settings.
        """
        settings = get_settings()
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
        return cls(CharacterDirectory(registry=get_rules_registry()))

    @property
    def directory(self) -> CharacterDirectory:
        return self._directory

    # =========================================================================
    # Mutations
    # =========================================================================

    @tool("Set the character's name.")
    def update_name(self, session_id: str, name: str) -> str:
        with self._directory.session(session_id) as character:
            character.set_name(name)
            return character.to_summary()

    @tool("Set the character's race (Human, Dwarf, Elf, Halfling).")
    def update_race(self, session_id: str, race: CharacterRace | str) -> str:
        resolved = coerce_enum(CharacterRace, race, field_name="race")
        with self._directory.session(session_id) as character:
            character.set_race(resolved)
            return character.to_summary()

    @tool("Set the character's alignment (Lawful, Neutral, Chaotic).")
    def update_alignment(self, session_id: str, alignment: Alignment | str) -> str:
        resolved = coerce_enum(Alignment, alignment, field_name="alignment")
        with self._directory.session(session_id) as character:
            character.set_alignment(resolved)
            return character.to_summary()

    @tool("Set the character's class, resetting level, hit points and class abilities.")
    def update_character_class(self, session_id: str, character_class: CharacterClass | str) -> str:
        resolved = coerce_enum(CharacterClass, character_class, field_name="character_class")
        with self._directory.session(session_id) as character:
            character.set_character_class(resolved)
            return character.to_summary()

    @tool("Set one ability score (Str, Dex, Con, Int, Wis, Cha).")
    def update_ability_score(self, session_id: str, ability: AbilityType | str, value: int) -> str:
        resolved = coerce_enum(AbilityType, ability, field_name="ability")
        with self._directory.session(session_id) as character:
            character.set_ability_score(resolved, value)
            return character.to_summary()

    @tool("Set several ability scores at once.")
    def update_ability_scores(self, session_id: str, scores: Mapping[AbilityType | str, int]) -> str:
        """Set several ability scores in one step."""
        resolved = {
            coerce_enum(AbilityType, ability, field_name="ability"): value
            for ability, value in scores.items()
        }
        with self._directory.session(session_id) as character:
            character.set_ability_scores(resolved)
            return character.to_summary()

    @tool("Award experience points; the character levels up automatically.")
    def update_experience(self, session_id: str, amount: int) -> str:
        with self._directory.session(session_id) as character:
            character.gain_experience(amount)
            return character.to_summary()

    @tool("Learn an additional language; omit it or pass Common to pick one at random.")
    def add_additional_language(
        self, session_id: str, language: Language | str | None = None
    ) -> str:
        """Learn an additional language; None or "Common" picks one at random."""
        resolved = None if language is None else coerce_enum(Language, language, field_name="language")
        with self._directory.session(session_id) as character:
            character.set_additional_language(resolved)
            return character.to_summary()

    @tool("Apply damage to the character.")
    def take_damage(self, session_id: str, amount: int) -> str:
        with self._directory.session(session_id) as character:
            character.take_damage(amount)
            return character.to_summary()

    @tool("Restore lost hit points.")
    def heal(self, session_id: str, amount: int) -> str:
        with self._directory.session(session_id) as character:
            character.heal(amount)
            return character.to_summary()

    @tool("Grant temporary hit points.")
    def gain_temp_hp(self, session_id: str, amount: int) -> str:
        with self._directory.session(session_id) as character:
            character.gain_temp_hp(amount)
            return character.to_summary()

    @tool("Add a spell from the class spell list to the spellbook.")
    def learn_spell(self, session_id: str, spell_name: str) -> str:
        with self._directory.session(session_id) as character:
            character.learn_spell(spell_name)
            return character.to_summary()

    @tool("Add or remove coins (Platinum, Gold, Electrum, Silver, Copper).")
    def adjust_coins(self, session_id: str, coin: CoinType | str, delta: int) -> str:
        resolved = coerce_enum(CoinType, coin, field_name="coin")
        with self._directory.session(session_id) as character:
            character.adjust_coins(resolved, delta)
            return character.to_summary()

    @tool("Update background or personality notes.")
    def update_personality_background(
        self,
        session_id: str,
        *,
        background: Mapping[str, str] | None = None,
        personality: Mapping[str, str] | None = None,
    ) -> str:
        """Update individual background or personality fields."""
        with self._directory.session(session_id) as character:
            current = character.personality
            updated = PersonalityBackground(
                background=_merge_notes(current.background, background, "background"),
                personality=_merge_notes(current.personality, personality, "personality"),
            )
            character.set_personality_background(updated)
            return character.to_summary()

    # =========================================================================
    # Queries
    # =========================================================================

    @tool("Get the full character sheet as text.")
    def get_character_state_as_string(self, session_id: str) -> str:
        with self._directory.session(session_id) as character:
            return character.to_summary()

    @tool("Get the full character state as JSON.")
    def get_character_state_as_json(self, session_id: str) -> str:
        with self._directory.session(session_id) as character:
            return json.dumps(character.to_snapshot(), indent=2, ensure_ascii=False)

    @tool("Get the character's class.")
    def get_class_name(self, session_id: str) -> str:
        with self._directory.session(session_id) as character:
            return character.class_name

    @tool("Get the character's race.")
    def get_race(self, session_id: str) -> str:
        with self._directory.session(session_id) as character:
            return character.race_name

    @tool("Get the value of one ability score.")
    def get_ability_score_value(self, session_id: str, ability: AbilityType | str) -> int:
        resolved = coerce_enum(AbilityType, ability, field_name="ability")
        with self._directory.session(session_id) as character:
            return character.score(resolved)

    @tool("Get one ability score with its modifier.")
    def get_ability_score(self, session_id: str, ability: AbilityType | str) -> dict[str, int]:
        resolved = coerce_enum(AbilityType, ability, field_name="ability")
        with self._directory.session(session_id) as character:
            return character.ability_score(resolved).model_dump(include={"value", "modifier"})

    @tool("Get all six ability scores with their modifiers.")
    def get_ability_scores(self, session_id: str) -> dict[str, dict[str, int]]:
        """Scores keyed by ability, e.g. ``{"Str": {"value": 16, "modifier": 2}}``."""
        with self._directory.session(session_id) as character:
            return {
                ability.value: character.ability_score(ability).model_dump(
                    include={"value", "modifier"}
                )
                for ability in AbilityType
            }

    @tool("Get the character's literacy.")
    def get_literacy(self, session_id: str) -> str:
        with self._directory.session(session_id) as character:
            return character.literacy()

    @tool("Get the number of additional languages still to choose.")
    def get_additional_languages(self, session_id: str) -> int:
        """Additional language choices the character has not used yet."""
        with self._directory.session(session_id) as character:
            return character.additional_languages

    @tool("Get the maximum number of retainers.")
    def get_max_retainers(self, session_id: str) -> int:
        with self._directory.session(session_id) as character:
            return character.max_retainers()

    @tool("Get the loyalty rating of retainers.")
    def get_retainer_loyalty(self, session_id: str) -> int:
        with self._directory.session(session_id) as character:
            return character.retainer_loyalty()

    @tool("Get the reaction roll bonus with NPCs.")
    def get_npc_reaction_bonus(self, session_id: str) -> int:
        with self._directory.session(session_id) as character:
            return character.npc_reaction_bonus()

    @tool("Get the chance to force open a stuck door.")
    def get_open_door_chance(self, session_id: str) -> str:
        with self._directory.session(session_id) as character:
            return character.open_door_chance()

    @tool("Get the turn undead result against monsters of the given hit dice.")
    def get_turning_result(self, session_id: str, monster_hit_dice: str) -> str:
        with self._directory.session(session_id) as character:
            return character.turning_result(monster_hit_dice)

    # =========================================================================
    # Dice
    # =========================================================================

    @tool("Roll a number of dice of one type (D4, D6, D8, D10, D12, D20, D100) and return the total.")
    def roll_dice(self, number: int, dice_type: DiceType | str | int) -> int:
        """Roll ``number`` dice of one type with the directory's roller."""
        die = parse_dice_type(dice_type)
        total = self._directory.roller.roll_dice(die, number)
        logger.info("Dice rolled for referee", die=die.value, count=number, total=total)
        return total


__all__ = [
    "CharacterStateService",
]
