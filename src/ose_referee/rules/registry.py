"""Read-only lookups over the loaded rules tables.

Every lookup returns the first matching row in table order. A missing
table, class section or row never raises: the lookup logs at debug
level and returns the fallback documented in ``core.constants``. Class
tables for XP thresholds, XP modifiers and prime requisites also
consult the ``Default`` section before giving up.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from typing import TypeVar

from ose_referee.core.constants import (
    DEFAULT_ABILITY_MODIFIER,
    DEFAULT_ADDITIONAL_LANGUAGES,
    DEFAULT_CLASS_KEY,
    DEFAULT_COIN_CONVERSION_RATE,
    DEFAULT_HIT_DICE_MODIFIER,
    DEFAULT_HIT_DIE,
    DEFAULT_LITERACY,
    DEFAULT_MAX_LEVEL,
    DEFAULT_MAX_RETAINERS,
    DEFAULT_OPEN_DOOR_CHANCE,
    DEFAULT_REACTION_BONUS,
    DEFAULT_RETAINER_LOYALTY,
    DEFAULT_TO_HIT_AC0,
    DEFAULT_TO_HIT_BONUS,
    DEFAULT_TURNING_RESULT,
    DEFAULT_XP_FOR_NEXT_LEVEL,
    DEFAULT_XP_MODIFIER,
    SPELL_LEVEL_COUNT,
)
from ose_referee.core.logging import get_logger
from ose_referee.engine.dice import DiceType
from ose_referee.models.components import SavingThrows, Spell
from ose_referee.models.enums import CharacterClass, CoinType, Language, MagicType, SpellType
from ose_referee.rules.schema import (
    ClassRules,
    GameSystemConfig,
    LevelRangeRule,
    PrimeRequisiteRule,
    ScoreRangeRule,
)


logger = get_logger(__name__)

R = TypeVar("R", ScoreRangeRule, LevelRangeRule)

_OPEN_ENDED_ROW = re.compile(r"^(\d+)\+$")


def first_match(rows: Iterable[R], value: int) -> R | None:
    """Return the first row whose score or level range contains ``value``."""
    for row in rows:
        if row.matches(value):
            return row
    return None


class RulesRegistry:
    """Lookup facade over a GameSystemConfig.

    Example:
        >>> registry = RulesRegistry(load_game_system())
        >>> registry.ability_modifier(16)
        2
    """

    def __init__(self, config: GameSystemConfig) -> None:
        self._config = config

    @property
    def config(self) -> GameSystemConfig:
        return self._config

    def _miss(self, table: str, **key: object) -> None:
        logger.debug("Rules lookup fell back to default", table=table, **key)

    def _class_rules(self, character_class: CharacterClass | str) -> ClassRules | None:
        return self._config.classes.get(str(character_class))

    def _with_default(self, character_class: CharacterClass) -> Iterator[ClassRules]:
        """Yield the class section, then the Default section, where present."""
        for key in (str(character_class), DEFAULT_CLASS_KEY):
            rules = self._config.classes.get(key)
            if rules is not None:
                yield rules

    # =========================================================================
    # Ability Score Tables
    # =========================================================================

    def ability_modifier(self, score: int) -> int:
        row = first_match(self._config.ability_modifiers, score)
        if row is None:
            self._miss("ability_modifiers", score=score)
            return DEFAULT_ABILITY_MODIFIER
        return row.modifier

    def open_door_chance(self, strength: int) -> str:
        row = first_match(self._config.strength, strength)
        if row is None:
            self._miss("strength", score=strength)
            return DEFAULT_OPEN_DOOR_CHANCE
        return row.open_doors

    def literacy(self, intelligence: int) -> str:
        row = first_match(self._config.intelligence, intelligence)
        if row is None:
            self._miss("intelligence", score=intelligence)
            return DEFAULT_LITERACY
        return row.literacy

    def additional_languages(self, intelligence: int) -> int:
        row = first_match(self._config.intelligence, intelligence)
        if row is None:
            self._miss("intelligence", score=intelligence)
            return DEFAULT_ADDITIONAL_LANGUAGES
        return row.additional_languages

    def max_retainers(self, charisma: int) -> int:
        row = first_match(self._config.charisma, charisma)
        if row is None:
            self._miss("charisma", score=charisma)
            return DEFAULT_MAX_RETAINERS
        return row.max_retainers

    def retainer_loyalty(self, charisma: int) -> int:
        row = first_match(self._config.charisma, charisma)
        if row is None:
            self._miss("charisma", score=charisma)
            return DEFAULT_RETAINER_LOYALTY
        return row.retainer_loyalty

    def npc_reaction_bonus(self, charisma: int) -> int:
        row = first_match(self._config.charisma, charisma)
        if row is None:
            self._miss("charisma", score=charisma)
            return DEFAULT_REACTION_BONUS
        return row.npc_reactions

    # =========================================================================
    # Class Progression Tables
    # =========================================================================

    def max_level(self, character_class: CharacterClass) -> int:
        rules = self._class_rules(character_class)
        if rules is None or rules.max_level is None:
            self._miss("max_level", character_class=str(character_class))
            return DEFAULT_MAX_LEVEL
        return rules.max_level

    def hit_die(self, character_class: CharacterClass) -> DiceType:
        rules = self._class_rules(character_class)
        if rules is None or rules.hit_die is None:
            self._miss("hit_die", character_class=str(character_class))
            return DiceType(DEFAULT_HIT_DIE)
        return rules.hit_die

    def hit_dice_modifier(self, character_class: CharacterClass, level: int) -> int:
        """Flat hit points granted at ``level`` instead of a roll; 0 means roll."""
        rules = self._class_rules(character_class)
        row = first_match(rules.hit_dice_modifiers, level) if rules else None
        if row is None:
            return DEFAULT_HIT_DICE_MODIFIER
        return row.modifier

    def xp_for_next_level(self, character_class: CharacterClass, level: int) -> int:
        """Cumulative XP a character of ``level`` needs to advance."""
        for rules in self._with_default(character_class):
            for threshold in rules.xp_for_next_level:
                if threshold.level == level:
                    return threshold.xp_required
        self._miss("xp_for_next_level", character_class=str(character_class), level=level)
        return DEFAULT_XP_FOR_NEXT_LEVEL

    def xp_modifier(self, character_class: CharacterClass, score: int) -> float:
        """XP multiplier for a prime requisite score."""
        for rules in self._with_default(character_class):
            row = first_match(rules.xp_modifiers, score)
            if row is not None:
                return row.multiplier
        self._miss("xp_modifiers", character_class=str(character_class), score=score)
        return DEFAULT_XP_MODIFIER

    def prime_requisites(self, character_class: CharacterClass) -> PrimeRequisiteRule:
        for rules in self._with_default(character_class):
            if rules.prime_requisite is not None:
                return rules.prime_requisite
        self._miss("prime_requisite", character_class=str(character_class))
        return PrimeRequisiteRule()

    def saving_throws(self, character_class: CharacterClass, level: int) -> SavingThrows:
        rules = self._class_rules(character_class)
        row = first_match(rules.saving_throws, level) if rules else None
        if row is None:
            self._miss("saving_throws", character_class=str(character_class), level=level)
            return SavingThrows()
        return row.saves.model_copy()

    def to_hit_ac0(self, character_class: CharacterClass, level: int) -> int:
        rules = self._class_rules(character_class)
        row = first_match(rules.to_hit, level) if rules else None
        if row is None:
            self._miss("to_hit", character_class=str(character_class), level=level)
            return DEFAULT_TO_HIT_AC0
        return row.to_hit_ac0

    def to_hit_bonus(self, character_class: CharacterClass, level: int) -> int:
        rules = self._class_rules(character_class)
        row = first_match(rules.to_hit, level) if rules else None
        if row is None:
            self._miss("to_hit", character_class=str(character_class), level=level)
            return DEFAULT_TO_HIT_BONUS
        return row.to_hit_bonus

    # =========================================================================
    # Magic
    # =========================================================================

    def spell_slots(self, character_class: CharacterClass, level: int) -> list[int]:
        """Slots for spell levels 1-6 at a character level, padded with zeros."""
        slots: list[int] = []
        rules = self._class_rules(character_class)
        if rules is not None:
            for row in rules.spells_per_level:
                if row.level == level:
                    slots = list(row.slots[:SPELL_LEVEL_COUNT])
                    break
        return slots + [0] * (SPELL_LEVEL_COUNT - len(slots))

    def spell_list(self, character_class: CharacterClass, spell_level: int) -> list[str]:
        rules = self._class_rules(character_class)
        if rules is None:
            return []
        return list(rules.spell_lists.get(spell_level, []))

    def magic_type(self, character_class: CharacterClass) -> MagicType:
        rules = self._class_rules(character_class)
        if rules is None or rules.magic_type is None:
            return MagicType.NONE
        return rules.magic_type

    def spell_type(self, character_class: CharacterClass) -> SpellType:
        rules = self._class_rules(character_class)
        if rules is None or rules.spell_type is None:
            return SpellType.NONE
        return rules.spell_type

    def find_spell(self, spell_type: SpellType, name: str) -> Spell | None:
        """Look up a catalog spell by name (case-insensitive) within a spell list."""
        wanted = name.strip().lower()
        for spell in self._config.spells:
            if spell.spell_type == spell_type and spell.name.lower() == wanted:
                return spell
        return None

    # =========================================================================
    # Languages, Coins, Turning
    # =========================================================================

    def starting_languages(self, character_class: CharacterClass) -> list[Language]:
        rules = self._class_rules(character_class)
        if rules is None:
            self._miss("starting_languages", character_class=str(character_class))
            return []
        return list(rules.starting_languages)

    def all_languages(self) -> list[Language]:
        return list(self._config.languages)

    def all_classes(self) -> list[CharacterClass]:
        """Classes that have their own section in the rules document."""
        return [cls for cls in CharacterClass if str(cls) in self._config.classes]

    def coin_conversion_rate(self, coin: CoinType) -> float:
        rate = self._config.coin_conversion_rates.get(coin)
        if rate is None:
            self._miss("coin_conversion_rates", coin=str(coin))
            return DEFAULT_COIN_CONVERSION_RATE
        return rate

    def turning_result(
        self, character_class: CharacterClass, level: int, monster_hit_dice: str
    ) -> str:
        """Result of a turn undead attempt.

        Levels above the highest numbered row use an open-ended ``N+`` row.

        Returns:
            ``"-"`` (no effect), a 2d6 target number, ``"T"`` (turned) or
            ``"D"`` (destroyed).
        """
        rules = self._class_rules(character_class)
        table = rules.turning if rules else None
        if table is None:
            return DEFAULT_TURNING_RESULT

        row = table.rows.get(str(level))
        if row is None:
            open_ended = [
                (int(match.group(1)), label)
                for label in table.rows
                if (match := _OPEN_ENDED_ROW.match(label)) and int(match.group(1)) <= level
            ]
            if open_ended:
                row = table.rows[max(open_ended)[1]]

        if row is None:
            self._miss("turning", character_class=str(character_class), level=level)
            return DEFAULT_TURNING_RESULT
        return row.get(monster_hit_dice.strip(), DEFAULT_TURNING_RESULT)


__all__ = [
    "RulesRegistry",
    "first_match",
]
