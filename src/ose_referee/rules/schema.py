"""Schema of the game system rules document.

The rules tables are loaded once from JSON into these immutable models.
Abilities, languages, dice, coins and magic types are validated against
the closed enums here, at the loading boundary; class sections stay
keyed by name so a ``Default`` section can sit beside the real classes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ose_referee.engine.dice import DiceType
from ose_referee.models.components import SavingThrows, Spell
from ose_referee.models.enums import AbilityType, CoinType, Language, MagicType, SpellType


class RulesModel(BaseModel):
    """Base class for rules table models."""

    model_config = ConfigDict(frozen=True, extra="ignore")


# =============================================================================
# Range Rows
# =============================================================================


class ScoreRangeRule(RulesModel):
    """A row that applies to one exact score or an inclusive score range."""

    score: int | None = None
    score_min: int | None = None
    score_max: int | None = None

    def matches(self, value: int) -> bool:
        if self.score is not None and self.score == value:
            return True
        if self.score_min is None or self.score_max is None:
            return False
        return self.score_min <= value <= self.score_max


class LevelRangeRule(RulesModel):
    """A row that applies to an inclusive range of character levels."""

    level_min: int = Field(ge=1)
    level_max: int = Field(ge=1)

    def matches(self, level: int) -> bool:
        return self.level_min <= level <= self.level_max


class AbilityModifierRule(ScoreRangeRule):
    modifier: int


class StrengthRule(ScoreRangeRule):
    open_doors: str


class IntelligenceRule(ScoreRangeRule):
    literacy: str
    additional_languages: int = Field(ge=0)


class CharismaRule(ScoreRangeRule):
    npc_reactions: int
    max_retainers: int = Field(ge=0)
    retainer_loyalty: int = Field(ge=0)


class XPModifierRule(ScoreRangeRule):
    multiplier: float = Field(ge=0.0)


class XPThreshold(RulesModel):
    """Cumulative XP that lifts a character out of ``level``."""

    level: int = Field(ge=1)
    xp_required: int = Field(ge=0)


class HitDiceModifierRule(LevelRangeRule):
    """Flat hit points gained per level instead of a roll."""

    modifier: int


class SavingThrowRule(LevelRangeRule):
    saves: SavingThrows


class ToHitRule(LevelRangeRule):
    to_hit_ac0: int
    to_hit_bonus: int


class SpellSlotRule(RulesModel):
    level: int = Field(ge=1)
    slots: list[int]


class PrimeRequisiteCondition(RulesModel):
    """Minimum scores that together earn an XP multiplier."""

    minimums: dict[AbilityType, int] = Field(default_factory=dict)
    multiplier: float = Field(ge=0.0)

    def is_met(self, scores: dict[AbilityType, int]) -> bool:
        return all(scores.get(ability, 0) >= minimum for ability, minimum in self.minimums.items())


class PrimeRequisiteRule(RulesModel):
    """How a class turns ability scores into an XP multiplier.

    Classes with several prime requisites list conditions, checked in
    order; single-requisite classes name one primary ability looked up in
    the XP modifier table.
    """

    primary_ability: AbilityType | None = None
    conditions: list[PrimeRequisiteCondition] = Field(default_factory=list)


class TurningTable(RulesModel):
    """Turn undead results by cleric level row and monster hit dice column."""

    monster_hit_dice: list[str] = Field(default_factory=list)
    rows: dict[str, dict[str, str]] = Field(default_factory=dict)


# =============================================================================
# Class Section & Document
# =============================================================================


class ClassRules(RulesModel):
    """All tables for one character class.

    Every field is optional in the document; the registry supplies a
    fallback for anything missing.
    """

    hit_die: DiceType | None = None
    max_level: int | None = Field(default=None, ge=0)
    hit_dice_modifiers: list[HitDiceModifierRule] = Field(default_factory=list)
    xp_for_next_level: list[XPThreshold] = Field(default_factory=list)
    xp_modifiers: list[XPModifierRule] = Field(default_factory=list)
    prime_requisite: PrimeRequisiteRule | None = None
    saving_throws: list[SavingThrowRule] = Field(default_factory=list)
    to_hit: list[ToHitRule] = Field(default_factory=list)
    spells_per_level: list[SpellSlotRule] = Field(default_factory=list)
    magic_type: MagicType | None = None
    spell_type: SpellType | None = None
    spell_lists: dict[int, list[str]] = Field(default_factory=dict)
    starting_languages: list[Language] = Field(default_factory=list)
    turning: TurningTable | None = None


class GameSystemConfig(RulesModel):
    """Root of the rules document."""

    game_system_name: str = "Old-School Essentials"
    version: str = "1.0"
    ability_modifiers: list[AbilityModifierRule] = Field(default_factory=list)
    strength: list[StrengthRule] = Field(default_factory=list)
    intelligence: list[IntelligenceRule] = Field(default_factory=list)
    charisma: list[CharismaRule] = Field(default_factory=list)
    classes: dict[str, ClassRules] = Field(default_factory=dict)
    languages: list[Language] = Field(default_factory=list)
    coin_conversion_rates: dict[CoinType, float] = Field(default_factory=dict)
    spells: list[Spell] = Field(default_factory=list)


__all__ = [
    "RulesModel",
    "ScoreRangeRule",
    "LevelRangeRule",
    "AbilityModifierRule",
    "StrengthRule",
    "IntelligenceRule",
    "CharismaRule",
    "XPModifierRule",
    "XPThreshold",
    "HitDiceModifierRule",
    "SavingThrowRule",
    "ToHitRule",
    "SpellSlotRule",
    "PrimeRequisiteCondition",
    "PrimeRequisiteRule",
    "TurningTable",
    "ClassRules",
    "GameSystemConfig",
]
