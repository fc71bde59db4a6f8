"""The Character aggregate.

A Character owns everything the referee tracks for one conversation:
identity, ability scores, languages, roleplaying notes and, once a class
is assigned, a complete ClassProgression. It is bound to a rules
registry and a dice roller at construction; both are runtime
collaborators and are not part of the snapshot.

State machine:
    Uninitialized (no class) -> Initialized (class assigned). Gaining
    experience may pass through any number of level-ups before the new
    state is committed. Assigning a different class resets all
    class-dependent state to level 1.

Changing ability scores after a class is assigned does not recompute the
derived combat, health or XP multiplier values; those refresh on the
next level-up or class assignment.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from ose_referee.core.config import get_settings
from ose_referee.core.exceptions import (
    CharacterNotInitializedError,
    InvalidArgumentError,
    InvalidGameStateError,
)
from ose_referee.core.logging import get_logger
from ose_referee.engine.dice import DiceRoller, get_default_roller
from ose_referee.models.components import (
    AbilityScore,
    ClassProgression,
    PersonalityBackground,
    Spell,
)
from ose_referee.models.enums import (
    AbilityType,
    Alignment,
    CharacterClass,
    CharacterRace,
    CoinType,
    Language,
)
from ose_referee.rules import progression as rules_progression
from ose_referee.rules.registry import RulesRegistry


logger = get_logger(__name__)


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


class Character(BaseModel):
    """Aggregate root for one conversation's character.

    Attributes:
        name: Character name.
        race: Race, if chosen.
        alignment: Alignment, if chosen.
        ability_scores: Exactly one AbilityScore per AbilityType.
        known_languages: Languages known, in the order learned.
        additional_languages: Additional language choices not yet used.
        personality: Free-text background and personality notes.
        progression: Class-dependent state; None until a class is assigned.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    name: str = ""
    race: CharacterRace | None = None
    alignment: Alignment | None = None
    ability_scores: dict[AbilityType, AbilityScore]
    known_languages: list[Language] = Field(default_factory=list)
    additional_languages: int = Field(default=0, ge=0)
    personality: PersonalityBackground = Field(default_factory=PersonalityBackground)
    progression: ClassProgression | None = None

    _rules: RulesRegistry | None = PrivateAttr(default=None)
    _roller: DiceRoller | None = PrivateAttr(default=None)

    @model_validator(mode="after")
    def validate_sheet(self) -> Self:
        """Ensure all six abilities are present and languages are unique."""
        missing = [ability.value for ability in AbilityType if ability not in self.ability_scores]
        if missing:
            raise ValueError(f"Missing ability scores: {', '.join(missing)}")
        for ability, score in self.ability_scores.items():
            if score.ability != ability:
                raise ValueError(f"Ability score keyed {ability.value} holds {score.ability.value}")
        if len(set(self.known_languages)) != len(self.known_languages):
            raise ValueError("Known languages must be unique")
        return self

    # =========================================================================
    # Construction & Binding
    # =========================================================================

    @classmethod
    def create(
        cls,
        *,
        registry: RulesRegistry,
        roller: DiceRoller | None = None,
        default_score: int | None = None,
        name: str = "",
    ) -> Character:
        """Create an unclassed character with every ability at the default score.

        Args:
            registry: Rules tables used for every derived value.
            roller: Dice roller; defaults to the process-wide roller.
            default_score: Starting ability value; defaults to the configured value.
            name: Optional character name.

        Returns:
            A new, uninitialized Character.
        """
        if default_score is None:
            default_score = get_settings().character.default_ability_score
        scores = {
            ability: AbilityScore(
                ability=ability,
                value=default_score,
                modifier=registry.ability_modifier(default_score),
            )
            for ability in AbilityType
        }
        return cls(name=name, ability_scores=scores).bind(registry, roller)

    @classmethod
    def from_snapshot(
        cls,
        data: Mapping[str, Any],
        *,
        registry: RulesRegistry,
        roller: DiceRoller | None = None,
    ) -> Character:
        """Rebuild a character from ``to_snapshot`` output."""
        return cls.model_validate(dict(data)).bind(registry, roller)

    def bind(self, registry: RulesRegistry, roller: DiceRoller | None = None) -> Self:
        """Attach the rules registry and dice roller this character uses."""
        self._rules = registry
        self._roller = roller if roller is not None else get_default_roller()
        return self

    @property
    def rules(self) -> RulesRegistry:
        if self._rules is None:
            raise InvalidGameStateError(
                "Character is not bound to a rules registry",
                current_state="unbound",
                expected_states=["bound"],
            )
        return self._rules

    @property
    def roller(self) -> DiceRoller:
        if self._roller is None:
            self._roller = get_default_roller()
        return self._roller

    # =========================================================================
    # State Queries
    # =========================================================================

    @property
    def is_initialized(self) -> bool:
        return self.progression is not None

    @property
    def character_class(self) -> CharacterClass | None:
        return self.progression.character_class if self.progression else None

    @property
    def class_name(self) -> str:
        """Class value, or an empty string before a class is assigned."""
        return self.character_class.value if self.character_class else ""

    @property
    def race_name(self) -> str:
        return self.race.value if self.race else ""

    def require_progression(self, operation: str) -> ClassProgression:
        """Return the class progression or raise if no class is assigned.

        Raises:
            CharacterNotInitializedError: If no class has been assigned.
        """
        if self.progression is None:
            raise CharacterNotInitializedError(operation=operation)
        return self.progression

    def ability_score(self, ability: AbilityType) -> AbilityScore:
        return self.ability_scores[ability]

    def score(self, ability: AbilityType) -> int:
        return self.ability_scores[ability].value

    def literacy(self) -> str:
        return self.rules.literacy(self.score(AbilityType.INT))

    def max_retainers(self) -> int:
        return self.rules.max_retainers(self.score(AbilityType.CHA))

    def retainer_loyalty(self) -> int:
        return self.rules.retainer_loyalty(self.score(AbilityType.CHA))

    def npc_reaction_bonus(self) -> int:
        return self.rules.npc_reaction_bonus(self.score(AbilityType.CHA))

    def open_door_chance(self) -> str:
        return self.rules.open_door_chance(self.score(AbilityType.STR))

    def available_languages(self) -> list[Language]:
        """Languages that could still be learned as additional languages."""
        return [
            language
            for language in self.rules.all_languages()
            if language not in self.known_languages and not language.is_secret
        ]

    # =========================================================================
    # Identity
    # =========================================================================

    def set_name(self, name: str) -> None:
        self.name = name.strip()

    def set_race(self, race: CharacterRace) -> None:
        self.race = race

    def set_alignment(self, alignment: Alignment) -> None:
        self.alignment = alignment

    def set_personality_background(self, personality: PersonalityBackground) -> None:
        self.personality = personality

    # =========================================================================
    # Ability Scores
    # =========================================================================

    def _build_score(self, ability: AbilityType, value: int) -> AbilityScore:
        return AbilityScore(ability=ability, value=value, modifier=self.rules.ability_modifier(value))

    def set_ability_score(self, ability: AbilityType, value: int) -> AbilityScore:
        """Replace one ability score and its modifier."""
        score = self._build_score(ability, value)
        self.ability_scores = {**self.ability_scores, ability: score}
        return score

    def set_ability_scores(self, values: Mapping[AbilityType, int]) -> None:
        """Replace several ability scores at once."""
        updated = dict(self.ability_scores)
        for ability, value in values.items():
            updated[ability] = self._build_score(ability, value)
        self.ability_scores = updated

    # =========================================================================
    # Class & Experience
    # =========================================================================

    def set_character_class(self, character_class: CharacterClass) -> bool:
        """Assign a class, resetting all class-dependent state.

        Assigning the current class again changes nothing.

        Returns:
            True if the class changed.
        """
        if self.character_class == character_class:
            return False

        progression = rules_progression.new_progression(
            self.rules, self.roller, character_class, self.ability_scores
        )
        languages = list(dict.fromkeys(self.rules.starting_languages(character_class)))
        allowance = self.rules.additional_languages(self.score(AbilityType.INT))

        self.progression = progression
        self.known_languages = languages
        self.additional_languages = allowance

        logger.info(
            "Character class set",
            character_class=character_class.value,
            max_hp=progression.health.max_hp,
            xp_multiplier=progression.experience.xp_multiplier,
            additional_languages=allowance,
        )
        return True

    def gain_experience(self, amount: int) -> int:
        """Award experience, applying the XP multiplier and any level-ups.

        Args:
            amount: Raw XP before the multiplier.

        Returns:
            Number of levels gained.

        Raises:
            CharacterNotInitializedError: If no class is assigned.
            InvalidArgumentError: If amount is negative.
        """
        progression = self.require_progression("gain_experience")
        if amount < 0:
            raise InvalidArgumentError(
                "Experience gained cannot be negative",
                field_name="amount",
                invalid_value=amount,
            )

        updated, levels_gained = rules_progression.apply_experience(
            self.rules, self.roller, progression, self.ability_scores, amount
        )
        self.progression = updated

        logger.info(
            "Experience gained",
            amount=amount,
            current_xp=updated.experience.current_xp,
            level=updated.experience.level,
            levels_gained=levels_gained,
        )
        return levels_gained

    # =========================================================================
    # Languages
    # =========================================================================

    def set_additional_language(self, language: Language | None = None) -> Language | None:
        """Spend one additional language choice.

        Passing None, COMMON or ALIGNMENT picks a random learnable
        language. With no choices left this does nothing.

        Returns:
            The language learned, or None if no choice was available.

        Raises:
            InvalidArgumentError: If the language is already known or
                secret, or nothing is left to learn.
        """
        if self.additional_languages <= 0:
            logger.debug("No additional language choices left")
            return None

        if language is None or language.is_random_sentinel:
            candidates = self.available_languages()
            if not candidates:
                raise InvalidArgumentError(
                    "No languages left to learn",
                    field_name="language",
                    details={"known_languages": [lang.value for lang in self.known_languages]},
                )
            language = self.roller.choice(candidates)

        if language in self.known_languages:
            raise InvalidArgumentError(
                f"{language.value} is already known",
                field_name="language",
                invalid_value=language.value,
            )
        if language.is_secret:
            raise InvalidArgumentError(
                f"{language.value} is a secret language and cannot be chosen",
                field_name="language",
                invalid_value=language.value,
            )

        self.known_languages = [*self.known_languages, language]
        self.additional_languages -= 1
        logger.info(
            "Language learned",
            language=language.value,
            remaining_choices=self.additional_languages,
        )
        return language

    # =========================================================================
    # Health
    # =========================================================================

    def take_damage(self, amount: int) -> int:
        """Apply damage; returns real hit points lost."""
        lost = self.require_progression("take_damage").health.take_damage(amount)
        logger.info("Damage taken", amount=amount, hp_lost=lost)
        return lost

    def heal(self, amount: int) -> int:
        """Restore hit points; returns the amount restored."""
        restored = self.require_progression("heal").health.heal(amount)
        logger.info("Healed", amount=amount, hp_restored=restored)
        return restored

    def gain_temp_hp(self, amount: int) -> None:
        self.require_progression("gain_temp_hp").health.gain_temp_hp(amount)
        logger.info("Temporary hit points gained", amount=amount)

    # =========================================================================
    # Spells, Wealth, Turning
    # =========================================================================

    def learn_spell(self, spell_name: str) -> Spell:
        """Add a catalog spell to the spellbook.

        When the class lists spells for the spell's level, only those
        spells may be learned.

        Raises:
            CharacterNotInitializedError: If no class is assigned.
            InvalidArgumentError: If the class cannot cast, the spell is not
                in its spell list, no slot of that level exists yet, or the
                spell is already known.
        """
        progression = self.require_progression("learn_spell")
        spells = progression.spells
        if not spells.is_caster:
            raise InvalidArgumentError(
                f"{self.class_name} cannot cast spells",
                field_name="spell_name",
                invalid_value=spell_name,
            )

        spell = self.rules.find_spell(spells.spell_type, spell_name)
        if spell is None:
            raise InvalidArgumentError(
                f"Unknown {spells.spell_type.value} spell: {spell_name}",
                field_name="spell_name",
                invalid_value=spell_name,
            )
        class_list = self.rules.spell_list(progression.character_class, spell.level)
        if class_list and spell.name.lower() not in {name.lower() for name in class_list}:
            raise InvalidArgumentError(
                f"{spell.name} is not on the {self.class_name} spell list",
                field_name="spell_name",
                invalid_value=spell.name,
            )
        if spells.slots_for(spell.level) == 0:
            raise InvalidArgumentError(
                f"No level {spell.level} spell slots at this level",
                field_name="spell_name",
                invalid_value=spell.name,
            )
        if spells.knows(spell.name):
            raise InvalidArgumentError(
                f"{spell.name} is already in the spellbook",
                field_name="spell_name",
                invalid_value=spell.name,
            )

        spells.spellbook = [*spells.spellbook, spell]
        logger.info("Spell learned", spell=spell.name, spell_level=spell.level)
        return spell

    def adjust_coins(self, coin: CoinType, delta: int) -> int:
        """Add or remove coins; returns the new count of that coin."""
        updated = self.require_progression("adjust_coins").wealth.adjust(coin, delta)
        logger.info("Coins adjusted", coin=coin.value, delta=delta, balance=updated)
        return updated

    def convert_coins_to_gold(self, coin: CoinType, amount: int) -> int:
        """Whole gold pieces an amount of coin is worth at the exchange rate."""
        return math.floor(amount * self.rules.coin_conversion_rate(coin))

    def turning_result(self, monster_hit_dice: str) -> str:
        """Turn undead result against monsters of the given hit dice."""
        progression = self.require_progression("turning_result")
        return self.rules.turning_result(
            progression.character_class, progression.experience.level, monster_hit_dice
        )

    # =========================================================================
    # Presentation
    # =========================================================================

    def to_snapshot(self) -> dict[str, Any]:
        """JSON-compatible snapshot of every public attribute."""
        return self.model_dump(mode="json")

    def to_summary(self) -> str:
        """Render a multi-line character sheet for the referee."""
        lines = [
            f"Name: {self.name or 'Unnamed'}",
            f"Race: {self.race_name or 'not set'}",
            f"Alignment: {self.alignment.value if self.alignment else 'not set'}",
        ]

        progression = self.progression
        if progression is None:
            lines.append("Class: not initialized")
        else:
            experience = progression.experience
            next_level = (
                "max level" if experience.xp_to_next_level == 0 else str(experience.xp_to_next_level)
            )
            lines.append(f"Class: {progression.character_class.display_name}")
            lines.append(
                f"Level: {experience.level} (XP {experience.current_xp} / {next_level}, "
                f"XP multiplier x{experience.xp_multiplier:.2f})"
            )

        lines.append("Ability Scores:")
        lines.extend(f"  {self.ability_scores[ability]}" for ability in AbilityType)

        if progression is None:
            lines.append("Health, saving throws, combat, spells and wealth: not initialized")
        else:
            lines.extend(self._progression_lines(progression))

        lines.append(
            "Languages: " + (", ".join(lang.value for lang in self.known_languages) or "none")
        )
        lines.append(f"Additional Languages: {self.additional_languages}")
        if self.additional_languages > 0:
            learnable = ", ".join(lang.value for lang in self.available_languages())
            lines.append(f"Learnable Languages: {learnable or 'none'}")
        lines.append(f"Literacy: {self.literacy()}")
        lines.append(f"Max Retainers: {self.max_retainers()}")
        lines.append(f"Retainer Loyalty: {self.retainer_loyalty()}")
        lines.append(f"NPC Reaction Bonus: {_signed(self.npc_reaction_bonus())}")
        lines.append(f"Open Doors: {self.open_door_chance()}")

        if not self.personality.is_blank:
            lines.append("Background & Personality:")
            for part in (self.personality.background, self.personality.personality):
                for field_name, value in part.model_dump().items():
                    if value:
                        label = field_name.replace("_", " ").capitalize()
                        lines.append(f"  {label}: {value}")

        return "\n".join(lines)

    def _progression_lines(self, progression: ClassProgression) -> list[str]:
        health = progression.health
        combat = progression.combat
        spells = progression.spells
        wealth = progression.wealth

        lines = [
            f"Hit Points: {health.current_hp}/{health.max_hp} "
            f"(temp {health.temp_hp}, hit dice {health.hit_dice_count}{health.hit_die.value.lower()})",
            "Saving Throws:",
        ]
        lines.extend(f"  {label}: {target}" for label, target in progression.saving_throws.labelled())
        lines.append(
            f"Combat: THAC0 {combat.to_hit_ac0} [{_signed(combat.to_hit_bonus)}], "
            f"melee {_signed(combat.melee_hit_bonus)} to hit / "
            f"{_signed(combat.melee_damage_bonus)} damage, "
            f"missile {_signed(combat.missile_hit_bonus)}, "
            f"initiative {_signed(combat.initiative_bonus)}"
        )

        if spells.is_caster:
            slots = ", ".join(
                f"L{level}: {count}" for level, count in enumerate(spells.slots, start=1) if count
            )
            lines.append(f"Spells ({spells.magic_type.value}): {slots or 'no slots yet'}")
            if spells.spellbook:
                lines.append("Spellbook: " + ", ".join(spell.name for spell in spells.spellbook))

        lines.append(
            f"Wealth: {wealth.platinum} pp, {wealth.gold} gp, {wealth.electrum} ep, "
            f"{wealth.silver} sp, {wealth.copper} cp (total {wealth.total_value_in_gp} gp)"
        )
        if wealth.domain.name:
            domain = wealth.domain
            lines.append(
                f"Domain: {domain.name} (population {domain.population}, "
                f"tax income {domain.tax_income} gp, {len(domain.structures)} structures)"
            )
        return lines


__all__ = [
    "Character",
]
