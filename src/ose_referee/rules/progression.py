"""Recompute functions for class progression.

These functions derive a character's class-dependent state from the
rules tables. They take every input explicitly (registry, roller, class,
level, ability scores) and return new component objects, so the
Character can build a complete replacement and commit it in one step.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from ose_referee.core.constants import DEFAULT_ABILITY_SCORE, MIN_HIT_POINTS_PER_DIE, STARTING_LEVEL
from ose_referee.core.logging import get_logger
from ose_referee.engine.dice import DiceRoller, DiceType
from ose_referee.models.components import (
    AbilityScore,
    ClassProgression,
    CombatState,
    ExperienceState,
    HealthState,
    SavingThrows,
    Spell,
    Spells,
)
from ose_referee.models.enums import AbilityType, CharacterClass
from ose_referee.rules.registry import RulesRegistry


logger = get_logger(__name__)


def _modifier(scores: Mapping[AbilityType, AbilityScore], ability: AbilityType) -> int:
    score = scores.get(ability)
    return score.modifier if score is not None else 0


# =============================================================================
# Experience
# =============================================================================


def compute_xp_multiplier(
    registry: RulesRegistry,
    character_class: CharacterClass,
    scores: Mapping[AbilityType, AbilityScore],
) -> float:
    """XP multiplier earned by the prime requisites of a class.

    Conditions are checked in table order and the first one met wins; a
    class with conditions but none met earns 0.0. A class with a single
    primary ability uses the XP modifier for that score. A class with
    neither earns 0.0.
    """
    rule = registry.prime_requisites(character_class)
    values = {ability: score.value for ability, score in scores.items()}

    if rule.conditions:
        for condition in rule.conditions:
            if condition.is_met(values):
                return condition.multiplier
        return 0.0

    if rule.primary_ability is not None:
        score = values.get(rule.primary_ability, DEFAULT_ABILITY_SCORE)
        return registry.xp_modifier(character_class, score)

    return 0.0


def xp_to_next_level(
    registry: RulesRegistry, character_class: CharacterClass, level: int, max_level: int
) -> int:
    """XP threshold for the next level, or 0 at the class cap."""
    if level >= max_level:
        return 0
    return registry.xp_for_next_level(character_class, level)


# =============================================================================
# Health
# =============================================================================


def roll_hit_points(roller: DiceRoller, hit_die: DiceType, con_modifier: int) -> int:
    """Roll one hit die plus the Constitution modifier.

    The sum is floored at 1 per die, so a low roll with a Constitution
    penalty still adds a hit point rather than adding the raw (possibly
    negative) total to maximum hit points.
    """
    return max(MIN_HIT_POINTS_PER_DIE, roller.roll_die(hit_die) + con_modifier)


def initial_health(
    registry: RulesRegistry,
    roller: DiceRoller,
    character_class: CharacterClass,
    con_modifier: int,
) -> HealthState:
    hit_die = registry.hit_die(character_class)
    hit_points = roll_hit_points(roller, hit_die, con_modifier)
    return HealthState(
        current_hp=hit_points,
        max_hp=hit_points,
        hit_die=hit_die,
        hit_dice_count=STARTING_LEVEL,
        max_hit_dice_modifier=registry.hit_dice_modifier(character_class, STARTING_LEVEL),
    )


def level_up_health(
    registry: RulesRegistry,
    roller: DiceRoller,
    character_class: CharacterClass,
    level: int,
    health: HealthState,
    con_modifier: int,
) -> HealthState:
    """Health after reaching ``level``.

    Above name level the class gains a flat amount instead of rolling.
    Current hit points are restored to the new maximum.
    """
    modifier = registry.hit_dice_modifier(character_class, level)
    if modifier > 0:
        gained = modifier
    else:
        gained = roll_hit_points(roller, health.hit_die, con_modifier)

    max_hp = health.max_hp + gained
    return health.model_copy(
        update={
            "max_hp": max_hp,
            "current_hp": max_hp,
            "hit_dice_count": level,
            "max_hit_dice_modifier": modifier,
        }
    )


# =============================================================================
# Saves, Combat, Spells
# =============================================================================


def saving_throws_for(
    registry: RulesRegistry, character_class: CharacterClass, level: int
) -> SavingThrows:
    return registry.saving_throws(character_class, level)


def combat_for(
    registry: RulesRegistry,
    character_class: CharacterClass,
    level: int,
    scores: Mapping[AbilityType, AbilityScore],
) -> CombatState:
    strength = _modifier(scores, AbilityType.STR)
    dexterity = _modifier(scores, AbilityType.DEX)
    return CombatState(
        to_hit_ac0=registry.to_hit_ac0(character_class, level),
        to_hit_bonus=registry.to_hit_bonus(character_class, level),
        melee_hit_bonus=strength,
        melee_damage_bonus=strength,
        missile_hit_bonus=dexterity,
        initiative_bonus=dexterity,
    )


def spells_for(
    registry: RulesRegistry,
    character_class: CharacterClass,
    level: int,
    spellbook: Iterable[Spell] = (),
) -> Spells:
    """Spell slots for a level; an existing spellbook carries over."""
    return Spells(
        slots=registry.spell_slots(character_class, level),
        magic_type=registry.magic_type(character_class),
        spell_type=registry.spell_type(character_class),
        spellbook=list(spellbook),
    )


# =============================================================================
# Whole Progression
# =============================================================================


def new_progression(
    registry: RulesRegistry,
    roller: DiceRoller,
    character_class: CharacterClass,
    scores: Mapping[AbilityType, AbilityScore],
) -> ClassProgression:
    """Fresh level 1 state for a newly assigned class."""
    max_level = registry.max_level(character_class)
    experience = ExperienceState(
        level=STARTING_LEVEL,
        max_level=max_level,
        xp_multiplier=compute_xp_multiplier(registry, character_class, scores),
        xp_to_next_level=xp_to_next_level(registry, character_class, STARTING_LEVEL, max_level),
    )
    return ClassProgression(
        character_class=character_class,
        experience=experience,
        health=initial_health(
            registry, roller, character_class, _modifier(scores, AbilityType.CON)
        ),
        saving_throws=saving_throws_for(registry, character_class, STARTING_LEVEL),
        combat=combat_for(registry, character_class, STARTING_LEVEL, scores),
        spells=spells_for(registry, character_class, STARTING_LEVEL),
    )


def advance_level(
    registry: RulesRegistry,
    roller: DiceRoller,
    progression: ClassProgression,
    scores: Mapping[AbilityType, AbilityScore],
) -> ClassProgression:
    """Progression one level higher, with every level-dependent part recomputed."""
    character_class = progression.character_class
    level = progression.experience.level + 1
    experience = progression.experience.model_copy(
        update={
            "level": level,
            "xp_to_next_level": xp_to_next_level(
                registry, character_class, level, progression.experience.max_level
            ),
        }
    )
    return progression.model_copy(
        update={
            "experience": experience,
            "health": level_up_health(
                registry,
                roller,
                character_class,
                level,
                progression.health,
                _modifier(scores, AbilityType.CON),
            ),
            "saving_throws": saving_throws_for(registry, character_class, level),
            "combat": combat_for(registry, character_class, level, scores),
            "spells": spells_for(registry, character_class, level, progression.spells.spellbook),
        }
    )


def apply_experience(
    registry: RulesRegistry,
    roller: DiceRoller,
    progression: ClassProgression,
    scores: Mapping[AbilityType, AbilityScore],
    amount: int,
) -> tuple[ClassProgression, int]:
    """Award raw XP and run the level-up cascade.

    The award is scaled by the progression's XP multiplier and truncated.
    Each threshold crossed advances one level in order until the XP no
    longer reaches the next threshold or the class cap is hit.

    Returns:
        Tuple of (new progression, levels gained).
    """
    experience = progression.experience
    awarded = int(amount * experience.xp_multiplier)
    updated = progression.model_copy(
        update={
            "experience": experience.model_copy(
                update={"current_xp": experience.current_xp + awarded}
            )
        }
    )

    levels_gained = 0
    while updated.experience.can_level_up:
        updated = advance_level(registry, roller, updated, scores)
        levels_gained += 1
        logger.debug(
            "Level advanced",
            character_class=str(updated.character_class),
            level=updated.experience.level,
            max_hp=updated.health.max_hp,
        )

    if updated.experience.level >= updated.experience.max_level:
        updated.experience.xp_to_next_level = 0

    return updated, levels_gained


__all__ = [
    "compute_xp_multiplier",
    "xp_to_next_level",
    "roll_hit_points",
    "initial_health",
    "level_up_health",
    "saving_throws_for",
    "combat_for",
    "spells_for",
    "new_progression",
    "advance_level",
    "apply_experience",
]
