"""Application-wide constants for the OSE referee.

Includes the ability score range, the coin weights used for a wealth
total, and the values every rules lookup falls back to when its table
has no matching entry.
"""

from __future__ import annotations

# =============================================================================
# Ability Scores
# =============================================================================

MIN_ABILITY_SCORE = 3
"""Lowest score 3d6 can produce."""

MAX_ABILITY_SCORE = 18
"""Highest score 3d6 can produce."""

DEFAULT_ABILITY_SCORE = 9
"""Value each ability starts at before the player rolls or assigns."""

# =============================================================================
# Character Progression
# =============================================================================

STARTING_LEVEL = 1
"""Level of a freshly classed character."""

SPELL_LEVEL_COUNT = 6
"""Spell levels tracked per caster (1st through 6th)."""

MIN_HIT_POINTS_PER_DIE = 1
"""A hit die roll plus Constitution never grants less than this."""

# =============================================================================
# Languages
# =============================================================================

SECRET_LANGUAGE_MARKER = "secret"
"""Case-insensitive marker that flags a language as unlearnable by choice."""

# =============================================================================
# Wealth
# =============================================================================

TOTAL_VALUE_WEIGHTS = {
    "platinum": 5,
    "electrum": 2,
    "gold": 1,
}
"""Whole-gold weights for coins counted at or above gold value."""

SILVER_PER_GOLD = 10
"""Silver pieces per gold piece when totalling wealth."""

COPPER_PER_GOLD = 100
"""Copper pieces per gold piece when totalling wealth."""

# =============================================================================
# Rules Lookup Fallbacks
# =============================================================================

DEFAULT_CLASS_KEY = "Default"
"""Class key consulted when a class-specific table entry is missing."""

DEFAULT_ABILITY_MODIFIER = 0
DEFAULT_MAX_RETAINERS = 0
DEFAULT_RETAINER_LOYALTY = 0
DEFAULT_REACTION_BONUS = 0
DEFAULT_ADDITIONAL_LANGUAGES = 0

DEFAULT_OPEN_DOOR_CHANCE = "1-in-6"
"""Open-doors chance when the Strength table has no match."""

DEFAULT_LITERACY = "UNKNOWN"
"""Literacy when the Intelligence table has no match."""

DEFAULT_HIT_DIE = "D6"
"""Hit die for a class with no configured hit die."""

DEFAULT_HIT_DICE_MODIFIER = 0
DEFAULT_MAX_LEVEL = 0
DEFAULT_XP_FOR_NEXT_LEVEL = 0
DEFAULT_XP_MODIFIER = 1.0

DEFAULT_TO_HIT_AC0 = 19
"""THAC0 of an unskilled combatant."""

DEFAULT_TO_HIT_BONUS = 0

DEFAULT_SAVING_THROW = 20
"""Saving throw target when no row matches: only a natural 20 succeeds."""

DEFAULT_TURNING_RESULT = "-"
"""Turning result meaning the undead cannot be affected."""

DEFAULT_COIN_CONVERSION_RATE = 1.0
