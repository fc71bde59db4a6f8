"""Pydantic V2 models for OSE characters.

Submodules:
    enums: Closed vocabularies (AbilityType, CharacterClass, Language, ...)
    components: State components (ExperienceState, HealthState, Spells, ...)
    character: The Character aggregate (import from its own module)
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from ose_referee.models.enums import (
    AbilityType,
    Alignment,
    CharacterClass,
    CharacterRace,
    CoinType,
    Language,
    MagicType,
    SpellType,
    coerce_enum,
)

# =============================================================================
# Components
# =============================================================================
from ose_referee.models.components import (
    AbilityScore,
    Background,
    ClassProgression,
    CombatState,
    Domain,
    ExperienceState,
    HealthState,
    Personality,
    PersonalityBackground,
    SavingThrows,
    Spell,
    Spells,
    Structure,
    WealthState,
)


__all__ = [
    # Enumerations
    "AbilityType",
    "Alignment",
    "CharacterClass",
    "CharacterRace",
    "CoinType",
    "Language",
    "MagicType",
    "SpellType",
    "coerce_enum",
    # Components
    "AbilityScore",
    "Background",
    "ClassProgression",
    "CombatState",
    "Domain",
    "ExperienceState",
    "HealthState",
    "Personality",
    "PersonalityBackground",
    "SavingThrows",
    "Spell",
    "Spells",
    "Structure",
    "WealthState",
]
