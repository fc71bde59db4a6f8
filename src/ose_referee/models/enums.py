"""Enumeration types for Old-School Essentials characters.

These closed vocabularies key the rules tables and the character state.
Their string values are the spellings used by the rules data and in
snapshots; anywhere free text enters the engine it is resolved with
``coerce_enum`` first.
"""

from __future__ import annotations

import re
from enum import Enum, StrEnum
from typing import TypeVar

from ose_referee.core.constants import SECRET_LANGUAGE_MARKER
from ose_referee.core.exceptions import InvalidArgumentError


E = TypeVar("E", bound=Enum)


class AbilityType(StrEnum):
    """The six OSE ability scores."""

    STR = "Str"
    DEX = "Dex"
    CON = "Con"
    INT = "Int"
    WIS = "Wis"
    CHA = "Cha"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability.

        Returns:
            Full ability name (e.g., 'Strength' for STR).
        """
        return _ABILITY_NAMES[self]


_ABILITY_NAMES = {
    AbilityType.STR: "Strength",
    AbilityType.DEX: "Dexterity",
    AbilityType.CON: "Constitution",
    AbilityType.INT: "Intelligence",
    AbilityType.WIS: "Wisdom",
    AbilityType.CHA: "Charisma",
}


class CharacterClass(StrEnum):
    """Classes available in OSE Classic Fantasy.

    Dwarf, Elf and Halfling are race-as-class.
    """

    CLERIC = "Cleric"
    DWARF = "Dwarf"
    ELF = "Elf"
    FIGHTER = "Fighter"
    HALFLING = "Halfling"
    MAGIC_USER = "MagicUser"
    THIEF = "Thief"

    @property
    def display_name(self) -> str:
        """Name as printed on a character sheet."""
        return "Magic-User" if self is CharacterClass.MAGIC_USER else self.value


class CharacterRace(StrEnum):
    """Character races."""

    HUMAN = "Human"
    DWARF = "Dwarf"
    ELF = "Elf"
    HALFLING = "Halfling"


class Alignment(StrEnum):
    """The three OSE alignments."""

    LAWFUL = "Lawful"
    NEUTRAL = "Neutral"
    CHAOTIC = "Chaotic"


class Language(StrEnum):
    """Languages a character can know.

    ALIGNMENT stands for the character's alignment tongue. COMMON and
    ALIGNMENT double as "pick one at random" when requested as an
    additional language.
    """

    ALIGNMENT = "Alignment"
    COMMON = "Common"
    BUGBEAR = "Bugbear"
    DOPPELGANGER = "Doppelgänger"
    DRAGON = "Dragon"
    DWARVISH = "Dwarvish"
    ELVISH = "Elvish"
    GARGOYLE = "Gargoyle"
    GNOLL = "Gnoll"
    GNOMISH = "Gnomish"
    GOBLIN = "Goblin"
    HALFLING = "Halfling"
    HARPY = "Harpy"
    HOBGOBLIN = "Hobgoblin"
    KOBOLD = "Kobold"
    LIZARD_MAN = "Lizard Man"
    MEDUSA = "Medusa"
    MINOTAUR = "Minotaur"
    OGRE = "Ogre"
    ORCISH = "Orcish"
    PIXIE = "Pixie"
    THIEVES_CANT = "Thieves' Cant (Secret)"
    DRUIDIC = "Druidic (Secret)"

    @property
    def is_secret(self) -> bool:
        """Secret languages cannot be chosen as additional languages."""
        return SECRET_LANGUAGE_MARKER in self.value.lower()

    @property
    def is_random_sentinel(self) -> bool:
        """Whether requesting this language means "pick one at random"."""
        return self in (Language.COMMON, Language.ALIGNMENT)


class CoinType(StrEnum):
    """Coin denominations."""

    PLATINUM = "Platinum"
    GOLD = "Gold"
    ELECTRUM = "Electrum"
    SILVER = "Silver"
    COPPER = "Copper"

    @property
    def field_name(self) -> str:
        """Attribute name of this coin on WealthState."""
        return self.value.lower()


class MagicType(StrEnum):
    """Source of a class's spellcasting."""

    NONE = "None"
    ARCANE = "Arcane"
    DIVINE = "Divine"


class SpellType(StrEnum):
    """Spell list a caster draws from."""

    NONE = "None"
    CLERIC = "Cleric"
    MAGIC_USER = "MagicUser"


# =============================================================================
# Boundary Coercion
# =============================================================================


def _normalize(text: str) -> str:
    return re.sub(r"[^0-9a-z]", "", text.lower())


def coerce_enum(enum_cls: type[E], raw: E | str, *, field_name: str | None = None) -> E:
    """Resolve free text to a member of a closed vocabulary.

    Matching ignores case, spaces, hyphens and underscores and accepts
    either the member value or the member name, so "Magic-User",
    "magic_user" and "MagicUser" all resolve to CharacterClass.MAGIC_USER.

    Args:
        enum_cls: The enum to resolve into.
        raw: A member of ``enum_cls`` or its textual form.
        field_name: Argument name reported on failure.

    Returns:
        The matching enum member.

    Raises:
        InvalidArgumentError: If nothing in the vocabulary matches.
    """
    if isinstance(raw, enum_cls):
        return raw
    wanted = _normalize(str(raw))
    for member in enum_cls:
        if wanted in (_normalize(str(member.value)), _normalize(member.name)):
            return member
    raise InvalidArgumentError(
        f"Unknown {enum_cls.__name__}: {raw!r}",
        field_name=field_name or enum_cls.__name__,
        invalid_value=raw,
        details={"valid_values": [str(member.value) for member in enum_cls]},
    )


__all__ = [
    "AbilityType",
    "CharacterClass",
    "CharacterRace",
    "Alignment",
    "Language",
    "CoinType",
    "MagicType",
    "SpellType",
    "coerce_enum",
]
