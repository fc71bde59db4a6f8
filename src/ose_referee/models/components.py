"""State components that make up an OSE character.

Each component is a Pydantic V2 model owning one concern of the sheet:
ability scores, experience, health, saving throws, combat values, spells
and wealth. Components hold data and enforce their own invariants; the
values derived from the rules tables are computed in
``ose_referee.rules.progression`` and written here by the Character.
"""

from __future__ import annotations

from typing import Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from ose_referee.core.constants import (
    COPPER_PER_GOLD,
    DEFAULT_SAVING_THROW,
    DEFAULT_TO_HIT_AC0,
    SILVER_PER_GOLD,
    SPELL_LEVEL_COUNT,
    STARTING_LEVEL,
    TOTAL_VALUE_WEIGHTS,
)
from ose_referee.core.exceptions import InvalidArgumentError
from ose_referee.engine.dice import DiceType
from ose_referee.models.enums import (
    AbilityType,
    CharacterClass,
    CoinType,
    MagicType,
    SpellType,
)


class Component(BaseModel):
    """Base class for all character components."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",  # Ignore computed fields when deserializing
    )


# =============================================================================
# Ability Scores
# =============================================================================


class AbilityScore(BaseModel):
    """One ability score and the modifier the rules assign to it.

    Frozen: a changed score is a new AbilityScore, so the value and its
    modifier never disagree.
    """

    model_config = ConfigDict(frozen=True)

    ability: AbilityType
    value: int = Field(description="Score, nominally 3-18")
    modifier: int = Field(default=0, description="Modifier looked up from the value")

    def __str__(self) -> str:
        sign = "+" if self.modifier >= 0 else ""
        return f"{self.ability.value}: {self.value} ({sign}{self.modifier})"


# =============================================================================
# Experience
# =============================================================================


class ExperienceState(Component):
    """Experience points and level.

    The XP multiplier is fixed when the class is assigned and applies to
    every later gain. ``xp_to_next_level`` is the cumulative total that
    triggers the next level and is 0 once the class cap is reached.
    """

    current_xp: int = Field(default=0, ge=0)
    level: int = Field(default=STARTING_LEVEL, ge=1)
    max_level: int = Field(default=0, ge=0)
    xp_multiplier: float = Field(default=1.0, ge=0.0)
    xp_to_next_level: int = Field(default=0, ge=0)

    @computed_field(description="Whether the class level cap is reached")
    @property
    def is_max_level(self) -> bool:
        return self.level >= self.max_level

    @property
    def can_level_up(self) -> bool:
        """Whether accumulated XP has crossed the next threshold."""
        return (
            self.xp_to_next_level > 0
            and self.current_xp >= self.xp_to_next_level
            and self.level < self.max_level
        )


# =============================================================================
# Health
# =============================================================================


class HealthState(Component):
    """Hit points, temporary hit points and hit dice.

    Temporary hit points absorb damage before real ones. Current hit
    points stay between 0 and the maximum.
    """

    current_hp: int = Field(default=0, ge=0)
    max_hp: int = Field(default=0, ge=0)
    temp_hp: int = Field(default=0, ge=0)
    hit_die: DiceType = Field(default=DiceType.D6)
    hit_dice_count: int = Field(default=STARTING_LEVEL, ge=0)
    max_hit_dice_modifier: int = Field(default=0)

    @model_validator(mode="after")
    def validate_current_within_max(self) -> Self:
        """Ensure current HP never exceeds maximum HP."""
        if self.current_hp > self.max_hp:
            raise ValueError(
                f"current_hp ({self.current_hp}) cannot exceed max_hp ({self.max_hp})"
            )
        return self

    @property
    def is_dead(self) -> bool:
        """In OSE a character at 0 hit points is dead."""
        return self.current_hp == 0 and self.max_hp > 0

    def take_damage(self, amount: int) -> int:
        """Apply damage and return the real hit points lost.

        Temp HP absorbs damage first. Non-positive amounts do nothing.
        """
        if amount <= 0:
            return 0

        if self.temp_hp > 0:
            absorbed = min(self.temp_hp, amount)
            self.temp_hp -= absorbed
            amount -= absorbed

        lost = min(self.current_hp, amount)
        self.current_hp -= lost
        return lost

    def heal(self, amount: int) -> int:
        """Restore hit points up to the maximum and return the amount restored."""
        if amount <= 0:
            return 0
        before = self.current_hp
        self.current_hp = min(self.max_hp, self.current_hp + amount)
        return self.current_hp - before

    def gain_temp_hp(self, amount: int) -> None:
        """Add temporary hit points.

        Raises:
            InvalidArgumentError: If amount is negative.
        """
        if amount < 0:
            raise InvalidArgumentError(
                "Temporary hit points cannot be negative",
                field_name="amount",
                invalid_value=amount,
            )
        self.temp_hp += amount


# =============================================================================
# Saving Throws & Combat
# =============================================================================


class SavingThrows(Component):
    """Target numbers for the five OSE saving throw categories.

    A save succeeds on a d20 roll equal to or above the target.
    """

    death_poison: int = Field(default=DEFAULT_SAVING_THROW, description="Death / Poison")
    wands: int = Field(default=DEFAULT_SAVING_THROW, description="Wands")
    paralysis_petrify: int = Field(default=DEFAULT_SAVING_THROW, description="Paralysis / Petrify")
    breath_attacks: int = Field(default=DEFAULT_SAVING_THROW, description="Breath Attacks")
    spells_rods_staves: int = Field(default=DEFAULT_SAVING_THROW, description="Spells / Rods / Staves")

    def labelled(self) -> list[tuple[str, int]]:
        """Return (label, target) pairs in sheet order."""
        return [
            (field.description or name, getattr(self, name))
            for name, field in type(self).model_fields.items()
        ]


class CombatState(Component):
    """Attack values and the ability bonuses that feed combat rolls."""

    to_hit_ac0: int = Field(default=DEFAULT_TO_HIT_AC0, description="THAC0")
    to_hit_bonus: int = Field(default=0, description="Attack bonus against ascending AC")
    melee_hit_bonus: int = 0
    melee_damage_bonus: int = 0
    missile_hit_bonus: int = 0
    initiative_bonus: int = 0

    def roll_needed_to_hit(self, armor_class: int) -> int:
        """d20 roll needed to hit a descending armor class."""
        return self.to_hit_ac0 - armor_class


# =============================================================================
# Spells
# =============================================================================


class Spell(BaseModel):
    """A spell from the catalog, as written in a spellbook."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    level: int = Field(ge=1, le=SPELL_LEVEL_COUNT)
    spell_type: SpellType
    duration: str = ""
    range: str = ""
    description: str = ""


class Spells(Component):
    """Spell slots per spell level, magic source and spellbook.

    Non-casters carry six zero slots and no magic type.
    """

    slots: list[int] = Field(default_factory=lambda: [0] * SPELL_LEVEL_COUNT)
    magic_type: MagicType = MagicType.NONE
    spell_type: SpellType = SpellType.NONE
    spellbook: list[Spell] = Field(default_factory=list)

    @field_validator("slots", mode="after")
    @classmethod
    def validate_slots(cls, value: list[int]) -> list[int]:
        """Pad or trim to one entry per spell level and reject negatives."""
        if any(count < 0 for count in value):
            raise ValueError("Spell slot counts cannot be negative")
        padded = list(value[:SPELL_LEVEL_COUNT])
        padded.extend([0] * (SPELL_LEVEL_COUNT - len(padded)))
        return padded

    @property
    def is_caster(self) -> bool:
        return self.magic_type != MagicType.NONE

    def slots_for(self, spell_level: int) -> int:
        """Slots available at a spell level (1-6); 0 outside that range."""
        if 1 <= spell_level <= SPELL_LEVEL_COUNT:
            return self.slots[spell_level - 1]
        return 0

    def knows(self, spell_name: str) -> bool:
        wanted = spell_name.strip().lower()
        return any(spell.name.lower() == wanted for spell in self.spellbook)


# =============================================================================
# Wealth
# =============================================================================


class Structure(Component):
    """A building or fortification in a ruler's domain."""

    name: str
    description: str = ""
    value: int = Field(default=0, ge=0, description="Construction cost in gold")


class Domain(Component):
    """Land held by a high-level character."""

    name: str = ""
    description: str = ""
    population: int = Field(default=0, ge=0)
    tax_income: int = Field(default=0, ge=0, description="Monthly tax income in gold")
    structures: list[Structure] = Field(default_factory=list)


class WealthState(Component):
    """Coins carried and any held domain."""

    platinum: int = Field(default=0, ge=0)
    gold: int = Field(default=0, ge=0)
    electrum: int = Field(default=0, ge=0)
    silver: int = Field(default=0, ge=0)
    copper: int = Field(default=0, ge=0)
    domain: Domain = Field(default_factory=Domain)

    @computed_field(description="Coins valued in whole gold pieces")
    @property
    def total_value_in_gp(self) -> int:
        return (
            self.platinum * TOTAL_VALUE_WEIGHTS["platinum"]
            + self.electrum * TOTAL_VALUE_WEIGHTS["electrum"]
            + self.gold * TOTAL_VALUE_WEIGHTS["gold"]
            + self.silver // SILVER_PER_GOLD
            + self.copper // COPPER_PER_GOLD
        )

    def coins(self, coin: CoinType) -> int:
        return getattr(self, coin.field_name)

    def adjust(self, coin: CoinType, delta: int) -> int:
        """Add (or with a negative delta, remove) coins of one type.

        Returns:
            The new count of that coin.

        Raises:
            InvalidArgumentError: If the result would be negative.
        """
        updated = self.coins(coin) + delta
        if updated < 0:
            raise InvalidArgumentError(
                f"Not enough {coin.value.lower()} coins",
                field_name="delta",
                invalid_value=delta,
                details={"available": self.coins(coin)},
            )
        setattr(self, coin.field_name, updated)
        return updated


# =============================================================================
# Personality & Background
# =============================================================================


class Background(Component):
    """Where the character comes from."""

    parentage_and_birth: str = ""
    family_situation: str = ""
    physical_description: str = ""
    upbringing_and_key_events: str = ""


class Personality(Component):
    """How the character behaves."""

    core_trait: str = ""
    quirk_or_habit: str = ""
    ideal: str = ""
    bond: str = ""
    flaw_or_fear: str = ""
    ambition_or_desire: str = ""
    social_style: str = ""
    emotional_expression: str = ""


class PersonalityBackground(Component):
    """Free-text roleplaying notes kept alongside the rules state."""

    background: Background = Field(default_factory=Background)
    personality: Personality = Field(default_factory=Personality)

    @property
    def is_blank(self) -> bool:
        return not any(
            value
            for part in (self.background, self.personality)
            for value in part.model_dump().values()
        )


# =============================================================================
# Class Progression
# =============================================================================


class ClassProgression(Component):
    """Everything that exists only once a character has a class.

    A character either has no ClassProgression or a complete one, so the
    sub-states are always present or absent together.
    """

    character_class: CharacterClass
    experience: ExperienceState
    health: HealthState
    saving_throws: SavingThrows
    combat: CombatState
    spells: Spells
    wealth: WealthState = Field(default_factory=WealthState)


__all__ = [
    "Component",
    "AbilityScore",
    "ExperienceState",
    "HealthState",
    "SavingThrows",
    "CombatState",
    "Spell",
    "Spells",
    "Structure",
    "Domain",
    "WealthState",
    "Background",
    "Personality",
    "PersonalityBackground",
    "ClassProgression",
]
