"""Tests for character state components."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ose_referee.core.exceptions import InvalidArgumentError
from ose_referee.models.components import (
    AbilityScore,
    CombatState,
    Domain,
    ExperienceState,
    HealthState,
    PersonalityBackground,
    SavingThrows,
    Spell,
    Spells,
    Structure,
    WealthState,
)
from ose_referee.models.enums import AbilityType, CoinType, MagicType, SpellType


class TestAbilityScore:
    """Tests for AbilityScore."""

    def test_str(self) -> None:
        """Test sheet rendering with signed modifiers."""
        assert str(AbilityScore(ability=AbilityType.STR, value=16, modifier=2)) == "Str: 16 (+2)"
        assert str(AbilityScore(ability=AbilityType.DEX, value=5, modifier=-2)) == "Dex: 5 (-2)"

    def test_frozen(self) -> None:
        """Test that a score cannot be edited in place."""
        score = AbilityScore(ability=AbilityType.CON, value=9)

        with pytest.raises(ValidationError):
            score.value = 12


class TestExperienceState:
    """Tests for ExperienceState."""

    def test_can_level_up(self) -> None:
        """Test the level-up condition."""
        state = ExperienceState(current_xp=2000, level=1, max_level=14, xp_to_next_level=2000)

        assert state.can_level_up
        assert not state.is_max_level

    def test_no_threshold_means_no_level_up(self) -> None:
        """Test that a zero threshold never triggers a level-up."""
        state = ExperienceState(current_xp=10_000, level=1, max_level=14, xp_to_next_level=0)

        assert not state.can_level_up

    def test_negative_xp_rejected(self) -> None:
        """Test that experience cannot go negative."""
        with pytest.raises(ValidationError):
            ExperienceState(current_xp=-1)


class TestHealthState:
    """Tests for HealthState."""

    def test_current_cannot_exceed_max(self) -> None:
        """Test the current/max invariant."""
        with pytest.raises(ValidationError):
            HealthState(current_hp=9, max_hp=8)

    def test_temp_hp_absorbs_damage_first(self) -> None:
        """Test that temporary hit points are spent before real ones."""
        health = HealthState(current_hp=8, max_hp=8, temp_hp=3)

        lost = health.take_damage(5)

        assert lost == 2
        assert health.temp_hp == 0
        assert health.current_hp == 6

    def test_damage_spills_past_temp_hp(self) -> None:
        """Test damage larger than the temporary pool."""
        health = HealthState(current_hp=10, max_hp=10, temp_hp=3)

        health.take_damage(5)

        assert (health.temp_hp, health.current_hp) == (0, 8)

    def test_damage_floors_at_zero(self) -> None:
        """Test that hit points never go negative."""
        health = HealthState(current_hp=4, max_hp=8)

        assert health.take_damage(10) == 4
        assert health.current_hp == 0
        assert health.is_dead

    def test_non_positive_amounts_ignored(self) -> None:
        """Test that zero or negative damage and healing do nothing."""
        health = HealthState(current_hp=4, max_hp=8)

        assert health.take_damage(-3) == 0
        assert health.heal(0) == 0
        assert health.current_hp == 4

    def test_heal_capped_at_max(self) -> None:
        """Test that healing stops at maximum hit points."""
        health = HealthState(current_hp=5, max_hp=8)

        assert health.heal(10) == 3
        assert health.current_hp == 8

    def test_gain_temp_hp(self) -> None:
        """Test temporary hit points stack and reject negatives."""
        health = HealthState(current_hp=8, max_hp=8)
        health.gain_temp_hp(2)
        health.gain_temp_hp(3)

        assert health.temp_hp == 5
        with pytest.raises(InvalidArgumentError):
            health.gain_temp_hp(-1)


class TestSavingThrowsAndCombat:
    """Tests for SavingThrows and CombatState."""

    def test_default_saves(self) -> None:
        """Test that unknown saves require a natural 20."""
        saves = SavingThrows()

        assert [target for _, target in saves.labelled()] == [20] * 5
        assert saves.labelled()[0][0] == "Death / Poison"

    def test_roll_needed_to_hit(self) -> None:
        """Test the THAC0 arithmetic."""
        assert CombatState(to_hit_ac0=17).roll_needed_to_hit(4) == 13
        assert CombatState().roll_needed_to_hit(-2) == 21


class TestSpells:
    """Tests for Spells."""

    def test_slots_padded_and_trimmed(self) -> None:
        """Test slots always hold one entry per spell level."""
        assert Spells(slots=[1]).slots == [1, 0, 0, 0, 0, 0]
        assert Spells(slots=[1] * 9).slots == [1] * 6

    def test_negative_slots_rejected(self) -> None:
        """Test that negative slot counts are invalid."""
        with pytest.raises(ValidationError):
            Spells(slots=[-1])

    def test_caster_queries(self) -> None:
        """Test caster status, slot lookup and spellbook search."""
        spells = Spells(
            slots=[2, 1],
            magic_type=MagicType.ARCANE,
            spell_type=SpellType.MAGIC_USER,
            spellbook=[Spell(name="Sleep", level=1, spell_type=SpellType.MAGIC_USER)],
        )

        assert spells.is_caster
        assert spells.slots_for(2) == 1
        assert spells.slots_for(7) == 0
        assert spells.knows(" sleep ")
        assert not Spells().is_caster

    def test_spell_level_bounds(self) -> None:
        """Test spells are levels 1 through 6."""
        with pytest.raises(ValidationError):
            Spell(name="Wish", level=9, spell_type=SpellType.MAGIC_USER)


class TestWealthState:
    """Tests for WealthState."""

    def test_total_value_in_gp(self) -> None:
        """Test the whole-gold wealth total."""
        wealth = WealthState(platinum=2, gold=3, electrum=4, silver=25, copper=250)

        assert wealth.total_value_in_gp == 10 + 3 + 8 + 2 + 2

    def test_total_value_gold_and_platinum(self) -> None:
        """Test ten gold and two platinum total twenty gold."""
        assert WealthState(gold=10, platinum=2).total_value_in_gp == 20

    def test_adjust(self) -> None:
        """Test adding and spending coins."""
        wealth = WealthState(silver=10)

        assert wealth.adjust(CoinType.SILVER, -4) == 6
        assert wealth.adjust(CoinType.PLATINUM, 3) == 3
        assert wealth.coins(CoinType.PLATINUM) == 3

    def test_adjust_overdraw_rejected(self) -> None:
        """Test that spending more than carried fails and changes nothing."""
        wealth = WealthState(gold=5)

        with pytest.raises(InvalidArgumentError):
            wealth.adjust(CoinType.GOLD, -6)
        assert wealth.gold == 5

    def test_domain(self) -> None:
        """Test domain holdings."""
        domain = Domain(
            name="Westmarch",
            population=1200,
            structures=[Structure(name="Keep", value=75_000)],
        )

        assert WealthState(domain=domain).domain.structures[0].name == "Keep"


class TestPersonalityBackground:
    """Tests for PersonalityBackground."""

    def test_is_blank(self) -> None:
        """Test blank detection."""
        notes = PersonalityBackground()

        assert notes.is_blank

        notes.personality.ideal = "Freedom"

        assert not notes.is_blank
