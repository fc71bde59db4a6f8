"""Tests for dice rolling mechanics."""

from __future__ import annotations

import random

import pytest

from ose_referee.core.exceptions import DiceRollError
from ose_referee.engine.dice import (
    DiceExpression,
    DiceRoller,
    DiceType,
    get_default_roller,
    parse_dice_type,
    set_default_roller,
)


class TestDiceType:
    """Tests for DiceType and parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (DiceType.D8, DiceType.D8),
            ("D6", DiceType.D6),
            ("d20", DiceType.D20),
            ("12", DiceType.D12),
            (4, DiceType.D4),
            (" d100 ", DiceType.D100),
        ],
    )
    def test_parse_dice_type(self, raw: DiceType | str | int, expected: DiceType) -> None:
        """Test that dice resolve from names and face counts."""
        assert parse_dice_type(raw) is expected

    @pytest.mark.parametrize("raw", ["D7", "", "sword", 3])
    def test_parse_unknown_die_raises(self, raw: str | int) -> None:
        """Test that unknown dice raise DiceRollError."""
        with pytest.raises(DiceRollError):
            parse_dice_type(raw)

    def test_sides(self) -> None:
        """Test face counts."""
        assert DiceType.D4.sides == 4
        assert DiceType.D100.sides == 100


class TestDiceRoller:
    """Tests for the DiceRoller class."""

    def test_roll_die_in_range(self, dice_roller: DiceRoller) -> None:
        """Test single die rolls stay within the die's faces."""
        for _ in range(50):
            assert 1 <= dice_roller.roll_die(DiceType.D6) <= 6

    def test_roll_four_d6_range(self, dice_roller: DiceRoller) -> None:
        """Test 4d6 sums stay within 4-24 and spread across the range."""
        totals = [dice_roller.roll_dice(DiceType.D6, 4) for _ in range(1000)]

        assert min(totals) >= 4
        assert max(totals) <= 24
        assert len(set(totals)) > 10

    def test_roll_dice_uses_random_source(self, scripted_random, scripted_roller) -> None:
        """Test that roll_dice sums values drawn from the injected source."""
        scripted_random.rolls = [3, 5, 6]

        assert scripted_roller.roll_dice(DiceType.D6, 3) == 14
        assert scripted_random.randint_calls == [(1, 6), (1, 6), (1, 6)]

    def test_roll_zero_dice(self, scripted_random, scripted_roller) -> None:
        """Test that rolling no dice yields 0 without drawing."""
        assert scripted_roller.roll_dice("D8", 0) == 0
        assert scripted_random.randint_calls == []

    def test_roll_negative_count_raises(self, dice_roller: DiceRoller) -> None:
        """Test that a negative dice count is rejected."""
        with pytest.raises(DiceRollError):
            dice_roller.roll_dice(DiceType.D6, -1)

    def test_roll_dice_list(self, scripted_random, scripted_roller) -> None:
        """Test rolling a mixed list of dice."""
        scripted_random.rolls = [4, 10]

        assert scripted_roller.roll_dice_list([DiceType.D4, "d12"]) == 14
        assert scripted_random.randint_calls == [(1, 4), (1, 12)]

    def test_choice(self, scripted_random, scripted_roller) -> None:
        """Test that choice picks through the injected source."""
        scripted_random.choices = [2]

        assert scripted_roller.choice(["a", "b", "c"]) == "c"

    def test_seeded_rollers_agree(self) -> None:
        """Test that equal seeds produce equal sequences."""
        first = DiceRoller(seed=7)
        second = DiceRoller(seed=7)

        assert [first.roll_die(DiceType.D20) for _ in range(10)] == [
            second.roll_die(DiceType.D20) for _ in range(10)
        ]

    def test_random_random_is_a_source(self) -> None:
        """Test that random.Random satisfies the random source protocol."""
        roller = DiceRoller(random.Random(1))

        assert 2 <= roller.roll_dice(DiceType.D6, 2) <= 12


class TestRollExpression:
    """Tests for dice notation."""

    def test_multiple_dice(self, dice_roller: DiceRoller) -> None:
        """Test rolling multiple dice."""
        result = dice_roller.roll_expression("3d6")

        assert isinstance(result, DiceExpression)
        assert 3 <= result.total <= 18
        assert len(result.dice) == 3
        assert result.modifier == 0

    def test_roll_with_modifier(self, dice_roller: DiceRoller) -> None:
        """Test roll with positive modifier."""
        result = dice_roller.roll_expression("1d8+1")

        assert result.modifier == 1
        assert 2 <= result.total <= 9

    def test_keep_highest(self, dice_roller: DiceRoller) -> None:
        """Test that only kept dice are reported."""
        result = dice_roller.roll_expression("4d6kh3")

        assert len(result.dice) == 3
        assert result.total == sum(result.dice)

    @pytest.mark.parametrize("expression", ["", "   ", "invalid"])
    def test_invalid_expression_raises(self, dice_roller: DiceRoller, expression: str) -> None:
        """Test that empty or invalid expressions raise DiceRollError."""
        with pytest.raises(DiceRollError):
            dice_roller.roll_expression(expression)


class TestDefaultRoller:
    """Tests for the process-wide roller."""

    def test_default_roller_is_shared(self) -> None:
        """Test that the default roller is created once."""
        assert get_default_roller() is get_default_roller()

    def test_default_roller_seeded_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the configured seed makes the default roller reproducible."""
        monkeypatch.setenv("OSE_REFEREE_DICE_SEED", "99")
        expected = DiceRoller(seed=99).roll_dice(DiceType.D20, 5)

        assert get_default_roller().roll_dice(DiceType.D20, 5) == expected

    def test_set_default_roller(self, scripted_roller: DiceRoller) -> None:
        """Test replacing the default roller."""
        set_default_roller(scripted_roller)

        assert get_default_roller() is scripted_roller
