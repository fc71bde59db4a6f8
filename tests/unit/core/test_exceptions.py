"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from ose_referee.core.exceptions import (
    CharacterNotInitializedError,
    ConfigurationError,
    DiceRollError,
    GameEngineError,
    InvalidArgumentError,
    InvalidGameStateError,
    OseRefereeError,
    RulesLoadError,
)


class TestOseRefereeError:
    """Tests for the base OseRefereeError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = OseRefereeError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = OseRefereeError("Test error", details={"key": "value", "count": 42})
        assert exc.details == {"key": "value", "count": 42}
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        """Test exception repr output."""
        repr_str = repr(OseRefereeError("Test", details={"x": 1}))
        assert "OseRefereeError" in repr_str
        assert "Test" in repr_str
        assert "x" in repr_str


class TestConfigurationExceptions:
    """Tests for configuration-related exceptions."""

    def test_configuration_error_with_key(self) -> None:
        """Test ConfigurationError with config key."""
        exc = ConfigurationError("Bad value", config_key="dice.seed")
        assert exc.details["config_key"] == "dice.seed"

    def test_rules_load_error_with_source(self) -> None:
        """Test RulesLoadError keeps its source file and is a ConfigurationError."""
        exc = RulesLoadError("Unreadable", source_file="rules.json")
        assert exc.details["source_file"] == "rules.json"
        assert isinstance(exc, ConfigurationError)


class TestGameEngineExceptions:
    """Tests for rules engine exceptions."""

    def test_invalid_argument_error(self) -> None:
        """Test InvalidArgumentError with field context."""
        exc = InvalidArgumentError("Negative XP", field_name="amount", invalid_value=-5)
        assert exc.details["field_name"] == "amount"
        assert exc.details["invalid_value"] == -5
        assert isinstance(exc, GameEngineError)

    def test_dice_roll_error_is_invalid_argument(self) -> None:
        """Test DiceRollError records the expression."""
        exc = DiceRollError("Bad die", expression="d7")
        assert exc.details["expression"] == "d7"
        assert isinstance(exc, InvalidArgumentError)

    def test_invalid_game_state_error(self) -> None:
        """Test InvalidGameStateError with state context."""
        exc = InvalidGameStateError(
            "Wrong state", current_state="unbound", expected_states=["bound"]
        )
        assert exc.details["current_state"] == "unbound"
        assert exc.details["expected_states"] == ["bound"]

    def test_character_not_initialized_defaults(self) -> None:
        """Test CharacterNotInitializedError default message and context."""
        exc = CharacterNotInitializedError(operation="gain_experience")
        assert exc.message == "Character class has not been set"
        assert exc.details["operation"] == "gain_experience"
        assert exc.details["current_state"] == "uninitialized"
        assert isinstance(exc, InvalidGameStateError)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            ConfigurationError,
            RulesLoadError,
            GameEngineError,
            InvalidArgumentError,
            DiceRollError,
            InvalidGameStateError,
            CharacterNotInitializedError,
        ],
    )
    def test_all_inherit_from_base(self, exc_class: type[OseRefereeError]) -> None:
        """Test that every exception can be caught as OseRefereeError."""
        with pytest.raises(OseRefereeError):
            raise exc_class("boom")
