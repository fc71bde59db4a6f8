"""Custom exception hierarchy for the OSE referee rules engine.

All exceptions inherit from OseRefereeError so that the orchestration
layer can catch engine failures at a single boundary while keeping the
domain-specific context attached to each error.

Rules-table lookups never raise: a missing entry falls back to a
documented default. Errors are reserved for caller mistakes, operations
attempted in the wrong character state, and unreadable configuration.

Example:
    >>> from ose_referee.core.exceptions import InvalidArgumentError
    >>> raise InvalidArgumentError("XP cannot be negative", field_name="amount", invalid_value=-5)
"""

from __future__ import annotations

from typing import Any


class OseRefereeError(Exception):
    """Base exception for all OSE referee errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception.

        Returns:
            String representation suitable for debugging.
        """
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(OseRefereeError):
    """Raised when application configuration is invalid.

    This includes invalid settings values and override paths that
    do not point at an existing file.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class RulesLoadError(ConfigurationError):
    """Raised when a rules or expert document cannot be read or parsed.

    This is a startup failure: the process cannot referee without its
    rules tables. Individual missing table entries do not raise.
    """

    def __init__(
        self,
        message: str,
        *,
        source_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize rules load error with source file context.

        Args:
            message: Human-readable error description.
            source_file: Path or resource name of the document.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if source_file:
            combined_details["source_file"] = source_file
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(OseRefereeError):
    """Base exception for character rules engine errors."""


class InvalidArgumentError(GameEngineError):
    """Raised when a caller passes a value the engine cannot accept.

    Examples are negative experience, negative temporary hit points,
    an already-known language, or an unknown class name.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid argument error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the argument that was rejected.
            invalid_value: The rejected value.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


class DiceRollError(InvalidArgumentError):
    """Raised when a die type or dice expression is not recognized."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The die type or dice expression that failed.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression is not None:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


class InvalidGameStateError(GameEngineError):
    """Raised when an operation is attempted in an invalid character state."""

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The state the character is in.
            expected_states: States in which the operation is valid.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class CharacterNotInitializedError(InvalidGameStateError):
    """Raised when a class-dependent operation runs before a class is set.

    Experience, health, saving throws, combat, spells and wealth only
    exist once a character class has been assigned.
    """

    def __init__(
        self,
        message: str = "Character class has not been set",
        *,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error with the attempted operation.

        Args:
            message: Human-readable error description.
            operation: Name of the operation that was attempted.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if operation:
            combined_details["operation"] = operation
        super().__init__(
            message,
            current_state="uninitialized",
            expected_states=["initialized"],
            details=combined_details,
        )


__all__ = [
    "OseRefereeError",
    "ConfigurationError",
    "RulesLoadError",
    "GameEngineError",
    "InvalidArgumentError",
    "DiceRollError",
    "InvalidGameStateError",
    "CharacterNotInitializedError",
]
