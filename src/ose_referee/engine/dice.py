"""Dice rolling for Old-School Essentials.

Every random outcome in the rules engine (hit points, random language
picks, ad-hoc rolls requested by the referee) goes through a DiceRoller.
The roller draws from an injectable random source so tests can script
exact results; dice notation such as ``3d6+1`` is evaluated with the
d20 library.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, TypeVar

import d20

from ose_referee.core.exceptions import DiceRollError
from ose_referee.core.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class DiceType(StrEnum):
    """Polyhedral dice used by the rules."""

    D4 = "D4"
    D6 = "D6"
    D8 = "D8"
    D10 = "D10"
    D12 = "D12"
    D20 = "D20"
    D100 = "D100"

    @property
    def sides(self) -> int:
        """Number of faces on the die."""
        return int(self.value[1:])


def parse_dice_type(raw: DiceType | str | int) -> DiceType:
    """Resolve a die from its name or face count.

    Accepts ``DiceType.D6``, ``"D6"``, ``"d6"``, ``"6"`` and ``6``.

    Args:
        raw: The die to resolve.

    Returns:
        The matching DiceType.

    Raises:
        DiceRollError: If the value names no known die.
    """
    if isinstance(raw, DiceType):
        return raw
    text = str(raw).strip().upper()
    if text and not text.startswith("D"):
        text = f"D{text}"
    try:
        return DiceType(text)
    except ValueError as exc:
        raise DiceRollError(
            f"Unrecognized die type: {raw!r}",
            expression=str(raw),
            details={"valid_dice": [die.value for die in DiceType]},
        ) from exc


class RandomSource(Protocol):
    """Source of randomness consumed by DiceRoller.

    ``random.Random`` satisfies this protocol.
    """

    def randint(self, a: int, b: int) -> int: ...

    def choice(self, seq: Sequence[Any]) -> Any: ...


@dataclass(frozen=True)
class DiceExpression:
    """Result of rolling a dice expression.

    Attributes:
        expression: The original dice expression string.
        total: The total result of the roll.
        dice: Individual kept dice results.
        modifier: Static modifier applied (total minus the dice).
    """

    expression: str
    total: int
    dice: list[int]
    modifier: int


class DiceRoller:
    """Rolls dice against an injectable random source.

    Example:
        >>> roller = DiceRoller(seed=42)
        >>> total = roller.roll_dice(DiceType.D6, 3)
        >>> 3 <= total <= 18
        True
    """

    def __init__(self, rng: RandomSource | None = None, *, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            rng: Random source to draw from. Defaults to a private
                ``random.Random``.
            seed: Seed for the private generator; ignored when ``rng``
                is given.
        """
        self._rng: RandomSource = rng if rng is not None else random.Random(seed)
        logger.debug("DiceRoller initialized", seed=seed, injected=rng is not None)

    def roll_die(self, die: DiceType | str | int) -> int:
        """Roll a single die.

        Args:
            die: The die to roll.

        Returns:
            A value between 1 and the die's face count.

        Raises:
            DiceRollError: If the die type is not recognized.
        """
        dice_type = parse_dice_type(die)
        return self._rng.randint(1, dice_type.sides)

    def roll_dice(self, die: DiceType | str | int, count: int = 1) -> int:
        """Roll ``count`` dice of one type and sum them.

        Args:
            die: The die to roll.
            count: Number of dice; zero yields 0.

        Returns:
            Sum of all rolls.

        Raises:
            DiceRollError: If the die type is not recognized or count is negative.
        """
        dice_type = parse_dice_type(die)
        if count < 0:
            raise DiceRollError(
                "Dice count cannot be negative",
                expression=f"{count}{dice_type.value.lower()}",
            )
        total = sum(self._rng.randint(1, dice_type.sides) for _ in range(count))
        logger.debug("Dice rolled", die=dice_type.value, count=count, total=total)
        return total

    def roll_dice_list(self, dice: Iterable[DiceType | str | int]) -> int:
        """Roll one of each listed die and sum them.

        Args:
            dice: Dice to roll, possibly of different types.

        Returns:
            Sum of all rolls.

        Raises:
            DiceRollError: If any die type is not recognized.
        """
        dice_types = [parse_dice_type(die) for die in dice]
        return sum(self._rng.randint(1, die.sides) for die in dice_types)

    def choice(self, options: Sequence[T]) -> T:
        """Pick one element uniformly from a non-empty sequence."""
        return self._rng.choice(options)

    def roll_expression(self, expression: str) -> DiceExpression:
        """Roll a dice expression in standard notation.

        Args:
            expression: Dice expression (e.g., '3d6', '1d8+1', '4d6kh3').

        Returns:
            DiceExpression containing the roll results.

        Raises:
            DiceRollError: If the expression is empty or invalid.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        try:
            result = d20.roll(expression)
        except d20.RollError as exc:
            raise DiceRollError(
                f"Invalid dice expression: {exc}",
                expression=expression,
            ) from exc

        dice_values = _extract_dice_values(result.expr)
        rolled = DiceExpression(
            expression=expression,
            total=result.total,
            dice=dice_values,
            modifier=result.total - sum(dice_values),
        )
        logger.info("Dice expression rolled", expression=expression, total=result.total)
        return rolled


def _extract_dice_values(expr: Any) -> list[int]:
    """Collect the kept die faces from a d20 expression tree."""
    values: list[int] = []

    def traverse(node: Any) -> None:
        if isinstance(node, d20.Dice):
            values.extend(die.number for die in node.values if die.kept)
        elif hasattr(node, "children"):
            for child in node.children:
                traverse(child)

    traverse(expr)
    return values


# Module-level roller shared by callers that do not inject their own
_default_roller: DiceRoller | None = None


def get_default_roller() -> DiceRoller:
    """Return the process-wide roller, seeded from settings on first use."""
    global _default_roller
    if _default_roller is None:
        from ose_referee.core.config import get_settings

        _default_roller = DiceRoller(seed=get_settings().dice.seed)
    return _default_roller


def set_default_roller(roller: DiceRoller | None) -> None:
    """Replace the process-wide roller; None re-seeds from settings on next use."""
    global _default_roller
    _default_roller = roller


__all__ = [
    "DiceType",
    "DiceExpression",
    "DiceRoller",
    "RandomSource",
    "parse_dice_type",
    "get_default_roller",
    "set_default_roller",
]
