"""Runtime engine for the OSE referee.

Submodules:
    dice: Dice rolling against an injectable random source (d20 for notation)
    tools: ``@tool`` marking and dispatch of tool calls
    directory: Thread-safe map from session id to Character
    service: Session-keyed operations exposed to the orchestration layer

Only the leaf modules are re-exported here; import the directory and
service from their own modules (or from the top-level package).
"""

from __future__ import annotations

# =============================================================================
# Dice Rolling
# =============================================================================
from ose_referee.engine.dice import (
    DiceExpression,
    DiceRoller,
    DiceType,
    RandomSource,
    get_default_roller,
    parse_dice_type,
    set_default_roller,
)

# =============================================================================
# Tool Dispatch
# =============================================================================
from ose_referee.engine.tools import (
    ToolCall,
    ToolDefinition,
    ToolDispatcher,
    ToolResult,
    collect_tools,
    tool,
)


__all__ = [
    # Dice
    "DiceExpression",
    "DiceRoller",
    "DiceType",
    "RandomSource",
    "get_default_roller",
    "parse_dice_type",
    "set_default_roller",
    # Tools
    "ToolCall",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolResult",
    "collect_tools",
    "tool",
]
