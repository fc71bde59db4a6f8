"""Tool dispatch for the orchestration layer.

Service methods the referee model may call are marked with ``@tool``.
A ToolDispatcher collects the marked methods of one service instance and
executes ToolCalls against them, turning any error into a failed
ToolResult so a bad call never crashes the conversation loop. Building
provider-specific tool schemas is left to the orchestration layer.
"""

from __future__ import annotations

import functools
import inspect
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar, cast

from pydantic import ConfigDict, ValidationError, validate_call

from ose_referee.core.exceptions import InvalidArgumentError, OseRefereeError
from ose_referee.core.logging import get_logger


logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_TOOL_ATTRIBUTE = "_tool_description"

# Models send numbers for text arguments such as monster hit dice.
_ARGUMENT_CONFIG = ConfigDict(coerce_numbers_to_str=True)


# =============================================================================
# Tool Registry
# =============================================================================


@dataclass
class ToolDefinition:
    """A callable tool bound to its target.

    Attributes:
        name: Tool name (the method name).
        description: Human-readable description for the model.
        function: The bound method to call.
        parameters: Parameter names, in signature order.
        required: Parameters without a default.
    """

    name: str
    description: str
    function: Callable[..., Any]
    parameters: list[str] = field(default_factory=list)
    required: list[str] = field(default_factory=list)


def _argument_error(func: Callable[..., Any], exc: ValidationError) -> InvalidArgumentError:
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return InvalidArgumentError(
        f"Invalid arguments for {func.__name__}: {'; '.join(problems)}",
        details={"errors": problems},
    )


def tool(description: str) -> Callable[[F], F]:
    """Mark a method as a tool the referee model may call.

    Arguments are validated against the method's annotations before the
    call: numeric text such as ``"15"`` is coerced to a number, numbers
    are accepted for text parameters, and values that do not fit are
    rejected with InvalidArgumentError.

    Args:
        description: Description for the model.

    Returns:
        Decorator wrapping the function with argument validation.
    """

    def decorator(func: F) -> F:
        validated = validate_call(config=_ARGUMENT_CONFIG)(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return validated(*args, **kwargs)
            except ValidationError as exc:
                # Only errors raised while checking this call's arguments.
                if exc.title not in (func.__qualname__, func.__name__):
                    raise
                raise _argument_error(func, exc) from exc

        setattr(wrapper, _TOOL_ATTRIBUTE, description)
        return cast(F, wrapper)

    return decorator


def collect_tools(target: object) -> dict[str, ToolDefinition]:
    """Collect the ``@tool`` methods of an object, bound to it."""
    tools: dict[str, ToolDefinition] = {}
    for name, member in inspect.getmembers(target, predicate=inspect.ismethod):
        description = getattr(member, _TOOL_ATTRIBUTE, None)
        if description is None:
            continue
        signature = inspect.signature(member)
        params = [
            p
            for p in signature.parameters.values()
            if p.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
        ]
        tools[name] = ToolDefinition(
            name=name,
            description=description,
            function=member,
            parameters=[p.name for p in params],
            required=[p.name for p in params if p.default is inspect.Parameter.empty],
        )
    return tools


# =============================================================================
# Execution
# =============================================================================


@dataclass
class ToolCall:
    """A request to execute a tool.

    Attributes:
        tool_name: Name of the tool to call.
        arguments: Arguments to pass to the tool.
        call_id: Unique identifier for this call.
    """

    tool_name: str
    arguments: dict[str, Any]
    call_id: str = ""


@dataclass
class ToolResult:
    """Result of executing a tool.

    Attributes:
        tool_name: Name of the tool that was called.
        call_id: ID of the original call.
        result: The tool's output as text.
        success: Whether execution succeeded.
        error: Error message if failed.
    """

    tool_name: str
    call_id: str
    result: str
    success: bool = True
    error: str = ""


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class ToolDispatcher:
    """Executes tool calls against the ``@tool`` methods of one target."""

    def __init__(self, target: object) -> None:
        self._tools = collect_tools(target)

    def get_tool(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def get_all_tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def execute(self, call: ToolCall) -> ToolResult:
        """Execute a tool call.

        Args:
            call: The tool call to execute.

        Returns:
            ToolResult with outcome.
        """
        tool_def = self.get_tool(call.tool_name)
        if tool_def is None:
            return ToolResult(
                tool_name=call.tool_name,
                call_id=call.call_id,
                result="",
                success=False,
                error=f"Unknown tool: {call.tool_name}",
            )

        unexpected = sorted(set(call.arguments) - set(tool_def.parameters))
        missing = [name for name in tool_def.required if name not in call.arguments]
        if unexpected or missing:
            return ToolResult(
                tool_name=call.tool_name,
                call_id=call.call_id,
                result="",
                success=False,
                error=f"Invalid arguments: missing={missing}, unexpected={unexpected}",
            )

        try:
            value = tool_def.function(**call.arguments)
        except OseRefereeError as exc:
            logger.warning("Tool call rejected", tool=call.tool_name, error=exc.message)
            return ToolResult(
                tool_name=call.tool_name,
                call_id=call.call_id,
                result="",
                success=False,
                error=str(exc),
            )
        except Exception as exc:
            logger.exception("Tool execution failed", tool=call.tool_name)
            return ToolResult(
                tool_name=call.tool_name,
                call_id=call.call_id,
                result="",
                success=False,
                error=f"{type(exc).__name__}: {exc}",
            )

        return ToolResult(
            tool_name=call.tool_name,
            call_id=call.call_id,
            result=_render(value),
            success=True,
        )

    def execute_all(self, calls: list[ToolCall]) -> list[ToolResult]:
        """Execute multiple tool calls in sequence."""
        return [self.execute(call) for call in calls]


__all__ = [
    "ToolDefinition",
    "ToolCall",
    "ToolResult",
    "ToolDispatcher",
    "tool",
    "collect_tools",
]
