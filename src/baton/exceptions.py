"""Baton exception hierarchy.

All Baton-specific exceptions inherit from BatonError.
"""

from __future__ import annotations


class BatonError(Exception):
    """Base exception for all Baton errors."""


class OrchestratorError(BatonError):
    """Raised when a run is configured in a way the loop cannot honor."""


class CompletionError(BatonError):
    """Raised when the transport returns a completion with no usable message."""


class InstructionsError(BatonError):
    """Raised when an agent's instructions do not resolve to a string."""

    def __init__(self, agent_name: str, value: object) -> None:
        self.agent_name = agent_name
        self.value = value
        super().__init__(
            f"Instructions for agent '{agent_name}' resolved to "
            f"{type(value).__name__}, expected str"
        )


class ToolError(BatonError):
    """Base exception for errors raised while dispatching a tool call."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(message)


class ToolArgumentsError(ToolError):
    """Raised when a tool call's arguments are not a JSON object.

    Fails the whole dispatch so no partial context patch is applied.
    """

    def __init__(self, tool_name: str, raw_arguments: object, reason: str) -> None:
        self.raw_arguments = raw_arguments
        super().__init__(
            tool_name,
            f"Invalid arguments for tool '{tool_name}': {reason}. "
            f"Raw arguments: {raw_arguments!r}",
        )


class ToolExecutionError(ToolError):
    """Raised when a tool handler raises. The original error is chained."""

    def __init__(self, tool_name: str, error: BaseException) -> None:
        self.error = error
        super().__init__(
            tool_name,
            f"Tool '{tool_name}' failed: {type(error).__name__}: {error}",
        )


class ResultCoercionError(ToolError):
    """Raised when a tool's return value cannot be turned into a string."""

    def __init__(self, value: object, reason: str, tool_name: str | None = None) -> None:
        self.value = value
        label = f"tool '{tool_name}'" if tool_name else "tool result"
        super().__init__(
            tool_name or "",
            f"Failed to cast {label} to string: {value!r}. Make sure agent "
            f"functions return a string, an Agent, or a Result. Error: {reason}",
        )
