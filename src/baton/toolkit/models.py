"""Toolkit data models for agent tool definitions.

Frozen dataclasses for tool definitions and tool calls.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from baton.exceptions import ToolArgumentsError
from baton.toolkit.schema import accepts_context, function_to_json, strip_context_param

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    """A single tool definition for LLM consumption.

    Attributes:
        name: Tool name the model refers to in its tool calls.
        description: Human-readable description of when/why to use this tool.
        parameters: JSON Schema dict describing tool parameters.
        handler: Callable that executes the tool. May be a coroutine function.
        wants_context: Whether the handler receives the live context as the
            reserved ``context_variables`` argument. The model never sees it.
    """

    name: str
    description: str
    parameters: dict
    handler: Callable[..., object]
    wants_context: bool = False

    @classmethod
    def from_function(
        cls,
        func: Callable[..., object],
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Tool:
        """Build a Tool from a plain callable's signature and docstring."""
        schema = function_to_json(func, name=name, description=description)["function"]
        return cls(
            name=schema["name"],
            description=schema["description"],
            parameters=schema["parameters"],
            handler=func,
            wants_context=accepts_context(func),
        )

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format.

        The reserved context parameter is always removed.

        Returns:
            Dict with "type": "function" and nested "function" object.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": strip_context_param(self.parameters),
            },
        }


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model.

    ``arguments`` is the raw JSON string as sent on the wire; call
    :meth:`parse_arguments` to decode it.
    """

    id: str
    name: str
    arguments: str = "{}"
    type: str = "function"

    @classmethod
    def from_openai(cls, tc: dict) -> ToolCall:
        """Parse from the OpenAI wire format."""
        function = tc.get("function") or {}
        raw_args = function.get("arguments")
        if raw_args is None or raw_args == "":
            raw_args = "{}"
        elif not isinstance(raw_args, str):
            raw_args = json.dumps(raw_args)
        return cls(
            id=tc.get("id", ""),
            name=function.get("name", ""),
            arguments=raw_args,
            type=tc.get("type", "function"),
        )

    def parse_arguments(self) -> dict[str, Any]:
        """Decode the arguments string into a dict.

        Raises:
            ToolArgumentsError: If the string is not valid JSON or does not
                decode to an object.
        """
        try:
            parsed = json.loads(self.arguments)
        except (json.JSONDecodeError, TypeError) as exc:
            raise ToolArgumentsError(self.name, self.arguments, str(exc)) from exc
        if not isinstance(parsed, dict):
            raise ToolArgumentsError(
                self.name,
                self.arguments,
                f"expected a JSON object, got {type(parsed).__name__}",
            )
        return parsed

    def to_openai(self) -> dict:
        """Serialize to the OpenAI wire format."""
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass(frozen=True)
class ToolMessage:
    """A tool-response message, one per tool call."""

    tool_call_id: str
    name: str
    content: str
    role: str = field(default="tool", init=False)

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "tool_call_id": self.tool_call_id,
            "name": self.name,
            "content": self.content,
        }
