"""Agent value objects.

An :class:`Agent` is an immutable persona: a name, a model, instructions and
a tool table. Instructions are wrapped in an :class:`Instructions` strategy so
callers never branch on "string or callable" at request time.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from baton.exceptions import InstructionsError
from baton.toolkit.models import Tool

DEFAULT_MODEL = "gpt-4o"
DEFAULT_INSTRUCTIONS = "You are a helpful agent."

InstructionsSource = Union[str, Callable[[Mapping[str, Any]], str]]


@dataclass(frozen=True)
class Instructions:
    """System prompt source: either fixed text or a function of the context.

    Attributes:
        source: A string, or a callable taking the context mapping and
            returning a string.
    """

    source: InstructionsSource

    @classmethod
    def of(cls, value: InstructionsSource | Instructions) -> Instructions:
        """Wrap *value* unless it is already an Instructions instance."""
        if isinstance(value, Instructions):
            return value
        if not isinstance(value, str) and not callable(value):
            raise TypeError(
                f"Instructions must be a str or a callable, got {type(value).__name__}"
            )
        return cls(source=value)

    @property
    def is_dynamic(self) -> bool:
        return callable(self.source)

    def resolve(self, context: Mapping[str, Any], *, agent_name: str = "") -> str:
        """Produce the system prompt for the current context.

        Raises:
            InstructionsError: If a callable source returns a non-string.
        """
        if not callable(self.source):
            return self.source
        text = self.source(context)
        if not isinstance(text, str):
            raise InstructionsError(agent_name, text)
        return text


@dataclass(frozen=True)
class Agent:
    """A named persona that can be active in a run.

    Agents are never mutated by a run. Plain callables passed in ``tools``
    are converted with :meth:`Tool.from_function`; the stored table is a
    tuple of :class:`Tool`.

    Attributes:
        name: Label put on every assistant message this agent produces.
        model: Model identifier sent to the transport.
        instructions: Fixed text or a callable of the context.
        tools: Ordered tool table.
        tool_choice: Optional tool-choice policy forwarded to the transport.
        parallel_tool_calls: When True, the tool-choice policy is forced to
            ``"auto"``. None means the flag is not sent.
    """

    name: str = "Agent"
    model: str = DEFAULT_MODEL
    instructions: InstructionsSource | Instructions = DEFAULT_INSTRUCTIONS
    tools: Sequence[Tool | Callable[..., Any]] = field(default_factory=tuple)
    tool_choice: str | dict | None = None
    parallel_tool_calls: bool | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Agent name must be a non-empty string")
        object.__setattr__(self, "instructions", Instructions.of(self.instructions))
        object.__setattr__(
            self,
            "tools",
            tuple(t if isinstance(t, Tool) else Tool.from_function(t) for t in self.tools),
        )
        names = [t.name for t in self.tools]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Agent '{self.name}' has duplicate tool names: {duplicates}")

    def resolve_instructions(self, context: Mapping[str, Any]) -> str:
        return self.instructions.resolve(context, agent_name=self.name)

    def tool_table(self) -> dict[str, Tool]:
        """Return the tools keyed by name."""
        return {t.name: t for t in self.tools}

    def clone(self, **changes: Any) -> Agent:
        """Return a copy of this agent with *changes* applied."""
        return dataclasses.replace(self, **changes)
