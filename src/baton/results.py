"""Tool results and the normalizer that produces them.

A tool may return a plain value, an :class:`~baton.agents.Agent`, or an
explicit :class:`Result`. :func:`classify` resolves that once into one of
three variants, and :func:`normalize_result` turns the variant into a
:class:`Result` whose ``value`` is always a string.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from baton.agents import Agent
from baton.exceptions import ResultCoercionError


def stringify(value: Any, *, tool_name: str | None = None) -> str:
    """Convert a tool return value to its textual form.

    Strings pass through. Mappings, sequences, booleans and None are
    rendered as JSON; everything else goes through ``str()``.

    Raises:
        ResultCoercionError: If the value cannot be rendered.
    """
    if isinstance(value, str):
        return value
    try:
        if value is None or isinstance(value, (bool, Mapping, list, tuple)):
            if isinstance(value, Mapping):
                value = dict(value)
            return json.dumps(value, ensure_ascii=False)
        return str(value)
    except Exception as exc:
        raise ResultCoercionError(value, str(exc), tool_name=tool_name) from exc


@dataclass(frozen=True)
class Result:
    """Normalized outcome of one tool call.

    Attributes:
        value: Content surfaced back to the model. Non-strings are
            stringified on construction.
        agent: Handoff target, if the tool switches the active agent.
        context_variables: Keys to merge into the run's context.
    """

    value: str = ""
    agent: Agent | None = None
    context_variables: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            object.__setattr__(self, "value", stringify(self.value))
        if not isinstance(self.context_variables, dict):
            object.__setattr__(self, "context_variables", dict(self.context_variables))


@dataclass(frozen=True)
class PlainText:
    """A tool returned an ordinary value."""

    raw: Any

    def to_result(self, *, tool_name: str | None = None) -> Result:
        return Result(value=stringify(self.raw, tool_name=tool_name))


@dataclass(frozen=True)
class HandoffAgent:
    """A tool returned an agent, meaning "hand the conversation over"."""

    agent: Agent

    def to_result(self, *, tool_name: str | None = None) -> Result:
        return Result(
            value=json.dumps({"assistant": self.agent.name}),
            agent=self.agent,
        )


@dataclass(frozen=True)
class StructuredResult:
    """A tool returned an explicit :class:`Result`."""

    result: Result

    def to_result(self, *, tool_name: str | None = None) -> Result:
        return self.result


ToolReturn = Union[PlainText, HandoffAgent, StructuredResult]


def classify(raw: Any) -> ToolReturn:
    """Sort a raw tool return value into one of the three variants."""
    if isinstance(raw, Result):
        return StructuredResult(raw)
    if isinstance(raw, Agent):
        return HandoffAgent(raw)
    return PlainText(raw)


def normalize_result(raw: Any, *, tool_name: str | None = None) -> Result:
    """Coerce one tool's raw return value into a :class:`Result`.

    Raises:
        ResultCoercionError: If a plain value cannot be stringified.
    """
    return classify(raw).to_result(tool_name=tool_name)
