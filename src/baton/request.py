"""Completion request construction.

Turns the active agent, the accumulated history and the current context
into the request handed to the transport. Pure: nothing here mutates its
inputs or talks to the network.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from baton.agents import Agent

# Message keys forwarded to the transport. Everything else (e.g. ``sender``)
# is local bookkeeping.
_WIRE_MESSAGE_KEYS = ("role", "content", "name", "tool_calls", "tool_call_id", "function_call")


@dataclass(frozen=True)
class CompletionRequest:
    """A single chat-completion request.

    Attributes:
        model: Model identifier.
        messages: System message followed by the history, in wire format.
        tools: Tool schemas, or None when the agent has no tools. An empty
            list is never sent.
        tool_choice: Tool-choice policy, or None to leave it unset. Only
            serialized alongside tools.
        parallel_tool_calls: Forwarded only when tools are present.
        stream: Whether the transport should stream fragments.
    """

    model: str
    messages: list[dict]
    tools: list[dict] | None = None
    tool_choice: str | dict | None = None
    parallel_tool_calls: bool | None = None
    stream: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the chat-completions JSON body, omitting unset keys."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": self.messages,
            "stream": self.stream,
        }
        if self.tools:
            payload["tools"] = self.tools
            if self.parallel_tool_calls is not None:
                payload["parallel_tool_calls"] = self.parallel_tool_calls
            # tool_choice without tools is rejected by OpenAI-compatible APIs
            if self.tool_choice is not None:
                payload["tool_choice"] = self.tool_choice
        return payload


def to_wire_message(message: Mapping[str, Any]) -> dict[str, Any]:
    """Copy the transport-relevant fields of a history message."""
    return {key: message[key] for key in _WIRE_MESSAGE_KEYS if key in message}


def build_request(
    agent: Agent,
    history: Sequence[Mapping[str, Any]],
    context: Mapping[str, Any],
    *,
    model_override: str | None = None,
    stream: bool = False,
) -> CompletionRequest:
    """Assemble the request for *agent*'s next turn.

    Instructions are resolved against *context* on every call, so a handoff
    or a context change alters the system prompt of the following turn.

    Args:
        agent: The active agent.
        history: Every message so far, oldest first.
        context: The run's current context.
        model_override: Model used instead of ``agent.model`` when set.
        stream: Ask the transport to stream.

    Returns:
        A CompletionRequest ready for the transport.
    """
    instructions = agent.resolve_instructions(context)
    messages = [{"role": "system", "content": instructions}]
    messages.extend(to_wire_message(m) for m in history)

    tools = [tool.to_openai() for tool in agent.tools]

    tool_choice = agent.tool_choice
    if tools and agent.parallel_tool_calls:
        tool_choice = "auto"

    return CompletionRequest(
        model=model_override or agent.model,
        messages=messages,
        tools=tools or None,
        tool_choice=tool_choice,
        parallel_tool_calls=agent.parallel_tool_calls if tools else None,
        stream=stream,
    )
