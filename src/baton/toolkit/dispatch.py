"""ToolDispatcher: executes the tool calls of one assistant message.

Looks each call up by name in the active agent's tool table, invokes the
handler with the decoded arguments, normalizes the return value, and
collects tool-response messages, a merged context patch and the last
handoff target.
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from baton.context import ContextStore
from baton.exceptions import ToolExecutionError
from baton.results import normalize_result
from baton.toolkit.models import Tool, ToolCall, ToolMessage
from baton.toolkit.schema import CONTEXT_PARAM

if TYPE_CHECKING:
    from baton.agents import Agent

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Everything one dispatch produced.

    Attributes:
        messages: One tool-response message per input call, in call order.
        context_variables: Merged context patch; later calls win on collision.
        agent: Handoff target from the last call that returned one.
    """

    messages: list[dict] = field(default_factory=list)
    context_variables: dict[str, Any] = field(default_factory=dict)
    agent: Agent | None = None


def not_found_message(call: ToolCall) -> dict:
    return ToolMessage(
        tool_call_id=call.id,
        name=call.name,
        content=f"Error: Tool {call.name} not found.",
    ).to_dict()


class ToolDispatcher:
    """Runs tool calls strictly in order against a fixed tool table.

    Usage::

        dispatcher = ToolDispatcher(agent.tools)
        result = await dispatcher.dispatch(message["tool_calls"], context)
        history.extend(result.messages)
    """

    def __init__(self, tools: Sequence[Tool], *, debug: bool = False) -> None:
        self._tools: dict[str, Tool] = {tool.name: tool for tool in tools}
        self._debug = debug

    def available_tools(self) -> list[str]:
        """Return the names of all dispatchable tools."""
        return list(self._tools.keys())

    async def dispatch(
        self,
        tool_calls: Sequence[dict | ToolCall],
        context: Mapping[str, Any],
    ) -> DispatchResult:
        """Execute *tool_calls* sequentially and collect their results.

        Arguments of every known tool are decoded before any handler runs,
        so malformed arguments fail the dispatch without side effects.

        Args:
            tool_calls: Tool calls in wire format or as ToolCall objects.
            context: The run's current context.

        Returns:
            DispatchResult with messages, merged patch and handoff agent.

        Raises:
            ToolArgumentsError: If any call's arguments are not a JSON object.
            ToolExecutionError: If a handler raises.
            ResultCoercionError: If a return value cannot be stringified.
        """
        calls = [tc if isinstance(tc, ToolCall) else ToolCall.from_openai(tc) for tc in tool_calls]
        parsed: dict[int, dict[str, Any]] = {
            i: call.parse_arguments() for i, call in enumerate(calls) if call.name in self._tools
        }

        result = DispatchResult()
        for i, call in enumerate(calls):
            tool = self._tools.get(call.name)
            if tool is None:
                logger.warning("Tool %s not found in tool table", call.name)
                result.messages.append(not_found_message(call))
                continue

            arguments = parsed[i]
            if self._debug:
                logger.debug("Processing tool call: %s with arguments %s", call.name, arguments)

            raw = await self._invoke(tool, arguments, _context_view(context, result.context_variables))
            normalized = normalize_result(raw, tool_name=tool.name)

            result.messages.append(
                ToolMessage(
                    tool_call_id=call.id,
                    name=call.name,
                    content=normalized.value,
                ).to_dict()
            )
            result.context_variables.update(normalized.context_variables)
            if normalized.agent is not None:
                result.agent = normalized.agent
        return result

    async def _invoke(self, tool: Tool, arguments: dict[str, Any], context: Mapping[str, Any]) -> Any:
        kwargs = dict(arguments)
        if tool.wants_context:
            kwargs[CONTEXT_PARAM] = context
        else:
            kwargs.pop(CONTEXT_PARAM, None)
        try:
            value = tool.handler(**kwargs)
            if inspect.isawaitable(value):
                value = await value
        except Exception as exc:
            logger.debug("Tool %s failed: %s", tool.name, exc, exc_info=True)
            raise ToolExecutionError(tool.name, exc) from exc
        return value


def _context_view(context: Mapping[str, Any], pending: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only context as later calls in the same turn should see it."""
    if isinstance(context, ContextStore):
        return context.overlay(pending)
    return MappingProxyType(copy.deepcopy({**context, **pending}))
