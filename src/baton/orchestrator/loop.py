"""Core turn-taking loop.

Provides the Orchestrator class that runs a multi-agent conversation:
request a completion for the active agent, execute the tool calls it asks
for, fold their context patches into the shared context, switch agents on
handoff, repeat until the model stops calling tools or the turn bound is
reached.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from baton.context import ContextStore
from baton.exceptions import CompletionError
from baton.orchestrator.config import RunConfig
from baton.orchestrator.models import Response
from baton.request import build_request
from baton.streaming import StreamAccumulator, extract_delta
from baton.toolkit.dispatch import ToolDispatcher

if TYPE_CHECKING:
    from baton.agents import Agent
    from baton.llm.protocols import CompletionTransport

logger = logging.getLogger(__name__)


class Orchestrator:
    """Drives runs of one or more agents against a completion transport.

    An Orchestrator holds no per-run state; independent runs may share one
    instance concurrently as long as the transport allows it.

    Usage::

        from baton import Agent, Orchestrator

        orch = Orchestrator(client)
        response = await orch.run(agent, [{"role": "user", "content": "Hi"}])
        print(response.messages[-1]["content"])
    """

    def __init__(self, client: CompletionTransport | None = None) -> None:
        if client is None:
            from baton.llm.client import OpenAIClient

            client = OpenAIClient()
        self._client = client

    @property
    def client(self) -> CompletionTransport:
        return self._client

    async def aclose(self) -> None:
        """Close the transport."""
        await self._client.aclose()

    async def __aenter__(self) -> Orchestrator:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        agent: Agent,
        messages: Sequence[Mapping[str, Any]],
        context_variables: Mapping[str, Any] | None = None,
        *,
        model_override: str | None = None,
        stream: bool = False,
        debug: bool = False,
        max_turns: int | None = None,
        execute_tools: bool = True,
    ) -> Response:
        """Run the conversation until the model stops calling tools.

        1. Build a request for the active agent and send it
        2. Tag the assistant message with the agent's name and record it
        3. Stop if it has no tool calls or tool execution is disabled
        4. Otherwise dispatch the calls, merge context, apply any handoff
        5. Repeat unless ``max_turns`` completions have been requested

        Args:
            agent: The agent active at the start of the run.
            messages: Prior conversation, oldest first. Not modified.
            context_variables: Initial context. Not modified.
            model_override: Model used instead of each agent's own.
            stream: Stream each completion and merge the fragments.
            debug: Emit DEBUG-level trace records.
            max_turns: Bound on completions requested. None is unbounded.
            execute_tools: When False, stop at the first assistant message.

        Returns:
            Response with the appended messages, final agent and context.

        Raises:
            OrchestratorError: If ``max_turns`` is invalid.
            CompletionError: If the transport returns no usable message.
            ToolError: If a tool call cannot be dispatched.
        """
        config = RunConfig(
            model_override=model_override,
            max_turns=max_turns,
            execute_tools=execute_tools,
            stream=stream,
            debug=debug,
        )
        events = self._events(agent, messages, context_variables, config, emit=False)
        async with contextlib.aclosing(events):
            async for event in events:
                if "response" in event:
                    return event["response"]
        raise CompletionError("Run ended without producing a response")  # pragma: no cover

    def run_sync(
        self,
        agent: Agent,
        messages: Sequence[Mapping[str, Any]],
        context_variables: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Response:
        """Blocking wrapper around :meth:`run` for code without an event loop."""
        return asyncio.run(self.run(agent, messages, context_variables, **kwargs))

    async def stream_events(
        self,
        agent: Agent,
        messages: Sequence[Mapping[str, Any]],
        context_variables: Mapping[str, Any] | None = None,
        *,
        model_override: str | None = None,
        debug: bool = False,
        max_turns: int | None = None,
        execute_tools: bool = True,
    ) -> AsyncIterator[dict[str, Any]]:
        """Run with streaming and yield progress events as they arrive.

        Per turn: ``{"delim": "start"}``, every fragment tagged with
        ``sender``, then ``{"delim": "end"}``. Last of all:
        ``{"response": Response}``. Closing the iterator early also closes
        the transport stream of the current turn.
        """
        config = RunConfig(
            model_override=model_override,
            max_turns=max_turns,
            execute_tools=execute_tools,
            stream=True,
            debug=debug,
        )
        events = self._events(agent, messages, context_variables, config, emit=True)
        async with contextlib.aclosing(events):
            async for event in events:
                yield event

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    async def _events(
        self,
        agent: Agent,
        messages: Sequence[Mapping[str, Any]],
        context_variables: Mapping[str, Any] | None,
        config: RunConfig,
        *,
        emit: bool,
    ) -> AsyncIterator[dict[str, Any]]:
        active_agent = agent
        history: list[dict] = [copy.deepcopy(dict(m)) for m in messages]
        init_len = len(history)
        context = ContextStore(context_variables)
        turns = 0

        while not config.turns_exhausted(turns):
            request = build_request(
                active_agent,
                history,
                context,
                model_override=config.model_override,
                stream=config.stream,
            )
            self._trace(config, "Getting chat completion for...: %s", request.messages)
            reply = await self._client.complete(request)
            turns += 1

            if config.stream:
                accumulator = StreamAccumulator(sender=active_agent.name)
                async with _closing(reply) as chunks:
                    if emit:
                        yield {"delim": "start"}
                    async for chunk in chunks:
                        delta = extract_delta(chunk)
                        if delta is None:
                            continue
                        accumulator.add(delta)
                        if emit:
                            yield {**delta, "sender": active_agent.name}
                if emit:
                    yield {"delim": "end"}
                if accumulator.fragment_count == 0:
                    raise CompletionError(
                        f"Stream for agent '{active_agent.name}' ended without any fragment"
                    )
                message = accumulator.materialize()
            else:
                message = self._first_message(reply)
                message["sender"] = active_agent.name

            self._trace(config, "Received completion: %s", message)
            history.append(message)

            if not message.get("tool_calls") or not config.execute_tools:
                self._trace(config, "Ending turn.")
                break

            dispatcher = ToolDispatcher(active_agent.tools, debug=config.debug)
            partial = await dispatcher.dispatch(message["tool_calls"], context)
            history.extend(partial.messages)
            context.merge(partial.context_variables)
            if partial.agent is not None:
                self._trace(config, "Handoff: %s -> %s", active_agent.name, partial.agent.name)
                active_agent = partial.agent

        yield {
            "response": Response(
                messages=history[init_len:],
                agent=active_agent,
                context_variables=context.snapshot(),
            )
        }

    @staticmethod
    def _first_message(reply: Any) -> dict:
        """Copy the first choice's message out of a completion dict."""
        try:
            message = reply["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionError(f"Completion has no message: {reply!r}") from exc
        if not isinstance(message, Mapping):
            raise CompletionError(f"Completion message is not an object: {message!r}")
        return copy.deepcopy(dict(message))

    @staticmethod
    def _trace(config: RunConfig, msg: str, *args: Any) -> None:
        if config.debug:
            logger.debug(msg, *args)


def _closing(stream: Any) -> contextlib.AbstractAsyncContextManager:
    """Close *stream* on exit when it supports ``aclose``."""
    if hasattr(stream, "aclose"):
        return contextlib.aclosing(stream)
    return contextlib.nullcontext(stream)
