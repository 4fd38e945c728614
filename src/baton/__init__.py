"""Baton: multi-agent conversations with tool calls and handoffs.

Agents take turns against a chat-completion endpoint; tools they call can
update a shared context or hand the conversation to another agent.
"""

from baton._version import __version__

# Core entry point
from baton.orchestrator import Orchestrator, Response, RunConfig

# Agents and tools
from baton.agents import Agent, Instructions
from baton.toolkit import Tool, ToolCall, function_to_json
from baton.toolkit.dispatch import DispatchResult, ToolDispatcher

# Results and context
from baton.results import Result, normalize_result
from baton.context import ContextStore

# Requests and streaming
from baton.request import CompletionRequest, build_request
from baton.streaming import StreamAccumulator, merge_chunk, merge_fields

# Errors
from baton.exceptions import (
    BatonError,
    CompletionError,
    InstructionsError,
    OrchestratorError,
    ResultCoercionError,
    ToolArgumentsError,
    ToolError,
    ToolExecutionError,
)

__all__ = [
    "__version__",
    "Orchestrator",
    "Response",
    "RunConfig",
    "Agent",
    "Instructions",
    "Tool",
    "ToolCall",
    "function_to_json",
    "ToolDispatcher",
    "DispatchResult",
    "Result",
    "normalize_result",
    "ContextStore",
    "CompletionRequest",
    "build_request",
    "StreamAccumulator",
    "merge_chunk",
    "merge_fields",
    "BatonError",
    "CompletionError",
    "InstructionsError",
    "OrchestratorError",
    "ResultCoercionError",
    "ToolArgumentsError",
    "ToolError",
    "ToolExecutionError",
]
