"""Agent toolkit: tool definitions, schema generation, and dispatch.

Exposes Python callables as function-calling schemas and runs the tool
calls a model requests against an agent's tool table.
"""

from baton.toolkit.models import Tool, ToolCall, ToolMessage
from baton.toolkit.schema import (
    CONTEXT_PARAM,
    accepts_context,
    function_to_json,
    strip_context_param,
)


# Lazy import to avoid circular dependency (dispatch -> results -> agents -> toolkit.models)
def __getattr__(name: str):
    if name in ("ToolDispatcher", "DispatchResult"):
        from baton.toolkit import dispatch

        return getattr(dispatch, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Tool",
    "ToolCall",
    "ToolMessage",
    "ToolDispatcher",
    "DispatchResult",
    "CONTEXT_PARAM",
    "accepts_context",
    "function_to_json",
    "strip_context_param",
]
