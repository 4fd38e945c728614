"""Streaming delta merge.

Folds the partial message fragments of a streamed completion into one
accumulated assistant message. Merging is order-dependent: strings are
concatenated, so fragments must be applied exactly once, in arrival order.
"""

from __future__ import annotations

import copy
from typing import Any


def merge_fields(target: dict, source: dict) -> None:
    """Recursively merge *source* into *target* in place.

    String values are appended to the existing string, dict values are
    merged with the same rule, and every other type is left untouched.
    """
    for key, value in source.items():
        if isinstance(value, str):
            current = target.get(key)
            target[key] = (current if isinstance(current, str) else "") + value
        elif isinstance(value, dict):
            current = target.get(key)
            if not isinstance(current, dict):
                current = {}
                target[key] = current
            merge_fields(current, value)


def _empty_tool_call() -> dict:
    return {"id": "", "type": "", "function": {"name": "", "arguments": ""}}


def merge_chunk(final_response: dict, delta: dict) -> None:
    """Merge one streamed fragment into the accumulator.

    ``role`` is dropped before merging. Tool-call fragments are routed to
    the accumulator slot named by their positional ``index``; the index
    itself is not merged. ``final_response["tool_calls"]`` is a dict keyed
    by that index.

    *delta* is not modified.
    """
    delta = dict(delta)
    delta.pop("role", None)
    tool_calls = delta.pop("tool_calls", None)
    merge_fields(final_response, delta)

    if not tool_calls:
        return
    slots = final_response.setdefault("tool_calls", {})
    for fragment in tool_calls:
        fragment = copy.deepcopy(fragment)
        index = fragment.pop("index", 0)
        slot = slots.get(index)
        if slot is None:
            slot = _empty_tool_call()
            slots[index] = slot
        merge_fields(slot, fragment)


class StreamAccumulator:
    """Accumulates fragments for one streamed assistant message.

    Usage::

        acc = StreamAccumulator(sender="Triage")
        for delta in deltas:
            acc.add(delta)
        message = acc.materialize()

    The accumulator has no notion of "done"; the caller stops feeding it
    when the stream ends.
    """

    def __init__(self, sender: str | None = None) -> None:
        self._message: dict[str, Any] = {
            "role": "assistant",
            "content": "",
            "tool_calls": {},
        }
        self._sender = sender
        self.fragment_count = 0

    def add(self, delta: dict) -> None:
        merge_chunk(self._message, delta)
        self.fragment_count += 1

    def materialize(self) -> dict[str, Any]:
        """Return the accumulated message in the non-streaming wire shape.

        ``tool_calls`` becomes an ordered list, or None when no tool call
        was streamed.
        """
        message = copy.deepcopy(self._message)
        slots = message.pop("tool_calls")
        message["tool_calls"] = [slots[i] for i in sorted(slots)] or None
        if self._sender is not None:
            message["sender"] = self._sender
        return message


def extract_delta(chunk: dict) -> dict | None:
    """Return the delta of the first choice in a streamed chunk, if any.

    Chunks with no choices (e.g. trailing usage chunks) yield None.
    """
    choices = chunk.get("choices") or []
    if not choices:
        return None
    delta = choices[0].get("delta")
    return delta if isinstance(delta, dict) else None
