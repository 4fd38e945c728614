"""Tests for the streaming delta merger."""

from __future__ import annotations

from hypothesis import given

from baton import StreamAccumulator, merge_chunk, merge_fields
from baton.streaming import extract_delta
from tests.fakes import chunk
from tests.strategies import content_pieces


class TestMergeFields:
    def test_strings_concatenate(self):
        acc = {"content": ""}
        merge_fields(acc, {"content": "Hel"})
        merge_fields(acc, {"content": "lo"})
        assert acc["content"] == "Hello"

    def test_nested_dicts_merge_recursively(self):
        acc = {"function": {"name": "", "arguments": ""}}
        merge_fields(acc, {"function": {"name": "get_", "arguments": '{"ci'}})
        merge_fields(acc, {"function": {"name": "weather", "arguments": 'ty": "Oslo"}'}})
        assert acc["function"] == {"name": "get_weather", "arguments": '{"city": "Oslo"}'}

    def test_other_types_left_untouched(self):
        acc = {"content": "x", "refusal": None, "count": 1}
        merge_fields(acc, {"content": None, "count": 5, "flags": [1]})
        assert acc == {"content": "x", "refusal": None, "count": 1}

    def test_missing_or_null_string_slot_starts_empty(self):
        acc = {"content": None}
        merge_fields(acc, {"content": "a", "name": "b"})
        assert acc == {"content": "a", "name": "b"}

    def test_not_idempotent(self):
        acc = {"content": ""}
        fragment = {"content": "ab"}
        merge_fields(acc, fragment)
        merge_fields(acc, fragment)
        assert acc["content"] == "abab"


class TestMergeChunk:
    def test_role_is_discarded(self):
        acc = {"role": "assistant", "content": ""}
        merge_chunk(acc, {"role": "assistant", "content": "Hi"})
        merge_chunk(acc, {"role": "assistant", "content": "!"})
        assert acc["role"] == "assistant"
        assert acc["content"] == "Hi!"

    def test_fragment_is_not_mutated(self):
        fragment = {
            "role": "assistant",
            "tool_calls": [{"index": 0, "id": "call_1", "function": {"name": "f"}}],
        }
        merge_chunk({"content": "", "tool_calls": {}}, fragment)
        assert fragment["role"] == "assistant"
        assert fragment["tool_calls"][0]["index"] == 0

    def test_tool_calls_addressed_by_index(self):
        acc = {"content": "", "tool_calls": {}}
        merge_chunk(acc, {"tool_calls": [{"index": 0, "id": "call_a", "type": "function",
                                          "function": {"name": "alpha", "arguments": ""}}]})
        merge_chunk(acc, {"tool_calls": [{"index": 1, "id": "call_b", "type": "function",
                                          "function": {"name": "beta", "arguments": ""}}]})
        merge_chunk(acc, {"tool_calls": [{"index": 0, "function": {"arguments": '{"x": '}}]})
        merge_chunk(acc, {"tool_calls": [{"index": 1, "function": {"arguments": "{}"}}]})
        merge_chunk(acc, {"tool_calls": [{"index": 0, "function": {"arguments": "1}"}}]})

        assert acc["tool_calls"][0] == {
            "id": "call_a",
            "type": "function",
            "function": {"name": "alpha", "arguments": '{"x": 1}'},
        }
        assert acc["tool_calls"][1]["function"] == {"name": "beta", "arguments": "{}"}
        assert "index" not in acc["tool_calls"][0]


class TestStreamAccumulator:
    def test_plain_text_message(self):
        acc = StreamAccumulator(sender="Helper")
        acc.add({"role": "assistant", "content": "Hel"})
        acc.add({"content": "lo"})
        message = acc.materialize()
        assert message == {
            "role": "assistant",
            "content": "Hello",
            "tool_calls": None,
            "sender": "Helper",
        }
        assert acc.fragment_count == 2

    def test_tool_calls_materialize_as_ordered_list(self):
        acc = StreamAccumulator()
        acc.add({"tool_calls": [{"index": 1, "id": "b", "function": {"name": "second"}}]})
        acc.add({"tool_calls": [{"index": 0, "id": "a", "function": {"name": "first"}}]})
        message = acc.materialize()
        assert [tc["id"] for tc in message["tool_calls"]] == ["a", "b"]
        assert "sender" not in message

    def test_materialize_does_not_expose_internal_state(self):
        acc = StreamAccumulator()
        acc.add({"content": "a"})
        first = acc.materialize()
        first["content"] = "changed"
        assert acc.materialize()["content"] == "a"

    @given(pieces=content_pieces)
    def test_content_is_concatenation_in_arrival_order(self, pieces):
        acc = StreamAccumulator()
        for piece in pieces:
            acc.add({"content": piece})
        assert acc.materialize()["content"] == "".join(pieces)


class TestExtractDelta:
    def test_returns_first_choice_delta(self):
        assert extract_delta(chunk(content="x")) == {"content": "x"}

    def test_chunk_without_choices(self):
        assert extract_delta({"choices": [], "usage": {"total_tokens": 3}}) is None
        assert extract_delta({}) is None
