"""Orchestrator result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from baton.agents import Agent


@dataclass(frozen=True)
class Response:
    """Final result of an orchestrator run.

    Frozen: the result is immutable once the run completes.

    Attributes:
        messages: Messages appended during this run, in order.
        agent: The agent active when the run ended.
        context_variables: The final context.
    """

    messages: list[dict] = field(default_factory=list)
    agent: Agent | None = None
    context_variables: dict[str, Any] = field(default_factory=dict)

    @property
    def last_message(self) -> dict | None:
        return self.messages[-1] if self.messages else None

    @property
    def assistant_messages(self) -> list[dict]:
        """Return the assistant messages of this run."""
        return [m for m in self.messages if m.get("role") == "assistant"]

    def pprint(self, *, file: Any = None) -> None:
        """Pretty-print the run's messages and final state."""
        from baton.formatting import pprint_response

        pprint_response(self, file=file)
