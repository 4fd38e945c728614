"""Run configuration.

RunConfig gathers the per-run switches of the turn loop: model override,
turn bound, tool execution, streaming and debug tracing.
"""

from __future__ import annotations

from dataclasses import dataclass

from baton.exceptions import OrchestratorError


@dataclass(frozen=True)
class RunConfig:
    """Configuration for a single orchestrator run.

    Attributes:
        model_override: Model used for every turn instead of the active
            agent's model. None keeps each agent's own model.
        max_turns: Upper bound on completions requested in this run.
            None means unbounded; 0 makes no model call at all.
        execute_tools: When False, tool calls are surfaced in the final
            assistant message but never executed.
        stream: Ask the transport to stream and merge the fragments.
        debug: Emit DEBUG-level trace records for each step.
    """

    model_override: str | None = None
    max_turns: int | None = None
    execute_tools: bool = True
    stream: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if self.max_turns is not None:
            if isinstance(self.max_turns, bool) or not isinstance(self.max_turns, int):
                raise OrchestratorError(
                    f"max_turns must be an int or None, got {type(self.max_turns).__name__}"
                )
            if self.max_turns < 0:
                raise OrchestratorError(f"max_turns must be >= 0, got {self.max_turns}")

    def turns_exhausted(self, turns_taken: int) -> bool:
        """Whether *turns_taken* has reached the configured bound."""
        return self.max_turns is not None and turns_taken >= self.max_turns
