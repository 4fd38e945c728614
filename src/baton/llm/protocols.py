"""Transport protocol.

Any object with an async ``complete()`` and ``aclose()`` can drive a run.
The built-in OpenAIClient implements this protocol.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from baton.request import CompletionRequest

CompletionReply = Union[dict, AsyncIterator[dict]]


@runtime_checkable
class CompletionTransport(Protocol):
    """Protocol for pluggable completion transports.

    ``complete()`` returns the full completion dict when
    ``request.stream`` is False. When it is True it returns a finite,
    non-restartable async iterator of chunk dicts, each carrying
    ``choices[0].delta``; exhausting the iterator is the end-of-stream
    signal.
    """

    async def complete(self, request: CompletionRequest) -> CompletionReply:
        """Send *request* and return a completion or a chunk stream."""
        ...

    async def aclose(self) -> None:
        """Release underlying resources."""
        ...
