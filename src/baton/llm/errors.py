"""Errors raised by the chat-completions transport.

HTTP failures keep the status code and response body so callers can
log or branch on them without re-parsing the message.
"""

from __future__ import annotations

from typing import Any

from baton.exceptions import BatonError


class LLMClientError(BatonError):
    """Base for every transport failure."""


class LLMConfigError(LLMClientError):
    """The client cannot be built, e.g. no API key anywhere."""


class LLMHTTPError(LLMClientError):
    """The endpoint answered with an error status.

    Attributes:
        status_code: HTTP status of the response.
        body: Response text, possibly truncated by the server.
    """

    def __init__(self, message: str, *, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"{message}: HTTP {status_code} - {body}")


class LLMAuthError(LLMHTTPError):
    """401 or 403. Never retried."""


class LLMRateLimitError(LLMHTTPError):
    """429. Retried until attempts run out.

    Attributes:
        retry_after: Seconds from the ``Retry-After`` header, or None.
    """

    def __init__(
        self,
        message: str = "Rate limited",
        *,
        status_code: int = 429,
        body: str = "",
        retry_after: float | None = None,
    ) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message, status_code=status_code, body=body)


class LLMResponseError(LLMClientError):
    """A 2xx response, or a stream chunk, that is not a usable completion.

    Attributes:
        payload: The decoded body or raw chunk text that was rejected.
    """

    def __init__(self, message: str, *, payload: Any = None) -> None:
        self.payload = payload
        super().__init__(message)
