"""Built-in OpenAI-compatible httpx client with tenacity retry.

Provides an async HTTP client for OpenAI-compatible chat completion APIs,
including server-sent-event streaming. Reads configuration from constructor
arguments or environment variables.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

import httpx
import tenacity

from baton.llm.config import ClientConfig
from baton.llm.errors import (
    LLMAuthError,
    LLMRateLimitError,
    LLMResponseError,
)

if TYPE_CHECKING:
    from baton.llm.protocols import CompletionReply
    from baton.request import CompletionRequest

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}
_SSE_PREFIX = "data:"
_SSE_DONE = "[DONE]"


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors.
    Not retryable: 401, 403, 400, other client errors.
    """
    if isinstance(exc, LLMAuthError):
        return False
    if isinstance(exc, LLMRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


def _parse_retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _check_status(response: httpx.Response, body: str) -> None:
    """Map error statuses to typed errors; raise httpx errors for the rest."""
    if response.status_code in _AUTH_ERROR_STATUS_CODES:
        raise LLMAuthError(
            "Authentication failed", status_code=response.status_code, body=body
        )
    if response.status_code == 429:
        raise LLMRateLimitError(
            "Rate limited",
            body=body,
            retry_after=_parse_retry_after(response),
        )
    response.raise_for_status()


class OpenAIClient:
    """Async httpx client for OpenAI-compatible chat completions.

    Implements the CompletionTransport protocol. Non-streaming requests are
    retried with exponential backoff for transient errors (429, 5xx).
    Authentication errors (401, 403) fail immediately. Streaming requests
    are never retried.

    Usage::

        async with OpenAIClient(api_key="sk-...") as client:
            reply = await client.complete(CompletionRequest(model="gpt-4o", messages=messages))
            print(reply["choices"][0]["message"]["content"])
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        *,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            api_key: API key. Falls back to BATON_OPENAI_API_KEY env var.
            base_url: API base URL. Falls back to BATON_OPENAI_BASE_URL env var,
                then to https://api.openai.com/v1.
            default_model: Model used when a request does not name one.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of attempts for retryable errors.
            config: A complete ClientConfig; the other settings are ignored.
            transport: Optional httpx transport (used in tests).

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._config = config or ClientConfig.from_env(
            api_key=api_key,
            base_url=base_url,
            default_model=default_model,
            timeout=timeout,
            max_retries=max_retries,
        )
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._config.api_key}",
            },
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def _url(self) -> str:
        return f"{self._config.base_url}/chat/completions"

    async def complete(self, request: CompletionRequest) -> CompletionReply:
        """Send a CompletionRequest.

        Returns:
            The response dict, or an async iterator of chunk dicts when
            ``request.stream`` is True.
        """
        payload = request.to_payload()
        if not payload.get("model"):
            payload["model"] = self._config.default_model
        if request.stream:
            return self._stream_chat(payload)
        return await self._retrying(payload)

    async def _retrying(self, payload: dict[str, Any]) -> dict:
        """Run _do_chat under tenacity.AsyncRetrying.

        Built programmatically (not as decorator) so that max_retries is
        configurable per-instance.
        """
        retryer = tenacity.AsyncRetrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._config.max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return await retryer(self._do_chat, payload)

    async def _do_chat(self, payload: dict[str, Any]) -> dict:
        """Execute a single chat completion request (no retry)."""
        response = await self._client.post(self._url, json=payload)
        _check_status(response, response.text)

        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise LLMResponseError(
                "Completion body is not JSON", payload=response.text
            ) from exc
        if not isinstance(data, dict) or "choices" not in data:
            raise LLMResponseError(
                f"Unexpected response format: missing 'choices' key. Response: {data}",
                payload=data,
            )
        return data

    async def _stream_chat(self, payload: dict[str, Any]) -> AsyncIterator[dict]:
        """Yield chunk dicts from a server-sent-event response."""
        async with self._client.stream("POST", self._url, json=payload) as response:
            if response.status_code >= 400:
                body = (await response.aread()).decode("utf-8", errors="replace")
                _check_status(response, body)

            async for line in response.aiter_lines():
                line = line.strip()
                if not line.startswith(_SSE_PREFIX):
                    continue
                data = line[len(_SSE_PREFIX):].strip()
                if data == _SSE_DONE:
                    break
                try:
                    chunk = json.loads(data)
                except json.JSONDecodeError as exc:
                    raise LLMResponseError(
                        f"Malformed stream chunk: {data!r}", payload=data
                    ) from exc
                yield chunk

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def __aenter__(self) -> OpenAIClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
