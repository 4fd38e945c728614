"""Tests for the baton.llm package.

Tests cover:
- OpenAIClient: request formatting, retry behavior, auth errors, SSE streaming
- ClientConfig: env fallback and validation
- CompletionTransport protocol conformance
- Error hierarchy: correct inheritance, error attributes
"""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import ValidationError

from baton import Agent, BatonError, CompletionRequest, Orchestrator
from baton.llm import (
    ClientConfig,
    CompletionTransport,
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMHTTPError,
    LLMRateLimitError,
    LLMResponseError,
    OpenAIClient,
)
from baton.llm.config import API_KEY_ENV, BASE_URL_ENV
from tests.fakes import ScriptedTransport, text_completion


# ---------------------------------------------------------------------------
# Fixtures and helpers
# ---------------------------------------------------------------------------

def _make_client(handler, max_retries: int = 3, **kwargs) -> OpenAIClient:
    """Create an OpenAIClient backed by an httpx.MockTransport."""
    return OpenAIClient(
        api_key="test-key",
        base_url="http://test-api/",
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _request(stream: bool = False, model: str = "gpt-4o-mini") -> CompletionRequest:
    return CompletionRequest(
        model=model,
        messages=[{"role": "user", "content": "Test"}],
        stream=stream,
    )


def _sse(*events: object) -> bytes:
    lines = []
    for event in events:
        data = event if isinstance(event, str) else json.dumps(event)
        lines.append(f"data: {data}\n\n")
    return "".join(lines).encode()


# ===========================================================================
# Error hierarchy tests
# ===========================================================================

class TestErrorHierarchy:
    """All transport errors are catchable as BatonError."""

    @pytest.mark.parametrize(
        "error_cls",
        [LLMConfigError, LLMRateLimitError, LLMAuthError, LLMResponseError],
    )
    def test_inherits_client_error(self, error_cls):
        assert issubclass(error_cls, LLMClientError)
        assert issubclass(error_cls, BatonError)

    def test_rate_limit_error_has_retry_after(self):
        err = LLMRateLimitError("slow down", retry_after=2.5)
        assert err.retry_after == 2.5
        assert "2.5" in str(err)

    def test_rate_limit_error_no_retry_after(self):
        assert LLMRateLimitError().retry_after is None

    @pytest.mark.parametrize("error_cls", [LLMAuthError, LLMRateLimitError])
    def test_http_errors_carry_status_and_body(self, error_cls):
        assert issubclass(error_cls, LLMHTTPError)
        err = error_cls("denied", status_code=403, body="no key")
        assert err.status_code == 403
        assert err.body == "no key"
        assert "HTTP 403 - no key" in str(err)

    def test_response_error_keeps_payload(self):
        err = LLMResponseError("bad", payload={"id": "x"})
        assert err.payload == {"id": "x"}


# ===========================================================================
# Non-streaming completions
# ===========================================================================

class TestOpenAIClientComplete:

    @pytest.mark.asyncio
    async def test_complete_success(self):
        client = _make_client(lambda request: httpx.Response(200, json=text_completion("Hello!")))
        reply = await client.complete(_request())
        assert reply["choices"][0]["message"]["content"] == "Hello!"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_request_format(self):
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=text_completion())

        async with _make_client(handler) as client:
            await client.complete(_request())

        assert captured["url"] == "http://test-api/chat/completions"
        assert captured["auth"] == "Bearer test-key"
        assert captured["body"] == {
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "Test"}],
            "stream": False,
        }

    @pytest.mark.asyncio
    async def test_default_model_fills_empty(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=text_completion())

        async with _make_client(handler, default_model="fallback-model") as client:
            await client.complete(_request(model=""))

        assert bodies[0]["model"] == "fallback-model"

    @pytest.mark.asyncio
    async def test_missing_choices_raises(self):
        client = _make_client(lambda request: httpx.Response(200, json={"id": "x"}))
        with pytest.raises(LLMResponseError) as exc_info:
            await client.complete(_request())
        await client.aclose()
        assert exc_info.value.payload == {"id": "x"}

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        client = _make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(LLMResponseError) as exc_info:
            await client.complete(_request())
        await client.aclose()
        assert exc_info.value.payload == "<html>oops</html>"


class TestOpenAIClientRetry:
    """Test retry behavior with different HTTP status codes."""

    @pytest.mark.asyncio
    async def test_retry_on_429_then_success(self):
        call_count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                return httpx.Response(429, json={"error": "rate limited"})
            return httpx.Response(200, json=text_completion())

        async with _make_client(handler, max_retries=2) as client:
            reply = await client.complete(_request())

        assert call_count == 2
        assert "choices" in reply

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_no_retry_on_auth_error(self, status):
        call_count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal call_count
            call_count += 1
            return httpx.Response(status, json={"error": "denied"})

        async with _make_client(handler) as client:
            with pytest.raises(LLMAuthError) as exc_info:
                await client.complete(_request())

        assert call_count == 1
        assert exc_info.value.status_code == status
        assert "denied" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_no_retry_on_400(self):
        call_count = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal call_count
            call_count += 1
            return httpx.Response(400, json={"error": "bad request"})

        async with _make_client(handler) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.complete(_request())

        assert call_count == 1

    @pytest.mark.asyncio
    async def test_rate_limit_surfaces_retry_after(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={}, headers={"Retry-After": "4"})

        async with _make_client(handler, max_retries=1) as client:
            with pytest.raises(LLMRateLimitError) as exc_info:
                await client.complete(_request())

        assert exc_info.value.retry_after == 4.0
        assert exc_info.value.status_code == 429


# ===========================================================================
# Streaming
# ===========================================================================

class TestOpenAIClientStreaming:

    @pytest.mark.asyncio
    async def test_sse_chunks(self):
        body = _sse(
            {"choices": [{"delta": {"role": "assistant", "content": "He"}}]},
            {"choices": [{"delta": {"content": "y"}}]},
            "[DONE]",
        )
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(json.loads(request.content))
            return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

        async with _make_client(handler) as client:
            stream = await client.complete(_request(stream=True))
            chunks = [c async for c in stream]

        assert captured[0]["stream"] is True
        assert [c["choices"][0]["delta"].get("content") for c in chunks] == ["He", "y"]

    @pytest.mark.asyncio
    async def test_malformed_chunk_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=_sse("{not json"))

        async with _make_client(handler) as client:
            stream = await client.complete(_request(stream=True))
            with pytest.raises(LLMResponseError) as exc_info:
                async for _ in stream:
                    pass

        assert exc_info.value.payload == "{not json"

    @pytest.mark.asyncio
    async def test_stream_auth_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="nope")

        async with _make_client(handler) as client:
            stream = await client.complete(_request(stream=True))
            with pytest.raises(LLMAuthError) as exc_info:
                async for _ in stream:
                    pass

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "nope"

    @pytest.mark.asyncio
    async def test_orchestrator_over_http(self):
        body = _sse(
            {"choices": [{"delta": {"role": "assistant", "content": "Hi "}}]},
            {"choices": [{"delta": {"content": "there"}}]},
            {"choices": [], "usage": {"total_tokens": 3}},
            "[DONE]",
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        async with _make_client(handler) as client:
            orch = Orchestrator(client)
            response = await orch.run(
                Agent(name="Helper"),
                [{"role": "user", "content": "Hello"}],
                stream=True,
            )

        assert response.messages[0]["content"] == "Hi there"
        assert response.messages[0]["sender"] == "Helper"


# ===========================================================================
# Configuration
# ===========================================================================

class TestClientConfig:

    def test_env_var_api_key(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "env-key-123")
        monkeypatch.delenv(BASE_URL_ENV, raising=False)
        client = OpenAIClient()
        assert client.config.api_key == "env-key-123"
        assert client.config.base_url == "https://api.openai.com/v1"

    def test_env_var_base_url(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "k")
        monkeypatch.setenv(BASE_URL_ENV, "http://custom-api/v1/")
        assert ClientConfig.from_env().base_url == "http://custom-api/v1"

    def test_constructor_overrides_env(self, monkeypatch):
        monkeypatch.setenv(API_KEY_ENV, "env-key")
        monkeypatch.setenv(BASE_URL_ENV, "http://env-url/v1")
        config = ClientConfig.from_env(api_key="explicit", base_url="http://explicit/v1")
        assert config.api_key == "explicit"
        assert config.base_url == "http://explicit/v1"

    def test_missing_api_key_raises(self, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        with pytest.raises(LLMConfigError):
            OpenAIClient()

    @pytest.mark.parametrize("field", [{"timeout": 0}, {"max_retries": 0}])
    def test_invalid_values_rejected(self, field):
        with pytest.raises(ValidationError):
            ClientConfig(api_key="k", **field)

    def test_explicit_config_wins(self):
        config = ClientConfig(api_key="cfg-key", default_model="m")
        client = OpenAIClient(api_key="ignored", config=config)
        assert client.config is config


class TestProtocol:

    def test_builtin_client_conforms(self):
        client = OpenAIClient(api_key="k")
        assert isinstance(client, CompletionTransport)

    def test_scripted_transport_conforms(self):
        assert isinstance(ScriptedTransport([]), CompletionTransport)
