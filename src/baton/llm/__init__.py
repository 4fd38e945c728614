"""Transport infrastructure for Baton.

Provides the CompletionTransport protocol and an OpenAI-compatible async
HTTP client implementing it.
"""

from baton.llm.client import OpenAIClient
from baton.llm.config import ClientConfig
from baton.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMHTTPError,
    LLMRateLimitError,
    LLMResponseError,
)
from baton.llm.protocols import CompletionReply, CompletionTransport

__all__ = [
    "OpenAIClient",
    "ClientConfig",
    "CompletionTransport",
    "CompletionReply",
    "LLMClientError",
    "LLMConfigError",
    "LLMHTTPError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
]
