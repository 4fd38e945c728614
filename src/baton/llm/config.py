"""Transport configuration.

ClientConfig holds the settings of the built-in OpenAI-compatible client,
with environment-variable fallback for the API key and base URL.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from baton.llm.errors import LLMConfigError

API_KEY_ENV = "BATON_OPENAI_API_KEY"
BASE_URL_ENV = "BATON_OPENAI_BASE_URL"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


class ClientConfig(BaseModel):
    """Settings for :class:`~baton.llm.client.OpenAIClient`.

    Example::

        from baton.llm import ClientConfig
        config = ClientConfig(api_key="sk-...", timeout=30.0)
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    base_url: str = DEFAULT_BASE_URL
    default_model: str = "gpt-4o"
    timeout: float = Field(default=120.0, gt=0)
    max_retries: int = Field(default=3, ge=1)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build a config, filling unset values from the environment.

        Args:
            **overrides: Explicit field values. ``None`` means "not given".

        Raises:
            LLMConfigError: If no API key is given or found in the environment.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        values.setdefault("api_key", os.environ.get(API_KEY_ENV, ""))
        values.setdefault("base_url", os.environ.get(BASE_URL_ENV, DEFAULT_BASE_URL))
        if not values["api_key"]:
            raise LLMConfigError(
                f"No API key provided. Pass api_key= or set {API_KEY_ENV} "
                "environment variable."
            )
        return cls(**values)
