"""Shared test fixtures for Baton."""

from __future__ import annotations

import pytest

from baton import Agent


@pytest.fixture()
def plain_agent() -> Agent:
    """Agent with no tools."""
    return Agent(name="Helper", instructions="You are helpful.")


@pytest.fixture()
def user_hello() -> list[dict]:
    return [{"role": "user", "content": "Hello"}]
