"""Orchestrator package -- the multi-agent turn loop and its types.

Provides the Orchestrator class, run configuration, and the Response
returned by a run.
"""

from baton.orchestrator.config import RunConfig
from baton.orchestrator.loop import Orchestrator
from baton.orchestrator.models import Response

__all__ = [
    "Orchestrator",
    "RunConfig",
    "Response",
]
