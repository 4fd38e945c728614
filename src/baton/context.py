"""Shared context store threaded through a single run.

The store is a read-only ``Mapping`` from the outside. The only mutator is
:meth:`ContextStore.merge`, which the orchestrator calls with the context
patches returned by tool results. Reading never changes state.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any


class ContextStore(Mapping[str, Any]):
    """Key/value bag shared by every turn and tool call of one run.

    Usage::

        store = ContextStore({"user": "ada"})
        store.merge({"plan": "pro"})
        assert store.snapshot() == {"user": "ada", "plan": "pro"}
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        # Deep copy so the caller's mapping is never mutated by the run.
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ContextStore({self._data!r})"

    def merge(self, patch: Mapping[str, Any]) -> None:
        """Merge *patch* into the store. Colliding keys take the patch value."""
        for key in patch:
            if not isinstance(key, str):
                raise TypeError(
                    f"Context keys must be str, got {type(key).__name__}: {key!r}"
                )
        self._data.update(patch)

    def overlay(self, patch: Mapping[str, Any]) -> Mapping[str, Any]:
        """Return a read-only copy of the store with *patch* applied on top.

        Nested values are copied too, so nothing reachable from the view
        can change the store.
        """
        return MappingProxyType(copy.deepcopy({**self._data, **patch}))

    def view(self) -> Mapping[str, Any]:
        """Return a live read-only view of the store."""
        return MappingProxyType(self._data)

    def snapshot(self) -> dict[str, Any]:
        """Return a plain-dict copy of the current contents."""
        return dict(self._data)
