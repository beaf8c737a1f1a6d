"""In-memory context store.

Contexts are stored as serialized snapshots, so callers never share mutable
state with the store, exactly as with a database-backed store.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any
from uuid import uuid4

from litestar_chatflows.core.context import WorkflowContext

__all__ = ["InMemoryContextStore"]


class InMemoryContextStore:
    """Process-local :class:`ContextStore` for development, tests and single-instance bots.

    Attributes:
        save_count: Number of saves, handy in tests.
        load_count: Number of loads, handy in tests.

    Example:
        >>> store = InMemoryContextStore()
        >>> await store.save_workflow_context("u1", context)
        >>> (await store.load_workflow_context("u1")).current_state
        'ask_name'
    """

    def __init__(self) -> None:
        self._current: dict[str, dict[str, Any]] = {}
        self._archive: defaultdict[str, list[dict[str, Any]]] = defaultdict(list)
        self.save_count = 0
        self.load_count = 0

    async def save_workflow_context(self, user_id: str, context: WorkflowContext) -> None:
        """Store a snapshot; terminal contexts move to the archive.

        Contexts saved for the first time get a ``record_id``.
        """
        self.save_count += 1
        if context.record_id is None:
            context.record_id = uuid4()
        snapshot = context.to_dict()
        if not context.status.is_terminal:
            self._current[user_id] = snapshot
            return

        current = self._current.get(user_id)
        if current is not None and WorkflowContext.from_dict(current).is_same_instance(context):
            del self._current[user_id]
        self._archive[user_id].append(snapshot)

    async def load_workflow_context(self, user_id: str) -> WorkflowContext | None:
        """Return a copy of the user's current context."""
        self.load_count += 1
        snapshot = self._current.get(user_id)
        return WorkflowContext.from_dict(snapshot) if snapshot is not None else None

    def archived(self, user_id: str) -> list[WorkflowContext]:
        """Terminal contexts of a user, oldest first."""
        return [WorkflowContext.from_dict(snapshot) for snapshot in self._archive.get(user_id, [])]

    def clear(self) -> None:
        self._current.clear()
        self._archive.clear()
