"""Per-user locks ensuring a single writer per conversation."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

__all__ = ["UserLockManager"]


class UserLockManager:
    """Hands out one :class:`asyncio.Lock` per user id.

    Steps for the same user run one after the other; different users never wait
    on each other. A lock is discarded once nobody holds or awaits it.

    Example:
        >>> locks = UserLockManager()
        >>> async with locks.acquire("237690000000"):
        ...     ...
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, user_id: str) -> AsyncIterator[None]:
        """Hold the lock of ``user_id`` for the duration of the block."""
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._waiters[user_id] = self._waiters.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[user_id] -= 1
            if not self._waiters[user_id]:
                del self._waiters[user_id]
                del self._locks[user_id]

    def is_locked(self, user_id: str) -> bool:
        """Whether a step for ``user_id`` is currently running."""
        lock = self._locks.get(user_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
