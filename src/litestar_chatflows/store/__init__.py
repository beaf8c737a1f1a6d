"""Context store implementations.

The SQLAlchemy-backed store lives in :mod:`litestar_chatflows.db` and requires the
``db`` extra.
"""

from __future__ import annotations

from litestar_chatflows.store.memory import InMemoryContextStore

__all__ = ["InMemoryContextStore"]
