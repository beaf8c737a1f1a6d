"""Database persistence layer for litestar-chatflows.

This module provides the SQLAlchemy model, repository and context store used to
persist conversations across processes and restarts.

Requires the [db] extra:
    pip install litestar-chatflows[db]
"""

from __future__ import annotations

from litestar_chatflows.db.models import WorkflowContextModel
from litestar_chatflows.db.repositories import WorkflowContextRepository
from litestar_chatflows.db.store import SQLAlchemyContextStore

__all__ = [
    "SQLAlchemyContextStore",
    "WorkflowContextModel",
    "WorkflowContextRepository",
]
