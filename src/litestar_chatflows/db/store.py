"""Database-backed context store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflows.core.context import Step, WorkflowContext
from litestar_chatflows.db.models import WorkflowContextModel
from litestar_chatflows.db.repositories import WorkflowContextRepository

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

__all__ = ["SQLAlchemyContextStore"]

logger = logging.getLogger(__name__)


class SQLAlchemyContextStore:
    """:class:`ContextStore` persisting contexts with SQLAlchemy.

    Every call runs in its own session and transaction, so the store can be shared
    by all requests of an application.

    Args:
        session_maker: Factory for async sessions bound to the database.

    Example:
        >>> engine = create_async_engine("sqlite+aiosqlite:///chatflows.db")
        >>> store = SQLAlchemyContextStore(async_sessionmaker(engine, expire_on_commit=False))
        >>> workflow_engine = WorkflowEngine(registry, store)
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def save_workflow_context(self, user_id: str, context: WorkflowContext) -> None:
        """Insert or update the row of ``context``.

        The row is found through ``context.record_id`` or, for contexts built
        elsewhere, as the user's open row of the same run. The row id is written
        back to ``context.record_id``.
        """
        async with self._session_maker() as session, session.begin():
            repository = WorkflowContextRepository(session=session)
            model = None
            if context.record_id is not None:
                model = await repository.get_one_or_none(id=context.record_id)
            if model is None:
                current = await repository.get_current(user_id, for_update=True)
                if current is not None and _to_context(current).is_same_instance(context):
                    model = current

            if model is None:
                model = WorkflowContextModel(user_id=user_id)
                _apply(model, context)
                model = await repository.add(model)
                logger.debug(
                    "Inserted workflow context",
                    extra={"user_id": user_id, "workflow_id": context.workflow_id, "record_id": str(model.id)},
                )
            else:
                _apply(model, context)
                await session.flush()

            context.record_id = model.id

    async def load_workflow_context(self, user_id: str) -> WorkflowContext | None:
        """Load the user's active or paused context."""
        async with self._session_maker() as session:
            repository = WorkflowContextRepository(session=session)
            model = await repository.get_current(user_id)
            return _to_context(model) if model is not None else None

    async def history(self, user_id: str) -> Sequence[WorkflowContext]:
        """All contexts of a user, newest first."""
        async with self._session_maker() as session:
            repository = WorkflowContextRepository(session=session)
            return [_to_context(model) for model in await repository.find_by_user(user_id)]


def _apply(model: WorkflowContextModel, context: WorkflowContext) -> None:
    snapshot = context.to_dict()
    model.user_id = context.user_id
    model.workflow_id = context.workflow_id
    model.current_state = context.current_state
    model.status = context.status
    model.data = snapshot["data"]
    model.history = snapshot["history"]
    model.context_metadata = snapshot["metadata"]
    model.started_at = context.started_at
    model.last_step_at = context.updated_at
    model.state_entered_at = context.state_entered_at
    model.completed_at = context.completed_at
    model.error_message = context.error_message


def _to_context(model: WorkflowContextModel) -> WorkflowContext:
    return WorkflowContext(
        user_id=model.user_id,
        workflow_id=model.workflow_id,
        current_state=model.current_state,
        data=dict(model.data or {}),
        history=[Step.from_dict(step) for step in model.history or []],
        metadata=dict(model.context_metadata or {}),
        status=model.status,
        started_at=model.started_at,
        updated_at=model.last_step_at,
        state_entered_at=model.state_entered_at,
        completed_at=model.completed_at,
        error_message=model.error_message,
        record_id=model.id,
    )
