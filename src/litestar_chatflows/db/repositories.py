"""Repository for persisted conversation contexts.

Built on advanced-alchemy's async repository pattern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from advanced_alchemy.filters import LimitOffset, OrderBy
from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from sqlalchemy import and_, func, select

from litestar_chatflows.core.types import WorkflowStatus
from litestar_chatflows.db.models import WorkflowContextModel

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["OPEN_STATUSES", "WorkflowContextRepository"]

OPEN_STATUSES = (WorkflowStatus.ACTIVE, WorkflowStatus.PAUSED)
"""Statuses of a conversation that can still receive messages or be resumed."""


class WorkflowContextRepository(SQLAlchemyAsyncRepository[WorkflowContextModel]):
    """Repository for workflow context CRUD operations."""

    model_type = WorkflowContextModel

    async def get_current(self, user_id: str, *, for_update: bool = False) -> WorkflowContextModel | None:
        """Get the user's active or paused context.

        Args:
            user_id: The conversation key.
            for_update: Lock the row until the end of the transaction.

        Returns:
            The most recent open context or None.
        """
        stmt = (
            select(WorkflowContextModel)
            .where(
                and_(
                    WorkflowContextModel.user_id == user_id,
                    WorkflowContextModel.status.in_(OPEN_STATUSES),
                )
            )
            .order_by(WorkflowContextModel.created_at.desc())
            .limit(1)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_user(
        self,
        user_id: str,
        status: WorkflowStatus | None = None,
    ) -> Sequence[WorkflowContextModel]:
        """Find all contexts of a user, newest first.

        Args:
            user_id: The conversation key.
            status: Optional status filter.

        Returns:
            List of contexts.
        """
        conditions = [WorkflowContextModel.user_id == user_id]

        if status:
            conditions.append(WorkflowContextModel.status == status)

        stmt = select(WorkflowContextModel).where(and_(*conditions)).order_by(WorkflowContextModel.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_by_workflow(
        self,
        workflow_id: str,
        status: WorkflowStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[Sequence[WorkflowContextModel], int]:
        """Find contexts of a workflow with optional status filter.

        Args:
            workflow_id: The workflow definition id.
            status: Optional status filter.
            limit: Maximum number of results.
            offset: Number of results to skip.

        Returns:
            Tuple of (contexts, total_count).
        """
        conditions = [WorkflowContextModel.workflow_id == workflow_id]

        if status:
            conditions.append(WorkflowContextModel.status == status)

        return await self.list_and_count(
            *conditions,
            LimitOffset(limit=limit, offset=offset),
            OrderBy(field_name="created_at", sort_order="desc"),
        )

    async def count_by_status(self, workflow_id: str | None = None) -> dict[WorkflowStatus, int]:
        """Count contexts per status, optionally for a single workflow."""
        stmt = select(WorkflowContextModel.status, func.count()).group_by(WorkflowContextModel.status)
        if workflow_id is not None:
            stmt = stmt.where(WorkflowContextModel.workflow_id == workflow_id)

        result = await self.session.execute(stmt)
        return {WorkflowStatus(status): count for status, count in result.all()}
