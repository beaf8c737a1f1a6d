"""SQLAlchemy models for conversation persistence.

One row per workflow run of a user. At most one row per user is in a
non-terminal status (``active`` or ``paused``); finished runs stay in the table
as the user's history.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from advanced_alchemy.base import UUIDAuditBase
from advanced_alchemy.types import DateTimeUTC
from sqlalchemy import JSON, Enum, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from litestar_chatflows.core.types import WorkflowStatus

__all__ = ["JSONType", "WorkflowContextModel"]


# Cross-database JSON type: uses JSONB for PostgreSQL, JSON for others (SQLite, MySQL, etc.)
JSONType = JSON().with_variant(JSONB, "postgresql")


class WorkflowContextModel(UUIDAuditBase):
    """Persisted conversation state of one workflow run.

    Attributes:
        user_id: Conversation key, usually the user's phone number.
        workflow_id: Id of the workflow definition being run.
        current_state: Id of the state the conversation is in.
        status: Lifecycle status of the run.
        data: Collected workflow data.
        history: Serialized :class:`~litestar_chatflows.core.context.Step` records.
        context_metadata: Free-form metadata, stored in the ``metadata`` column.
        started_at: When the run started.
        last_step_at: When the run last changed.
        state_entered_at: When the current state was entered.
        completed_at: When the run reached a terminal status.
        error_message: Failure or cancellation reason.
    """

    __tablename__ = "chatflow_workflow_contexts"
    __table_args__ = (
        Index("ix_chatflow_workflow_contexts_user_status", "user_id", "status"),
        Index("ix_chatflow_workflow_contexts_workflow_id", "workflow_id"),
    )

    user_id: Mapped[str] = mapped_column(String(255))
    workflow_id: Mapped[str] = mapped_column(String(255))
    current_state: Mapped[str] = mapped_column(String(255))
    status: Mapped[WorkflowStatus] = mapped_column(
        Enum(WorkflowStatus, native_enum=False, length=50),
        default=WorkflowStatus.ACTIVE,
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    history: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    context_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSONType, default=dict)
    started_at: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True))
    last_step_at: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True))
    state_entered_at: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
