"""Initial conversation context table.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the chatflow_workflow_contexts table."""
    op.create_table(
        "chatflow_workflow_contexts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("workflow_id", sa.String(length=255), nullable=False),
        sa.Column("current_state", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("history", sa.JSON(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_step_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("state_entered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("sa_orm_sentinel", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_chatflow_workflow_contexts_user_status",
        "chatflow_workflow_contexts",
        ["user_id", "status"],
    )
    op.create_index(
        "ix_chatflow_workflow_contexts_workflow_id",
        "chatflow_workflow_contexts",
        ["workflow_id"],
    )


def downgrade() -> None:
    """Drop the chatflow_workflow_contexts table."""
    op.drop_index("ix_chatflow_workflow_contexts_workflow_id", table_name="chatflow_workflow_contexts")
    op.drop_index("ix_chatflow_workflow_contexts_user_status", table_name="chatflow_workflow_contexts")
    op.drop_table("chatflow_workflow_contexts")
