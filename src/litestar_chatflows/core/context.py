"""Workflow context.

This module provides the per-user :class:`WorkflowContext` that carries the
current state, accumulated data and step history of a conversation, and the
:class:`Step` history record.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from litestar_chatflows.core.types import WorkflowStatus

__all__ = ["Step", "WorkflowContext", "utcnow"]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _dump_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_datetime(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Step:
    """Record of a single step within a workflow context.

    Attributes:
        state_id: Id of the state that executed.
        state_name: Name of that state.
        timestamp: When the step ran.
        input: The user message the step received.
        output: The message the step produced.
        success: Whether the step succeeded.
        error: Internal error description, if the step failed.
        duration_ms: Execution time in milliseconds.
    """

    state_id: str
    state_name: str
    timestamp: datetime
    input: str | None = None
    output: str | None = None
    success: bool = True
    error: str | None = None
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives."""
        return {
            "state_id": self.state_id,
            "state_name": self.state_name,
            "timestamp": _dump_datetime(self.timestamp),
            "input": self.input,
            "output": self.output,
            "success": self.success,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Step:
        """Rebuild a step from :meth:`to_dict` output."""
        return cls(
            state_id=payload["state_id"],
            state_name=payload.get("state_name", payload["state_id"]),
            timestamp=_load_datetime(payload["timestamp"]) or utcnow(),
            input=payload.get("input"),
            output=payload.get("output"),
            success=payload.get("success", True),
            error=payload.get("error"),
            duration_ms=payload.get("duration_ms", 0.0),
        )


@dataclass
class WorkflowContext:
    """Live, per-user instance of a workflow.

    The context is owned by the workflow engine while it is active and is
    persisted after every step. Its ``data`` dictionary accumulates validated
    input and handler output (later writes overwrite earlier ones); ``history`` is
    append-only except through rollback.

    Attributes:
        user_id: The user the conversation belongs to.
        workflow_id: Id of the workflow definition.
        current_state: Id of the state the next step executes.
        data: Accumulated workflow data.
        history: Chronological record of steps.
        metadata: Free-form attributes, such as the cancellation reason.
        status: Lifecycle status.
        started_at: When the context was created.
        updated_at: When the context last changed.
        state_entered_at: When ``current_state`` was entered.
        completed_at: When the context reached a terminal status.
        error_message: Reason for cancellation or failure.
        record_id: Identifier assigned by the context store, if any.

    Example:
        >>> context = WorkflowContext(user_id="237690000000", workflow_id="onboarding", current_state="ask_name")
        >>> context.set("name", "Awa")
        >>> context.get("name")
        'Awa'
    """

    user_id: str
    workflow_id: str
    current_state: str
    data: dict[str, Any] = field(default_factory=dict)
    history: list[Step] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    status: WorkflowStatus = WorkflowStatus.ACTIVE
    started_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    state_entered_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    error_message: str | None = None
    record_id: UUID | None = None

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value from the workflow data dictionary.

        Args:
            key: The key to look up in the data dictionary.
            default: Default value to return if key is not found.

        Returns:
            The value associated with the key, or the default if not present.
        """
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value in the workflow data dictionary."""
        self.data[key] = value

    @property
    def is_active(self) -> bool:
        return self.status == WorkflowStatus.ACTIVE

    @property
    def last_step(self) -> Step | None:
        """The most recent history entry, if any."""
        return self.history[-1] if self.history else None

    def has_visited(self, state_id: str) -> bool:
        """Check whether any step ran in ``state_id``.

        Example:
            >>> context.has_visited("ask_name")
            False
        """
        return any(step.state_id == state_id for step in self.history)

    def touch(self) -> None:
        """Refresh ``updated_at``."""
        self.updated_at = utcnow()

    def enter_state(self, state_id: str) -> None:
        """Move to ``state_id`` and restart its timeout clock."""
        self.current_state = state_id
        self.state_entered_at = utcnow()

    def finish(self, status: WorkflowStatus, error_message: str | None = None) -> None:
        """Move the context to a terminal status.

        Args:
            status: The terminal status.
            error_message: Optional reason, kept for cancelled and failed contexts.
        """
        self.status = status
        self.completed_at = utcnow()
        if error_message is not None:
            self.error_message = error_message
        self.touch()

    def is_same_instance(self, other: WorkflowContext) -> bool:
        """Whether ``other`` is a copy of this same workflow run."""
        return (
            self.user_id == other.user_id
            and self.workflow_id == other.workflow_id
            and self.started_at == other.started_at
        )

    def refresh_from(self, other: WorkflowContext) -> None:
        """Overwrite this context in place with the state of ``other``."""
        for name in self.__dataclass_fields__:
            setattr(self, name, copy.deepcopy(getattr(other, name)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives.

        Example:
            >>> WorkflowContext.from_dict(context.to_dict()) == context
            True
        """
        return {
            "user_id": self.user_id,
            "workflow_id": self.workflow_id,
            "current_state": self.current_state,
            "data": copy.deepcopy(self.data),
            "history": [step.to_dict() for step in self.history],
            "metadata": copy.deepcopy(self.metadata),
            "status": str(self.status),
            "started_at": _dump_datetime(self.started_at),
            "updated_at": _dump_datetime(self.updated_at),
            "state_entered_at": _dump_datetime(self.state_entered_at),
            "completed_at": _dump_datetime(self.completed_at),
            "error_message": self.error_message,
            "record_id": str(self.record_id) if self.record_id else None,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorkflowContext:
        """Rebuild a context from :meth:`to_dict` output."""
        started_at = _load_datetime(payload.get("started_at")) or utcnow()
        return cls(
            user_id=payload["user_id"],
            workflow_id=payload["workflow_id"],
            current_state=payload["current_state"],
            data=copy.deepcopy(payload.get("data") or {}),
            history=[Step.from_dict(step) for step in payload.get("history") or []],
            metadata=copy.deepcopy(payload.get("metadata") or {}),
            status=WorkflowStatus(payload.get("status", WorkflowStatus.ACTIVE)),
            started_at=started_at,
            updated_at=_load_datetime(payload.get("updated_at")) or started_at,
            state_entered_at=_load_datetime(payload.get("state_entered_at")) or started_at,
            completed_at=_load_datetime(payload.get("completed_at")),
            error_message=payload.get("error_message"),
            record_id=UUID(payload["record_id"]) if payload.get("record_id") else None,
        )
