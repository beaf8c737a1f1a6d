"""Domain events for the workflow lifecycle.

This module defines the events the workflow engine emits while it runs
conversations. When an event bus is configured, every event is published as
``await bus.emit(event.event_type, **event.payload())``; the events can drive
logging, monitoring, analytics or side effects in external systems.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, ClassVar

__all__ = [
    "HandlerFailed",
    "StateEntered",
    "StateExited",
    "ValidationFailed",
    "WorkflowCancelled",
    "WorkflowCompleted",
    "WorkflowEvent",
    "WorkflowFailed",
    "WorkflowPaused",
    "WorkflowResumed",
    "WorkflowStarted",
]


@dataclass
class WorkflowEvent:
    """Base class for all workflow events.

    Attributes:
        user_id: The user whose conversation produced the event.
        workflow_id: Id of the workflow definition.
        timestamp: When the event occurred.
    """

    event_type: ClassVar[str] = "workflow.event"

    user_id: str
    workflow_id: str
    timestamp: datetime

    def payload(self) -> dict[str, Any]:
        """Event attributes as keyword arguments for :meth:`EventBus.emit`."""
        return asdict(self)


@dataclass
class WorkflowStarted(WorkflowEvent):
    """Emitted when a context is created.

    Attributes:
        initial_state: The state the context starts in.
        initial_data: Data supplied when starting.

    Example:
        >>> event = WorkflowStarted(
        ...     user_id="237690000000",
        ...     workflow_id="product_purchase",
        ...     timestamp=utcnow(),
        ...     initial_state="welcome",
        ... )
    """

    event_type: ClassVar[str] = "workflow.started"

    initial_state: str
    initial_data: dict[str, Any] | None = None


@dataclass
class WorkflowCompleted(WorkflowEvent):
    """Emitted when a context reaches a completed state.

    Attributes:
        final_state: The terminal state.
        duration_seconds: Time since the context started.
    """

    event_type: ClassVar[str] = "workflow.completed"

    final_state: str
    duration_seconds: float | None = None


@dataclass
class WorkflowCancelled(WorkflowEvent):
    """Emitted when a context is cancelled or superseded.

    Attributes:
        reason: Explanation for the cancellation.
        current_state: State the context was in.
    """

    event_type: ClassVar[str] = "workflow.cancelled"

    reason: str | None = None
    current_state: str | None = None


@dataclass
class WorkflowFailed(WorkflowEvent):
    """Emitted when a step error stops a context.

    Attributes:
        error: Internal error description.
        failed_state: State whose step failed.
    """

    event_type: ClassVar[str] = "workflow.failed"

    error: str
    failed_state: str | None = None


@dataclass
class WorkflowPaused(WorkflowEvent):
    """Emitted when a context is paused."""

    event_type: ClassVar[str] = "workflow.paused"

    current_state: str | None = None


@dataclass
class WorkflowResumed(WorkflowEvent):
    """Emitted when a paused context is resumed."""

    event_type: ClassVar[str] = "workflow.resumed"

    current_state: str | None = None


@dataclass
class StateEntered(WorkflowEvent):
    """Emitted when a context moves into a state.

    Attributes:
        state_id: The state entered.
        previous_state: The state left, if any.
    """

    event_type: ClassVar[str] = "state.entered"

    state_id: str
    previous_state: str | None = None


@dataclass
class StateExited(WorkflowEvent):
    """Emitted when a context leaves a state."""

    event_type: ClassVar[str] = "state.exited"

    state_id: str
    next_state: str | None = None


@dataclass
class ValidationFailed(WorkflowEvent):
    """Emitted when user input is rejected.

    Attributes:
        state_id: The state that validated the input.
        message: The validation message shown to the user.
        fields: Fields that failed.
    """

    event_type: ClassVar[str] = "validation.failed"

    state_id: str
    message: str
    fields: list[str] | None = None


@dataclass
class HandlerFailed(WorkflowEvent):
    """Emitted when a handler reports failure or raises.

    Attributes:
        state_id: The state that invoked the handler.
        handler: Handler name.
        error: Failure message or exception text.
        error_type: Exception class name when the handler raised.
    """

    event_type: ClassVar[str] = "handler.failed"

    state_id: str
    handler: str
    error: str
    error_type: str | None = None
