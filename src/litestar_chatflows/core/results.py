"""Tagged result types.

Handlers and custom validators return one of two closed alternatives, so every
call site handles success and failure explicitly:

    >>> result = await handler.execute(context, user_input)
    >>> if isinstance(result, HandlerFailure):
    ...     return result.error
    >>> context.data.update(result.data)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias, Union

if TYPE_CHECKING:
    from litestar_chatflows.core.context import WorkflowContext

__all__ = [
    "HandlerFailure",
    "HandlerResult",
    "HandlerSuccess",
    "Invalid",
    "StepResult",
    "Valid",
    "ValidatorResult",
]


@dataclass(frozen=True)
class HandlerSuccess:
    """A handler finished its work.

    Attributes:
        output: Message for the user, if the handler has one.
        data: Values merged into the workflow data.
        next_state: Explicit next state, overriding transitions.
    """

    output: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    next_state: str | None = None


@dataclass(frozen=True)
class HandlerFailure:
    """A handler could not do its work.

    Attributes:
        error: User-facing explanation.
        data: Diagnostic values, never merged into the workflow data.
    """

    error: str
    data: dict[str, Any] = field(default_factory=dict)


HandlerResult: TypeAlias = Union[HandlerSuccess, HandlerFailure]


@dataclass(frozen=True)
class Valid:
    """A custom validator accepted the value.

    Attributes:
        value: The (possibly transformed) value to store.
    """

    value: Any


@dataclass(frozen=True)
class Invalid:
    """A custom validator rejected the value.

    Attributes:
        message: User-facing explanation.
    """

    message: str


ValidatorResult: TypeAlias = Union[Valid, Invalid]


@dataclass
class StepResult:
    """Outcome of one workflow step.

    Attributes:
        success: Whether the step succeeded.
        message: Text to send back to the user.
        completed: Whether the workflow reached a terminal state.
        stay_in_state: The state is waiting for the user's next message.
        next_state: The state the context moved to, if it moved.
        data: Values the step added to the workflow data.
        error: Internal error code or description for failed steps.
        context: The context after the step.
    """

    success: bool
    message: str
    completed: bool = False
    stay_in_state: bool = False
    next_state: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    context: WorkflowContext | None = None
