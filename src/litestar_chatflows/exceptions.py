"""Exception hierarchy for litestar-chatflows."""

from __future__ import annotations

__all__ = (
    "ChatflowsError",
    "ConditionSyntaxError",
    "HandlerNotFoundError",
    "IntentDefinitionError",
    "InvalidTransitionError",
    "StateNotFoundError",
    "WorkflowInactiveError",
    "WorkflowNotActiveError",
    "WorkflowNotFoundError",
    "WorkflowValidationError",
)


class ChatflowsError(Exception):
    """Base exception for all litestar-chatflows errors.

    All exceptions raised by litestar-chatflows inherit from this class, so callers
    can catch every chatflow-related error with a single except clause.
    """


class WorkflowNotFoundError(ChatflowsError):
    """Raised when a workflow definition is not registered.

    Attributes:
        workflow_id: The id of the workflow that was not found.
    """

    def __init__(self, workflow_id: str) -> None:
        """Initialize the exception with workflow details.

        Args:
            workflow_id: The id of the workflow that was not found.
        """
        self.workflow_id = workflow_id
        super().__init__(f"Workflow '{workflow_id}' not found")


class WorkflowInactiveError(ChatflowsError):
    """Raised when starting a workflow whose definition is switched off.

    Attributes:
        workflow_id: The id of the inactive workflow.
    """

    def __init__(self, workflow_id: str) -> None:
        self.workflow_id = workflow_id
        super().__init__(f"Workflow '{workflow_id}' is not active")


class WorkflowValidationError(ChatflowsError):
    """Raised when a workflow definition fails validation at registration.

    Attributes:
        errors: List of validation error messages.
    """

    def __init__(self, errors: list[str]) -> None:
        """Initialize the exception with validation errors.

        Args:
            errors: List of validation error messages.
        """
        self.errors = errors
        super().__init__("Workflow validation failed: " + "; ".join(errors))


class WorkflowNotActiveError(ChatflowsError):
    """Raised when stepping a context that is no longer active.

    This happens when a queued message reaches the engine after the context it
    was addressed to has completed, been cancelled, or been superseded.

    Attributes:
        user_id: The user owning the context.
        workflow_id: The workflow of the context.
        status: The current status of the context.
    """

    def __init__(self, user_id: str, workflow_id: str, status: str) -> None:
        """Initialize the exception with context details.

        Args:
            user_id: The user owning the context.
            workflow_id: The workflow of the context.
            status: The current status of the context.
        """
        self.user_id = user_id
        self.workflow_id = workflow_id
        self.status = status
        super().__init__(f"Workflow '{workflow_id}' for user '{user_id}' is not active (status: {status})")


class StateNotFoundError(ChatflowsError):
    """Raised when a context points at a state its definition does not declare.

    Attributes:
        workflow_id: The workflow that was searched.
        state_id: The missing state id.
    """

    def __init__(self, workflow_id: str, state_id: str) -> None:
        self.workflow_id = workflow_id
        self.state_id = state_id
        super().__init__(f"State '{state_id}' not found in workflow '{workflow_id}'")


class InvalidTransitionError(ChatflowsError):
    """Raised when a handler asks for a transition to an undeclared state.

    Attributes:
        from_state: The state the transition started from.
        to_state: The requested target state.
        reason: Optional explanation of why the transition is invalid.
    """

    def __init__(self, from_state: str, to_state: str, reason: str | None = None) -> None:
        """Initialize the exception with transition details.

        Args:
            from_state: The state the transition started from.
            to_state: The requested target state.
            reason: Optional explanation of why the transition is invalid.
        """
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason
        msg = f"Invalid transition from '{from_state}' to '{to_state}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class HandlerNotFoundError(ChatflowsError):
    """Raised when looking up a handler name that is not registered.

    Attributes:
        name: The handler name that was requested.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Handler '{name}' not found")


class ConditionSyntaxError(ChatflowsError):
    """Raised when a transition condition cannot be parsed.

    Attributes:
        expression: The offending condition source.
        position: Character offset where parsing failed.
    """

    def __init__(self, expression: str, position: int, detail: str) -> None:
        """Initialize the exception with parser details.

        Args:
            expression: The offending condition source.
            position: Character offset where parsing failed.
            detail: Short description of what went wrong.
        """
        self.expression = expression
        self.position = position
        self.detail = detail
        super().__init__(f"Invalid condition {expression!r} at position {position}: {detail}")


class IntentDefinitionError(ChatflowsError):
    """Raised when an intent definition is rejected by the intent registry.

    Attributes:
        name: The name of the offending intent.
        reason: Why the definition was rejected.
    """

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid intent '{name}': {reason}")
