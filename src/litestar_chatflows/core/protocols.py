"""Core protocols for litestar-chatflows.

This module defines the Protocol-based interfaces for the pluggable parts of the
system: handlers, custom validators, entity extractors, context stores and event
buses. Using Protocol allows duck typing while maintaining type safety.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from litestar_chatflows.core.context import WorkflowContext
    from litestar_chatflows.core.results import HandlerResult, ValidatorResult
    from litestar_chatflows.intents.models import ClassificationContext, Entity

__all__ = ["ContextStore", "CustomValidator", "EntityExtractor", "EventBus", "Handler"]


@runtime_checkable
class Handler(Protocol):
    """Named unit of business logic invoked by workflow states.

    Attributes:
        name: Name states use to refer to the handler.

    Example:
        >>> class GreetHandler:
        ...     name = "greet"
        ...
        ...     async def execute(self, context, user_input=None):
        ...         return HandlerSuccess(output=f"Hello {context.get('name')}!")
    """

    name: str

    async def execute(self, context: WorkflowContext, user_input: str | None = None) -> HandlerResult:
        """Run the handler.

        Args:
            context: The workflow context; handlers read it but report changes
                through the returned result.
            user_input: The raw user message of the current step.

        Returns:
            :class:`HandlerSuccess` or :class:`HandlerFailure`.
        """
        ...


@runtime_checkable
class CustomValidator(Protocol):
    """Named validator for ``custom`` validation rules."""

    name: str

    async def validate(self, value: Any, context: dict[str, Any] | None = None) -> ValidatorResult:
        """Validate a value.

        Args:
            value: The (trimmed) raw value.
            context: Optional caller-supplied data, usually the workflow data.

        Returns:
            :class:`Valid` with the value to store, or :class:`Invalid`.
        """
        ...


@runtime_checkable
class EntityExtractor(Protocol):
    """Pluggable extractor of typed values from free text.

    Attributes:
        type: Entity type the extractor produces.
    """

    type: str

    async def extract(self, text: str, context: ClassificationContext | None = None) -> list[Entity]:
        """Extract entities from ``text``."""
        ...


@runtime_checkable
class ContextStore(Protocol):
    """Persistence contract for workflow contexts.

    Implementations keep at most one current (active or paused) context per user.
    Saving a terminal context archives it, after which :meth:`load_workflow_context`
    no longer returns it.
    """

    async def save_workflow_context(self, user_id: str, context: WorkflowContext) -> None:
        """Persist the context, replacing the user's current one if it is the same run."""
        ...

    async def load_workflow_context(self, user_id: str) -> WorkflowContext | None:
        """Return the user's current active or paused context, if any."""
        ...


@runtime_checkable
class EventBus(Protocol):
    """Receiver of workflow lifecycle events."""

    async def emit(self, event_type: str, **payload: Any) -> None:
        """Publish an event.

        Args:
            event_type: Dotted event name, for example ``workflow.started``.
            **payload: Event attributes.
        """
        ...
