"""Registries for workflow definitions and handlers.

Both registries are plain objects built once at process start and passed to the
engine, so separate engines (and tests) never share state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflows.exceptions import HandlerNotFoundError, WorkflowNotFoundError, WorkflowValidationError

if TYPE_CHECKING:
    from litestar_chatflows.core.definition import WorkflowDefinition
    from litestar_chatflows.core.protocols import Handler

__all__ = ["HandlerRegistry", "WorkflowRegistry"]

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """Registry for storing and retrieving workflow definitions.

    Definitions are validated when registered; a definition that references
    undeclared states or carries malformed conditions never reaches the engine.

    Attributes:
        _definitions: Map of workflow ids to their definitions.
    """

    def __init__(self) -> None:
        """Initialize an empty workflow registry."""
        self._definitions: dict[str, WorkflowDefinition] = {}

    def register(self, definition: WorkflowDefinition) -> None:
        """Validate and register a workflow definition.

        Registering an id twice replaces the previous definition.

        Args:
            definition: The definition to register.

        Raises:
            WorkflowValidationError: If :meth:`WorkflowDefinition.validate`
                reports errors.

        Example:
            >>> registry = WorkflowRegistry()
            >>> registry.register(name_collection_workflow())
        """
        errors = definition.validate()
        if errors:
            logger.error("Rejected workflow definition", extra={"workflow_id": definition.id, "errors": errors})
            raise WorkflowValidationError(errors)
        if definition.id in self._definitions:
            logger.info("Replacing workflow definition %r", definition.id)
        self._definitions[definition.id] = definition
        logger.debug("Workflow registered", extra={"workflow_id": definition.id, "states": len(definition.states)})

    def get_definition(self, workflow_id: str) -> WorkflowDefinition:
        """Retrieve a workflow definition by id.

        Args:
            workflow_id: The workflow id.

        Returns:
            The registered definition.

        Raises:
            WorkflowNotFoundError: If the id is not registered.
        """
        try:
            return self._definitions[workflow_id]
        except KeyError:
            raise WorkflowNotFoundError(workflow_id) from None

    def list_definitions(self, active_only: bool = False) -> list[WorkflowDefinition]:
        """List registered definitions in registration order.

        Args:
            active_only: Only include definitions that can be started.

        Example:
            >>> [definition.id for definition in registry.list_definitions(active_only=True)]
            ['name_collection', 'product_purchase']
        """
        return [
            definition
            for definition in self._definitions.values()
            if definition.is_active or not active_only
        ]

    def unregister(self, workflow_id: str) -> None:
        """Remove a workflow; unknown ids are ignored."""
        self._definitions.pop(workflow_id, None)

    def has_workflow(self, workflow_id: str) -> bool:
        """Check if a workflow exists in the registry."""
        return workflow_id in self._definitions


class HandlerRegistry:
    """Registry resolving handler names used by workflow states."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, handler: Handler) -> None:
        """Register a handler under its ``name``, replacing any previous one."""
        if handler.name in self._handlers:
            logger.info("Replacing handler %r", handler.name)
        self._handlers[handler.name] = handler

    def get(self, name: str) -> Handler | None:
        """Look up a handler, ``None`` when the name is unknown."""
        return self._handlers.get(name)

    def require(self, name: str) -> Handler:
        """Look up a handler.

        Raises:
            HandlerNotFoundError: If the name is unknown.
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise HandlerNotFoundError(name)
        return handler

    def has(self, name: str) -> bool:
        return name in self._handlers

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def names(self) -> list[str]:
        """Registered handler names, sorted."""
        return sorted(self._handlers)
