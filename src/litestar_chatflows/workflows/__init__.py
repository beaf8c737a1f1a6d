"""Workflows shipped with litestar-chatflows.

Example:
    >>> engine = WorkflowEngine(WorkflowRegistry(), InMemoryContextStore())
    >>> register_builtin_workflows(engine)
    >>> [definition.id for definition in engine.get_available_workflows()]
    ['name_collection', 'product_purchase']
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar_chatflows.workflows.handlers import (
    PRODUCT_NAMES,
    GeneratePurchaseSummaryHandler,
    ProcessSubscriptionHandler,
    SaveUserNameHandler,
    ValidateUserNameHandler,
)
from litestar_chatflows.workflows.name_collection import NAME_COLLECTION_ID, name_collection_workflow
from litestar_chatflows.workflows.product_purchase import PRODUCT_PURCHASE_ID, product_purchase_workflow

if TYPE_CHECKING:
    from litestar_chatflows.core.definition import WorkflowDefinition
    from litestar_chatflows.core.protocols import Handler
    from litestar_chatflows.engine.engine import WorkflowEngine

__all__ = (
    "NAME_COLLECTION_ID",
    "PRODUCT_NAMES",
    "PRODUCT_PURCHASE_ID",
    "GeneratePurchaseSummaryHandler",
    "ProcessSubscriptionHandler",
    "SaveUserNameHandler",
    "ValidateUserNameHandler",
    "builtin_handlers",
    "builtin_workflows",
    "name_collection_workflow",
    "product_purchase_workflow",
    "register_builtin_workflows",
)


def builtin_workflows() -> list[WorkflowDefinition]:
    """Bundled definitions, in lookup priority order."""
    return [name_collection_workflow(), product_purchase_workflow()]


def builtin_handlers() -> list[Handler]:
    """Handlers needed by :func:`builtin_workflows`."""
    return [
        ValidateUserNameHandler(),
        SaveUserNameHandler(),
        GeneratePurchaseSummaryHandler(),
        ProcessSubscriptionHandler(),
    ]


def register_builtin_workflows(engine: WorkflowEngine) -> None:
    """Register the bundled workflows and their handlers on ``engine``."""
    for handler in builtin_handlers():
        engine.register_handler(handler)
    for definition in builtin_workflows():
        engine.register_workflow(definition)
