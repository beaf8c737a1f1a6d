"""Core domain module for litestar-chatflows.

This module exports the fundamental building blocks for workflow definitions,
including types, protocols, contexts, result types, conditions and events.
"""

from __future__ import annotations

from litestar_chatflows.core.conditions import Condition, compile_condition
from litestar_chatflows.core.context import Step, WorkflowContext
from litestar_chatflows.core.definition import (
    CANCELLED_STATE,
    COMPLETED_STATE,
    PromptTemplate,
    State,
    Transition,
    WorkflowDefinition,
)
from litestar_chatflows.core.events import (
    HandlerFailed,
    StateEntered,
    StateExited,
    ValidationFailed,
    WorkflowCancelled,
    WorkflowCompleted,
    WorkflowEvent,
    WorkflowFailed,
    WorkflowPaused,
    WorkflowResumed,
    WorkflowStarted,
)
from litestar_chatflows.core.prompts import render_prompt
from litestar_chatflows.core.protocols import ContextStore, CustomValidator, EntityExtractor, EventBus, Handler
from litestar_chatflows.core.results import (
    HandlerFailure,
    HandlerResult,
    HandlerSuccess,
    Invalid,
    StepResult,
    Valid,
    ValidatorResult,
)
from litestar_chatflows.core.types import ClassificationMethod, Data, StateType, ValidationType, WorkflowStatus

__all__ = [
    "CANCELLED_STATE",
    "COMPLETED_STATE",
    "ClassificationMethod",
    "Condition",
    "ContextStore",
    "CustomValidator",
    "Data",
    "EntityExtractor",
    "EventBus",
    "Handler",
    "HandlerFailed",
    "HandlerFailure",
    "HandlerResult",
    "HandlerSuccess",
    "Invalid",
    "PromptTemplate",
    "State",
    "StateEntered",
    "StateExited",
    "StateType",
    "Step",
    "StepResult",
    "Transition",
    "Valid",
    "ValidationFailed",
    "ValidationType",
    "ValidatorResult",
    "WorkflowCancelled",
    "WorkflowCompleted",
    "WorkflowContext",
    "WorkflowDefinition",
    "WorkflowEvent",
    "WorkflowFailed",
    "WorkflowPaused",
    "WorkflowResumed",
    "WorkflowStarted",
    "WorkflowStatus",
    "compile_condition",
    "render_prompt",
]
