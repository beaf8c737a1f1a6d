"""Litestar Chatflows - Conversational workflows for Litestar chat backends.

This package routes free-form chat messages into structured, multi-turn guided
conversations: an intent classifier decides what the user wants, and a workflow
engine walks the user through a state machine one message at a time.

Key Features:
    - Declarative workflow definitions with validated states and transitions
    - Safe transition conditions over the collected data
    - Typed input validation (email, phone, numbers, dates, enums, custom rules)
    - Keyword and pattern intent classification with entity extraction
    - One writer per conversation, persisted after every step
    - In-memory and SQLAlchemy context stores
    - Litestar plugin with dependency injection

Example:
    >>> from litestar_chatflows import InMemoryContextStore, WorkflowEngine, WorkflowRegistry
    >>> from litestar_chatflows.workflows import register_builtin_workflows
    >>>
    >>> engine = WorkflowEngine(WorkflowRegistry(), InMemoryContextStore())
    >>> register_builtin_workflows(engine)
    >>> context = await engine.start_workflow("237690000000", "name_collection")
    >>> (await engine.execute_until_input("237690000000", context, "hello")).message
    'Welcome! What is your name?'
    >>> (await engine.execute_until_input("237690000000", context, "awa")).message
    'Nice to meet you, Awa! How can I help you today?'
"""

from __future__ import annotations

from litestar_chatflows.__metadata__ import __project__, __version__
from litestar_chatflows.core import (
    PromptTemplate,
    State,
    Step,
    Transition,
    WorkflowContext,
    WorkflowDefinition,
)
from litestar_chatflows.core.results import HandlerFailure, HandlerSuccess, Invalid, StepResult, Valid
from litestar_chatflows.core.types import ClassificationMethod, StateType, ValidationType, WorkflowStatus
from litestar_chatflows.engine import EngineConfig, HandlerRegistry, WorkflowEngine, WorkflowRegistry
from litestar_chatflows.exceptions import (
    ChatflowsError,
    ConditionSyntaxError,
    HandlerNotFoundError,
    IntentDefinitionError,
    InvalidTransitionError,
    StateNotFoundError,
    WorkflowInactiveError,
    WorkflowNotActiveError,
    WorkflowNotFoundError,
    WorkflowValidationError,
)
from litestar_chatflows.intents import (
    ClassificationContext,
    ClassificationResult,
    IntentClassifier,
    IntentClassifierConfig,
    IntentDefinition,
    IntentRegistry,
)
from litestar_chatflows.plugin import ChatflowPlugin, ChatflowPluginConfig
from litestar_chatflows.store import InMemoryContextStore
from litestar_chatflows.validation import ValidationConfig, ValidationRule, ValidationService

__all__ = (
    "ChatflowPlugin",
    "ChatflowPluginConfig",
    "ChatflowsError",
    "ClassificationContext",
    "ClassificationMethod",
    "ClassificationResult",
    "ConditionSyntaxError",
    "EngineConfig",
    "HandlerFailure",
    "HandlerNotFoundError",
    "HandlerRegistry",
    "HandlerSuccess",
    "InMemoryContextStore",
    "IntentClassifier",
    "IntentClassifierConfig",
    "IntentDefinition",
    "IntentDefinitionError",
    "IntentRegistry",
    "Invalid",
    "InvalidTransitionError",
    "PromptTemplate",
    "State",
    "StateNotFoundError",
    "StateType",
    "Step",
    "StepResult",
    "Transition",
    "Valid",
    "ValidationConfig",
    "ValidationRule",
    "ValidationService",
    "ValidationType",
    "WorkflowContext",
    "WorkflowDefinition",
    "WorkflowEngine",
    "WorkflowInactiveError",
    "WorkflowNotActiveError",
    "WorkflowNotFoundError",
    "WorkflowRegistry",
    "WorkflowStatus",
    "WorkflowValidationError",
    "__project__",
    "__version__",
)
