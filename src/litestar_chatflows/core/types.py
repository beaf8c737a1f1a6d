"""Core type definitions for litestar-chatflows.

This module defines the fundamental enums and type aliases used throughout the
chatflow system.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, TypeAlias

# StrEnum backport for Python < 3.11
if sys.version_info >= (3, 11):
    from enum import StrEnum
else:

    class StrEnum(str, Enum):
        """String enumeration compatibility for Python < 3.11."""

        def __str__(self) -> str:
            return str(self.value)


__all__ = [
    "ClassificationMethod",
    "Data",
    "StateType",
    "StrEnum",
    "ValidationType",
    "WorkflowStatus",
]


class StateType(StrEnum):
    """How a workflow state handles user input and output.

    Attributes:
        INPUT: Prompts, then consumes and validates the next user message.
        VALIDATION: Validates every message it receives.
        PROCESSING: Runs a named handler.
        OUTPUT: Emits a message and moves on.
        DECISION: Prompts, then records the user's choice.
        AI_PROCESSING: Delegates to a model-backed handler.
        COMPLETED: Terminal state, the workflow succeeded.
        CANCELLED: Terminal state, the workflow was abandoned.
    """

    INPUT = "input"
    VALIDATION = "validation"
    PROCESSING = "processing"
    OUTPUT = "output"
    DECISION = "decision"
    AI_PROCESSING = "ai_processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkflowStatus(StrEnum):
    """Overall status of a workflow context.

    Attributes:
        ACTIVE: The context accepts steps.
        PAUSED: Steps are suspended until the context is resumed.
        COMPLETED: The workflow reached a completed state.
        CANCELLED: The workflow was cancelled or superseded.
        FAILED: The workflow stopped on an unrecoverable step error.
    """

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether contexts in this status are archived."""
        return self in (WorkflowStatus.COMPLETED, WorkflowStatus.CANCELLED, WorkflowStatus.FAILED)


class ValidationType(StrEnum):
    """Built-in validation rule types."""

    REQUIRED = "required"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    INTEGER = "integer"
    STRING = "string"
    TEXT = "text"
    REGEX = "regex"
    URL = "url"
    DATE = "date"
    BOOLEAN = "boolean"
    ENUM = "enum"
    CUSTOM = "custom"


class ClassificationMethod(StrEnum):
    """Scorer that produced the primary intent of a classification."""

    KEYWORD = "keyword"
    PATTERN = "pattern"
    FALLBACK = "fallback"


# Type aliases for workflow data
Data: TypeAlias = dict[str, Any]
"""Type alias for accumulated workflow data."""
