"""Validation engine.

Declarative rules, a custom validator registry and the :class:`ValidationService`
that evaluates them.
"""

from __future__ import annotations

from litestar_chatflows.validation.registry import CustomValidatorRegistry
from litestar_chatflows.validation.rules import (
    ValidationConfig,
    ValidationIssue,
    ValidationResult,
    ValidationRule,
    ValidationSchema,
)
from litestar_chatflows.validation.service import ValidationService

__all__ = [
    "CustomValidatorRegistry",
    "ValidationConfig",
    "ValidationIssue",
    "ValidationResult",
    "ValidationRule",
    "ValidationSchema",
    "ValidationService",
]
