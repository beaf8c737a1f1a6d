"""Validation rule and result structures."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from litestar_chatflows.core.types import ValidationType

__all__ = ["ValidationConfig", "ValidationIssue", "ValidationResult", "ValidationRule", "ValidationSchema"]


@dataclass(frozen=True)
class ValidationRule:
    """A single declarative constraint on one field.

    ``type`` is usually a :class:`ValidationType`; any other string is kept as is
    and reported as unsupported when evaluated.

    Attributes:
        field: Key the validated value is stored under.
        type: Rule type.
        required: Whether an empty value fails.
        pattern: Regular expression for ``regex`` rules.
        min: Lower bound (value for numbers, length for strings).
        max: Upper bound (value for numbers, length for strings).
        options: Allowed values for ``enum`` rules.
        custom_validator: Registered validator name for ``custom`` rules.
        message: Message replacing the built-in failure message.
        metadata: Free-form attributes.

    Example:
        >>> ValidationRule(field="amount", type=ValidationType.INTEGER, required=True, min=1)
    """

    field: str
    type: ValidationType | str
    required: bool = False
    pattern: str | None = None
    min: float | None = None
    max: float | None = None
    options: tuple[str, ...] | None = None
    custom_validator: str | None = None
    message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "type", ValidationType(self.type))
        except ValueError:
            # Unsupported types are reported when the rule is evaluated
            pass
        if self.options is not None:
            object.__setattr__(self, "options", tuple(str(option) for option in self.options))


@dataclass(frozen=True)
class ValidationSchema:
    """Named set of rules applied to a record, one rule per field.

    Attributes:
        name: Schema name.
        rules: The rules, each reading ``record[rule.field]``.
        description: Human-readable description.
    """

    name: str
    rules: tuple[ValidationRule, ...]
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))


@dataclass(frozen=True)
class ValidationIssue:
    """One failed rule.

    Attributes:
        field: Field of the failed rule.
        type: Type of the failed rule.
        message: User-facing message.
        value: The rejected value.
    """

    field: str
    type: str
    message: str
    value: Any = None


@dataclass
class ValidationResult:
    """Outcome of validating a value or a record.

    Attributes:
        is_valid: Whether every rule passed.
        message: Summary message, the first error when invalid.
        errors: Failed rules, empty when valid.
        data: Validated and transformed values keyed by field, ``None`` when invalid.
    """

    is_valid: bool
    message: str
    errors: list[ValidationIssue] = field(default_factory=list)
    data: dict[str, Any] | None = None


@dataclass
class ValidationConfig:
    """Validation service configuration.

    Attributes:
        strict_mode: Reported only.
        stop_on_first_error: Stop evaluating rules after the first failure.
        trim_strings: Strip surrounding whitespace from string values before
            validation.
        convert_types: Store coerced numbers and booleans; when off, the checks
            still run but the raw value is stored.
    """

    strict_mode: bool = False
    stop_on_first_error: bool = True
    trim_strings: bool = True
    convert_types: bool = True

    def copy(self, **changes: Any) -> ValidationConfig:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)
