"""Validation service.

Evaluates declarative :class:`ValidationRule` objects against raw user input and
returns structured :class:`ValidationResult` objects. Rule types are dispatched
to dedicated checkers; ``custom`` rules are delegated to validators from a
:class:`CustomValidatorRegistry`.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit, urlunsplit

from litestar_chatflows.core.results import Invalid, Valid, ValidatorResult
from litestar_chatflows.core.types import ValidationType
from litestar_chatflows.validation.registry import CustomValidatorRegistry
from litestar_chatflows.validation.rules import (
    ValidationConfig,
    ValidationIssue,
    ValidationResult,
    ValidationRule,
    ValidationSchema,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from litestar_chatflows.core.protocols import CustomValidator

__all__ = ["ValidationService"]

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^(?:\+237|237)?[62]\d{8}$")
PHONE_SEPARATORS_RE = re.compile(r"[\s-]")

TRUE_TOKENS = frozenset({"true", "yes", "oui", "1"})
FALSE_TOKENS = frozenset({"false", "no", "non", "0"})
DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")

GENERIC_ERROR = "Validation error occurred"


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _label(rule: ValidationRule) -> str:
    return rule.field.replace("_", " ").capitalize()


class ValidationService:
    """Validates user input against declarative rules.

    Args:
        config: Service configuration, defaults to :class:`ValidationConfig`.
        validators: Registry resolving ``custom`` rules; a private empty registry
            is created when omitted.

    Example:
        >>> service = ValidationService()
        >>> result = await service.validate("50", [ValidationRule(field="amount", type="integer", min=1)])
        >>> result.is_valid, result.data
        (True, {'amount': 50})
    """

    def __init__(
        self,
        config: ValidationConfig | None = None,
        validators: CustomValidatorRegistry | None = None,
    ) -> None:
        self._config = config or ValidationConfig()
        self.validators = validators if validators is not None else CustomValidatorRegistry()
        self._checkers: dict[ValidationType, Callable[[ValidationRule, Any], ValidatorResult]] = {
            ValidationType.REQUIRED: self._check_required,
            ValidationType.EMAIL: self._check_email,
            ValidationType.PHONE: self._check_phone,
            ValidationType.NUMBER: self._check_number,
            ValidationType.INTEGER: self._check_integer,
            ValidationType.STRING: self._check_string,
            ValidationType.TEXT: self._check_string,
            ValidationType.REGEX: self._check_regex,
            ValidationType.URL: self._check_url,
            ValidationType.DATE: self._check_date,
            ValidationType.BOOLEAN: self._check_boolean,
            ValidationType.ENUM: self._check_enum,
        }

    async def validate(
        self,
        value: Any,
        rules: Iterable[ValidationRule],
        context: dict[str, Any] | None = None,
    ) -> ValidationResult:
        """Validate one value against a list of rules.

        Every rule is evaluated against the same (optionally trimmed) value and
        stores its transformed value under its own ``field``.

        Args:
            value: The raw value, usually a user message.
            rules: Rules to apply, in order.
            context: Optional data handed to custom validators.

        Returns:
            The validation result; ``message`` is the first error when invalid.
        """
        prepared = self._prepare(value)
        return await self._run(((rule, prepared) for rule in rules), context, "Validation successful")

    async def validate_schema(self, record: Mapping[str, Any], schema: ValidationSchema | Sequence[ValidationRule]) -> ValidationResult:
        """Validate a record, each rule reading ``record[rule.field]``.

        Args:
            record: Mapping of field names to raw values.
            schema: A :class:`ValidationSchema` or a plain sequence of rules.

        Returns:
            The validation result.
        """
        rules = schema.rules if isinstance(schema, ValidationSchema) else tuple(schema)
        pairs = ((rule, self._prepare(record.get(rule.field))) for rule in rules)
        return await self._run(pairs, dict(record), "Schema validation successful")

    def register_custom_validator(self, validator: CustomValidator) -> None:
        """Register a validator for ``custom`` rules."""
        self.validators.register(validator)

    def get_custom_validator(self, name: str) -> CustomValidator | None:
        return self.validators.get(name)

    def update_config(self, **changes: Any) -> None:
        """Update configuration fields.

        Raises:
            TypeError: If a change names an unknown field.
        """
        self._config = self._config.copy(**changes)

    def get_config(self) -> ValidationConfig:
        """Return a copy of the current configuration."""
        return self._config.copy()

    async def _run(
        self,
        pairs: Iterable[tuple[ValidationRule, Any]],
        context: dict[str, Any] | None,
        success_message: str,
    ) -> ValidationResult:
        errors: list[ValidationIssue] = []
        data: dict[str, Any] = {}
        for rule, value in pairs:
            outcome = await self._evaluate(rule, value, context)
            if isinstance(outcome, Invalid):
                errors.append(ValidationIssue(field=rule.field, type=str(rule.type), message=outcome.message, value=value))
                if self._config.stop_on_first_error:
                    break
            else:
                data[rule.field] = outcome.value

        if errors:
            return ValidationResult(is_valid=False, message=errors[0].message, errors=errors, data=None)
        return ValidationResult(is_valid=True, message=success_message, errors=[], data=data)

    def _prepare(self, value: Any) -> Any:
        if self._config.trim_strings and isinstance(value, str):
            return value.strip()
        return value

    async def _evaluate(self, rule: ValidationRule, value: Any, context: dict[str, Any] | None) -> ValidatorResult:
        try:
            if _is_empty(value):
                if rule.required:
                    return Invalid(rule.message or f"{_label(rule)} is required")
                return Valid(value)
            if rule.type == ValidationType.CUSTOM:
                return await self._check_custom(rule, value, context)
            checker = self._checkers.get(rule.type)
            if checker is None:
                return Invalid(f"Unsupported validation type: {rule.type}")
            return checker(rule, value)
        except Exception:
            logger.exception("Validation rule failed", extra={"field": rule.field, "rule_type": str(rule.type)})
            return Invalid(GENERIC_ERROR)

    def _check_required(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        if isinstance(value, str) and not value.strip():
            return Invalid(rule.message or "This field is required")
        return Valid(value)

    def _check_email(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        text = str(value)
        if not EMAIL_RE.match(text):
            return Invalid(rule.message or "Invalid email address")
        return Valid(text.lower())

    def _check_phone(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        digits = PHONE_SEPARATORS_RE.sub("", str(value))
        if not PHONE_RE.match(digits):
            return Invalid(rule.message or "Invalid phone number")
        return Valid(digits)

    def _to_number(self, value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            try:
                number = float(str(value))
            except ValueError:
                return None
        return number if math.isfinite(number) else None

    def _check_bounds(self, rule: ValidationRule, number: float) -> Invalid | None:
        if rule.min is not None and number < rule.min:
            return Invalid(rule.message or f"Value must be greater than or equal to {_fmt(rule.min)}")
        if rule.max is not None and number > rule.max:
            return Invalid(rule.message or f"Value must be less than or equal to {_fmt(rule.max)}")
        return None

    def _check_number(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        number = self._to_number(value)
        if number is None:
            return Invalid(rule.message or "Invalid number")
        failure = self._check_bounds(rule, number)
        if failure is not None:
            return failure
        if not self._config.convert_types:
            return Valid(value)
        return Valid(int(value) if isinstance(value, int) else number)

    def _check_integer(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        number = self._to_number(value)
        if number is None or not number.is_integer():
            return Invalid(rule.message or "Invalid integer")
        failure = self._check_bounds(rule, number)
        if failure is not None:
            return failure
        return Valid(int(number) if self._config.convert_types else value)

    def _check_string(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        if not isinstance(value, str):
            return Invalid(rule.message or "Invalid text")
        text = value.strip() if self._config.trim_strings else value
        if rule.min is not None and len(text) < rule.min:
            return Invalid(rule.message or f"Must be at least {_fmt(rule.min)} characters long")
        if rule.max is not None and len(text) > rule.max:
            return Invalid(rule.message or f"Must be at most {_fmt(rule.max)} characters long")
        return Valid(text)

    def _check_regex(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        if not rule.pattern:
            return Invalid("No pattern defined for regex rule")
        if re.search(rule.pattern, str(value)) is None:
            return Invalid(rule.message or "Invalid format")
        return Valid(value)

    def _check_url(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        text = str(value)
        try:
            parts = urlsplit(text)
        except ValueError:
            return Invalid(rule.message or "Invalid URL")
        if not parts.scheme or not parts.netloc or " " in text:
            return Invalid(rule.message or "Invalid URL")
        return Valid(urlunsplit(parts._replace(scheme=parts.scheme.lower(), netloc=parts.netloc.lower())))

    def _check_date(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        parsed = self._parse_date(value)
        if parsed is None:
            return Invalid(rule.message or "Invalid date")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return Valid(parsed.isoformat())

    @staticmethod
    def _parse_date(value: Any) -> datetime | None:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        text = str(value)
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return None

    def _check_boolean(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        if isinstance(value, bool):
            return Valid(value)
        token = str(value).strip().lower()
        if token in TRUE_TOKENS:
            return Valid(True if self._config.convert_types else value)
        if token in FALSE_TOKENS:
            return Valid(False if self._config.convert_types else value)
        return Invalid(rule.message or "Invalid boolean value")

    def _check_enum(self, rule: ValidationRule, value: Any) -> ValidatorResult:
        if not rule.options:
            return Invalid("No options defined for enum rule")
        if str(value) not in rule.options:
            return Invalid(rule.message or f"Value must be one of: {', '.join(rule.options)}")
        return Valid(value)

    async def _check_custom(self, rule: ValidationRule, value: Any, context: dict[str, Any] | None) -> ValidatorResult:
        if not rule.custom_validator:
            return Invalid("No custom validator specified")
        validator = self.validators.get(rule.custom_validator)
        if validator is None:
            return Invalid(f"Validator '{rule.custom_validator}' not found")
        try:
            result = await validator.validate(value, context)
        except Exception:
            logger.exception("Custom validator %r raised", rule.custom_validator, extra={"field": rule.field})
            return Invalid("Custom validation failed")
        return result
