"""Custom validator registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from litestar_chatflows.core.protocols import CustomValidator

__all__ = ["CustomValidatorRegistry"]

logger = logging.getLogger(__name__)


class CustomValidatorRegistry:
    """Registry of validators referenced by ``custom`` validation rules.

    Example:
        >>> registry = CustomValidatorRegistry()
        >>> registry.register(PolicyNumberValidator())
        >>> registry.get("policy_number")
        <PolicyNumberValidator ...>
    """

    def __init__(self) -> None:
        self._validators: dict[str, CustomValidator] = {}

    def register(self, validator: CustomValidator) -> None:
        """Register a validator under its ``name``, replacing any previous one."""
        if validator.name in self._validators:
            logger.warning("Replacing custom validator %r", validator.name)
        self._validators[validator.name] = validator

    def get(self, name: str) -> CustomValidator | None:
        """Look up a validator by name."""
        return self._validators.get(name)

    def has(self, name: str) -> bool:
        return name in self._validators

    def unregister(self, name: str) -> None:
        """Remove a validator; unknown names are ignored."""
        self._validators.pop(name, None)

    def names(self) -> list[str]:
        """Registered validator names, sorted."""
        return sorted(self._validators)
