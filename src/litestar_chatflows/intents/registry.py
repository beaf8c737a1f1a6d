"""Intent and entity extractor registries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar_chatflows.exceptions import IntentDefinitionError

if TYPE_CHECKING:
    from litestar_chatflows.core.protocols import EntityExtractor
    from litestar_chatflows.intents.models import IntentDefinition

__all__ = ["EntityExtractorRegistry", "IntentRegistry"]

logger = logging.getLogger(__name__)


class IntentRegistry:
    """Registry of intent definitions, in registration order.

    Registration order matters: when two intents score the same, the one
    registered first wins.

    Example:
        >>> registry = IntentRegistry()
        >>> registry.register(IntentDefinition(name="greeting", keywords=(("hello",),)))
        >>> registry.has("greeting")
        True
    """

    def __init__(self) -> None:
        self._intents: dict[str, IntentDefinition] = {}

    def register(self, intent: IntentDefinition) -> None:
        """Register an intent, replacing any previous definition with the same name.

        Args:
            intent: The definition to register.

        Raises:
            IntentDefinitionError: If the name is empty or the intent declares no
                keywords, patterns or examples.
        """
        if not intent.name:
            raise IntentDefinitionError(intent.name, "name is required")
        if not (intent.keywords or intent.patterns or intent.examples):
            raise IntentDefinitionError(intent.name, "at least one keyword group, pattern or example is required")
        if any(not group for group in intent.keywords):
            raise IntentDefinitionError(intent.name, "keyword groups must not be empty")
        if intent.name in self._intents:
            logger.info("Replacing intent %r", intent.name)
        self._intents[intent.name] = intent

    def get(self, name: str) -> IntentDefinition | None:
        return self._intents.get(name)

    def has(self, name: str) -> bool:
        return name in self._intents

    def unregister(self, name: str) -> None:
        """Remove an intent; unknown names are ignored."""
        self._intents.pop(name, None)

    def list_intents(self) -> list[IntentDefinition]:
        """All intents in registration order."""
        return list(self._intents.values())

    def find_by_workflow(self, workflow_id: str) -> list[IntentDefinition]:
        """Intents that start the given workflow."""
        return [intent for intent in self._intents.values() if intent.workflow_id == workflow_id]


class EntityExtractorRegistry:
    """Registry of custom entity extractors, keyed by entity type."""

    def __init__(self) -> None:
        self._extractors: dict[str, EntityExtractor] = {}

    def register(self, extractor: EntityExtractor) -> None:
        """Register an extractor under its ``type``, replacing any previous one."""
        self._extractors[extractor.type] = extractor

    def get(self, entity_type: str) -> EntityExtractor | None:
        return self._extractors.get(entity_type)

    def unregister(self, entity_type: str) -> None:
        self._extractors.pop(entity_type, None)

    def extractors(self) -> list[EntityExtractor]:
        """All extractors in registration order."""
        return list(self._extractors.values())
