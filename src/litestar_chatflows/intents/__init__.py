"""Intent classification.

Intent definitions and their registry, entity extractors, and the
:class:`IntentClassifier` that maps chat messages to intents.
"""

from __future__ import annotations

from litestar_chatflows.intents.cache import LRUCache
from litestar_chatflows.intents.classifier import IntentClassifier, clean_message, normalize_message
from litestar_chatflows.intents.defaults import default_intents, register_default_intents
from litestar_chatflows.intents.entities import (
    BUILTIN_EXTRACTORS,
    RegexEntityExtractor,
    extract_builtin_entities,
)
from litestar_chatflows.intents.models import (
    ClassificationContext,
    ClassificationResult,
    Entity,
    Intent,
    IntentClassifierConfig,
    IntentDefinition,
)
from litestar_chatflows.intents.registry import EntityExtractorRegistry, IntentRegistry

__all__ = [
    "BUILTIN_EXTRACTORS",
    "ClassificationContext",
    "ClassificationResult",
    "Entity",
    "EntityExtractorRegistry",
    "Intent",
    "IntentClassifier",
    "IntentClassifierConfig",
    "IntentDefinition",
    "IntentRegistry",
    "LRUCache",
    "RegexEntityExtractor",
    "clean_message",
    "default_intents",
    "extract_builtin_entities",
    "normalize_message",
    "register_default_intents",
]
