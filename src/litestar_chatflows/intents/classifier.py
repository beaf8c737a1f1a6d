"""Intent classifier.

Scores every registered :class:`IntentDefinition` against a message with two
scorers, keywords and regular expressions, picks the best candidate and extracts
entities from the message.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from litestar_chatflows.core.types import ClassificationMethod
from litestar_chatflows.intents.cache import LRUCache
from litestar_chatflows.intents.entities import extract_builtin_entities
from litestar_chatflows.intents.models import (
    ClassificationContext,
    ClassificationResult,
    Entity,
    Intent,
    IntentClassifierConfig,
)
from litestar_chatflows.intents.registry import EntityExtractorRegistry

if TYPE_CHECKING:
    from litestar_chatflows.intents.models import IntentDefinition
    from litestar_chatflows.intents.registry import IntentRegistry

__all__ = ["IntentClassifier", "clean_message", "normalize_message"]

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_PUNCTUATION_RE = re.compile(r"[^\w\s\u00C0-\u017F]")

KEYWORD_WEIGHT = 0.2
EXAMPLE_BONUS = 0.5
MAX_PATTERN_SCORE = 0.9
FALLBACK_CONFIDENCE = 0.3


def clean_message(message: str) -> str:
    """Trim and collapse internal whitespace."""
    return _WHITESPACE_RE.sub(" ", message.strip())


def normalize_message(message: str) -> str:
    """Lower-case, collapse whitespace and strip punctuation.

    Letters (including accented Latin letters), digits and whitespace are kept.

    Example:
        >>> normalize_message("  Bonjour,   c'est quoi Takaful ?")
        'bonjour cest quoi takaful'
    """
    return clean_message(_PUNCTUATION_RE.sub("", clean_message(message).lower()))


class IntentClassifier:
    """Classify chat messages into intents.

    Args:
        intents: Registry of intent definitions.
        extractors: Registry of custom entity extractors, run before the built-in ones.
        config: Classifier configuration.

    Example:
        >>> registry = IntentRegistry()
        >>> register_default_intents(registry)
        >>> classifier = IntentClassifier(registry)
        >>> result = await classifier.classify_intent("bonjour")
        >>> result.primary_intent.name
        'greeting'
    """

    def __init__(
        self,
        intents: IntentRegistry,
        extractors: EntityExtractorRegistry | None = None,
        config: IntentClassifierConfig | None = None,
    ) -> None:
        self.intents = intents
        self.extractors = extractors if extractors is not None else EntityExtractorRegistry()
        self._config = config or IntentClassifierConfig()
        self._cache: LRUCache[ClassificationResult] = LRUCache(self._config.cache_size, self._config.cache_ttl)

    async def classify_intent(self, message: str, context: ClassificationContext | None = None) -> ClassificationResult:
        """Classify a message.

        Args:
            message: The raw user message.
            context: Optional conversation information; ``user_id`` is part of
                the cache key.

        Returns:
            The classification; on internal errors the fallback intent with
            confidence 0.
        """
        started = time.perf_counter()
        try:
            normalized = normalize_message(message)
            cache_key = (normalized, context.user_id if context else None)
            if self._config.use_caching:
                cached = self._cache.get(cache_key)
                if cached is not None:
                    logger.debug("Intent classification served from cache", extra={"intent": cached.primary_intent.name})
                    return replace(cached, from_cache=True)

            keyword_intent = self._classify_by_keywords(normalized)
            pattern_intent = self._classify_by_patterns(clean_message(message))

            alternatives: list[Intent] = []
            if keyword_intent and pattern_intent:
                if keyword_intent.confidence >= pattern_intent.confidence:
                    primary, method = keyword_intent, ClassificationMethod.KEYWORD
                    alternatives.append(pattern_intent)
                else:
                    primary, method = pattern_intent, ClassificationMethod.PATTERN
                    alternatives.append(keyword_intent)
            elif keyword_intent:
                primary, method = keyword_intent, ClassificationMethod.KEYWORD
            elif pattern_intent:
                primary, method = pattern_intent, ClassificationMethod.PATTERN
            else:
                primary = Intent(name=self._config.fallback_intent, confidence=FALLBACK_CONFIDENCE, category="unknown")
                method = ClassificationMethod.FALLBACK

            entities: list[Entity] = []
            if self._config.enable_entity_extraction:
                entities = await self.extract_entities(message, context)
            primary = replace(primary, entities=tuple(entities))

            result = ClassificationResult(
                primary_intent=primary,
                alternative_intents=tuple(alternatives[: self._config.max_alternatives]),
                entities=tuple(entities),
                confidence=primary.confidence,
                method=method,
                processing_time_ms=(time.perf_counter() - started) * 1000,
            )
            if self._config.use_caching:
                self._cache.set(cache_key, result)

            logger.info(
                "Intent classified",
                extra={"intent": primary.name, "confidence": primary.confidence, "method": str(method)},
            )
            return result
        except Exception:
            logger.exception("Intent classification failed")
            return ClassificationResult(
                primary_intent=Intent(name=self._config.fallback_intent, confidence=0.0, category="unknown"),
                confidence=0.0,
                method=ClassificationMethod.FALLBACK,
                processing_time_ms=(time.perf_counter() - started) * 1000,
            )

    async def extract_entities(self, text: str, context: ClassificationContext | None = None) -> list[Entity]:
        """Extract entities with the registered extractors, then the built-in ones.

        A failing custom extractor is logged and skipped.
        """
        cleaned = clean_message(text)
        entities: list[Entity] = []
        for extractor in self.extractors.extractors():
            try:
                entities.extend(await extractor.extract(cleaned, context))
            except Exception:
                logger.exception("Entity extractor failed", extra={"entity_type": extractor.type})
        entities.extend(extract_builtin_entities(cleaned))
        return entities

    def is_confident(self, result: ClassificationResult) -> bool:
        """Whether ``result`` meets the configured confidence threshold."""
        return result.confidence >= self._config.confidence_threshold

    def update_config(self, **changes: Any) -> None:
        """Update configuration fields; cache size or TTL changes reset the cache."""
        self._config = self._config.copy(**changes)
        if "cache_size" in changes or "cache_ttl" in changes:
            self._cache = LRUCache(self._config.cache_size, self._config.cache_ttl)

    def get_config(self) -> IntentClassifierConfig:
        """Return a copy of the current configuration."""
        return self._config.copy()

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        """Number of cached classifications."""
        return len(self._cache)

    def _to_intent(self, definition: IntentDefinition, confidence: float) -> Intent:
        return Intent(
            name=definition.name,
            confidence=confidence,
            category=definition.category,
            workflow_id=definition.workflow_id,
            metadata=dict(definition.metadata),
        )

    def _classify_by_keywords(self, normalized: str) -> Intent | None:
        best: Intent | None = None
        best_score = 0.0
        for definition in self.intents.list_intents():
            score = 0.0
            for group in definition.keywords:
                if all(normalize_message(keyword) in normalized for keyword in group):
                    score += len(group) * KEYWORD_WEIGHT
            if any(normalized == normalize_message(example) for example in definition.examples):
                score += EXAMPLE_BONUS
            score = min(score * definition.weight, 1.0)
            if score > best_score:
                best_score = score
                best = self._to_intent(definition, score)
        return best

    def _classify_by_patterns(self, text: str) -> Intent | None:
        if not text:
            return None
        best: Intent | None = None
        best_score = 0.0
        for definition in self.intents.list_intents():
            for pattern in definition.compiled_patterns:
                match = pattern.search(text)
                if match is None:
                    continue
                score = min(min(len(match.group(0)) / len(text), MAX_PATTERN_SCORE) * definition.weight, 1.0)
                if score > best_score:
                    best_score = score
                    best = self._to_intent(definition, score)
        return best
