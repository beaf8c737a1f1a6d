"""Intent classification data structures."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any

from litestar_chatflows.core.types import ClassificationMethod
from litestar_chatflows.exceptions import IntentDefinitionError

__all__ = [
    "ClassificationContext",
    "ClassificationResult",
    "Entity",
    "Intent",
    "IntentClassifierConfig",
    "IntentDefinition",
]


@dataclass(frozen=True)
class IntentDefinition:
    """A purpose a message can express, and how to recognize it.

    Keyword groups are AND-sets combined with OR: a group contributes to the
    score only when every keyword of the group appears in the message.
    String patterns are compiled case-insensitively.

    Attributes:
        name: Unique intent name.
        category: Free-form grouping, for example ``sales`` or ``support``.
        description: Human-readable description.
        keywords: Keyword groups.
        patterns: Regular expressions, as strings or compiled patterns.
        examples: Example phrases; an exact match earns a flat bonus.
        workflow_id: Workflow to start when the intent is recognized.
        priority: Score weight, each point adds 10%.
        required_entities: Entity types the intent needs to be actionable.
        metadata: Free-form attributes.

    Example:
        >>> IntentDefinition(
        ...     name="greeting",
        ...     category="general",
        ...     keywords=(("hello",), ("good", "morning")),
        ...     patterns=(r"^(hi|hello)\\b",),
        ...     examples=("hello",),
        ...     priority=10,
        ... )
    """

    name: str
    category: str = "general"
    description: str = ""
    keywords: tuple[tuple[str, ...], ...] = ()
    patterns: tuple[str | re.Pattern[str], ...] = ()
    examples: tuple[str, ...] = ()
    workflow_id: str | None = None
    priority: int = 0
    required_entities: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    compiled_patterns: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "keywords", tuple(tuple(group) for group in self.keywords))
        object.__setattr__(self, "patterns", tuple(self.patterns))
        object.__setattr__(self, "examples", tuple(self.examples))
        object.__setattr__(self, "required_entities", tuple(self.required_entities))
        try:
            compiled = tuple(p if isinstance(p, re.Pattern) else re.compile(p, re.IGNORECASE) for p in self.patterns)
        except re.error as exc:
            raise IntentDefinitionError(self.name, f"invalid pattern: {exc}") from exc
        object.__setattr__(self, "compiled_patterns", compiled)

    @property
    def weight(self) -> float:
        """Score multiplier derived from ``priority``."""
        return 1 + self.priority * 0.1


@dataclass(frozen=True)
class Entity:
    """A typed value extracted from free text.

    Attributes:
        type: Entity type, for example ``email`` or ``phone_number``.
        value: The extracted value.
        confidence: Extraction confidence in ``[0, 1]``.
        start: Start offset in the text, when known.
        end: End offset in the text, when known.
        metadata: Extra attributes, such as a currency.
    """

    type: str
    value: Any
    confidence: float
    start: int | None = None
    end: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Intent:
    """A classified purpose behind a message.

    Attributes:
        name: Intent name.
        confidence: Score in ``[0, 1]``.
        category: Category of the intent definition.
        workflow_id: Workflow associated with the intent.
        entities: Entities found in the message.
        metadata: Free-form attributes.
    """

    name: str
    confidence: float
    category: str = "unknown"
    workflow_id: str | None = None
    entities: tuple[Entity, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassificationContext:
    """Per-call information about the conversation.

    Attributes:
        user_id: The sender; part of the classification cache key.
        active_workflow_id: Workflow currently active for the user, if any.
        metadata: Free-form attributes.
    """

    user_id: str | None = None
    active_workflow_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a message.

    Attributes:
        primary_intent: The best intent.
        alternative_intents: Runner-up intents.
        entities: Entities found in the message.
        confidence: Confidence of the primary intent.
        method: Scorer that produced the primary intent.
        processing_time_ms: Time spent classifying.
        from_cache: Whether the result was served from the cache.
    """

    primary_intent: Intent
    alternative_intents: tuple[Intent, ...] = ()
    entities: tuple[Entity, ...] = ()
    confidence: float = 0.0
    method: ClassificationMethod = ClassificationMethod.FALLBACK
    processing_time_ms: float = 0.0
    from_cache: bool = False


@dataclass
class IntentClassifierConfig:
    """Intent classifier configuration.

    Attributes:
        confidence_threshold: Minimum confidence an orchestrator should accept.
        max_alternatives: Maximum number of alternative intents returned.
        use_caching: Cache results per (normalized message, user id).
        fallback_intent: Intent name returned when nothing matches.
        enable_entity_extraction: Run entity extractors on each message.
        cache_size: Maximum number of cached results.
        cache_ttl: Seconds a cached result stays valid, ``None`` for no expiry.
    """

    confidence_threshold: float = 0.6
    max_alternatives: int = 3
    use_caching: bool = True
    fallback_intent: str = "unknown"
    enable_entity_extraction: bool = True
    cache_size: int = 1024
    cache_ttl: float | None = None

    def copy(self, **changes: Any) -> IntentClassifierConfig:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)
