"""Entity extractors.

:class:`RegexEntityExtractor` turns every match of a regular expression into an
:class:`Entity`. The built-in extractors cover email addresses, national phone
numbers, amounts with a currency suffix and numeric dates.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from litestar_chatflows.intents.models import Entity

if TYPE_CHECKING:
    from litestar_chatflows.intents.models import ClassificationContext

__all__ = [
    "AMOUNT_EXTRACTOR",
    "BUILTIN_EXTRACTORS",
    "DATE_EXTRACTOR",
    "EMAIL_EXTRACTOR",
    "PHONE_EXTRACTOR",
    "RegexEntityExtractor",
    "extract_builtin_entities",
]


def _whole_match(match: re.Match[str]) -> Any:
    return match.group(0)


class RegexEntityExtractor:
    """Extract entities with a regular expression.

    Args:
        type: Entity type of the produced entities.
        pattern: Expression to search for.
        confidence: Confidence given to every match.
        transform: Builds the entity value from a match, the whole match by default.
        metadata: Attributes copied onto every entity.

    Example:
        >>> policy = RegexEntityExtractor("policy_number", r"\\bTKF-\\d+\\b", confidence=0.9)
        >>> policy.find("my policy is TKF-1234")
        [Entity(type='policy_number', value='TKF-1234', confidence=0.9, start=13, end=21, metadata={})]
    """

    def __init__(
        self,
        type: str,  # noqa: A002
        pattern: str | re.Pattern[str],
        confidence: float,
        transform: Callable[[re.Match[str]], Any] = _whole_match,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.type = type
        self.pattern = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
        self.confidence = confidence
        self.transform = transform
        self.metadata = metadata or {}

    def find(self, text: str) -> list[Entity]:
        """Synchronously extract every match in ``text``."""
        return [
            Entity(
                type=self.type,
                value=self.transform(match),
                confidence=self.confidence,
                start=match.start(),
                end=match.end(),
                metadata=dict(self.metadata),
            )
            for match in self.pattern.finditer(text)
        ]

    async def extract(self, text: str, context: ClassificationContext | None = None) -> list[Entity]:
        return self.find(text)


EMAIL_EXTRACTOR = RegexEntityExtractor(
    "email",
    r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
    confidence=0.95,
)
PHONE_EXTRACTOR = RegexEntityExtractor(
    "phone_number",
    r"(?<![\w+])(?:\+237|237)?\s?[62]\d{8}\b",
    confidence=0.9,
    transform=lambda match: re.sub(r"\s", "", match.group(0)),
)
AMOUNT_EXTRACTOR = RegexEntityExtractor(
    "amount",
    re.compile(r"\b(\d+[\s,.]?\d*)\s*(FCFA|XAF|francs?|F\s*CFA)\b", re.IGNORECASE),
    confidence=0.85,
    transform=lambda match: re.sub(r"[\s,]", "", match.group(1)),
    metadata={"currency": "XAF"},
)
DATE_EXTRACTOR = RegexEntityExtractor(
    "date",
    r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b",
    confidence=0.8,
)

BUILTIN_EXTRACTORS: tuple[RegexEntityExtractor, ...] = (
    EMAIL_EXTRACTOR,
    PHONE_EXTRACTOR,
    AMOUNT_EXTRACTOR,
    DATE_EXTRACTOR,
)


def extract_builtin_entities(text: str) -> list[Entity]:
    """Run every built-in extractor over ``text``.

    Example:
        >>> extract_builtin_entities("contact me at a@b.com")
        [Entity(type='email', value='a@b.com', confidence=0.95, start=14, end=21, metadata={})]
    """
    entities: list[Entity] = []
    for extractor in BUILTIN_EXTRACTORS:
        entities.extend(extractor.find(text))
    return entities
