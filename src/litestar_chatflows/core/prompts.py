"""Prompt rendering."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from litestar_chatflows.core.definition import PromptTemplate

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["render_prompt"]

_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render_prompt(prompt: str | PromptTemplate | None, data: Mapping[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders with workflow data.

    Missing and ``None`` values render as an empty string.

    Args:
        prompt: Plain text, a :class:`PromptTemplate`, or ``None``.
        data: Accumulated workflow data.

    Returns:
        The rendered text; an empty string when there is no prompt.

    Example:
        >>> render_prompt("Hello {{name}}!", {"name": "Awa"})
        'Hello Awa!'
        >>> render_prompt(PromptTemplate("Total: {{amount}} FCFA"), {})
        'Total:  FCFA'
    """
    if prompt is None:
        return ""
    if isinstance(prompt, PromptTemplate):
        return render_prompt(prompt.template, data)

    def substitute(match: re.Match[str]) -> str:
        value = data.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER_RE.sub(substitute, str(prompt))
