"""Transition condition expressions.

Conditions are small boolean expressions over the accumulated workflow data, for
example ``data.confirm == 'yes' || data.confirm == 'oui'``. They are parsed once
into a typed syntax tree and evaluated by a dedicated interpreter; no source text
ever reaches a general-purpose evaluator.

Supported syntax:
    - Literals: single or double quoted strings, integers and decimals,
      ``true``, ``false`` and ``null``.
    - Field references: ``data.<name>`` (missing fields evaluate to ``null``).
    - Comparisons: ``==``, ``!=``, ``<``, ``>``, ``<=``, ``>=`` (``===`` and
      ``!==`` are accepted as aliases of ``==`` and ``!=``).
    - Boolean operators: ``&&`` / ``and``, ``||`` / ``or``, ``!`` / ``not``.
    - Parentheses for grouping.

Example:
    >>> condition = compile_condition("data.age >= 18 && data.country == 'CM'")
    >>> condition.evaluate({"age": 21, "country": "CM"})
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from litestar_chatflows.exceptions import ConditionSyntaxError

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "BooleanOp",
    "Comparison",
    "Condition",
    "ConditionNode",
    "FieldRef",
    "Literal",
    "Not",
    "compile_condition",
]


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<number>\d+(?:\.\d+)?)
    | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    | (?P<op>===|!==|==|!=|<=|>=|&&|\|\||<|>|!|\(|\)|\.)
    | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)

_OPERATOR_ALIASES = {"===": "==", "!==": "!=", "and": "&&", "or": "||", "not": "!"}
_COMPARISON_OPS = frozenset({"==", "!=", "<", ">", "<=", ">="})
_KEYWORD_LITERALS = {"true": True, "false": False, "null": None}


@dataclass(frozen=True)
class _Token:
    kind: str
    value: Any
    position: int


def _tokenize(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    position = 0
    while position < len(source):
        match = _TOKEN_RE.match(source, position)
        if match is None:
            raise ConditionSyntaxError(source, position, f"unexpected character {source[position]!r}")
        kind = match.lastgroup or ""
        text = match.group()
        if kind == "number":
            tokens.append(_Token("literal", float(text) if "." in text else int(text), position))
        elif kind == "string":
            body = re.sub(r"\\(.)", r"\1", text[1:-1])
            tokens.append(_Token("literal", body, position))
        elif kind == "op":
            tokens.append(_Token("op", _OPERATOR_ALIASES.get(text, text), position))
        elif kind == "name":
            if text in _KEYWORD_LITERALS:
                tokens.append(_Token("literal", _KEYWORD_LITERALS[text], position))
            elif text in _OPERATOR_ALIASES:
                tokens.append(_Token("op", _OPERATOR_ALIASES[text], position))
            else:
                tokens.append(_Token("name", text, position))
        position = match.end()
    tokens.append(_Token("end", None, len(source)))
    return tokens


class ConditionNode:
    """Base class for condition syntax tree nodes."""

    def evaluate(self, data: Mapping[str, Any]) -> Any:
        """Evaluate the node against workflow data."""
        raise NotImplementedError


@dataclass(frozen=True)
class Literal(ConditionNode):
    """A constant value."""

    value: Any

    def evaluate(self, data: Mapping[str, Any]) -> Any:
        return self.value


@dataclass(frozen=True)
class FieldRef(ConditionNode):
    """A ``data.<name>`` reference."""

    name: str

    def evaluate(self, data: Mapping[str, Any]) -> Any:
        return data.get(self.name)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _equals(left: Any, right: Any) -> bool:
    # bool is an int subclass; keep true != 1
    if isinstance(left, bool) is not isinstance(right, bool):
        return False
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return bool(left == right)


@dataclass(frozen=True)
class Comparison(ConditionNode):
    """A binary comparison between two operands.

    Ordering operators only compare numbers with numbers and strings with
    strings; any other combination evaluates to ``False``.
    """

    op: str
    left: ConditionNode
    right: ConditionNode

    def evaluate(self, data: Mapping[str, Any]) -> bool:
        left = self.left.evaluate(data)
        right = self.right.evaluate(data)
        if self.op == "==":
            return _equals(left, right)
        if self.op == "!=":
            return not _equals(left, right)
        comparable = (_is_number(left) and _is_number(right)) or (isinstance(left, str) and isinstance(right, str))
        if not comparable:
            return False
        if self.op == "<":
            return left < right
        if self.op == ">":
            return left > right
        if self.op == "<=":
            return left <= right
        return left >= right


@dataclass(frozen=True)
class BooleanOp(ConditionNode):
    """Short-circuiting ``&&`` / ``||``."""

    op: str
    operands: tuple[ConditionNode, ...]

    def evaluate(self, data: Mapping[str, Any]) -> bool:
        if self.op == "&&":
            return all(bool(operand.evaluate(data)) for operand in self.operands)
        return any(bool(operand.evaluate(data)) for operand in self.operands)


@dataclass(frozen=True)
class Not(ConditionNode):
    """Boolean negation."""

    operand: ConditionNode

    def evaluate(self, data: Mapping[str, Any]) -> bool:
        return not self.operand.evaluate(data)


class _Parser:
    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens = _tokenize(source)
        self.index = 0

    @property
    def current(self) -> _Token:
        return self.tokens[self.index]

    def advance(self) -> _Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def accept(self, op: str) -> bool:
        if self.current.kind == "op" and self.current.value == op:
            self.index += 1
            return True
        return False

    def error(self, detail: str) -> ConditionSyntaxError:
        return ConditionSyntaxError(self.source, self.current.position, detail)

    def parse(self) -> ConditionNode:
        if self.current.kind == "end":
            raise self.error("empty expression")
        node = self.parse_or()
        if self.current.kind != "end":
            raise self.error(f"unexpected token {self.current.value!r}")
        return node

    def parse_or(self) -> ConditionNode:
        operands = [self.parse_and()]
        while self.accept("||"):
            operands.append(self.parse_and())
        return operands[0] if len(operands) == 1 else BooleanOp("||", tuple(operands))

    def parse_and(self) -> ConditionNode:
        operands = [self.parse_unary()]
        while self.accept("&&"):
            operands.append(self.parse_unary())
        return operands[0] if len(operands) == 1 else BooleanOp("&&", tuple(operands))

    def parse_unary(self) -> ConditionNode:
        if self.accept("!"):
            return Not(self.parse_unary())
        return self.parse_comparison()

    def parse_comparison(self) -> ConditionNode:
        left = self.parse_operand()
        token = self.current
        if token.kind == "op" and token.value in _COMPARISON_OPS:
            self.advance()
            return Comparison(token.value, left, self.parse_operand())
        return left

    def parse_operand(self) -> ConditionNode:
        token = self.current
        if token.kind == "literal":
            self.advance()
            return Literal(token.value)
        if token.kind == "name":
            if token.value != "data":
                raise self.error(f"unknown name {token.value!r}, expected 'data.<field>'")
            self.advance()
            if not self.accept("."):
                raise self.error("expected '.' after 'data'")
            if self.current.kind != "name":
                raise self.error("expected a field name after 'data.'")
            return FieldRef(self.advance().value)
        if self.accept("("):
            node = self.parse_or()
            if not self.accept(")"):
                raise self.error("expected ')'")
            return node
        if token.kind == "end":
            raise self.error("unexpected end of expression")
        raise self.error(f"unexpected token {token.value!r}")


@dataclass(frozen=True)
class Condition:
    """A compiled transition condition.

    Attributes:
        source: The original expression text.
        root: Root node of the parsed syntax tree.
    """

    source: str
    root: ConditionNode

    def evaluate(self, data: Mapping[str, Any]) -> bool:
        """Evaluate the condition against workflow data.

        Args:
            data: Accumulated workflow data.

        Returns:
            Whether the condition holds.
        """
        return bool(self.root.evaluate(data))

    @property
    def fields(self) -> frozenset[str]:
        """Names of the data fields the condition reads."""
        found: set[str] = set()
        stack: list[ConditionNode] = [self.root]
        while stack:
            node = stack.pop()
            if isinstance(node, FieldRef):
                found.add(node.name)
            elif isinstance(node, Comparison):
                stack.extend((node.left, node.right))
            elif isinstance(node, BooleanOp):
                stack.extend(node.operands)
            elif isinstance(node, Not):
                stack.append(node.operand)
        return frozenset(found)


@lru_cache(maxsize=256)
def compile_condition(source: str) -> Condition:
    """Parse a condition expression.

    Args:
        source: The expression text.

    Returns:
        The compiled condition.

    Raises:
        ConditionSyntaxError: If the expression is malformed.

    Example:
        >>> compile_condition("data.choice == '1'").evaluate({"choice": "1"})
        True
    """
    return Condition(source=source, root=_Parser(source.strip()).parse())
