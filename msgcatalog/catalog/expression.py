"""
Compiler for gettext plural-form expressions.

Plural-Forms headers carry a C expression over the count ``n``, e.g.::

    n%10==1 && n%100!=11 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2

The expression is tokenized and parsed into a small tree of nodes that can
be evaluated for any non-negative count. Supported operators, lowest
precedence first:

- ``?:`` (right associative)
- ``||``
- ``&&``
- ``==`` ``!=``
- ``<`` ``<=`` ``>`` ``>=``
- ``+`` ``-``
- ``*`` ``/`` ``%``
- unary ``!`` ``-``
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from msgcatalog.catalog.errors import RuleSyntaxError

_TOKEN_RE = re.compile(r"\s*(?:(?P<number>\d+)|(?P<variable>n)|(?P<op>&&|\|\||==|!=|<=|>=|[-+*/%<>!?:()]))")

_BINARY_PRECEDENCE: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 4,
    "<=": 4,
    ">": 4,
    ">=": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
    "%": 6,
}

# Deepest expression tree accepted; evaluation recurses once per level
MAX_DEPTH = 100


@dataclass(frozen=True)
class Token:
    kind: str  # "number", "variable", "op" or "end"
    value: str
    position: int


def _c_divide(left: int, right: int) -> int:
    # Truncates toward zero; a zero divisor yields 0 so rules stay total
    if right == 0:
        return 0
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _c_modulo(left: int, right: int) -> int:
    if right == 0:
        return 0
    return left - right * _c_divide(left, right)


class Node:
    """Base class for expression tree nodes."""

    def evaluate(self, n: int) -> int:
        raise NotImplementedError


@dataclass(frozen=True)
class Number(Node):
    value: int

    def evaluate(self, n: int) -> int:
        return self.value


@dataclass(frozen=True)
class Variable(Node):
    def evaluate(self, n: int) -> int:
        return n


@dataclass(frozen=True)
class Unary(Node):
    op: str
    operand: Node

    def evaluate(self, n: int) -> int:
        value = self.operand.evaluate(n)
        if self.op == "!":
            return int(not value)
        return -value


@dataclass(frozen=True)
class Binary(Node):
    op: str
    left: Node
    right: Node

    def evaluate(self, n: int) -> int:
        op = self.op
        # Logical operators short-circuit like C
        if op == "&&":
            return int(bool(self.left.evaluate(n)) and bool(self.right.evaluate(n)))
        if op == "||":
            return int(bool(self.left.evaluate(n)) or bool(self.right.evaluate(n)))

        left = self.left.evaluate(n)
        right = self.right.evaluate(n)
        if op == "==":
            return int(left == right)
        if op == "!=":
            return int(left != right)
        if op == "<":
            return int(left < right)
        if op == "<=":
            return int(left <= right)
        if op == ">":
            return int(left > right)
        if op == ">=":
            return int(left >= right)
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            return _c_divide(left, right)
        return _c_modulo(left, right)


@dataclass(frozen=True)
class Conditional(Node):
    test: Node
    if_true: Node
    if_false: Node

    def evaluate(self, n: int) -> int:
        if self.test.evaluate(n):
            return self.if_true.evaluate(n)
        return self.if_false.evaluate(n)


def tokenize(expression: str) -> list[Token]:
    """
    Split a plural expression into tokens.

    Raises:
        RuleSyntaxError: If an unexpected character is found
    """
    tokens: list[Token] = []
    position = 0
    length = len(expression)

    while position < length:
        if expression[position:].strip() == "":
            break
        match = _TOKEN_RE.match(expression, position)
        if match is None:
            offset = position + len(expression[position:]) - len(expression[position:].lstrip())
            raise RuleSyntaxError(
                expression, f"unexpected character {expression[offset]!r}", offset
            )
        kind = match.lastgroup or "op"
        tokens.append(Token(kind, match.group(kind), match.start(kind)))
        position = match.end()

    tokens.append(Token("end", "", length))
    return tokens


class ExpressionParser:
    """Recursive-descent parser producing an evaluable Node tree."""

    def __init__(self, expression: str):
        self.expression = expression
        self._tokens = tokenize(expression)
        self._index = 0

    @property
    def _current(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind != "end":
            self._index += 1
        return token

    def _expect(self, value: str) -> None:
        token = self._current
        if token.kind != "op" or token.value != value:
            raise self._error(f"expected {value!r}", token)
        self._advance()

    def _error(self, message: str, token: Token) -> RuleSyntaxError:
        found = "end of expression" if token.kind == "end" else repr(token.value)
        return RuleSyntaxError(self.expression, f"{message}, found {found}", token.position)

    def parse(self) -> Node:
        """
        Parse the whole expression.

        Raises:
            RuleSyntaxError: If the expression is malformed
        """
        node = self._parse_conditional()
        if self._current.kind != "end":
            raise self._error("unexpected token", self._current)
        return node

    def _parse_conditional(self) -> Node:
        test = self._parse_binary(1)
        if self._current.kind == "op" and self._current.value == "?":
            self._advance()
            if_true = self._parse_conditional()
            self._expect(":")
            if_false = self._parse_conditional()
            return Conditional(test, if_true, if_false)
        return test

    def _parse_binary(self, min_precedence: int) -> Node:
        left = self._parse_unary()
        while True:
            token = self._current
            precedence = _BINARY_PRECEDENCE.get(token.value) if token.kind == "op" else None
            if precedence is None or precedence < min_precedence:
                return left
            self._advance()
            right = self._parse_binary(precedence + 1)
            left = Binary(token.value, left, right)

    def _parse_unary(self) -> Node:
        token = self._current
        if token.kind == "op" and token.value in ("!", "-"):
            self._advance()
            return Unary(token.value, self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Node:
        token = self._advance()
        if token.kind == "number":
            return Number(int(token.value))
        if token.kind == "variable":
            return Variable()
        if token.kind == "op" and token.value == "(":
            node = self._parse_conditional()
            self._expect(")")
            return node
        raise self._error("expected a number, 'n' or '('", token)


def _tree_depth(root: Node) -> int:
    depth = 0
    pending = [(root, 1)]
    while pending:
        node, level = pending.pop()
        depth = max(depth, level)
        if isinstance(node, Unary):
            pending.append((node.operand, level + 1))
        elif isinstance(node, Binary):
            pending.extend([(node.left, level + 1), (node.right, level + 1)])
        elif isinstance(node, Conditional):
            pending.extend(
                [(node.test, level + 1), (node.if_true, level + 1), (node.if_false, level + 1)]
            )
    return depth


def compile_expression(expression: str) -> Node:
    """
    Compile a plural expression into an evaluable tree.

    Args:
        expression: C-style expression over ``n``

    Returns:
        Root node of the expression tree

    Raises:
        RuleSyntaxError: If the expression is empty, malformed or nested
            deeper than MAX_DEPTH
    """
    if not expression.strip():
        raise RuleSyntaxError(expression, "empty expression")
    try:
        tree = ExpressionParser(expression).parse()
    except RecursionError:
        raise RuleSyntaxError(expression, "expression nested too deeply") from None
    if _tree_depth(tree) > MAX_DEPTH:
        raise RuleSyntaxError(expression, "expression nested too deeply")
    return tree
