"""Filter-string parser: tokenizes and parses predicates into FilterExpression trees.

Grammar, lowest precedence first::

    expr       := and_expr (("or" | "||") and_expr)*
    and_expr   := unary (("and" | "&&") unary)*
    unary      := ("not" | "!") unary | "(" expr ")" | predicate
    predicate  := FIELD ["not"] "in" list
                | FIELD "like" STRING
                | FIELD CMP literal
                | literal CMP FIELD [CMP literal]
                | FIELD
    list       := "[" [literal ("," literal)*] "]"

A chained comparison `a < f <= b` is the conjunction of `f > a` and `f <= b`;
both operators must point the same way. A bare field is `FIELD == true`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, NoReturn

from scalarq.config import MAX_EXPRESSION_DEPTH
from scalarq.errors import ParseError
from scalarq.filters import (
    COMPARISON_OPS,
    FILTER_KEYWORDS,
    FLIPPED_OPS,
    ComparisonExpression,
    FilterExpression,
    LogicalExpression,
)

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<number>(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?)
    |(?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    |(?P<op><=|>=|==|!=|&&|\|\||[<>!()\[\],+-])
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'"}

_ASCENDING = {"<", "<="}
_DESCENDING = {">", ">="}


@dataclass
class Token:
    kind: str  # "number", "string", "op", "ident", "keyword", "end"
    value: str
    pos: int


def _unescape(body: str) -> str:
    # Unknown escapes are kept verbatim so LIKE patterns can carry `\%` and `\_`.
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(0)), body)


def tokenize(text: str) -> list[Token]:
    """Split *text* into tokens, ending with an "end" token."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            if text[pos] in "\"'":
                raise ParseError("Unterminated string literal", text, pos)
            raise ParseError(f"Unexpected character {text[pos]!r}", text, pos)
        kind = m.lastgroup
        value = m.group()
        if kind == "ident" and value.lower() in FILTER_KEYWORDS:
            tokens.append(Token("keyword", value.lower(), pos))
        elif kind != "ws":
            tokens.append(Token(kind or "", value, pos))
        pos = m.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


class _Parser:
    def __init__(self, text: str, max_depth: int) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0
        self.max_depth = max_depth

    # --- token helpers ---

    def _peek(self, offset: int = 0) -> Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        if tok.kind != "end":
            self.index += 1
        return tok

    def _at(self, kind: str, *values: str) -> bool:
        tok = self._peek()
        return tok.kind == kind and (not values or tok.value in values)

    def _expect(self, kind: str, value: str, what: str) -> Token:
        if not self._at(kind, value):
            self._fail(f"Expected {what}")
        return self._advance()

    def _fail(self, message: str, tok: Token | None = None) -> NoReturn:
        tok = tok or self._peek()
        found = "end of input" if tok.kind == "end" else repr(tok.value)
        raise ParseError(f"{message}, found {found}", self.text, tok.pos)

    # --- grammar ---

    def parse(self) -> FilterExpression:
        expr = self._or_expr()
        if not self._at("end"):
            self._fail("Unexpected token")
        return expr

    def _or_expr(self) -> FilterExpression:
        children = [self._and_expr()]
        while self._at("keyword", "or") or self._at("op", "||"):
            self._advance()
            children.append(self._and_expr())
        return children[0] if len(children) == 1 else LogicalExpression("OR", children)

    def _and_expr(self) -> FilterExpression:
        children = [self._unary()]
        while self._at("keyword", "and") or self._at("op", "&&"):
            self._advance()
            children.append(self._unary())
        return children[0] if len(children) == 1 else LogicalExpression("AND", children)

    def _enter(self) -> None:
        tok = self._advance()
        self.depth += 1
        if self.depth > self.max_depth:
            raise ParseError(
                f"Expression nested too deeply (more than {self.max_depth} levels)",
                self.text,
                tok.pos,
            )

    def _unary(self) -> FilterExpression:
        if self._at("keyword", "not") or self._at("op", "!"):
            self._enter()
            expr: FilterExpression = LogicalExpression("NOT", [self._unary()])
        elif self._at("op", "("):
            self._enter()
            expr = self._or_expr()
            self._expect("op", ")", "')'")
        else:
            return self._predicate()
        self.depth -= 1
        return expr

    def _predicate(self) -> FilterExpression:
        if self._at("ident"):
            return self._field_first()
        if self._is_literal_start():
            return self._literal_first()
        self._fail("Expected a predicate")

    def _field_first(self) -> FilterExpression:
        name = self._advance().value
        after = self._peek(1)
        if self._at("keyword", "not") and after.kind == "keyword" and after.value == "in":
            self._advance()
            self._advance()
            return ComparisonExpression(name, "NOT_IN", self._list())
        if self._at("keyword", "in"):
            self._advance()
            return ComparisonExpression(name, "IN", self._list())
        if self._at("keyword", "like"):
            self._advance()
            tok = self._peek()
            if tok.kind != "string":
                self._fail("Expected a string pattern after 'like'")
            self._advance()
            return ComparisonExpression(name, "LIKE", _unescape(tok.value[1:-1]))
        if self._at("op", *COMPARISON_OPS):
            op = self._advance().value
            if self._at("ident"):
                self._fail("Comparisons between two fields are not supported")
            value = self._literal()
            if self._at("op", *COMPARISON_OPS):
                self._fail("A chained comparison must start with a literal")
            return ComparisonExpression(name, op, value)
        return ComparisonExpression(name, "==", True)

    def _literal_first(self) -> FilterExpression:
        low = self._literal()
        if not self._at("op", *COMPARISON_OPS):
            self._fail("Expected a comparison operator after literal")
        first_tok = self._advance()
        first_op = first_tok.value
        if not self._at("ident"):
            self._fail("Expected a field name")
        name = self._advance().value
        left = ComparisonExpression(name, FLIPPED_OPS[first_op], low)
        if not self._at("op", *COMPARISON_OPS):
            return left
        second_tok = self._advance()
        second_op = second_tok.value
        same_way = (first_op in _ASCENDING and second_op in _ASCENDING) or (
            first_op in _DESCENDING and second_op in _DESCENDING
        )
        if not same_way:
            raise ParseError(
                f"Chained comparison operators {first_op!r} and {second_op!r} "
                "must both be '<'/'<=' or both be '>'/'>='",
                self.text,
                second_tok.pos,
            )
        high = self._literal()
        return LogicalExpression("AND", [left, ComparisonExpression(name, second_op, high)])

    def _list(self) -> list[Any]:
        self._expect("op", "[", "'[' to open a list")
        values: list[Any] = []
        if self._at("op", "]"):
            self._advance()
            return values
        values.append(self._literal())
        while self._at("op", ","):
            self._advance()
            values.append(self._literal())
        self._expect("op", "]", "',' or ']'")
        return values

    def _is_literal_start(self) -> bool:
        tok = self._peek()
        return (
            tok.kind in ("number", "string")
            or (tok.kind == "keyword" and tok.value in ("true", "false"))
            or (tok.kind == "op" and tok.value in ("-", "+"))
        )

    def _literal(self) -> Any:
        tok = self._peek()
        if tok.kind == "string":
            self._advance()
            return _unescape(tok.value[1:-1])
        if tok.kind == "keyword" and tok.value in ("true", "false"):
            self._advance()
            return tok.value == "true"
        sign = 1
        if tok.kind == "op" and tok.value in ("-", "+"):
            self._advance()
            sign = -1 if tok.value == "-" else 1
            tok = self._peek()
        if tok.kind != "number":
            self._fail("Expected a literal")
        self._advance()
        if re.fullmatch(r"\d+", tok.value):
            return sign * int(tok.value)
        return sign * float(tok.value)


def parse_filter(
    text: str, *, max_depth: int = MAX_EXPRESSION_DEPTH
) -> FilterExpression | None:
    """Parse *text* into a FilterExpression.

    Returns None for an empty or whitespace-only filter. Raises ParseError on
    malformed input, including `not` or parentheses nested past *max_depth*.
    """
    if not text or not text.strip():
        return None
    return _Parser(text, max_depth).parse()

