"""Filter expression types for the scalarq predicate language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

COMPARISON_OPS = ("==", "!=", ">", ">=", "<", "<=")
MEMBERSHIP_OPS = ("IN", "NOT_IN")

# Reserved words of the filter language, matched case-insensitively.
FILTER_KEYWORDS = frozenset({"and", "or", "not", "in", "like", "true", "false"})

# Operator seen from the other side: `5 < x` is `x > 5`.
FLIPPED_OPS: dict[str, str] = {
    "==": "==",
    "!=": "!=",
    "<": ">",
    "<=": ">=",
    ">": "<",
    ">=": "<=",
}

NULL_VALUE_ERROR = "None is not a valid literal in scalarq filter expressions."


class FilterExpression:
    """Base class for filter expressions."""

    def __and__(self, other: FilterExpression) -> LogicalExpression:
        return LogicalExpression(op="AND", children=[self, other])

    def __or__(self, other: FilterExpression) -> LogicalExpression:
        return LogicalExpression(op="OR", children=[self, other])

    def __invert__(self) -> LogicalExpression:
        return LogicalExpression(op="NOT", children=[self])

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass
class ComparisonExpression(FilterExpression):
    """A comparison between a field and a literal value."""

    field_name: str
    op: str  # "==", "!=", ">", ">=", "<", "<=", "LIKE", "IN", "NOT_IN"
    value: Any = None

    def __hash__(self) -> int:
        v = self.value
        if isinstance(v, list):
            v = tuple(v)
        return hash((self.field_name, self.op, v))

    def __eq__(self, other: object) -> bool:  # type: ignore[override]
        if not isinstance(other, ComparisonExpression):
            return NotImplemented
        return (
            self.field_name == other.field_name
            and self.op == other.op
            and self.value == other.value
            and type(self.value) is type(other.value)
        )

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field_name, "op": self.op, "value": self.value}


@dataclass
class LogicalExpression(FilterExpression):
    """A logical combination of filter expressions."""

    op: str  # "AND", "OR", "NOT"
    children: list[FilterExpression] = field(default_factory=list)

    def __hash__(self) -> int:
        return hash((self.op, tuple(self.children)))

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op, "children": [c.to_dict() for c in self.children]}


class FieldProxy:
    """Proxy that generates FilterExpression from field operations.

    Usage: field("fieldInt64") < 10
    """

    def __init__(self, field_name: str) -> None:
        self._field_name = field_name

    def __eq__(self, other: object) -> ComparisonExpression:  # type: ignore[override]
        if other is None:
            raise TypeError(NULL_VALUE_ERROR)
        return ComparisonExpression(self._field_name, "==", other)

    def __ne__(self, other: object) -> ComparisonExpression:  # type: ignore[override]
        if other is None:
            raise TypeError(NULL_VALUE_ERROR)
        return ComparisonExpression(self._field_name, "!=", other)

    def __gt__(self, other: Any) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, ">", other)

    def __ge__(self, other: Any) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, ">=", other)

    def __lt__(self, other: Any) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "<", other)

    def __le__(self, other: Any) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "<=", other)

    def like(self, pattern: str) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "LIKE", pattern)

    def startswith(self, prefix: str) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "LIKE", f"{_escape_like(prefix)}%")

    def in_(self, values: list[Any]) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "IN", list(values))

    def not_in(self, values: list[Any]) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "NOT_IN", list(values))

    def between(self, low: Any, high: Any) -> LogicalExpression:
        """Inclusive range, the same tree `low <= f <= high` parses to."""
        return LogicalExpression(op="AND", children=[self >= low, self <= high])

    def is_true(self) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "==", True)

    def is_false(self) -> ComparisonExpression:
        return ComparisonExpression(self._field_name, "==", False)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def field_ref(name: str) -> FieldProxy:
    """Create a proxy for building filters on the field *name*."""
    return FieldProxy(name)


def iter_field_names(expr: FilterExpression) -> list[str]:
    """Return every field name referenced by *expr*, in first-seen order."""
    names: list[str] = []
    stack = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, ComparisonExpression):
            if node.field_name not in names:
                names.append(node.field_name)
        elif isinstance(node, LogicalExpression):
            stack.extend(reversed(node.children))
    return names
