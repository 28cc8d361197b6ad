"""Compile FilterExpression trees into type-checked row predicates.

Compilation happens against a CollectionSchema before any row is scanned, so
unknown fields and operator/type mismatches fail a request up front instead of
surfacing halfway through a scan.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Mapping
from typing import Any

from scalarq.config import MAX_EXPRESSION_DEPTH
from scalarq.errors import FieldTypeError, ParamError, SchemaError
from scalarq.filters import (
    MEMBERSHIP_OPS,
    ComparisonExpression,
    FilterExpression,
    LogicalExpression,
)
from scalarq.types import INTEGER_BOUNDS, CollectionSchema, DataType, FieldSchema

Row = Mapping[str, Any]
Predicate = Callable[[Row], bool]

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _always(result: bool) -> Predicate:
    def predicate(row: Row) -> bool:
        return result

    predicate.constant = result  # type: ignore[attr-defined]
    return predicate


ALWAYS_TRUE = _always(True)
ALWAYS_FALSE = _always(False)


def constant_of(predicate: Predicate) -> bool | None:
    """Return the folded result of a constant predicate, or None."""
    return getattr(predicate, "constant", None)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _fits(f: FieldSchema, value: Any) -> bool:
    """Whether *value* has a type comparable with field *f*."""
    if f.dtype is DataType.BOOL:
        return isinstance(value, bool)
    if f.dtype.is_numeric:
        return _is_number(value)
    return isinstance(value, str)


def fold_integer_bounds(op: str, value: float, low: int, high: int) -> bool | None:
    """Decide `field op value` for every field value in [low, high], if possible.

    Returns True or False when the comparison has the same outcome for the
    whole range, None when it depends on the row.
    """
    if value > high:
        return {"==": False, "!=": True, "<": True, "<=": True, ">": False, ">=": False}[op]
    if value < low:
        return {"==": False, "!=": True, "<": False, "<=": False, ">": True, ">=": True}[op]
    return None


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a LIKE pattern into a compiled, case-sensitive regex.

    `%` matches any run of characters, `_` exactly one; `\\%` and `\\_` are
    literal.
    """
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern) and pattern[i + 1] in "%_\\":
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def _compile_like(f: FieldSchema, pattern: Any) -> Predicate:
    if f.dtype is not DataType.VARCHAR:
        raise FieldTypeError(f.name, f.dtype.value, "'like' requires a VARCHAR field")
    if not isinstance(pattern, str):
        raise FieldTypeError(f.name, f.dtype.value, "'like' requires a string pattern")
    name = f.name
    body = pattern[:-1]
    if pattern.endswith("%") and not re.search(r"[%_\\]", body):
        return lambda row: row[name].startswith(body)
    if not re.search(r"[%_\\]", pattern):
        return lambda row: row[name] == pattern
    regex = like_to_regex(pattern)
    return lambda row: regex.fullmatch(row[name]) is not None


def _compile_membership(f: FieldSchema, op: str, values: Any) -> Predicate:
    if not isinstance(values, (list, tuple)):
        raise FieldTypeError(f.name, f.dtype.value, f"'{op}' requires a list of values")
    # Elements of another type can never equal a stored value.
    members = frozenset(v for v in values if _fits(f, v))
    name = f.name
    if op == "IN":
        if not members:
            return ALWAYS_FALSE
        return lambda row: row[name] in members
    if not members:
        return ALWAYS_TRUE
    return lambda row: row[name] not in members


def _compile_comparison(f: FieldSchema, op: str, value: Any) -> Predicate:
    if op not in _OPERATORS:
        raise FieldTypeError(f.name, f.dtype.value, f"unsupported operator '{op}'")
    if not _fits(f, value):
        raise FieldTypeError(
            f.name, f.dtype.value, f"cannot compare with {type(value).__name__} literal {value!r}"
        )
    if f.dtype is DataType.BOOL and op not in ("==", "!="):
        raise FieldTypeError(f.name, f.dtype.value, f"operator '{op}' is not defined for BOOL")
    if f.dtype.is_integer:
        low, high = INTEGER_BOUNDS[f.dtype]
        folded = fold_integer_bounds(op, value, low, high)
        if folded is not None:
            return ALWAYS_TRUE if folded else ALWAYS_FALSE
    name = f.name
    compare = _OPERATORS[op]
    return lambda row: compare(row[name], value)


def _compile_logical(
    expr: LogicalExpression,
    schema: CollectionSchema,
    collection_name: str | None,
    depth: int,
    max_depth: int | None,
) -> Predicate:
    children = [_compile(c, schema, collection_name, depth + 1, max_depth) for c in expr.children]
    if expr.op == "NOT":
        if len(children) != 1:
            raise ValueError("NOT expression must have exactly one child")
        child = children[0]
        constant = constant_of(child)
        if constant is not None:
            return ALWAYS_FALSE if constant else ALWAYS_TRUE
        return lambda row: not child(row)

    if expr.op == "AND":
        if any(constant_of(c) is False for c in children):
            return ALWAYS_FALSE
        live = [c for c in children if constant_of(c) is None]
        if not live:
            return ALWAYS_TRUE
        if len(live) == 1:
            return live[0]
        return lambda row: all(c(row) for c in live)

    if expr.op == "OR":
        if any(constant_of(c) is True for c in children):
            return ALWAYS_TRUE
        live = [c for c in children if constant_of(c) is None]
        if not live:
            return ALWAYS_FALSE
        if len(live) == 1:
            return live[0]
        return lambda row: any(c(row) for c in live)

    raise ValueError(f"Unknown logical operator '{expr.op}'")


def compile_filter(
    expr: FilterExpression | None,
    schema: CollectionSchema,
    *,
    collection_name: str | None = None,
    max_depth: int | None = MAX_EXPRESSION_DEPTH,
) -> Predicate:
    """Type-check *expr* against *schema* and return a row predicate.

    A None expression matches every row. Raises SchemaError for unknown
    fields, FieldTypeError for operator/type mismatches and ParamError for
    logical operators nested more than *max_depth* levels. Pass
    ``max_depth=None`` for trees from parse_filter, which bounds nesting itself.
    """
    if expr is None:
        return ALWAYS_TRUE
    return _compile(expr, schema, collection_name, 0, max_depth)


def _compile(
    expr: FilterExpression,
    schema: CollectionSchema,
    collection_name: str | None,
    depth: int,
    max_depth: int | None,
) -> Predicate:
    if isinstance(expr, LogicalExpression):
        if max_depth is not None and depth >= max_depth:
            raise ParamError(f"Expression nested too deeply (more than {max_depth} levels)")
        return _compile_logical(expr, schema, collection_name, depth, max_depth)
    if isinstance(expr, ComparisonExpression):
        try:
            f = schema.get_field(expr.field_name)
        except SchemaError:
            raise SchemaError(expr.field_name, collection_name) from None
        if expr.op == "LIKE":
            return _compile_like(f, expr.value)
        if expr.op in MEMBERSHIP_OPS:
            return _compile_membership(f, expr.op, expr.value)
        return _compile_comparison(f, expr.op, expr.value)
    raise TypeError(f"Unsupported filter expression: {type(expr).__name__}")


def evaluate(expr: FilterExpression | None, row: Row, schema: CollectionSchema) -> bool:
    """Evaluate *expr* against a single row."""
    return compile_filter(expr, schema)(row)
