"""scalarq parse — show the expression tree of a filter string."""

from __future__ import annotations

import typer

from scalarq.cli import _exitcodes as ec
from scalarq.cli._output import emit_json, print_error
from scalarq.errors import ParseError, ScalarqError
from scalarq.evaluator import compile_filter, constant_of
from scalarq.filters import (
    ComparisonExpression,
    FilterExpression,
    LogicalExpression,
    iter_field_names,
)
from scalarq.parser import parse_filter


def parse_cmd(
    filter_expr: str = typer.Argument(..., help="Filter expression to parse"),
    check: bool = typer.Option(
        False, "--check", help="Also type-check against the schema of the --data collection"
    ),
) -> None:
    """Parse a filter expression and print its tree."""
    from scalarq.cli import state

    json_mode = state.json_output

    try:
        expr = parse_filter(filter_expr)
    except ParseError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    if expr is None:
        if json_mode:
            emit_json({"tree": None, "fields": []})
        else:
            print("(no predicate)")
        return

    data: dict[str, object] = {"tree": expr.to_dict(), "fields": iter_field_names(expr)}

    if check:
        from scalarq.cli._loader import open_collection_from_state

        _, collection, _ = open_collection_from_state()
        try:
            predicate = compile_filter(
                expr, collection.schema, collection_name=collection.name, max_depth=None
            )
        except ScalarqError as e:
            print_error(str(e))
            raise typer.Exit(ec.EXECUTION_FAILURE)
        constant = constant_of(predicate)
        data["constant"] = constant

    if json_mode:
        emit_json(data)
        return

    for line in _render(expr):
        print(line)
    if "constant" in data:
        outcome = data["constant"]
        if outcome is None:
            print("type check: ok")
        else:
            print(f"type check: ok (always {'true' if outcome else 'false'})")


def _render(expr: FilterExpression, depth: int = 0) -> list[str]:
    pad = "  " * depth
    if isinstance(expr, ComparisonExpression):
        return [f"{pad}{expr.field_name} {expr.op} {expr.value!r}"]
    if not isinstance(expr, LogicalExpression):
        raise TypeError(f"Unsupported filter expression: {type(expr).__name__}")
    lines = [f"{pad}{expr.op}"]
    for child in expr.children:
        lines.extend(_render(child, depth + 1))
    return lines
