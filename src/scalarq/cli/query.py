"""scalarq query — run a filter query against the collection in a data file."""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from scalarq.cli import _exitcodes as ec
from scalarq.cli._loader import open_collection_from_state
from scalarq.cli._output import emit_json, print_error, print_rows
from scalarq.errors import ParseError, ScalarqError
from scalarq.query import ConsistencyLevel


def query_cmd(
    filter_expr: str = typer.Option("", "--filter", "-f", help="Filter expression"),
    ids: Optional[list[str]] = typer.Option(
        None, "--id", help="Primary key allowlist entry, as JSON (repeatable)"
    ),
    partitions: Optional[list[str]] = typer.Option(
        None, "--partition", "-p", help="Restrict to this partition (repeatable)"
    ),
    output_fields: Optional[list[str]] = typer.Option(
        None, "--output-field", "-o", help="Field to return; '*' for all (repeatable)"
    ),
    limit: Optional[int] = typer.Option(None, "--limit", help="Max results"),
    offset: int = typer.Option(0, "--offset", help="Skip first N results"),
    consistency_level: str = typer.Option(
        ConsistencyLevel.BOUNDED.value, "--consistency-level", help="Accepted and ignored"
    ),
) -> None:
    """Query rows that satisfy a filter expression."""
    from scalarq.cli import state

    json_mode = state.json_output

    try:
        level = ConsistencyLevel(consistency_level.upper())
    except ValueError:
        print_error(f"Unknown consistency level '{consistency_level}'")
        raise typer.Exit(ec.USAGE_ERROR)

    try:
        id_values = _parse_ids(ids)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    client, collection, _ = open_collection_from_state()

    try:
        results = client.query(
            collection.name,
            filter_expr,
            ids=id_values,
            partition_names=partitions or None,
            consistency_level=level,
            output_fields=output_fields or ["*"],
            limit=limit,
            offset=offset,
        )
    except ParseError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except ScalarqError as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)

    if json_mode:
        emit_json(results)
    else:
        print_rows(results)


def _parse_ids(ids: list[str] | None) -> list[Any] | None:
    """Parse --id values; each is a JSON scalar (42 or "key")."""
    if not ids:
        return None
    values: list[Any] = []
    for raw in ids:
        try:
            values.append(json.loads(raw))
        except json.JSONDecodeError:
            # Bare strings are accepted for VARCHAR primary keys.
            values.append(raw)
    for v in values:
        if not isinstance(v, (int, str)) or isinstance(v, bool):
            raise ValueError(f"Invalid id {v!r}: expected an integer or string")
    return values

