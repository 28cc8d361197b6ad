"""Rendering of query results, collection metadata and errors for the CLI."""

from __future__ import annotations

import json
import sys
from typing import Any, Iterable, Mapping


def emit_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def format_value(value: Any) -> str:
    """Render a scalar the way it would be written in a filter."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    return str(value)


def print_rows(
    rows: list[Mapping[str, Any]],
    *,
    columns: Iterable[str] | None = None,
    count_label: str | None = "row(s)",
) -> None:
    """Print result rows as an aligned grid.

    Columns default to the keys of all rows in first-seen order, so projected
    results and ``count(*)`` rows render without extra setup. Missing cells
    are left blank. ``count_label`` controls the trailing count line.
    """
    if not rows:
        print("No results.")
        return

    if columns is None:
        seen: dict[str, None] = {}
        for row in rows:
            seen.update(dict.fromkeys(row))
        columns = seen
    headers = list(columns)

    grid = [[format_value(row.get(h)) for h in headers] for row in rows]
    widths = [max([len(h)] + [len(line[i]) for line in grid]) for i, h in enumerate(headers)]

    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)).rstrip())
    print("  ".join("-" * w for w in widths))
    for line in grid:
        print("  ".join(cell.ljust(w) for cell, w in zip(line, widths)).rstrip())
    if count_label:
        print(f"\n{len(rows)} {count_label}")


def print_mapping(data: Mapping[str, Any], indent: int = 0) -> None:
    """Print ``key: value`` lines, nesting sub-mappings one level deeper."""
    pad = "  " * indent
    for key, value in data.items():
        if isinstance(value, Mapping):
            if not value:
                print(f"{pad}{key}: (none)")
                continue
            print(f"{pad}{key}:")
            print_mapping(value, indent + 1)
        else:
            print(f"{pad}{key}: {format_value(value)}")


def print_error(msg: str) -> None:
    print(f"Error: {msg}", file=sys.stderr)
