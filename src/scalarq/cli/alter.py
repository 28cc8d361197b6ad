"""scalarq alter — change collection properties and write the data file back."""

from __future__ import annotations

from typing import Optional

import typer

from scalarq.cli import _exitcodes as ec
from scalarq.cli._loader import dump_collection, open_collection_from_state, write_document
from scalarq.cli._output import emit_json, print_error, print_mapping
from scalarq.errors import ScalarqError
from scalarq.params import AlterCollectionParam


def alter_cmd(
    ttl: Optional[int] = typer.Option(None, "--ttl", help="Collection TTL in seconds (0 disables)"),
    mmap: Optional[bool] = typer.Option(
        None, "--mmap/--no-mmap", help="Enable or disable mmap for index data files"
    ),
    properties: Optional[list[str]] = typer.Option(
        None, "--property", help="KEY=VALUE property, forwarded verbatim (repeatable)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the change without writing"),
) -> None:
    """Alter collection properties."""
    from scalarq.cli import state

    json_mode = state.json_output

    if ttl is None and mmap is None and not properties:
        print_error("Nothing to alter: pass --ttl, --mmap/--no-mmap or --property")
        raise typer.Exit(ec.USAGE_ERROR)

    client, collection, path = open_collection_from_state()

    try:
        builder = AlterCollectionParam.new_builder().with_collection_name(collection.name)
        if ttl is not None:
            builder.with_ttl(ttl)
        if mmap is not None:
            builder.with_mmap_enabled(mmap)
        for item in properties or []:
            key, sep, value = item.partition("=")
            if not sep:
                print_error(f"Invalid property (expected KEY=VALUE): {item}")
                raise typer.Exit(ec.USAGE_ERROR)
            builder.with_property(key.strip(), value.strip())
        param = builder.build()
        client.alter_collection(param)
    except ScalarqError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    if not dry_run:
        try:
            write_document(path, dump_collection(client, collection))
        except OSError as e:
            print_error(f"Failed to write {path}: {e}")
            raise typer.Exit(ec.DATA_ERROR)

    result = {
        "collection_name": collection.name,
        "properties": collection.properties,
        "written": not dry_run,
    }
    if json_mode:
        emit_json(result)
    else:
        print_mapping(result)
