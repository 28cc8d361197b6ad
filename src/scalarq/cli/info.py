"""scalarq describe / stats — show collection metadata and row counts."""

from __future__ import annotations

from scalarq.cli._loader import open_collection_from_state
from scalarq.cli._output import emit_json, print_mapping, print_rows


def describe_cmd() -> None:
    """Show the schema, partitions and properties of the collection."""
    from scalarq.cli import state

    json_mode = state.json_output
    client, collection, _ = open_collection_from_state()
    info = client.describe_collection(collection.name)

    if json_mode:
        emit_json(info)
        return

    summary = {
        "Collection": info["collection_name"],
        "Description": info["description"] or None,
        "Primary field": info["primary_field"],
        "Entities": info["num_entities"],
        "Partitions": info["partitions"],
        "Aliases": info["aliases"] or None,
    }
    print_mapping({k: v for k, v in summary.items() if v is not None})
    print("\nFields:")
    print_rows(
        info["schema"]["fields"],
        columns=["name", "dtype", "is_primary", "max_length"],
        count_label=None,
    )
    print()
    print_mapping({"Properties": info["properties"]})


def stats_cmd() -> None:
    """Show row counts per partition."""
    from scalarq.cli import state

    json_mode = state.json_output
    client, collection, _ = open_collection_from_state()
    stats = client.get_collection_stats(collection.name)
    per_partition = {
        name: len(collection.snapshot([name])) for name in collection.list_partitions()
    }

    if json_mode:
        emit_json({**stats, "partitions": per_partition})
        return

    print(f"Row count: {stats['row_count']}")
    print_rows(
        [{"partition": name, "rows": n} for name, n in per_partition.items()],
        count_label="partition(s)",
    )
