"""Collection documents: load a JSON/YAML file into a client and write it back."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import typer
import yaml

from scalarq.cli import _exitcodes as ec
from scalarq.cli._output import print_error
from scalarq.client import ScalarqClient
from scalarq.config import ScalarqConfig
from scalarq.storage import Collection
from scalarq.types import CollectionSchema

_YAML_SUFFIXES = (".yaml", ".yml")


def config_from_env() -> ScalarqConfig:
    """Build engine config from SCALARQ_* environment variables."""
    defaults = ScalarqConfig()
    return ScalarqConfig(
        default_partition_name=os.getenv(
            "SCALARQ_DEFAULT_PARTITION", defaults.default_partition_name
        ),
        max_filter_length=int(
            os.getenv("SCALARQ_MAX_FILTER_LENGTH", str(defaults.max_filter_length))
        ),
        max_query_result_window=int(
            os.getenv("SCALARQ_MAX_RESULT_WINDOW", str(defaults.max_query_result_window))
        ),
        max_expression_depth=int(
            os.getenv("SCALARQ_MAX_EXPRESSION_DEPTH", str(defaults.max_expression_depth))
        ),
    )


def read_document(path: str | Path) -> dict[str, Any]:
    """Read a collection document; YAML by suffix, JSON otherwise."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Data file {path} must contain a mapping at the top level")
    for key in ("collection_name", "schema"):
        if key not in data:
            raise ValueError(f"Data file {path} is missing '{key}'")
    return data


def write_document(path: str | Path, data: dict[str, Any]) -> None:
    path = Path(path)
    if path.suffix.lower() in _YAML_SUFFIXES:
        content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    else:
        content = json.dumps(data, indent=2) + "\n"
    path.write_text(content, encoding="utf-8")


def load_collection(
    path: str | Path, config: ScalarqConfig | None = None
) -> tuple[ScalarqClient, Collection]:
    """Create a client holding the single collection described by *path*.

    Document layout::

        collection_name: books
        schema: {fields: [{name: id, dtype: INT64, is_primary: true}, ...]}
        properties: {collection.ttl.seconds: "0"}
        partitions: {_default: [...rows], partA: [...rows]}
        aliases: [library]
    """
    data = read_document(path)
    client = ScalarqClient(config or config_from_env())
    name = data["collection_name"]
    collection = client.create_collection(
        name,
        CollectionSchema.from_dict(data["schema"]),
        properties=data.get("properties") or None,
        description=data.get("description", ""),
    )
    for partition_name, rows in (data.get("partitions") or {}).items():
        if not collection.has_partition(partition_name):
            collection.create_partition(partition_name)
        if rows:
            collection.insert(rows, partition_name)
    for alias in data.get("aliases") or []:
        client.create_alias(name, alias)
    return client, collection


def dump_collection(client: ScalarqClient, collection: Collection) -> dict[str, Any]:
    """Inverse of load_collection for the live rows of *collection*."""
    data: dict[str, Any] = {"collection_name": collection.name}
    if collection.description:
        data["description"] = collection.description
    data["schema"] = collection.schema.to_dict()
    data["properties"] = collection.properties
    data["partitions"] = {
        name: [dict(row.data) for row in collection.snapshot([name])]
        for name in collection.list_partitions()
    }
    aliases = client.list_aliases(collection.name)
    if aliases:
        data["aliases"] = aliases
    return data


def open_collection_from_state() -> tuple[ScalarqClient, Collection, str]:
    """Load the collection named by the global --data option, exiting on failure."""
    from scalarq.cli import state

    if not state.data:
        print_error("A data file is required: pass --data or set SCALARQ_DATA")
        raise typer.Exit(ec.USAGE_ERROR)
    try:
        client, collection = load_collection(state.data)
    except Exception as e:
        print_error(f"Failed to load {state.data}: {e}")
        raise typer.Exit(ec.DATA_ERROR)
    return client, collection, state.data
