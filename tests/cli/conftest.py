"""Shared fixtures for CLI tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
import yaml
from typer.testing import CliRunner

from scalarq.cli import app
from tests.common import (
    COLLECTION_NAME,
    PARTITION_A,
    PARTITION_B,
    make_rows,
    make_schema,
)

if TYPE_CHECKING:
    from click.testing import Result


def make_document(properties: dict[str, str] | None = None) -> dict:
    """A collection document with ten rows in each of two partitions."""
    return {
        "collection_name": COLLECTION_NAME,
        "description": "CLI fixture",
        "schema": make_schema().to_dict(),
        "properties": properties or {},
        "partitions": {
            PARTITION_A: make_rows(0, 10),
            PARTITION_B: make_rows(10, 10),
        },
        "aliases": ["fixtureAlias"],
    }


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def data_file(tmp_path):
    """Write the fixture document as JSON and return its path."""
    path = tmp_path / "collection.json"
    path.write_text(json.dumps(make_document()), encoding="utf-8")
    return str(path)


@pytest.fixture
def yaml_data_file(tmp_path):
    """Write the fixture document as YAML and return its path."""
    path = tmp_path / "collection.yaml"
    path.write_text(yaml.safe_dump(make_document(), sort_keys=False), encoding="utf-8")
    return str(path)


def invoke(runner: CliRunner, args: list[str], data_path: str | None = None) -> "Result":
    """Invoke the CLI, injecting --data before the subcommand."""
    if data_path:
        args = ["--data", data_path] + args
    return runner.invoke(app, args, catch_exceptions=False)
