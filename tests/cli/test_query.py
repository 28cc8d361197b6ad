"""Tests for scalarq query command."""

import json

from scalarq.cli import _exitcodes as ec
from tests.cli.conftest import invoke


def test_query_table(runner, data_file):
    result = invoke(runner, ["query", "-f", "fieldInt64 < 3"], data_file)
    assert result.exit_code == 0
    assert "fieldVarchar" in result.output
    assert "Str2" in result.output
    assert "3 row(s)" in result.output


def test_query_json(runner, data_file):
    result = invoke(
        runner, ["--json", "query", "-f", "fieldInt64 < 3 and fieldBool", "-o", "fieldVarchar"],
        data_file,
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == [
        {"fieldInt64": 0, "fieldVarchar": "Str0"},
        {"fieldInt64": 2, "fieldVarchar": "Str2"},
    ]


def test_query_yaml_document(runner, yaml_data_file):
    result = invoke(runner, ["--json", "query", "-f", "fieldInt64 >= 18"], yaml_data_file)
    assert result.exit_code == 0
    assert [r["fieldInt64"] for r in json.loads(result.output)] == [18, 19]


def test_query_partition(runner, data_file):
    result = invoke(
        runner,
        ["--json", "query", "-f", "fieldInt64 >= 0", "-p", "partitionB", "-o", "count(*)"],
        data_file,
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == [{"count(*)": 10}]


def test_query_ids(runner, data_file):
    result = invoke(
        runner,
        ["--json", "query", "-f", "fieldInt64 < 5", "--id", "1", "--id", "7", "-o", "fieldInt64"],
        data_file,
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == [{"fieldInt64": 1}]


def test_query_limit_offset(runner, data_file):
    result = invoke(
        runner, ["--json", "query", "--limit", "2", "--offset", "3", "-o", "fieldInt64"], data_file
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == [{"fieldInt64": 3}, {"fieldInt64": 4}]


def test_query_no_results(runner, data_file):
    result = invoke(runner, ["query", "-f", "fieldInt8 > 129"], data_file)
    assert result.exit_code == 0
    assert "No results." in result.output


def test_query_parse_error(runner, data_file):
    result = invoke(runner, ["query", "-f", "fieldInt64 <"], data_file)
    assert result.exit_code == ec.USAGE_ERROR
    assert "position" in result.output


def test_query_unknown_field(runner, data_file):
    result = invoke(runner, ["query", "-f", "missing > 1"], data_file)
    assert result.exit_code == ec.EXECUTION_FAILURE
    assert "missing" in result.output


def test_query_empty_filter_without_limit(runner, data_file):
    result = invoke(runner, ["query"], data_file)
    assert result.exit_code == ec.EXECUTION_FAILURE


def test_query_bad_consistency_level(runner, data_file):
    result = invoke(
        runner, ["query", "-f", "fieldInt64 < 1", "--consistency-level", "sometimes"], data_file
    )
    assert result.exit_code == ec.USAGE_ERROR


def test_query_invalid_id(runner, data_file):
    result = invoke(runner, ["query", "--id", "1.5"], data_file)
    assert result.exit_code == ec.USAGE_ERROR


def test_query_requires_data(runner, monkeypatch):
    monkeypatch.delenv("SCALARQ_DATA", raising=False)
    result = invoke(runner, ["query", "-f", "fieldInt64 < 1"])
    assert result.exit_code == ec.USAGE_ERROR


def test_query_missing_file(runner, tmp_path):
    result = invoke(runner, ["query", "-f", "fieldInt64 < 1"], str(tmp_path / "nope.json"))
    assert result.exit_code == ec.DATA_ERROR
    assert "not found" in result.output


def test_query_invalid_document(runner, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"collection_name": "c"}), encoding="utf-8")
    result = invoke(runner, ["query", "-f", "x < 1"], str(path))
    assert result.exit_code == ec.DATA_ERROR
    assert "schema" in result.output


def test_query_expression_depth_from_env(runner, data_file, monkeypatch):
    monkeypatch.setenv("SCALARQ_MAX_EXPRESSION_DEPTH", "1")
    result = invoke(runner, ["query", "-f", "(fieldInt64 < 3)"], data_file)
    assert result.exit_code == 0
    result = invoke(runner, ["query", "-f", "((fieldInt64 < 3))"], data_file)
    assert result.exit_code == ec.USAGE_ERROR
    assert "nested too deeply" in result.output
