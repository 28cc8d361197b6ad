"""Fixture constants shared by the test modules. Never mutated."""

from __future__ import annotations

from typing import Any

from scalarq import CollectionSchema, DataType, FieldSchema

NUMBER_ENTITIES = 100

COLLECTION_NAME = "defaultCollection"
ALIAS = "defaultAlias"

FIELD_INT64 = "fieldInt64"
FIELD_INT32 = "fieldInt32"
FIELD_INT8 = "fieldInt8"
FIELD_BOOL = "fieldBool"
FIELD_VARCHAR = "fieldVarchar"
FIELD_DOUBLE = "fieldDouble"

PARTITION_A = "partitionA"
PARTITION_B = "partitionB"
PARTITION_C = "partitionC"


def make_schema() -> CollectionSchema:
    return CollectionSchema(
        fields=[
            FieldSchema(FIELD_INT64, DataType.INT64, is_primary=True),
            FieldSchema(FIELD_INT32, DataType.INT32),
            FieldSchema(FIELD_INT8, DataType.INT8),
            FieldSchema(FIELD_BOOL, DataType.BOOL),
            FieldSchema(FIELD_VARCHAR, DataType.VARCHAR, max_length=64),
            FieldSchema(FIELD_DOUBLE, DataType.DOUBLE),
        ]
    )


def make_rows(start: int, count: int) -> list[dict[str, Any]]:
    """Rows with keys start..start+count-1; every varchar value starts with "Str"."""
    return [
        {
            FIELD_INT64: i,
            FIELD_INT32: i,
            FIELD_INT8: i % 128,
            FIELD_BOOL: i % 2 == 0,
            FIELD_VARCHAR: f"Str{i}",
            FIELD_DOUBLE: i * 0.5,
        }
        for i in range(start, start + count)
    ]
