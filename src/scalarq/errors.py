"""Structured error types for scalarq."""

from __future__ import annotations

from typing import Any


class ScalarqError(Exception):
    """Base error for all scalarq errors."""


class ParseError(ScalarqError, ValueError):
    """Raised when a filter string is not a valid predicate."""

    def __init__(self, message: str, text: str = "", position: int | None = None) -> None:
        self.text = text
        self.position = position
        if position is not None:
            message = f"{message} at position {position} in filter {text!r}"
        super().__init__(message)


class SchemaError(ScalarqError):
    """Raised when a filter or output field names a field the schema lacks."""

    def __init__(self, field_name: str, collection_name: str | None = None) -> None:
        self.field_name = field_name
        self.collection_name = collection_name
        where = f" in collection '{collection_name}'" if collection_name else ""
        super().__init__(f"Field '{field_name}' does not exist{where}")


class FieldTypeError(ScalarqError, TypeError):
    """Raised when an operator or literal does not fit the field's declared type."""

    def __init__(self, field_name: str, dtype: str, detail: str) -> None:
        self.field_name = field_name
        self.dtype = dtype
        self.detail = detail
        super().__init__(f"Field '{field_name}' of type {dtype}: {detail}")


class ParamError(ScalarqError, ValueError):
    """Raised when request or builder parameters are invalid."""


class ValidationError(ScalarqError):
    """Raised when inserted rows fail schema validation."""

    def __init__(self, message: str, row_index: int | None = None) -> None:
        self.row_index = row_index
        if row_index is not None:
            message = f"Row {row_index}: {message}"
        super().__init__(message)


class DatabaseNotFoundError(ScalarqError):
    """Raised when a database name is not known to the client."""

    def __init__(self, database_name: str) -> None:
        self.database_name = database_name
        super().__init__(f"Database '{database_name}' not found")


class CollectionNotFoundError(ScalarqError):
    """Raised when a collection name or alias cannot be resolved."""

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name
        super().__init__(f"Collection '{collection_name}' not found")


class CollectionAlreadyExistsError(ScalarqError):
    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name
        super().__init__(f"Collection '{collection_name}' already exists")


class PartitionNotFoundError(ScalarqError):
    def __init__(self, partition_name: str, collection_name: str) -> None:
        self.partition_name = partition_name
        self.collection_name = collection_name
        super().__init__(
            f"Partition '{partition_name}' not found in collection '{collection_name}'"
        )


class DuplicatePrimaryKeyError(ScalarqError):
    """Raised when an insert reuses a primary key already present in the collection."""

    def __init__(self, key: Any, collection_name: str) -> None:
        self.key = key
        self.collection_name = collection_name
        super().__init__(f"Duplicate primary key {key!r} in collection '{collection_name}'")
