"""Append-only in-memory row storage: collections and their partitions."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from scalarq.config import ScalarqConfig
from scalarq.errors import (
    DuplicatePrimaryKeyError,
    ParamError,
    PartitionNotFoundError,
    ValidationError,
)
from scalarq.params import TTL_SECONDS, parse_ttl_seconds, validate_properties
from scalarq.types import CollectionSchema, build_row_model, validate_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredRow:
    """An ingested row. Never mutated after insert."""

    partition: str
    inserted_at: float
    data: Mapping[str, Any]


class Collection:
    """A named set of typed rows split across disjoint partitions.

    Rows are only ever appended. Readers take a snapshot (a tuple of
    StoredRow) under the lock and evaluate against it without holding it.
    """

    def __init__(
        self,
        name: str,
        schema: CollectionSchema,
        *,
        config: ScalarqConfig | None = None,
        properties: Mapping[str, str] | None = None,
        description: str = "",
    ) -> None:
        self.name = name
        self.schema = schema
        self.description = description
        self.config = config or ScalarqConfig()
        self._lock = threading.Lock()
        self._partitions: dict[str, list[StoredRow]] = {self.config.default_partition_name: []}
        self._keys: set[Any] = set()
        self._properties: dict[str, str] = {}
        self._row_model = build_row_model(
            f"_{name}Row", schema, default_max_length=self.config.default_varchar_max_length
        )
        if properties:
            self.alter_properties(properties)

    @property
    def primary_field_name(self) -> str:
        return self.schema.primary_field.name

    @property
    def default_partition_name(self) -> str:
        return self.config.default_partition_name

    # --- partitions ---

    def create_partition(self, partition_name: str) -> None:
        if not partition_name or not partition_name.strip():
            raise ParamError("Partition name cannot be empty")
        with self._lock:
            if partition_name in self._partitions:
                raise ParamError(
                    f"Partition '{partition_name}' already exists in collection '{self.name}'"
                )
            self._partitions[partition_name] = []
        logger.debug("Created partition %s in collection %s", partition_name, self.name)

    def has_partition(self, partition_name: str) -> bool:
        with self._lock:
            return partition_name in self._partitions

    def list_partitions(self) -> list[str]:
        with self._lock:
            return list(self._partitions)

    def drop_partition(self, partition_name: str) -> None:
        if partition_name == self.default_partition_name:
            raise ParamError("The default partition cannot be dropped")
        with self._lock:
            rows = self._partitions.pop(partition_name, None)
            if rows is None:
                raise PartitionNotFoundError(partition_name, self.name)
            pk = self.primary_field_name
            for row in rows:
                self._keys.discard(row.data[pk])
        logger.debug(
            "Dropped partition %s (%d rows) from collection %s", partition_name, len(rows), self.name
        )

    # --- rows ---

    def insert(
        self, rows: Iterable[dict[str, Any]], partition_name: str | None = None
    ) -> list[Any]:
        """Validate and append *rows*, returning their primary keys.

        The batch is all-or-nothing: a validation failure or duplicate key
        stores none of it.
        """
        partition = partition_name or self.default_partition_name
        validated = validate_rows(self._row_model, list(rows))
        pk = self.primary_field_name
        keys = [row[pk] for row in validated]
        now = self.config.clock()
        with self._lock:
            if partition not in self._partitions:
                raise PartitionNotFoundError(partition, self.name)
            seen: set[Any] = set()
            for key in keys:
                if key in self._keys or key in seen:
                    raise DuplicatePrimaryKeyError(key, self.name)
                seen.add(key)
            self._partitions[partition].extend(
                StoredRow(partition=partition, inserted_at=now, data=MappingProxyType(row))
                for row in validated
            )
            self._keys.update(keys)
        logger.debug("Inserted %d rows into %s/%s", len(validated), self.name, partition)
        return keys

    def snapshot(self, partition_names: Iterable[str] | None = None) -> tuple[StoredRow, ...]:
        """Return the live rows of the named partitions (all when empty).

        Rows past the collection TTL are left out.
        """
        names = list(partition_names or [])
        with self._lock:
            for name in names:
                if name not in self._partitions:
                    raise PartitionNotFoundError(name, self.name)
            selected = names or list(self._partitions)
            # Union of disjoint partitions; a name given twice is read once.
            rows = tuple(
                row for name in dict.fromkeys(selected) for row in self._partitions[name]
            )
            ttl = self._ttl_seconds_locked()
        if ttl > 0:
            cutoff = self.config.clock() - ttl
            rows = tuple(row for row in rows if row.inserted_at > cutoff)
        return rows

    def num_entities(self) -> int:
        return len(self.snapshot())

    # --- properties ---

    @property
    def properties(self) -> dict[str, str]:
        with self._lock:
            return dict(self._properties)

    @property
    def ttl_seconds(self) -> int:
        with self._lock:
            return self._ttl_seconds_locked()

    def _ttl_seconds_locked(self) -> int:
        value = self._properties.get(TTL_SECONDS)
        return parse_ttl_seconds(value) if value is not None else 0

    def alter_properties(self, properties: Mapping[str, str]) -> None:
        """Merge *properties* into the collection's properties.

        Values of recognized keys are checked before anything is applied.
        """
        updates = {str(k): _property_value(v) for k, v in properties.items()}
        validate_properties(updates)
        with self._lock:
            self._properties.update(updates)
        logger.info("Altered collection %s properties: %s", self.name, updates)

    def drop_properties(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._properties.pop(key, None)

    def describe(self) -> dict[str, Any]:
        return {
            "collection_name": self.name,
            "description": self.description,
            "schema": self.schema.to_dict(),
            "primary_field": self.primary_field_name,
            "partitions": self.list_partitions(),
            "properties": self.properties,
            "num_entities": self.num_entities(),
        }

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, fields={self.schema.field_names!r})"


def _property_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def ensure_rows(rows: Any) -> list[dict[str, Any]]:
    """Accept a single row mapping or an iterable of them."""
    if isinstance(rows, Mapping):
        return [dict(rows)]
    try:
        return [dict(r) for r in rows]
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Rows must be mappings: {e}") from e
