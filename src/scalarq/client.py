"""In-memory client: databases, collections, aliases, queries and alterations."""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from scalarq.config import ScalarqConfig
from scalarq.errors import (
    CollectionAlreadyExistsError,
    CollectionNotFoundError,
    DatabaseNotFoundError,
    ParamError,
)
from scalarq.filters import FilterExpression
from scalarq.params import AlterCollectionParam
from scalarq.parser import parse_filter
from scalarq.query import ConsistencyLevel, QueryRequest, run_query
from scalarq.storage import Collection, ensure_rows
from scalarq.types import CollectionSchema

logger = logging.getLogger(__name__)


@dataclass
class _Database:
    collections: dict[str, Collection] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)


class ScalarqClient:
    """Client over in-process collections.

    Collection names may be given as aliases wherever a collection is named.
    """

    def __init__(self, config: ScalarqConfig | None = None) -> None:
        self.config = config or ScalarqConfig()
        self._lock = threading.RLock()
        self._databases: dict[str, _Database] = {self.config.default_database: _Database()}
        self._current_database = self.config.default_database
        self._parse = functools.lru_cache(maxsize=self.config.filter_cache_size)(
            functools.partial(parse_filter, max_depth=self.config.max_expression_depth)
        )

    # --- databases ---

    @property
    def current_database(self) -> str:
        return self._current_database

    def create_database(self, database_name: str) -> None:
        if not database_name or not database_name.strip():
            raise ParamError("Database name cannot be empty")
        with self._lock:
            if database_name in self._databases:
                raise ParamError(f"Database '{database_name}' already exists")
            self._databases[database_name] = _Database()
        logger.info("Created database %s", database_name)

    def list_databases(self) -> list[str]:
        with self._lock:
            return list(self._databases)

    def using_database(self, database_name: str) -> None:
        with self._lock:
            if database_name not in self._databases:
                raise DatabaseNotFoundError(database_name)
            self._current_database = database_name

    def drop_database(self, database_name: str) -> None:
        if database_name == self.config.default_database:
            raise ParamError("The default database cannot be dropped")
        with self._lock:
            db = self._databases.get(database_name)
            if db is None:
                raise DatabaseNotFoundError(database_name)
            if db.collections:
                raise ParamError(
                    f"Database '{database_name}' still has {len(db.collections)} collection(s)"
                )
            del self._databases[database_name]
            if self._current_database == database_name:
                self._current_database = self.config.default_database

    def _database(self, database_name: str | None) -> _Database:
        name = database_name or self._current_database
        db = self._databases.get(name)
        if db is None:
            raise DatabaseNotFoundError(name)
        return db

    # --- collections ---

    def create_collection(
        self,
        collection_name: str,
        schema: CollectionSchema,
        *,
        properties: dict[str, Any] | None = None,
        description: str = "",
        database_name: str | None = None,
    ) -> Collection:
        if not collection_name or not collection_name.strip():
            raise ParamError("Collection name cannot be empty")
        with self._lock:
            db = self._database(database_name)
            if collection_name in db.collections or collection_name in db.aliases:
                raise CollectionAlreadyExistsError(collection_name)
            collection = Collection(
                collection_name,
                schema,
                config=self.config,
                properties=properties,
                description=description,
            )
            db.collections[collection_name] = collection
        logger.info("Created collection %s", collection_name)
        return collection

    def get_collection(self, collection_name: str, database_name: str | None = None) -> Collection:
        """Resolve a collection by name or alias."""
        with self._lock:
            db = self._database(database_name)
            target = db.aliases.get(collection_name, collection_name)
            collection = db.collections.get(target)
        if collection is None:
            raise CollectionNotFoundError(collection_name)
        return collection

    def has_collection(self, collection_name: str, database_name: str | None = None) -> bool:
        try:
            self.get_collection(collection_name, database_name)
        except CollectionNotFoundError:
            return False
        return True

    def list_collections(self, database_name: str | None = None) -> list[str]:
        with self._lock:
            return list(self._database(database_name).collections)

    def describe_collection(
        self, collection_name: str, database_name: str | None = None
    ) -> dict[str, Any]:
        collection = self.get_collection(collection_name, database_name)
        info = collection.describe()
        with self._lock:
            db = self._database(database_name)
            info["aliases"] = sorted(a for a, t in db.aliases.items() if t == collection.name)
        return info

    def drop_collection(self, collection_name: str, database_name: str | None = None) -> None:
        with self._lock:
            db = self._database(database_name)
            if collection_name in db.aliases:
                raise ParamError(f"cannot drop the collection via alias = {collection_name}")
            if collection_name not in db.collections:
                raise CollectionNotFoundError(collection_name)
            del db.collections[collection_name]
            for alias in [a for a, t in db.aliases.items() if t == collection_name]:
                del db.aliases[alias]
        logger.info("Dropped collection %s", collection_name)

    def get_collection_stats(
        self, collection_name: str, database_name: str | None = None
    ) -> dict[str, int]:
        return {"row_count": self.get_collection(collection_name, database_name).num_entities()}

    # --- partitions ---

    def create_partition(self, collection_name: str, partition_name: str) -> None:
        self.get_collection(collection_name).create_partition(partition_name)

    def has_partition(self, collection_name: str, partition_name: str) -> bool:
        return self.get_collection(collection_name).has_partition(partition_name)

    def list_partitions(self, collection_name: str) -> list[str]:
        return self.get_collection(collection_name).list_partitions()

    def drop_partition(self, collection_name: str, partition_name: str) -> None:
        self.get_collection(collection_name).drop_partition(partition_name)

    # --- aliases ---

    def create_alias(self, collection_name: str, alias: str) -> None:
        with self._lock:
            db = self._database(None)
            if collection_name not in db.collections:
                raise CollectionNotFoundError(collection_name)
            if alias in db.aliases or alias in db.collections:
                raise ParamError(f"Alias '{alias}' is already in use")
            db.aliases[alias] = collection_name
        logger.debug("Alias %s -> %s", alias, collection_name)

    def alter_alias(self, collection_name: str, alias: str) -> None:
        with self._lock:
            db = self._database(None)
            if collection_name not in db.collections:
                raise CollectionNotFoundError(collection_name)
            if alias not in db.aliases:
                raise ParamError(f"Alias '{alias}' does not exist")
            db.aliases[alias] = collection_name

    def drop_alias(self, alias: str) -> None:
        with self._lock:
            db = self._database(None)
            if db.aliases.pop(alias, None) is None:
                raise ParamError(f"Alias '{alias}' does not exist")

    def list_aliases(self, collection_name: str | None = None) -> list[str]:
        with self._lock:
            db = self._database(None)
            return sorted(
                a for a, t in db.aliases.items() if collection_name is None or t == collection_name
            )

    # --- data ---

    def insert(
        self, collection_name: str, data: Any, partition_name: str | None = None
    ) -> dict[str, Any]:
        keys = self.get_collection(collection_name).insert(ensure_rows(data), partition_name)
        return {"insert_count": len(keys), "ids": keys}

    def query(
        self,
        collection_name: str | QueryRequest,
        filter: str | FilterExpression = "",
        *,
        ids: list[Any] | None = None,
        partition_names: list[str] | None = None,
        consistency_level: ConsistencyLevel | str = ConsistencyLevel.BOUNDED,
        output_fields: list[str] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Return the rows of a collection that satisfy *filter*.

        Accepts either a prepared QueryRequest or the request fields as
        arguments. *ids* and *partition_names* narrow the candidate rows
        before the filter is applied; an empty partition list means all
        partitions.
        """
        if isinstance(collection_name, QueryRequest):
            request = collection_name
        else:
            request = QueryRequest(
                collection_name=collection_name,
                filter=filter,
                ids=ids,
                partition_names=partition_names,
                consistency_level=ConsistencyLevel(consistency_level),
                output_fields=list(output_fields or []),
                limit=limit,
                offset=offset,
            )
        collection = self.get_collection(request.collection_name)
        results = run_query(collection, request, parse=self._parse)
        logger.debug(
            "Query on %s with filter %r returned %d rows",
            collection.name,
            request.filter,
            len(results),
        )
        return results

    # --- alteration ---

    def alter_collection(self, param: AlterCollectionParam) -> None:
        """Apply the property changes packaged in *param*."""
        collection = self.get_collection(param.collection_name, param.database_name)
        collection.alter_properties(param.properties)

    def alter_collection_properties(
        self, collection_name: str, properties: dict[str, Any]
    ) -> None:
        builder = AlterCollectionParam.new_builder().with_collection_name(collection_name)
        for key, value in properties.items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            builder.with_property(key, str(value))
        self.alter_collection(builder.build())

    def drop_collection_properties(self, collection_name: str, property_keys: list[str]) -> None:
        self.get_collection(collection_name).drop_properties(property_keys)
