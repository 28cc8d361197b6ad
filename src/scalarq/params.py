"""Request parameter objects built through validating builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from scalarq.errors import ParamError

TTL_SECONDS = "collection.ttl.seconds"
MMAP_ENABLED = "mmap.enabled"


def parse_ttl_seconds(value: str) -> int:
    """Parse a stored TTL property value; 0 disables expiry."""
    try:
        ttl = int(value)
    except (TypeError, ValueError):
        raise ParamError(f"Invalid {TTL_SECONDS} value {value!r}: expected an integer") from None
    if ttl < 0:
        raise ParamError("TTL seconds must be 0 or greater")
    return ttl


def parse_mmap_enabled(value: str) -> bool:
    lowered = str(value).lower()
    if lowered not in ("true", "false"):
        raise ParamError(f"Invalid {MMAP_ENABLED} value {value!r}: expected 'true' or 'false'")
    return lowered == "true"


def validate_properties(properties: Mapping[str, str]) -> None:
    """Check the values of recognized property keys; other keys pass through."""
    if TTL_SECONDS in properties:
        parse_ttl_seconds(properties[TTL_SECONDS])
    if MMAP_ENABLED in properties:
        parse_mmap_enabled(properties[MMAP_ENABLED])


@dataclass(frozen=True)
class AlterCollectionParam:
    """Parameters for the alter-collection call.

    Build instances with ``AlterCollectionParam.new_builder()``::

        param = (
            AlterCollectionParam.new_builder()
            .with_collection_name("books")
            .with_ttl(3600)
            .build()
        )
    """

    collection_name: str
    database_name: str | None = None
    properties: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @staticmethod
    def new_builder() -> AlterCollectionParamBuilder:
        return AlterCollectionParamBuilder()

    @property
    def ttl_seconds(self) -> int | None:
        if TTL_SECONDS not in self.properties:
            return None
        return parse_ttl_seconds(self.properties[TTL_SECONDS])

    @property
    def mmap_enabled(self) -> bool | None:
        if MMAP_ENABLED not in self.properties:
            return None
        return parse_mmap_enabled(self.properties[MMAP_ENABLED])

    def to_dict(self) -> dict[str, Any]:
        return {
            "collection_name": self.collection_name,
            "database_name": self.database_name,
            "properties": dict(self.properties),
        }

    def __str__(self) -> str:
        return (
            f"AlterCollectionParam(collection_name={self.collection_name!r}, "
            f"database_name={self.database_name!r}, properties={dict(self.properties)!r})"
        )


class AlterCollectionParamBuilder:
    """Builder for AlterCollectionParam."""

    def __init__(self) -> None:
        self._collection_name: str | None = None
        self._database_name: str | None = None
        self._properties: dict[str, str] = {}

    def with_collection_name(self, collection_name: str) -> AlterCollectionParamBuilder:
        """Set the collection name. It cannot be empty."""
        if collection_name is None:
            raise ParamError("Collection name cannot be None")
        self._collection_name = collection_name
        return self

    def with_database_name(self, database_name: str | None) -> AlterCollectionParamBuilder:
        """Set the database name. None means the client's current database."""
        self._database_name = database_name
        return self

    def with_ttl(self, ttl_seconds: int) -> AlterCollectionParamBuilder:
        """Set the collection time-to-live in seconds.

        Rows older than the TTL no longer take part in queries. 0 disables
        expiry, which is also the server-side default.
        """
        if ttl_seconds is None or isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int):
            raise ParamError("TTL seconds must be an integer")
        if ttl_seconds < 0:
            raise ParamError("TTL seconds must be 0 or greater")
        return self.with_property(TTL_SECONDS, str(ttl_seconds))

    def with_mmap_enabled(self, enabled: bool) -> AlterCollectionParamBuilder:
        """Enable or disable memory-mapping of index data files."""
        if not isinstance(enabled, bool):
            raise ParamError(f"mmap enabled must be a bool, got {type(enabled).__name__}")
        return self.with_property(MMAP_ENABLED, "true" if enabled else "false")

    def with_property(self, key: str, value: str) -> AlterCollectionParamBuilder:
        """Set a raw key-value property, forwarded verbatim."""
        if key is None or value is None:
            raise ParamError("Property key and value cannot be None")
        if not isinstance(key, str) or not key.strip():
            raise ParamError("Property key cannot be empty")
        self._properties[key] = str(value)
        return self

    def build(self) -> AlterCollectionParam:
        """Verify parameters and create an AlterCollectionParam."""
        if self._collection_name is None or not self._collection_name.strip():
            raise ParamError("Collection name cannot be null or empty")
        return AlterCollectionParam(
            collection_name=self._collection_name,
            database_name=self._database_name,
            properties=self._properties,
        )
