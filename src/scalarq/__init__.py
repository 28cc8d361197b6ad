"""scalarq: scalar filter-expression queries over partitioned, typed collections."""

__version__ = "0.1.0"

from scalarq.client import ScalarqClient
from scalarq.config import ScalarqConfig
from scalarq.errors import (
    CollectionAlreadyExistsError,
    CollectionNotFoundError,
    DatabaseNotFoundError,
    DuplicatePrimaryKeyError,
    FieldTypeError,
    ParamError,
    ParseError,
    PartitionNotFoundError,
    ScalarqError,
    SchemaError,
    ValidationError,
)
from scalarq.filters import field_ref
from scalarq.params import MMAP_ENABLED, TTL_SECONDS, AlterCollectionParam
from scalarq.parser import parse_filter
from scalarq.query import ConsistencyLevel, QueryRequest
from scalarq.storage import Collection
from scalarq.types import CollectionSchema, DataType, FieldSchema

__all__ = [
    "__version__",
    "ScalarqClient",
    "ScalarqConfig",
    "Collection",
    "CollectionSchema",
    "FieldSchema",
    "DataType",
    "QueryRequest",
    "ConsistencyLevel",
    "AlterCollectionParam",
    "TTL_SECONDS",
    "MMAP_ENABLED",
    "parse_filter",
    "field_ref",
    "ScalarqError",
    "ParseError",
    "SchemaError",
    "FieldTypeError",
    "ParamError",
    "ValidationError",
    "DatabaseNotFoundError",
    "CollectionNotFoundError",
    "CollectionAlreadyExistsError",
    "PartitionNotFoundError",
    "DuplicatePrimaryKeyError",
]
