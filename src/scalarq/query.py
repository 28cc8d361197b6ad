"""Query requests and the Parse -> Restrict -> Evaluate -> Project pipeline."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from scalarq.errors import ParamError, SchemaError
from scalarq.evaluator import compile_filter
from scalarq.filters import FilterExpression
from scalarq.parser import parse_filter

if TYPE_CHECKING:
    from scalarq.storage import Collection, StoredRow

COUNT_STAR = "count(*)"
ALL_FIELDS = "*"


class ConsistencyLevel(str, Enum):
    """Read staleness tolerance. Accepted and ignored: reads always see a consistent snapshot."""

    STRONG = "STRONG"
    SESSION = "SESSION"
    BOUNDED = "BOUNDED"
    EVENTUALLY = "EVENTUALLY"
    CUSTOMIZED = "CUSTOMIZED"


@dataclass
class QueryRequest:
    """A scalar query against one collection."""

    collection_name: str
    filter: str | FilterExpression = ""
    ids: list[Any] | None = None
    partition_names: list[str] | None = None
    consistency_level: ConsistencyLevel = ConsistencyLevel.BOUNDED
    output_fields: list[str] = field(default_factory=list)
    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        self.consistency_level = ConsistencyLevel(self.consistency_level)
        if self.limit is not None and self.limit < 0:
            raise ParamError(f"limit must be 0 or greater, got {self.limit}")
        if self.offset < 0:
            raise ParamError(f"offset must be 0 or greater, got {self.offset}")

    @property
    def is_count(self) -> bool:
        return [f.strip().lower() for f in self.output_fields] == [COUNT_STAR]


def resolve_output_fields(collection: Collection, output_fields: Sequence[str]) -> list[str]:
    """Expand `*`, check names, and put the primary key first."""
    schema = collection.schema
    pk = collection.primary_field_name
    resolved: list[str] = [pk]
    for name in output_fields:
        name = name.strip()
        if name == ALL_FIELDS:
            candidates = schema.field_names
        elif name.lower() == COUNT_STAR:
            raise ParamError(f"{COUNT_STAR} cannot be combined with other output fields")
        else:
            if name not in schema.field_names:
                raise SchemaError(name, collection.name)
            candidates = [name]
        for candidate in candidates:
            if candidate not in resolved:
                resolved.append(candidate)
    return resolved


def restrict_by_ids(
    rows: Sequence[StoredRow], ids: Sequence[Any] | None, primary_field: str
) -> Sequence[StoredRow]:
    """Keep rows whose primary key is in *ids*; None means no restriction."""
    if ids is None:
        return rows
    allowed = frozenset(i for i in ids if not isinstance(i, bool))
    return [row for row in rows if row.data[primary_field] in allowed]


def _check_window(request: QueryRequest, max_window: int) -> None:
    if request.limit is None:
        return
    if request.offset + request.limit > max_window:
        raise ParamError(
            f"offset + limit ({request.offset + request.limit}) exceeds "
            f"the maximum result window of {max_window}"
        )


def run_query(
    collection: Collection,
    request: QueryRequest,
    *,
    parse: Callable[[str], FilterExpression | None] = parse_filter,
) -> list[dict[str, Any]]:
    """Execute *request* against *collection*.

    The filter is parsed and type-checked before any row is read; errors
    fail the whole request. Rows come back in partition order, then insertion
    order, which callers should treat as unspecified.
    """
    config = collection.config
    # Parsed filters are already depth-limited by the parser.
    max_depth: int | None = None
    if isinstance(request.filter, FilterExpression):
        expr: FilterExpression | None = request.filter
        max_depth = config.max_expression_depth
    else:
        if len(request.filter) > config.max_filter_length:
            raise ParamError(
                f"Filter length {len(request.filter)} exceeds the maximum "
                f"of {config.max_filter_length}"
            )
        expr = parse(request.filter)

    is_count = request.is_count
    if expr is None and request.ids is None and request.limit is None and not is_count:
        raise ParamError("An empty filter must be combined with ids, a limit, or count(*)")
    _check_window(request, config.max_query_result_window)

    predicate = compile_filter(
        expr, collection.schema, collection_name=collection.name, max_depth=max_depth
    )
    output = [] if is_count else resolve_output_fields(collection, request.output_fields)

    candidates = collection.snapshot(request.partition_names)
    candidates = restrict_by_ids(candidates, request.ids, collection.primary_field_name)
    matched = [row for row in candidates if predicate(row.data)]

    if is_count:
        return [{COUNT_STAR: len(matched)}]

    end = None if request.limit is None else request.offset + request.limit
    return [{name: row.data[name] for name in output} for row in matched[request.offset : end]]
