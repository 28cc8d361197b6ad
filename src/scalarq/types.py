"""Data types, field and collection schemas, and row validation for scalarq."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, StrictStr, create_model
from pydantic import Field as PydanticField
from pydantic import ValidationError as PydanticValidationError

from scalarq.errors import ParamError, SchemaError, ValidationError
from scalarq.filters import FILTER_KEYWORDS

_FIELD_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class DataType(str, Enum):
    """Scalar data types a field can be declared with."""

    BOOL = "BOOL"
    INT8 = "INT8"
    INT16 = "INT16"
    INT32 = "INT32"
    INT64 = "INT64"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    VARCHAR = "VARCHAR"

    @property
    def is_integer(self) -> bool:
        return self in INTEGER_BOUNDS

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self in (DataType.FLOAT, DataType.DOUBLE)


# Signed two's-complement ranges: (min, max)
INTEGER_BOUNDS: dict[DataType, tuple[int, int]] = {
    DataType.INT8: (-(2**7), 2**7 - 1),
    DataType.INT16: (-(2**15), 2**15 - 1),
    DataType.INT32: (-(2**31), 2**31 - 1),
    DataType.INT64: (-(2**63), 2**63 - 1),
}

PRIMARY_KEY_TYPES = (DataType.INT64, DataType.VARCHAR)


@dataclass
class FieldSchema:
    """A single scalar field of a collection."""

    name: str
    dtype: DataType
    is_primary: bool = False
    max_length: int | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if not _FIELD_NAME_RE.match(self.name):
            raise ParamError(
                f"Invalid field name '{self.name}': must match [A-Za-z][A-Za-z0-9_]*"
            )
        if self.name.lower() in FILTER_KEYWORDS:
            raise ParamError(
                f"Invalid field name '{self.name}': '{self.name.lower()}' is a filter keyword"
            )
        self.dtype = DataType(self.dtype)
        if self.is_primary and self.dtype not in PRIMARY_KEY_TYPES:
            raise ParamError(f"Primary key field '{self.name}' must be INT64 or VARCHAR")
        if self.max_length is not None and self.dtype is not DataType.VARCHAR:
            raise ParamError(f"max_length is only valid for VARCHAR fields ('{self.name}')")
        if self.max_length is not None and self.max_length <= 0:
            raise ParamError(f"max_length of '{self.name}' must be positive")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "dtype": self.dtype.value}
        if self.is_primary:
            data["is_primary"] = True
        if self.max_length is not None:
            data["max_length"] = self.max_length
        if self.description:
            data["description"] = self.description
        return data


@dataclass
class CollectionSchema:
    """Ordered field list with exactly one primary key field."""

    fields: list[FieldSchema] = field(default_factory=list)
    description: str = ""

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                raise ParamError(f"Duplicate field name '{f.name}'")
            seen.add(f.name)
        primaries = [f for f in self.fields if f.is_primary]
        if len(primaries) != 1:
            raise ParamError(
                f"Collection schema must have exactly one primary key field, got {len(primaries)}"
            )

    @property
    def primary_field(self) -> FieldSchema:
        return next(f for f in self.fields if f.is_primary)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldSchema:
        """Return the field named *name* or raise SchemaError."""
        for f in self.fields:
            if f.name == name:
                return f
        raise SchemaError(name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"fields": [f.to_dict() for f in self.fields]}
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollectionSchema:
        fields = [
            FieldSchema(
                name=f["name"],
                dtype=DataType(str(f["dtype"]).upper()),
                is_primary=bool(f.get("is_primary", False)),
                max_length=f.get("max_length"),
                description=f.get("description", ""),
            )
            for f in data.get("fields", [])
        ]
        return cls(fields=fields, description=data.get("description", ""))


def _annotation_for(f: FieldSchema, default_max_length: int) -> Any:
    if f.dtype is DataType.BOOL:
        return StrictBool
    if f.dtype.is_integer:
        lo, hi = INTEGER_BOUNDS[f.dtype]
        return Annotated[StrictInt, PydanticField(ge=lo, le=hi)]
    if f.dtype in (DataType.FLOAT, DataType.DOUBLE):
        return Annotated[float, PydanticField(strict=True)]
    max_length = f.max_length if f.max_length is not None else default_max_length
    return Annotated[StrictStr, PydanticField(max_length=max_length)]


def build_row_model(
    model_name: str, schema: CollectionSchema, *, default_max_length: int = 65535
) -> type[BaseModel]:
    """Build a strict pydantic model that validates one row of *schema*."""
    pydantic_fields: dict[str, Any] = {
        f.name: (_annotation_for(f, default_max_length), ...) for f in schema.fields
    }
    return create_model(  # type: ignore[call-overload]
        model_name, __config__=ConfigDict(extra="forbid"), **pydantic_fields
    )


def validate_rows(
    model: type[BaseModel], rows: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Validate *rows* against *model*, returning normalized dicts in schema order.

    Any invalid row fails the whole batch.
    """
    validated: list[dict[str, Any]] = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValidationError(f"expected a mapping, got {type(row).__name__}", row_index=i)
        try:
            validated.append(model.model_validate(row).model_dump())
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(details, row_index=i) from e
    return validated
