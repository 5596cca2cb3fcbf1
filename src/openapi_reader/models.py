"""Description model and projection results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# Ordered, closed set of verbs an OpenAPI path item can hold.
HTTP_METHODS: Tuple[str, ...] = (
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "HEAD",
    "OPTIONS",
    "TRACE",
)

# Schemas, media-type objects and responses are carried through untouched.
Opaque = Any


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str
    required: bool = False
    description: Optional[str] = None
    schema: Opaque = None


@dataclass(frozen=True)
class RequestBody:
    description: Optional[str] = None
    required: bool = False
    content: Mapping[str, Opaque] = field(default_factory=dict)


@dataclass(frozen=True)
class Operation:
    operation_id: Optional[str] = None
    summary: str = ""
    description: str = ""
    parameters: Tuple[Parameter, ...] = ()
    request_body: Optional[RequestBody] = None
    responses: Mapping[str, Opaque] = field(default_factory=dict)


@dataclass(frozen=True)
class PathItem:
    get: Optional[Operation] = None
    post: Optional[Operation] = None
    put: Optional[Operation] = None
    delete: Optional[Operation] = None
    patch: Optional[Operation] = None
    head: Optional[Operation] = None
    options: Optional[Operation] = None
    trace: Optional[Operation] = None

    def operation(self, method: str) -> Optional[Operation]:
        return getattr(self, method.lower())

    def operations(self) -> Iterator[Tuple[str, Operation]]:
        """Yield ``(method, operation)`` for every declared verb in HTTP_METHODS order."""
        for method in HTTP_METHODS:
            operation = self.operation(method)
            if operation is not None:
                yield method, operation


@dataclass(frozen=True)
class Description:
    """A loaded OpenAPI document. Read-only once built."""

    paths: Mapping[str, PathItem] = field(default_factory=dict)

    def operation_count(self) -> int:
        return sum(1 for item in self.paths.values() for _ in item.operations())


class ParameterDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: str = Field(alias="in")
    required: bool
    description: Optional[str] = None
    schema_: Optional[Any] = Field(default=None, alias="schema")


class RequestBodyDetails(BaseModel):
    description: Optional[str] = None
    required: bool
    content: Optional[Dict[str, Any]] = None


class APIDetails(BaseModel):
    """Flat summary of a single operation, as returned to tool callers.

    Optional fields left as ``None`` are dropped when rendered, so an
    operation without parameters has no ``parameters`` key at all.
    """

    operation_id: str
    method: str
    path: str
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: Optional[List[ParameterDetails]] = None
    request_body: Optional[RequestBodyDetails] = None
    responses: Optional[Dict[str, Any]] = None

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class NotFound:
    operation_id: str

    @property
    def message(self) -> str:
        return f"Operation with ID '{self.operation_id}' not found in the OpenAPI specification"
