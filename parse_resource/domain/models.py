"""
Wire models for the Parse REST encoding.

Typed field values travel as JSON objects carrying a `__type` discriminator:

    {"__type": "Date", "iso": "2011-08-21T18:02:52.249Z"}
    {"__type": "Pointer", "className": "Comment", "objectId": "abc123"}

A pointer produced by a query with `include` additionally carries the
referenced object's own fields inline. These models validate and produce
exactly that shape.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

TYPE_KEY = "__type"
DATE_TYPE = "Date"
POINTER_TYPE = "Pointer"


def format_iso(value: datetime) -> str:
    """Render a datetime the way the backend does: UTC, millisecond precision, `Z` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class DateValue(BaseModel):
    """
    A `Date` composite.
    """

    type_: Literal["Date"] = Field(DATE_TYPE, alias=TYPE_KEY)
    iso: str

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @classmethod
    def from_datetime(cls, value: datetime) -> "DateValue":
        return cls(iso=format_iso(value))

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class PointerValue(BaseModel):
    """
    A `Pointer` composite, optionally with the referenced object's fields inlined.
    """

    type_: Literal["Pointer"] = Field(POINTER_TYPE, alias=TYPE_KEY)
    class_name: str = Field(..., alias="className")
    object_id: str = Field(..., alias="objectId")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "allow",
    }

    @property
    def included_fields(self) -> Dict[str, Any]:
        """Fields inlined by eager inclusion; empty for a bare reference."""
        return dict(self.model_extra or {})

    @property
    def is_included(self) -> bool:
        return bool(self.model_extra)

    def to_wire(self) -> Dict[str, Any]:
        """Bare reference, without any inlined fields."""
        return {TYPE_KEY: POINTER_TYPE, "className": self.class_name, "objectId": self.object_id}

    def record_data(self) -> Dict[str, Any]:
        """Attributes for building the referenced record from an included pointer."""
        data = self.included_fields
        data["objectId"] = self.object_id
        return data


class ErrorPayload(BaseModel):
    """Body of a structured 400 response."""

    code: int
    error: str = ""

    model_config = {"extra": "ignore"}


class QueryResults(BaseModel):
    """Body of a class-scoped GET."""

    results: List[Dict[str, Any]] = Field(default_factory=list)
    count: Optional[int] = None

    model_config = {"extra": "ignore"}


def type_of(value: Any) -> Optional[str]:
    """Discriminator of a raw value, or None for scalars and untyped objects."""
    if isinstance(value, dict):
        discriminator = value.get(TYPE_KEY)
        if isinstance(discriminator, str):
            return discriminator
    return None


__all__ = [
    "DATE_TYPE",
    "POINTER_TYPE",
    "TYPE_KEY",
    "DateValue",
    "ErrorPayload",
    "PointerValue",
    "QueryResults",
    "format_iso",
    "type_of",
]
