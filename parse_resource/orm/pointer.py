"""
Encoding and decoding of typed field values.

Read path (`decode`): scalars pass through, Date composites become their
ISO-8601 string, Pointer composites become records. A pointer that was
eagerly included carries the target's fields and is built locally; a bare
pointer costs one lookup. Decoding happens when a getter runs, never when
a response is merged.

Write path (`encode_value`, `encode_reference`): records become bare
Pointer composites, saving the target first when it has no id yet
(cascading save); datetimes become Date composites.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from parse_resource.domain.models import (
    DATE_TYPE,
    POINTER_TYPE,
    DateValue,
    PointerValue,
    type_of,
)
from parse_resource.exceptions import RecordNotPersistedError, UnsavedRecordError
from parse_resource.orm.registry import REGISTRY, ClassRegistry
from parse_resource.utils.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from parse_resource.orm.base import Record

log = get_logger(__name__)


def decode(raw: Any, registry: ClassRegistry = REGISTRY) -> Any:
    kind = type_of(raw)
    if kind == DATE_TYPE:
        return DateValue.model_validate(raw).iso
    if kind == POINTER_TYPE:
        return resolve(PointerValue.model_validate(raw), registry)
    return raw


def resolve(pointer: PointerValue, registry: ClassRegistry = REGISTRY) -> Optional["Record"]:
    descriptor = registry.resolve(pointer.class_name)
    if pointer.is_included:
        return descriptor.build(pointer.record_data())
    log.debug(
        f"Resolving pointer to {descriptor.class_name} {pointer.object_id}",
        extra={"class_name": descriptor.class_name, "object_id": pointer.object_id},
    )
    return descriptor.lookup(pointer.object_id)


def pointer_to(record: "Record") -> PointerValue:
    """Bare reference to a persisted record."""
    if record.id is None:
        raise RecordNotPersistedError(
            f"{type(record).__name__} has no objectId; save it before referencing it"
        )
    return PointerValue(class_name=record.remote_class_name(), object_id=record.id)


def encode_reference(record: "Record") -> Dict[str, Any]:
    """Pointer composite for `record`, saving it first if it is new."""
    if record.is_new:
        log.debug(
            f"Cascading save of {type(record).__name__} before referencing it",
            extra={"class_name": record.class_name},
        )
        if not record.save():
            raise UnsavedRecordError(record)
    return pointer_to(record).to_wire()


def encode_value(value: Any, cascade: bool = True) -> Any:
    """
    Backend JSON representation of a field value.

    With `cascade=False` (query criteria) records are referenced as they are
    and an unsaved record raises `RecordNotPersistedError` instead of being saved.
    """
    from parse_resource.orm.base import Record

    if isinstance(value, Record):
        return encode_reference(value) if cascade else pointer_to(value).to_wire()
    if isinstance(value, (PointerValue, DateValue)):
        return value.to_wire()
    if isinstance(value, datetime):
        return DateValue.from_datetime(value).to_wire()
    if isinstance(value, (list, tuple)):
        return [encode_value(item, cascade) for item in value]
    if isinstance(value, dict):
        return {key: encode_value(item, cascade) for key, item in value.items()}
    return value


def encode_criteria(criteria: Mapping[str, Any]) -> Dict[str, Any]:
    """Query filter encoding; never saves anything."""
    return {name: encode_value(value, cascade=False) for name, value in criteria.items()}


def assign(owner: "Record", field: str, target: Optional["Record"]) -> bool:
    """
    Point `owner.field` at `target` and push the change to the backend.

    A new owner keeps the pointer pending; it is sent with the owner's create.
    Returns the outcome of the owner's update (True when nothing was sent).
    """
    value = encode_reference(target) if target is not None else None
    owner.set(field, value)
    if owner.is_new:
        return True
    return owner.update()


__all__ = [
    "assign",
    "decode",
    "encode_criteria",
    "encode_reference",
    "encode_value",
    "pointer_to",
    "resolve",
]
