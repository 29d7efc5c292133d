"""
Dual-state attribute storage for a single record.

`confirmed` mirrors the last server response and is only written by merging
one; `pending` collects local writes until a create/update round trip
succeeds. Reads prefer the pending value.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterator, Mapping, Optional

from parse_resource.exceptions import ReadOnlyFieldError

if TYPE_CHECKING:  # pragma: no cover
    from parse_resource.orm.base import Record

OBJECT_ID = "objectId"
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"

PROTECTED_KEYS = frozenset({OBJECT_ID, CREATED_AT, UPDATED_AT})


class AttributeStore:
    """Confirmed and pending field values of one record instance."""

    __slots__ = ("confirmed", "pending")

    def __init__(
        self,
        confirmed: Optional[Mapping[str, Any]] = None,
        pending: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.confirmed: Dict[str, Any] = dict(confirmed or {})
        self.pending: Dict[str, Any] = dict(pending or {})

    def get(self, name: str) -> Any:
        if name in self.pending:
            return self.pending[name]
        return self.confirmed.get(name)

    def set(self, name: str, value: Any) -> Any:
        if name in PROTECTED_KEYS:
            raise ReadOnlyFieldError(f"'{name}' is managed by the backend and cannot be assigned")
        self.pending[name] = value
        return value

    def has(self, name: str) -> bool:
        return name in self.pending or name in self.confirmed

    def merge_confirmed(self, values: Mapping[str, Any]) -> None:
        """Copy server-returned fields into `confirmed`; an existing objectId never changes."""
        values = dict(values)
        current_id = self.confirmed.get(OBJECT_ID)
        if current_id is not None and values.get(OBJECT_ID, current_id) != current_id:
            values.pop(OBJECT_ID)
        self.confirmed.update(values)

    def commit(self, sent: Mapping[str, Any]) -> None:
        """
        Drop pending entries that were part of a successful round trip.

        Entries written again after `sent` was captured stay pending.
        """
        for name, value in sent.items():
            if name in self.pending and self.pending[name] is value:
                del self.pending[name]

    def clear_pending(self) -> None:
        self.pending.clear()

    def reset(self) -> None:
        self.confirmed.clear()
        self.pending.clear()

    def snapshot(self) -> Dict[str, Any]:
        """Merged raw view: confirmed values overlaid with pending ones."""
        merged = dict(self.confirmed)
        merged.update(self.pending)
        return merged

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"AttributeStore(confirmed={self.confirmed!r}, pending={self.pending!r})"


class Field:
    """
    Declared record field: reads decode typed values, writes go to `pending`.

    Used as a class attribute (``title = Field()``) or through
    ``Record.field("title")``.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    def __get__(self, instance: Optional["Record"], owner: type) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: "Record", value: Any) -> None:
        instance.set(self.name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


__all__ = [
    "AttributeStore",
    "CREATED_AT",
    "Field",
    "OBJECT_ID",
    "PROTECTED_KEYS",
    "UPDATED_AT",
]
