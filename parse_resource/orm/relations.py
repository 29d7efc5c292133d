"""
Declarative relationships built on the pointer encoding.

    class Post(Record):
        title = Field()
        comments = has_many()            # Comment records whose `post` points here

    class Comment(Record):
        body = Field()
        post = belongs_to()              # Pointer to a Post

Assigning a record to a `belongs_to` field saves the record if needed and
immediately updates the owner on the backend. Reading a `has_many` field
runs one query and returns a list bound to that owner; appending to it
saves the child and points it back at the owner.

The owner is captured by each collection instance, so traversals of
different owners never share state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional, SupportsIndex, Type

from parse_resource.exceptions import RelationshipError, UnsavedRecordError
from parse_resource.orm import pointer
from parse_resource.orm.attributes import Field
from parse_resource.orm.registry import REGISTRY
from parse_resource.utils.logging import get_logger
from parse_resource.utils.naming import camelize, foreign_key_for, singularize

if TYPE_CHECKING:  # pragma: no cover
    from parse_resource.orm.base import Record

log = get_logger(__name__)


@dataclass(frozen=True)
class BelongsToDescriptor:
    field_name: str
    target_class: str


@dataclass(frozen=True)
class HasManyDescriptor:
    field_name: str
    owner_class: str
    target_class: str
    foreign_key: str


class belongs_to(Field):  # noqa: N801 - reads as a declaration in class bodies
    """Single reference stored as a Pointer composite."""

    def __init__(self, class_name: Optional[str] = None, name: Optional[str] = None) -> None:
        super().__init__(name)
        self._class_name = class_name

    @property
    def target_class(self) -> str:
        return self._class_name or camelize(self.name)

    @property
    def descriptor(self) -> BelongsToDescriptor:
        return BelongsToDescriptor(field_name=self.name, target_class=self.target_class)

    def __set__(self, instance: "Record", value: Optional["Record"]) -> None:
        from parse_resource.orm.base import Record

        if value is not None and not isinstance(value, Record):
            raise RelationshipError(
                f"{type(instance).__name__}.{self.name} expects a record, got {type(value).__name__}"
            )
        if not pointer.assign(instance, self.name, value):
            raise RelationshipError(
                f"Could not update {type(instance).__name__}.{self.name}: {instance.last_error}"
            )


class has_many:  # noqa: N801 - reads as a declaration in class bodies
    """Reverse lookup of the children pointing at the owner."""

    def __init__(self, class_name: Optional[str] = None, foreign_key: Optional[str] = None) -> None:
        self.name: Optional[str] = None
        self._class_name = class_name
        self._foreign_key = foreign_key
        self._owner_class: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self._owner_class = owner.__dict__.get("class_name") or owner.__name__

    @property
    def target_class(self) -> str:
        return self._class_name or camelize(singularize(self.name))

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or foreign_key_for(self._owner_class)

    @property
    def descriptor(self) -> HasManyDescriptor:
        return HasManyDescriptor(
            field_name=self.name,
            owner_class=self._owner_class,
            target_class=self.target_class,
            foreign_key=self.foreign_key,
        )

    def __get__(self, instance: Optional["Record"], owner: type) -> Any:
        if instance is None:
            return self
        target = REGISTRY.resolve(self.target_class).record_type
        return HasManyCollection.fetch(instance, target, self.foreign_key)

    def __set__(self, instance: "Record", value: Any) -> None:
        raise AttributeError(
            f"{type(instance).__name__}.{self.name} is a has_many collection; append to it instead"
        )


class HasManyCollection(list):
    """Children of one owner; `append` and `insert` persist the relationship."""

    def __init__(
        self,
        owner: "Record",
        target: Type["Record"],
        foreign_key: str,
        children: Iterable["Record"] = (),
    ) -> None:
        super().__init__(children)
        self.owner = owner
        self.target = target
        self.foreign_key = foreign_key

    @classmethod
    def fetch(cls, owner: "Record", target: Type["Record"], foreign_key: str) -> "HasManyCollection":
        if owner.is_new:
            return cls(owner, target, foreign_key)
        criteria = {foreign_key: pointer.pointer_to(owner).to_wire()}
        return cls(owner, target, foreign_key, target.where(criteria).all())

    def _attach(self, child: "Record") -> None:
        if not isinstance(child, self.target):
            raise RelationshipError(
                f"Cannot add {type(child).__name__} to a collection of {self.target.class_name}"
            )
        if self.owner.is_new and not self.owner.save():
            raise UnsavedRecordError(self.owner)
        if child.is_new and not child.save():
            raise UnsavedRecordError(child)

        back_reference = getattr(type(child), self.foreign_key, None)
        if isinstance(back_reference, belongs_to):
            setattr(child, self.foreign_key, self.owner)
        elif not pointer.assign(child, self.foreign_key, self.owner):
            raise RelationshipError(
                f"Could not point {type(child).__name__}.{self.foreign_key} "
                f"at its owner: {child.last_error}"
            )
        log.debug(
            f"Attached {child.class_name} {child.id} to {self.owner.class_name} {self.owner.id}",
            extra={"class_name": child.class_name, "object_id": child.id},
        )

    def append(self, child: "Record") -> None:
        self._attach(child)
        super().append(child)

    def insert(self, index: SupportsIndex, child: "Record") -> None:
        self._attach(child)
        super().insert(index, child)

    def extend(self, children: Iterable["Record"]) -> None:
        for child in children:
            self.append(child)

    def __iadd__(self, children: Iterable["Record"]) -> "HasManyCollection":
        self.extend(children)
        return self

    def __setitem__(self, index: Any, value: Any) -> None:
        raise RelationshipError(
            f"Children of {self.owner.class_name} cannot be replaced in place; "
            "use append or insert"
        )

    def create(self, **attributes: Any) -> "Record":
        """Build a child from `attributes` and append it."""
        child = self.target(**attributes)
        self.append(child)
        return child


__all__ = [
    "BelongsToDescriptor",
    "HasManyCollection",
    "HasManyDescriptor",
    "belongs_to",
    "has_many",
]
