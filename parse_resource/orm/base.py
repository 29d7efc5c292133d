"""
Record base class and persistence lifecycle.

Usage:
    from parse_resource import Field, Record, belongs_to, has_many

    class Post(Record):
        title = Field()
        body = Field()
        comments = has_many()

    post = Post(title="Hello")
    if not post.save():
        print(post.errors.full_messages())

State machine: NEW -> CREATING -> CREATED -> UPDATING -> CREATED ...;
DESTROYED after `destroy`; ERROR after a rejected or failed round trip.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from parse_resource.domain.models import ErrorPayload
from parse_resource.exceptions import RecordNotPersistedError, TransportError, UnsavedRecordError
from parse_resource.infrastructure.abstract import ResourceResponse, Transport
from parse_resource.infrastructure.http_factory import get_resource
from parse_resource.infrastructure.resource import USER_CLASS_NAME
from parse_resource.orm.attributes import (
    CREATED_AT,
    OBJECT_ID,
    PROTECTED_KEYS,
    UPDATED_AT,
    AttributeStore,
    Field,
)
from parse_resource.orm.hooks import Callback, HookTable
from parse_resource.orm.pointer import decode, encode_value
from parse_resource.orm.query import Query
from parse_resource.orm.registry import REGISTRY, REMOTE_ALIASES
from parse_resource.orm.relations import BelongsToDescriptor, HasManyDescriptor, belongs_to, has_many
from parse_resource.orm.translator import translate
from parse_resource.orm.validation import ValidationErrors
from parse_resource.utils.logging import get_logger

log = get_logger(__name__)

R = TypeVar("R", bound="Record")

Relation = Union[BelongsToDescriptor, HasManyDescriptor]


class RecordState(str, Enum):
    NEW = "new"
    CREATING = "creating"
    CREATED = "created"
    UPDATING = "updating"
    DESTROYED = "destroyed"
    ERROR = "error"


@dataclass(frozen=True)
class Schema:
    """Declared fields (in declaration order) and relationships of a record type."""

    fields: Tuple[str, ...] = ()
    relations: Mapping[str, Relation] = field(default_factory=dict)

    def with_field(self, name: str) -> "Schema":
        if name in self.fields:
            return self
        return Schema(fields=self.fields + (name,), relations=self.relations)


class Record:
    """
    One object of a backend class.

    Subclasses are registered under `class_name` (the Python class name
    unless set explicitly) as soon as they are defined.
    """

    class_name: ClassVar[str] = "Record"
    callbacks: ClassVar[Mapping[str, Sequence[Callback]]] = {}

    __schema__: ClassVar[Schema] = Schema()
    __hooks__: ClassVar[HookTable] = HookTable()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "class_name" not in cls.__dict__:
            cls.class_name = REMOTE_ALIASES.get(cls.__name__, cls.__name__)

        fields = list(cls.__schema__.fields)
        relations: Dict[str, Relation] = dict(cls.__schema__.relations)
        for name, attribute in cls.__dict__.items():
            if isinstance(attribute, Field):
                if attribute.name in PROTECTED_KEYS:
                    raise TypeError(f"{cls.__name__}.{name}: '{attribute.name}' is managed by the backend")
                if attribute.name not in fields:
                    fields.append(attribute.name)
                if isinstance(attribute, belongs_to):
                    relations[name] = attribute.descriptor
            elif isinstance(attribute, has_many):
                relations[name] = attribute.descriptor
        cls.__schema__ = Schema(fields=tuple(fields), relations=relations)
        cls.__hooks__ = HookTable.build(cls.__dict__.get("callbacks"), cls.__hooks__)
        REGISTRY.register(cls)

    # -- field declaration -------------------------------------------------

    @classmethod
    def field(cls, name: str) -> None:
        """Declare a field; declaring an existing field again is a no-op."""
        if name in PROTECTED_KEYS:
            raise ValueError(f"'{name}' is managed by the backend and cannot be declared")
        existing = getattr(cls, name, None)
        if existing is not None and not isinstance(existing, Field):
            raise ValueError(f"{cls.__name__}.{name} already exists and is not a field")
        if existing is None:
            setattr(cls, name, Field(name))
        cls.__schema__ = cls.__schema__.with_field(name)

    @classmethod
    def fields(cls, *names: str) -> None:
        for name in names:
            cls.field(name)

    # -- class-level access ------------------------------------------------

    @classmethod
    def remote_class_name(cls) -> str:
        return USER_CLASS_NAME if cls.class_name == "User" else cls.class_name

    @classmethod
    def resource(cls) -> Transport:
        return get_resource(cls.remote_class_name())

    @classmethod
    def from_server(cls: type[R], data: Mapping[str, Any]) -> R:
        """An already-confirmed record; no network call."""
        record = cls()
        record._store.merge_confirmed(data)
        record.state = RecordState.CREATED if record.id is not None else RecordState.NEW
        return record

    @classmethod
    def query(cls: type[R]) -> Query[R]:
        return Query(cls)

    @classmethod
    def where(cls: type[R], criteria: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Query[R]:
        return cls.query().where(criteria, **kwargs)

    @classmethod
    def include(cls: type[R], *fields: str) -> Query[R]:
        return cls.query().include(*fields)

    @classmethod
    def limit(cls: type[R], n: int) -> Query[R]:
        return cls.query().limit(n)

    @classmethod
    def all(cls: type[R]) -> List[R]:
        return cls.query().all()

    @classmethod
    def first(cls: type[R]) -> Optional[R]:
        return cls.query().first()

    @classmethod
    def count(cls) -> int:
        return cls.query().count()

    @classmethod
    def find(cls: type[R], object_id: str) -> Optional[R]:
        return cls.where({OBJECT_ID: object_id}).first()

    @classmethod
    def insert(cls: type[R], attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> R:
        """Build and save a record; check `errors` / `persisted` on the result."""
        record = cls(attributes, **kwargs)
        record.save()
        return record

    @classmethod
    def destroy_all(cls) -> int:
        records = cls.all()
        for record in records:
            record.destroy()
        return len(records)

    # -- instance ----------------------------------------------------------

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._store = AttributeStore()
        self.errors = ValidationErrors()
        self.state = RecordState.NEW
        self.last_error: Optional[Exception] = None
        self.last_error_code: Optional[int] = None
        for name, value in {**(attributes or {}), **kwargs}.items():
            self.set(name, value)

    @property
    def id(self) -> Optional[str]:
        return self._store.confirmed.get(OBJECT_ID)

    @property
    def persisted(self) -> bool:
        return self.id is not None

    @property
    def is_new(self) -> bool:
        return not self.persisted

    @property
    def created_at(self) -> Optional[str]:
        return decode(self._store.confirmed.get(CREATED_AT))

    @property
    def updated_at(self) -> Optional[str]:
        return decode(self._store.confirmed.get(UPDATED_AT))

    @property
    def attributes(self) -> Dict[str, Any]:
        return self._store.snapshot()

    @property
    def changes(self) -> Dict[str, Any]:
        """Local writes not yet confirmed by the backend."""
        return dict(self._store.pending)

    def get(self, name: str) -> Any:
        return decode(self._store.get(name))

    def set(self, name: str, value: Any) -> Any:
        return self._store.set(name, value)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __getattr__(self, name: str) -> Any:
        # Fields the backend returned without a declaration.
        store = self.__dict__.get("_store")
        if not name.startswith("_") and store is not None and store.has(name):
            return self.get(name)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def to_dict(self) -> Dict[str, Any]:
        return self._store.snapshot()

    # -- validation --------------------------------------------------------

    def validate(self) -> None:
        """Override to add messages to `self.errors`."""

    def is_valid(self) -> bool:
        self.errors.clear()
        self.validate()
        return not self.errors

    # -- persistence -------------------------------------------------------

    def save(self) -> bool:
        """
        Validate, then create or update.

        Returns False on a validation failure (no request is made) or a
        rejection with a known error code; messages are in `errors`.
        """
        if not self.is_valid():
            log.info(
                f"{self.class_name} failed validation: {self.errors.full_messages()}",
                extra={"class_name": self.class_name, "object_id": self.id},
            )
            return False
        if not self.__hooks__.run_before("save", self):
            return False
        saved = self.create() if self.is_new else self.update()
        if saved:
            self.__hooks__.run_after("save", self)
        return saved

    def create(self) -> bool:
        """
        POST pending attributes to the class endpoint.

        Raises
        ------
        ParseError
            Rejection with an unmapped error code.
        TransportError
            Network failure or unexpected status.
        """
        self.errors.clear()
        if not self.__hooks__.run_before("create", self):
            return False
        sent = dict(self._store.pending)
        body = self._encode(sent)
        if body is None:
            return False

        self.state = RecordState.CREATING
        try:
            response = self.resource().post(body)
        except TransportError as exc:
            self._fail(exc)
            raise
        if response.is_rejection:
            return self._reject(response)
        if not response.ok:
            exc = _unexpected(response, "create")
            self._fail(exc)
            raise exc

        self._confirm(response, body, sent)
        log.info(
            f"Created {self.class_name} {self.id}",
            extra={"class_name": self.class_name, "object_id": self.id},
        )
        self.__hooks__.run_after("create", self)
        return True

    def update(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> bool:
        """
        PUT pending attributes (plus `attributes`) to the object endpoint.

        A transport failure does not raise: the record keeps its pending
        writes, `state` becomes ERROR, `last_error` holds the failure, and
        False is returned.
        """
        if self.id is None:
            raise RecordNotPersistedError(
                f"Cannot update a {self.class_name} that has not been created"
            )
        for name, value in {**(attributes or {}), **kwargs}.items():
            self.set(name, value)
        self.errors.clear()
        if not self.__hooks__.run_before("update", self):
            return False

        sent = {
            name: value for name, value in self._store.pending.items() if name not in PROTECTED_KEYS
        }
        if not sent:
            log.debug(
                f"Nothing to update on {self.class_name} {self.id}",
                extra={"class_name": self.class_name, "object_id": self.id},
            )
            self.__hooks__.run_after("update", self)
            return True
        body = self._encode(sent)
        if body is None:
            return False

        self.state = RecordState.UPDATING
        try:
            response = self.resource().put(self.id, body)
            if response.is_rejection:
                return self._reject(response)
            if not response.ok:
                raise _unexpected(response, "update")
        except TransportError as exc:
            self._fail(exc)
            log.warning(
                f"Update of {self.class_name} {self.id} failed: {exc}",
                extra={"class_name": self.class_name, "object_id": self.id},
            )
            return False

        self._confirm(response, body, sent)
        log.info(
            f"Updated {self.class_name} {self.id}",
            extra={"class_name": self.class_name, "object_id": self.id},
        )
        self.__hooks__.run_after("update", self)
        return True

    def update_attributes(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> bool:
        return self.update(attributes, **kwargs)

    def destroy(self) -> bool:
        """
        DELETE the object, then clear all local state whatever the response.

        Returns False only when a `before_destroy` callback aborts.
        """
        if not self.__hooks__.run_before("destroy", self):
            return False
        object_id = self.id
        try:
            if object_id is not None:
                response = self.resource().delete(object_id)
                if not response.ok:
                    log.warning(
                        f"Destroy of {self.class_name} {object_id} returned {response.status_code}",
                        extra={
                            "class_name": self.class_name,
                            "object_id": object_id,
                            "status_code": response.status_code,
                        },
                    )
        finally:
            self._store.reset()
            self.state = RecordState.DESTROYED
        log.info(
            f"Destroyed {self.class_name} {object_id}",
            extra={"class_name": self.class_name, "object_id": object_id},
        )
        self.__hooks__.run_after("destroy", self)
        return True

    def _confirm(
        self, response: ResourceResponse, body: Mapping[str, Any], sent: Mapping[str, Any]
    ) -> None:
        # Server fields first, then what was sent, so local values win.
        self._store.merge_confirmed(response.body)
        self._store.merge_confirmed(body)
        self._store.commit(sent)
        self.state = RecordState.CREATED
        self.last_error = None
        self.last_error_code = None

    def _reject(self, response: ResourceResponse) -> bool:
        payload = ErrorPayload.model_validate(response.body)
        self.state = RecordState.ERROR
        self.last_error_code = payload.code
        failure = translate(payload)
        self.errors.add(failure.field, failure.message)
        log.warning(
            f"{self.class_name} rejected with code {payload.code}: {failure.field} {failure.message}",
            extra={
                "class_name": self.class_name,
                "object_id": self.id,
                "code": payload.code,
                "field": failure.field,
            },
        )
        return False

    def _encode(self, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Wire payload for `values`, or None when a referenced record could not be
        saved; its messages are then recorded against the referencing field.
        """
        body: Dict[str, Any] = {}
        for name, value in values.items():
            try:
                body[name] = encode_value(value)
            except UnsavedRecordError as exc:
                self.errors.add(name, "is invalid")
                for message in exc.record.errors.full_messages():
                    self.errors.add(name, message)
        if self.errors:
            log.info(
                f"{self.class_name} references unsaved records: {self.errors.full_messages()}",
                extra={"class_name": self.class_name, "object_id": self.id},
            )
            return None
        return body

    def _fail(self, exc: Exception) -> None:
        self.state = RecordState.ERROR
        self.last_error = exc

    # -- dunder ------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        if self.id is None or other.id is None:
            return self is other
        return self.remote_class_name() == other.remote_class_name() and self.id == other.id

    def __hash__(self) -> int:
        if self.id is None:
            raise TypeError(f"Unsaved {self.class_name} instances are unhashable")
        return hash((self.remote_class_name(), self.id))

    def __repr__(self) -> str:
        shown = ", ".join(f"{name}={self._store.get(name)!r}" for name in self.__schema__.fields)
        return f"<{self.class_name} objectId={self.id!r}{' ' if shown else ''}{shown}>"


def _unexpected(response: ResourceResponse, operation: str) -> TransportError:
    return TransportError(
        f"Unexpected status {response.status_code} during {operation}",
        status_code=response.status_code,
        details=response.body,
    )


__all__ = ["Record", "RecordState", "Schema"]
