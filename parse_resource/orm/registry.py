"""
Registry mapping backend class names to record types.

Every `Record` subclass registers itself when it is defined. Pointer
decoding and `has_many` lookups resolve their target through this registry
instead of turning strings into classes by reflection.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Type

from parse_resource.exceptions import UnknownClassError
from parse_resource.utils.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from parse_resource.orm.base import Record

log = get_logger(__name__)

# Backend names that differ from the local type name.
REMOTE_ALIASES = {"_User": "User"}


@dataclass(frozen=True)
class ClassDescriptor:
    """
    How to build and look up records of one class.

    Attributes
    ----------
    class_name : str
        Local type name, e.g. ``"User"``.
    remote_name : str
        Backend class name, e.g. ``"_User"``.
    record_type : type
        The registered `Record` subclass.
    build : callable
        Builds an already-confirmed record from server data (no network call).
    lookup : callable
        Fetches a record by object id (one network round trip), None if absent.
    """

    class_name: str
    remote_name: str
    record_type: Type["Record"]
    build: Callable[[Mapping[str, Any]], "Record"]
    lookup: Callable[[str], Optional["Record"]]


class ClassRegistry:
    """Thread-safe name -> descriptor mapping."""

    def __init__(self) -> None:
        self._descriptors: Dict[str, ClassDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, record_type: Type["Record"]) -> ClassDescriptor:
        descriptor = ClassDescriptor(
            class_name=record_type.class_name,
            remote_name=record_type.remote_class_name(),
            record_type=record_type,
            build=record_type.from_server,
            lookup=record_type.find,
        )
        with self._lock:
            previous = self._descriptors.get(descriptor.class_name)
            if previous is not None and previous.record_type is not record_type:
                log.debug(
                    f"Record type for '{descriptor.class_name}' replaced by {record_type.__qualname__}",
                    extra={"class_name": descriptor.class_name},
                )
            self._descriptors[descriptor.class_name] = descriptor
        return descriptor

    def resolve(self, name: str) -> ClassDescriptor:
        """Descriptor for a local or backend class name (`_User` resolves to `User`)."""
        local_name = REMOTE_ALIASES.get(name, name)
        with self._lock:
            descriptor = self._descriptors.get(local_name)
        if descriptor is None:
            raise UnknownClassError(f"No record type registered for class '{name}'")
        return descriptor

    def get_or_define(self, name: str) -> ClassDescriptor:
        """
        Resolve `name`, defining a schema-less record type when none is registered.

        Used by tooling that works with arbitrary backend classes.
        """
        try:
            return self.resolve(name)
        except UnknownClassError:
            from parse_resource.orm.base import Record

            local_name = REMOTE_ALIASES.get(name, name)
            record_type = type(local_name, (Record,), {"__module__": __name__})
            return self.resolve(record_type.class_name)

    def unregister(self, name: str) -> None:
        with self._lock:
            self._descriptors.pop(REMOTE_ALIASES.get(name, name), None)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._descriptors)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            return REMOTE_ALIASES.get(name, name) in self._descriptors


REGISTRY = ClassRegistry()


__all__ = [
    "ClassDescriptor",
    "ClassRegistry",
    "REGISTRY",
    "REMOTE_ALIASES",
]
