"""
Abstract transport interface and response contract for parse-resource.

The ORM layer talks to the backend only through an object implementing
`Transport`: one blocking HTTP call per method, returning the status code
and decoded JSON body. `RemoteResource` is the httpx-backed implementation;
tests may substitute any object with the same shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class ResourceResponse:
    """
    Status code plus decoded body of a single backend call.

    `body` is the parsed JSON object, or an empty dict for an empty body.
    """

    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_rejection(self) -> bool:
        """Structured rejection: status 400 with a numeric error code."""
        return self.status_code == 400 and isinstance(self.body.get("code"), int)


@runtime_checkable
class Transport(Protocol):
    """
    Common interface for class-scoped and object-scoped backend calls.

    Attributes
    ----------
    class_name : str
        Backend class name the resource is scoped to (e.g. ``"Post"``, ``"_User"``).
    """

    class_name: str

    def post(self, body: Dict[str, Any]) -> ResourceResponse:
        """Create an object on the class endpoint."""
        ...

    def put(self, object_id: str, body: Dict[str, Any]) -> ResourceResponse:
        """Update an object on its object endpoint."""
        ...

    def get(self, params: Optional[Dict[str, Any]] = None) -> ResourceResponse:
        """List, filter or count on the class endpoint."""
        ...

    def delete(self, object_id: str) -> ResourceResponse:
        """Destroy an object on its object endpoint."""
        ...


__all__ = [
    "ResourceResponse",
    "Transport",
]
