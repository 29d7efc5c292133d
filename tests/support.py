"""
In-process stand-in for the backend plus the record types shared by tests.

`FakeParseBackend.handle` is meant to be wrapped in `httpx.MockTransport`.
It implements the class and object endpoints (and `/users`), equality
filtering on `where` (pointer composites included), `include`, `limit`,
`count`, and one-shot error injection. Every request is recorded.
"""

from __future__ import annotations

import itertools
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

import httpx

from parse_resource import Field, Record, belongs_to, has_many

TIMESTAMP = "2024-01-01T00:00:00.000Z"


@dataclass
class RecordedRequest:
    method: str
    class_name: str
    object_id: Optional[str]
    params: Dict[str, str]
    body: Optional[Dict[str, Any]]
    headers: httpx.Headers = field(default_factory=httpx.Headers)


@dataclass
class _Injected:
    method: Optional[str]
    class_name: Optional[str]
    status_code: int
    body: Optional[Dict[str, Any]] = None
    error: Optional[Exception] = None


class FakeParseBackend:
    def __init__(self) -> None:
        self.objects: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.requests: List[RecordedRequest] = []
        self._injected: List[_Injected] = []
        self._ids = itertools.count(1)

    # -- test helpers ------------------------------------------------------

    def add(self, class_name: str, **fields: Any) -> str:
        """Store an object directly, without recording a request."""
        object_id = f"seed{next(self._ids):04d}"
        self.objects.setdefault(class_name, {})[object_id] = {
            **fields,
            "objectId": object_id,
            "createdAt": TIMESTAMP,
            "updatedAt": TIMESTAMP,
        }
        return object_id

    def reject_next(
        self,
        code: int,
        error: str = "rejected",
        method: Optional[str] = None,
        class_name: Optional[str] = None,
    ) -> None:
        self._injected.append(_Injected(method, class_name, 400, {"code": code, "error": error}))

    def fail_next(
        self,
        status_code: int = 500,
        method: Optional[str] = None,
        class_name: Optional[str] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._injected.append(
            _Injected(method, class_name, status_code, body or {"error": "server error"})
        )

    def disconnect_next(self, method: Optional[str] = None, class_name: Optional[str] = None) -> None:
        self._injected.append(
            _Injected(method, class_name, 0, error=httpx.ConnectError("connection refused"))
        )

    def calls(self, method: Optional[str] = None, class_name: Optional[str] = None) -> List[RecordedRequest]:
        return [
            request
            for request in self.requests
            if (method is None or request.method == method)
            and (class_name is None or request.class_name == class_name)
        ]

    def reset_calls(self) -> None:
        self.requests.clear()

    # -- transport ---------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        parts = request.url.path.strip("/").split("/")[1:]
        if parts[0] == "users":
            class_name, rest = "_User", parts[1:]
        else:
            class_name, rest = parts[1], parts[2:]
        object_id = rest[0] if rest else None
        params = {key: values[-1] for key, values in parse_qs(request.url.query.decode()).items()}
        body = json.loads(request.content) if request.content else None

        self.requests.append(
            RecordedRequest(
                method=request.method,
                class_name=class_name,
                object_id=object_id,
                params=params,
                body=body,
                headers=request.headers,
            )
        )

        injected = self._take_injected(request.method, class_name)
        if injected is not None:
            if injected.error is not None:
                raise injected.error
            return httpx.Response(injected.status_code, json=injected.body)

        store = self.objects.setdefault(class_name, {})
        if request.method == "POST":
            return self._create(store, class_name, body or {})
        if request.method == "PUT":
            return self._update(store, object_id, body or {})
        if request.method == "GET":
            return self._query(store, params)
        if request.method == "DELETE":
            if store.pop(object_id, None) is None:
                return _not_found()
            return httpx.Response(200, json={})
        return httpx.Response(405, json={"error": "method not allowed"})

    def _take_injected(self, method: str, class_name: str) -> Optional[_Injected]:
        for index, injected in enumerate(self._injected):
            if injected.method not in (None, method):
                continue
            if injected.class_name not in (None, class_name):
                continue
            return self._injected.pop(index)
        return None

    def _create(self, store: Dict[str, Dict[str, Any]], class_name: str, body: Dict[str, Any]) -> httpx.Response:
        prefix = "u" if class_name == "_User" else class_name[:1].lower()
        object_id = f"{prefix}{next(self._ids):05d}"
        store[object_id] = {**body, "objectId": object_id, "createdAt": TIMESTAMP, "updatedAt": TIMESTAMP}
        return httpx.Response(201, json={"objectId": object_id, "createdAt": TIMESTAMP})

    def _update(
        self, store: Dict[str, Dict[str, Any]], object_id: Optional[str], body: Dict[str, Any]
    ) -> httpx.Response:
        if object_id not in store:
            return _not_found()
        store[object_id].update(body, updatedAt=TIMESTAMP)
        return httpx.Response(200, json={"updatedAt": TIMESTAMP})

    def _query(self, store: Dict[str, Dict[str, Any]], params: Dict[str, str]) -> httpx.Response:
        criteria = json.loads(params["where"]) if "where" in params else {}
        matched = [
            dict(obj)
            for obj in store.values()
            if all(obj.get(key) == value for key, value in criteria.items())
        ]
        for name in filter(None, params.get("include", "").split(",")):
            for obj in matched:
                obj[name] = self._inline(obj.get(name))

        payload: Dict[str, Any] = {}
        if params.get("count") == "1":
            payload["count"] = len(matched)
        if "limit" in params:
            matched = matched[: int(params["limit"])]
        payload["results"] = matched
        return httpx.Response(200, json=payload)

    def _inline(self, value: Any) -> Any:
        if not isinstance(value, dict) or value.get("__type") != "Pointer":
            return value
        target = self.objects.get(value["className"], {}).get(value["objectId"])
        if target is None:
            return value
        return {**target, **value}


def _not_found() -> httpx.Response:
    return httpx.Response(404, json={"code": 101, "error": "object not found"})


class Author(Record):
    name = Field()
    email = Field()
    posts = has_many()


class Post(Record):
    title = Field()
    body = Field()
    author = belongs_to()
    comments = has_many()

    def validate(self) -> None:
        if not self.title:
            self.errors.add("title", "can't be blank")


class Comment(Record):
    text = Field()
    post = belongs_to()


__all__ = ["Author", "Comment", "FakeParseBackend", "Post", "RecordedRequest", "TIMESTAMP"]
