"""
Query builder for class-scoped lookups.

    Post.where(author=user).include("author").limit(10).all()
    Comment.where({"post": post}).count()

Criteria values use the field encoding without cascading saves, so persisted
records and datetimes can be used directly. `where` is sent as JSON,
`include` as a comma separated list, and a count asks for `count=1&limit=0`.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, Generic, Iterator, List, Mapping, Optional, Type, TypeVar

from parse_resource.domain.models import ErrorPayload, QueryResults
from parse_resource.exceptions import ParseError, TransportError
from parse_resource.infrastructure.abstract import ResourceResponse
from parse_resource.orm.pointer import encode_criteria

if TYPE_CHECKING:  # pragma: no cover
    from parse_resource.orm.base import Record

R = TypeVar("R", bound="Record")


class Query(Generic[R]):
    """Chainable filter over one record type; executes on `all`, `first` or `count`."""

    def __init__(self, record_type: Type[R]) -> None:
        self._record_type = record_type
        self._criteria: Dict[str, Any] = {}
        self._limit: Optional[int] = None
        self._include: List[str] = []

    def where(self, criteria: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Query[R]":
        self._criteria.update(criteria or {})
        self._criteria.update(kwargs)
        return self

    def limit(self, n: int) -> "Query[R]":
        if n < 0:
            raise ValueError(f"limit must be >= 0, got {n}")
        self._limit = n
        return self

    def include(self, *fields: str) -> "Query[R]":
        """Ask the backend to inline the objects behind these pointer fields."""
        for name in fields:
            if name not in self._include:
                self._include.append(name)
        return self

    def params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self._criteria:
            params["where"] = json.dumps(encode_criteria(self._criteria))
        if self._limit is not None:
            params["limit"] = self._limit
        if self._include:
            params["include"] = ",".join(self._include)
        return params

    def _execute(self, params: Dict[str, Any]) -> QueryResults:
        response = self._record_type.resource().get(params)
        return _results(response)

    def all(self) -> List[R]:
        results = self._execute(self.params())
        return [self._record_type.from_server(data) for data in results.results]

    def first(self) -> Optional[R]:
        params = self.params()
        params["limit"] = 1
        results = self._execute(params)
        if not results.results:
            return None
        return self._record_type.from_server(results.results[0])

    def count(self) -> int:
        params = self.params()
        params.update(count=1, limit=0)
        results = self._execute(params)
        if results.count is None:
            raise TransportError("Backend response to a count query has no 'count'", details=params)
        return results.count

    def __iter__(self) -> Iterator[R]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"<Query {self._record_type.class_name} {self.params()!r}>"


def _results(response: ResourceResponse) -> QueryResults:
    if response.is_rejection:
        payload = ErrorPayload.model_validate(response.body)
        raise ParseError(payload.code, payload.error)
    if not response.ok:
        raise TransportError(
            f"Query failed with status {response.status_code}",
            status_code=response.status_code,
            details=response.body,
        )
    return QueryResults.model_validate(response.body)


__all__ = ["Query"]
