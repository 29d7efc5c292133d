"""
Domain package for parse-resource.

Exports the wire models describing the backend's typed JSON values.
Keep this package focused on data definitions and validation concerns.
"""

from parse_resource.domain.models import (
    DateValue,
    ErrorPayload,
    PointerValue,
    QueryResults,
)

__all__ = [
    "DateValue",
    "ErrorPayload",
    "PointerValue",
    "QueryResults",
]
