"""
Exception hierarchy for parse-resource.

Validation problems and backend rejections with a known error code are not
exceptions: they are reported through `Record.errors` and the boolean
result of `save()`. Everything here signals a condition the caller has to
handle explicitly.
"""

from __future__ import annotations

from typing import Any, Optional


class ParseResourceError(Exception):
    """Base exception for all parse-resource errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ParseResourceError):
    """Credentials or configuration files are missing or malformed."""


class TransportError(ParseResourceError):
    """The HTTP call failed, or returned a status the mapper cannot interpret."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, details: Any = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ParseError(ParseResourceError):
    """
    The backend rejected the request with an error code that has no field mapping.

    Fatal for the operation in flight; never converted into a validation message.
    """

    def __init__(self, code: int, error: str = "") -> None:
        super().__init__(f"Parse error {code}: {error}")
        self.code = code
        self.error = error


class UnsavedRecordError(ParseResourceError):
    """A record had to be persisted first (cascading save) and could not be."""

    def __init__(self, record: Any) -> None:
        errors = getattr(record, "errors", None)
        detail = f": {errors.full_messages()}" if errors else ""
        super().__init__(f"Could not save {type(record).__name__} before referencing it{detail}")
        self.record = record


class RecordNotPersistedError(ParseResourceError):
    """The operation needs an object id and the record has none."""


class ReadOnlyFieldError(ParseResourceError, AttributeError):
    """Server-managed fields (objectId, createdAt, updatedAt) cannot be assigned."""


class UnknownClassError(ParseResourceError, KeyError):
    """No record type is registered under the requested class name."""

    def __str__(self) -> str:
        return self.message


class RelationshipError(ParseResourceError):
    """A relationship assignment could not be applied."""


__all__ = [
    "ConfigurationError",
    "ParseError",
    "ParseResourceError",
    "ReadOnlyFieldError",
    "RecordNotPersistedError",
    "RelationshipError",
    "TransportError",
    "UnknownClassError",
    "UnsavedRecordError",
]
