"""
parse-resource - Object mapper for a Parse-style REST backend.

This package maps local record types to backend classes and provides:

- Declared fields with confirmed/pending attribute tracking
- Pointer and Date value encoding, with eager inclusion or lazy lookup
- Declarative `belongs_to` / `has_many` relationships
- A save/create/update/destroy lifecycle with hooks and validation
- Translation of backend error codes into field-level errors

Usage:
    import parse_resource
    from parse_resource import Field, Record

    parse_resource.configure(app_id="...", master_key="...")

    class Post(Record):
        title = Field()
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from parse_resource.config import Settings, configure, get_settings, reset_settings
from parse_resource.exceptions import (
    ConfigurationError,
    ParseError,
    ParseResourceError,
    ReadOnlyFieldError,
    RecordNotPersistedError,
    RelationshipError,
    TransportError,
    UnknownClassError,
    UnsavedRecordError,
)
from parse_resource.orm import (
    REGISTRY,
    Field,
    HasManyCollection,
    Query,
    Record,
    RecordState,
    User,
    ValidationErrors,
    belongs_to,
    has_many,
)
from parse_resource.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "configure",
    "get_settings",
    "reset_settings",
    # Records
    "Field",
    "HasManyCollection",
    "Query",
    "REGISTRY",
    "Record",
    "RecordState",
    "User",
    "ValidationErrors",
    "belongs_to",
    "has_many",
    # Errors
    "ConfigurationError",
    "ParseError",
    "ParseResourceError",
    "ReadOnlyFieldError",
    "RecordNotPersistedError",
    "RelationshipError",
    "TransportError",
    "UnknownClassError",
    "UnsavedRecordError",
    # Logging
    "configure_logging",
    "get_logger",
]
