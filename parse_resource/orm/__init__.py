"""
ORM package for parse-resource.

Record types, declarative fields and relationships, queries, lifecycle
hooks and error-code translation. Importing this package registers the
built-in `User` type.
"""

from parse_resource.orm.attributes import AttributeStore, Field
from parse_resource.orm.base import Record, RecordState
from parse_resource.orm.hooks import HOOK_POINTS
from parse_resource.orm.query import Query
from parse_resource.orm.registry import REGISTRY, ClassRegistry
from parse_resource.orm.relations import HasManyCollection, belongs_to, has_many
from parse_resource.orm.user import User
from parse_resource.orm.validation import ValidationErrors

__all__ = [
    "AttributeStore",
    "ClassRegistry",
    "Field",
    "HOOK_POINTS",
    "HasManyCollection",
    "Query",
    "REGISTRY",
    "Record",
    "RecordState",
    "User",
    "ValidationErrors",
    "belongs_to",
    "has_many",
]
