"""
Built-in record type for the backend's user class.

Stored remotely as `_User` and served from the `users` endpoint.
"""

from __future__ import annotations

from parse_resource.orm.attributes import Field
from parse_resource.orm.base import Record


class User(Record):
    username = Field()
    password = Field()
    email = Field()


__all__ = ["User"]
