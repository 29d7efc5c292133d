"""
Infrastructure package for parse-resource.

Centralizes HTTP concerns (client lifecycle, endpoints, authentication).
Keep this layer focused on I/O, decoupled from the attribute and
relationship logic of the ORM.
"""

from parse_resource.infrastructure.abstract import ResourceResponse, Transport
from parse_resource.infrastructure.http_factory import (
    ClientManager,
    get_client,
    get_resource,
)
from parse_resource.infrastructure.resource import RemoteResource

__all__ = [
    "ClientManager",
    "RemoteResource",
    "ResourceResponse",
    "Transport",
    "get_client",
    "get_resource",
]
