"""
HTTP client factory utilities for parse-resource.

Provides centralized management of the shared `httpx.Client` used by every
`RemoteResource`. The ClientManager singleton ensures the connection pool
is reused across record types and closed on application exit.

A custom `httpx` transport can be installed (for example
`httpx.MockTransport` in tests); installing one replaces the current client.
"""

from __future__ import annotations

import atexit
import threading
from typing import Optional

import httpx

from parse_resource.config import get_settings
from parse_resource.infrastructure.resource import RemoteResource


class ClientManager:
    """
    Thread-safe singleton for managing the shared HTTP client.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["ClientManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ClientManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._client = None
                cls._instance._transport = None
                atexit.register(cls._instance.close)
            return cls._instance

    def get_client(self) -> httpx.Client:
        """
        Get or create the shared client.

        Returns
        -------
        httpx.Client
            The managed client instance.
        """
        with self._lock:
            if self._client is None:
                settings = get_settings()
                self._client = httpx.Client(
                    timeout=settings.request_timeout,
                    transport=self._transport,
                )
            return self._client

    def install_transport(self, transport: Optional[httpx.BaseTransport]) -> None:
        """
        Route all future requests through `transport` (None restores the default).
        """
        self.close()
        with self._lock:
            self._transport = transport

    def close(self) -> None:
        """
        Close the managed client and release its connections.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._client is not None:
                try:
                    self._client.close()
                finally:
                    self._client = None


def get_client() -> httpx.Client:
    """Shared client of the ClientManager singleton."""
    return ClientManager().get_client()


def get_resource(class_name: str) -> RemoteResource:
    """
    Build a resource scoped to one backend class.

    Parameters
    ----------
    class_name : str
        Backend class name, e.g. ``"Post"`` or ``"_User"``.
    """
    return RemoteResource(class_name, get_client(), get_settings())


__all__ = [
    "ClientManager",
    "get_client",
    "get_resource",
]
