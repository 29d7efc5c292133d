"""
httpx-backed implementation of the `Transport` interface.

Endpoints:
    {base}/classes/{ClassName}             POST (create), GET (query)
    {base}/classes/{ClassName}/{objectId}  PUT (update), DELETE (destroy)

The user class is special-cased to `{base}/users` and `{base}/users/{objectId}`.
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional

import httpx

from parse_resource.config import Settings, get_settings
from parse_resource.exceptions import TransportError
from parse_resource.infrastructure.abstract import ResourceResponse
from parse_resource.utils.logging import get_logger

log = get_logger(__name__)

USER_CLASS_NAME = "_User"


def class_path(class_name: str) -> str:
    """Collection endpoint path, relative to the API base URL."""
    if class_name == USER_CLASS_NAME:
        return "users"
    return f"classes/{class_name}"


def object_path(class_name: str, object_id: str) -> str:
    """Object endpoint path, relative to the API base URL."""
    return f"{class_path(class_name)}/{object_id}"


class RemoteResource:
    """
    Performs single HTTP calls against one backend class.

    Responses of any status are returned as `ResourceResponse`; only
    network-level failures and undecodable bodies raise `TransportError`.
    """

    def __init__(
        self,
        class_name: str,
        client: httpx.Client,
        settings: Optional[Settings] = None,
    ) -> None:
        self.class_name = class_name
        self._client = client
        self._settings = settings or get_settings()

    @property
    def url(self) -> str:
        return f"{self._settings.base_url}/{class_path(self.class_name)}"

    def object_url(self, object_id: str) -> str:
        return f"{self._settings.base_url}/{object_path(self.class_name, object_id)}"

    def _headers(self) -> Dict[str, str]:
        credentials = self._settings.credentials
        return {
            "X-Parse-Application-Id": credentials.app_id,
            "X-Parse-Master-Key": credentials.master_key,
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        url: str,
        *,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ResourceResponse:
        headers = self._headers()
        content = json.dumps(body) if body is not None else None
        start = time.perf_counter()
        try:
            response = self._client.request(
                method,
                url,
                headers=headers,
                content=content,
                params=params,
                timeout=self._settings.request_timeout,
            )
        except httpx.HTTPError as exc:
            log.warning(
                f"{method} {url} failed: {exc}",
                extra={"method": method, "path": url, "class_name": self.class_name},
            )
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        log.debug(
            f"{method} {url} -> {response.status_code}",
            extra={
                "method": method,
                "path": url,
                "class_name": self.class_name,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return ResourceResponse(status_code=response.status_code, body=_decode(response))

    def post(self, body: Dict[str, Any]) -> ResourceResponse:
        return self._request("POST", self.url, body=body)

    def put(self, object_id: str, body: Dict[str, Any]) -> ResourceResponse:
        return self._request("PUT", self.object_url(object_id), body=body)

    def get(self, params: Optional[Dict[str, Any]] = None) -> ResourceResponse:
        return self._request("GET", self.url, params=params)

    def delete(self, object_id: str) -> ResourceResponse:
        return self._request("DELETE", self.object_url(object_id))


def _decode(response: httpx.Response) -> Dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError as exc:
        raise TransportError(
            f"Backend returned a non-JSON body (status {response.status_code})",
            status_code=response.status_code,
            details=response.text,
        ) from exc
    if not isinstance(data, dict):
        raise TransportError(
            f"Backend returned a JSON {type(data).__name__}, expected an object",
            status_code=response.status_code,
            details=data,
        )
    return data


__all__ = [
    "RemoteResource",
    "USER_CLASS_NAME",
    "class_path",
    "object_path",
]
