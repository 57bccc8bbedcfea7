# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Per-destination client configuration.

A ``ClientConfiguration`` owns the expensive pieces needed to reach one
destination address: an ``httpx.Client`` (connection pool, timeout, TLS
settings) and the operation registry of its resource interfaces. Each call
gets a cheap ``WebClient`` (direct mode) or ``ResourceProxy`` (proxy mode)
that shares them.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from rest_bridge.core.models import (
    InvocationError,
    InvocationRequest,
    MalformedInputError,
)
from rest_bridge.core.resolver import MethodResolver
from rest_bridge.core.resources import ResourceInterface, ResourceOperation, template_variables

logger = structlog.get_logger(__name__)


class ClientConfiguration:
    """Reusable setup for invoking resources under one address."""

    def __init__(
        self,
        address: str,
        *,
        interfaces: Sequence[type[ResourceInterface]] = (),
        timeout: float = 30.0,
        verify: bool = True,
        follow_redirects: bool = False,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.address = address
        self.resolver = MethodResolver(interfaces)
        self._client = httpx.Client(
            timeout=timeout,
            verify=verify,
            follow_redirects=follow_redirects,
            headers=dict(headers or {}),
            transport=transport,
        )
        self._state_lock = threading.Lock()
        self._leases = 0
        self._retired = False

    @property
    def interfaces(self) -> tuple[type[ResourceInterface], ...]:
        return self.resolver.interfaces

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()

    def acquire(self) -> None:
        with self._state_lock:
            self._leases += 1

    def release(self) -> None:
        with self._state_lock:
            self._leases -= 1
            idle = self._retired and self._leases == 0
        if idle:
            self.close()

    def retire(self) -> None:
        """Close now if nobody holds a lease, otherwise when the last one is released."""
        with self._state_lock:
            self._retired = True
            idle = self._leases == 0
        if idle:
            self.close()

    def create_web_client(self) -> WebClient:
        return WebClient(self)

    def create_proxy(self, var_values: Sequence[Any] | None = None) -> ResourceProxy:
        return ResourceProxy(self, var_values)

    def send(self, request: InvocationRequest) -> httpx.Response:
        """
        Perform one HTTP exchange.

        Raises:
            InvocationError: The configuration is closed, the transport
                failed or timed out, or the body could not be serialized.
        """
        if self.closed:
            raise InvocationError(
                f"{request.method} {request.url} failed: client for {self.address} is closed"
            )
        logger.debug(
            "bridge.send",
            method=request.method,
            url=request.url,
            params=request.params,
        )
        try:
            return self._client.request(
                request.method,
                request.url,
                params=request.params or None,
                headers=request.headers or None,
                **_body_arguments(request.body),
            )
        except httpx.HTTPError as e:
            raise InvocationError(f"{request.method} {request.url} failed: {e}") from e


class ConfigurationFactory(ABC):
    """Builds a ``ClientConfiguration`` for a destination address."""

    @abstractmethod
    def create(self, address: str) -> ClientConfiguration:
        ...


class WebClient:
    """Builder for a single direct-mode request."""

    def __init__(self, configuration: ClientConfiguration) -> None:
        self._configuration = configuration
        self._paths: list[str] = []
        self._params: dict[str, str] = {}
        self._headers: dict[str, str] = {}
        self.response: httpx.Response | None = None

    def path(self, path: str) -> WebClient:
        self._paths.append(path)
        return self

    def query(self, name: str, value: Any) -> WebClient:
        self._params[name] = str(value)
        return self

    def headers(self, headers: Mapping[str, str]) -> WebClient:
        self._headers.update(headers)
        return self

    def build_request(self, method: str, body: Any = None) -> InvocationRequest:
        return InvocationRequest(
            method=method.upper(),
            url=join_url(self._configuration.address, *self._paths),
            params=dict(self._params),
            headers=dict(self._headers),
            body=body,
        )

    def invoke(self, method: str, body: Any = None) -> httpx.Response:
        self.response = self._configuration.send(self.build_request(method, body))
        return self.response


class ResourceProxy:
    """Client-side stand-in for the resource interfaces of a configuration."""

    def __init__(
        self,
        configuration: ClientConfiguration,
        var_values: Sequence[Any] | None = None,
    ) -> None:
        self._configuration = configuration
        self._var_values = tuple(var_values) if var_values is not None else None
        self.response: httpx.Response | None = None

    def invoke(self, operation: ResourceOperation, arguments: Sequence[Any]) -> httpx.Response:
        """Send ``operation`` and return the raw response."""
        self.response = self._configuration.send(self.build_request(operation, arguments))
        return self.response

    def build_request(
        self, operation: ResourceOperation, arguments: Sequence[Any]
    ) -> InvocationRequest:
        values = dict(zip(operation.parameter_names, arguments, strict=True))
        root = _expand(operation.interface.path, self._root_values(operation))
        path = _expand(operation.path, {name: values[name] for name in operation.path_variables})
        params = {name: str(values[name]) for name in operation.query if values[name] is not None}
        body_name = operation.body_parameter
        return InvocationRequest(
            method=operation.http_method,
            url=join_url(self._configuration.address, root, path),
            params=params,
            body=values[body_name] if body_name else None,
        )

    def _root_values(self, operation: ResourceOperation) -> dict[str, Any]:
        names = template_variables(operation.interface.path)
        if not names:
            return {}
        if self._var_values is None or len(self._var_values) != len(names):
            raise MalformedInputError(
                f"Path {operation.interface.path!r} needs {len(names)} template values, "
                f"got {0 if self._var_values is None else len(self._var_values)}"
            )
        return dict(zip(names, self._var_values, strict=True))


def decode_entity(response: httpx.Response, target: Any) -> Any:
    """
    Turn a response into a value of ``target``.

    ``httpx.Response`` (or no declared type) returns the envelope
    unmodified; ``str`` and ``bytes`` return the raw text or content;
    anything else is parsed as JSON and validated with pydantic.

    Raises:
        InvocationError: The body does not fit ``target``, is not valid
            JSON, or ``target`` is not a type pydantic can validate.
    """
    if target is httpx.Response or target is Any:
        return response
    if target is None or target is type(None):
        return None
    if target is str:
        return response.text
    if target is bytes:
        return response.content
    try:
        adapter = TypeAdapter(target)
        data = response.json() if response.content else None
        return adapter.validate_python(data)
    except (PydanticSchemaGenerationError, ValueError) as e:
        raise InvocationError(f"Cannot read response as {target}: {e}") from e


def join_url(base: str, *paths: str) -> str:
    """Append path segments to a base address with single slashes."""
    url = base
    for path in paths:
        if not path:
            continue
        url = f"{url.rstrip('/')}/{path.lstrip('/')}"
    return url


def _expand(template: str, values: Mapping[str, Any]) -> str:
    return template.format_map({name: quote(str(value), safe="") for name, value in values.items()})


def _body_arguments(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, str | bytes):
        return {"content": body}
    try:
        return {"json": TypeAdapter(type(body)).dump_python(body, mode="json")}
    except (TypeError, ValueError) as e:
        raise InvocationError(f"Cannot serialize request body of type {type(body).__name__}") from e
