# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Data models for rest-bridge.

These models describe the generic message container handed to the bridge,
the message header keys it understands, the tagged response-type variant
and the base of the error hierarchy.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import httpx


class BridgeError(Exception):
    """Base class for every error raised by the bridge."""


class ConfigurationError(BridgeError):
    """Raised when a client configuration cannot be built for a destination."""


class MalformedInputError(BridgeError, ValueError):
    """Raised when caller-supplied message data cannot be parsed."""


class InvocationError(BridgeError):
    """Raised when an outbound invocation fails.

    Transport failures (timeouts, refused connections) and response
    coercion failures surface as this type rather than a distinguished kind.
    """


class ResponseGenericTypeMissingError(InvocationError):
    """Raised when a collection response is requested without an element type."""


class Header(StrEnum):
    """Message header keys read and written by the bridge."""

    USING_HTTP_API = "RestBridgeUsingHttpAPI"
    HTTP_METHOD = "RestBridgeHttpMethod"
    HTTP_PATH = "RestBridgeHttpPath"
    HTTP_QUERY = "RestBridgeHttpQuery"
    QUERY_MAP = "RestBridgeQueryMap"
    RESPONSE_CLASS = "RestBridgeResponseClass"
    RESPONSE_GENERIC_TYPE = "RestBridgeResponseGenericType"
    VAR_VALUES = "RestBridgeVarValues"
    OPERATION_NAME = "RestBridgeOperationName"
    DESTINATION_OVERRIDE_URL = "RestBridgeDestinationOverrideUrl"
    HTTP_RESPONSE_CODE = "RestBridgeHttpResponseCode"


class ExchangePattern(StrEnum):
    """Message exchange pattern."""

    IN_ONLY = "in-only"
    IN_OUT = "in-out"

    @property
    def out_capable(self) -> bool:
        return self is ExchangePattern.IN_OUT


@dataclass
class Message:
    """A transport-agnostic message: a header mapping plus a body."""

    headers: dict[str, Any] = field(default_factory=dict)
    body: Any = None

    def get_header(self, name: str, default: Any = None) -> Any:
        return self.headers.get(name, default)

    def set_header(self, name: str, value: Any) -> None:
        self.headers[name] = value


@dataclass
class Exchange:
    """Carries one request message and, once produced, its response message."""

    in_message: Message = field(default_factory=Message)
    pattern: ExchangePattern = ExchangePattern.IN_OUT
    from_endpoint: str | None = None
    charset: str | None = None
    _out_message: Message | None = field(default=None, repr=False)

    @property
    def out_message(self) -> Message:
        """The response message, created empty on first access."""
        if self._out_message is None:
            self._out_message = Message()
        return self._out_message

    @property
    def has_out(self) -> bool:
        return self._out_message is not None

    @property
    def charset_name(self) -> str:
        return self.charset or "utf-8"


_COLLECTION_TYPES: tuple[type, ...] = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class ResponseType:
    """
    Requested shape of a direct-mode response.

    Exactly one of three variants:
    - ``envelope``: the full ``httpx.Response``, unmodified
    - ``scalar``: the body coerced to ``target``
    - ``collection``: the body coerced to ``container[element]``
    """

    kind: str
    target: Any = None
    element: Any = None

    @classmethod
    def envelope(cls) -> ResponseType:
        return cls(kind="envelope")

    @classmethod
    def scalar(cls, target: Any) -> ResponseType:
        return cls(kind="scalar", target=target)

    @classmethod
    def collection(cls, element: Any, container: type = list) -> ResponseType:
        return cls(kind="collection", target=container, element=element)

    @property
    def is_envelope(self) -> bool:
        return self.kind == "envelope"

    @property
    def annotation(self) -> Any:
        """Type expression used to validate the decoded body."""
        if self.kind == "collection":
            return self.target[self.element]
        return self.target

    @classmethod
    def from_headers(cls, headers: Mapping[str, Any]) -> ResponseType:
        """
        Select the variant from the response-class headers of a message.

        Raises:
            ResponseGenericTypeMissingError: A collection class was requested
                but no element type was supplied.
        """
        response_class = headers.get(Header.RESPONSE_CLASS)
        if response_class is None or response_class is httpx.Response:
            return cls.envelope()
        if isinstance(response_class, type) and issubclass(response_class, _COLLECTION_TYPES):
            element = headers.get(Header.RESPONSE_GENERIC_TYPE)
            if element is None:
                raise ResponseGenericTypeMissingError(
                    f"Header {Header.RESPONSE_GENERIC_TYPE} not found in message"
                )
            return cls.collection(element, container=response_class)
        return cls.scalar(response_class)


@dataclass(frozen=True)
class InvocationRequest:
    """One outbound HTTP request, built fresh for each call."""

    method: str
    url: str
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True)
class InvocationOutcome:
    """Successful result of an invocation."""

    payload: Any
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
