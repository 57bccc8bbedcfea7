# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
rest-bridge: message-to-REST invocation bridge.

Converts a transport-agnostic message into an outbound HTTP call against a
RESTful resource and converts the response back into the message, mapping
failure status codes to a structured error.

Example:
    >>> from rest_bridge import EndpointConfig, Exchange, Header, InvocationEngine, Message
    >>> from rest_bridge import RestEndpoint
    >>>
    >>> endpoint = RestEndpoint(EndpointConfig(address="https://api.example.com"))
    >>> exchange = Exchange(Message(headers={Header.HTTP_METHOD: "GET",
    ...                                      Header.HTTP_PATH: "/customers/123"}))
    >>> with InvocationEngine(endpoint) as engine:
    ...     engine.process(exchange)
    >>> exchange.out_message.headers[Header.HTTP_RESPONSE_CODE]
    200
"""

from __future__ import annotations

from rest_bridge._config import EndpointConfig
from rest_bridge.core import (
    BridgeError,
    ClientConfigCache,
    ConfigurationError,
    Exchange,
    ExchangePattern,
    Header,
    InvocationEngine,
    InvocationError,
    MalformedInputError,
    Message,
    MethodResolutionError,
    RemoteInvocationError,
    ResourceInterface,
    ResponseGenericTypeMissingError,
    ResponseType,
    RestEndpoint,
    resource_method,
)

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "EndpointConfig",
    "RestEndpoint",
    # Invocation
    "InvocationEngine",
    "ClientConfigCache",
    "Exchange",
    "ExchangePattern",
    "Header",
    "Message",
    "ResponseType",
    # Proxy mode
    "ResourceInterface",
    "resource_method",
    # Exceptions
    "BridgeError",
    "ConfigurationError",
    "InvocationError",
    "MalformedInputError",
    "MethodResolutionError",
    "RemoteInvocationError",
    "ResponseGenericTypeMissingError",
    # Version
    "__version__",
]
