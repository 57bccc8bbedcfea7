# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Message binding.

Translates between message bodies/headers and the HTTP layer. The engine
never looks inside payloads; all format knowledge lives in the binding.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import httpx

from rest_bridge.core.models import Header, Message

_CONTROL_HEADERS = frozenset(h.value for h in Header)
_SCALAR_TYPES = (str, int, float, bool)


class MessageBinding(ABC):
    """Converts between message content and HTTP request/response content."""

    @abstractmethod
    def body_to_request(self, message: Message) -> Any:
        """Produce the outbound request body from a message."""
        ...

    @abstractmethod
    def headers_to_request_headers(self, headers: Mapping[str, Any]) -> dict[str, str]:
        """Produce outbound HTTP headers from message headers."""
        ...

    @abstractmethod
    def response_to_body(self, response: Any) -> Any:
        """Produce the message body from an invocation result."""
        ...

    @abstractmethod
    def response_headers_to_headers(self, response: Any) -> dict[str, Any]:
        """Produce message headers from an invocation result."""
        ...


class DefaultMessageBinding(MessageBinding):
    """
    Binding for JSON and text payloads.

    Bridge control headers and non-scalar header values are not sent over
    the wire. Envelope responses are decoded as JSON when the content type
    says so, otherwise as text; typed results pass through untouched.
    """

    def body_to_request(self, message: Message) -> Any:
        return message.body

    def headers_to_request_headers(self, headers: Mapping[str, Any]) -> dict[str, str]:
        answer: dict[str, str] = {}
        for name, value in headers.items():
            if name in _CONTROL_HEADERS or not isinstance(value, _SCALAR_TYPES):
                continue
            answer[name] = str(value).lower() if isinstance(value, bool) else str(value)
        return answer

    def response_to_body(self, response: Any) -> Any:
        if not isinstance(response, httpx.Response):
            return response
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    def response_headers_to_headers(self, response: Any) -> dict[str, Any]:
        if not isinstance(response, httpx.Response):
            return {}
        answer: dict[str, Any] = {}
        for name, value in response.headers.multi_items():
            answer.setdefault(name, value)
        return answer
