# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
InvocationEngine: turns an exchange into a REST call and back.

Two invocation modes are supported:

- direct HTTP mode builds the request explicitly from message headers
  (method, path, query, headers) and the message body;
- proxy mode resolves a named operation on the endpoint's resource
  interfaces and calls it with the message body as argument list.

Both obtain their per-address setup from a shared ``ClientConfigCache``.
"""

from __future__ import annotations

import codecs
import re
from collections.abc import Mapping
from types import TracebackType
from typing import Any
from urllib.parse import unquote_plus

import structlog

from rest_bridge.core.classifier import ResponseClassifier, is_success
from rest_bridge.core.client_config import decode_entity
from rest_bridge.core.config_cache import ClientConfigCache
from rest_bridge.core.endpoint import RestEndpoint
from rest_bridge.core.models import (
    Exchange,
    Header,
    InvocationOutcome,
    MalformedInputError,
    Message,
    ResponseType,
)

logger = structlog.get_logger(__name__)

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class InvocationEngine:
    """
    Producer that invokes the REST resource described by a ``RestEndpoint``.

    Usage::

        with InvocationEngine(endpoint) as engine:
            engine.process(exchange)
            print(exchange.out_message.headers[Header.HTTP_RESPONSE_CODE])
    """

    def __init__(self, endpoint: RestEndpoint) -> None:
        self.endpoint = endpoint
        self._cache = ClientConfigCache(endpoint, capacity=endpoint.config.max_client_cache_size)
        self._classifier = ResponseClassifier(
            throw_on_failure=endpoint.config.throw_exception_on_failure,
            converter=endpoint.converter,
        )

    @property
    def cache(self) -> ClientConfigCache:
        return self._cache

    def start(self) -> None:
        self._cache.start()

    def stop(self) -> None:
        self._cache.stop()

    def __enter__(self) -> InvocationEngine:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.stop()

    def process(self, exchange: Exchange) -> None:
        """Invoke the resource and, if the exchange expects one, fill its out message."""
        use_http_api = exchange.in_message.get_header(Header.USING_HTTP_API)
        if use_http_api is None:
            use_http_api = self.endpoint.config.http_client_api

        if use_http_api:
            outcome = self.invoke_http_client(exchange)
        else:
            outcome = self.invoke_proxy_client(exchange)

        if exchange.pattern.out_capable:
            self._populate_out_message(exchange, outcome)

    def invoke_http_client(self, exchange: Exchange) -> InvocationOutcome:
        """Direct HTTP mode."""
        message = exchange.in_message
        binding = self.endpoint.binding

        http_method = message.get_header(Header.HTTP_METHOD)
        if not http_method:
            raise MalformedInputError(f"Header {Header.HTTP_METHOD} not found in message")
        http_method = str(http_method).upper()
        response_type = ResponseType.from_headers(message.headers)
        path = message.get_header(Header.HTTP_PATH)

        with self._cache.lease(self._effective_address(message)) as configuration:
            client = configuration.create_web_client()

            logger.debug(
                "bridge.invoke_http",
                http_method=http_method,
                path=path,
                response_type=response_type.kind,
            )

            if path is not None:
                client.path(path)
            for name, value in (self._query_parameters(exchange) or {}).items():
                client.query(name, value)

            body = None
            if http_method != "GET":
                body = binding.body_to_request(message)
            client.headers(binding.headers_to_request_headers(message.headers))

            response = client.invoke(http_method, body)

        self._classifier.classify(response, self._error_uri(exchange))

        # failure bodies reach the caller untouched
        result: Any = response
        if not response_type.is_envelope and is_success(response.status_code):
            result = decode_entity(response, response_type.annotation)
        return InvocationOutcome(
            payload=result,
            status_code=response.status_code,
            headers=binding.response_headers_to_headers(result),
        )

    def invoke_proxy_client(self, exchange: Exchange) -> InvocationOutcome:
        """Proxy mode."""
        message = exchange.in_message
        name = message.get_header(Header.OPERATION_NAME)
        if not name:
            raise MalformedInputError(f"Header {Header.OPERATION_NAME} not found in message")
        var_values = message.get_header(Header.VAR_VALUES)
        arguments = _arguments(message.body)

        with self._cache.lease(self._effective_address(message)) as configuration:
            operation = configuration.resolver.resolve(name, arguments)
            proxy = configuration.create_proxy(var_values)

            logger.debug(
                "bridge.invoke_proxy",
                operation=name,
                interface=operation.interface.__name__,
                argument_count=len(arguments),
            )

            response = proxy.invoke(operation, arguments)

        self._classifier.classify(response, self._error_uri(exchange))

        result: Any = response
        if is_success(response.status_code):
            result = decode_entity(response, operation.return_type)
        return InvocationOutcome(
            payload=result,
            status_code=response.status_code,
            headers=self.endpoint.binding.response_headers_to_headers(result),
        )

    def _populate_out_message(self, exchange: Exchange, outcome: InvocationOutcome) -> None:
        logger.debug("bridge.response", status_code=outcome.status_code)
        out = exchange.out_message
        out.headers.update(exchange.in_message.headers)
        out.body = self.endpoint.binding.response_to_body(outcome.payload)
        out.headers.update(outcome.headers)
        out.set_header(Header.HTTP_RESPONSE_CODE, outcome.status_code)

    def _effective_address(self, message: Message) -> str:
        override = message.get_header(Header.DESTINATION_OVERRIDE_URL)
        return str(override) if override else self.endpoint.address

    def _error_uri(self, exchange: Exchange) -> str:
        return exchange.from_endpoint or self.endpoint.uri

    def _query_parameters(self, exchange: Exchange) -> Mapping[str, Any] | None:
        """Explicit map, then the raw query string, then endpoint defaults."""
        message = exchange.in_message
        params = message.get_header(Header.QUERY_MAP)
        if params is None:
            query_string = message.get_header(Header.HTTP_QUERY)
            if query_string is not None:
                params = parse_query_string(query_string, exchange.charset_name)
        if params is None:
            params = self.endpoint.config.parameters
        return params


def parse_query_string(query_string: str, charset: str = "utf-8") -> dict[str, str]:
    """
    Parse ``a=1&b=2`` into ``{"a": "1", "b": "2"}``.

    Each segment is split on its first ``=`` and both sides are
    percent-decoded; a repeated name keeps its last value.

    Raises:
        MalformedInputError: A segment is not a ``name=value`` pair, holds a
            malformed ``%`` escape, or the charset is unknown.
    """
    try:
        codecs.lookup(charset)
    except LookupError as e:
        raise MalformedInputError(f"Unknown charset: {charset}") from e

    segments = query_string.split("&")
    # trailing empty segments are ignored, as in "a=1&"
    while len(segments) > 1 and not segments[-1]:
        segments.pop()

    answer: dict[str, str] = {}
    for segment in segments:
        pair = segment.split("=", 1)
        if len(pair) != 2:
            raise MalformedInputError(
                f"Invalid parameter, expected to be a pair but was {segment}"
            )
        if any(_BAD_ESCAPE.search(part) for part in pair):
            raise MalformedInputError(f"Invalid percent-encoding in parameter {segment}")
        answer[unquote_plus(pair[0], encoding=charset)] = unquote_plus(pair[1], encoding=charset)
    return answer


def _arguments(body: Any) -> list[Any]:
    if body is None:
        return []
    if isinstance(body, list | tuple):
        return list(body)
    return [body]
