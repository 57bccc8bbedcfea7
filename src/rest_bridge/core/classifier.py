# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Response classification.

Any status above 207 is a failure. When the producer is configured to throw
on failure, a failing response is turned into a ``RemoteInvocationError``
carrying the status, reason phrase, redirect target, headers and a
best-effort rendering of the body.
"""

from __future__ import annotations

import httpx
import structlog

from rest_bridge.core.converter import DefaultTypeConverter, TypeConverter
from rest_bridge.core.models import InvocationError

logger = structlog.get_logger(__name__)

# Highest status code still treated as success (207 Multi-Status).
MAX_SUCCESS_STATUS = 207


class RemoteInvocationError(InvocationError):
    """The remote resource answered with a failure status."""

    def __init__(
        self,
        uri: str | None,
        status_code: int,
        status_text: str,
        redirect_location: str | None = None,
        response_headers: dict[str, str] | None = None,
        response_body: str | None = None,
    ) -> None:
        self.uri = uri
        self.status_code = status_code
        self.status_text = status_text
        self.redirect_location = redirect_location
        self.response_headers = response_headers or {}
        self.response_body = response_body
        message = f"REST operation failed invoking {uri} with statusCode: {status_code}"
        if redirect_location:
            message += f", redirectLocation: {redirect_location}"
        super().__init__(message)

    @property
    def has_redirect(self) -> bool:
        return self.redirect_location is not None


def is_success(status_code: int) -> bool:
    return status_code <= MAX_SUCCESS_STATUS


class ResponseClassifier:
    """Decides whether a response is an outcome or a ``RemoteInvocationError``."""

    def __init__(
        self,
        throw_on_failure: bool = True,
        converter: TypeConverter | None = None,
    ) -> None:
        self.throw_on_failure = throw_on_failure
        self._converter = converter or DefaultTypeConverter()

    def classify(self, response: httpx.Response, uri: str | None = None) -> None:
        """
        Raise if ``response`` is a failure and throwing is enabled.

        Raises:
            RemoteInvocationError: Status above 207 with throwing enabled.
        """
        if not self.throw_on_failure or is_success(response.status_code):
            return
        raise self.build_error(response, uri)

    def build_error(self, response: httpx.Response, uri: str | None) -> RemoteInvocationError:
        status_code = response.status_code
        redirect_location = None
        if 300 <= status_code < 400:
            redirect_location = response.headers.get("Location")

        error = RemoteInvocationError(
            uri=uri,
            status_code=status_code,
            status_text=httpx.codes.get_reason_phrase(status_code),
            redirect_location=redirect_location,
            response_headers=parse_response_headers(response),
            response_body=self._body_text(response),
        )
        logger.debug(
            "bridge.remote_failure",
            uri=uri,
            status_code=status_code,
            redirect_location=redirect_location,
        )
        return error

    def _body_text(self, response: httpx.Response) -> str | None:
        try:
            return self._converter.convert(response.content, str)
        except Exception as e:
            logger.debug("bridge.error_body_unavailable", error=str(e))
            return None


def parse_response_headers(response: httpx.Response) -> dict[str, str]:
    """Map each header name, as sent, to its first value."""
    encoding = response.headers.encoding
    answer: dict[str, str] = {}
    for raw_name, raw_value in response.headers.raw:
        answer.setdefault(raw_name.decode(encoding), raw_value.decode(encoding))
    return answer
