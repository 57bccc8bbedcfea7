# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for core tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from rest_bridge._config import EndpointConfig
from rest_bridge.core.endpoint import RestEndpoint
from rest_bridge.core.engine import InvocationEngine

BASE_ADDRESS = "https://api.example.com/v1"


@pytest.fixture
def endpoint_config() -> EndpointConfig:
    """Default endpoint config for testing."""
    return EndpointConfig(address=BASE_ADDRESS, timeout_seconds=5.0)


@pytest.fixture
def make_engine() -> Iterator[Callable[..., InvocationEngine]]:
    """Build started engines backed by an ``httpx.MockTransport`` handler."""
    engines: list[InvocationEngine] = []

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        *,
        interfaces: tuple[type, ...] = (),
        **overrides,
    ) -> InvocationEngine:
        config = EndpointConfig(address=BASE_ADDRESS, timeout_seconds=5.0, **overrides)
        endpoint = RestEndpoint(
            config,
            resource_interfaces=interfaces,
            transport=httpx.MockTransport(handler),
        )
        engine = InvocationEngine(endpoint)
        engine.start()
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.stop()


class RequestRecorder:
    """MockTransport handler that records requests.

    Answers with a fresh 200 JSON response unless ``respond_with`` set one.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._response: httpx.Response | None = None

    def respond_with(self, response: httpx.Response) -> RequestRecorder:
        self._response = response
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._response is not None:
            return self._response
        return httpx.Response(200, json={"ok": True})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder() -> RequestRecorder:
    return RequestRecorder()
