# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""REST endpoint: the owner of configuration, binding and resource interfaces."""

from __future__ import annotations

from collections.abc import Sequence

import httpx
import structlog

from rest_bridge._config import EndpointConfig
from rest_bridge.core.binding import DefaultMessageBinding, MessageBinding
from rest_bridge.core.client_config import ClientConfiguration, ConfigurationFactory
from rest_bridge.core.converter import DefaultTypeConverter, TypeConverter
from rest_bridge.core.resources import ResourceInterface

logger = structlog.get_logger(__name__)


class RestEndpoint(ConfigurationFactory):
    """
    Describes one REST destination and builds client configurations for it.

    Args:
        config: Endpoint settings.
        resource_interfaces: Interfaces scanned, in order, in proxy mode.
        binding: Message binding; defaults to ``DefaultMessageBinding``.
        converter: Type converter used when rendering error bodies.
        transport: Optional httpx transport shared by every configuration
            (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: EndpointConfig,
        *,
        resource_interfaces: Sequence[type[ResourceInterface]] = (),
        binding: MessageBinding | None = None,
        converter: TypeConverter | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.resource_interfaces = tuple(resource_interfaces)
        self.binding = binding or DefaultMessageBinding()
        self.converter = converter or DefaultTypeConverter()
        self._transport = transport

    @property
    def address(self) -> str:
        return self.config.address

    @property
    def uri(self) -> str:
        return f"rest:{self.config.address}"

    def create(self, address: str) -> ClientConfiguration:
        logger.debug("bridge.create_configuration", address=address)
        return ClientConfiguration(
            address,
            interfaces=self.resource_interfaces,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
            follow_redirects=self.config.follow_redirects,
            headers=self.config.default_headers,
            transport=self._transport,
        )
