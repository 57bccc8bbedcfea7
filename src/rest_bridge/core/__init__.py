# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""Core rest-bridge functionality: models, cache, resolver, classifier, engine."""

from rest_bridge.core.binding import DefaultMessageBinding, MessageBinding
from rest_bridge.core.classifier import RemoteInvocationError, ResponseClassifier
from rest_bridge.core.client_config import ClientConfiguration, ConfigurationFactory
from rest_bridge.core.config_cache import CacheStatistics, ClientConfigCache
from rest_bridge.core.converter import DefaultTypeConverter, TypeConversionError, TypeConverter
from rest_bridge.core.endpoint import RestEndpoint
from rest_bridge.core.engine import InvocationEngine, parse_query_string
from rest_bridge.core.models import (
    BridgeError,
    ConfigurationError,
    Exchange,
    ExchangePattern,
    Header,
    InvocationError,
    InvocationOutcome,
    InvocationRequest,
    MalformedInputError,
    Message,
    ResponseGenericTypeMissingError,
    ResponseType,
)
from rest_bridge.core.resolver import MethodResolutionError, MethodResolver
from rest_bridge.core.resources import ResourceInterface, ResourceOperation, resource_method

__all__ = [
    "BridgeError",
    "CacheStatistics",
    "ClientConfigCache",
    "ClientConfiguration",
    "ConfigurationError",
    "ConfigurationFactory",
    "DefaultMessageBinding",
    "DefaultTypeConverter",
    "Exchange",
    "ExchangePattern",
    "Header",
    "InvocationEngine",
    "InvocationError",
    "InvocationOutcome",
    "InvocationRequest",
    "MalformedInputError",
    "Message",
    "MessageBinding",
    "MethodResolutionError",
    "MethodResolver",
    "RemoteInvocationError",
    "ResourceInterface",
    "ResourceOperation",
    "ResponseClassifier",
    "ResponseGenericTypeMissingError",
    "ResponseType",
    "RestEndpoint",
    "TypeConversionError",
    "TypeConverter",
    "parse_query_string",
    "resource_method",
]
